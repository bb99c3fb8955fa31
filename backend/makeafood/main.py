# makeafood/main.py
# FastAPI app factory: config -> clients -> routers
# Routers define their own prefixes; clients live on app.state (see core/deps.py)
# run: uvicorn makeafood.main:create_app --factory

from __future__ import annotations
import logging
from typing import Any, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from makeafood.api.routes_auth import router as auth_router          # reset/verify/warning mail
from makeafood.api.routes_generate import router as generate_router  # LLM recipe + history
from makeafood.api.routes_recipes import router as recipes_router    # Spoonacular/MealDB search
from makeafood.api.routes_saved import router as saved_router        # bookmarks
from makeafood.core.config import Settings
from makeafood.core.errors import RecipeAppError
from makeafood.db.init import init_db
from makeafood.db.store import SupabaseStore
from makeafood.services.aggregator import RecipeAggregator
from makeafood.services.mailer import Mailer
from makeafood.services.recipe_llm import RecipeGenerator

log = logging.getLogger(__name__)


def _validation_details(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


def create_app(
    settings: Optional[Settings] = None,
    *,
    generator: Optional[RecipeGenerator] = None,
    aggregator: Optional[RecipeAggregator] = None,
    store: Optional[SupabaseStore] = None,
    mailer: Optional[Mailer] = None,
) -> FastAPI:
    settings = settings or Settings()
    logging.basicConfig(level=settings.LOG_LEVEL.upper())

    # validate every config we need before any client opens a connection pool
    llm_cfg = settings.llm_config() if generator is None else None
    spoon_cfg = settings.spoonacular_config() if aggregator is None else None
    supabase_cfg = settings.supabase_config() if store is None else None

    # only clients we build here are ours to close on shutdown
    owned: List[Any] = []
    if llm_cfg is not None:
        generator = RecipeGenerator.from_config(llm_cfg)
        owned.append(generator)
    if spoon_cfg is not None:
        aggregator = RecipeAggregator.from_config(spoon_cfg, settings.MEALDB_BASE_URL)
        owned.append(aggregator)
    if supabase_cfg is not None:
        store = SupabaseStore(init_db(supabase_cfg))
    if mailer is None:
        mailer = Mailer.from_settings(settings)
        if not mailer.ready:
            log.warning("SMTP not configured: mail endpoints will answer 500")

    app = FastAPI(title="MakeAFood - API", version="0.1.0")
    app.state.settings = settings
    app.state.generator = generator
    app.state.aggregator = aggregator
    app.state.store = store
    app.state.mailer = mailer

    # CORS: frontend dev server + whatever CORS_ORIGINS adds
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RecipeAppError)
    async def recipe_app_error(request: Request, exc: RecipeAppError):
        if exc.status_code >= 500:
            log.error("%s %s -> %d %s: %s", request.method, request.url.path,
                      exc.status_code, exc.error, exc.details)
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid input", "details": _validation_details(exc)},
        )

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        for client in owned:
            try:
                await client.aclose()
            except Exception as e:
                log.warning("shutdown: closing %s failed: %s", type(client).__name__, e)

    @app.get("/")
    async def root():
        return {"status": "ok"}

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "llm_model": getattr(generator, "model", None),
            "mail": "ok" if getattr(mailer, "ready", False) else "disabled",
        }

    # prefixes are defined in each router file
    app.include_router(generate_router)
    app.include_router(recipes_router)
    app.include_router(saved_router)
    app.include_router(auth_router)

    return app
