# makeafood/api/routes_generate.py
# ingredients -> prompt -> LLM -> validated recipe JSON
# + per-user generation history (recipe_sessions)

from __future__ import annotations
import logging

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from makeafood.core.deps import get_current_user, get_generator, get_store
from makeafood.db.models.schemas import AuthUser
from makeafood.db.store import SupabaseStore
from makeafood.models.schemas import GenerateRecipeIn
from makeafood.services.ingredients import clean_ingredients
from makeafood.services.normalizer import parse_recipe
from makeafood.services.recipe_llm import RecipeGenerator, build_prompt

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["generate"])


@router.post("/generate-recipe")
async def generate_recipe(
    body: GenerateRecipeIn,
    generator: RecipeGenerator = Depends(get_generator),
    store: SupabaseStore = Depends(get_store),
):
    """
    Body: {"ingredients": [...] | "a, b, c", "userId"?: "..."}
    Returns the model's recipe object as-is (after validation).
    """
    ingredients = clean_ingredients(body.ingredients)
    log.info("generate-recipe: %d ingredients (user=%s)", len(ingredients), bool(body.user_id))

    raw = await generator.generate(build_prompt(ingredients))
    recipe = parse_recipe(raw)
    payload = recipe.to_response()

    if body.user_id:
        # history is best effort: the user already has a recipe
        try:
            await run_in_threadpool(store.record_session, body.user_id, ingredients, payload)
        except Exception:
            log.exception("Failed to record session for user %s", body.user_id)

    return payload


@router.get("/history")
async def history(
    user: AuthUser = Depends(get_current_user),
    store: SupabaseStore = Depends(get_store),
):
    rows = await run_in_threadpool(store.list_sessions, user.id)
    return {"results": [r.model_dump(mode="json") for r in rows]}
