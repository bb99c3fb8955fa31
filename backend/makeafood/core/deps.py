# makeafood/core/deps.py
# Shared dependencies: process-lifetime clients from app.state + bearer auth
# create_app puts every client on app.state; handlers only see them through here.

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.concurrency import run_in_threadpool

from makeafood.core.config import Settings
from makeafood.core.errors import Unauthorized
from makeafood.db.models.schemas import AuthUser
from makeafood.db.store import SupabaseStore
from makeafood.services.accounts import AccountService
from makeafood.services.aggregator import RecipeAggregator
from makeafood.services.recipe_llm import RecipeGenerator

# auto_error=False: we answer 401 in our own error shape, not FastAPI's 403
bearer = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_generator(request: Request) -> RecipeGenerator:
    return request.app.state.generator


def get_aggregator(request: Request) -> RecipeAggregator:
    return request.app.state.aggregator


def get_store(request: Request) -> SupabaseStore:
    return request.app.state.store


def get_accounts(request: Request) -> AccountService:
    state = request.app.state
    return AccountService(state.store, state.mailer, state.settings.APP_BASE_URL)


async def get_current_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    store: SupabaseStore = Depends(get_store),
) -> AuthUser:
    if creds is None or not creds.credentials:
        raise Unauthorized()
    user = await run_in_threadpool(store.get_user, creds.credentials)
    if user is None:
        raise Unauthorized()
    return user
