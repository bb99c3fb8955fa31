# makeafood/api/routes_saved.py
# Saved-recipe bookmarks for the signed-in user (Supabase bearer token)

from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from makeafood.core.deps import get_current_user, get_store
from makeafood.core.errors import InvalidInput
from makeafood.db.models.schemas import AuthUser
from makeafood.db.store import SupabaseStore
from makeafood.models.schemas import SavedRecipeIn

router = APIRouter(prefix="/api", tags=["saved"])


def _recipe_id(value: Optional[str]) -> str:
    value = (value or "").strip()
    if not value:
        raise InvalidInput("Missing recipeId")
    return value


@router.post("/saved-recipe")
async def save_recipe(
    body: SavedRecipeIn,
    user: AuthUser = Depends(get_current_user),
    store: SupabaseStore = Depends(get_store),
):
    await run_in_threadpool(store.save_recipe, user.id, _recipe_id(body.recipe_id))
    return {"success": True}


@router.delete("/saved-recipe")
async def unsave_recipe(
    recipeId: Optional[str] = None,
    user: AuthUser = Depends(get_current_user),
    store: SupabaseStore = Depends(get_store),
):
    await run_in_threadpool(store.unsave_recipe, user.id, _recipe_id(recipeId))
    return {"success": True}


@router.get("/saved-recipe")
async def is_saved(
    recipeId: Optional[str] = None,
    user: AuthUser = Depends(get_current_user),
    store: SupabaseStore = Depends(get_store),
):
    saved = await run_in_threadpool(store.is_saved, user.id, _recipe_id(recipeId))
    return {"saved": saved}


@router.get("/saved-recipes")
async def list_saved(
    user: AuthUser = Depends(get_current_user),
    store: SupabaseStore = Depends(get_store),
):
    rows = await run_in_threadpool(store.list_saved, user.id)
    return {"results": [r.model_dump(mode="json") for r in rows]}
