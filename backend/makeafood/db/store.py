# makeafood/db/store.py
# Supabase gateway: every table/auth call this service makes goes through here
# supabase-py is synchronous -> routers call these via run_in_threadpool
# PostgREST errors are translated to StoreError (HTTP 400 at the edge)

from __future__ import annotations
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError
from supabase import Client

from makeafood.core.errors import StoreError
from makeafood.db.models.schemas import (
    AuthUser,
    PasswordResetRecord,
    SavedRecipe,
    SessionHistoryRecord,
)

log = logging.getLogger(__name__)

SESSIONS = "recipe_sessions"
SAVED = "saved_recipes"
USERS = "users"
PASSWORD_RESETS = "password_resets"

HISTORY_LIMIT = 20


class SupabaseStore:
    def __init__(self, client: Client):
        self.client = client

    def _execute(self, query) -> Any:
        try:
            return query.execute()
        except APIError as e:
            raise StoreError(e.message or str(e))

    # ------------------------------
    # auth
    # ------------------------------

    def get_user(self, token: str) -> Optional[AuthUser]:
        # None for anything the auth server rejects (expired, malformed, revoked)
        try:
            res = self.client.auth.get_user(token)
        except Exception as e:
            log.info("Token rejected by auth server: %s", e)
            return None
        user = getattr(res, "user", None)
        if user is None or not getattr(user, "id", None):
            return None
        return AuthUser(id=str(user.id), email=getattr(user, "email", None))

    def update_password(self, user_id: str, password: str) -> None:
        try:
            self.client.auth.admin.update_user_by_id(user_id, {"password": password})
        except Exception as e:
            raise StoreError(f"Password update failed: {e}")

    # ------------------------------
    # generation history
    # ------------------------------

    def record_session(self, user_id: str, ingredients: List[str], recipe: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        res = self._execute(
            self.client.table(SESSIONS).insert({
                "user_id": user_id,
                "ingredients": ingredients,
                "recipe": recipe,
            })
        )
        rows = res.data or []
        return rows[0] if rows else None

    def list_sessions(self, user_id: str, limit: int = HISTORY_LIMIT) -> List[SessionHistoryRecord]:
        res = self._execute(
            self.client.table(SESSIONS)
            .select("id, user_id, created_at, ingredients, recipe")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
        )
        return [SessionHistoryRecord.model_validate(r) for r in res.data or []]

    # ------------------------------
    # saved recipes
    # ------------------------------

    def save_recipe(self, user_id: str, recipe_id: str) -> None:
        self._execute(self.client.table(SAVED).insert({"user_id": user_id, "recipe_id": recipe_id}))

    def unsave_recipe(self, user_id: str, recipe_id: str) -> None:
        self._execute(
            self.client.table(SAVED).delete().eq("user_id", user_id).eq("recipe_id", recipe_id)
        )

    def is_saved(self, user_id: str, recipe_id: str) -> bool:
        res = self._execute(
            self.client.table(SAVED).select("id").eq("user_id", user_id).eq("recipe_id", recipe_id).limit(1)
        )
        return bool(res.data)

    def list_saved(self, user_id: str) -> List[SavedRecipe]:
        res = self._execute(
            self.client.table(SAVED).select("*").eq("user_id", user_id).order("created_at", desc=True)
        )
        return [SavedRecipe.model_validate(r) for r in res.data or []]

    # ------------------------------
    # password reset
    # ------------------------------

    def find_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        res = self._execute(self.client.table(USERS).select("id, username").eq("email", email).limit(1))
        rows = res.data or []
        return rows[0] if rows else None

    def create_password_reset(self, user_id: str, token: str, expires_at: datetime) -> None:
        self._execute(
            self.client.table(PASSWORD_RESETS).insert({
                "user_id": user_id,
                "token": token,
                "expires_at": expires_at.isoformat(),
            })
        )

    def get_password_reset(self, token: str) -> Optional[PasswordResetRecord]:
        res = self._execute(
            self.client.table(PASSWORD_RESETS).select("user_id, token, expires_at").eq("token", token).limit(1)
        )
        rows = res.data or []
        return PasswordResetRecord.model_validate(rows[0]) if rows else None

    def delete_password_reset(self, token: str) -> None:
        self._execute(self.client.table(PASSWORD_RESETS).delete().eq("token", token))
