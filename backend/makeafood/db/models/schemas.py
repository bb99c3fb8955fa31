# makeafood/db/models/schemas.py
# Row shapes of the Supabase tables this service touches
# recipe_sessions: append-only generation history (written by /generate-recipe)
# saved_recipes:   (user, recipe) bookmarks
# password_resets: one-shot reset tokens

from __future__ import annotations
from typing import Any, Dict, List, Optional, Union
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SessionHistoryRecord(BaseModel):
    id: Optional[Any] = None
    user_id: str
    ingredients: List[str] = Field(default_factory=list)
    recipe: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None   # set by the table default


class SavedRecipe(BaseModel):
    model_config = ConfigDict(extra="allow")  # select("*") may carry more columns

    id: Optional[Any] = None
    user_id: str
    recipe_id: Union[str, int]
    created_at: Optional[datetime] = None


class PasswordResetRecord(BaseModel):
    user_id: str
    token: str
    expires_at: datetime


class AuthUser(BaseModel):
    # subset of the Supabase auth user we rely on
    id: str
    email: Optional[str] = None
