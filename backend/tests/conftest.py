# tests/conftest.py
# In-memory doubles for the LLM, Supabase and SMTP + an app wired with them

from __future__ import annotations
import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from makeafood.core.config import Settings
from makeafood.core.errors import MailerNotReady, NotFound, StoreError
from makeafood.db.models.schemas import (
    AuthUser,
    PasswordResetRecord,
    SavedRecipe,
    SessionHistoryRecord,
)
from makeafood.main import create_app
from makeafood.models.schemas import AggregatedRecipeSummary

GOOD_TOKEN = "good-token"
USER_ID = "user-1"

STUB_RECIPE = {
    "title": "Chicken Fried Rice",
    "ingredients": ["2 cups cooked rice", "1 chicken breast, diced"],
    "instructions": ["Cook the chicken.", "Add the rice and stir fry."],
    "prep_time": "20 minutes",
    "servings": "2 servings",
    "difficulty": "Easy",
}


class FakeGenerator:
    model = "fake-model"

    def __init__(self, output: Optional[str] = None):
        self.output = output if output is not None else json.dumps(STUB_RECIPE)
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.output

    async def aclose(self) -> None:
        pass


class FakeAggregator:
    def __init__(self):
        self.queries: List[str] = []
        self.lookups: List[str] = []
        self.results = [
            AggregatedRecipeSummary(id="spoonacular-1", title="Pasta"),
            AggregatedRecipeSummary(id="mealdb-2", title="Arrabiata", category="Pasta", area="Italian"),
        ]

    async def search(self, query: str):
        self.queries.append(query)
        return list(self.results)

    async def lookup(self, recipe_id: str):
        self.lookups.append(recipe_id)
        for r in self.results:
            if r.id == recipe_id:
                return r
        raise NotFound(f"No recipe with id {recipe_id}")

    async def aclose(self) -> None:
        pass


class FakeStore:
    def __init__(self):
        self.sessions: List[Dict[str, Any]] = []
        self.saved: List[Dict[str, Any]] = []
        self.users: Dict[str, Dict[str, Any]] = {"cook@example.com": {"id": USER_ID, "username": "cook"}}
        self.resets: Dict[str, PasswordResetRecord] = {}
        self.passwords: Dict[str, str] = {}
        self.fail_sessions = False
        self.fail_password_update = False

    def get_user(self, token: str) -> Optional[AuthUser]:
        if token == GOOD_TOKEN:
            return AuthUser(id=USER_ID, email="cook@example.com")
        return None

    def update_password(self, user_id: str, password: str) -> None:
        if self.fail_password_update:
            raise StoreError("Password update failed: boom")
        self.passwords[user_id] = password

    def record_session(self, user_id, ingredients, recipe):
        if self.fail_sessions:
            raise StoreError("relation recipe_sessions does not exist")
        row = {"id": len(self.sessions) + 1, "user_id": user_id, "ingredients": ingredients,
               "recipe": recipe, "created_at": datetime.now(timezone.utc)}
        self.sessions.append(row)
        return row

    def list_sessions(self, user_id: str, limit: int = 20):
        rows = [r for r in reversed(self.sessions) if r["user_id"] == user_id][:limit]
        return [SessionHistoryRecord.model_validate(r) for r in rows]

    def save_recipe(self, user_id: str, recipe_id: str) -> None:
        self.saved.append({"user_id": user_id, "recipe_id": recipe_id})

    def unsave_recipe(self, user_id: str, recipe_id: str) -> None:
        self.saved = [r for r in self.saved if (r["user_id"], r["recipe_id"]) != (user_id, recipe_id)]

    def is_saved(self, user_id: str, recipe_id: str) -> bool:
        return any((r["user_id"], r["recipe_id"]) == (user_id, recipe_id) for r in self.saved)

    def list_saved(self, user_id: str):
        return [SavedRecipe.model_validate(r) for r in reversed(self.saved) if r["user_id"] == user_id]

    def find_user_by_email(self, email: str):
        return self.users.get(email)

    def create_password_reset(self, user_id: str, token: str, expires_at: datetime) -> None:
        self.resets[token] = PasswordResetRecord(user_id=user_id, token=token, expires_at=expires_at)

    def get_password_reset(self, token: str):
        return self.resets.get(token)

    def delete_password_reset(self, token: str) -> None:
        self.resets.pop(token, None)


class FakeMailer:
    def __init__(self, ready: bool = True):
        self.ready = ready
        self.sent: List[Dict[str, str]] = []

    def ensure_ready(self) -> None:
        if not self.ready:
            raise MailerNotReady("SMTP_HOST / MAIL_FROM not set")

    def send(self, to: str, subject: str, body_html: str) -> None:
        self.ensure_ready()
        self.sent.append({"to": to, "subject": subject, "html": body_html})


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        SUPABASE_URL="https://project.supabase.co",
        SUPABASE_SERVICE_ROLE_KEY="service-role",
        GEMINI_API_KEY="gemini-key",
        SPOONACULAR_API_KEY="spoon-key",
        APP_BASE_URL="https://makeafood.test",
    )


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def aggregator() -> FakeAggregator:
    return FakeAggregator()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def client(settings, generator, aggregator, store, mailer):
    app = create_app(settings, generator=generator, aggregator=aggregator, store=store, mailer=mailer)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {GOOD_TOKEN}"}
