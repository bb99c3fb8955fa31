# makeafood/models/schemas.py
# Request/response models for the HTTP surface
# - Recipe: validated LLM output (extra keys kept so responses echo the model)
# - AggregatedRecipeSummary: common shape for Spoonacular/MealDB results
# Frontend sends camelCase (userId, recipeId) -> alias + populate_by_name

from __future__ import annotations
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ------------------------------
# Generation
# ------------------------------

class Recipe(BaseModel):
    model_config = ConfigDict(extra="allow")

    title: str
    ingredients: List[str]
    instructions: List[str]          # execution order
    prep_time: Optional[Union[str, int]] = None
    servings: Optional[Union[str, int]] = None
    difficulty: Optional[str] = None  # "Easy" | "Medium" | "Hard"
    youtube_link: Optional[str] = None

    def to_response(self) -> Dict[str, Any]:
        # only what the model actually sent (declared fields it set + extras)
        sent = set(self.model_fields_set) | set(self.model_extra or {})
        return {k: v for k, v in self.model_dump().items() if k in sent}


class GenerateRecipeIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # list from the chat UI, comma separated string from the search bar
    ingredients: Union[List[str], str] = Field(default_factory=list)
    user_id: Optional[str] = Field(default=None, alias="userId")


# ------------------------------
# Aggregated search
# ------------------------------

class IngredientAmount(BaseModel):
    name: str
    amount: Union[int, float, str] = ""   # passed through as the upstream sent it
    unit: str = ""


class AggregatedRecipeSummary(BaseModel):
    id: str                           # "spoonacular-<n>" | "mealdb-<n>"
    title: str
    image: Optional[str] = None
    instructions: str = "Instructions coming soon."
    category: str = "Unknown"
    area: str = "Global"
    nutrition: Optional[Dict[str, Any]] = None
    ingredients: List[IngredientAmount] = Field(default_factory=list)


class SearchResults(BaseModel):
    results: List[AggregatedRecipeSummary] = Field(default_factory=list)


# ------------------------------
# Saved recipes
# ------------------------------

class SavedRecipeIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    recipe_id: Optional[str] = Field(default=None, alias="recipeId")


# ------------------------------
# Account flows
# ------------------------------

class ForgotPasswordIn(BaseModel):
    email: Optional[str] = None


class ResetPasswordIn(BaseModel):
    token: Optional[str] = None
    password: Optional[str] = None


class SendVerificationIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId")
    email: Optional[str] = None
    username: Optional[str] = None


class SendWarningIn(BaseModel):
    email: Optional[str] = None
    username: Optional[str] = None
    reason: Optional[str] = None
