# makeafood/api/routes_recipes.py
# Recipe search across Spoonacular + TheMealDB
# ?query=  -> {"results": [...]}  (Spoonacular first, then MealDB)
# ?id=     -> one recipe, upstream picked by id prefix

from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends

from makeafood.core.deps import get_aggregator
from makeafood.core.errors import InvalidInput
from makeafood.models.schemas import SearchResults
from makeafood.services.aggregator import RecipeAggregator

router = APIRouter(prefix="/api", tags=["recipes"])


@router.get("/recipes")
async def recipes(
    query: Optional[str] = None,
    id: Optional[str] = None,
    aggregator: RecipeAggregator = Depends(get_aggregator),
):
    if id:
        found = await aggregator.lookup(id)
        return found.model_dump()
    if query:
        results = await aggregator.search(query)
        return SearchResults(results=results).model_dump()
    raise InvalidInput("Missing query or id parameter")
