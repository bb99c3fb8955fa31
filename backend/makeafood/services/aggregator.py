# makeafood/services/aggregator.py
# Spoonacular + TheMealDB search/lookup -> AggregatedRecipeSummary
# deps: httpx, beautifulsoup4, lxml
# - search: both sources concurrently, Spoonacular results first, then MealDB
#   (no dedup / ranking; the UI relies on this order)
# - lookup: id prefix picks exactly one upstream

from __future__ import annotations
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional
from urllib.parse import quote

import httpx
from bs4 import BeautifulSoup

from makeafood.core.config import ServiceConfig
from makeafood.core.errors import NotFound, UpstreamError
from makeafood.models.schemas import AggregatedRecipeSummary, IngredientAmount

log = logging.getLogger(__name__)

SPOONACULAR_PREFIX = "spoonacular-"
MEALDB_PREFIX = "mealdb-"

DEFAULT_INSTRUCTIONS = "Instructions coming soon."
DEFAULT_CATEGORY = "Unknown"
DEFAULT_AREA = "Global"

SPOONACULAR_SEARCH_SIZE = 8
MEALDB_MAX_INGREDIENTS = 20  # strIngredient1..20
HTTP_TIMEOUT = 20


def _first(v: Any) -> Optional[str]:
    if isinstance(v, list) and v:
        return str(v[0]) or None
    return None


def _strip_html(s: str) -> str:
    # Spoonacular sends instructions as "<ol><li>...</li></ol>" more often than not
    if "<" not in s:
        return s.strip()
    return BeautifulSoup(s, "lxml").get_text(" ", strip=True)


# ------------------------------
# Spoonacular -> common shape
# ------------------------------

def _spoonacular_instructions(r: Dict[str, Any]) -> str:
    analyzed = r.get("analyzedInstructions") or []
    if analyzed and isinstance(analyzed[0], dict):
        steps = [str(s.get("step", "")).strip() for s in analyzed[0].get("steps") or [] if isinstance(s, dict)]
        steps = [s for s in steps if s]
        if steps:
            return " ".join(steps)
    text = _strip_html(str(r.get("instructions") or ""))
    return text or DEFAULT_INSTRUCTIONS


def spoonacular_to_summary(r: Dict[str, Any]) -> AggregatedRecipeSummary:
    ingredients = []
    for ing in r.get("extendedIngredients") or []:
        if not isinstance(ing, dict):
            continue
        amount = ing.get("amount")
        ingredients.append(IngredientAmount(
            name=str(ing.get("name") or ""),
            amount=amount if amount is not None else "",
            unit=str(ing.get("unit") or ""),
        ))

    return AggregatedRecipeSummary(
        id=f"{SPOONACULAR_PREFIX}{r.get('id')}",
        title=str(r.get("title") or ""),
        image=r.get("image") or None,
        instructions=_spoonacular_instructions(r),
        category=_first(r.get("dishTypes")) or DEFAULT_CATEGORY,
        area=_first(r.get("cuisines")) or DEFAULT_AREA,
        nutrition=r.get("nutrition") or None,
        ingredients=ingredients,
    )


# ------------------------------
# TheMealDB -> common shape
# ------------------------------

def _mealdb_ingredients(m: Dict[str, Any]) -> List[IngredientAmount]:
    out: List[IngredientAmount] = []
    for i in range(1, MEALDB_MAX_INGREDIENTS + 1):
        name = (m.get(f"strIngredient{i}") or "").strip()
        if not name:
            continue
        measure = (m.get(f"strMeasure{i}") or "").strip()
        out.append(IngredientAmount(name=name, amount=measure, unit=""))
    return out


def mealdb_to_summary(m: Dict[str, Any]) -> AggregatedRecipeSummary:
    return AggregatedRecipeSummary(
        id=f"{MEALDB_PREFIX}{m.get('idMeal')}",
        title=str(m.get("strMeal") or ""),
        image=m.get("strMealThumb") or None,
        instructions=(m.get("strInstructions") or "").strip() or DEFAULT_INSTRUCTIONS,
        category=m.get("strCategory") or DEFAULT_CATEGORY,
        area=m.get("strArea") or DEFAULT_AREA,
        nutrition=None,  # MealDB has no nutrition
        ingredients=_mealdb_ingredients(m),
    )


class RecipeAggregator:
    """Two upstream recipe APIs behind one search/lookup interface."""

    def __init__(self, http: httpx.AsyncClient, spoonacular: ServiceConfig, mealdb_base_url: str):
        self.http = http
        self.spoonacular = spoonacular
        self.mealdb_base_url = mealdb_base_url.rstrip("/")
        self._lookups: Dict[str, Callable[[str], Awaitable[Optional[AggregatedRecipeSummary]]]] = {
            SPOONACULAR_PREFIX: self._spoonacular_lookup,
            MEALDB_PREFIX: self._mealdb_lookup,
        }

    @classmethod
    def from_config(cls, spoonacular: ServiceConfig, mealdb_base_url: str) -> "RecipeAggregator":
        return cls(httpx.AsyncClient(timeout=HTTP_TIMEOUT), spoonacular, mealdb_base_url)

    async def aclose(self) -> None:
        await self.http.aclose()

    # ---- transport ----

    async def _get_json(self, source: str, url: str, params: Optional[Dict[str, Any]] = None,
                        headers: Optional[Dict[str, str]] = None, *, allow_404: bool = False) -> Any:
        try:
            r = await self.http.get(url, params=params, headers=headers)
        except httpx.HTTPError as e:
            log.error("%s request failed: %s", source, e.__class__.__name__)
            raise UpstreamError(f"{source} request failed: {e.__class__.__name__}",
                                error="Failed to fetch recipes")
        if allow_404 and r.status_code == 404:
            return None
        if r.status_code >= 400:
            log.error("%s returned HTTP %d", source, r.status_code)
            raise UpstreamError(f"{source} returned HTTP {r.status_code}",
                                error="Failed to fetch recipes",
                                hint="Please check the upstream API key and quota." if r.status_code in (401, 402, 429) else None)
        try:
            return r.json()
        except ValueError:
            raise UpstreamError(f"{source} returned a non-JSON response", error="Failed to fetch recipes")

    def _spoonacular_headers(self) -> Dict[str, str]:
        # key in a header so it never shows up in logged URLs
        return {"x-api-key": self.spoonacular.api_key}

    # ---- search ----

    async def _spoonacular_search(self, query: str) -> List[AggregatedRecipeSummary]:
        data = await self._get_json(
            "Spoonacular",
            f"{self.spoonacular.base_url}/recipes/complexSearch",
            params={
                "query": query,
                "number": SPOONACULAR_SEARCH_SIZE,
                "addRecipeInformation": "true",
                "fillIngredients": "true",
                "instructionsRequired": "true",
            },
            headers=self._spoonacular_headers(),
        )
        results = (data or {}).get("results") or []
        return [spoonacular_to_summary(r) for r in results if isinstance(r, dict)]

    async def _mealdb_search(self, query: str) -> List[AggregatedRecipeSummary]:
        data = await self._get_json("MealDB", f"{self.mealdb_base_url}/search.php", params={"s": query})
        meals = (data or {}).get("meals") or []  # {"meals": null} == no hits
        return [mealdb_to_summary(m) for m in meals if isinstance(m, dict)]

    async def search(self, query: str) -> List[AggregatedRecipeSummary]:
        # wait for both so no failure is left unretrieved; report in source order
        spoon, meal = await asyncio.gather(
            self._spoonacular_search(query),
            self._mealdb_search(query),
            return_exceptions=True,
        )
        for outcome in (spoon, meal):
            if isinstance(outcome, BaseException):
                raise outcome
        log.info("Recipe search %r: spoonacular=%d mealdb=%d", query, len(spoon), len(meal))
        return spoon + meal

    # ---- lookup ----

    async def _spoonacular_lookup(self, real_id: str) -> Optional[AggregatedRecipeSummary]:
        data = await self._get_json(
            "Spoonacular",
            f"{self.spoonacular.base_url}/recipes/{quote(real_id, safe='')}/information",
            params={"includeNutrition": "false"},
            headers=self._spoonacular_headers(),
            allow_404=True,
        )
        if not isinstance(data, dict) or data.get("id") is None:
            return None
        return spoonacular_to_summary(data)

    async def _mealdb_lookup(self, real_id: str) -> Optional[AggregatedRecipeSummary]:
        data = await self._get_json("MealDB", f"{self.mealdb_base_url}/lookup.php", params={"i": real_id})
        meals = (data or {}).get("meals") or []
        if not meals or not isinstance(meals[0], dict):
            return None
        return mealdb_to_summary(meals[0])

    async def lookup(self, recipe_id: str) -> AggregatedRecipeSummary:
        for prefix, fetch in self._lookups.items():
            if recipe_id.startswith(prefix):
                real_id = recipe_id[len(prefix):].strip()
                found = await fetch(real_id) if real_id else None
                if found is None:
                    raise NotFound(f"No recipe with id {recipe_id}")
                return found
        raise NotFound(f"Unrecognized recipe id {recipe_id}")
