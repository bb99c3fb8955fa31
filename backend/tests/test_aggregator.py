import httpx
import pytest

from makeafood.core.config import ServiceConfig
from makeafood.core.errors import NotFound, UpstreamError
from makeafood.services.aggregator import (
    RecipeAggregator,
    mealdb_to_summary,
    spoonacular_to_summary,
)

SPOON_BASE = "https://spoon.test"
MEALDB_BASE = "https://mealdb.test/api/json/v1/1"

SPOON_RECIPE = {
    "id": 716429,
    "title": "Pasta with Garlic",
    "image": "https://img.test/716429.jpg",
    "dishTypes": ["main course", "dinner"],
    "cuisines": [],
    "analyzedInstructions": [{"steps": [{"step": "Boil pasta."}, {"step": "Add garlic."}]}],
    "extendedIngredients": [{"name": "pasta", "amount": 200, "unit": "g"}],
}

MEAL = {
    "idMeal": "52772",
    "strMeal": "Teriyaki Chicken Casserole",
    "strMealThumb": "https://img.test/52772.jpg",
    "strCategory": "Chicken",
    "strArea": "Japanese",
    "strInstructions": "Preheat oven.",
    "strIngredient1": "soy sauce",
    "strMeasure1": "3/4 cup",
    "strIngredient2": " ",
    "strMeasure2": "",
    "strIngredient3": "water",
    "strMeasure3": None,
}


class Upstreams:
    """Routes requests to canned responses and records which hosts were hit."""

    def __init__(self, spoon_search=None, meal_search=None, spoon_info=None, meal_lookup=None):
        self.spoon_search = spoon_search if spoon_search is not None else {"results": []}
        self.meal_search = meal_search if meal_search is not None else {"meals": None}
        self.spoon_info = spoon_info
        self.meal_lookup = meal_lookup if meal_lookup is not None else {"meals": None}
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.url.host == "spoon.test":
            if path == "/recipes/complexSearch":
                return _reply(self.spoon_search)
            if path.endswith("/information"):
                return _reply(self.spoon_info) if self.spoon_info is not None else httpx.Response(404, json={})
        if request.url.host == "mealdb.test":
            if path.endswith("/search.php"):
                return _reply(self.meal_search)
            if path.endswith("/lookup.php"):
                return _reply(self.meal_lookup)
        return httpx.Response(500)

    def hosts(self):
        return [r.url.host for r in self.requests]


def _reply(payload):
    if isinstance(payload, httpx.Response):
        return payload
    return httpx.Response(200, json=payload)


def make_aggregator(upstreams: Upstreams) -> RecipeAggregator:
    http = httpx.AsyncClient(transport=httpx.MockTransport(upstreams))
    return RecipeAggregator(http, ServiceConfig(api_key="spoon-key", base_url=SPOON_BASE), MEALDB_BASE)


# ------------------------------
# mapping
# ------------------------------

def test_spoonacular_mapping_uses_analyzed_steps_and_defaults():
    s = spoonacular_to_summary(SPOON_RECIPE)
    assert s.id == "spoonacular-716429"
    assert s.instructions == "Boil pasta. Add garlic."
    assert s.category == "main course"
    assert s.area == "Global"
    assert s.nutrition is None
    assert s.ingredients[0].model_dump() == {"name": "pasta", "amount": 200, "unit": "g"}


def test_spoonacular_html_instructions_are_stripped():
    r = {"id": 1, "title": "Soup", "instructions": "<ol><li>Chop.</li><li>Simmer.</li></ol>"}
    assert spoonacular_to_summary(r).instructions == "Chop. Simmer."


def test_spoonacular_without_instructions_gets_placeholder():
    s = spoonacular_to_summary({"id": 2, "title": "Toast"})
    assert s.instructions == "Instructions coming soon."
    assert s.category == "Unknown"


def test_mealdb_mapping_drops_blank_ingredients():
    s = mealdb_to_summary(MEAL)
    assert s.id == "mealdb-52772"
    assert s.category == "Chicken"
    assert s.area == "Japanese"
    assert s.nutrition is None
    assert [i.model_dump() for i in s.ingredients] == [
        {"name": "soy sauce", "amount": "3/4 cup", "unit": ""},
        {"name": "water", "amount": "", "unit": ""},
    ]


# ------------------------------
# search
# ------------------------------

async def test_search_puts_spoonacular_before_mealdb():
    up = Upstreams(
        spoon_search={"results": [SPOON_RECIPE, {**SPOON_RECIPE, "id": 2, "title": "Second"}]},
        meal_search={"meals": [MEAL]},
    )
    agg = make_aggregator(up)

    results = await agg.search("pasta")

    assert [r.id for r in results] == ["spoonacular-716429", "spoonacular-2", "mealdb-52772"]
    spoon_req = next(r for r in up.requests if r.url.host == "spoon.test")
    assert spoon_req.headers["x-api-key"] == "spoon-key"
    assert spoon_req.url.params["number"] == "8"
    assert spoon_req.url.params["query"] == "pasta"
    await agg.aclose()


async def test_search_with_no_mealdb_hits():
    agg = make_aggregator(Upstreams(spoon_search={"results": [SPOON_RECIPE]}))
    results = await agg.search("pasta")
    assert [r.id for r in results] == ["spoonacular-716429"]


async def test_search_fails_when_one_upstream_fails():
    up = Upstreams(spoon_search=httpx.Response(402, json={"message": "quota"}))
    agg = make_aggregator(up)
    with pytest.raises(UpstreamError) as ei:
        await agg.search("pasta")
    body = ei.value.to_body()
    assert body["error"] == "Failed to fetch recipes"
    assert "help" in body


# ------------------------------
# lookup
# ------------------------------

async def test_mealdb_lookup_only_hits_mealdb():
    up = Upstreams(meal_lookup={"meals": [MEAL]})
    agg = make_aggregator(up)

    found = await agg.lookup("mealdb-52772")

    assert found.title == "Teriyaki Chicken Casserole"
    assert up.hosts() == ["mealdb.test"]
    assert up.requests[0].url.params["i"] == "52772"


async def test_spoonacular_lookup_only_hits_spoonacular():
    up = Upstreams(spoon_info=SPOON_RECIPE)
    agg = make_aggregator(up)

    found = await agg.lookup("spoonacular-716429")

    assert found.id == "spoonacular-716429"
    assert up.hosts() == ["spoon.test"]
    assert up.requests[0].url.path == "/recipes/716429/information"
    assert up.requests[0].url.params["includeNutrition"] == "false"


@pytest.mark.parametrize("recipe_id", ["edamam-1", "spoonacular-", "mealdb-", "716429"])
async def test_unroutable_ids_are_not_found_without_upstream_calls(recipe_id):
    up = Upstreams()
    agg = make_aggregator(up)
    with pytest.raises(NotFound):
        await agg.lookup(recipe_id)
    assert up.requests == []


async def test_spoonacular_404_is_not_found():
    agg = make_aggregator(Upstreams(spoon_info=None))
    with pytest.raises(NotFound) as ei:
        await agg.lookup("spoonacular-999")
    assert ei.value.status_code == 404


async def test_mealdb_null_meals_is_not_found():
    agg = make_aggregator(Upstreams(meal_lookup={"meals": None}))
    with pytest.raises(NotFound):
        await agg.lookup("mealdb-1")


async def test_transport_error_is_upstream_error():
    def boom(request):
        raise httpx.ConnectError("connection refused", request=request)

    agg = RecipeAggregator(
        httpx.AsyncClient(transport=httpx.MockTransport(boom)),
        ServiceConfig(api_key="k", base_url=SPOON_BASE),
        MEALDB_BASE,
    )
    with pytest.raises(UpstreamError):
        await agg.lookup("mealdb-1")


async def test_both_upstreams_failing_reports_spoonacular_first():
    up = Upstreams(
        spoon_search=httpx.Response(429, json={}),
        meal_search=httpx.Response(503),
    )
    agg = make_aggregator(up)
    with pytest.raises(UpstreamError) as ei:
        await agg.search("pasta")
    assert "Spoonacular" in ei.value.details
    assert sorted(up.hosts()) == ["mealdb.test", "spoon.test"]


async def test_mealdb_failure_fails_search_after_both_finish():
    up = Upstreams(spoon_search={"results": [SPOON_RECIPE]}, meal_search=httpx.Response(503))
    agg = make_aggregator(up)
    with pytest.raises(UpstreamError) as ei:
        await agg.search("pasta")
    assert "MealDB" in ei.value.details


def test_integer_amounts_stay_integers():
    r = {**SPOON_RECIPE, "extendedIngredients": [
        {"name": "pasta", "amount": 200, "unit": "g"},
        {"name": "oil", "amount": 0.5, "unit": "cup"},
    ]}
    pasta, oil = spoonacular_to_summary(r).ingredients
    assert type(pasta.amount) is int
    assert type(oil.amount) is float
    assert pasta.model_dump_json().find('"amount":200,') != -1
