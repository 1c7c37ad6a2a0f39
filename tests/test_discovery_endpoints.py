import json

from budget_recipes.app.api.deps import get_rate_limiter
from budget_recipes.app.services.discovery.fetcher import FetchError
from budget_recipes.app.services.rate_limit import RateLimiter
from tests.fakes import make_candidate

RECIPE_URL = "https://recettes.example.com/chili"


def search_hits(query):
    slug = query.replace(" ", "-")
    return [make_candidate(i, url=f"https://recettes.example.com/{slug}/{i}") for i in range(10)]


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_discover_returns_costed_candidates(client, fake_search):
    fake_search.default = search_hits
    resp = client.get("/recipes/discover", params={"ingredients": "poulet, riz", "budget": "20"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["cached"] is False
    assert body["cache_key"] == "ingredients:poulet,riz-budget:20-allergies:-filters:"
    assert body["budget"] == 20.0
    assert 10 <= len(body["items"]) <= 15
    assert all(item["cost_source"] == "rule" for item in body["items"])

    again = client.get("/recipes/discover", params={"ingredients": "riz,poulet", "budget": "20"})
    assert again.json()["cached"] is True


def test_discover_invalid_budget(client):
    resp = client.get("/recipes/discover", params={"ingredients": "poulet", "budget": "cher"})
    assert resp.status_code == 400
    assert resp.json()["detail"]["error_code"] == "invalid_budget"


def test_discover_validation_error(client):
    resp = client.get("/recipes/discover", params={"ingredients": "poulet", "detailed_cost_count": 99})
    assert resp.status_code == 422
    body = resp.json()
    assert body["error_code"] == "validation_error"
    assert body["details"]


def test_detailed_cost_success(client, fake_fetcher):
    data = {"@type": "Recipe", "recipeYield": "4", "recipeIngredient": ["500 g de boeuf haché", "1 oignon"]}
    fake_fetcher.pages[RECIPE_URL] = f'<script type="application/ld+json">{json.dumps(data)}</script>'
    resp = client.post("/recipes/detailed-cost", json={"url": RECIPE_URL})
    assert resp.status_code == 200
    body = resp.json()
    assert body["fallback"] is False
    assert body["servings"] == 4
    assert [line["name"] for line in body["ingredients"]] == ["boeuf haché", "oignon"]


def test_detailed_cost_rejects_bad_urls(client):
    resp = client.post("/recipes/detailed-cost", json={"url": "pas une url"})
    assert resp.status_code == 422
    assert resp.json()["error_code"] == "validation_error"

    resp = client.post("/recipes/detailed-cost", json={"url": "http://192.168.1.10/recette"})
    assert resp.status_code == 400
    assert resp.json()["detail"]["error_code"] == "invalid_url"


def test_detailed_cost_robots_blocked(client, fake_fetcher):
    fake_fetcher.robots = "User-agent: *\nDisallow: /\n"
    resp = client.post("/recipes/detailed-cost", json={"url": RECIPE_URL})
    assert resp.status_code == 403
    body = resp.json()
    assert body["error_code"] == "robots_blocked"
    assert body["fallback"] is True
    assert body["total_cost"] == 10.0


def test_detailed_cost_unreachable_page(client):
    resp = client.post("/recipes/detailed-cost", json={"url": RECIPE_URL})
    assert resp.status_code == 404
    assert resp.json()["error_code"] == "access_denied"


def test_detailed_cost_timeout(client, fake_fetcher):
    fake_fetcher.error = FetchError("timeout", "slow")
    resp = client.post("/recipes/detailed-cost", json={"url": RECIPE_URL})
    assert resp.status_code == 408
    assert resp.json()["error_code"] == "timeout"


def test_rate_limit(app, client):
    limiter = RateLimiter(max_requests=2, window_seconds=60)
    app.dependency_overrides[get_rate_limiter] = lambda: limiter

    for _ in range(2):
        assert client.get("/recipes/discover", params={"ingredients": "poulet"}).status_code == 200
    resp = client.get("/recipes/discover", params={"ingredients": "poulet"})
    assert resp.status_code == 429
    assert resp.json()["detail"]["error_code"] == "rate_limited"

    other = client.get("/recipes/discover", params={"ingredients": "poulet"}, headers={"X-Client-Id": "other"})
    assert other.status_code == 200
