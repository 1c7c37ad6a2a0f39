import pytest

from budget_recipes.app.services.discovery.cost_estimator import (
    CostEstimator,
    estimate_with_rules,
    parse_llm_cost,
)
from budget_recipes.app.services.discovery.models import CostSource
from tests.fakes import FakeLLM, make_candidate


def test_rules_pick_first_matching_bucket():
    assert estimate_with_rules("Saumon grillé") == 18.0
    assert estimate_with_rules("Poulet au beurre") == 8.0
    assert estimate_with_rules("Homard thermidor") == 18.0
    assert estimate_with_rules("Foie gras poêlé") == 25.0
    assert estimate_with_rules("Mystère du chef") == 10.0


def test_rule_multipliers():
    assert estimate_with_rules("Saumon économique") == pytest.approx(12.6)
    assert estimate_with_rules("Saumon gourmet économique") == pytest.approx(27.0)
    assert estimate_with_rules("Pâtes rapides") == pytest.approx(4.5)
    assert estimate_with_rules("Pâtes au saumon, crevettes et fromage") == pytest.approx(6.0)


def test_rules_stay_within_bounds():
    for title in ["Pâtes économiques rapides", "Foie gras gourmet au saumon, crevettes et fromage"]:
        assert 3.0 <= estimate_with_rules(title) <= 50.0
    assert estimate_with_rules("Pâtes économiques rapides") == pytest.approx(3.15)


def test_parse_llm_cost():
    assert parse_llm_cost("12.50") == 12.5
    assert parse_llm_cost("Environ 14,75 $") == 14.75
    assert parse_llm_cost("999") == 200.0
    with pytest.raises(ValueError):
        parse_llm_cost("aucune idée")
    with pytest.raises(ValueError):
        parse_llm_cost("0")


@pytest.mark.asyncio
async def test_llm_estimate_is_used_when_available():
    llm = FakeLLM(reply="12.50")
    estimate = await CostEstimator(llm).estimate("Saumon grillé", "Facile")
    assert estimate.estimated_cost == 12.5
    assert estimate.source == CostSource.LLM
    assert "Saumon grillé" in llm.prompts[0]


@pytest.mark.asyncio
async def test_llm_failure_falls_back_to_rules():
    estimate = await CostEstimator(FakeLLM(error=TimeoutError("slow"))).estimate("Saumon grillé")
    assert estimate.estimated_cost == 18.0
    assert estimate.source == CostSource.RULE

    estimate = await CostEstimator(FakeLLM(reply="je ne sais pas")).estimate("Saumon grillé")
    assert estimate.source == CostSource.RULE


@pytest.mark.asyncio
async def test_missing_title_uses_default_estimate():
    estimate = await CostEstimator(FakeLLM()).estimate("")
    assert estimate.estimated_cost == 10.0
    assert estimate.source == CostSource.FALLBACK


@pytest.mark.asyncio
async def test_annotate_keeps_order_and_sets_source():
    items = [make_candidate(1, title="Saumon grillé"), make_candidate(2)]
    annotated = await CostEstimator().annotate(items)
    assert [i.url for i in annotated] == [i.url for i in items]
    assert [i.estimated_cost for i in annotated] == [18.0, 8.0]
    assert all(i.cost_source == CostSource.RULE for i in annotated)
    assert items[0].estimated_cost is None
