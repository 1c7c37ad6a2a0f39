import random

import pytest

from budget_recipes.app.services.discovery.budget_selector import parse_budget, select_by_budget
from tests.fakes import make_candidate


def priced(start, count, cost):
    return [make_candidate(i, estimated_cost=cost) for i in range(start, start + count)]


def test_parse_budget():
    assert parse_budget("") is None
    assert parse_budget("   ") is None
    assert parse_budget(None) is None
    assert parse_budget("25") == 25.0
    assert parse_budget("12,5") == 12.5
    for bad in ["abc", "-5", "0", "nan", "inf"]:
        with pytest.raises(ValueError):
            parse_budget(bad)


def test_fifty_in_budget_candidates_give_ten_to_fifteen():
    selected = select_by_budget(priced(0, 50, 5.0), 20.0, random.Random(1))
    assert 10 <= len(selected) <= 15
    assert len({i.url for i in selected}) == len(selected)


def test_fewer_than_ten_candidates_are_all_returned():
    items = priced(0, 3, 5.0)
    selected = select_by_budget(items, 20.0, random.Random(1))
    assert sorted(i.url for i in selected) == sorted(i.url for i in items)


def test_strict_budget_excludes_pricier_candidates():
    cheap = priced(0, 12, 4.0)
    pricier = priced(100, 20, 9.0)
    over = priced(200, 20, 25.0)
    selected = select_by_budget(over + pricier + cheap, 10.0, random.Random(2))
    assert len(selected) == 15
    assert all(i.estimated_cost <= 10.0 for i in selected)


def test_selection_membership_varies_across_seeds():
    items = [make_candidate(i, estimated_cost=1.0 + i * 0.1) for i in range(50)]
    memberships = {
        frozenset(i.url for i in select_by_budget(items, 20.0, random.Random(seed)))
        for seed in range(20)
    }
    assert len(memberships) > 1
    picked = set().union(*memberships)
    assert any(make_candidate(i).url in picked for i in range(15, 50))


def test_relaxed_ceiling_when_too_few_fit():
    strict = priced(0, 5, 8.0)
    relaxed = priced(100, 20, 14.0)
    over = priced(200, 5, 30.0)
    selected = select_by_budget(over + relaxed + strict, 10.0, random.Random(3))
    assert 10 <= len(selected) <= 15
    assert all(i.estimated_cost <= 15.0 for i in selected)


def test_relaxed_still_short_returns_everything_eligible():
    items = priced(0, 2, 8.0) + priced(100, 3, 14.0) + priced(200, 5, 30.0)
    selected = select_by_budget(items, 10.0, random.Random(3))
    assert len(selected) == 5


def test_unknown_cost_is_never_excluded():
    items = priced(0, 2, 50.0) + [make_candidate(9)]
    selected = select_by_budget(items, 10.0, random.Random(3))
    assert [i.url for i in selected] == [make_candidate(9).url]


def test_no_budget_shuffles_and_caps():
    items = priced(0, 30, 5.0)
    selected = select_by_budget(items, None, random.Random(4))
    assert len(selected) == 15
    assert len({i.url for i in selected}) == 15
