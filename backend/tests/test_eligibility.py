"""Tests for eligible-set resolution over the flow order."""

import pytest

from intake.flow_core.eligibility import EligibilityResolver

pytestmark = pytest.mark.unit

GATEWAYS = ["smoker", "age", "consent", "coverage_amount", "region"]


def _is_subsequence(candidate: list[str], sequence: tuple[str, ...]) -> bool:
    it = iter(sequence)
    return all(item in it for item in candidate)


@pytest.fixture
def resolver(graph) -> EligibilityResolver:
    return EligibilityResolver(graph)


@pytest.fixture
def answer_maps(answers_for) -> list[dict]:
    return [
        {},
        answers_for(smoker="yes"),
        answers_for(smoker="no", age="17", consent="yes"),
        answers_for(age="18", consent="yes", coverage_amount="2500000"),
        answers_for(smoker="maybe", region="International", age="abc"),
        answers_for(smoker="yes", age="44", consent="y", coverage_amount="10", region="domestic"),
    ]


def test_empty_answers_keep_only_gateways(resolver) -> None:
    assert resolver.eligible_ids({}) == GATEWAYS


def test_follow_ons_appear_in_flow_order(resolver, answers_for) -> None:
    answers = answers_for(smoker="yes", age="30", consent="yes", coverage_amount="2000000")
    assert resolver.eligible_ids(answers) == [
        "smoker",
        "smoke_freq",
        "age",
        "consent",
        "adult_consent",
        "coverage_amount",
        "income",
        "region",
    ]


def test_order_preservation(resolver, graph, answer_maps) -> None:
    for answers in answer_maps:
        assert _is_subsequence(resolver.eligible_ids(answers), graph.order())


def test_gateway_invariance(resolver, answer_maps) -> None:
    for answers in answer_maps:
        eligible = resolver.eligible_ids(answers)
        assert all(g in eligible for g in GATEWAYS)


def test_idempotence(resolver, answer_maps) -> None:
    for answers in answer_maps:
        assert resolver.eligible_ids(answers) == resolver.eligible_ids(answers)
        assert resolver.next_id("smoker", answers) == resolver.next_id("smoker", answers)


def test_next_id_skips_ineligible(resolver, answers_for) -> None:
    assert resolver.next_id("smoker", answers_for(smoker="no")) == "age"
    assert resolver.next_id("smoker", answers_for(smoker="yes")) == "smoke_freq"
    assert resolver.next_id("consent", answers_for(age="12", consent="yes")) == "coverage_amount"
    assert resolver.next_id("consent", answers_for(age="40", consent="yes")) == "adult_consent"


def test_next_id_signals_completion(resolver) -> None:
    assert resolver.next_id("region", {}) is None
    assert resolver.next_id("not-a-node", {}) is None


def test_forward_reference_becomes_eligible_later(resolver, answers_for) -> None:
    answers = answers_for(coverage_amount="100")
    assert "income" not in resolver.eligible_ids(answers)
    answers = answers_for(coverage_amount="100", region="international")
    assert "income" in resolver.eligible_ids(answers)
    # Already behind the last question, so the flow is still complete
    assert resolver.next_id("region", answers) is None
