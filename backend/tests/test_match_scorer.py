import pytest

from circuitstay.errors import ValidationError
from circuitstay.schemas.planning import MatchQuery
from circuitstay.services.match_scorer import evaluate, match_itineraries, total_itinerary_km
from conftest import make_circuit, make_itinerary


def test_empty_query_keeps_every_candidate_with_full_score():
    circuit = make_circuit()
    candidates = [make_itinerary(circuit), make_itinerary(None, budget_max=None, duration_days=None)]

    matched = match_itineraries(MatchQuery(), candidates)

    assert [m["id"] for m in matched] == [c["id"] for c in candidates]
    assert all(m["match_score"] == 6 for m in matched)


def test_budget_boundary_is_inclusive():
    itinerary = make_itinerary(make_circuit(), budget_max=40000)

    assert evaluate(MatchQuery(budget=10000), itinerary).budget is True
    assert evaluate(MatchQuery(budget=9999), itinerary).budget is False


def test_budget_requires_numeric_budget_max():
    itinerary = make_itinerary(make_circuit(), budget_max="40000")
    assert evaluate(MatchQuery(budget=50000), itinerary).budget is False


@pytest.mark.parametrize("requested,expected", [(3, True), (5, True), (1, True), (6, False), (0, False)])
def test_duration_tolerance(requested, expected):
    itinerary = make_itinerary(make_circuit(), duration_days=3)
    assert evaluate(MatchQuery(days=requested), itinerary).duration is expected


def test_tag_matches_circuit_categories_or_tags():
    circuit = make_circuit(categories=["heritage", "nature"], tags=["old_city"])
    itinerary = make_itinerary(circuit)

    assert evaluate(MatchQuery(tags=["heritage"]), itinerary).tags is True
    assert evaluate(MatchQuery(tags=["old_city"]), itinerary).tags is True
    assert evaluate(MatchQuery(tags=["beach"]), itinerary).tags is False


def test_experience_matches_itinerary_or_circuit():
    circuit = make_circuit(experiences=["safari"])
    itinerary = make_itinerary(circuit, experience_tags=["birding"])

    assert evaluate(MatchQuery(experiences=["birding"]), itinerary).experiences is True
    assert evaluate(MatchQuery(experiences=["safari"]), itinerary).experiences is True
    assert evaluate(MatchQuery(experiences=["rafting"]), itinerary).experiences is False


def test_theme_is_case_insensitive_substring():
    itinerary = make_itinerary(make_circuit(), theme="Offbeat Wildlife")

    assert evaluate(MatchQuery(theme="wildlife"), itinerary).theme is True
    assert evaluate(MatchQuery(theme="city"), itinerary).theme is False


def test_transport_required_needs_included_flag():
    with_car = MatchQuery(with_car=True)

    assert evaluate(with_car, make_itinerary(make_circuit(), transport_included=True)).transport is True
    assert evaluate(with_car, make_itinerary(make_circuit(), transport_included=False)).transport is False
    assert evaluate(MatchQuery(), make_itinerary(make_circuit(), transport_included=False)).transport is True


def test_heritage_tag_with_three_passing_predicates_is_included():
    circuit = make_circuit(categories=["heritage", "nature"], experiences=["heritage walk"])
    itinerary = make_itinerary(
        circuit,
        theme="Walled city",
        budget_max=100000,
        duration_days=10,
        transport_included=False,
    )
    # tags, experiences (empty) and theme pass; budget, duration, transport fail
    query = MatchQuery(tags=["heritage"], experiences=[], theme="walled", budget=10000, days=3, with_car=True)

    matched = match_itineraries(query, [itinerary])

    assert len(matched) == 1
    assert matched[0]["match_score"] == 3


def test_below_threshold_is_excluded():
    circuit = make_circuit(categories=["nature"])
    itinerary = make_itinerary(circuit, theme="Beach", budget_max=100000, duration_days=10)
    query = MatchQuery(tags=["heritage"], theme="city", budget=10000, days=3, with_car=True)

    assert evaluate(query, itinerary).score == 1
    assert match_itineraries(query, [itinerary]) == []


def test_circuit_filters_drop_candidates_before_scoring():
    kanha = make_circuit(name="Kanha Wilderness")
    old_town = make_circuit(name="Old Town Heritage")
    candidates = [make_itinerary(kanha), make_itinerary(old_town)]

    by_id = match_itineraries(MatchQuery(circuit_id=old_town["id"]), candidates)
    by_name = match_itineraries(MatchQuery(circuit_name="  kanha WILDERNESS "), candidates)

    assert [m["circuit"]["name"] for m in by_id] == ["Old Town Heritage"]
    assert [m["circuit"]["name"] for m in by_name] == ["Kanha Wilderness"]


def test_results_keep_storage_order_and_pass_through_request_fields():
    circuit = make_circuit()
    first = make_itinerary(circuit, title="first", duration_days=10)
    second = make_itinerary(circuit, title="second", duration_days=3)
    query = MatchQuery(days=3, pax=4, no_of_rooms=2)

    matched = match_itineraries(query, [first, second])

    assert [m["title"] for m in matched] == ["first", "second"]
    assert matched[0]["match_score"] == 5
    assert matched[1]["match_score"] == 6
    assert matched[0]["pax"] == 4
    assert matched[0]["days"] == 3
    assert matched[0]["no_of_rooms"] == 2


def test_candidates_are_not_mutated():
    itinerary = make_itinerary(make_circuit())
    match_itineraries(MatchQuery(), [itinerary])
    assert "total_itinerary_km" not in itinerary


def test_total_itinerary_km_ignores_missing_and_non_numeric_values():
    itinerary = make_itinerary(
        make_circuit(),
        day_wise_plan=[
            {"day": 1, "travel_distance_km": 60},
            {"day": 2, "travel_distance_km": "40.5"},
            {"day": 3, "travel_distance_km": "far"},
            {"day": 4},
            "not a day",
        ],
    )
    assert total_itinerary_km(itinerary) == 100.5
    assert total_itinerary_km(make_itinerary(None, day_wise_plan=None)) == 0


def test_missing_candidates_is_a_validation_error():
    with pytest.raises(ValidationError):
        match_itineraries(MatchQuery(), None)


def test_no_candidates_is_an_empty_result():
    assert match_itineraries(MatchQuery(tags=["wildlife"]), []) == []
