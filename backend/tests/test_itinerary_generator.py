import asyncio

import pytest

from circuitstay.errors import BudgetExceeded, NoCircuitMatch, NoHomestayAvailable
from circuitstay.schemas.planning import GenerationRequest
from circuitstay.services.itinerary_generator import (
    CircuitFilter,
    build_day_plan,
    generate_itinerary,
    quote_homestay,
    select_homestay,
)
from conftest import FakeCatalog, make_circuit, make_homestay


def _request(**overrides) -> GenerationRequest:
    data = {
        "pax": 2,
        "days": 3,
        "budget": 15000,
        "with_car": False,
        "tags": ["wildlife"],
        "experiences": ["safari"],
        "theme": "offbeat",
    }
    data.update(overrides)
    return GenerationRequest(**data)


def _generate(request: GenerationRequest, catalog: FakeCatalog) -> dict:
    return asyncio.run(
        generate_itinerary(request, catalog.find_circuits, catalog.find_homestays_by_circuit)
    )


@pytest.fixture
def kanha():
    return make_circuit(categories=["wildlife", "nature"], experiences=["safari"], is_offbeat=True)


def test_affordable_offbeat_trip(kanha):
    catalog = FakeCatalog(circuits=[kanha], homestays=[make_homestay(kanha, price=2000)])

    plan = _generate(_request(), catalog)

    assert plan["circuit"] == "Kanha Wilderness"
    assert plan["theme"] == "offbeat"
    assert plan["homestay"]["total"] == 12000
    assert plan["homestay"]["price_type"] == "perhead"
    assert plan["transport"] is None
    assert plan["total_cost"] == 12000
    assert plan["itinerary"] == [
        {"day": 1, "activity": "safari"},
        {"day": 2, "activity": "Leisure / Free Day"},
        {"day": 3, "activity": "Leisure / Free Day"},
    ]


def test_tight_budget_raises_budget_exceeded(kanha):
    catalog = FakeCatalog(circuits=[kanha], homestays=[make_homestay(kanha, price=2000)])

    with pytest.raises(BudgetExceeded):
        _generate(_request(budget=10000), catalog)


def test_no_matching_circuit(kanha):
    catalog = FakeCatalog(circuits=[kanha])

    with pytest.raises(NoCircuitMatch):
        _generate(_request(tags=["beach"]), catalog)
    with pytest.raises(NoCircuitMatch):
        _generate(_request(experiences=["rafting"]), catalog)


def test_circuit_without_homestays(kanha):
    catalog = FakeCatalog(circuits=[kanha])

    with pytest.raises(NoHomestayAvailable):
        _generate(_request(), catalog)


@pytest.mark.parametrize("theme,expected", [("offbeat", True), ("city", False), ("mixed", None)])
def test_theme_sets_offbeat_filter(theme, expected):
    seen = []

    async def find_circuits(circuit_filter):
        seen.append(circuit_filter)
        return []

    async def find_homestays(circuit_id):
        return []

    with pytest.raises(NoCircuitMatch):
        asyncio.run(generate_itinerary(_request(theme=theme), find_circuits, find_homestays))

    assert seen == [CircuitFilter(categories=("wildlife",), experiences=("safari",), is_offbeat=expected)]


def test_circuit_filter_requires_both_overlaps():
    circuit = make_circuit(categories=["wildlife"], experiences=["safari"], is_offbeat=False)

    assert CircuitFilter(("wildlife",), ("safari",)).matches(circuit)
    assert not CircuitFilter(("wildlife",), ("birding",)).matches(circuit)
    assert not CircuitFilter(("heritage",), ("safari",)).matches(circuit)
    assert not CircuitFilter(("wildlife",), ("safari",), is_offbeat=True).matches(circuit)


def test_highest_experience_overlap_wins():
    one = make_circuit(name="One", experiences=["safari"])
    two = make_circuit(name="Two", experiences=["birding", "safari"])
    catalog = FakeCatalog(
        circuits=[one, two],
        homestays=[make_homestay(one, price=100), make_homestay(two, price=100)],
    )

    plan = _generate(_request(experiences=["safari", "birding"]), catalog)

    assert plan["circuit"] == "Two"
    assert [d["activity"] for d in plan["itinerary"]] == ["birding", "safari", "Leisure / Free Day"]


def test_equal_scores_keep_retrieval_order():
    first = make_circuit(name="First")
    second = make_circuit(name="Second")
    catalog = FakeCatalog(
        circuits=[first, second],
        homestays=[make_homestay(first, price=100), make_homestay(second, price=100)],
    )

    assert _generate(_request(), catalog)["circuit"] == "First"


def test_car_cost_uses_circuit_rate_for_car_type():
    circuit = make_circuit(km_rates={"suv": 18})
    stay = make_homestay(circuit, price=1000, distance=10)
    request = _request(pax=1, days=2, with_car=True, car_type="SUV", pickup="Jabalpur", drop="Nagpur")

    quote = quote_homestay(request, circuit, stay)

    assert quote.stay_cost == 2000
    assert quote.km_rate == 18
    assert quote.car_distance == 80  # 10 * 2 + 30 * 2
    assert quote.car_cost == 1440
    assert quote.total_cost == 3440


def test_car_cost_falls_back_when_rate_missing():
    circuit = make_circuit(km_rates={"suv": 18, "sedan": 0})
    stay = make_homestay(circuit, price=1000, distance=10)

    quote = quote_homestay(_request(pax=1, days=2, with_car=True, car_type="sedan"), circuit, stay)

    assert quote.km_rate == 15
    assert quote.car_cost == 1200


def test_transport_summary_in_plan():
    circuit = make_circuit(km_rates={"hatchback": 12})
    catalog = FakeCatalog(circuits=[circuit], homestays=[make_homestay(circuit, price=1000, distance=5)])

    plan = _generate(
        _request(pax=1, days=1, budget=5000, with_car=True, pickup="Airport", drop="Station"),
        catalog,
    )

    assert plan["transport"] == {
        "pickup": "Airport",
        "drop": "Station",
        "car_type": "hatchback",
        "rate_per_km": 12,
        "total_km": 40,
        "total": 480,
    }
    assert plan["total_cost"] == 1480


def test_per_room_pricing_ignores_pax():
    circuit = make_circuit()
    stay = make_homestay(circuit, pricing_type="perroom", price=3000)

    assert quote_homestay(_request(pax=4, days=2), circuit, stay).stay_cost == 6000


def test_closest_to_budget_then_nearest():
    circuit = make_circuit()
    stays = [
        make_homestay(circuit, homestay_name="cheap", price=6000, distance=5),
        make_homestay(circuit, homestay_name="far", price=9000, distance=20),
        make_homestay(circuit, homestay_name="near", price=9000, distance=8),
        make_homestay(circuit, homestay_name="over", price=11000, distance=1),
    ]

    quote = select_homestay(_request(pax=1, days=1, budget=10000), circuit, stays)

    assert quote.homestay["homestay_name"] == "near"


def test_exact_budget_is_affordable():
    circuit = make_circuit()
    stay = make_homestay(circuit, price=2500)

    quote = select_homestay(_request(pax=2, days=3, budget=15000), circuit, [stay])

    assert quote.total_cost == 15000


def test_day_plan_is_truncated_to_trip_length():
    circuit = make_circuit(experiences=["safari", "birding", "village walk"])
    request = _request(days=2, experiences=["village walk", "safari", "birding"])

    plan = build_day_plan(request, circuit)

    assert plan == [{"day": 1, "activity": "safari"}, {"day": 2, "activity": "birding"}]


def test_generation_is_deterministic(kanha):
    other = make_circuit(name="Satpura", experiences=["safari"])
    catalog = FakeCatalog(
        circuits=[kanha, other],
        homestays=[
            make_homestay(kanha, homestay_name="A", price=1000, distance=3),
            make_homestay(kanha, homestay_name="B", price=1000, distance=3),
            make_homestay(other, price=1000),
        ],
    )

    plans = [_generate(_request(), catalog) for _ in range(3)]

    assert plans[0] == plans[1] == plans[2]
    assert plans[0]["homestay"]["name"] == "A"
