"""Itinerary generator — greedy circuit → homestay → day plan construction.

Each call runs four stages and fails fast: the first stage with no viable
option raises its own error kind and no partial plan is returned. Lookups
are injected so the generator never touches storage directly.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from circuitstay.errors import BudgetExceeded, NoCircuitMatch, NoHomestayAvailable
from circuitstay.schemas.planning import GenerationRequest
from circuitstay.services.planning_config import GENERATION, GenerationDefaults


@dataclass(frozen=True)
class CircuitFilter:
    """Circuits whose categories AND experiences both overlap the requested sets."""
    categories: tuple[str, ...]
    experiences: tuple[str, ...]
    is_offbeat: bool | None = None

    def matches(self, circuit: dict) -> bool:
        if self.is_offbeat is not None and bool(circuit.get("is_offbeat")) != self.is_offbeat:
            return False
        categories = set(circuit.get("categories") or [])
        experiences = set(circuit.get("experiences") or [])
        return bool(categories & set(self.categories)) and bool(experiences & set(self.experiences))


@dataclass
class StayQuote:
    homestay: dict
    stay_cost: float
    km_rate: float
    car_distance: float
    car_cost: float

    @property
    def total_cost(self) -> float:
        return self.stay_cost + self.car_cost


FindCircuits = Callable[[CircuitFilter], Awaitable[list[dict]]]
FindHomestays = Callable[[str], Awaitable[list[dict]]]

_THEME_OFFBEAT = {"offbeat": True, "city": False, "mixed": None}


async def generate_itinerary(
    request: GenerationRequest,
    find_circuits: FindCircuits,
    find_homestays_by_circuit: FindHomestays,
    defaults: GenerationDefaults = GENERATION,
) -> dict:
    """Build a day-wise plan for the best circuit and the best affordable homestay in it."""
    circuit = await select_circuit(request, find_circuits)

    homestays = await find_homestays_by_circuit(str(circuit["id"]))
    if not homestays:
        raise NoHomestayAvailable("No homestays available under the selected circuit.")

    quote = select_homestay(request, circuit, homestays, defaults)
    plan = build_day_plan(request, circuit, defaults)

    stay = quote.homestay
    return {
        "circuit": circuit.get("name"),
        "circuit_id": str(circuit["id"]),
        "theme": request.theme,
        "homestay": {
            "id": str(stay["id"]) if stay.get("id") is not None else None,
            "name": stay.get("homestay_name"),
            "price_type": stay.get("pricing_type"),
            "price_per_day": stay.get("price"),
            "total": quote.stay_cost,
            "distance": stay.get("distance"),
            "contact": stay.get("contact"),
            "rooms": stay.get("rooms"),
        },
        "transport": {
            "pickup": request.pickup,
            "drop": request.drop,
            "car_type": request.car_type,
            "rate_per_km": quote.km_rate,
            "total_km": quote.car_distance,
            "total": quote.car_cost,
        } if request.with_car else None,
        "pax": request.pax,
        "days": request.days,
        "itinerary": plan,
        "total_cost": quote.total_cost,
    }


async def select_circuit(request: GenerationRequest, find_circuits: FindCircuits) -> dict:
    """Highest experience overlap wins; ties keep retrieval order."""
    circuit_filter = CircuitFilter(
        categories=tuple(request.tags),
        experiences=tuple(request.experiences),
        is_offbeat=_THEME_OFFBEAT[request.theme],
    )
    circuits = await find_circuits(circuit_filter)
    if not circuits:
        raise NoCircuitMatch("No circuits found matching your preferences.")

    wanted = set(request.experiences)
    # sorted() is stable, so equal scores stay in retrieval order
    ranked = sorted(
        circuits,
        key=lambda c: sum(1 for e in (c.get("experiences") or []) if e in wanted),
        reverse=True,
    )
    return ranked[0]


def quote_homestay(
    request: GenerationRequest,
    circuit: dict,
    homestay: dict,
    defaults: GenerationDefaults = GENERATION,
) -> StayQuote:
    price = homestay.get("price") or 0
    if homestay.get("pricing_type") == "perhead":
        stay_cost = request.pax * price * request.days
    else:
        stay_cost = price * request.days

    km_rate = (circuit.get("km_rates") or {}).get(request.car_type)
    if not km_rate or km_rate <= 0:
        km_rate = defaults.fallback_km_rate

    if request.with_car:
        # Round trip from the circuit reference point plus local running each day
        car_distance = (homestay.get("distance") or 0) * 2 + defaults.daily_local_km * request.days
        car_cost = car_distance * km_rate
    else:
        car_distance = 0
        car_cost = 0

    return StayQuote(
        homestay=homestay,
        stay_cost=stay_cost,
        km_rate=km_rate,
        car_distance=car_distance,
        car_cost=car_cost,
    )


def select_homestay(
    request: GenerationRequest,
    circuit: dict,
    homestays: list[dict],
    defaults: GenerationDefaults = GENERATION,
) -> StayQuote:
    """Closest to budget without exceeding it; nearer homestays win ties."""
    quotes = [quote_homestay(request, circuit, h, defaults) for h in homestays]
    affordable = [q for q in quotes if q.total_cost <= request.budget]
    if not affordable:
        raise BudgetExceeded("No homestay options available within your budget.")

    affordable.sort(key=lambda q: (abs(q.total_cost - request.budget), q.homestay.get("distance") or 0))
    return affordable[0]


def build_day_plan(
    request: GenerationRequest,
    circuit: dict,
    defaults: GenerationDefaults = GENERATION,
) -> list[dict]:
    wanted = set(request.experiences)
    matched = [e for e in (circuit.get("experiences") or []) if e in wanted][: request.days]

    return [
        {
            "day": i + 1,
            "activity": matched[i] if i < len(matched) else defaults.free_day_label,
        }
        for i in range(request.days)
    ]
