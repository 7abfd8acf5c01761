"""Match scorer — ranks itineraries by partial overlap with user preferences.

Six independent predicates are evaluated per itinerary; an itinerary is kept
when at least ``MATCH.min_score`` of them hold. Candidates are plain dicts as
returned by the catalog repository, with the linked circuit under ``"circuit"``.
"""

from dataclasses import dataclass

from circuitstay.errors import ValidationError
from circuitstay.schemas.planning import MatchQuery
from circuitstay.services.normalize import coerce_number
from circuitstay.services.planning_config import MATCH, MatchThresholds


@dataclass
class PredicateResult:
    tags: bool
    experiences: bool
    theme: bool
    budget: bool
    duration: bool
    transport: bool

    @property
    def score(self) -> int:
        return sum((self.tags, self.experiences, self.theme, self.budget, self.duration, self.transport))


def match_itineraries(
    query: MatchQuery,
    candidates: list[dict] | None,
    thresholds: MatchThresholds = MATCH,
) -> list[dict]:
    """
    Filter and enrich candidate itineraries.

    Circuit id/name filters are exclusionary and applied before scoring.
    Storage order is preserved among the kept results.
    """
    if candidates is None:
        raise ValidationError("No candidate itineraries supplied")

    matched = []
    for itinerary in candidates:
        if not passes_circuit_filter(query, itinerary):
            continue

        result = evaluate(query, itinerary, thresholds)
        if result.score < thresholds.min_score:
            continue

        matched.append({
            **itinerary,
            "pax": query.pax,
            "days": query.days,
            "no_of_rooms": query.no_of_rooms,
            "total_itinerary_km": total_itinerary_km(itinerary),
            "match_score": result.score,
        })

    return matched


def passes_circuit_filter(query: MatchQuery, itinerary: dict) -> bool:
    """Exact circuit id and case-insensitive exact circuit name, when supplied."""
    circuit = itinerary.get("circuit") or {}

    if query.circuit_id:
        itinerary_circuit_id = str(circuit.get("id") or itinerary.get("circuit_id") or "")
        if itinerary_circuit_id != query.circuit_id:
            return False

    if query.circuit_name:
        name = str(circuit.get("name") or "").strip().lower()
        if name != query.circuit_name.lower():
            return False

    return True


def evaluate(query: MatchQuery, itinerary: dict, thresholds: MatchThresholds = MATCH) -> PredicateResult:
    circuit = itinerary.get("circuit") or {}

    circuit_tags = set(circuit.get("tags") or []) | set(circuit.get("categories") or [])
    circuit_experiences = set(circuit.get("experiences") or [])
    itinerary_experiences = set(itinerary.get("experience_tags") or [])

    tags_ok = not query.tags or any(t in circuit_tags for t in query.tags)

    experiences_ok = not query.experiences or any(
        e in itinerary_experiences or e in circuit_experiences for e in query.experiences
    )

    theme_ok = not query.theme or query.theme.lower() in (itinerary.get("theme") or "").lower()

    budget_max = _as_number(itinerary.get("budget_max"))
    budget_ok = query.budget is None or (
        budget_max is not None and budget_max <= query.budget + thresholds.budget_slack
    )

    duration = _as_number(itinerary.get("duration_days"))
    duration_ok = query.days is None or (
        duration is not None and abs(duration - query.days) <= thresholds.duration_tolerance_days
    )

    transport_ok = not query.with_car or itinerary.get("transport_included") is True

    return PredicateResult(
        tags=tags_ok,
        experiences=experiences_ok,
        theme=theme_ok,
        budget=budget_ok,
        duration=duration_ok,
        transport=transport_ok,
    )


def total_itinerary_km(itinerary: dict) -> float:
    """Sum of per-day travel distance; missing or non-numeric entries count as 0."""
    plan = itinerary.get("day_wise_plan")
    if not isinstance(plan, list):
        return 0
    return sum(
        coerce_number(day.get("travel_distance_km"), 0) if isinstance(day, dict) else 0
        for day in plan
    )


def _as_number(value) -> float | None:
    # Only real numbers qualify; numeric strings in storage do not.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value
