"""Planning configuration — single source for matching and generation constants."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MatchThresholds:
    """Itinerary matching thresholds."""
    min_score: int = 3                 # at least half of the six predicates
    budget_slack: float = 30000        # currency units over the requested ceiling
    duration_tolerance_days: int = 2   # |duration - requested days|


@dataclass(frozen=True)
class GenerationDefaults:
    """Itinerary generation constants."""
    fallback_km_rate: float = 15       # per km, when the circuit has no rate for the car type
    daily_local_km: float = 30         # local transport allowance per day
    free_day_label: str = "Leisure / Free Day"


CAR_TYPES = ("hatchback", "sedan", "suv")
PRICING_TYPES = ("perhead", "perroom")
GENERATION_THEMES = ("offbeat", "city", "mixed")
# Picker themes without an offbeat/city restriction of their own
THEME_ALIASES = {"popular": "mixed"}

# Largest values the homestay numeric columns hold
MAX_DISTANCE_KM = 999999.99
MAX_PRICE = 99999999.99
GUEST_TYPES = ("Family", "Solo", "Couple", "Group")
LOCATION_TYPES = ("Offbeat", "City")

MATCH = MatchThresholds()
GENERATION = GenerationDefaults()
