from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from circuitstay.services.normalize import coerce_bool, normalize_label, parse_label_list, parse_string_list
from circuitstay.services.planning_config import CAR_TYPES, THEME_ALIASES


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MatchQuery(_Payload):
    """Preferences for itinerary matching. Empty fields mean "no constraint"."""
    circuit_id: str = ""
    circuit_name: str = ""
    tags: list[str] = []
    experiences: list[str] = []
    theme: str = ""
    days: int | float | None = None
    budget: float | None = None
    pax: int | None = None
    no_of_rooms: int | None = None
    with_car: bool = False

    @field_validator("circuit_id", "circuit_name", "theme", mode="before")
    @classmethod
    def _strip(cls, v):
        return "" if v is None else str(v).strip()

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, v):
        return parse_label_list(v, "tags")

    @field_validator("experiences", mode="before")
    @classmethod
    def _experiences(cls, v):
        return parse_string_list(v, "experiences")

    @field_validator("days", "budget", "pax", "no_of_rooms", mode="before")
    @classmethod
    def _blank_number(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("with_car", mode="before")
    @classmethod
    def _with_car(cls, v):
        return coerce_bool(v)


class GenerationRequest(_Payload):
    """Trip constraints for itinerary generation."""
    pax: int = Field(..., ge=1)
    days: int = Field(..., ge=1)
    tags: list[str] = Field(..., min_length=1)
    experiences: list[str] = Field(..., min_length=1)
    theme: Literal["offbeat", "city", "mixed"] = "mixed"
    with_car: bool = False
    car_type: str = "hatchback"
    pickup: str = ""
    drop: str = ""
    budget: float = Field(..., ge=0)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, v):
        return parse_label_list(v, "tags")

    @field_validator("experiences", mode="before")
    @classmethod
    def _experiences(cls, v):
        return parse_string_list(v, "experiences")

    @field_validator("theme", mode="before")
    @classmethod
    def _theme(cls, v):
        theme = "mixed" if v in (None, "") else str(v).strip().lower()
        return THEME_ALIASES.get(theme, theme)

    @field_validator("car_type", mode="before")
    @classmethod
    def _car_type(cls, v):
        car_type = normalize_label(v or "hatchback")
        if car_type not in CAR_TYPES:
            raise ValueError(f"car_type must be one of {', '.join(CAR_TYPES)}")
        return car_type

    @field_validator("pickup", "drop", mode="before")
    @classmethod
    def _strip(cls, v):
        return "" if v is None else str(v).strip()

    @field_validator("with_car", mode="before")
    @classmethod
    def _with_car(cls, v):
        return coerce_bool(v)
