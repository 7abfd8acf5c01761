"""Catalog service — turns raw create payloads into validated column values.

Payload keys may be snake_case or the camelCase names older clients send.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic.alias_generators import to_camel

from circuitstay.errors import ValidationError
from circuitstay.services.normalize import (
    coerce_bool,
    coerce_number,
    collect_bracketed,
    normalize_label,
    parse_label_list,
    parse_mapping,
    parse_number_map,
    parse_object_list,
    parse_string_list,
)
from circuitstay.services.planning_config import (
    CAR_TYPES,
    GUEST_TYPES,
    LOCATION_TYPES,
    MAX_DISTANCE_KM,
    MAX_PRICE,
)

LEGACY_CAR_PRICE_FIELDS = {
    "carPriceHatchback": "hatchback",
    "carPriceSedan": "sedan",
    "carPriceSUV": "suv",
}

LEGACY_GUIDE_FIELDS = {
    "localGuideName": "name",
    "localGuideContact": "contact",
    "localGuideLocation": "location",
    "localGuideBio": "bio",
    "localGuideImage": "image",
}

THEMES = [
    {
        "label": "Offbeat",
        "value": "offbeat",
        "description": "Hidden gems, quiet villages & local life.",
    },
    {
        "label": "Popular Destinations",
        "value": "popular",
        "description": "Popular towns, sightseeing, cafes & markets.",
    },
    {
        "label": "Mixed",
        "value": "mixed",
        "description": "A blend of offbeat and mainstream spots.",
    },
]


def _field(payload: dict, name: str, default: Any = None) -> Any:
    if name in payload:
        return payload[name]
    return payload.get(to_camel(name), default)


def _text(payload: dict, name: str) -> str:
    value = _field(payload, name)
    return "" if value is None else str(value).strip()


def _required_text(payload: dict, name: str) -> str:
    value = _text(payload, name)
    if not value:
        raise ValidationError(f"{name} is required")
    return value


def _non_negative(value: Any, name: str, fallback: float = 0) -> float:
    number = coerce_number(value, fallback)
    if number < 0:
        raise ValidationError(f"{name} must be >= 0")
    return number


def parse_uuid(value: Any, name: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {name}")


def _choices(values: list[str], allowed: tuple[str, ...], name: str) -> list[str]:
    bad = [v for v in values if v not in allowed]
    if bad:
        raise ValidationError(f"{name} must be one of {', '.join(allowed)} (got {', '.join(bad)})")
    return values


# ─── Circuits ───


def build_km_rates(payload: dict) -> dict[str, float]:
    """Per-km car rates from ``km_rates`` and/or the flat carPrice* fields."""
    rates = {}
    for car_type, rate in parse_number_map(_field(payload, "km_rates"), "km_rates").items():
        rates[normalize_label(car_type)] = rate
    for legacy, car_type in LEGACY_CAR_PRICE_FIELDS.items():
        if legacy in payload:
            rates[car_type] = coerce_number(payload[legacy], 0)

    _choices(list(rates), CAR_TYPES, "km_rates car type")
    for car_type, rate in rates.items():
        if rate < 0:
            raise ValidationError(f"km rate for {car_type} must be >= 0")
    return rates


def build_circuit_fields(payload: dict) -> dict:
    images = parse_string_list(_field(payload, "images"), "images")
    img = _text(payload, "img") or (images[0] if images else None)

    return {
        "name": _required_text(payload, "name"),
        "category": _text(payload, "category") or None,
        "categories": parse_label_list(_field(payload, "categories"), "categories"),
        "tags": parse_label_list(_field(payload, "tags"), "tags"),
        "theme": _text(payload, "theme") or None,
        "experiences": parse_string_list(_field(payload, "experiences"), "experiences"),
        "featured_activities": parse_string_list(_field(payload, "featured_activities"), "featured_activities"),
        "locations": parse_string_list(_field(payload, "locations"), "locations"),
        "best_seasons": parse_string_list(_field(payload, "best_seasons"), "best_seasons"),
        "entry_points": parse_string_list(_field(payload, "entry_points"), "entry_points"),
        "transport": parse_string_list(_field(payload, "transport"), "transport"),
        "description": _required_text(payload, "description"),
        "duration": _required_text(payload, "duration"),
        "is_offbeat": coerce_bool(_field(payload, "is_offbeat")),
        "km_rates": build_km_rates(payload),
        "img": img,
        "images": images,
    }


def label_options(values: list, with_icon: bool = False) -> list[dict]:
    """Distinct labels as {label, value} pairs for pickers; the first spelling of a value wins."""
    options = {}
    for v in values:
        if not v:
            continue
        value = normalize_label(v)
        if value in options:
            continue
        option = {"label": str(v).strip(), "value": value}
        if with_icon:
            option["icon"] = "🎯"
        options[value] = option
    return list(options.values())


def dedupe_local_guides(itineraries: list[dict]) -> list[dict]:
    """Unique guides keyed by (name, location, image); later entries replace earlier ones."""
    guides: dict[tuple, dict] = {}
    for itinerary in itineraries:
        guide = itinerary.get("local_guide")
        if not guide:
            continue
        key = (guide.get("name") or "", guide.get("location") or "", guide.get("image") or "")
        guides[key] = guide
    return list(guides.values())


# ─── Homestays ───


def derive_room_count(room_configs: list[dict], override: Any) -> int:
    """Sum of configured room counts when positive, else the explicit value."""
    from_configs = sum(rc.get("count", 0) for rc in room_configs)
    if from_configs > 0:
        return int(from_configs)
    return max(0, int(coerce_number(override, 0)))


def _room_configs(value: Any) -> list[dict]:
    configs = []
    for rc in parse_object_list(value, "room_configs"):
        config = {
            "label": str(rc.get("label") or "").strip(),
            "capacity": max(0, coerce_number(rc.get("capacity"), 0)),
            "count": max(0, coerce_number(rc.get("count"), 0)),
        }
        if config["label"] or config["capacity"] > 0 or config["count"] > 0:
            configs.append(config)
    return configs


def _room_types(value: Any) -> list[dict]:
    room_types = []
    for rt in parse_object_list(value, "room_types"):
        room_types.append({
            "name": str(_field(rt, "name") or "").strip(),
            "capacity": max(0, coerce_number(_field(rt, "capacity"), 0)),
            "bed_type": str(_field(rt, "bed_type") or "").strip(),
            "amenities": parse_string_list(_field(rt, "amenities"), "room_types.amenities"),
            "images": parse_string_list(_field(rt, "images"), "room_types.images"),
            "price_per_person": coerce_number(_field(rt, "price_per_person"), None),
            "price_per_room": coerce_number(_field(rt, "price_per_room"), None),
            "count": max(0, coerce_number(_field(rt, "count"), 0)),
        })
    return room_types


def build_homestay_fields(payload: dict) -> dict:
    """Validate a homestay payload. The circuit's existence is checked by the caller."""
    if not _text(payload, "circuit_id"):
        raise ValidationError("circuit_id is required")
    circuit_id = parse_uuid(_field(payload, "circuit_id"), "circuit_id")

    homestay_name = _required_text(payload, "homestay_name")
    place_name = _required_text(payload, "place_name")

    pricing_type = str(_field(payload, "pricing_type") or "perhead").strip().lower()
    if pricing_type != "perhead":
        raise ValidationError("pricing_type must be perhead (per-head with food)")

    price = coerce_number(_field(payload, "price"), None)
    if price is None or price <= 0:
        raise ValidationError("price (per head per night) must be > 0")
    if price > MAX_PRICE:
        raise ValidationError(f"price must be <= {MAX_PRICE}")

    distance = _non_negative(_field(payload, "distance"), "distance")
    if distance > MAX_DISTANCE_KM:
        raise ValidationError(f"distance must be <= {MAX_DISTANCE_KM} km")

    guest_types = parse_string_list(_field(payload, "guest_types"), "guest_types")
    if not guest_types and _text(payload, "guest_type"):
        guest_types = [_text(payload, "guest_type")]

    room_configs = _room_configs(_field(payload, "room_configs"))

    experience_distances = parse_number_map(_field(payload, "experience_distances"), "experience_distances")
    experience_distances.update(collect_bracketed(payload, "experienceDistances"))

    return {
        "circuit_id": circuit_id,
        "homestay_name": homestay_name,
        "place_name": place_name,
        "description": _text(payload, "description"),
        "contact": _text(payload, "contact"),
        "is_featured": coerce_bool(_field(payload, "is_featured")),
        "pricing_type": pricing_type,
        "price": price,
        "distance": distance,
        "rooms": derive_room_count(room_configs, _field(payload, "rooms")),
        "guest_types": _choices(guest_types, GUEST_TYPES, "guest_types"),
        "addons": parse_string_list(_field(payload, "addons"), "addons"),
        "experiences": parse_string_list(_field(payload, "experiences"), "experiences"),
        "location_types": _choices(
            parse_string_list(_field(payload, "location_types"), "location_types"),
            LOCATION_TYPES,
            "location_types",
        ),
        "room_configs": room_configs,
        "room_types": _room_types(_field(payload, "room_types")),
        "experience_distances": experience_distances,
        "images": parse_string_list(_field(payload, "images"), "images"),
    }


def min_per_person(homestay: dict) -> float:
    """Cheapest positive room-type per-person price, else the base price, else 0."""
    candidates = [
        rt.get("price_per_person")
        for rt in homestay.get("room_types") or []
        if isinstance(rt.get("price_per_person"), (int, float)) and rt.get("price_per_person") > 0
    ]
    if candidates:
        return min(candidates)
    return homestay.get("price") or 0


def apply_review(reviews: list[dict], payload: dict) -> tuple[list[dict], float, int]:
    """Return (new review list, average rating, rating count) after adding one review."""
    rating = coerce_number(_field(payload, "rating"), None)
    if rating is None or rating < 1 or rating > 5:
        raise ValidationError("rating must be between 1 and 5")

    review = {
        "id": str(uuid.uuid4()),
        "user_name": _text(payload, "user_name"),
        "rating": rating,
        "comment": _text(payload, "comment"),
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    updated = [*reviews, review]
    total = sum(coerce_number(r.get("rating"), 0) for r in updated)
    count = len(updated)
    return updated, round(total / count, 2), count


# ─── Itineraries ───


def _plan_entry(entry: dict, name: str) -> dict:
    day = coerce_number(_field(entry, "day"), None)
    distance = coerce_number(_field(entry, "travel_distance_km"), 0)
    if distance < 0:
        raise ValidationError(f"{name}.travel_distance_km must be >= 0")

    stay_id = _field(entry, "stay_at_homestay_id")
    return {
        "day": int(day) if day is not None else None,
        "title": str(_field(entry, "title") or "").strip(),
        "description": str(_field(entry, "description") or "").strip(),
        "stay_at_homestay_id": str(parse_uuid(stay_id, f"{name}.stay_at_homestay_id")) if stay_id else None,
        "activities": parse_string_list(_field(entry, "activities"), f"{name}.activities"),
        "travel_distance_km": distance,
    }


def normalize_day_plan(value: Any) -> list[dict]:
    # Day numbers are kept as given: no uniqueness or ordering is enforced.
    return [_plan_entry(d, "day_wise_plan") for d in parse_object_list(value, "day_wise_plan")]


def _addon_suggestions(value: Any) -> list[dict]:
    suggestions = []
    for entry in parse_object_list(value, "addon_suggestions"):
        title = str(_field(entry, "title") or "").strip()
        if not title:
            raise ValidationError("addon_suggestions.title is required")
        base = _plan_entry(entry, "addon_suggestions")
        suggestions.append({
            "title": title,
            "description": base["description"],
            "images": parse_string_list(_field(entry, "images"), "addon_suggestions.images"),
            "activities": base["activities"],
            "travel_distance_km": base["travel_distance_km"],
            "stay_at_homestay_id": base["stay_at_homestay_id"],
        })
    return suggestions


def _local_guide(payload: dict) -> dict:
    guide = {k: "" for k in ("name", "contact", "location", "bio", "image")}
    for k, v in parse_mapping(_field(payload, "local_guide"), "local_guide").items():
        if k in guide and v is not None:
            guide[k] = str(v).strip()
    for legacy, key in LEGACY_GUIDE_FIELDS.items():
        if payload.get(legacy) is not None:
            guide[key] = str(payload[legacy]).strip()
    return guide


def build_itinerary_fields(payload: dict) -> dict:
    title = _required_text(payload, "title")
    if not _text(payload, "circuit_id"):
        raise ValidationError("circuit_id is required")
    circuit_id = parse_uuid(_field(payload, "circuit_id"), "circuit_id")

    duration_days = coerce_number(_field(payload, "duration_days"), 1)
    if duration_days < 1:
        raise ValidationError("duration_days must be >= 1")

    guest_type = _text(payload, "guest_type") or None
    if guest_type:
        _choices([guest_type], GUEST_TYPES, "guest_type")

    car_type = normalize_label(_text(payload, "car_type") or "hatchback")
    _choices([car_type], CAR_TYPES, "car_type")

    return {
        "title": title,
        "circuit_id": circuit_id,
        "theme": _text(payload, "theme"),
        "category_tags": parse_label_list(_field(payload, "category_tags"), "category_tags"),
        "experience_tags": parse_string_list(_field(payload, "experience_tags"), "experience_tags"),
        "duration_days": int(duration_days),
        "guest_type": guest_type,
        "pax_min": int(_non_negative(_field(payload, "pax_min"), "pax_min")),
        "pax_max": int(_non_negative(_field(payload, "pax_max"), "pax_max")),
        "budget_min": _non_negative(_field(payload, "budget_min"), "budget_min"),
        "budget_max": _non_negative(_field(payload, "budget_max"), "budget_max"),
        "transport_included": coerce_bool(_field(payload, "transport_included")),
        "car_type": car_type,
        "is_featured": coerce_bool(_field(payload, "is_featured")),
        "no_of_rooms": int(_non_negative(_field(payload, "no_of_rooms"), "no_of_rooms")),
        "image": _text(payload, "image"),
        "day_wise_plan": normalize_day_plan(_field(payload, "day_wise_plan")),
        "local_guide": _local_guide(payload),
        "addon_suggestions": _addon_suggestions(_field(payload, "addon_suggestions")),
    }
