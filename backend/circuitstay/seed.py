"""Seed script for the CircuitStay development database."""

import asyncio
import logging

from sqlalchemy import select

from circuitstay.database import async_session_factory
from circuitstay.models import Circuit, Homestay, Itinerary
from circuitstay.services.catalog_service import (
    build_circuit_fields,
    build_homestay_fields,
    build_itinerary_fields,
)

logger = logging.getLogger(__name__)

# ── Circuits ───────────────────────────────────────────────────────────────────

CIRCUITS = [
    {
        "name": "Kanha Wilderness",
        "categories": ["Wildlife", "Nature"],
        "tags": ["tiger reserve", "forest"],
        "experiences": ["safari", "birding", "tribal village walk"],
        "locations": ["Mukki", "Khatia"],
        "best_seasons": ["October", "November", "February", "March"],
        "description": "Sal forests and meadows around the Kanha tiger reserve.",
        "duration": "3-5 days",
        "is_offbeat": True,
        "km_rates": {"hatchback": 12, "sedan": 14, "suv": 18},
    },
    {
        "name": "Old Town Heritage",
        "categories": ["Heritage", "Food"],
        "tags": ["old city", "markets"],
        "experiences": ["heritage walk", "street food trail", "craft workshop"],
        "locations": ["Chowk"],
        "best_seasons": ["November", "December", "January"],
        "description": "Forts, bazaars and kitchens of the walled city.",
        "duration": "2-3 days",
        "is_offbeat": False,
        "km_rates": {"sedan": 16},
    },
]

# ── Homestays (keyed by circuit name) ──────────────────────────────────────────

HOMESTAYS = {
    "Kanha Wilderness": [
        {
            "homestay_name": "Sal Leaf Cottage",
            "place_name": "Mukki",
            "price": 2000,
            "distance": 12,
            "contact": "+91 90000 00001",
            "experiences": ["safari", "birding"],
            "location_types": ["Offbeat"],
            "room_configs": [{"label": "Double", "capacity": 2, "count": 3}],
        },
        {
            "homestay_name": "Meadow View Home",
            "place_name": "Khatia",
            "price": 1500,
            "distance": 25,
            "contact": "+91 90000 00002",
            "experiences": ["tribal village walk"],
            "location_types": ["Offbeat"],
            "rooms": 2,
        },
    ],
    "Old Town Heritage": [
        {
            "homestay_name": "Haveli Rooms",
            "place_name": "Chowk",
            "price": 2500,
            "distance": 3,
            "contact": "+91 90000 00003",
            "experiences": ["heritage walk"],
            "location_types": ["City"],
            "rooms": 5,
        },
    ],
}

# ── Itineraries (keyed by circuit name) ────────────────────────────────────────

ITINERARIES = {
    "Kanha Wilderness": [
        {
            "title": "Tigers and Tribes",
            "theme": "Offbeat wildlife",
            "experience_tags": ["safari", "tribal village walk"],
            "duration_days": 3,
            "pax_min": 2,
            "pax_max": 6,
            "budget_min": 15000,
            "budget_max": 40000,
            "transport_included": True,
            "car_type": "suv",
            "day_wise_plan": [
                {"day": 1, "title": "Arrival", "activities": ["check-in", "evening walk"], "travel_distance_km": 60},
                {"day": 2, "title": "Safari day", "activities": ["morning safari", "birding"], "travel_distance_km": 40},
                {"day": 3, "title": "Village", "activities": ["tribal village walk"], "travel_distance_km": 70},
            ],
            "local_guide": {"name": "Ramesh", "location": "Mukki", "contact": "+91 90000 00010"},
        },
    ],
    "Old Town Heritage": [
        {
            "title": "Walled City Weekend",
            "theme": "City heritage",
            "experience_tags": ["heritage walk", "street food trail"],
            "duration_days": 2,
            "pax_min": 1,
            "pax_max": 4,
            "budget_min": 8000,
            "budget_max": 20000,
            "day_wise_plan": [
                {"day": 1, "title": "Forts", "activities": ["heritage walk"], "travel_distance_km": 15},
                {"day": 2, "title": "Bazaars", "activities": ["street food trail"], "travel_distance_km": 10},
            ],
        },
    ],
}


async def seed():
    async with async_session_factory() as db:
        # Check if already seeded
        result = await db.execute(select(Circuit).limit(1))
        if result.scalar_one_or_none():
            logger.info("Database already seeded. Skipping.")
            return

        homestay_count = 0
        itinerary_count = 0
        for data in CIRCUITS:
            circuit = Circuit(**build_circuit_fields(data))
            db.add(circuit)
            await db.flush()  # get circuit.id

            for stay in HOMESTAYS.get(circuit.name, []):
                fields = build_homestay_fields({**stay, "circuit_id": str(circuit.id)})
                db.add(Homestay(**fields))
                circuit.locations = sorted({*circuit.locations, fields["place_name"]})
                homestay_count += 1

            for itin in ITINERARIES.get(circuit.name, []):
                db.add(Itinerary(**build_itinerary_fields({**itin, "circuit_id": str(circuit.id)})))
                itinerary_count += 1

        await db.commit()
        logger.info(
            f"Seed complete: {len(CIRCUITS)} circuits, {homestay_count} homestays, "
            f"{itinerary_count} itineraries"
        )


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())
