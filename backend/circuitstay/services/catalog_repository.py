"""Catalog repository — PostgreSQL access for circuits, homestays and itineraries.

Returns plain dicts so the planning core never sees ORM objects. Lookups the
core depends on are ordered by (created_at, id) so that tie-breaks are
stable for a given snapshot of the data.
"""

import logging
import uuid
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import array
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from circuitstay.errors import ConflictError, NotFoundError, ValidationError
from circuitstay.models import Circuit, Homestay, Itinerary
from circuitstay.services.itinerary_generator import CircuitFilter

logger = logging.getLogger(__name__)


def _num(value):
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


def _ts(value):
    return value.isoformat() if value else None


def circuit_to_dict(c: Circuit) -> dict:
    return {
        "id": str(c.id),
        "name": c.name,
        "category": c.category,
        "categories": list(c.categories or []),
        "tags": list(c.tags or []),
        "theme": c.theme,
        "experiences": list(c.experiences or []),
        "featured_activities": list(c.featured_activities or []),
        "locations": list(c.locations or []),
        "best_seasons": list(c.best_seasons or []),
        "entry_points": list(c.entry_points or []),
        "transport": list(c.transport or []),
        "description": c.description,
        "duration": c.duration,
        "is_offbeat": bool(c.is_offbeat),
        "km_rates": dict(c.km_rates or {}),
        "img": c.img,
        "image": c.img,
        "images": list(c.images or []),
        "created_at": _ts(c.created_at),
        "updated_at": _ts(c.updated_at),
    }


def homestay_to_dict(h: Homestay) -> dict:
    return {
        "id": str(h.id),
        "circuit_id": str(h.circuit_id),
        "homestay_name": h.homestay_name,
        "place_name": h.place_name,
        "location": h.place_name,
        "distance": _num(h.distance) or 0,
        "images": list(h.images or []),
        "description": h.description,
        "pricing_type": h.pricing_type,
        "price": _num(h.price),
        "contact": h.contact,
        "rooms": h.rooms,
        "room_configs": list(h.room_configs or []),
        "room_types": list(h.room_types or []),
        "guest_types": list(h.guest_types or []),
        "addons": list(h.addons or []),
        "is_featured": bool(h.is_featured),
        "experiences": list(h.experiences or []),
        "experience_distances": dict(h.experience_distances or {}),
        "location_types": list(h.location_types or []),
        "vibe": h.location_types[0] if h.location_types else None,
        "average_rating": _num(h.average_rating) or 0,
        "rating_count": h.rating_count,
        "reviews": list(h.reviews or []),
        "created_at": _ts(h.created_at),
        "updated_at": _ts(h.updated_at),
    }


def itinerary_to_dict(i: Itinerary) -> dict:
    return {
        "id": str(i.id),
        "title": i.title,
        "circuit_id": str(i.circuit_id),
        "theme": i.theme,
        "category_tags": list(i.category_tags or []),
        "experience_tags": list(i.experience_tags or []),
        "duration_days": i.duration_days,
        "guest_type": i.guest_type,
        "pax_min": i.pax_min,
        "pax_max": i.pax_max,
        "budget_min": _num(i.budget_min),
        "budget_max": _num(i.budget_max),
        "transport_included": bool(i.transport_included),
        "car_type": i.car_type,
        "is_featured": bool(i.is_featured),
        "no_of_rooms": i.no_of_rooms,
        "image": i.image,
        "day_wise_plan": [dict(d) for d in i.day_wise_plan or []],
        "local_guide": dict(i.local_guide or {}),
        "addon_suggestions": [dict(a) for a in i.addon_suggestions or []],
        "created_at": _ts(i.created_at),
        "updated_at": _ts(i.updated_at),
    }


class CatalogRepository:
    """Per-request data access around one AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Lookups used by the planning core ───

    async def find_circuits(self, circuit_filter: CircuitFilter) -> list[dict]:
        """Circuits overlapping both the category and the experience sets."""
        stmt = select(Circuit).where(
            Circuit.categories.has_any(array(list(circuit_filter.categories))),
            Circuit.experiences.has_any(array(list(circuit_filter.experiences))),
        )
        if circuit_filter.is_offbeat is not None:
            stmt = stmt.where(Circuit.is_offbeat == circuit_filter.is_offbeat)
        result = await self.db.execute(stmt.order_by(Circuit.created_at, Circuit.id))
        return [circuit_to_dict(c) for c in result.scalars().all()]

    async def find_homestays_by_circuit(self, circuit_id: str) -> list[dict]:
        result = await self.db.execute(
            select(Homestay)
            .where(Homestay.circuit_id == uuid.UUID(str(circuit_id)))
            .order_by(Homestay.created_at, Homestay.id)
        )
        return [homestay_to_dict(h) for h in result.scalars().all()]

    async def find_itineraries(self, circuit_id: str | None = None) -> list[dict]:
        """Itineraries with the linked circuit and per-day homestays resolved."""
        stmt = select(Itinerary, Circuit).outerjoin(Circuit, Itinerary.circuit_id == Circuit.id)
        if circuit_id:
            stmt = stmt.where(Itinerary.circuit_id == uuid.UUID(str(circuit_id)))
        result = await self.db.execute(stmt.order_by(Itinerary.created_at, Itinerary.id))
        rows = result.all()

        itineraries = []
        for itinerary, circuit in rows:
            data = itinerary_to_dict(itinerary)
            data["circuit"] = circuit_to_dict(circuit) if circuit else None
            itineraries.append(data)

        await self._resolve_plan_homestays(itineraries)
        return itineraries

    async def _resolve_plan_homestays(self, itineraries: list[dict]) -> None:
        stay_ids = {
            day["stay_at_homestay_id"]
            for it in itineraries
            for day in it["day_wise_plan"]
            if day.get("stay_at_homestay_id")
        }
        if not stay_ids:
            return

        result = await self.db.execute(
            select(Homestay).where(Homestay.id.in_([uuid.UUID(s) for s in stay_ids]))
        )
        by_id = {str(h.id): homestay_to_dict(h) for h in result.scalars().all()}
        for it in itineraries:
            for day in it["day_wise_plan"]:
                day["stay_at_homestay"] = by_id.get(day.get("stay_at_homestay_id") or "")

    # ─── Circuits ───

    async def create_circuit(self, fields: dict) -> dict:
        circuit = Circuit(**fields)
        self.db.add(circuit)
        await self.db.commit()
        await self.db.refresh(circuit)
        logger.info(f"Circuit created: {circuit.name} ({circuit.id})")
        return circuit_to_dict(circuit)

    async def list_circuits(self, categories: list[str] | None = None) -> list[dict]:
        stmt = select(Circuit)
        if categories:
            stmt = stmt.where(Circuit.categories.has_any(array(categories)))
        result = await self.db.execute(stmt.order_by(Circuit.created_at.desc()))
        return [circuit_to_dict(c) for c in result.scalars().all()]

    async def get_circuit(self, circuit_id: uuid.UUID) -> dict:
        circuit = await self.db.get(Circuit, circuit_id)
        if not circuit:
            raise NotFoundError("Circuit not found")
        return circuit_to_dict(circuit)

    async def circuit_labels(self) -> dict[str, list]:
        """Every category and experience label in use, in first-seen order."""
        result = await self.db.execute(
            select(Circuit.category, Circuit.categories, Circuit.experiences).order_by(Circuit.created_at)
        )
        categories, experiences = [], []
        for category, many, exps in result.all():
            categories.extend([category, *(many or [])])
            experiences.extend(exps or [])
        return {"categories": categories, "experiences": experiences}

    async def circuit_detail(self, circuit_id: uuid.UUID) -> dict:
        circuit = await self.get_circuit(circuit_id)
        homestays = await self.find_homestays_by_circuit(circuit_id)
        result = await self.db.execute(
            select(Itinerary).where(Itinerary.circuit_id == circuit_id).order_by(Itinerary.created_at)
        )
        itineraries = [itinerary_to_dict(i) for i in result.scalars().all()]
        return {**circuit, "homestays": homestays, "itineraries": itineraries}

    # ─── Homestays ───

    async def create_homestay(self, fields: dict) -> dict:
        circuit = await self.db.get(Circuit, fields["circuit_id"])
        if not circuit:
            raise ValidationError("Invalid circuit_id")

        homestay = Homestay(**fields)
        self.db.add(homestay)
        if fields["place_name"] not in (circuit.locations or []):
            circuit.locations = [*(circuit.locations or []), fields["place_name"]]

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Homestay already exists for this circuit and place")

        await self.db.refresh(homestay)
        logger.info(f"Homestay created: {homestay.homestay_name} in circuit {homestay.circuit_id}")
        return homestay_to_dict(homestay)

    async def list_homestays(self) -> list[dict]:
        result = await self.db.execute(
            select(Homestay, Circuit)
            .outerjoin(Circuit, Homestay.circuit_id == Circuit.id)
            .order_by(Homestay.is_featured.desc(), Homestay.created_at.desc())
        )
        return [
            {**homestay_to_dict(h), "circuit": circuit_to_dict(c) if c else None}
            for h, c in result.all()
        ]

    async def _load_homestay(self, homestay_id: uuid.UUID) -> Homestay:
        homestay = await self.db.get(Homestay, homestay_id)
        if not homestay:
            raise NotFoundError("Homestay not found")
        return homestay

    async def get_homestay(self, homestay_id: uuid.UUID) -> dict:
        homestay = await self._load_homestay(homestay_id)
        circuit = await self.db.get(Circuit, homestay.circuit_id)
        return {**homestay_to_dict(homestay), "circuit": circuit_to_dict(circuit) if circuit else None}

    async def save_review(self, homestay_id: uuid.UUID, reviews: list[dict], average: float, count: int) -> None:
        homestay = await self._load_homestay(homestay_id)
        homestay.reviews = reviews
        homestay.average_rating = Decimal(str(average))
        homestay.rating_count = count
        await self.db.commit()

    # ─── Itineraries ───

    async def create_itinerary(self, fields: dict) -> dict:
        if not await self.db.get(Circuit, fields["circuit_id"]):
            raise ValidationError("Invalid circuit_id")

        itinerary = Itinerary(**fields)
        self.db.add(itinerary)
        await self.db.commit()
        await self.db.refresh(itinerary)
        logger.info(f"Itinerary created: {itinerary.title} ({itinerary.id})")
        return itinerary_to_dict(itinerary)

    async def get_itinerary(self, itinerary_id: uuid.UUID) -> dict:
        itinerary = await self.db.get(Itinerary, itinerary_id)
        if not itinerary:
            raise NotFoundError("Itinerary not found")

        data = itinerary_to_dict(itinerary)
        circuit = await self.db.get(Circuit, itinerary.circuit_id)
        data["circuit"] = circuit_to_dict(circuit) if circuit else None
        await self._resolve_plan_homestays([data])
        return data
