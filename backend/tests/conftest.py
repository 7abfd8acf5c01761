import os
import uuid

os.environ.setdefault("SEED_ON_STARTUP", "false")

import pytest
from fastapi.testclient import TestClient

from circuitstay.errors import NotFoundError


def make_circuit(**overrides) -> dict:
    circuit = {
        "id": str(uuid.uuid4()),
        "name": "Kanha Wilderness",
        "category": None,
        "categories": ["wildlife", "nature"],
        "tags": ["tiger_reserve"],
        "experiences": ["safari"],
        "is_offbeat": True,
        "km_rates": {},
    }
    circuit.update(overrides)
    return circuit


def make_homestay(circuit: dict, **overrides) -> dict:
    homestay = {
        "id": str(uuid.uuid4()),
        "circuit_id": circuit["id"],
        "homestay_name": "Sal Leaf Cottage",
        "place_name": "Mukki",
        "pricing_type": "perhead",
        "price": 2000,
        "distance": 10,
        "contact": "+91 90000 00001",
        "rooms": 3,
        "room_types": [],
        "reviews": [],
    }
    homestay.update(overrides)
    return homestay


def make_itinerary(circuit: dict | None = None, **overrides) -> dict:
    itinerary = {
        "id": str(uuid.uuid4()),
        "title": "Tigers and Tribes",
        "circuit_id": circuit["id"] if circuit else str(uuid.uuid4()),
        "circuit": circuit,
        "theme": "Offbeat wildlife",
        "category_tags": [],
        "experience_tags": [],
        "duration_days": 3,
        "budget_max": 40000,
        "transport_included": False,
        "day_wise_plan": [],
    }
    itinerary.update(overrides)
    return itinerary


class FakeCatalog:
    """In-memory stand-in for CatalogRepository."""

    def __init__(self, circuits=(), homestays=(), itineraries=()):
        self.circuits = list(circuits)
        self.homestays = list(homestays)
        self.itineraries = list(itineraries)
        self.created: list[tuple[str, dict]] = []
        self.saved_reviews: list[tuple] = []

    async def find_circuits(self, circuit_filter):
        return [c for c in self.circuits if circuit_filter.matches(c)]

    async def find_homestays_by_circuit(self, circuit_id):
        return [h for h in self.homestays if h["circuit_id"] == str(circuit_id)]

    async def find_itineraries(self, circuit_id=None):
        return [i for i in self.itineraries if circuit_id is None or i["circuit_id"] == str(circuit_id)]

    async def list_circuits(self, categories=None):
        if not categories:
            return list(self.circuits)
        return [c for c in self.circuits if set(c["categories"]) & set(categories)]

    async def circuit_labels(self):
        categories, experiences = [], []
        for c in self.circuits:
            categories.extend([c.get("category"), *c["categories"]])
            experiences.extend(c["experiences"])
        return {"categories": categories, "experiences": experiences}

    async def create_circuit(self, fields):
        self.created.append(("circuit", fields))
        return {"id": str(uuid.uuid4()), **fields}

    async def create_homestay(self, fields):
        self.created.append(("homestay", fields))
        return {"id": str(uuid.uuid4()), **fields, "circuit_id": str(fields["circuit_id"])}

    async def create_itinerary(self, fields):
        self.created.append(("itinerary", fields))
        return {"id": str(uuid.uuid4()), **fields, "circuit_id": str(fields["circuit_id"])}

    async def get_homestay(self, homestay_id):
        for h in self.homestays:
            if h["id"] == str(homestay_id):
                return h
        raise NotFoundError("Homestay not found")

    async def save_review(self, homestay_id, reviews, average, count):
        self.saved_reviews.append((str(homestay_id), reviews, average, count))


@pytest.fixture
def catalog():
    return FakeCatalog()


@pytest.fixture
def client(catalog):
    from circuitstay.dependencies import get_catalog
    from circuitstay.main import app

    app.dependency_overrides[get_catalog] = lambda: catalog
    yield TestClient(app)
    app.dependency_overrides.clear()
