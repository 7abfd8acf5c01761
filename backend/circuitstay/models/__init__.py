from circuitstay.models.circuit import Circuit
from circuitstay.models.homestay import Homestay
from circuitstay.models.itinerary import Itinerary

__all__ = [
    "Circuit",
    "Homestay",
    "Itinerary",
]
