"""Itinerary router — CRUD, preference matching and plan generation."""

import logging
import uuid

from fastapi import APIRouter, Body, Depends

from circuitstay.dependencies import get_catalog
from circuitstay.schemas.planning import GenerationRequest, MatchQuery
from circuitstay.services.catalog_repository import CatalogRepository
from circuitstay.services.catalog_service import build_itinerary_fields
from circuitstay.services.itinerary_generator import generate_itinerary
from circuitstay.services.match_scorer import match_itineraries
from circuitstay.services.normalize import validate_payload

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", status_code=201)
async def create_itinerary(
    payload: dict = Body(...),
    catalog: CatalogRepository = Depends(get_catalog),
):
    fields = build_itinerary_fields(payload)
    return await catalog.create_itinerary(fields)


@router.get("")
async def list_itineraries(catalog: CatalogRepository = Depends(get_catalog)):
    """All itineraries with circuit and per-day homestays resolved."""
    return await catalog.find_itineraries()


@router.post("/match")
async def match(
    payload: dict | None = Body(None),
    catalog: CatalogRepository = Depends(get_catalog),
):
    """Itineraries passing at least half of the preference checks."""
    query = validate_payload(MatchQuery, payload)
    candidates = await catalog.find_itineraries()
    matched = match_itineraries(query, candidates)
    logger.info(f"Itinerary match: {len(matched)}/{len(candidates)} candidates kept")
    return {"success": True, "matched_itineraries": matched}


@router.post("/generate")
async def generate(
    payload: dict | None = Body(None),
    catalog: CatalogRepository = Depends(get_catalog),
):
    """Build a day-wise plan from the best circuit and affordable homestay."""
    request = validate_payload(GenerationRequest, payload)
    plan = await generate_itinerary(
        request,
        catalog.find_circuits,
        catalog.find_homestays_by_circuit,
    )
    logger.info(
        f"Generated {request.days}-day plan in {plan['circuit']} "
        f"at {plan['homestay']['name']}, total {plan['total_cost']}"
    )
    return plan


@router.get("/{itinerary_id}")
async def get_itinerary(
    itinerary_id: uuid.UUID,
    catalog: CatalogRepository = Depends(get_catalog),
):
    return await catalog.get_itinerary(itinerary_id)
