"""Circuit router — create, list, label pickers, category matching and deep detail."""

import logging
import uuid

from fastapi import APIRouter, Body, Depends

from circuitstay.dependencies import get_catalog
from circuitstay.errors import ValidationError
from circuitstay.services.catalog_repository import CatalogRepository
from circuitstay.services.catalog_service import (
    THEMES,
    build_circuit_fields,
    dedupe_local_guides,
    label_options,
)
from circuitstay.services.normalize import parse_label_list

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", status_code=201)
async def create_circuit(
    payload: dict = Body(...),
    catalog: CatalogRepository = Depends(get_catalog),
):
    """Create a circuit. Category and tag labels are normalized on write."""
    fields = build_circuit_fields(payload)
    return await catalog.create_circuit(fields)


@router.get("")
async def list_circuits(catalog: CatalogRepository = Depends(get_catalog)):
    """All circuits, newest first."""
    return await catalog.list_circuits()


@router.post("/match")
async def match_circuits(
    payload: dict = Body(...),
    catalog: CatalogRepository = Depends(get_catalog),
):
    """Circuits sharing at least one category with the request."""
    categories = payload.get("categories")
    if isinstance(categories, list):
        categories = parse_label_list(categories, "categories")
    if not isinstance(categories, list) or not categories:
        raise ValidationError("Categories must be a non-empty array.")

    circuits = await catalog.list_circuits(categories)
    return {"success": True, "data": circuits}


@router.get("/categories")
async def list_categories(catalog: CatalogRepository = Depends(get_catalog)):
    labels = await catalog.circuit_labels()
    return label_options(labels["categories"])


@router.get("/experiences")
async def list_experiences(catalog: CatalogRepository = Depends(get_catalog)):
    labels = await catalog.circuit_labels()
    return label_options(labels["experiences"], with_icon=True)


@router.get("/themes")
async def list_themes():
    return THEMES


@router.get("/{circuit_id}")
async def get_circuit_detail(
    circuit_id: uuid.UUID,
    catalog: CatalogRepository = Depends(get_catalog),
):
    """Circuit with its homestays, itineraries and de-duplicated local guides."""
    detail = await catalog.circuit_detail(circuit_id)
    detail["local_guides"] = dedupe_local_guides(detail["itineraries"])
    return detail
