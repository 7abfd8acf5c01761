"""Homestay router — create, list, detail and reviews."""

import logging
import uuid

from fastapi import APIRouter, Body, Depends

from circuitstay.dependencies import get_catalog
from circuitstay.services.catalog_repository import CatalogRepository
from circuitstay.services.catalog_service import apply_review, build_homestay_fields, min_per_person

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", status_code=201)
async def create_homestay(
    payload: dict = Body(...),
    catalog: CatalogRepository = Depends(get_catalog),
):
    """Create a homestay. Only per-head pricing is accepted."""
    fields = build_homestay_fields(payload)
    return await catalog.create_homestay(fields)


@router.get("")
async def list_homestays(catalog: CatalogRepository = Depends(get_catalog)):
    """All homestays, featured first then newest."""
    return await catalog.list_homestays()


@router.get("/{homestay_id}")
async def get_homestay(
    homestay_id: uuid.UUID,
    catalog: CatalogRepository = Depends(get_catalog),
):
    return await catalog.get_homestay(homestay_id)


@router.get("/{homestay_id}/detail")
async def get_homestay_detail(
    homestay_id: uuid.UUID,
    catalog: CatalogRepository = Depends(get_catalog),
):
    """Rich payload for the homestay details page."""
    homestay = await catalog.get_homestay(homestay_id)
    return {
        "homestay": homestay,
        "reviews": homestay["reviews"],
        "min_per_person": min_per_person(homestay),
    }


@router.post("/{homestay_id}/reviews")
async def add_review(
    homestay_id: uuid.UUID,
    payload: dict = Body(...),
    catalog: CatalogRepository = Depends(get_catalog),
):
    """Add a review and return the recomputed rating aggregates."""
    homestay = await catalog.get_homestay(homestay_id)
    reviews, average, count = apply_review(homestay["reviews"], payload)
    await catalog.save_review(homestay_id, reviews, average, count)
    logger.info(f"Review added to homestay {homestay_id}: avg={average} count={count}")
    return {"message": "Review added", "average_rating": average, "rating_count": count}
