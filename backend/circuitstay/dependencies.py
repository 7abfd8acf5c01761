from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from circuitstay.database import get_db
from circuitstay.services.catalog_repository import CatalogRepository


async def get_catalog(db: AsyncSession = Depends(get_db)) -> CatalogRepository:
    """Catalog repository bound to the request's database session."""
    return CatalogRepository(db)
