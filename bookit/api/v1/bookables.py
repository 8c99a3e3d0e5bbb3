"""Bookables API router."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bookit.api.deps import get_db
from bookit.checkout.opening_hours import related_opening_hours
from bookit.repositories.resources import ResourceRepository
from bookit.schemas.bookable import RelatedOpeningHoursResponse

router = APIRouter(prefix="/api/v1/tenants/{tenant_id}/bookables", tags=["bookables"])


@router.get("/{bookable_id}/opening-hours", response_model=RelatedOpeningHoursResponse)
async def get_opening_hours(
    tenant_id: str,
    bookable_id: str,
    db: AsyncSession = Depends(get_db),
) -> RelatedOpeningHoursResponse:
    """Opening hours of a bookable merged with those of its ancestors."""
    return await related_opening_hours(ResourceRepository(db), bookable_id, tenant_id)
