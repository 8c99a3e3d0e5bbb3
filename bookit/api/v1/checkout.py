"""Checkout API router.

Item validation, bundle checkout (optionally simulated) and manual
bookings by tenant staff. Checkout errors are rendered by the handler
registered in ``bookit.main``.
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from bookit.api.deps import get_current_user, get_db, get_optional_user
from bookit.checkout import booking_service
from bookit.schemas.auth import CurrentUser
from bookit.schemas.checkout import (
    BookingResponse,
    CheckoutRequest,
    ItemPriceResponse,
    ItemValidationRequest,
    ManualBookingRequest,
)
from bookit.services.permission_service import MANAGE_BOOKINGS, PermissionOracle

router = APIRouter(prefix="/api/v1/tenants/{tenant_id}", tags=["checkout"])


@router.post("/checkout/validate", response_model=ItemPriceResponse)
async def validate_item(
    tenant_id: str,
    body: ItemValidationRequest,
    current_user: CurrentUser | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
) -> ItemPriceResponse:
    """Check a single item and return its prices without booking it."""
    price = await booking_service.validate_item(db, tenant_id, body, current_user)
    return ItemPriceResponse(**asdict(price))


@router.post("/checkout", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def checkout(
    tenant_id: str,
    body: CheckoutRequest,
    response: Response,
    simulate: bool = Query(False, description="Assemble the booking without storing it"),
    current_user: CurrentUser | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
) -> BookingResponse:
    booking = await booking_service.create_booking(db, tenant_id, body, current_user, simulate=simulate)
    if simulate:
        response.status_code = status.HTTP_200_OK
    return BookingResponse.model_validate(booking)


@router.post("/bookings/manual", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_manual_booking(
    tenant_id: str,
    body: ManualBookingRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> BookingResponse:
    """Book on behalf of someone else, bypassing the validation pipeline."""
    permissions = PermissionOracle(db)
    if not await permissions.has_permission(current_user.id, tenant_id, MANAGE_BOOKINGS, "createAny"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not allowed to create bookings manually.",
        )

    booking = await booking_service.create_booking(db, tenant_id, body, current_user, manual=True)
    return BookingResponse.model_validate(booking)
