"""Public checkout API used by the HTTP layer and administrative tooling."""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from bookit.checkout.bundle_checkout import BundleCheckoutOrchestrator, CheckoutMode, CheckoutOverrides
from bookit.checkout.errors import CheckoutError, NotFoundError
from bookit.checkout.hierarchy import HierarchyResolver
from bookit.checkout.item_checkout import ItemCheckoutService
from bookit.checkout.locks import checkout_locks
from bookit.checkout.pricing import ItemPrice, PricingEngine
from bookit.config import settings
from bookit.models.booking import Booking
from bookit.repositories.resources import ResourceRepository
from bookit.schemas.auth import CurrentUser
from bookit.schemas.checkout import CheckoutRequest, ItemValidationRequest, ManualBookingRequest
from bookit.services.permission_service import PermissionOracle

logger = logging.getLogger(__name__)


async def validate_item(
    db: AsyncSession,
    tenant_id: str,
    request: ItemValidationRequest,
    user: CurrentUser | None,
) -> ItemPrice:
    """Run the item pipeline and return prices. Nothing is stored, no coupon is redeemed."""
    repository = ResourceRepository(db)
    permissions = PermissionOracle(db)
    if await repository.get_tenant_config(tenant_id) is None:
        raise NotFoundError("Tenant", tenant_id)

    resolver = await HierarchyResolver.for_tenant(repository, tenant_id)
    service = ItemCheckoutService(
        repository,
        permissions,
        resolver,
        PricingEngine(repository, permissions),
        user,
        tenant_id,
        request.time_begin,
        request.time_end,
        request.bookable_id,
        request.amount,
        coupon_code=request.coupon_code,
    )
    return await service.validate()


def overrides_from_request(request: CheckoutRequest) -> CheckoutOverrides:
    if not isinstance(request, ManualBookingRequest):
        return CheckoutOverrides()
    return CheckoutOverrides(
        is_committed=request.is_committed,
        is_payed=request.is_payed,
        is_rejected=request.is_rejected,
        payment_method=request.payment_method,
        price_eur=request.price_eur,
    )


async def create_booking(
    db: AsyncSession,
    tenant_id: str,
    request: CheckoutRequest,
    user: CurrentUser | None,
    manual: bool = False,
    simulate: bool = False,
) -> Booking:
    """Check, price and persist a bundle checkout.

    With ``simulate`` the booking is assembled and returned but neither
    stored nor counted against the coupon. Otherwise the coupon redemption
    and the booking are committed together while the locks of every
    affected resource are held.
    """
    checkout_id = uuid.uuid4().hex[:8]
    repository = ResourceRepository(db)
    orchestrator = BundleCheckoutOrchestrator(
        repository,
        PermissionOracle(db),
        user,
        tenant_id,
        request,
        mode=CheckoutMode.MANUAL if manual else CheckoutMode.AUTOMATIC,
        overrides=overrides_from_request(request) if manual else None,
    )

    logger.info(
        "%s, cid %s -- %s checkout started by user %s (%s item(s), simulate=%s)",
        tenant_id,
        checkout_id,
        orchestrator.mode.value,
        user.id if user else "anonymous",
        len(request.bookable_items),
        simulate,
    )

    try:
        await orchestrator.init()
        keys = orchestrator.lock_keys() if settings.serialize_checkouts else set()
        if keys and request.coupon_code:
            keys.add((tenant_id, f"coupon:{request.coupon_code}"))

        async with checkout_locks.hold(keys):
            booking = await orchestrator.prepare_booking()
            if simulate:
                logger.info("%s, cid %s -- Simulated booking %s, nothing stored", tenant_id, checkout_id, booking.id)
                return booking

            coupon = orchestrator.pricing.applied_coupon
            if coupon is not None:
                await orchestrator.pricing.redeem_coupon(coupon)

            booking = await repository.store_booking(booking)
            await repository.commit()
    except CheckoutError as exc:
        logger.warning("%s, cid %s -- Checkout rejected: %s", tenant_id, checkout_id, exc.message)
        raise

    logger.info(
        "%s, cid %s -- Booking %s stored (%s EUR, committed=%s, payed=%s)",
        tenant_id,
        checkout_id,
        booking.id,
        booking.price_eur,
        booking.is_committed,
        booking.is_payed,
    )
    return booking
