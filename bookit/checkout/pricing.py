"""Item pricing: category rates, VAT, coupons and free-booking entitlements.

Money is handled as ``Decimal`` and rounded half-up to cents after every
step. Item prices are line totals, i.e. already multiplied by the amount.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from bookit.checkout.errors import CouponInvalidError, NotFoundError
from bookit.models.bookable import Bookable, PriceCategory
from bookit.models.coupon import Coupon, CouponType
from bookit.repositories.resources import ResourceRepository
from bookit.schemas.auth import CurrentUser
from bookit.services.permission_service import PermissionOracle
from bookit.timeutils import local_now

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def round_eur(value: Decimal | int | float | str) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def booking_duration_minutes(time_begin: datetime | None, time_end: datetime | None) -> int:
    if time_begin is None or time_end is None:
        return 0
    return round((time_end - time_begin).total_seconds() / 60)


def price_multiplier(price_category: str | None, duration_minutes: int) -> Decimal:
    """per-item -> 1, per-hour -> hours, per-day -> days; unknown categories count as per-item."""
    if price_category == PriceCategory.PER_HOUR.value:
        return Decimal(duration_minutes) / Decimal(60)
    if price_category == PriceCategory.PER_DAY.value:
        return Decimal(duration_minutes) / Decimal(1440)
    return Decimal(1)


def regular_price(
    bookable: Bookable,
    time_begin: datetime | None,
    time_end: datetime | None,
    amount: int,
) -> Decimal:
    minutes = booking_duration_minutes(time_begin, time_end)
    price = Decimal(str(bookable.price_eur or 0)) * price_multiplier(bookable.price_category, minutes) * amount
    return max(ZERO, round_eur(price))


def gross_price(net_price: Decimal, value_added_tax: Decimal | None) -> Decimal:
    """Add VAT, given in percent."""
    rate = Decimal(str(value_added_tax or 0)) / Decimal(100)
    return round_eur(net_price * (1 + rate))


def apply_discount(price: Decimal, coupon: Coupon) -> Decimal:
    discount = Decimal(str(coupon.discount or 0))
    if coupon.type == CouponType.PERCENTAGE.value:
        return max(ZERO, round_eur(price * (1 - discount / Decimal(100))))
    if coupon.type == CouponType.FIXED.value:
        return max(ZERO, round_eur(price - discount))
    return price


@dataclass(frozen=True)
class ItemPrice:
    regular_price_eur: Decimal
    regular_gross_price_eur: Decimal
    user_price_eur: Decimal
    user_gross_price_eur: Decimal


class PricingEngine:
    """Prices items for one checkout.

    A coupon code is looked up at most once per engine and only for items
    the user has to pay for. ``applied_coupon`` tells the caller whether a
    redemption is due; redeeming is a separate step so that a checkout
    counts one usage no matter how many items or units it covers.
    """

    def __init__(self, repository: ResourceRepository, permissions: PermissionOracle) -> None:
        self.repository = repository
        self.permissions = permissions
        self.applied_coupon: Coupon | None = None
        self._coupons: dict[tuple[str, str], Coupon] = {}

    async def resolve_coupon(self, coupon_code: str, tenant_id: str) -> Coupon:
        key = (tenant_id, coupon_code)
        if key in self._coupons:
            return self._coupons[key]

        coupon = await self.repository.get_coupon(coupon_code, tenant_id)
        if coupon is None:
            raise NotFoundError("Coupon", coupon_code)
        if not coupon.is_valid(local_now()):
            raise CouponInvalidError(f"Coupon {coupon_code} is expired or has been used up.")

        self._coupons[key] = coupon
        return coupon

    async def has_free_booking_entitlement(
        self,
        user: CurrentUser | None,
        bookable: Bookable,
        tenant_id: str,
    ) -> bool:
        if user is None or user.tenant_id != bookable.tenant_id:
            return False
        if user.id in (bookable.free_booking_users or []):
            return True
        role_users = await self.permissions.users_with_roles(tenant_id, bookable.free_booking_roles or [])
        return user.id in role_users

    async def price_item(
        self,
        user: CurrentUser | None,
        bookable: Bookable,
        tenant_id: str,
        time_begin: datetime | None,
        time_end: datetime | None,
        amount: int,
        coupon_code: str | None = None,
    ) -> ItemPrice:
        vat = bookable.price_value_added_tax
        regular = regular_price(bookable, time_begin, time_end, amount)

        if await self.has_free_booking_entitlement(user, bookable, tenant_id):
            logger.info(
                "User %s may book bookable %s for free, setting price to 0",
                user.id if user else None,
                bookable.id,
            )
            user_price = ZERO
        elif coupon_code:
            coupon = await self.resolve_coupon(coupon_code, tenant_id)
            user_price = apply_discount(regular, coupon)
            self.applied_coupon = coupon
        else:
            user_price = regular

        return ItemPrice(
            regular_price_eur=regular,
            regular_gross_price_eur=gross_price(regular, vat),
            user_price_eur=user_price,
            user_gross_price_eur=gross_price(user_price, vat),
        )

    async def redeem_coupon(self, coupon: Coupon) -> Coupon:
        """Count one usage of ``coupon`` and persist it."""
        coupon.used_amount = (coupon.used_amount or 0) + 1
        logger.info(
            "Coupon %s redeemed (%s/%s) for tenant %s",
            coupon.id,
            coupon.used_amount,
            coupon.max_amount if coupon.max_amount is not None else "unlimited",
            coupon.tenant_id,
        )
        return await self.repository.store_coupon(coupon)
