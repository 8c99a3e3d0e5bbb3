"""Validation pipeline and pricing for a single bookable item."""

import logging
from datetime import datetime

from bookit.checkout.availability import CapacityChecker
from bookit.checkout.errors import (
    AdvanceBookingLimitError,
    BookingDurationError,
    NotBookableError,
    NotFoundError,
    OpeningHoursConflictError,
    PermissionDeniedError,
    TimeWindowRequiredError,
)
from bookit.checkout.hierarchy import HierarchyResolver
from bookit.checkout.opening_hours import has_conflict
from bookit.checkout.pricing import ItemPrice, PricingEngine, booking_duration_minutes
from bookit.models.bookable import Bookable
from bookit.repositories.resources import ResourceRepository
from bookit.schemas.auth import CurrentUser
from bookit.services.permission_service import MANAGE_BOOKABLES, PermissionOracle
from bookit.timeutils import add_months, local_now

logger = logging.getLogger(__name__)


class ItemCheckoutService:
    """Checks one ``{bookable, amount}`` request and prices it.

    ``check_all`` runs the steps in a fixed order and stops at the first
    failing one. Prices are only meaningful once every check has passed.
    """

    def __init__(
        self,
        repository: ResourceRepository,
        permissions: PermissionOracle,
        resolver: HierarchyResolver,
        pricing: PricingEngine,
        user: CurrentUser | None,
        tenant_id: str,
        time_begin: datetime | None,
        time_end: datetime | None,
        bookable_id: str,
        amount: int,
        coupon_code: str | None = None,
        pending: dict[str, int] | None = None,
    ) -> None:
        self.repository = repository
        self.permissions = permissions
        self.resolver = resolver
        self.pricing = pricing
        self.user = user
        self.tenant_id = tenant_id
        self.time_begin = time_begin
        self.time_end = time_end
        self.bookable_id = bookable_id
        self.amount = int(amount)
        self.coupon_code = coupon_code
        self.capacity = CapacityChecker(repository, resolver, time_begin, time_end, pending)
        self.bookable: Bookable | None = None

    async def init(self) -> Bookable:
        self.bookable = self.resolver.get(self.bookable_id)
        if self.bookable is None:
            raise NotFoundError("Bookable", self.bookable_id)
        self.capacity.time_bound = self.bookable.is_time_bound
        return self.bookable

    @property
    def _user_id(self) -> str | None:
        return self.user.id if self.user else None

    def _require_time_window(self) -> None:
        if self.time_begin is None or self.time_end is None:
            raise TimeWindowRequiredError(
                f"Bookable {self.bookable.title} is time related, a booking time window is required."
            )

    async def _allow_checkout(self) -> bool:
        bookable = self.bookable
        if await self.permissions.has_permission(self._user_id, self.tenant_id, MANAGE_BOOKABLES, "readAny"):
            return True

        is_owner = self._user_id is not None and bookable.owner_user_id == self._user_id
        if is_owner and await self.permissions.has_permission(
            self._user_id, self.tenant_id, MANAGE_BOOKABLES, "readOwn"
        ):
            return True

        permitted = set(bookable.permitted_users or [])
        permitted.update(await self.permissions.users_with_roles(self.tenant_id, bookable.permitted_roles or []))
        return not permitted or self._user_id in permitted

    # -- pipeline steps, in execution order ---------------------------------

    async def check_permissions(self) -> None:
        if self.bookable.is_bookable is not True:
            raise NotBookableError(f"Bookable {self.bookable.title} is not bookable.")
        if not await self._allow_checkout():
            raise PermissionDeniedError(f"You are not allowed to book {self.bookable.title}.")

    async def check_opening_hours(self) -> None:
        if not self.bookable.is_time_bound or self.bookable.is_long_range:
            return

        self._require_time_window()
        for bookable in [self.bookable, *self.resolver.ancestors(self.bookable.id)]:
            if has_conflict(bookable, self.time_begin, self.time_end):
                raise OpeningHoursConflictError(
                    f"The selected booking time is outside the opening hours of {bookable.title}."
                )

    async def check_booking_duration(self) -> None:
        if not self.bookable.is_schedule_related:
            return

        self._require_time_window()
        hours = booking_duration_minutes(self.time_begin, self.time_end) / 60
        minimum = self.bookable.min_booking_duration
        maximum = self.bookable.max_booking_duration

        if minimum and hours < minimum:
            raise BookingDurationError(f"The booking must last at least {minimum:g} hours.")
        if maximum and hours > maximum:
            raise BookingDurationError(f"The booking must not last longer than {maximum:g} hours.")

    async def check_availability(self) -> None:
        await self.capacity.check_availability(self.bookable, self.amount)

    async def check_event_seats(self) -> None:
        await self.capacity.check_event_seats(self.bookable, self.amount)

    async def check_parent_availability(self) -> None:
        await self.capacity.check_parent_availability(self.bookable, self.amount)

    async def check_child_bookings(self) -> None:
        await self.capacity.check_child_bookings(self.bookable)

    async def check_max_booking_date(self) -> None:
        tenant = await self.repository.get_tenant_config(self.tenant_id)
        months = tenant.max_booking_advance_in_months if tenant is not None else None
        if not months or self.time_begin is None:
            return

        if self.time_begin > add_months(local_now(), months):
            raise AdvanceBookingLimitError(f"Bookings can be made at most {months} months in advance.")

    async def check_all(self) -> None:
        if self.bookable is None:
            await self.init()

        await self.check_permissions()
        await self.check_opening_hours()
        await self.check_booking_duration()
        await self.check_availability()
        await self.check_event_seats()
        await self.check_parent_availability()
        await self.check_child_bookings()
        await self.check_max_booking_date()

        logger.debug(
            "Item %s x%s passed all checks for tenant %s",
            self.bookable_id,
            self.amount,
            self.tenant_id,
        )

    async def price(self) -> ItemPrice:
        if self.bookable is None:
            await self.init()
        return await self.pricing.price_item(
            self.user,
            self.bookable,
            self.tenant_id,
            self.time_begin,
            self.time_end,
            self.amount,
            self.coupon_code,
        )

    async def validate(self) -> ItemPrice:
        """Run every check and return the prices, without any side effects."""
        await self.check_all()
        return await self.price()
