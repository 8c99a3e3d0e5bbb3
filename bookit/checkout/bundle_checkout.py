"""Bundle checkout: turns a multi-item request into one Booking aggregate.

The orchestrator runs one ``ItemCheckoutService`` per requested item,
aggregates prices and flags, and assembles an unsaved ``Booking``. Persisting
it, redeeming the coupon and committing is left to
``bookit.checkout.booking_service`` so that a simulated checkout can reuse
everything up to that point.
"""

import enum
import logging
from dataclasses import dataclass
from decimal import Decimal

from bookit.checkout.errors import MissingFieldsError, NotFoundError
from bookit.checkout.hierarchy import HierarchyResolver
from bookit.checkout.item_checkout import ItemCheckoutService
from bookit.checkout.pricing import ZERO, ItemPrice, PricingEngine, round_eur
from bookit.checkout.reference import generate_booking_reference
from bookit.config import settings
from bookit.models.bookable import Bookable
from bookit.models.booking import Booking, BookingItem
from bookit.repositories.resources import ResourceRepository
from bookit.schemas.auth import CurrentUser
from bookit.schemas.bookable import BookableSnapshot
from bookit.schemas.checkout import CheckoutRequest
from bookit.schemas.coupon import CouponSnapshot
from bookit.services.locker_service import LockerService
from bookit.services.permission_service import PermissionOracle
from bookit.timeutils import local_now

logger = logging.getLogger(__name__)

CONTACT_FIELDS = ("name", "company", "street", "zip_code", "location", "mail", "phone", "comment")


class CheckoutMode(str, enum.Enum):
    AUTOMATIC = "automatic"
    MANUAL = "manual"


@dataclass(frozen=True)
class CheckoutOverrides:
    """Values an administrator may force on a manual booking. ``None`` keeps the derived value."""

    is_committed: bool | None = None
    is_payed: bool | None = None
    is_rejected: bool | None = None
    payment_method: str | None = None
    price_eur: Decimal | None = None


@dataclass
class PreparedItem:
    bookable: Bookable
    amount: int
    price: ItemPrice


class BundleCheckoutOrchestrator:
    def __init__(
        self,
        repository: ResourceRepository,
        permissions: PermissionOracle,
        user: CurrentUser | None,
        tenant_id: str,
        request: CheckoutRequest,
        mode: CheckoutMode = CheckoutMode.AUTOMATIC,
        overrides: CheckoutOverrides | None = None,
    ) -> None:
        self.repository = repository
        self.permissions = permissions
        self.user = user
        self.tenant_id = tenant_id
        self.request = request
        self.mode = mode
        self.overrides = overrides or CheckoutOverrides()
        self.pricing = PricingEngine(repository, permissions)
        self.lockers = LockerService(repository)
        self.resolver: HierarchyResolver | None = None

    @property
    def is_manual(self) -> bool:
        return self.mode is CheckoutMode.MANUAL

    async def init(self) -> HierarchyResolver:
        if not self.request.bookable_items:
            raise MissingFieldsError("Missing parameters: at least one bookable item is required.")
        if await self.repository.get_tenant_config(self.tenant_id) is None:
            raise NotFoundError("Tenant", self.tenant_id)

        self.resolver = await HierarchyResolver.for_tenant(self.repository, self.tenant_id)
        for item in self.request.bookable_items:
            if self.resolver.get(item.bookable_id) is None:
                raise NotFoundError("Bookable", item.bookable_id)
        return self.resolver

    def lock_keys(self) -> set[tuple[str, str]]:
        """Every resource whose capacity this bundle reads or consumes."""
        keys = set()
        for item in self.request.bookable_items:
            related = [
                item.bookable_id,
                *(b.id for b in self.resolver.ancestors(item.bookable_id)),
                *(b.id for b in self.resolver.descendants(item.bookable_id)),
            ]
            keys.update((self.tenant_id, bookable_id) for bookable_id in related)
            bookable = self.resolver.get(item.bookable_id)
            if bookable.is_ticket and bookable.event_id:
                keys.add((self.tenant_id, f"event:{bookable.event_id}"))
        return keys

    def check_required_fields(self) -> None:
        missing: list[str] = []
        for item in self.request.bookable_items:
            bookable = self.resolver.get(item.bookable_id)
            for field in bookable.required_fields or []:
                if field in CONTACT_FIELDS and not getattr(self.request, field) and field not in missing:
                    missing.append(field)

        if missing:
            raise MissingFieldsError(f"Missing required fields: {', '.join(missing)}.")

    async def process_items(self) -> list[PreparedItem]:
        """Check (unless manual) and price every item in request order."""
        pending: dict[str, int] = {}
        prepared = []

        for item in self.request.bookable_items:
            service = ItemCheckoutService(
                self.repository,
                self.permissions,
                self.resolver,
                self.pricing,
                self.user,
                self.tenant_id,
                self.request.time_begin,
                self.request.time_end,
                item.bookable_id,
                item.amount,
                coupon_code=self.request.coupon_code,
                pending=pending,
            )
            bookable = await service.init()
            if not self.is_manual:
                await service.check_all()
            price = await service.price()

            pending[bookable.id] = pending.get(bookable.id, 0) + item.amount
            prepared.append(PreparedItem(bookable=bookable, amount=item.amount, price=price))

        return prepared

    async def assign_lockers(self, items: list[PreparedItem]) -> list[dict]:
        claimed: list[dict] = []
        for item in items:
            claimed += await self.lockers.get_available_locker(
                item.bookable,
                self.tenant_id,
                self.request.time_begin,
                self.request.time_end,
                item.amount,
                claimed=claimed,
            )
        return claimed

    @staticmethod
    def attachment_status(items: list[PreparedItem]) -> list[dict]:
        return [
            {
                "bookable_id": item.bookable.id,
                "attachment_id": attachment.get("id"),
                "title": attachment.get("title"),
                "type": attachment.get("type"),
                "url": attachment.get("url"),
                "sent": False,
            }
            for item in items
            for attachment in item.bookable.attachments or []
        ]

    def _flags(self, items: list[PreparedItem], net_total: Decimal, price_eur: Decimal) -> dict:
        is_committed = all(item.bookable.auto_commit_booking for item in items)
        is_payed = net_total == ZERO
        is_rejected = False
        payment_method = None

        if self.is_manual:
            if self.overrides.price_eur is not None and self.overrides.price_eur >= 0:
                is_payed = price_eur == ZERO
            if self.overrides.is_committed is not None:
                is_committed = self.overrides.is_committed
            if self.overrides.is_payed is not None:
                is_payed = self.overrides.is_payed
            if self.overrides.is_rejected is not None:
                is_rejected = self.overrides.is_rejected
            payment_method = self.overrides.payment_method

        return {
            "is_committed": is_committed,
            "is_payed": is_payed,
            "is_rejected": is_rejected,
            "payment_method": payment_method,
        }

    async def prepare_booking(self) -> Booking:
        """Validate and price the bundle and return the unsaved Booking."""
        if self.resolver is None:
            await self.init()
        if not self.is_manual:
            self.check_required_fields()

        items = await self.process_items()

        net_total = round_eur(sum((i.price.user_price_eur for i in items), ZERO))
        gross_total = round_eur(sum((i.price.user_gross_price_eur for i in items), ZERO))
        price_eur = gross_total
        if self.is_manual and self.overrides.price_eur is not None and self.overrides.price_eur >= 0:
            price_eur = round_eur(self.overrides.price_eur)

        reference = await generate_booking_reference(
            lambda candidate: self.repository.booking_exists(candidate, self.tenant_id),
            length=settings.booking_reference_length,
            chunk_length=settings.booking_reference_chunk_length,
            alphabet=settings.booking_reference_alphabet,
            max_attempts=settings.booking_reference_max_attempts,
        )

        coupon = self.pricing.applied_coupon
        booking = Booking(
            id=reference,
            tenant_id=self.tenant_id,
            assigned_user_id=self.user.id if self.user else None,
            time_begin=self.request.time_begin,
            time_end=self.request.time_end,
            time_created=local_now(),
            coupon_code=self.request.coupon_code,
            **{field: getattr(self.request, field) for field in CONTACT_FIELDS},
            price_eur=price_eur,
            vat_included_eur=round_eur(gross_total - net_total),
            **self._flags(items, net_total, price_eur),
            payment_provider=None,
            hooks=[],
            locker_info=await self.assign_lockers(items),
            attachment_status=self.attachment_status(items),
            coupon_used=CouponSnapshot.model_validate(coupon).model_dump(mode="json") if coupon else None,
            bookable_items=[
                BookingItem(
                    bookable_id=item.bookable.id,
                    amount=item.amount,
                    bookable_used=BookableSnapshot.model_validate(item.bookable).model_dump(mode="json"),
                    regular_price_eur=item.price.regular_price_eur,
                    regular_gross_price_eur=item.price.regular_gross_price_eur,
                    user_price_eur=item.price.user_price_eur,
                    user_gross_price_eur=item.price.user_gross_price_eur,
                )
                for item in items
            ],
        )

        logger.info(
            "Prepared %s booking %s for tenant %s: %s item(s), %s EUR",
            self.mode.value,
            booking.id,
            self.tenant_id,
            len(items),
            booking.price_eur,
        )
        return booking
