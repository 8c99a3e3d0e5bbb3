"""Checkout error taxonomy.

Every error carries a human-readable ``message`` that is safe to show to the
person booking, and the HTTP status it maps to at the API boundary.
Repository (SQLAlchemy) errors are not wrapped and propagate as they are.
"""


class CheckoutError(Exception):
    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(CheckoutError):
    """A request that cannot be booked as asked."""

    status_code = 409


class MissingFieldsError(ValidationError):
    status_code = 400


class PermissionDeniedError(ValidationError):
    status_code = 403


class NotBookableError(ValidationError):
    pass


class TimeWindowRequiredError(ValidationError):
    pass


class OpeningHoursConflictError(ValidationError):
    pass


class BookingDurationError(ValidationError):
    pass


class CapacityExceededError(ValidationError):
    pass


class EventSoldOutError(ValidationError):
    pass


class ParentUnavailableError(ValidationError):
    pass


class ChildBookedError(ValidationError):
    pass


class AdvanceBookingLimitError(ValidationError):
    pass


class CouponInvalidError(ValidationError):
    pass


class LockerUnavailableError(ValidationError):
    pass


class NotFoundError(CheckoutError):
    status_code = 404

    def __init__(self, kind: str, identifier: str | None) -> None:
        super().__init__(f"{kind} {identifier} not found")
        self.kind = kind
        self.identifier = identifier


class ReferenceGenerationExhausted(CheckoutError):
    """No free booking reference could be drawn within the attempt budget."""

    status_code = 503
