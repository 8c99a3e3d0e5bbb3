"""Human-readable booking references such as ``ABCD-EFGH``."""

import logging
import secrets
from collections.abc import Awaitable, Callable

from bookit.checkout.errors import ReferenceGenerationExhausted
from bookit.config import settings

logger = logging.getLogger(__name__)


def random_reference(
    length: int | None = None,
    chunk_length: int | None = None,
    alphabet: str | None = None,
) -> str:
    """Draw ``length`` characters and join them in ``chunk_length`` groups with ``-``."""
    length = length or settings.booking_reference_length
    chunk_length = chunk_length or settings.booking_reference_chunk_length
    alphabet = alphabet or settings.booking_reference_alphabet

    chars = "".join(secrets.choice(alphabet) for _ in range(length))
    return "-".join(chars[i : i + chunk_length] for i in range(0, length, chunk_length))


async def generate_booking_reference(
    exists: Callable[[str], Awaitable[bool]],
    length: int | None = None,
    chunk_length: int | None = None,
    alphabet: str | None = None,
    ensure_unique: bool = True,
    max_attempts: int | None = None,
) -> str:
    """Return a reference that ``exists`` reports as unused.

    Raises ``ReferenceGenerationExhausted`` once ``max_attempts`` candidates
    all collided.
    """
    max_attempts = max_attempts or settings.booking_reference_max_attempts

    for attempt in range(1, max_attempts + 1):
        reference = random_reference(length, chunk_length, alphabet)
        if not ensure_unique or not await exists(reference):
            return reference
        logger.warning("Booking reference %s already taken (attempt %s/%s)", reference, attempt, max_attempts)

    raise ReferenceGenerationExhausted(
        f"Could not generate a unique booking reference after {max_attempts} attempts."
    )
