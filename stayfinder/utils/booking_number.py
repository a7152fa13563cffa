"""Human-facing identifiers: booking confirmation codes and mock transaction ids."""

import random
import secrets
import string

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_PREFIX = "SF-"


async def generate_booking_number(db: AsyncSession) -> str:
    """Return an unused confirmation code such as ``SF-A3B7K9``."""
    from stayfinder.models.booking import Booking

    while True:
        code = CODE_PREFIX + "".join(random.choices(CODE_ALPHABET, k=6))
        taken = await db.scalar(select(Booking.id).where(Booking.booking_number == code))
        if taken is None:
            return code


def generate_transaction_id() -> str:
    return f"txn_{secrets.token_hex(12)}"
