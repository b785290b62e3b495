"""Validated entry points for caller input.

The data store runs every name, note and price through these helpers before
it touches its collections, so bad input surfaces as an
:class:`~grindom.errors.InvalidInputError` instead of a half-applied change.
"""
import math
from typing import Optional, Union

from .errors import InvalidInputError

DEFAULT_CURRENCY = 'USD'
MAX_CURRENCY_CODE_LENGTH = 6


def normalize_name(value: str, field: str = 'name') -> str:
    """Strip *value*; raise if nothing is left."""
    if not isinstance(value, str):
        raise InvalidInputError(f"{field} must be a string")
    value = value.strip()
    if not value:
        raise InvalidInputError(f"{field} must not be empty")
    return value


def normalize_note(value: Optional[str]) -> Optional[str]:
    """Blank notes are stored as ``None``."""
    if value is None:
        return None
    value = str(value)
    return value if value.strip() else None


def parse_price(value: Union[str, int, float]) -> float:
    """Parse a price from user input and require it to be positive.

    Strings may use a decimal comma (``"12,5"``).
    """
    if isinstance(value, bool):
        raise InvalidInputError(f"Invalid price: {value!r}")
    if isinstance(value, str):
        text = value.strip().replace(',', '.')
        try:
            price = float(text)
        except ValueError:
            raise InvalidInputError(f"Invalid price: {value!r}") from None
    elif isinstance(value, (int, float)):
        price = float(value)
    else:
        raise InvalidInputError(f"Invalid price: {value!r}")
    if not math.isfinite(price) or price <= 0:
        raise InvalidInputError(f"Price must be greater than zero, got {value!r}")
    return price


def normalize_currency_code(value: Optional[str]) -> str:
    """Upper-case and cap at six characters; empty input means USD."""
    code = (value or '').strip().upper()[:MAX_CURRENCY_CODE_LENGTH]
    return code or DEFAULT_CURRENCY
