"""
Request validation for the REST service.

Runs before any backend call, so bad input never reaches the ledger.
"""

import math
from numbers import Real
from typing import Any, Mapping, Optional, Union

from ..backends.base import SaleRequest
from ..errors import ValidationError

REQUIRED_SALE_FIELDS = ['sellerId', 'buyerName', 'quantityKg', 'price']


def parse_number(value: Any) -> Optional[Union[int, float]]:
    """
    Interpret a JSON value as a number.

    Numbers pass through, numeric strings ("100", "12.5") are converted.
    Whole-number floats come back as ints ("1e2" and 100.0 give 100).
    Returns None for anything else, including booleans, NaN and infinity.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, Real):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        try:
            number = int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                return None
    else:
        return None

    if isinstance(number, float):
        if not math.isfinite(number):
            return None
        if number.is_integer():
            return int(number)
    return number


def parse_positive_number(value: Any, field: str) -> Union[int, float]:
    """Parse a number that must be > 0, raising ValidationError otherwise."""
    number = parse_number(value)
    if number is None or number <= 0:
        raise ValidationError(f"{field} must be a positive number")
    return number


def validate_sale_payload(payload: Optional[Mapping[str, Any]]) -> SaleRequest:
    """
    Validate a `POST /sale` body.

    Any missing or empty field (including a zero amount) is reported as a
    missing field, together with the list of required fields.

    Raises:
        ValidationError: With the message the API returns
    """
    if not isinstance(payload, Mapping):
        payload = {}

    if any(not payload.get(name) for name in REQUIRED_SALE_FIELDS):
        raise ValidationError(
            "Missing required fields",
            extra={'required': list(REQUIRED_SALE_FIELDS)},
        )

    quantity_kg = parse_positive_number(payload['quantityKg'], 'quantityKg')
    price = parse_positive_number(payload['price'], 'price')

    return SaleRequest(
        seller_id=str(payload['sellerId']),
        buyer_name=str(payload['buyerName']),
        quantity_kg=quantity_kg,
        price=price,
    )
