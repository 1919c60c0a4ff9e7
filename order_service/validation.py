"""
validation.py — Fail-fast Validation of Order Requests

Checks a raw order request (mapping) before any external system is contacted.
Rules are evaluated in a fixed order and the first violation is raised as
OrderValidationError; errors are not aggregated.
"""

import math
from collections.abc import Mapping, Sequence
from decimal import Decimal

from .errors import OrderValidationError
from .models import Currency

SUPPORTED_CURRENCIES = {c.value for c in Currency}


def _is_positive_integer(value) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value > 0
    if isinstance(value, float):
        return value.is_integer() and value > 0
    return False


def _is_positive_amount(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return False
    # price is stored as float; anything that does not fit is rejected here
    try:
        as_float = float(value)
    except (OverflowError, ValueError):
        return False
    if not math.isfinite(as_float):
        return False
    return value > 0


def _field(obj, name):
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def validate_order_request(order_data: Mapping) -> None:
    """
    Validates a raw order request.

    Args:
        order_data (Mapping): Request with keys 'userEmail', 'items', 'couponCode', 'currency'.
            Items may be mappings or OrderItem instances with 'sku', 'qty' and 'price'.

    Raises:
        OrderValidationError: On the first rule that fails, in this order:
            invalid email, empty items, invalid sku / invalid qty / invalid price (per item),
            invalid currency, unknown coupon (non-string coupon code).
    """
    email = order_data.get("userEmail")
    if not isinstance(email, str) or not email or "@" not in email:
        raise OrderValidationError("invalid email")

    items = order_data.get("items")
    if isinstance(items, (str, bytes)) or not isinstance(items, Sequence) or len(items) == 0:
        raise OrderValidationError("empty items")

    for item in items:
        sku = _field(item, "sku")
        if not isinstance(sku, str) or not sku:
            raise OrderValidationError("invalid sku")
        if not _is_positive_integer(_field(item, "qty")):
            raise OrderValidationError("invalid qty")
        if not _is_positive_amount(_field(item, "price")):
            raise OrderValidationError("invalid price")

    currency = order_data.get("currency")
    if isinstance(currency, Currency):
        currency = currency.value
    if currency not in SUPPORTED_CURRENCIES:
        raise OrderValidationError("invalid currency")

    coupon = order_data.get("couponCode")
    if coupon is not None and not isinstance(coupon, str):
        raise OrderValidationError("unknown coupon")
