"""
pricing.py — Price Calculation in Minor Currency Units

All arithmetic is done in integer cents. Unit prices are rounded to the
nearest cent (round-half-up) per line item before being multiplied by the
quantity, never once on the aggregate.

Calculation:
    subtotal = Σ round(price × 100) × qty
    discount = coupon table (see calc_discount_cents)
    shipping = flat fee per currency, 0 from FREE_SHIPPING_THRESHOLD_CENTS
    tax      = rate × (subtotal − discount), 0 if that base is not positive
    total    = max(0, subtotal − discount) + shipping + tax
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from .errors import OrderValidationError
from .models import Currency, OrderItem, PriceBreakdown

FREE_SHIPPING_THRESHOLD_CENTS = 5000

SHIPPING_CENTS = {
    Currency.USD: 799,
    Currency.EUR: 699,
}

TAX_RATES = {
    Currency.USD: Decimal("0.0825"),  # US Sales Tax
    Currency.EUR: Decimal("0.20"),    # VAT
}

# Prozent-Rabatte; FREESHIP gibt bewusst 0 Rabatt (Versand regelt nur der Schwellwert)
PERCENT_COUPONS = {
    "SAVE10": 10,
    "SAVE20": 20,
    "FREESHIP": 0,
}

WELCOME_PREFIX = "WELCOME"
WELCOME_PERCENT = 5
WELCOME_MAX_CENTS = 1500

CURRENCY_SYMBOLS = {
    Currency.USD: "$",
    Currency.EUR: "€",
}


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def to_cents(amount) -> int:
    """Converts a major-unit amount to cents. str() keeps 10.005 from becoming 1000.4999..."""
    return round_half_up(Decimal(str(amount)) * 100)


def normalize_coupon(coupon_code: Optional[str]) -> str:
    return (coupon_code or "").strip().upper()


def calc_subtotal_cents(items: Iterable[OrderItem]) -> int:
    return sum(to_cents(item.price) * item.qty for item in items)


def calc_discount_cents(subtotal_cents: int, coupon_code: Optional[str]) -> int:
    """
    Resolves the coupon code against the fixed coupon table.

    Args:
        subtotal_cents (int): Order subtotal in cents.
        coupon_code (Optional[str]): Raw coupon code; trimmed and upper-cased here.

    Returns:
        int: Discount in cents (floored). 0 for an absent or empty code.

    Raises:
        OrderValidationError: 'unknown coupon' for any code not in the table.
    """
    code = normalize_coupon(coupon_code)
    if not code:
        return 0

    if code in PERCENT_COUPONS:
        return subtotal_cents * PERCENT_COUPONS[code] // 100
    if code.startswith(WELCOME_PREFIX):
        return min(WELCOME_MAX_CENTS, subtotal_cents * WELCOME_PERCENT // 100)

    raise OrderValidationError("unknown coupon")


def calc_shipping_cents(subtotal_cents: int, currency: Currency) -> int:
    # Kostenloser Versand ab 50 $/€, unabhängig vom Gutschein
    if subtotal_cents >= FREE_SHIPPING_THRESHOLD_CENTS:
        return 0
    return SHIPPING_CENTS[Currency(currency)]


def calc_tax_cents(taxable_cents: int, currency: Currency) -> int:
    if taxable_cents <= 0:
        return 0
    return round_half_up(Decimal(taxable_cents) * TAX_RATES[Currency(currency)])


def calculate_totals(items: Iterable[OrderItem], coupon_code: Optional[str], currency: Currency) -> PriceBreakdown:
    """
    Computes the complete price breakdown of an order.

    Returns:
        PriceBreakdown: subtotal, discount, shipping, tax and total in cents.

    Raises:
        OrderValidationError: If the coupon code is unknown.
    """
    subtotal = calc_subtotal_cents(items)
    discount = calc_discount_cents(subtotal, coupon_code)
    shipping = calc_shipping_cents(subtotal, currency)
    tax = calc_tax_cents(subtotal - discount, currency)

    total = max(0, subtotal - discount) + shipping + tax

    return PriceBreakdown(
        subtotalCents=subtotal,
        discountCents=discount,
        shippingCents=shipping,
        taxCents=tax,
        totalCents=total,
    )


def format_money(cents: int, currency: Currency) -> str:
    """Formats cents for display, e.g. 2964 USD -> '$29.64', 1899 EUR -> '€18.99'."""
    amount = (Decimal(cents) / 100).quantize(Decimal("0.01"))
    return f"{CURRENCY_SYMBOLS[Currency(currency)]}{amount}"
