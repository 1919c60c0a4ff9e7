"""
risk.py — Fraud Heuristics

Applied after the total is known and before the payment is charged.
Rules are checked in order; the first match rejects the order.
"""

from .errors import RiskRejectedError

BLOCKED_EMAIL_DOMAIN = "@tempmail.com"
MAX_ORDER_CENTS = 200_000       # > $2000
PLUS_ALIAS_MAX_CENTS = 50_000   # > $500 mit "+"-Alias


def apply_risk_rules(email: str, total_cents: int) -> None:
    """
    Args:
        email (str): Normalized customer email.
        total_cents (int): Order total in cents.

    Raises:
        RiskRejectedError: 'tempmail is not allowed', 'amount too high' or 'plus-alias high amount'.
    """
    if email.endswith(BLOCKED_EMAIL_DOMAIN):
        raise RiskRejectedError("tempmail is not allowed")
    if total_cents > MAX_ORDER_CENTS:
        raise RiskRejectedError("amount too high")
    if "+" in email and total_cents > PLUS_ALIAS_MAX_CENTS:
        raise RiskRejectedError("plus-alias high amount")
