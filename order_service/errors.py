"""
errors.py — Error Types of the Order Pipeline

Every rejection raised by the pipeline carries a category and a reason.
The string form is "<CATEGORY>: <reason>", e.g. "VALIDATION: invalid email".

Collaborator errors (transport failures of payment or email) are never wrapped
in these types; they propagate unmodified.
"""

from typing import Optional


class OrderError(Exception):
    """Base exception for all order pipeline rejections."""
    category = "ORDER"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"{self.category}: {reason}")


class OrderValidationError(OrderError):
    """Raised when the request is malformed. No collaborator was called."""
    category = "VALIDATION"


class RiskRejectedError(OrderError):
    """Raised when a fraud heuristic rejects the order. No collaborator was called."""
    category = "RISK"


class PaymentDeclinedError(OrderError):
    """Raised when the charge was declined. No confirmation email was sent."""
    category = "PAYMENT_DECLINED"

    def __init__(self, reason: Optional[str], outcome=None):
        self.outcome = outcome
        super().__init__(reason or "unknown")
