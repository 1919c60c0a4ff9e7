"""Pytest fixtures for the order pipeline tests."""

from unittest.mock import AsyncMock

import pytest

from order_service.models import PaymentOutcome, PaymentStatus
from order_service.workflow import OrderService


@pytest.fixture
def payment_client():
    """Payment collaborator that approves every charge."""
    client = AsyncMock()
    client.charge.return_value = PaymentOutcome(status=PaymentStatus.APPROVED, transactionId="tx_123")
    return client


@pytest.fixture
def email_client():
    client = AsyncMock()
    client.send.return_value = None
    return client


@pytest.fixture
def service(payment_client, email_client):
    return OrderService(payment_client, email_client)


@pytest.fixture
def make_request():
    def _make(items=None, email="user@example.com", currency="USD", coupon=None):
        return {
            "userEmail": email,
            "items": items if items is not None else [{"sku": "A-1", "qty": 2, "price": 10.0}],
            "couponCode": coupon,
            "currency": currency,
        }
    return _make
