"""Tests for the payment (HTTP) and email (SMTP) clients."""

from unittest.mock import AsyncMock

import httpx
import pytest

from mock_services import mock_payment_service
from order_service.clients import HttpPaymentClient, SmtpEmailClient
from order_service.errors import PaymentDeclinedError
from order_service.models import Currency, PaymentStatus
from order_service.workflow import OrderService


@pytest.fixture
async def http_payment_client():
    transport = httpx.ASGITransport(app=mock_payment_service.app)
    async with HttpPaymentClient(base_url="http://payment.test", transport=transport) as client:
        yield client


async def test_charge_approved(http_payment_client):
    outcome = await http_payment_client.charge(2964, Currency.USD, "ord_abc")

    assert outcome.status == PaymentStatus.APPROVED
    assert outcome.transactionId.startswith("tr_")
    assert outcome.declineReason is None


async def test_charge_declined_maps_402_to_outcome(http_payment_client, monkeypatch):
    monkeypatch.setattr(mock_payment_service, "DECLINE_ABOVE_CENTS", 1000)

    outcome = await http_payment_client.charge(2964, Currency.EUR, "ord_abc")

    assert outcome.status == PaymentStatus.DECLINED
    assert outcome.declineReason == "card declined"
    assert outcome.transactionId is None


async def test_charge_other_http_errors_propagate(http_payment_client):
    with pytest.raises(httpx.HTTPStatusError) as exc_info:
        await http_payment_client.charge(0, Currency.USD, "ord_abc")

    assert exc_info.value.response.status_code == 422


async def test_pipeline_against_mock_payment_service(http_payment_client, monkeypatch):
    monkeypatch.setattr(mock_payment_service, "DECLINE_ABOVE_CENTS", 150_000)
    email_client = AsyncMock()
    service = OrderService(http_payment_client, email_client)

    result = await service.create_order({
        "userEmail": "buyer@example.com",
        "items": [{"sku": "A-1", "qty": 1, "price": 10.0}],
        "currency": "EUR",
    })
    assert result.totalCents == 1899
    assert result.payment.transactionId.startswith("tr_")

    # 150000 + 12375 tax exceeds the mock's decline limit
    with pytest.raises(PaymentDeclinedError, match="PAYMENT_DECLINED: card declined"):
        await service.create_order({
            "userEmail": "buyer@example.com",
            "items": [{"sku": "A-1", "qty": 15, "price": 100.0}],
            "currency": "USD",
        })

    email_client.send.assert_awaited_once()


class FakeSMTP:
    instances = []

    def __init__(self, host, port):
        self.host = host
        self.port = port
        self.started_tls = False
        self.login_args = None
        self.sent = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def starttls(self):
        self.started_tls = True

    def login(self, user, password):
        self.login_args = (user, password)

    def sendmail(self, sender, recipients, message):
        self.sent.append((sender, recipients, message))


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr("order_service.clients.smtplib.SMTP", FakeSMTP)
    return FakeSMTP


async def test_smtp_email_client_sends_plain_text(fake_smtp):
    client = SmtpEmailClient(host="mail.test", port=2525, user="bot", password="secret", sender="shop@example.com")

    await client.send("user@example.com", "Order ord_1 confirmed", "Total: $29.64")

    smtp = fake_smtp.instances[0]
    assert (smtp.host, smtp.port) == ("mail.test", 2525)
    assert smtp.started_tls
    assert smtp.login_args == ("bot", "secret")
    sender, recipients, message = smtp.sent[0]
    assert sender == "shop@example.com"
    assert recipients == ["user@example.com"]
    assert "Subject: Order ord_1 confirmed" in message


async def test_smtp_email_client_skips_login_without_credentials(fake_smtp):
    client = SmtpEmailClient(host="mail.test", port=25, user=None, password=None)

    await client.send("user@example.com", "Hi", "Body")

    assert fake_smtp.instances[0].login_args is None


@pytest.mark.parametrize("body", [["declined"], "declined", 42])
async def test_charge_declined_with_non_object_body(body):
    transport = httpx.MockTransport(lambda request: httpx.Response(402, json=body))
    async with HttpPaymentClient(base_url="http://payment.test", transport=transport) as client:
        outcome = await client.charge(2964, Currency.USD, "ord_abc")

    assert outcome.status == PaymentStatus.DECLINED
    assert outcome.declineReason is None
