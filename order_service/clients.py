"""
This module provides the collaborator contracts used by the order pipeline and their default implementations:
- PaymentClient / EmailClient: the async interfaces the pipeline depends on
- HttpPaymentClient: Payment Service (REST API)
- SmtpEmailClient: confirmation mail delivery (SMTP)
Each class encapsulates its protocol logic, error handling, and connection management.
"""

import asyncio
import logging
import os
import smtplib
import uuid
from email.mime.text import MIMEText
from typing import Optional, Protocol

import httpx

from .models import Currency, PaymentOutcome, PaymentStatus

# Service-Adressen (normalerweise aus Env Vars)
PAYMENT_SERVICE_URL = os.environ.get("PAYMENT_SERVICE_URL", "http://payment_service:8001")
SMTP_HOST = os.environ.get("SMTP_HOST", "localhost")
SMTP_PORT = int(os.environ.get("SMTP_PORT", "587"))
SMTP_USER = os.environ.get("SMTP_USER")
SMTP_PASS = os.environ.get("SMTP_PASS")
SMTP_FROM = os.environ.get("SMTP_FROM", "orders@example.com")

log = logging.getLogger(__name__)


class PaymentClient(Protocol):
    async def charge(self, amount_cents: int, currency: Currency, order_id: str) -> PaymentOutcome:
        ...


class EmailClient(Protocol):
    async def send(self, to: str, subject: str, body: str) -> None:
        ...


# --- Payment Client (REST) ---
class HttpPaymentClient:
    """
    Client for the Payment Service (REST API).
    Translates charge responses into PaymentOutcome values.
    """
    def __init__(self, base_url: str = PAYMENT_SERVICE_URL, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initializes the async HTTP client with proper timeout configuration.
        Args:
            base_url (str): Base URL of the Payment Service.
            transport (httpx.AsyncBaseTransport, optional): Custom transport (e.g. ASGI app in tests).
        """
        timeout_config = httpx.Timeout(5.0, read=8.0)
        self.client = httpx.AsyncClient(base_url=base_url, timeout=timeout_config, transport=transport)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        """Closes the HTTP client session."""
        await self.client.aclose()

    async def charge(self, amount_cents: int, currency: Currency, order_id: str) -> PaymentOutcome:
        """
        Creates a new charge via the Payment Service REST API.
        Args:
            amount_cents (int): Charge amount in cents.
            currency (Currency): 'USD' or 'EUR'.
            order_id (str): Unique order identifier, sent as referenceId.
        Returns:
            PaymentOutcome: approved with transactionId, or declined with declineReason (HTTP 402).
        Raises:
            httpx.TimeoutException: If the service does not respond within the timeout.
            httpx.HTTPStatusError: If the service returns an error status other than 402.
        """
        idempotency_key = str(uuid.uuid4())
        payload = {
            "amount": amount_cents,
            "currency": Currency(currency).value,
            "referenceId": order_id
        }
        headers = {"Idempotency-Key": idempotency_key}

        try:
            response = await self.client.post("/v2/charges", json=payload, headers=headers)
            response.raise_for_status()  # Löst HTTPStatusError bei 4xx/5xx aus
        except httpx.TimeoutException:
            log.error(f"[Order: {order_id}] Payment Service Timeout. Status unbekannt.")
            # Ein Retry wäre nur mit demselben Idempotenz-Key sicher; das entscheidet der Aufrufer.
            raise
        except httpx.HTTPStatusError as e:
            # Speziell für 402 (Payment Declined)
            if e.response.status_code == 402:
                reason = _decline_reason(e.response)
                log.warning(f"[Order: {order_id}] Zahlung abgelehnt: {reason}")
                return PaymentOutcome(status=PaymentStatus.DECLINED, declineReason=reason)
            log.error(f"[Order: {order_id}] HTTP-Fehler beim Payment: {e}")
            raise

        data = response.json()
        return PaymentOutcome(status=PaymentStatus.APPROVED, transactionId=data.get("transactionId"))


def _decline_reason(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    detail = body.get("detail")
    if isinstance(detail, dict):
        return detail.get("message") or detail.get("errorCode")
    return detail


# --- Email Client (SMTP) ---
class SmtpEmailClient:
    """
    Sends plain-text confirmation emails over SMTP.
    smtplib is blocking, so delivery runs in a worker thread.
    """
    def __init__(self, host: str = SMTP_HOST, port: int = SMTP_PORT,
                 user: Optional[str] = SMTP_USER, password: Optional[str] = SMTP_PASS,
                 sender: str = SMTP_FROM):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender

    async def send(self, to: str, subject: str, body: str) -> None:
        """
        Args:
            to (str): Recipient address.
            subject (str): Mail subject.
            body (str): Plain-text body.
        Raises:
            smtplib.SMTPException, OSError: If delivery fails.
        """
        await asyncio.to_thread(self._send_sync, to, subject, body)
        log.info(f"Bestätigungsmail an {to} gesendet.")

    def _send_sync(self, to: str, subject: str, body: str) -> None:
        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to

        with smtplib.SMTP(self.host, self.port) as server:
            server.starttls()
            if self.user and self.password:
                server.login(self.user, self.password)
            server.sendmail(self.sender, [to], msg.as_string())
