"""
workflow.py — Core Orchestration Logic for Order Creation

This module contains the order pipeline. It coordinates pricing, risk checks
and the two external collaborators (payment, email) in a fixed sequence.

Workflow Overview:
1. Validate the request (fails before any external call)
2. Normalize email, generate order id and timestamp
3. Calculate subtotal, discount, shipping, tax and total (cents)
4. Apply risk rules
5. Charge via PaymentClient; a decline stops the workflow
6. Build the Order and send the confirmation via EmailClient
"""

import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Union

from pydantic import BaseModel

from .clients import EmailClient, PaymentClient
from .errors import OrderError, PaymentDeclinedError
from .logging_config import get_logger
from .models import CreateOrderRequest, CreateOrderResult, Currency, Order, PaymentOutcome
from .pricing import calculate_totals, format_money, normalize_coupon
from .risk import apply_risk_rules
from .validation import validate_order_request

log = get_logger(__name__)

ORDER_ID_PREFIX = "ord_"


def generate_order_id() -> str:
    return f"{ORDER_ID_PREFIX}{uuid.uuid4().hex[:16]}"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def build_confirmation_body(order: Order, total_cents: int, currency: Currency) -> str:
    lines = [f"- {item.sku} x{item.qty}" for item in order.items]
    return "\n".join([
        "Thanks for your purchase!",
        "",
        f"Order: {order.id}",
        "Items:",
        *lines,
        "",
        f"Total: {format_money(total_cents, currency)}",
    ])


class OrderService:
    """
    Runs the order pipeline against the injected payment and email collaborators.
    """
    def __init__(self, payment_client: PaymentClient, email_client: EmailClient):
        self.payment_client = payment_client
        self.email_client = email_client

    async def create_order(self, order_data: Union[CreateOrderRequest, Mapping]) -> CreateOrderResult:
        """
        Executes the complete order workflow for a single request.

        Args:
            order_data (CreateOrderRequest | Mapping): Request with keys
                - userEmail (str): Raw customer email
                - items (list): Items with 'sku', 'qty' and 'price'
                - couponCode (str, optional): Discount code
                - currency (str): 'USD' or 'EUR'

        Returns:
            CreateOrderResult: The order, the charged total in cents, the payment outcome
            and the price breakdown.

        Raises:
            OrderValidationError: Malformed request or unknown coupon. Nothing was charged.
            RiskRejectedError: Rejected by a fraud heuristic. Nothing was charged.
            PaymentDeclinedError: The charge was declined. No email was sent.
            Exception: Errors of the payment or email client are propagated unmodified.
        """
        if isinstance(order_data, BaseModel):
            order_data = order_data.model_dump()

        # --- 1. Validierung ---
        validate_order_request(order_data)
        request = CreateOrderRequest.model_validate(order_data, from_attributes=True)

        # --- 2. Normalisierung ---
        email = normalize_email(request.userEmail)
        order_id = generate_order_id()
        created_at = datetime.now(timezone.utc).isoformat()
        log_prefix = f"[Order: {order_id}]"

        log.info(f"{log_prefix} Starte Verarbeitung ({len(request.items)} Positionen, {request.currency.value}).")

        try:
            # --- 3. Preisberechnung ---
            breakdown = calculate_totals(request.items, request.couponCode, request.currency)
            log.info(
                f"{log_prefix} Summe berechnet: Zwischensumme {breakdown.subtotalCents}, "
                f"Rabatt {breakdown.discountCents}, Versand {breakdown.shippingCents}, "
                f"Steuer {breakdown.taxCents}, Gesamt {breakdown.totalCents} Cent."
            )

            # --- 4. Risikoprüfung ---
            apply_risk_rules(email, breakdown.totalCents)
        except OrderError as e:
            log.warning(f"{log_prefix} Abgelehnt: {e}")
            raise

        # --- 5. Zahlung ---
        log.info(f"{log_prefix} Führe Zahlung durch...")
        try:
            payment = await self.payment_client.charge(breakdown.totalCents, request.currency, order_id)
        except Exception as e:
            log.error(f"{log_prefix} Payment-Client fehlgeschlagen: {e}")
            raise

        if not isinstance(payment, PaymentOutcome):
            payment = PaymentOutcome.model_validate(payment)

        if not payment.approved:
            log.warning(f"{log_prefix} Zahlung abgelehnt ({payment.declineReason or 'unknown'}). Keine Bestätigung.")
            raise PaymentDeclinedError(payment.declineReason, outcome=payment)

        log.info(f"{log_prefix} Zahlung erfolgreich. (TxID: {payment.transactionId})")

        # --- 6. Bestellung & Bestätigung ---
        order = Order(
            id=order_id,
            userEmail=email,
            items=[item.model_copy() for item in request.items],
            couponCode=normalize_coupon(request.couponCode) or None,
            createdAt=created_at,
        )

        try:
            await self.email_client.send(
                email,
                f"Order {order.id} confirmed",
                build_confirmation_body(order, breakdown.totalCents, request.currency),
            )
        except Exception as e:
            # Zahlung ist bereits erfolgt; Mail muss manuell nachgesendet werden.
            log.critical(f"{log_prefix} Bestätigungsmail fehlgeschlagen nach erfolgreicher Zahlung: {e}")
            raise

        log.info(f"{log_prefix} Verarbeitung erfolgreich abgeschlossen.")

        return CreateOrderResult(
            order=order,
            totalCents=breakdown.totalCents,
            payment=payment,
            breakdown=breakdown,
        )
