"""
mock_payment_service.py — Mock Implementation of the Payment Service (REST API)

This module provides a simulated Payment Service for local runs and tests of HttpPaymentClient.
It exposes a simple FastAPI application that mimics real-world payment processing behavior.

Simulation Scenarios:
    • Successful payment processing
    • Declined payment (HTTP 402) for amounts above MOCK_PAYMENT_DECLINE_ABOVE cents

Endpoints:
    POST /v2/charges — Handles incoming charge requests.

Port:
    Default: 8001 (HTTP)
"""

import os
import time
import uuid
from typing import Literal

from fastapi import FastAPI, Header, HTTPException
from pydantic import BaseModel, Field

from order_service.logging_config import get_logger, setup_logging

DECLINE_ABOVE_CENTS = int(os.environ.get("MOCK_PAYMENT_DECLINE_ABOVE", "150000"))

app = FastAPI(title="Mock Payment Service")
log = get_logger(__name__)


class ChargeRequest(BaseModel):
    """
    Represents a payment charge request payload.

    Attributes:
        amount (int): Total payment amount in the smallest currency units (e.g., cents).
        currency (str): 'USD' or 'EUR'.
        referenceId (str): Unique identifier for the order associated with this charge.
    """
    amount: int = Field(..., gt=0)
    currency: Literal["USD", "EUR"]
    referenceId: str


@app.post("/v2/charges")
def create_charge(
        request: ChargeRequest,
        idempotency_key: str = Header(..., alias="Idempotency-Key")
):
    """
        Processes a payment charge request.

        Amounts above DECLINE_ABOVE_CENTS are declined with HTTP 402, everything else succeeds.

        Args:
            request (ChargeRequest): The charge details including amount, currency and referenceId.
            idempotency_key (str): Unique identifier from the client to ensure request idempotency.

        Returns:
            dict: Payment transaction result on success, including:
                - transactionId (str): Unique transaction identifier.
                - status (str): Always "succeeded" for successful payments.
                - createdAt (str): UTC timestamp of the transaction.

        Raises:
            HTTPException(402): If the payment is declined.
    """
    log.info(f"[PS] Zahlungsanfrage für {request.referenceId} über {request.amount} {request.currency} (Idempotenz: {idempotency_key})")

    if request.amount > DECLINE_ABOVE_CENTS:
        log.warning(f"[PS] Zahlung für {request.referenceId} abgelehnt.")
        raise HTTPException(
            status_code=402,
            detail={"errorCode": "payment_declined", "message": "card declined"}
        )

    # Success case
    log.info(f"[PS] Zahlung für {request.referenceId} erfolgreich.")
    return {
        "transactionId": f"tr_{uuid.uuid4()}",
        "status": "succeeded",
        "createdAt": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())
    }


if __name__ == "__main__":
    import uvicorn

    setup_logging()
    uvicorn.run(app, host="0.0.0.0", port=8001)
