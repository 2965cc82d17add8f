# app/services/payment_service.py
"""
Stub payment processor.

Checks that the request carries the fields a real gateway call would need and
answers with a synthesized transaction reference. Nothing is charged, stored
or sent anywhere.
"""
from datetime import datetime, timezone
from typing import Any, Dict
import random
import time

from core.exceptions import ValidationError

REQUIRED_FIELDS = ("projectId", "amount", "paymentMethod", "userData")


def iso_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def generate_transaction_reference() -> str:
    """``TX-<epoch millis>-<0..999>``"""
    return f"TX-{int(time.time() * 1000)}-{random.randint(0, 999)}"


def process_payment(payload: Any) -> Dict[str, Any]:
    if not isinstance(payload, dict) or any(not payload.get(field) for field in REQUIRED_FIELDS):
        raise ValidationError("Missing required fields")

    return {
        "success": True,
        "transactionReference": generate_transaction_reference(),
        "amount": payload["amount"],
        "projectId": payload["projectId"],
        "paymentMethod": payload["paymentMethod"],
        "timestamp": iso_timestamp(),
        "message": "Payment processed successfully",
    }
