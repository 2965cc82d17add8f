# app/services/dispatch_service.py
"""Stub notification dispatcher: validates the request and reports what would be sent."""
from typing import Any, Dict

from core.exceptions import ValidationError
from services.payment_service import iso_timestamp


def send_notification(payload: Any) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValidationError("Missing required fields")

    notification_id = payload.get("notificationId")
    recipients = payload.get("recipients")
    title = payload.get("title")

    # Either a stored notification or an ad-hoc title; message and type always
    if (not notification_id and not title) or not payload.get("message") or not payload.get("type"):
        raise ValidationError("Missing required fields")

    return {
        "success": True,
        "notificationId": notification_id,
        "recipientsCount": len(recipients) if recipients else "all users",
        "title": title or "Notification from database",
        "type": payload["type"],
        "timestamp": iso_timestamp(),
        "message": "Notification sent successfully",
    }
