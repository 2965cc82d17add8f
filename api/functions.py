# app/api/functions.py
"""
Remote procedures called directly by the front-end.

Both answer every failure with HTTP 400 and ``{"error": message}`` and allow
calls from any origin.
"""
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse
import logging

from core.constants import CORS_HEADERS
from services.dispatch_service import send_notification
from services.payment_service import process_payment

logger = logging.getLogger(__name__)

router = APIRouter()

FUNCTION_PATHS = ("/process-payment", "/send-notification")

_RESPONSE_HEADERS = {"Access-Control-Allow-Origin": CORS_HEADERS["Access-Control-Allow-Origin"]}


async def _invoke(request: Request, handler) -> JSONResponse:
    try:
        payload = await request.json()
        data = handler(payload)
    except Exception as e:
        logger.warning(f"{request.url.path} rejected: {e}")
        return JSONResponse({"error": str(e)}, status_code=400, headers=_RESPONSE_HEADERS)

    return JSONResponse(data, status_code=200, headers=_RESPONSE_HEADERS)


@router.options("/process-payment")
@router.options("/send-notification")
async def preflight():
    return PlainTextResponse("ok", headers=CORS_HEADERS)


@router.post("/process-payment")
async def process_payment_endpoint(request: Request):
    """Simulated payment: validates the request and returns a transaction reference"""
    return await _invoke(request, process_payment)


@router.post("/send-notification")
async def send_notification_endpoint(request: Request):
    """Simulated dispatch: validates the request and reports the recipients"""
    return await _invoke(request, send_notification)
