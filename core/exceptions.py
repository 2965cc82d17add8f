# app/core/exceptions.py
from typing import Any, Dict, Optional
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from core.constants import NOT_FOUND_CODE

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors raised by the data layer."""

    code: str = "APP_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "code": self.code}


class StoreError(AppError):
    """Failure reported by the record store (connectivity, constraint, driver)."""

    code = "STORE_ERROR"
    transient = False


class NotFoundError(AppError):
    """A single-row lookup matched nothing.

    Kept apart from StoreError so callers can treat "no row" as an empty
    result without also swallowing genuine store failures.
    """

    code = NOT_FOUND_CODE

    def __init__(self, table: str, filters: Optional[Dict[str, Any]] = None):
        self.table = table
        self.filters = filters or {}
        super().__init__(f"No rows found in {table} matching {self.filters}")


class ValidationError(AppError):
    code = "VALIDATION_ERROR"


class IllegalTransitionError(ValidationError):
    code = "ILLEGAL_TRANSITION"

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change status from {current} to {requested}")


class ConsistencyError(AppError):
    """A contribution row was committed but the project totals were not updated.

    The contribution is left in place; run a reconciliation pass for the
    project to bring its totals back in line.
    """

    code = "AGGREGATE_NOT_APPLIED"

    def __init__(self, contribution_id: str, project_id: str, amount: float, cause: Exception):
        self.contribution_id = contribution_id
        self.project_id = project_id
        self.amount = amount
        self.cause = cause
        super().__init__(
            f"Contribution {contribution_id} was recorded but project {project_id} "
            f"totals were not updated: {cause}"
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "contribution_id": self.contribution_id,
            "project_id": self.project_id,
            "amount": self.amount,
        })
        return data


_STATUS_BY_ERROR = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (ConsistencyError, status.HTTP_409_CONFLICT),
    (StoreError, status.HTTP_502_BAD_GATEWAY),
)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, mapped in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            status_code = mapped
            break

    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code} {exc.message}")

    return JSONResponse(status_code=status_code, content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
