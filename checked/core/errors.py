"""
Custom exception hierarchy for Checked.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages.

The scheduler never raises; these cover the record store and HTTP layer.
"""
from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class CheckedException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class TeamNotFoundError(CheckedException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "TEAM_NOT_FOUND"

    def __init__(self, team_id: int):
        super().__init__(
            message=f"Team {team_id} not found.",
            details={"team_id": team_id},
        )


class PersonNotFoundError(CheckedException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "PERSON_NOT_FOUND"

    def __init__(self, person_id: int):
        super().__init__(
            message=f"Person {person_id} not found.",
            details={"person_id": person_id},
        )


class PersonNotOnTeamError(CheckedException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "PERSON_NOT_ON_TEAM"

    def __init__(self, person_id: int, team_id: int):
        super().__init__(
            message=f"Person {person_id} is not a member of team {team_id}.",
            details={"person_id": person_id, "team_id": team_id},
        )


class InvalidCadenceError(CheckedException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "INVALID_CADENCE"

    def __init__(self, cadence_days: Any):
        super().__init__(
            message=f"Cadence must be a positive number of days. Received {cadence_days}.",
            details={"cadence_days": cadence_days},
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def checked_exception_handler(request: Request, exc: CheckedException) -> JSONResponse:
    log.info("%s %s -> %s %s", request.method, request.url.path, exc.http_status, exc.code)
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append({
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
