"""
Shared schema primitives used across the API.
"""
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict


class ErrorResponse(BaseModel):
    """Standard error envelope returned for all 4xx/5xx responses."""
    model_config = ConfigDict(from_attributes=True)

    code: str
    message: str
    details: Optional[dict[str, Any]] = None


def strip_required(v):
    """`mode="before"` helper: trim strings and reject blanks."""
    stripped = v.strip() if isinstance(v, str) else v
    if not stripped:
        raise ValueError("must not be empty after stripping whitespace")
    return stripped


def strip_optional(v):
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v
