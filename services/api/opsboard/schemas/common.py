"""Envelopes shared by every router."""

from typing import Any

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    code: str
    message: str
    detail: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Body of every non-2xx response: {"error": {code, message, detail}}."""

    error: ErrorDetail


class SuccessResponse(BaseModel):
    """Acknowledgement for write endpoints without a payload."""

    success: bool = True
