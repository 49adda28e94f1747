"""Structured API errors.

Raised by routes for expected client errors; main.py renders them as
{"error": {"code", "message", "detail"}} with the given status code.
"""

from typing import Any

# Error codes
NO_FILE = "NO_FILE"
UNKNOWN_REPORT_TYPE = "UNKNOWN_REPORT_TYPE"
FILE_TOO_LARGE = "FILE_TOO_LARGE"
UNREADABLE_WORKBOOK = "UNREADABLE_WORKBOOK"
IMPORT_IN_PROGRESS = "IMPORT_IN_PROGRESS"
INVALID_TABLE = "INVALID_TABLE"
EMAIL_NOT_CONFIGURED = "EMAIL_NOT_CONFIGURED"


class ApiError(Exception):
    """Client-facing error with a stable code."""

    def __init__(self, status_code: int, code: str, message: str, detail: dict[str, Any] | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.detail = detail
