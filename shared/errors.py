"""
Shared error handling for the i2pd exporter.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from .logging import scrape_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    scrape_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class ExporterError(Exception):
    """Base exception for exporter services."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            scrape_id=scrape_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )

