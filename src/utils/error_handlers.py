"""
Centralized error types and structured error logging for report generation.
"""

import json
import logging
import time
import traceback
from typing import Any, Optional
from uuid import uuid4

logger = logging.getLogger(__name__)

MISSING_CONFIG_MESSAGE = "Missing environment variables: ASANA_PAT or PORTFOLIO_ID"


class ReportError(Exception):
    """A failed report request.

    Every subclass maps to one plain-text body and HTTP status (see
    error_response_body and error_status_code), so callers never see a
    stack trace. details end up in the JSON error log line.
    """

    def __init__(self, message: str, error_code: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ConfigurationError(ReportError):
    """Raised when required configuration is missing or invalid."""

    def __init__(self, message: str = MISSING_CONFIG_MESSAGE, missing: Optional[list[str]] = None):
        super().__init__(message, "CONFIGURATION_ERROR", {"missing": missing or []})


class DataSourceError(ReportError):
    """Raised when the upstream data source cannot be read."""

    def __init__(self, message: str, status_code: Optional[int] = None, container_id: Optional[str] = None):
        super().__init__(
            message,
            "DATA_SOURCE_ERROR",
            {"status_code": status_code, "container_id": container_id}
        )
        self.status_code = status_code
        self.container_id = container_id


class AggregationTimeoutError(ReportError):
    """Raised when collecting records takes longer than the configured limit."""

    def __init__(self, timeout_seconds: float):
        super().__init__(
            f"Timed out fetching clients after {timeout_seconds:g} seconds",
            "AGGREGATION_TIMEOUT",
            {"timeout_seconds": timeout_seconds}
        )
        self.timeout_seconds = timeout_seconds


class ClientDisconnectedError(ReportError):
    """Raised when the HTTP client went away before the report was ready."""

    def __init__(self) -> None:
        super().__init__("Client disconnected before the report was ready", "CLIENT_DISCONNECTED")


class ReportRenderError(ReportError):
    """Raised when the PDF document cannot be produced."""

    def __init__(self, original_error: Exception):
        super().__init__(
            str(original_error) or type(original_error).__name__,
            "REPORT_RENDER_FAILED",
            {"original_error_type": type(original_error).__name__}
        )


def create_correlation_id(prefix: str = "req") -> str:
    """
    Create a correlation ID for request tracing.

    Args:
        prefix: Short label for the kind of request being traced

    Returns:
        Correlation ID string
    """
    timestamp = int(time.time())
    return f"{prefix}_{timestamp}_{str(uuid4())[:8]}"


def log_structured_error(
    error: Exception,
    context: dict[str, Any],
    correlation_id: Optional[str] = None
) -> None:
    """Write one JSON line describing a failed report request.

    The same correlation id is returned to the caller in X-Correlation-ID,
    so a support request can be matched to this line.
    """
    error_info: dict[str, Any] = {"type": type(error).__name__, "message": str(error)}
    if isinstance(error, ReportError):
        error_info["error_code"] = error.error_code
        error_info["details"] = error.details
    if error.__traceback__ is not None:
        error_info["traceback"] = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )

    logger.error(json.dumps({
        "event_type": "report_error",
        "timestamp": int(time.time()),
        "correlation_id": correlation_id or create_correlation_id(),
        "error": error_info,
        "context": context,
    }, default=str))


def error_response_body(error: ReportError) -> str:
    """Plain-text body returned to callers for a failed report request."""
    if isinstance(error, DataSourceError):
        return f"Error fetching clients: {error.message}"
    if isinstance(error, ReportRenderError):
        return f"Error generating PDF: {error.message}"
    return error.message


def error_status_code(error: ReportError) -> int:
    """HTTP status code for a report error."""
    if isinstance(error, AggregationTimeoutError):
        return 504
    if isinstance(error, ClientDisconnectedError):
        # nginx convention for "client closed request"
        return 499
    return 500
