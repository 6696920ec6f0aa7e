"""
Error taxonomy for the connector

Every failure surfaced to callers carries a short user-facing message and a
stable machine code. The same classes are raised by the API client, the
analyzer and the batch orchestrator, and rendered by the HTTP handlers below.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette_context import context

from taxoai.core.logging import log


class TaxoAIError(HTTPException):
    """Base exception for connector errors"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "taxoai_error"
    detail: str = "TaxoAI error"
    headers: Optional[Dict[str, str]] = None

    def __init__(self, detail: Optional[str] = None, headers: Optional[Dict[str, str]] = None, **kwargs):
        super().__init__(status_code=self.status_code, detail=detail or self.detail, headers=headers or self.headers)
        # Store any additional context
        self.context = kwargs

    @property
    def message(self) -> str:
        return self.detail

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.detail,
            "type": self.__class__.__name__,
            "context": self.context,
        }

    def __str__(self) -> str:
        return self.detail


class InvalidInputError(TaxoAIError):
    """Bad or missing product id / job id"""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_input"
    detail = "Invalid input."


class NotConfiguredError(TaxoAIError):
    """API key missing"""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "not_configured"
    detail = "TaxoAI API key is not configured."


class LimitReachedError(TaxoAIError):
    """Monthly free-tier quota exhausted"""

    status_code = status.HTTP_402_PAYMENT_REQUIRED
    code = "limit_reached"
    detail = "Monthly analysis limit reached."


class UnauthorizedError(TaxoAIError):
    """Remote service rejected the API key"""

    status_code = status.HTTP_502_BAD_GATEWAY
    code = "unauthorized"
    detail = "Invalid API key. Please check your TaxoAI settings."


class PaymentRequiredError(TaxoAIError):
    """Remote service requires a plan upgrade"""

    status_code = status.HTTP_402_PAYMENT_REQUIRED
    code = "payment_required"
    detail = "Payment required. Please upgrade your TaxoAI plan."


class RateLimitedError(TaxoAIError):
    """Remote rate limit with optional retry-after seconds"""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    code = "rate_limited"
    detail = "Rate limit exceeded. Please try again later."

    def __init__(self, detail: Optional[str] = None, retry_after: Optional[int] = None, **kwargs):
        self.retry_after = retry_after

        headers = kwargs.pop("headers", None) or {}
        if retry_after is not None:
            headers["Retry-After"] = str(retry_after)

        super().__init__(detail=detail, headers=headers or None, retry_after=retry_after, **kwargs)


class ServerError(TaxoAIError):
    """Upstream 500/502/503"""

    status_code = status.HTTP_502_BAD_GATEWAY
    code = "server_error"
    detail = "TaxoAI server error. Please try again later."


class NetworkError(TaxoAIError):
    """Transport failure or timeout"""

    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    code = "network_error"
    detail = "TaxoAI API request failed."


class ApiError(TaxoAIError):
    """Any other non-2xx answer, carrying the upstream message"""

    status_code = status.HTTP_502_BAD_GATEWAY
    code = "api_error"
    detail = "TaxoAI API error."

    def __init__(self, detail: Optional[str] = None, upstream_status: Optional[int] = None, **kwargs):
        self.upstream_status = upstream_status
        super().__init__(detail=detail, upstream_status=upstream_status, **kwargs)


# Error response models for OpenAPI documentation
class ErrorDetail(BaseModel):
    """Error detail model"""

    code: str
    message: str
    type: str
    context: Optional[Dict[str, Any]] = None


class ErrorResponse(BaseModel):
    """Standard error response"""

    error: ErrorDetail
    correlation_id: Optional[str] = None
    timestamp: str


def _correlation_id() -> str:
    if context.exists():
        return context.get("X-Correlation-ID") or context.get("X-Request-ID") or "no-context"
    return "no-context"


# Exception handlers
async def handle_api_exception(request: Request, exc: TaxoAIError) -> JSONResponse:
    """Handle connector exceptions with structured response"""
    error_response = {
        "error": exc.to_dict(),
        "correlation_id": _correlation_id(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    return JSONResponse(status_code=exc.status_code, content=error_response, headers=getattr(exc, "headers", None))


async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions"""
    from taxoai.core.config import settings

    # Log the full exception
    log.opt(exception=exc).error("Unexpected error")

    # Don't expose internal errors in production
    detail = str(exc) if settings.debug else "An unexpected error occurred"

    error_response = {
        "error": {"code": "internal_error", "message": detail, "type": "InternalServerError", "context": {}},
        "correlation_id": _correlation_id(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=error_response)
