# ruff: noqa: D107
"""AI provider exceptions and provider error classification."""

import errno
import socket
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from .base import BaseAppException


PROVIDER_NAME = "Google AI"


class AIServiceError(BaseAppException):
    """Base exception for AI service errors."""

    def __init__(
        self,
        message: str = "AI service error occurred",
        error_code: str = "AI_SERVICE_ERROR",
        details: dict[str, Any] | None = None,
        status_code: int = 502,
    ):
        super().__init__(message, status_code, error_code, details)


class InvalidModelError(AIServiceError):
    """Exception raised when a model identifier is not supported."""

    def __init__(
        self,
        message: str = "Invalid model specified",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, "AI_INVALID_MODEL", details, status_code=400)


class InvalidApiKeyError(AIServiceError):
    """Exception raised when the provider rejects the API key."""

    def __init__(
        self,
        message: str = f"Invalid {PROVIDER_NAME} API key",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, "AI_INVALID_API_KEY", details, status_code=401)


class AIQuotaExceededError(AIServiceError):
    """Exception raised when AI service quota is exceeded."""

    def __init__(
        self,
        message: str = "API quota exceeded. Please check your usage limits.",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, "AI_QUOTA_EXCEEDED", details, status_code=429)


class AIBillingError(AIServiceError):
    """Exception raised when the provider account has a billing problem."""

    def __init__(
        self,
        message: str = "Billing issue detected. Please check your account status.",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, "AI_BILLING_ISSUE", details, status_code=402)


class AINetworkError(AIServiceError):
    """Exception raised when the provider cannot be reached."""

    def __init__(
        self,
        message: str = "Network connectivity issue. Please try again.",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, "AI_NETWORK_ERROR", details, status_code=503)


class AIConfigurationError(AIServiceError):
    """Exception raised when AI service is not properly configured."""

    def __init__(
        self,
        message: str = "AI service is not properly configured",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, "AI_CONFIGURATION_ERROR", details, status_code=400)


class ProviderErrorKind(str, Enum):
    """Categories of provider failures reported to users."""

    INVALID_API_KEY = "invalid_api_key"
    INVALID_MODEL = "invalid_model"
    QUOTA_EXCEEDED = "quota_exceeded"
    BILLING_ISSUE = "billing_issue"
    NETWORK_ERROR = "network_error"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ProviderErrorInfo:
    """The parts of a provider failure the classifier looks at."""

    message: str
    status: int | None = None
    code: str | None = None


NETWORK_ERROR_CODES = frozenset({"ECONNREFUSED", "ENOTFOUND", "ETIMEDOUT"})


def classify_provider_error(info: ProviderErrorInfo) -> ProviderErrorKind:
    """Map a provider failure to a :class:`ProviderErrorKind`.

    Checks run in a fixed order and the first match wins, so a 400 that
    mentions both "model" and "billing" is an invalid model.
    """
    message = (info.message or "").lower()

    if info.status == 401 or info.code == "UNAUTHENTICATED":
        return ProviderErrorKind.INVALID_API_KEY
    if info.status == 400 and "model" in message:
        return ProviderErrorKind.INVALID_MODEL
    if info.status == 429 or info.code == "RESOURCE_EXHAUSTED":
        return ProviderErrorKind.QUOTA_EXCEEDED
    if info.status == 402 or "billing" in message:
        return ProviderErrorKind.BILLING_ISSUE
    if info.code in NETWORK_ERROR_CODES:
        return ProviderErrorKind.NETWORK_ERROR
    return ProviderErrorKind.UNKNOWN


_ERRNO_CODES = {
    errno.ECONNREFUSED: "ECONNREFUSED",
    errno.ETIMEDOUT: "ETIMEDOUT",
}


def describe_provider_error(error: BaseException) -> ProviderErrorInfo:
    """Narrow an SDK or transport exception into a :class:`ProviderErrorInfo`.

    google-api-core errors expose the HTTP status as ``code`` and the RPC
    status as ``grpc_status_code``; httpx and OS errors are mapped to the
    usual connection error codes.
    """
    message = getattr(error, "message", None) or str(error) or error.__class__.__name__
    status = getattr(error, "status", None)
    code = None

    raw_code = getattr(error, "code", None)
    if isinstance(raw_code, int) and not isinstance(raw_code, bool):
        status = status if status is not None else raw_code
    elif isinstance(raw_code, str):
        code = raw_code

    grpc_status = getattr(error, "grpc_status_code", None)
    if code is None and grpc_status is not None:
        code = getattr(grpc_status, "name", None) or str(grpc_status)

    # gRPC reports transport failures as status codes rather than errno values
    if code == "DEADLINE_EXCEEDED":
        code = "ETIMEDOUT"
    elif code == "UNAVAILABLE":
        code = "ENOTFOUND" if "dns" in str(message).lower() else "ECONNREFUSED"

    if code is None:
        if isinstance(error, socket.gaierror):
            code = "ENOTFOUND"
        elif isinstance(error, (httpx.TimeoutException, TimeoutError)):
            code = "ETIMEDOUT"
        elif isinstance(error, httpx.ConnectError):
            code = "ECONNREFUSED"
        elif isinstance(error, OSError) and error.errno in _ERRNO_CODES:
            code = _ERRNO_CODES[error.errno]

    if not isinstance(status, int) or isinstance(status, bool):
        status = None

    return ProviderErrorInfo(message=str(message), status=status, code=code)


def provider_error_to_exception(kind: ProviderErrorKind, message: str) -> AIServiceError:
    """Build the user-facing exception for a classified provider failure."""
    details = {"provider": PROVIDER_NAME, "kind": kind.value}
    if kind is ProviderErrorKind.INVALID_API_KEY:
        return InvalidApiKeyError(details=details)
    if kind is ProviderErrorKind.INVALID_MODEL:
        return InvalidModelError(details=details)
    if kind is ProviderErrorKind.QUOTA_EXCEEDED:
        return AIQuotaExceededError(details=details)
    if kind is ProviderErrorKind.BILLING_ISSUE:
        return AIBillingError(details=details)
    if kind is ProviderErrorKind.NETWORK_ERROR:
        return AINetworkError(details=details)
    return AIServiceError(
        f"AI generation failed: {message or 'Unknown error'}",
        "AI_UNKNOWN_ERROR",
        details,
    )
