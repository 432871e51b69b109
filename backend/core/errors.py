# backend/core/errors.py
from __future__ import annotations

from typing import Iterable, Optional

from backend.core.results import Failure, FailureKind


class GatewayError(Exception):
    category = "GatewayError"
    http_status = 500

    def __init__(self, message: str, *, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self, *, include_details: bool = True) -> dict:
        body = {"error": self.message, "code": self.category}
        if include_details and self.details:
            body["details"] = self.details
        return body


class ValidationError(GatewayError):
    category = "ValidationError"
    http_status = 400


class UpstreamAuthError(GatewayError):
    category = "UpstreamAuthError"
    http_status = 401


class UpstreamQuotaError(GatewayError):
    category = "UpstreamQuotaError"
    http_status = 429


class UpstreamError(GatewayError):
    category = "UpstreamError"
    http_status = 500


class InternalError(GatewayError):
    category = "InternalError"
    http_status = 500


# --- Failure classification -------------------------------------------------
# The upstream message is the only signal when no status code is attached.
_AUTH_MARKERS = ("api key", "api_key", "apikey", "permission denied", "permission_denied", "unauthenticated")
_QUOTA_MARKERS = ("quota", "rate limit", "rate-limit", "resource_exhausted", "resource exhausted", "too many requests")

_AUTH_CODES = {401, 403}
_QUOTA_CODES = {429}

MALFORMED_MESSAGE = "Failed to generate content"


def redact(text: str, secrets: Iterable[str] = ()) -> str:
    out = text or ""
    for s in secrets:
        if s:
            out = out.replace(s, "***")
    return out


def classify_failure(failure: Failure, *, secrets: Iterable[str] = ()) -> GatewayError:
    """
    Map an upstream Failure onto the gateway taxonomy.
    A structured status code wins over message sniffing.
    """
    details = redact(failure.reason, secrets) or None

    if failure.kind is FailureKind.MALFORMED_RESULT:
        return UpstreamError(MALFORMED_MESSAGE, details=details)

    code = failure.status_code
    if code in _AUTH_CODES:
        return UpstreamAuthError("Invalid or missing API key", details=details)
    if code in _QUOTA_CODES:
        return UpstreamQuotaError("API quota exceeded. Please try again later.", details=details)

    lower = (failure.reason or "").lower()
    if any(m in lower for m in _AUTH_MARKERS):
        return UpstreamAuthError("Invalid or missing API key", details=details)
    if any(m in lower for m in _QUOTA_MARKERS):
        return UpstreamQuotaError("API quota exceeded. Please try again later.", details=details)

    return UpstreamError("Error generating content", details=details)
