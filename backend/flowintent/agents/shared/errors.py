"""
Error types shared by the router, tools and A/B testing service.

Every error carries a machine-readable code and the HTTP status the API layer
should answer with.
"""

from typing import Any, Dict, Optional

import requests


class AppError(Exception):
    """Base error with code, HTTP status and optional details"""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "code": self.code,
            "message": self.message,
            "status_code": self.status_code,
        }
        if self.details:
            payload["details"] = self.details
        return payload


class ProviderError(AppError):
    """Failure reported by an external provider (LLM, webhook, vendor API)"""

    code = "PROVIDER_ERROR"
    status_code = 502

    def __init__(
        self,
        message: str,
        provider: str = "unknown",
        retryable: bool = False,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, status_code=status_code, details=details)
        self.provider = provider
        self.retryable = retryable

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["provider"] = self.provider
        return payload


class RateLimitError(ProviderError):
    code = "RATE_LIMIT_EXCEEDED"
    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded", provider: str = "unknown", reset: Optional[float] = None):
        super().__init__(message, provider=provider, retryable=True, details={"reset": reset} if reset else None)
        self.reset = reset


class IntentClassificationError(AppError):
    """The LLM intent classifier could not produce a usable classification"""

    code = "CLASSIFICATION_FAILED"
    status_code = 502


class ToolInputError(AppError):
    code = "INVALID_TOOL_INPUT"
    status_code = 400


class ABTestNotFoundError(AppError):
    code = "AB_TEST_NOT_FOUND"
    status_code = 404

    def __init__(self, test_id: str):
        super().__init__(f"A/B test not found: {test_id}", details={"test_id": test_id})


class ABVariantNotFoundError(AppError):
    code = "AB_VARIANT_NOT_FOUND"
    status_code = 404

    def __init__(self, test_id: str, variant_id: str):
        super().__init__(
            f"Variant '{variant_id}' not found in A/B test {test_id}",
            details={"test_id": test_id, "variant_id": variant_id}
        )


class ABTestStateError(AppError):
    """Operation not allowed for the test's current status"""

    code = "AB_TEST_INVALID_STATE"
    status_code = 409


class InvalidTransitionError(ABTestStateError):
    code = "INVALID_STATUS_TRANSITION"

    def __init__(self, current: str, target: str):
        super().__init__(
            f"Cannot move A/B test from '{current}' to '{target}'",
            details={"current": current, "target": target}
        )


def is_retryable(error: BaseException) -> bool:
    """True for errors worth another attempt (rate limits, transient network failures)"""
    if isinstance(error, ProviderError):
        return error.retryable
    if isinstance(error, (requests.Timeout, requests.ConnectionError)):
        return True
    if isinstance(error, requests.HTTPError) and error.response is not None:
        return error.response.status_code == 429 or error.response.status_code >= 500
    return False
