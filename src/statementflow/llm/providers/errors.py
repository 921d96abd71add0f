"""Maps backend failure signals onto the provider error taxonomy."""
from typing import Optional

from ...utils.exceptions import (
    InvalidCredentialsError,
    MalformedRequestError,
    ModelNotFoundError,
    NetworkUnreachableError,
    PermissionDeniedError,
    ProviderError,
    QuotaExceededError,
    UnknownProviderError,
)

STATUS_ERRORS = {
    400: MalformedRequestError,
    401: InvalidCredentialsError,
    403: PermissionDeniedError,
    404: ModelNotFoundError,
    429: QuotaExceededError,
}

NETWORK_MARKERS = ("fetch failed", "enotfound", "econnrefused", "name or service not known",
                   "failed to establish a new connection", "connection refused", "timed out")


def classify_provider_error(provider: str, message: str, status_code: Optional[int] = None) -> ProviderError:
    """
    Build the taxonomy error for a backend failure.

    Args:
        provider: Backend display name
        message: Error text reported by the backend or client library
        status_code: HTTP status, when known

    Returns:
        ProviderError subclass instance (not raised)
    """
    message = message or "Unknown error"
    if status_code in STATUS_ERRORS:
        return STATUS_ERRORS[status_code](_describe(STATUS_ERRORS[status_code], provider, message),
                                          provider=provider, status_code=status_code)

    lower = message.lower()
    if "api_key" in lower or "api key" in lower or "401" in lower or "unauthorized" in lower:
        error_class = InvalidCredentialsError
    elif any(marker in lower for marker in NETWORK_MARKERS):
        error_class = NetworkUnreachableError
    elif "quota" in lower or "429" in lower or "rate limit" in lower:
        error_class = QuotaExceededError
    elif "permission" in lower or "403" in lower:
        error_class = PermissionDeniedError
    elif "404" in lower or "not found" in lower:
        error_class = ModelNotFoundError
    elif "400" in lower:
        error_class = MalformedRequestError
    else:
        error_class = UnknownProviderError
    return error_class(_describe(error_class, provider, message), provider=provider, status_code=status_code)


def _describe(error_class, provider: str, message: str) -> str:
    prefixes = {
        InvalidCredentialsError: f"Invalid API key. Please check your {provider} API key configuration",
        NetworkUnreachableError: f"Network error. Unable to reach {provider}",
        QuotaExceededError: f"{provider} quota exceeded. Please try again later",
        PermissionDeniedError: f"Permission denied by {provider}. Please check API key permissions",
        ModelNotFoundError: f"Model not found on {provider}. Please check the model name",
        MalformedRequestError: f"{provider} rejected the request",
        UnknownProviderError: f"{provider} API error",
    }
    return f"{prefixes[error_class]}: {message}"
