"""Custom exception classes for StatementFlow."""
from typing import Iterable, List, Optional


class StatementFlowError(Exception):
    """Base exception for StatementFlow."""
    pass


class ConfigError(StatementFlowError):
    """Configuration-related errors."""
    pass


class ValidationError(StatementFlowError):
    """Data validation errors."""
    pass


class TemplateError(StatementFlowError):
    """Prompt template errors."""
    pass


class TemplateNotFoundError(TemplateError):
    """Requested template id is not registered."""

    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__(f"Template with ID '{template_id}' not found")


class MissingVariablesError(TemplateError):
    """Template rendered without all of its required variables."""

    def __init__(self, template_id: str, missing: Iterable[str]):
        self.template_id = template_id
        self.missing: List[str] = sorted(missing)
        super().__init__(
            f"Missing required variables for template '{template_id}': {', '.join(self.missing)}"
        )


class ProviderError(StatementFlowError):
    """Errors raised by an LLM backend."""

    is_service_error = True

    def __init__(self, message: str, provider: str = "", status_code: Optional[int] = None):
        self.message = message
        self.provider = provider
        self.status_code = status_code
        super().__init__(message)


class InvalidCredentialsError(ProviderError):
    """Rejected API key (401)."""
    pass


class NetworkUnreachableError(ProviderError):
    """DNS or connection failure."""
    pass


class QuotaExceededError(ProviderError):
    """Quota or rate limit exhausted (429)."""
    pass


class PermissionDeniedError(ProviderError):
    """Key lacks permission (403)."""
    pass


class ModelNotFoundError(ProviderError):
    """Unknown model or deployment (404)."""
    pass


class MalformedRequestError(ProviderError):
    """Backend rejected the request shape (400)."""
    pass


class UnknownProviderError(ProviderError):
    """Anything the taxonomy does not cover."""

    is_service_error = False


# Retryable errors
class RetryableError(StatementFlowError):
    """Base class for errors that should trigger retry."""
    pass


class RateLimitedError(RetryableError, QuotaExceededError):
    """HTTP 429 from a backend that may be retried after a wait."""
    pass
