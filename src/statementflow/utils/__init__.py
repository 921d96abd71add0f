"""Utility modules."""
from .logger import get_logger, setup_logging, statement_logger, log_event
from .exceptions import (
    StatementFlowError,
    ConfigError,
    ValidationError,
    TemplateError,
    TemplateNotFoundError,
    MissingVariablesError,
    ProviderError,
    InvalidCredentialsError,
    NetworkUnreachableError,
    QuotaExceededError,
    PermissionDeniedError,
    ModelNotFoundError,
    MalformedRequestError,
    UnknownProviderError,
    RetryableError,
    RateLimitedError,
)
from .retry import retry_on_rate_limit, parse_retry_after, compute_wait_ms

__all__ = [
    "get_logger",
    "setup_logging",
    "statement_logger",
    "log_event",
    "StatementFlowError",
    "ConfigError",
    "ValidationError",
    "TemplateError",
    "TemplateNotFoundError",
    "MissingVariablesError",
    "ProviderError",
    "InvalidCredentialsError",
    "NetworkUnreachableError",
    "QuotaExceededError",
    "PermissionDeniedError",
    "ModelNotFoundError",
    "MalformedRequestError",
    "UnknownProviderError",
    "RetryableError",
    "RateLimitedError",
    "retry_on_rate_limit",
    "parse_retry_after",
    "compute_wait_ms",
]
