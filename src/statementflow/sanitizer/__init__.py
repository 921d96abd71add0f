"""Sensitive data masking."""
from .patterns import PIIKind
from .sanitizer import (
    DataSanitizer,
    Detection,
    SanitizationConfig,
    SanitizationResult,
    mask_string,
    sanitize_text,
)

__all__ = [
    "PIIKind",
    "DataSanitizer",
    "Detection",
    "SanitizationConfig",
    "SanitizationResult",
    "mask_string",
    "sanitize_text",
]
