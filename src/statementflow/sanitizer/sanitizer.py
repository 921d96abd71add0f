"""Detects and masks sensitive information before text leaves the process."""
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from .patterns import DETECTION_ORDER, PIIKind
from ..utils.logger import get_logger, log_event

ALPHANUMERIC = re.compile(r"[A-Za-z0-9]")

# Environment toggles; the name toggle is opt-in, the rest opt-out.
ENV_TOGGLES = {
    PIIKind.ACCOUNT_NUMBER: "STATEMENTFLOW_SANITIZE_ACCOUNT_NUMBERS",
    PIIKind.CARD_NUMBER: "STATEMENTFLOW_SANITIZE_CARD_NUMBERS",
    PIIKind.MOBILE_NUMBER: "STATEMENTFLOW_SANITIZE_MOBILE_NUMBERS",
    PIIKind.EMAIL: "STATEMENTFLOW_SANITIZE_EMAILS",
    PIIKind.PAN_ID: "STATEMENTFLOW_SANITIZE_PAN_IDS",
    PIIKind.CUSTOMER_ID: "STATEMENTFLOW_SANITIZE_CUSTOMER_IDS",
    PIIKind.IFSC_CODE: "STATEMENTFLOW_SANITIZE_IFSC_CODES",
    PIIKind.ADDRESS: "STATEMENTFLOW_SANITIZE_ADDRESSES",
    PIIKind.NAME: "STATEMENTFLOW_SANITIZE_NAMES",
}

_FIELD_BY_KIND = {
    PIIKind.ACCOUNT_NUMBER: "account_number",
    PIIKind.CARD_NUMBER: "card_number",
    PIIKind.MOBILE_NUMBER: "mobile_number",
    PIIKind.EMAIL: "email",
    PIIKind.PAN_ID: "pan_id",
    PIIKind.CUSTOMER_ID: "customer_id",
    PIIKind.IFSC_CODE: "ifsc_code",
    PIIKind.ADDRESS: "address",
    PIIKind.NAME: "name",
}


@dataclass(frozen=True)
class SanitizationConfig:
    """Per-category toggles and masking options."""
    account_number: bool = True
    card_number: bool = True
    mobile_number: bool = True
    email: bool = True
    pan_id: bool = True
    customer_id: bool = True
    ifsc_code: bool = True
    address: bool = True
    # Honorific heuristics only; highest false-positive risk
    name: bool = False
    masking_character: str = "*"
    preserve_format: bool = True
    enable_logging: bool = True

    def is_enabled(self, kind: PIIKind) -> bool:
        return getattr(self, _FIELD_BY_KIND[kind])

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None,
                 base: Optional["SanitizationConfig"] = None) -> "SanitizationConfig":
        """Apply STATEMENTFLOW_SANITIZE_* overrides on top of base."""
        environ = os.environ if environ is None else environ
        base = base or cls()
        values = {name: getattr(base, name) for name in cls.__dataclass_fields__}

        for kind, variable in ENV_TOGGLES.items():
            raw = environ.get(variable)
            if raw is None:
                continue
            if kind is PIIKind.NAME:
                values[_FIELD_BY_KIND[kind]] = raw.strip().lower() == "true"
            else:
                values[_FIELD_BY_KIND[kind]] = raw.strip().lower() != "false"

        mask = environ.get("STATEMENTFLOW_SANITIZATION_MASK_CHARACTER")
        if mask:
            values["masking_character"] = mask
        preserve = environ.get("STATEMENTFLOW_SANITIZATION_PRESERVE_FORMAT")
        if preserve is not None:
            values["preserve_format"] = preserve.strip().lower() != "false"
        log_toggle = environ.get("STATEMENTFLOW_SANITIZATION_LOGGING")
        if log_toggle is not None:
            values["enable_logging"] = log_toggle.strip().lower() != "false"

        return cls(**values)


@dataclass(frozen=True)
class Detection:
    """A single masked value."""
    kind: PIIKind
    original: str
    masked: str
    position: int

    def __repr__(self) -> str:
        return f"Detection(kind={self.kind.value}, masked={self.masked!r}, position={self.position})"


@dataclass
class SanitizationResult:
    """Sanitized text plus what was masked."""
    sanitized_text: str
    detections: List[Detection] = field(default_factory=list)
    summary: Dict[PIIKind, int] = field(default_factory=lambda: {kind: 0 for kind in PIIKind})

    @property
    def total_detections(self) -> int:
        return len(self.detections)

    def security_breakdown(self) -> Dict[str, int]:
        """Per-kind counts keyed for the caller-facing security report."""
        return {kind.value: self.summary.get(kind, 0) for kind in PIIKind}


def mask_string(value: str, masking_character: str = "*", preserve_format: bool = True) -> str:
    """Mask a value; with preserve_format only alphanumerics are replaced."""
    if not preserve_format:
        return masking_character * len(value)
    return ALPHANUMERIC.sub(masking_character, value)


class DataSanitizer:
    """Regex-driven PII masker. Pure apart from optional logging."""

    def __init__(self, config: Optional[SanitizationConfig] = None, logger: Optional[logging.Logger] = None):
        self.config = config or SanitizationConfig()
        self.logger = logger or get_logger("sanitizer")

    def sanitize(self, text: str) -> SanitizationResult:
        """
        Mask every enabled category in text.

        Args:
            text: Raw page text

        Returns:
            SanitizationResult; never raises
        """
        result = SanitizationResult(sanitized_text=text or "")
        if not text:
            return result

        for kind, pattern in DETECTION_ORDER:
            if not self.config.is_enabled(kind):
                continue
            result.sanitized_text = pattern.sub(
                lambda match: self._mask_match(match, kind, result),
                result.sanitized_text,
            )

        if self.config.enable_logging and result.detections:
            log_event(
                self.logger,
                "sanitization.summary",
                total=result.total_detections,
                **{key: count for key, count in result.security_breakdown().items() if count},
            )

        return result

    def _mask_match(self, match: "re.Match", kind: PIIKind, result: SanitizationResult) -> str:
        whole = match.group(0)
        if "value" in match.re.groupindex:
            start, end = match.span("value")
            offset = start - match.start()
            value = match.group("value")
        else:
            start, offset, value = match.start(), 0, whole
            end = match.end()

        masked = mask_string(value, self.config.masking_character, self.config.preserve_format)
        result.detections.append(Detection(kind=kind, original=value, masked=masked, position=start))
        result.summary[kind] = result.summary.get(kind, 0) + 1
        return whole[:offset] + masked + whole[offset + (end - start):]


def sanitize_text(text: str, config: Optional[SanitizationConfig] = None) -> SanitizationResult:
    """Convenience wrapper around DataSanitizer."""
    return DataSanitizer(config).sanitize(text)
