"""PII detection patterns for Indian bank statements."""
import re
from enum import Enum
from typing import List, Pattern, Tuple


class PIIKind(str, Enum):
    """Sensitive data categories; values are the security-breakdown keys."""
    ACCOUNT_NUMBER = "accountNumbers"
    CARD_NUMBER = "cardNumbers"
    MOBILE_NUMBER = "mobileNumbers"
    EMAIL = "emails"
    PAN_ID = "panIds"
    CUSTOMER_ID = "customerIds"
    IFSC_CODE = "ifscCodes"
    ADDRESS = "addresses"
    NAME = "names"


# Patterns with a "value" group mask only that group so labels stay readable.
_LABELLED_ACCOUNT = [
    re.compile(r"\bA/?C[.\s]?NO[.\s]?:?\s*(?P<value>\d{9,18})\b", re.IGNORECASE),
    re.compile(r"\bACCOUNT[.\s]?(?:NO|NUMBER)[.\s]?:?\s*(?P<value>\d{9,18})\b", re.IGNORECASE),
]

_LABELLED_IDS = [
    (PIIKind.PAN_ID, re.compile(r"\bPAN[.\s]?:?\s*(?P<value>[A-Z]{5}\d{4}[A-Z])\b", re.IGNORECASE)),
    (PIIKind.IFSC_CODE, re.compile(r"\bIFSC[.\s]?(?:CODE)?[.\s]?:?\s*(?P<value>[A-Z]{4}0[A-Z0-9]{6})\b", re.IGNORECASE)),
    (PIIKind.CUSTOMER_ID, re.compile(r"\bCUST(?:OMER)?[.\s]?ID[.\s]?:?\s*(?P<value>(?=[A-Z]*\d)[A-Z0-9]{6,15})\b", re.IGNORECASE)),
    (PIIKind.CUSTOMER_ID, re.compile(r"\bCIF[.\s]?(?:NO)?[.\s]?:?\s*(?P<value>(?=[A-Z]*\d)[A-Z0-9]{6,15})\b", re.IGNORECASE)),
]

_CARD_NUMBER = [
    re.compile(r"\b\d{4}[\s-]\d{4}[\s-]\d{4}[\s-]\d{4}\b"),
    re.compile(r"\b\d{15,16}\b(?![.,]\d)"),
]

_EMAIL = [
    re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"),
]

_MOBILE_NUMBER = [
    re.compile(r"(?<!\w)\+?91[\s-]?[6-9]\d{9}\b"),
    re.compile(r"\b0[6-9]\d{9}\b"),
    re.compile(r"\b[6-9]\d{9}\b(?![.,]\d)"),
]

_ACCOUNT_NUMBER = [
    re.compile(r"\b\d{9,18}\b(?![.,]\d)"),
    re.compile(r"\b\d{4}[\s-]?\d{4}[\s-]?\d{4}[\s-]?\d{4,6}\b"),
]

_BARE_IDS = [
    (PIIKind.PAN_ID, re.compile(r"\b[A-Z]{5}\d{4}[A-Z]\b")),
    (PIIKind.IFSC_CODE, re.compile(r"\b[A-Z]{4}0[A-Z0-9]{6}\b")),
    (PIIKind.CUSTOMER_ID, re.compile(r"\bID(?:[.:]\s*|\s+)(?P<value>(?=[A-Z]*\d)[A-Z0-9]{8,15})\b", re.IGNORECASE)),
]

_ADDRESS = [
    re.compile(r"\b\d{1,4}[/\-,\s]+[A-Z][A-Za-z\s,]{10,50}[,\s]+[A-Z][A-Za-z\s]{5,20}[\s-]*\d{6}\b(?![.,]\d)"),
    re.compile(r"\bPIN(?:\s?CODE)?[.\s]?:?\s*(?P<value>\d{6})\b", re.IGNORECASE),
]

_NAME = [
    re.compile(r"\b(?:MR|MRS|MS|DR)[.\s]+(?P<value>[A-Z][A-Z ]{2,30})\b", re.IGNORECASE),
]


def _tag(kind: PIIKind, patterns: List[Pattern]) -> List[Tuple[PIIKind, Pattern]]:
    return [(kind, pattern) for pattern in patterns]


# Ordered from most to least specific. Each pass scans the text left by the
# previous passes, so a value claimed early is never counted again.
DETECTION_ORDER: List[Tuple[PIIKind, Pattern]] = (
    _tag(PIIKind.ACCOUNT_NUMBER, _LABELLED_ACCOUNT)
    + _LABELLED_IDS
    + _tag(PIIKind.EMAIL, _EMAIL)
    + _tag(PIIKind.CARD_NUMBER, _CARD_NUMBER)
    + _tag(PIIKind.MOBILE_NUMBER, _MOBILE_NUMBER)
    + _tag(PIIKind.ACCOUNT_NUMBER, _ACCOUNT_NUMBER)
    + _BARE_IDS
    + _tag(PIIKind.ADDRESS, _ADDRESS)
    + _tag(PIIKind.NAME, _NAME)
)
