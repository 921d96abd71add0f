"""Data models for LLM processing."""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ..utils.exceptions import ValidationError


def _as_float(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


@dataclass(frozen=True)
class UserCategory:
    """Caller-owned category label."""
    name: str


@dataclass(frozen=True)
class ExtractionUsage:
    """Token usage for one provider call."""
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    def to_dict(self) -> Dict[str, int]:
        return {"promptTokens": self.prompt_tokens, "completionTokens": self.completion_tokens}


@dataclass(frozen=True)
class BalanceData:
    """Balance figures the model found on a page."""
    opening_balance: Optional[Decimal] = None
    closing_balance: Optional[Decimal] = None
    available_balance: Optional[Decimal] = None
    current_balance: Optional[Decimal] = None
    confidence: int = 0
    notes: str = "No balance information extracted"

    @property
    def ending_balance(self) -> Optional[Decimal]:
        """Closing balance, falling back to current then available."""
        for value in (self.closing_balance, self.current_balance, self.available_balance):
            if value is not None:
                return value
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "opening_balance": _as_float(self.opening_balance),
            "closing_balance": _as_float(self.closing_balance),
            "available_balance": _as_float(self.available_balance),
            "current_balance": _as_float(self.current_balance),
            "balance_confidence": self.confidence,
            "balance_extraction_notes": self.notes,
        }


@dataclass(frozen=True)
class Transaction:
    """Normalized transaction; type is derived from the amount sign."""
    date: str
    description: str
    amount: Decimal
    category: str
    currency: str
    balance: Optional[Decimal] = None

    @property
    def type(self) -> str:
        return "income" if self.amount > 0 else "expense"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "description": self.description,
            "amount": float(self.amount),
            "category": self.category,
            "currency": self.currency,
            "type": self.type,
        }


@dataclass(frozen=True)
class ExtractionResult:
    """Outcome of one page extraction call."""
    transactions: List[Transaction] = field(default_factory=list)
    usage: ExtractionUsage = field(default_factory=ExtractionUsage)
    balance_data: Optional[BalanceData] = None
    security_breakdown: Optional[Dict[str, int]] = None
    ending_balance: Optional[Decimal] = None
    has_incomplete_transactions: bool = False
    parse_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "transactions": [txn.to_dict() for txn in self.transactions],
            "usage": self.usage.to_dict(),
        }
        if self.balance_data is not None:
            data["balanceData"] = self.balance_data.to_dict()
        if self.security_breakdown is not None:
            data["securityBreakdown"] = dict(self.security_breakdown)
        return data


@dataclass(frozen=True)
class PageContext:
    """Position of a page within its statement plus balance continuity."""
    page_number: int
    total_pages: int
    previous_balance: Optional[Decimal] = None


@dataclass(frozen=True)
class RawPage:
    """Caller-supplied page text."""
    text: str
    page_number: int
    total_pages: int

    def __post_init__(self):
        if not isinstance(self.text, str):
            raise ValidationError("Page content must be a string")
        if self.page_number < 1 or self.total_pages < 1:
            raise ValidationError("Page number and total pages must be positive")
        if self.page_number > self.total_pages:
            raise ValidationError(
                f"Page number {self.page_number} exceeds total pages {self.total_pages}"
            )


@dataclass
class PageResult:
    """Per-page outbound record."""
    page_number: int
    total_pages: int
    transactions: List[Transaction]
    balance_data: Optional[BalanceData]
    page_ending_balance: Optional[Decimal]
    processing_notes: str
    has_incomplete_transactions: bool = False
    security_breakdown: Dict[str, int] = field(default_factory=dict)
    usage: ExtractionUsage = field(default_factory=ExtractionUsage)
    failed: bool = False
    service_error: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pageNumber": self.page_number,
            "totalPages": self.total_pages,
            "transactions": [txn.to_dict() for txn in self.transactions],
            "balanceData": self.balance_data.to_dict() if self.balance_data else None,
            "pageEndingBalance": float(self.page_ending_balance or 0),
            "processingNotes": self.processing_notes,
            "hasIncompleteTransactions": self.has_incomplete_transactions,
            "securityBreakdown": dict(self.security_breakdown),
        }


@dataclass
class AggregatedStatement:
    """Deduplicated transactions and reconciled balances for one statement."""
    transactions: List[Transaction] = field(default_factory=list)
    running_balance: Decimal = Decimal("0")
    pages_processed: int = 0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    pages: List[PageResult] = field(default_factory=list)
    opening_balance: Optional[Decimal] = None
    closing_balance: Optional[Decimal] = None
    balance_confidence: int = 0
    balance_source_page: Optional[int] = None
    duplicates_dropped: int = 0
    cancelled: bool = False

    @property
    def failed_pages(self) -> List[int]:
        return [page.page_number for page in self.pages if page.failed]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transactions": [txn.to_dict() for txn in self.transactions],
            "runningBalance": float(self.running_balance),
            "pagesProcessed": self.pages_processed,
            "totalInputTokens": self.total_input_tokens,
            "totalOutputTokens": self.total_output_tokens,
            "openingBalance": _as_float(self.opening_balance),
            "closingBalance": _as_float(self.closing_balance),
            "balanceConfidence": self.balance_confidence,
            "balanceSourcePage": self.balance_source_page,
            "duplicatesDropped": self.duplicates_dropped,
            "failedPages": self.failed_pages,
            "cancelled": self.cancelled,
            "pages": [page.to_dict() for page in self.pages],
        }


@dataclass(frozen=True)
class ConnectionTestResult:
    """Health-check outcome; never raised."""
    success: bool
    error: Optional[str] = None
