"""Turns noisy model output into validated transactions."""
import json
import logging
import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as SchemaValidationError

from .categories import UNCATEGORIZED, CategoryResolver
from .models import BalanceData, ExtractionResult, ExtractionUsage, Transaction
from .schemas import ExtractionResponse, RawBalanceData
from .validator import is_valid_transaction
from ..utils.logger import get_logger

JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
CENTS = Decimal("0.01")

DATE_FORMATS = [
    "%Y-%m-%d",
    "%d-%m-%Y",
    "%d/%m/%Y",
    "%d.%m.%Y",
    "%d-%m-%y",
    "%d/%m/%y",
    "%d.%m.%y",
    "%d-%b-%Y",
    "%d %b %Y",
    "%d-%b-%y",
    "%d %b %y",
    "%d %B %Y",
    "%d-%B-%Y",
    "%Y/%m/%d",
]

_DEBIT_CREDIT_SUFFIX = re.compile(r"\s*(dr|cr)\.?$", re.IGNORECASE)
_CURRENCY_TOKENS = re.compile(r"(₹|\$|€|£|\bRs\.?|\bINR\b|\bUSD\b)", re.IGNORECASE)
_NUMBER = re.compile(r"^[+-]?\d+(\.\d+)?$")


def extract_json_object(text: Any) -> Optional[Dict[str, Any]]:
    """
    Pull the JSON object out of a model response.

    Args:
        text: Raw model output, possibly fenced or wrapped in prose

    Returns:
        Parsed object, or None when nothing parses to a JSON object
    """
    if not isinstance(text, str) or not text.strip():
        return None

    match = JSON_OBJECT_PATTERN.search(text)
    candidate = match.group(0) if match else text.strip()

    for attempt in (candidate, _clean_json(candidate)):
        try:
            data = json.loads(attempt)
        except json.JSONDecodeError:
            continue
        return data if isinstance(data, dict) else None
    return None


def _clean_json(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        cleaned = "\n".join(lines[1:-1]) if len(lines) > 2 else cleaned
        if cleaned.startswith("json"):
            cleaned = cleaned[4:].strip()

    # Smart quotes and trailing commas are the usual culprits
    cleaned = cleaned.replace("“", '"').replace("”", '"')
    return re.sub(r",\s*([\]}])", r"\1", cleaned)


def normalize_date(value: Any) -> Optional[str]:
    """Normalize a day-first date in any common format to YYYY-MM-DD."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str) or not value.strip():
        return None

    date_str = value.strip()
    if re.match(r"^\d{4}-\d{2}-\d{2}T", date_str):
        date_str = date_str[:10]

    for fmt in DATE_FORMATS:
        try:
            dt = datetime.strptime(date_str, fmt)
        except ValueError:
            continue
        return dt.date().isoformat()
    return None


def parse_amount(value: Any) -> Optional[Decimal]:
    """
    Parse a monetary value into a Decimal with two places.

    Accepts numbers and strings with thousands separators, currency
    symbols, parentheses for negatives and Dr/Cr suffixes.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float, Decimal)):
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            return None
    elif isinstance(value, str):
        text = value.strip()
        sign = None
        suffix = _DEBIT_CREDIT_SUFFIX.search(text)
        if suffix:
            sign = -1 if suffix.group(1).lower() == "dr" else 1
            text = text[:suffix.start()]
        if text.startswith("(") and text.endswith(")"):
            sign = -1
            text = text[1:-1]

        text = _CURRENCY_TOKENS.sub("", text)
        text = re.sub(r"[,\s]", "", text)
        if not _NUMBER.match(text):
            return None
        amount = Decimal(text)
        if sign is not None:
            amount = abs(amount) * sign
    else:
        return None

    if not amount.is_finite():
        return None
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def collapse_whitespace(value: str) -> str:
    return re.sub(r"\s+", " ", value).strip()


class ResponseNormalizer:
    """Converts raw model text into an ExtractionResult; never raises on bad output."""

    def __init__(self, default_currency: str = "INR", min_balance_confidence: int = 40,
                 logger: Optional[logging.Logger] = None):
        self.default_currency = default_currency
        self.min_balance_confidence = min_balance_confidence
        self.logger = logger or get_logger("normalizer")

    def normalize(
        self,
        text: str,
        usage: Optional[ExtractionUsage] = None,
        previous_balance: Optional[Decimal] = None,
        security_breakdown: Optional[Dict[str, int]] = None,
        category_resolver: Optional[CategoryResolver] = None,
    ) -> ExtractionResult:
        """
        Normalize one page response.

        Args:
            text: Raw model output
            usage: Token usage reported by the provider
            previous_balance: Previous page's ending balance, seeds the running balance
            security_breakdown: Sanitization counts to attach to the result
            category_resolver: Maps suggested categories into the allowed set

        Returns:
            ExtractionResult; empty with parse_error set when the output is not JSON
        """
        usage = usage or ExtractionUsage()
        previous_balance = parse_amount(previous_balance)
        data = extract_json_object(text)
        if data is None:
            return self._unparseable(usage, previous_balance, security_breakdown,
                                     "Response did not contain a JSON object")

        try:
            response = ExtractionResponse.model_validate(data)
        except SchemaValidationError as e:
            return self._unparseable(usage, previous_balance, security_breakdown,
                                     f"Response did not match the extraction schema: {e.error_count()} errors")

        balance_data = self._balance_data(response.balance_data)
        trusted = balance_data if self.is_trusted(balance_data) else None

        running = previous_balance
        if running is None and trusted is not None:
            running = trusted.opening_balance

        transactions: List[Transaction] = []
        skipped = 0
        for raw in response.transactions:
            amount = parse_amount(raw.get("amount"))
            row_balance = parse_amount(raw.get("balance"))

            # The balance delta decides sign and magnitude when both sides are known
            if row_balance is not None and running is not None:
                delta = row_balance - running
                if delta != 0:
                    if amount is not None and amount != delta:
                        self.logger.debug(f"Amount {amount} replaced by balance delta {delta}")
                    amount = delta
            if row_balance is not None:
                running = row_balance
            elif running is not None and amount is not None:
                running += amount

            description = raw.get("description")
            candidate = {
                "date": normalize_date(raw.get("date")),
                "description": collapse_whitespace(description) if isinstance(description, str) else None,
                "amount": amount,
            }
            if not is_valid_transaction(candidate):
                skipped += 1
                continue

            transactions.append(Transaction(
                date=candidate["date"],
                description=candidate["description"],
                amount=amount,
                category=self._category(raw, category_resolver),
                currency=self._currency(raw.get("currency")),
                balance=row_balance,
            ))

        if skipped:
            self.logger.debug(f"Filtered {skipped} invalid transaction records")

        ending_balance = running
        if trusted is not None and trusted.ending_balance is not None:
            ending_balance = trusted.ending_balance

        return ExtractionResult(
            transactions=transactions,
            usage=usage,
            balance_data=balance_data,
            security_breakdown=security_breakdown,
            ending_balance=ending_balance,
            has_incomplete_transactions=response.has_incomplete_transactions,
        )

    def is_trusted(self, balance_data: Optional[BalanceData]) -> bool:
        return balance_data is not None and balance_data.confidence >= self.min_balance_confidence

    def _unparseable(self, usage, previous_balance, security_breakdown, reason: str) -> ExtractionResult:
        self.logger.warning(f"Could not parse model response: {reason}")
        return ExtractionResult(
            usage=usage,
            security_breakdown=security_breakdown,
            ending_balance=previous_balance,
            parse_error=reason,
        )

    @staticmethod
    def _balance_data(raw: Optional[RawBalanceData]) -> Optional[BalanceData]:
        if raw is None:
            return None
        return BalanceData(
            opening_balance=parse_amount(raw.opening_balance),
            closing_balance=parse_amount(raw.closing_balance),
            available_balance=parse_amount(raw.available_balance),
            current_balance=parse_amount(raw.current_balance),
            confidence=raw.balance_confidence,
            notes=raw.balance_extraction_notes,
        )

    @staticmethod
    def _category(raw: Dict[str, Any], resolver: Optional[CategoryResolver]) -> str:
        suggested = raw.get("suggested_category")
        if suggested is None:
            suggested = raw.get("category")
        if resolver is not None:
            return resolver.resolve(suggested)
        if isinstance(suggested, str) and suggested.strip():
            return suggested.strip()
        return UNCATEGORIZED

    def _currency(self, value: Any) -> str:
        if isinstance(value, str) and value.strip():
            return value.strip().upper()
        return self.default_currency
