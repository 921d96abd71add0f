"""Per-record structural checks."""
import math
import re
from datetime import date
from decimal import Decimal
from typing import Any, Mapping

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_valid_iso_date(value: Any) -> bool:
    """True for a YYYY-MM-DD string naming a real calendar date."""
    if not isinstance(value, str) or not ISO_DATE_PATTERN.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def is_valid_transaction(record: Mapping[str, Any]) -> bool:
    """
    Check that a record can become a Transaction.

    Currency and category are defaulted elsewhere, so only date,
    description and amount are required here.
    """
    if not isinstance(record, Mapping):
        return False
    if not is_valid_iso_date(record.get("date")):
        return False
    if not isinstance(record.get("description"), str):
        return False

    amount = record.get("amount")
    if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
        return False
    if isinstance(amount, float) and not math.isfinite(amount):
        return False
    if isinstance(amount, Decimal) and not amount.is_finite():
        return False
    return True
