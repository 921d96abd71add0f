"""Tests for transaction record validation."""
import unittest
from decimal import Decimal

from statementflow.llm.validator import is_valid_transaction


class TestIsValidTransaction(unittest.TestCase):
    """Test is_valid_transaction."""

    def test_valid(self):
        self.assertTrue(is_valid_transaction({"date": "2025-01-05", "description": "A", "amount": -1.5}))
        self.assertTrue(is_valid_transaction({"date": "2024-02-29", "description": "", "amount": Decimal("3")}))

    def test_currency_and_category_optional(self):
        self.assertTrue(is_valid_transaction({"date": "2025-01-05", "description": "A", "amount": 0}))

    def test_bad_dates(self):
        for value in ("2025-02-30", "05/01/2025", "2025-1-5", None, 20250105):
            self.assertFalse(is_valid_transaction({"date": value, "description": "A", "amount": 1}), value)

    def test_bad_description(self):
        self.assertFalse(is_valid_transaction({"date": "2025-01-05", "amount": 1}))
        self.assertFalse(is_valid_transaction({"date": "2025-01-05", "description": 5, "amount": 1}))

    def test_bad_amount(self):
        for value in ("10", None, True, float("nan"), float("inf"), float("-inf"),
                      Decimal("NaN"), Decimal("Infinity")):
            self.assertFalse(is_valid_transaction({"date": "2025-01-05", "description": "A", "amount": value}), value)

    def test_not_a_mapping(self):
        self.assertFalse(is_valid_transaction(["2025-01-05", "A", 1]))


if __name__ == "__main__":
    unittest.main()
