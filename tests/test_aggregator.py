"""Tests for cross-page transaction aggregation."""
import unittest
from decimal import Decimal

from statementflow.llm.aggregator import AggregatorState, PageAggregator, dedup_key
from statementflow.llm.models import BalanceData, ExtractionUsage, PageResult, Transaction
from statementflow.utils.exceptions import ValidationError


def _txn(date="2025-01-05", description="POS PURCHASE", amount="-200"):
    return Transaction(date=date, description=description, amount=Decimal(amount).quantize(Decimal("0.01")),
                       category="shopping", currency="INR")


def _page(number, total, transactions=(), balance_data=None, ending=None, failed=False, usage=None):
    return PageResult(
        page_number=number,
        total_pages=total,
        transactions=list(transactions),
        balance_data=balance_data,
        page_ending_balance=ending,
        processing_notes="",
        failed=failed,
        usage=usage or ExtractionUsage(),
    )


class TestPageAggregator(unittest.TestCase):
    """Test PageAggregator functionality."""

    def test_duplicate_across_pages_kept_once(self):
        aggregator = PageAggregator(total_pages=2)
        aggregator.add_page(_page(1, 2, [_txn()]))
        added = aggregator.add_page(_page(2, 2, [_txn(), _txn(description="ATM", amount="-100")]))

        statement = aggregator.finalize()

        self.assertEqual(len(added), 1)
        self.assertEqual(len(statement.transactions), 2)
        self.assertEqual(statement.duplicates_dropped, 1)

    def test_dedup_key_is_exact(self):
        self.assertEqual(dedup_key(_txn()), "2025-01-05_POS PURCHASE_-200.00")
        self.assertNotEqual(dedup_key(_txn()), dedup_key(_txn(description="pos purchase")))

    def test_first_occurrence_wins_and_order_kept(self):
        aggregator = PageAggregator(total_pages=1)
        aggregator.add_page(_page(1, 1, [_txn(description="B"), _txn(description="A"), _txn(description="B")]))

        statement = aggregator.finalize()

        self.assertEqual([txn.description for txn in statement.transactions], ["B", "A"])

    def test_state_machine(self):
        aggregator = PageAggregator(total_pages=2)
        self.assertEqual(aggregator.state, AggregatorState.AWAITING_PAGE)
        self.assertEqual(aggregator.expected_page, 1)

        aggregator.add_page(_page(1, 2))
        self.assertEqual(aggregator.state, AggregatorState.AWAITING_PAGE)
        self.assertEqual(aggregator.expected_page, 2)

        aggregator.add_page(_page(2, 2))
        self.assertEqual(aggregator.state, AggregatorState.PAGE_PROCESSED)

        aggregator.finalize()
        self.assertEqual(aggregator.state, AggregatorState.FINALIZED)
        with self.assertRaises(ValidationError):
            aggregator.add_page(_page(3, 2))

    def test_out_of_order_page_rejected(self):
        aggregator = PageAggregator(total_pages=3)

        with self.assertRaises(ValidationError):
            aggregator.add_page(_page(2, 3))

    def test_previous_balance_threads_through_pages(self):
        aggregator = PageAggregator(total_pages=3)
        self.assertIsNone(aggregator.previous_balance)

        aggregator.add_page(_page(1, 3, ending=Decimal("1000.00")))
        self.assertEqual(aggregator.previous_balance, Decimal("1000.00"))

        # A failed page keeps the last known balance
        aggregator.add_page(_page(2, 3, ending=Decimal("1000.00"), failed=True))
        aggregator.add_page(_page(3, 3, ending=Decimal("800.00")))

        statement = aggregator.finalize()
        self.assertEqual(statement.running_balance, Decimal("800.00"))
        self.assertEqual(statement.failed_pages, [2])

    def test_token_totals(self):
        aggregator = PageAggregator(total_pages=2)
        aggregator.add_page(_page(1, 2, usage=ExtractionUsage(100, 20)))
        aggregator.add_page(_page(2, 2, usage=ExtractionUsage(50, 10)))

        statement = aggregator.finalize()

        self.assertEqual(statement.total_input_tokens, 150)
        self.assertEqual(statement.total_output_tokens, 30)
        self.assertEqual(statement.pages_processed, 2)

    def test_balance_reconciliation(self):
        aggregator = PageAggregator(total_pages=3, min_balance_confidence=40)
        aggregator.add_page(_page(1, 3, balance_data=BalanceData(
            opening_balance=Decimal("5000"), closing_balance=Decimal("4000"), confidence=90)))
        aggregator.add_page(_page(2, 3, balance_data=BalanceData(
            opening_balance=Decimal("4000"), closing_balance=Decimal("3000"), confidence=90)))
        aggregator.add_page(_page(3, 3, balance_data=BalanceData(
            closing_balance=Decimal("1"), confidence=30)))

        statement = aggregator.finalize()

        # Later page wins the closing tie, earlier page the opening tie; low confidence ignored
        self.assertEqual(statement.closing_balance, Decimal("3000"))
        self.assertEqual(statement.balance_source_page, 2)
        self.assertEqual(statement.opening_balance, Decimal("5000"))
        self.assertEqual(statement.balance_confidence, 90)

    def test_higher_confidence_wins(self):
        aggregator = PageAggregator(total_pages=2)
        aggregator.add_page(_page(1, 2, balance_data=BalanceData(closing_balance=Decimal("10"), confidence=95)))
        aggregator.add_page(_page(2, 2, balance_data=BalanceData(closing_balance=Decimal("20"), confidence=60)))

        self.assertEqual(aggregator.finalize().closing_balance, Decimal("10"))

    def test_independent_instances(self):
        first = PageAggregator(total_pages=1)
        second = PageAggregator(total_pages=1)
        first.add_page(_page(1, 1, [_txn()]))

        self.assertEqual(second.finalize().transactions, [])

    def test_cancelled_finalize(self):
        aggregator = PageAggregator(total_pages=3)
        aggregator.add_page(_page(1, 3))

        statement = aggregator.finalize(cancelled=True)

        self.assertTrue(statement.cancelled)
        self.assertEqual(statement.pages_processed, 1)

    def test_to_dict(self):
        aggregator = PageAggregator(total_pages=1)
        aggregator.add_page(_page(1, 1, [_txn()], ending=Decimal("100.00")))

        data = aggregator.finalize().to_dict()

        self.assertEqual(data["transactions"][0]["type"], "expense")
        self.assertEqual(data["runningBalance"], 100.0)
        self.assertEqual(data["pages"][0]["pageEndingBalance"], 100.0)


if __name__ == "__main__":
    unittest.main()
