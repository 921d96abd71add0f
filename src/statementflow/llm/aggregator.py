"""Cross-page transaction aggregation module."""
import logging
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Set

from .models import AggregatedStatement, PageResult, Transaction
from ..utils.exceptions import ValidationError
from ..utils.logger import get_logger


class AggregatorState(str, Enum):
    AWAITING_PAGE = "awaiting_page"
    PAGE_PROCESSED = "page_processed"
    FINALIZED = "finalized"


def dedup_key(transaction: Transaction) -> str:
    """Exact key; descriptions are already normalized upstream."""
    return f"{transaction.date}_{transaction.description}_{transaction.amount}"


class PageAggregator:
    """
    Accumulates page results for one statement.

    One instance per statement; it is not shared between uploads.
    """

    def __init__(self, total_pages: int, min_balance_confidence: int = 40,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize aggregator.

        Args:
            total_pages: Number of pages in the statement
            min_balance_confidence: Balance data below this confidence is ignored
            logger: Optional logger
        """
        if total_pages < 1:
            raise ValidationError("A statement needs at least one page")

        self.total_pages = total_pages
        self.min_balance_confidence = min_balance_confidence
        self.logger = logger or get_logger("aggregator")

        self.state = AggregatorState.AWAITING_PAGE
        self._statement = AggregatedStatement()
        self._seen: Set[str] = set()
        self._previous_balance: Optional[Decimal] = None

    @property
    def expected_page(self) -> int:
        return self._statement.pages_processed + 1

    @property
    def previous_balance(self) -> Optional[Decimal]:
        """Ending balance of the latest page that reported one."""
        return self._previous_balance

    def add_page(self, page: PageResult) -> List[Transaction]:
        """
        Merge one page; duplicates of earlier transactions are dropped.

        Args:
            page: Result for the next page in order

        Returns:
            Transactions newly added by this page
        """
        if self.state == AggregatorState.FINALIZED:
            raise ValidationError("Cannot add pages to a finalized statement")
        if page.page_number != self.expected_page:
            raise ValidationError(
                f"Expected page {self.expected_page}, got page {page.page_number}"
            )

        added = []
        for txn in page.transactions:
            key = dedup_key(txn)
            if key in self._seen:
                self._statement.duplicates_dropped += 1
                self.logger.debug(f"Dropping duplicate transaction {key} on page {page.page_number}")
                continue
            self._seen.add(key)
            added.append(txn)

        statement = self._statement
        statement.transactions.extend(added)
        statement.pages.append(page)
        statement.pages_processed += 1
        statement.total_input_tokens += page.usage.prompt_tokens
        statement.total_output_tokens += page.usage.completion_tokens

        if not page.failed and page.page_ending_balance is not None:
            self._previous_balance = page.page_ending_balance

        if statement.pages_processed >= self.total_pages:
            self.state = AggregatorState.PAGE_PROCESSED
        else:
            self.state = AggregatorState.AWAITING_PAGE
        return added

    def finalize(self, cancelled: bool = False) -> AggregatedStatement:
        """Reconcile balances and close the statement."""
        if self.state == AggregatorState.FINALIZED:
            return self._statement

        statement = self._statement
        statement.cancelled = cancelled
        statement.running_balance = self._previous_balance if self._previous_balance is not None else Decimal("0")
        self._reconcile_balances(statement)

        self.state = AggregatorState.FINALIZED
        self.logger.info(
            f"Aggregated {len(statement.transactions)} transactions from "
            f"{statement.pages_processed}/{self.total_pages} pages "
            f"({statement.duplicates_dropped} duplicates dropped)"
        )
        return statement

    def _reconcile_balances(self, statement: AggregatedStatement) -> None:
        closing_confidence = -1
        opening_confidence = -1

        for page in statement.pages:
            data = page.balance_data
            if data is None or data.confidence < self.min_balance_confidence:
                continue

            # Later pages win ties for closing, earlier pages for opening
            if data.ending_balance is not None and data.confidence >= closing_confidence:
                closing_confidence = data.confidence
                statement.closing_balance = data.ending_balance
                statement.balance_confidence = data.confidence
                statement.balance_source_page = page.page_number
            if data.opening_balance is not None and data.confidence > opening_confidence:
                opening_confidence = data.confidence
                statement.opening_balance = data.opening_balance
