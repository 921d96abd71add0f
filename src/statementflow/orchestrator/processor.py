"""Sequential page loop for one statement.

Pages run in order because each prompt carries the previous page's ending
balance. A failed page is recorded and the loop moves on; cancellation is
checked between pages, never during a provider call.
"""
import logging
import threading
import uuid
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Union

from ..llm.aggregator import PageAggregator
from ..llm.models import AggregatedStatement, PageContext, PageResult, RawPage
from ..llm.normalizer import parse_amount
from ..llm.providers import LLMProvider
from ..utils.exceptions import ProviderError
from ..utils.logger import get_logger, log_event, statement_logger

PageInput = Union[str, RawPage]


class StatementProcessor:
    """Orchestrates the flow: page text -> provider -> aggregator."""

    def __init__(self, provider: LLMProvider, min_balance_confidence: int = 40,
                 logger: Optional[logging.Logger] = None):
        self.provider = provider
        self.min_balance_confidence = min_balance_confidence
        self.logger = logger or get_logger("processor")

    def process_page(
        self,
        page: RawPage,
        previous_balance: Union[Decimal, float, int, None] = None,
        user_categories: Iterable = (),
        logger=None,
    ) -> PageResult:
        """
        Extract one page; failures become a result with processing notes.

        Args:
            page: Page text and position
            previous_balance: Ending balance carried over from the previous page, any numeric type
            user_categories: Caller's category labels
            logger: Logger or adapter for this statement

        Returns:
            PageResult
        """
        logger = logger or self.logger
        previous_balance = parse_amount(previous_balance)
        log_event(logger, "page.started", page=page.page_number, total_pages=page.total_pages)
        context = PageContext(page.page_number, page.total_pages, previous_balance)

        try:
            result = self.provider.extract_transactions(page.text, user_categories, context)
        except ProviderError as e:
            if e.is_service_error:
                notes = f"LLM service error: {e.message}. Please check your LLM provider configuration and API keys."
            else:
                notes = f"Processing error: {e.message}"
            return self._failed_page(page, previous_balance, notes, e.is_service_error, e, logger)
        except Exception as e:
            return self._failed_page(page, previous_balance, f"Processing error: {e}", False, e, logger)

        if result.parse_error:
            notes = f"No transactions extracted from page {page.page_number}: {result.parse_error}"
        else:
            notes = f"Extracted {len(result.transactions)} transactions from page {page.page_number}"
            if result.balance_data is not None:
                notes += f" and extracted balance data (confidence: {result.balance_data.confidence}%)"

        ending_balance = result.ending_balance if result.ending_balance is not None else previous_balance
        log_event(
            logger,
            "page.completed",
            page=page.page_number,
            transactions=len(result.transactions),
            prompt_tokens=result.usage.prompt_tokens,
            completion_tokens=result.usage.completion_tokens,
        )
        return PageResult(
            page_number=page.page_number,
            total_pages=page.total_pages,
            transactions=list(result.transactions),
            balance_data=result.balance_data,
            page_ending_balance=ending_balance,
            processing_notes=notes,
            has_incomplete_transactions=result.has_incomplete_transactions,
            security_breakdown=dict(result.security_breakdown or {}),
            usage=result.usage,
        )

    def process_statement(
        self,
        pages: Sequence[PageInput],
        user_categories: Iterable = (),
        cancel_event: Optional[threading.Event] = None,
        statement_id: Optional[str] = None,
    ) -> AggregatedStatement:
        """
        Process all pages of one statement in order.

        Args:
            pages: Page texts or RawPage objects, in page order
            user_categories: Caller's category labels
            cancel_event: Set by the caller to stop before the next page
            statement_id: Identifier used in log records

        Returns:
            Finalized AggregatedStatement
        """
        raw_pages = self._as_raw_pages(pages)
        user_categories = list(user_categories or ())
        statement_id = statement_id or uuid.uuid4().hex[:8]
        logger = statement_logger(self.logger, statement_id)

        aggregator = PageAggregator(len(raw_pages), self.min_balance_confidence, logger=self.logger)
        for page in raw_pages:
            if cancel_event is not None and cancel_event.is_set():
                log_event(logger, "statement.cancelled", page=page.page_number,
                          pages_processed=page.page_number - 1)
                return aggregator.finalize(cancelled=True)

            result = self.process_page(page, aggregator.previous_balance, user_categories, logger)
            aggregator.add_page(result)

        statement = aggregator.finalize()
        log_event(
            logger,
            "statement.finalized",
            pages=statement.pages_processed,
            transactions=len(statement.transactions),
            failed_pages=len(statement.failed_pages),
        )
        return statement

    @staticmethod
    def _as_raw_pages(pages: Sequence[PageInput]) -> List[RawPage]:
        total = len(pages)
        return [
            page if isinstance(page, RawPage) else RawPage(text=page, page_number=index, total_pages=total)
            for index, page in enumerate(pages, start=1)
        ]

    @staticmethod
    def _failed_page(page: RawPage, previous_balance: Optional[Decimal], notes: str,
                     service_error: bool, error: Exception, logger) -> PageResult:
        log_event(logger, "page.failed", level=logging.ERROR, page=page.page_number,
                  error=type(error).__name__, service_error=service_error)
        return PageResult(
            page_number=page.page_number,
            total_pages=page.total_pages,
            transactions=[],
            balance_data=None,
            page_ending_balance=previous_balance,
            processing_notes=notes,
            failed=True,
            service_error=service_error,
        )
