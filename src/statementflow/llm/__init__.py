"""LLM processing: models, normalization, validation and aggregation."""
from .models import (
    AggregatedStatement,
    BalanceData,
    ConnectionTestResult,
    ExtractionResult,
    ExtractionUsage,
    PageContext,
    PageResult,
    RawPage,
    Transaction,
    UserCategory,
)
from .normalizer import ResponseNormalizer, extract_json_object, normalize_date, parse_amount
from .validator import is_valid_transaction
from .categories import CategoryResolver, FALLBACK_TAXONOMY, UNCATEGORIZED, CATCH_ALL_CATEGORY
from .aggregator import AggregatorState, PageAggregator, dedup_key

__all__ = [
    "AggregatedStatement",
    "BalanceData",
    "ConnectionTestResult",
    "ExtractionResult",
    "ExtractionUsage",
    "PageContext",
    "PageResult",
    "RawPage",
    "Transaction",
    "UserCategory",
    "ResponseNormalizer",
    "extract_json_object",
    "normalize_date",
    "parse_amount",
    "is_valid_transaction",
    "CategoryResolver",
    "FALLBACK_TAXONOMY",
    "UNCATEGORIZED",
    "CATCH_ALL_CATEGORY",
    "AggregatorState",
    "PageAggregator",
    "dedup_key",
]
