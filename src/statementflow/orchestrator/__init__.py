"""Statement orchestration."""
from .processor import StatementProcessor

__all__ = ["StatementProcessor"]
