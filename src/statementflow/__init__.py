"""StatementFlow: LLM-backed bank statement transaction extraction."""

__version__ = "1.0.0"
