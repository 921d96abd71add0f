"""Builds final prompt strings from the template registry."""
from typing import Iterable, Optional

from .guidance import build_category_guidance
from .templates import PromptTemplateRegistry, create_default_registry
from ..llm.models import PageContext


class TransactionPromptBuilder:
    """Renders extraction, validation and connection-test prompts."""

    def __init__(self, registry: Optional[PromptTemplateRegistry] = None):
        self.registry = registry or create_default_registry()

    def build_transaction_extraction_prompt(
        self,
        sanitized_page_text: str,
        user_categories: Iterable = (),
    ) -> str:
        variables = build_category_guidance(user_categories).as_variables()
        variables["sanitizedPageText"] = sanitized_page_text
        return self.registry.build("transaction_extraction", variables)

    def build_bank_validation_prompt(self, document_text: str) -> str:
        return self.registry.build("bank_validation", {"documentText": document_text})

    def build_connection_test_prompt(self) -> str:
        return self.registry.build("connection_test", {})

    @staticmethod
    def build_page_content(sanitized_page_text: str, context: Optional[PageContext]) -> str:
        """Wrap already-sanitized page text with page position and balance continuity."""
        if context is None:
            return sanitized_page_text

        lines = [
            "**PAGE CONTEXT:**",
            f"- This is page {context.page_number} of {context.total_pages} total pages",
            "- Extract only transactions visible on this page",
        ]
        if context.previous_balance is not None:
            lines.append(f"- Previous page ending balance: {context.previous_balance}")
        lines += [
            "",
            "**PAGE CONTENT TO PROCESS:**",
            sanitized_page_text,
            "",
            "**ADDITIONAL INSTRUCTIONS FOR PAGE PROCESSING:**",
            "- Set has_incomplete_transactions to true if a transaction continues from or onto another page",
            "- Maintain balance continuity from the previous page if provided",
            "- Report the running balance of each row in its balance field",
            "- Skip page headers and footers",
            "- Skip summary rows and totals for transactions (but extract balance information)",
        ]
        return "\n".join(lines)
