"""Versioned prompt templates with named placeholders."""
import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

from ..utils.exceptions import MissingVariablesError, TemplateNotFoundError

PLACEHOLDER_PATTERN = re.compile(r"\{\{(\w+)\}\}")


@dataclass(frozen=True)
class PromptTemplate:
    """Immutable prompt body plus the variables it requires."""
    id: str
    body: str
    required_variables: FrozenSet[str] = field(default_factory=frozenset)
    name: str = ""
    description: str = ""
    version: int = 1


def format_variable_value(value: Any) -> str:
    """Stringify a template variable; non-primitives become JSON."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, ensure_ascii=False, default=str)


class PromptTemplateRegistry:
    """Explicitly constructed registry; pass it to whatever renders prompts."""

    def __init__(self, templates: Optional[List[PromptTemplate]] = None):
        self._templates: Dict[str, PromptTemplate] = {}
        for template in templates or []:
            self.register(template)

    def register(self, template: PromptTemplate) -> None:
        self._templates[template.id] = template

    def get(self, template_id: str) -> Optional[PromptTemplate]:
        return self._templates.get(template_id)

    def all(self) -> List[PromptTemplate]:
        return list(self._templates.values())

    def missing_variables(self, template_id: str, variables: Mapping[str, Any]) -> List[str]:
        """Required placeholders absent from variables."""
        template = self._require(template_id)
        return sorted(name for name in template.required_variables if name not in variables)

    def validate(self, template_id: str, variables: Mapping[str, Any]) -> Tuple[bool, List[str]]:
        missing = self.missing_variables(template_id, variables)
        return not missing, missing

    def build(self, template_id: str, variables: Optional[Mapping[str, Any]] = None) -> str:
        """
        Render a template.

        Args:
            template_id: Registered template id
            variables: Placeholder values

        Returns:
            Rendered prompt with surrounding whitespace stripped

        Raises:
            TemplateNotFoundError: Unknown template id
            MissingVariablesError: One or more required variables absent
        """
        variables = variables or {}
        template = self._require(template_id)

        missing = self.missing_variables(template_id, variables)
        if missing:
            raise MissingVariablesError(template_id, missing)

        def substitute(match: "re.Match") -> str:
            name = match.group(1)
            if name not in variables:
                return match.group(0)
            return format_variable_value(variables[name])

        return PLACEHOLDER_PATTERN.sub(substitute, template.body).strip()

    def _require(self, template_id: str) -> PromptTemplate:
        template = self.get(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template


TRANSACTION_EXTRACTION = PromptTemplate(
    id="transaction_extraction",
    name="Transaction Extraction",
    description="Extracts transactions and balance information from one statement page",
    required_variables=frozenset({"categoriesDescription", "categorizationGuidelines", "sanitizedPageText"}),
    body="""
Analyze the bank statement text provided below and extract individual transactions AND balance information.

Return ONLY valid JSON with the following structure:

{
  "transactions": [
    {
      "date": "YYYY-MM-DD",
      "description": "exact original transaction description as it appears in the statement",
      "amount": number (positive for money IN/credits, negative for money OUT/debits),
      "balance": number or null (running balance printed on the same row, if any),
      "suggested_category": "{{categoriesDescription}}"
    }
  ],
  "balance_data": {
    "opening_balance": number or null,
    "closing_balance": number or null,
    "available_balance": number or null,
    "current_balance": number or null,
    "balance_confidence": number (0-100),
    "balance_extraction_notes": "description of balance data found or issues"
  },
  "has_incomplete_transactions": boolean
}

Critical Guidelines:
1. **Amount Signs (VERY IMPORTANT)**:
   - Money COMING IN (deposits, salary, refunds, interest earned) = POSITIVE amount
   - Money GOING OUT (expenses, withdrawals, payments, fees) = NEGATIVE amount
   - When a running balance column exists, it decides the sign: if the balance rises after the row the amount is positive, if it falls the amount is negative, even when the description suggests otherwise
   - Otherwise use "Dr"/"Debit" = negative and "Cr"/"Credit" = positive
   - Reference numbers, cheque numbers and phone numbers next to the amount are NOT part of it. Never join them to the amount; check that previous balance plus amount equals the new balance

2. **Description Preservation**: Keep the original transaction description EXACTLY as it appears in the statement.

{{categorizationGuidelines}}

4. **Balance Detection**:
   - Look for balance information in headers, footers, or balance columns
   - Common labels: "Opening Balance", "Closing Balance", "Available Balance", "Current Balance"
   - Confidence score:
     * 90-100: Clearly labeled balance with obvious amount
     * 70-89: Balance amount found but label is unclear
     * 40-69: Probable balance based on context clues
     * 20-39: Possible balance but uncertain
     * 0-19: No clear balance information found
   - If no balance is found, set all balance fields to null and confidence to 0

5. **Data Filtering**:
   - Do not list opening/closing balance rows as transactions (report them in balance_data)
   - Skip summary rows and totals
   - Focus only on individual transaction line items

6. **Multi-line Handling**: If a transaction spans multiple lines, merge them into a single entry while preserving the complete description.

7. **Date Formatting**: Convert all dates to YYYY-MM-DD format regardless of the source format.

Text to analyze:
{{sanitizedPageText}}

Return ONLY the JSON object, no additional text or formatting.
""",
)

BANK_VALIDATION = PromptTemplate(
    id="bank_validation",
    name="Bank Statement Validation",
    description="Validates bank name and statement period",
    required_variables=frozenset({"documentText"}),
    body="""
Analyze the bank statement document and extract the following information.

Return ONLY valid JSON with the following structure:

{
  "bank_name": "extracted bank name",
  "statement_period": {
    "from_date": "YYYY-MM-DD",
    "to_date": "YYYY-MM-DD",
    "month": "YYYY-MM"
  },
  "account_number": "last 4 digits only",
  "is_valid_statement": boolean,
  "validation_notes": "any issues or observations"
}

Guidelines:
1. **Bank Name Detection**: Look for bank names in headers/footers
2. **Period Extraction**: Find the statement period, usually at the top of the document
3. **Account Security**: Only extract the last 4 digits of account numbers
4. **Validation**: Check if this looks like a legitimate bank statement

Document text to analyze:
{{documentText}}

Return ONLY the JSON object, no additional text or formatting.
""",
)

CONNECTION_TEST = PromptTemplate(
    id="connection_test",
    name="Connection Test",
    description="Minimal prompt to check endpoint connectivity",
    body="Test connection - please respond with a simple greeting.",
)

DEFAULT_TEMPLATES = [TRANSACTION_EXTRACTION, BANK_VALIDATION, CONNECTION_TEST]


def create_default_registry() -> PromptTemplateRegistry:
    """A fresh registry holding the built-in templates."""
    return PromptTemplateRegistry(DEFAULT_TEMPLATES)
