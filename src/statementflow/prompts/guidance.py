"""Category guidance injected into the extraction prompt."""
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from ..llm.categories import (
    CATCH_ALL_CATEGORY,
    FALLBACK_TAXONOMY,
    UNCATEGORIZED,
    coerce_categories,
)

GENERIC_CATEGORIES_DESCRIPTION = (
    "automatically classified category based on description "
    "(e.g., food, transport, insurance, interest, transfer, etc.)"
)

# Category-name keywords -> a statement description that semantically belongs there
SEMANTIC_HINTS: List[Tuple[str, str]] = [
    (r"grocer|supermarket|provision", "SUPERMARKET PURCHASE XYZ"),
    (r"food|dining|restaurant|eat", "SWIGGY ORDER 4471"),
    (r"fuel|petrol|transport|travel|commute", "HP PETROL PUMP FUEL S/"),
    (r"rent|housing|home", "NEFT RENT PAYMENT LANDLORD"),
    (r"salary|income|pay", "SALARY CREDIT ACME LTD"),
    (r"util|bill|electric|phone|mobile|internet", "BSES ELECTRICITY BILL"),
    (r"shop|retail|amazon", "AMAZON PAY INDIA PVT"),
    (r"medic|health|pharma|doctor", "APOLLO PHARMACY"),
    (r"insur", "LIC PREMIUM DEBIT"),
    (r"invest|mutual|sip|stock", "SIP MUTUAL FUND ACH"),
    (r"cash|atm", "ATM WDL MG ROAD"),
    (r"entertain|movie|subscri", "NETFLIX SUBSCRIPTION"),
]

ILLUSTRATIVE_EXAMPLES: List[Tuple[str, str]] = [
    ("SUPERMARKET PURCHASE", "Groceries"),
    ("ZOMATO ORDER", "Dining Out"),
    ("HP PETROL PUMP", "Fuel"),
]

MIN_EXAMPLES = 3
MAX_EXAMPLES = 5


@dataclass(frozen=True)
class CategoryGuidance:
    """Prompt variables describing how to categorize."""
    categories_description: str
    categorization_guidelines: str

    def as_variables(self) -> Dict[str, str]:
        return {
            "categoriesDescription": self.categories_description,
            "categorizationGuidelines": self.categorization_guidelines,
        }


def build_category_guidance(user_categories: Iterable = ()) -> CategoryGuidance:
    """Branch on whether the caller supplied its own categories."""
    names = coerce_categories(user_categories)
    if names:
        return CategoryGuidance(
            categories_description=f"one of the user's preferred categories: {', '.join(names)}",
            categorization_guidelines=_user_category_guidelines(names),
        )
    return CategoryGuidance(
        categories_description=GENERIC_CATEGORIES_DESCRIPTION,
        categorization_guidelines=_taxonomy_guidelines(),
    )


def semantic_examples(names: List[str]) -> List[Tuple[str, str]]:
    """Worked (description, category) pairs, tailored to the user's names where possible."""
    examples: List[Tuple[str, str]] = []
    for name in names:
        for pattern, description in SEMANTIC_HINTS:
            if re.search(pattern, name, re.IGNORECASE):
                examples.append((description, name))
                break
        if len(examples) == MAX_EXAMPLES:
            return examples

    for description, name in ILLUSTRATIVE_EXAMPLES:
        if len(examples) >= MIN_EXAMPLES:
            break
        used_words = {existing.split()[0] for existing, _ in examples}
        used_names = {category for _, category in examples}
        if description.split()[0] not in used_words and name not in used_names:
            examples.append((description, name))
    return examples


def _user_category_guidelines(names: List[str]) -> str:
    tailored = set(names)
    lines = []
    for description, category in semantic_examples(names):
        suffix = "" if category in tailored else " (only if such a category is in the list)"
        lines.append(f'       - "{description}" → "{category}"{suffix}')
    quoted = ", ".join(f'"{name}"' for name in names)

    return (
        "3. **Smart Categorization - Think Like a Human Bank Statement Expert**: "
        "You are an experienced financial analyst who has read thousands of bank statements. "
        f"ONLY use the user's preferred categories: {quoted}. Never invent a new category. "
        "Match by meaning rather than exact wording: decode abbreviations, merchant names and "
        "payment channels to find the closest category in the list. Examples of semantic matching:\n"
        + "\n".join(lines)
        + f'\n       If no category in the list is a confident match, use "{UNCATEGORIZED}" instead of guessing.'
    )


def _taxonomy_guidelines() -> str:
    lines = []
    for category, meaning, keywords in FALLBACK_TAXONOMY:
        samples = ", ".join(f'"{keyword}"' for keyword in keywords)
        lines.append(f'       - {meaning} → "{category}" (e.g., {samples})')

    return (
        "3. **Smart Categorization - Think Like a Human Bank Statement Expert**: "
        "You are an experienced financial analyst who has read thousands of bank statements. "
        "Decode abbreviations and merchant names to infer the purpose of each transaction, "
        "then use exactly one of these categories:\n"
        + "\n".join(lines)
        + f'\n       - Anything that fits none of the above → "{CATCH_ALL_CATEGORY}"'
        "\n       Never invent a category outside this list."
    )
