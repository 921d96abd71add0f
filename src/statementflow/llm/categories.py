"""Category taxonomy and resolution of model-suggested categories."""
import logging
import re
from typing import Iterable, List, Optional, Tuple

import Levenshtein

from ..utils.logger import get_logger

UNCATEGORIZED = "Uncategorized"
CATCH_ALL_CATEGORY = "others"

# (category, what belongs there, statement keywords)
FALLBACK_TAXONOMY: List[Tuple[str, str, List[str]]] = [
    ("transport", "Fuel, cabs, trains, flights, tolls", ["UBER", "OLA", "IRCTC", "PETROL", "FASTAG"]),
    ("food", "Groceries, restaurants, food delivery", ["SWIGGY", "ZOMATO", "SUPERMARKET", "BIGBASKET", "RESTAURANT"]),
    ("shopping", "Retail and online purchases", ["AMAZON", "FLIPKART", "MYNTRA", "POS PURCHASE"]),
    ("utilities", "Electricity, water, gas, phone, internet, rent", ["ELECTRICITY", "BSES", "AIRTEL", "JIO", "BROADBAND"]),
    ("cash_withdrawal", "ATM and branch cash withdrawals", ["ATM WDL", "CASH WITHDRAWAL", "ATW"]),
    ("salary", "Salary and payroll credits", ["SALARY", "SAL CR", "PAYROLL"]),
    ("investment", "Mutual funds, SIPs, stocks, deposits", ["SIP", "MUTUAL FUND", "ZERODHA", "FD BOOKING"]),
    ("insurance", "Insurance premiums", ["LIC", "PREMIUM", "POLICY"]),
    ("transfer", "Transfers between accounts and people", ["NEFT", "IMPS", "RTGS", "UPI", "TRANSFER"]),
    ("interest", "Interest earned or charged", ["INT.PD", "INTEREST", "INT CR"]),
    ("fees", "Bank charges, fees and penalties", ["CHARGES", "FEE", "GST", "PENALTY", "AMC"]),
    ("healthcare", "Hospitals, doctors, pharmacies", ["APOLLO", "PHARMACY", "HOSPITAL", "CLINIC"]),
]

TAXONOMY_CATEGORIES = [category for category, _, _ in FALLBACK_TAXONOMY]


def coerce_categories(user_categories: Optional[Iterable]) -> List[str]:
    """Category names from dicts, strings or UserCategory objects; blanks and duplicates dropped."""
    names: List[str] = []
    seen = set()
    for item in user_categories or ():
        if isinstance(item, str):
            name = item
        elif isinstance(item, dict):
            name = item.get("name")
        else:
            name = getattr(item, "name", None)
        if not isinstance(name, str):
            continue
        name = name.strip()
        if name and name.lower() not in seen:
            seen.add(name.lower())
            names.append(name)
    return names


class CategoryResolver:
    """Maps suggested categories into the allowed set with fuzzy matching."""

    def __init__(self, user_categories: Optional[Iterable] = None, fuzzy_threshold: int = 2,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize resolver.

        Args:
            user_categories: Caller's categories; empty means the fallback taxonomy
            fuzzy_threshold: Maximum Levenshtein distance for a fuzzy match, scaled down for short names
            logger: Optional logger
        """
        self.user_categories = coerce_categories(user_categories)
        self.fuzzy_threshold = fuzzy_threshold
        self.logger = logger or get_logger("categories")

        if self.user_categories:
            self.allowed = self.user_categories + [UNCATEGORIZED]
            self.fallback = UNCATEGORIZED
        else:
            self.allowed = TAXONOMY_CATEGORIES + [CATCH_ALL_CATEGORY, UNCATEGORIZED]
            self.fallback = CATCH_ALL_CATEGORY

        self._lookup = {self._normalize(name): name for name in self.allowed}

    def resolve(self, suggested: Optional[str]) -> str:
        """Return an allowed category for the model's suggestion."""
        if not isinstance(suggested, str) or not suggested.strip():
            return UNCATEGORIZED

        normalized = self._normalize(suggested)
        if normalized in self._lookup:
            return self._lookup[normalized]

        best, best_distance = None, self.fuzzy_threshold + 1
        for candidate, name in self._lookup.items():
            distance = Levenshtein.distance(normalized, candidate)
            if distance > self._max_distance(candidate):
                continue
            if distance < best_distance:
                best, best_distance = name, distance

        if best is not None:
            self.logger.debug(f"Fuzzy category match: {suggested} -> {best} (distance: {best_distance})")
            return best

        self.logger.debug(f"Unknown category '{suggested}', using {self.fallback}")
        return self.fallback

    def _max_distance(self, candidate: str) -> int:
        # Short names tolerate fewer edits
        return min(self.fuzzy_threshold, len(candidate) // 3)

    @staticmethod
    def _normalize(name: str) -> str:
        return re.sub(r"[\s\-]+", "_", name.strip().lower())
