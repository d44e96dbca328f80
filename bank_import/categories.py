"""Category suggestion for classified transactions.

The classifier does not decide categories itself; it asks a
:class:`CategorySuggester` and carries the answer through. The default
:class:`KeywordCategorizer` maps description keywords to UK self-employment
(SA103F) categories. Keywords are matched as substrings of the lowercased,
whitespace-collapsed description, in table order; the first hit wins.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from .models import TransactionType

HIGH_CONFIDENCE = 0.9
MEDIUM_CONFIDENCE = 0.6
LOW_CONFIDENCE = 0.3

DEFAULT_INCOME_CATEGORY = "SALES"
DEFAULT_EXPENSE_CATEGORY = "OTHER_EXPENSES"


@dataclass(frozen=True, slots=True)
class CategorySuggestion:
    category: str
    confidence: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")


@runtime_checkable
class CategorySuggester(Protocol):
    def suggest(
        self, description: str, transaction_type: TransactionType
    ) -> CategorySuggestion | None: ...


# A trailing space in a keyword means another word must follow it.
EXPENSE_KEYWORDS: tuple[tuple[str, str], ...] = (
    # Office costs
    ("amazon", "OFFICE_COSTS"),
    ("office", "OFFICE_COSTS"),
    ("software", "OFFICE_COSTS"),
    ("microsoft", "OFFICE_COSTS"),
    ("adobe", "OFFICE_COSTS"),
    ("stationery", "OFFICE_COSTS"),
    ("staples", "OFFICE_COSTS"),
    ("ryman", "OFFICE_COSTS"),
    ("phone", "OFFICE_COSTS"),
    ("vodafone", "OFFICE_COSTS"),
    ("ee ", "OFFICE_COSTS"),
    ("three ", "OFFICE_COSTS"),
    ("o2 ", "OFFICE_COSTS"),
    ("bt ", "OFFICE_COSTS"),
    ("broadband", "OFFICE_COSTS"),
    ("internet", "OFFICE_COSTS"),
    ("sky ", "OFFICE_COSTS"),
    ("virgin media", "OFFICE_COSTS"),
    # Travel
    ("uber", "TRAVEL"),
    ("train", "TRAVEL"),
    ("trainline", "TRAVEL"),
    ("national rail", "TRAVEL"),
    ("travel", "TRAVEL"),
    ("hotel", "TRAVEL"),
    ("premier inn", "TRAVEL"),
    ("travelodge", "TRAVEL"),
    ("ibis", "TRAVEL"),
    ("holiday inn", "TRAVEL"),
    ("airways", "TRAVEL"),
    ("airlines", "TRAVEL"),
    ("easyjet", "TRAVEL"),
    ("ryanair", "TRAVEL"),
    ("parking", "TRAVEL"),
    # Fuel
    ("petrol", "TRAVEL_MILEAGE"),
    ("diesel", "TRAVEL_MILEAGE"),
    ("fuel", "TRAVEL_MILEAGE"),
    ("shell", "TRAVEL_MILEAGE"),
    ("bp ", "TRAVEL_MILEAGE"),
    ("esso", "TRAVEL_MILEAGE"),
    ("texaco", "TRAVEL_MILEAGE"),
    # Premises
    ("electricity", "PREMISES"),
    ("gas bill", "PREMISES"),
    ("british gas", "PREMISES"),
    ("edf", "PREMISES"),
    ("scottish power", "PREMISES"),
    ("eon", "PREMISES"),
    ("sse ", "PREMISES"),
    ("octopus energy", "PREMISES"),
    ("rent", "PREMISES"),
    ("water", "PREMISES"),
    ("rates", "PREMISES"),
    ("business insurance", "PREMISES"),
    # Professional fees
    ("accountant", "PROFESSIONAL_FEES"),
    ("accounting", "PROFESSIONAL_FEES"),
    ("solicitor", "PROFESSIONAL_FEES"),
    ("legal", "PROFESSIONAL_FEES"),
    ("lawyer", "PROFESSIONAL_FEES"),
    # Financial charges
    ("bank charge", "FINANCIAL_CHARGES"),
    ("bank fee", "FINANCIAL_CHARGES"),
    ("transaction fee", "FINANCIAL_CHARGES"),
    ("card fee", "FINANCIAL_CHARGES"),
    # Advertising
    ("advertising", "ADVERTISING"),
    ("marketing", "ADVERTISING"),
    ("google ads", "ADVERTISING"),
    ("facebook ads", "ADVERTISING"),
    ("linkedin ads", "ADVERTISING"),
    # Interest
    ("loan interest", "INTEREST"),
    # Staff costs
    ("salary", "STAFF_COSTS"),
    ("wages", "STAFF_COSTS"),
    ("payroll", "STAFF_COSTS"),
    ("pension", "STAFF_COSTS"),
)

INCOME_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("interest", "OTHER_INCOME"),
    ("dividend", "OTHER_INCOME"),
    ("refund", "OTHER_INCOME"),
)

_WS_RE = re.compile(r"\s+")


def normalize_description(description: str | None) -> str:
    """Lowercase, trim and collapse internal whitespace."""

    if description is None:
        return ""
    return _WS_RE.sub(" ", description.strip().lower())


class KeywordCategorizer:
    """Keyword-table :class:`CategorySuggester`.

    A keyword hit is HIGH confidence. Without a hit, income falls back to
    ``SALES`` at MEDIUM confidence and expenses to ``OTHER_EXPENSES`` at LOW.
    """

    def __init__(
        self,
        *,
        expense_keywords: Sequence[tuple[str, str]] = EXPENSE_KEYWORDS,
        income_keywords: Sequence[tuple[str, str]] = INCOME_KEYWORDS,
    ) -> None:
        self._expense = tuple(expense_keywords)
        self._income = tuple(income_keywords)

    def suggest(
        self, description: str, transaction_type: TransactionType
    ) -> CategorySuggestion:
        text = normalize_description(description)
        if transaction_type is TransactionType.INCOME:
            table, fallback = self._income, CategorySuggestion(
                DEFAULT_INCOME_CATEGORY, MEDIUM_CONFIDENCE
            )
        else:
            table, fallback = self._expense, CategorySuggestion(
                DEFAULT_EXPENSE_CATEGORY, LOW_CONFIDENCE
            )
        for keyword, category in table:
            if keyword in text:
                return CategorySuggestion(category, HIGH_CONFIDENCE)
        return fallback


__all__ = [
    "DEFAULT_EXPENSE_CATEGORY",
    "DEFAULT_INCOME_CATEGORY",
    "EXPENSE_KEYWORDS",
    "HIGH_CONFIDENCE",
    "INCOME_KEYWORDS",
    "LOW_CONFIDENCE",
    "MEDIUM_CONFIDENCE",
    "CategorySuggester",
    "CategorySuggestion",
    "KeywordCategorizer",
    "normalize_description",
]
