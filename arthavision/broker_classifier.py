"""
Broker Classification Module - ArthaVision Analytics Core

Annotates the broker codes an analyst reads off a broker summary with
their bandarmology category (foreign "rich" money, conglomerate desks,
retail flow or mixed).

Key Components:
    - BrokerRegistry: immutable code -> category lookup with UNKNOWN fallback
    - BrokerClassifier: parses a comma-separated code list in input order

Inputs: free-text broker list, e.g. "yp, bk, MS"
Outputs: sequence of BrokerEntry

Version: 1.0.0
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from .config import LOGGER, BROKER_TABLE, BrokerCategory


__version__ = "1.0.0"


# =============================================================================
# DATA CONTAINERS
# =============================================================================

@dataclass(frozen=True)
class BrokerEntry:
    """A broker code with its registry classification."""

    code: str
    category: BrokerCategory
    name: str = ""

    @property
    def is_known(self) -> bool:
        return self.category != BrokerCategory.UNKNOWN

    def to_feedback(self) -> str:
        """Desk annotation, e.g. ``"YP: RITEL"``."""
        return f"{self.code}: {self.category.label}"

    def to_dict(self) -> Dict[str, str]:
        return {
            "code": self.code,
            "category": self.category.value,
            "label": self.category.label,
            "name": self.name,
        }


# =============================================================================
# BROKER REGISTRY
# =============================================================================

class BrokerRegistry:
    """
    Read-only broker reference table.

    Lookups normalize the code to uppercase. A code missing from the table
    is not an error: it comes back classified as UNKNOWN.
    """

    def __init__(self, table: Optional[Mapping[str, Tuple[BrokerCategory, str]]] = None):
        source = BROKER_TABLE if table is None else table
        self._entries: Mapping[str, BrokerEntry] = MappingProxyType({
            code.strip().upper(): BrokerEntry(code.strip().upper(), category, name)
            for code, (category, name) in source.items()
        })

    def lookup(self, code: Optional[str]) -> BrokerEntry:
        normalized = (code or "").strip().upper()
        entry = self._entries.get(normalized)
        if entry is None:
            return BrokerEntry(normalized, BrokerCategory.UNKNOWN)
        return entry

    def codes(self, category: Optional[BrokerCategory] = None) -> List[str]:
        """Registered codes, optionally restricted to one category."""
        return sorted(
            code for code, entry in self._entries.items()
            if category is None or entry.category == category
        )

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code.strip().upper() in self._entries

    def __len__(self) -> int:
        return len(self._entries)


# Process-wide default registry
BROKER_REGISTRY = BrokerRegistry()


# =============================================================================
# BROKER CLASSIFIER
# =============================================================================

class BrokerClassifier:
    """Splits a raw broker list and classifies every occurrence."""

    def __init__(self, registry: Optional[BrokerRegistry] = None):
        self.registry = registry if registry is not None else BROKER_REGISTRY
        self.logger = LOGGER

    def classify(self, raw_input: Optional[str]) -> Iterator[BrokerEntry]:
        """
        Yield one BrokerEntry per non-empty token, in input order.

        Duplicates are classified once per occurrence. Tokens are not
        validated for shape; anything unregistered is UNKNOWN.
        """
        if not raw_input:
            return
        for token in raw_input.split(","):
            code = token.strip().upper()
            if code:
                yield self.registry.lookup(code)

    def classify_all(self, raw_input: Optional[str]) -> List[BrokerEntry]:
        entries = list(self.classify(raw_input))
        self.logger.debug(f"Classified {len(entries)} broker codes")
        return entries

    @staticmethod
    def summarize(entries: List[BrokerEntry]) -> Dict[BrokerCategory, int]:
        """Count occurrences per category, every category present."""
        counts = Counter(e.category for e in entries)
        return {category: counts.get(category, 0) for category in BrokerCategory}

    @staticmethod
    def feedback_lines(entries: List[BrokerEntry]) -> List[str]:
        return [e.to_feedback() for e in entries]


def classify_brokers(raw_input: Optional[str]) -> List[BrokerEntry]:
    """Classify a comma-separated broker list against the default registry."""
    return BrokerClassifier().classify_all(raw_input)
