"""
Input Normalization Module - ArthaVision Analytics Core

Coerces raw form entries into typed records before any analysis runs.
Malformed numeric entries never propagate: they become 0.0, the same
sentinel the input panel uses for "not entered".

Inputs: raw dicts / strings from the analyst input panel or CLI
Outputs: FundamentalMetrics, TacticalInput

Version: 1.0.0
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

from .config import LOGGER, DEVIATION_CONFIG, ORDER_BOOK_OPTIONS, TRADE_BOOK_OPTIONS


__version__ = "1.0.0"


# =============================================================================
# COERCION HELPERS
# =============================================================================

# A lone comma with one or two trailing digits is a decimal comma ("1,5")
_DECIMAL_COMMA = re.compile(r"^[+-]?\d+,\d{1,2}$")


def coerce_float(value: Any, default: float = 0.0) -> float:
    """Parse a numeric entry, returning ``default`` for anything unusable."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip()
        if _DECIMAL_COMMA.match(value):
            value = value.replace(",", ".")
        else:
            value = value.replace(",", "")
        if not value:
            return default
    try:
        f = float(value)
    except (TypeError, ValueError):
        LOGGER.debug(f"Coerced non-numeric entry {value!r} to {default}")
        return default
    if math.isnan(f) or math.isinf(f):
        return default
    return f


def coerce_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _snake_to_camel(name: str) -> str:
    head, *tail = name.split("_")
    return head + "".join(part.capitalize() for part in tail)


def _pick(data: Mapping[str, Any], name: str, *aliases: str) -> Any:
    """Read a field by snake_case name, camelCase name or explicit alias."""
    for key in (name, _snake_to_camel(name)) + aliases:
        if key in data:
            return data[key]
    return None


# =============================================================================
# FUNDAMENTAL METRICS
# =============================================================================

# camelCase keys used by the web input form where they differ from
# the plain camelCase of the field name
_METRIC_ALIASES: Dict[str, tuple] = {
    "pbv": ("pbvInput",),
    "pe": ("peInput",),
    "ps": ("psInput",),
    "der": ("derInput",),
}


@dataclass
class FundamentalMetrics:
    """Company financial statement entries (IDR billions where monetary)."""

    # Profitability (%)
    roe: float = 0.0
    roa: float = 0.0
    npm: float = 0.0

    # Income statement
    revenue: float = 0.0
    gross_profit: float = 0.0
    operating_profit: float = 0.0
    eps: float = 0.0
    ebitda: float = 0.0

    # Valuation multiples (x)
    pbv: float = 0.0
    pe: float = 0.0
    ps: float = 0.0

    # Balance sheet
    total_assets: float = 0.0
    total_liabilities: float = 0.0
    total_equity: float = 0.0
    current_assets: float = 0.0
    current_liabilities: float = 0.0
    cash: float = 0.0
    inventory: float = 0.0
    der: float = 0.0

    # Cash flow
    cfo: float = 0.0
    capex: float = 0.0
    fcf: float = 0.0

    # Revenue history
    rev_now: float = 0.0
    rev_prev: float = 0.0
    rev_last_year: float = 0.0

    # Per share
    price: float = 0.0
    bvps: float = 0.0
    revps: float = 0.0

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "FundamentalMetrics":
        data = data or {}
        values = {}
        for f in fields(cls):
            raw = _pick(data, f.name, *_METRIC_ALIASES.get(f.name, ()))
            values[f.name] = coerce_float(raw)
        return cls(**values)

    @property
    def yoy_growth(self) -> float:
        """Revenue growth vs. the same period last year, in percent."""
        if not self.rev_last_year:
            return 0.0
        return (self.rev_now - self.rev_last_year) / self.rev_last_year * 100

    @property
    def current_ratio(self) -> float:
        if not self.current_liabilities:
            return 0.0
        return self.current_assets / self.current_liabilities

    def to_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


# =============================================================================
# TACTICAL INPUT
# =============================================================================

@dataclass
class TacticalInput:
    """Market-microstructure observations for one stock."""

    stock_code: str = ""
    price: float = 0.0
    order_book_status: str = ORDER_BOOK_OPTIONS[0]
    trade_book_status: str = TRADE_BOOK_OPTIONS[0]
    broker_summary_value: float = 50.0
    avg_price_top3: float = 0.0
    top_brokers: str = ""
    raw_intelligence: str = ""

    def __post_init__(self):
        self.stock_code = coerce_text(self.stock_code).upper()
        self.price = coerce_float(self.price)
        self.avg_price_top3 = coerce_float(self.avg_price_top3)
        self.broker_summary_value = min(100.0, max(0.0, coerce_float(self.broker_summary_value, 50.0)))
        self.order_book_status = coerce_text(self.order_book_status)
        self.trade_book_status = coerce_text(self.trade_book_status)
        self.top_brokers = coerce_text(self.top_brokers).upper()
        self.raw_intelligence = coerce_text(self.raw_intelligence)

    @property
    def broker_summary_label(self) -> str:
        """Desk caption for the broker summary slider."""
        if self.broker_summary_value > DEVIATION_CONFIG.summary_accumulation_threshold:
            return "BIG ACC"
        elif self.broker_summary_value < DEVIATION_CONFIG.summary_distribution_threshold:
            return "BIG DIST"
        return "NETRAL"

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "TacticalInput":
        data = data or {}
        return cls(
            stock_code=_pick(data, "stock_code"),
            price=_pick(data, "price"),
            order_book_status=_pick(data, "order_book_status") or ORDER_BOOK_OPTIONS[0],
            trade_book_status=_pick(data, "trade_book_status") or TRADE_BOOK_OPTIONS[0],
            broker_summary_value=_pick(data, "broker_summary_value", "brokerSummaryVal"),
            avg_price_top3=_pick(data, "avg_price_top3"),
            top_brokers=_pick(data, "top_brokers"),
            raw_intelligence=_pick(data, "raw_intelligence", "rawIntelligenceData"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
