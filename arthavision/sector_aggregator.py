"""
Sector Aggregation Module - ArthaVision Analytics Core

Computes peer-panel averages for the valuation and profitability ratios
shown next to the company's own metrics, and compares the company
against those averages.

Methodology:
    - Arithmetic mean of each tracked ratio across all peers
    - Premium/discount of the company ratio to the sector mean
    - Direction-aware assessment (lower P/E, PBV, P/S, DER is better)

Inputs: ordered collection of PeerMetrics (or a pandas DataFrame)
Outputs: SectorAverages, Dict[str, SectorComparison]

Version: 1.0.0
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from dataclasses import dataclass, fields
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .config import LOGGER, SECTOR_CONFIG, ComparisonAssessment
from .exceptions import ConfigurationError
from .normalizer import FundamentalMetrics, coerce_float


__version__ = "1.0.0"


# =============================================================================
# DATA CONTAINERS
# =============================================================================

@dataclass(frozen=True)
class PeerMetrics:
    """Ratios for one peer company. A value of 0 means "not entered"."""

    roe: float = 0.0
    roa: float = 0.0
    npm: float = 0.0
    per: float = 0.0
    pbv: float = 0.0
    ps: float = 0.0
    der: float = 0.0
    cr: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PeerMetrics":
        return cls(**{f.name: coerce_float(data.get(f.name)) for f in fields(cls)})

    def as_row(self) -> List[float]:
        return [getattr(self, name) for name in SECTOR_CONFIG.fields]


@dataclass(frozen=True)
class SectorAverages:
    """Mean of each tracked ratio across the peer panel."""

    roe: float = 0.0
    roa: float = 0.0
    npm: float = 0.0
    per: float = 0.0
    pbv: float = 0.0
    ps: float = 0.0
    der: float = 0.0
    cr: float = 0.0
    peer_count: int = 0

    def to_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in SECTOR_CONFIG.fields}


@dataclass
class SectorComparison:
    """Company ratio relative to the sector average."""

    ratio_name: str
    company_value: float
    sector_value: float
    premium: Optional[float] = None           # (Company - Sector) / |Sector|
    assessment: ComparisonAssessment = ComparisonAssessment.NOT_APPLICABLE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ratio_name": self.ratio_name,
            "company_value": self.company_value,
            "sector_value": self.sector_value,
            "premium": self.premium,
            "assessment": self.assessment.value,
        }


# =============================================================================
# SECTOR AGGREGATOR
# =============================================================================

class SectorAggregator:
    """
    Averages the peer panel.

    Pure function of its input; cheap enough to rerun after every edit.
    An empty panel has no defined average and raises ConfigurationError.
    """

    def __init__(self):
        self.logger = LOGGER

    def aggregate(self, peers: Sequence[PeerMetrics]) -> SectorAverages:
        peers = list(peers)
        if not peers:
            raise ConfigurationError("Sector aggregation requires at least one peer")

        matrix = np.array([p.as_row() for p in peers], dtype=float)
        means = matrix.mean(axis=0)

        averages = SectorAverages(
            **{name: float(means[i]) for i, name in enumerate(SECTOR_CONFIG.fields)},
            peer_count=len(peers),
        )
        self.logger.debug(f"Aggregated {len(peers)} peers")
        return averages

    def aggregate_frame(self, frame: pd.DataFrame) -> SectorAverages:
        """Aggregate a peer table with one row per peer and ratio columns."""
        return self.aggregate(peers_from_frame(frame))

    def compare(
        self,
        metrics: FundamentalMetrics,
        averages: SectorAverages,
    ) -> Dict[str, SectorComparison]:
        return compare_to_sector(metrics, averages)


# =============================================================================
# PEER LOADING
# =============================================================================

def peers_from_records(records: Iterable[Mapping[str, Any]]) -> List[PeerMetrics]:
    return [PeerMetrics.from_dict(r) for r in records]


def peers_from_frame(frame: pd.DataFrame) -> List[PeerMetrics]:
    """Build PeerMetrics from a DataFrame; missing columns and bad cells are 0."""
    if frame is None or frame.empty:
        return []
    table = frame.copy()
    table.columns = [str(c).strip().lower() for c in table.columns]
    for name in SECTOR_CONFIG.fields:
        if name not in table.columns:
            table[name] = 0.0
        table[name] = table[name].map(coerce_float)
    return [PeerMetrics(**row) for row in table[list(SECTOR_CONFIG.fields)].to_dict("records")]


def empty_panel(size: int = SECTOR_CONFIG.default_panel_size) -> List[PeerMetrics]:
    """Blank peer rows, as shown on a fresh input panel."""
    return [PeerMetrics() for _ in range(size)]


# =============================================================================
# SECTOR COMPARISON
# =============================================================================

# Company-side attribute for each sector ratio
_COMPANY_FIELDS: Dict[str, str] = {
    "roe": "roe",
    "roa": "roa",
    "npm": "npm",
    "per": "pe",
    "pbv": "pbv",
    "ps": "ps",
    "der": "der",
}


def _company_value(metrics: FundamentalMetrics, ratio_name: str) -> float:
    if ratio_name == "cr":
        return metrics.current_ratio
    return getattr(metrics, _COMPANY_FIELDS[ratio_name])


def compare_to_sector(
    metrics: FundamentalMetrics,
    averages: SectorAverages,
) -> Dict[str, SectorComparison]:
    """Compare each company ratio with the sector average."""
    results = {}
    band = SECTOR_CONFIG.in_line_band

    for name in SECTOR_CONFIG.fields:
        company = _company_value(metrics, name)
        sector = getattr(averages, name)
        comparison = SectorComparison(ratio_name=name, company_value=company, sector_value=sector)

        if sector and company:
            premium = (company - sector) / abs(sector)
            comparison.premium = premium
            if name in SECTOR_CONFIG.lower_is_better:
                premium = -premium
            if premium > band:
                comparison.assessment = ComparisonAssessment.FAVORABLE
            elif premium < -band:
                comparison.assessment = ComparisonAssessment.UNFAVORABLE
            else:
                comparison.assessment = ComparisonAssessment.IN_LINE

        results[name] = comparison

    return results
