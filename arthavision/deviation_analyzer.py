"""
Price Deviation Module - ArthaVision Analytics Core

Measures how far the current price trades from the average price of the
top-3 accumulating brokers and labels the bandarmology zone.

Methodology:
    - Deviation (%) = (Price - Broker Avg) / Broker Avg x 100
    - <= -2%: accumulation (price below broker cost, potential undervaluation)
    - >= +2%: distribution (price above broker cost, potential overvaluation)
    - Gauge magnitude = min(|deviation| x 5, 50) percent of track

An unset broker average (0) means the signal is not yet applicable, so
the result is a neutral 0% rather than an error.

Version: 1.0.0
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .config import LOGGER, DEVIATION_CONFIG, DeviationZone
from .normalizer import coerce_float


__version__ = "1.0.0"


# Desk captions and the position wording fed to the AI prompt
ZONE_LABELS: Dict[DeviationZone, str] = {
    DeviationZone.ACCUMULATION: "Potensi Akumulasi (Under Value)",
    DeviationZone.DISTRIBUTION: "Potensi Distribusi (Over Value)",
    DeviationZone.NEUTRAL: "Netral Area",
}

BROKER_POSITIONS: Dict[DeviationZone, str] = {
    DeviationZone.ACCUMULATION: "AKUMULASI (Harga Jauh Dibawah Avg Broker)",
    DeviationZone.DISTRIBUTION: "DISTRIBUSI (Harga Jauh Diatas Avg Broker)",
    DeviationZone.NEUTRAL: "NETRAL (Harga Dekat Avg Broker)",
}


# =============================================================================
# DATA CONTAINERS
# =============================================================================

@dataclass(frozen=True)
class PriceDeviation:
    """Deviation of price from the broker reference price."""

    percent: float = 0.0
    zone: DeviationZone = DeviationZone.NEUTRAL
    magnitude: float = 0.0      # Gauge fill, percent of track (0-50)

    @property
    def direction(self) -> int:
        """Gauge side: -1 fills left of centre, +1 right, 0 empty."""
        if self.percent < 0:
            return -1
        if self.percent > 0:
            return 1
        return 0

    @property
    def label(self) -> str:
        return ZONE_LABELS[self.zone]

    @property
    def broker_position(self) -> str:
        return BROKER_POSITIONS[self.zone]

    @property
    def formatted_percent(self) -> str:
        sign = "+" if self.percent > 0 else ""
        return f"{sign}{self.percent:.2f}%"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "percent": self.percent,
            "zone": self.zone.value,
            "magnitude": self.magnitude,
            "label": self.label,
        }


# =============================================================================
# DEVIATION ANALYZER
# =============================================================================

class DeviationAnalyzer:
    """Maps (price, broker average) to a PriceDeviation."""

    def __init__(self, config=DEVIATION_CONFIG):
        self.config = config
        self.logger = LOGGER

    def analyze(self, current_price: Any, reference_price: Any) -> PriceDeviation:
        reference = coerce_float(reference_price)
        if reference <= 0:
            return PriceDeviation()

        current = coerce_float(current_price)
        percent = (current - reference) / reference * 100
        deviation = PriceDeviation(
            percent=percent,
            zone=self.classify(percent),
            magnitude=self.gauge_magnitude(percent),
        )
        self.logger.debug(f"Price deviation {deviation.formatted_percent} -> {deviation.zone.value}")
        return deviation

    def classify(self, percent: float) -> DeviationZone:
        if percent <= self.config.accumulation_threshold:
            return DeviationZone.ACCUMULATION
        elif percent >= self.config.distribution_threshold:
            return DeviationZone.DISTRIBUTION
        return DeviationZone.NEUTRAL

    def gauge_magnitude(self, percent: float) -> float:
        return min(abs(percent) * self.config.gauge_scale, self.config.gauge_cap)


def analyze_deviation(current_price: Any, reference_price: Optional[Any]) -> PriceDeviation:
    """Deviation of ``current_price`` from ``reference_price`` with default thresholds."""
    return DeviationAnalyzer().analyze(current_price, reference_price)
