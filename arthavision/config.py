"""
Configuration Module - ArthaVision Analytics Core

Centralizes configuration constants, enumerations, the broker reference
table, deviation thresholds, sector ratio definitions and AI service
settings for the tactical and fundamental analysis pipeline.

Version: 1.0.0
"""

from __future__ import annotations

import os
import logging
from pathlib import Path
from dataclasses import dataclass
from typing import Dict, Tuple
from enum import Enum


# =============================================================================
# DIRECTORY CONFIGURATION
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.absolute()
OUTPUT_DIR = PROJECT_ROOT / "outputs"


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Configure and return a logger instance with professional formatting."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger


LOGGER = setup_logger("ArthaVision")


# =============================================================================
# ENUMERATIONS
# =============================================================================

class BrokerCategory(Enum):
    """Bandarmology classification of an IDX broker code."""
    RICH = "rich"          # Foreign / institutional money
    KONGLO = "konglo"      # Conglomerate-affiliated flow
    RETAIL = "retail"      # Retail-heavy online brokers
    MIXED = "mixed"        # Blend of retail and institutional
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        """Desk label shown next to an annotated code."""
        return BROKER_CATEGORY_LABELS[self]

    @property
    def description(self) -> str:
        return BROKER_CATEGORY_DESCRIPTIONS[self]


class DeviationZone(Enum):
    """Price position relative to the top-3 broker average."""
    ACCUMULATION = "accumulation"
    DISTRIBUTION = "distribution"
    NEUTRAL = "neutral"


class Verdict(Enum):
    """Fundamental verdicts returned by the AI service."""
    INVESTASI_NILAI = "INVESTASI_NILAI"
    SPEKULATIF = "SPEKULATIF"
    TRADING_MOMENTUM = "TRADING_MOMENTUM"
    HINDARI = "HINDARI"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: object) -> "Verdict":
        text = str(value or "").strip().upper().replace(" ", "_")
        for member in cls:
            if member.value == text:
                return member
        return cls.UNKNOWN

    def to_display(self) -> str:
        return self.value.replace("_", " ")


class ComparisonAssessment(Enum):
    """Company ratio versus sector average."""
    FAVORABLE = "favorable"
    IN_LINE = "in_line"
    UNFAVORABLE = "unfavorable"
    NOT_APPLICABLE = "not_applicable"


BROKER_CATEGORY_LABELS: Dict[BrokerCategory, str] = {
    BrokerCategory.RICH: "RICH",
    BrokerCategory.KONGLO: "KONGLO",
    BrokerCategory.RETAIL: "RITEL",
    BrokerCategory.MIXED: "CAMPUR",
    BrokerCategory.UNKNOWN: "UNKNOWN",
}

BROKER_CATEGORY_DESCRIPTIONS: Dict[BrokerCategory, str] = {
    BrokerCategory.RICH: "Foreign or institutional desk, large ticket flow",
    BrokerCategory.KONGLO: "Conglomerate-affiliated desk, often group-driven",
    BrokerCategory.RETAIL: "Retail-dominated online brokerage",
    BrokerCategory.MIXED: "Mixed retail and institutional client base",
    BrokerCategory.UNKNOWN: "Code not present in the broker registry",
}


# =============================================================================
# BROKER REFERENCE TABLE
# =============================================================================

# Code -> (category, member firm). Loaded once into BrokerRegistry.
BROKER_TABLE: Dict[str, Tuple[BrokerCategory, str]] = {
    # Foreign / institutional
    "AK": (BrokerCategory.RICH, "UBS Sekuritas Indonesia"),
    "BK": (BrokerCategory.RICH, "J.P. Morgan Sekuritas Indonesia"),
    "CS": (BrokerCategory.RICH, "Credit Suisse Sekuritas Indonesia"),
    "CG": (BrokerCategory.RICH, "Citigroup Sekuritas Indonesia"),
    "DB": (BrokerCategory.RICH, "Deutsche Sekuritas Indonesia"),
    "GW": (BrokerCategory.RICH, "HSBC Sekuritas Indonesia"),
    "KZ": (BrokerCategory.RICH, "CLSA Sekuritas Indonesia"),
    "ML": (BrokerCategory.RICH, "Merrill Lynch Sekuritas Indonesia"),
    "MS": (BrokerCategory.RICH, "Morgan Stanley Sekuritas Indonesia"),
    "RX": (BrokerCategory.RICH, "Macquarie Sekuritas Indonesia"),
    "ZP": (BrokerCategory.RICH, "Maybank Sekuritas Indonesia"),

    # Conglomerate-affiliated
    "AI": (BrokerCategory.KONGLO, "UOB Kay Hian Sekuritas"),
    "AH": (BrokerCategory.KONGLO, "Shinhan Sekuritas Indonesia"),
    "BQ": (BrokerCategory.KONGLO, "Korea Investment and Sekuritas Indonesia"),
    "DR": (BrokerCategory.KONGLO, "RHB Sekuritas Indonesia"),
    "HP": (BrokerCategory.KONGLO, "Henan Putihrai Sekuritas"),
    "IF": (BrokerCategory.KONGLO, "Samuel Sekuritas Indonesia"),
    "LG": (BrokerCategory.KONGLO, "Trimegah Sekuritas Indonesia"),
    "MG": (BrokerCategory.KONGLO, "Semesta Indovest Sekuritas"),
    "RF": (BrokerCategory.KONGLO, "Buana Capital Sekuritas"),
    "SS": (BrokerCategory.KONGLO, "Supra Sekuritas Indonesia"),

    # Retail
    "CP": (BrokerCategory.RETAIL, "Valbury Sekuritas Indonesia"),
    "EP": (BrokerCategory.RETAIL, "MNC Sekuritas"),
    "GR": (BrokerCategory.RETAIL, "Panin Sekuritas"),
    "KK": (BrokerCategory.RETAIL, "Phillip Sekuritas Indonesia"),
    "PD": (BrokerCategory.RETAIL, "Indo Premier Sekuritas"),
    "SQ": (BrokerCategory.RETAIL, "BCA Sekuritas"),
    "XC": (BrokerCategory.RETAIL, "Ajaib Sekuritas Asia"),
    "XL": (BrokerCategory.RETAIL, "Stockbit Sekuritas Digital"),
    "YP": (BrokerCategory.RETAIL, "Mirae Asset Sekuritas Indonesia"),

    # Mixed
    "AZ": (BrokerCategory.MIXED, "Sucor Sekuritas"),
    "CC": (BrokerCategory.MIXED, "Mandiri Sekuritas"),
    "DX": (BrokerCategory.MIXED, "Bahana Sekuritas"),
    "NI": (BrokerCategory.MIXED, "BNI Sekuritas"),
    "OD": (BrokerCategory.MIXED, "BRI Danareksa Sekuritas"),
    "YU": (BrokerCategory.MIXED, "CGS International Sekuritas Indonesia"),
}


# =============================================================================
# MARKET TELEMETRY OPTIONS
# =============================================================================

ORDER_BOOK_OPTIONS: Tuple[str, ...] = (
    "Bid Tebal (Ideal)",
    "Ask Tebal (Panic)",
    "Bid Tipis (Fake)",
    "Seimbang",
)

TRADE_BOOK_OPTIONS: Tuple[str, ...] = (
    "Buy Dominan (Hajar Kanan)",
    "Sell Dominan (Hajar Kiri)",
    "Netral / Sepi",
)


# =============================================================================
# ANALYSIS CONFIGURATION
# =============================================================================

@dataclass(frozen=True)
class DeviationConfig:
    """Thresholds for the price vs. broker-average gauge."""

    # Zone boundaries in percent (inclusive)
    accumulation_threshold: float = -2.0
    distribution_threshold: float = 2.0

    # Gauge: percent-of-track per percent of deviation, capped at half track
    gauge_scale: float = 5.0
    gauge_cap: float = 50.0

    # Broker summary strength (0-100): strictly above / below reads as big money flow
    summary_accumulation_threshold: float = 60.0
    summary_distribution_threshold: float = 40.0


@dataclass(frozen=True)
class SectorConfig:
    """Peer panel and comparison settings."""

    # Ratios tracked across the peer panel, in display order
    fields: Tuple[str, ...] = ("roe", "roa", "npm", "per", "pbv", "ps", "der", "cr")

    # Ratios where a lower value than the sector is the better outcome
    lower_is_better: Tuple[str, ...] = ("per", "pbv", "ps", "der")

    # Relative band treated as in line with the sector
    in_line_band: float = 0.10

    # Default number of peer rows on the input panel
    default_panel_size: int = 5


# =============================================================================
# AI SERVICE CONFIGURATION
# =============================================================================

@dataclass(frozen=True)
class GeminiConfig:
    """Gemini generateContent API configuration."""

    api_key: str = os.getenv("GEMINI_API_KEY", os.getenv("API_KEY", ""))
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    model: str = "gemini-3-pro-preview"
    thinking_budget: int = 32768
    request_timeout: float = 180.0


# =============================================================================
# GLOBAL CONFIGURATION INSTANCES
# =============================================================================

DEVIATION_CONFIG = DeviationConfig()
SECTOR_CONFIG = SectorConfig()
GEMINI_CONFIG = GeminiConfig()
