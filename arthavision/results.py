"""
AI Result Structures - ArthaVision Analytics Core

Typed records for the JSON payloads returned by the AI service. Every
field is optional on the wire: builders substitute empty values so a
partial response still produces a usable record.

Version: 1.0.0
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .config import Verdict
from .normalizer import coerce_float


__version__ = "1.0.0"


# =============================================================================
# FIELD HELPERS
# =============================================================================

def text_value(value: Any) -> str:
    """Render a scalar from the AI payload as report text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ", ".join(text_value(v) for v in value)
    return str(value)


def text_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    if isinstance(value, (list, tuple)):
        return [text_value(v) for v in value if v is not None]
    return [text_value(value)]


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


# =============================================================================
# TACTICAL (DEEP ANALYSIS) RESULT
# =============================================================================

@dataclass
class TacticalAnalysisResult:
    """Bandarmology + intelligence-feed verdict for one stock."""

    market_structure: str = ""
    prediction: str = ""
    strategy_type: str = ""
    entry_area: str = ""
    target_price: str = ""
    stop_loss: str = ""
    risk_level: str = ""
    long_term_suitability: str = ""
    short_term_suitability: str = ""
    reasoning: List[str] = field(default_factory=list)
    dynamic_disclaimer: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "TacticalAnalysisResult":
        data = _mapping(data)
        return cls(
            market_structure=text_value(data.get("marketStructure")),
            prediction=text_value(data.get("prediction")),
            strategy_type=text_value(data.get("strategyType")),
            entry_area=text_value(data.get("entryArea")),
            target_price=text_value(data.get("targetPrice")),
            stop_loss=text_value(data.get("stopLoss")),
            risk_level=text_value(data.get("riskLevel")),
            long_term_suitability=text_value(data.get("longTermSuitability")),
            short_term_suitability=text_value(data.get("shortTermSuitability")),
            reasoning=text_list(data.get("reasoning")),
            dynamic_disclaimer=text_value(data.get("dynamicDisclaimer")),
        )

    @property
    def is_high_risk(self) -> bool:
        level = self.risk_level.lower()
        return "high" in level or "extreme" in level

    def to_dict(self) -> Dict[str, Any]:
        return {
            "marketStructure": self.market_structure,
            "prediction": self.prediction,
            "strategyType": self.strategy_type,
            "entryArea": self.entry_area,
            "targetPrice": self.target_price,
            "stopLoss": self.stop_loss,
            "riskLevel": self.risk_level,
            "longTermSuitability": self.long_term_suitability,
            "shortTermSuitability": self.short_term_suitability,
            "reasoning": list(self.reasoning),
            "dynamicDisclaimer": self.dynamic_disclaimer,
        }


# =============================================================================
# FUNDAMENTAL RESULT
# =============================================================================

@dataclass
class AccuracyMatrix:
    """Per-pillar scores (0-100)."""

    profitability_quality: float = 0.0
    solvency_risk: float = 0.0
    valuation_margin: float = 0.0
    cash_flow_integrity: float = 0.0

    @classmethod
    def from_dict(cls, data: Any) -> "AccuracyMatrix":
        data = _mapping(data)
        return cls(
            profitability_quality=coerce_float(data.get("profitabilityQuality")),
            solvency_risk=coerce_float(data.get("solvencyRisk")),
            valuation_margin=coerce_float(data.get("valuationMargin")),
            cash_flow_integrity=coerce_float(data.get("cashFlowIntegrity")),
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "profitabilityQuality": self.profitability_quality,
            "solvencyRisk": self.solvency_risk,
            "valuationMargin": self.valuation_margin,
            "cashFlowIntegrity": self.cash_flow_integrity,
        }


DEFAULT_MOAT_NOTE = "Daya saing kompetitif terdeteksi stabil dalam koridor sektoral."


@dataclass
class FundamentalAnalysisResult:
    """Financial-forensics verdict on the entered statements."""

    executive_summary: str = ""
    long_term_insight: str = ""
    short_term_insight: str = ""
    verdict: Verdict = Verdict.UNKNOWN
    fundamental_score: float = 0.0
    recommendation: str = ""
    risk_analysis: List[str] = field(default_factory=list)
    competitive_moat: str = ""
    accuracy_matrix: AccuracyMatrix = field(default_factory=AccuracyMatrix)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "FundamentalAnalysisResult":
        data = _mapping(data)
        score = min(100.0, max(0.0, coerce_float(data.get("fundamentalScore"))))
        return cls(
            executive_summary=text_value(data.get("executiveSummary")),
            long_term_insight=text_value(data.get("longTermInsight")),
            short_term_insight=text_value(data.get("shortTermInsight")),
            verdict=Verdict.parse(data.get("verdict")),
            fundamental_score=score,
            recommendation=text_value(data.get("recommendation")),
            risk_analysis=text_list(data.get("riskAnalysis")),
            competitive_moat=text_value(data.get("competitiveMoat")),
            accuracy_matrix=AccuracyMatrix.from_dict(data.get("accuracyMatrix")),
        )

    @property
    def moat_note(self) -> str:
        return self.competitive_moat or DEFAULT_MOAT_NOTE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "executiveSummary": self.executive_summary,
            "longTermInsight": self.long_term_insight,
            "shortTermInsight": self.short_term_insight,
            "verdict": self.verdict.value,
            "fundamentalScore": self.fundamental_score,
            "recommendation": self.recommendation,
            "riskAnalysis": list(self.risk_analysis),
            "competitiveMoat": self.competitive_moat,
            "accuracyMatrix": self.accuracy_matrix.to_dict(),
        }


# =============================================================================
# PUBLIC COMPANY DATA
# =============================================================================

@dataclass
class NewsItem:
    title: str = ""
    source: str = ""
    url: str = ""


@dataclass
class Management:
    pres_dir: str = ""
    directors: List[str] = field(default_factory=list)
    commissioners: List[str] = field(default_factory=list)


@dataclass
class PublicCompanyData:
    """Company profile gathered by the AI service from public sources."""

    company_name: str = ""
    sector: str = ""
    address: str = ""
    management: Management = field(default_factory=Management)
    ownership: List[str] = field(default_factory=list)
    corporate_actions: List[str] = field(default_factory=list)
    prospectus_summary: str = ""
    key_financials: Dict[str, str] = field(default_factory=dict)
    market_data: Dict[str, str] = field(default_factory=dict)
    ksei_stats: Dict[str, str] = field(default_factory=dict)
    news: List[NewsItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "PublicCompanyData":
        data = _mapping(data)
        mgmt = _mapping(data.get("management"))
        news = data.get("news") if isinstance(data.get("news"), list) else []
        return cls(
            company_name=text_value(data.get("companyName")),
            sector=text_value(data.get("sector")),
            address=text_value(data.get("address")),
            management=Management(
                pres_dir=text_value(mgmt.get("presDir")),
                directors=text_list(mgmt.get("directors")),
                commissioners=text_list(mgmt.get("commissioners")),
            ),
            ownership=text_list(data.get("ownership")),
            corporate_actions=text_list(data.get("corporateActions")),
            prospectus_summary=text_value(data.get("prospectusSummary")),
            key_financials={k: text_value(v) for k, v in _mapping(data.get("keyFinancials")).items()},
            market_data={k: text_value(v) for k, v in _mapping(data.get("marketData")).items()},
            ksei_stats={k: text_value(v) for k, v in _mapping(data.get("kseiStats")).items()},
            news=[
                NewsItem(
                    title=text_value(_mapping(n).get("title")),
                    source=text_value(_mapping(n).get("source")),
                    url=text_value(_mapping(n).get("url")),
                )
                for n in news
            ],
        )
