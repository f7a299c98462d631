"""
AI Service Client - ArthaVision Analytics Core

Builds prompts from the locally computed analytics and calls the Gemini
generateContent endpoint for a structured JSON verdict.

Each call is a single request: any transport failure, non-200 status or
unparseable body surfaces as ExternalServiceError to the caller.

Version: 1.0.0
"""

from __future__ import annotations

import json
import re
import requests
from typing import Any, Dict, List, Optional

from .config import LOGGER, GEMINI_CONFIG, GeminiConfig
from .exceptions import ExternalServiceError
from .normalizer import FundamentalMetrics, TacticalInput
from .broker_classifier import BrokerEntry, BrokerClassifier
from .deviation_analyzer import PriceDeviation
from .sector_aggregator import SectorAverages


__version__ = "1.0.0"


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

def _string() -> Dict[str, str]:
    return {"type": "STRING"}


def _number() -> Dict[str, str]:
    return {"type": "NUMBER"}


def _string_list() -> Dict[str, Any]:
    return {"type": "ARRAY", "items": _string()}


FUNDAMENTAL_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "executiveSummary": _string(),
        "longTermInsight": _string(),
        "shortTermInsight": _string(),
        "verdict": _string(),
        "fundamentalScore": _number(),
        "recommendation": _string(),
        "riskAnalysis": _string_list(),
        "competitiveMoat": _string(),
        "accuracyMatrix": {
            "type": "OBJECT",
            "properties": {
                "profitabilityQuality": _number(),
                "solvencyRisk": _number(),
                "valuationMargin": _number(),
                "cashFlowIntegrity": _number(),
            },
        },
    },
}

TACTICAL_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "marketStructure": _string(),
        "prediction": _string(),
        "strategyType": _string(),
        "entryArea": _string(),
        "targetPrice": _string(),
        "stopLoss": _string(),
        "riskLevel": _string(),
        "longTermSuitability": _string(),
        "shortTermSuitability": _string(),
        "reasoning": _string_list(),
        "dynamicDisclaimer": _string(),
    },
}


# =============================================================================
# PROMPT BUILDER
# =============================================================================

class PromptBuilder:
    """Assembles the prompt text for each analysis path."""

    NO_FEED = "TIDAK ADA DATA FEED."

    def fundamental(
        self,
        metrics: FundamentalMetrics,
        sector: Optional[SectorAverages] = None,
    ) -> str:
        m = metrics
        sector_block = "Tidak ada data peer."
        if sector is not None:
            sector_block = (
                f"ROE {sector.roe:.2f}% | ROA {sector.roa:.2f}% | NPM {sector.npm:.2f}% | "
                f"PER {sector.per:.2f}x | PBV {sector.pbv:.2f}x | PS {sector.ps:.2f}x | "
                f"DER {sector.der:.2f}x | CR {sector.cr:.2f}x ({sector.peer_count} peers)"
            )
        return f"""
IDENTITAS: ArthaVision Core - Senior Fundamental Analyst & Financial Forensic Specialist.
TUGAS: Analisis laporan keuangan emiten IDX untuk menentukan kelayakan investasi.

DATA EMITEN:
1. PROFITABILITAS: ROE {m.roe}% | ROA {m.roa}% | NPM {m.npm}%
2. LABA RUGI: Revenue {m.revenue}B | Gross Profit {m.gross_profit}B | Operating Profit {m.operating_profit}B | EBITDA {m.ebitda}B | EPS {m.eps}
3. KESEHATAN KAS: CFO {m.cfo}B | Capex {m.capex}B | FCF {m.fcf}B
4. SOLVABILITAS: DER {m.der}x | Current Ratio {m.current_ratio:.2f}x | Cash {m.cash}B | Inventory {m.inventory}B
5. NERACA: Total Assets {m.total_assets}B | Total Liabilities {m.total_liabilities}B | Total Equity {m.total_equity}B
6. VALUASI: PBV {m.pbv}x | PE {m.pe}x | PS {m.ps}x | Harga {m.price} | BVPS {m.bvps} | RevPS {m.revps}
7. PERTUMBUHAN: YoY Growth {m.yoy_growth:.2f}%

RATA-RATA SEKTOR (PEER):
{sector_block}

OUTPUT:
- longTermInsight: moat, potensi dividen, efisiensi modal.
- shortTermInsight: momentum pendapatan, sentimen, peluang undervalued.
- verdict: INVESTASI_NILAI, SPEKULATIF, TRADING_MOMENTUM, atau HINDARI.
- fundamentalScore: 0-100.
- accuracyMatrix: nilai 0-100 untuk Profitability, Solvency, Valuation, CashFlow.

Gunakan Bahasa Indonesia institusional, tajam, skeptis namun objektif.
""".strip()

    def public_data(self, stock_code: str) -> str:
        return (
            f"Cari data resmi terbaru untuk emiten: {stock_code} di Bursa Efek Indonesia (IDX). "
            "Wajib sertakan Manajemen (Presdir, Direksi, Komisaris), Corporate Action, dan Statistik KSEI. "
            "Kembalikan JSON dengan field companyName, sector, address, management, ownership, "
            "corporateActions, prospectusSummary, keyFinancials, marketData, kseiStats, news."
        )

    def tactical(
        self,
        tactical_input: TacticalInput,
        deviation: PriceDeviation,
        brokers: List[BrokerEntry],
    ) -> str:
        t = tactical_input
        broker_lines = ", ".join(BrokerClassifier.feedback_lines(brokers)) or "-"
        counts = BrokerClassifier.summarize(brokers)
        broker_mix = " | ".join(f"{c.label}: {n}" for c, n in counts.items() if n)
        return f"""
BERTINDAK SEBAGAI: Senior Intelligence Fusion Analyst ArthaVision.

INSTRUKSI:
1. Ekstrak angka Sharpe Ratio, VaR 95%, dan Mean Harga Monte Carlo dari Intelligence Feed sebagai basis target harga.
2. Korelasikan target matematis dengan aksi Bandar (Order Book, Broker Summary).
   - Monte Carlo di atas harga tetapi broker distribusi besar: risiko "Exit Liquidity".
   - RSI oversold tetapi bandarmology akumulasi besar: "Prime Entry Point".
3. Gunakan Intelligence Feed untuk menjawab kecocokan jangka panjang dan jangka pendek.

DATA INPUT USER:
- Saham: {t.stock_code}
- Harga: {t.price:g}
- Avg Price Top 3 Bandar: {t.avg_price_top3:g}
- Posisi vs Bandar: {deviation.broker_position} ({deviation.percent:.2f}%)
- Top Broker: {broker_lines}
- Komposisi Broker: {broker_mix or "-"}
- Order Book: {t.order_book_status}
- Trade Book: {t.trade_book_status}
- Broker Summary (0-100): {t.broker_summary_value:g} ({t.broker_summary_label})

INTELLIGENCE FEED:
{t.raw_intelligence or self.NO_FEED}

OUTPUT (Bahasa Indonesia formal):
- marketStructure, prediction (1-5 hari), strategyType (Scalping/Swing/Invest/Avoid)
- entryArea, targetPrice, stopLoss: angka spesifik
- riskLevel: Low/Med/High/Extreme
- longTermSuitability, shortTermSuitability: minimal 3 kalimat
- reasoning: 5-7 poin fusion
- dynamicDisclaimer
""".strip()


# =============================================================================
# GEMINI CLIENT
# =============================================================================

class GeminiClient:
    def __init__(self, api_key: Optional[str] = None, config: GeminiConfig = GEMINI_CONFIG):
        self.config = config
        self.api_key = api_key or config.api_key
        self.logger = LOGGER

    @property
    def endpoint(self) -> str:
        return f"{self.config.base_url}/models/{self.config.model}:generateContent"

    def build_payload(
        self,
        prompt: str,
        schema: Optional[Dict[str, Any]] = None,
        use_search: bool = False,
        thinking: bool = True,
    ) -> Dict[str, Any]:
        generation: Dict[str, Any] = {"responseMimeType": "application/json"}
        if schema is not None:
            generation["responseSchema"] = schema
        if thinking:
            generation["thinkingConfig"] = {"thinkingBudget": self.config.thinking_budget}
        payload: Dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation,
        }
        if use_search:
            payload["tools"] = [{"google_search": {}}]
        return payload

    def generate_json(
        self,
        prompt: str,
        schema: Optional[Dict[str, Any]] = None,
        use_search: bool = False,
        thinking: bool = True,
    ) -> Dict[str, Any]:
        if not self.api_key:
            raise ExternalServiceError("No Gemini API key configured (set GEMINI_API_KEY)")

        headers = {"Content-Type": "application/json", "x-goog-api-key": self.api_key}
        payload = self.build_payload(prompt, schema, use_search, thinking)

        self.logger.info(f"Gemini request to {self.config.model}")
        try:
            resp = requests.post(self.endpoint, headers=headers, json=payload, timeout=self.config.request_timeout)
        except requests.RequestException as e:
            raise ExternalServiceError(f"Gemini request failed: {e}") from e

        if resp.status_code != 200:
            raise ExternalServiceError(
                f"Gemini returned HTTP {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise ExternalServiceError("Gemini response body is not JSON") from e

        return parse_json_text(extract_text(data))


def extract_text(response: Dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate."""
    candidates = response.get("candidates") or []
    if not candidates:
        raise ExternalServiceError("Gemini response has no candidates")
    parts = (candidates[0].get("content") or {}).get("parts") or []
    text = "".join(p.get("text", "") for p in parts if not p.get("thought"))
    if not text.strip():
        raise ExternalServiceError("Gemini response has no text")
    return text


def parse_json_text(text: str) -> Dict[str, Any]:
    """Parse a JSON object, tolerating prose or code fences around it."""
    try:
        data = json.loads(text)
    except ValueError:
        match = re.search(r'\{[\s\S]*\}', text)
        if not match:
            raise ExternalServiceError("Gemini response contains no JSON object")
        try:
            data = json.loads(match.group())
        except ValueError as e:
            raise ExternalServiceError(f"Gemini JSON could not be parsed: {e}") from e
    if not isinstance(data, dict):
        raise ExternalServiceError("Gemini JSON is not an object")
    return data
