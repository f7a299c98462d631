"""
Analysis Orchestrator - ArthaVision Analytics Core

Caller-side coordinator for the analyst workflow:
    - Re-derives broker annotations, sector averages and price deviation
      whenever the caller reports an input change
    - Forwards enriched payloads to the AI service (one request per action)
    - Keeps the last successful result per path; a failed call leaves it
      untouched, and a response to a superseded request is discarded

Version: 1.0.0
"""

from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional, Sequence

from .config import LOGGER
from .exceptions import ExternalServiceError
from .normalizer import FundamentalMetrics, TacticalInput
from .broker_classifier import BrokerClassifier, BrokerEntry
from .sector_aggregator import PeerMetrics, SectorAggregator, SectorAverages
from .deviation_analyzer import DeviationAnalyzer, PriceDeviation
from .report_composer import ReportComposer
from .results import FundamentalAnalysisResult, PublicCompanyData, TacticalAnalysisResult
from .ai_client import FUNDAMENTAL_SCHEMA, TACTICAL_SCHEMA, GeminiClient, PromptBuilder


__version__ = "1.0.0"


class AnalysisOrchestrator:
    """Holds derived state and the last AI results for one analyst session."""

    def __init__(self, client: Optional[GeminiClient] = None):
        self.client = client or GeminiClient()
        self.prompts = PromptBuilder()
        self.classifier = BrokerClassifier()
        self.aggregator = SectorAggregator()
        self.deviation_analyzer = DeviationAnalyzer()
        self.composer = ReportComposer()
        self.logger = LOGGER

        self.brokers: List[BrokerEntry] = []
        self.sector_averages: Optional[SectorAverages] = None
        self.deviation: PriceDeviation = PriceDeviation()

        self.fundamental_result: Optional[FundamentalAnalysisResult] = None
        self.tactical_result: Optional[TacticalAnalysisResult] = None
        self.tactical_stock_code: str = ""
        self.public_data: Optional[PublicCompanyData] = None

        self._lock = threading.Lock()
        self._tickets: Dict[str, int] = {"fundamental": 0, "tactical": 0, "public": 0}

    # -------------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------------

    def update_brokers(self, raw_input: Optional[str]) -> List[BrokerEntry]:
        self.brokers = self.classifier.classify_all(raw_input)
        return self.brokers

    def update_peers(self, peers: Sequence[PeerMetrics]) -> SectorAverages:
        """Recompute sector averages; raises ConfigurationError on an empty panel."""
        self.sector_averages = self.aggregator.aggregate(peers)
        return self.sector_averages

    def update_prices(self, current_price: Any, reference_price: Any) -> PriceDeviation:
        self.deviation = self.deviation_analyzer.analyze(current_price, reference_price)
        return self.deviation

    # -------------------------------------------------------------------------
    # Request tickets
    # -------------------------------------------------------------------------

    def _issue_ticket(self, path: str, **state: Any) -> int:
        """Take the next ticket for ``path``, publishing any derived ``state`` with it."""
        with self._lock:
            self._tickets[path] += 1
            for name, value in state.items():
                setattr(self, name, value)
            return self._tickets[path]

    def _is_current(self, path: str, ticket: int) -> bool:
        return self._tickets[path] == ticket

    def _call(self, path: str, prompt: str, **kwargs) -> Dict[str, Any]:
        try:
            return self.client.generate_json(prompt, **kwargs)
        except ExternalServiceError as e:
            self.logger.error(f"{path.capitalize()} analysis failed: {e}")
            raise

    # -------------------------------------------------------------------------
    # AI paths
    # -------------------------------------------------------------------------

    def run_fundamental(
        self,
        metrics: FundamentalMetrics,
        peers: Optional[Sequence[PeerMetrics]] = None,
    ) -> FundamentalAnalysisResult:
        if peers is not None:
            averages = self.aggregator.aggregate(peers)
            ticket = self._issue_ticket("fundamental", sector_averages=averages)
        else:
            averages = self.sector_averages
            ticket = self._issue_ticket("fundamental")
        self.logger.info("Running fundamental analysis...")

        prompt = self.prompts.fundamental(metrics, averages)
        data = self._call("fundamental", prompt, schema=FUNDAMENTAL_SCHEMA)
        result = FundamentalAnalysisResult.from_dict(data)

        with self._lock:
            if self._is_current("fundamental", ticket):
                self.fundamental_result = result
            else:
                self.logger.warning("Discarding superseded fundamental response")
        return result

    def run_tactical(self, tactical_input: TacticalInput) -> TacticalAnalysisResult:
        brokers = self.classifier.classify_all(tactical_input.top_brokers)
        deviation = self.deviation_analyzer.analyze(tactical_input.price, tactical_input.avg_price_top3)
        ticket = self._issue_ticket("tactical", brokers=brokers, deviation=deviation)
        self.logger.info(f"Running tactical analysis for {tactical_input.stock_code or '(no code)'}...")

        prompt = self.prompts.tactical(tactical_input, deviation, brokers)
        data = self._call("tactical", prompt, schema=TACTICAL_SCHEMA)
        result = TacticalAnalysisResult.from_dict(data)

        with self._lock:
            if self._is_current("tactical", ticket):
                self.tactical_result = result
                self.tactical_stock_code = tactical_input.stock_code
            else:
                self.logger.warning("Discarding superseded tactical response")
        return result

    def fetch_public_data(self, stock_code: str) -> PublicCompanyData:
        code = (stock_code or "").strip().upper()
        if not code:
            raise ValueError("Stock code is required to fetch public data")
        ticket = self._issue_ticket("public")
        self.logger.info(f"Fetching public data for {code}...")

        data = self._call("public", self.prompts.public_data(code), use_search=True, thinking=False)
        result = PublicCompanyData.from_dict(data)

        with self._lock:
            if self._is_current("public", ticket):
                self.public_data = result
            else:
                self.logger.warning("Discarding superseded public data response")
        return result

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def compose_report(self) -> Optional[str]:
        """Canonical report for the last tactical result, or None if there is none."""
        if self.tactical_result is None:
            return None
        return self.composer.compose(self.tactical_result, self.tactical_stock_code)
