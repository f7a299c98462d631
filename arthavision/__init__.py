"""
ArthaVision Analytics Core
==========================

Deterministic analytics that prepare and interpret market data around an
AI reasoning service for IDX equities:

- Broker-code classification against a bandarmology registry
- Peer-sector ratio averages and company-vs-sector comparison
- Price vs. top-3 broker average deviation and accumulation/distribution zone
- Canonical TACTICAL INTEL REPORT composition and parsing
- Orchestration of fundamental, tactical and public-data AI requests

Version: 1.0.0
"""

from .config import (
    LOGGER,
    OUTPUT_DIR,
    PROJECT_ROOT,
    BROKER_TABLE,
    ORDER_BOOK_OPTIONS,
    TRADE_BOOK_OPTIONS,
    DEVIATION_CONFIG,
    SECTOR_CONFIG,
    GEMINI_CONFIG,
    BrokerCategory,
    DeviationZone,
    Verdict,
    ComparisonAssessment,
    DeviationConfig,
    SectorConfig,
    GeminiConfig,
    setup_logger,
)

from .exceptions import (
    ArthaVisionError,
    ConfigurationError,
    ExternalServiceError,
)

from .normalizer import (
    FundamentalMetrics,
    TacticalInput,
    coerce_float,
)

from .broker_classifier import (
    BrokerEntry,
    BrokerRegistry,
    BrokerClassifier,
    BROKER_REGISTRY,
    classify_brokers,
)

from .sector_aggregator import (
    PeerMetrics,
    SectorAverages,
    SectorComparison,
    SectorAggregator,
    compare_to_sector,
    peers_from_frame,
    peers_from_records,
    empty_panel,
)

from .deviation_analyzer import (
    PriceDeviation,
    DeviationAnalyzer,
    analyze_deviation,
)

from .results import (
    TacticalAnalysisResult,
    FundamentalAnalysisResult,
    AccuracyMatrix,
    PublicCompanyData,
)

from .report_composer import (
    ReportComposer,
    compose_report,
    parse_report,
)

from .ai_client import (
    GeminiClient,
    PromptBuilder,
    FUNDAMENTAL_SCHEMA,
    TACTICAL_SCHEMA,
)

from .orchestrator import AnalysisOrchestrator


__version__ = "1.0.0"
