"""
Report Composer Module - ArthaVision Analytics Core

Renders a tactical AI result into the canonical plain-text intel report
used for clipboard export, and parses such a report back into a result.

The section labels, their order and the separator lines are a fixed
format consumed downstream; output is byte-stable for a given input.

Version: 1.0.0
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple, Union

from .config import LOGGER, OUTPUT_DIR
from .results import TacticalAnalysisResult, text_value


__version__ = "1.0.0"


SEPARATOR = "=" * 40
BULLET = "• "

_REPORT_PATTERN = re.compile(
    r"\ATACTICAL INTEL REPORT \[(?P<stock_code>[^\n]*)\]\n"
    r"=+\n"
    r"STRATEGY: (?P<strategy_type>[^\n]*)\n"
    r"RISK LEVEL: (?P<risk_level>[^\n]*)\n"
    r"\n\[JANGKA PANJANG\]\n(?P<long_term_suitability>.*?)\n"
    r"\n\[JANGKA PENDEK\]\n(?P<short_term_suitability>.*?)\n"
    r"\n\[PREDIKSI PASAR\]\n(?P<prediction>.*?)\n"
    r"\n\[TACTICAL ZONE\]\n"
    r"ENTRY: (?P<entry_area>[^\n]*)\n"
    r"TARGET: (?P<target_price>[^\n]*)\n"
    r"STOP LOSS: (?P<stop_loss>[^\n]*)\n"
    r"\n\[POINT ANALISA\]\n(?P<reasoning>.*?)\n"
    r"=+\n"
    r"DISCLAIMER:(?: (?P<dynamic_disclaimer>.*))?\Z",
    re.DOTALL,
)


class ReportComposer:
    """Builds the canonical TACTICAL INTEL REPORT text."""

    def __init__(self):
        self.logger = LOGGER

    def compose(
        self,
        result: Union[TacticalAnalysisResult, Mapping[str, Any], None],
        stock_code: str,
    ) -> str:
        if not isinstance(result, TacticalAnalysisResult):
            result = TacticalAnalysisResult.from_dict(result)

        points = "\n".join(f"{BULLET}{text_value(r)}" for r in result.reasoning)
        text = f"""
TACTICAL INTEL REPORT [{text_value(stock_code)}]
{SEPARATOR}
STRATEGY: {result.strategy_type}
RISK LEVEL: {result.risk_level}

[JANGKA PANJANG]
{result.long_term_suitability}

[JANGKA PENDEK]
{result.short_term_suitability}

[PREDIKSI PASAR]
{result.prediction}

[TACTICAL ZONE]
ENTRY: {text_value(result.entry_area)}
TARGET: {text_value(result.target_price)}
STOP LOSS: {text_value(result.stop_loss)}

[POINT ANALISA]
{points}
{SEPARATOR}
DISCLAIMER: {result.dynamic_disclaimer}
"""
        return text.strip()

    def save(self, report: str, path: Optional[Path] = None, stock_code: str = "") -> Path:
        """Write a composed report as UTF-8 text."""
        if path is None:
            OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
            path = OUTPUT_DIR / f"{stock_code or 'report'}_tactical_intel.txt"
        path = Path(path)
        with open(path, "w", encoding="utf-8") as f:
            f.write(report)
        self.logger.info(f"Report saved to {path}")
        return path


def compose_report(result: Union[TacticalAnalysisResult, Mapping[str, Any], None], stock_code: str) -> str:
    return ReportComposer().compose(result, stock_code)


def parse_report(text: str) -> Tuple[str, TacticalAnalysisResult]:
    """
    Recover the stock code and result fields from a composed report.

    Exact for fields that contain no section markers or line breaks in
    single-line slots. ``market_structure`` is not part of the report and
    comes back empty.

    Raises:
        ValueError: if the text is not a canonical report.
    """
    match = _REPORT_PATTERN.match(text.strip())
    if match is None:
        raise ValueError("Text is not a TACTICAL INTEL REPORT")

    groups = match.groupdict(default="")
    reasoning = [
        line[len(BULLET):] if line.startswith(BULLET) else line
        for line in groups.pop("reasoning").split("\n")
        if line
    ]
    stock_code = groups.pop("stock_code")
    return stock_code, TacticalAnalysisResult(reasoning=reasoning, **groups)
