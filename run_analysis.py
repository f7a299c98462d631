#!/usr/bin/env python3
"""
ArthaVision Analytics Core - Command Line Runner
================================================

Runs the local analytics for one IDX stock and, on request, the AI
analysis paths:

Local (always):
- Broker-code classification (RICH / KONGLO / RITEL / CAMPUR)
- Price vs. top-3 broker average deviation and zone
- Peer-sector averages and company-vs-sector comparison

AI (flags):
- --fundamental   Financial forensics verdict from statement metrics
- --tactical      Bandarmology + intelligence feed fusion, TACTICAL INTEL REPORT
- --public-data   Company profile from public sources

Usage:
    python run_analysis.py BBCA --price 9800 --broker-avg 10000 --brokers "yp, bk, ms"
    python run_analysis.py BBCA --peers-csv peers.csv --metrics-json bbca.json --fundamental
    python run_analysis.py BBCA --price 9800 --broker-avg 10000 --intel-file feed.txt --tactical --output report.txt

Version: 1.0.0
"""

import argparse
import json
import sys
from pathlib import Path

import pandas as pd

from arthavision import (
    __version__,
    ORDER_BOOK_OPTIONS,
    TRADE_BOOK_OPTIONS,
    AnalysisOrchestrator,
    ConfigurationError,
    ExternalServiceError,
    FundamentalMetrics,
    GeminiClient,
    TacticalInput,
    compare_to_sector,
    peers_from_frame,
)


# =============================================================================
# FORMATTING UTILITIES
# =============================================================================

def format_ratio(value, suffix="x", decimals=2):
    if value is None:
        return "N/A"
    return f"{value:,.{decimals}f}{suffix}"


def format_percent(value, decimals=2):
    """Format a fraction as a percentage."""
    if value is None:
        return "N/A"
    return f"{value*100:+.{decimals}f}%"


def print_line(char="=", length=80):
    print(char * length)


def print_header(title):
    print()
    print_line("=")
    print(f"  {title}")
    print_line("=")


def print_subheader(title):
    print()
    print(f"  {title}")
    print_line("-", 50)


# =============================================================================
# OUTPUT FUNCTIONS
# =============================================================================

def print_banner():
    print()
    print_line()
    print("  ARTHAVISION ANALYTICS CORE")
    print("  Broker Classification, Sector Averages, Price Deviation & AI Verdicts")
    print(f"  Version: {__version__}")
    print_line()


def print_brokers(brokers):
    print_header("BROKER CLASSIFICATION")
    if not brokers:
        print("  No broker codes entered.")
        return
    for entry in brokers:
        name = entry.name or "-"
        print(f"  {entry.code:<6} {entry.category.label:<10} {name}")


def print_deviation(deviation, tactical_input):
    print_header("PRICE VS BROKER AVERAGE")
    print(f"  Current Price:    {tactical_input.price:,.0f}")
    print(f"  Avg Broker Top 3: {tactical_input.avg_price_top3:,.0f}")
    print(f"  Deviation:        {deviation.formatted_percent}")
    print(f"  Zone:             {deviation.zone.value.upper()} - {deviation.label}")
    print(f"  Gauge:            {deviation.magnitude:.1f}% of track")
    print(f"  Broker Summary:   {tactical_input.broker_summary_value:.0f} ({tactical_input.broker_summary_label})")


def print_sector(averages, metrics):
    print_header(f"SECTOR AVERAGES ({averages.peer_count} peers)")
    labels = {"roe": ("ROE", "%"), "roa": ("ROA", "%"), "npm": ("NPM", "%"),
              "per": ("PER", "x"), "pbv": ("PBV", "x"), "ps": ("P/S", "x"),
              "der": ("DER", "x"), "cr": ("Current Ratio", "x")}
    comparisons = compare_to_sector(metrics, averages) if metrics else {}
    for name, value in averages.to_dict().items():
        label, suffix = labels[name]
        line = f"  {label:<16} {format_ratio(value, suffix):>12}"
        comp = comparisons.get(name)
        if comp is not None and comp.premium is not None:
            line += f"   company {format_ratio(comp.company_value, suffix)} ({format_percent(comp.premium)}, {comp.assessment.value})"
        print(line)


def print_fundamental(result):
    print_header(f"FUNDAMENTAL VERDICT: {result.verdict.to_display()}")
    print(f"  Fundamental Score: {result.fundamental_score:.0f}/100")
    matrix = result.accuracy_matrix
    print(f"  Profitability Quality: {matrix.profitability_quality:.0f}")
    print(f"  Solvency Risk Verify:  {matrix.solvency_risk:.0f}")
    print(f"  Valuation Margin:      {matrix.valuation_margin:.0f}")
    print(f"  Cash Flow Integrity:   {matrix.cash_flow_integrity:.0f}")
    print_subheader("Executive Summary")
    print(f"  {result.executive_summary}")
    print_subheader("Long Term")
    print(f"  {result.long_term_insight}")
    print_subheader("Short Term")
    print(f"  {result.short_term_insight}")
    print_subheader("Competitive Moat")
    print(f"  {result.moat_note}")
    if result.risk_analysis:
        print_subheader("Risks")
        for risk in result.risk_analysis:
            print(f"  - {risk}")


def print_public_data(data):
    print_header(f"PUBLIC DATA: {data.company_name or '-'}")
    print(f"  Sector:        {data.sector or '-'}")
    print(f"  President Dir: {data.management.pres_dir or '-'}")
    print(f"  Foreign Flow:  {data.market_data.get('foreignFlow') or '-'}")
    print(f"  SID Count:     {data.ksei_stats.get('sidCount') or '-'}")
    for item in data.news[:5]:
        print(f"  * {item.title} ({item.source})")


# =============================================================================
# INPUT LOADING
# =============================================================================

def load_metrics(path):
    if not path:
        return None
    with open(path, "r", encoding="utf-8") as f:
        return FundamentalMetrics.from_dict(json.load(f))


def load_peers(path):
    if not path:
        return None
    return peers_from_frame(pd.read_csv(path))


def load_intelligence(path):
    if not path:
        return ""
    return Path(path).read_text(encoding="utf-8")


# =============================================================================
# MAIN FUNCTION
# =============================================================================

def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="ArthaVision Analytics Core"
    )
    parser.add_argument("stock_code", nargs="?", default="", help="IDX stock code, e.g. BBCA")
    parser.add_argument("--price", type=str, default="0", help="Current price")
    parser.add_argument("--broker-avg", type=str, default="0", help="Average price of the top-3 brokers")
    parser.add_argument("--brokers", type=str, default="", help='Comma-separated broker codes, e.g. "YP, BK, MS"')
    parser.add_argument("--order-book", choices=ORDER_BOOK_OPTIONS, default=ORDER_BOOK_OPTIONS[0])
    parser.add_argument("--trade-book", choices=TRADE_BOOK_OPTIONS, default=TRADE_BOOK_OPTIONS[0])
    parser.add_argument("--broker-summary", type=str, default="50", help="Broker summary strength (0-100)")
    parser.add_argument("--intel-file", type=str, default=None, help="Raw intelligence feed text file")
    parser.add_argument("--peers-csv", type=str, default=None, help="Peer table CSV (roe,roa,npm,per,pbv,ps,der,cr)")
    parser.add_argument("--metrics-json", type=str, default=None, help="Company metrics JSON")
    parser.add_argument("--fundamental", action="store_true", help="Run the fundamental AI analysis")
    parser.add_argument("--tactical", action="store_true", help="Run the tactical AI analysis")
    parser.add_argument("--public-data", action="store_true", help="Fetch public company data")
    parser.add_argument("--api-key", type=str, default=None, help="Gemini API key")
    parser.add_argument("--output", type=str, default=None, help="Write the tactical report to this file")
    parser.add_argument("--quiet", action="store_true", help="Suppress local analytics output")

    args = parser.parse_args()

    print_banner()

    orchestrator = AnalysisOrchestrator(client=GeminiClient(api_key=args.api_key))
    tactical_input = TacticalInput(
        stock_code=args.stock_code,
        price=args.price,
        order_book_status=args.order_book,
        trade_book_status=args.trade_book,
        broker_summary_value=args.broker_summary,
        avg_price_top3=args.broker_avg,
        top_brokers=args.brokers,
        raw_intelligence=load_intelligence(args.intel_file),
    )
    metrics = load_metrics(args.metrics_json)
    peers = load_peers(args.peers_csv)

    brokers = orchestrator.update_brokers(tactical_input.top_brokers)
    deviation = orchestrator.update_prices(tactical_input.price, tactical_input.avg_price_top3)

    try:
        if peers is not None:
            orchestrator.update_peers(peers)
    except ConfigurationError as e:
        print(f"\nError: {e}")
        return 1

    if not args.quiet:
        print_brokers(brokers)
        print_deviation(deviation, tactical_input)
        if orchestrator.sector_averages is not None:
            print_sector(orchestrator.sector_averages, metrics)

    try:
        if args.public_data:
            print(f"\nFetching public data for {tactical_input.stock_code}...")
            print_public_data(orchestrator.fetch_public_data(tactical_input.stock_code))

        if args.fundamental:
            if metrics is None:
                print("\nError: --fundamental requires --metrics-json")
                return 1
            print("\nRunning fundamental analysis...")
            print_fundamental(orchestrator.run_fundamental(metrics))

        if args.tactical:
            print(f"\nRunning tactical analysis for {tactical_input.stock_code}...")
            orchestrator.run_tactical(tactical_input)
            report = orchestrator.compose_report()
            print_header("TACTICAL INTEL REPORT")
            print(report)
            if args.output:
                path = orchestrator.composer.save(report, Path(args.output))
                print(f"\n  Report saved to: {path}")
    except (ExternalServiceError, ValueError) as e:
        print(f"\nError: {e}")
        return 1

    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
