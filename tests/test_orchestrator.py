import threading

import pytest

from arthavision import (
    AnalysisOrchestrator,
    DeviationAnalyzer,
    ConfigurationError,
    DeviationZone,
    ExternalServiceError,
    FundamentalMetrics,
    TacticalInput,
    Verdict,
)


class FakeClient:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def generate_json(self, prompt, **kwargs):
        self.calls.append((prompt, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response()
        return response


def test_update_methods_rederive_core_values(peers):
    orch = AnalysisOrchestrator(client=FakeClient([]))
    assert [e.code for e in orch.update_brokers("yp, ms")] == ["YP", "MS"]
    assert orch.update_prices(98, 100).zone == DeviationZone.ACCUMULATION
    assert orch.update_peers(peers).peer_count == 3
    assert orch.update_prices(101, 100).zone == DeviationZone.NEUTRAL


def test_empty_peers_fail_before_any_request():
    client = FakeClient([])
    orch = AnalysisOrchestrator(client=client)
    with pytest.raises(ConfigurationError):
        orch.run_fundamental(FundamentalMetrics(), peers=[])
    assert client.calls == []


def test_run_tactical_stores_result_and_composes(tactical_payload):
    client = FakeClient([tactical_payload])
    orch = AnalysisOrchestrator(client=client)
    assert orch.compose_report() is None

    t = TacticalInput(stock_code="bbca", price=9800, avg_price_top3=10000, top_brokers="BK")
    result = orch.run_tactical(t)

    assert orch.tactical_result == result
    assert orch.deviation.zone == DeviationZone.ACCUMULATION
    assert orch.brokers[0].code == "BK"
    assert orch.compose_report().startswith("TACTICAL INTEL REPORT [BBCA]")
    assert client.calls[0][1]["schema"]["properties"]["strategyType"] == {"type": "STRING"}


def test_failure_leaves_previous_result(tactical_payload):
    client = FakeClient([tactical_payload, ExternalServiceError("boom")])
    orch = AnalysisOrchestrator(client=client)
    t = TacticalInput(stock_code="BBCA")
    first = orch.run_tactical(t)

    with pytest.raises(ExternalServiceError):
        orch.run_tactical(TacticalInput(stock_code="TLKM"))

    assert orch.tactical_result is first
    assert orch.tactical_stock_code == "BBCA"


def test_superseded_response_is_discarded(tactical_payload):
    newer = dict(tactical_payload, strategyType="Avoid")
    orch = AnalysisOrchestrator()

    def overlapping():
        # A second request starts before the first one returns
        orch.run_tactical(TacticalInput(stock_code="TLKM"))
        return dict(tactical_payload, strategyType="Scalping")

    orch.client = FakeClient([overlapping, newer])
    stale = orch.run_tactical(TacticalInput(stock_code="BBCA"))

    assert stale.strategy_type == "Scalping"
    assert orch.tactical_result.strategy_type == "Avoid"
    assert orch.tactical_stock_code == "TLKM"


def test_run_fundamental_uses_sector_averages(peers):
    client = FakeClient([{"verdict": "HINDARI", "fundamentalScore": 22}])
    orch = AnalysisOrchestrator(client=client)
    result = orch.run_fundamental(FundamentalMetrics(roe=8), peers=peers)

    assert result.verdict == Verdict.HINDARI
    assert orch.fundamental_result is result
    assert "(3 peers)" in client.calls[0][0]


def test_fetch_public_data_requires_code():
    orch = AnalysisOrchestrator(client=FakeClient([]))
    with pytest.raises(ValueError):
        orch.fetch_public_data("  ")


def test_fetch_public_data_uses_search():
    client = FakeClient([{"companyName": "PT Telkom Indonesia"}])
    orch = AnalysisOrchestrator(client=client)
    data = orch.fetch_public_data("tlkm")
    assert data.company_name == "PT Telkom Indonesia"
    assert orch.public_data is data
    assert client.calls[0][1]["use_search"] is True
    assert "TLKM" in client.calls[0][0]


class GatedDeviationAnalyzer(DeviationAnalyzer):
    """Holds the first request inside its deviation step until released."""

    def __init__(self, held_price):
        super().__init__()
        self.held_price = held_price
        self.entered = threading.Event()
        self.release = threading.Event()

    def analyze(self, current_price, reference_price):
        if current_price == self.held_price:
            self.entered.set()
            self.release.wait(timeout=5)
        return super().analyze(current_price, reference_price)


def test_overlapping_tactical_prompts_keep_their_own_inputs(tactical_payload):
    client = FakeClient([tactical_payload, tactical_payload])
    orch = AnalysisOrchestrator(client=client)
    orch.deviation_analyzer = GatedDeviationAnalyzer(held_price=100)
    errors = []

    def first_request():
        try:
            orch.run_tactical(TacticalInput(stock_code="AAAA", price=100, avg_price_top3=110, top_brokers="YP"))
        except Exception as e:  # surfaced through the assertion below
            errors.append(e)

    worker = threading.Thread(target=first_request)
    worker.start()
    assert orch.deviation_analyzer.entered.wait(timeout=5)

    orch.run_tactical(TacticalInput(stock_code="BBBB", price=120, avg_price_top3=110, top_brokers="BK"))
    orch.deviation_analyzer.release.set()
    worker.join(timeout=5)

    assert errors == []
    prompts = {code: prompt for prompt, _ in client.calls for code in ("AAAA", "BBBB") if f"Saham: {code}" in prompt}
    assert "- Top Broker: YP: RITEL" in prompts["AAAA"]
    assert "AKUMULASI (Harga Jauh Dibawah Avg Broker)" in prompts["AAAA"]
    assert "- Top Broker: BK: RICH" in prompts["BBBB"]
    assert "DISTRIBUSI (Harga Jauh Diatas Avg Broker)" in prompts["BBBB"]
    # The later-issued request owns both the derived state and the result
    assert orch.tactical_stock_code == "AAAA"
    assert [e.code for e in orch.brokers] == ["YP"]
    assert orch.deviation.zone == DeviationZone.ACCUMULATION


def test_fundamental_prompt_uses_peers_passed_in(peers):
    client = FakeClient([{"verdict": "SPEKULATIF"}])
    orch = AnalysisOrchestrator(client=client)
    orch.run_fundamental(FundamentalMetrics(), peers=peers[:1])
    assert "(1 peers)" in client.calls[0][0]
    assert orch.sector_averages.peer_count == 1
