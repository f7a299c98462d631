import json
from unittest import mock

import pytest
import requests

from arthavision import (
    ExternalServiceError,
    FundamentalMetrics,
    GeminiClient,
    PromptBuilder,
    SectorAverages,
    TACTICAL_SCHEMA,
    TacticalInput,
    analyze_deviation,
    classify_brokers,
)
from arthavision.ai_client import extract_text, parse_json_text


def _response(status_code=200, body=None, text=""):
    resp = mock.Mock()
    resp.status_code = status_code
    resp.text = text
    if isinstance(body, Exception):
        resp.json.side_effect = body
    else:
        resp.json.return_value = body
    return resp


def _gemini_body(payload):
    return {"candidates": [{"content": {"parts": [{"text": json.dumps(payload)}]}}]}


def test_generate_json_success():
    client = GeminiClient(api_key="test-key")
    with mock.patch("arthavision.ai_client.requests.post", return_value=_response(body=_gemini_body({"strategyType": "Swing"}))) as post:
        data = client.generate_json("prompt", schema=TACTICAL_SCHEMA)

    assert data == {"strategyType": "Swing"}
    assert post.call_count == 1
    kwargs = post.call_args.kwargs
    assert kwargs["headers"]["x-goog-api-key"] == "test-key"
    assert kwargs["json"]["generationConfig"]["responseSchema"] == TACTICAL_SCHEMA
    assert kwargs["json"]["generationConfig"]["responseMimeType"] == "application/json"
    assert post.call_args.args[0].endswith(":generateContent")


def test_search_payload_has_tool_and_no_schema():
    payload = GeminiClient(api_key="k").build_payload("p", use_search=True, thinking=False)
    assert payload["tools"] == [{"google_search": {}}]
    assert "responseSchema" not in payload["generationConfig"]
    assert "thinkingConfig" not in payload["generationConfig"]


def test_missing_api_key_is_service_error():
    with mock.patch("arthavision.ai_client.requests.post") as post:
        with pytest.raises(ExternalServiceError):
            GeminiClient(api_key="").generate_json("prompt")
    post.assert_not_called()


def test_http_error_status_surfaces():
    client = GeminiClient(api_key="k")
    with mock.patch("arthavision.ai_client.requests.post", return_value=_response(503, text="unavailable")):
        with pytest.raises(ExternalServiceError) as exc:
            client.generate_json("prompt")
    assert exc.value.status_code == 503


def test_transport_error_single_attempt():
    client = GeminiClient(api_key="k")
    with mock.patch("arthavision.ai_client.requests.post", side_effect=requests.ConnectionError("down")) as post:
        with pytest.raises(ExternalServiceError):
            client.generate_json("prompt")
    assert post.call_count == 1


def test_non_json_body():
    client = GeminiClient(api_key="k")
    with mock.patch("arthavision.ai_client.requests.post", return_value=_response(body=ValueError("bad"))):
        with pytest.raises(ExternalServiceError):
            client.generate_json("prompt")


def test_extract_text_skips_thoughts_and_requires_candidates():
    body = {"candidates": [{"content": {"parts": [{"text": "thinking", "thought": True}, {"text": "{}"}]}}]}
    assert extract_text(body) == "{}"
    with pytest.raises(ExternalServiceError):
        extract_text({"candidates": []})


def test_parse_json_text_tolerates_fences():
    assert parse_json_text('```json\n{"a": 1}\n```') == {"a": 1}
    with pytest.raises(ExternalServiceError):
        parse_json_text("no json here")
    with pytest.raises(ExternalServiceError):
        parse_json_text("[1, 2]")


def test_tactical_prompt_carries_core_values():
    t = TacticalInput(stock_code="bbca", price=9800, avg_price_top3=10000, top_brokers="yp, bk")
    prompt = PromptBuilder().tactical(t, analyze_deviation(t.price, t.avg_price_top3), classify_brokers(t.top_brokers))
    assert "Saham: BBCA" in prompt
    assert "AKUMULASI (Harga Jauh Dibawah Avg Broker) (-2.00%)" in prompt
    assert "YP: RITEL, BK: RICH" in prompt
    assert PromptBuilder.NO_FEED in prompt


def test_fundamental_prompt_includes_sector_and_growth():
    metrics = FundamentalMetrics(roe=18, rev_now=110, rev_last_year=100)
    sector = SectorAverages(roe=12.5, peer_count=4)
    prompt = PromptBuilder().fundamental(metrics, sector)
    assert "YoY Growth 10.00%" in prompt
    assert "ROE 12.50%" in prompt
    assert "(4 peers)" in prompt
