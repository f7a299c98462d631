import pytest

from arthavision import PeerMetrics, TacticalAnalysisResult


@pytest.fixture
def peers():
    return [
        PeerMetrics(roe=15.2, roa=2.1, npm=30.5, per=18.0, pbv=3.9, ps=7.1, der=5.2, cr=1.1),
        PeerMetrics(roe=20.1, roa=3.0, npm=35.0, per=14.5, pbv=2.8, ps=5.0, der=4.8, cr=1.3),
        PeerMetrics(roe=12.4, roa=1.7, npm=22.9, per=9.3, pbv=1.2, ps=2.2, der=6.0, cr=0.9),
    ]


@pytest.fixture
def tactical_payload():
    return {
        "marketStructure": "Konsolidasi di atas MA50",
        "prediction": "Rebound menuju resisten 10.250 dalam 3 hari",
        "strategyType": "Swing",
        "entryArea": "9700-9800",
        "targetPrice": 10250,
        "stopLoss": "9450",
        "riskLevel": "Med",
        "longTermSuitability": "Cocok untuk jangka panjang. ROE stabil. Monte Carlo positif.",
        "shortTermSuitability": "Akumulasi asing terlihat. RSI netral. Volume naik.",
        "reasoning": [
            "Harga 2% di bawah rata-rata broker asing",
            "Sharpe Ratio 1.4 mendukung risk/reward",
            "VaR 95% masih dalam toleransi",
        ],
        "dynamicDisclaimer": "Bukan ajakan jual/beli.",
    }


@pytest.fixture
def tactical_result(tactical_payload):
    return TacticalAnalysisResult.from_dict(tactical_payload)
