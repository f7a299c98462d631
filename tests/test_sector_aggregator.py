import pandas as pd
import pytest

from arthavision import (
    ComparisonAssessment,
    ConfigurationError,
    FundamentalMetrics,
    PeerMetrics,
    SectorAggregator,
    SectorAverages,
    compare_to_sector,
    empty_panel,
    peers_from_frame,
    peers_from_records,
)


FIELDS = ["roe", "roa", "npm", "per", "pbv", "ps", "der", "cr"]


def test_each_field_is_the_arithmetic_mean(peers):
    averages = SectorAggregator().aggregate(peers)
    for name in FIELDS:
        expected = sum(getattr(p, name) for p in peers) / len(peers)
        assert getattr(averages, name) == pytest.approx(expected, abs=1e-9)
    assert averages.peer_count == 3


def test_single_peer_average_equals_peer():
    peer = PeerMetrics(roe=10, roa=1, npm=5, per=12, pbv=1.5, ps=2, der=0.8, cr=1.9)
    averages = SectorAggregator().aggregate([peer])
    assert averages.to_dict() == pytest.approx(peer.__dict__)


def test_empty_peer_set_raises_configuration_error():
    with pytest.raises(ConfigurationError):
        SectorAggregator().aggregate([])


def test_blank_panel_averages_to_zero():
    averages = SectorAggregator().aggregate(empty_panel())
    assert averages.peer_count == 5
    assert all(v == 0 for v in averages.to_dict().values())


def test_input_is_not_mutated(peers):
    snapshot = list(peers)
    SectorAggregator().aggregate(peers)
    assert peers == snapshot


def test_aggregate_frame_coerces_bad_cells():
    frame = pd.DataFrame({
        "ROE": [10, "abc"],
        "per": [12, 8],
    })
    averages = SectorAggregator().aggregate_frame(frame)
    assert averages.roe == pytest.approx(5.0)
    assert averages.per == pytest.approx(10.0)
    assert averages.cr == 0.0


def test_empty_frame_raises():
    with pytest.raises(ConfigurationError):
        SectorAggregator().aggregate_frame(pd.DataFrame())


def test_peers_from_records_coerces():
    peers = peers_from_records([{"roe": "12.5", "der": None}, {"roe": "n/a"}])
    assert peers[0].roe == 12.5
    assert peers[0].der == 0.0
    assert peers[1].roe == 0.0


def test_peers_from_frame_preserves_order():
    frame = pd.DataFrame([{"roe": 1}, {"roe": 2}, {"roe": 3}])
    assert [p.roe for p in peers_from_frame(frame)] == [1, 2, 3]


def test_compare_to_sector_direction_aware():
    averages = SectorAverages(roe=10, roa=2, npm=20, per=15, pbv=2, ps=3, der=1, cr=1.5, peer_count=3)
    metrics = FundamentalMetrics(
        roe=15, roa=2.05, npm=10, pe=10, pbv=3, ps=0, der=1,
        current_assets=300, current_liabilities=100,
    )
    result = compare_to_sector(metrics, averages)

    assert result["roe"].premium == pytest.approx(0.5)
    assert result["roe"].assessment == ComparisonAssessment.FAVORABLE
    assert result["roa"].assessment == ComparisonAssessment.IN_LINE
    assert result["npm"].assessment == ComparisonAssessment.UNFAVORABLE
    # Lower P/E than the sector is favorable, higher PBV is not
    assert result["per"].assessment == ComparisonAssessment.FAVORABLE
    assert result["pbv"].assessment == ComparisonAssessment.UNFAVORABLE
    # Company P/S not entered
    assert result["ps"].assessment == ComparisonAssessment.NOT_APPLICABLE
    assert result["ps"].premium is None
    assert result["cr"].company_value == pytest.approx(3.0)
    assert result["cr"].assessment == ComparisonAssessment.FAVORABLE


def test_compare_without_sector_value_is_not_applicable(peers):
    aggregator = SectorAggregator()
    averages = aggregator.aggregate(peers)
    result = aggregator.compare(FundamentalMetrics(roe=18), averages)
    assert set(result) == set(FIELDS)
    assert result["roe"].premium is not None
    assert result["der"].assessment == ComparisonAssessment.NOT_APPLICABLE

    blank = compare_to_sector(FundamentalMetrics(roe=18), SectorAverages())
    assert blank["roe"].assessment == ComparisonAssessment.NOT_APPLICABLE


def test_frame_and_records_coerce_cells_alike():
    rows = [{"roe": "1,234", "per": "12,5", "der": "n/a"}]
    from_frame = peers_from_frame(pd.DataFrame(rows))
    from_records = peers_from_records(rows)
    assert from_frame == from_records
    assert from_frame[0].roe == 1234.0
    assert from_frame[0].per == 12.5
    assert from_frame[0].der == 0.0
