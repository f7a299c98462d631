import pytest

from arthavision import DeviationAnalyzer, DeviationZone, PriceDeviation, analyze_deviation


@pytest.mark.parametrize("price", [0, 1, 98, 5000, 123456.78])
def test_unset_reference_is_neutral_zero(price):
    deviation = analyze_deviation(price, 0)
    assert deviation.percent == 0.0
    assert deviation.zone == DeviationZone.NEUTRAL
    assert deviation.magnitude == 0.0


@pytest.mark.parametrize("reference", [None, "", "abc", float("nan")])
def test_missing_reference_values_are_unset(reference):
    assert analyze_deviation(100, reference) == PriceDeviation()


def test_lower_boundary_is_accumulation():
    deviation = analyze_deviation(98, 100)
    assert deviation.percent == pytest.approx(-2.0)
    assert deviation.zone == DeviationZone.ACCUMULATION


def test_upper_boundary_is_distribution():
    deviation = analyze_deviation(102, 100)
    assert deviation.percent == pytest.approx(2.0)
    assert deviation.zone == DeviationZone.DISTRIBUTION


def test_small_deviation_is_neutral():
    deviation = analyze_deviation(101, 100)
    assert deviation.percent == pytest.approx(1.0)
    assert deviation.zone == DeviationZone.NEUTRAL
    assert deviation.magnitude == pytest.approx(5.0)


def test_magnitude_is_clamped():
    deviation = analyze_deviation(150, 100)
    assert deviation.percent == pytest.approx(50.0)
    assert deviation.magnitude == 50


def test_magnitude_clamped_on_negative_side():
    deviation = analyze_deviation(50, 100)
    assert deviation.magnitude == 50
    assert deviation.direction == -1


def test_classify_thresholds():
    analyzer = DeviationAnalyzer()
    assert analyzer.classify(-2.0) == DeviationZone.ACCUMULATION
    assert analyzer.classify(-1.99) == DeviationZone.NEUTRAL
    assert analyzer.classify(1.99) == DeviationZone.NEUTRAL
    assert analyzer.classify(2.0) == DeviationZone.DISTRIBUTION


def test_labels_and_formatting():
    accumulation = analyze_deviation(9500, 10000)
    assert accumulation.formatted_percent == "-5.00%"
    assert accumulation.label == "Potensi Akumulasi (Under Value)"
    assert accumulation.broker_position.startswith("AKUMULASI")

    distribution = analyze_deviation(10300, 10000)
    assert distribution.formatted_percent == "+3.00%"
    assert distribution.broker_position.startswith("DISTRIBUSI")
    assert distribution.direction == 1

    assert PriceDeviation().broker_position == "NETRAL (Harga Dekat Avg Broker)"
    assert PriceDeviation().direction == 0


def test_gauge_magnitude_scale():
    analyzer = DeviationAnalyzer()
    assert analyzer.gauge_magnitude(0) == 0
    assert analyzer.gauge_magnitude(-4) == pytest.approx(20.0)
    assert analyzer.gauge_magnitude(25) == 50
