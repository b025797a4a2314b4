import pytest

from stockmill.clock import Granularity
from stockmill.record import ObStat
from stockmill.stats import Stats, calculate_rsi, calculate_volatility


def _stat(open_, close):
    return ObStat(
        tick=0, granularity=Granularity.DAY, volume=1, high=max(open_, close),
        low=min(open_, close), open=open_, close=close,
    )


def test_volatility_of_short_series_is_its_length():
    assert calculate_volatility([]) == float(len([]))
    single = [_stat(1.0, 2.0)]
    assert calculate_volatility(single) == float(len(single))


def test_volatility_deviations_cancel():
    series = [_stat(10.0, 11.0), _stat(11.0, 9.0), _stat(9.0, 9.5), _stat(9.5, 12.0)]
    assert calculate_volatility(series) == pytest.approx(0.0, abs=1e-12)


def test_volatility_with_zero_open_is_nan():
    series = [_stat(0.0, 1.0), _stat(0.0, 2.0)]
    result = calculate_volatility(series)
    assert f"{result}" == "nan"


def test_rsi_balanced_moves():
    series = [_stat(2.0, 1.0), _stat(1.0, 2.0)]
    assert calculate_rsi(series) == pytest.approx(50.0)


def test_rsi_uses_only_last_fourteen():
    early = [_stat(100.0, 1.0) for _ in range(6)]
    recent = [_stat(2.0, 1.0), _stat(1.0, 2.0)] * 7
    assert calculate_rsi(early + recent) == pytest.approx(calculate_rsi(recent))


def test_rsi_of_empty_series_is_nan():
    result = calculate_rsi([])
    assert f"{result}" == "nan"


def test_update_stats_fills_every_field():
    stats = Stats()
    one = [_stat(1.0, 2.0)]
    balanced = [_stat(2.0, 1.0), _stat(1.0, 2.0)]
    stats.update_stats([[], one, [], balanced])
    assert stats.minute_volatility == float(len([]))
    assert stats.hour_volatility == float(len(one))
    assert stats.month_volatility == calculate_volatility(balanced)
    assert stats.rsi == calculate_rsi(balanced)