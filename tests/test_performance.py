"""Tests for portfolio performance analysis."""

import random

import pytest

from trading_mcp.errors import InvalidRequestError
from trading_mcp.ledger import Ledger, PerformancePeriod


class _FixedQuotes:
    def get_price(self, symbol):
        return 100.0


def _make_ledger(seed=1):
    ledger = Ledger(quotes=_FixedQuotes(), rng=random.Random(seed))
    ledger.execute_order({"symbol": "AAPL", "action": "buy", "type": "market", "quantity": 50})
    return ledger


@pytest.mark.parametrize(
    "period,samples",
    [("1d", 24), ("1w", 7), ("1m", 30), ("3m", 90), ("1y", 365)],
)
def test_history_length_and_end_value(period, samples):
    ledger = _make_ledger()
    report = ledger.analyze_performance(period)
    assert report.period == period
    assert len(report.historical_values) == samples
    assert report.historical_values[-1].value == pytest.approx(report.current_value)
    assert report.current_value == pytest.approx(ledger.get_portfolio().total_value)
    assert report.start_value == report.historical_values[0].value


def test_history_dates_ascending():
    report = _make_ledger().analyze_performance("1m")
    dates = [h.date for h in report.historical_values]
    assert dates == sorted(dates)
    assert len(set(dates)) == len(dates)


def test_day_period_is_hourly():
    report = _make_ledger().analyze_performance("1d")
    assert all("T" in h.date for h in report.historical_values)


def test_returns():
    report = _make_ledger().analyze_performance("1m")
    assert report.absolute_return == pytest.approx(report.current_value - report.start_value)
    assert report.percent_return == pytest.approx(
        report.absolute_return / report.start_value * 100
    )


@pytest.mark.parametrize("period", ["1d", "1w", "1m", "3m"])
def test_annualized_return_compounds(period):
    report = _make_ledger().analyze_performance(period)
    periods = PerformancePeriod(period).periods_per_year
    expected = ((1 + report.percent_return / 100) ** periods - 1) * 100
    assert report.annualized_return == pytest.approx(expected)


def test_annualized_return_for_year_is_percent_return():
    report = _make_ledger().analyze_performance("1y")
    assert report.annualized_return == report.percent_return


def test_volatility_is_std_of_step_returns():
    report = _make_ledger().analyze_performance("1w")
    values = [h.value for h in report.historical_values]
    returns = [values[i] / values[i - 1] - 1 for i in range(1, len(values))]
    mean = sum(returns) / len(returns)
    std = (sum((r - mean) ** 2 for r in returns) / len(returns)) ** 0.5
    assert report.volatility == pytest.approx(std * 100)
    assert report.volatility >= 0


def test_step_changes_bounded():
    values = [h.value for h in _make_ledger().analyze_performance("3m").historical_values]
    for prev, cur in zip(values, values[1:]):
        # cur = prev + change, change in [-1%, +1.5%] of cur
        assert -0.0102 <= (cur - prev) / cur <= 0.0152


def test_invalid_period():
    with pytest.raises(InvalidRequestError):
        _make_ledger().analyze_performance("5y")


def test_performance_does_not_mutate_ledger():
    ledger = _make_ledger()
    before = ledger.get_portfolio().model_dump(exclude={"timestamp"})
    ledger.analyze_performance("1y")
    assert ledger.get_portfolio().model_dump(exclude={"timestamp"}) == before
