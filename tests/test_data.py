"""Tests for price series models and the mock market data provider."""

import random
from datetime import date, timedelta

import pytest
from pydantic import ValidationError

from trading_mcp.data import MockMarketData
from trading_mcp.errors import InvalidRequestError
from trading_mcp.models import PriceSeries, Timeframe


def test_mock_series_shape():
    series = MockMarketData(rng=random.Random(1)).get_price_series("aapl", "1d", 100)
    assert series.symbol == "AAPL"
    assert len(series) == 100
    assert len(series.volumes) == len(series.dates) == 100
    assert series.dates[-1] == date.today()
    assert all(b > a for a, b in zip(series.dates, series.dates[1:]))
    assert all(p >= 1.0 for p in series.prices)
    assert all(100_000 <= v < 1_000_000 for v in series.volumes)


def test_weekly_series_steps_seven_days():
    series = MockMarketData(rng=random.Random(1)).get_price_series("AAPL", "1w", 5)
    assert series.timeframe == Timeframe.WEEK
    assert series.dates[1] - series.dates[0] == timedelta(days=7)


def test_seeded_provider_is_deterministic():
    a = MockMarketData(rng=random.Random(5)).get_price_series("AAPL")
    b = MockMarketData(rng=random.Random(5)).get_price_series("AAPL")
    assert a.prices == b.prices


def test_invalid_timeframe_and_limit():
    provider = MockMarketData(rng=random.Random(1))
    with pytest.raises(InvalidRequestError):
        provider.get_price_series("AAPL", "2d")
    with pytest.raises(InvalidRequestError):
        provider.get_price_series("AAPL", "1d", 0)


def test_quote_within_range():
    provider = MockMarketData(rng=random.Random(1), quote_min=10, quote_max=20)
    assert all(10 <= provider.get_price("AAPL") <= 20 for _ in range(50))


def test_series_requires_equal_lengths():
    with pytest.raises(ValidationError):
        PriceSeries(
            symbol="AAPL",
            prices=[1.0, 2.0],
            volumes=[1],
            dates=[date(2024, 1, 1), date(2024, 1, 2)],
        )


def test_series_requires_ascending_dates():
    with pytest.raises(ValidationError):
        PriceSeries(
            symbol="AAPL",
            prices=[1.0, 2.0],
            volumes=[1, 1],
            dates=[date(2024, 1, 2), date(2024, 1, 1)],
        )


def test_series_points():
    series = PriceSeries(
        symbol="AAPL",
        prices=[1.0, 2.0],
        volumes=[10, 20],
        dates=[date(2024, 1, 1), date(2024, 1, 2)],
    )
    points = series.points
    assert points[1].price == 2.0
    assert points[1].volume == 20
