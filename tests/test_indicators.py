"""Tests for SMA, EMA and RSI."""

import random

import pytest

from trading_mcp.indicators import ema, rsi, sma


def _random_walk(n=120, seed=7):
    rng = random.Random(seed)
    prices = [100.0]
    for _ in range(n - 1):
        prices.append(max(prices[-1] + rng.uniform(-3, 3), 1.0))
    return prices


def test_sma_period_one_is_identity():
    prices = [0.1, 0.2, 0.3, 10.5, 7.25]
    assert sma(prices, 1) == prices


def test_sma_values():
    assert sma([1, 2, 3, 4, 5], 3) == [2, 3, 4]


@pytest.mark.parametrize("period", [1, 5, 20, 50, 120, 121, 200])
def test_sma_and_ema_length(period):
    prices = _random_walk()
    expected = max(0, len(prices) - period + 1)
    assert len(sma(prices, period)) == expected
    assert len(ema(prices, period)) == expected


def test_insufficient_data_returns_empty():
    assert sma([1, 2], 3) == []
    assert ema([1, 2], 3) == []
    assert rsi([float(i) for i in range(14)], 14) == []
    assert rsi([], 14) == []


def test_non_positive_period_returns_empty():
    assert sma([1, 2, 3], 0) == []
    assert ema([1, 2, 3], -1) == []
    assert rsi([1, 2, 3], 0) == []


def test_ema_seeded_with_sma():
    prices = _random_walk()
    assert ema(prices, 12)[0] == pytest.approx(sum(prices[:12]) / 12)


def test_ema_recurrence():
    # multiplier is 0.5 for period 3
    assert ema([1, 2, 3, 4, 5], 3) == [2.0, 3.0, 4.0]


def test_ema_long_series():
    prices = [float(i % 50) for i in range(100_000)]
    assert len(ema(prices, 26)) == len(prices) - 25


def test_rsi_length_and_seed_value():
    assert rsi([1, 2, 1], 2) == [50.0]
    prices = _random_walk()
    assert len(rsi(prices, 14)) == len(prices) - 14


def test_rsi_bounded():
    for seed in range(20):
        values = rsi(_random_walk(seed=seed), 14)
        assert values
        assert all(0 <= v <= 100 for v in values)


def test_rsi_near_100_without_losses():
    prices = [100.0 + i for i in range(30)]
    assert rsi(prices, 14)[-1] == pytest.approx(100, abs=0.01)


def test_rsi_zero_without_gains():
    prices = [100.0 - i for i in range(30)]
    assert rsi(prices, 14)[-1] == 0


def test_rsi_below_100_when_any_loss():
    prices = [100.0 + i for i in range(30)]
    prices[-1] = prices[-2] - 5
    assert rsi(prices, 14)[-1] < 99
