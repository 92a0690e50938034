"""Technical indicators computed from a list of closing prices.

Every function returns a list aligned to the tail of the input. When there is
not enough data the result is an empty list rather than an error.
"""

import logging

logger = logging.getLogger(__name__)

# Stand-in for a zero average loss so RS stays finite.
MIN_AVG_LOSS = 1e-5


def sma(prices: list[float], period: int) -> list[float]:
    """Simple moving average over each window of ``period`` prices."""
    if period <= 0 or len(prices) < period:
        logger.debug("SMA(%d) needs %d points, got %d", period, period, len(prices))
        return []
    return [
        sum(prices[i - period + 1 : i + 1]) / period
        for i in range(period - 1, len(prices))
    ]


def ema(prices: list[float], period: int) -> list[float]:
    """Exponential moving average seeded with the SMA of the first window."""
    if period <= 0 or len(prices) < period:
        logger.debug("EMA(%d) needs %d points, got %d", period, period, len(prices))
        return []
    multiplier = 2 / (period + 1)
    values = [sum(prices[:period]) / period]
    for price in prices[period:]:
        values.append(values[-1] + multiplier * (price - values[-1]))
    return values


def rsi(prices: list[float], period: int = 14) -> list[float]:
    """Relative Strength Index using Wilder smoothing."""
    if period <= 0 or len(prices) <= period:
        logger.debug("RSI(%d) needs more than %d points, got %d", period, period, len(prices))
        return []
    deltas = [prices[i] - prices[i - 1] for i in range(1, len(prices))]
    gains = [d if d > 0 else 0.0 for d in deltas]
    losses = [-d if d < 0 else 0.0 for d in deltas]

    avg_gain = sum(gains[:period]) / period
    avg_loss = sum(losses[:period]) / period
    values = [_rsi_value(avg_gain, avg_loss)]

    for i in range(period, len(deltas)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period
        values.append(_rsi_value(avg_gain, avg_loss))
    return values


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    rs = avg_gain / (avg_loss if avg_loss != 0 else MIN_AVG_LOSS)
    return 100 - (100 / (1 + rs))
