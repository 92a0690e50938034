"""Price series and quote providers.

Nothing here talks to a real market data feed. ``MockMarketData`` produces a
random walk with a slight upward drift so the analysis pipeline has something
realistic to chew on.
"""

import logging
import random
from datetime import date, timedelta
from typing import Protocol

from trading_mcp.errors import InvalidRequestError
from trading_mcp.models import PriceSeries, Timeframe

logger = logging.getLogger(__name__)

TIMEFRAME_STEP_DAYS = {
    Timeframe.DAY: 1,
    Timeframe.WEEK: 7,
    Timeframe.MONTH: 30,
}

MAX_HISTORY_LIMIT = 1000


class PriceSeriesProvider(Protocol):
    def get_price_series(
        self, symbol: str, timeframe: str = "1d", limit: int = 100
    ) -> PriceSeries: ...


class QuoteProvider(Protocol):
    def get_price(self, symbol: str) -> float: ...


def parse_timeframe(timeframe: str | Timeframe) -> Timeframe:
    try:
        return Timeframe(timeframe)
    except ValueError:
        supported = ", ".join(t.value for t in Timeframe)
        raise InvalidRequestError(
            f"Invalid timeframe {timeframe!r}, must be one of: {supported}"
        ) from None


class MockMarketData:
    """Random-walk price history and quotes."""

    def __init__(
        self,
        rng: random.Random | None = None,
        quote_min: float = 100.0,
        quote_max: float = 150.0,
        trend: float = 0.05,
    ):
        self.rng = rng or random.Random()
        self.quote_min = quote_min
        self.quote_max = quote_max
        self.trend = trend

    def get_price_series(
        self, symbol: str, timeframe: str = "1d", limit: int = 100
    ) -> PriceSeries:
        """Generate ``limit`` points ending today, oldest first."""
        tf = parse_timeframe(timeframe)
        if limit <= 0 or limit > MAX_HISTORY_LIMIT:
            raise InvalidRequestError(f"limit must be between 1 and {MAX_HISTORY_LIMIT}")
        logger.info(
            "Generating historical data for %s, timeframe: %s, limit: %d",
            symbol, tf.value, limit,
        )

        step = timedelta(days=TIMEFRAME_STEP_DAYS[tf])
        start = date.today() - step * (limit - 1)
        price = self.quote_min + self.rng.random() * (self.quote_max - self.quote_min)

        prices: list[float] = []
        volumes: list[int] = []
        dates: list[date] = []
        for i in range(limit):
            change = (self.rng.random() - 0.5) * 3 + self.trend
            price = max(price + change, 1.0)
            prices.append(price)
            volumes.append(self.rng.randint(100_000, 999_999))
            dates.append(start + step * i)

        return PriceSeries(
            symbol=symbol.upper(),
            timeframe=tf,
            prices=prices,
            volumes=volumes,
            dates=dates,
        )

    def get_price(self, symbol: str) -> float:
        """Current quote for a symbol."""
        return self.rng.uniform(self.quote_min, self.quote_max)
