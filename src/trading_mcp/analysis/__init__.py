"""Rule-based recommendation engine built on moving averages and RSI."""

import logging
from concurrent.futures import ThreadPoolExecutor

from trading_mcp.data import PriceSeriesProvider, parse_timeframe
from trading_mcp.indicators import ema, rsi, sma
from trading_mcp.models import (
    Action,
    AnalysisReport,
    IndicatorValues,
    InsufficientDataReport,
    MacdSignal,
    PriceSeries,
    Recommendation,
    RsiSignal,
    Trend,
)

logger = logging.getLogger(__name__)

MIN_HISTORY = 50
BASE_CONFIDENCE = 0.5
MIN_CONFIDENCE = 0.05
MAX_CONFIDENCE = 0.95
RSI_OVERBOUGHT = 70
RSI_OVERSOLD = 30


def analyze(series: PriceSeries) -> AnalysisReport | InsufficientDataReport:
    """Compute indicators for a price series and score a recommendation.

    Series shorter than 50 points yield an ``insufficient_data`` report
    instead of a recommendation.
    """
    prices = list(series.prices)
    if len(prices) < MIN_HISTORY:
        return InsufficientDataReport(symbol=series.symbol)

    indicators = IndicatorValues(
        sma20=sma(prices, 20)[-1],
        sma50=sma(prices, 50)[-1],
        ema12=ema(prices, 12)[-1],
        ema26=ema(prices, 26)[-1],
        rsi=rsi(prices, 14)[-1],
    )
    current_price = prices[-1]

    trend = Trend.UPTREND if indicators.sma20 > indicators.sma50 else Trend.DOWNTREND
    # EMA12 vs EMA26 stands in for the MACD line sign; no signal line is computed.
    macd_signal = (
        MacdSignal.BULLISH if indicators.ema12 > indicators.ema26 else MacdSignal.BEARISH
    )
    if indicators.rsi > RSI_OVERBOUGHT:
        rsi_signal = RsiSignal.OVERBOUGHT
    elif indicators.rsi < RSI_OVERSOLD:
        rsi_signal = RsiSignal.OVERSOLD
    else:
        rsi_signal = RsiSignal.NEUTRAL

    recommendation = score(current_price, indicators, macd_signal, rsi_signal)

    return AnalysisReport(
        symbol=series.symbol,
        current_price=current_price,
        trend=trend,
        macd_signal=macd_signal,
        rsi_signal=rsi_signal,
        indicators=indicators,
        recommendation=recommendation,
    )


def score(
    price: float,
    indicators: IndicatorValues,
    macd_signal: MacdSignal,
    rsi_signal: RsiSignal,
) -> Recommendation:
    """Walk the moving-average, MACD and RSI rules in order.

    Each rule may flip a HOLD into a direction and nudges confidence up when
    it agrees with the current action or down when it contradicts it.
    """
    action = Action.HOLD
    confidence = BASE_CONFIDENCE
    reasons: list[str] = []

    # 1. Moving average alignment
    if price > indicators.sma20 > indicators.sma50:
        action = Action.BUY
        confidence += 0.15
        reasons.append("Price above both 20-day and 50-day moving averages")
    elif price < indicators.sma20 < indicators.sma50:
        action = Action.SELL
        confidence += 0.15
        reasons.append("Price below both 20-day and 50-day moving averages")

    # 2. MACD proxy
    momentum = Action.BUY if macd_signal == MacdSignal.BULLISH else Action.SELL
    if action == momentum:
        confidence += 0.10
    elif action == Action.HOLD:
        action = momentum
        confidence += 0.05
    else:
        confidence -= 0.05
    reasons.append(f"MACD indicates {macd_signal.value} momentum")

    # 3. RSI extremes
    if rsi_signal != RsiSignal.NEUTRAL:
        favoured = Action.SELL if rsi_signal == RsiSignal.OVERBOUGHT else Action.BUY
        if action == favoured:
            confidence += 0.15
        elif action == Action.HOLD:
            action = favoured
            confidence += 0.10
        else:
            confidence -= 0.10
            reasons.append(
                f"RSI indicates {rsi_signal.value} conditions, "
                f"contradicting {action.value} signal"
            )
        reasons.append(f"RSI indicates {rsi_signal.value} conditions")

    confidence = min(max(confidence, MIN_CONFIDENCE), MAX_CONFIDENCE)
    return Recommendation(action=action, confidence=round(confidence, 2), reasons=reasons)


class AnalysisService:
    """Fetches price history from a provider and runs the analysis on it."""

    def __init__(
        self,
        provider: PriceSeriesProvider,
        history_limit: int = 100,
        max_workers: int = 8,
    ):
        self.provider = provider
        self.history_limit = history_limit
        self.max_workers = max_workers

    def fetch_history(
        self, symbol: str, timeframe: str = "1d", limit: int | None = None
    ) -> PriceSeries:
        return self.provider.get_price_series(
            symbol, parse_timeframe(timeframe).value, limit or self.history_limit
        )

    def get_stock_analysis(
        self, symbol: str, timeframe: str = "1d"
    ) -> AnalysisReport | InsufficientDataReport:
        logger.info("Analyzing stock %s on %s timeframe", symbol, timeframe)
        return analyze(self.fetch_history(symbol, timeframe))

    def batch_analyze(
        self, symbols: list[str], timeframe: str = "1d"
    ) -> list[AnalysisReport | InsufficientDataReport]:
        """Analyze several symbols concurrently; results keep the input order."""
        logger.info("Batch analyzing %d stocks on %s timeframe", len(symbols), timeframe)
        parse_timeframe(timeframe)
        if not symbols:
            return []
        workers = max(1, min(self.max_workers, len(symbols)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(lambda s: self.get_stock_analysis(s, timeframe), symbols))
