"""Market research: news, sector and economic data, plus diversification analysis.

The data sources are mocks behind ``ResearchProvider`` so a real feed can be
swapped in without touching the analysis or ledger code.
"""

import logging
import random
from datetime import datetime, timedelta
from typing import Protocol

from trading_mcp.models import (
    Concentration,
    DiversificationAdvice,
    DiversificationReport,
    EconomicIndicator,
    NewsArticle,
    PortfolioSnapshot,
    PositionWeight,
    SectorPerformance,
)

logger = logging.getLogger(__name__)

SECTORS = [
    "Technology",
    "Healthcare",
    "Financials",
    "Consumer Discretionary",
    "Communication Services",
    "Industrials",
    "Consumer Staples",
    "Energy",
    "Utilities",
    "Materials",
    "Real Estate",
]

SECTOR_MAP = {
    "AAPL": "Technology",
    "MSFT": "Technology",
    "GOOGL": "Communication Services",
    "AMZN": "Consumer Discretionary",
    "META": "Communication Services",
    "TSLA": "Consumer Discretionary",
    "NVDA": "Technology",
    "JPM": "Financials",
    "JNJ": "Healthcare",
    "V": "Financials",
    "PG": "Consumer Staples",
    "UNH": "Healthcare",
    "HD": "Consumer Discretionary",
    "BAC": "Financials",
    "XOM": "Energy",
    "AVGO": "Technology",
    "MA": "Financials",
    "COST": "Consumer Staples",
    "DIS": "Communication Services",
    "MRK": "Healthcare",
}
DEFAULT_SECTOR = "Other"

NEWS_CATEGORIES = [
    "Earnings Reports",
    "Market Analysis",
    "Economy",
    "Company News",
    "Industry Trends",
    "Mergers & Acquisitions",
    "IPOs",
    "Regulatory News",
    "Technology",
    "Global Markets",
]

NEWS_SOURCES = [
    "Bloomberg",
    "CNBC",
    "Reuters",
    "Yahoo Finance",
    "Wall Street Journal",
    "Financial Times",
    "MarketWatch",
    "Seeking Alpha",
    "Barron's",
    "Investopedia",
]

NEWS_TITLES = [
    "Markets Rally as Inflation Data Shows Signs of Easing",
    "Fed Signals Possible Rate Cut in Coming Months",
    "Tech Stocks Surge on Strong Earnings Reports",
    "Oil Prices Drop Amid Global Supply Concerns",
    "Retail Sales Beat Expectations, Consumer Spending Remains Strong",
    "Housing Market Cools as Mortgage Rates Rise",
    "Manufacturing Index Shows Expansion for Third Consecutive Month",
    "Cryptocurrency Market Faces Regulatory Scrutiny",
    "Global Economic Outlook Improves Despite Geopolitical Tensions",
    "Bond Yields Retreat from Recent Highs",
]

RATINGS = ["strong_sell", "sell", "neutral", "buy", "strong_buy"]

# name -> (value center, previous center, spread, trend)
ECONOMIC_BASELINES = {
    "gdp": (2.5, 2.2, 1.0, "improving"),
    "inflation": (3.2, 3.5, 1.0, "improving"),
    "unemployment": (3.6, 3.7, 0.6, "stable"),
    "interest_rate": (5.25, 5.0, 0.5, "stable"),
    "consumer_sentiment": (75.0, 73.0, 10.0, "improving"),
    "retail_sales": (0.3, 0.2, 0.6, "improving"),
    "housing_starts": (1400.0, 1350.0, 200.0, "declining"),
}

MAX_NEWS_LIMIT = 100


class ResearchProvider(Protocol):
    def get_market_news(self, symbols: list[str], limit: int = 10) -> list[NewsArticle]: ...

    def get_sector_performance(self) -> list[SectorPerformance]: ...

    def get_economic_indicators(self) -> dict[str, EconomicIndicator]: ...

    def get_tradingview_indicators(self, symbol: str) -> dict: ...


class MockResearchProvider:
    """Randomly generated research data."""

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def get_market_news(self, symbols: list[str] | None = None, limit: int = 10) -> list[NewsArticle]:
        symbols = [s.upper() for s in symbols or []]
        limit = max(0, min(limit, MAX_NEWS_LIMIT))
        logger.info(
            "Getting market news for %s", ", ".join(symbols) if symbols else "general market"
        )
        now = datetime.now()
        stamp = int(now.timestamp() * 1000)
        news = []
        for i in range(limit):
            title = NEWS_TITLES[i % len(NEWS_TITLES)]
            symbol = None
            if symbols and self.rng.random() > 0.5:
                symbol = self.rng.choice(symbols)
                title = f"{symbol}: {title}"
            news.append(
                NewsArticle(
                    id=f"news-{stamp}-{i}",
                    title=title,
                    summary=f'This is a mock summary for the news article "{title}".',
                    source=self.rng.choice(NEWS_SOURCES),
                    category=self.rng.choice(NEWS_CATEGORIES),
                    url="https://example.com/news",
                    published_at=now - timedelta(hours=self.rng.randrange(72)),
                    related_symbols=[symbol] if symbol else [],
                )
            )
        return news

    def get_sector_performance(self) -> list[SectorPerformance]:
        logger.info("Getting sector performance")
        result = []
        for sector in SECTORS:
            daily = self.rng.uniform(-2, 2)
            result.append(
                SectorPerformance(
                    sector=sector,
                    daily=daily,
                    weekly=self.rng.uniform(-3, 5),
                    monthly=self.rng.uniform(-5, 10),
                    yearly=self.rng.uniform(-10, 30),
                    momentum="positive" if daily > 0 else "negative",
                    volatility=self.rng.uniform(5, 20),
                )
            )
        return result

    def get_economic_indicators(self) -> dict[str, EconomicIndicator]:
        logger.info("Getting economic indicators")
        return {
            name: EconomicIndicator(
                value=value + self.rng.uniform(-spread / 2, spread / 2),
                previous=previous + self.rng.uniform(-spread / 2, spread / 2),
                trend=trend,
            )
            for name, (value, previous, spread, trend) in ECONOMIC_BASELINES.items()
        }

    def get_tradingview_indicators(self, symbol: str) -> dict:
        logger.info("Getting TradingView indicators for %s", symbol)
        return {
            "symbol": symbol.upper(),
            "technical_rating": self.rng.choice(RATINGS),
            "oscillator_rating": self.rng.choice(RATINGS),
            "moving_average_rating": self.rng.choice(RATINGS),
            "indicators": {
                "rsi": self.rng.randrange(100),
                "macd": {
                    "macd": self.rng.uniform(-1, 1),
                    "signal": self.rng.uniform(-1, 1),
                    "histogram": self.rng.uniform(-0.5, 0.5),
                },
                "adx": self.rng.randrange(100),
                "cci": self.rng.uniform(-150, 150),
            },
        }


def analyze_diversification(portfolio: PortfolioSnapshot) -> DiversificationReport:
    """Score how well a portfolio is spread across holdings and sectors."""
    logger.info("Analyzing portfolio diversification")
    weights = [
        PositionWeight(
            symbol=p.symbol,
            value=p.quantity * p.current_price,
            sector=SECTOR_MAP.get(p.symbol, DEFAULT_SECTOR),
        )
        for p in portfolio.positions.values()
    ]
    total = sum(w.value for w in weights)

    sector_values: dict[str, float] = {}
    for w in weights:
        sector_values[w.sector] = sector_values.get(w.sector, 0.0) + w.value
    sector_pct = {
        sector: (value / total) * 100 if total else 0.0
        for sector, value in sector_values.items()
    }

    top_holding = Concentration()
    if weights and total:
        top = max(weights, key=lambda w: w.value)
        top_holding = Concentration(name=top.symbol, percentage=(top.value / total) * 100)
    top_sector = Concentration()
    if sector_pct:
        name, pct = max(sector_pct.items(), key=lambda kv: kv[1])
        top_sector = Concentration(name=name, percentage=pct)

    score = 100.0
    if top_holding.percentage > 20:
        score -= (top_holding.percentage - 20) * 2
    if top_sector.percentage > 30:
        score -= (top_sector.percentage - 30) * 1.5
    if len(weights) < 10:
        score -= (10 - len(weights)) * 5
    if len(sector_pct) < 5:
        score -= (5 - len(sector_pct)) * 10
    score = max(0.0, min(100.0, score))

    return DiversificationReport(
        positions=weights,
        sector_allocation=sector_pct,
        top_holding=top_holding,
        top_sector=top_sector,
        diversification_score=score,
        recommendations=_diversification_advice(sector_pct, weights, total),
    )


def _diversification_advice(
    sector_pct: dict[str, float], weights: list[PositionWeight], total: float
) -> list[DiversificationAdvice]:
    advice = []

    heavy = [s for s, pct in sector_pct.items() if pct > 30]
    if heavy:
        advice.append(
            DiversificationAdvice(
                type="sector_overconcentration",
                severity="high",
                message=(
                    "Your portfolio is overconcentrated in the following sectors: "
                    f"{', '.join(heavy)}. Consider reducing exposure to these sectors."
                ),
            )
        )

    light = [s for s in SECTORS if sector_pct.get(s, 0.0) < 5]
    if light:
        advice.append(
            DiversificationAdvice(
                type="sector_underrepresentation",
                severity="medium",
                message=(
                    f"Your portfolio has low or no exposure to: {', '.join(light)}. "
                    "Consider adding positions in these sectors for better diversification."
                ),
            )
        )

    concentrated = [w.symbol for w in weights if total and (w.value / total) * 100 > 15]
    if concentrated:
        advice.append(
            DiversificationAdvice(
                type="position_concentration",
                severity="medium",
                message=(
                    "You have high concentration in the following positions: "
                    f"{', '.join(concentrated)}. Consider reducing these positions "
                    "for better risk management."
                ),
            )
        )

    if len(weights) < 10:
        advice.append(
            DiversificationAdvice(
                type="insufficient_positions",
                severity="high",
                message=(
                    f"Your portfolio has only {len(weights)} positions. Consider adding "
                    "more positions across different sectors for better diversification."
                ),
            )
        )

    return advice
