"""Pydantic models for price series, analysis reports, orders, and portfolio state."""

from datetime import date, datetime
from enum import Enum

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)


class Timeframe(str, Enum):
    DAY = "1d"
    WEEK = "1w"
    MONTH = "1m"


class TradeAction(str, Enum):
    BUY = "buy"
    SELL = "sell"


class OrderType(str, Enum):
    MARKET = "market"
    LIMIT = "limit"


class OrderStatus(str, Enum):
    EXECUTED = "executed"
    PENDING = "pending"
    ERROR = "error"


class Action(str, Enum):
    """Recommended action from the analysis engine."""

    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"


class Trend(str, Enum):
    UPTREND = "uptrend"
    DOWNTREND = "downtrend"


class MacdSignal(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"


class RsiSignal(str, Enum):
    OVERBOUGHT = "overbought"
    OVERSOLD = "oversold"
    NEUTRAL = "neutral"


# --- Price data ---


class PricePoint(BaseModel):
    """Single observation of a price series."""

    model_config = ConfigDict(frozen=True)

    date: date
    price: float
    volume: int


class PriceSeries(BaseModel):
    """Chronologically ascending price/volume/date arrays for one symbol."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    timeframe: Timeframe = Timeframe.DAY
    prices: list[float]
    volumes: list[int]
    dates: list[date]

    @model_validator(mode="after")
    def _check_alignment(self) -> "PriceSeries":
        if not (len(self.prices) == len(self.volumes) == len(self.dates)):
            raise ValueError("prices, volumes and dates must have equal length")
        if any(b <= a for a, b in zip(self.dates, self.dates[1:])):
            raise ValueError("dates must be strictly ascending")
        return self

    @property
    def points(self) -> list[PricePoint]:
        return [
            PricePoint(date=d, price=p, volume=v)
            for d, p, v in zip(self.dates, self.prices, self.volumes)
        ]

    def __len__(self) -> int:
        return len(self.prices)


# --- Analysis ---


class IndicatorValues(BaseModel):
    """Latest value of each indicator used for the recommendation."""

    sma20: float
    sma50: float
    ema12: float
    ema26: float
    rsi: float


class Recommendation(BaseModel):
    action: Action
    confidence: float = Field(ge=0.05, le=0.95)
    reasons: list[str]


class AnalysisReport(BaseModel):
    """Trend, signals, and recommendation for a symbol."""

    symbol: str
    status: str = "success"
    current_price: float
    trend: Trend
    macd_signal: MacdSignal
    rsi_signal: RsiSignal
    indicators: IndicatorValues
    recommendation: Recommendation
    timestamp: datetime = Field(default_factory=datetime.now)


class InsufficientDataReport(BaseModel):
    """Returned instead of an AnalysisReport when the series is too short."""

    symbol: str
    status: str = "insufficient_data"
    message: str = "Not enough historical data for analysis"


# --- Ledger ---


class Order(BaseModel):
    """A buy or sell order submitted to the ledger."""

    symbol: str = Field(min_length=1)
    action: TradeAction
    type: OrderType
    quantity: int = Field(gt=0)
    limit_price: float | None = Field(
        default=None, gt=0, validation_alias=AliasChoices("limit_price", "price")
    )

    @field_validator("symbol")
    @classmethod
    def _normalize_symbol(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("symbol must not be blank")
        return v

    @model_validator(mode="after")
    def _check_limit_price(self) -> "Order":
        if self.type == OrderType.LIMIT and self.limit_price is None:
            raise ValueError("price is required for limit orders")
        return self


class Position(BaseModel):
    """Current holding in a symbol."""

    symbol: str
    quantity: int = Field(gt=0)
    cost_basis: float
    current_price: float

    @computed_field
    @property
    def market_value(self) -> float:
        return self.quantity * self.current_price

    @computed_field
    @property
    def unrealized_pl(self) -> float:
        return (self.current_price - self.cost_basis) * self.quantity


class Transaction(BaseModel):
    """An executed fill. Never modified after it is recorded."""

    model_config = ConfigDict(frozen=True)

    id: str
    symbol: str
    action: TradeAction
    quantity: int
    price: float
    value: float
    timestamp: datetime = Field(default_factory=datetime.now)


class PortfolioSnapshot(BaseModel):
    """Point-in-time copy of the ledger."""

    cash: float
    positions: dict[str, Position]
    transactions: list[Transaction]
    total_value: float
    timestamp: datetime = Field(default_factory=datetime.now)


class OrderResult(BaseModel):
    status: OrderStatus
    message: str
    order: Order | None = None
    transaction: Transaction | None = None
    portfolio: PortfolioSnapshot | None = None


class HistoricalValue(BaseModel):
    date: str
    value: float


class PerformanceReport(BaseModel):
    period: str
    current_value: float
    start_value: float
    absolute_return: float
    percent_return: float
    annualized_return: float
    volatility: float
    historical_values: list[HistoricalValue]
    timestamp: datetime = Field(default_factory=datetime.now)


# --- Research ---


class NewsArticle(BaseModel):
    """A market news item."""

    id: str
    title: str
    summary: str
    source: str
    category: str
    url: str
    published_at: datetime
    related_symbols: list[str] = []


class SectorPerformance(BaseModel):
    sector: str
    daily: float
    weekly: float
    monthly: float
    yearly: float
    momentum: str
    volatility: float
    timestamp: datetime = Field(default_factory=datetime.now)


class EconomicIndicator(BaseModel):
    value: float
    previous: float
    trend: str


class PositionWeight(BaseModel):
    symbol: str
    value: float
    sector: str


class Concentration(BaseModel):
    name: str = ""
    percentage: float = 0.0


class DiversificationAdvice(BaseModel):
    type: str
    severity: str
    message: str


class DiversificationReport(BaseModel):
    positions: list[PositionWeight]
    sector_allocation: dict[str, float]
    top_holding: Concentration
    top_sector: Concentration
    diversification_score: float = Field(ge=0, le=100)
    recommendations: list[DiversificationAdvice]
    timestamp: datetime = Field(default_factory=datetime.now)
