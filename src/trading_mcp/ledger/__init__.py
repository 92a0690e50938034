"""Simulated brokerage ledger: cash, positions, and an append-only transaction log."""

import logging
import math
import random
import threading
import uuid
from collections.abc import Mapping
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from pydantic import ValidationError

from trading_mcp.config import LedgerConfig
from trading_mcp.data import QuoteProvider
from trading_mcp.errors import (
    InsufficientFundsError,
    InsufficientPositionError,
    InvalidOrderError,
    InvalidRequestError,
    TradingError,
)
from trading_mcp.models import (
    HistoricalValue,
    Order,
    OrderResult,
    OrderStatus,
    OrderType,
    PerformanceReport,
    PortfolioSnapshot,
    Position,
    TradeAction,
    Transaction,
)

logger = logging.getLogger(__name__)

GENERIC_ORDER_ERROR = "Failed to execute order"

# Order fields as callers name them in requests.
_FIELD_LABELS = {"limit_price": "price"}


class PerformancePeriod(str, Enum):
    DAY = "1d"
    WEEK = "1w"
    MONTH = "1m"
    QUARTER = "3m"
    YEAR = "1y"

    @property
    def samples(self) -> int:
        return {"1d": 24, "1w": 7, "1m": 30, "3m": 90, "1y": 365}[self.value]

    @property
    def periods_per_year(self) -> int:
        return {"1d": 365, "1w": 52, "1m": 12, "3m": 4, "1y": 1}[self.value]

    @property
    def step(self) -> timedelta:
        # A one-day window is sampled hourly, everything else daily.
        return timedelta(hours=1) if self is PerformancePeriod.DAY else timedelta(days=1)


class Ledger:
    """Owns the portfolio and serialises every read and write behind one lock."""

    def __init__(
        self,
        config: LedgerConfig | None = None,
        quotes: QuoteProvider | None = None,
        rng: random.Random | None = None,
    ):
        self.config = config or LedgerConfig()
        self.rng = rng or random.Random()
        self.quotes = quotes
        self._lock = threading.RLock()
        self._init_state()

    def _init_state(self):
        self._cash = self.config.initial_cash
        self._positions: dict[str, Position] = {}
        self._transactions: list[Transaction] = []

    # --- Queries ---

    def get_portfolio(self) -> PortfolioSnapshot:
        """Current cash, positions, transactions, and total value."""
        with self._lock:
            positions_value = sum(
                p.quantity * p.current_price for p in self._positions.values()
            )
            return PortfolioSnapshot(
                cash=self._cash,
                positions={s: p.model_copy() for s, p in self._positions.items()},
                transactions=list(self._transactions),
                total_value=self._cash + positions_value,
            )

    # --- Orders ---

    @staticmethod
    def validate_order(order: Order | Mapping[str, Any]) -> Order:
        """Parse and validate an order. Raises InvalidOrderError."""
        if isinstance(order, Order):
            return order
        if not isinstance(order, Mapping):
            raise InvalidOrderError("Order must be an object")
        try:
            return Order.model_validate(dict(order))
        except ValidationError as e:
            details = "; ".join(
                f"{'.'.join(_FIELD_LABELS.get(str(p), str(p)) for p in err['loc']) or 'order'}: "
                f"{err['msg']}"
                for err in e.errors()
            )
            raise InvalidOrderError(f"Invalid order: {details}") from None

    @staticmethod
    def resolve_price(order: Order, quote: float) -> float | None:
        """Execution price for an order, or None if a limit is not reached.

        Buy limits fill at or below the limit, sell limits at or above it.
        """
        if order.type == OrderType.MARKET:
            return quote
        if order.action == TradeAction.BUY:
            return quote if quote <= order.limit_price else None
        return quote if quote >= order.limit_price else None

    def execute_order(
        self, order: Order | Mapping[str, Any], price: float | None = None
    ) -> OrderResult:
        """Validate and apply an order atomically.

        ``price`` is the current quote; when omitted it is fetched from the
        quote provider before the lock is taken. Rejections come back as
        ``status=error`` and never change the ledger.
        """
        try:
            parsed = self.validate_order(order)
            logger.info(
                "Executing %s order for %d shares of %s",
                parsed.action.value, parsed.quantity, parsed.symbol,
            )
            quote = self._current_price(parsed, price)
            with self._lock:
                fill_price = self.resolve_price(parsed, quote)
                if fill_price is None:
                    side = parsed.action.value
                    return OrderResult(
                        status=OrderStatus.PENDING,
                        message=(
                            f"Limit {side} order for {parsed.symbol} waiting for price "
                            f"{parsed.limit_price:.2f}, current price is {quote:.2f}"
                        ),
                        order=parsed,
                    )

                value = parsed.quantity * fill_price
                if parsed.action == TradeAction.BUY:
                    self._check_buy(value)
                else:
                    self._check_sell(parsed)

                transaction = self._apply(parsed, fill_price, value)
                verb = "bought" if parsed.action == TradeAction.BUY else "sold"
                return OrderResult(
                    status=OrderStatus.EXECUTED,
                    message=(
                        f"Successfully {verb} {parsed.quantity} shares of "
                        f"{parsed.symbol} at ${fill_price:.2f}"
                    ),
                    order=parsed,
                    transaction=transaction,
                    portfolio=self.get_portfolio(),
                )
        except TradingError as e:
            logger.warning("Order rejected: %s", e)
            return OrderResult(status=OrderStatus.ERROR, message=str(e))
        except Exception:
            logger.exception("Unexpected error executing order")
            return OrderResult(status=OrderStatus.ERROR, message=GENERIC_ORDER_ERROR)

    def _current_price(self, order: Order, supplied: float | None) -> float:
        # A price sent with a market order is the caller's quote, not a limit.
        if supplied is None and order.type == OrderType.MARKET:
            supplied = order.limit_price
        if supplied is None:
            if self.quotes is None:
                raise InvalidOrderError(f"No price available for {order.symbol}")
            supplied = self.quotes.get_price(order.symbol)
        if (
            isinstance(supplied, bool)
            or not isinstance(supplied, (int, float))
            or not math.isfinite(supplied)
            or supplied <= 0
        ):
            raise InvalidOrderError(f"Invalid price for {order.symbol}: {supplied!r}")
        return float(supplied)

    def _check_buy(self, value: float) -> None:
        if value > self._cash:
            raise InsufficientFundsError(required=value, available=self._cash)

    def _check_sell(self, order: Order) -> None:
        existing = self._positions.get(order.symbol)
        held = existing.quantity if existing else 0
        if held < order.quantity:
            raise InsufficientPositionError(order.symbol, order.quantity, held)

    def _apply(self, order: Order, price: float, value: float) -> Transaction:
        """Mutate state for a checked order. Must be called under the lock.

        New objects are built first so a failure leaves the ledger unchanged.
        """
        transaction = Transaction(
            id=f"t-{uuid.uuid4().hex[:12]}",
            symbol=order.symbol,
            action=order.action,
            quantity=order.quantity,
            price=price,
            value=value,
        )
        existing = self._positions.get(order.symbol)
        position: Position | None
        if order.action == TradeAction.BUY:
            cash = self._cash - value
            if existing:
                new_qty = existing.quantity + order.quantity
                position = existing.model_copy(
                    update={
                        "quantity": new_qty,
                        "cost_basis": (existing.cost_basis * existing.quantity + value) / new_qty,
                        "current_price": price,
                    }
                )
            else:
                position = Position(
                    symbol=order.symbol,
                    quantity=order.quantity,
                    cost_basis=price,
                    current_price=price,
                )
        else:
            cash = self._cash + value
            remaining = existing.quantity - order.quantity
            position = (
                existing.model_copy(update={"quantity": remaining}) if remaining else None
            )

        self._cash = cash
        if position is None:
            del self._positions[order.symbol]
        else:
            self._positions[order.symbol] = position
        self._transactions.append(transaction)
        return transaction

    # --- Maintenance ---

    def refresh_prices(self) -> PortfolioSnapshot:
        """Move each position's price by an independent random percentage."""
        logger.info("Updating portfolio with latest prices")
        drift = self.config.price_drift_pct / 100
        with self._lock:
            for symbol, position in self._positions.items():
                change = self.rng.uniform(-drift, drift)
                self._positions[symbol] = position.model_copy(
                    update={"current_price": position.current_price * (1 + change)}
                )
            return self.get_portfolio()

    def reset(self) -> PortfolioSnapshot:
        """Replace all state with a fresh portfolio."""
        logger.info("Resetting portfolio")
        with self._lock:
            self._init_state()
            return self.get_portfolio()

    # --- Performance ---

    def analyze_performance(self, period: str = "1m") -> PerformanceReport:
        """Return/volatility metrics over a synthetic value history.

        There is no stored history, so one is simulated backwards from the
        current total value with a slight upward bias.
        """
        try:
            p = PerformancePeriod(period)
        except ValueError:
            supported = ", ".join(x.value for x in PerformancePeriod)
            raise InvalidRequestError(
                f"Invalid period {period!r}, must be one of: {supported}"
            ) from None
        logger.info("Analyzing portfolio performance for period: %s", p.value)

        end_value = self.get_portfolio().total_value
        now = datetime.now()
        values = [end_value]
        for _ in range(p.samples - 1):
            change = values[0] * self.rng.uniform(-0.01, 0.015)
            values.insert(0, values[0] - change)

        def _label(i: int) -> str:
            ts = now - p.step * (p.samples - 1 - i)
            if p is PerformancePeriod.DAY:
                return ts.strftime("%Y-%m-%dT%H:00")
            return ts.strftime("%Y-%m-%d")

        history = [HistoricalValue(date=_label(i), value=v) for i, v in enumerate(values)]

        start_value = values[0]
        absolute_return = end_value - start_value
        percent_return = (absolute_return / start_value) * 100 if start_value else 0.0
        if p is PerformancePeriod.YEAR:
            annualized = percent_return
        else:
            annualized = ((1 + percent_return / 100) ** p.periods_per_year - 1) * 100

        return PerformanceReport(
            period=p.value,
            current_value=end_value,
            start_value=start_value,
            absolute_return=absolute_return,
            percent_return=percent_return,
            annualized_return=annualized,
            volatility=_volatility(values),
            historical_values=history,
        )


def _volatility(values: list[float]) -> float:
    """Population standard deviation of step returns, in percent."""
    returns = [
        values[i] / values[i - 1] - 1 for i in range(1, len(values)) if values[i - 1]
    ]
    if not returns:
        return 0.0
    mean = sum(returns) / len(returns)
    variance = sum((r - mean) ** 2 for r in returns) / len(returns)
    return variance**0.5 * 100
