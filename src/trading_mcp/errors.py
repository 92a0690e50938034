"""Exceptions raised by the ledger and request handling."""


class TradingError(Exception):
    """Base class for rejections reported back to the caller."""


class InvalidRequestError(TradingError):
    """A request or one of its parameters is malformed."""


class InvalidOrderError(InvalidRequestError):
    """An order failed validation before touching the ledger."""


class InsufficientFundsError(TradingError):
    def __init__(self, required: float, available: float):
        self.required = required
        self.available = available
        self.shortfall = required - available
        super().__init__(
            f"Insufficient funds for order. Order value: ${required:,.2f}, "
            f"available cash: ${available:,.2f}"
        )


class InsufficientPositionError(TradingError):
    def __init__(self, symbol: str, requested: int, held: int):
        self.symbol = symbol
        self.requested = requested
        self.held = held
        super().__init__(
            f"Cannot sell {requested} shares of {symbol}, you only own {held}"
        )
