"""Typed request dispatcher for the MCP context endpoint.

A request is ``{"type": ..., "parameters": {...}}`` and the response is
``{"status": "success", "type": ..., "data": ...}`` or
``{"status": "error", "error": ...}``.
"""

import logging
from collections.abc import Mapping
from typing import Any

from trading_mcp.analysis import AnalysisService
from trading_mcp.errors import TradingError
from trading_mcp.ledger import Ledger
from trading_mcp.models import OrderStatus
from trading_mcp.research import ResearchProvider, analyze_diversification

logger = logging.getLogger(__name__)

GENERIC_REQUEST_ERROR = "Failed to process request"

REQUEST_TYPES = ["stock_analysis", "portfolio", "trade_execution", "market_research"]
PORTFOLIO_ACTIONS = ["view", "performance", "update", "reset"]
RESEARCH_TYPES = ["news", "sectors", "economic", "diversification"]

MCP_HEADERS = {
    "MCP-Version": "1.0",
    "MCP-Provider": "tradingview-mcp",
    "MCP-Content-Type": "application/json",
}


def _error(message: str, **extra) -> dict:
    return {"status": "error", "error": message, **extra}


def _success(type_: str, data: Any) -> dict:
    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json")
    elif isinstance(data, list):
        data = [d.model_dump(mode="json") if hasattr(d, "model_dump") else d for d in data]
    elif isinstance(data, dict):
        data = {
            k: v.model_dump(mode="json") if hasattr(v, "model_dump") else v
            for k, v in data.items()
        }
    return {"status": "success", "type": type_, "data": data}


class Dispatcher:
    """Routes requests to the analysis service, ledger, and research provider."""

    def __init__(
        self,
        analysis: AnalysisService,
        ledger: Ledger,
        research: ResearchProvider,
    ):
        self.analysis = analysis
        self.ledger = ledger
        self.research = research
        self._handlers = {
            "stock_analysis": self._stock_analysis,
            "portfolio": self._portfolio,
            "trade_execution": self._trade_execution,
            "market_research": self._market_research,
        }

    def process(self, request: Mapping[str, Any]) -> dict:
        """Handle one request. Never raises."""
        if not isinstance(request, Mapping) or not request.get("type"):
            return _error("Invalid MCP request format. Request must include type field.")
        try:
            request_type = request.get("type")
            logger.info("Processing MCP request of type %s", request_type)
            handler = self._handlers.get(request_type)
            if handler is None:
                return _error("Unsupported request type", supported_types=REQUEST_TYPES)
            parameters = request.get("parameters") or {}
            if not isinstance(parameters, Mapping):
                return _error("parameters must be an object")
            return handler(parameters)
        except TradingError as e:
            return _error(str(e))
        except Exception:
            logger.exception("Error processing MCP request")
            return _error(GENERIC_REQUEST_ERROR)

    def _stock_analysis(self, params: Mapping[str, Any]) -> dict:
        symbol = params.get("symbol")
        if not symbol:
            return _error("Symbol parameter is required")
        timeframe = params.get("timeframe") or "1d"
        return _success("stock_analysis", self.analysis.get_stock_analysis(symbol, timeframe))

    def _portfolio(self, params: Mapping[str, Any]) -> dict:
        action = params.get("action") or "view"
        if action == "view":
            return _success("portfolio", self.ledger.get_portfolio())
        if action == "performance":
            period = params.get("period") or "1m"
            return _success("portfolio_performance", self.ledger.analyze_performance(period))
        if action == "update":
            return _success("portfolio_update", self.ledger.refresh_prices())
        if action == "reset":
            return _success("portfolio_reset", self.ledger.reset())
        return _error(
            f"Unsupported portfolio action: {action}", supported_actions=PORTFOLIO_ACTIONS
        )

    def _trade_execution(self, params: Mapping[str, Any]) -> dict:
        if not params.get("symbol") or not params.get("action") or not params.get("quantity"):
            return _error("Missing required parameters. Need symbol, action, and quantity.")
        order = {
            "symbol": params["symbol"],
            "action": params["action"],
            "quantity": params["quantity"],
            "type": params.get("type") or "market",
        }
        if params.get("price") is not None:
            order["price"] = params["price"]
        result = self.ledger.execute_order(order)
        response = _success("trade_execution", result)
        if result.status == OrderStatus.ERROR:
            response["status"] = "error"
        return response

    def _market_research(self, params: Mapping[str, Any]) -> dict:
        research_type = params.get("type") or "news"
        if research_type == "news":
            symbols = params.get("symbols") or []
            if isinstance(symbols, str):
                symbols = [symbols]
            try:
                limit = int(params.get("limit", 10))
            except (TypeError, ValueError):
                return _error("limit must be an integer")
            return _success("market_news", self.research.get_market_news(list(symbols), limit))
        if research_type == "sectors":
            return _success("sector_performance", self.research.get_sector_performance())
        if research_type == "economic":
            return _success("economic_indicators", self.research.get_economic_indicators())
        if research_type == "diversification":
            report = analyze_diversification(self.ledger.get_portfolio())
            return _success("portfolio_diversification", report)
        return _error(
            f"Unsupported research type: {research_type}", supported_types=RESEARCH_TYPES
        )


def capabilities() -> dict:
    """Describe the supported request types and their parameters."""
    return {
        "status": "success",
        "provider": MCP_HEADERS["MCP-Provider"],
        "version": MCP_HEADERS["MCP-Version"],
        "capabilities": [
            {
                "type": "stock_analysis",
                "description": "Analyze stock performance and provide recommendations",
                "parameters": {
                    "symbol": {"type": "string", "required": True},
                    "timeframe": {"type": "string", "required": False, "default": "1d"},
                },
            },
            {
                "type": "portfolio",
                "description": "View and manage portfolio",
                "parameters": {
                    "action": {
                        "type": "string",
                        "required": False,
                        "default": "view",
                        "enum": PORTFOLIO_ACTIONS,
                    },
                    "period": {"type": "string", "required": False, "default": "1m"},
                },
            },
            {
                "type": "trade_execution",
                "description": "Execute trade orders",
                "parameters": {
                    "symbol": {"type": "string", "required": True},
                    "action": {"type": "string", "required": True, "enum": ["buy", "sell"]},
                    "quantity": {"type": "number", "required": True},
                    "type": {
                        "type": "string",
                        "required": False,
                        "default": "market",
                        "enum": ["market", "limit"],
                    },
                    "price": {"type": "number", "required": False},
                },
            },
            {
                "type": "market_research",
                "description": "Perform market research",
                "parameters": {
                    "type": {
                        "type": "string",
                        "required": False,
                        "default": "news",
                        "enum": RESEARCH_TYPES,
                    },
                    "symbols": {"type": "array", "required": False},
                    "limit": {"type": "number", "required": False, "default": 10},
                },
            },
        ],
    }
