"""REST routes for analysis, trading, research, and the MCP context endpoint."""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from trading_mcp.analysis import AnalysisService
from trading_mcp.api.dependencies import (
    get_analysis_service,
    get_dispatcher,
    get_ledger,
    get_research_provider,
    get_settings,
)
from trading_mcp.config import ServerSettings
from trading_mcp.dispatch import MCP_HEADERS, Dispatcher, capabilities
from trading_mcp.ledger import Ledger
from trading_mcp.models import OrderStatus
from trading_mcp.research import ResearchProvider, analyze_diversification

logger = logging.getLogger(__name__)

analysis_router = APIRouter(prefix="/api/analysis", tags=["analysis"])
trading_router = APIRouter(prefix="/api/trading", tags=["trading"])
research_router = APIRouter(prefix="/api/research", tags=["research"])
mcp_router = APIRouter(prefix="/api/mcp", tags=["mcp"])


class BatchAnalysisRequest(BaseModel):
    symbols: list[str] = Field(min_length=1)
    timeframe: str = "1d"


def _mcp_headers(settings: ServerSettings) -> dict[str, str]:
    return {
        **MCP_HEADERS,
        "MCP-Version": settings.mcp_version,
        "MCP-Provider": settings.mcp_provider_name,
    }


# --- Analysis ---


@analysis_router.get("/stock/{symbol}")
def stock_analysis(
    symbol: str,
    timeframe: str = "1d",
    service: AnalysisService = Depends(get_analysis_service),
):
    """Indicators and recommendation for one symbol."""
    logger.info("Received request for stock analysis: %s, timeframe: %s", symbol, timeframe)
    return service.get_stock_analysis(symbol, timeframe)


@analysis_router.post("/batch")
def batch_analysis(
    request: BatchAnalysisRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    """Analyze several symbols; results are in request order."""
    logger.info("Received request for batch analysis of %d stocks", len(request.symbols))
    return service.batch_analyze(request.symbols, request.timeframe)


@analysis_router.get("/historical/{symbol}")
def historical_data(
    symbol: str,
    timeframe: str = "1d",
    limit: int = Query(100, ge=1),
    service: AnalysisService = Depends(get_analysis_service),
):
    return service.fetch_history(symbol, timeframe, limit)


@analysis_router.get("/tradingview/{symbol}")
def tradingview_indicators(
    symbol: str,
    research: ResearchProvider = Depends(get_research_provider),
):
    return research.get_tradingview_indicators(symbol)


# --- Trading ---


@trading_router.get("/portfolio")
def portfolio(ledger: Ledger = Depends(get_ledger)):
    return ledger.get_portfolio()


@trading_router.post("/order")
def place_order(
    order: dict[str, Any] = Body(...),
    ledger: Ledger = Depends(get_ledger),
):
    """Execute an order. Rejections return 400 with the ledger's message."""
    logger.info(
        "Received %s order for %s shares of %s",
        order.get("action"), order.get("quantity"), order.get("symbol"),
    )
    result = ledger.execute_order(order)
    if result.status == OrderStatus.ERROR:
        return JSONResponse(status_code=400, content=result.model_dump(mode="json"))
    return result


@trading_router.get("/performance")
def performance(period: str = "1m", ledger: Ledger = Depends(get_ledger)):
    return ledger.analyze_performance(period)


@trading_router.put("/portfolio/update")
def update_portfolio(ledger: Ledger = Depends(get_ledger)):
    return ledger.refresh_prices()


@trading_router.post("/portfolio/reset")
def reset_portfolio(ledger: Ledger = Depends(get_ledger)):
    return {
        "status": "success",
        "message": "Portfolio has been reset",
        "portfolio": ledger.reset(),
    }


# --- Research ---


@research_router.get("/news")
def market_news(
    symbols: str = "",
    limit: int = Query(10, ge=0, le=100),
    research: ResearchProvider = Depends(get_research_provider),
):
    symbol_list = [s.strip() for s in symbols.split(",") if s.strip()]
    return research.get_market_news(symbol_list, limit)


@research_router.get("/sectors")
def sector_performance(research: ResearchProvider = Depends(get_research_provider)):
    return research.get_sector_performance()


@research_router.get("/economic")
def economic_indicators(research: ResearchProvider = Depends(get_research_provider)):
    return research.get_economic_indicators()


@research_router.get("/portfolio/diversification")
def diversification(ledger: Ledger = Depends(get_ledger)):
    logger.info("Received request for portfolio diversification analysis")
    return analyze_diversification(ledger.get_portfolio())


@research_router.get("/portfolio/news")
def portfolio_news(
    limit: int = Query(10, ge=0, le=100),
    ledger: Ledger = Depends(get_ledger),
    research: ResearchProvider = Depends(get_research_provider),
):
    """News for the symbols currently held; empty when nothing is held."""
    logger.info("Received request for portfolio-related news")
    symbols = list(ledger.get_portfolio().positions)
    if not symbols:
        return []
    return research.get_market_news(symbols, limit)


# --- MCP ---


@mcp_router.post("/context")
def mcp_context(
    response: Response,
    request: dict[str, Any] = Body(...),
    dispatcher: Dispatcher = Depends(get_dispatcher),
    settings: ServerSettings = Depends(get_settings),
):
    """Dispatch a typed ``{type, parameters}`` request."""
    headers = _mcp_headers(settings)
    if not request.get("type"):
        return JSONResponse(
            status_code=400,
            headers=headers,
            content={
                "status": "error",
                "error": "Invalid MCP request format. Request must include type field.",
            },
        )
    response.headers.update(headers)
    return dispatcher.process(request)


@mcp_router.get("/capabilities")
def mcp_capabilities(
    response: Response,
    settings: ServerSettings = Depends(get_settings),
):
    headers = _mcp_headers(settings)
    response.headers.update(headers)
    return {
        **capabilities(),
        "provider": headers["MCP-Provider"],
        "version": headers["MCP-Version"],
    }
