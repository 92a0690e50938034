"""Dependency injection for the HTTP API.

Each getter returns a cached process-wide instance; tests replace them through
``app.dependency_overrides``.
"""

import os
from functools import lru_cache

from fastapi import Depends

from trading_mcp.analysis import AnalysisService
from trading_mcp.config import AppConfig, ServerSettings, load_config
from trading_mcp.data import MockMarketData
from trading_mcp.dispatch import Dispatcher
from trading_mcp.ledger import Ledger
from trading_mcp.research import MockResearchProvider, ResearchProvider


@lru_cache()
def get_config() -> AppConfig:
    return load_config(os.environ.get("CONFIG_PATH", "config.yaml"))


@lru_cache()
def get_settings() -> ServerSettings:
    return ServerSettings()


@lru_cache()
def get_market_data() -> MockMarketData:
    config = get_config()
    return MockMarketData(
        quote_min=config.ledger.quote_min,
        quote_max=config.ledger.quote_max,
    )


@lru_cache()
def get_ledger() -> Ledger:
    return Ledger(get_config().ledger, quotes=get_market_data())


@lru_cache()
def get_analysis_service() -> AnalysisService:
    config = get_config().analysis
    return AnalysisService(
        get_market_data(),
        history_limit=config.history_limit,
        max_workers=config.batch_workers,
    )


@lru_cache()
def get_research_provider() -> ResearchProvider:
    return MockResearchProvider()


def get_dispatcher(
    analysis: AnalysisService = Depends(get_analysis_service),
    ledger: Ledger = Depends(get_ledger),
    research: ResearchProvider = Depends(get_research_provider),
) -> Dispatcher:
    return Dispatcher(analysis, ledger, research)
