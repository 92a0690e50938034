"""Tests for market research generators and diversification analysis."""

import random

import pytest

from trading_mcp.models import PortfolioSnapshot, Position
from trading_mcp.research import (
    ECONOMIC_BASELINES,
    SECTORS,
    MockResearchProvider,
    analyze_diversification,
)


def _make_portfolio(holdings=None, cash=10000.0):
    positions = {
        symbol: Position(symbol=symbol, quantity=qty, cost_basis=price, current_price=price)
        for symbol, (qty, price) in (holdings or {}).items()
    }
    total = cash + sum(p.market_value for p in positions.values())
    return PortfolioSnapshot(cash=cash, positions=positions, transactions=[], total_value=total)


def _advice_types(report):
    return [r.type for r in report.recommendations]


def test_empty_portfolio():
    report = analyze_diversification(_make_portfolio())
    assert report.positions == []
    assert report.sector_allocation == {}
    assert report.top_holding.percentage == 0
    assert report.diversification_score == 0
    assert "insufficient_positions" in _advice_types(report)
    assert "sector_underrepresentation" in _advice_types(report)


def test_single_position_is_concentrated():
    report = analyze_diversification(_make_portfolio({"AAPL": (10, 150.0)}))
    assert report.top_holding.name == "AAPL"
    assert report.top_holding.percentage == pytest.approx(100)
    assert report.top_sector.name == "Technology"
    assert report.sector_allocation == {"Technology": pytest.approx(100)}
    assert report.diversification_score == 0
    assert _advice_types(report) == [
        "sector_overconcentration",
        "sector_underrepresentation",
        "position_concentration",
        "insufficient_positions",
    ]


def test_unknown_symbol_maps_to_other():
    report = analyze_diversification(_make_portfolio({"ZZZZ": (1, 10.0)}))
    assert report.positions[0].sector == "Other"


def test_well_diversified_portfolio():
    symbols = ["AAPL", "MSFT", "JPM", "V", "JNJ", "UNH", "XOM", "PG", "COST", "ZZZZ"]
    report = analyze_diversification(_make_portfolio({s: (10, 100.0) for s in symbols}))
    assert report.top_holding.percentage == pytest.approx(10)
    assert report.top_sector.percentage == pytest.approx(20)
    assert sum(report.sector_allocation.values()) == pytest.approx(100)
    assert report.diversification_score == 100
    assert _advice_types(report) == ["sector_underrepresentation"]


def test_score_penalties():
    # 10 positions over 5 sectors; AAPL is 25%, Technology 35%
    holdings = {
        "AAPL": 5, "MSFT": 2,
        "JPM": 2, "V": 1,
        "JNJ": 2, "UNH": 1, "MRK": 1,
        "XOM": 3,
        "PG": 2, "COST": 1,
    }
    report = analyze_diversification(
        _make_portfolio({s: (qty, 100.0) for s, qty in holdings.items()})
    )
    assert report.top_holding.percentage == pytest.approx(25)
    assert report.top_sector.name == "Technology"
    assert report.top_sector.percentage == pytest.approx(35)
    assert report.diversification_score == pytest.approx(100 - 5 * 2 - 5 * 1.5)
    assert "position_concentration" in _advice_types(report)
    assert "sector_overconcentration" in _advice_types(report)


def test_score_is_clamped():
    report = analyze_diversification(
        _make_portfolio({"AAPL": (4, 100.0), "MSFT": (1, 100.0), "XOM": (1, 100.0)})
    )
    assert report.diversification_score == 0


def test_mock_news():
    provider = MockResearchProvider(rng=random.Random(2))
    news = provider.get_market_news(["aapl", "msft"], limit=15)
    assert len(news) == 15
    for item in news:
        assert set(item.related_symbols) <= {"AAPL", "MSFT"}
        if item.related_symbols:
            assert item.title.startswith(f"{item.related_symbols[0]}: ")


def test_mock_news_without_symbols():
    news = MockResearchProvider(rng=random.Random(2)).get_market_news([], limit=3)
    assert len(news) == 3
    assert all(item.related_symbols == [] for item in news)


def test_mock_sectors_and_economics():
    provider = MockResearchProvider(rng=random.Random(2))
    sectors = provider.get_sector_performance()
    assert [s.sector for s in sectors] == SECTORS
    for s in sectors:
        assert -2 <= s.daily <= 2
        assert s.momentum == ("positive" if s.daily > 0 else "negative")
    indicators = provider.get_economic_indicators()
    assert set(indicators) == set(ECONOMIC_BASELINES)


def test_mock_tradingview_ratings():
    ratings = MockResearchProvider(rng=random.Random(2)).get_tradingview_indicators("aapl")
    assert ratings["symbol"] == "AAPL"
    assert 0 <= ratings["indicators"]["rsi"] < 100
