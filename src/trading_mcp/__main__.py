"""CLI entrypoint for trading-mcp."""

import logging
import sys

import uvicorn
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from trading_mcp.analysis import AnalysisService
from trading_mcp.config import ServerSettings, load_config
from trading_mcp.data import MockMarketData
from trading_mcp.errors import TradingError
from trading_mcp.models import Action, AnalysisReport

console = Console()

USAGE = """usage: python -m trading_mcp [--analyze SYMBOL [SYMBOL ...]] [--timeframe 1d|1w|1m]

Without --analyze, serves the HTTP API (HOST/PORT from the environment)."""


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _print_analyses(reports: list) -> None:
    table = Table(title="Stock Analysis")
    table.add_column("Symbol", style="cyan")
    table.add_column("Price", justify="right")
    table.add_column("Trend")
    table.add_column("MACD")
    table.add_column("RSI", justify="right")
    table.add_column("Action", style="bold")
    table.add_column("Confidence", justify="right")
    table.add_column("Reasons", style="dim")

    for r in reports:
        if not isinstance(r, AnalysisReport):
            table.add_row(r.symbol, "-", "-", "-", "-", "[dim]n/a[/dim]", "-", r.message)
            continue
        action_style = {
            Action.BUY: "green",
            Action.SELL: "red",
            Action.HOLD: "yellow",
        }.get(r.recommendation.action, "white")
        table.add_row(
            r.symbol,
            f"${r.current_price:,.2f}",
            r.trend.value,
            r.macd_signal.value,
            f"{r.indicators.rsi:.1f} ({r.rsi_signal.value})",
            f"[{action_style}]{r.recommendation.action.value.upper()}[/{action_style}]",
            f"{r.recommendation.confidence:.2f}",
            "; ".join(r.recommendation.reasons),
        )

    console.print(table)


def _option(name: str, default: str) -> str:
    if name in sys.argv:
        idx = sys.argv.index(name)
        if idx + 1 < len(sys.argv):
            return sys.argv[idx + 1]
    return default


def main():
    if "-h" in sys.argv or "--help" in sys.argv:
        console.print(USAGE)
        return

    settings = ServerSettings()
    config = load_config()
    _setup_logging(settings.log_level)

    # --analyze: one-off analysis printed to the terminal
    if "--analyze" in sys.argv:
        idx = sys.argv.index("--analyze")
        symbols = []
        for arg in sys.argv[idx + 1 :]:
            if arg.startswith("--"):
                break
            symbols.append(arg.upper())
        if not symbols:
            console.print("[red]Error: --analyze needs at least one symbol[/red]")
            sys.exit(1)

        timeframe = _option("--timeframe", config.analysis.default_timeframe)
        service = AnalysisService(
            MockMarketData(
                quote_min=config.ledger.quote_min, quote_max=config.ledger.quote_max
            ),
            history_limit=config.analysis.history_limit,
            max_workers=config.analysis.batch_workers,
        )
        try:
            reports = service.batch_analyze(symbols, timeframe)
        except TradingError as e:
            console.print(f"[red]Error: {e}[/red]")
            sys.exit(1)
        _print_analyses(reports)
        return

    console.print(
        f"[bold]trading-mcp[/bold] → http://{settings.host}:{settings.port}"
    )
    if settings.mcp_enabled:
        console.print("[green]Model Context Protocol (MCP) integration is enabled[/green]")
    uvicorn.run(
        "trading_mcp.api:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
