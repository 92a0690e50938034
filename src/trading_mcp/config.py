"""Configuration models and loader."""

from pathlib import Path

import yaml
from pydantic import BaseModel
from pydantic_settings import BaseSettings


class LedgerConfig(BaseModel):
    initial_cash: float = 100000.0
    price_drift_pct: float = 2.0  # max +/- move per refresh
    quote_min: float = 100.0  # mock quote range for symbols without a supplied price
    quote_max: float = 150.0


class AnalysisConfig(BaseModel):
    history_limit: int = 100
    default_timeframe: str = "1d"
    batch_workers: int = 8


class AppConfig(BaseModel):
    ledger: LedgerConfig = LedgerConfig()
    analysis: AnalysisConfig = AnalysisConfig()


class ServerSettings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    mcp_enabled: bool = False
    mcp_provider_name: str = "tradingview-mcp"
    mcp_version: str = "1.0"

    model_config = {"env_prefix": "", "case_sensitive": False}


def load_config(path: str | Path = "config.yaml") -> AppConfig:
    """Load application config from YAML file."""
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f)
        return AppConfig(**(data or {}))
    return AppConfig()
