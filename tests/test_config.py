"""Tests for config loading and environment settings."""

from trading_mcp.config import AppConfig, ServerSettings, load_config


def test_missing_file_uses_defaults(tmp_path):
    config = load_config(tmp_path / "nope.yaml")
    assert config == AppConfig()
    assert config.ledger.initial_cash == 100000
    assert config.analysis.history_limit == 100


def test_empty_file_uses_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert load_config(path) == AppConfig()


def test_yaml_overrides(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "ledger:\n"
        "  initial_cash: 5000\n"
        "  quote_min: 10\n"
        "analysis:\n"
        "  batch_workers: 2\n"
    )
    config = load_config(path)
    assert config.ledger.initial_cash == 5000
    assert config.ledger.quote_min == 10
    assert config.ledger.quote_max == 150
    assert config.analysis.batch_workers == 2


def test_server_settings_from_env(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("MCP_ENABLED", "true")
    settings = ServerSettings()
    assert settings.port == 8080
    assert settings.mcp_enabled is True
    assert settings.mcp_provider_name == "tradingview-mcp"
