from bitty_exchange.config import ExchangeConfig, Settings


def test_defaults_point_at_public_endpoints(monkeypatch):
    for name in ("SOLANA_RPC_URL", "REDIS_URL", "BITTY_DEX_PAIR", "ACTIVITY_MATCH_WINDOW_SECONDS"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.solana_rpc_url == "https://api.mainnet-beta.solana.com"
    assert settings.bitty_decimals == 6
    assert settings.activity_feed_limit == 6
    assert settings.tx_history_limit == 8
    assert settings.max_tracked_transactions == 50
    assert settings.has_redis is False
    assert settings.has_dex_pair is False


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SOLANA_RPC_URL", "https://rpc.example")
    monkeypatch.setenv("BITTY_DEX_PAIR", "PairAddr111")
    monkeypatch.setenv("ACTIVITY_MATCH_WINDOW_SECONDS", "120")
    monkeypatch.setenv("REDIS_URL", "redis://localhost:6379/0")

    settings = Settings(_env_file=None)

    assert settings.solana_rpc_url == "https://rpc.example"
    assert settings.has_dex_pair
    assert settings.has_redis
    assert settings.activity_match_window_seconds == 120


def test_exchange_config_from_settings(monkeypatch):
    monkeypatch.setenv("EXPLORER_TX_BASE_URL", "https://solscan.io/tx/")
    monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "7")
    monkeypatch.delenv("BITTY_DEX_PAIR", raising=False)
    monkeypatch.delenv("REDIS_URL", raising=False)

    config = ExchangeConfig.from_settings(Settings(_env_file=None))

    assert config.explorer_tx_base_url == "https://solscan.io/tx"
    assert config.timeout_s == 7.0
    assert config.dex_pair is None
    assert config.redis_url is None
