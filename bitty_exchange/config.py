from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]

NATIVE_SOL_MINT = "So11111111111111111111111111111111111111112"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")

    # Solana RPC
    solana_rpc_url: str = Field(
        default="https://api.mainnet-beta.solana.com",
        description="JSON-RPC endpoint used for live balances and signature history",
    )
    request_timeout_seconds: int = Field(default=15, description="Request timeout")

    # Tokens
    bitty_mint: str = Field(
        default="BXuvB1AQVFbgAzYY77HWsG35PcGKZNPjhHEwZ4nAQ47D",
        description="Mint address of the BITTY token",
    )
    bitty_decimals: int = Field(default=6, ge=0, description="Decimal places of the BITTY token")
    bitty_dex_pair: str = Field(
        default="",
        description="DexScreener pair address for BITTY/SOL (tokens endpoint is used when empty)",
    )

    # Price / quote sources
    dexscreener_base_url: str = Field(
        default="https://api.dexscreener.com",
        description="Base URL for DexScreener pair data",
    )
    dex_cache_ttl_seconds: int = Field(default=45, ge=0, description="TTL for cached DexScreener pairs")
    jupiter_quote_url: str = Field(
        default="https://quote-api.jup.ag/v6",
        description="Base URL for Jupiter swap quotes",
    )
    explorer_tx_base_url: str = Field(
        default="https://solscan.io/tx",
        description="Explorer URL prefix for transaction links",
    )

    # Activity feed
    activity_match_window_seconds: int = Field(
        default=600,
        ge=0,
        description="Max distance between a pending local entry and an on-chain block time to treat them as the same swap",
    )
    activity_feed_limit: int = Field(default=6, ge=1, description="Number of entries returned in the activity feed")
    tx_history_limit: int = Field(default=8, ge=1, le=1000, description="Signatures requested per history refresh")

    # Local state
    max_tracked_transactions: int = Field(default=50, ge=1, description="Tracked swap records kept per wallet")
    state_storage_prefix: str = Field(default="bitty.exchange", description="Key prefix for persisted wallet state")
    redis_url: str = Field(
        default="",
        description="Redis connection string for persisted wallet state (in-memory when empty)",
    )

    @property
    def has_redis(self) -> bool:
        return bool(self.redis_url)

    @property
    def has_dex_pair(self) -> bool:
        return bool(self.bitty_dex_pair)


@dataclass(frozen=True)
class ExchangeConfig:
    """Explicit configuration handed to collaborators instead of reading globals."""

    rpc_url: str
    bitty_mint: str
    bitty_decimals: int
    dex_pair: Optional[str]
    dexscreener_base_url: str
    dex_cache_ttl_seconds: int
    jupiter_quote_url: str
    explorer_tx_base_url: str
    timeout_s: float
    match_window_seconds: int
    feed_limit: int
    tx_history_limit: int
    max_tracked_transactions: int
    storage_prefix: str
    redis_url: Optional[str] = None

    @classmethod
    def from_settings(cls, source: "Settings") -> "ExchangeConfig":
        return cls(
            rpc_url=source.solana_rpc_url,
            bitty_mint=source.bitty_mint,
            bitty_decimals=source.bitty_decimals,
            dex_pair=source.bitty_dex_pair or None,
            dexscreener_base_url=source.dexscreener_base_url.rstrip("/"),
            dex_cache_ttl_seconds=source.dex_cache_ttl_seconds,
            jupiter_quote_url=source.jupiter_quote_url.rstrip("/"),
            explorer_tx_base_url=source.explorer_tx_base_url.rstrip("/"),
            timeout_s=float(source.request_timeout_seconds),
            match_window_seconds=source.activity_match_window_seconds,
            feed_limit=source.activity_feed_limit,
            tx_history_limit=source.tx_history_limit,
            max_tracked_transactions=source.max_tracked_transactions,
            storage_prefix=source.state_storage_prefix,
            redis_url=source.redis_url or None,
        )


# Global settings instance
settings = Settings()


def get_exchange_config() -> ExchangeConfig:
    return ExchangeConfig.from_settings(settings)
