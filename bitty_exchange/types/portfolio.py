from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from .base import FrozenModel

Provenance = Literal["live", "local"]


class PortfolioSnapshot(FrozenModel):
    sol_balance: float = Field(ge=0, description="Native SOL balance in UI units")
    bitty_balance: float = Field(ge=0, description="BITTY balance in UI units")
    last_updated: Optional[datetime] = Field(default=None, description="When the balances were observed")
    source: Provenance = Field(description="live when queried this call, local when served from cache")


class TrackedPortfolio(FrozenModel):
    sol_balance: float = Field(ge=0, description="Last known SOL balance")
    bitty_balance: float = Field(ge=0, description="Last known BITTY balance")
    last_updated: Optional[datetime] = Field(default=None, description="When the balances were last observed")
    last_source: Provenance = Field(default="local", description="Provenance of the stored balances")


class TokenOption(FrozenModel):
    symbol: str = Field(description="Token symbol (SOL, BITTY)")
    mint: str = Field(description="Mint address")
    name: str = Field(description="Display name")
    decimals: int = Field(ge=0, description="Token decimal places")
