from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from .base import FrozenModel

ActivityStatus = Literal["success", "error", "pending"]
ActivitySource = Literal["onchain", "local"]
TrackedTransactionStatus = Literal["simulated", "submitted", "failed"]


class TxHistoryEntry(FrozenModel):
    signature: str = Field(description="Transaction signature")
    slot: int = Field(description="Slot the transaction landed in")
    block_time: Optional[int] = Field(default=None, description="Unix seconds, None while still finalizing")
    err: Optional[str] = Field(default=None, description="JSON-encoded chain error, None on success")


class ActivityEntry(FrozenModel):
    id: str = Field(description="Unique entry identifier")
    timestamp: Optional[int] = Field(default=None, description="Unix milliseconds")
    label: str = Field(description="Short event label")
    detail: str = Field(description="Event detail line")
    status: ActivityStatus = Field(description="Lifecycle status")
    source: ActivitySource = Field(description="onchain for confirmed events, local for optimistic ones")
    link: Optional[str] = Field(default=None, description="Explorer link")
    signature: Optional[str] = Field(default=None, description="Transaction signature when known")


class TrackedTransactionRecord(FrozenModel):
    id: str
    created_at: datetime
    wallet: Optional[str] = None
    from_token: str = "SOL"
    to_token: str = "BITTY"
    from_amount: float = 0.0
    to_amount: float = 0.0
    slippage_bps: float = 0.0
    status: TrackedTransactionStatus = "simulated"
    signature: Optional[str] = None
    note: Optional[str] = None
