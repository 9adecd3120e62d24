from typing import Optional, Union

from pydantic import Field

from .activity import TrackedTransactionStatus
from .base import FrozenModel


class RecordTransactionInput(FrozenModel):
    from_token: str = Field(description="Symbol of the token sold")
    to_token: str = Field(description="Symbol of the token bought")
    from_amount: float = Field(default=0.0, description="Amount sold in UI units")
    to_amount: float = Field(default=0.0, description="Amount bought in UI units")
    slippage_bps: float = Field(default=0.0, description="Slippage tolerance used for the swap")
    status: TrackedTransactionStatus = Field(default="simulated", description="Local lifecycle status")
    signature: Optional[str] = Field(default=None, description="Transaction signature once submitted")
    note: Optional[str] = Field(default=None, description="Free-form note")


class ApplySwapInput(FrozenModel):
    from_token: str
    to_token: str
    from_amount: float = 0.0
    to_amount: float = 0.0


class RecordTransactionRequest(RecordTransactionInput):
    apply_to_portfolio: bool = Field(
        default=False,
        description="Also apply the swap to the tracked portfolio balances",
    )


class QuoteInsightsRequest(FrozenModel):
    from_token: str = Field(description="SOL or BITTY")
    to_token: str = Field(description="SOL or BITTY")
    input_amount: float = Field(gt=0, description="Amount of the input token in UI units")
    quoted_output: Optional[Union[float, str]] = Field(
        default=None,
        description="Quoted output in UI units; fetched from Jupiter when omitted",
    )
    slippage_bps: int = Field(default=50, ge=0, le=5000, description="Allowed slippage in basis points")
