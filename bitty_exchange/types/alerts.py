from typing import Literal, Optional

from pydantic import Field

from .base import FrozenModel

RetryAction = Literal["portfolio", "activity", "dex", "quote"]


class NetworkAlert(FrozenModel):
    id: str = Field(description="Stable alert identifier")
    title: str = Field(description="Short heading")
    message: str = Field(description="User-facing explanation")
    retry_action: Optional[RetryAction] = Field(
        default=None,
        description="Refresh operation the client should call to retry",
    )
