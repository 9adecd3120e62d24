"""
Jupiter swap quote provider for Solana.

Only quotes are fetched here; the quoted output is handed to the quote
reconciler as a structured :class:`TokenAmount` so no precision is lost
before it is compared with the DexScreener benchmark.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

import httpx

from ..config import ExchangeConfig
from ..services.amounts import ConversionStrategy, TokenAmount
from .base import Provider


@dataclass
class SwapQuote:
    """Quote response from Jupiter."""
    input_mint: str
    output_mint: str
    out_amount: TokenAmount  # structured output amount
    slippage_bps: int


class JupiterQuoteError(Exception):
    """Failed to get a quote from Jupiter."""
    pass


class JupiterQuoteProvider(Provider):
    """
    Jupiter quote provider.

    Usage:
        provider = JupiterQuoteProvider(get_exchange_config())
        quote = await provider.get_quote(
            input_mint=NATIVE_SOL_MINT,
            output_mint=config.bitty_mint,
            amount_raw=1_000_000_000,  # 1 SOL in lamports
            output_decimals=6,
        )
    """

    name = "jupiter"

    def __init__(self, config: ExchangeConfig) -> None:
        self.quote_url = config.jupiter_quote_url.rstrip("/")
        self.timeout_s = config.timeout_s

    async def ready(self) -> bool:
        """Jupiter API requires no authentication."""
        return bool(self.quote_url)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "Jupiter quote URL not configured"}
        return {"status": "configured"}

    async def get_quote(
        self,
        input_mint: str,
        output_mint: str,
        amount_raw: int,
        output_decimals: int,
        slippage_bps: int = 50,
    ) -> SwapQuote:
        """
        Get an ExactIn swap quote.

        Args:
            input_mint: Input token mint address
            output_mint: Output token mint address
            amount_raw: Amount in smallest units of the input token
            output_decimals: Decimal places of the output token
            slippage_bps: Slippage tolerance in basis points (50 = 0.5%)

        Returns:
            SwapQuote with the output expressed as a TokenAmount
        """
        params = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(amount_raw),
            "slippageBps": slippage_bps,
            "swapMode": "ExactIn",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout_s) as client:
                response = await client.get(f"{self.quote_url}/quote", params=params)
                response.raise_for_status()
                data = response.json()

            if not isinstance(data, dict):
                raise JupiterQuoteError("Unexpected response from Jupiter quote API")
            if "error" in data:
                raise JupiterQuoteError(f"Jupiter quote error: {data['error']}")

            out_amount = int(data["outAmount"])
            return SwapQuote(
                input_mint=data.get("inputMint", input_mint),
                output_mint=data.get("outputMint", output_mint),
                out_amount=TokenAmount(
                    raw=out_amount,
                    token_decimals=output_decimals,
                    strategy=ConversionStrategy.EXACT,
                ),
                slippage_bps=slippage_bps,
            )

        except httpx.HTTPStatusError as e:
            raise JupiterQuoteError(f"HTTP error: {e.response.status_code}") from e
        except JupiterQuoteError:
            raise
        except Exception as e:
            raise JupiterQuoteError(str(e)) from e


__all__ = ["JupiterQuoteError", "JupiterQuoteProvider", "SwapQuote"]
