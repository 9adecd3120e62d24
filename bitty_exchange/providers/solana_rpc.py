"""Solana JSON-RPC provider for live balances and signature history."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import ExchangeConfig
from ..services.amounts import (
    ConversionStrategy,
    TokenAmount,
    normalize_amount,
    to_raw_units,
    to_ui_amount,
)
from ..types import TxHistoryEntry
from .base import ChainProvider

logger = logging.getLogger(__name__)

LAMPORTS_DECIMALS = 9


class SolanaRpcError(RuntimeError):
    """Raised when the RPC endpoint fails or returns an unusable payload."""


def parsed_token_amount(token_amount: Dict[str, Any]) -> Optional[TokenAmount]:
    """Build a :class:`TokenAmount` from a jsonParsed ``tokenAmount``.

    The strategy is the most precise one the reported fields support: the raw
    ``amount`` string (EXACT), the ``uiAmount`` float (NUMERIC) or the
    ``uiAmountString`` decimal string (FIXED). Returns ``None`` without
    ``decimals``.
    """

    decimals = token_amount.get("decimals")
    if not isinstance(decimals, int) or isinstance(decimals, bool) or decimals < 0:
        return None

    raw: Optional[int] = None
    supported = []
    amount = token_amount.get("amount")
    if isinstance(amount, str) and amount.isdigit():
        raw = int(amount)
        supported.append(ConversionStrategy.EXACT)
    for key, strategy in (("uiAmount", ConversionStrategy.NUMERIC), ("uiAmountString", ConversionStrategy.FIXED)):
        ui_value = normalize_amount(token_amount.get(key))
        if ui_value is None or ui_value < 0:
            continue
        supported.append(strategy)
        if raw is None:
            raw = to_raw_units(ui_value, decimals)

    if raw is None:
        return None
    return TokenAmount.preferred(raw, decimals, supported)


def _token_amount_to_float(token_amount: Dict[str, Any]) -> Optional[float]:
    structured = parsed_token_amount(token_amount)
    if structured is not None:
        value = normalize_amount(structured, structured.token_decimals)
        if value is not None:
            return value
    ui_string = normalize_amount(token_amount.get("uiAmountString"))
    if ui_string is not None:
        return ui_string
    return normalize_amount(token_amount.get("uiAmount"))


def _dig(payload: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(payload, dict):
            return None
        payload = payload.get(key)
    return payload


class SolanaRpcProvider(ChainProvider):
    """Fetch SOL/BITTY balances and recent signatures over JSON-RPC."""

    name = "solana-rpc"

    def __init__(self, config: ExchangeConfig) -> None:
        self.rpc_url = config.rpc_url
        self.bitty_mint = config.bitty_mint
        self.timeout_s = config.timeout_s
        self._request_id = 0

    async def ready(self) -> bool:
        return bool(self.rpc_url)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "RPC URL not configured"}
        # configuration only, no RPC round trip
        return {"status": "configured", "url": self.rpc_url}

    async def _call(self, client: httpx.AsyncClient, method: str, params: List[Any]) -> Any:
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }
        try:
            response = await client.post(self.rpc_url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise SolanaRpcError(f"{method} failed with HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise SolanaRpcError(f"{method} request failed: {exc}") from exc
        except ValueError as exc:
            raise SolanaRpcError(f"{method} returned invalid JSON") from exc

        if not isinstance(data, dict):
            raise SolanaRpcError(f"Unexpected {method} response")
        if data.get("error"):
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise SolanaRpcError(f"{method} error: {message}")
        if "result" not in data:
            raise SolanaRpcError(f"{method} response missing result")
        return data["result"]

    async def fetch_balances(self, wallet: str) -> Dict[str, float]:
        if not await self.ready():
            raise SolanaRpcError("Solana RPC provider not configured")

        async with httpx.AsyncClient(timeout=self.timeout_s) as client:
            balance_result = await self._call(client, "getBalance", [wallet, {"commitment": "confirmed"}])
            accounts_result = await self._call(
                client,
                "getTokenAccountsByOwner",
                [wallet, {"mint": self.bitty_mint}, {"encoding": "jsonParsed", "commitment": "confirmed"}],
            )

        lamports = balance_result.get("value") if isinstance(balance_result, dict) else None
        if not isinstance(lamports, int) or isinstance(lamports, bool):
            raise SolanaRpcError("getBalance returned no lamport value")
        sol = to_ui_amount(lamports, LAMPORTS_DECIMALS)

        accounts = accounts_result.get("value") if isinstance(accounts_result, dict) else None
        if not isinstance(accounts, list):
            raise SolanaRpcError("getTokenAccountsByOwner returned no account list")

        bitty = 0.0
        if accounts:
            token_amount = _dig(accounts[0], "account", "data", "parsed", "info", "tokenAmount")
            if isinstance(token_amount, dict):
                bitty = _token_amount_to_float(token_amount) or 0.0

        return {"sol": sol if sol is not None else 0.0, "bitty": bitty}

    async def fetch_signatures(self, wallet: str, limit: int = 8) -> List[TxHistoryEntry]:
        if not await self.ready():
            raise SolanaRpcError("Solana RPC provider not configured")

        async with httpx.AsyncClient(timeout=self.timeout_s) as client:
            result = await self._call(client, "getSignaturesForAddress", [wallet, {"limit": limit}])

        if not isinstance(result, list):
            raise SolanaRpcError("getSignaturesForAddress returned no signature list")

        entries: List[TxHistoryEntry] = []
        for item in result:
            if not isinstance(item, dict) or not item.get("signature"):
                continue
            err = item.get("err")
            block_time = item.get("blockTime")
            entries.append(
                TxHistoryEntry(
                    signature=item["signature"],
                    slot=item["slot"] if isinstance(item.get("slot"), int) else 0,
                    block_time=block_time if isinstance(block_time, int) else None,
                    err=json.dumps(err) if err is not None else None,
                )
            )
        logger.debug("Fetched %d signatures for %s", len(entries), wallet)
        return entries


__all__ = ["SolanaRpcError", "SolanaRpcProvider", "parsed_token_amount"]
