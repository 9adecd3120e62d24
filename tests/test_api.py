from dataclasses import replace
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from bitty_exchange.config import get_exchange_config
from bitty_exchange.main import app
from bitty_exchange.middleware.logging_middleware import wallet_from_path
from bitty_exchange.providers.base import ChainProvider, PriceProvider
from bitty_exchange.services import exchange as exchange_service
from bitty_exchange.services.state_store import ExchangeStateStore
from bitty_exchange.types import DexData, TxHistoryEntry

client = TestClient(app)

WALLET = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
BLOCK_TIME = int(datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc).timestamp())


class _StubChain(ChainProvider):
    name = "stub-chain"
    fail = False

    async def ready(self):
        return True

    async def health_check(self):
        return {"status": "configured"}

    async def fetch_balances(self, wallet):
        if self.fail:
            raise ConnectionError("rpc unavailable")
        return {"sol": 1.25, "bitty": 5000}

    async def fetch_signatures(self, wallet, limit):
        if self.fail:
            raise ConnectionError("rpc unavailable")
        return [TxHistoryEntry(signature="sig1", slot=5, block_time=BLOCK_TIME)]


class _StubPrices(PriceProvider):
    name = "stub-prices"

    async def ready(self):
        return True

    async def health_check(self):
        return {"status": "configured"}

    async def fetch_pair_data(self, *, force_refresh=False):
        return DexData(price_usd=0.002, price_native=0.00001, pair_address="pair")


class _StubQuotes:
    async def health_check(self):
        return {"status": "configured"}

    async def get_quote(self, *args, **kwargs):
        raise RuntimeError("quotes disabled in tests")


@pytest.fixture
def service(monkeypatch):
    config = replace(get_exchange_config(), redis_url=None)
    stub = exchange_service.ExchangeService(
        config,
        chain=_StubChain(),
        prices=_StubPrices(),
        quotes=_StubQuotes(),
        store=ExchangeStateStore(config),
    )
    monkeypatch.setattr(exchange_service, "_exchange_service", stub)
    return stub


def test_wallet_from_path():
    assert wallet_from_path(f"/exchange/{WALLET}/portfolio") == WALLET
    assert wallet_from_path("/exchange/dex") is None
    assert wallet_from_path("/healthz") is None


def test_health_endpoint(service):
    response = client.get("/healthz")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "healthy"
    assert data["state_backend"] == "memory"
    assert set(data["providers"]) == {"solana_rpc", "dexscreener", "jupiter"}
    assert data["available_providers"] == data["total_providers"] == 3


def test_portfolio_endpoint_live(service):
    response = client.get(f"/exchange/{WALLET}/portfolio")
    assert response.status_code == 200

    data = response.json()
    assert data["snapshot"]["solBalance"] == 1.25
    assert data["snapshot"]["bittyBalance"] == 5000
    assert data["snapshot"]["source"] == "live"
    assert data["alert"] is None
    assert "x-request-id" in response.headers


def test_portfolio_endpoint_degraded(service):
    service.chain.fail = True

    data = client.get(f"/exchange/{WALLET}/portfolio").json()

    assert data["snapshot"]["source"] == "local"
    assert data["snapshot"]["lastUpdated"] is None
    assert data["alert"]["id"] == "portfolio-error"
    assert data["alert"]["retryAction"] == "portfolio"


def test_record_and_list_transactions(service):
    payload = {
        "fromToken": "SOL",
        "toToken": "BITTY",
        "fromAmount": 0.5,
        "toAmount": 50000,
        "slippageBps": 50,
        "status": "submitted",
        "signature": "sig1",
    }
    created = client.post(f"/exchange/{WALLET}/transactions", json=payload)
    assert created.status_code == 201
    record = created.json()
    assert record["wallet"] == WALLET
    assert record["status"] == "submitted"

    listed = client.get(f"/exchange/{WALLET}/transactions").json()
    assert [item["id"] for item in listed["transactions"]] == [record["id"]]

    activity = client.get(f"/exchange/{WALLET}/activity").json()
    assert [entry["id"] for entry in activity["entries"]] == ["chain-sig1"]
    assert activity["entries"][0]["link"].endswith("/sig1")
    assert activity["alerts"] == []

    cleared = client.delete(f"/exchange/{WALLET}/transactions")
    assert cleared.status_code == 204
    assert client.get(f"/exchange/{WALLET}/transactions").json()["transactions"] == []


def test_record_transaction_rejects_unknown_status(service):
    response = client.post(
        f"/exchange/{WALLET}/transactions",
        json={"fromToken": "SOL", "toToken": "BITTY", "status": "confirmed"},
    )
    assert response.status_code == 422


def test_dex_endpoint(service):
    data = client.get("/exchange/dex").json()

    assert data["dex"]["priceNative"] == 0.00001
    assert data["alert"] is None


def test_quote_insights_endpoint(service):
    response = client.post(
        "/exchange/quote-insights",
        json={"fromToken": "SOL", "toToken": "BITTY", "inputAmount": 1, "quotedOutput": 98500},
    )
    assert response.status_code == 200

    data = response.json()
    assert data["quotedOutput"] == 98500
    assert data["insights"]["benchmarkOutput"] == pytest.approx(100_000)
    assert data["insights"]["percentDiff"] == pytest.approx(-1.5)
    assert data["alerts"] == []


def test_quote_insights_reports_quote_failure(service):
    data = client.post(
        "/exchange/quote-insights",
        json={"fromToken": "SOL", "toToken": "BITTY", "inputAmount": 1},
    ).json()

    assert data["insights"] is None
    assert [alert["id"] for alert in data["alerts"]] == ["quote-error"]


def test_quote_insights_unsupported_pair(service):
    response = client.post(
        "/exchange/quote-insights",
        json={"fromToken": "SOL", "toToken": "USDC", "inputAmount": 1},
    )
    assert response.status_code == 400


def test_quote_insights_validates_amount(service):
    response = client.post(
        "/exchange/quote-insights",
        json={"fromToken": "SOL", "toToken": "BITTY", "inputAmount": 0},
    )
    assert response.status_code == 422
