from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException

from ..services.exchange import UnsupportedPairError, get_exchange_service
from ..types import (
    ActivityResponse,
    DexDataResponse,
    PortfolioResponse,
    QuoteInsightsRequest,
    QuoteInsightsResponse,
    RecordTransactionRequest,
    TrackedTransactionRecord,
    TransactionsResponse,
)


router = APIRouter(prefix="/exchange")


def _now() -> datetime:
    return datetime.now(timezone.utc)


@router.get("/dex")
async def get_dex_data(refresh: bool = False) -> DexDataResponse:
    dex, alert = await get_exchange_service().dex_data(force_refresh=refresh)
    return DexDataResponse(dex=dex, alert=alert)


@router.post("/quote-insights")
async def post_quote_insights(req: QuoteInsightsRequest) -> QuoteInsightsResponse:
    try:
        insights, quoted_output, alerts = await get_exchange_service().quote_insights(req)
    except UnsupportedPairError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to reconcile quote: {str(e)}")
    return QuoteInsightsResponse(insights=insights, quoted_output=quoted_output, alerts=alerts)


@router.get("/{wallet}/portfolio")
async def get_portfolio(wallet: str) -> PortfolioResponse:
    try:
        snapshot, alert = await get_exchange_service().portfolio(wallet, now=_now())
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to resolve portfolio: {str(e)}")
    return PortfolioResponse(snapshot=snapshot, alert=alert)


@router.get("/{wallet}/activity")
async def get_activity(wallet: str) -> ActivityResponse:
    try:
        entries, alerts = await get_exchange_service().activity(wallet)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to build activity feed: {str(e)}")
    return ActivityResponse(entries=entries, alerts=alerts)


@router.get("/{wallet}/transactions")
async def get_transactions(wallet: str) -> TransactionsResponse:
    records = await get_exchange_service().store.transactions(wallet)
    return TransactionsResponse(transactions=records)


@router.post("/{wallet}/transactions", status_code=201)
async def post_transaction(wallet: str, req: RecordTransactionRequest) -> TrackedTransactionRecord:
    return await get_exchange_service().record_transaction(wallet, req, now=_now())


@router.delete("/{wallet}/transactions", status_code=204)
async def delete_transactions(wallet: str) -> None:
    await get_exchange_service().store.clear_transactions(wallet)
