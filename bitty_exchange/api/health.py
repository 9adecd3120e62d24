from fastapi import APIRouter
from typing import Dict, Any
from ..services.exchange import get_exchange_service

router = APIRouter()


@router.get("/healthz")
async def health_check() -> Dict[str, Any]:
    """Health check endpoint that reports provider configuration"""
    
    service = get_exchange_service()
    providers = {
        "solana_rpc": service.chain,
        "dexscreener": service.prices,
        "jupiter": service.quotes,
    }
    
    provider_status = {}
    for name, provider in providers.items():
        provider_status[name] = await provider.health_check()
    
    # Count available providers
    available_providers = sum(
        1 for status in provider_status.values()
        if status["status"] in ["healthy", "configured"]
    )
    
    return {
        "status": "healthy" if available_providers == len(provider_status) else "degraded",
        "providers": provider_status,
        "state_backend": "redis" if service.store.redis_enabled else "memory",
        "available_providers": available_providers,
        "total_providers": len(provider_status)
    }
