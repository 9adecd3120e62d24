from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping

from ..types import DexData, TxHistoryEntry


class Provider(ABC):
    """Base provider interface"""
    
    name: str
    timeout_s: float = 10
    
    @abstractmethod
    async def ready(self) -> bool:
        """Check if provider is ready to serve requests"""
        pass
    
    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status"""
        pass


class ChainProvider(Provider):
    """Provider for live wallet balances and signature history"""
    
    @abstractmethod
    async def fetch_balances(self, wallet: str) -> Mapping[str, float]:
        """Get native SOL and BITTY balances in UI units, keyed ``sol`` and ``bitty``"""
        pass
    
    @abstractmethod
    async def fetch_signatures(self, wallet: str, limit: int) -> List[TxHistoryEntry]:
        """Get the most recent transaction signatures for a wallet"""
        pass


class PriceProvider(Provider):
    """Provider for DEX pair price data"""
    
    @abstractmethod
    async def fetch_pair_data(self, *, force_refresh: bool = False) -> DexData:
        """Get the latest pair observation for the tracked token"""
        pass
