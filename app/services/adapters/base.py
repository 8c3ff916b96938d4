# app/services/adapters/base.py
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import aiohttp

from app.config.settings import settings
from app.models.requests import SearchFilters

logger = logging.getLogger(__name__)

class SourceAdapter(ABC):
    """
    Uniform capability interface the hub uses to talk to one provider.

    Adapters own protocol, auth and parsing; they return canonical
    ``ContentItem`` records (or dicts with the same shape) and raise on
    transport failures so the executor can account for them.
    """

    source_id: str = ""

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout or settings.SOURCE_REQUEST_TIMEOUT
        self.session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Lazy initialization of HTTP session"""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self.session

    def is_configured(self) -> bool:
        return True

    @abstractmethod
    async def search(self, query: str, filters: SearchFilters) -> List:
        """Return raw canonical records matching the query"""

    @abstractmethod
    async def probe(self) -> bool:
        """Cheap liveness call used by the health monitor"""

    async def close(self):
        """Close HTTP session"""
        if self.session:
            await self.session.close()
            self.session = None
