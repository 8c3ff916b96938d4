# app/services/adapters/imdb.py
import logging
import re
from typing import List, Optional

from bs4 import BeautifulSoup

from app.config.settings import settings
from app.core.exceptions import SourceTransportError
from app.models.internal import ContentItem
from app.models.requests import SearchFilters, ContentType
from app.services.adapters.base import SourceAdapter

logger = logging.getLogger(__name__)

TITLE_ID_PATTERN = re.compile(r"/title/(tt\d+)")
YEAR_PATTERN = re.compile(r"(\d{4})")

class IMDbScraperAdapter(SourceAdapter):
    """Scrapes the public IMDb title search page"""

    source_id = "imdb_scraper"

    headers = {
        "User-Agent": "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
                      "(KHTML, like Gecko) Chrome/124.0 Safari/537.36",
        "Accept-Language": "en-US,en;q=0.9",
    }

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        super().__init__(timeout)
        self.base_url = (base_url or settings.IMDB_BASE_URL).rstrip("/")

    async def search(self, query: str, filters: SearchFilters) -> List[ContentItem]:
        params = {"q": query, "s": "tt"}
        if filters.content_type == ContentType.MOVIE:
            params["ttype"] = "ft"
        elif filters.content_type == ContentType.TV:
            params["ttype"] = "tv"

        html = await self._fetch(f"{self.base_url}/find/", params)
        results = self.parse_results(html)
        logger.info(f"IMDb scrape returned {len(results)} results for: {query[:30]}...")
        return results

    async def probe(self) -> bool:
        html = await self._fetch(f"{self.base_url}/find/", {"q": "test", "s": "tt"})
        return bool(html)

    async def _fetch(self, url: str, params: dict) -> str:
        session = await self._get_session()
        async with session.get(url, params=params, headers=self.headers) as response:
            if response.status != 200:
                raise SourceTransportError(self.source_id, f"HTTP {response.status}")
            return await response.text()

    def parse_results(self, html: str) -> List[ContentItem]:
        soup = BeautifulSoup(html, "html.parser")
        results = []

        for position, item in enumerate(soup.select("li.find-title-result, li.ipc-metadata-list-summary-item")):
            link = item.select_one("a.ipc-metadata-list-summary-item__t") or item.find("a", href=TITLE_ID_PATTERN)
            if not link:
                continue
            match = TITLE_ID_PATTERN.search(link.get("href", ""))
            title = link.get_text(strip=True)
            if not match or not title:
                continue

            year = None
            for meta in item.select("ul li, span.ipc-metadata-list-summary-item__li"):
                year_match = YEAR_PATTERN.search(meta.get_text(strip=True))
                if year_match:
                    year = year_match.group(1)
                    break

            meta_text = item.get_text(" ", strip=True).lower()
            media_type = "tv" if "tv series" in meta_text or "tv mini series" in meta_text else "movie"
            image = item.find("img")

            results.append(ContentItem(
                id=f"imdb:{match.group(1)}",
                title=title,
                release_date=f"{year}-01-01" if year else None,
                media_type=media_type,
                poster_url=image.get("src") if image else None,
                # Earlier positions are IMDb's own relevance order
                popularity=max(0.0, 50.0 - position * 2.5),
            ))

        return results
