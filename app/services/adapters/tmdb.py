# app/services/adapters/tmdb.py
import logging
from typing import List, Dict, Optional

from app.config.settings import settings
from app.core.exceptions import SourceTransportError
from app.models.internal import ContentItem
from app.models.requests import SearchFilters, ContentType
from app.services.adapters.base import SourceAdapter

logger = logging.getLogger(__name__)

class TMDBAdapter(SourceAdapter):
    source_id = "tmdb"

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None,
                 timeout: Optional[float] = None):
        super().__init__(timeout)
        self.api_key = api_key if api_key is not None else settings.TMDB_API_KEY
        self.base_url = (base_url or settings.TMDB_BASE_URL).rstrip("/")

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def search(self, query: str, filters: SearchFilters) -> List[ContentItem]:
        """Search movies and/or TV shows through the TMDB REST API"""
        path = self._search_path(filters.content_type)
        params = {
            "api_key": self.api_key,
            "query": query,
            "include_adult": "false",
            "page": 1,
        }
        if filters.language:
            params["language"] = filters.language
        if filters.region:
            params["region"] = filters.region.upper()

        data = await self._get_json(path, params)
        results = []
        for item in data.get("results", []):
            media_type = item.get("media_type") or ("tv" if path.endswith("/tv") else "movie")
            if media_type not in ("movie", "tv"):
                continue
            parsed = self._parse_item(item, media_type)
            if parsed:
                results.append(parsed)

        logger.info(f"TMDB search returned {len(results)} results for: {query[:30]}...")
        return results

    async def probe(self) -> bool:
        data = await self._get_json("/configuration", {"api_key": self.api_key})
        return "images" in data

    def _search_path(self, content_type: Optional[ContentType]) -> str:
        if content_type == ContentType.MOVIE:
            return "/search/movie"
        if content_type == ContentType.TV:
            return "/search/tv"
        return "/search/multi"

    async def _get_json(self, path: str, params: Dict) -> Dict:
        session = await self._get_session()
        async with session.get(f"{self.base_url}{path}", params=params) as response:
            if response.status != 200:
                error_text = await response.text()
                raise SourceTransportError(
                    self.source_id, f"HTTP {response.status}: {error_text[:200]}"
                )
            return await response.json()

    def _parse_item(self, item: Dict, media_type: str) -> Optional[ContentItem]:
        title = item.get("title") or item.get("name")
        if not item.get("id") or not title:
            return None

        poster = item.get("poster_path")
        return ContentItem(
            id=f"tmdb:{media_type}:{item['id']}",
            title=title,
            overview=item.get("overview") or "",
            release_date=item.get("release_date") or item.get("first_air_date") or None,
            rating=item.get("vote_average"),
            vote_count=item.get("vote_count") or 0,
            popularity=item.get("popularity") or 0.0,
            original_language=item.get("original_language"),
            media_type=media_type,
            poster_url=f"{settings.TMDB_IMAGE_BASE_URL}{poster}" if poster else None,
            production_regions=[c.lower() for c in item.get("origin_country", [])],
        )
