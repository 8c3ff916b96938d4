# app/config/sources.py
"""Static catalog of the external sources known to the hub.

Entries are loaded once at startup. ``SOURCES_FILE`` may point at a JSON
array with the same shape to replace the built-in catalog.
"""
import json
import logging
from pathlib import Path
from typing import List, Optional

from app.config.settings import settings
from app.models.internal import ContentSource

logger = logging.getLogger(__name__)

DEFAULT_SOURCES = [
    {
        "id": "tmdb",
        "name": "The Movie Database",
        "type": "api",
        "endpoint": "https://api.themoviedb.org/3",
        "response_time": 150,
        "reliability": 98,
        "cost_per_request": 0.0,
        "daily_limit": 40000,
        "priority": 10,
        "capabilities": ["search", "details", "trending", "popular", "discover"],
        "regions": ["global"],
    },
    {
        "id": "imdb_scraper",
        "name": "IMDb Web Scraper",
        "type": "scraper",
        "endpoint": "https://www.imdb.com",
        "response_time": 800,
        "reliability": 85,
        "cost_per_request": 0.001,
        "daily_limit": 1000,
        "priority": 8,
        "capabilities": ["rare_content", "detailed_cast", "ratings"],
        "regions": ["global"],
    },
    {
        "id": "letterboxd_api",
        "name": "Letterboxd Community Data",
        "type": "api",
        "response_time": 400,
        "reliability": 90,
        "cost_per_request": 0.002,
        "daily_limit": 5000,
        "priority": 7,
        "capabilities": ["social_metrics", "cinephile_ratings", "lists"],
        "regions": ["global"],
    },
    {
        "id": "justwatch_api",
        "name": "JustWatch Streaming Data",
        "type": "api",
        "response_time": 300,
        "reliability": 92,
        "cost_per_request": 0.005,
        "daily_limit": 2000,
        "priority": 9,
        "capabilities": ["streaming_availability", "pricing", "regional_content"],
        "regions": ["us", "uk", "ca", "au", "de", "fr", "jp"],
    },
    {
        "id": "rotten_tomatoes",
        "name": "Rotten Tomatoes Scraper",
        "type": "scraper",
        "response_time": 600,
        "reliability": 80,
        "cost_per_request": 0.003,
        "daily_limit": 500,
        "priority": 6,
        "capabilities": ["critic_scores", "audience_scores", "consensus"],
        "regions": ["us", "uk", "ca"],
    },
    {
        "id": "fandango_api",
        "name": "Fandango Theater Data",
        "type": "api",
        "response_time": 250,
        "reliability": 88,
        "cost_per_request": 0.01,
        "daily_limit": 1000,
        "priority": 5,
        "capabilities": ["showtimes", "theater_locations", "ticket_pricing"],
        "regions": ["us"],
    },
]

def load_source_catalog(path: Optional[str] = None) -> List[ContentSource]:
    """Build ContentSource entries from the JSON override or the defaults"""
    path = path or settings.SOURCES_FILE
    raw_sources = DEFAULT_SOURCES

    if path:
        catalog_file = Path(path)
        with catalog_file.open("r", encoding="utf-8") as f:
            raw_sources = json.load(f)
        logger.info(f"Loaded {len(raw_sources)} sources from {catalog_file}")

    return [ContentSource.model_validate(entry) for entry in raw_sources]
