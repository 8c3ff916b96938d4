# app/services/adapters/__init__.py
"""Source adapters, keyed by the catalog id they serve"""

from .base import SourceAdapter
from .tmdb import TMDBAdapter
from .imdb import IMDbScraperAdapter

ADAPTERS = {
    TMDBAdapter.source_id: TMDBAdapter,
    IMDbScraperAdapter.source_id: IMDbScraperAdapter,
}

__all__ = ["SourceAdapter", "TMDBAdapter", "IMDbScraperAdapter", "ADAPTERS"]
