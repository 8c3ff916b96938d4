# app/services/fusion_ranker.py
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import ValidationError

from app.config.settings import settings
from app.core.exceptions import FusionError
from app.models.internal import ContentItem, CriticalConsensus, SocialMetrics
from app.models.requests import SearchRequest
from app.models.responses import EnhancedResult

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_RELIABILITY = 50

@dataclass
class FusionWeights:
    """
    Tunable weights of the composite fusion score.

    popularity and rating carry what the audience thinks, confidence and
    cultural relevance what the sources and the user's region say, trending
    favours what people are watching now. The source bonus rewards
    corroboration and is capped so that many weak sources cannot outrank one
    strong match; the recency bonus fades out over ten years by default.
    """
    popularity: float = 0.30
    rating: float = 0.25
    confidence: float = 0.20
    cultural_relevance: float = 0.15
    trending: float = 0.10
    source_bonus_per_source: float = 5.0
    source_bonus_cap: float = 20.0
    recency_bonus_max: float = 5.0
    recency_decay_per_year: float = 0.5

    @classmethod
    def from_settings(cls) -> "FusionWeights":
        return cls(
            popularity=settings.FUSION_WEIGHT_POPULARITY,
            rating=settings.FUSION_WEIGHT_RATING,
            confidence=settings.FUSION_WEIGHT_CONFIDENCE,
            cultural_relevance=settings.FUSION_WEIGHT_CULTURAL,
            trending=settings.FUSION_WEIGHT_TRENDING,
            source_bonus_per_source=settings.SOURCE_BONUS_PER_SOURCE,
            source_bonus_cap=settings.SOURCE_BONUS_CAP,
            recency_bonus_max=settings.RECENCY_BONUS_MAX,
            recency_decay_per_year=settings.RECENCY_DECAY_PER_YEAR,
        )

@dataclass
class _FusedEntity:
    item: ContentItem
    sources: List[str]
    confidence: float
    cultural_relevance: float
    trending_score: float
    ratings: List[float] = field(default_factory=list)

    @property
    def rating_avg(self) -> float:
        return sum(self.ratings) / len(self.ratings) if self.ratings else 0.0

class FusionRanker:
    def __init__(self, weights: Optional[FusionWeights] = None, current_year: Optional[int] = None):
        self.weights = weights or FusionWeights.from_settings()
        self._current_year = current_year

    @property
    def current_year(self) -> int:
        return self._current_year or datetime.now(timezone.utc).year

    def rank(
        self,
        results: Dict[str, list],
        request: SearchRequest,
        reliability: Optional[Dict[str, int]] = None,
        limit: Optional[int] = None
    ) -> List[EnhancedResult]:
        """Deduplicate, merge, order, then apply the request's filters and limit"""
        return self.select(self.fuse(results, request, reliability), request, limit)

    def fuse(
        self,
        results: Dict[str, list],
        request: SearchRequest,
        reliability: Optional[Dict[str, int]] = None
    ) -> List[EnhancedResult]:
        """
        Full ordered ranking of every valid entity, before filters and limit.

        Only the query, the sources' answers and the user's region shape this
        list, so it can be cached and re-selected for requests that differ in
        year or rating range or in ``max_results``.
        """
        reliability = reliability or {}
        fused: Dict[str, _FusedEntity] = {}
        dropped = 0

        # Sorted source order keeps merges independent of task completion order
        for source_id in sorted(results):
            for raw in results[source_id] or []:
                try:
                    item = self._to_item(raw)
                except FusionError as e:
                    dropped += 1
                    logger.debug(f"Dropping malformed entity from {source_id}: {e}")
                    continue

                entity = self._enhance(item, source_id, reliability.get(source_id, DEFAULT_SOURCE_RELIABILITY), request)
                if item.id in fused:
                    self._merge(fused[item.id], entity)
                else:
                    fused[item.id] = entity

        if dropped:
            logger.warning(f"Dropped {dropped} malformed entities during fusion")

        scored = [(self.score(e), e) for e in fused.values()]
        scored.sort(key=lambda pair: (-pair[0], -len(pair[1].sources), pair[1].item.id))

        return [self._to_result(entity, score) for score, entity in scored]

    def select(
        self,
        ranked: List[EnhancedResult],
        request: SearchRequest,
        limit: Optional[int] = None
    ) -> List[EnhancedResult]:
        """Filter an ordered ranking by year and rating range, then truncate"""
        limit = limit or request.max_results or settings.MAX_RESULTS
        return [r for r in ranked if self._passes_filters(r, request)][:limit]

    def score(self, entity: _FusedEntity) -> float:
        w = self.weights
        source_bonus = min(w.source_bonus_per_source * len(entity.sources), w.source_bonus_cap)
        # Unreleased titles get the full bonus, not more
        age = max(0, self.current_year - entity.item.release_year)
        recency_bonus = max(0.0, w.recency_bonus_max - w.recency_decay_per_year * age)

        return (
            w.popularity * entity.item.popularity
            + w.rating * entity.rating_avg
            + w.confidence * entity.confidence
            + w.cultural_relevance * entity.cultural_relevance
            + w.trending * entity.trending_score
            + source_bonus
            + recency_bonus
        )

    def _to_item(self, raw) -> ContentItem:
        if isinstance(raw, ContentItem):
            return raw
        try:
            return ContentItem.model_validate(raw)
        except ValidationError as e:
            raise FusionError(f"{e.error_count()} validation errors") from e

    def _enhance(self, item: ContentItem, source_id: str, reliability: int, request: SearchRequest) -> _FusedEntity:
        if item.confidence is not None:
            confidence = item.confidence
        else:
            confidence = min(100.0, reliability * 0.8 + (20 if item.vote_count > 100 else 10))

        return _FusedEntity(
            item=item.model_copy(deep=True),
            sources=[source_id],
            confidence=confidence,
            cultural_relevance=self._cultural_relevance(item, request.region),
            trending_score=self._trending_score(item),
            ratings=[item.rating] if item.rating is not None else [],
        )

    def _cultural_relevance(self, item: ContentItem, region: Optional[str]) -> float:
        relevance = 50.0
        if item.original_language == "en":
            relevance += 20
        if item.vote_count > 1000:
            relevance += 15
        if item.popularity > 50:
            relevance += 15
        if region and region in item.production_regions:
            relevance += 10
        return min(100.0, relevance)

    def _trending_score(self, item: ContentItem) -> float:
        age = self.current_year - item.release_year
        if item.release_year and age <= 1:
            return 90.0
        if item.release_year and age <= 3:
            return 70.0
        if item.popularity > 80:
            return 60.0
        return 30.0

    def _merge(self, existing: _FusedEntity, incoming: _FusedEntity):
        """Corroboration only ever raises the merged signals"""
        for source_id in incoming.sources:
            if source_id not in existing.sources:
                existing.sources.append(source_id)
        existing.confidence = max(existing.confidence, incoming.confidence)
        existing.cultural_relevance = max(existing.cultural_relevance, incoming.cultural_relevance)
        existing.trending_score = max(existing.trending_score, incoming.trending_score)
        existing.ratings.extend(incoming.ratings)

        item, other = existing.item, incoming.item
        item.popularity = max(item.popularity, other.popularity)
        item.vote_count = max(item.vote_count, other.vote_count)
        item.overview = item.overview or other.overview
        item.release_date = item.release_date or other.release_date
        item.original_language = item.original_language or other.original_language
        item.poster_url = item.poster_url or other.poster_url
        item.genres = item.genres + [g for g in other.genres if g not in item.genres]
        item.production_regions = item.production_regions + [
            r for r in other.production_regions if r not in item.production_regions
        ]

        if other.critical_consensus:
            merged = item.critical_consensus.model_dump() if item.critical_consensus else {}
            for key, value in other.critical_consensus.model_dump().items():
                if merged.get(key) is None:
                    merged[key] = value
            item.critical_consensus = CriticalConsensus(**merged)
        if other.streaming_availability:
            item.streaming_availability = {**other.streaming_availability, **(item.streaming_availability or {})}
        if other.theater_showtimes:
            item.theater_showtimes = {**other.theater_showtimes, **(item.theater_showtimes or {})}
        if other.social_metrics:
            if item.social_metrics is None:
                item.social_metrics = other.social_metrics
            else:
                mine, theirs = item.social_metrics, other.social_metrics
                item.social_metrics = SocialMetrics(
                    letterboxd_watched=max(mine.letterboxd_watched, theirs.letterboxd_watched),
                    letterboxd_liked=max(mine.letterboxd_liked, theirs.letterboxd_liked),
                    twitter_mentions=max(mine.twitter_mentions, theirs.twitter_mentions),
                    trending_rank=mine.trending_rank if mine.trending_rank is not None else theirs.trending_rank,
                )

    def _passes_filters(self, result: EnhancedResult, request: SearchRequest) -> bool:
        filters = request.filters
        if filters.year_range and result.release_year:
            low, high = filters.year_range
            if not low <= result.release_year <= high:
                return False
        if filters.rating_range and result.rating is not None:
            low, high = filters.rating_range
            if not low <= result.rating <= high:
                return False
        return True

    def _to_result(self, entity: _FusedEntity, score: float) -> EnhancedResult:
        item = entity.item
        return EnhancedResult(
            id=item.id,
            title=item.title,
            overview=item.overview,
            release_date=item.release_date,
            rating=round(entity.rating_avg, 2) if entity.ratings else None,
            vote_count=item.vote_count,
            popularity=item.popularity,
            original_language=item.original_language,
            media_type=item.media_type,
            genres=item.genres,
            poster_url=item.poster_url,
            sources=list(entity.sources),
            confidence=round(entity.confidence, 2),
            cultural_relevance=round(entity.cultural_relevance, 2),
            trending_score=entity.trending_score,
            score=round(score, 4),
            critical_consensus=item.critical_consensus,
            streaming_availability=item.streaming_availability,
            theater_showtimes=item.theater_showtimes,
            social_metrics=item.social_metrics,
        )
