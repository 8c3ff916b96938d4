# app/services/query_planner.py
import logging
from typing import List, Optional

from app.core.exceptions import PlanningError
from app.models.internal import ContentSource, ExecutionPlan, HealthStatus
from app.models.requests import SearchRequest, SearchStrategy, ContentType
from app.services.source_registry import SourceRegistry

logger = logging.getLogger(__name__)

PRIMARY_CAPABILITY = "search"
ENRICHMENT_CAPABILITIES = {"ratings", "critic_scores", "cinephile_ratings", "social_metrics", "rare_content"}
REGIONAL_CAPABILITIES = {"streaming_availability"}

COMPLEX_QUERY_LENGTH = 50

def source_score(source: ContentSource) -> float:
    return (source.priority * source.reliability) / (source.response_time + 1)

class QueryPlanner:
    def __init__(self, registry: SourceRegistry):
        self.registry = registry

    def determine_strategy(self, request: SearchRequest) -> str:
        if request.strategy:
            return request.strategy.value

        if request.user_context.location and request.filters.content_type == ContentType.MOVIE:
            return SearchStrategy.COMPREHENSIVE.value

        if len(request.query) > COMPLEX_QUERY_LENGTH or request.filters.genres:
            return SearchStrategy.PREMIUM.value

        return SearchStrategy.FAST.value

    def rank_candidates(self, region: Optional[str] = None) -> List[ContentSource]:
        candidates = self.registry.list_active(region)
        return sorted(candidates, key=lambda s: (-source_score(s), s.id))

    def plan(self, request: SearchRequest, strategy: Optional[str] = None) -> ExecutionPlan:
        strategy = strategy or self.determine_strategy(request)
        region = request.region
        candidates = self.rank_candidates(region)

        if not candidates:
            raise PlanningError(
                f"No eligible sources for region {region or 'any'}: all inactive or over daily limit"
            )

        primary = self._select_primary(candidates, strategy)
        selected = [primary]

        if strategy in (SearchStrategy.COMPREHENSIVE.value, SearchStrategy.PREMIUM.value):
            selected.extend(self._with_capabilities(candidates, ENRICHMENT_CAPABILITIES, selected))

        if request.user_context.location:
            selected.extend(self._with_capabilities(candidates, REGIONAL_CAPABILITIES, selected)[:1])

        plan = ExecutionPlan(strategy=strategy, sources=selected, region=region)
        logger.info(f"Planned '{strategy}' search across {plan.source_ids} (region: {region or 'any'})")
        return plan

    def _select_primary(self, candidates: List[ContentSource], strategy: str) -> ContentSource:
        searchable = [s for s in candidates if PRIMARY_CAPABILITY in s.capabilities] or candidates
        if strategy == SearchStrategy.COST_OPTIMIZED.value:
            # candidates are already in score order, so min() keeps the best-scored among equal costs
            return min(searchable, key=lambda s: s.cost_per_request)
        return searchable[0]

    def _with_capabilities(
        self,
        candidates: List[ContentSource],
        capabilities: set,
        already_selected: List[ContentSource]
    ) -> List[ContentSource]:
        chosen_ids = {s.id for s in already_selected}
        return [
            s for s in candidates
            if s.id not in chosen_ids
            and s.health_status == HealthStatus.ACTIVE
            and capabilities.intersection(s.capabilities)
        ]
