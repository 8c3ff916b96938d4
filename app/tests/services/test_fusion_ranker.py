# tests/services/test_fusion_ranker.py
import pytest

from app.models.requests import SearchRequest
from app.services.fusion_ranker import FusionRanker, FusionWeights
from conftest import make_item

@pytest.fixture
def ranker():
    return FusionRanker(weights=FusionWeights(), current_year=2026)

class TestDeduplication:
    """Test merging of entities reported by several sources"""

    def test_same_id_merges_with_max_confidence(self, ranker):
        results = {
            "tmdb": [make_item("movie-1", confidence=60, rating=6.0)],
            "imdb_scraper": [make_item("movie-1", confidence=80, rating=8.0)],
        }

        ranked = ranker.rank(results, SearchRequest(query="inception"))

        assert len(ranked) == 1
        assert sorted(ranked[0].sources) == ["imdb_scraper", "tmdb"]
        assert ranked[0].confidence == 80
        assert ranked[0].rating == 7.0

    def test_merge_keeps_enrichment_from_every_source(self, ranker):
        results = {
            "tmdb": [make_item("movie-1", overview="", genres=["drama"])],
            "justwatch_api": [make_item(
                "movie-1",
                overview="A thief who steals secrets",
                genres=["drama", "thriller"],
                streaming_availability={"us": {"providers": ["netflix"]}}
            )],
            "rotten_tomatoes": [make_item("movie-1", critical_consensus={"rotten_tomatoes": 87})],
        }

        result = ranker.rank(results, SearchRequest(query="inception"))[0]

        assert result.overview == "A thief who steals secrets"
        assert result.genres == ["drama", "thriller"]
        assert result.streaming_availability["us"].providers == ["netflix"]
        assert result.critical_consensus.rotten_tomatoes == 87
        assert len(result.sources) == 3

    def test_result_is_independent_of_arrival_order(self, ranker):
        first = {
            "tmdb": [make_item("a", popularity=30), make_item("b", popularity=30)],
            "imdb_scraper": [make_item("b", popularity=70), make_item("c")],
        }
        second = {
            "imdb_scraper": [make_item("c"), make_item("b", popularity=70)],
            "tmdb": [make_item("b", popularity=30), make_item("a", popularity=30)],
        }

        ranked_first = ranker.rank(first, SearchRequest(query="x"))
        ranked_second = ranker.rank(second, SearchRequest(query="x"))

        assert [r.model_dump() for r in ranked_first] == [r.model_dump() for r in ranked_second]
        assert ranked_first[0].id == "b"

class TestScoring:
    """Test the composite score and ordering"""

    def test_score_formula(self, ranker):
        # reliability 90 -> confidence 0.8 * 90 + 20
        ranked = ranker.rank({"tmdb": [make_item("a")]}, SearchRequest(query="x"), {"tmdb": 90})

        result = ranked[0]
        assert result.confidence == 92
        assert result.cultural_relevance == 70
        assert result.trending_score == 30
        assert result.score == pytest.approx(50.9)

    def test_recent_release_gets_trending_and_recency(self, ranker):
        ranked = ranker.rank(
            {"tmdb": [make_item("old"), make_item("new", release_date="2026-03-01")]},
            SearchRequest(query="x")
        )

        assert [r.id for r in ranked] == ["new", "old"]
        assert ranked[0].trending_score == 90

    def test_unreleased_title_bonus_is_capped(self, ranker):
        this_year = ranker.rank({"tmdb": [make_item("a", release_date="2026-01-01")]}, SearchRequest(query="x"))
        next_year = ranker.rank({"tmdb": [make_item("a", release_date="2027-01-01")]}, SearchRequest(query="x"))

        assert next_year[0].score == this_year[0].score

    def test_region_raises_cultural_relevance(self, ranker):
        item = make_item("a", production_regions=["gb"])

        local = ranker.rank({"tmdb": [item]}, SearchRequest(query="x", user_context={"location": "GB"}))
        remote = ranker.rank({"tmdb": [item]}, SearchRequest(query="x", user_context={"location": "us"}))

        assert local[0].cultural_relevance == remote[0].cultural_relevance + 10

    def test_ties_break_by_id(self, ranker):
        results = {"tmdb": [make_item("zeta"), make_item("alpha"), make_item("mid")]}

        ranked = ranker.rank(results, SearchRequest(query="x"))

        assert [r.id for r in ranked] == ["alpha", "mid", "zeta"]

    def test_source_bonus_is_capped(self, ranker):
        many = {f"source_{i}": [make_item("a", confidence=50)] for i in range(8)}
        few = {f"source_{i}": [make_item("a", confidence=50)] for i in range(4)}

        assert ranker.rank(many, SearchRequest(query="x"))[0].score == ranker.rank(few, SearchRequest(query="x"))[0].score

    def test_limit_is_applied(self, ranker):
        results = {"tmdb": [make_item(f"item-{i}") for i in range(30)]}

        assert len(ranker.rank(results, SearchRequest(query="x", max_results=5))) == 5
        assert len(ranker.rank(results, SearchRequest(query="x"), limit=3)) == 3

class TestValidation:
    """Test malformed payloads and post-fusion filters"""

    def test_malformed_entities_are_dropped(self, ranker):
        results = {
            "tmdb": [
                make_item("good"),
                {"title": "No id"},
                make_item("bad-rating", rating=15),
                "not even a dict",
            ]
        }

        ranked = ranker.rank(results, SearchRequest(query="x"))

        assert [r.id for r in ranked] == ["good"]

    def test_none_payload_is_empty(self, ranker):
        assert ranker.rank({"tmdb": None}, SearchRequest(query="x")) == []

    def test_year_range_filter(self, ranker):
        results = {"tmdb": [
            make_item("a", release_date="1999-03-31"),
            make_item("b", release_date="2010-07-16"),
            make_item("c", release_date=None),
        ]}

        ranked = ranker.rank(results, SearchRequest(query="x", filters={"year_range": [2000, 2020]}))

        assert sorted(r.id for r in ranked) == ["b", "c"]

    def test_fuse_keeps_everything_and_select_narrows(self, ranker):
        results = {"tmdb": [
            make_item("a", release_date="1990-01-01"),
            make_item("b", release_date="2015-01-01"),
            make_item("c", release_date="2016-01-01"),
        ]}
        request = SearchRequest(query="x", max_results=1, filters={"year_range": [2010, 2020]})

        ranked = ranker.fuse(results, request)
        selected = ranker.select(ranked, request)

        assert len(ranked) == 3
        assert len(selected) == 1
        assert selected[0].release_year >= 2010
        assert ranker.rank(results, request) == selected

    def test_rating_range_filter(self, ranker):
        results = {"tmdb": [make_item("a", rating=5.0), make_item("b", rating=8.5)]}

        ranked = ranker.rank(results, SearchRequest(query="x", filters={"rating_range": [7, 10]}))

        assert [r.id for r in ranked] == ["b"]
