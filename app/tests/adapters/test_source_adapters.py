# tests/adapters/test_source_adapters.py
from app.services.adapters import ADAPTERS, IMDbScraperAdapter, TMDBAdapter
from app.models.requests import ContentType

IMDB_FIND_PAGE = """
<html><body>
<ul class="ipc-metadata-list">
  <li class="ipc-metadata-list-summary-item">
    <img src="https://m.media-amazon.com/images/inception.jpg"/>
    <a class="ipc-metadata-list-summary-item__t" href="/title/tt1375666/?ref_=fn_tt_tt_1">Inception</a>
    <ul><li><span class="ipc-metadata-list-summary-item__li">2010</span></li></ul>
  </li>
  <li class="ipc-metadata-list-summary-item">
    <a class="ipc-metadata-list-summary-item__t" href="/title/tt5295894/?ref_=fn_tt_tt_2">Inception: The Cobol Job</a>
    <ul>
      <li><span class="ipc-metadata-list-summary-item__li">2010</span></li>
      <li><span class="ipc-metadata-list-summary-item__li">TV Series</span></li>
    </ul>
  </li>
  <li class="ipc-metadata-list-summary-item">
    <a class="ipc-metadata-list-summary-item__t" href="/name/nm0634240/">Christopher Nolan</a>
  </li>
</ul>
</body></html>
"""

class TestIMDbScraper:
    """Test parsing of the IMDb find page"""

    def test_parse_results(self):
        results = IMDbScraperAdapter(base_url="https://imdb.test").parse_results(IMDB_FIND_PAGE)

        assert [r.id for r in results] == ["imdb:tt1375666", "imdb:tt5295894"]

        inception = results[0]
        assert inception.title == "Inception"
        assert inception.release_date == "2010-01-01"
        assert inception.release_year == 2010
        assert inception.media_type == "movie"
        assert inception.poster_url == "https://m.media-amazon.com/images/inception.jpg"
        assert inception.popularity == 50.0

        cobol_job = results[1]
        assert cobol_job.media_type == "tv"
        assert cobol_job.poster_url is None
        assert cobol_job.popularity == 47.5

    def test_parse_empty_page(self):
        assert IMDbScraperAdapter().parse_results("<html><body></body></html>") == []

class TestTMDB:
    """Test TMDB payload mapping"""

    def test_configuration_depends_on_key(self):
        assert TMDBAdapter(api_key="abc").is_configured()
        assert not TMDBAdapter(api_key="").is_configured()

    def test_search_path_follows_content_type(self):
        adapter = TMDBAdapter(api_key="abc")

        assert adapter._search_path(ContentType.MOVIE) == "/search/movie"
        assert adapter._search_path(ContentType.TV) == "/search/tv"
        assert adapter._search_path(None) == "/search/multi"

    def test_parse_movie(self):
        item = TMDBAdapter(api_key="abc")._parse_item({
            "id": 27205,
            "title": "Inception",
            "overview": "Cobb steals secrets",
            "release_date": "2010-07-15",
            "vote_average": 8.4,
            "vote_count": 35000,
            "popularity": 92.1,
            "original_language": "en",
            "poster_path": "/inception.jpg",
        }, "movie")

        assert item.id == "tmdb:movie:27205"
        assert item.rating == 8.4
        assert item.vote_count == 35000
        assert item.poster_url.endswith("/inception.jpg")
        assert item.release_year == 2010

    def test_parse_tv_show(self):
        item = TMDBAdapter(api_key="abc")._parse_item({
            "id": 1396,
            "name": "Breaking Bad",
            "first_air_date": "2008-01-20",
            "origin_country": ["US"],
            "poster_path": None,
        }, "tv")

        assert item.id == "tmdb:tv:1396"
        assert item.title == "Breaking Bad"
        assert item.release_date == "2008-01-20"
        assert item.production_regions == ["us"]
        assert item.poster_url is None

    def test_parse_skips_untitled(self):
        assert TMDBAdapter(api_key="abc")._parse_item({"id": 1}, "movie") is None

def test_registry_of_adapters():
    assert ADAPTERS == {"tmdb": TMDBAdapter, "imdb_scraper": IMDbScraperAdapter}
