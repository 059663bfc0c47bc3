import httpx
import pytest

from app.core.errors import APIError
from app.core.settings import Settings
from app.models.movie import MovieDetail, MovieSummary
from app.models.search import PopularFilters
from app.services import popular_service
from app.services.omdb_client import OMDBClient
from app.services.popular_service import CandidatePool, PopularMoviesService

DEFAULT_FANOUT = ["popular", "acclaimed", "award", "winning", "hit", "movie"]


class _OMDBClientStub:
    def __init__(
        self,
        search_results: dict[str, list[MovieSummary] | Exception] | None = None,
        details: dict[str, MovieDetail | Exception] | None = None,
    ):
        self.search_results = search_results or {}
        self.details = details or {}
        self.search_calls: list[tuple[str, str | None, str | None]] = []
        self.detail_calls: list[str] = []

    async def search(self, term: str, year: str | None = None, type_: str | None = None) -> list[MovieSummary]:
        self.search_calls.append((term, year, type_))
        result = self.search_results.get(term, [])
        if isinstance(result, Exception):
            raise result
        return result

    async def fetch_details(self, imdb_id: str, full_plot: bool = False) -> MovieDetail:
        del full_plot
        self.detail_calls.append(imdb_id)
        result = self.details.get(imdb_id)
        if result is None:
            raise APIError("omdb_rejected", "Incorrect IMDb ID.", status_code=404)
        if isinstance(result, Exception):
            raise result
        return result


def _summary(imdb_id: str, title: str | None = None) -> MovieSummary:
    return MovieSummary(imdb_id=imdb_id, title=title or f"Movie {imdb_id}", year="2020", type="movie")


def _detail(imdb_id: str, genre: str | None, rating: str = "N/A") -> MovieDetail:
    return MovieDetail(imdb_id=imdb_id, title=f"Movie {imdb_id}", genre=genre, imdb_rating=rating)


def _unavailable() -> APIError:
    return APIError("omdb_upstream_unavailable", "OMDB upstream is temporarily unavailable", status_code=502)


def _service(client: _OMDBClientStub, **overrides) -> PopularMoviesService:
    return PopularMoviesService(settings=Settings(environment="test", **overrides), omdb_client=client)


def test_candidate_pool_keeps_first_insert() -> None:
    pool = CandidatePool()

    assert pool.add(_summary("tt001", "First"), check_genre=True) is True
    assert pool.add(_summary("tt001", "Second"), check_genre=True) is False

    assert [movie.title for movie in pool.candidates()] == ["First"]
    assert pool.needs_genre_check == {"tt001"}


@pytest.mark.asyncio
async def test_duplicate_ids_keep_first_term_hit() -> None:
    client = _OMDBClientStub(
        search_results={
            "popular": [_summary("tt001", "From popular"), _summary("tt002")],
            "acclaimed": [_summary("tt001", "From acclaimed"), _summary("tt003")],
        }
    )

    response = await _service(client).get_popular(PopularFilters())

    ids = [movie.imdb_id for movie in response.search]
    assert ids == ["tt001", "tt002", "tt003"]
    assert response.search[0].title == "From popular"
    assert response.total_results == "3"
    assert response.response == "True"


@pytest.mark.asyncio
async def test_fan_out_uses_first_six_terms_in_order() -> None:
    client = _OMDBClientStub()

    await _service(client).get_popular(PopularFilters(type="series"))

    assert [call[0] for call in client.search_calls] == DEFAULT_FANOUT
    assert all(call[2] == "series" for call in client.search_calls)


@pytest.mark.asyncio
async def test_year_and_genre_terms_lead_the_fan_out() -> None:
    client = _OMDBClientStub()

    await _service(client).get_popular(PopularFilters(year="2020", genre="Comedy"))

    terms = [call[0] for call in client.search_calls]
    assert terms == ["2020", "comedy", "popular", "acclaimed", "award", "winning"]
    assert all(call[1] == "2020" for call in client.search_calls)


@pytest.mark.asyncio
async def test_result_is_capped_at_ten() -> None:
    client = _OMDBClientStub(
        search_results={
            "popular": [_summary(f"tt1{i:02d}") for i in range(10)],
            "hit": [_summary(f"tt2{i:02d}") for i in range(10)],
        }
    )

    response = await _service(client).get_popular(PopularFilters())

    assert len(response.search) == 10
    assert response.total_results == "10"
    assert [movie.imdb_id for movie in response.search] == [f"tt1{i:02d}" for i in range(10)]


@pytest.mark.asyncio
async def test_failed_terms_are_skipped() -> None:
    client = _OMDBClientStub(
        search_results={
            "popular": _unavailable(),
            "acclaimed": APIError("omdb_rejected", "Movie not found!", status_code=404),
            "award": [_summary("tt010")],
            "movie": [_summary("tt011")],
        }
    )

    response = await _service(client).get_popular(PopularFilters())

    assert response.response == "True"
    assert [movie.imdb_id for movie in response.search] == ["tt010", "tt011"]
    assert len(client.search_calls) == 6


@pytest.mark.asyncio
async def test_total_upstream_outage_returns_empty_success() -> None:
    client = _OMDBClientStub(search_results={term: _unavailable() for term in DEFAULT_FANOUT})

    response = await _service(client).get_popular(PopularFilters())

    assert response.search == []
    assert response.total_results == "0"
    assert response.response == "True"


@pytest.mark.asyncio
async def test_no_detail_fetch_without_genre() -> None:
    client = _OMDBClientStub(search_results={"popular": [_summary("tt001"), _summary("tt002")]})

    await _service(client).get_popular(PopularFilters(year="2010"))

    assert client.detail_calls == []


@pytest.mark.asyncio
async def test_genre_filter_keeps_matching_details_ranked_by_rating() -> None:
    client = _OMDBClientStub(
        search_results={
            "horror": [_summary("tt001"), _summary("tt002"), _summary("tt003")],
            "popular": [_summary("tt004"), _summary("tt005"), _summary("tt001")],
        },
        details={
            "tt001": _detail("tt001", "Comedy, Horror", rating="6.4"),
            "tt002": _unavailable(),
            "tt003": _detail("tt003", "N/A", rating="9.9"),
            "tt004": _detail("tt004", "Drama", rating="8.8"),
            "tt005": _detail("tt005", "Horror, Mystery", rating="7.7"),
        },
    )

    response = await _service(client).get_popular(PopularFilters(genre="Horror"))

    assert [movie.imdb_id for movie in response.search] == ["tt005", "tt001"]
    assert all(isinstance(movie, MovieDetail) for movie in response.search)
    assert sorted(client.detail_calls) == ["tt001", "tt002", "tt003", "tt004", "tt005"]


@pytest.mark.asyncio
async def test_genre_enrichment_is_capped_at_thirty_candidates() -> None:
    client = _OMDBClientStub(
        search_results={
            "drama": [_summary(f"tt{i:03d}") for i in range(10)],
            "popular": [_summary(f"tt{i:03d}") for i in range(10, 20)],
            "acclaimed": [_summary(f"tt{i:03d}") for i in range(20, 30)],
            "award": [_summary(f"tt{i:03d}") for i in range(30, 40)],
        },
        details={f"tt{i:03d}": _detail(f"tt{i:03d}", "Drama", rating="7.0") for i in range(40)},
    )

    response = await _service(client).get_popular(PopularFilters(genre="drama"))

    assert len(client.detail_calls) == 30
    assert set(client.detail_calls) == {f"tt{i:03d}" for i in range(30)}
    assert [movie.imdb_id for movie in response.search] == [f"tt{i:03d}" for i in range(10)]


@pytest.mark.asyncio
async def test_unexpected_error_from_one_term_is_skipped() -> None:
    client = _OMDBClientStub(
        search_results={
            "popular": RuntimeError("client bug"),
            "acclaimed": [_summary("tt020")],
        },
        details={"tt020": ValueError("bad record")},
    )

    plain = await _service(client).get_popular(PopularFilters())
    filtered = await _service(client).get_popular(PopularFilters(genre="drama"))

    assert [movie.imdb_id for movie in plain.search] == ["tt020"]
    assert filtered.search == []
    assert filtered.response == "True"


def _omdb_handler(bad_search_body: dict):
    def handler(request: httpx.Request) -> httpx.Response:
        term = request.url.params["s"]
        if term == "popular":
            return httpx.Response(200, json=bad_search_body)
        return httpx.Response(
            200,
            json={
                "Search": [{"imdbID": f"tt-{term}", "Title": term.title(), "Year": "2001", "Type": "movie"}],
                "totalResults": "1",
                "Response": "True",
            },
        )

    return handler


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "bad_search_body",
    [
        {"Response": "True", "Search": 5},
        {"Response": "True", "Search": [{"imdbID": "tt-odd", "Title": "Odd"}], "totalResults": ["x"]},
        {"Response": "True", "Search": {"imdbID": "tt-dict"}},
    ],
)
async def test_malformed_term_body_does_not_abort_aggregation(bad_search_body: dict) -> None:
    settings = Settings(environment="test", omdb_base_url="http://omdb.test")
    client = OMDBClient(settings, transport=httpx.MockTransport(_omdb_handler(bad_search_body)))

    response = await PopularMoviesService(settings=settings, omdb_client=client).get_popular(PopularFilters())
    await client.close()

    ids = [movie.imdb_id for movie in response.search]
    assert response.response == "True"
    assert ids[-5:] == ["tt-acclaimed", "tt-award", "tt-winning", "tt-hit", "tt-movie"]
    assert "tt-dict" not in ids


@pytest.mark.asyncio
async def test_defect_in_ranking_surfaces_as_fixed_error(monkeypatch) -> None:
    client = _OMDBClientStub(search_results={"popular": [_summary("tt001")]})

    def _broken_rank(movies, limit):
        raise TypeError("cannot compare ratings")

    monkeypatch.setattr(popular_service, "rank_by_rating", _broken_rank)

    with pytest.raises(APIError) as exc:
        await _service(client).get_popular(PopularFilters())

    assert exc.value.status_code == 500
    assert exc.value.code == "popular_movies_failed"
    assert exc.value.message == "Failed to fetch popular movies"
