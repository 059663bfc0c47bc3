import asyncio
import logging
import time
from dataclasses import dataclass, field

from app.core.errors import APIError
from app.core.settings import Settings
from app.models.movie import MovieDetail, MovieSummary
from app.models.search import PopularFilters, SearchResponse
from app.services.omdb_client import OMDBClient
from app.services.ranking import rank_by_rating
from app.services.search_terms import build_search_terms

logger = logging.getLogger(__name__)


@dataclass
class CandidatePool:
    """Search hits keyed by imdb id, in first-seen order. Later duplicates are dropped."""

    movies: dict[str, MovieSummary] = field(default_factory=dict)
    needs_genre_check: set[str] = field(default_factory=set)

    def add(self, movie: MovieSummary, check_genre: bool = False) -> bool:
        if movie.imdb_id in self.movies:
            return False
        self.movies[movie.imdb_id] = movie
        if check_genre:
            self.needs_genre_check.add(movie.imdb_id)
        return True

    def candidates(self) -> list[MovieSummary]:
        return list(self.movies.values())


class PopularMoviesService:
    def __init__(self, settings: Settings, omdb_client: OMDBClient):
        self.settings = settings
        self.omdb_client = omdb_client

    async def _search_term(self, term: str, filters: PopularFilters) -> list[MovieSummary]:
        try:
            return await self.omdb_client.search(term, year=filters.year, type_=filters.type)
        except APIError as exc:
            logger.warning(
                "Search term failed, skipping",
                extra={"term": term, "code": exc.code, "error": exc.message},
            )
            return []
        except Exception:
            logger.exception("Search term raised unexpectedly, skipping", extra={"term": term})
            return []

    async def _collect_candidates(self, terms: list[str], filters: PopularFilters) -> CandidatePool:
        pool = CandidatePool()
        # sequential on purpose: dedup winners follow term order
        for term in terms[: self.settings.max_fanout_terms]:
            for movie in await self._search_term(term, filters):
                pool.add(movie, check_genre=bool(filters.genre))
        return pool

    async def _fetch_if_genre_matches(self, imdb_id: str, genre: str) -> MovieDetail | None:
        try:
            detail = await self.omdb_client.fetch_details(imdb_id)
        except APIError as exc:
            logger.warning(
                "Detail fetch failed, dropping candidate",
                extra={"imdb_id": imdb_id, "code": exc.code, "error": exc.message},
            )
            return None
        except Exception:
            logger.exception("Detail fetch raised unexpectedly, dropping candidate", extra={"imdb_id": imdb_id})
            return None
        return detail if detail.matches_genre(genre) else None

    async def _filter_by_genre(self, pool: CandidatePool, genre: str) -> list[MovieDetail]:
        candidates = [
            movie for movie in pool.candidates()[: self.settings.max_genre_candidates]
            if movie.imdb_id in pool.needs_genre_check
        ]
        details = await asyncio.gather(*[self._fetch_if_genre_matches(movie.imdb_id, genre) for movie in candidates])
        return [detail for detail in details if detail is not None]

    async def _aggregate(self, filters: PopularFilters) -> SearchResponse:
        start = time.perf_counter()
        terms = build_search_terms(
            genre=filters.genre,
            year=filters.year,
            quality_terms=self.settings.quality_term_pool,
            base_terms=self.settings.base_term_pool,
            max_terms=self.settings.max_search_terms,
            max_quality_terms=self.settings.max_quality_terms,
            max_base_terms=self.settings.max_base_terms,
        )
        pool = await self._collect_candidates(terms, filters)

        movies: list[MovieSummary] = pool.candidates()
        enriched: int | None = None
        if filters.genre:
            movies = await self._filter_by_genre(pool, filters.genre)
            enriched = len(movies)

        top_movies = rank_by_rating(movies, limit=self.settings.popular_page_size)

        logger.info(
            "Popular movies aggregated",
            extra={
                "terms": terms[: self.settings.max_fanout_terms],
                "year": filters.year,
                "type": filters.type,
                "genre": filters.genre,
                "candidates": len(pool.movies),
                "enriched": enriched,
                "returned": len(top_movies),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return SearchResponse(search=top_movies, total_results=str(len(top_movies)), response="True")

    async def get_popular(self, filters: PopularFilters) -> SearchResponse:
        try:
            return await self._aggregate(filters)
        except Exception as exc:
            logger.exception("Popular movies aggregation failed", extra={"genre": filters.genre, "year": filters.year})
            raise APIError(
                "popular_movies_failed",
                "Failed to fetch popular movies",
                status_code=500,
                details={"type": exc.__class__.__name__},
            ) from exc
