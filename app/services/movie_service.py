import logging

from app.core.errors import APIError
from app.core.settings import Settings
from app.models.movie import MovieDetail
from app.models.search import SearchResponse
from app.services.guardrails import SearchGuardrails
from app.services.omdb_client import OMDBClient

logger = logging.getLogger(__name__)


class MovieService:
    """Keyword search and detail lookups passed straight through to OMDB."""

    def __init__(self, settings: Settings, omdb_client: OMDBClient, guardrails: SearchGuardrails):
        self.settings = settings
        self.omdb_client = omdb_client
        self.guardrails = guardrails

    async def search(self, query: str | None, year: str | None = None, type_: str | None = None) -> SearchResponse:
        query = self.guardrails.validate_query(query)
        try:
            movies, total = await self.omdb_client.search_page(query, year=year, type_=type_)
        except APIError as exc:
            if exc.code == "omdb_rejected":
                return SearchResponse(search=[], total_results="0", response="False", error=exc.message)
            logger.exception("Movie search failed", extra={"query": query, "code": exc.code})
            raise APIError("search_failed", "Failed to search movies", status_code=exc.status_code) from exc

        return SearchResponse(search=movies, total_results=str(total), response="True")

    async def get_details(self, imdb_id: str) -> MovieDetail:
        imdb_id = self.guardrails.validate_imdb_id(imdb_id)
        try:
            return await self.omdb_client.fetch_details(imdb_id, full_plot=True)
        except APIError as exc:
            if exc.code == "omdb_rejected":
                raise APIError("movie_not_found", exc.message, status_code=404, details={"imdb_id": imdb_id}) from exc
            logger.exception("Movie detail lookup failed", extra={"imdb_id": imdb_id, "code": exc.code})
            raise APIError("details_failed", "Failed to fetch movie details", status_code=exc.status_code) from exc
