import logging

from app.core.settings import Settings
from app.services.guardrails import SearchGuardrails
from app.services.movie_service import MovieService
from app.services.omdb_client import OMDBClient
from app.services.popular_service import PopularMoviesService

logger = logging.getLogger(__name__)


class AppContainer:
    def __init__(self, settings: Settings, omdb_client: OMDBClient | None = None):
        self.settings = settings

        self.omdb_client = omdb_client or OMDBClient(settings)
        self.guardrails = SearchGuardrails(settings)
        self.movie_service = MovieService(settings=settings, omdb_client=self.omdb_client, guardrails=self.guardrails)
        self.popular_service = PopularMoviesService(settings=settings, omdb_client=self.omdb_client)

        logger.info(
            "App container initialized",
            extra={
                "omdb_base_url": settings.omdb_base_url,
                "omdb_timeout_seconds": settings.omdb_timeout_seconds,
                "quality_search_terms": settings.quality_term_pool,
                "base_search_terms": settings.base_term_pool,
                "max_fanout_terms": settings.max_fanout_terms,
                "max_genre_candidates": settings.max_genre_candidates,
                "popular_page_size": settings.popular_page_size,
                "rate_limit_per_minute": settings.rate_limit_per_minute,
            },
        )

    async def close(self) -> None:
        await self.omdb_client.close()
