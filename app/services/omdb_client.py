import logging
from typing import Any

import httpx
from pydantic import ValidationError

from app.core.errors import APIError
from app.core.settings import Settings
from app.models.movie import MovieDetail, MovieSummary

logger = logging.getLogger(__name__)


class OMDBClient:
    """Thin async wrapper over the OMDB query-string API.

    One attempt per call. Transport failures and bad responses become
    `APIError`s; callers decide whether a failure is fatal.
    """

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings
        self._client = httpx.AsyncClient(
            base_url=settings.omdb_base_url,
            timeout=settings.omdb_timeout_seconds,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, params: dict[str, Any]) -> dict[str, Any]:
        merged_params = {"apikey": self.settings.omdb_api_key}
        merged_params.update({key: value for key, value in params.items() if value})

        try:
            response = await self._client.get("/", params=merged_params)
        except httpx.HTTPError as exc:
            raise APIError(
                "omdb_upstream_unavailable",
                "OMDB upstream is temporarily unavailable",
                status_code=502,
                details={"error_type": exc.__class__.__name__},
            ) from exc

        if response.status_code == 401:
            raise APIError("omdb_auth_error", "OMDB API key is invalid", status_code=502)

        if response.status_code >= 400:
            raise APIError(
                "omdb_request_failed",
                "OMDB request failed",
                status_code=502,
                details={"status_code": response.status_code, "response": response.text[:200]},
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise APIError("omdb_request_failed", "OMDB returned a malformed body", status_code=502) from exc
        if not isinstance(payload, dict):
            raise APIError("omdb_request_failed", "OMDB returned a malformed body", status_code=502)

        # OMDB answers 200 with Response="False" for misses and bad keys alike
        if payload.get("Response") == "False":
            raise APIError(
                "omdb_rejected",
                payload.get("Error") or "OMDB rejected the request",
                status_code=404,
                details={"omdb_error": payload.get("Error")},
            )
        return payload

    async def search_page(self, term: str, year: str | None = None, type_: str | None = None) -> tuple[list[MovieSummary], int]:
        """Returns the parsed hits and OMDB's total hit count across all pages."""
        payload = await self._request({"s": term, "y": year, "type": type_})
        hits = payload.get("Search") or []
        if not isinstance(hits, list):
            raise APIError(
                "omdb_request_failed",
                "OMDB returned a malformed search body",
                status_code=502,
                details={"term": term, "search_type": hits.__class__.__name__},
            )

        movies: list[MovieSummary] = []
        for hit in hits:
            try:
                movies.append(MovieSummary.model_validate(hit))
            except ValidationError:
                logger.warning("Skipping malformed OMDB search hit", extra={"term": term, "hit": hit})

        try:
            total = int(payload.get("totalResults") or len(movies))
        except (TypeError, ValueError):
            total = len(movies)
        return movies, total

    async def search(self, term: str, year: str | None = None, type_: str | None = None) -> list[MovieSummary]:
        movies, _ = await self.search_page(term, year=year, type_=type_)
        return movies

    async def fetch_details(self, imdb_id: str, full_plot: bool = False) -> MovieDetail:
        payload = await self._request({"i": imdb_id, "plot": "full" if full_plot else None})
        try:
            return MovieDetail.model_validate(payload)
        except ValidationError as exc:
            raise APIError(
                "omdb_request_failed",
                "OMDB returned an incomplete movie record",
                status_code=502,
                details={"imdb_id": imdb_id},
            ) from exc
