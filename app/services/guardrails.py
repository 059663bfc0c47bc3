import re
from dataclasses import dataclass

from app.core.errors import APIError
from app.core.settings import Settings


@dataclass
class GuardrailResult:
    allowed: bool
    reason: str | None = None
    code: str | None = None


class SearchGuardrails:
    IMDB_ID_PATTERN = re.compile(r"^tt\d{5,10}$")
    CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")

    def __init__(self, settings: Settings):
        self.settings = settings

    def inspect_query(self, query: str | None) -> GuardrailResult:
        normalized = re.sub(r"\s+", " ", (query or "").strip())

        if not normalized:
            return GuardrailResult(False, "Query parameter is required", "query_required")

        if len(normalized) > self.settings.max_query_chars:
            return GuardrailResult(False, "Query is too long", "query_too_long")

        if self.CONTROL_CHARS.search(normalized):
            return GuardrailResult(False, "Query contains control characters", "invalid_query")

        return GuardrailResult(True)

    def validate_query(self, query: str | None) -> str:
        inspection = self.inspect_query(query)
        if not inspection.allowed:
            raise APIError(
                code=inspection.code or "invalid_query",
                message=inspection.reason or "Query rejected",
                status_code=400,
            )
        return re.sub(r"\s+", " ", (query or "").strip())

    def validate_imdb_id(self, imdb_id: str | None) -> str:
        cleaned = (imdb_id or "").strip()
        if not cleaned:
            raise APIError("movie_id_required", "Movie ID is required", status_code=400)
        if not self.IMDB_ID_PATTERN.match(cleaned):
            raise APIError(
                "invalid_movie_id",
                "Movie ID must look like an IMDb id (tt followed by digits)",
                status_code=400,
                details={"imdb_id": cleaned},
            )
        return cleaned
