import re
from collections.abc import Sequence
from typing import TypeVar

from app.models.movie import MovieSummary

MovieT = TypeVar("MovieT", bound=MovieSummary)

# leading decimal, the same prefix a browser's parseFloat would accept
_LEADING_NUMBER = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)")


def parse_rating(value: str | None) -> float:
    if not value:
        return 0.0
    match = _LEADING_NUMBER.match(value)
    if match is None:
        return 0.0
    return float(match.group(0))


def rank_by_rating(movies: Sequence[MovieT], limit: int) -> list[MovieT]:
    # summaries carry no rating, so they rank as 0 and keep merge order
    ranked = sorted(movies, key=lambda movie: parse_rating(getattr(movie, "imdb_rating", None)), reverse=True)
    return ranked[:limit]
