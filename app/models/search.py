from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.models.movie import MovieDetail, MovieSummary

MovieType = Literal["movie", "series", "episode"]


class PopularFilters(BaseModel):
    year: str | None = None
    type: MovieType | None = None
    genre: str | None = None


class SearchResponse(BaseModel):
    """Envelope shared by the search proxy and the popular-movies ranking."""

    model_config = ConfigDict(populate_by_name=True)

    # details first so enriched records keep their extra fields on output
    search: list[MovieDetail | MovieSummary] = Field(default_factory=list, alias="Search")
    total_results: str = Field(default="0", alias="totalResults")
    response: Literal["True", "False"] = Field(default="True", alias="Response")
    error: str | None = Field(default=None, alias="Error")
