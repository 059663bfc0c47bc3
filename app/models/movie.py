from pydantic import BaseModel, ConfigDict, Field

NOT_AVAILABLE = "N/A"


class MovieSummary(BaseModel):
    """A single hit from an OMDB keyword search. Field aliases are the OMDB wire names."""

    model_config = ConfigDict(populate_by_name=True)

    imdb_id: str = Field(alias="imdbID", min_length=1)
    title: str = Field(alias="Title")
    year: str = Field(default="", alias="Year")
    type: str = Field(default="", alias="Type")
    poster: str = Field(default=NOT_AVAILABLE, alias="Poster")


class MovieDetail(MovieSummary):
    genre: str | None = Field(default=None, alias="Genre")
    plot: str | None = Field(default=None, alias="Plot")
    director: str | None = Field(default=None, alias="Director")
    writer: str | None = Field(default=None, alias="Writer")
    actors: str | None = Field(default=None, alias="Actors")
    runtime: str | None = Field(default=None, alias="Runtime")
    rated: str | None = Field(default=None, alias="Rated")
    released: str | None = Field(default=None, alias="Released")
    language: str | None = Field(default=None, alias="Language")
    country: str | None = Field(default=None, alias="Country")
    awards: str | None = Field(default=None, alias="Awards")
    metascore: str | None = Field(default=None, alias="Metascore")
    imdb_rating: str | None = Field(default=None, alias="imdbRating")
    imdb_votes: str | None = Field(default=None, alias="imdbVotes")

    def matches_genre(self, genre: str) -> bool:
        if not self.genre or self.genre == NOT_AVAILABLE:
            return False
        return genre.strip().lower() in self.genre.lower()
