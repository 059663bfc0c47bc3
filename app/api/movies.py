from fastapi import APIRouter, Depends, Query

from app.api.deps import get_movie_service, get_popular_service
from app.models.movie import MovieDetail
from app.models.search import MovieType, PopularFilters, SearchResponse
from app.services.movie_service import MovieService
from app.services.popular_service import PopularMoviesService

router = APIRouter(prefix="/api/movies", tags=["movies"])

YEAR_PATTERN = r"^\d{4}$"


@router.get("/search", response_model=SearchResponse, response_model_exclude_none=True)
async def search_movies(
    q: str | None = Query(default=None, description="free text title search"),
    y: str | None = Query(default=None, pattern=YEAR_PATTERN),
    type_: MovieType | None = Query(default=None, alias="type"),
    service: MovieService = Depends(get_movie_service),
) -> SearchResponse:
    """Keyword search proxy. A `y` that is not four digits or an unknown `type` gets a 422."""
    return await service.search(q, year=y, type_=type_)


# registered before /{imdb_id} so "popular" is never read as an id
@router.get("/popular", response_model=SearchResponse, response_model_exclude_none=True)
async def popular_movies(
    y: str | None = Query(default=None, pattern=YEAR_PATTERN),
    type_: MovieType | None = Query(default=None, alias="type"),
    genre: str | None = Query(default=None, max_length=50),
    service: PopularMoviesService = Depends(get_popular_service),
) -> SearchResponse:
    """Ranked popular movies. Malformed `y`, `type` or `genre` get a 422 here instead of being forwarded to OMDB."""
    filters = PopularFilters(year=y or None, type=type_, genre=(genre or "").strip() or None)
    return await service.get_popular(filters)


@router.get("/{imdb_id}", response_model=MovieDetail, response_model_exclude_none=True)
async def movie_details(imdb_id: str, service: MovieService = Depends(get_movie_service)) -> MovieDetail:
    return await service.get_details(imdb_id)
