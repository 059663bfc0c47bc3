from fastapi import Depends, Request

from app.core.container import AppContainer
from app.services.movie_service import MovieService
from app.services.popular_service import PopularMoviesService


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def get_movie_service(container: AppContainer = Depends(get_container)) -> MovieService:
    return container.movie_service


def get_popular_service(container: AppContainer = Depends(get_container)) -> PopularMoviesService:
    return container.popular_service
