"""
HTTP endpoints фильмов.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query

from . import schemas
from .service import FilmService
from filmorate.api.dependencies import get_film_service
from filmorate.config.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/films", tags=["films"])


@router.get("", response_model=List[schemas.Film])
def get_films(service: FilmService = Depends(get_film_service)):
    """Получение всех фильмов."""
    return service.find_all()


@router.post("", response_model=schemas.Film)
def create_film(film: schemas.Film, service: FilmService = Depends(get_film_service)):
    """
    Создание фильма.

    Жанры и mpa достаточно передать по id.
    """
    logger.info(f"Creating film: {film.name}")
    return service.create(film)


@router.put("", response_model=schemas.Film)
def update_film(film: schemas.Film, service: FilmService = Depends(get_film_service)):
    """Полное обновление фильма, включая жанры и лайки."""
    logger.info(f"Updating film: {film.id}")
    return service.update(film)


@router.get("/popular", response_model=List[schemas.Film])
def get_popular_films(
    count: int = Query(settings.POPULAR_FILMS_DEFAULT_COUNT),
    service: FilmService = Depends(get_film_service)
):
    """
    Самые популярные фильмы.

    Query Parameters:
        count: Сколько фильмов вернуть (0 и меньше дает пустой список)
    """
    return service.get_popular(count)


@router.get("/{film_id}", response_model=schemas.Film)
def get_film(film_id: int, service: FilmService = Depends(get_film_service)):
    return service.find_by_id(film_id)


@router.delete("/{film_id}")
def delete_film(film_id: int, service: FilmService = Depends(get_film_service)):
    logger.info(f"Deleting film: {film_id}")
    service.delete(film_id)


@router.put("/{film_id}/like/{user_id}")
def add_like(film_id: int, user_id: int, service: FilmService = Depends(get_film_service)):
    service.add_like(film_id, user_id)


@router.delete("/{film_id}/like/{user_id}")
def remove_like(film_id: int, user_id: int, service: FilmService = Depends(get_film_service)):
    service.remove_like(film_id, user_id)
