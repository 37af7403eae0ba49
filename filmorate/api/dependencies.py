"""
Сборка сервисов для обработчиков FastAPI.

Реализация хранилищ выбирается по settings.STORAGE_BACKEND:
"db" создает хранилища на сессии запроса, "memory" отдает
общие для процесса хранилища в памяти.
"""

from functools import lru_cache
from typing import NamedTuple

from fastapi import Depends
from sqlalchemy.orm import Session

from filmorate.config.database import get_db
from filmorate.config.settings import settings
from filmorate.services.catalog_service.service import CatalogService
from filmorate.services.catalog_service.storage import (
    CatalogStorage, genre_db_storage, mpa_db_storage,
    genre_memory_storage, mpa_memory_storage
)
from filmorate.services.film_service.service import FilmService
from filmorate.services.film_service.storage import FilmStorage, FilmDbStorage, InMemoryFilmStorage
from filmorate.services.user_service.service import UserService
from filmorate.services.user_service.storage import UserStorage, UserDbStorage, InMemoryUserStorage


class Storages(NamedTuple):
    films: FilmStorage
    users: UserStorage
    genres: CatalogStorage
    mpa: CatalogStorage


@lru_cache()
def get_memory_storages() -> Storages:
    return Storages(
        films=InMemoryFilmStorage(),
        users=InMemoryUserStorage(),
        genres=genre_memory_storage(),
        mpa=mpa_memory_storage()
    )


def get_storages(db: Session = Depends(get_db)) -> Storages:
    # Сессия берет соединение из пула только на первом запросе к БД,
    # поэтому в режиме "memory" к базе никто не обращается
    if settings.STORAGE_BACKEND == "memory":
        return get_memory_storages()
    return Storages(
        films=FilmDbStorage(db),
        users=UserDbStorage(db),
        genres=genre_db_storage(db),
        mpa=mpa_db_storage(db)
    )


def get_film_service(storages: Storages = Depends(get_storages)) -> FilmService:
    return FilmService(storages.films, storages.users, storages.genres, storages.mpa)


def get_user_service(storages: Storages = Depends(get_storages)) -> UserService:
    return UserService(storages.users, storages.films)


def get_catalog_service(storages: Storages = Depends(get_storages)) -> CatalogService:
    return CatalogService(storages.genres, storages.mpa)
