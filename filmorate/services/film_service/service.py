"""
Бизнес-логика фильмов: проверка связанных сущностей, подстановка
справочных значений, лайки и популярные фильмы.
"""

import logging
from typing import List

from . import schemas
from .storage import FilmStorage
from filmorate.monitoring.logging_config import request_logger
from filmorate.monitoring.metrics import record_like
from filmorate.services.catalog_service.storage import CatalogStorage
from filmorate.services.user_service.storage import UserStorage
from filmorate.shared.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class FilmService:
    """
    Фасад над FilmStorage.

    Перед каждой записью mpa и жанры заново берутся из справочников по id,
    поэтому названия, присланные клиентом, никогда не сохраняются.
    """

    def __init__(
        self,
        films: FilmStorage,
        users: UserStorage,
        genres: CatalogStorage,
        mpa: CatalogStorage
    ):
        self.films = films
        self.users = users
        self.genres = genres
        self.mpa = mpa

    def create(self, film: schemas.Film) -> schemas.Film:
        film = self._resolve_references(film)
        self._check_likes_exist(film)
        created = self.films.create(film)
        request_logger.log_audit("film_created", "film", created.id, {"name": created.name})
        return created

    def update(self, film: schemas.Film) -> schemas.Film:
        if film.id is None:
            raise ValidationError("Film id is required for update")
        self.films.find_by_id(film.id)
        film = self._resolve_references(film)
        self._check_likes_exist(film)
        updated = self.films.update(film)
        request_logger.log_audit("film_updated", "film", updated.id)
        return updated

    def find_all(self) -> List[schemas.Film]:
        return self.films.find_all()

    def find_by_id(self, film_id: int) -> schemas.Film:
        return self.films.find_by_id(film_id)

    def delete(self, film_id: int) -> None:
        self.films.delete(film_id)
        request_logger.log_audit("film_deleted", "film", film_id)

    def add_like(self, film_id: int, user_id: int) -> None:
        self.films.find_by_id(film_id)
        self.users.find_by_id(user_id)
        self.films.add_like(film_id, user_id)
        record_like("add")
        request_logger.log_audit("like_added", "film", film_id, {"user_id": user_id})

    def remove_like(self, film_id: int, user_id: int) -> None:
        """Удаление отсутствующего лайка не считается ошибкой."""
        self.films.find_by_id(film_id)
        if self.films.remove_like(film_id, user_id):
            record_like("remove")
            request_logger.log_audit("like_removed", "film", film_id, {"user_id": user_id})
        else:
            logger.debug(f"Film {film_id} has no like from user {user_id}, nothing to remove")

    def get_popular(self, count: int) -> List[schemas.Film]:
        return self.films.get_most_popular(count)

    def _resolve_references(self, film: schemas.Film) -> schemas.Film:
        """
        Замена mpa и жанров каноническими записями справочников.

        Raises:
            ValidationError: mpa не указан, либо mpa или жанр не найден
        """
        if film.mpa is None:
            raise ValidationError("Film MPA rating is required")
        try:
            mpa = self.mpa.find_by_id(film.mpa.id)
        except NotFoundError as e:
            raise ValidationError(e.message, errors=[{"field": "mpa", "id": film.mpa.id}]) from e

        genres = []
        for genre_id in sorted({genre.id for genre in film.genres}):
            try:
                genres.append(self.genres.find_by_id(genre_id))
            except NotFoundError as e:
                raise ValidationError(e.message, errors=[{"field": "genres", "id": genre_id}]) from e

        return film.model_copy(update={"mpa": mpa, "genres": genres})

    def _check_likes_exist(self, film: schemas.Film) -> None:
        for user_id in sorted(film.likes):
            self.users.find_by_id(user_id)
