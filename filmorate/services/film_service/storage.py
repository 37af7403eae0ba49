"""
Хранилища фильмов: база данных и память процесса.

Обе реализации удовлетворяют протоколу FilmStorage и выбираются
при сборке приложения (settings.STORAGE_BACKEND).
"""

import logging
import threading
from collections import defaultdict
from typing import Dict, Iterable, List, Protocol

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from . import models, schemas
from filmorate.monitoring.metrics import track_query
from filmorate.services.catalog_service.models import Genre as GenreModel
from filmorate.services.catalog_service.schemas import Genre, Mpa
from filmorate.shared.associations import Association
from filmorate.shared.exceptions import NotFoundError
from filmorate.shared.transactions import transaction, reading

logger = logging.getLogger(__name__)

GENRES = Association(models.film_genres, "film_id", "genre_id")
LIKES = Association(models.film_likes, "film_id", "user_id")


class FilmStorage(Protocol):
    """Контракт хранилища фильмов."""

    def create(self, film: schemas.Film) -> schemas.Film: ...

    def update(self, film: schemas.Film) -> schemas.Film: ...

    def find_all(self) -> List[schemas.Film]: ...

    def find_by_id(self, film_id: int) -> schemas.Film: ...

    def delete(self, film_id: int) -> None: ...

    def add_like(self, film_id: int, user_id: int) -> None: ...

    def remove_like(self, film_id: int, user_id: int) -> bool: ...

    def remove_user_likes(self, user_id: int) -> None: ...

    def get_most_popular(self, count: int) -> List[schemas.Film]: ...


class FilmDbStorage:
    """
    Фильмы в реляционной БД.

    Жанры и лайки хранятся в film_genres и film_likes и при каждой
    записи фильма заменяются целиком в той же транзакции, что и поля.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, film: schemas.Film) -> schemas.Film:
        with transaction(self.db, "create film"):
            db_film = models.Film(
                name=film.name,
                description=film.description,
                release_date=film.release_date,
                duration=film.duration,
                mpa_id=film.mpa.id
            )
            with track_query("insert", "films"):
                self.db.add(db_film)
                self.db.flush()
            film_id = db_film.id
            self._sync_associations(film_id, film)

        logger.info(f"Film created: {film.name} ({film_id})")
        return self.find_by_id(film_id)

    def update(self, film: schemas.Film) -> schemas.Film:
        with transaction(self.db, f"update film {film.id}"):
            db_film = self._get_row(film.id)
            db_film.name = film.name
            db_film.description = film.description
            db_film.release_date = film.release_date
            db_film.duration = film.duration
            db_film.mpa_id = film.mpa.id
            with track_query("update", "films"):
                self.db.flush()
            self._sync_associations(film.id, film)

        logger.info(f"Film updated: {film.id}")
        return self.find_by_id(film.id)

    def find_all(self) -> List[schemas.Film]:
        with reading("get films"):
            with track_query("select", "films"):
                rows = self.db.scalars(select(models.Film).order_by(models.Film.id)).all()
            return self._with_associations(rows)

    def find_by_id(self, film_id: int) -> schemas.Film:
        with reading(f"get film {film_id}"):
            return self._with_associations([self._get_row(film_id)])[0]

    def delete(self, film_id: int) -> None:
        with transaction(self.db, f"delete film {film_id}"):
            db_film = self._get_row(film_id)
            GENRES.purge_parent(self.db, film_id)
            LIKES.purge_parent(self.db, film_id)
            with track_query("delete", "films"):
                self.db.delete(db_film)

        logger.info(f"Film deleted: {film_id}")

    def add_like(self, film_id: int, user_id: int) -> None:
        with transaction(self.db, f"add like to film {film_id} from user {user_id}"):
            LIKES.add(self.db, film_id, user_id)

    def remove_like(self, film_id: int, user_id: int) -> bool:
        with transaction(self.db, f"remove like from film {film_id} by user {user_id}"):
            return LIKES.remove(self.db, film_id, user_id)

    def remove_user_likes(self, user_id: int) -> None:
        """Снятие всех лайков пользователя (при удалении пользователя)."""
        with transaction(self.db, f"remove likes of user {user_id}"):
            LIKES.purge_member(self.db, user_id)

    def get_most_popular(self, count: int) -> List[schemas.Film]:
        """
        Фильмы по убыванию числа лайков, при равенстве по возрастанию id.
        Фильмы без лайков тоже попадают в выборку, в конец.
        """
        if count <= 0:
            return []

        like_counts = (
            select(models.film_likes.c.film_id, func.count().label("likes"))
            .group_by(models.film_likes.c.film_id)
            .subquery()
        )
        query = (
            select(models.Film)
            .outerjoin(like_counts, like_counts.c.film_id == models.Film.id)
            .order_by(func.coalesce(like_counts.c.likes, 0).desc(), models.Film.id.asc())
            .limit(count)
        )
        with reading("get popular films"):
            with track_query("select", "films"):
                rows = self.db.scalars(query).all()
            return self._with_associations(rows)

    def _sync_associations(self, film_id: int, film: schemas.Film) -> None:
        GENRES.replace(self.db, film_id, [genre.id for genre in film.genres])
        LIKES.replace(self.db, film_id, film.likes)

    def _get_row(self, film_id: int) -> models.Film:
        with track_query("select", "films"):
            db_film = self.db.get(models.Film, film_id)
        if db_film is None:
            raise NotFoundError("Film", film_id)
        return db_film

    def _load_genres(self, film_ids: List[int]) -> Dict[int, List[Genre]]:
        """Жанры для набора фильмов одним запросом, с названиями из справочника."""
        result: Dict[int, List[Genre]] = defaultdict(list)
        if not film_ids:
            return result

        query = (
            select(models.film_genres.c.film_id, GenreModel.id, GenreModel.name)
            .join(GenreModel, GenreModel.id == models.film_genres.c.genre_id)
            .where(models.film_genres.c.film_id.in_(film_ids))
            .order_by(GenreModel.id)
        )
        with track_query("select", "film_genres"):
            rows = self.db.execute(query).all()

        for film_id, genre_id, genre_name in rows:
            result[film_id].append(Genre(id=genre_id, name=genre_name))
        return result

    def _with_associations(self, rows: Iterable[models.Film]) -> List[schemas.Film]:
        """Заполнение жанров и лайков: по одному запросу на вид связи."""
        rows = list(rows)
        film_ids = [row.id for row in rows]
        genres = self._load_genres(film_ids)
        likes = LIKES.load(self.db, film_ids)
        return [
            schemas.Film(
                id=row.id,
                name=row.name,
                description=row.description,
                release_date=row.release_date,
                duration=row.duration,
                mpa=Mpa(id=row.mpa.id, name=row.mpa.name),
                genres=genres.get(row.id, []),
                likes=likes.get(row.id, set())
            )
            for row in rows
        ]


class InMemoryFilmStorage:
    """
    Фильмы в памяти процесса.

    Наружу отдаются копии. Блокировка играет роль транзакции.
    """

    def __init__(self):
        self._films: Dict[int, schemas.Film] = {}
        self._next_id = 1
        self._lock = threading.RLock()

    def create(self, film: schemas.Film) -> schemas.Film:
        with self._lock:
            film_id = self._next_id
            self._next_id += 1
            self._films[film_id] = self._normalized(film, film_id)
            logger.info(f"Film created: {film.name} ({film_id})")
            return self._copy(film_id)

    def update(self, film: schemas.Film) -> schemas.Film:
        with self._lock:
            self._get(film.id)
            self._films[film.id] = self._normalized(film, film.id)
            logger.info(f"Film updated: {film.id}")
            return self._copy(film.id)

    def find_all(self) -> List[schemas.Film]:
        with self._lock:
            return [self._copy(film_id) for film_id in sorted(self._films)]

    def find_by_id(self, film_id: int) -> schemas.Film:
        with self._lock:
            self._get(film_id)
            return self._copy(film_id)

    def delete(self, film_id: int) -> None:
        with self._lock:
            self._get(film_id)
            del self._films[film_id]
            logger.info(f"Film deleted: {film_id}")

    def add_like(self, film_id: int, user_id: int) -> None:
        with self._lock:
            self._get(film_id).likes.add(user_id)

    def remove_like(self, film_id: int, user_id: int) -> bool:
        with self._lock:
            likes = self._get(film_id).likes
            if user_id not in likes:
                return False
            likes.remove(user_id)
            return True

    def remove_user_likes(self, user_id: int) -> None:
        with self._lock:
            for film in self._films.values():
                film.likes.discard(user_id)

    def get_most_popular(self, count: int) -> List[schemas.Film]:
        if count <= 0:
            return []
        with self._lock:
            ranked = sorted(self._films.values(), key=lambda film: (-len(film.likes), film.id))
            return [self._copy(film.id) for film in ranked[:count]]

    def _get(self, film_id: int) -> schemas.Film:
        try:
            return self._films[film_id]
        except KeyError:
            raise NotFoundError("Film", film_id) from None

    def _copy(self, film_id: int) -> schemas.Film:
        film = self._films[film_id]
        return film.model_copy(update={"genres": list(film.genres), "likes": set(film.likes)})

    @staticmethod
    def _normalized(film: schemas.Film, film_id: int) -> schemas.Film:
        # Один жанр на id, по возрастанию id
        genres = {genre.id: genre for genre in film.genres}
        return film.model_copy(update={
            "id": film_id,
            "genres": [genres[genre_id] for genre_id in sorted(genres)],
            "likes": set(film.likes),
        })
