"""
Хранилища справочников (жанры, рейтинги MPA).
"""

import logging
from typing import Dict, List, Protocol, Type

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from . import models, schemas
from filmorate.config.database import Base
from filmorate.monitoring.metrics import track_query
from filmorate.shared.exceptions import NotFoundError
from filmorate.shared.transactions import transaction, reading

logger = logging.getLogger(__name__)

# Содержимое справочников
GENRES: Dict[int, str] = {
    1: "Комедия",
    2: "Драма",
    3: "Мультфильм",
    4: "Триллер",
    5: "Документальный",
    6: "Боевик",
}

MPA_RATINGS: Dict[int, str] = {
    1: "G",
    2: "PG",
    3: "PG-13",
    4: "R",
    5: "NC-17",
}


class CatalogStorage(Protocol):
    """Справочник: только чтение по id."""

    def find_all(self) -> List[BaseModel]:
        ...

    def find_by_id(self, record_id: int) -> BaseModel:
        ...


class CatalogDbStorage:
    """
    Справочник в базе данных.

    Args:
        db: Сессия БД
        model: ORM модель таблицы справочника
        schema: Pydantic схема записи
        resource: Название ресурса для сообщений об ошибках
    """

    def __init__(self, db: Session, model: Type[Base], schema: Type[BaseModel], resource: str):
        self.db = db
        self.model = model
        self.schema = schema
        self.resource = resource

    def find_all(self) -> List[BaseModel]:
        with reading(f"get {self.resource} list"):
            with track_query("select", self.model.__tablename__):
                rows = self.db.scalars(select(self.model).order_by(self.model.id)).all()
        return [self.schema.model_validate(row) for row in rows]

    def find_by_id(self, record_id: int) -> BaseModel:
        with reading(f"get {self.resource} {record_id}"):
            with track_query("select", self.model.__tablename__):
                row = self.db.get(self.model, record_id)
        if row is None:
            raise NotFoundError(self.resource, record_id)
        return self.schema.model_validate(row)


class InMemoryCatalogStorage:
    """Справочник в памяти процесса, заполняется при создании."""

    def __init__(self, records: Dict[int, str], schema: Type[BaseModel], resource: str):
        self._records = {
            record_id: schema(id=record_id, name=name)
            for record_id, name in records.items()
        }
        self.resource = resource

    def find_all(self) -> List[BaseModel]:
        return [self._records[record_id] for record_id in sorted(self._records)]

    def find_by_id(self, record_id: int) -> BaseModel:
        try:
            return self._records[record_id]
        except KeyError:
            raise NotFoundError(self.resource, record_id) from None


def genre_db_storage(db: Session) -> CatalogDbStorage:
    return CatalogDbStorage(db, models.Genre, schemas.Genre, "Genre")


def mpa_db_storage(db: Session) -> CatalogDbStorage:
    return CatalogDbStorage(db, models.MpaRating, schemas.Mpa, "MPA rating")


def genre_memory_storage() -> InMemoryCatalogStorage:
    return InMemoryCatalogStorage(GENRES, schemas.Genre, "Genre")


def mpa_memory_storage() -> InMemoryCatalogStorage:
    return InMemoryCatalogStorage(MPA_RATINGS, schemas.Mpa, "MPA rating")


def seed_catalogs(db: Session) -> None:
    """
    Заполнение справочников. Существующие записи не трогаются.

    Args:
        db: Сессия БД
    """
    with transaction(db, "seed catalogs"):
        for model, records in ((models.Genre, GENRES), (models.MpaRating, MPA_RATINGS)):
            existing = set(db.scalars(select(model.id)).all())
            for record_id, name in records.items():
                if record_id not in existing:
                    db.add(model(id=record_id, name=name))

    logger.info("Catalogs seeded", extra={"genres": len(GENRES), "mpa_ratings": len(MPA_RATINGS)})
