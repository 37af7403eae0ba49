"""
Модели справочников: жанры и рейтинги MPA.
"""

from sqlalchemy import Column, Integer, String
from filmorate.config.database import Base


class Genre(Base):
    """
    Жанр фильма.

    Attributes:
        id: ID жанра
        name: Название жанра
    """

    __tablename__ = "genres"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(50), unique=True, nullable=False)


class MpaRating(Base):
    """
    Возрастной рейтинг Motion Picture Association.

    Attributes:
        id: ID рейтинга
        name: Обозначение (G, PG, ...)
    """

    __tablename__ = "mpa_ratings"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(10), unique=True, nullable=False)
