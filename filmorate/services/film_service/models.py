"""
Модели базы данных для фильмов.
"""

from sqlalchemy import Column, Integer, String, Text, Date, ForeignKey, Table
from sqlalchemy.orm import relationship
from filmorate.config.database import Base
from filmorate.services.catalog_service.models import MpaRating
from filmorate.services.user_service import models as user_models  # noqa: F401


# ====== Association tables ======

film_genres = Table(
    'film_genres',
    Base.metadata,
    Column('film_id', Integer, ForeignKey('films.id', ondelete='CASCADE'), primary_key=True),
    Column('genre_id', Integer, ForeignKey('genres.id'), primary_key=True),
)

film_likes = Table(
    'film_likes',
    Base.metadata,
    Column('film_id', Integer, ForeignKey('films.id', ondelete='CASCADE'), primary_key=True),
    Column('user_id', Integer, ForeignKey('users.id', ondelete='CASCADE'), primary_key=True, index=True),
)


class Film(Base):
    """
    Модель фильма.

    Attributes:
        id: ID фильма
        name: Название
        description: Описание
        release_date: Дата выхода
        duration: Длительность в минутах
        mpa_id: ID рейтинга MPA
    """

    __tablename__ = "films"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text)
    release_date = Column(Date)
    duration = Column(Integer, nullable=False)
    mpa_id = Column(Integer, ForeignKey('mpa_ratings.id'), nullable=False)

    # Relationships
    mpa = relationship(MpaRating, lazy="joined")
