"""
Сервис справочников.
"""

from typing import List

from . import schemas
from .storage import CatalogStorage


class CatalogService:
    """Чтение жанров и рейтингов MPA."""

    def __init__(self, genres: CatalogStorage, mpa: CatalogStorage):
        self.genres = genres
        self.mpa = mpa

    def get_genres(self) -> List[schemas.Genre]:
        return self.genres.find_all()

    def get_genre(self, genre_id: int) -> schemas.Genre:
        return self.genres.find_by_id(genre_id)

    def get_mpa_ratings(self) -> List[schemas.Mpa]:
        return self.mpa.find_all()

    def get_mpa(self, mpa_id: int) -> schemas.Mpa:
        return self.mpa.find_by_id(mpa_id)
