"""
HTTP endpoints справочников.
"""

from typing import List

from fastapi import APIRouter, Depends

from . import schemas
from .service import CatalogService
from filmorate.api.dependencies import get_catalog_service

router = APIRouter(tags=["catalogs"])


@router.get("/genres", response_model=List[schemas.Genre])
def get_genres(service: CatalogService = Depends(get_catalog_service)):
    return service.get_genres()


@router.get("/genres/{genre_id}", response_model=schemas.Genre)
def get_genre(genre_id: int, service: CatalogService = Depends(get_catalog_service)):
    return service.get_genre(genre_id)


@router.get("/mpa", response_model=List[schemas.Mpa])
def get_mpa_ratings(service: CatalogService = Depends(get_catalog_service)):
    return service.get_mpa_ratings()


@router.get("/mpa/{mpa_id}", response_model=schemas.Mpa)
def get_mpa(mpa_id: int, service: CatalogService = Depends(get_catalog_service)):
    return service.get_mpa(mpa_id)
