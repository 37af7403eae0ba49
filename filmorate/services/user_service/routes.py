"""
HTTP endpoints пользователей и дружбы.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends

from . import schemas
from .service import UserService
from filmorate.api.dependencies import get_user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[schemas.User])
def get_users(service: UserService = Depends(get_user_service)):
    """Получение всех пользователей."""
    return service.find_all()


@router.post("", response_model=schemas.User)
def create_user(user: schemas.User, service: UserService = Depends(get_user_service)):
    logger.info(f"Creating user: {user.login}")
    return service.create(user)


@router.put("", response_model=schemas.User)
def update_user(user: schemas.User, service: UserService = Depends(get_user_service)):
    logger.info(f"Updating user: {user.id}")
    return service.update(user)


@router.get("/{user_id}", response_model=schemas.User)
def get_user(user_id: int, service: UserService = Depends(get_user_service)):
    return service.find_by_id(user_id)


@router.delete("/{user_id}")
def delete_user(user_id: int, service: UserService = Depends(get_user_service)):
    logger.info(f"Deleting user: {user_id}")
    service.delete(user_id)


@router.put("/{user_id}/friends/{friend_id}")
def add_friend(user_id: int, friend_id: int, service: UserService = Depends(get_user_service)):
    """Добавление друга. Обратное ребро не создается."""
    service.add_friend(user_id, friend_id)


@router.delete("/{user_id}/friends/{friend_id}")
def remove_friend(user_id: int, friend_id: int, service: UserService = Depends(get_user_service)):
    service.remove_friend(user_id, friend_id)


@router.get("/{user_id}/friends", response_model=List[schemas.User])
def get_friends(user_id: int, service: UserService = Depends(get_user_service)):
    return service.get_friends(user_id)


@router.get("/{user_id}/friends/common/{other_id}", response_model=List[schemas.User])
def get_common_friends(user_id: int, other_id: int, service: UserService = Depends(get_user_service)):
    """Общие друзья двух пользователей."""
    return service.get_common_friends(user_id, other_id)
