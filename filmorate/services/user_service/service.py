"""
Бизнес-логика пользователей и дружбы.
"""

import logging
from typing import List

from . import schemas
from .storage import UserStorage
from filmorate.services.film_service.storage import FilmStorage
from filmorate.monitoring.logging_config import request_logger
from filmorate.monitoring.metrics import record_friendship
from filmorate.shared.exceptions import ValidationError

logger = logging.getLogger(__name__)


class UserService:
    """
    Проверяет существование связанных пользователей и делегирует
    хранение в UserStorage. Хранилище фильмов нужно, чтобы вместе
    с пользователем снять его лайки.
    """

    def __init__(self, users: UserStorage, films: FilmStorage):
        self.users = users
        self.films = films

    def create(self, user: schemas.User) -> schemas.User:
        self._check_friends_exist(user)
        created = self.users.create(user)
        request_logger.log_audit("user_created", "user", created.id, {"login": created.login})
        return created

    def update(self, user: schemas.User) -> schemas.User:
        if user.id is None:
            raise ValidationError("User id is required for update")
        self.users.find_by_id(user.id)
        self._check_friends_exist(user)
        updated = self.users.update(user)
        request_logger.log_audit("user_updated", "user", updated.id)
        return updated

    def find_all(self) -> List[schemas.User]:
        return self.users.find_all()

    def find_by_id(self, user_id: int) -> schemas.User:
        return self.users.find_by_id(user_id)

    def delete(self, user_id: int) -> None:
        self.users.delete(user_id)
        self.films.remove_user_likes(user_id)
        request_logger.log_audit("user_deleted", "user", user_id)

    def add_friend(self, user_id: int, friend_id: int) -> None:
        self.users.find_by_id(user_id)
        self.users.find_by_id(friend_id)
        self.users.add_friend(user_id, friend_id)
        record_friendship("add")
        request_logger.log_audit("friend_added", "user", user_id, {"friend_id": friend_id})

    def remove_friend(self, user_id: int, friend_id: int) -> None:
        """Удаление отсутствующего ребра не считается ошибкой."""
        self.users.find_by_id(user_id)
        self.users.find_by_id(friend_id)
        if self.users.remove_friend(user_id, friend_id):
            record_friendship("remove")
            request_logger.log_audit("friend_removed", "user", user_id, {"friend_id": friend_id})
        else:
            logger.debug(f"User {user_id} has no friend {friend_id}, nothing to remove")

    def get_friends(self, user_id: int) -> List[schemas.User]:
        self.users.find_by_id(user_id)
        return self.users.get_friends(user_id)

    def get_common_friends(self, user_id: int, other_id: int) -> List[schemas.User]:
        self.users.find_by_id(user_id)
        self.users.find_by_id(other_id)
        return self.users.get_common_friends(user_id, other_id)

    def _check_friends_exist(self, user: schemas.User) -> None:
        for friend_id in sorted(user.friends):
            self.users.find_by_id(friend_id)
