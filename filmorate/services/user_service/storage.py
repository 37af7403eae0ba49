"""
Хранилища пользователей: база данных и память процесса.

Обе реализации удовлетворяют протоколу UserStorage и выбираются
при сборке приложения (settings.STORAGE_BACKEND).
"""

import logging
import threading
from typing import Dict, Iterable, List, Protocol, Set

from sqlalchemy import select
from sqlalchemy.orm import Session

from . import models, schemas
from filmorate.monitoring.metrics import track_query
from filmorate.shared.associations import Association
from filmorate.shared.exceptions import NotFoundError
from filmorate.shared.transactions import transaction, reading

logger = logging.getLogger(__name__)

FRIENDS = Association(models.friendships, "user_id", "friend_id")


def _friend_ids(user_id: int):
    """Подзапрос: исходящие ребра дружбы пользователя."""
    return select(models.friendships.c.friend_id).where(models.friendships.c.user_id == user_id)


class UserStorage(Protocol):
    """Контракт хранилища пользователей."""

    def create(self, user: schemas.User) -> schemas.User: ...

    def update(self, user: schemas.User) -> schemas.User: ...

    def find_all(self) -> List[schemas.User]: ...

    def find_by_id(self, user_id: int) -> schemas.User: ...

    def delete(self, user_id: int) -> None: ...

    def add_friend(self, user_id: int, friend_id: int) -> None: ...

    def remove_friend(self, user_id: int, friend_id: int) -> bool: ...

    def get_friends(self, user_id: int) -> List[schemas.User]: ...

    def get_common_friends(self, user_id: int, other_id: int) -> List[schemas.User]: ...


class UserDbStorage:
    """Пользователи в реляционной БД; дружба в таблице friendships."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, user: schemas.User) -> schemas.User:
        with transaction(self.db, "create user"):
            db_user = models.User(
                email=user.email,
                login=user.login,
                name=user.name,
                birthday=user.birthday
            )
            with track_query("insert", "users"):
                self.db.add(db_user)
                self.db.flush()
            user_id = db_user.id
            FRIENDS.replace(self.db, user_id, user.friends)

        logger.info(f"User created: {user.login} ({user_id})")
        return self.find_by_id(user_id)

    def update(self, user: schemas.User) -> schemas.User:
        with transaction(self.db, f"update user {user.id}"):
            db_user = self._get_row(user.id)
            db_user.email = user.email
            db_user.login = user.login
            db_user.name = user.name
            db_user.birthday = user.birthday
            with track_query("update", "users"):
                self.db.flush()
            FRIENDS.replace(self.db, user.id, user.friends)

        logger.info(f"User updated: {user.id}")
        return self.find_by_id(user.id)

    def find_all(self) -> List[schemas.User]:
        with reading("get users"):
            with track_query("select", "users"):
                rows = self.db.scalars(select(models.User).order_by(models.User.id)).all()
            return self._with_friends(rows)

    def find_by_id(self, user_id: int) -> schemas.User:
        with reading(f"get user {user_id}"):
            return self._with_friends([self._get_row(user_id)])[0]

    def delete(self, user_id: int) -> None:
        with transaction(self.db, f"delete user {user_id}"):
            db_user = self._get_row(user_id)
            FRIENDS.purge_parent(self.db, user_id)
            FRIENDS.purge_member(self.db, user_id)
            with track_query("delete", "users"):
                self.db.delete(db_user)

        logger.info(f"User deleted: {user_id}")

    def add_friend(self, user_id: int, friend_id: int) -> None:
        with transaction(self.db, f"add friend {friend_id} to user {user_id}"):
            FRIENDS.add(self.db, user_id, friend_id)

    def remove_friend(self, user_id: int, friend_id: int) -> bool:
        with transaction(self.db, f"remove friend {friend_id} from user {user_id}"):
            return FRIENDS.remove(self.db, user_id, friend_id)

    def get_friends(self, user_id: int) -> List[schemas.User]:
        # Внутренний JOIN отбрасывает id друзей без строки в users
        query = (
            select(models.User)
            .join(models.friendships, models.friendships.c.friend_id == models.User.id)
            .where(models.friendships.c.user_id == user_id)
            .order_by(models.User.id)
        )
        with reading(f"get friends of user {user_id}"):
            with track_query("select", "users"):
                rows = self.db.scalars(query).all()
            return self._with_friends(rows)

    def get_common_friends(self, user_id: int, other_id: int) -> List[schemas.User]:
        query = (
            select(models.User)
            .where(
                models.User.id.in_(_friend_ids(user_id)),
                models.User.id.in_(_friend_ids(other_id))
            )
            .order_by(models.User.id)
        )
        with reading(f"get common friends of users {user_id} and {other_id}"):
            with track_query("select", "users"):
                rows = self.db.scalars(query).all()
            return self._with_friends(rows)

    def _get_row(self, user_id: int) -> models.User:
        with track_query("select", "users"):
            db_user = self.db.get(models.User, user_id)
        if db_user is None:
            raise NotFoundError("User", user_id)
        return db_user

    def _with_friends(self, rows: Iterable[models.User]) -> List[schemas.User]:
        """Заполнение друзей одним запросом на весь набор пользователей."""
        rows = list(rows)
        friends = FRIENDS.load(self.db, [row.id for row in rows])
        return [
            schemas.User(
                id=row.id,
                email=row.email,
                login=row.login,
                name=row.name,
                birthday=row.birthday,
                friends=friends.get(row.id, set())
            )
            for row in rows
        ]


class InMemoryUserStorage:
    """
    Пользователи в памяти процесса.

    Наружу отдаются копии, поэтому изменения у вызывающего кода
    не затрагивают хранилище. Блокировка играет роль транзакции.
    """

    def __init__(self):
        self._users: Dict[int, schemas.User] = {}
        self._next_id = 1
        self._lock = threading.RLock()

    def create(self, user: schemas.User) -> schemas.User:
        with self._lock:
            user_id = self._next_id
            self._next_id += 1
            self._users[user_id] = user.model_copy(
                update={"id": user_id, "friends": set(user.friends)}
            )
            logger.info(f"User created: {user.login} ({user_id})")
            return self.find_by_id(user_id)

    def update(self, user: schemas.User) -> schemas.User:
        with self._lock:
            self._get(user.id)
            self._users[user.id] = user.model_copy(update={"friends": set(user.friends)})
            logger.info(f"User updated: {user.id}")
            return self.find_by_id(user.id)

    def find_all(self) -> List[schemas.User]:
        with self._lock:
            return [self._copy(user_id) for user_id in sorted(self._users)]

    def find_by_id(self, user_id: int) -> schemas.User:
        with self._lock:
            self._get(user_id)
            return self._copy(user_id)

    def delete(self, user_id: int) -> None:
        with self._lock:
            self._get(user_id)
            del self._users[user_id]
            for other in self._users.values():
                other.friends.discard(user_id)
            logger.info(f"User deleted: {user_id}")

    def add_friend(self, user_id: int, friend_id: int) -> None:
        with self._lock:
            self._get(user_id).friends.add(friend_id)

    def remove_friend(self, user_id: int, friend_id: int) -> bool:
        with self._lock:
            friends = self._get(user_id).friends
            if friend_id not in friends:
                return False
            friends.remove(friend_id)
            return True

    def get_friends(self, user_id: int) -> List[schemas.User]:
        with self._lock:
            return self._resolve(self._get(user_id).friends)

    def get_common_friends(self, user_id: int, other_id: int) -> List[schemas.User]:
        with self._lock:
            common = self._get(user_id).friends & self._get(other_id).friends
            return self._resolve(common)

    def _get(self, user_id: int) -> schemas.User:
        try:
            return self._users[user_id]
        except KeyError:
            raise NotFoundError("User", user_id) from None

    def _copy(self, user_id: int) -> schemas.User:
        user = self._users[user_id]
        return user.model_copy(update={"friends": set(user.friends)})

    def _resolve(self, user_ids: Set[int]) -> List[schemas.User]:
        # id без пользователя (удален в обход хранилища) пропускаются
        return [self._copy(user_id) for user_id in sorted(user_ids) if user_id in self._users]
