"""
Границы транзакций для хранилищ на SQLAlchemy.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from filmorate.shared.exceptions import DatabaseError

logger = logging.getLogger(__name__)


@contextmanager
def transaction(db: Session, action: str) -> Iterator[Session]:
    """
    Одна атомарная запись: commit при успехе, rollback при любой ошибке.
    Ошибки SQLAlchemy превращаются в DatabaseError.

    Args:
        db: Сессия БД
        action: Описание операции для логов ("update film 5")
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to {action}: {e}", exc_info=True)
        raise DatabaseError(f"Failed to {action}") from e
    except Exception:
        db.rollback()
        raise


@contextmanager
def reading(action: str) -> Iterator[None]:
    """Чтение без commit; ошибки SQLAlchemy превращаются в DatabaseError."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(f"Failed to {action}: {e}", exc_info=True)
        raise DatabaseError(f"Failed to {action}") from e
