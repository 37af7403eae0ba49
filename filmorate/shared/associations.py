"""
Синхронизация связей многие-ко-многим (фильм-жанр, лайки, дружба).

Связь описывается таблицей с двумя колонками: родитель и участник.
Методы не делают commit: вызывающий код объединяет обновление полей
сущности и всех видов связей в одну транзакцию.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, Set

from sqlalchemy import Table, delete, insert, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from filmorate.monitoring.metrics import track_query

logger = logging.getLogger(__name__)

# Диалекты с поддержкой INSERT ... ON CONFLICT DO NOTHING
_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class Association:
    """
    Один вид связи родительской сущности с набором id.

    Attributes:
        table: Таблица связи
        parent_column: Имя колонки с id родителя
        member_column: Имя колонки с id участника
    """

    def __init__(self, table: Table, parent_column: str, member_column: str):
        self.table = table
        self.parent = table.c[parent_column]
        self.member = table.c[member_column]

    def __repr__(self) -> str:
        return f"Association({self.table.name}: {self.parent.name} -> {self.member.name})"

    def replace(self, db: Session, parent_id: int, member_ids: Iterable[int]) -> None:
        """
        Замена всех связей родителя текущим набором.

        Сначала удаляются все строки родителя, затем одной пачкой
        вставляется по строке на каждого участника.
        """
        members = sorted(set(member_ids))

        with track_query("delete", self.table.name):
            db.execute(delete(self.table).where(self.parent == parent_id))

        if not members:
            return

        with track_query("insert", self.table.name):
            db.execute(
                insert(self.table),
                [{self.parent.name: parent_id, self.member.name: member_id} for member_id in members]
            )

        logger.debug(f"{self!r}: parent {parent_id} synchronized with {len(members)} rows")

    def add(self, db: Session, parent_id: int, member_id: int) -> None:
        """Добавление одной связи. Повторное добавление ничего не меняет."""
        values = {self.parent.name: parent_id, self.member.name: member_id}
        dialect_insert = _UPSERT_INSERTS.get(db.get_bind().dialect.name)

        with track_query("insert", self.table.name):
            if dialect_insert is not None:
                db.execute(dialect_insert(self.table).values(**values).on_conflict_do_nothing())
            elif not self.exists(db, parent_id, member_id):
                db.execute(insert(self.table).values(**values))

    def remove(self, db: Session, parent_id: int, member_id: int) -> bool:
        """
        Удаление одной связи.

        Returns:
            True, если строка была удалена
        """
        with track_query("delete", self.table.name):
            result = db.execute(
                delete(self.table).where(self.parent == parent_id, self.member == member_id)
            )
        return result.rowcount > 0

    def exists(self, db: Session, parent_id: int, member_id: int) -> bool:
        with track_query("select", self.table.name):
            row = db.execute(
                select(self.parent).where(self.parent == parent_id, self.member == member_id)
            ).first()
        return row is not None

    def load(self, db: Session, parent_ids: Iterable[int]) -> Dict[int, Set[int]]:
        """
        Загрузка связей сразу для набора родителей одним запросом.

        Returns:
            Словарь id родителя -> множество id участников
        """
        result: Dict[int, Set[int]] = defaultdict(set)
        ids = list(set(parent_ids))
        if not ids:
            return result

        with track_query("select", self.table.name):
            rows = db.execute(
                select(self.parent, self.member).where(self.parent.in_(ids))
            ).all()

        for parent_id, member_id in rows:
            result[parent_id].add(member_id)
        return result

    def purge_parent(self, db: Session, parent_id: int) -> None:
        """Удаление всех связей родителя."""
        with track_query("delete", self.table.name):
            db.execute(delete(self.table).where(self.parent == parent_id))

    def purge_member(self, db: Session, member_id: int) -> None:
        """Удаление всех связей, указывающих на участника."""
        with track_query("delete", self.table.name):
            db.execute(delete(self.table).where(self.member == member_id))
