"""
Модели базы данных для пользователей.
"""

from sqlalchemy import Column, Integer, String, Date, ForeignKey, Table
from filmorate.config.database import Base


# ====== Association tables ======

# Дружба направленная: строка (user_id, friend_id) не подразумевает обратную
friendships = Table(
    'friendships',
    Base.metadata,
    Column('user_id', Integer, ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
    Column('friend_id', Integer, ForeignKey('users.id', ondelete='CASCADE'), primary_key=True, index=True),
)


class User(Base):
    """
    Модель пользователя.

    Attributes:
        id: ID пользователя
        email: Email
        login: Логин
        name: Отображаемое имя
        birthday: Дата рождения
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, index=True)
    login = Column(String(100), nullable=False, index=True)
    name = Column(String(255))
    birthday = Column(Date)
