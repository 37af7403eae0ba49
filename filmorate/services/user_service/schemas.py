"""
Pydantic схемы пользователей.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from typing import Optional, Set
from datetime import date


class User(BaseModel):
    """
    Пользователь вместе с множеством id друзей.

    Attributes:
        id: ID (назначается хранилищем при создании)
        email: Email
        login: Логин без пробелов
        name: Имя (если пустое, берется логин)
        birthday: Дата рождения (не в будущем)
        friends: ID пользователей, которых этот пользователь добавил в друзья
    """
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    email: EmailStr
    login: str = Field(..., min_length=1, max_length=100, pattern=r'^\S+$')
    name: Optional[str] = Field(None, max_length=255)
    birthday: Optional[date] = None
    friends: Set[int] = Field(default_factory=set)

    @field_validator('birthday')
    @classmethod
    def validate_birthday(cls, v):
        """Дата рождения не может быть в будущем."""
        if v and v > date.today():
            raise ValueError('Birthday cannot be in the future')
        return v

    @model_validator(mode='after')
    def default_name_to_login(self):
        if not self.name or not self.name.strip():
            self.name = self.login
        return self
