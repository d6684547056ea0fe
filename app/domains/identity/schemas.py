from pydantic import BaseModel, EmailStr, ConfigDict
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import datetime
import uuid


class CamelModel(BaseModel):
    """Базовая схема с camelCase-ключами в JSON"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserLogin(CamelModel):
    """Схема для входа: username или email и пароль"""
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class UserUpdate(CamelModel):
    """Схема для обновления профиля"""
    username: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None


class PasswordChange(CamelModel):
    """Схема для смены пароля"""
    old_password: str
    new_password: str


class RefreshRequest(CamelModel):
    refresh_token: Optional[str] = None


class UserResponse(CamelModel):
    """Публичная проекция пользователя: без пароля и refresh-токена"""
    id: uuid.UUID
    username: str
    email: str
    full_name: str
    avatar: str
    cover_image: str = ""
    watch_history: List[uuid.UUID] = []
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, user) -> "UserResponse":
        return cls(
            id=user.uuid,
            username=user.username,
            email=user.email,
            full_name=user.full_name,
            avatar=user.avatar,
            cover_image=user.cover_image,
            watch_history=user.watch_history,
            created_at=user.created_at,
            updated_at=user.updated_at
        )


class Token(CamelModel):
    """Пара JWT токенов"""
    access_token: str
    refresh_token: str


class LoginResponse(CamelModel):
    user: UserResponse
    access_token: str
    refresh_token: str
