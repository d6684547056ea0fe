import uuid
from datetime import datetime
from typing import List, Optional

from app.core.security import get_password_hash, verify_password


class User:
    """Сущность пользователя домена Identity"""

    def __init__(
        self,
        uuid: uuid.UUID,
        username: str,
        email: str,
        full_name: str,
        avatar: str,
        password_hash: str,
        cover_image: str = "",
        refresh_token: Optional[str] = None,
        watch_history: Optional[List[uuid.UUID]] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self.uuid = uuid
        self.username = username
        self.email = email
        self.full_name = full_name
        self.avatar = avatar
        self.cover_image = cover_image or ""
        self.password_hash = password_hash
        self.refresh_token = refresh_token
        self.watch_history = watch_history or []
        self.created_at = created_at or datetime.utcnow()
        self.updated_at = updated_at or datetime.utcnow()

    def authenticate(self, password: str) -> bool:
        """Проверка пароля пользователя"""
        return verify_password(password, self.password_hash)

    def set_password(self, password: str) -> None:
        self.password_hash = get_password_hash(password)
        self.updated_at = datetime.utcnow()

    def update_profile(self, username: str, email: str, full_name: str) -> None:
        """Обновление профиля пользователя"""
        self.username = username.lower()
        self.email = email.lower()
        self.full_name = full_name
        self.updated_at = datetime.utcnow()

    @classmethod
    def create_user(
        cls,
        username: str,
        email: str,
        full_name: str,
        password: str,
        avatar: str,
        cover_image: str = ""
    ) -> "User":
        """Создание нового пользователя с хешированием пароля"""
        return cls(
            uuid=uuid.uuid4(),
            username=username.lower(),
            email=email.lower(),
            full_name=full_name,
            avatar=avatar,
            cover_image=cover_image,
            password_hash=get_password_hash(password)
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, User):
            return False
        return self.uuid == other.uuid

    def __repr__(self) -> str:
        return f"User(uuid={self.uuid}, email={self.email}, username={self.username})"
