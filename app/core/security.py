import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings
from app.core.errors import UnauthorizedError

# Контекст для хеширования паролей
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Проверка пароля"""
    # bcrypt имеет ограничение 72 байта
    return pwd_context.verify(plain_password[:72], hashed_password)


def get_password_hash(password: str) -> str:
    """Хеширование пароля"""
    return pwd_context.hash(password[:72])


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenService:
    """Выпуск и проверка пары JWT: access и refresh.

    Access-токен короткоживущий и несёт данные пользователя, refresh-токен
    живёт дольше, несёт только id и подписан отдельным секретом.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_expires: timedelta = timedelta(minutes=15),
        refresh_expires: timedelta = timedelta(days=10),
        algorithm: str = "HS256",
    ):
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_expires = access_expires
        self.refresh_expires = refresh_expires
        self.algorithm = algorithm

    def _encode(self, claims: Dict[str, Any], secret: str, expires_delta: timedelta) -> str:
        to_encode = claims.copy()
        expire = datetime.now(timezone.utc) + expires_delta
        # jti делает каждый токен уникальным даже в пределах одной секунды
        to_encode.update({"exp": expire, "jti": uuid.uuid4().hex})
        return jwt.encode(to_encode, secret, algorithm=self.algorithm)

    def create_access_token(self, user) -> str:
        """Создание JWT токена доступа"""
        return self._encode(
            {
                "id": str(user.uuid),
                "username": user.username,
                "email": user.email,
                "fullName": user.full_name,
            },
            self.access_secret,
            self.access_expires,
        )

    def create_refresh_token(self, user) -> str:
        """Создание refresh токена"""
        return self._encode({"id": str(user.uuid)}, self.refresh_secret, self.refresh_expires)

    def issue(self, user) -> TokenPair:
        return TokenPair(
            access_token=self.create_access_token(user),
            refresh_token=self.create_refresh_token(user),
        )

    def verify(self, token: str, secret: str) -> Dict[str, Any]:
        """Проверка подписи и срока действия, без обращения к БД"""
        try:
            payload = jwt.decode(token, secret, algorithms=[self.algorithm])
        except JWTError:
            raise UnauthorizedError("Invalid or expired token")

        if not payload.get("id"):
            raise UnauthorizedError("Invalid or expired token")

        return payload

    def verify_access_token(self, token: str) -> Dict[str, Any]:
        return self.verify(token, self.access_secret)

    def verify_refresh_token(self, token: str) -> Dict[str, Any]:
        return self.verify(token, self.refresh_secret)


def get_token_service() -> TokenService:
    return TokenService(
        access_secret=settings.access_token_secret,
        refresh_secret=settings.refresh_token_secret,
        access_expires=timedelta(minutes=settings.access_token_expire_minutes),
        refresh_expires=timedelta(days=settings.refresh_token_expire_days),
        algorithm=settings.jwt_algorithm,
    )


def extract_token_from_header(authorization: Optional[str]) -> Optional[str]:
    """Извлечение токена из заголовка Authorization"""
    if not authorization:
        return None

    parts = authorization.split()

    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None

    return parts[1]
