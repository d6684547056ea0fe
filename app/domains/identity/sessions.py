import hmac
import logging
import uuid
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import BadRequestError, NotFoundError, UnauthorizedError
from app.core.security import TokenPair, TokenService
from app.db.repositories.user_repository import UserRepository
from app.domains.identity.entities import User
from app.domains.identity.schemas import UserLogin

logger = logging.getLogger(__name__)


class SessionService:
    """Жизненный цикл сессии: вход, обновление пары токенов, выход.

    На пользователя хранится ровно один действующий refresh-токен. Выпуск
    новой пары перезаписывает его, выход обнуляет.
    """

    def __init__(self, session: AsyncSession, token_service: TokenService):
        self.session = session
        self.user_repository = UserRepository(session)
        self.token_service = token_service

    async def login(self, login_data: UserLogin) -> Tuple[User, TokenPair]:
        """Вход по username или email и паролю"""
        if not login_data.username and not login_data.email:
            raise BadRequestError("username or email is required")

        if not login_data.password:
            raise BadRequestError("Password is required")

        user = await self.user_repository.get_by_username_or_email(
            username=login_data.username,
            email=login_data.email
        )
        if not user:
            logger.warning(f"Login failed: user {login_data.username or login_data.email} does not exist")
            raise NotFoundError("User does not exist")

        if not user.authenticate(login_data.password):
            logger.warning(f"Login failed for user_id: {user.uuid}")
            raise UnauthorizedError("Invalid user credentials")

        tokens = await self.issue_tokens(user)
        logger.info(f"Login successful for user_id: {user.uuid}")
        return user, tokens

    async def issue_tokens(self, user: User) -> TokenPair:
        """Выпуск новой пары и сохранение refresh-токена у пользователя"""
        tokens = self.token_service.issue(user)
        await self.user_repository.set_refresh_token(user.uuid, tokens.refresh_token)
        user.refresh_token = tokens.refresh_token
        return tokens

    async def refresh(self, incoming_token: Optional[str]) -> TokenPair:
        """Обмен действующего refresh-токена на новую пару"""
        if not incoming_token:
            raise UnauthorizedError("Unauthorized request")

        try:
            claims = self.token_service.verify_refresh_token(incoming_token)
            user_uuid = uuid.UUID(claims["id"])
        except (UnauthorizedError, ValueError):
            logger.warning("Refresh rejected: token failed verification")
            raise UnauthorizedError("Invalid refresh token")

        user = await self.user_repository.get_by_uuid(user_uuid)
        if not user:
            logger.warning(f"Refresh rejected: user {user_uuid} not found")
            raise UnauthorizedError("Invalid refresh token")

        if not user.refresh_token or not hmac.compare_digest(
            incoming_token.encode(), user.refresh_token.encode()
        ):
            logger.warning(f"Refresh rejected: superseded token for user_id {user.uuid}")
            raise UnauthorizedError("Refresh token is expired or used")

        tokens = self.token_service.issue(user)
        rotated = await self.user_repository.rotate_refresh_token(
            user.uuid, expected=incoming_token, new_token=tokens.refresh_token
        )
        if not rotated:
            logger.warning(f"Refresh rejected: concurrent rotation for user_id {user.uuid}")
            raise UnauthorizedError("Refresh token is expired or used")

        return tokens

    async def logout(self, user: User) -> None:
        """Снятие refresh-токена, пользователь снова анонимен"""
        await self.user_repository.set_refresh_token(user.uuid, None)
        logger.info(f"User {user.uuid} logged out")
