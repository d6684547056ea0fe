import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from app.core.errors import BadRequestError, ConflictError, InternalServerError, NotFoundError
from app.db.repositories.user_repository import UserRepository
from app.domains.identity.entities import User
from app.domains.identity.schemas import UserUpdate
from app.infrastructure.media.cloudinary import MediaHost, public_id_from_url

logger = logging.getLogger(__name__)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


class IdentityService:
    """Сервис для работы с профилем пользователя"""

    def __init__(self, session: AsyncSession, media_host: Optional[MediaHost] = None):
        self.session = session
        self.user_repository = UserRepository(session)
        self.media_host = media_host

    async def register_user(
        self,
        username: Optional[str],
        email: Optional[str],
        full_name: Optional[str],
        password: Optional[str],
        avatar_path: Optional[str],
        cover_image_path: Optional[str] = None
    ) -> User:
        """Регистрация нового пользователя"""
        if any(_is_blank(field) for field in (username, email, full_name, password)):
            raise BadRequestError("All fields are required")

        username = username.strip()
        email = email.strip()
        logger.info(f"Registration attempt for username: {username.lower()}")

        if await self.user_repository.get_by_username_or_email(username=username, email=email):
            logger.warning(f"Registration failed: {username.lower()} or {email.lower()} already exists")
            raise ConflictError("User with email or username already exists")

        if not avatar_path:
            raise BadRequestError("Avatar file is required")

        avatar = await self.media_host.upload(avatar_path)
        cover_image = await self.media_host.upload(cover_image_path)

        if not avatar:
            raise BadRequestError("Avatar file is required")

        user = User.create_user(
            username=username,
            email=email,
            full_name=full_name.strip(),
            password=password,
            avatar=avatar.url,
            cover_image=cover_image.url if cover_image else ""
        )
        await self.user_repository.create(user)

        created_user = await self.user_repository.get_by_uuid(user.uuid)
        if not created_user:
            raise InternalServerError("Something went wrong while registering the user")

        logger.info(f"User created with ID: {created_user.uuid}")
        return created_user

    async def get_user_by_uuid(self, user_uuid: uuid.UUID) -> Optional[User]:
        """Получение пользователя по UUID"""
        return await self.user_repository.get_by_uuid(user_uuid)

    async def update_account_details(self, user: User, update_data: UserUpdate) -> User:
        """Обновление профиля пользователя"""
        if any(
            _is_blank(field)
            for field in (update_data.username, update_data.full_name, update_data.email)
        ):
            raise BadRequestError("All fields are required")

        username = update_data.username.strip()
        email = str(update_data.email).strip()

        if await self.user_repository.exists_other(username, email, exclude_uuid=user.uuid):
            raise ConflictError("User with email or username already exists")

        user.update_profile(username=username, email=email, full_name=update_data.full_name.strip())

        updated = await self.user_repository.update_profile(user)
        if not updated:
            raise NotFoundError("User not found")
        return updated

    async def change_current_password(self, user: User, old_password: str, new_password: str) -> None:
        """Смена пароля пользователя.

        Refresh-токен при этом не отзывается: уже выданная сессия продолжает жить.
        """
        if not user.authenticate(old_password):
            raise BadRequestError("Invalid old password")

        if _is_blank(new_password):
            raise BadRequestError("New password is required")

        user.set_password(new_password)
        await self.user_repository.update_password(user.uuid, user.password_hash)

    async def update_avatar(self, user: User, avatar_path: Optional[str]) -> User:
        if not avatar_path:
            raise BadRequestError("Avatar file is missing")

        return await self._replace_media(user, "avatar", avatar_path)

    async def update_cover_image(self, user: User, cover_image_path: Optional[str]) -> User:
        if not cover_image_path:
            raise BadRequestError("Cover image file is missing")

        return await self._replace_media(user, "cover_image", cover_image_path)

    async def _replace_media(self, user: User, field: str, local_path: str) -> User:
        """Загрузка нового файла, запись URL и удаление старого файла"""
        asset = await self.media_host.upload(local_path)
        if not asset or not asset.url:
            raise BadRequestError(f"Error while uploading {field.replace('_', ' ')}")

        old_url = getattr(user, field)
        updated = await self.user_repository.update_media(user.uuid, **{field: asset.url})
        if not updated:
            raise NotFoundError("User not found")

        old_public_id = public_id_from_url(old_url)
        if old_public_id and old_public_id != asset.public_id:
            if not await self.media_host.destroy(old_public_id):
                logger.warning(f"Old {field} {old_public_id} of user {user.uuid} was not removed")

        return updated
