from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, or_, func
from sqlalchemy.exc import IntegrityError
import uuid

from app.core.errors import ConflictError
from app.db.models.user import User as UserModel
from app.db.models.video import WatchHistoryEntry
from app.domains.identity.entities import User


class UserRepository:
    """Репозиторий для работы с пользователями"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user: User) -> User:
        """Создание нового пользователя"""
        db_user = self._to_model(user)

        self.session.add(db_user)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ConflictError("User with email or username already exists")

        return await self.get_by_uuid(user.uuid)

    async def get_by_uuid(self, user_uuid: uuid.UUID) -> Optional[User]:
        """Получение пользователя по UUID"""
        result = await self.session.execute(
            select(UserModel)
            .where(UserModel.uuid == user_uuid)
            .execution_options(populate_existing=True)
        )
        db_user = result.scalar_one_or_none()
        return self._to_domain(db_user) if db_user else None

    async def get_by_username_or_email(
        self,
        username: Optional[str] = None,
        email: Optional[str] = None
    ) -> Optional[User]:
        """Поиск по username или email (без учёта регистра)"""
        conditions = []
        if username:
            conditions.append(UserModel.username == username.lower())
        if email:
            conditions.append(UserModel.email == email.lower())
        if not conditions:
            return None

        result = await self.session.execute(
            select(UserModel)
            .where(or_(*conditions))
            .limit(1)
            .execution_options(populate_existing=True)
        )
        db_user = result.scalar_one_or_none()
        return self._to_domain(db_user) if db_user else None

    async def exists_other(self, username: str, email: str, exclude_uuid: uuid.UUID) -> bool:
        """Занят ли username или email другим пользователем"""
        result = await self.session.execute(
            select(UserModel.uuid).where(
                or_(UserModel.username == username.lower(), UserModel.email == email.lower()),
                UserModel.uuid != exclude_uuid
            ).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def update_profile(self, user: User) -> Optional[User]:
        """Обновление полей профиля"""
        return await self._update(
            user.uuid,
            username=user.username,
            email=user.email,
            full_name=user.full_name
        )

    async def update_password(self, user_uuid: uuid.UUID, password_hash: str) -> Optional[User]:
        return await self._update(user_uuid, password_hash=password_hash)

    async def update_media(self, user_uuid: uuid.UUID, **fields) -> Optional[User]:
        """Обновление avatar / cover_image"""
        return await self._update(user_uuid, **fields)

    async def set_refresh_token(self, user_uuid: uuid.UUID, refresh_token: Optional[str]) -> None:
        """Запись текущего refresh-токена; None снимает сессию"""
        await self.session.execute(
            update(UserModel)
            .where(UserModel.uuid == user_uuid)
            .values(refresh_token=refresh_token)
        )
        await self.session.commit()

    async def rotate_refresh_token(self, user_uuid: uuid.UUID, expected: str, new_token: str) -> bool:
        """Замена refresh-токена, только если в БД всё ещё лежит expected"""
        result = await self.session.execute(
            update(UserModel)
            .where(UserModel.uuid == user_uuid, UserModel.refresh_token == expected)
            .values(refresh_token=new_token)
        )
        await self.session.commit()
        return result.rowcount == 1

    async def add_to_watch_history(self, user_uuid: uuid.UUID, video_uuid: uuid.UUID) -> None:
        """Добавление видео в конец истории просмотров"""
        result = await self.session.execute(
            select(func.max(WatchHistoryEntry.position)).where(WatchHistoryEntry.user_id == user_uuid)
        )
        last_position = result.scalar_one_or_none()
        position = 0 if last_position is None else last_position + 1

        self.session.add(WatchHistoryEntry(user_id=user_uuid, video_id=video_uuid, position=position))
        await self.session.commit()

    async def _update(self, user_uuid: uuid.UUID, **values) -> Optional[User]:
        try:
            await self.session.execute(
                update(UserModel)
                .where(UserModel.uuid == user_uuid)
                .values(**values, updated_at=func.now())
            )
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ConflictError("User with email or username already exists")

        return await self.get_by_uuid(user_uuid)

    def _to_domain(self, db_user: UserModel) -> User:
        """Преобразование модели БД в доменную сущность"""
        return User(
            uuid=db_user.uuid,
            username=db_user.username,
            email=db_user.email,
            full_name=db_user.full_name,
            avatar=db_user.avatar,
            cover_image=db_user.cover_image,
            password_hash=db_user.password_hash,
            refresh_token=db_user.refresh_token,
            watch_history=[entry.video_id for entry in db_user.watch_history],
            created_at=db_user.created_at,
            updated_at=db_user.updated_at
        )

    def _to_model(self, user: User) -> UserModel:
        """Преобразование доменной сущности в модель БД"""
        return UserModel(
            uuid=user.uuid,
            username=user.username,
            email=user.email,
            full_name=user.full_name,
            avatar=user.avatar,
            cover_image=user.cover_image,
            password_hash=user.password_hash,
            refresh_token=user.refresh_token
        )
