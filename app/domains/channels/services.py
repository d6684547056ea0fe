from typing import List
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import BadRequestError, NotFoundError
from app.db.repositories.channel_repository import ChannelRepository
from app.domains.channels.schemas import ChannelProfile, WatchedVideo
from app.domains.identity.entities import User


class ChannelService:
    """Сервис read-моделей: профиль канала и история просмотров"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.channel_repository = ChannelRepository(session)

    async def get_channel_profile(self, username: str, viewer: User) -> ChannelProfile:
        """Профиль канала по username"""
        if not username or not username.strip():
            raise BadRequestError("username is missing")

        profile = await self.channel_repository.get_channel_profile(
            username.strip(), viewer_uuid=viewer.uuid if viewer else None
        )
        if not profile:
            raise NotFoundError("channel does not exist")

        return ChannelProfile(**profile)

    async def get_watch_history(self, user: User) -> List[WatchedVideo]:
        """История просмотров текущего пользователя"""
        history = await self.channel_repository.get_watch_history(user.uuid)
        return [WatchedVideo(**entry) for entry in history]
