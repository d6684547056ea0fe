from typing import Optional, List, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, literal
from sqlalchemy.orm import aliased
import uuid

from app.db.models.user import User as UserModel
from app.db.models.video import Video as VideoModel, WatchHistoryEntry
from app.db.models.subscription import Subscription


class ChannelRepository:
    """Read-model запросы: профиль канала и история просмотров.

    Каждый запрос собирается по стадиям: отбор, присоединение рёбер
    подписок или видео, вычисляемые поля, проекция.
    """

    CHANNEL_FIELDS = (
        "full_name",
        "username",
        "subscribers_count",
        "channels_subscribed_to_count",
        "is_subscribed",
        "avatar",
        "cover_image",
        "email",
    )

    OWNER_FIELDS = ("full_name", "username", "avatar")

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_channel_profile(
        self,
        username: str,
        viewer_uuid: Optional[uuid.UUID]
    ) -> Optional[Dict[str, Any]]:
        """Профиль канала со счётчиками подписок"""
        # match
        channel = UserModel
        match = UserModel.username == username.lower()

        # lookup: подписчики канала
        subscribers_count = (
            select(func.count(Subscription.uuid))
            .where(Subscription.channel_id == channel.uuid)
            .correlate(channel)
            .scalar_subquery()
        )

        # lookup: на кого подписан сам канал
        subscribed_to_count = (
            select(func.count(Subscription.uuid))
            .where(Subscription.subscriber_id == channel.uuid)
            .correlate(channel)
            .scalar_subquery()
        )

        # addFields: входит ли смотрящий в подписчики
        if viewer_uuid is None:
            is_subscribed = literal(False)
        else:
            is_subscribed = (
                select(Subscription.uuid)
                .where(
                    Subscription.channel_id == channel.uuid,
                    Subscription.subscriber_id == viewer_uuid
                )
                .exists()
            )

        # project
        stmt = select(
            channel.uuid.label("id"),
            channel.full_name.label("full_name"),
            channel.username.label("username"),
            subscribers_count.label("subscribers_count"),
            subscribed_to_count.label("channels_subscribed_to_count"),
            is_subscribed.label("is_subscribed"),
            channel.avatar.label("avatar"),
            channel.cover_image.label("cover_image"),
            channel.email.label("email"),
        ).where(match)

        result = await self.session.execute(stmt)
        row = result.mappings().first()
        if row is None:
            return None

        profile = {"id": row["id"]}
        profile.update({field: row[field] for field in self.CHANNEL_FIELDS})
        profile["is_subscribed"] = bool(profile["is_subscribed"])
        profile["cover_image"] = profile["cover_image"] or ""
        return profile

    async def get_watch_history(self, user_uuid: uuid.UUID) -> List[Dict[str, Any]]:
        """История просмотров в порядке добавления, с владельцем каждого видео"""
        owner = aliased(UserModel)

        # lookup: видео из истории пользователя
        stmt = (
            select(VideoModel, owner.full_name, owner.username, owner.avatar)
            .join(WatchHistoryEntry, WatchHistoryEntry.video_id == VideoModel.uuid)
            # lookup: владелец видео, урезанный до публичных полей
            .outerjoin(owner, owner.uuid == VideoModel.owner_id)
            .where(WatchHistoryEntry.user_id == user_uuid)
            .order_by(WatchHistoryEntry.position)
        )

        result = await self.session.execute(stmt)

        history = []
        for video, full_name, username, avatar in result.all():
            # addFields: owner = первый элемент присоединённого массива
            owner_doc = None
            if username is not None:
                owner_doc = dict(zip(self.OWNER_FIELDS, (full_name, username, avatar)))

            history.append({
                "id": video.uuid,
                "video_file": video.video_file,
                "thumbnail": video.thumbnail,
                "title": video.title,
                "description": video.description,
                "duration": video.duration,
                "views": video.views,
                "is_published": video.is_published,
                "owner": owner_doc,
                "created_at": video.created_at,
                "updated_at": video.updated_at,
            })

        return history
