from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime
import uuid


class ChannelProfile(BaseModel):
    """Профиль канала"""
    id: uuid.UUID
    full_name: str
    username: str
    subscribers_count: int
    channels_subscribed_to_count: int
    is_subscribed: bool
    avatar: str
    cover_image: str = ""
    email: str

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VideoOwner(BaseModel):
    """Публичная проекция владельца видео"""
    full_name: str
    username: str
    avatar: str

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WatchedVideo(BaseModel):
    """Видео из истории просмотров"""
    id: uuid.UUID
    video_file: str
    thumbnail: str
    title: str
    description: Optional[str] = ""
    duration: float = 0
    views: int = 0
    is_published: bool = True
    owner: Optional[VideoOwner] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
