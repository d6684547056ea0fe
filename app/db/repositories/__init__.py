from app.db.repositories.user_repository import UserRepository
from app.db.repositories.channel_repository import ChannelRepository

__all__ = [
    "UserRepository",
    "ChannelRepository"
]
