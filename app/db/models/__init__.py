from app.db.models.user import User
from app.db.models.video import Video, WatchHistoryEntry
from app.db.models.subscription import Subscription

__all__ = [
    "User",
    "Video",
    "WatchHistoryEntry",
    "Subscription"
]
