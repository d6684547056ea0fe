from app.domains.channels.schemas import ChannelProfile, VideoOwner, WatchedVideo

__all__ = [
    "ChannelProfile", "VideoOwner", "WatchedVideo"
]
