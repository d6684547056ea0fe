from app.infrastructure.media.cloudinary import MediaAsset, MediaHost, get_media_host
from app.infrastructure.media.uploads import stage_upload

__all__ = [
    "MediaAsset",
    "MediaHost",
    "get_media_host",
    "stage_upload"
]
