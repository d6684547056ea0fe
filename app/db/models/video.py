from sqlalchemy import Column, String, Text, Integer, Float, Boolean, ForeignKey, UUID
from sqlalchemy.orm import relationship

from app.db.base import BaseModel


class Video(BaseModel):
    __tablename__ = "videos"

    video_file = Column(String(1024), nullable=False)
    thumbnail = Column(String(1024), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, default="")
    duration = Column(Float, default=0)
    views = Column(Integer, default=0)
    is_published = Column(Boolean, default=True)
    owner_id = Column(UUID(as_uuid=True), ForeignKey("users.uuid"), nullable=False)

    # Relationships
    owner = relationship("User", back_populates="videos")


class WatchHistoryEntry(BaseModel):
    __tablename__ = "watch_history"

    user_id = Column(UUID(as_uuid=True), ForeignKey("users.uuid"), nullable=False, index=True)
    video_id = Column(UUID(as_uuid=True), ForeignKey("videos.uuid"), nullable=False)
    position = Column(Integer, nullable=False)
