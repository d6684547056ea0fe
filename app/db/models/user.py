from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from app.db.base import BaseModel


class User(BaseModel):
    __tablename__ = "users"

    username = Column(String(100), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), index=True, nullable=False)
    avatar = Column(String(1024), nullable=False)
    cover_image = Column(String(1024), default="")
    password_hash = Column(String(255), nullable=False)
    refresh_token = Column(String(1024), nullable=True)

    # Relationships
    videos = relationship("Video", back_populates="owner", cascade="all, delete-orphan")
    watch_history = relationship(
        "WatchHistoryEntry",
        order_by="WatchHistoryEntry.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
