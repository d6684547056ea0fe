from sqlalchemy import Column, ForeignKey, UUID, UniqueConstraint

from app.db.base import BaseModel


class Subscription(BaseModel):
    """Ребро подписки: subscriber подписан на channel"""
    __tablename__ = "subscriptions"
    __table_args__ = (UniqueConstraint("subscriber_id", "channel_id"),)

    subscriber_id = Column(UUID(as_uuid=True), ForeignKey("users.uuid"), nullable=False, index=True)
    channel_id = Column(UUID(as_uuid=True), ForeignKey("users.uuid"), nullable=False, index=True)
