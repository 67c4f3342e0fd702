"""
Publishing queue entry (one per post).
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from ..database import Base
from .enums import QueueStatus


class PublishingQueue(Base):
    __tablename__ = "publishing_queue"

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(String(36), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, unique=True)
    status = Column(String(20), default=QueueStatus.PENDING.value, nullable=False, index=True)
    scheduled_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    processed_at = Column(DateTime, nullable=True)
    error_message = Column(Text, nullable=True)
    retry_count = Column(Integer, default=0, nullable=False)
    max_retries = Column(Integer, default=3, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # Relationships
    post = relationship("Post", back_populates="publishing_queue")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "status": self.status,
            "scheduledAt": self.scheduled_at.isoformat() if self.scheduled_at else None,
            "processedAt": self.processed_at.isoformat() if self.processed_at else None,
            "errorMessage": self.error_message,
            "retryCount": self.retry_count,
            "maxRetries": self.max_retries,
        }
