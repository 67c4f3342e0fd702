"""
Per-platform publication record for a post.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from ..database import Base
from .enums import SyncStatus


class PlatformSync(Base):
    __tablename__ = "platform_syncs"
    __table_args__ = (
        UniqueConstraint("post_id", "platform", name="uq_platform_syncs_post_platform"),
    )

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(String(36), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    platform = Column(String(20), nullable=False)  # FACEBOOK, INSTAGRAM, TIKTOK
    external_id = Column(String(255), nullable=True)
    external_url = Column(String(1000), nullable=True)
    sync_status = Column(String(20), default=SyncStatus.PENDING.value, nullable=False)
    likes = Column(Integer, default=0, nullable=False)
    comments = Column(Integer, default=0, nullable=False)
    shares = Column(Integer, default=0, nullable=False)
    views = Column(Integer, default=0, nullable=False)
    sync_error = Column(Text, nullable=True)
    retry_count = Column(Integer, default=0, nullable=False)
    last_synced_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # Relationships
    post = relationship("Post", back_populates="platform_syncs")

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses"""
        return {
            "id": self.id,
            "postId": self.post_id,
            "platform": self.platform,
            "externalId": self.external_id,
            "externalUrl": self.external_url,
            "syncStatus": self.sync_status,
            "likes": self.likes,
            "comments": self.comments,
            "shares": self.shares,
            "views": self.views,
            "syncError": self.sync_error,
            "retryCount": self.retry_count,
            "lastSyncedAt": self.last_synced_at.isoformat() if self.last_synced_at else None,
        }
