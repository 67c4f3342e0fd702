"""
Asset model for images and videos attached to a post.
"""
from sqlalchemy import Column, Integer, String, DateTime, BigInteger, Float, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from ..database import Base
from .enums import ProcessingStatus


class Asset(Base):
    __tablename__ = "assets"

    id = Column(Integer, primary_key=True, index=True)  # autoincrement, also breaks order ties
    post_id = Column(String(36), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    url = Column(String(1000), nullable=False)
    type = Column(String(10), nullable=False)  # IMG, VID
    source = Column(String(10), nullable=False, index=True)  # MANUAL, AI
    order = Column(Integer, default=0, nullable=False)
    file_name = Column(String(255), nullable=True)
    file_size = Column(BigInteger, nullable=True)  # in bytes
    mime_type = Column(String(100), nullable=True)
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    duration = Column(Float, nullable=True)  # seconds
    processing_status = Column(String(20), default=ProcessingStatus.COMPLETED.value, nullable=False)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # Relationships
    post = relationship("Post", back_populates="assets")

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses"""
        return {
            "id": self.id,
            "postId": self.post_id,
            "url": self.url,
            "type": self.type,
            "source": self.source,
            "order": self.order,
            "fileName": self.file_name,
            "fileSize": self.file_size,
            "mimeType": self.mime_type,
            "width": self.width,
            "height": self.height,
            "duration": self.duration,
            "processingStatus": self.processing_status,
            "errorMessage": self.error_message,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
