"""
Cost and duration accounting for a single AI generation.
"""
from sqlalchemy import Column, Integer, String, DateTime, Float, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from ..database import Base
from .enums import GenerationStatus


class AiGenerationLog(Base):
    __tablename__ = "ai_generation_logs"

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(String(36), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    generation_type = Column(String(10), nullable=False)  # TEXT, IMAGE, VIDEO
    prompt = Column(Text, nullable=True)
    result_url = Column(String(1000), nullable=True)
    cost = Column(Float, nullable=True)
    duration = Column(Float, nullable=True)  # seconds
    tokens_used = Column(Integer, nullable=True)
    status = Column(String(20), default=GenerationStatus.PENDING.value, nullable=False)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    completed_at = Column(DateTime, nullable=True)

    # Relationships
    post = relationship("Post", back_populates="ai_generation_logs")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "generationType": self.generation_type,
            "prompt": self.prompt,
            "resultUrl": self.result_url,
            "cost": self.cost,
            "duration": self.duration,
            "tokensUsed": self.tokens_used,
            "status": self.status,
            "errorMessage": self.error_message,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
        }
