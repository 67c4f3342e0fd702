"""
Post model for property listing drafts.
"""
from sqlalchemy import Column, String, DateTime, Text, JSON, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import uuid

from ..database import Base
from .enums import PostStatus


class Post(Base):
    __tablename__ = "posts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    project_details = Column(JSON, nullable=True)  # name, price, location, features
    status = Column(String(20), default=PostStatus.DRAFT.value, nullable=False, index=True)
    use_ai_image = Column(Boolean, default=False, nullable=False)
    use_ai_video = Column(Boolean, default=False, nullable=False)
    use_ai_text = Column(Boolean, default=False, nullable=False)
    ai_prompt_override = Column(Text, nullable=True)
    deleted_at = Column(DateTime, nullable=True, index=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), index=True)
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # Relationships
    assets = relationship(
        "Asset",
        back_populates="post",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="[Asset.order, Asset.id]",
    )
    platform_syncs = relationship("PlatformSync", back_populates="post", cascade="all, delete-orphan", passive_deletes=True)
    publishing_queue = relationship("PublishingQueue", back_populates="post", uselist=False, cascade="all, delete-orphan", passive_deletes=True)
    ai_generation_logs = relationship("AiGenerationLog", back_populates="post", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def wants_ai(self) -> bool:
        return bool(self.use_ai_image or self.use_ai_video or self.use_ai_text)

    def to_dict(self, include_relations: bool = False) -> dict:
        """Convert to dictionary for API responses"""
        data = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "projectDetails": self.project_details,
            "status": self.status,
            "useAiImage": self.use_ai_image,
            "useAiVideo": self.use_ai_video,
            "useAiText": self.use_ai_text,
            "aiPromptOverride": self.ai_prompt_override,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
            "deletedAt": _iso(self.deleted_at),
            "assets": [a.to_dict() for a in self.assets],
            "platformSyncs": [s.to_dict() for s in self.platform_syncs],
        }
        if include_relations:
            data["publishingQueue"] = self.publishing_queue.to_dict() if self.publishing_queue else None
            data["aiGenerationLogs"] = [log.to_dict() for log in self.ai_generation_logs]
        return data


def _iso(value):
    return value.isoformat() if value else None
