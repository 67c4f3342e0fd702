"""
Status and type vocabularies shared by models, schemas and services.

Values are stored as plain strings in the database.
"""
from enum import Enum


class PostStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING_AI = "PENDING_AI"
    READY = "READY"
    PUBLISHED = "PUBLISHED"
    FAILED = "FAILED"


class AssetType(str, Enum):
    IMG = "IMG"
    VID = "VID"


class AssetSource(str, Enum):
    MANUAL = "MANUAL"
    AI = "AI"


class ProcessingStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class Platform(str, Enum):
    FACEBOOK = "FACEBOOK"
    INSTAGRAM = "INSTAGRAM"
    TIKTOK = "TIKTOK"


class SyncStatus(str, Enum):
    PENDING = "PENDING"
    SYNCING = "SYNCING"
    SYNCED = "SYNCED"
    FAILED = "FAILED"


class QueueStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class GenerationType(str, Enum):
    TEXT = "TEXT"
    IMAGE = "IMAGE"
    VIDEO = "VIDEO"


class GenerationStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
