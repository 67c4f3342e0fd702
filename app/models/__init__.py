from .post import Post
from .asset import Asset
from .platform_sync import PlatformSync
from .publishing_queue import PublishingQueue
from .ai_generation_log import AiGenerationLog

__all__ = [
    "Post",
    "Asset",
    "PlatformSync",
    "PublishingQueue",
    "AiGenerationLog",
]
