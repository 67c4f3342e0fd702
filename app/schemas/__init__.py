from .posts import ProjectDetails, PostCreate, PostUpdate, AssetReorder
from .webhooks import AiContentCallback, FacebookPublishedCallback, CombinedUpdateCallback

__all__ = [
    "ProjectDetails", "PostCreate", "PostUpdate", "AssetReorder",
    "AiContentCallback", "FacebookPublishedCallback", "CombinedUpdateCallback",
]
