from .posts import router as posts_router
from .upload import router as upload_router
from .callbacks import router as callbacks_router

__all__ = [
    "posts_router",
    "upload_router",
    "callbacks_router",
]
