"""
Domain errors raised by the service layer and mapped to HTTP codes in responses.py.
"""


class ListingHubError(Exception):
    """Base class for service-layer errors."""


class PostNotFoundError(ListingHubError):
    def __init__(self, post_id: str):
        self.post_id = post_id
        super().__init__("Post not found")


class InvalidStateError(ListingHubError):
    """The post's current status does not allow the requested operation."""

    def __init__(self, message: str, status: str = None):
        self.status = status
        super().__init__(message)


class AssetOwnershipError(ListingHubError):
    def __init__(self, asset_id: str, post_id: str):
        self.asset_id = asset_id
        self.post_id = post_id
        super().__init__(f"Asset '{asset_id}' does not belong to post '{post_id}'")


class StorageError(ListingHubError):
    """Object storage rejected an upload or delete."""
