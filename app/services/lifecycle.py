"""
Post lifecycle rules.

    (new) ──► DRAFT ─────────────┐
      │                          │ publish / regenerate
      └────► PENDING_AI ◄────────┤
               │   │             │
     AI result │   │ FB result   │
               ▼   ▼             │
            READY  PUBLISHED     │
               │                 │
               └─► FAILED ───────┘

Guards raise InvalidStateError; callers translate that into a 400.
"""
from typing import Iterable, Optional

from ..models.enums import PostStatus
from .exceptions import InvalidStateError

EDITABLE_STATUSES = frozenset(s.value for s in (PostStatus.DRAFT, PostStatus.READY, PostStatus.FAILED))

# Statuses in which each callback type is still expected
AWAITING_AI_CONTENT = frozenset({PostStatus.PENDING_AI.value})
AWAITING_FACEBOOK_RESULT = frozenset(s.value for s in (PostStatus.PENDING_AI, PostStatus.READY, PostStatus.DRAFT))


def initial_status(use_ai_image: bool, use_ai_video: bool, use_ai_text: bool) -> PostStatus:
    if use_ai_image or use_ai_video or use_ai_text:
        return PostStatus.PENDING_AI
    return PostStatus.DRAFT


def ensure_editable(post) -> None:
    if post.status not in EDITABLE_STATUSES:
        raise InvalidStateError(f"Cannot edit post with status: {post.status}", post.status)


def ensure_can_regenerate(post) -> None:
    if not post.wants_ai:
        raise InvalidStateError("Post does not have any AI generation enabled", post.status)
    if post.status == PostStatus.PENDING_AI:
        raise InvalidStateError("AI generation is already in progress", post.status)


def ensure_can_publish(post) -> None:
    if post.status == PostStatus.PUBLISHED:
        raise InvalidStateError("Post is already published", post.status)


def ensure_awaiting(post, allowed: Iterable[str], expectation: str) -> None:
    """Reject a callback that arrives for a post no longer waiting on it."""
    if post.status not in allowed:
        raise InvalidStateError(
            f"Post is not {expectation}. Current status: {post.status}", post.status
        )


def status_for_ai_result(result: str) -> PostStatus:
    # Partial output is still usable content
    return PostStatus.FAILED if result == "failed" else PostStatus.READY


def status_for_facebook_result(result: str) -> PostStatus:
    return PostStatus.PUBLISHED if result == "success" else PostStatus.FAILED


def resolve_combined_status(
    post_status: Optional[PostStatus],
    facebook_result: Optional[str],
    overall_result: str,
) -> Optional[PostStatus]:
    """
    Pick the final status for a combined update.

    An explicit post status wins, then the Facebook outcome, then the overall
    generation outcome. None means leave the status alone (partial result
    with nothing else to go on).
    """
    if post_status is not None:
        return PostStatus(post_status)
    if facebook_result is not None:
        return status_for_facebook_result(facebook_result)
    if overall_result == "success":
        return PostStatus.READY
    if overall_result == "failed":
        return PostStatus.FAILED
    return None


def ensure_publish_recorded(target: PostStatus, has_facebook_data: bool, already_synced: bool) -> None:
    """A post may only be forced to PUBLISHED when some publish result backs it."""
    if target == PostStatus.PUBLISHED and not (has_facebook_data or already_synced):
        raise InvalidStateError(
            "Cannot mark post PUBLISHED without a recorded Facebook publish"
        )
