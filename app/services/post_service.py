"""
Post repository: creation, lookup, listing and status transitions.
"""
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ..logging_config import db_logger
from ..models.enums import PostStatus
from ..models.post import Post
from . import lifecycle
from .exceptions import PostNotFoundError

SORTABLE_FIELDS = {
    "createdAt": Post.created_at,
    "updatedAt": Post.updated_at,
    "title": Post.title,
    "status": Post.status,
}

UPDATABLE_FIELDS = (
    "title", "description", "project_details", "use_ai_image",
    "use_ai_video", "use_ai_text", "ai_prompt_override",
)


def _finish(db: Session, commit: bool) -> None:
    if commit:
        db.commit()
    else:
        db.flush()


def create_post(db: Session, data: Dict) -> Post:
    """Create a post; status is derived from its AI flags."""
    use_ai_image = bool(data.get("use_ai_image", False))
    use_ai_video = bool(data.get("use_ai_video", False))
    use_ai_text = bool(data.get("use_ai_text", False))

    post = Post(
        title=data["title"],
        description=data.get("description"),
        project_details=data.get("project_details"),
        use_ai_image=use_ai_image,
        use_ai_video=use_ai_video,
        use_ai_text=use_ai_text,
        ai_prompt_override=data.get("ai_prompt_override"),
        status=lifecycle.initial_status(use_ai_image, use_ai_video, use_ai_text).value,
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    db_logger.info("Post created", post_id=post.id, status=post.status)
    return post


def get_post(db: Session, post_id: str, include_deleted: bool = False) -> Optional[Post]:
    query = db.query(Post).filter(Post.id == str(post_id))
    if not include_deleted:
        query = query.filter(Post.deleted_at.is_(None))
    return query.first()


def get_post_or_raise(db: Session, post_id: str, include_deleted: bool = False) -> Post:
    post = get_post(db, post_id, include_deleted=include_deleted)
    if post is None:
        raise PostNotFoundError(str(post_id))
    return post


def list_posts(
    db: Session,
    page: int = 1,
    limit: int = 20,
    sort_by: str = "createdAt",
    order: str = "desc",
    statuses: Optional[Sequence[str]] = None,
    search: Optional[str] = None,
    include_deleted: bool = False,
) -> Tuple[List[Post], int]:
    """Return one page of posts plus the total number of matches."""
    query = db.query(Post)

    if not include_deleted:
        query = query.filter(Post.deleted_at.is_(None))
    if statuses:
        query = query.filter(Post.status.in_([PostStatus(s).value for s in statuses]))
    if search:
        # autoescape: % and _ in the search text match literally
        query = query.filter(or_(
            Post.title.icontains(search, autoescape=True),
            Post.description.icontains(search, autoescape=True),
        ))

    total = query.count()

    column = SORTABLE_FIELDS.get(sort_by, Post.created_at)
    direction = column.asc() if order == "asc" else column.desc()
    # id as a tiebreaker keeps pages disjoint when sort keys collide
    tiebreak = Post.id.asc() if order == "asc" else Post.id.desc()

    items = (
        query.order_by(direction, tiebreak)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return items, total


def update_post(db: Session, post: Post, fields: Dict, commit: bool = True) -> Post:
    """Apply field edits. Guarding on status is the caller's job."""
    for key, value in fields.items():
        if key in UPDATABLE_FIELDS:
            setattr(post, key, value)
    _finish(db, commit)
    if commit:
        db.refresh(post)
    return post


def set_status(db: Session, post: Post, status: PostStatus, commit: bool = True) -> Post:
    previous = post.status
    post.status = PostStatus(status).value
    _finish(db, commit)
    if commit:
        db.refresh(post)
    db_logger.info("Post status changed", post_id=post.id, previous=previous, status=post.status)
    return post


def mark_failed(db: Session, post_id: str, reason: str) -> Optional[Post]:
    """
    Move a post that is still waiting on the workflow to FAILED.

    Posts that already moved on (a callback beat us here) are left untouched.
    """
    post = get_post(db, post_id)
    if post is None:
        return None
    if post.status != PostStatus.PENDING_AI.value:
        db_logger.warning("Skipping FAILED transition", post_id=post_id, status=post.status, reason=reason)
        return post
    db_logger.warning("Marking post FAILED", post_id=post_id, reason=reason)
    return set_status(db, post, PostStatus.FAILED)


def soft_delete_post(db: Session, post: Post) -> Post:
    post.deleted_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(post)
    return post


def hard_delete_post(db: Session, post: Post) -> None:
    """Physically remove a post; assets and sync rows cascade."""
    db.delete(post)
    db.commit()


def count_by_status(db: Session) -> Dict[str, int]:
    counts = {status.value: 0 for status in PostStatus}
    rows = (
        db.query(Post.status, func.count(Post.id))
        .filter(Post.deleted_at.is_(None))
        .group_by(Post.status)
        .all()
    )
    for status, count in rows:
        counts[status] = count
    return counts
