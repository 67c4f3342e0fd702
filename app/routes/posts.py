"""
Posts routes: CRUD plus the publish / regenerate lifecycle actions.
"""
from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Literal, Optional

from ..database import get_db, get_session_factory
from ..dependencies import get_automation_client, get_storage_service
from ..logging_config import api_logger
from ..models.enums import AssetSource, PostStatus
from ..responses import not_found, paginated, server_error, success
from ..schemas.posts import AssetReorder, PostCreate, PostUpdate
from ..services import asset_service, lifecycle, post_service
from ..services.automation import ACTION_GENERATE, ACTION_PUBLISH, AutomationClient
from ..services.dispatch import dispatch_trigger
from ..services.storage import BUCKET_AI, StorageService

router = APIRouter(prefix="/api/posts", tags=["posts"])


@router.get("")
def list_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    sort_by: Literal["createdAt", "updatedAt", "title", "status"] = Query("createdAt", alias="sortBy"),
    order: Literal["asc", "desc"] = "desc",
    status: Optional[List[PostStatus]] = Query(None),
    search: Optional[str] = None,
    include_deleted: bool = Query(False, alias="includeDeleted"),
    db: Session = Depends(get_db),
):
    """List posts with pagination, status filter and title/description search."""
    items, total = post_service.list_posts(
        db,
        page=page,
        limit=limit,
        sort_by=sort_by,
        order=order,
        statuses=[s.value for s in status] if status else None,
        search=search or None,
        include_deleted=include_deleted,
    )
    return paginated([p.to_dict() for p in items], total, page, limit)


@router.get("/stats")
def get_post_stats(db: Session = Depends(get_db)):
    """Number of live posts in each status."""
    return success(post_service.count_by_status(db))


@router.post("", status_code=201)
def create_post(
    post_data: PostCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    client: AutomationClient = Depends(get_automation_client),
    session_factory=Depends(get_session_factory),
):
    """Create a post. Posts asking for AI content start in PENDING_AI and trigger the workflow."""
    post = post_service.create_post(db, post_data.model_dump())

    if post.status == PostStatus.PENDING_AI.value:
        background_tasks.add_task(dispatch_trigger, client, session_factory, post.id, ACTION_GENERATE)
        api_logger.info("AI generation queued", post_id=post.id)

    return success(post.to_dict())


@router.get("/{post_id}")
def get_post(post_id: str, db: Session = Depends(get_db)):
    """Get a post with its assets, platform syncs, queue entry and generation logs."""
    post = post_service.get_post_or_raise(db, post_id)
    return success(post.to_dict(include_relations=True))


@router.put("/{post_id}")
def update_post(
    post_id: str,
    post_update: PostUpdate,
    db: Session = Depends(get_db),
):
    """Edit a post. Only DRAFT, READY and FAILED posts are editable."""
    post = post_service.get_post_or_raise(db, post_id)
    lifecycle.ensure_editable(post)

    post = post_service.update_post(db, post, post_update.model_dump(exclude_unset=True))
    return success(post.to_dict())


@router.delete("/{post_id}")
def delete_post(post_id: str, db: Session = Depends(get_db)):
    """Soft delete a post."""
    post = post_service.get_post_or_raise(db, post_id)
    post_service.soft_delete_post(db, post)
    return success(message="Post deleted successfully")


@router.post("/{post_id}/publish")
def publish_post(
    post_id: str,
    db: Session = Depends(get_db),
    client: AutomationClient = Depends(get_automation_client),
):
    """Hand the post to the workflow for Facebook publishing."""
    post = post_service.get_post_or_raise(db, post_id)
    lifecycle.ensure_can_publish(post)

    assets = asset_service.list_for_post(db, post_id)
    if not client.trigger(post, assets, ACTION_PUBLISH):
        server_error("Failed to trigger publishing workflow")

    post = post_service.set_status(db, post, PostStatus.PENDING_AI)
    return success({"post": post.to_dict()}, message="Publishing started")


@router.post("/{post_id}/regenerate")
def regenerate_post(
    post_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    client: AutomationClient = Depends(get_automation_client),
    session_factory=Depends(get_session_factory),
    storage: StorageService = Depends(get_storage_service),
):
    """Drop AI assets and ask the workflow for fresh AI content."""
    post = post_service.get_post_or_raise(db, post_id)
    lifecycle.ensure_can_regenerate(post)

    try:
        asset_service.delete_by_source(db, post_id, AssetSource.AI, commit=False)
        post_service.set_status(db, post, PostStatus.PENDING_AI, commit=False)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(post)

    storage.delete_post_files(post_id, buckets=(BUCKET_AI,))
    background_tasks.add_task(dispatch_trigger, client, session_factory, post_id, ACTION_GENERATE)
    return success({"post": post.to_dict()}, message="AI regeneration started")


# ============================================================
# ASSETS
# ============================================================

@router.get("/{post_id}/assets")
def list_post_assets(
    post_id: str,
    source: Optional[AssetSource] = None,
    db: Session = Depends(get_db),
):
    """Assets in display order."""
    post_service.get_post_or_raise(db, post_id)
    return success([a.to_dict() for a in asset_service.list_for_post(db, post_id, source)])


@router.put("/{post_id}/assets/order")
def reorder_post_assets(
    post_id: str,
    body: AssetReorder,
    db: Session = Depends(get_db),
):
    """Reassign display order from the given id sequence."""
    post_service.get_post_or_raise(db, post_id)
    assets = asset_service.reorder_assets(db, post_id, body.asset_ids)
    return success([a.to_dict() for a in assets])


@router.delete("/{post_id}/assets/{asset_id}")
def delete_post_asset(
    post_id: str,
    asset_id: int,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
):
    """Delete one asset; manual uploads are removed from storage as well."""
    post_service.get_post_or_raise(db, post_id)
    asset = asset_service.get_asset(db, asset_id)
    if asset is None or asset.post_id != post_id:
        not_found("Asset not found")

    if asset.source == AssetSource.MANUAL.value:
        path = storage.path_for_url(asset.url)
        if path and not storage.delete_file(path):
            api_logger.warning("Stored file left behind", asset_id=asset_id, path=path)

    asset_service.delete_asset(db, asset)
    return success(message="Asset deleted successfully")
