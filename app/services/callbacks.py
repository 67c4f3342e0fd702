"""
Workflow Callback Processing
============================
Applies results reported by the automation workflow to posts, assets and
platform sync records.

Each handler runs as a single transaction on the given session: either every
write lands or, on any error, the session is rolled back and nothing does.
"""

import hmac
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from ..config import Settings
from ..logging_config import webhook_logger
from ..models.enums import AssetSource, AssetType, Platform, PostStatus, SyncStatus
from ..models.platform_sync import PlatformSync
from ..schemas.webhooks import (
    AiContentCallback,
    CombinedUpdateCallback,
    FacebookPublishedCallback,
    GeneratedContent,
)
from . import asset_service, lifecycle, post_service

# AI videos start past the image block so they always sort after images
AI_VIDEO_ORDER_OFFSET = 100

FACEBOOK_FAILED_MESSAGE = "Facebook publishing failed"


def verify_shared_secret(settings: Settings, provided: Optional[str]) -> bool:
    """
    Check the X-API-Key header against the configured secret.

    With no secret configured every caller is accepted; only acceptable in
    development (production startup refuses this configuration).
    """
    expected = settings.n8n_api_key
    if not expected:
        webhook_logger.warning("N8N_API_KEY not configured, skipping callback verification")
        return True
    return hmac.compare_digest((provided or "").encode("utf-8"), expected.encode("utf-8"))


# ============================================================
# SHARED STEPS
# ============================================================

def _image_asset(url, order: int, number: int) -> Dict:
    return {
        "url": str(url),
        "type": AssetType.IMG,
        "source": AssetSource.AI,
        "order": order,
        "file_name": f"ai-generated-image-{number}.png",
    }


def _video_asset(url, order: int, number: int, duration: Optional[float]) -> Dict:
    return {
        "url": str(url),
        "type": AssetType.VID,
        "source": AssetSource.AI,
        "order": order,
        "file_name": f"ai-generated-video-{number}.mp4",
        "duration": duration,
    }


def upsert_platform_sync(
    db: Session,
    post_id: str,
    platform: Platform,
    external_id: str,
    external_url: str,
    succeeded: bool,
) -> PlatformSync:
    """Insert or update the (post, platform) row inside the caller's transaction."""
    sync = (
        db.query(PlatformSync)
        .filter(PlatformSync.post_id == post_id, PlatformSync.platform == platform.value)
        .first()
    )
    if sync is None:
        sync = PlatformSync(post_id=post_id, platform=platform.value)
        db.add(sync)

    sync.external_id = external_id
    sync.external_url = external_url
    sync.sync_status = (SyncStatus.SYNCED if succeeded else SyncStatus.FAILED).value
    sync.sync_error = None if succeeded else FACEBOOK_FAILED_MESSAGE
    sync.last_synced_at = datetime.now(timezone.utc)
    db.flush()
    return sync


def _log_reported_errors(post_id: str, errors: List) -> None:
    for err in errors:
        webhook_logger.warning("Workflow reported error", post_id=post_id, error_type=err.type, error_message=err.message)


# ============================================================
# HANDLERS
# ============================================================

def apply_ai_content(db: Session, payload: AiContentCallback) -> Dict:
    """AI generation finished (or failed) for a post waiting in PENDING_AI."""
    post_id = str(payload.post_id)
    post = post_service.get_post_or_raise(db, post_id)
    lifecycle.ensure_awaiting(post, lifecycle.AWAITING_AI_CONTENT, "pending AI generation")

    content = payload.generated_content
    new_status = lifecycle.status_for_ai_result(payload.status)
    assets: List[Dict] = []

    try:
        if new_status == PostStatus.READY:
            assets = [
                _image_asset(img.url, order=i, number=i + 1)
                for i, img in enumerate(content.images)
            ] + [
                _video_asset(vid.url, order=AI_VIDEO_ORDER_OFFSET + i, number=i + 1, duration=vid.duration)
                for i, vid in enumerate(content.videos)
            ]
            if assets:
                asset_service.create_assets(db, post_id, assets, commit=False)
            if content.text:
                post_service.update_post(db, post, {"description": content.text}, commit=False)

        post_service.set_status(db, post, new_status, commit=False)
        db.commit()
    except Exception:
        db.rollback()
        raise

    _log_reported_errors(post_id, payload.errors)
    webhook_logger.info(
        "AI content callback processed",
        post_id=post_id,
        result=payload.status,
        assets_created=len(assets),
        has_text=bool(content.text),
    )
    return {
        "postId": post_id,
        "status": new_status.value,
        "assetsCreated": len(assets),
    }


def apply_facebook_published(db: Session, payload: FacebookPublishedCallback) -> Dict:
    """Facebook publish outcome for a post that has not been resolved yet."""
    post_id = str(payload.post_id)
    post = post_service.get_post_or_raise(db, post_id)
    lifecycle.ensure_awaiting(post, lifecycle.AWAITING_FACEBOOK_RESULT, "in a publishable state")

    new_status = lifecycle.status_for_facebook_result(payload.status)
    try:
        post_service.set_status(db, post, new_status, commit=False)
        upsert_platform_sync(
            db,
            post_id,
            Platform.FACEBOOK,
            external_id=payload.facebook_post_id,
            external_url=str(payload.facebook_post_url),
            succeeded=payload.status == "success",
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    webhook_logger.info(
        "Facebook publish callback processed",
        post_id=post_id,
        result=payload.status,
        facebook_post_id=payload.facebook_post_id,
    )
    return {"postId": post_id, "status": new_status.value}


def _combined_assets(content: Optional[GeneratedContent], start_order: int) -> List[Dict]:
    if content is None:
        return []
    cursor = start_order
    assets = []
    for img in content.images:
        assets.append(_image_asset(img.url, order=cursor, number=cursor))
        cursor += 1
    for vid in content.videos:
        assets.append(_video_asset(vid.url, order=cursor, number=cursor, duration=vid.duration))
        cursor += 1
    return assets


def apply_combined_update(db: Session, payload: CombinedUpdateCallback) -> Dict:
    """
    Catch-all update: AI content, description, Facebook data and status in one go.

    No entry guard on status, so the workflow may re-send it; new assets are
    always placed after the highest existing order.
    """
    post_id = str(payload.post_id)
    post = post_service.get_post_or_raise(db, post_id)

    current_max = asset_service.max_order(db, post_id)
    start_order = 0 if current_max is None else current_max + 1
    assets = _combined_assets(payload.generated_content, start_order)

    facebook = payload.facebook_data
    target = lifecycle.resolve_combined_status(
        payload.post_status,
        facebook.status if facebook else None,
        payload.status,
    )
    if target is not None:
        already_synced = any(
            s.platform == Platform.FACEBOOK.value and s.sync_status == SyncStatus.SYNCED.value
            for s in post.platform_syncs
        )
        lifecycle.ensure_publish_recorded(target, facebook is not None, already_synced)

    try:
        if assets:
            asset_service.create_assets(db, post_id, assets, commit=False)
        if payload.description:
            post_service.update_post(db, post, {"description": payload.description}, commit=False)
        if target is not None:
            post_service.set_status(db, post, target, commit=False)
        if facebook is not None:
            upsert_platform_sync(
                db,
                post_id,
                Platform.FACEBOOK,
                external_id=facebook.post_id,
                external_url=str(facebook.post_url),
                succeeded=facebook.status == "success",
            )
        db.commit()
    except Exception:
        db.rollback()
        raise

    _log_reported_errors(post_id, payload.errors)
    webhook_logger.info(
        "Combined update processed",
        post_id=post_id,
        result=payload.status,
        assets_created=len(assets),
        has_facebook_data=facebook is not None,
    )
    return {
        "postId": post_id,
        "status": post.status,
        "assetsCreated": len(assets),
        "facebookPublished": facebook is not None and facebook.status == "success",
    }
