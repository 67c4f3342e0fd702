"""
Workflow Callback Routes
========================
Endpoints the automation workflow calls when AI generation or Facebook
publishing finishes. All POSTs require the shared X-API-Key.

The HTTP status only says whether the callback was processed; the business
outcome is in the post's status.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from datetime import datetime, timezone

from ..database import get_db
from ..dependencies import require_callback_secret
from ..logging_config import webhook_logger
from ..responses import ApiException, server_error, success
from ..schemas.webhooks import AiContentCallback, CombinedUpdateCallback, FacebookPublishedCallback
from ..services import callbacks
from ..services.exceptions import ListingHubError

router = APIRouter(prefix="/api/webhooks/callback", tags=["webhooks"])


def _run(handler, db: Session, payload, label: str) -> dict:
    """Invoke a handler; unexpected failures become a generic 500."""
    try:
        return handler(db, payload)
    except (ListingHubError, ApiException):
        raise
    except Exception as e:
        webhook_logger.error(f"Error processing {label} callback", error=e, post_id=str(payload.post_id))
        server_error("Failed to process webhook")


@router.post("/ai-content", dependencies=[Depends(require_callback_secret)])
def ai_content_callback(payload: AiContentCallback, db: Session = Depends(get_db)):
    """Receive AI-generated text, images and videos."""
    result = _run(callbacks.apply_ai_content, db, payload, "ai-content")
    message = "AI generation failed" if payload.status == "failed" else "AI content processed successfully"
    return success(result, message=message)


@router.post("/facebook-published", dependencies=[Depends(require_callback_secret)])
def facebook_published_callback(payload: FacebookPublishedCallback, db: Session = Depends(get_db)):
    """Receive the Facebook publish outcome."""
    result = _run(callbacks.apply_facebook_published, db, payload, "facebook-published")
    return success(result, message="Post published status updated")


@router.post("/update", dependencies=[Depends(require_callback_secret)])
def combined_update_callback(payload: CombinedUpdateCallback, db: Session = Depends(get_db)):
    """Receive any mix of AI content, description, Facebook data and status."""
    result = _run(callbacks.apply_combined_update, db, payload, "update")
    return success(result, message="Post updated successfully")


@router.get("/update")
def combined_update_health():
    """Health check for the workflow's connection test."""
    return success(
        {"timestamp": datetime.now(timezone.utc).isoformat()},
        message="Update webhook is running",
    )
