"""
Automation Workflow Trigger
===========================
Hands a post off to the external automation workflow (n8n) for AI generation
or Facebook publishing.

Delivery is at-most-once and fire-and-forget: ``trigger`` reports whether the
workflow accepted the request (HTTP 2xx), never the eventual outcome. Results
come back later through the callback endpoints.
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, Iterable, List, Optional, Union

import requests

from ..config import Settings
from ..logging_config import timed, webhook_logger
from ..models.enums import AssetType

DEFAULT_VOICE = "default"

ACTION_GENERATE = "generate"
ACTION_PUBLISH = "publish"


# ============================================================
# FRAMES
# ============================================================

@dataclass
class ImageFrame:
    """Still image shown for one beat of the generated video / post"""
    caption: str
    image_url: str
    voice: str = DEFAULT_VOICE
    type: str = field(default="image", init=False)

    def to_payload(self) -> Dict:
        return asdict(self)


@dataclass
class VideoFrame:
    """Video clip used as-is by the workflow"""
    caption: str
    video_url: str
    voice: str = DEFAULT_VOICE
    type: str = field(default="video", init=False)

    def to_payload(self) -> Dict:
        return asdict(self)


Frame = Union[ImageFrame, VideoFrame]


def frame_caption(project_details: Optional[Dict]) -> str:
    """Caption shared by every frame: project name and location."""
    details = project_details or {}
    parts = [details.get("name"), details.get("location")]
    return " - ".join(p for p in parts if p)


def build_frames(project_details: Optional[Dict], assets: Iterable) -> List[Frame]:
    """
    Map assets to frames ordered by ``order``, images ahead of videos on a tie.

    The sort is stable, so assets still tied keep their insertion order.
    """
    caption = frame_caption(project_details)
    ordered = sorted(assets, key=lambda a: (a.order, 1 if a.type == AssetType.VID.value else 0))

    frames: List[Frame] = []
    for asset in ordered:
        if asset.type == AssetType.VID.value:
            frames.append(VideoFrame(caption=caption, video_url=asset.url))
        else:
            frames.append(ImageFrame(caption=caption, image_url=asset.url))
    return frames


# ============================================================
# CLIENT
# ============================================================

class AutomationClient:
    """Sends trigger payloads to the workflow webhook"""

    def __init__(self, settings: Settings):
        self.webhook_url = settings.n8n_webhook_url
        self.api_key = settings.n8n_api_key
        self.timeout = settings.n8n_timeout_seconds
        self.public_base_url = (settings.public_base_url or "").rstrip("/") or None

    def is_configured(self) -> bool:
        return bool(self.webhook_url)

    def callback_urls(self) -> Optional[Dict[str, str]]:
        if not self.public_base_url:
            return None
        base = f"{self.public_base_url}/api/webhooks/callback"
        return {
            "aiContent": f"{base}/ai-content",
            "facebookPublished": f"{base}/facebook-published",
            "update": f"{base}/update",
        }

    def build_payload(self, post, assets: Iterable, action: str = ACTION_GENERATE) -> Dict:
        assets = list(assets)
        payload = {
            "postId": post.id,
            "action": action,
            "title": post.title,
            "description": post.description,
            "projectDetails": post.project_details,
            "useAiImage": post.use_ai_image,
            "useAiVideo": post.use_ai_video,
            "useAiText": post.use_ai_text,
            "frames": [frame.to_payload() for frame in build_frames(post.project_details, assets)],
            "manualAssets": [
                {"url": a.url, "type": a.type}
                for a in assets if a.source == "MANUAL"
            ],
        }
        if post.ai_prompt_override:
            payload["aiPromptOverride"] = post.ai_prompt_override
        callbacks = self.callback_urls()
        if callbacks:
            payload["callbackUrls"] = callbacks
        return payload

    def headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["X-API-Key"] = self.api_key
        return headers

    @timed(webhook_logger)
    def trigger(self, post, assets: Iterable, action: str = ACTION_GENERATE) -> bool:
        """POST the payload once. True only when the workflow answered 2xx."""
        if not self.webhook_url:
            webhook_logger.warning("N8N_WEBHOOK_URL not configured, skipping trigger", post_id=post.id, action=action)
            return False
        if not self.api_key:
            webhook_logger.warning("N8N_API_KEY not configured, sending unauthenticated trigger", post_id=post.id)

        payload = self.build_payload(post, assets, action)

        try:
            response = requests.post(
                self.webhook_url,
                json=payload,
                headers=self.headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            webhook_logger.error("Workflow trigger error", error=e, post_id=post.id, action=action)
            return False

        if not 200 <= response.status_code < 300:
            webhook_logger.warning(
                "Workflow trigger rejected",
                post_id=post.id,
                action=action,
                status_code=response.status_code,
                body=response.text[:500],
            )
            return False

        webhook_logger.info("Workflow triggered", post_id=post.id, action=action, frames=len(payload["frames"]))
        return True
