"""
Tests for the workflow callback endpoints.
"""
import logging
from unittest.mock import patch

from app.config import Settings, get_settings
from app.main import app
from app.models.enums import AssetSource, AssetType, PostStatus

AI_CONTENT_URL = "/api/webhooks/callback/ai-content"
FACEBOOK_URL = "/api/webhooks/callback/facebook-published"
UPDATE_URL = "/api/webhooks/callback/update"


def ai_payload(post_id, status="success", text=None, images=(), videos=(), errors=()):
    return {
        "postId": post_id,
        "generatedContent": {
            "text": text,
            "images": [{"url": url} for url in images],
            "videos": [{"url": url, "duration": 15} for url in videos],
        },
        "status": status,
        "errors": list(errors),
    }


def facebook_payload(post_id, status="success"):
    return {
        "postId": post_id,
        "post_id": "fb123",
        "post_url": "https://fb.example/123",
        "status": status,
    }


class TestAiContentCallback:

    def test_success_creates_assets_and_marks_ready(self, client, make_post):
        post = make_post(use_ai_image=True, use_ai_text=True)

        response = client.post(AI_CONTENT_URL, json=ai_payload(
            post.id,
            text="Luxury living by the river",
            images=["https://cdn.test/ai-1.png", "https://cdn.test/ai-2.png"],
            videos=["https://cdn.test/ai-1.mp4"],
        ))

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "AI content processed successfully"
        assert body["data"]["status"] == "READY"
        assert body["data"]["assetsCreated"] == 3

        detail = client.get(f"/api/posts/{post.id}").json()["data"]
        assert detail["status"] == "READY"
        assert detail["description"] == "Luxury living by the river"
        assets = [(a["type"], a["source"], a["order"], a["fileName"]) for a in detail["assets"]]
        assert assets == [
            ("IMG", "AI", 0, "ai-generated-image-1.png"),
            ("IMG", "AI", 1, "ai-generated-image-2.png"),
            ("VID", "AI", 100, "ai-generated-video-1.mp4"),
        ]
        assert detail["assets"][2]["duration"] == 15

    def test_partial_result_is_ready(self, client, make_post, caplog):
        post = make_post(use_ai_image=True)

        with caplog.at_level(logging.WARNING, logger="listinghub.webhooks"):
            response = client.post(AI_CONTENT_URL, json=ai_payload(
                post.id,
                status="partial",
                images=["https://cdn.test/ai-1.png"],
                errors=[{"type": "video", "message": "render timeout"}],
            ))

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "READY"
        assert response.json()["data"]["assetsCreated"] == 1
        [reported] = [r for r in caplog.records if r.getMessage() == "Workflow reported error"]
        assert reported.context["error_type"] == "video"
        assert reported.context["error_message"] == "render timeout"

    def test_facebook_error_type_is_not_accepted(self, client, make_post):
        post = make_post(use_ai_image=True)

        response = client.post(AI_CONTENT_URL, json=ai_payload(
            post.id,
            errors=[{"type": "facebook", "message": "token expired"}],
        ))

        assert response.status_code == 400
        assert client.get(f"/api/posts/{post.id}").json()["data"]["status"] == "PENDING_AI"

    def test_failed_result_writes_no_assets(self, client, make_post):
        post = make_post(use_ai_image=True)

        response = client.post(AI_CONTENT_URL, json=ai_payload(
            post.id,
            status="failed",
            text="ignored",
            images=["https://cdn.test/ai-1.png"],
        ))

        assert response.status_code == 200
        assert response.json()["message"] == "AI generation failed"
        detail = client.get(f"/api/posts/{post.id}").json()["data"]
        assert detail["status"] == "FAILED"
        assert detail["assets"] == []
        assert detail["description"] is None

    def test_second_callback_is_rejected(self, client, make_post):
        post = make_post(use_ai_image=True)
        first = client.post(AI_CONTENT_URL, json=ai_payload(post.id, images=["https://cdn.test/ai-1.png"]))
        assert first.status_code == 200

        second = client.post(AI_CONTENT_URL, json=ai_payload(post.id, images=["https://cdn.test/ai-2.png"]))

        assert second.status_code == 400
        assert second.json()["error"] == "Post is not pending AI generation. Current status: READY"
        detail = client.get(f"/api/posts/{post.id}").json()["data"]
        assert len(detail["assets"]) == 1

    def test_unknown_post(self, client):
        response = client.post(AI_CONTENT_URL, json=ai_payload("6f1c2a9e-3b0d-4d59-9a51-2f3e0c1d4b7a"))
        assert response.status_code == 404

    def test_invalid_payload(self, client, make_post):
        post = make_post(use_ai_image=True)
        payload = ai_payload(post.id, status="done")

        response = client.post(AI_CONTENT_URL, json=payload)

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"


class TestFacebookPublishedCallback:

    def test_success_publishes_and_records_sync(self, client, make_post):
        post = make_post(status=PostStatus.READY)

        response = client.post(FACEBOOK_URL, json=facebook_payload(post.id))

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "PUBLISHED"
        detail = client.get(f"/api/posts/{post.id}").json()["data"]
        assert detail["status"] == "PUBLISHED"
        [sync] = detail["platformSyncs"]
        assert sync["platform"] == "FACEBOOK"
        assert sync["externalId"] == "fb123"
        assert sync["externalUrl"] == "https://fb.example/123"
        assert sync["syncStatus"] == "SYNCED"
        assert sync["syncError"] is None
        assert sync["lastSyncedAt"] is not None

    def test_failure_marks_failed_with_sync_error(self, client, make_post):
        post = make_post(status=PostStatus.PENDING_AI)

        response = client.post(FACEBOOK_URL, json=facebook_payload(post.id, status="failed"))

        assert response.status_code == 200
        detail = client.get(f"/api/posts/{post.id}").json()["data"]
        assert detail["status"] == "FAILED"
        [sync] = detail["platformSyncs"]
        assert sync["syncStatus"] == "FAILED"
        assert sync["syncError"] == "Facebook publishing failed"

    def test_rejected_once_resolved(self, client, make_post):
        for status in (PostStatus.PUBLISHED, PostStatus.FAILED):
            post = make_post(status=status)

            response = client.post(FACEBOOK_URL, json=facebook_payload(post.id))

            assert response.status_code == 400
            assert response.json()["error"] == f"Post is not in a publishable state. Current status: {status.value}"

    def test_upsert_failure_rolls_back_status(self, client, make_post, db):
        post = make_post(status=PostStatus.READY)

        with patch("app.services.callbacks.upsert_platform_sync", side_effect=RuntimeError("constraint")):
            response = client.post(FACEBOOK_URL, json=facebook_payload(post.id))

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to process webhook"
        db.expire_all()
        detail = client.get(f"/api/posts/{post.id}").json()["data"]
        assert detail["status"] == "READY"
        assert detail["platformSyncs"] == []

    def test_repeat_callback_updates_single_sync_row(self, client, make_post):
        post = make_post(status=PostStatus.PENDING_AI)
        client.post(FACEBOOK_URL, json=facebook_payload(post.id, status="failed"))
        client.post(f"/api/posts/{post.id}/publish")

        response = client.post(FACEBOOK_URL, json=facebook_payload(post.id))

        assert response.status_code == 200
        syncs = client.get(f"/api/posts/{post.id}").json()["data"]["platformSyncs"]
        assert len(syncs) == 1
        assert syncs[0]["syncStatus"] == "SYNCED"


class TestCombinedUpdateCallback:

    def test_health_check(self, client):
        response = client.get(UPDATE_URL)
        assert response.status_code == 200
        assert response.json()["message"] == "Update webhook is running"

    def test_assets_continue_after_existing_order(self, client, make_post, make_asset):
        post = make_post(status=PostStatus.READY)
        make_asset(post, "https://cdn.test/manual-0.jpg", order=0)
        make_asset(post, "https://cdn.test/manual-4.jpg", order=4)

        response = client.post(UPDATE_URL, json={
            "postId": post.id,
            "generatedContent": {
                "images": [{"url": "https://cdn.test/ai-1.png"}],
                "videos": [{"url": "https://cdn.test/ai-1.mp4"}],
            },
            "status": "partial",
        })

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["assetsCreated"] == 2
        assert data["status"] == "READY"
        assets = client.get(f"/api/posts/{post.id}").json()["data"]["assets"]
        assert [(a["order"], a["type"], a["source"]) for a in assets] == [
            (0, "IMG", "MANUAL"),
            (4, "IMG", "MANUAL"),
            (5, "IMG", "AI"),
            (6, "VID", "AI"),
        ]

    def test_first_assets_start_at_zero(self, client, make_post):
        post = make_post(status=PostStatus.PENDING_AI)

        client.post(UPDATE_URL, json={
            "postId": post.id,
            "generatedContent": {"images": [{"url": "https://cdn.test/ai-1.png"}]},
            "status": "success",
        })

        assets = client.get(f"/api/posts/{post.id}").json()["data"]["assets"]
        assert [a["order"] for a in assets] == [0]

    def test_status_priority(self, client, make_post):
        post = make_post(status=PostStatus.PENDING_AI)

        # overall success alone means READY
        client.post(UPDATE_URL, json={"postId": post.id, "status": "success"})
        assert client.get(f"/api/posts/{post.id}").json()["data"]["status"] == "READY"

        # partial leaves the status alone
        client.post(UPDATE_URL, json={"postId": post.id, "status": "partial", "description": "Updated copy"})
        detail = client.get(f"/api/posts/{post.id}").json()["data"]
        assert detail["status"] == "READY"
        assert detail["description"] == "Updated copy"

        # facebook data beats the overall status
        response = client.post(UPDATE_URL, json={
            "postId": post.id,
            "status": "failed",
            "facebookData": {"postId": "fb999", "postUrl": "https://fb.example/999", "status": "success"},
        })
        assert response.json()["data"]["facebookPublished"] is True
        assert client.get(f"/api/posts/{post.id}").json()["data"]["status"] == "PUBLISHED"

        # explicit postStatus beats everything
        client.post(UPDATE_URL, json={
            "postId": post.id,
            "status": "success",
            "postStatus": "FAILED",
            "facebookData": {"postId": "fb999", "postUrl": "https://fb.example/999", "status": "success"},
        })
        assert client.get(f"/api/posts/{post.id}").json()["data"]["status"] == "FAILED"

    def test_published_requires_facebook_record(self, client, make_post):
        post = make_post(status=PostStatus.READY)

        response = client.post(UPDATE_URL, json={
            "postId": post.id,
            "status": "success",
            "postStatus": "PUBLISHED",
        })

        assert response.status_code == 400
        assert response.json()["error"] == "Cannot mark post PUBLISHED without a recorded Facebook publish"
        assert client.get(f"/api/posts/{post.id}").json()["data"]["status"] == "READY"

    def test_published_allowed_after_synced_facebook(self, client, make_post):
        post = make_post(status=PostStatus.READY)
        client.post(FACEBOOK_URL, json=facebook_payload(post.id))
        client.post(UPDATE_URL, json={"postId": post.id, "status": "failed"})

        response = client.post(UPDATE_URL, json={
            "postId": post.id,
            "status": "success",
            "postStatus": "PUBLISHED",
        })

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "PUBLISHED"

    def test_errors_array_does_not_fail_request(self, client, make_post):
        post = make_post(status=PostStatus.PENDING_AI)

        response = client.post(UPDATE_URL, json={
            "postId": post.id,
            "status": "failed",
            "errors": [
                {"type": "image", "message": "quota exceeded"},
                {"type": "facebook", "message": "page token expired"},
            ],
        })

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "FAILED"

    def test_unknown_post(self, client):
        response = client.post(UPDATE_URL, json={
            "postId": "6f1c2a9e-3b0d-4d59-9a51-2f3e0c1d4b7a",
            "status": "success",
        })
        assert response.status_code == 404


class TestCallbackSecret:

    def test_wrong_or_missing_key_is_rejected(self, client, make_post):
        post = make_post(use_ai_image=True)
        app.dependency_overrides[get_settings] = lambda: Settings(n8n_api_key="shared-secret")

        missing = client.post(AI_CONTENT_URL, json=ai_payload(post.id))
        wrong = client.post(AI_CONTENT_URL, json=ai_payload(post.id), headers={"X-API-Key": "nope"})

        assert missing.status_code == 401
        assert wrong.status_code == 401
        assert wrong.json()["error"] == "Invalid API key"
        assert client.get(f"/api/posts/{post.id}").json()["data"]["status"] == "PENDING_AI"

    def test_matching_key_is_accepted(self, client, make_post):
        post = make_post(use_ai_image=True)
        app.dependency_overrides[get_settings] = lambda: Settings(n8n_api_key="shared-secret")

        response = client.post(
            AI_CONTENT_URL,
            json=ai_payload(post.id, images=["https://cdn.test/ai-1.png"]),
            headers={"X-API-Key": "shared-secret"},
        )

        assert response.status_code == 200


class TestEndToEnd:

    def test_generate_then_publish(self, client, automation):
        created = client.post("/api/posts", json={
            "title": "Lakeview launch",
            "projectDetails": {"name": "Lakeview", "price": 99000, "location": "Hanoi"},
            "useAiImage": True,
        })
        post_id = created.json()["data"]["id"]
        assert created.json()["data"]["status"] == "PENDING_AI"

        client.post(AI_CONTENT_URL, json=ai_payload(post_id, images=["https://cdn.test/lake.png"]))
        detail = client.get(f"/api/posts/{post_id}").json()["data"]
        assert detail["status"] == "READY"
        [asset] = detail["assets"]
        assert (asset["type"], asset["source"], asset["order"]) == (AssetType.IMG.value, AssetSource.AI.value, 0)

        published = client.post(f"/api/posts/{post_id}/publish")
        assert published.json()["data"]["post"]["status"] == "PENDING_AI"

        client.post(FACEBOOK_URL, json=facebook_payload(post_id))
        detail = client.get(f"/api/posts/{post_id}").json()["data"]
        assert detail["status"] == "PUBLISHED"
        [sync] = detail["platformSyncs"]
        assert (sync["platform"], sync["externalId"], sync["syncStatus"]) == ("FACEBOOK", "fb123", "SYNCED")
