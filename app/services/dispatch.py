"""
Background dispatch of workflow triggers.

Runs after the response has been sent, in its own session. If delivery fails
the post goes through the same ``mark_failed`` transition used everywhere
else.
"""
from . import asset_service, post_service
from .automation import ACTION_GENERATE, AutomationClient
from ..logging_config import webhook_logger


def dispatch_trigger(
    client: AutomationClient,
    session_factory,
    post_id: str,
    action: str = ACTION_GENERATE,
) -> bool:
    log = webhook_logger.bind(post_id=post_id, action=action)
    db = session_factory()
    try:
        post = post_service.get_post(db, post_id)
        if post is None:
            log.warning("Post vanished before trigger")
            return False

        try:
            delivered = client.trigger(post, asset_service.list_for_post(db, post_id), action)
        except Exception as e:
            log.error("Trigger raised", error=e)
            delivered = False

        if not delivered:
            post_service.mark_failed(db, post_id, reason=f"{action} trigger not delivered")
        return delivered
    finally:
        db.close()
