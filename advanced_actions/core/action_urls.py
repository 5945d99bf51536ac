"""Host action URLs: ``<endpoint>?vx=1&action=<name>&<id-param>=<id>&_wpnonce=<token>``."""

from typing import Optional
from urllib.parse import urlencode

from advanced_actions.config import Settings, get_settings
from advanced_actions.core.post_context import PostContext

DELETE_POST = "user.posts.delete_post"
REPUBLISH_POST = "user.posts.republish_post"
UNPUBLISH_POST = "user.posts.unpublish_post"
FOLLOW_POST = "user.follow_post"
FOLLOW_USER = "user.follow_user"

PLACEHOLDER_URL = "#"


def build_action_url(
    action: str,
    id_param: str,
    object_id: Optional[int],
    post_context: Optional[PostContext],
    settings: Optional[Settings] = None,
) -> str:
    """Build the URL for a host-side action.

    Returns the placeholder ``"#"`` when there is no post context or no
    identifier to act on.
    """
    if post_context is None or object_id is None:
        return PLACEHOLDER_URL
    settings = settings or get_settings()
    query = urlencode(
        [
            ("vx", 1),
            ("action", action),
            (id_param, object_id),
            ("_wpnonce", post_context.nonce_for(action)),
        ]
    )
    separator = "&" if "?" in settings.action_endpoint else "?"
    return f"{settings.action_endpoint}{separator}{query}"


def post_action_url(
    action: str, post_context: Optional[PostContext], settings: Optional[Settings] = None
) -> str:
    post_id = post_context.post_id if post_context else None
    return build_action_url(action, "post_id", post_id, post_context, settings)


def user_action_url(
    action: str, post_context: Optional[PostContext], settings: Optional[Settings] = None
) -> str:
    author_id = post_context.author_id if post_context else None
    return build_action_url(action, "user_id", author_id, post_context, settings)
