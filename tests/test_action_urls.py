"""Tests for host action URL construction."""

from urllib.parse import parse_qs, urlsplit

from advanced_actions.config import Settings
from advanced_actions.core import action_urls
from advanced_actions.core.post_context import PostContext


def _make_post():
    return PostContext(
        post_id=123,
        author_id=9,
        nonces={"delete_post": "nonce_delete", "follow": "nonce_follow"},
    )


def test_post_action_url():
    url = action_urls.post_action_url(action_urls.DELETE_POST, _make_post(), Settings())
    parts = urlsplit(url)
    assert parts.path == "/"
    assert parse_qs(parts.query) == {
        "vx": ["1"],
        "action": ["user.posts.delete_post"],
        "post_id": ["123"],
        "_wpnonce": ["nonce_delete"],
    }


def test_user_action_url():
    url = action_urls.user_action_url(action_urls.FOLLOW_USER, _make_post(), Settings())
    query = parse_qs(urlsplit(url).query)
    assert query["action"] == ["user.follow_user"]
    assert query["user_id"] == ["9"]
    assert query["_wpnonce"] == ["nonce_follow"]


def test_endpoint_with_existing_query():
    settings = Settings(action_endpoint="https://example.com/?lang=en")
    url = action_urls.post_action_url(action_urls.DELETE_POST, _make_post(), settings)
    assert url.startswith("https://example.com/?lang=en&vx=1&")


def test_missing_post_context_is_placeholder():
    assert action_urls.post_action_url(action_urls.DELETE_POST, None) == "#"


def test_missing_identifier_is_placeholder():
    post = PostContext(post_id=1)
    assert action_urls.user_action_url(action_urls.FOLLOW_USER, post) == "#"
