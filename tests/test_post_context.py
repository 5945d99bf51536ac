"""Tests for parsing the post context payload."""

from advanced_actions.core.post_context import DEFAULT_CONFIRM_MESSAGE, PostContext


def _make_payload():
    return {
        "postId": 123,
        "postTitle": "Test Post",
        "postLink": "http://example.com/post/123",
        "editLink": "http://example.com/edit/123",
        "isEditable": True,
        "timelineEnabled": True,
        "isFollowed": False,
        "isFollowRequested": True,
        "isAuthorFollowed": True,
        "isAuthorFollowRequested": False,
        "authorId": "5",
        "editSteps": [
            {"key": "main", "label": "Details", "link": "http://example.com/edit/123?step=main"},
            {"key": "media", "label": "Media", "link": ""},
        ],
        "permissions": {"delete": True, "publish": False},
        "status": "publish",
        "product": {"isEnabled": True, "oneClick": False, "productId": 7},
        "location": {
            "latitude": 40.7,
            "longitude": -74.0,
            "address": "New York",
            "mapLink": "http://example.com/map",
        },
        "postStatsLink": None,
        "promote": {"isPromotable": True, "isActive": True, "orderLink": "http://example.com/o/1"},
        "nonces": {"follow": "nonce_follow", "delete_post": "nonce_delete", "modify_post": "nonce_modify"},
        "confirmMessages": {"delete": "Really delete?"},
    }


def test_none_payload_is_none():
    assert PostContext.from_dict(None) is None


def test_full_payload():
    post = PostContext.from_dict(_make_payload())
    assert post.post_id == 123
    assert post.post_title == "Test Post"
    assert post.is_editable is True
    assert post.is_follow_requested is True
    assert post.author_id == 5
    assert post.permissions.delete is True
    assert post.permissions.publish is False
    assert post.status == "publish"
    assert post.product.product_id == 7
    assert post.product.one_click is False
    assert post.location.map_link == "http://example.com/map"
    assert post.stats_link is None
    assert post.promote.is_active is True
    assert post.promote.order_link == "http://example.com/o/1"
    assert post.promote.promote_link is None


def test_edit_steps_without_link_are_dropped():
    post = PostContext.from_dict(_make_payload())
    assert [s.key for s in post.edit_steps] == ["main"]


def test_missing_sections_are_none():
    post = PostContext.from_dict({"postId": "abc"})
    assert post.post_id is None
    assert post.product is None
    assert post.location is None
    assert post.promote is None
    assert post.edit_steps == []
    assert post.permissions.delete is False
    assert post.timeline_enabled is True


def test_nonce_lookup_by_action_then_fallback():
    post = PostContext.from_dict(_make_payload())
    assert post.nonce_for("user.posts.delete_post") == "nonce_delete"
    assert post.nonce_for("user.posts.unpublish_post") == "nonce_modify"
    assert post.nonce_for("user.follow_user") == "nonce_follow"
    assert post.nonce_for("unknown.action") == ""

    direct = PostContext(nonces={"user.follow_post": "direct", "follow": "shared"})
    assert direct.nonce_for("user.follow_post") == "direct"


def test_confirm_message_default():
    assert PostContext.from_dict(_make_payload()).delete_confirm_message == "Really delete?"
    assert PostContext().delete_confirm_message == DEFAULT_CONFIRM_MESSAGE
