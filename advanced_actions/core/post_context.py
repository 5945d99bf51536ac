"""
Post context: the read-only record of the post an action list is attached to.

The host supplies this record whole or not at all (``None``). Permission
booleans in it are authoritative and are never re-derived here.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from advanced_actions.core.items import normalize_boolean, normalize_string

DEFAULT_CONFIRM_MESSAGE = "Are you sure?"

# Nonce key served by the host for each action name, used when the nonce map
# is not keyed by the action name itself.
NONCE_FALLBACK_KEYS = {
    "user.posts.delete_post": "delete_post",
    "user.posts.republish_post": "modify_post",
    "user.posts.unpublish_post": "modify_post",
    "user.follow_post": "follow",
    "user.follow_user": "follow",
}


def _optional_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _optional_str(value: Any) -> Optional[str]:
    text = normalize_string(value)
    return text or None


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


@dataclass(frozen=True)
class EditStep:
    """One step of a multi-step edit form."""

    key: str
    label: str
    link: str

    def to_dict(self) -> Dict[str, str]:
        return {"key": self.key, "label": self.label, "link": self.link}


@dataclass(frozen=True)
class Permissions:
    delete: bool = False
    publish: bool = False


@dataclass(frozen=True)
class ProductInfo:
    is_enabled: bool = False
    one_click: bool = False
    product_id: Optional[int] = None


@dataclass(frozen=True)
class LocationInfo:
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: str = ""
    map_link: Optional[str] = None


@dataclass(frozen=True)
class PromoteInfo:
    is_promotable: bool = False
    is_active: bool = False
    order_link: Optional[str] = None
    promote_link: Optional[str] = None


@dataclass(frozen=True)
class PostContext:
    """Permissions and state of the current post.

    Attributes
    ----------
    post_id : int, optional
        Numeric post identifier used in action URLs.
    permissions : Permissions
        Delete/publish capabilities of the current user.
    status : str
        Post status, e.g. ``"publish"`` or ``"unpublished"``.
    edit_steps : List[EditStep]
        Links of a multi-step edit form, in order.
    nonces : Dict[str, str]
        Action tokens served by the host.
    """

    post_id: Optional[int] = None
    post_title: str = ""
    post_link: str = ""
    edit_link: Optional[str] = None
    is_editable: bool = False
    timeline_enabled: bool = True
    is_followed: bool = False
    is_follow_requested: bool = False
    is_author_followed: bool = False
    is_author_follow_requested: bool = False
    author_id: Optional[int] = None
    edit_steps: List[EditStep] = field(default_factory=list)
    permissions: Permissions = field(default_factory=Permissions)
    status: str = ""
    product: Optional[ProductInfo] = None
    location: Optional[LocationInfo] = None
    stats_link: Optional[str] = None
    promote: Optional[PromoteInfo] = None
    nonces: Dict[str, str] = field(default_factory=dict)
    confirm_messages: Dict[str, str] = field(default_factory=dict)

    def nonce_for(self, action_name: str) -> str:
        """Return the token for ``action_name``, or an empty string."""
        if action_name in self.nonces:
            return self.nonces[action_name]
        return self.nonces.get(NONCE_FALLBACK_KEYS.get(action_name, ""), "")

    @property
    def delete_confirm_message(self) -> str:
        return self.confirm_messages.get("delete") or DEFAULT_CONFIRM_MESSAGE

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional["PostContext"]:
        """Create from the host's post-context payload.

        Returns None when ``data`` is None, so that "not loaded" and
        "no post" are the same thing downstream.
        """
        if not isinstance(data, Mapping):
            return None

        permissions = _mapping(data.get("permissions"))
        product = data.get("product")
        location = data.get("location")
        promote = data.get("promote")

        steps = []
        raw_steps = data.get("editSteps")
        for step in raw_steps if isinstance(raw_steps, list) else []:
            if isinstance(step, Mapping) and normalize_string(step.get("link")):
                steps.append(
                    EditStep(
                        key=normalize_string(step.get("key")),
                        label=normalize_string(step.get("label")),
                        link=normalize_string(step.get("link")),
                    )
                )

        return cls(
            post_id=_optional_int(data.get("postId")),
            post_title=normalize_string(data.get("postTitle")),
            post_link=normalize_string(data.get("postLink")),
            edit_link=_optional_str(data.get("editLink")),
            is_editable=normalize_boolean(data.get("isEditable")),
            timeline_enabled=normalize_boolean(data.get("timelineEnabled"), True),
            is_followed=normalize_boolean(data.get("isFollowed")),
            is_follow_requested=normalize_boolean(data.get("isFollowRequested")),
            is_author_followed=normalize_boolean(data.get("isAuthorFollowed")),
            is_author_follow_requested=normalize_boolean(data.get("isAuthorFollowRequested")),
            author_id=_optional_int(data.get("authorId")),
            edit_steps=steps,
            permissions=Permissions(
                delete=normalize_boolean(permissions.get("delete")),
                publish=normalize_boolean(permissions.get("publish")),
            ),
            status=normalize_string(data.get("status")),
            product=ProductInfo(
                is_enabled=normalize_boolean(product.get("isEnabled")),
                one_click=normalize_boolean(product.get("oneClick")),
                product_id=_optional_int(product.get("productId")),
            )
            if isinstance(product, Mapping)
            else None,
            location=LocationInfo(
                latitude=location.get("latitude"),
                longitude=location.get("longitude"),
                address=normalize_string(location.get("address")),
                map_link=_optional_str(location.get("mapLink")),
            )
            if isinstance(location, Mapping)
            else None,
            stats_link=_optional_str(data.get("postStatsLink")),
            promote=PromoteInfo(
                is_promotable=normalize_boolean(promote.get("isPromotable")),
                is_active=normalize_boolean(promote.get("isActive")),
                order_link=_optional_str(promote.get("orderLink")),
                promote_link=_optional_str(promote.get("promoteLink")),
            )
            if isinstance(promote, Mapping)
            else None,
            nonces={
                str(k): normalize_string(v) for k, v in _mapping(data.get("nonces")).items()
            },
            confirm_messages={
                str(k): normalize_string(v)
                for k, v in _mapping(data.get("confirmMessages")).items()
            },
        )
