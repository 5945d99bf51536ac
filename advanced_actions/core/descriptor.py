"""
Render descriptors: the engine's per-item output.

A descriptor says whether an item is shown, which element shape it takes,
where it points and what its activation does. Descriptors are computed
fresh on every render and carry no state.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from advanced_actions.core.items import IconValue


class RenderContext(Enum):
    """Where the list is being rendered."""

    PREVIEW = "preview"  # Authoring preview, every configured item is shown
    LIVE = "live"  # End-user page


class ElementShape(Enum):
    LINK = "link"
    CONTAINER = "container"


class EffectKind(Enum):
    """Client-side effect triggered when an item is activated."""

    NONE = "none"
    SCROLL_TO_TOP = "scroll_to_top"
    HISTORY_BACK = "history_back"
    SCROLL_TO_ID = "scroll_to_id"
    OPEN_POPUP = "open_popup"
    DELEGATE_TO_HOST = "delegate_to_host"


class PopupKind(Enum):
    EDIT = "edit"
    SHARE = "share"


@dataclass(frozen=True)
class SideEffect:
    """An opaque activation effect.

    Attributes
    ----------
    kind : EffectKind
        What to do.
    target : str, optional
        Element id for SCROLL_TO_ID, popup kind for OPEN_POPUP, host handler
        name for DELEGATE_TO_HOST.
    smooth : bool
        Whether scrolling is animated.
    prevent_default : bool
        Whether the link's own navigation is suppressed.
    """

    kind: EffectKind = EffectKind.NONE
    target: Optional[str] = None
    smooth: bool = False
    prevent_default: bool = False

    @property
    def is_none(self) -> bool:
        return self.kind is EffectKind.NONE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "target": self.target,
            "smooth": self.smooth,
            "preventDefault": self.prevent_default,
        }


NO_EFFECT = SideEffect()


@dataclass(frozen=True)
class ContentPair:
    """Text and icon displayed together."""

    label: str
    icon: Optional[IconValue] = None
    icon_color: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "icon": self.icon.to_dict() if self.icon else None,
            "iconColor": self.icon_color,
        }


@dataclass(frozen=True)
class RenderDescriptor:
    """How one action item is presented and what it does.

    Attributes
    ----------
    item_id : str
        Id of the item this descriptor was resolved from.
    kind : str
        Raw action kind of the item.
    visible : bool
        False when the item must not be rendered at all.
    shape : ElementShape
        ``LINK`` for navigational elements, ``CONTAINER`` for inert ones.
    href : str, optional
        Destination URL. None for containers.
    active, intermediate : bool
        State modifiers for toggleable kinds.
    classes : tuple of str
        Marker classes on the interactive element.
    wrapper_classes : tuple of str
        Extra classes on the list row wrapping the element.
    attributes : dict
        Extra element attributes (``data-*``, ``vx-action``).
    effect : SideEffect
        Activation effect.
    cart_options : bool
        The add-to-cart item shows its "select options" variant.
    content : ContentPair
        The pair shown in the initial state.
    active_content : ContentPair, optional
        The pair shown in the active state, for toggleable kinds.
    """

    item_id: str
    kind: str
    visible: bool = True
    shape: ElementShape = ElementShape.CONTAINER
    href: Optional[str] = None
    target: Optional[str] = None
    rel: Optional[str] = None
    download: Optional[str] = None
    is_external: bool = False
    nofollow: bool = False
    active: bool = False
    intermediate: bool = False
    classes: Tuple[str, ...] = ()
    wrapper_classes: Tuple[str, ...] = ()
    attributes: Dict[str, str] = field(default_factory=dict)
    effect: SideEffect = NO_EFFECT
    cart_options: bool = False
    content: ContentPair = ContentPair(label="")
    active_content: Optional[ContentPair] = None

    @property
    def is_link(self) -> bool:
        return self.visible and self.shape is ElementShape.LINK

    @property
    def is_toggle(self) -> bool:
        return self.active_content is not None

    @property
    def state_classes(self) -> Tuple[str, ...]:
        states = []
        if self.active:
            states.append("active")
        if self.intermediate:
            states.append("intermediate")
        return tuple(states)

    @property
    def popup_kind(self) -> Optional[PopupKind]:
        if self.effect.kind is not EffectKind.OPEN_POPUP:
            return None
        return PopupKind(self.effect.target)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "itemId": self.item_id,
            "kind": self.kind,
            "visible": self.visible,
            "shape": self.shape.value,
            "href": self.href,
            "target": self.target,
            "rel": self.rel,
            "download": self.download,
            "isExternal": self.is_external,
            "nofollow": self.nofollow,
            "active": self.active,
            "intermediate": self.intermediate,
            "classes": list(self.classes),
            "wrapperClasses": list(self.wrapper_classes),
            "attributes": dict(self.attributes),
            "effect": self.effect.to_dict(),
            "cartOptions": self.cart_options,
            "content": self.content.to_dict(),
            "activeContent": self.active_content.to_dict() if self.active_content else None,
        }
