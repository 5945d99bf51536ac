"""
Action item data structures for the advanced action list.

These dataclasses describe the configuration an author produces for one
action list: the ordered items, their kind-specific fields and the global
icons shared by the popup panels. The engine only reads them.
"""

import json
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import jsonschema

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent.parent / "schemas" / "action-list-schema.json"


class ActionKind(Enum):
    """Closed enumeration of action kinds."""

    NONE = "none"
    LINK = "action_link"
    BACK_TO_TOP = "back_to_top"
    GO_BACK = "go_back"
    SCROLL_TO_SECTION = "scroll_to_section"
    GOOGLE_CALENDAR = "action_gcal"
    ICALENDAR = "action_ical"

    DELETE_POST = "delete_post"
    PUBLISH_POST = "publish_post"
    UNPUBLISH_POST = "unpublish_post"
    EDIT_POST = "edit_post"
    SHARE_POST = "share_post"
    FOLLOW_POST = "action_follow_post"
    FOLLOW_AUTHOR = "action_follow"
    SHOW_ON_MAP = "show_post_on_map"
    VIEW_STATS = "view_post_stats"
    ADD_TO_CART = "add_to_cart"
    PROMOTE_POST = "promote_post"
    SELECT_ADDITION = "select_addition"

    # Post-dependent kinds without a built-in policy (rendered as placeholders)
    SAVE_POST = "action_save"
    DIRECT_MESSAGE = "direct_message"
    DIRECT_MESSAGE_AUTHOR = "direct_message_user"
    RELIST_POST = "relist_post"
    SWITCH_LISTING_PLAN = "switch_listing_plan"

    @classmethod
    def parse(cls, value: Any) -> Optional["ActionKind"]:
        """Return the kind for ``value``, or None when it is not recognised."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def is_post_dependent(self) -> bool:
        return self not in CONTEXT_FREE_KINDS

    @property
    def is_toggleable(self) -> bool:
        """Kinds that render an initial/active content pair."""
        return self in TOGGLE_KINDS


CONTEXT_FREE_KINDS = frozenset(
    {
        ActionKind.NONE,
        ActionKind.LINK,
        ActionKind.BACK_TO_TOP,
        ActionKind.GO_BACK,
        ActionKind.SCROLL_TO_SECTION,
        ActionKind.GOOGLE_CALENDAR,
        ActionKind.ICALENDAR,
    }
)

TOGGLE_KINDS = frozenset(
    {
        ActionKind.FOLLOW_POST,
        ActionKind.FOLLOW_AUTHOR,
        ActionKind.SELECT_ADDITION,
        ActionKind.PROMOTE_POST,
    }
)

FOLLOW_KINDS = frozenset({ActionKind.FOLLOW_POST, ActionKind.FOLLOW_AUTHOR})


# --------------------------------------------------------------- normalisers


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    """Return the value of the first key present (and not None) in ``data``."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def normalize_string(value: Any, fallback: str = "") -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return fallback
    if isinstance(value, (int, float)):
        return str(value)
    return fallback


def normalize_boolean(value: Any, fallback: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if value in ("yes", "true", "1", 1):
        return True
    if value in ("", "no", "false", "0", 0):
        return False
    return fallback


@dataclass(frozen=True)
class IconValue:
    """An icon reference: an icon-pack library plus a class name, URL or inline SVG."""

    library: str = ""
    value: str = ""

    @property
    def is_svg(self) -> bool:
        return self.library == "svg" or self.value.lstrip().startswith("<svg")

    def to_dict(self) -> Dict[str, str]:
        return {"library": self.library, "value": self.value}

    @classmethod
    def from_dict(cls, data: Any) -> Optional["IconValue"]:
        """Build an icon, or None when neither library nor value is set."""
        if not isinstance(data, Mapping):
            return None
        library = normalize_string(data.get("library"))
        value = normalize_string(data.get("value"))
        if not library and not value:
            return None
        return cls(library=library, value=value)


@dataclass(frozen=True)
class LinkConfig:
    """Destination of a static link action."""

    url: str = ""
    is_external: bool = False
    nofollow: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"url": self.url, "isExternal": self.is_external, "nofollow": self.nofollow}

    @classmethod
    def from_dict(cls, data: Any) -> Optional["LinkConfig"]:
        if not isinstance(data, Mapping):
            return None
        return cls(
            url=normalize_string(data.get("url")),
            is_external=normalize_boolean(_pick(data, "isExternal", "is_external")),
            nofollow=normalize_boolean(data.get("nofollow")),
        )


@dataclass(frozen=True)
class ActionItem:
    """One configured action entry.

    Attributes
    ----------
    id : str
        Stable identifier, unique within the list.
    kind : str
        Raw action kind. Kept as a string so that kinds unknown to this
        version survive a round trip; use ``action_kind`` for the enum.
    label, active_label : str
        Text shown in the initial and active states.
    row_visibility : str
        ``"show"`` or ``"hide"``.
    visibility_rules : tuple
        Conditional rules, evaluated by the host.
    """

    id: str
    kind: str = ActionKind.NONE.value
    label: str = "Action"
    icon: Optional[IconValue] = None
    enable_tooltip: bool = False
    tooltip_text: str = ""

    # Kind-specific fields
    link: Optional[LinkConfig] = None
    scroll_to_id: str = ""
    addition_id: str = ""
    cal_start_date: str = ""
    cal_end_date: str = ""
    cal_title: str = ""
    cal_description: str = ""
    cal_location: str = ""
    cal_url: str = ""
    cal_timezone: str = ""
    cart_opts_text: str = "Select options"
    cart_opts_enable_tooltip: bool = False
    cart_opts_tooltip_text: str = ""
    cart_opts_icon: Optional[IconValue] = None

    # Active state
    active_label: str = "Action"
    active_icon: Optional[IconValue] = None
    active_enable_tooltip: bool = False
    active_tooltip_text: str = ""

    # Custom colors
    custom_style: bool = False
    custom_icon_color: str = ""
    custom_icon_color_active: str = ""

    # Row visibility
    row_visibility: str = "show"
    visibility_rules: Tuple[Dict[str, Any], ...] = ()

    @property
    def action_kind(self) -> Optional[ActionKind]:
        return ActionKind.parse(self.kind)

    @property
    def has_visibility_rules(self) -> bool:
        return len(self.visibility_rules) > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "actionType": self.kind,
            "text": self.label,
            "icon": self.icon.to_dict() if self.icon else None,
            "enableTooltip": self.enable_tooltip,
            "tooltipText": self.tooltip_text,
            "link": self.link.to_dict() if self.link else None,
            "scrollToId": self.scroll_to_id,
            "additionId": self.addition_id,
            "calStartDate": self.cal_start_date,
            "calEndDate": self.cal_end_date,
            "calTitle": self.cal_title,
            "calDescription": self.cal_description,
            "calLocation": self.cal_location,
            "calUrl": self.cal_url,
            "calTimezone": self.cal_timezone,
            "cartOptsText": self.cart_opts_text,
            "cartOptsEnableTooltip": self.cart_opts_enable_tooltip,
            "cartOptsTooltipText": self.cart_opts_tooltip_text,
            "cartOptsIcon": self.cart_opts_icon.to_dict() if self.cart_opts_icon else None,
            "activeText": self.active_label,
            "activeIcon": self.active_icon.to_dict() if self.active_icon else None,
            "activeEnableTooltip": self.active_enable_tooltip,
            "activeTooltipText": self.active_tooltip_text,
            "customStyle": self.custom_style,
            "customIconColor": self.custom_icon_color,
            "customIconColorActive": self.custom_icon_color_active,
            "rowVisibility": self.row_visibility,
            "visibilityRules": [dict(rule) for rule in self.visibility_rules],
        }

    @classmethod
    def from_dict(cls, data: Any) -> "ActionItem":
        """Create from a configuration mapping.

        Accepts the camelCase keys written by ``to_dict`` as well as the
        snake_case keys of the legacy widget format (``ts_action_type``,
        ``ts_acw_initial_text``, ...). Unusable values fall back to defaults.
        """
        if not isinstance(data, Mapping):
            return cls(id=_new_item_id())

        rules = data.get("visibilityRules")
        row_visibility = normalize_string(data.get("rowVisibility"), "show")

        return cls(
            id=normalize_string(_pick(data, "id", "_id")) or _new_item_id(),
            kind=normalize_string(_pick(data, "actionType", "kind", "ts_action_type"), "none"),
            label=normalize_string(
                _pick(data, "text", "label", "ts_acw_initial_text"), "Action"
            ),
            icon=IconValue.from_dict(_pick(data, "icon", "ts_acw_initial_icon")),
            enable_tooltip=normalize_boolean(_pick(data, "enableTooltip", "ts_enable_tooltip")),
            tooltip_text=normalize_string(_pick(data, "tooltipText", "ts_tooltip_text")),
            link=LinkConfig.from_dict(_pick(data, "link", "ts_action_link")),
            scroll_to_id=normalize_string(_pick(data, "scrollToId", "ts_scroll_to")),
            addition_id=normalize_string(_pick(data, "additionId", "ts_addition_id")),
            cal_start_date=normalize_string(
                _pick(data, "calStartDate", "ts_action_cal_start_date")
            ),
            cal_end_date=normalize_string(_pick(data, "calEndDate", "ts_action_cal_end_date")),
            cal_title=normalize_string(_pick(data, "calTitle", "ts_action_cal_title")),
            cal_description=normalize_string(_pick(data, "calDescription", "ts_action_cal_desc")),
            cal_location=normalize_string(
                _pick(data, "calLocation", "ts_action_cal_location")
            ),
            cal_url=normalize_string(_pick(data, "calUrl", "ts_action_cal_url")),
            cal_timezone=normalize_string(_pick(data, "calTimezone", "ts_action_cal_timezone")),
            cart_opts_text=normalize_string(
                _pick(data, "cartOptsText", "ts_cart_opts_text"), "Select options"
            ),
            cart_opts_enable_tooltip=normalize_boolean(
                _pick(data, "cartOptsEnableTooltip", "ts_cart_opts_enable_tooltip")
            ),
            cart_opts_tooltip_text=normalize_string(
                _pick(data, "cartOptsTooltipText", "ts_cart_opts_tooltip_text")
            ),
            cart_opts_icon=IconValue.from_dict(_pick(data, "cartOptsIcon", "ts_cart_opts_icon")),
            active_label=normalize_string(
                _pick(data, "activeText", "activeLabel", "ts_acw_reveal_text"), "Action"
            ),
            active_icon=IconValue.from_dict(_pick(data, "activeIcon", "ts_acw_reveal_icon")),
            active_enable_tooltip=normalize_boolean(
                _pick(data, "activeEnableTooltip", "ts_acw_enable_tooltip")
            ),
            active_tooltip_text=normalize_string(
                _pick(data, "activeTooltipText", "ts_acw_tooltip_text")
            ),
            custom_style=normalize_boolean(_pick(data, "customStyle", "ts_acw_custom_style")),
            custom_icon_color=normalize_string(
                _pick(data, "customIconColor", "ts_acw_icon_color_custom")
            ),
            custom_icon_color_active=normalize_string(
                _pick(data, "customIconColorActive", "ts_acw_icon_color_a_custom")
            ),
            row_visibility="hide" if row_visibility == "hide" else "show",
            visibility_rules=tuple(
                dict(rule) for rule in rules if isinstance(rule, Mapping)
            )
            if isinstance(rules, list)
            else (),
        )


def _new_item_id() -> str:
    return uuid.uuid4().hex[:8]


GLOBAL_ICON_KEYS = {
    "closeIcon": "ts_close_ico",
    "messageIcon": "ts_message_ico",
    "linkIcon": "ts_link_ico",
    "shareIcon": "ts_share_ico",
}


@dataclass
class ActionListConfig:
    """Complete configuration of one action list.

    Attributes
    ----------
    items : List[ActionItem]
        Items in display order.
    icons : Dict[str, IconValue]
        Global icons used by popup panels (close, message, copy-link, share).
    """

    items: List[ActionItem] = field(default_factory=list)
    icons: Dict[str, Optional[IconValue]] = field(default_factory=dict)

    def icon(self, name: str) -> Optional[IconValue]:
        return self.icons.get(name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "icons": {
                name: (self.icons[name].to_dict() if self.icons.get(name) else None)
                for name in GLOBAL_ICON_KEYS
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ActionListConfig":
        raw_icons = data.get("icons")
        icons: Dict[str, Optional[IconValue]] = {}
        for name, legacy in GLOBAL_ICON_KEYS.items():
            source = raw_icons if isinstance(raw_icons, Mapping) else {}
            icons[name] = IconValue.from_dict(_pick(source, name, legacy))
        return cls(
            items=[ActionItem.from_dict(i) for i in _iter_items(_pick(data, "items", "ts_actions"))],
            icons=icons,
        )

    @classmethod
    def from_items(cls, items: Iterable[Union[ActionItem, Mapping[str, Any]]]) -> "ActionListConfig":
        """Create from a list of items or item dictionaries."""
        return cls(
            items=[i if isinstance(i, ActionItem) else ActionItem.from_dict(i) for i in items]
        )

    def validate(self, strict: bool = False) -> bool:
        """Validate the configuration against the bundled JSON schema.

        Parameters
        ----------
        strict : bool
            If True, raise ``jsonschema.ValidationError`` on failure.
            If False, log a warning and return bool.
        """
        with open(SCHEMA_PATH) as f:
            schema = json.load(f)
        try:
            jsonschema.validate(self.to_dict(), schema)
        except jsonschema.ValidationError as exc:
            if strict:
                raise
            logger.warning("Action list config failed validation: %s", exc.message)
            return False
        return True

    def to_json(self, path: Union[str, Path]) -> None:
        """Save configuration to JSON file."""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "ActionListConfig":
        """Load configuration from JSON file."""
        with open(path) as f:
            return cls.from_dict(json.load(f))


def _iter_items(value: Any) -> List[Any]:
    # The legacy format sometimes stores the repeater as an index-keyed object
    if isinstance(value, list):
        return value
    if isinstance(value, Mapping):
        return list(value.values())
    return []
