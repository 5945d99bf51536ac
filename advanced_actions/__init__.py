"""
Advanced Actions: resolve and render configurable action lists for CMS posts.
"""

__version__ = "0.1.0"

from advanced_actions.codecs.calendar import (
    ICalendarPayload,
    to_google_calendar_url,
    to_icalendar_payload,
)
from advanced_actions.config import Settings, get_settings
from advanced_actions.core.action_list import ActionList, PopupPanelSpec, RenderNode
from advanced_actions.core.activation import activate
from advanced_actions.core.descriptor import (
    ContentPair,
    EffectKind,
    ElementShape,
    PopupKind,
    RenderContext,
    RenderDescriptor,
    SideEffect,
)
from advanced_actions.core.items import ActionItem, ActionKind, ActionListConfig, IconValue
from advanced_actions.core.policy import resolve
from advanced_actions.core.post_context import PostContext
from advanced_actions.layouts.popup import PopupController, PopupGeometry, compute_popup_geometry
from advanced_actions.logging import configure_logging

__all__ = [
    "ActionItem",
    "ActionKind",
    "ActionListConfig",
    "IconValue",
    "PostContext",
    "RenderContext",
    "RenderDescriptor",
    "ElementShape",
    "EffectKind",
    "PopupKind",
    "SideEffect",
    "ContentPair",
    "resolve",
    "activate",
    "ActionList",
    "RenderNode",
    "PopupPanelSpec",
    "PopupController",
    "PopupGeometry",
    "compute_popup_geometry",
    "ICalendarPayload",
    "to_google_calendar_url",
    "to_icalendar_payload",
    "Settings",
    "get_settings",
    "configure_logging",
    "__version__",
]
