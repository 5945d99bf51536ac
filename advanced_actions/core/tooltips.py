"""Tooltip attribute schemes.

Each action kind carries its hover hint through exactly one of three
attribute conventions:

- follow kinds use ``tooltip-inactive`` / ``tooltip-active``;
- select add-on uses ``data-tooltip`` + ``data-tooltip-default`` and
  ``data-tooltip-active``;
- everything else uses a single ``data-tooltip``.
"""

from enum import Enum
from typing import Dict

from advanced_actions.core.items import FOLLOW_KINDS, ActionItem, ActionKind


class TooltipScheme(Enum):
    TOGGLE = "toggle"
    SELECT_ADDITION = "select_addition"
    SINGLE = "single"


def select_scheme(item: ActionItem) -> TooltipScheme:
    kind = item.action_kind
    if kind in FOLLOW_KINDS:
        return TooltipScheme.TOGGLE
    if kind is ActionKind.SELECT_ADDITION:
        return TooltipScheme.SELECT_ADDITION
    return TooltipScheme.SINGLE


def tooltip_attributes(
    item: ActionItem, cart_options: bool = False, active: bool = False
) -> Dict[str, str]:
    """Return the tooltip attributes for ``item``.

    Parameters
    ----------
    cart_options : bool
        The item renders its cart "select options" variant, whose tooltip
        comes from the dedicated cart fields.
    active : bool
        The item is in its active state; single-scheme items then use the
        active tooltip fields.
    """
    scheme = select_scheme(item)
    attrs: Dict[str, str] = {}

    if scheme is TooltipScheme.TOGGLE:
        if item.enable_tooltip and item.tooltip_text:
            attrs["tooltip-inactive"] = item.tooltip_text
        if item.active_enable_tooltip and item.active_tooltip_text:
            attrs["tooltip-active"] = item.active_tooltip_text
        return attrs

    if scheme is TooltipScheme.SELECT_ADDITION:
        if item.enable_tooltip and item.tooltip_text:
            attrs["data-tooltip"] = item.tooltip_text
            attrs["data-tooltip-default"] = item.tooltip_text
        if item.active_enable_tooltip and item.active_tooltip_text:
            attrs["data-tooltip-active"] = item.active_tooltip_text
        return attrs

    if cart_options:
        enabled, text = item.cart_opts_enable_tooltip, item.cart_opts_tooltip_text
    elif active:
        enabled, text = item.active_enable_tooltip, item.active_tooltip_text
    else:
        enabled, text = item.enable_tooltip, item.tooltip_text
    if enabled and text:
        attrs["data-tooltip"] = text
    return attrs
