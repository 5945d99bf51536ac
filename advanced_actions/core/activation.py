"""Executes a descriptor's activation effect through the host capabilities."""

import logging
from typing import Callable, Mapping, Optional

from advanced_actions.core.capabilities import History, Viewport
from advanced_actions.core.descriptor import EffectKind, RenderDescriptor
from advanced_actions.layouts.popup import PopupController

logger = logging.getLogger(__name__)

HostHandler = Callable[[RenderDescriptor], None]


def activate(
    descriptor: RenderDescriptor,
    viewport: Optional[Viewport] = None,
    history: Optional[History] = None,
    popups: Optional[Mapping[str, PopupController]] = None,
    host_handlers: Optional[Mapping[str, HostHandler]] = None,
) -> bool:
    """Run the effect of an activated item.

    Parameters
    ----------
    descriptor : RenderDescriptor
        The activated item's descriptor.
    viewport, history : optional
        Capabilities needed by scroll and back effects.
    popups : Mapping[str, PopupController], optional
        Popup controllers keyed by item id, for open-popup effects.
    host_handlers : Mapping[str, callable], optional
        Host callbacks keyed by handler name (``"add_to_cart"``,
        ``"select_addition"``).

    Returns
    -------
    bool
        True when the element's default navigation must be prevented.
    """
    if not descriptor.visible:
        return False
    effect = descriptor.effect

    if effect.kind is EffectKind.SCROLL_TO_TOP:
        if viewport is not None:
            viewport.scroll_to_top(effect.smooth)
    elif effect.kind is EffectKind.HISTORY_BACK:
        if history is not None:
            history.back()
    elif effect.kind is EffectKind.SCROLL_TO_ID:
        if viewport is not None and effect.target:
            if not viewport.scroll_into_view(effect.target, effect.smooth):
                logger.debug("Scroll target #%s not found", effect.target)
    elif effect.kind is EffectKind.OPEN_POPUP:
        controller = (popups or {}).get(descriptor.item_id)
        if controller is not None:
            controller.toggle()
    elif effect.kind is EffectKind.DELEGATE_TO_HOST:
        handler = (host_handlers or {}).get(effect.target or "")
        if handler is not None:
            handler(descriptor)
        else:
            logger.debug("No host handler registered for %s", effect.target)

    return effect.prevent_default
