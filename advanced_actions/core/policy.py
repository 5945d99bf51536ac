"""
Action resolution policy.

``resolve`` turns one action item, the render context and the optional post
context into a ``RenderDescriptor``. Visibility is decided first; the kind's
handler then builds the element. Each kind has its own handler so that its
contract can be tested on its own.
"""

import logging
from dataclasses import replace
from typing import Callable, Dict, Optional

from advanced_actions.codecs.calendar import to_google_calendar_url, to_icalendar_payload
from advanced_actions.config import Settings, get_settings
from advanced_actions.core import action_urls
from advanced_actions.core.capabilities import Clock
from advanced_actions.core.descriptor import (
    ContentPair,
    EffectKind,
    ElementShape,
    PopupKind,
    RenderContext,
    RenderDescriptor,
    SideEffect,
)
from advanced_actions.core.items import ActionItem, ActionKind
from advanced_actions.core.post_context import PostContext
from advanced_actions.styles.classes import ADD_CART_CLASS, KIND_CLASSES, WRAPPER_CLASSES

logger = logging.getLogger(__name__)

RuleEvaluator = Callable[[ActionItem], bool]


class Resolution:
    """Inputs shared by every handler for one ``resolve`` call."""

    def __init__(
        self,
        item: ActionItem,
        context: RenderContext,
        post: Optional[PostContext],
        settings: Settings,
        clock: Optional[Clock] = None,
    ) -> None:
        self.item = item
        self.context = context
        self.post = post
        self.settings = settings
        self.clock = clock

    @property
    def is_preview(self) -> bool:
        return self.context is RenderContext.PREVIEW


Handler = Callable[[Resolution], RenderDescriptor]


# ------------------------------------------------------------------ eligibility

ELIGIBILITY: Dict[ActionKind, Callable[[PostContext], bool]] = {
    ActionKind.DELETE_POST: lambda p: p.permissions.delete,
    ActionKind.PUBLISH_POST: lambda p: p.permissions.publish and p.status == "unpublished",
    ActionKind.UNPUBLISH_POST: lambda p: p.permissions.publish and p.status == "publish",
    ActionKind.ADD_TO_CART: lambda p: p.product is not None and p.product.is_enabled,
    ActionKind.SHOW_ON_MAP: lambda p: p.location is not None and bool(p.location.map_link),
    ActionKind.VIEW_STATS: lambda p: bool(p.stats_link),
    ActionKind.PROMOTE_POST: lambda p: p.promote is not None and p.promote.is_promotable,
    ActionKind.FOLLOW_POST: lambda p: p.timeline_enabled,
    ActionKind.FOLLOW_AUTHOR: lambda p: p.timeline_enabled and p.author_id is not None,
    ActionKind.EDIT_POST: lambda p: p.is_editable,
}


def is_eligible(kind: ActionKind, post: PostContext) -> bool:
    predicate = ELIGIBILITY.get(kind)
    return predicate is None or bool(predicate(post))


def is_visible(
    item: ActionItem,
    context: RenderContext,
    post: Optional[PostContext],
    rule_evaluator: Optional[RuleEvaluator] = None,
    settings: Optional[Settings] = None,
) -> bool:
    """Decide whether ``item`` is rendered at all.

    Preview shows every item, including rows set to ``hide``, unless
    ``settings.honor_row_visibility_in_preview`` is on.
    """
    settings = settings or get_settings()
    if context is RenderContext.PREVIEW:
        if settings.honor_row_visibility_in_preview:
            return not (item.row_visibility == "hide" and not item.has_visibility_rules)
        return True

    if item.has_visibility_rules:
        if rule_evaluator is not None and not rule_evaluator(item):
            return False
    elif item.row_visibility == "hide":
        return False

    kind = item.action_kind
    if kind is None or not kind.is_post_dependent:
        return True
    if post is None:
        return False
    return is_eligible(kind, post)


# ----------------------------------------------------------------- descriptors


def _content(item: ActionItem) -> ContentPair:
    color = item.custom_icon_color if item.custom_style else ""
    return ContentPair(label=item.label, icon=item.icon, icon_color=color)


def _active_content(item: ActionItem) -> ContentPair:
    color = item.custom_icon_color_active if item.custom_style else ""
    return ContentPair(label=item.active_label, icon=item.active_icon, icon_color=color)


def base_descriptor(item: ActionItem) -> RenderDescriptor:
    """A visible, inert descriptor carrying the item's display content."""
    kind = item.action_kind
    classes = (KIND_CLASSES[kind],) if kind in KIND_CLASSES else ()
    wrapper = (WRAPPER_CLASSES[kind],) if kind in WRAPPER_CLASSES else ()
    return RenderDescriptor(
        item_id=item.id,
        kind=item.kind,
        classes=classes,
        wrapper_classes=wrapper,
        content=_content(item),
        active_content=_active_content(item) if kind is not None and kind.is_toggleable else None,
    )


def hidden_descriptor(item: ActionItem) -> RenderDescriptor:
    return replace(base_descriptor(item), visible=False)


def _link(r: Resolution, href: Optional[str], **changes) -> RenderDescriptor:
    base = base_descriptor(r.item)
    if not href:
        return base
    return replace(base, shape=ElementShape.LINK, href=href, **changes)


def _container(r: Resolution) -> RenderDescriptor:
    return base_descriptor(r.item)


# -------------------------------------------------------------------- handlers


def _static_link(r: Resolution) -> RenderDescriptor:
    link = r.item.link
    if link is None:
        return _link(r, "#")
    return _link(
        r,
        link.url or "#",
        target="_blank" if link.is_external else None,
        rel="nofollow" if link.nofollow else None,
        is_external=link.is_external,
        nofollow=link.nofollow,
    )


def _back_to_top(r: Resolution) -> RenderDescriptor:
    return _link(
        r, "#", effect=SideEffect(EffectKind.SCROLL_TO_TOP, smooth=True, prevent_default=True)
    )


def _go_back(r: Resolution) -> RenderDescriptor:
    if r.is_preview:
        return _link(r, "#", effect=SideEffect(EffectKind.NONE, prevent_default=True))
    return _link(r, "#", effect=SideEffect(EffectKind.HISTORY_BACK, prevent_default=True))


def _scroll_to_section(r: Resolution) -> RenderDescriptor:
    return _link(
        r,
        "#",
        effect=SideEffect(
            EffectKind.SCROLL_TO_ID,
            target=r.item.scroll_to_id or None,
            smooth=True,
            prevent_default=True,
        ),
    )


def _google_calendar(r: Resolution) -> RenderDescriptor:
    item = r.item
    url = to_google_calendar_url(
        item.cal_start_date,
        item.cal_end_date,
        title=item.cal_title,
        description=item.cal_description,
        location=item.cal_location,
        timezone_name=item.cal_timezone,
    )
    return _link(r, url, target="_blank", rel="nofollow")


def _icalendar(r: Resolution) -> RenderDescriptor:
    item = r.item
    payload = to_icalendar_payload(
        item.cal_start_date,
        item.cal_end_date,
        title=item.cal_title,
        description=item.cal_description,
        location=item.cal_location,
        url=item.cal_url,
        clock=r.clock,
        settings=r.settings,
    )
    if payload is None:
        return _container(r)
    return _link(r, payload.data, download=payload.filename)


def _post_action(action: str, confirm: bool = False) -> Handler:
    def handler(r: Resolution) -> RenderDescriptor:
        attributes = {"vx-action": ""}
        if confirm:
            attributes["data-confirm"] = r.post.delete_confirm_message
        return _link(
            r, action_urls.post_action_url(action, r.post, r.settings), attributes=attributes
        )

    return handler


def _follow_post(r: Resolution) -> RenderDescriptor:
    post = r.post
    return _link(
        r,
        action_urls.post_action_url(action_urls.FOLLOW_POST, post, r.settings),
        active=post.is_followed,
        intermediate=post.is_follow_requested and not post.is_followed,
        attributes={"vx-action": ""},
    )


def _follow_author(r: Resolution) -> RenderDescriptor:
    post = r.post
    return _link(
        r,
        action_urls.user_action_url(action_urls.FOLLOW_USER, post, r.settings),
        active=post.is_author_followed,
        intermediate=post.is_author_follow_requested and not post.is_author_followed,
        attributes={"vx-action": ""},
    )


def _edit_post(r: Resolution) -> RenderDescriptor:
    steps = r.post.edit_steps
    if len(steps) > 1:
        return _link(
            r,
            "#",
            effect=SideEffect(
                EffectKind.OPEN_POPUP, target=PopupKind.EDIT.value, prevent_default=True
            ),
        )
    if len(steps) == 1:
        return _link(r, steps[0].link)
    return _container(r)


def _share_post(r: Resolution) -> RenderDescriptor:
    return _link(
        r,
        "#",
        effect=SideEffect(EffectKind.OPEN_POPUP, target=PopupKind.SHARE.value, prevent_default=True),
    )


def _show_on_map(r: Resolution) -> RenderDescriptor:
    location = r.post.location
    return _link(r, location.map_link if location else None)


def _view_stats(r: Resolution) -> RenderDescriptor:
    return _link(r, r.post.stats_link)


def _promote_post(r: Resolution) -> RenderDescriptor:
    promote = r.post.promote
    if promote is None:
        return _container(r)
    if promote.is_active:
        return _link(r, promote.order_link, active=True)
    return _link(r, promote.promote_link)


def _add_to_cart(r: Resolution) -> RenderDescriptor:
    item, product = r.item, r.post.product
    if product is not None and product.one_click:
        base = _link(
            r,
            "#",
            effect=SideEffect(EffectKind.DELEGATE_TO_HOST, target="add_to_cart", prevent_default=True),
        )
        attributes = {}
        if product.product_id is not None:
            attributes["data-product-id"] = str(product.product_id)
        return replace(base, classes=base.classes + (ADD_CART_CLASS,), attributes=attributes)

    color = item.custom_icon_color if item.custom_style else ""
    base = _link(r, r.post.post_link)
    return replace(
        base,
        cart_options=True,
        content=ContentPair(label=item.cart_opts_text, icon=item.cart_opts_icon, icon_color=color),
    )


def _select_addition(r: Resolution) -> RenderDescriptor:
    return _link(
        r,
        "#",
        attributes={"data-id": r.item.addition_id},
        effect=SideEffect(
            EffectKind.DELEGATE_TO_HOST, target="select_addition", prevent_default=True
        ),
    )


HANDLERS: Dict[ActionKind, Handler] = {
    ActionKind.NONE: _container,
    ActionKind.LINK: _static_link,
    ActionKind.BACK_TO_TOP: _back_to_top,
    ActionKind.GO_BACK: _go_back,
    ActionKind.SCROLL_TO_SECTION: _scroll_to_section,
    ActionKind.GOOGLE_CALENDAR: _google_calendar,
    ActionKind.ICALENDAR: _icalendar,
    ActionKind.DELETE_POST: _post_action(action_urls.DELETE_POST, confirm=True),
    ActionKind.PUBLISH_POST: _post_action(action_urls.REPUBLISH_POST),
    ActionKind.UNPUBLISH_POST: _post_action(action_urls.UNPUBLISH_POST),
    ActionKind.EDIT_POST: _edit_post,
    ActionKind.SHARE_POST: _share_post,
    ActionKind.FOLLOW_POST: _follow_post,
    ActionKind.FOLLOW_AUTHOR: _follow_author,
    ActionKind.SHOW_ON_MAP: _show_on_map,
    ActionKind.VIEW_STATS: _view_stats,
    ActionKind.PROMOTE_POST: _promote_post,
    ActionKind.ADD_TO_CART: _add_to_cart,
    ActionKind.SELECT_ADDITION: _select_addition,
}


def resolve(
    item: ActionItem,
    context: RenderContext,
    post_context: Optional[PostContext] = None,
    *,
    rule_evaluator: Optional[RuleEvaluator] = None,
    clock: Optional[Clock] = None,
    settings: Optional[Settings] = None,
) -> RenderDescriptor:
    """Resolve one item into a render descriptor.

    Never raises for bad data: ineligible items come back hidden, and items
    that cannot be made interactive come back as containers.

    Parameters
    ----------
    item : ActionItem
        The configured action.
    context : RenderContext
        ``PREVIEW`` shows every item; ``LIVE`` applies visibility rules.
    post_context : PostContext, optional
        The current post, or None when absent or not yet loaded.
    rule_evaluator : callable, optional
        Decides items that carry visibility rules (live context only).
    clock : Clock, optional
        Time source for iCalendar stamps.
    """
    settings = settings or get_settings()

    if not is_visible(item, context, post_context, rule_evaluator, settings):
        logger.debug("Hiding action %s (%s)", item.id, item.kind)
        return hidden_descriptor(item)

    kind = item.action_kind
    if kind is None:
        logger.warning("Unknown action kind %r on item %s", item.kind, item.id)
        return base_descriptor(item)

    if kind.is_post_dependent and post_context is None:
        return base_descriptor(item)

    handler = HANDLERS.get(kind, _container)
    return handler(Resolution(item, context, post_context, settings, clock))
