"""ActionList: composes resolved action items into render nodes and HTML."""

import html
import json
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from advanced_actions.config import Settings, get_settings
from advanced_actions.core.activation import HostHandler, activate
from advanced_actions.core.capabilities import Clock, ElementHandle, History, Viewport
from advanced_actions.core.descriptor import (
    ContentPair,
    ElementShape,
    PopupKind,
    RenderContext,
    RenderDescriptor,
)
from advanced_actions.core.items import ActionItem, ActionListConfig, IconValue
from advanced_actions.core.policy import RuleEvaluator, resolve
from advanced_actions.core.post_context import PostContext
from advanced_actions.core.share import share_links
from advanced_actions.core.tooltips import tooltip_attributes
from advanced_actions.layouts.popup import PopupController, PopupGeometry
from advanced_actions.styles.classes import (
    ACTION_CLASS,
    EMPTY_LIST_CLASS,
    EMPTY_LIVE_TEXT,
    EMPTY_PREVIEW_TEXT,
    ICON_CLASS,
    ICON_PACK_PREFIXES,
    INITIAL_CLASS,
    ITEM_CLASS,
    ITEM_ID_PREFIX,
    LIST_CLASS,
    POPUP_HIDDEN_CLASS,
    POPUP_PANEL_CLASS,
    REVEAL_CLASS,
    WRAP_CLASS,
)

logger = logging.getLogger(__name__)

POPUP_TITLES = {
    PopupKind.EDIT: "Edit post",
    PopupKind.SHARE: "Share post",
}


@dataclass(frozen=True)
class PanelEntry:
    """One link inside a popup panel."""

    key: str
    label: str
    url: str
    is_copy: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"key": self.key, "label": self.label, "url": self.url, "isCopy": self.is_copy}


@dataclass(frozen=True)
class PopupPanelSpec:
    """Content of the floating panel opened by an edit or share item."""

    kind: PopupKind
    title: str
    entries: List[PanelEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "title": self.title,
            "entries": [e.to_dict() for e in self.entries],
        }


@dataclass(frozen=True)
class RenderNode:
    """A visible item with everything needed to draw it."""

    item: ActionItem
    descriptor: RenderDescriptor
    tooltip: Dict[str, str] = field(default_factory=dict)
    popup: Optional[PopupPanelSpec] = None

    @property
    def row_classes(self) -> str:
        classes = [f"{ITEM_ID_PREFIX}{self.item.id}", ITEM_CLASS]
        classes.extend(self.descriptor.wrapper_classes)
        return " ".join(classes)

    @property
    def element_classes(self) -> str:
        classes = [ACTION_CLASS]
        classes.extend(self.descriptor.classes)
        classes.extend(self.descriptor.state_classes)
        return " ".join(classes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.item.id,
            "descriptor": self.descriptor.to_dict(),
            "tooltip": dict(self.tooltip),
            "popup": self.popup.to_dict() if self.popup else None,
        }


def build_popup_panel(
    descriptor: RenderDescriptor, post_context: Optional[PostContext]
) -> Optional[PopupPanelSpec]:
    """Build the panel for a popup-triggering descriptor, or None."""
    kind = descriptor.popup_kind
    if kind is None:
        return None
    if kind is PopupKind.EDIT:
        steps = post_context.edit_steps if post_context else []
        entries = [PanelEntry(key=s.key, label=s.label, url=s.link) for s in steps]
    else:
        entries = [
            PanelEntry(key=link.key, label=link.label, url=link.url, is_copy=link.is_copy)
            for link in share_links(post_context)
        ]
    return PopupPanelSpec(kind=kind, title=POPUP_TITLES[kind], entries=entries)


def render_icon(icon: Optional[IconValue]) -> str:
    """Render an icon as inline SVG, an image or a font-icon ``<i>`` tag."""
    if icon is None or not icon.value:
        return ""
    if icon.is_svg:
        if icon.value.lstrip().startswith("<svg"):
            return icon.value
        return f'<img src="{html.escape(icon.value)}" alt="">'
    classes = icon.value.split()
    if not classes:
        return ""
    if icon.library in ICON_PACK_PREFIXES and classes[0] != icon.library:
        classes.insert(0, icon.library)
    value = " ".join(classes)
    return f'<i class="{html.escape(value)}" aria-hidden="true"></i>'


class ActionList:
    """Render composer for one configured action list.

    Resolves every item against the render context and post context, attaches
    tooltip attributes and popup panels, and renders the result to HTML.

    Parameters
    ----------
    config : ActionListConfig or list
        The configured items, or a list of items / item dictionaries.
    context : RenderContext
        ``PREVIEW`` for the authoring preview, ``LIVE`` for end users.
    post_context : PostContext, optional
        The current post. None when absent or not yet loaded.
    rule_evaluator : callable, optional
        Decides items that carry visibility rules.
    clock : Clock, optional
        Time source for iCalendar stamps.

    Examples
    --------
    >>> config = ActionListConfig.from_json("actions.json")
    >>> post = PostContext.from_dict(payload)
    >>> actions = ActionList(config, RenderContext.LIVE, post)
    >>> actions.display()
    """

    def __init__(
        self,
        config: Union[ActionListConfig, Iterable[Union[ActionItem, Mapping[str, Any]]]],
        context: RenderContext = RenderContext.LIVE,
        post_context: Optional[PostContext] = None,
        rule_evaluator: Optional[RuleEvaluator] = None,
        clock: Optional[Clock] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        if not isinstance(config, ActionListConfig):
            config = ActionListConfig.from_items(config)
        self.config = config
        self.context = context
        self.post_context = post_context
        self.rule_evaluator = rule_evaluator
        self.clock = clock
        self.settings = settings or get_settings()
        self._uid = uuid.uuid4().hex[:12]
        self._popups: Dict[str, PopupController] = {}

    @property
    def items(self) -> List[ActionItem]:
        return self.config.items

    def item(self, item_id: str) -> ActionItem:
        """Return the item with ``item_id``.

        Raises
        ------
        KeyError
            If no item has that id.
        """
        for item in self.config.items:
            if item.id == item_id:
                return item
        raise KeyError(item_id)

    def resolve(self, item: ActionItem) -> RenderDescriptor:
        return resolve(
            item,
            self.context,
            self.post_context,
            rule_evaluator=self.rule_evaluator,
            clock=self.clock,
            settings=self.settings,
        )

    def descriptors(self) -> List[RenderDescriptor]:
        """One descriptor per configured item, hidden ones included."""
        return [self.resolve(item) for item in self.config.items]

    def nodes(self) -> List[RenderNode]:
        """Render nodes for the visible items, in configured order."""
        nodes = []
        for item in self.config.items:
            descriptor = self.resolve(item)
            if not descriptor.visible:
                continue
            nodes.append(
                RenderNode(
                    item=item,
                    descriptor=descriptor,
                    tooltip=tooltip_attributes(
                        item, cart_options=descriptor.cart_options, active=descriptor.active
                    ),
                    popup=build_popup_panel(descriptor, self.post_context),
                )
            )
        return nodes

    # ------------------------------------------------------------ interaction

    def popup_controller(
        self,
        item_id: str,
        viewport: Viewport,
        trigger: Optional[ElementHandle] = None,
        panel: Optional[ElementHandle] = None,
        on_change: Optional[Callable[[PopupGeometry], None]] = None,
    ) -> PopupController:
        """Return the popup controller for an item, creating it on first use.

        Later calls return the same controller; any ``trigger``, ``panel`` or
        ``on_change`` passed replaces the one it holds.
        """
        self.item(item_id)
        controller = self._popups.get(item_id)
        if controller is None:
            controller = PopupController(
                viewport, trigger, panel, on_change=on_change, settings=self.settings
            )
            self._popups[item_id] = controller
            return controller
        if trigger is not None:
            controller.trigger = trigger
        if panel is not None:
            controller.panel = panel
        if on_change is not None:
            controller.set_on_change(on_change)
        return controller

    def activate(
        self,
        item_id: str,
        viewport: Optional[Viewport] = None,
        history: Optional[History] = None,
        host_handlers: Optional[Mapping[str, HostHandler]] = None,
    ) -> bool:
        """Activate an item; return True if default navigation is prevented."""
        descriptor = self.resolve(self.item(item_id))
        return activate(
            descriptor,
            viewport=viewport,
            history=history,
            popups=self._popups,
            host_handlers=host_handlers,
        )

    def close_popups(self) -> None:
        """Tear down every popup, e.g. when the host unmounts the list."""
        for controller in self._popups.values():
            controller.dispose()
        self._popups.clear()

    # ------------------------------------------------------------------- HTML

    def _repr_html_(self) -> str:
        """Jupyter auto-display."""
        return self.to_html()

    def display(self) -> None:
        """Display in IPython/Jupyter."""
        from IPython.display import HTML
        from IPython.display import display as ipy_display

        ipy_display(HTML(self.to_html()))

    def to_html(self) -> str:
        """Generate the full HTML string."""
        uid = self._uid
        if not self.config.items:
            return self._empty_html(uid)

        nodes = self.nodes()

        parts = [
            f'<div id="aal-{uid}" class="aal-container">',
            f'<ul class="{LIST_CLASS}">',
            self._config_script(),
        ]
        for node in nodes:
            parts.append(self._item_html(node, uid))
        parts.append("</ul>")
        parts.append(self._effects_script(nodes, uid))
        parts.append(f"<script>{self._js(uid)}</script>")
        parts.append("</div>")
        return "\n".join(parts)

    def _config_script(self) -> str:
        payload = json.dumps(self.config.to_dict(), ensure_ascii=False).replace("</", "<\\/")
        return f'<script type="text/json" class="vxconfig">{payload}</script>'

    def _empty_html(self, uid: str) -> str:
        text = EMPTY_PREVIEW_TEXT if self.context is RenderContext.PREVIEW else EMPTY_LIVE_TEXT
        return (
            f'<div id="aal-{uid}" class="aal-container">'
            f'<ul class="{LIST_CLASS} {EMPTY_LIST_CLASS}">'
            f"{self._config_script()}"
            f'<li class="{ITEM_CLASS}"><div class="{ACTION_CLASS}">{html.escape(text)}</div></li>'
            f"</ul></div>"
        )

    def _item_html(self, node: RenderNode, uid: str) -> str:
        d = node.descriptor
        tooltip = "".join(
            f' {name}="{html.escape(value)}"' for name, value in node.tooltip.items()
        )
        parts = [f'<li class="{html.escape(node.row_classes)}"{tooltip}>']

        if d.popup_kind is not None:
            parts.append(f'<div class="{WRAP_CLASS}">')
        parts.append(self._element_html(node))
        if d.popup_kind is not None:
            parts.append("</div>")

        if node.popup is not None:
            parts.append(self._popup_html(node, uid))
        parts.append("</li>")
        return "".join(parts)

    def _element_html(self, node: RenderNode) -> str:
        d = node.descriptor
        attrs = [f'class="{html.escape(node.element_classes)}"']
        attrs.append(f'data-action-id="{html.escape(d.item_id)}"')
        for name, value in d.attributes.items():
            attrs.append(f'{name}="{html.escape(value)}"' if value else name)
        label = node.item.label or node.tooltip.get("data-tooltip", "")
        attrs.append(f'aria-label="{html.escape(label)}"')
        content = self._content_html(d)

        if d.shape is ElementShape.CONTAINER:
            return f'<div {" ".join(attrs)} role="button">{content}</div>'

        link_attrs = [f'href="{html.escape(d.href or "#")}"']
        if d.target:
            link_attrs.append(f'target="{d.target}"')
        if d.rel:
            link_attrs.append(f'rel="{d.rel}"')
        if d.download:
            link_attrs.append(f'download="{html.escape(d.download)}"')
        return f'<a {" ".join(link_attrs + attrs)}>{content}</a>'

    def _content_html(self, d: RenderDescriptor) -> str:
        if d.active_content is None:
            return self._pair_html(d.content)
        initial_style = ' style="display:none"' if d.active else ""
        reveal_style = "" if d.active else ' style="display:none"'
        return (
            f'<span class="{INITIAL_CLASS}"{initial_style}>{self._pair_html(d.content)}</span>'
            f'<span class="{REVEAL_CLASS}"{reveal_style}>{self._pair_html(d.active_content)}</span>'
        )

    def _pair_html(self, pair: ContentPair) -> str:
        style = f' style="--ts-icon-color:{html.escape(pair.icon_color)}"' if pair.icon_color else ""
        return (
            f'<div class="{ICON_CLASS}"{style}>{render_icon(pair.icon)}</div>'
            f"{html.escape(pair.label)}"
        )

    def _popup_html(self, node: RenderNode, uid: str) -> str:
        popup = node.popup
        close_icon = render_icon(self.config.icon("closeIcon"))
        link_icon = render_icon(self.config.icon("linkIcon"))
        share_icon = render_icon(self.config.icon("shareIcon"))
        parts = [
            f'<div class="{POPUP_PANEL_CLASS} {POPUP_HIDDEN_CLASS}" '
            f'id="aal-popup-{uid}-{html.escape(node.item.id)}" '
            f'data-popup-kind="{popup.kind.value}">',
            '<div class="ts-popup-head flexify">',
            f'<span class="ts-popup-name">{html.escape(popup.title)}</span>',
            f'<a href="#" class="ts-icon-btn" data-popup-close>{close_icon or "&times;"}</a>',
            "</div>",
            '<ul class="simplify-ul ts-term-dropdown-list">',
        ]
        for entry in popup.entries:
            if entry.is_copy:
                parts.append(
                    f'<li><a href="#" class="flexify" data-copy="{html.escape(entry.url)}">'
                    f"{link_icon}<span>{html.escape(entry.label)}</span></a></li>"
                )
            else:
                icon = share_icon if popup.kind is PopupKind.SHARE else ""
                parts.append(
                    f'<li><a href="{html.escape(entry.url)}" class="flexify" '
                    f'data-entry="{html.escape(entry.key)}" target="_blank" rel="noopener">'
                    f"{icon}<span>{html.escape(entry.label)}</span></a></li>"
                )
        parts.append("</ul></div>")
        return "".join(parts)

    def _effects_script(self, nodes: List[RenderNode], uid: str) -> str:
        effects = {n.item.id: n.descriptor.effect.to_dict() for n in nodes}
        payload = json.dumps(effects, ensure_ascii=False).replace("</", "<\\/")
        return f"<script>var aalEffects_{uid} = {payload};</script>"

    # ---------------------------------------------------------- JavaScript
    def _js(self, uid: str) -> str:
        s = self.settings
        return f"""
(function() {{
  var container = document.getElementById('aal-{uid}');
  if (!container) return;
  var effects = typeof aalEffects_{uid} !== 'undefined' ? aalEffects_{uid} : {{}};
  var DEFAULT_WIDTH = {s.popup_default_width}, GUTTER = {s.popup_viewport_gutter}, MARGIN = {s.popup_edge_margin};
  var openPopup = null;

  function geometry(trigger, panel) {{
    var rect = trigger.getBoundingClientRect();
    var bodyWidth = document.body.clientWidth;
    var minWidth = parseFloat(getComputedStyle(panel).minWidth) || Math.min(DEFAULT_WIDTH, window.innerWidth - GUTTER);
    var width = Math.max(0, Math.min(Math.max(rect.width, minWidth), bodyWidth - 2 * MARGIN));
    var offsetLeft = rect.left + window.scrollX, offsetTop = rect.top + window.scrollY;
    var left = offsetLeft + rect.width / 2 > bodyWidth / 2 + 1 ? offsetLeft - width + rect.width : offsetLeft;
    if (left < 0) left = MARGIN;
    if (left + width > bodyWidth) left = bodyWidth - width - MARGIN;
    var top = offsetTop + rect.height;
    var panelHeight = panel.offsetHeight;
    if (rect.bottom + panelHeight > window.innerHeight && rect.top - panelHeight >= 0) top = offsetTop - panelHeight;
    return {{top: top, left: left, width: width}};
  }}

  function closePopup() {{
    if (!openPopup) return;
    var p = openPopup;
    openPopup = null;
    p.panel.classList.add('{POPUP_HIDDEN_CLASS}');
    window.removeEventListener('scroll', p.reposition, true);
    window.removeEventListener('resize', p.reposition);
    document.removeEventListener('keydown', p.onKey);
    document.removeEventListener('mousedown', p.onPointer);
    cancelAnimationFrame(p.frame);
    if (p.observer) p.observer.disconnect();
  }}

  function showPopup(trigger, panel) {{
    closePopup();
    var p = {{trigger: trigger, panel: panel, last: null, frame: 0, observer: null, settled: false}};
    p.reposition = function() {{
      if (openPopup !== p || !p.settled) return;
      var g = geometry(trigger, panel);
      var serialized = JSON.stringify(g);
      if (serialized === p.last) return;
      p.last = serialized;
      panel.style.position = 'absolute';
      panel.style.top = g.top + 'px';
      panel.style.left = g.left + 'px';
      panel.style.width = g.width + 'px';
    }};
    p.onKey = function(e) {{ if (e.key === 'Escape') closePopup(); }};
    p.onPointer = function(e) {{
      if (!trigger.contains(e.target) && !panel.contains(e.target)) closePopup();
    }};
    openPopup = p;
    document.body.appendChild(panel);
    panel.classList.remove('{POPUP_HIDDEN_CLASS}');
    window.addEventListener('scroll', p.reposition, true);
    window.addEventListener('resize', p.reposition);
    document.addEventListener('keydown', p.onKey);
    if (window.ResizeObserver) {{
      p.observer = new ResizeObserver(p.reposition);
      p.observer.observe(panel);
    }}
    p.frame = requestAnimationFrame(function() {{
      if (openPopup !== p) return;
      document.addEventListener('mousedown', p.onPointer);
      p.frame = requestAnimationFrame(function() {{
        if (openPopup !== p) return;
        p.settled = true;
        p.reposition();
      }});
    }});
  }}

  container.addEventListener('click', function(e) {{
    var el = e.target.closest('[data-action-id]');
    if (!el || !container.contains(el)) return;
    var id = el.getAttribute('data-action-id');
    var effect = effects[id];
    if (!effect) return;
    if (effect.preventDefault) e.preventDefault();
    if (effect.kind === 'scroll_to_top') {{
      window.scrollTo({{top: 0, behavior: effect.smooth ? 'smooth' : 'auto'}});
    }} else if (effect.kind === 'history_back') {{
      window.history.back();
    }} else if (effect.kind === 'scroll_to_id' && effect.target) {{
      var target = document.getElementById(effect.target);
      if (target) target.scrollIntoView({{behavior: effect.smooth ? 'smooth' : 'auto'}});
    }} else if (effect.kind === 'open_popup') {{
      var panel = document.getElementById('aal-popup-{uid}-' + id);
      if (!panel) return;
      if (openPopup && openPopup.panel === panel) closePopup(); else showPopup(el, panel);
    }} else if (effect.kind === 'delegate_to_host') {{
      el.dispatchEvent(new CustomEvent('advanced-actions:' + effect.target, {{
        bubbles: true, detail: {{id: id, productId: el.getAttribute('data-product-id'), additionId: el.getAttribute('data-id')}}
      }}));
    }}
  }});

  document.addEventListener('click', function(e) {{
    if (!openPopup) return;
    var close = e.target.closest('[data-popup-close]');
    var copy = e.target.closest('[data-copy]');
    if (close && openPopup.panel.contains(close)) {{
      e.preventDefault();
      closePopup();
    }} else if (copy && openPopup.panel.contains(copy)) {{
      e.preventDefault();
      if (navigator.clipboard) navigator.clipboard.writeText(copy.getAttribute('data-copy'));
      closePopup();
    }}
  }});
}})();
"""
