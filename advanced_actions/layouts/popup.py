"""Floating panel placement for popup-triggering actions."""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from advanced_actions.config import Settings, get_settings
from advanced_actions.core.capabilities import ElementHandle, Rect, Viewport, ViewportMetrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PopupGeometry:
    """Panel position in document coordinates."""

    top: float
    left: float
    width: float

    def serialize(self) -> str:
        return json.dumps({"top": self.top, "left": self.left, "width": self.width}, sort_keys=True)

    def to_style(self) -> Dict[str, str]:
        return {
            "position": "absolute",
            "top": f"{self.top:g}px",
            "left": f"{self.left:g}px",
            "width": f"{self.width:g}px",
        }


def compute_popup_geometry(
    trigger: Rect,
    panel: Optional[Rect],
    metrics: ViewportMetrics,
    css_min_width: Optional[float] = None,
    settings: Optional[Settings] = None,
) -> PopupGeometry:
    """Place a panel below (or above) its trigger.

    Parameters
    ----------
    trigger : Rect
        Trigger box relative to the viewport.
    panel : Rect, optional
        Current panel box; only its height is used. None before first layout.
    metrics : ViewportMetrics
        Document width, viewport size and scroll offset.
    css_min_width : float, optional
        The panel's CSS ``min-width``, when set.

    Returns
    -------
    PopupGeometry
        ``top``/``left`` in document coordinates and the panel width.
    """
    settings = settings or get_settings()
    margin = settings.popup_edge_margin

    default_width = min(
        settings.popup_default_width, metrics.viewport_width - settings.popup_viewport_gutter
    )
    width = max(trigger.width, css_min_width or default_width)
    # Never wider than the document minus an edge margin on each side
    width = max(0.0, min(width, metrics.document_width - 2 * margin))

    offset_left = trigger.left + metrics.scroll_x
    offset_top = trigger.top + metrics.scroll_y

    if offset_left + trigger.width / 2 > metrics.document_width / 2 + 1:
        left = offset_left - width + trigger.width
    else:
        left = offset_left

    if left < 0:
        left = margin
    if left + width > metrics.document_width:
        left = metrics.document_width - width - margin

    top = offset_top + trigger.height
    panel_height = panel.height if panel is not None else 0.0
    if trigger.bottom + panel_height > metrics.viewport_height and trigger.top - panel_height >= 0:
        top = offset_top - panel_height

    return PopupGeometry(top=top, left=left, width=width)


class PopupState(Enum):
    CLOSED = "closed"
    OPEN = "open"


class PopupController:
    """Open/close state machine for one floating panel.

    While open, the controller listens for scroll (capture), resize, panel
    size changes, Escape and outside pointer-down, and repositions the panel
    through ``compute_popup_geometry``. Repositioning starts once the panel has
    been laid out, two frames after opening. Every listener is removed on
    close.

    Parameters
    ----------
    viewport : Viewport
        Host window capability.
    trigger, panel : ElementHandle, optional
        The anchor and the floating panel. Either may be missing; the
        controller then skips positioning.
    on_change : callable, optional
        Called with each newly committed ``PopupGeometry``.
    on_close : callable, optional
        Called after the panel closes.
    """

    def __init__(
        self,
        viewport: Viewport,
        trigger: Optional[ElementHandle] = None,
        panel: Optional[ElementHandle] = None,
        on_change: Optional[Callable[[PopupGeometry], None]] = None,
        on_close: Optional[Callable[[], None]] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.viewport = viewport
        self.trigger = trigger
        self.panel = panel
        self.state = PopupState.CLOSED
        self.geometry: Optional[PopupGeometry] = None
        self._on_change = on_change
        self._on_close = on_close
        self._settings = settings
        self._generation = 0
        self._frames: List[int] = []
        self._listeners: List[tuple] = []
        self._disconnect_resize: Optional[Callable[[], None]] = None
        self._last_serialized: Optional[str] = None
        self._settled = False

    @property
    def is_open(self) -> bool:
        return self.state is PopupState.OPEN

    def open(self) -> None:
        if self.is_open:
            return
        self.state = PopupState.OPEN
        self._generation += 1
        generation = self._generation

        self._listen("scroll", self._on_viewport_change, capture=True)
        self._listen("resize", self._on_viewport_change)
        self._listen("keydown", self.handle_key)
        if self.panel is not None:
            self._disconnect_resize = self.viewport.observe_resize(self.panel, self.reposition)

        # Wait two frames so the panel has been laid out before measuring
        def first_frame() -> None:
            if generation != self._generation:
                return
            # Registered late so the click that opened the panel does not close it
            self._listen("mousedown", self.handle_pointer_down)
            self._schedule(second_frame)

        def second_frame() -> None:
            if generation != self._generation:
                return
            self._settled = True
            self.reposition()

        self._schedule(first_frame)

    def close(self) -> None:
        if not self.is_open:
            return
        self.state = PopupState.CLOSED
        self._generation += 1
        self._teardown()
        self._last_serialized = None
        if self._on_close is not None:
            self._on_close()

    def toggle(self) -> None:
        if self.is_open:
            self.close()
        else:
            self.open()

    def set_on_change(self, on_change: Optional[Callable[[PopupGeometry], None]]) -> None:
        self._on_change = on_change

    def dispose(self) -> None:
        """Release everything when the host unmounts, without notifying."""
        self.state = PopupState.CLOSED
        self._generation += 1
        self._teardown()

    def reposition(self) -> bool:
        """Recompute geometry; return True if a new geometry was committed."""
        if not self.is_open:
            return False
        if not self._settled:
            logger.debug("Skipping popup reposition: layout not settled")
            return False
        if self.trigger is None or self.panel is None:
            logger.debug("Skipping popup reposition: element missing")
            return False
        trigger_rect = self.trigger.bounding_rect()
        if trigger_rect is None:
            logger.debug("Skipping popup reposition: trigger detached")
            return False

        geometry = compute_popup_geometry(
            trigger_rect,
            self.panel.bounding_rect(),
            self.viewport.metrics(),
            css_min_width=self.panel.css_min_width(),
            settings=self._settings,
        )
        serialized = geometry.serialize()
        if serialized == self._last_serialized:
            return False
        self._last_serialized = serialized
        self.geometry = geometry
        if self._on_change is not None:
            self._on_change(geometry)
        return True

    def handle_key(self, key: Any) -> None:
        if self.is_open and key == "Escape":
            self.close()

    def handle_pointer_down(self, target: Any) -> None:
        if not self.is_open:
            return
        for element in (self.trigger, self.panel):
            if element is not None and element.contains(target):
                return
        self.close()

    def _on_viewport_change(self, *_args: Any) -> None:
        self.reposition()

    def _listen(self, event: str, handler: Callable[..., None], capture: bool = False) -> None:
        self.viewport.add_listener(event, handler, capture)
        self._listeners.append((event, handler, capture))

    def _schedule(self, callback: Callable[[], None]) -> None:
        self._frames.append(self.viewport.request_frame(callback))

    def _teardown(self) -> None:
        self._settled = False
        for event, handler, capture in self._listeners:
            self.viewport.remove_listener(event, handler, capture)
        self._listeners = []
        for handle in self._frames:
            self.viewport.cancel_frame(handle)
        self._frames = []
        if self._disconnect_resize is not None:
            self._disconnect_resize()
            self._disconnect_resize = None
