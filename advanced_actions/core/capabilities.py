"""Injected host capabilities: viewport, history, clock and element handles.

The engine never touches a browser directly. Hosts (and tests) provide
implementations of these interfaces.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class Rect:
    """A bounding box relative to the viewport, like ``getBoundingClientRect``."""

    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center_x(self) -> float:
        return self.left + self.width / 2


@dataclass(frozen=True)
class ViewportMetrics:
    """Document and viewport dimensions plus the current scroll offset."""

    document_width: float
    viewport_width: float
    viewport_height: float
    scroll_x: float = 0.0
    scroll_y: float = 0.0


class ElementHandle(ABC):
    """A rendered element the geometry code can measure."""

    @abstractmethod
    def bounding_rect(self) -> Optional[Rect]:
        """Current box, or None when the element is not attached."""

    @abstractmethod
    def contains(self, target: Any) -> bool:
        """True if ``target`` is this element or one of its descendants."""

    def css_min_width(self) -> Optional[float]:
        return None


class Viewport(ABC):
    """Window-level operations used by side effects and popup positioning."""

    @abstractmethod
    def metrics(self) -> ViewportMetrics: ...

    @abstractmethod
    def add_listener(self, event: str, handler: Callable[..., None], capture: bool = False) -> None:
        """Register a window listener.

        ``keydown`` handlers receive the key name and ``mousedown`` handlers
        the event target; ``scroll`` and ``resize`` handlers get no arguments.
        """

    @abstractmethod
    def remove_listener(
        self, event: str, handler: Callable[..., None], capture: bool = False
    ) -> None: ...

    @abstractmethod
    def request_frame(self, callback: Callable[[], None]) -> int:
        """Run ``callback`` after the next rendering pass; return a handle."""

    @abstractmethod
    def cancel_frame(self, handle: int) -> None: ...

    @abstractmethod
    def observe_resize(
        self, element: ElementHandle, callback: Callable[[], None]
    ) -> Callable[[], None]:
        """Call ``callback`` when ``element`` changes size; return a disconnect function."""

    @abstractmethod
    def scroll_to_top(self, smooth: bool = True) -> None: ...

    @abstractmethod
    def scroll_into_view(self, element_id: str, smooth: bool = True) -> bool:
        """Scroll the element with ``element_id`` into view. False if it is absent."""


class History(ABC):
    @abstractmethod
    def back(self) -> None: ...


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime:
        """Current instant, timezone-aware."""


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)
