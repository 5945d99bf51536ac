"""Shared fixtures: recording fakes for the host capabilities."""

from datetime import datetime, timezone

import pytest

from advanced_actions.config import get_settings
from advanced_actions.core.capabilities import (
    Clock,
    ElementHandle,
    History,
    Rect,
    Viewport,
    ViewportMetrics,
)

ENV_VARS = [
    "ADVANCED_ACTIONS_ENDPOINT",
    "ADVANCED_ACTIONS_SITE_ORIGIN",
    "ADVANCED_ACTIONS_POPUP_WIDTH",
    "ADVANCED_ACTIONS_POPUP_GUTTER",
    "ADVANCED_ACTIONS_POPUP_EDGE_MARGIN",
    "ADVANCED_ACTIONS_PREVIEW_HONORS_HIDE",
    "ADVANCED_ACTIONS_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakeElement(ElementHandle):
    def __init__(self, rect=None, min_width=None, children=()):
        self.rect = rect
        self.min_width = min_width
        self.children = list(children)

    def bounding_rect(self):
        return self.rect

    def contains(self, target):
        return target is self or any(target is child for child in self.children)

    def css_min_width(self):
        return self.min_width


class FakeViewport(Viewport):
    def __init__(self, metrics=None, element_ids=()):
        self.current = metrics or ViewportMetrics(
            document_width=1000, viewport_width=1000, viewport_height=800
        )
        self.listeners = []
        self.frames = {}
        self.observers = {}
        self.element_ids = set(element_ids)
        self.scrolled_to_top = []
        self.scrolled_into_view = []
        self._next_handle = 0

    def metrics(self):
        return self.current

    def add_listener(self, event, handler, capture=False):
        self.listeners.append((event, handler, capture))

    def remove_listener(self, event, handler, capture=False):
        self.listeners.remove((event, handler, capture))

    def request_frame(self, callback):
        self._next_handle += 1
        self.frames[self._next_handle] = callback
        return self._next_handle

    def cancel_frame(self, handle):
        self.frames.pop(handle, None)

    def observe_resize(self, element, callback):
        key = object()
        self.observers[key] = callback
        return lambda: self.observers.pop(key, None)

    def scroll_to_top(self, smooth=True):
        self.scrolled_to_top.append(smooth)

    def scroll_into_view(self, element_id, smooth=True):
        if element_id not in self.element_ids:
            return False
        self.scrolled_into_view.append(element_id)
        return True

    # Test drivers

    def run_frames(self):
        pending = list(self.frames.values())
        self.frames.clear()
        for callback in pending:
            callback()

    def fire(self, event, *args):
        for name, handler, _capture in list(self.listeners):
            if name == event:
                handler(*args)

    def notify_resize(self):
        for callback in list(self.observers.values()):
            callback()

    def events(self):
        return sorted(name for name, _handler, _capture in self.listeners)


class FakeHistory(History):
    def __init__(self):
        self.back_calls = 0

    def back(self):
        self.back_calls += 1


class FixedClock(Clock):
    def __init__(self, instant):
        self.instant = instant

    def now(self):
        return self.instant


@pytest.fixture
def viewport():
    return FakeViewport()


@pytest.fixture
def history():
    return FakeHistory()


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def make_element():
    def factory(left=0, top=0, width=0, height=0, min_width=None, children=(), attached=True):
        rect = Rect(left, top, width, height) if attached else None
        return FakeElement(rect, min_width=min_width, children=children)

    return factory


@pytest.fixture
def make_viewport():
    def factory(document_width=1000, viewport_width=None, viewport_height=800, **kwargs):
        metrics = ViewportMetrics(
            document_width=document_width,
            viewport_width=viewport_width if viewport_width is not None else document_width,
            viewport_height=viewport_height,
            scroll_x=kwargs.pop("scroll_x", 0),
            scroll_y=kwargs.pop("scroll_y", 0),
        )
        return FakeViewport(metrics, **kwargs)

    return factory
