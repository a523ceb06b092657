from __future__ import annotations

import itertools
from typing import Callable, Dict, List, Optional, Tuple

import pytest
from PIL import Image

from photobooth.models.filter_model import FilterDescriptor
from photobooth.models.frame_model import CapturedFrame
from photobooth.services.capture_service import encode_png


class FakeScheduler:
    """Manual clock: timers fire only when the test advances time."""

    def __init__(self) -> None:
        self.now = 0.0
        self._seq = itertools.count()
        self._timers: Dict[int, Tuple[float, int, Callable[[], None]]] = {}

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> int:
        handle = next(self._seq)
        self._timers[handle] = (self.now + delay_s, handle, callback)
        return handle

    def cancel(self, handle: int) -> None:
        self._timers.pop(handle, None)

    @property
    def pending(self) -> int:
        return len(self._timers)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while self._timers:
            due, handle, callback = min(self._timers.values())
            if due > target + 1e-9:
                break
            del self._timers[handle]
            self.now = due
            callback()
        self.now = target

    def run_all(self, limit: int = 1000) -> None:
        for _ in range(limit):
            if not self._timers:
                return
            due, _handle, _cb = min(self._timers.values())
            self.advance(due - self.now)
        raise AssertionError("timers did not settle")


class FakeSource:
    """Live source that replays a script of frames; None simulates a dropout."""

    def __init__(self, frames: Optional[List[Optional[Image.Image]]] = None, opened: bool = True) -> None:
        self._frames = list(frames) if frames is not None else []
        self._default = Image.new("RGB", (1280, 720), (40, 120, 200))
        self.opened = opened
        self.reads = 0
        self.on_read: Optional[Callable[[], None]] = None

    def is_opened(self) -> bool:
        return self.opened

    def read_frame(self) -> Optional[Image.Image]:
        self.reads += 1
        if self.on_read:
            self.on_read()
        if self._frames:
            return self._frames.pop(0)
        return self._default


def solid_frame(index: int, color: Tuple[int, int, int] = (220, 20, 20), size: int = 600) -> CapturedFrame:
    data = encode_png(Image.new("RGB", (size, size), color))
    return CapturedFrame(index=index, png_bytes=data, filter=FilterDescriptor.NONE, width=size, height=size)


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()
