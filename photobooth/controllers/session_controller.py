"""Контроллер серии съёмки: явный конечный автомат.

Состояния: Idle -> Counting -> Capturing -> (Counting | Done).
SOLID:
- SRP: `transition` чистая функция (состояние, событие) -> (состояние, эффекты);
  `CaptureSessionController` только исполняет эффекты (таймеры, съёмка, колбэки).
- DIP: таймеры через протокол `Scheduler`, кадры через протокол `FrameSource`.
Clean Code:
- События таймеров и съёмки приходят как сообщения; устаревшие события
  в неподходящем состоянии игнорируются.
"""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Callable, Deque, Dict, Optional, Protocol, Tuple, Union

from PIL import Image

from photobooth import config
from photobooth.errors import CaptureUnavailable
from photobooth.models.filter_model import FilterDescriptor
from photobooth.models.frame_model import CapturedFrame, CaptureState, SessionState
from photobooth.models.strip_model import season_id_for
from photobooth.services.capture_service import FrameCaptureService
from photobooth.services.scheduler import Scheduler

logger = logging.getLogger(__name__)


class FrameSource(Protocol):
    def is_opened(self) -> bool: ...

    def read_frame(self) -> Optional[Image.Image]: ...


# ---- Events ----
@dataclass(frozen=True)
class Start:
    season_id: str


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class ShotTaken:
    frame: Optional[CapturedFrame]


@dataclass(frozen=True)
class PauseElapsed:
    pass


@dataclass(frozen=True)
class HandoffElapsed:
    pass


@dataclass(frozen=True)
class Cancel:
    pass


SessionEvent = Union[Start, Tick, ShotTaken, PauseElapsed, HandoffElapsed, Cancel]


# ---- Effects ----
@dataclass(frozen=True)
class EmitCountdown:
    value: int


@dataclass(frozen=True)
class ScheduleTick:
    pass


@dataclass(frozen=True)
class RequestCapture:
    index: int


@dataclass(frozen=True)
class FrameStored:
    frame: CapturedFrame


@dataclass(frozen=True)
class SchedulePause:
    pass


@dataclass(frozen=True)
class Finish:
    frames: Tuple[CapturedFrame, ...]


@dataclass(frozen=True)
class ScheduleHandoff:
    pass


@dataclass(frozen=True)
class Ready:
    frames: Tuple[CapturedFrame, ...]


@dataclass(frozen=True)
class ClearTimers:
    pass


Effect = Union[
    EmitCountdown, ScheduleTick, RequestCapture, FrameStored, SchedulePause,
    Finish, ScheduleHandoff, Ready, ClearTimers,
]


def transition(state: SessionState, event: SessionEvent) -> Tuple[SessionState, Tuple[Effect, ...]]:
    """Чистая функция переходов автомата серии.

    В состоянии Capturing `countdown == 0` означает «ждём кадр»,
    `countdown is None` означает «ждём паузу между кадрами».
    """
    if isinstance(event, Cancel):
        if state.state is CaptureState.IDLE:
            return state, ()
        idle = SessionState(target_count=state.target_count, countdown_start=state.countdown_start)
        return idle, (ClearTimers(),)

    if isinstance(event, Start):
        if state.active:
            return state, ()
        counting = SessionState(
            state=CaptureState.COUNTING,
            countdown=state.countdown_start,
            season_id=event.season_id,
            target_count=state.target_count,
            countdown_start=state.countdown_start,
        )
        return counting, (ClearTimers(), EmitCountdown(counting.countdown), ScheduleTick())

    if isinstance(event, Tick) and state.state is CaptureState.COUNTING:
        value = state.countdown - 1
        if value > 0:
            return replace(state, countdown=value), (EmitCountdown(value), ScheduleTick())
        capturing = replace(state, state=CaptureState.CAPTURING, countdown=0)
        return capturing, (EmitCountdown(0), RequestCapture(len(state.frames)))

    if isinstance(event, ShotTaken) and state.state is CaptureState.CAPTURING and state.countdown == 0:
        attempts = state.attempts + 1
        frames = state.frames
        effects: Tuple[Effect, ...] = ()
        if event.frame is not None:
            frames = frames + (event.frame,)
            effects = (FrameStored(event.frame),)
        if attempts < state.target_count:
            waiting = replace(state, attempts=attempts, frames=frames, countdown=None)
            return waiting, effects + (SchedulePause(),)
        done = replace(state, state=CaptureState.DONE, attempts=attempts, frames=frames, countdown=None)
        return done, effects + (Finish(frames), ScheduleHandoff())

    if isinstance(event, PauseElapsed) and state.state is CaptureState.CAPTURING and state.countdown is None:
        counting = replace(state, state=CaptureState.COUNTING, countdown=state.countdown_start)
        return counting, (EmitCountdown(counting.countdown), ScheduleTick())

    if isinstance(event, HandoffElapsed) and state.state is CaptureState.DONE:
        return state, (Ready(state.frames),)

    return state, ()


class CaptureSessionController:
    """Исполняет эффекты автомата серии.

    Колбэки (назначаются снаружи, как у виджетов UI):
    - on_countdown(value): значение обратного отсчёта для отображения;
    - on_frame(frame): кадр снят и сохранён;
    - on_complete(frames): серия завершена;
    - on_ready(frames): после паузы передачи можно собирать ленту.
    """

    def __init__(
        self,
        source: FrameSource,
        scheduler: Scheduler,
        capture_service: Optional[FrameCaptureService] = None,
        clock: Callable[[], datetime] = datetime.now,
        target_count: int = config.SHOT_COUNT,
        countdown_start: int = config.COUNTDOWN_START,
        tick_s: float = config.COUNTDOWN_TICK_S,
        pause_s: float = config.INTER_SHOT_PAUSE_S,
        handoff_s: float = config.HANDOFF_DELAY_S,
    ) -> None:
        self._source = source
        self._scheduler = scheduler
        self._capture_service = capture_service or FrameCaptureService()
        self._clock = clock
        self._tick_s = tick_s
        self._pause_s = pause_s
        self._handoff_s = handoff_s

        self._state = SessionState(target_count=target_count, countdown_start=countdown_start)
        self._filter = FilterDescriptor.NONE
        self._pending: Dict[object, Any] = {}
        self._queue: Deque[SessionEvent] = deque()
        self._draining = False

        self.on_countdown: Optional[Callable[[int], None]] = None
        self.on_frame: Optional[Callable[[CapturedFrame], None]] = None
        self.on_complete: Optional[Callable[[Tuple[CapturedFrame, ...]], None]] = None
        self.on_ready: Optional[Callable[[Tuple[CapturedFrame, ...]], None]] = None

    # ---- Public API ----
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def filter(self) -> FilterDescriptor:
        return self._filter

    def set_filter(self, descriptor: FilterDescriptor) -> None:
        """Фильтр можно менять и во время серии: берётся в момент съёмки."""
        self._filter = descriptor

    @property
    def pending_timers(self) -> int:
        return len(self._pending)

    def start(self) -> bool:
        """Запускает серию. Во время активной серии ничего не делает."""
        if self._state.active:
            return False
        if not self._source.is_opened():
            logger.warning("Camera is not available; capture session not started")
            return False
        season_id = season_id_for(self._clock())
        logger.info("Capture session started (%s)", season_id)
        self._dispatch(Start(season_id))
        return True

    def cancel(self) -> None:
        """Сбрасывает таймеры и частично снятые кадры, возвращает автомат в Idle."""
        if self._state.state is not CaptureState.IDLE:
            logger.info("Capture session cancelled at %d/%d frames", len(self._state.frames), self._state.target_count)
        self._dispatch(Cancel())

    # ---- Internals ----
    def _dispatch(self, event: SessionEvent) -> None:
        self._queue.append(event)
        if self._draining:
            return
        self._draining = True
        try:
            while self._queue:
                self._state, effects = transition(self._state, self._queue.popleft())
                for effect in effects:
                    self._run(effect)
        finally:
            self._draining = False

    def _run(self, effect: Effect) -> None:
        if isinstance(effect, EmitCountdown):
            if self.on_countdown:
                self.on_countdown(effect.value)
        elif isinstance(effect, ScheduleTick):
            self._schedule(self._tick_s, Tick())
        elif isinstance(effect, RequestCapture):
            self._capture(effect.index)
        elif isinstance(effect, FrameStored):
            if self.on_frame:
                self.on_frame(effect.frame)
        elif isinstance(effect, SchedulePause):
            self._schedule(self._pause_s, PauseElapsed())
        elif isinstance(effect, Finish):
            logger.info("Capture session done: %d/%d frames", len(effect.frames), self._state.target_count)
            if self.on_complete:
                self.on_complete(effect.frames)
        elif isinstance(effect, ScheduleHandoff):
            self._schedule(self._handoff_s, HandoffElapsed())
        elif isinstance(effect, Ready):
            if self.on_ready:
                self.on_ready(effect.frames)
        elif isinstance(effect, ClearTimers):
            self._clear_timers()

    def _capture(self, index: int) -> None:
        try:
            frame: Optional[CapturedFrame] = self._capture_service.capture(self._source.read_frame(), self._filter, index)
        except CaptureUnavailable as exc:
            logger.warning("Shot %d skipped: %s", self._state.attempts + 1, exc)
            frame = None
        self._dispatch(ShotTaken(frame))

    def _schedule(self, delay_s: float, event: SessionEvent) -> None:
        token = object()

        def fire() -> None:
            self._pending.pop(token, None)
            self._dispatch(event)

        self._pending[token] = self._scheduler.call_later(delay_s, fire)

    def _clear_timers(self) -> None:
        for handle in self._pending.values():
            self._scheduler.cancel(handle)
        self._pending.clear()
