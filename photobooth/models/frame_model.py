"""Модели кадров и состояния серии съёмки.

Принципы:
- SRP: только структуры данных, без логики съёмки.
- Чистый код: неизменяемость (`frozen=True`); состояние сессии меняется
  только через функцию переходов контроллера.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from photobooth import config
from photobooth.models.filter_model import FilterDescriptor


@dataclass(frozen=True)
class CapturedFrame:
    """Снятый кадр.

    Fields:
        index: Порядковый номер кадра в серии (с нуля).
        png_bytes: Квадратное изображение в PNG.
        filter: Фильтр, активный в момент съёмки.
        width: Ширина, px.
        height: Высота, px.
    """
    index: int
    png_bytes: bytes
    filter: FilterDescriptor
    width: int
    height: int


class CaptureState(str, Enum):
    IDLE = "idle"
    COUNTING = "counting"
    CAPTURING = "capturing"
    DONE = "done"


@dataclass(frozen=True)
class SessionState:
    """Снимок состояния серии.

    `attempts` считает все попытки съёмки, включая пропущенные кадры,
    поэтому `len(frames) <= attempts <= target_count`.
    """
    state: CaptureState = CaptureState.IDLE
    countdown: Optional[int] = None
    attempts: int = 0
    frames: Tuple[CapturedFrame, ...] = ()
    season_id: Optional[str] = None
    target_count: int = config.SHOT_COUNT
    countdown_start: int = config.COUNTDOWN_START

    @property
    def active(self) -> bool:
        return self.state in (CaptureState.COUNTING, CaptureState.CAPTURING)
