"""Модели фото-ленты: геометрия сетки и готовый результат.

Принципы:
- SRP: геометрия вычисляется только из констант раскладки и индекса ячейки,
  от числа реально снятых кадров не зависит.
- Чистый код: неизменяемость (`frozen=True`).
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Tuple

from PIL import Image

from photobooth import config


def season_id_for(moment: datetime) -> str:
    """Идентификатор сезона вида `season-YYYY-MM`."""
    return f"season-{moment.year}-{moment.month:02d}"


@dataclass(frozen=True)
class StripLayout:
    """Фиксированная сетка ленты (по умолчанию 2x3 на холсте 1200x1800)."""
    width: int = config.STRIP_WIDTH
    height: int = config.STRIP_HEIGHT
    columns: int = config.STRIP_COLUMNS
    rows: int = config.STRIP_ROWS
    gap: int = config.STRIP_GAP
    bottom_margin: int = config.STRIP_BOTTOM_MARGIN

    @property
    def capacity(self) -> int:
        return self.columns * self.rows

    @property
    def cell_width(self) -> float:
        return (self.width - (self.columns + 1) * self.gap) / self.columns

    @property
    def cell_height(self) -> float:
        return (self.height - (self.rows + 1) * self.gap - self.bottom_margin) / self.rows

    def cell_origin(self, index: int) -> Tuple[float, float]:
        """Левый верхний угол ячейки `index` (обход по строкам)."""
        if not 0 <= index < self.capacity:
            raise IndexError(f"Ячейка {index} вне сетки {self.columns}x{self.rows}")
        col = index % self.columns
        row = index // self.columns
        x = self.gap + col * (self.cell_width + self.gap)
        y = self.gap + row * (self.cell_height + self.gap)
        return x, y

    @property
    def footer_center(self) -> Tuple[float, float]:
        return self.width / 2, self.height - self.bottom_margin / 2


@dataclass(frozen=True)
class CompositedStrip:
    """Собранная лента и её метаданные.

    Fields:
        image: Итоговое RGB-изображение.
        photo_count: Сколько кадров передано в сборку.
        background: Цвет фона в исходной записи ("#ffd6d9", "white", ...).
        size: (ширина, высота), px.
        season_id: Идентификатор сезона, зафиксированный при старте серии.
        generated_at: Момент сборки (UTC).
        footer_draws: Сколько раз была нарисована подпись (ожидается 1).
    """
    image: Image.Image
    photo_count: int
    background: str
    size: Tuple[int, int]
    season_id: str
    generated_at: datetime
    footer_draws: int = 1
