"""Съёмка одного кадра из живого источника.

Принципы:
- SRP: обрезка до квадрата, зеркалирование, фильтр и кодирование в PNG.
- Без побочных эффектов: исходный кадр превью только читается, фильтр
  действует лишь на время рендера этого кадра.
"""
from __future__ import annotations

import io
from typing import Optional

from PIL import Image, ImageOps

from photobooth import config
from photobooth.errors import CaptureUnavailable
from photobooth.models.filter_model import FilterDescriptor
from photobooth.models.frame_model import CapturedFrame
from photobooth.services.filter_service import FilterService


def center_square_box(width: int, height: int) -> tuple[int, int, int, int]:
    """Наибольший квадрат по центру кадра: (left, top, right, bottom)."""
    size = min(width, height)
    left = (width - size) // 2
    top = (height - size) // 2
    return left, top, left + size, top + size


def encode_png(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


class FrameCaptureService:
    def __init__(self, output_size: int = config.CAPTURE_SIZE, filter_service: Optional[FilterService] = None) -> None:
        self._output_size = output_size
        self._filters = filter_service or FilterService()

    @property
    def output_size(self) -> int:
        return self._output_size

    def render(self, source: Optional[Image.Image], descriptor: FilterDescriptor) -> Image.Image:
        """Возвращает квадратный зеркальный кадр с применённым фильтром.

        Raises:
            CaptureUnavailable: если источник пуст или у него нулевые размеры.
        """
        if source is None:
            raise CaptureUnavailable("Нет кадра с камеры")
        width, height = source.size
        if width <= 0 or height <= 0:
            raise CaptureUnavailable(f"Кадр без размеров: {width}x{height}")

        square = source.crop(center_square_box(width, height))
        if square.mode != "RGB":
            square = square.convert("RGB")
        target = (self._output_size, self._output_size)
        rendered = square.resize(target, Image.Resampling.LANCZOS)
        # превью показывается зеркально, снимок должен совпадать с ним
        rendered = ImageOps.mirror(rendered)
        return self._filters.apply(rendered, descriptor)

    def capture(self, source: Optional[Image.Image], descriptor: FilterDescriptor, index: int) -> CapturedFrame:
        """Снимает кадр `index` и кодирует его в PNG."""
        rendered = self.render(source, descriptor)
        return CapturedFrame(
            index=index,
            png_bytes=encode_png(rendered),
            filter=descriptor,
            width=rendered.width,
            height=rendered.height,
        )
