"""Сборка фото-ленты из снятых кадров.

Принципы:
- Геометрия ячеек зависит только от `StripLayout` и индекса, не от числа кадров.
- Кадры декодируются асинхронно и могут завершаться в любом порядке;
  подпись рисуется ровно один раз, когда `CompletionBarrier` насчитает все N
  завершений (включая неудачные декодирования).
- Детерминизм: одинаковые байты кадров и фон дают побайтно одинаковую ленту.
"""
from __future__ import annotations

import asyncio
import io
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, Sequence, Tuple

from PIL import Image, ImageColor, ImageDraw, ImageFont

from photobooth import config
from photobooth.errors import InvalidBackground
from photobooth.models.frame_model import CapturedFrame
from photobooth.models.strip_model import CompositedStrip, StripLayout, season_id_for

logger = logging.getLogger(__name__)

Decoder = Callable[[bytes], Awaitable[Image.Image]]


async def decode_png(data: bytes) -> Image.Image:
    """Декодирует кадр, уступая управление циклу событий перед работой."""
    await asyncio.sleep(0)
    with Image.open(io.BytesIO(data)) as img:
        img.load()
        return img.convert("RGB")


def resolve_background(value: str) -> Tuple[int, int, int]:
    """Цвет фона из палитры (по имени) или любое значение, понятное Pillow.

    Raises:
        InvalidBackground: если цвет не распознан.
    """
    for name, hex_value in config.BACKGROUND_PALETTE.items():
        if value.strip().lower() == name.lower():
            value = hex_value
            break
    try:
        rgb = ImageColor.getrgb(value)
    except ValueError as exc:
        raise InvalidBackground(f"Неизвестный цвет фона: {value!r}") from exc
    return rgb[:3]


class CompletionBarrier:
    """Счётчик завершений: вызывает `on_complete` один раз, когда пришли все `expected`."""

    def __init__(self, expected: int, on_complete: Callable[[], None]) -> None:
        self._expected = expected
        self._arrived = 0
        self._on_complete = on_complete
        self._released = False
        if expected == 0:
            self._release()

    @property
    def arrived(self) -> int:
        return self._arrived

    @property
    def released(self) -> bool:
        return self._released

    def arrive(self) -> None:
        if self._released:
            raise RuntimeError("Barrier already released")
        # между чтением и записью счётчика нет точек переключения
        self._arrived += 1
        if self._arrived == self._expected:
            self._release()

    def _release(self) -> None:
        self._released = True
        self._on_complete()


class StripCompositor:
    def __init__(
        self,
        layout: Optional[StripLayout] = None,
        footer_text: str = config.FOOTER_TEXT,
        decoder: Optional[Decoder] = None,
    ) -> None:
        self._layout = layout or StripLayout()
        self._footer_text = footer_text
        self._decoder = decoder or decode_png
        self._font = ImageFont.load_default(size=config.FOOTER_FONT_SIZE)

        # наблюдатели прогресса (UI, тесты)
        self.on_cell_drawn: Optional[Callable[[int], None]] = None
        self.on_footer_drawn: Optional[Callable[[], None]] = None

    @property
    def layout(self) -> StripLayout:
        return self._layout

    def new_canvas(self, background: str) -> Image.Image:
        return Image.new("RGB", (self._layout.width, self._layout.height), resolve_background(background))

    def place(self, image: Image.Image, index: int) -> Tuple[Image.Image, Tuple[int, int]]:
        """Вписывает изображение в ячейку `index` без обрезки и центрирует его."""
        x, y = self._layout.cell_origin(index)
        cell_w, cell_h = self._layout.cell_width, self._layout.cell_height
        scale = min(cell_w / image.width, cell_h / image.height)
        draw_w = max(1, int(image.width * scale))
        draw_h = max(1, int(image.height * scale))
        if (draw_w, draw_h) != image.size:
            image = image.resize((draw_w, draw_h), Image.Resampling.LANCZOS)
        offset_x = int(round(x + (cell_w - draw_w) / 2))
        offset_y = int(round(y + (cell_h - draw_h) / 2))
        return image, (offset_x, offset_y)

    def draw_footer(self, canvas: Image.Image) -> None:
        draw = ImageDraw.Draw(canvas)
        left, top, right, bottom = draw.textbbox((0, 0), self._footer_text, font=self._font)
        cx, cy = self._layout.footer_center
        x = cx - (right - left) / 2 - left
        y = cy - (bottom - top) / 2 - top
        draw.text((x, y), self._footer_text, fill=config.FOOTER_COLOR, font=self._font)

    async def compose(
        self,
        frames: Sequence[CapturedFrame],
        background: str = config.DEFAULT_BACKGROUND,
        season_id: Optional[str] = None,
    ) -> CompositedStrip:
        """Собирает ленту из 0..N кадров (лишние кадры сверх сетки отбрасываются)."""
        frames = list(frames)[: self._layout.capacity]
        canvas = self.new_canvas(background)
        footer_draws = 0

        def finish() -> None:
            nonlocal footer_draws
            self.draw_footer(canvas)
            footer_draws += 1
            if self.on_footer_drawn:
                self.on_footer_drawn()

        barrier = CompletionBarrier(len(frames), finish)

        async def resolve(slot: int, frame: CapturedFrame) -> None:
            # Любой сбой кадра (в т.ч. DecompressionBombError) оставляет ячейку пустой,
            # но барьер считает завершение.
            try:
                decoded = await self._decoder(frame.png_bytes)
                canvas.paste(*self.place(decoded, slot))
            except Exception as exc:
                logger.warning("Frame %d could not be decoded, cell left empty: %s", slot, exc)
            else:
                if self.on_cell_drawn:
                    self.on_cell_drawn(slot)
            finally:
                barrier.arrive()

        await asyncio.gather(*(resolve(slot, frame) for slot, frame in enumerate(frames)))

        return CompositedStrip(
            image=canvas,
            photo_count=len(frames),
            background=background,
            size=canvas.size,
            season_id=season_id or season_id_for(datetime.now()),
            generated_at=datetime.now(timezone.utc),
            footer_draws=footer_draws,
        )

    def compose_now(
        self,
        frames: Sequence[CapturedFrame],
        background: str = config.DEFAULT_BACKGROUND,
        season_id: Optional[str] = None,
    ) -> CompositedStrip:
        """Синхронная обёртка для UI-потока без собственного цикла asyncio."""
        return asyncio.run(self.compose(frames, background, season_id))
