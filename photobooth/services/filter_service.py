from __future__ import annotations

from typing import Callable, Dict

import numpy as np
from PIL import Image, ImageFilter

from photobooth.models.filter_model import EffectStep, FilterDescriptor


class FilterService:
    def apply(self, image: Image.Image, descriptor: FilterDescriptor) -> Image.Image:
        """
        Применяет фильтр к копии изображения и возвращает RGB-результат.
        Исходное изображение не изменяется.
        """
        out = image.convert("RGB") if image.mode != "RGB" else image.copy()
        for step in descriptor.steps:
            out = self.apply_step(out, step)
        return out

    def apply_step(self, image: Image.Image, step: EffectStep) -> Image.Image:
        if step.kind == "blur":
            if step.amount <= 0:
                return image.copy()
            return image.filter(ImageFilter.GaussianBlur(radius=step.amount))

        arr = np.asarray(image, dtype=np.float32)
        if step.kind in _MATRICES:
            matrix = _MATRICES[step.kind](step.amount)
            arr = arr @ matrix.T
        elif step.kind == "contrast":
            arr = (arr - 127.5) * step.amount + 127.5
        elif step.kind == "brightness":
            arr = arr * step.amount
        else:
            raise ValueError(f"Неизвестный шаг эффекта: {step.kind}")
        # каждый шаг ограничивается диапазоном, как в цепочке CSS-фильтров
        out = np.clip(np.rint(arr), 0, 255).astype(np.uint8)
        return Image.fromarray(out)


# ---------- Цветовые матрицы (W3C Filter Effects) ----------
def _grayscale_matrix(amount: float) -> np.ndarray:
    a = 1.0 - float(np.clip(amount, 0.0, 1.0))
    return np.array(
        [
            [0.2126 + 0.7874 * a, 0.7152 - 0.7152 * a, 0.0722 - 0.0722 * a],
            [0.2126 - 0.2126 * a, 0.7152 + 0.2848 * a, 0.0722 - 0.0722 * a],
            [0.2126 - 0.2126 * a, 0.7152 - 0.7152 * a, 0.0722 + 0.9278 * a],
        ],
        dtype=np.float32,
    )


def _sepia_matrix(amount: float) -> np.ndarray:
    a = 1.0 - float(np.clip(amount, 0.0, 1.0))
    return np.array(
        [
            [0.393 + 0.607 * a, 0.769 - 0.769 * a, 0.189 - 0.189 * a],
            [0.349 - 0.349 * a, 0.686 + 0.314 * a, 0.168 - 0.168 * a],
            [0.272 - 0.272 * a, 0.534 - 0.534 * a, 0.131 + 0.869 * a],
        ],
        dtype=np.float32,
    )


def _saturate_matrix(s: float) -> np.ndarray:
    return np.array(
        [
            [0.213 + 0.787 * s, 0.715 - 0.715 * s, 0.072 - 0.072 * s],
            [0.213 - 0.213 * s, 0.715 + 0.285 * s, 0.072 - 0.072 * s],
            [0.213 - 0.213 * s, 0.715 - 0.715 * s, 0.072 + 0.928 * s],
        ],
        dtype=np.float32,
    )


def _hue_rotate_matrix(degrees: float) -> np.ndarray:
    rad = np.deg2rad(degrees)
    c, s = float(np.cos(rad)), float(np.sin(rad))
    return np.array(
        [
            [0.213 + c * 0.787 - s * 0.213, 0.715 - c * 0.715 - s * 0.715, 0.072 - c * 0.072 + s * 0.928],
            [0.213 - c * 0.213 + s * 0.143, 0.715 + c * 0.285 + s * 0.140, 0.072 - c * 0.072 - s * 0.283],
            [0.213 - c * 0.213 - s * 0.787, 0.715 - c * 0.715 + s * 0.715, 0.072 + c * 0.928 + s * 0.072],
        ],
        dtype=np.float32,
    )


_MATRICES: Dict[str, Callable[[float], np.ndarray]] = {
    "grayscale": _grayscale_matrix,
    "sepia": _sepia_matrix,
    "saturate": _saturate_matrix,
    "hue_rotate": _hue_rotate_matrix,
}
