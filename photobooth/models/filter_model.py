"""Модель фильтров съёмки.

Принципы:
- Закрытое перечисление: набор фильтров и их параметры фиксированы, пользователь
  выбирает только тег.
- Каждый фильтр раскладывается в последовательность шагов `EffectStep`,
  которые исполняет `FilterService`.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


@dataclass(frozen=True)
class EffectStep:
    """Один шаг эффекта.

    Fields:
        kind: "grayscale" | "sepia" | "contrast" | "brightness" | "saturate" | "hue_rotate" | "blur".
        amount: Сила эффекта (доля 0..1, множитель, градусы или радиус размытия, px).
    """
    kind: str
    amount: float


class FilterDescriptor(str, Enum):
    NONE = "none"
    GRAYSCALE = "grayscale"
    SEPIA = "sepia"
    VINTAGE = "vintage"
    SOFT = "soft"

    @property
    def steps(self) -> Tuple[EffectStep, ...]:
        return _FILTER_STEPS[self]

    @property
    def label(self) -> str:
        return _FILTER_LABELS[self]

    @classmethod
    def from_tag(cls, tag: str) -> "FilterDescriptor":
        """Возвращает фильтр по тегу (без учёта регистра).

        Raises:
            ValueError: если тег не входит в перечисление.
        """
        try:
            return cls(tag.strip().lower())
        except ValueError as exc:
            raise ValueError(f"Неизвестный фильтр: {tag!r}") from exc


_FILTER_STEPS = {
    FilterDescriptor.NONE: (),
    FilterDescriptor.GRAYSCALE: (EffectStep("grayscale", 1.0),),
    FilterDescriptor.SEPIA: (EffectStep("sepia", 1.0),),
    FilterDescriptor.VINTAGE: (
        EffectStep("grayscale", 1.0),
        EffectStep("contrast", 1.2),
        EffectStep("brightness", 1.1),
        EffectStep("sepia", 0.3),
        EffectStep("hue_rotate", 10.0),
        EffectStep("blur", 0.4),
    ),
    FilterDescriptor.SOFT: (
        EffectStep("brightness", 1.3),
        EffectStep("contrast", 1.05),
        EffectStep("saturate", 0.8),
        EffectStep("blur", 0.3),
    ),
}

_FILTER_LABELS = {
    FilterDescriptor.NONE: "No Filter",
    FilterDescriptor.GRAYSCALE: "Grayscale",
    FilterDescriptor.SEPIA: "Sepia",
    FilterDescriptor.VINTAGE: "Vintage",
    FilterDescriptor.SOFT: "Soft",
}
