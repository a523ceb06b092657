"""Таймеры для кооперативного однопоточного цикла событий.

Контроллер сессии зависит только от протокола `Scheduler`; в UI таймеры
идут через `after` окна Tk, в тестах время продвигается вручную.
"""
from __future__ import annotations

import tkinter as tk
from typing import Any, Callable, Protocol


class Scheduler(Protocol):
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


class TkScheduler:
    """Планировщик поверх `widget.after` / `after_cancel`."""

    def __init__(self, widget: tk.Misc) -> None:
        self._widget = widget

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> str:
        return self._widget.after(int(round(delay_s * 1000)), callback)

    def cancel(self, handle: str) -> None:
        try:
            self._widget.after_cancel(handle)
        except tk.TclError:
            # окно уже уничтожено
            pass
