"""Экран съёмки: живое превью, обратный отсчёт, миниатюры и выбор фильтра.

Принципы:
- SRP: только представление; логика серии в `CaptureSessionController`.
- ISP: события наружу через `on_*`, состояние внутрь через `set_*`.
"""
from __future__ import annotations

from typing import Callable, List, Optional

import customtkinter as ctk
import tkinter as tk
from PIL import Image, ImageTk

from photobooth import config
from photobooth.models.filter_model import FilterDescriptor

THUMB_SIZE = 100


class BoothView(ctk.CTkFrame):
    def __init__(self, master: ctk.CTk | tk.Misc, **kwargs) -> None:
        super().__init__(master, **kwargs)

        # callbacks
        self.on_start: Optional[Callable[[], None]] = None
        self.on_filter_change: Optional[Callable[[FilterDescriptor], None]] = None

        self.grid_columnconfigure(0, weight=1)
        self.grid_columnconfigure(1, weight=0)
        self.grid_rowconfigure(1, weight=1)

        self._countdown_value = ctk.StringVar(value="")
        self._countdown_label = ctk.CTkLabel(
            self, textvariable=self._countdown_value, font=ctk.CTkFont(size=48, weight="bold")
        )
        self._countdown_label.grid(row=0, column=0, columnspan=2, pady=(12, 4))

        # Live preview
        self._canvas = tk.Canvas(
            self, width=config.PREVIEW_SIZE, height=config.PREVIEW_SIZE, highlightthickness=0, bg="#1f1f1f"
        )
        self._canvas.grid(row=1, column=0, padx=(12, 15), pady=6)
        self._tk_preview: Optional[ImageTk.PhotoImage] = None

        # Side previews 2x3 grid
        self._thumbs_frame = ctk.CTkFrame(self, fg_color="transparent")
        self._thumbs_frame.grid(row=1, column=1, padx=(15, 12), pady=6, sticky="n")
        self._thumb_labels: List[ctk.CTkLabel] = []
        for i in range(config.SHOT_COUNT):
            lbl = ctk.CTkLabel(self._thumbs_frame, text="", width=THUMB_SIZE, height=THUMB_SIZE, fg_color="#2b2b2b")
            lbl.grid(row=i // config.STRIP_COLUMNS, column=i % config.STRIP_COLUMNS, padx=15, pady=15)
            self._thumb_labels.append(lbl)
        self._thumb_images: List[ctk.CTkImage] = []

        self._start_btn = ctk.CTkButton(self, text="Start Capture :)", command=self._emit_start)
        self._start_btn.grid(row=2, column=0, columnspan=2, pady=(16, 6))

        labels = [f.label for f in FilterDescriptor]
        self._filter_by_label = {f.label: f for f in FilterDescriptor}
        self._filters = ctk.CTkSegmentedButton(self, values=labels, command=self._emit_filter_change)
        self._filters.set(FilterDescriptor.NONE.label)
        self._filters.grid(row=3, column=0, columnspan=2, pady=(6, 12))

    # public API (sync from controller)
    def set_preview(self, image: Optional[Image.Image]) -> None:
        self._canvas.delete("all")
        if image is None:
            self._canvas.create_text(
                config.PREVIEW_SIZE // 2, config.PREVIEW_SIZE // 2, text="Камера недоступна", fill="#aaaaaa"
            )
            return
        self._tk_preview = ImageTk.PhotoImage(image)
        self._canvas.create_image(0, 0, image=self._tk_preview, anchor="nw")

    def set_countdown(self, value: Optional[int]) -> None:
        self._countdown_value.set("" if value is None else str(value))

    def set_capturing(self, capturing: bool) -> None:
        self._start_btn.configure(
            state="disabled" if capturing else "normal",
            text="Capturing..." if capturing else "Start Capture :)",
        )

    def add_thumbnail(self, image: Image.Image) -> None:
        slot = len(self._thumb_images)
        if slot >= len(self._thumb_labels):
            return
        thumb = ctk.CTkImage(light_image=image, dark_image=image, size=(THUMB_SIZE, THUMB_SIZE))
        self._thumb_images.append(thumb)
        self._thumb_labels[slot].configure(image=thumb)

    def clear_thumbnails(self) -> None:
        for lbl in self._thumb_labels:
            lbl.configure(image=None)
        self._thumb_images.clear()

    # events
    def _emit_start(self) -> None:
        if self.on_start:
            self.on_start()

    def _emit_filter_change(self, label: str) -> None:
        descriptor = self._filter_by_label.get(label, FilterDescriptor.NONE)
        if self.on_filter_change:
            self.on_filter_change(descriptor)
