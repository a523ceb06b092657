"""Экран готовой ленты: уменьшенное превью, палитра фона и скачивание."""
from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk
import tkinter as tk
from PIL import Image

from photobooth import config

PREVIEW_W, PREVIEW_H = 300, 450  # превью 1200x1800 в масштабе 1/4


class StripView(ctk.CTkFrame):
    def __init__(self, master: ctk.CTk | tk.Misc, **kwargs) -> None:
        super().__init__(master, **kwargs)

        # callbacks
        self.on_background_change: Optional[Callable[[str], None]] = None
        self.on_download: Optional[Callable[[], None]] = None
        self.on_retake: Optional[Callable[[], None]] = None

        self.grid_columnconfigure(0, weight=1)

        self._title = ctk.CTkLabel(self, text="Photo Strip Preview", font=ctk.CTkFont(size=20, weight="bold"))
        self._title.grid(row=0, column=0, pady=(12, 6))

        # Palette
        self._palette = ctk.CTkFrame(self, fg_color="transparent")
        self._palette.grid(row=1, column=0, pady=6)
        for i, (name, hex_value) in enumerate(config.BACKGROUND_PALETTE.items()):
            btn = ctk.CTkButton(
                self._palette,
                text=name,
                width=90,
                fg_color=hex_value,
                text_color="#000000",
                hover_color=hex_value,
                command=lambda value=hex_value: self._emit_background(value),
            )
            btn.grid(row=i // 5, column=i % 5, padx=4, pady=4)

        self._preview = ctk.CTkLabel(self, text="", width=PREVIEW_W, height=PREVIEW_H, fg_color="#2b2b2b")
        self._preview.grid(row=2, column=0, pady=10)
        self._preview_image: Optional[ctk.CTkImage] = None

        buttons = ctk.CTkFrame(self, fg_color="transparent")
        buttons.grid(row=3, column=0, pady=(6, 4))
        self._download_btn = ctk.CTkButton(buttons, text="📥 Download Photo Strip", command=self._emit_download)
        self._download_btn.grid(row=0, column=0, padx=6)
        self._retake_btn = ctk.CTkButton(buttons, text="🔄 Take New Photos", command=self._emit_retake)
        self._retake_btn.grid(row=0, column=1, padx=6)

        self._status = ctk.StringVar(value="")
        ctk.CTkLabel(self, textvariable=self._status).grid(row=4, column=0, pady=(4, 12))

    # public API
    def set_strip(self, image: Image.Image) -> None:
        self._preview_image = ctk.CTkImage(light_image=image, dark_image=image, size=(PREVIEW_W, PREVIEW_H))
        self._preview.configure(image=self._preview_image)

    def set_status(self, text: str) -> None:
        self._status.set(text)

    # events
    def _emit_background(self, value: str) -> None:
        if self.on_background_change:
            self.on_background_change(value)

    def _emit_download(self) -> None:
        if self.on_download:
            self.on_download()

    def _emit_retake(self) -> None:
        if self.on_retake:
            self.on_retake()
