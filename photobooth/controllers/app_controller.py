"""Контроллер приложения: оркестрация UI и сервисов фотобудки.

SOLID:
- SRP: связывает экраны с серией съёмки, сборкой и экспортом ленты (без логики обработки изображений).
- DIP: сервисы передаются снаружи; экраны ничего не знают друг о друге.
Clean Code:
- Обработчики компактны; тяжёлая логика вынесена в сервисы.
"""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple

import customtkinter as ctk
from PIL import Image

from photobooth import config
from photobooth.controllers.session_controller import CaptureSessionController
from photobooth.errors import CaptureUnavailable, InvalidBackground
from photobooth.models.filter_model import FilterDescriptor
from photobooth.models.frame_model import CapturedFrame
from photobooth.models.strip_model import CompositedStrip
from photobooth.services.camera_service import CameraService
from photobooth.services.capture_service import FrameCaptureService
from photobooth.services.export_service import AssetExportGateway
from photobooth.services.scheduler import TkScheduler
from photobooth.services.strip_service import StripCompositor
from photobooth.ui.booth_view import BoothView
from photobooth.ui.strip_view import StripView

logger = logging.getLogger(__name__)


@dataclass
class AppController:
    """Связывает экраны с прикладной логикой.

    Ответственности:
    - Живое превью камеры (зеркально, с выбранным фильтром только для отображения).
    - Запуск и отмена серии через `CaptureSessionController`.
    - Сборка ленты через `StripCompositor` и экспорт через `AssetExportGateway`.
    """
    booth: BoothView
    strip_view: StripView
    window: ctk.CTk
    gateway: AssetExportGateway

    camera: CameraService = field(default_factory=CameraService)
    compositor: StripCompositor = field(default_factory=StripCompositor)
    _preview_renderer: FrameCaptureService = field(
        default_factory=lambda: FrameCaptureService(output_size=config.PREVIEW_SIZE)
    )
    _session: Optional[CaptureSessionController] = None
    _frames: Tuple[CapturedFrame, ...] = ()
    _background: str = config.DEFAULT_BACKGROUND
    _strip: Optional[CompositedStrip] = None
    _preview_job: Optional[str] = None

    def bind_events(self) -> None:
        """Регистрирует обработчики событий между UI-компонентами и запускает превью."""
        self._session = CaptureSessionController(source=self.camera, scheduler=TkScheduler(self.window))
        self._session.on_countdown = self.booth.set_countdown
        self._session.on_frame = self._handle_frame
        self._session.on_complete = self._handle_complete
        self._session.on_ready = self._handle_ready

        self.booth.on_start = self._handle_start
        self.booth.on_filter_change = self._handle_filter_change

        self.strip_view.on_background_change = self._handle_background_change
        self.strip_view.on_download = self._handle_download
        self.strip_view.on_retake = self._handle_retake

        # камера снова нужна, когда окно возвращается на экран
        self.window.bind("<Map>", self._handle_window_mapped, add="+")

        self.camera.open()
        self._schedule_preview()

    def shutdown(self) -> None:
        if self._preview_job is not None:
            self.window.after_cancel(self._preview_job)
            self._preview_job = None
        if self._session is not None:
            self._session.cancel()
        self.camera.release()
        self.gateway.close()

    # ---- Handlers ----
    def _handle_start(self) -> None:
        if self._session is None or not self._session.start():
            return
        self._frames = ()
        self._strip = None
        self.booth.clear_thumbnails()
        self.booth.set_capturing(True)

    def _handle_filter_change(self, descriptor: FilterDescriptor) -> None:
        if self._session is not None:
            self._session.set_filter(descriptor)

    def _handle_frame(self, frame: CapturedFrame) -> None:
        with Image.open(io.BytesIO(frame.png_bytes)) as img:
            self.booth.add_thumbnail(img.convert("RGB"))

    def _handle_complete(self, frames: Tuple[CapturedFrame, ...]) -> None:
        self._frames = frames
        self.booth.set_capturing(False)
        self.booth.set_countdown(None)

    def _handle_ready(self, frames: Tuple[CapturedFrame, ...]) -> None:
        self._frames = frames
        self._recompose()
        self.strip_view.set_status(f"{len(frames)} / {config.SHOT_COUNT} photos")
        self.window.show_strip()

    def _handle_background_change(self, value: str) -> None:
        self._background = value
        self._recompose()

    def _handle_download(self) -> None:
        if self._strip is None:
            return
        try:
            path = self.gateway.publish(self._strip)
        except OSError as exc:
            logger.error("Photo strip could not be saved: %s", exc)
            self.strip_view.set_status(f"Не удалось сохранить: {exc}")
            return
        self.strip_view.set_status(f"Сохранено: {path}")

    def _handle_retake(self) -> None:
        if self._session is not None:
            self._session.cancel()
        self._frames = ()
        self._strip = None
        self.booth.clear_thumbnails()
        self.booth.set_capturing(False)
        self.booth.set_countdown(None)
        self.window.show_booth()

    def _handle_window_mapped(self, _event: object) -> None:
        if not self.camera.is_opened():
            self.camera.restart()

    # ---- Helpers ----
    def _recompose(self) -> None:
        season_id = self._session.state.season_id if self._session is not None else None
        try:
            self._strip = self.compositor.compose_now(self._frames, self._background, season_id)
        except InvalidBackground as exc:
            logger.warning("%s", exc)
            return
        self.strip_view.set_strip(self._strip.image)

    def _schedule_preview(self) -> None:
        self._preview_job = self.window.after(config.PREVIEW_INTERVAL_MS, self._refresh_preview)

    def _refresh_preview(self) -> None:
        descriptor = self._session.filter if self._session is not None else FilterDescriptor.NONE
        try:
            preview: Optional[Image.Image] = self._preview_renderer.render(self.camera.read_frame(), descriptor)
        except CaptureUnavailable:
            preview = None
        self.booth.set_preview(preview)
        self._schedule_preview()
