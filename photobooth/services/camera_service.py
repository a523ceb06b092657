"""Живой источник кадров: камера через OpenCV.

Принципы:
- SRP: открыть устройство, отдать текущий кадр как `PIL.Image` (RGB), закрыть.
- Ошибки доступа к камере логируются; превью в этом случае неактивно.
"""
from __future__ import annotations

import logging
from typing import Optional

import cv2
from PIL import Image

from photobooth import config

logger = logging.getLogger(__name__)


class CameraService:
    def __init__(self, camera_index: int = config.CAMERA_INDEX) -> None:
        self._camera_index = camera_index
        self._cap: Optional[cv2.VideoCapture] = None

    def open(self) -> bool:
        """Открывает камеру. Повторный вызов при открытой камере ничего не делает."""
        if self.is_opened():
            return True
        cap = cv2.VideoCapture(self._camera_index)
        if not cap.isOpened():
            cap.release()
            logger.warning("Camera %s is not available", self._camera_index)
            self._cap = None
            return False
        self._cap = cap
        logger.info("Camera %s opened", self._camera_index)
        return True

    def is_opened(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    def read_frame(self) -> Optional[Image.Image]:
        """Текущий кадр в RGB или None, если камера не отдала изображение."""
        if not self.is_opened():
            return None
        ok, frame = self._cap.read()
        if not ok or frame is None or frame.size == 0:
            return None
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        return Image.fromarray(rgb)

    def restart(self) -> bool:
        """Переоткрывает камеру, если поток был потерян (например, окно свернули)."""
        if self.is_opened():
            return True
        self.release()
        return self.open()

    def release(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
