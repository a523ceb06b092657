from __future__ import annotations

import numpy as np

from photobooth.services import camera_service
from photobooth.services.camera_service import CameraService


class FakeCapture:
    opened = True

    def __init__(self, index: int) -> None:
        self.index = index
        self.released = False

    def isOpened(self) -> bool:
        return self.opened and not self.released

    def read(self):
        frame = np.zeros((720, 1280, 3), dtype=np.uint8)
        frame[..., 0] = 255  # BGR: blue
        return True, frame

    def release(self) -> None:
        self.released = True


def test_read_frame_converts_bgr_to_rgb(monkeypatch) -> None:
    monkeypatch.setattr(camera_service.cv2, "VideoCapture", FakeCapture)
    camera = CameraService(camera_index=0)

    assert camera.open() is True
    image = camera.read_frame()

    assert image.size == (1280, 720)
    assert image.getpixel((0, 0)) == (0, 0, 255)
    camera.release()
    assert camera.is_opened() is False


def test_unavailable_camera_is_logged(monkeypatch, caplog) -> None:
    class ClosedCapture(FakeCapture):
        opened = False

    monkeypatch.setattr(camera_service.cv2, "VideoCapture", ClosedCapture)
    camera = CameraService(camera_index=3)

    with caplog.at_level("WARNING"):
        assert camera.open() is False

    assert camera.read_frame() is None
    assert "Camera 3 is not available" in caplog.text


def test_restart_reopens_lost_camera(monkeypatch) -> None:
    monkeypatch.setattr(camera_service.cv2, "VideoCapture", FakeCapture)
    camera = CameraService()
    camera.open()
    camera.release()

    assert camera.restart() is True
    assert camera.is_opened() is True
