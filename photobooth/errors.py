"""Общие типы ошибок фотобудки.

Ошибки явные: их легко перехватить на границе UI или контроллера сессии.
"""
from __future__ import annotations


class PhotoboothError(Exception):
    """Базовая ошибка приложения."""


class CaptureUnavailable(PhotoboothError):
    """Источник кадра ещё не готов (нет изображения или нулевые размеры)."""


class InvalidBackground(PhotoboothError, ValueError):
    """Цвет фона не распознан."""


class PersistenceError(PhotoboothError):
    """Внешнее хранилище вернуло ошибку или недоступно."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
