"""Конфигурация фотобудки и константы.

Содержит параметры серии съёмки, геометрию ленты, палитру фонов и настройки
внешнего хранилища. Значения развёртывания переопределяются переменными окружения.
"""
import os
from pathlib import Path

# Base paths
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_OUTPUT_DIR = Path(os.getenv("PHOTOBOOTH_OUTPUT_DIR", str(PROJECT_ROOT / "output")))

# Серия съёмки
SHOT_COUNT = 6
COUNTDOWN_START = 3
COUNTDOWN_TICK_S = 1.0
INTER_SHOT_PAUSE_S = 0.5
HANDOFF_DELAY_S = 0.2  # пауза перед переходом к сборке ленты

# Кадр
CAPTURE_SIZE = 600  # квадрат, px
CAMERA_INDEX = int(os.getenv("PHOTOBOOTH_CAMERA_INDEX", "0"))  # 0 = фронтальная/встроенная
PREVIEW_SIZE = 480
PREVIEW_INTERVAL_MS = 33

# Лента 4x6 дюймов при 300 dpi
STRIP_WIDTH = 1200
STRIP_HEIGHT = 1800
STRIP_COLUMNS = 2
STRIP_ROWS = 3
STRIP_GAP = 30
STRIP_BOTTOM_MARGIN = 50  # место под подпись
FOOTER_TEXT = "Picapica © 2025"
FOOTER_FONT_SIZE = 30
FOOTER_COLOR = "#000000"

DEFAULT_BACKGROUND = "#ffffff"
BACKGROUND_PALETTE = {
    "White": "#ffffff",
    "Pink": "#ffd6d9",
    "Mint": "#d6ffe8",
    "Lavender": "#f0d6ff",
    "Peach": "#fff0d6",
    "Sky Blue": "#d6f0ff",
    "Soft Yellow": "#fff6d6",
    "Lilac": "#e6d6ff",
    "Aqua": "#d6fff6",
    "Rose": "#ffd6ff",
}

# Экспорт
DEFAULT_FILENAME = "photostrip.png"
UPLOAD_SOURCE = "photo-booth"
UPLOAD_VERSION = "1.0"

# Внешнее хранилище (пустой URL = загрузка отключена)
PERSISTENCE_URL = os.getenv("PHOTOBOOTH_PERSISTENCE_URL", "")
PERSISTENCE_KEY = os.getenv("PHOTOBOOTH_PERSISTENCE_KEY", "")
UPLOAD_TIMEOUT_S = float(os.getenv("PHOTOBOOTH_UPLOAD_TIMEOUT", "15"))
