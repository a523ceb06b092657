"""Экспорт готовой ленты: PNG-буфер, локальный файл и отправка в хранилище.

Принципы:
- SRP: сериализация и передача результата; сборка ленты в `StripCompositor`.
- Загрузка в хранилище best-effort: ошибки только логируются, повторов нет,
  локальное сохранение от неё не зависит.
"""
from __future__ import annotations

import io
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from photobooth import config
from photobooth.models.strip_model import CompositedStrip
from photobooth.services.persistence_service import PersistenceClient, PersistenceResult

logger = logging.getLogger(__name__)

Submitter = Callable[[Callable[[], Any]], Any]


class AssetExportGateway:
    def __init__(
        self,
        client: Optional[PersistenceClient] = None,
        output_dir: Path = config.DEFAULT_OUTPUT_DIR,
        submit: Optional[Submitter] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client = client
        self._output_dir = Path(output_dir)
        self._submit = submit
        self._clock = clock
        self._executor: Optional[ThreadPoolExecutor] = None

    def export(self, strip: CompositedStrip) -> bytes:
        """Сериализует ленту в PNG."""
        buf = io.BytesIO()
        strip.image.save(buf, format="PNG")
        return buf.getvalue()

    def build_metadata(self, strip: CompositedStrip) -> Dict[str, Any]:
        width, height = strip.size
        return {
            "photoCount": strip.photo_count,
            "backgroundColor": strip.background,
            "stripDimensions": {"width": width, "height": height},
            "generatedAt": strip.generated_at.isoformat(),
            "source": config.UPLOAD_SOURCE,
            "version": config.UPLOAD_VERSION,
        }

    def save_local(
        self,
        strip: CompositedStrip,
        directory: Optional[Path] = None,
        filename: str = config.DEFAULT_FILENAME,
    ) -> Path:
        """Записывает ленту в файл (по умолчанию `photostrip.png`) и возвращает путь."""
        target_dir = Path(directory) if directory is not None else self._output_dir
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / filename
        path.write_bytes(self.export(strip))
        logger.info("Photo strip saved to %s", path)
        return path

    def upload(self, strip: CompositedStrip) -> Optional[PersistenceResult]:
        """Отправляет ленту в хранилище. Никогда не выбрасывает исключения."""
        if self._client is None:
            logger.debug("Persistence is not configured; upload skipped")
            return None
        filename = f"generated-{int(self._clock() * 1000)}.png"
        try:
            result = self._client.upload_photo(self.export(strip), filename, strip.season_id, self.build_metadata(strip))
        except Exception:
            logger.exception("Failed to upload photo strip %s", filename)
            return None
        if not result.ok:
            logger.error("Failed to upload photo strip %s: %s", filename, result.error)
        else:
            logger.info("Photo strip uploaded (%s, %s)", filename, strip.season_id)
        return result

    def publish(self, strip: CompositedStrip, directory: Optional[Path] = None) -> Path:
        """Сохраняет ленту локально и ставит загрузку в хранилище в фон (fire-and-forget)."""
        path = self.save_local(strip, directory)
        if self._client is not None:
            self._submitter()(lambda: self.upload(strip))
        return path

    def close(self, wait: bool = False) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None

    def _submitter(self) -> Submitter:
        if self._submit is not None:
            return self._submit
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="strip-upload")
        return self._executor.submit
