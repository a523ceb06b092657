"""Клиент внешнего хранилища готовых лент.

Граница системы: ядро вызывает только `upload_photo`; выборка, удаление и
скачивание нужны панели администратора и реализованы здесь же, чтобы
контракт хранилища был описан в одном месте.
Ошибки сети и HTTP возвращаются в `PersistenceResult.error`, не выбрасываются.
"""
from __future__ import annotations

import io
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Tuple

import requests
from PIL import Image

from photobooth import config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PersistenceResult:
    data: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class PersistenceClient(Protocol):
    def upload_photo(self, data: bytes, filename: str, season_id: str, metadata: Dict[str, Any]) -> PersistenceResult: ...


def storage_path(season_id: str, now_ms: Optional[int] = None) -> str:
    """Ключ файла в хранилище: `<season_id>/<epoch ms>.png`."""
    ms = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{season_id}/{ms}.png"


class HttpPersistenceClient:
    """REST-клиент хранилища (requests).

    Endpoints относительно `base_url`:
    - POST   /photos             multipart: file + season_id, storage_path, metadata, размеры
    - GET    /photos             фильтры season_id, start_date, end_date, limit, offset
    - DELETE /photos/{id}
    - GET    /photos/{id}        метаданные записи (original_filename, ...)
    - GET    /photos/{id}/file   содержимое файла
    """

    def __init__(
        self,
        base_url: str = config.PERSISTENCE_URL,
        api_key: str = config.PERSISTENCE_KEY,
        timeout_s: float = config.UPLOAD_TIMEOUT_S,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not base_url:
            raise ValueError("Не задан адрес хранилища (PHOTOBOOTH_PERSISTENCE_URL)")
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_s
        self._session = session or requests.Session()
        if api_key:
            self._session.headers.update({"Authorization": f"Bearer {api_key}"})

    def upload_photo(self, data: bytes, filename: str, season_id: str, metadata: Dict[str, Any]) -> PersistenceResult:
        width, height = _image_dimensions(data)
        fields = {
            "season_id": season_id,
            "storage_path": storage_path(season_id),
            "original_filename": filename,
            "file_size": str(len(data)),
            "image_width": str(width),
            "image_height": str(height),
            "mime_type": "image/png",
            "metadata": json.dumps(metadata, ensure_ascii=False),
        }
        files = {"file": (filename, data, "image/png")}
        return self._request("POST", "/photos", data=fields, files=files)

    def get_photos(self, filters: Optional[Dict[str, Any]] = None) -> PersistenceResult:
        filters = filters or {}
        params: Dict[str, Any] = {}
        for key in ("season_id", "start_date", "end_date", "limit", "offset"):
            if filters.get(key) is not None:
                params[key] = filters[key]
        if "offset" in params and "limit" not in params:
            params["limit"] = 50
        return self._request("GET", "/photos", params=params)

    def delete_photo(self, photo_id: str) -> PersistenceResult:
        return self._request("DELETE", f"/photos/{photo_id}")

    def download_photo(self, photo_id: str) -> Tuple[Optional[bytes], Optional[str], Optional[str]]:
        """Возвращает (содержимое, имя файла, ошибка)."""
        meta = self._request("GET", f"/photos/{photo_id}")
        if not meta.ok:
            return None, None, meta.error
        if not meta.data:
            return None, None, "Photo not found"
        content = self._request("GET", f"/photos/{photo_id}/file", raw=True)
        if not content.ok:
            return None, None, content.error
        return content.data, meta.data.get("original_filename"), None

    # ---- Internals ----
    def _request(self, method: str, path: str, raw: bool = False, **kwargs: Any) -> PersistenceResult:
        url = f"{self._base_url}{path}"
        try:
            response = self._session.request(method, url, timeout=self._timeout, **kwargs)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            return PersistenceResult(error=str(exc))
        if raw:
            return PersistenceResult(data=response.content)
        if not response.content:
            return PersistenceResult(data=None)
        try:
            return PersistenceResult(data=response.json())
        except ValueError as exc:
            logger.error("%s %s returned invalid JSON: %s", method, url, exc)
            return PersistenceResult(error=f"Invalid JSON: {exc}")


def _image_dimensions(data: bytes) -> Tuple[int, int]:
    with Image.open(io.BytesIO(data)) as img:
        return img.size
