from __future__ import annotations

import io
import json
from typing import Any, Dict, List, Optional

import pytest
import requests
from PIL import Image

from photobooth.services.persistence_service import HttpPersistenceClient, storage_path


class FakeResponse:
    def __init__(self, status: int = 200, payload: Any = None, content: Optional[bytes] = None) -> None:
        self.status_code = status
        self._payload = payload
        if content is not None:
            self.content = content
        else:
            self.content = json.dumps(payload).encode() if payload is not None else b""

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self) -> Any:
        return json.loads(self.content)


class FakeSession:
    def __init__(self, responses: List[Any]) -> None:
        self.headers: Dict[str, str] = {}
        self.calls: List[Dict[str, Any]] = []
        self._responses = list(responses)

    def request(self, method: str, url: str, timeout: float, **kwargs: Any) -> FakeResponse:
        self.calls.append({"method": method, "url": url, "timeout": timeout, **kwargs})
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def png_bytes(size=(1200, 1800)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, (255, 255, 255)).save(buf, format="PNG")
    return buf.getvalue()


def test_upload_sends_multipart_with_season_and_metadata() -> None:
    session = FakeSession([FakeResponse(201, {"id": "abc"})])
    client = HttpPersistenceClient("https://storage.example/api/", api_key="secret", session=session)

    result = client.upload_photo(png_bytes(), "generated-1.png", "season-2025-03", {"photoCount": 6})

    assert result.ok
    assert result.data == {"id": "abc"}
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "https://storage.example/api/photos"
    assert call["data"]["season_id"] == "season-2025-03"
    assert call["data"]["storage_path"].startswith("season-2025-03/")
    assert call["data"]["image_width"] == "1200"
    assert call["data"]["image_height"] == "1800"
    assert json.loads(call["data"]["metadata"]) == {"photoCount": 6}
    assert call["files"]["file"][0] == "generated-1.png"
    assert session.headers["Authorization"] == "Bearer secret"


def test_http_error_is_returned_not_raised() -> None:
    client = HttpPersistenceClient("https://storage.example", session=FakeSession([FakeResponse(500)]))
    result = client.upload_photo(png_bytes((10, 10)), "x.png", "season-2025-03", {})
    assert not result.ok
    assert "500" in result.error


def test_connection_error_is_returned_not_raised() -> None:
    session = FakeSession([requests.ConnectionError("no route to host")])
    result = HttpPersistenceClient("https://storage.example", session=session).get_photos()
    assert not result.ok
    assert "no route to host" in result.error


def test_get_photos_passes_only_set_filters() -> None:
    session = FakeSession([FakeResponse(200, [])])
    client = HttpPersistenceClient("https://storage.example", session=session)

    client.get_photos({"season_id": "season-2025-03", "start_date": None, "offset": 100})

    assert session.calls[0]["params"] == {"season_id": "season-2025-03", "offset": 100, "limit": 50}


def test_download_photo_returns_content_and_filename() -> None:
    session = FakeSession([
        FakeResponse(200, {"id": "7", "original_filename": "generated-7.png"}),
        FakeResponse(200, content=b"\x89PNG..."),
    ])
    data, filename, error = HttpPersistenceClient("https://storage.example", session=session).download_photo("7")

    assert (data, filename, error) == (b"\x89PNG...", "generated-7.png", None)
    assert session.calls[1]["url"] == "https://storage.example/photos/7/file"


def test_download_missing_photo() -> None:
    session = FakeSession([FakeResponse(404)])
    data, filename, error = HttpPersistenceClient("https://storage.example", session=session).download_photo("7")
    assert data is None and filename is None
    assert "404" in error


def test_delete_photo() -> None:
    session = FakeSession([FakeResponse(204)])
    result = HttpPersistenceClient("https://storage.example", session=session).delete_photo("7")
    assert result.ok
    assert session.calls[0]["method"] == "DELETE"


def test_missing_base_url_is_rejected() -> None:
    with pytest.raises(ValueError):
        HttpPersistenceClient("")


def test_storage_path() -> None:
    assert storage_path("season-2025-03", now_ms=123) == "season-2025-03/123.png"
