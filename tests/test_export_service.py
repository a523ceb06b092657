from __future__ import annotations

import asyncio
import io
import json
from pathlib import Path
from typing import Any, Dict, List

from PIL import Image

from conftest import solid_frame
from photobooth.services.export_service import AssetExportGateway
from photobooth.services.persistence_service import PersistenceResult
from photobooth.services.strip_service import StripCompositor


def make_strip(count: int = 6):
    frames = [solid_frame(i) for i in range(count)]
    return asyncio.run(StripCompositor().compose(frames, "#ffd6d9", season_id="season-2025-03"))


class RecordingClient:
    def __init__(self, result: PersistenceResult | None = None) -> None:
        self.calls: List[Dict[str, Any]] = []
        self._result = result or PersistenceResult(data={"id": "1"})

    def upload_photo(self, data: bytes, filename: str, season_id: str, metadata: Dict[str, Any]) -> PersistenceResult:
        self.calls.append({"data": data, "filename": filename, "season_id": season_id, "metadata": metadata})
        return self._result


class ExplodingClient:
    def upload_photo(self, *args: Any) -> PersistenceResult:
        raise ConnectionError("storage is down")


def run_now(fn):
    return fn()


def test_export_returns_png_buffer() -> None:
    data = AssetExportGateway().export(make_strip())
    assert data.startswith(b"\x89PNG")
    with Image.open(io.BytesIO(data)) as img:
        assert img.size == (1200, 1800)


def test_save_local_uses_default_filename(tmp_path: Path) -> None:
    path = AssetExportGateway(output_dir=tmp_path).save_local(make_strip())
    assert path == tmp_path / "photostrip.png"
    assert path.read_bytes().startswith(b"\x89PNG")


def test_publish_uploads_with_metadata(tmp_path: Path) -> None:
    client = RecordingClient()
    gateway = AssetExportGateway(client=client, output_dir=tmp_path, submit=run_now, clock=lambda: 1_700_000_000.0)
    strip = make_strip(4)

    path = gateway.publish(strip)

    assert path.exists()
    assert len(client.calls) == 1
    call = client.calls[0]
    assert call["filename"] == "generated-1700000000000.png"
    assert call["season_id"] == "season-2025-03"
    assert call["data"] == path.read_bytes()
    meta = call["metadata"]
    assert meta["photoCount"] == 4
    assert meta["backgroundColor"] == "#ffd6d9"
    assert meta["stripDimensions"] == {"width": 1200, "height": 1800}
    assert meta["source"] == "photo-booth"
    assert meta["version"] == "1.0"
    assert meta["generatedAt"] == strip.generated_at.isoformat()
    json.dumps(meta)


def test_upload_exception_is_logged_and_local_save_kept(tmp_path: Path, caplog) -> None:
    gateway = AssetExportGateway(client=ExplodingClient(), output_dir=tmp_path, submit=run_now)

    with caplog.at_level("ERROR"):
        path = gateway.publish(make_strip())

    assert path.exists()
    assert "Failed to upload photo strip" in caplog.text


def test_upload_error_result_is_logged(tmp_path: Path, caplog) -> None:
    gateway = AssetExportGateway(client=RecordingClient(PersistenceResult(error="403 Forbidden")), submit=run_now)

    with caplog.at_level("ERROR"):
        result = gateway.upload(make_strip())

    assert result is not None and not result.ok
    assert "403 Forbidden" in caplog.text


def test_publish_without_client_skips_upload(tmp_path: Path) -> None:
    submitted: list = []
    gateway = AssetExportGateway(output_dir=tmp_path, submit=submitted.append)

    gateway.publish(make_strip())

    assert submitted == []
    assert gateway.upload(make_strip()) is None


def test_default_submitter_runs_in_background(tmp_path: Path) -> None:
    client = RecordingClient()
    gateway = AssetExportGateway(client=client, output_dir=tmp_path)

    gateway.publish(make_strip())
    gateway.close(wait=True)

    assert len(client.calls) == 1
