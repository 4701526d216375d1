import io
import zipfile
from unittest.mock import MagicMock

import httpx
import pytest

from launcher_app.services import api
from launcher_app.services.errors import ApiError, TransferError, ExtractionError
from launcher_app.services.installer import (
    Installer,
    archive_file_name,
    compute_percent,
    game_folder_name,
)
from launcher_app.services.session import LauncherSession
from launcher_app.services.shortcuts import ShortcutCreator, LinuxShortcutCreator


PAYLOAD = b"x" * 10_000


def make_installer(tmp_path, handler, **kwargs):
    session = LauncherSession(api_url="http://testserver", token="t", install_path=tmp_path)
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    kwargs.setdefault("shortcut_creator", LinuxShortcutCreator(tmp_path / "Desktop"))
    return Installer(session, client=client, chunk_size=1024, **kwargs)


def make_zip(path, members):
    with zipfile.ZipFile(path, "w") as zf:
        for name, data in members.items():
            zf.writestr(name, data)
    return path


class BrokenShortcuts(ShortcutCreator):

    def _create(self, name, target, working_dir):
        raise PermissionError("desktop is read-only")


# -------------------------------
# Helpers
# -------------------------------

def test_compute_percent():
    assert compute_percent(0, 0) == 0
    assert compute_percent(50, 0) == 0
    assert compute_percent(1, 3) == 33
    assert compute_percent(2, 3) == 67
    assert compute_percent(10, 10) == 100
    assert compute_percent(20, 10) == 100


def test_archive_and_folder_names():
    assert archive_file_name("My Summer Car", 1700000000000) == "My_Summer_Car_1700000000000.zip"
    assert game_folder_name("My Summer Car") == "My Summer Car"
    assert game_folder_name('a/b:c*') == "a_b_c_"
    assert game_folder_name("...") == "game"


# -------------------------------
# Transfer
# -------------------------------

@pytest.mark.asyncio
async def test_download_reports_progress_and_renames(tmp_path):
    installer = make_installer(tmp_path, lambda request: httpx.Response(200, content=PAYLOAD))
    events = []

    path = await installer.download("http://h/x.zip", tmp_path / "dl", "My Game", 7, events.append)

    assert path.read_bytes() == PAYLOAD
    assert path.name.startswith("My_Game_") and path.suffix == ".zip"
    assert not list((tmp_path / "dl").glob("*.tmp"))

    percents = [event.percent for event in events]
    assert percents == sorted(percents)
    assert percents[-1] == 100
    assert events[-1].downloaded == events[-1].total == len(PAYLOAD)
    assert events[-1].to_dict()["gameId"] == 7


@pytest.mark.asyncio
async def test_download_accepts_async_callbacks(tmp_path):
    installer = make_installer(tmp_path, lambda request: httpx.Response(200, content=PAYLOAD))
    seen = []

    async def on_progress(event):
        seen.append(event.percent)

    await installer.download("http://h/x.zip", tmp_path, "Game", 1, on_progress)
    assert seen[-1] == 100


@pytest.mark.asyncio
async def test_unknown_length_reports_zero_percent(tmp_path):
    async def body():
        yield b"a" * 600
        yield b"b" * 600

    installer = make_installer(tmp_path, lambda request: httpx.Response(200, content=body()))
    events = []

    path = await installer.download("http://h/x.zip", tmp_path, "Game", 1, events.append)

    assert path.stat().st_size == 1200
    assert {event.percent for event in events} == {0}
    assert events[-1].total == 0


@pytest.mark.asyncio
async def test_interrupted_stream_leaves_nothing_behind(tmp_path):
    async def body():
        yield b"a" * 2048
        raise httpx.ReadError("connection reset")

    installer = make_installer(
        tmp_path, lambda request: httpx.Response(200, headers={"content-length": "8192"}, content=body())
    )
    destination = tmp_path / "dl"

    with pytest.raises(TransferError):
        await installer.download("http://h/x.zip", destination, "Game", 1)

    assert list(destination.iterdir()) == []


@pytest.mark.asyncio
async def test_http_error_status_is_a_transfer_error(tmp_path):
    installer = make_installer(tmp_path, lambda request: httpx.Response(404))

    with pytest.raises(TransferError, match="404"):
        await installer.download("http://h/missing.zip", tmp_path / "dl", "Game", 1)
    assert list((tmp_path / "dl").iterdir()) == []


# -------------------------------
# Extraction
# -------------------------------

@pytest.mark.asyncio
async def test_extract_unpacks_and_removes_archive(tmp_path):
    archive = make_zip(tmp_path / "game.zip", {"game.exe": b"MZ", "data/level1.dat": b"1"})
    installer = make_installer(tmp_path, lambda request: httpx.Response(404))

    target = await installer.extract(archive, tmp_path / "Game")

    assert (target / "game.exe").read_bytes() == b"MZ"
    assert (target / "data" / "level1.dat").read_bytes() == b"1"
    assert not archive.exists()


@pytest.mark.asyncio
async def test_extract_rejects_corrupt_archive(tmp_path):
    archive = tmp_path / "broken.zip"
    archive.write_bytes(b"definitely not a zip")
    installer = make_installer(tmp_path, lambda request: httpx.Response(404))

    with pytest.raises(ExtractionError):
        await installer.extract(archive, tmp_path / "Game")
    assert archive.exists()


@pytest.mark.asyncio
async def test_extract_rejects_members_outside_destination(tmp_path):
    archive = make_zip(tmp_path / "evil.zip", {"../escaped.txt": b"gotcha"})
    installer = make_installer(tmp_path, lambda request: httpx.Response(404))

    with pytest.raises(ExtractionError, match="Unsafe path"):
        await installer.extract(archive, tmp_path / "Game")
    assert not (tmp_path / "escaped.txt").exists()


@pytest.mark.asyncio
async def test_extract_failure_keeps_files_already_written(tmp_path):
    archive = make_zip(tmp_path / "half.zip", {"first.txt": b"A" * 100, "second.txt": b"B" * 100})
    raw = archive.read_bytes()
    archive.write_bytes(raw.replace(b"B" * 100, b"C" * 100, 1))
    installer = make_installer(tmp_path, lambda request: httpx.Response(404))

    with pytest.raises(ExtractionError):
        await installer.extract(archive, tmp_path / "Game")

    assert (tmp_path / "Game" / "first.txt").read_bytes() == b"A" * 100
    assert archive.exists()


# -------------------------------
# Completion
# -------------------------------

@pytest.mark.asyncio
async def test_finalize_creates_shortcut_and_reports(tmp_path, monkeypatch):
    complete = MagicMock(return_value={"message": "Installation completed"})
    monkeypatch.setattr(api, "complete_download", complete)
    installer = make_installer(tmp_path, lambda request: httpx.Response(404))

    result = await installer.finalize("dl-1", tmp_path / "Game", "Game", "game.exe")

    assert result == {"message": "Installation completed"}
    complete.assert_called_once_with(installer.session, "dl-1", tmp_path / "Game")
    entry = (tmp_path / "Desktop" / "Game.desktop").read_text()
    assert f'Exec="{tmp_path / "Game" / "game.exe"}"' in entry


@pytest.mark.asyncio
async def test_shortcut_failure_does_not_block_completion(tmp_path, monkeypatch):
    complete = MagicMock(return_value={"message": "Installation completed"})
    monkeypatch.setattr(api, "complete_download", complete)
    installer = make_installer(
        tmp_path, lambda request: httpx.Response(404), shortcut_creator=BrokenShortcuts(tmp_path / "Desktop")
    )

    await installer.finalize("dl-1", tmp_path / "Game", "Game", "game.exe")
    complete.assert_called_once()


@pytest.mark.asyncio
async def test_failed_status_report_is_not_fatal(tmp_path, monkeypatch):
    monkeypatch.setattr(api, "report_download_status", MagicMock(side_effect=ApiError("Cannot reach launcher server")))
    installer = make_installer(tmp_path, lambda request: httpx.Response(404))

    await installer.report("dl-1", "downloading", progress=0)


@pytest.mark.asyncio
async def test_install_marks_record_failed_on_transfer_error(tmp_path, monkeypatch):
    reports = []
    monkeypatch.setattr(
        api, "report_download_status",
        lambda session, download_id, status, progress=None, error=None: reports.append((status, error)),
    )
    complete = MagicMock()
    monkeypatch.setattr(api, "complete_download", complete)
    installer = make_installer(tmp_path, lambda request: httpx.Response(500))

    record = {"id": "dl-1", "gameName": "Game", "gameId": 1, "downloadLink": "http://h/x.zip", "executable": "x.exe"}
    with pytest.raises(TransferError):
        await installer.install(record)

    assert [status for status, _ in reports] == ["downloading", "failed"]
    assert "500" in reports[-1][1]
    complete.assert_not_called()


@pytest.mark.asyncio
async def test_install_marks_record_failed_when_completion_is_rejected(tmp_path, monkeypatch):
    reports = []
    monkeypatch.setattr(
        api, "report_download_status",
        lambda session, download_id, status, progress=None, error=None: reports.append((status, error)),
    )
    monkeypatch.setattr(api, "complete_download", MagicMock(side_effect=ApiError("Download not found", 404)))

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr("x.exe", b"MZ")
    installer = make_installer(tmp_path, lambda request: httpx.Response(200, content=buffer.getvalue()))

    record = {"id": "dl-1", "gameName": "Game", "gameId": 1, "downloadLink": "http://h/x.zip", "executable": "x.exe"}
    with pytest.raises(ApiError):
        await installer.install(record)

    assert [status for status, _ in reports] == ["downloading", "downloaded", "extracting", "failed"]
    assert reports[-1][1] == "Download not found"
    assert (tmp_path / "Game" / "x.exe").read_bytes() == b"MZ"
