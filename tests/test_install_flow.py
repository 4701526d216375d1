import io
import zipfile

import httpx
import pytest

from launcher_app.services.installer import Installer
from launcher_app.services.launcher import Launcher
from launcher_app.services.session import LauncherSession
from launcher_app.services.shortcuts import LinuxShortcutCreator


def zip_bytes(members):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, data in members.items():
            zf.writestr(name, data)
    return buffer.getvalue()


@pytest.fixture
def launcher(app, backend, tmp_path):
    session = LauncherSession(api_url="http://testserver", install_path=tmp_path / "Games")
    installer = Installer(
        session,
        client=httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver"),
        shortcut_creator=LinuxShortcutCreator(tmp_path / "Desktop"),
    )
    return Launcher(session, installer)


@pytest.mark.asyncio
async def test_install_game_end_to_end(launcher, add_game, storage, tmp_path):
    (storage / "pong.zip").write_bytes(zip_bytes({"pong.exe": b"MZ", "assets/ball.png": b"png"}))
    game = add_game(name="Pong", downloadUrl=None, fileName="pong.zip", executable="pong.exe")

    assert (await launcher.register("pat", "pat@example.com", "pw-123"))["success"]
    login = await launcher.login("pat", "pw-123")
    assert login["success"]
    assert login["data"]["username"] == "pat"

    progress = []
    result = await launcher.install_game(game["id"], progress.append)
    assert result["success"], result

    install_path = tmp_path / "Games" / "Pong"
    assert result["data"]["installPath"] == str(install_path)
    assert (install_path / "pong.exe").read_bytes() == b"MZ"
    assert (install_path / "assets" / "ball.png").is_file()
    assert not list((tmp_path / "Games").glob("*.zip*"))
    assert progress[-1].percent == 100
    assert (tmp_path / "Desktop" / "Pong.desktop").is_file()

    library = await launcher.get_library()
    assert [entry["id"] for entry in library["data"]] == [game["id"]]

    downloads = (await launcher.get_downloads())["data"]
    assert len(downloads) == 1
    assert downloads[0]["status"] == "installed"
    assert downloads[0]["installPath"] == str(install_path)


@pytest.mark.asyncio
async def test_failed_transfer_is_recorded(launcher, add_game):
    game = add_game(name="Gone", downloadUrl="http://testserver/games-files/gone.zip")
    await launcher.register("sam", "sam@example.com", "pw-123")
    await launcher.login("sam", "pw-123")

    result = await launcher.install_game(game["id"])
    assert result["success"] is False
    assert "404" in result["error"]

    downloads = (await launcher.get_downloads())["data"]
    assert downloads[0]["status"] == "failed"
    assert (await launcher.get_library())["data"] == []


@pytest.mark.asyncio
async def test_results_carry_server_errors(launcher):
    result = await launcher.login("nobody", "wrong")
    assert result == {"success": False, "error": "Invalid credentials"}

    result = await launcher.get_library()
    assert result == {"success": False, "error": "Not logged in"}


@pytest.mark.asyncio
async def test_step_by_step_install(launcher, add_game, storage, tmp_path):
    (storage / "maze.zip").write_bytes(zip_bytes({"maze.exe": b"MZ"}))
    game = add_game(name="Maze", downloadUrl=None, fileName="maze.zip", executable="maze.exe")
    await launcher.register("lee", "lee@example.com", "pw-123")
    await launcher.login("lee", "pw-123")

    record = (await launcher.create_download(game["id"]))["data"]
    downloaded = await launcher.download_game(record["downloadLink"], game["id"], "Maze")
    assert downloaded["success"]

    extracted = await launcher.extract_game(downloaded["data"]["filePath"], "Maze")
    assert extracted["data"]["extractPath"] == str(tmp_path / "Games" / "Maze")

    finished = await launcher.complete_download(record["id"], extracted["data"]["extractPath"], "Maze", "maze.exe")
    assert finished["data"]["download"]["status"] == "installed"


@pytest.mark.asyncio
async def test_launch_missing_executable(launcher, tmp_path):
    result = await launcher.launch_game("nope.exe", tmp_path)
    assert result["success"] is False
    assert result["error"].startswith("Executable not found")


@pytest.mark.asyncio
async def test_change_install_path(launcher, tmp_path):
    result = await launcher.change_install_path(str(tmp_path / "Elsewhere"))
    assert result == {"success": True, "data": {"path": str(tmp_path / "Elsewhere")}}
    assert (tmp_path / "Elsewhere").is_dir()
    assert launcher.session.install_path == tmp_path / "Elsewhere"

    assert (await launcher.change_install_path(""))["success"] is False
