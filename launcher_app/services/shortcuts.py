# launcher_app/services/shortcuts.py

import logging
import os
import re
import subprocess
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path

from launcher_app import config


logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


@dataclass
class ShortcutResult:
    success: bool
    path: Path | None = None
    error: str | None = None


def safe_shortcut_name(name: str) -> str:
    cleaned = _UNSAFE_CHARS.sub("_", name).strip().strip(".")
    return cleaned or "game"


class ShortcutCreator:
    """
    Creates a desktop entry that starts `target` from `working_dir`.
    Implementations never raise; failures come back in the result.
    """

    def __init__(self, desktop_dir: Path | None = None):
        self.desktop_dir = Path(desktop_dir or config.DESKTOP_DIR)

    def create_shortcut(self, name: str, target: Path, working_dir: Path) -> ShortcutResult:
        try:
            self.desktop_dir.mkdir(parents=True, exist_ok=True)
            path = self._create(safe_shortcut_name(name), Path(target), Path(working_dir))
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning("Failed to create desktop shortcut for %s: %s", name, e)
            return ShortcutResult(success=False, error=str(e))
        return ShortcutResult(success=True, path=path)

    def _create(self, name: str, target: Path, working_dir: Path) -> Path:
        raise NotImplementedError


class WindowsShortcutCreator(ShortcutCreator):
    """
    Writes a .lnk through WScript.Shell, driven by a throwaway VBScript.
    """

    def _create(self, name, target, working_dir):
        shortcut_path = self.desktop_dir / f"{name}.lnk"
        script = "\n".join([
            'Set oWS = WScript.CreateObject("WScript.Shell")',
            f'Set oLink = oWS.CreateShortcut("{shortcut_path}")',
            f'oLink.TargetPath = "{target}"',
            f'oLink.WorkingDirectory = "{working_dir}"',
            "oLink.Save",
        ])

        with tempfile.NamedTemporaryFile("w", suffix=".vbs", delete=False, encoding="utf-8") as tmp:
            tmp.write(script)
            script_path = Path(tmp.name)
        try:
            subprocess.run(
                ["cscript.exe", "//Nologo", str(script_path)],
                check=True,
                capture_output=True,
                timeout=30,
            )
        finally:
            script_path.unlink(missing_ok=True)
        return shortcut_path


class LinuxShortcutCreator(ShortcutCreator):
    """
    Writes a freedesktop .desktop entry.
    """

    def _create(self, name, target, working_dir):
        shortcut_path = self.desktop_dir / f"{name}.desktop"
        entry = "\n".join([
            "[Desktop Entry]",
            "Type=Application",
            f"Name={name}",
            f'Exec="{target}"',
            f"Path={working_dir}",
            "Terminal=false",
            "Categories=Game;",
            "",
        ])
        shortcut_path.write_text(entry, encoding="utf-8")
        os.chmod(shortcut_path, 0o755)
        return shortcut_path


class MacShortcutCreator(ShortcutCreator):

    def _create(self, name, target, working_dir):
        shortcut_path = self.desktop_dir / name
        if shortcut_path.is_symlink() or shortcut_path.exists():
            shortcut_path.unlink()
        shortcut_path.symlink_to(target)
        return shortcut_path


def get_shortcut_creator(platform: str | None = None, desktop_dir: Path | None = None) -> ShortcutCreator:
    platform = platform or sys.platform
    if platform == "win32":
        return WindowsShortcutCreator(desktop_dir)
    if platform == "darwin":
        return MacShortcutCreator(desktop_dir)
    return LinuxShortcutCreator(desktop_dir)
