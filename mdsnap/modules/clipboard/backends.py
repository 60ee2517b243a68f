"""
Clipboard and notification backends.

Thin wrappers around the platform's command-line tools. Everything here is
blocking; callers run it in a worker thread.
"""

import os
import shutil
import subprocess
import sys
import tempfile
from typing import Protocol

from mdsnap.shared.errors import ClipboardError
from mdsnap.shared.logging import get_logger

logger = get_logger(__name__)


COMMAND_TIMEOUT = 5.0


class Clipboard(Protocol):
    def read_text(self) -> str: ...

    def write_png(self, png_bytes: bytes) -> None: ...


class Notifier(Protocol):
    def notify(self, title: str, body: str) -> None: ...


def _run(cmd: list[str], data: bytes | None = None) -> bytes:
    try:
        result = subprocess.run(
            cmd,
            input=data,
            capture_output=True,
            check=True,
            timeout=COMMAND_TIMEOUT,
        )
    except FileNotFoundError as e:
        raise ClipboardError(f"Clipboard tool not found: {cmd[0]}") from e
    except subprocess.CalledProcessError as e:
        stderr = e.stderr.decode("utf-8", "replace").strip() if e.stderr else ""
        raise ClipboardError(f"{cmd[0]} failed ({e.returncode}): {stderr}") from e
    except subprocess.TimeoutExpired as e:
        raise ClipboardError(f"{cmd[0]} timed out") from e
    return result.stdout


class SystemClipboard:
    """Clipboard access through pbpaste/osascript, wl-clipboard, xclip or PowerShell."""

    def __init__(self, platform: str | None = None):
        self.platform = platform or sys.platform

    def _is_wayland(self) -> bool:
        return bool(os.environ.get("WAYLAND_DISPLAY")) and shutil.which("wl-paste") is not None

    def read_text(self) -> str:
        if self.platform == "darwin":
            raw = _run(["pbpaste"])
        elif self.platform == "win32":
            raw = _run(["powershell", "-NoProfile", "-Command", "Get-Clipboard -Raw"])
        elif self._is_wayland():
            raw = _run(["wl-paste", "--no-newline", "--type", "text/plain"])
        else:
            raw = _run(["xclip", "-selection", "clipboard", "-o"])
        return raw.decode("utf-8", "replace")

    def write_png(self, png_bytes: bytes) -> None:
        if self.platform == "darwin":
            self._write_png_via_file(
                png_bytes,
                lambda path: [
                    "osascript", "-e",
                    f"set the clipboard to (read (POSIX file {_applescript_str(path)}) as «class PNGf»)",
                ],
            )
        elif self.platform == "win32":
            self._write_png_via_file(
                png_bytes,
                lambda path: [
                    "powershell", "-NoProfile", "-Command",
                    "Add-Type -AssemblyName System.Windows.Forms; "
                    "Add-Type -AssemblyName System.Drawing; "
                    f"[System.Windows.Forms.Clipboard]::SetImage([System.Drawing.Image]::FromFile({_powershell_str(path)}))",
                ],
            )
        elif self._is_wayland():
            _run(["wl-copy", "--type", "image/png"], data=png_bytes)
        else:
            _run(["xclip", "-selection", "clipboard", "-t", "image/png", "-i"], data=png_bytes)
        logger.info(f"Wrote {len(png_bytes)} bytes of PNG to clipboard")

    def _write_png_via_file(self, png_bytes: bytes, build_cmd) -> None:
        fd, path = tempfile.mkstemp(suffix=".png", prefix="mdsnap-")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(png_bytes)
            _run(build_cmd(path))
        finally:
            os.unlink(path)


class DesktopNotifier:
    """Best-effort desktop notifications. Never raises."""

    def __init__(self, enabled: bool = True, platform: str | None = None):
        self.enabled = enabled
        self.platform = platform or sys.platform

    def notify(self, title: str, body: str) -> None:
        if not self.enabled:
            return
        if self.platform == "darwin":
            script = f"display notification {_applescript_str(body)} with title {_applescript_str(title)}"
            cmd = ["osascript", "-e", script]
        elif self.platform.startswith("linux"):
            cmd = ["notify-send", "--app-name=mdsnap", title, body]
        else:
            logger.info(f"Notification: {title}: {body}")
            return

        try:
            _run(cmd)
        except ClipboardError as e:
            logger.info(f"Notification: {title}: {body} ({e})")


def _applescript_str(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _powershell_str(value: str) -> str:
    # Single-quoted literal; a quote is escaped by doubling it
    return "'" + value.replace("'", "''") + "'"
