"""
macOS clipboard hand-off via ``pbcopy`` and ``osascript``.
"""
from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Optional

from .core import ClipboardError, PreconditionError

MODE_FILE = "file"
MODE_TEXT = "text"
MODE_STDOUT = "stdout"

_REQUIRED = {MODE_FILE: "osascript", MODE_TEXT: "pbcopy"}

# Sets the clipboard to a file reference so a paste target receives the file.
_SET_FILE_SCRIPT = """on run argv
  set p to POSIX file (item 1 of argv)
  set the clipboard to p
end run
"""


def required_command(mode: str) -> Optional[str]:
    return _REQUIRED.get(mode)


def ensure_available(mode: str) -> None:
    cmd = required_command(mode)
    if cmd and shutil.which(cmd) is None:
        raise PreconditionError(f"Required command not found: {cmd}")


def copy_text(data: bytes) -> None:
    try:
        proc = subprocess.run(["pbcopy"], input=data)
    except OSError as e:
        raise ClipboardError(f"Failed to copy content to clipboard: {e}")
    if proc.returncode != 0:
        raise ClipboardError("Failed to copy content to clipboard")


def copy_file(path: Path) -> None:
    """Place *path* on the clipboard as a file; it must outlive the paste."""
    try:
        proc = subprocess.run(
            ["osascript", "-", str(path)],
            input=_SET_FILE_SCRIPT.encode("utf-8"),
            stdout=subprocess.DEVNULL,
        )
    except OSError as e:
        raise ClipboardError(f"Failed to place file on clipboard: {e}")
    if proc.returncode != 0:
        raise ClipboardError("Failed to place file on clipboard")
