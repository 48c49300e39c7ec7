"""
File enumeration backends: git-aware listing and a plain filesystem walk.
"""
from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path
from typing import List

from . import console


def _report_walk_error(err: OSError) -> None:
    console.warn(f"Could not scan '{err.filename}': {err.strerror or err}")


class FilesystemWalker:
    """Fallback lister used outside a work tree or when ignore rules are off."""

    def is_tracked_worktree(self, path: Path) -> bool:
        return False

    def is_ignored(self, path: Path) -> bool:
        return False

    def list_included_files(self, root: Path) -> List[str]:
        """Return every file under *root* as a POSIX path relative to it.

        Hidden directories are pruned during the walk; links to directories
        are never followed.
        """
        found: List[str] = []
        for dirpath, dirnames, filenames in os.walk(root, onerror=_report_walk_error):
            dirnames[:] = [d for d in dirnames if not d.startswith(".")]
            rel_dir = Path(dirpath).relative_to(root)
            for name in filenames:
                found.append((rel_dir / name).as_posix())
        return found


class GitWorkTree(FilesystemWalker):
    """Ask ``git`` which files belong in the bundle."""

    def __init__(self, git: str = "git") -> None:
        self.git = git

    def _run(self, cwd: Path, *args: str) -> subprocess.CompletedProcess:
        return subprocess.run(
            [self.git, "-C", str(cwd), *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
        )

    def is_tracked_worktree(self, path: Path) -> bool:
        cwd = path if path.is_dir() else path.parent
        proc = self._run(cwd, "rev-parse", "--is-inside-work-tree")
        return proc.returncode == 0 and proc.stdout.strip() == b"true"

    def is_ignored(self, path: Path) -> bool:
        proc = self._run(path.parent, "check-ignore", "-q", "--", path.name)
        return proc.returncode == 0

    def list_included_files(self, root: Path) -> List[str]:
        """Tracked plus untracked-but-not-ignored paths under *root*.

        ``ls-files`` reports paths relative to the directory it runs in, so
        running it from *root* with the ``.`` pathspec gives root-relative
        names directly.
        """
        proc = self._run(
            root, "ls-files", "-z", "--cached", "--others", "--exclude-standard", "--", "."
        )
        if proc.returncode != 0:
            console.warn(
                f"git ls-files failed in '{root}' (exit {proc.returncode}); "
                "falling back to a plain directory walk"
            )
            return FilesystemWalker().list_included_files(root)
        # An unmerged path shows up once per stage.
        names = {os.fsdecode(raw) for raw in proc.stdout.split(b"\0") if raw}
        return list(names)


def git_available() -> bool:
    return shutil.which("git") is not None


def select_lister(respect_ignore: bool = True) -> FilesystemWalker:
    """Pick the git backend when it can be used, else the plain walk."""
    if respect_ignore and git_available():
        return GitWorkTree()
    return FilesystemWalker()
