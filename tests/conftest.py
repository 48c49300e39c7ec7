import shutil
import subprocess
from pathlib import Path

import pytest

from llmcopy import console


@pytest.fixture(autouse=True)
def quiet_console():
    console.set_verbose(False)
    yield
    console.set_verbose(False)


@pytest.fixture
def make_tree(tmp_path):
    """Write a ``{relative path: content}`` mapping under a fresh directory."""

    def _make(files, name="proj"):
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        for rel, content in files.items():
            p = root / rel
            p.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                p.write_bytes(content)
            else:
                p.write_text(content, encoding="utf-8")
        return root

    return _make


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def git_init(root: Path) -> Path:
    subprocess.run(["git", "init", "-q", str(root)], check=True)
    return root
