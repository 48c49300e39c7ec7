"""
Core logic for llm-copy: admission policy, enumeration and bundle output.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional, Sequence

import pathspec

from . import console
from .vcs import FilesystemWalker, select_lister

# Exceptions
class LlmCopyError(Exception): ...
class ConfigFileError(LlmCopyError): ...
class PreconditionError(LlmCopyError): ...
class OutputError(LlmCopyError): ...
class ClipboardError(LlmCopyError): ...

# Defaults
HEADER_PREFIX = "# File: "
TMP_BASENAME = "llm_bundle"

DEFAULT_EXTENSIONS: FrozenSet[str] = frozenset(
    "txt md py json jsonl yaml yml js html sh rs toml cfg css ini env rst "
    "c cc cpp h hpp cuh cu ts tsx jsx java rb go bat ps1 fish make cmake gradle".split()
)

# Extensionless build manifests and project metadata.
DEFAULT_FILENAMES: FrozenSet[str] = frozenset(
    [
        "Makefile",
        "GNUmakefile",
        "Dockerfile",
        "Containerfile",
        "Justfile",
        "Rakefile",
        "Gemfile",
        "Procfile",
        "Vagrantfile",
        "Jenkinsfile",
        "BUILD",
        "WORKSPACE",
        "LICENSE",
        "LICENCE",
        "COPYING",
        "NOTICE",
        "AUTHORS",
        "CONTRIBUTORS",
        "CHANGELOG",
        "CHANGES",
        "README",
    ]
)


def _extension(name: str) -> Optional[str]:
    _, dot, ext = name.rpartition(".")
    if dot and ext:
        return ext
    return None


@dataclass(frozen=True)
class InclusionPolicy:
    """Name-based allow-list deciding which files enter a bundle."""

    extensions: FrozenSet[str] = DEFAULT_EXTENSIONS
    filenames: FrozenSet[str] = DEFAULT_FILENAMES

    def admits(self, name: str) -> bool:
        base = name.rsplit("/", 1)[-1]
        ext = _extension(base)
        if ext is not None:
            return ext in self.extensions
        return base in self.filenames

    def with_extra(
        self,
        extensions: Iterable[str] = (),
        filenames: Iterable[str] = (),
    ) -> "InclusionPolicy":
        return InclusionPolicy(
            extensions=self.extensions | {e.lstrip(".") for e in extensions},
            filenames=self.filenames | frozenset(filenames),
        )

    def describe(self) -> str:
        return ", ".join(f".{e}" for e in sorted(self.extensions))


def is_hidden(rel_path: str) -> bool:
    """True when any segment of *rel_path* starts with a dot."""
    return any(part.startswith(".") for part in rel_path.split("/"))


# Ignore-pattern utilities
def load_extra_patterns(config_path: Path) -> List[str]:
    if not config_path.exists():
        raise ConfigFileError(f"Config file '{config_path}' does not exist")
    if not config_path.is_file():
        raise ConfigFileError(f"'{config_path}' is not a file")
    try:
        with config_path.open("r", encoding="utf-8") as fh:
            return [
                ln.strip()
                for ln in fh
                if ln.strip() and not ln.lstrip().startswith("#")
            ]
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigFileError(f"Could not read config file '{config_path}': {e}")


def compile_patterns(patterns: Iterable[str]) -> Optional["pathspec.PathSpec"]:
    lines = list(patterns)
    if not lines:
        return None
    return pathspec.PathSpec.from_lines("gitwildmatch", lines)


@dataclass
class BundleResult:
    content: bytes = b""
    files: List[str] = field(default_factory=list)

    @property
    def line_count(self) -> int:
        return self.content.count(b"\n")

    @property
    def byte_count(self) -> int:
        return len(self.content)

    @property
    def empty(self) -> bool:
        return not self.content


def _sort_key(rel: str) -> bytes:
    return os.fsencode(rel)


class Bundler:
    """Collect admitted files under a list of roots into one buffer.

    The policy, lister and exclude spec are fixed at construction; a single
    instance can bundle any number of path lists.
    """

    def __init__(
        self,
        policy: Optional[InclusionPolicy] = None,
        lister: Optional[FilesystemWalker] = None,
        exclude: Optional["pathspec.PathSpec"] = None,
    ) -> None:
        self.policy = policy or InclusionPolicy()
        self.lister = lister if lister is not None else select_lister()
        self.exclude = exclude

    def _excluded(self, rel: str) -> bool:
        return self.exclude is not None and self.exclude.match_file(rel)

    def bundle(self, paths: Sequence[Path]) -> BundleResult:
        buf = bytearray()
        emitted: List[str] = []
        for target in paths:
            target = Path(target)
            if target.is_symlink() and target.is_file():
                console.warn(f"'{target}' is a symbolic link; skipping")
            elif target.is_file():
                if self._admit_single(target):
                    self._emit(buf, emitted, target, target.name)
            elif target.is_dir():
                for rel in self.collect(target):
                    self._emit(buf, emitted, target / rel, rel)
            else:
                console.warn(f"'{target}' does not exist or is not a file/directory")
        return BundleResult(content=bytes(buf), files=emitted)

    def _admit_single(self, path: Path) -> bool:
        if not self.policy.admits(path.name) or self._excluded(path.name):
            return False
        if self.lister.is_tracked_worktree(path.parent) and self.lister.is_ignored(path):
            console.debug(f"Ignored by git: {path}")
            return False
        return True

    def collect(self, root: Path) -> List[str]:
        """Admitted paths under directory *root*, relative and sorted byte-wise."""
        if self.lister.is_tracked_worktree(root):
            console.debug(f"Listing {root} via git")
            candidates = self.lister.list_included_files(root)
        else:
            console.debug(f"Scanning {root} …")
            candidates = FilesystemWalker().list_included_files(root)

        kept: List[str] = []
        for rel in candidates:
            if is_hidden(rel) or not self.policy.admits(rel) or self._excluded(rel):
                continue
            p = root / rel
            # also drops submodule gitlinks, which list as directories
            if p.is_symlink() or not p.is_file():
                continue
            kept.append(rel)
        kept.sort(key=_sort_key)
        console.debug(f"{len(candidates)} files found, {len(kept)} kept after filtering.")
        return kept

    def _emit(self, buf: bytearray, emitted: List[str], path: Path, rel: str) -> None:
        if path.is_symlink() or not path.is_file() or not os.access(path, os.R_OK):
            console.warn(f"'{path}' is missing, unreadable or not a regular file; skipping")
            return
        try:
            raw = path.read_bytes()
        except OSError as e:
            console.warn(f"Could not read {path}: {e}")
            return
        buf += os.fsencode(f"{HEADER_PREFIX}{rel}\n")
        buf += raw
        buf += b"\n"
        emitted.append(rel)


# Output
def transient_path() -> Path:
    """Create an empty ``llm_bundle.XXXXXX.txt`` in the temp directory."""
    try:
        fd, name = tempfile.mkstemp(prefix=f"{TMP_BASENAME}.", suffix=".txt")
    except OSError as e:
        raise OutputError(f"Could not create temporary file: {e}")
    os.close(fd)
    return Path(name)


def write_bundle(result: BundleResult, out_path: Path) -> Path:
    try:
        out_path = out_path.expanduser().resolve()
    except (OSError, RuntimeError) as e:
        raise OutputError(f"Could not resolve output path '{out_path}': {e}")

    if not out_path.parent.exists():
        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputError(f"Could not create directory '{out_path.parent}': {e}")

    try:
        out_path.write_bytes(result.content)
    except OSError as e:
        raise OutputError(f"Could not write to output file '{out_path}': {e}")
    return out_path
