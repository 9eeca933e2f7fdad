"""
Path specification resolution.

A specification is a path relative to the workspace root, optionally ending
in a single ``*`` that asks for a recursive walk of a directory::

    README.md      -> that file
    src            -> regular files directly inside src/
    src*           -> every regular file below src/, depth-first

Helpers here are stateless: every function receives the directories it
works on explicitly.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

import pathspec

from .logs import get_logger

RECURSIVE_MARKER = "*"

log = get_logger("resolver")


@dataclass(frozen=True)
class Spec:
    raw: str
    recursive: bool
    normalized: str


def parse_spec(raw: str) -> Spec:
    """Split *raw* into its relative path and the recursion flag."""
    text = raw.strip()
    recursive = text.endswith(RECURSIVE_MARKER)
    if recursive:
        text = text[: -len(RECURSIVE_MARKER)].rstrip()
    return Spec(raw=raw, recursive=recursive, normalized=text)


def join_spec(base: Path, rel: str) -> Path:
    # Specs are always relative to *base*, even when written "/src".
    rel = rel.lstrip("/" + os.sep)
    return Path(os.path.normpath(os.path.join(base, rel)))


def relative_posix(base: Path, path: Path) -> str:
    return Path(os.path.relpath(path, base)).as_posix()


# Directory traversal
def _entries(directory: Path) -> List[Path]:
    return sorted(directory.iterdir(), key=lambda p: p.name)


def list_directory(directory: Path) -> List[Path]:
    """Regular files directly inside *directory*, no descent."""
    return [p for p in _entries(directory) if not p.is_symlink() and p.is_file()]


def walk_directory(directory: Path) -> List[Path]:
    """Every regular file below *directory*, depth-first in name order.

    Symlinks and special files are skipped without being followed.
    """
    files: List[Path] = []
    for entry in _entries(directory):
        if entry.is_symlink():
            continue
        if entry.is_dir():
            files.extend(walk_directory(entry))
        elif entry.is_file():
            files.append(entry)
    return files


# Ignore-file utilities
def load_gitignore(root: Path) -> "pathspec.PathSpec":
    gitignore_path = root / ".gitignore"
    if not gitignore_path.is_file():
        return pathspec.PathSpec.from_lines("gitwildmatch", [])
    with gitignore_path.open("r", encoding="utf-8") as fh:
        return pathspec.PathSpec.from_lines("gitwildmatch", fh)


def resolve(
    base_dir: Path,
    spec: Union[str, Spec],
    ignore: Optional["pathspec.PathSpec"] = None,
) -> List[Path]:
    """Expand *spec* against *base_dir* into an ordered list of files.

    A missing or inaccessible path, or a directory that cannot be listed,
    yields an empty list and a warning; nothing is raised. When *ignore* is
    given, files found by expanding a directory are dropped if their
    base-relative path matches it. A spec naming a single file is never
    filtered.
    """
    if isinstance(spec, str):
        spec = parse_spec(spec)
    full_path = join_spec(base_dir, spec.normalized)

    try:
        if not full_path.exists():
            log.warning("Path not found: %s", full_path)
            return []
        is_file = full_path.is_file()
        is_dir = full_path.is_dir()
    except OSError as e:
        log.warning("Could not access %s: %s", full_path, e)
        return []

    if is_file:
        return [full_path]

    if not is_dir:
        log.debug("Skipping %s: not a regular file or directory", full_path)
        return []

    try:
        files = walk_directory(full_path) if spec.recursive else list_directory(full_path)
    except OSError as e:
        log.warning("Could not read directory %s: %s", full_path, e)
        return []

    if ignore is not None:
        files = [f for f in files if not ignore.match_file(relative_posix(base_dir, f))]
    return files
