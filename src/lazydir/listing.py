"""Directory listing and root resolution over the platform primitives."""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from lazydir.errors import FileError


@dataclass(slots=True, frozen=True)
class ListedEntry:
    name: str
    path: Path
    is_dir: bool


Lister = Callable[..., list[ListedEntry]]


def list_directory(directory: Path, *, follow_symlinks: bool = False) -> list[ListedEntry]:
    """List ``directory`` in native enumeration order.

    Raises ``OSError`` when the directory cannot be read. Entries whose type
    cannot be determined count as files, and so does a symlink to a directory
    unless ``follow_symlinks`` is set.
    """
    entries: list[ListedEntry] = []
    with os.scandir(directory) as scan:
        for child in scan:
            try:
                is_dir = child.is_dir(follow_symlinks=follow_symlinks)
            except OSError:
                is_dir = False
            entries.append(ListedEntry(name=child.name, path=directory / child.name, is_dir=is_dir))
    return entries


def resolve_root(path: str | os.PathLike[str]) -> Path:
    raw = Path(path).expanduser()
    try:
        resolved = raw.resolve(strict=True)
    except (OSError, RuntimeError) as exc:
        # RuntimeError is what pathlib raises on symlink loops before 3.13.
        cause = exc if isinstance(exc, OSError) else OSError(str(exc))
        raise FileError(cause, raw) from exc
    if not resolved.is_dir():
        raise FileError(NotADirectoryError(f"not a directory: {resolved}"), resolved)
    return resolved
