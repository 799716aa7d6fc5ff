"""Project tree scanning helpers."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

BINARY_SNIFF_BYTES = 8192


@dataclass(frozen=True, slots=True)
class WalkSelector:
    """Recursive walk below ``root/base`` keeping files whose name ends with a suffix."""

    suffixes: tuple[str, ...]
    base: str = "."

    def matches(self, name: str) -> bool:
        lowered = name.lower()
        return any(lowered.endswith(suffix.lower()) for suffix in self.suffixes)


@dataclass(frozen=True, slots=True)
class FixedPaths:
    """Well-known paths relative to the project root."""

    paths: tuple[str, ...]


Selector = WalkSelector | FixedPaths


def locate(
    root: Path,
    selector: Selector,
    *,
    exclude_dirs: frozenset[str] = frozenset(),
) -> list[Path]:
    """Return files below ``root`` selected by ``selector`` in lexicographic order."""
    if isinstance(selector, FixedPaths):
        found = [root / rel for rel in selector.paths if (root / rel).is_file()]
    else:
        found = list(_walk(root / selector.base, selector, exclude_dirs))
    return sorted(found, key=lambda path: relative_posix(root, path))


def read_text(path: Path, *, max_bytes: int) -> str | None:
    """Read a small text file, returning None when it is unreadable, oversized or binary."""
    try:
        size = path.stat().st_size
        if size > max_bytes:
            logger.debug("Skipping oversized file %s (%d bytes)", path, size)
            return None
        data = path.read_bytes()
    except OSError as exc:
        logger.debug("Skipping unreadable file %s: %s", path, exc)
        return None
    if b"\x00" in data[:BINARY_SNIFF_BYTES]:
        logger.debug("Skipping binary file %s", path)
        return None
    return data.decode("utf-8", errors="replace")


def relative_posix(root: Path, path: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def _walk(
    start: Path, selector: WalkSelector, exclude_dirs: frozenset[str]
) -> Iterator[Path]:
    if not start.is_dir():
        return
    visited: set[str] = set()

    def on_error(exc: OSError) -> None:
        logger.debug("Skipping unreadable directory %s", exc.filename)

    walker = os.walk(start, topdown=True, onerror=on_error, followlinks=True)
    for dirpath, dirnames, filenames in walker:
        real = os.path.realpath(dirpath)
        if real in visited:
            dirnames[:] = []
            continue
        visited.add(real)
        dirnames[:] = sorted(
            name
            for name in dirnames
            if name not in exclude_dirs
            and os.path.realpath(os.path.join(dirpath, name)) not in visited
        )
        for filename in filenames:
            path = Path(dirpath) / filename
            if selector.matches(filename) and path.is_file():
                yield path
