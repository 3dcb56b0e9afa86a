"""Per-file bookkeeping shared by requests and notifications."""

from __future__ import annotations

import enum
import logging
import os
import threading
import tomllib
from pathlib import Path

logger = logging.getLogger(__name__)


class Edition(enum.Enum):
    """A Rust language edition."""

    EDITION_2015 = "2015"
    EDITION_2018 = "2018"
    EDITION_2021 = "2021"

    @classmethod
    def default(cls) -> Edition:
        return cls.EDITION_2015

    @classmethod
    def from_str(cls, text: str) -> Edition:
        """Parse an edition such as ``"2018"``; raise ValueError otherwise."""
        try:
            return cls(text)
        except ValueError:
            raise ValueError(f"unknown edition {text!r}") from None


def edition_from_manifest(manifest_path: str | os.PathLike[str]) -> Edition | None:
    """Read the package edition from a Cargo manifest.

    Returns None when the manifest cannot be read, has no ``[package]``
    table or names an unknown edition; a missing edition means the default.
    """
    try:
        with Path(manifest_path).open("rb") as fh:
            manifest = tomllib.load(fh)
    except (OSError, tomllib.TOMLDecodeError):
        return None

    package = manifest.get("package")
    if not isinstance(package, dict):
        return None
    edition = package.get("edition")
    if edition is None:
        return Edition.default()
    if not isinstance(edition, str):
        return None
    try:
        return Edition.from_str(edition)
    except ValueError:
        return None


class VersionOrdering(enum.Enum):
    """How a change's sequence number relates to the last one seen."""

    OK = "ok"
    DUPLICATE = "duplicate"
    OUT_OF_ORDER = "out_of_order"


class ChangeVersions:
    """Tracks the last version number of changes received for each file."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._versions: dict[Path, int] = {}

    def check(self, file_path: str | os.PathLike[str], version: int) -> VersionOrdering:
        """Classify ``version`` for ``file_path`` and record it when in order."""
        path = Path(file_path)
        with self._lock:
            previous = self._versions.get(path)
            if previous is not None and version <= previous:
                logger.debug(
                    "Out of order or duplicate change %s, prev: %d, current: %d",
                    path,
                    previous,
                    version,
                )
                if version == previous:
                    return VersionOrdering.DUPLICATE
                return VersionOrdering.OUT_OF_ORDER
            self._versions[path] = version
            return VersionOrdering.OK

    def reset(self, file_path: str | os.PathLike[str]) -> None:
        """Forget the recorded version for ``file_path``."""
        with self._lock:
            self._versions.pop(Path(file_path), None)


def _is_ident_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def find_word_at_pos(line: str, col: int) -> tuple[int, int]:
    """Return the ``(start, end)`` cursor range of the word at cursor ``col``."""
    start = 0
    for i, ch in enumerate(line[:col]):
        if not _is_ident_char(ch):
            start = i + 1

    end = next(
        (i for i, ch in enumerate(line[col:], start=col) if not _is_ident_char(ch)),
        col,
    )
    return start, end