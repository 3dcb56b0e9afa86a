"""Code lenses that run individual tests."""

from __future__ import annotations

import bisect
import re
from dataclasses import dataclass, field

Position = tuple[int, int]
Range = tuple[Position, Position]

# Matches `#[test]`, then lazily anything up to the nearest line that declares
# `fn name` before any comment starts, capturing the function name.
_TEST_FN_RE = re.compile(r"#\[test\][\s\S]*?^[^/]*?fn\s+(?P<name>\w+)", re.MULTILINE)


class LineIndex:
    """Maps UTF-8 byte offsets in a text to zero-indexed (row, column) positions."""

    def __init__(self, text: str) -> None:
        data = text.encode("utf-8")
        self._newlines = [0]
        self._newlines.extend(
            i + 1 for i, byte in enumerate(data) if byte == ord("\n")
        )

    def offset_to_position(self, offset: int) -> Position:
        """Return ``(row, column)`` for a byte ``offset``; columns count bytes."""
        if offset < 0:
            raise ValueError(f"negative offset {offset}")
        line = bisect.bisect_right(self._newlines, offset) - 1
        return line, offset - self._newlines[line]


@dataclass
class Cmd:
    """A command line to run, with extra environment variables."""

    binary: str
    args: list[str]
    env: dict[str, str] = field(default_factory=dict)


@dataclass
class RunAction:
    """A runnable action attached to a range of the source."""

    label: str
    target_element: Range
    cmd: Cmd


def collect_run_actions(text: str) -> list[RunAction]:
    """Find every `#[test]` function in ``text`` and make an action to run it."""
    if "#[test]" not in text:
        return []

    line_index = LineIndex(text)
    actions: list[RunAction] = []
    for match in _TEST_FN_RE.finditer(text):
        start = len(text[: match.start("name")].encode("utf-8"))
        end = start + len(match.group("name").encode("utf-8"))
        test_name = match.group("name")
        actions.append(
            RunAction(
                label="Run test",
                target_element=(
                    line_index.offset_to_position(start),
                    line_index.offset_to_position(end),
                ),
                cmd=Cmd(
                    binary="cargo",
                    args=["test", "--", "--nocapture", test_name],
                    env={"RUST_BACKTRACE": "short"},
                ),
            )
        )
    return actions