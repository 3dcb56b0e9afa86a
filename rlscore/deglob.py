"""Replacing wildcard imports with the names they bring into scope."""

from __future__ import annotations

import copy
import functools
from dataclasses import dataclass
from typing import Any, Iterable

INTERNAL_ERROR = -32603
METHOD_NOT_FOUND = -32601


class CommandError(Exception):
    """Raised when a command cannot produce a response.

    ``code`` is the JSON-RPC error code, or None for an empty error response.
    """

    def __init__(self, message: str = "", code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


def _check_position(value: Any) -> None:
    if not isinstance(value, dict):
        raise CommandError("Bad argument")
    for key in ("line", "character"):
        number = value.get(key)
        if not isinstance(number, int) or isinstance(number, bool) or number < 0:
            raise CommandError("Bad argument")


def _check_location(value: Any) -> None:
    if not isinstance(value, dict) or not isinstance(value.get("uri"), str):
        raise CommandError("Bad argument")
    range_ = value.get("range")
    if not isinstance(range_, dict):
        raise CommandError("Bad argument")
    _check_position(range_.get("start"))
    _check_position(range_.get("end"))


@dataclass
class DeglobResult:
    """The replacement for one wildcard import.

    ``location`` is the LSP location of the ``*`` character and ``new_text``
    the text that replaces it.
    """

    location: dict[str, Any]
    new_text: str

    def to_json(self) -> dict[str, Any]:
        return {"location": copy.deepcopy(self.location), "new_text": self.new_text}

    @classmethod
    def from_json(cls, value: Any) -> DeglobResult:
        """Read a result from its JSON form; raise CommandError if malformed."""
        if not isinstance(value, dict):
            raise CommandError("Bad argument")
        location = value.get("location")
        new_text = value.get("new_text")
        _check_location(location)
        if not isinstance(new_text, str):
            raise CommandError("Bad argument")
        return cls(location=copy.deepcopy(location), new_text=new_text)


def _is_upper_snake_case(text: str) -> bool:
    return all(ch.isupper() or ch == "_" or ch.isnumeric() for ch in text)


def _starts_upper(text: str) -> bool:
    return bool(text) and text[0].isupper()


def _starts_lower(text: str) -> bool:
    return bool(text) and text[0].islower()


def _compare_imports(a: str, b: str) -> int:
    # snake_case < CamelCase < UPPER_SNAKE_CASE, then plain ordering.
    if _starts_upper(a) and _starts_lower(b):
        return 1
    if _starts_lower(a) and _starts_upper(b):
        return -1
    upper_a, upper_b = _is_upper_snake_case(a), _is_upper_snake_case(b)
    if upper_a and not upper_b:
        return 1
    if not upper_a and upper_b:
        return -1
    return (a > b) - (a < b)


def sort_deglob_str(text: str) -> str:
    """Sort a comma separated list of imported names the way rustfmt does."""
    names = [part.strip() for part in text.split(",")]
    return ", ".join(sorted(names, key=functools.cmp_to_key(_compare_imports)))


def apply_deglobs(args: Iterable[Any]) -> dict[str, Any]:
    """Turn deglob command arguments into workspace edit parameters.

    All results share the URI of the first one.
    """
    results = [DeglobResult.from_json(arg) for arg in args]
    if not results:
        raise CommandError("no deglob results given")

    uri = results[0].location["uri"]
    edits = [
        {"range": copy.deepcopy(result.location["range"]), "newText": result.new_text}
        for result in results
    ]
    return {"edit": {"changes": {uri: edits}}}


def make_deglob_command(pid: int, results: Iterable[DeglobResult]) -> dict[str, Any] | None:
    """Build the code action command that applies ``results``, or None if empty."""
    arguments = [result.to_json() for result in results]
    if not arguments:
        return None
    return {
        "title": "Deglob imports" if len(arguments) > 1 else "Deglob import",
        "command": f"rls.deglobImports-{pid}",
        "arguments": arguments,
    }