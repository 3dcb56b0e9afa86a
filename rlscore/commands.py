"""Workspace commands that a client can ask the server to execute."""

from __future__ import annotations

import copy
from typing import Any, Sequence

from rlscore.deglob import METHOD_NOT_FOUND, CommandError, apply_deglobs

APPLY_SUGGESTION_COMMAND = "rls.applySuggestion"
DEGLOB_IMPORTS_COMMAND = "rls.deglobImports"


def _read_position(value: Any) -> dict[str, int]:
    if not isinstance(value, dict):
        raise CommandError("Bad argument")
    position: dict[str, int] = {}
    for key in ("line", "character"):
        number = value.get(key)
        if not isinstance(number, int) or isinstance(number, bool) or number < 0:
            raise CommandError("Bad argument")
        position[key] = number
    return position


def _read_range(value: Any) -> dict[str, dict[str, int]]:
    if not isinstance(value, dict):
        raise CommandError("Bad argument")
    return {"start": _read_position(value.get("start")), "end": _read_position(value.get("end"))}


def _read_location(value: Any) -> tuple[str, dict[str, dict[str, int]]]:
    if not isinstance(value, dict) or not isinstance(value.get("uri"), str):
        raise CommandError("Bad argument")
    return value["uri"], _read_range(value.get("range"))


def _workspace_edit(uri: str, range_: dict[str, Any], new_text: str) -> dict[str, Any]:
    return {"changes": {uri: [{"range": copy.deepcopy(range_), "newText": new_text}]}}


def apply_suggestion(args: Sequence[Any]) -> dict[str, Any]:
    """Turn ``[location, new_text]`` arguments into workspace edit parameters."""
    if len(args) < 2:
        raise CommandError("Bad argument")
    uri, range_ = _read_location(args[0])
    new_text = args[1]
    if not isinstance(new_text, str):
        raise CommandError("Bad argument")
    return {"edit": _workspace_edit(uri, range_, new_text)}


def execute_command(command: str, arguments: Sequence[Any] | None) -> dict[str, Any]:
    """Run a workspace command and return the edit parameters to send to the client.

    Commands may carry a suffix (such as the server's process id) after their
    name. Unknown commands raise CommandError with the method-not-found code.
    """
    args = list(arguments or [])
    if command.startswith(APPLY_SUGGESTION_COMMAND):
        return apply_suggestion(args)
    if command.startswith(DEGLOB_IMPORTS_COMMAND):
        return apply_deglobs(args)
    raise CommandError("Unknown command", METHOD_NOT_FOUND)


def make_suggestion_command(
    pid: int, uri: str, range: dict[str, Any], new_text: str, label: str
) -> dict[str, Any]:
    """Build the code action command that applies a compiler suggestion."""
    location = {"uri": uri, "range": copy.deepcopy(range)}
    return {
        "title": label,
        "command": f"{APPLY_SUGGESTION_COMMAND}-{pid}",
        "arguments": [location, new_text],
    }