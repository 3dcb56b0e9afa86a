"""Command line front end that turns short commands into language server messages.

Each command typed at the prompt is converted into a JSON-RPC message and
written to standard output with ``Content-Length`` framing, so the output can
be piped straight into a language server. Prompts, help and errors go to
standard error.
"""

from __future__ import annotations

import argparse
import json
import os
import re
import sys
import threading
from pathlib import Path
from typing import Any, Iterator, TextIO

_VERSION = "1.41.0"

_UNC_PREFIX = "\\\\?\\"
_U64_RE = re.compile(r"\+?[0-9]+")
_U64_LIMIT = 2**64

_HELP = """\
Language server command line interface.

Line and column numbers are zero indexed

Supported commands:
    help          display this message
    quit          exit

    def           file_name line_number column_number
                  textDocument/definition
                  used for 'goto def'

    rename        file_name line_number column_number new_name
                  textDocument/rename
                  used for 'rename'

    hover         file_name line_number column_number
                  textDocument/hover
                  used for 'hover'

    symbol        query
                  workspace/symbol

    document      file_name
                  textDocument/documentSymbol

    format        file_name [tab_size [insert_spaces]]
                  textDocument/formatting
                  tab_size defaults to 4 and insert_spaces to 'true'

    range_format  file_name start_line start_col end_line end_col [tab_size [insert_spaces]]
                  textDocument/rangeFormatting
                  tab_size defaults to 4 and insert_spaces to 'true'

    code_action   file_name start_line start_col end_line end_col
                  textDocument/codeAction

    resolve       label detail
                  completionItem/resolve"""


class RequestIds:
    """Thread-safe source of increasing request ids, starting at ``start``."""

    def __init__(self, start: int = 1) -> None:
        self._next = start
        self._lock = threading.Lock()

    def __iter__(self) -> Iterator[int]:
        return self

    def __next__(self) -> int:
        with self._lock:
            value = self._next
            self._next += 1
            return value


def file_url(file_name: str | os.PathLike[str]) -> str:
    """Return the ``file://`` URL of an existing file, after canonicalising it."""
    canonical = str(Path(file_name).resolve(strict=True))
    # Extended-length Windows paths would otherwise give `file:////?\C:\...`.
    if canonical.startswith(_UNC_PREFIX):
        canonical = canonical[len(_UNC_PREFIX):]
    return Path(canonical).as_uri()


def _parse_u64(text: str, error: str) -> int:
    if not _U64_RE.fullmatch(text):
        raise ValueError(error)
    value = int(text)
    if value >= _U64_LIMIT:
        raise ValueError(error)
    return value


def _parse_bool(text: str, error: str) -> bool:
    if text == "true":
        return True
    if text == "false":
        return False
    raise ValueError(error)


def _take(args: Iterator[str], error: str) -> str:
    try:
        return next(args)
    except StopIteration:
        raise ValueError(error) from None


def _request(ids: RequestIds, method: str, params: Any = None) -> dict[str, Any]:
    message: dict[str, Any] = {"jsonrpc": "2.0", "id": next(ids), "method": method}
    if params is not None:
        message["params"] = params
    return message


def _position(line: int, character: int) -> dict[str, int]:
    return {"line": line, "character": character}


def _range(start_row: int, start_col: int, end_row: int, end_col: int) -> dict[str, Any]:
    return {"start": _position(start_row, start_col), "end": _position(end_row, end_col)}


def _document_position(file_name: str, row: str, col: str) -> dict[str, Any]:
    uri = file_url(file_name)
    return {
        "textDocument": {"uri": uri},
        "position": _position(
            _parse_u64(row, "Bad line number"), _parse_u64(col, "Bad column number")
        ),
    }


def _formatting_options(args: Iterator[str]) -> dict[str, Any]:
    tab_size = _parse_u64(next(args, "4"), "Tab size should be an unsigned integer")
    insert_spaces = _parse_bool(
        next(args, "true"), "Insert spaces should be 'true' or 'false'"
    )
    return {"tabSize": tab_size, "insertSpaces": insert_spaces}


def _range_args(args: Iterator[str], verb: str) -> tuple[int, int, int, int]:
    start_row = _parse_u64(_take(args, f"{verb} start line"), "Bad start line")
    start_col = _parse_u64(_take(args, f"{verb} start column"), "Bad start column")
    end_row = _parse_u64(_take(args, f"{verb} end line"), "Bad end line")
    end_col = _parse_u64(_take(args, f"{verb} end column"), "Bad end column")
    return start_row, start_col, end_row, end_col


def parse_command(line: str, ids: RequestIds) -> list[dict[str, Any]]:
    """Turn one command line into the messages to send to the server.

    Blank lines and ``help`` produce no messages; ``quit`` produces the
    shutdown request and exit notification. Unknown actions and malformed
    arguments raise ValueError; a missing file raises FileNotFoundError.
    """
    tokens = line.split()
    if not tokens:
        return []
    action = tokens[0]
    args = iter(tokens[1:])

    if action == "def":
        file_name = _take(args, "Expected file name")
        row = _take(args, "Expected line number")
        col = _take(args, "Expected column number")
        params = _document_position(file_name, row, col)
        return [_request(ids, "textDocument/definition", params)]
    if action == "rename":
        file_name = _take(args, "Expected file name")
        row = _take(args, "Expected line number")
        col = _take(args, "Expected column number")
        new_name = _take(args, "Expected new name")
        params = _document_position(file_name, row, col)
        params["newName"] = new_name
        return [_request(ids, "textDocument/rename", params)]
    if action == "hover":
        file_name = _take(args, "Expected file name")
        row = _take(args, "Expected line number")
        col = _take(args, "Expected column number")
        params = _document_position(file_name, row, col)
        return [_request(ids, "textDocument/hover", params)]
    if action == "symbol":
        query = _take(args, "Expected a query")
        return [_request(ids, "workspace/symbol", {"query": query})]
    if action == "document":
        file_name = _take(args, "Expected file name")
        params = {"textDocument": {"uri": file_url(file_name)}}
        return [_request(ids, "textDocument/documentSymbol", params)]
    if action == "format":
        file_name = _take(args, "Expected file name")
        options = _formatting_options(args)
        params = {"textDocument": {"uri": file_url(file_name)}, "options": options}
        return [_request(ids, "textDocument/formatting", params)]
    if action == "range_format":
        file_name = _take(args, "Expected file name")
        bounds = _range_args(args, "Expected")
        options = _formatting_options(args)
        params = {
            "textDocument": {"uri": file_url(file_name)},
            "range": _range(*bounds),
            "options": options,
        }
        return [_request(ids, "textDocument/rangeFormatting", params)]
    if action == "code_action":
        file_name = _take(args, "Expect file name")
        bounds = _range_args(args, "Expect")
        params = {
            "textDocument": {"uri": file_url(file_name)},
            "range": _range(*bounds),
            "context": {"diagnostics": []},
        }
        return [_request(ids, "textDocument/codeAction", params)]
    if action == "resolve":
        label = _take(args, "Expect label")
        detail = _take(args, "Expect detail")
        return [_request(ids, "completionItem/resolve", {"label": label, "detail": detail})]
    if action in ("h", "help"):
        return []
    if action in ("q", "quit"):
        return shutdown_messages(ids)
    raise ValueError("Unknown action. Type 'help' to see available actions.")


def initialize_message(root_path: str | os.PathLike[str], ids: RequestIds) -> dict[str, Any]:
    """Build the ``initialize`` request for a project rooted at ``root_path``."""
    root = str(root_path)
    params = {
        "processId": None,
        "rootPath": root,
        "rootUri": file_url(root),
        "capabilities": {"window": {"progress": True}},
        "trace": "off",
    }
    return _request(ids, "initialize", params)


def shutdown_messages(ids: RequestIds) -> list[dict[str, Any]]:
    """Build the ``shutdown`` request followed by the ``exit`` notification."""
    return [_request(ids, "shutdown"), {"jsonrpc": "2.0", "method": "exit"}]


def help_text() -> str:
    """The help message listing the supported commands."""
    return _HELP


def version() -> str:
    """Name and version of this tool."""
    return f"rlscore {_VERSION}"


def _write_message(out: TextIO, message: dict[str, Any]) -> None:
    body = json.dumps(message)
    out.write(f"Content-Length: {len(body.encode('utf-8'))}\r\n\r\n{body}")
    out.flush()


def _run(stdin: TextIO, stdout: TextIO, stderr: TextIO, root: str) -> int:
    ids = RequestIds()
    _write_message(stdout, initialize_message(root, ids))
    print("Initializing (look for `progress[done:true]` message)...", file=stderr)

    while True:
        stderr.write("> ")
        stderr.flush()
        line = stdin.readline()
        if not line:
            for message in shutdown_messages(ids):
                _write_message(stdout, message)
            return 0

        tokens = line.split()
        if not tokens:
            continue
        if tokens[0] in ("h", "help"):
            print(help_text(), file=stderr)
            continue

        try:
            messages = parse_command(line, ids)
        except (ValueError, OSError) as exc:
            print(exc, file=stderr)
            continue

        for message in messages:
            _write_message(stdout, message)
        if tokens[0] in ("q", "quit"):
            return 0


def main(argv: list[str] | None = None) -> int:
    """Read commands from standard input and write framed messages to standard output."""
    parser = argparse.ArgumentParser(
        prog="rlscore-cmd",
        description="Turn short commands into language server messages.",
    )
    parser.add_argument("--version", action="version", version=version())
    parser.add_argument(
        "--root",
        default=None,
        help="project root sent with the initialize request (default: current directory)",
    )
    options = parser.parse_args(argv)
    root = options.root if options.root is not None else os.getcwd()
    try:
        return _run(sys.stdin, sys.stdout, sys.stderr, root)
    except FileNotFoundError as exc:
        print(exc, file=sys.stderr)
        return 1