import io
import json
import os
import sys
from pathlib import Path

import pytest

from rlscore.cmd import (
    RequestIds,
    file_url,
    help_text,
    initialize_message,
    main,
    parse_command,
    shutdown_messages,
    version,
)


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "main.rs"
    path.write_text("fn main() {}\n")
    return path


def _frames(output: str) -> list[dict]:
    messages = []
    rest = output
    while rest:
        header, _, rest = rest.partition("\r\n\r\n")
        assert header.startswith("Content-Length: ")
        length = int(header[len("Content-Length: "):])
        body = rest.encode("utf-8")[:length].decode("utf-8")
        rest = rest[len(body):]
        messages.append(json.loads(body))
    return messages


def test_url_workaround_unc_canonicals():
    url = file_url(os.getcwd())
    assert not url.startswith("file:////?\\")
    assert url.startswith("file://")


def test_file_url_matches_resolved_path(source_file):
    assert file_url(source_file) == source_file.resolve().as_uri()


def test_file_url_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        file_url(tmp_path / "absent.rs")


def test_request_ids_increase():
    ids = RequestIds()
    assert [next(ids), next(ids), next(ids)] == [1, 2, 3]


def test_request_ids_custom_start():
    ids = RequestIds(10)
    assert next(ids) == 10


def test_parse_def(source_file):
    ids = RequestIds()
    [message] = parse_command(f"def {source_file} 3 7", ids)
    assert message == {
        "jsonrpc": "2.0",
        "id": 1,
        "method": "textDocument/definition",
        "params": {
            "textDocument": {"uri": source_file.resolve().as_uri()},
            "position": {"line": 3, "character": 7},
        },
    }


def test_parse_rename(source_file):
    [message] = parse_command(f"rename {source_file} 0 1 other", RequestIds())
    assert message["method"] == "textDocument/rename"
    assert message["params"]["newName"] == "other"
    assert message["params"]["position"] == {"line": 0, "character": 1}


def test_parse_hover(source_file):
    [message] = parse_command(f"hover {source_file} 2 4", RequestIds())
    assert message["method"] == "textDocument/hover"
    assert message["params"]["position"] == {"line": 2, "character": 4}


def test_parse_symbol():
    [message] = parse_command("symbol Foo", RequestIds())
    assert message["method"] == "workspace/symbol"
    assert message["params"] == {"query": "Foo"}


def test_parse_document(source_file):
    [message] = parse_command(f"document {source_file}", RequestIds())
    assert message["method"] == "textDocument/documentSymbol"
    assert message["params"] == {"textDocument": {"uri": source_file.resolve().as_uri()}}


def test_parse_format_defaults(source_file):
    [message] = parse_command(f"format {source_file}", RequestIds())
    assert message["method"] == "textDocument/formatting"
    assert message["params"]["options"] == {"tabSize": 4, "insertSpaces": True}


def test_parse_format_explicit(source_file):
    [message] = parse_command(f"format {source_file} 2 false", RequestIds())
    assert message["params"]["options"] == {"tabSize": 2, "insertSpaces": False}


def test_parse_format_bad_insert_spaces(source_file):
    with pytest.raises(ValueError, match="Insert spaces"):
        parse_command(f"format {source_file} 2 maybe", RequestIds())


def test_parse_format_bad_tab_size(source_file):
    with pytest.raises(ValueError, match="Tab size"):
        parse_command(f"format {source_file} -1", RequestIds())


def test_parse_range_format(source_file):
    [message] = parse_command(f"range_format {source_file} 1 2 3 4 8", RequestIds())
    assert message["method"] == "textDocument/rangeFormatting"
    assert message["params"]["range"] == {
        "start": {"line": 1, "character": 2},
        "end": {"line": 3, "character": 4},
    }
    assert message["params"]["options"] == {"tabSize": 8, "insertSpaces": True}


def test_parse_range_format_missing_end_column(source_file):
    with pytest.raises(ValueError, match="Expected end column"):
        parse_command(f"range_format {source_file} 1 2 3", RequestIds())


def test_parse_code_action(source_file):
    [message] = parse_command(f"code_action {source_file} 0 0 5 1", RequestIds())
    assert message["method"] == "textDocument/codeAction"
    assert message["params"]["context"] == {"diagnostics": []}
    assert message["params"]["range"]["end"] == {"line": 5, "character": 1}


def test_parse_code_action_bad_start_line(source_file):
    with pytest.raises(ValueError, match="Bad start line"):
        parse_command(f"code_action {source_file} x 0 5 1", RequestIds())


def test_parse_resolve():
    [message] = parse_command("resolve label detail", RequestIds())
    assert message["method"] == "completionItem/resolve"
    assert message["params"] == {"label": "label", "detail": "detail"}


def test_parse_def_bad_line_number(source_file):
    with pytest.raises(ValueError, match="Bad line number"):
        parse_command(f"def {source_file} abc 1", RequestIds())


def test_parse_def_missing_column(source_file):
    with pytest.raises(ValueError, match="Expected column number"):
        parse_command(f"def {source_file} 1", RequestIds())


def test_parse_def_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        parse_command(f"def {tmp_path / 'absent.rs'} 1 1", RequestIds())


def test_parse_unknown_action():
    with pytest.raises(ValueError, match="Unknown action"):
        parse_command("frobnicate", RequestIds())


@pytest.mark.parametrize("line", ["", "   \n", "help", "h"])
def test_parse_no_messages(line):
    assert parse_command(line, RequestIds()) == []


@pytest.mark.parametrize("line", ["quit", "q"])
def test_parse_quit(line):
    messages = parse_command(line, RequestIds())
    assert [m["method"] for m in messages] == ["shutdown", "exit"]


def test_ids_shared_between_commands():
    ids = RequestIds()
    first = parse_command("symbol a", ids)[0]
    second = parse_command("symbol b", ids)[0]
    assert (first["id"], second["id"]) == (1, 2)


def test_shutdown_messages():
    messages = shutdown_messages(RequestIds(5))
    assert messages == [
        {"jsonrpc": "2.0", "id": 5, "method": "shutdown"},
        {"jsonrpc": "2.0", "method": "exit"},
    ]


def test_initialize_message(tmp_path):
    message = initialize_message(str(tmp_path), RequestIds())
    assert message["id"] == 1
    assert message["method"] == "initialize"
    params = message["params"]
    assert params["rootPath"] == str(tmp_path)
    assert params["rootUri"] == tmp_path.resolve().as_uri()
    assert params["processId"] is None
    assert params["capabilities"] == {"window": {"progress": True}}
    assert params["trace"] == "off"


def test_help_text_lists_commands():
    text = help_text()
    for command in ("def", "rename", "hover", "symbol", "document", "format",
                    "range_format", "code_action", "resolve", "quit"):
        assert command in text
    assert "textDocument/rangeFormatting" in text


def test_version():
    assert version().startswith("rlscore ")


def test_main_writes_framed_messages(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("symbol foo\nbogus\nhelp\nquit\n"))
    assert main(["--root", str(tmp_path)]) == 0
    captured = capsys.readouterr()
    messages = _frames(captured.out)
    assert [m["method"] for m in messages] == ["initialize", "workspace/symbol", "shutdown", "exit"]
    assert [m.get("id") for m in messages] == [1, 2, 3, None]
    assert "Unknown action" in captured.err
    assert "Supported commands" in captured.err


def test_main_end_of_input_shuts_down(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO(""))
    assert main(["--root", str(tmp_path)]) == 0
    messages = _frames(capsys.readouterr().out)
    assert [m["method"] for m in messages] == ["initialize", "shutdown", "exit"]


def test_main_reports_bad_arguments(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO(f"def {tmp_path / 'absent.rs'} 1 1\nq\n"))
    assert main(["--root", str(tmp_path)]) == 0
    captured = capsys.readouterr()
    messages = _frames(captured.out)
    assert [m["method"] for m in messages] == ["initialize", "shutdown", "exit"]
    assert "absent.rs" in captured.err


def test_main_missing_root(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO(""))
    assert main(["--root", str(Path(tmp_path) / "nowhere")]) == 1
    assert capsys.readouterr().out == ""