# rlscore

Building blocks of a language server for Cargo projects, and a small
interactive command line that turns short commands into JSON-RPC
language-server messages.

## Installation

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Command line

```
rlscore-cmd [--root DIR]
```

On start it writes an `initialize` request for the project root (the
current directory unless `--root` is given; the directory must exist) to
standard output. It then shows a `> ` prompt on standard error and reads
commands from standard input. Every message is written to standard output
with `Content-Length` framing, so the output can be piped into a language
server. Help text, prompts and error messages go to standard error.
`--version` prints the tool's version string.

Line and column numbers are zero indexed. File names must name existing
files; they are sent as canonical `file://` URLs.

| command        | arguments                                                                 | message                         |
|----------------|---------------------------------------------------------------------------|---------------------------------|
| `def`          | `file line col`                                                           | `textDocument/definition`       |
| `rename`       | `file line col new_name`                                                  | `textDocument/rename`           |
| `hover`        | `file line col`                                                           | `textDocument/hover`            |
| `symbol`       | `query`                                                                   | `workspace/symbol`              |
| `document`     | `file`                                                                    | `textDocument/documentSymbol`   |
| `format`       | `file [tab_size [insert_spaces]]`                                         | `textDocument/formatting`       |
| `range_format` | `file start_line start_col end_line end_col [tab_size [insert_spaces]]`   | `textDocument/rangeFormatting`  |
| `code_action`  | `file start_line start_col end_line end_col`                              | `textDocument/codeAction`       |
| `resolve`      | `label detail`                                                            | `completionItem/resolve`        |

`tab_size` defaults to 4 and `insert_spaces` to `true`. `help` (or `h`)
prints the command list. `quit` (or `q`), or the end of input, sends
`shutdown` followed by `exit` and ends the program.

The same conversion is available from Python:

```python
from rlscore.cmd import RequestIds, parse_command, initialize_message, shutdown_messages

ids = RequestIds()
messages = parse_command("symbol main", ids)
# [{"jsonrpc": "2.0", "id": 1, "method": "workspace/symbol", "params": {"query": "main"}}]
```

`parse_command` raises `ValueError` for unknown actions and malformed
arguments and `FileNotFoundError` for missing files. `file_url`,
`help_text` and `version` are also exported.

## Library

### Workspace helpers (`rlscore.workspace`)

- `find_word_at_pos(line, col)` returns the `(start, end)` cursor range of
  the identifier around column `col`.
- `edition_from_manifest(path)` reads the package edition of a
  `Cargo.toml` as an `Edition`; a missing edition gives `Edition.default()`
  (2015), and an unreadable manifest or unknown edition gives `None`.
- `ChangeVersions.check(path, version)` reports each document version as
  `VersionOrdering.OK`, `DUPLICATE` or `OUT_OF_ORDER`; `reset(path)`
  forgets a file.

### Test run actions (`rlscore.run`)

`collect_run_actions(text)` finds every `#[test]` function and returns a
`RunAction` labelled "Run test" whose `cmd` runs
`cargo test -- --nocapture <name>` with `RUST_BACKTRACE=short`. Its
`target_element` is the range of the function name; `LineIndex` maps UTF-8
byte offsets to `(row, column)` positions.

### Progress and diagnostics (`rlscore.progress`)

`BuildProgressNotifier` and `BuildDiagnosticsNotifier` take a callable
`notify(method, params)` and send `window/progress`,
`textDocument/publishDiagnostics` and `window/showMessage` notifications.
Each notifier holds its own `progress_<n>` id from `new_progress_params`;
the end notification carries `done: true`. A `ProgressUpdate` carries
exactly one of a message or a percentage.

### Code action commands (`rlscore.deglob`, `rlscore.commands`)

```python
from rlscore.deglob import sort_deglob_str

sort_deglob_str("Curve, curve, ARC, bow, Bow, arc, Arc")
# "arc, bow, curve, Arc, Bow, Curve, ARC"
```

- `make_deglob_command(pid, results)` and
  `make_suggestion_command(pid, uri, range, new_text, label)` build the
  `rls.deglobImports-<pid>` and `rls.applySuggestion-<pid>` commands.
- `execute_command(command, arguments)` turns such a command back into
  `workspace/applyEdit` parameters, using `apply_deglobs` or
  `apply_suggestion`. Malformed arguments and unknown commands raise
  `CommandError`, whose `code` is the JSON-RPC error code (method not
  found for unknown commands).

### Work pool (`rlscore.work_pool`)

`WorkPool.receive_from_thread(work_fn, description)` runs work on a
bounded thread pool and returns a `concurrent.futures.Future`. When the
pool is at capacity, or two tasks with the same description are already
running, the work is not started and the future holds `WorkRefused`.
`in_progress()` lists running work; the pool is a context manager and
`shutdown()` waits for running work. The module-level
`receive_from_thread` uses a shared pool sized to the CPU count.

## What it does not do

This package is not a language server. It does not build or analyse
projects, format code, load or merge server settings, or watch files for
changes. The command line only writes the messages it builds; it does not
start a server or read any responses.