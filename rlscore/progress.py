"""Reporting build progress and diagnostics back to the client."""

from __future__ import annotations

import dataclasses
import enum
import itertools
import threading
from dataclasses import dataclass
from typing import Any, Callable

Notify = Callable[[str, dict[str, Any]], None]

PROGRESS_METHOD = "window/progress"
PUBLISH_DIAGNOSTICS_METHOD = "textDocument/publishDiagnostics"
SHOW_MESSAGE_METHOD = "window/showMessage"


class MessageType(enum.IntEnum):
    """Severity of a message shown to the user."""

    ERROR = 1
    WARNING = 2
    INFO = 3
    LOG = 4


@dataclass(frozen=True)
class ProgressUpdate:
    """A progress update carrying either a message or a percentage."""

    message: str | None = None
    percentage: float | None = None

    def __post_init__(self) -> None:
        if (self.message is None) == (self.percentage is None):
            raise ValueError("a progress update carries exactly one of message or percentage")


@dataclass
class ProgressParams:
    """Parameters of one progress notification."""

    id: str
    title: str
    message: str | None = None
    percentage: float | None = None
    done: bool | None = None

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "title": self.title}
        if self.message is not None:
            data["message"] = self.message
        if self.percentage is not None:
            data["percentage"] = self.percentage
        if self.done is not None:
            data["done"] = self.done
        return data


_progress_counter = itertools.count()
_progress_lock = threading.Lock()


def new_progress_params(title: str) -> ProgressParams:
    """Create progress params with a fresh unique id and the given title."""
    with _progress_lock:
        number = next(_progress_counter)
    return ProgressParams(id=f"progress_{number}", title=title)


class BuildProgressNotifier:
    """Sends the progress notifications of one build."""

    def __init__(self, notify: Notify) -> None:
        self._notify = notify
        self.progress_params = new_progress_params("Building")

    def _send(self, params: ProgressParams) -> None:
        self._notify(PROGRESS_METHOD, params.to_json())

    def notify_begin_progress(self) -> None:
        self._send(dataclasses.replace(self.progress_params))

    def notify_progress(self, update: ProgressUpdate) -> None:
        params = dataclasses.replace(self.progress_params)
        if update.message is not None:
            params.message = update.message
        else:
            params.percentage = update.percentage
        self._send(params)

    def notify_end_progress(self) -> None:
        self._send(dataclasses.replace(self.progress_params, done=True))


class BuildDiagnosticsNotifier:
    """Sends diagnostics and indexing progress after a build has completed."""

    def __init__(self, notify: Notify) -> None:
        self._notify = notify
        # Diagnostics are emitted quickly before indexing, so "Indexing" is the
        # more useful title.
        self.progress_params = new_progress_params("Indexing")

    def notify_begin_diagnostics(self) -> None:
        self._notify(PROGRESS_METHOD, dataclasses.replace(self.progress_params).to_json())

    def notify_publish_diagnostics(self, params: dict[str, Any]) -> None:
        self._notify(PUBLISH_DIAGNOSTICS_METHOD, params)

    def notify_error_diagnostics(self, message: str) -> None:
        self._notify(
            SHOW_MESSAGE_METHOD, {"type": int(MessageType.ERROR), "message": message}
        )

    def notify_end_diagnostics(self) -> None:
        self._notify(
            PROGRESS_METHOD, dataclasses.replace(self.progress_params, done=True).to_json()
        )