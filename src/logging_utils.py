"""Stream helpers for runtime logs of the transaction id tool."""

from __future__ import annotations

import sys
from typing import Callable, TextIO


Logger = Callable[[str], None]


class TeeStream:
    """Write the same data into multiple text streams."""

    def __init__(self, *targets: TextIO) -> None:
        self._targets: tuple[TextIO, ...] = tuple(targets)

    def write(self, data: str) -> int:
        for target in self._targets:
            target.write(data)
        return len(data)

    def flush(self) -> None:
        for target in self._targets:
            target.flush()

    def isatty(self) -> bool:
        return any(getattr(target, "isatty", lambda: False)() for target in self._targets)

    @property
    def encoding(self) -> str:
        # The tee itself may be installed as sys.stdout, so never ask sys.stdout here.
        if not self._targets:
            return "utf-8"
        return getattr(self._targets[0], "encoding", None) or "utf-8"


def build_logger(stream: TextIO | None = None) -> Logger:
    """Return a line logger; defaults to whatever sys.stderr is at call time."""

    def _log(message: str) -> None:
        print(message, file=stream if stream is not None else sys.stderr, flush=True)

    return _log
