from __future__ import annotations

import io
import sys
from contextlib import ExitStack, contextmanager, redirect_stderr, redirect_stdout
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Iterator, Mapping, Optional, TextIO, Tuple

from .script import compose_input


Program = Callable[[], object]

_ENCODING = "utf-8"


@dataclass(frozen=True)
class IOContext:
    """The three ambient I/O handles a program under test talks to."""

    stdin: TextIO
    stdout: TextIO
    stderr: TextIO

    @classmethod
    def current(cls) -> "IOContext":
        return cls(sys.stdin, sys.stdout, sys.stderr)

    @classmethod
    def original(cls) -> "IOContext":
        # Handles the interpreter started with, i.e. the real console
        return cls(sys.__stdin__, sys.__stdout__, sys.__stderr__)

    def install(self) -> None:
        sys.stdin = self.stdin
        sys.stdout = self.stdout
        sys.stderr = self.stderr


@dataclass(frozen=True)
class SessionResult:
    """Transcript of one session.

    Fields are also reachable by key (``result["stdout"]``, ``"stdout" in result``,
    ``dict(result)``) and by destructuring (``stdin, stdout, stderr = result``).
    """

    stdin: str
    stdout: str
    stderr: str

    _KEYS = ("stdin", "stdout", "stderr")

    def keys(self) -> Tuple[str, ...]:
        return self._KEYS

    def __getitem__(self, key: str) -> str:
        if key not in self._KEYS:
            raise KeyError(key)
        return getattr(self, key)

    def __contains__(self, key: object) -> bool:
        return key in self._KEYS

    def __iter__(self) -> Iterator[str]:
        # Positional values, for destructuring
        return iter((self.stdin, self.stdout, self.stderr))

    def __len__(self) -> int:
        return len(self._KEYS)

    def as_dict(self) -> Mapping[str, str]:
        return MappingProxyType({key: self[key] for key in self._KEYS})


class _CaptureBuffer(io.BytesIO):
    # Keep the bytes readable even if the program closes its stream
    def __init__(self) -> None:
        super().__init__()
        self._final: Optional[bytes] = None

    def close(self) -> None:
        if not self.closed:
            self._final = self.getvalue()
        super().close()

    def snapshot(self) -> bytes:
        if self.closed:
            return self._final or b""
        return self.getvalue()


class _Capture:
    """Text sink over an in-memory byte buffer.

    Written ``"\\n"`` becomes the host line terminator, as on a real console.
    """

    def __init__(self) -> None:
        self.raw = _CaptureBuffer()
        self.stream = io.TextIOWrapper(
            self.raw,
            encoding=_ENCODING,
            errors="backslashreplace",
            newline=None,
            write_through=True,
        )

    def getvalue(self) -> str:
        if not self.stream.closed:
            self.stream.flush()
        return self.raw.snapshot().decode(_ENCODING, errors="replace")


def _input_source(text: str) -> TextIO:
    # Universal newlines: the program reads "line\n" whatever the host terminator
    return io.TextIOWrapper(
        io.BytesIO(text.encode(_ENCODING)), encoding=_ENCODING, newline=None
    )


@contextmanager
def redirect_stdin(stream: TextIO) -> Iterator[TextIO]:
    """Counterpart of ``contextlib.redirect_stdout`` for ``sys.stdin``."""
    previous = sys.stdin
    sys.stdin = stream
    try:
        yield stream
    finally:
        sys.stdin = previous


@contextmanager
def redirected_io(context: IOContext) -> Iterator[IOContext]:
    """Install `context` as the ambient I/O for the duration of the block.

    The handles in effect on entry are put back on every exit path.
    """
    with ExitStack() as stack:
        stack.enter_context(redirect_stdin(context.stdin))
        stack.enter_context(redirect_stdout(context.stdout))
        stack.enter_context(redirect_stderr(context.stderr))
        yield context


def run_session(program: Program, composed_input: str) -> SessionResult:
    """
    Run `program` once with `composed_input` as stdin, capturing stdout/stderr.

    - The program is called with no arguments on the current thread; this
      blocks until it returns. A program that never returns hangs the caller.
    - Any exception it raises (SystemExit included) propagates unchanged,
      after the original stdin/stdout/stderr have been restored.
    - Only one session may be active per process at a time.
    """
    out = _Capture()
    err = _Capture()
    session = IOContext(_input_source(composed_input), out.stream, err.stream)
    with redirected_io(session):
        program()
    return SessionResult(
        stdin=composed_input,
        stdout=out.getvalue(),
        stderr=err.getvalue(),
    )


def run(program: Program, inputs: str, exit_sentinel: str) -> SessionResult:
    """Drive `program` with comma-separated `inputs` followed by `exit_sentinel`."""
    return run_session(program, compose_input(inputs, exit_sentinel))


def restore(result: Optional[SessionResult] = None) -> Optional[Tuple[str, str, str]]:
    """
    Reset stdin/stdout/stderr to the interpreter's real console handles.

    Safe to call at any time and any number of times. When given a
    `SessionResult`, returns its ``(stdin, stdout, stderr)`` values.
    """
    IOContext.original().install()
    if result is None:
        return None
    stdin, stdout, stderr = result
    return stdin, stdout, stderr


__all__ = [
    "IOContext",
    "Program",
    "SessionResult",
    "redirect_stdin",
    "redirected_io",
    "restore",
    "run",
    "run_session",
]
