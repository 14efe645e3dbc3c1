from __future__ import annotations

import os
from typing import List


# Host line terminator used between scripted lines. Not configurable.
LINE_SEPARATOR = os.linesep


def split_fields(inputs: str) -> List[str]:
    """Split a comma-separated input script into trimmed lines.

    Empty fields are kept (an empty script yields one empty line) and
    internal whitespace is preserved.
    """
    return [field.strip() for field in inputs.split(",")]


def compose_input(inputs: str, exit_sentinel: str) -> str:
    """
    Build the text a program under test will read on stdin.

    - Each comma-separated field of `inputs` becomes one line, whitespace trimmed.
    - `exit_sentinel` is appended verbatim as the final line (never split or trimmed).
    - Every line, the sentinel included, ends with `LINE_SEPARATOR`.
    """
    body = LINE_SEPARATOR.join(split_fields(inputs))
    return body + LINE_SEPARATOR + exit_sentinel + LINE_SEPARATOR


__all__ = ["LINE_SEPARATOR", "split_fields", "compose_input"]
