from __future__ import annotations

import os
import pathlib
import tomllib
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional


FORMATS = ("text", "json")


@dataclass
class HarnessConfig:
    exit_sentinel: str = "exit"
    inputs: str = ""
    output: Optional[str] = None
    format: str = "text"  # text|json


def load_toml(path: str | os.PathLike[str]) -> Dict[str, Any]:
    data = pathlib.Path(path).read_bytes()
    return tomllib.loads(data.decode("utf-8"))


def from_file(path: str | None) -> Dict[str, Any]:
    if not path:
        return {}
    p = pathlib.Path(path)
    if not p.exists():
        raise FileNotFoundError(str(p))
    if p.suffix.lower() in {".toml"}:
        return load_toml(p)
    raise ValueError(f"Unsupported config format: {p.suffix}")


def merge_config(
    file_cfg: Dict[str, Any],
    env: Mapping[str, str],
    cli: Dict[str, Any],
) -> HarnessConfig:
    # CLI > environment > file > defaults. None means "not given" at every level
    # so an explicitly empty input script still wins.
    session = file_cfg.get("session", {})
    if not isinstance(session, dict):
        raise ValueError("[session] must be a table")

    def pick(cli_key: str, env_key: str, file_value: Any, default: Any) -> Any:
        for value in (cli.get(cli_key), env.get(env_key), file_value):
            if value is not None:
                return value
        return default

    exit_sentinel = pick("exit_sentinel", "CONSOLEHARNESS_EXIT", session.get("exit"), "exit")
    inputs = pick("inputs", "CONSOLEHARNESS_INPUTS", session.get("inputs"), "")
    output = pick("output", "CONSOLEHARNESS_OUTPUT", file_cfg.get("output"), None)
    for name, value in (("exit", exit_sentinel), ("inputs", inputs)):
        if not isinstance(value, str):
            raise ValueError(f"Session {name} must be a string, got {type(value).__name__}")
    if output is not None and not isinstance(output, str):
        raise ValueError(f"Transcript output must be a string, got {type(output).__name__}")
    fmt = pick("format", "CONSOLEHARNESS_FORMAT", file_cfg.get("format"), "text")
    if fmt not in FORMATS:
        raise ValueError(f"Unsupported transcript format: {fmt}")

    return HarnessConfig(
        exit_sentinel=exit_sentinel,
        inputs=inputs,
        output=output,
        format=fmt,
    )
