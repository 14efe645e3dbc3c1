from __future__ import annotations

import argparse
import json
import os
import sys
import traceback
from pathlib import Path

from .config import FORMATS, HarnessConfig, from_file, merge_config
from .session import SessionResult


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="consoleharness",
        description="Drive an interactive console program with scripted input and capture its output.",
    )
    parser.add_argument(
        "--version", action="store_true", help="Print version and exit"
    )

    subparsers = parser.add_subparsers(dest="command")

    # run: compose → redirect → invoke → restore
    run_p = subparsers.add_parser(
        "run",
        help="Run a program under scripted input and print its transcript",
        description=(
            "Call a Python entry point in-process with stdin replaced by the scripted lines\n"
            "followed by the exit line, and print what it wrote to stdout and stderr.\n"
            "- TARGET is module:callable, file.py:callable, or a module/file whose main() is used.\n"
            "- Inputs are comma-separated; each field is trimmed and sent as one line.\n"
            "- The program must stop on the exit line, otherwise this command hangs."
        ),
    )
    run_p.add_argument("target", nargs="?", default=None, help="Program under test")
    _add_session_args(run_p)
    run_p.add_argument("--config", type=str, default=None, help="Path to a TOML config file")
    # Support both --output and the common shorthand --out
    run_p.add_argument("--output", type=str, default=None, help="Transcript file path")
    run_p.add_argument("--out", dest="output", type=str, help="Transcript file path (alias)")
    run_p.add_argument("--format", type=str, choices=list(FORMATS), default=None)

    # compose
    comp_p = subparsers.add_parser(
        "compose",
        help="Print the stdin text a session would deliver",
    )
    _add_session_args(comp_p)
    comp_p.add_argument("--config", type=str, default=None, help="Path to a TOML config file")

    # demo
    demo_p = subparsers.add_parser(
        "demo",
        help="Run the bundled do-nothing shell under the harness",
    )
    demo_p.add_argument(
        "--inputs",
        type=str,
        default="My Little Pony,   eats, other little ponies  ,for breakfast.",
        help="Comma-separated input lines",
    )

    return parser


def _add_session_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--inputs", type=str, default=None, help="Comma-separated input lines")
    p.add_argument(
        "--exit",
        dest="exit_sentinel",
        type=str,
        default=None,
        help="Line that ends the session (sent verbatim, default: exit)",
    )


def _load_config(cmd_label: str, args: argparse.Namespace) -> tuple[HarnessConfig | None, str | None]:
    """Merge file, environment and CLI settings.

    Returns (config, error_message). On success, error_message is None.
    """
    try:
        file_cfg = from_file(getattr(args, "config", None))
        cfg = merge_config(
            file_cfg,
            os.environ,
            {
                "inputs": getattr(args, "inputs", None),
                "exit_sentinel": getattr(args, "exit_sentinel", None),
                "output": getattr(args, "output", None),
                "format": getattr(args, "format", None),
            },
        )
    except FileNotFoundError as e:
        print(f"[consoleharness] {cmd_label}: config file not found: {e}")
        return None, "missing config"
    except ValueError as e:
        print(f"[consoleharness] {cmd_label}: invalid config: {e}")
        return None, "invalid config"
    return cfg, None


def format_transcript(result: SessionResult, fmt: str = "text") -> str:
    if fmt == "json":
        return json.dumps(dict(result), indent=2) + "\n"
    return (
        "Input:\n" + result.stdin + "\n"
        "Output:\n" + result.stdout + "\n"
        "Error:\n" + result.stderr + "\n"
    )


def _run_program(cmd_label: str, program, cfg: HarnessConfig) -> tuple[SessionResult | None, int]:
    from .session import run

    try:
        return run(program, cfg.inputs, cfg.exit_sentinel), 0
    except (Exception, SystemExit) as e:
        # stdio is already restored here
        print(f"[consoleharness] {cmd_label}: program under test raised {type(e).__name__}: {e}")
        traceback.print_exc(file=sys.stderr)
        return None, 1


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()
    # Parse args, but convert argparse-triggered exits (e.g., --help) into return codes
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return int(e.code)

    if args.version:
        try:
            from . import __version__

            print(__version__)
        except Exception:
            print("0.0.0")
        return 0

    if not args.command:
        parser.print_help()
        return 0

    if args.command == "run":
        if not getattr(args, "target", None):
            print("[consoleharness] run: provide TARGET to run (no-op)")
            return 0
        cfg, err = _load_config("run", args)
        if err:
            return 2

        from .target import TargetError, resolve_target

        try:
            program = resolve_target(args.target)
        except TargetError as e:
            print(f"[consoleharness] run: {e}")
            return 2

        result, code = _run_program("run", program, cfg)
        if result is None:
            return code

        transcript = format_transcript(result, cfg.format)
        print(transcript, end="")
        if cfg.output:
            try:
                out_path = Path(cfg.output)
                out_path.parent.mkdir(parents=True, exist_ok=True)
                out_path.write_text(transcript, encoding="utf-8")
            except Exception as e:
                print(f"[consoleharness] run: failed to write transcript: {e}")
                return 2
            print(f"[consoleharness] transcript saved → {cfg.output}")
        return 0
    if args.command == "compose":
        from .script import compose_input

        cfg, err = _load_config("compose", args)
        if err:
            return 2
        print(compose_input(cfg.inputs, cfg.exit_sentinel), end="")
        return 0
    if args.command == "demo":
        from .demo import EXIT_COMMAND, PShell

        cfg = HarnessConfig(exit_sentinel=EXIT_COMMAND, inputs=args.inputs)
        result, code = _run_program("demo", PShell().run, cfg)
        if result is None:
            return code
        print(format_transcript(result), end="")
        return 0

    parser.print_help()
    return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
