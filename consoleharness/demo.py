from __future__ import annotations

import sys


EXIT_COMMAND = ":exit"


class PShell:
    """A shell which does pretty much nothing.

    Echoes every line to stderr, answers "No..." on stdout, and stops after
    ``:exit`` or end of input. Handy as a program under test.
    """

    def __init__(self, fancy: bool = True) -> None:
        self.fancy = fancy

    def prompt(self) -> str:
        encoding = (getattr(sys.stdout, "encoding", None) or "").lower().replace("_", "-")
        if self.fancy and encoding in {"utf-8", "utf8"}:
            return "➔ "
        return "> "

    def run(self) -> None:
        while True:
            print(self.prompt(), end="", flush=True)
            line = sys.stdin.readline()
            if not line:
                break
            line = line.rstrip("\r\n")
            print(f"User Entered: [{line}]", file=sys.stderr)
            print("No...")
            if line == EXIT_COMMAND:
                break


def main() -> None:
    PShell().run()


if __name__ == "__main__":  # pragma: no cover
    main()
