import os
import sys

import pytest

from consoleharness import run, run_session


SEP = os.linesep


def echo_program():
    while True:
        line = sys.stdin.readline()
        if not line:
            break
        line = line.rstrip("\n")
        if line == "exit":
            break
        print(f"You said: {line}")


def test_echo_session_end_to_end():
    result = run(echo_program, "a, b ,c", "exit")
    assert result.stdin == "a" + SEP + "b" + SEP + "c" + SEP + "exit" + SEP
    assert result.stdout == (
        "You said: a" + SEP + "You said: b" + SEP + "You said: c" + SEP
    )
    assert result.stderr == ""


def test_program_using_input_builtin():
    def repl():
        while True:
            line = input("? ")
            if line == "quit":
                return
            print(line.upper())

    result = run(repl, "hello, there", "quit")
    assert result.stdout == "? HELLO" + SEP + "? THERE" + SEP + "? "


def test_stdout_and_stderr_are_captured_separately_in_order():
    def program():
        print("out 1")
        print("err 1", file=sys.stderr)
        sys.stdout.write("out 2\n")
        sys.stderr.write("err 2\n")

    result = run(program, "", "exit")
    assert result.stdout == "out 1" + SEP + "out 2" + SEP
    assert result.stderr == "err 1" + SEP + "err 2" + SEP


def test_bytes_written_to_buffer_are_captured():
    def program():
        sys.stdout.write("text ")
        sys.stdout.buffer.write("bytes ✓".encode("utf-8"))

    result = run(program, "", "exit")
    assert result.stdout == "text bytes ✓"


def test_output_survives_program_closing_its_stream():
    def program():
        print("last words")
        sys.stdout.close()

    result = run(program, "", "exit")
    assert result.stdout == "last words" + SEP


def test_sentinel_mid_script_is_delivered_verbatim():
    seen = []

    def program():
        for line in sys.stdin:
            seen.append(line.rstrip("\n"))

    run(program, "a, exit, b", "exit")
    assert seen == ["a", "exit", "b", "exit"]


def test_program_reading_past_sentinel_sees_end_of_input():
    reads = []

    def program():
        sys.stdin.readline()
        reads.append(sys.stdin.readline())
        reads.append(sys.stdin.readline())

    run(program, "", ":exit")
    assert reads == [":exit\n", ""]


def test_stdin_is_not_a_tty():
    flags = []

    def program():
        flags.append(sys.stdin.isatty())
        flags.append(sys.stdout.isatty())

    run(program, "", "exit")
    assert flags == [False, False]


def test_run_session_takes_precomposed_input():
    lines = []

    def program():
        lines.extend(sys.stdin.read().splitlines())

    result = run_session(program, "one\ntwo\n")
    assert result.stdin == "one\ntwo\n"
    assert lines == ["one", "two"]


def test_each_session_starts_with_fresh_buffers():
    first = run(lambda: print("first"), "", "exit")
    second = run(lambda: print("second"), "", "exit")
    assert first.stdout == "first" + SEP
    assert second.stdout == "second" + SEP


def test_program_return_value_is_ignored():
    result = run(lambda: 42, "", "exit")
    assert result.stdout == ""
    assert result.stderr == ""


def test_unicode_output_round_trips():
    result = run(lambda: print("héllo ➔"), "", "exit")
    assert result.stdout == "héllo ➔" + SEP


def test_error_from_program_propagates_unchanged():
    boom = RuntimeError("boom")

    def program():
        print("partial")
        raise boom

    with pytest.raises(RuntimeError) as excinfo:
        run(program, "a", "exit")
    assert excinfo.value is boom
