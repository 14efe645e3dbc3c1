import dataclasses

import pytest

from consoleharness import SessionResult, run


def make_result():
    return SessionResult(stdin="a\nexit\n", stdout="You said: a\n", stderr="warn\n")


def test_fields_by_name_and_key():
    result = make_result()
    assert result.stdout == result["stdout"] == "You said: a\n"
    assert result["stdin"] == "a\nexit\n"
    assert result["stderr"] == "warn\n"


def test_exactly_three_keys():
    result = make_result()
    assert list(result.keys()) == ["stdin", "stdout", "stderr"]
    assert len(result) == 3
    assert dict(result) == {"stdin": "a\nexit\n", "stdout": "You said: a\n", "stderr": "warn\n"}
    with pytest.raises(KeyError):
        result["exit"]


def test_positional_destructuring():
    stdin, stdout, stderr = make_result()
    assert (stdin, stdout, stderr) == ("a\nexit\n", "You said: a\n", "warn\n")


def test_result_is_immutable():
    result = make_result()
    with pytest.raises(dataclasses.FrozenInstanceError):
        result.stdout = "changed"
    mapping = result.as_dict()
    with pytest.raises(TypeError):
        mapping["stdout"] = "changed"
    assert mapping["stdout"] == "You said: a\n"


def test_key_membership():
    result = run(lambda: print("x"), "a", "exit")
    assert "stdout" in result
    assert "stdin" in result and "stderr" in result
    assert "x\n" not in result
    assert "exit" not in result
    assert "stdout" in result.as_dict()
