from __future__ import annotations

import importlib
import importlib.util
import os
import sys
from types import ModuleType
from typing import Callable


class TargetError(ValueError):
    """A program-under-test reference could not be resolved to a callable."""


def _load_module(ref: str) -> ModuleType:
    if ref.endswith(".py"):
        path = os.path.abspath(ref)
        if not os.path.exists(path):
            raise TargetError(f"No such file: {ref}")
        # Let the script import its siblings
        directory = os.path.dirname(path)
        if directory not in sys.path:
            sys.path.append(directory)
        name = os.path.splitext(os.path.basename(path))[0]
        spec = importlib.util.spec_from_file_location(name, path)
        if spec is None or spec.loader is None:
            raise TargetError(f"Cannot load module from {ref}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module
    try:
        return importlib.import_module(ref)
    except ImportError as e:
        raise TargetError(f"Cannot import module {ref}: {e}") from e


def resolve_target(ref: str) -> Callable[[], object]:
    """
    Resolve ``module:attr`` (or ``file.py:attr``) to a zero-argument callable.

    - ``attr`` may be dotted, e.g. ``Shell.run``.
    - Without ``:attr`` the module's ``main`` is used.
    """
    module_ref, _, attr_path = ref.partition(":")
    if not module_ref:
        raise TargetError(f"Missing module in target: {ref!r}")
    module = _load_module(module_ref)

    obj: object = module
    for part in (attr_path or "main").split("."):
        if not hasattr(obj, part):
            raise TargetError(f"{part!r} not found in {module_ref}")
        obj = getattr(obj, part)
    if not callable(obj):
        raise TargetError(f"Target {ref!r} is not callable")
    return obj


__all__ = ["TargetError", "resolve_target"]
