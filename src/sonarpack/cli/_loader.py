from __future__ import annotations

import importlib
import sys
from collections.abc import Iterable
from pathlib import Path

from sonarpack.core.descriptor import Analyzer
from sonarpack.core.errors import LoadError


def _as_analyzers(target: object, target_path: str) -> list[Analyzer]:
    if isinstance(target, type):
        try:
            target = target()
        except TypeError as exc:
            msg = f"Could not instantiate {target_path!r}: {exc}"
            raise LoadError(msg) from exc

    if isinstance(target, Analyzer):
        return [target]

    if isinstance(target, Iterable) and not isinstance(target, (str, bytes)):
        analyzers: list[Analyzer] = []
        for item in target:
            analyzers.extend(_as_analyzers(item, target_path))
        return analyzers

    msg = f"{target_path!r} is not an analyzer (got {type(target).__name__})"
    raise LoadError(msg)


def load_analyzers(target_path: str, *, cwd: str | None = None) -> list[Analyzer]:
    """Load analyzers from a ``module:attribute`` string.

    The attribute may be an analyzer, an analyzer class (instantiated with
    no arguments), or an iterable of either.  Adds *cwd* (default: current
    directory) to ``sys.path[0]`` so that local modules can be imported.
    """
    if ":" not in target_path:
        msg = (
            f"Invalid analyzer path {target_path!r} - "
            "expected 'module:attribute' (e.g. 'myanalyzers:ANALYZERS')"
        )
        raise LoadError(msg)

    module_str, _, attr_str = target_path.partition(":")

    target = str(Path(cwd).resolve()) if cwd else str(Path.cwd())
    if sys.path[0] != target:
        sys.path.insert(0, target)

    try:
        module = importlib.import_module(module_str)
    except ImportError as exc:
        msg = f"Could not import module {module_str!r}: {exc}"
        raise LoadError(msg) from exc

    try:
        obj = getattr(module, attr_str)
    except AttributeError:
        msg = f"Module {module_str!r} has no attribute {attr_str!r}"
        raise LoadError(msg) from None

    return _as_analyzers(obj, target_path)
