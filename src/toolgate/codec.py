"""Executable-value codec.

Tool results may carry functions (chart filters and transforms) that are
meant for the client-side renderer. JSON cannot hold a function, so every
function-typed node is replaced by a tagged descriptor:

    {"__function__": true, "__source__": "def f(x):\n    return x\n"}

The gateway never executes a descriptor. A consumer that trusts the source
executes it in an empty namespace, which defines exactly one function.
"""

from __future__ import annotations

import dataclasses
import inspect
import textwrap
from collections.abc import Mapping
from typing import Any

FUNCTION_TAG = "__function__"
SOURCE_TAG = "__source__"


@dataclasses.dataclass(frozen=True)
class CodeDescriptor:
    """A function carried as source text rather than as a live object."""

    source: str

    def to_json(self) -> dict[str, Any]:
        return {FUNCTION_TAG: True, SOURCE_TAG: self.source}


def function_source(fn: Any) -> str:
    """Return the standalone, dedented source of a Python function.

    Raises ValueError when no self-contained source exists (builtins,
    lambdas, bound methods, partials and other callable objects, functions
    defined in an interactive session).
    """

    name = getattr(fn, "__name__", "")
    if name == "<lambda>":
        raise ValueError("Lambdas have no standalone source; use a def or a CodeDescriptor")
    if inspect.ismethod(fn):
        # The source would declare `self`, which the caller never passes.
        raise ValueError(f"Bound method {name} has no standalone source; use a def")
    if not inspect.isfunction(fn):
        raise ValueError(f"Source unavailable for {name or fn!r}")
    try:
        source = inspect.getsource(fn)
    except (OSError, TypeError) as exc:
        raise ValueError(f"Source unavailable for {name or fn!r}") from exc
    return textwrap.dedent(source)


def _is_function(value: Any) -> bool:
    return callable(value) and not isinstance(value, type)


def encode(value: Any) -> Any:
    """Deep-copy `value`, replacing every function node by a descriptor."""

    if value is None or isinstance(value, str | int | float | bool):
        return value
    if isinstance(value, CodeDescriptor):
        return value.to_json()
    if _is_function(value):
        return CodeDescriptor(function_source(value)).to_json()
    if isinstance(value, Mapping):
        return {str(key): encode(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [encode(item) for item in value]
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: encode(getattr(value, f.name)) for f in dataclasses.fields(value)}
    return value
