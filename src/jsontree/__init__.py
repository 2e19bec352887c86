"""
Relaxed JSON parsing into an owned, mutable document tree.

``parse`` turns text into a tree of ``Value`` nodes and reports problems
through a callback and sticky error registers instead of exceptions.
``loads``/``load``/``dumps``/``dump`` wrap it in the familiar json-module
shape for callers that prefer exceptions.
"""

from typing import IO
from typing import Any

from ._profiling import HotPathStats
from ._profiling import clear_hot_path_stats
from ._profiling import get_hot_path_stats
from .errors import JSONDecodeError
from .errors import MovedValueError
from .errors import OwnershipError
from .parser import ErrorCallback
from .parser import JsonParser
from .parser import ParseConfig
from .parser import ParserContext
from .parser import ParserError
from .parser import parse
from .value import JsonError
from .value import Kind
from .value import Result
from .value import Value

__version__ = "0.1.0"


def loads(s: str | bytes | bytearray, **kwargs: Any) -> Value:
    """
    Parses ``s`` and raises ``JSONDecodeError`` if the parser recorded an error.

    Keyword arguments are passed on to ``parse`` (``config`` or the
    ``ParseConfig`` fields).
    """
    if not isinstance(s, str | bytes | bytearray):
        raise TypeError(
            f"the JSON object must be str, bytes or bytearray, "
            f"not {type(s).__name__}"
        )

    failures: list[ParserContext] = []
    root = parse(s, failures.append, **kwargs)
    if failures:
        context = failures[0]
        raise JSONDecodeError(
            context.message, context.text, context.position, context.error
        )
    return root


def load(fp: IO[str] | IO[bytes], **kwargs: Any) -> Value:
    """Parses the whole content of a file-like object."""
    if not hasattr(fp, "read"):
        raise TypeError("fp must have a read() method")

    return loads(fp.read(), **kwargs)


def dumps(obj: Any) -> str:
    """Serializes a ``Value``, or plain Python data via ``Value.of``."""
    return Value.of(obj).dump()


def dump(obj: Any, fp: IO[str]) -> None:
    """Writes the serialized form of ``obj`` to a file-like object."""
    if not hasattr(fp, "write"):
        raise TypeError("fp must have a write() method")

    fp.write(dumps(obj))


__all__ = [
    "ErrorCallback",
    "HotPathStats",
    "JSONDecodeError",
    "JsonError",
    "JsonParser",
    "Kind",
    "MovedValueError",
    "OwnershipError",
    "ParseConfig",
    "ParserContext",
    "ParserError",
    "Result",
    "Value",
    "clear_hot_path_stats",
    "dump",
    "dumps",
    "get_hot_path_stats",
    "load",
    "loads",
    "parse",
]
