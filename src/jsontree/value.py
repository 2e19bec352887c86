"""
Document tree for jsontree.

A ``Value`` is a tagged union over the seven JSON kinds. Containers own their
children exclusively: inserting a child moves its payload into the container
and leaves the argument in the moved-from state. Operations that do not fit
the current kind never raise; they record a ``JsonError`` in the value's
sticky error register and hand back a usable default, so fluent chains keep
running and callers check ``has_error()`` once at the end.
"""

import weakref
from collections.abc import Callable
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any
from typing import Generic
from typing import TypeVar
from typing import overload

from .errors import MovedValueError
from .errors import OwnershipError

T = TypeVar("T")

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class Kind(Enum):
    """The payload kinds a value can hold."""

    OBJECT = "object"
    ARRAY = "array"
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    NULL = "null"


class JsonError(Enum):
    """
    Value level error kinds.

    Stored in the sticky error register of the value an operation was called
    on, until the caller clears it.
    """

    OK = "ok"
    NOT_SUPPORTED = "not_supported"
    NOT_FOUND = "not_found"
    EMPTY_KEY = "empty_key"
    PARSE_ERROR = "parse_error"
    TYPE_MISMATCH = "type_mismatch"


_DEFAULT_PAYLOADS: dict[Kind, Callable[[], Any]] = {
    Kind.OBJECT: dict,
    Kind.ARRAY: list,
    Kind.STRING: str,
    Kind.INTEGER: int,
    Kind.FLOAT: float,
    Kind.BOOLEAN: bool,
    Kind.NULL: lambda: None,
}


def clamp_int64(number: int) -> int:
    """Saturates ``number`` to the signed 64-bit range."""
    return max(INT64_MIN, min(INT64_MAX, number))


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a typed extraction: the value, or a default plus the error."""

    value: T
    error: JsonError = JsonError.OK

    @property
    def ok(self) -> bool:
        return self.error is JsonError.OK


class Value:
    """
    A node of the document tree.

    ``Value()`` is an empty object and ``Value(Kind.ARRAY)`` an empty array;
    any kind can be created empty this way. ``Value.of`` converts plain Python
    data, recursively for dicts and lists.
    """

    __slots__ = ("__weakref__", "_kind", "_last_error", "_owner", "_payload")

    def __init__(self, kind: Kind = Kind.OBJECT) -> None:
        self._kind: Kind | None = kind
        self._payload: Any = _DEFAULT_PAYLOADS[kind]()
        self._last_error = JsonError.OK
        self._owner: weakref.ref[Value] | None = None

    @classmethod
    def _make(cls, kind: Kind, payload: Any) -> "Value":
        value = cls(kind)
        value._payload = payload
        return value

    @classmethod
    def of(cls, obj: Any) -> "Value":  # noqa: PLR0911
        """
        Builds a tree from plain Python data.

        A Value is passed through unchanged; Values nested in dicts or lists
        are moved into the new tree, and raise ``OwnershipError`` if another
        container already owns them. Dict keys must be strings; other
        unsupported types raise ``TypeError``.
        """
        if isinstance(obj, Value):
            return obj
        elif obj is None:
            return cls(Kind.NULL)
        elif isinstance(obj, bool):
            return cls._make(Kind.BOOLEAN, obj)
        elif isinstance(obj, int):
            return cls._make(Kind.INTEGER, clamp_int64(obj))
        elif isinstance(obj, float):
            return cls._make(Kind.FLOAT, obj)
        elif isinstance(obj, str):
            return cls._make(Kind.STRING, obj)
        elif isinstance(obj, dict):
            value = cls(Kind.OBJECT)
            for key, item in obj.items():
                if not isinstance(key, str):
                    msg = f"keys must be strings, not {type(key).__name__}"
                    raise TypeError(msg)
                value.insert(key, cls._adopt(item))
            return value
        elif isinstance(obj, list | tuple):
            value = cls(Kind.ARRAY)
            for item in obj:
                value.insert("", cls._adopt(item))
            return value
        else:
            msg = f"Object of type {type(obj).__name__} is not JSON serializable"
            raise TypeError(msg)

    @classmethod
    def _adopt(cls, item: Any) -> "Value":
        child = cls.of(item)
        if child._owner_value() is not None:
            raise OwnershipError("cannot move a value out of its container")
        return child

    # -- ownership -------------------------------------------------------

    @property
    def is_moved(self) -> bool:
        """True once the payload has been moved into another value."""
        return self._kind is None

    def _check_live(self) -> Kind:
        if self._kind is None:
            raise MovedValueError()
        return self._kind

    def _owner_value(self) -> "Value | None":
        return self._owner() if self._owner is not None else None

    def _child_values(self) -> Iterator["Value"]:
        if self._kind is Kind.OBJECT:
            yield from self._payload.values()
        elif self._kind is Kind.ARRAY:
            yield from self._payload

    def _transfer(self) -> "Value":
        """Moves the payload into a fresh value and invalidates ``self``."""
        kind = self._check_live()
        moved = Value._make(kind, self._payload)
        moved._last_error = self._last_error

        ref = weakref.ref(moved)
        for child in moved._child_values():
            child._owner = ref

        self._kind = None
        self._payload = None
        self._last_error = JsonError.OK
        self._owner = None
        return moved

    def _release(self) -> None:
        """Invalidates a discarded subtree."""
        stack = [self]
        while stack:
            node = stack.pop()
            stack.extend(node._child_values())
            node._kind = None
            node._payload = None
            node._owner = None

    def _is_within(self, other: "Value") -> bool:
        node: Value | None = self
        while node is not None:
            if node is other:
                return True
            node = node._owner_value()
        return False

    def take(self) -> "Value":
        """
        Moves this root's payload and error state into a new value.

        The receiver is left moved-from. Values owned by a container cannot be
        taken out of it.
        """
        self._check_live()
        if self._owner_value() is not None:
            raise OwnershipError("cannot move a value out of its container")
        return self._transfer()

    # -- inspection ------------------------------------------------------

    def type(self) -> Kind:
        return self._check_live()

    def type_name(self) -> str:
        """Readable name of the kind, e.g. ``JsonType::object``."""
        return f"JsonType::{self._check_live().value}"

    def size(self) -> int:
        """1 for scalars, the number of members or elements for containers."""
        kind = self._check_live()
        if kind is Kind.OBJECT or kind is Kind.ARRAY:
            return len(self._payload)
        return 1

    def keys(self) -> list[str]:
        """Object member names in storage order; empty for other kinds."""
        if self._check_live() is Kind.OBJECT:
            return list(self._payload)
        return []

    def items(self) -> list[tuple[str, "Value"]]:
        if self._check_live() is Kind.OBJECT:
            return list(self._payload.items())
        return []

    def children(self) -> list["Value"]:
        self._check_live()
        return list(self._child_values())

    def walk(self) -> Iterator["Value"]:
        """Depth-first traversal yielding self, then every descendant."""
        self._check_live()
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(list(node._child_values())))

    # -- sticky error register -------------------------------------------

    @property
    def last_error(self) -> JsonError:
        self._check_live()
        return self._last_error

    def _fail(self, error: JsonError) -> JsonError:
        self._last_error = error
        return error

    def has_error(self) -> bool:
        self._check_live()
        return self._last_error is not JsonError.OK

    def set_error(self, error: JsonError) -> None:
        self._check_live()
        self._last_error = error

    def clear_error(self) -> None:
        self._check_live()
        self._last_error = JsonError.OK

    def error(
        self, fn: Callable[[JsonError], Any] | None = None
    ) -> tuple[bool, JsonError]:
        """
        Reports the pending error as ``(has_error, kind)``.

        When ``fn`` is given and an error is pending, ``fn`` is called with it
        and the register is cleared. The returned tuple always describes the
        state before clearing.
        """
        self._check_live()
        pending = self._last_error
        if fn is not None and pending is not JsonError.OK:
            fn(pending)
            self._last_error = JsonError.OK
        return pending is not JsonError.OK, pending

    def on_error(self, fn: Callable[[JsonError], Any]) -> "Value":
        """Chainable form of ``error(fn)``."""
        self.error(fn)
        return self

    # -- structural access -----------------------------------------------

    def insert(self, key: str, child: "Value") -> JsonError:
        """
        Moves ``child`` into this container.

        Objects need a non-empty key and replace any existing member with the
        same key. Arrays need an empty key and append. ``child`` is moved-from
        afterwards; values already owned by a container, and values that
        contain the receiver, are refused with ``NOT_SUPPORTED``.
        """
        kind = self._check_live()
        child._check_live()

        if kind is Kind.OBJECT:
            if not key:
                return self._fail(JsonError.EMPTY_KEY)
        elif kind is not Kind.ARRAY or key:
            return self._fail(JsonError.NOT_SUPPORTED)

        if child._owner_value() is not None or self._is_within(child):
            return self._fail(JsonError.NOT_SUPPORTED)

        node = child._transfer()
        node._owner = weakref.ref(self)

        if kind is Kind.OBJECT:
            previous = self._payload.get(key)
            self._payload[key] = node
            if previous is not None:
                previous._release()
        else:
            self._payload.append(node)
        return JsonError.OK

    @overload
    def get(self, key: str) -> "Value": ...

    @overload
    def get(self, key: int) -> "Value": ...

    def get(self, key: str | int) -> "Value":
        """
        Returns the member ``key`` of an object or element ``key`` of an array.

        On failure, or while an error is already pending, the receiver itself
        is returned so a chain ends on the value carrying the error.

        Index access is not bounds checked: ``0 <= key < size()`` is a
        precondition, not something this method verifies.
        """
        kind = self._check_live()
        if self._last_error is not JsonError.OK:
            return self

        if isinstance(key, str):
            if kind is not Kind.OBJECT:
                self._fail(JsonError.NOT_SUPPORTED)
                return self
            child = self._payload.get(key)
            if child is None:
                self._fail(JsonError.NOT_FOUND)
                return self
            return child

        if kind is not Kind.ARRAY:
            self._fail(JsonError.NOT_SUPPORTED)
            return self
        return self._payload[key]

    def set(self, key: str, item: Any) -> "Value":
        """Inserts ``item`` (a Value or plain Python data) under ``key``."""
        self.insert(key, Value.of(item))
        return self

    def push_back(self, item: Any) -> "Value":
        """Appends ``item`` (a Value or plain Python data) to an array."""
        self.insert("", Value.of(item))
        return self

    # -- typed extraction ------------------------------------------------

    def _extract(self, kind: Kind, default: T) -> Result[T]:
        if self._check_live() is not kind:
            self._last_error = JsonError.TYPE_MISMATCH
            return Result(default, JsonError.TYPE_MISMATCH)
        return Result(self._payload)

    def extract_string(self) -> Result[str]:
        return self._extract(Kind.STRING, "")

    def extract_int(self) -> Result[int]:
        return self._extract(Kind.INTEGER, -1)

    def extract_bool(self) -> Result[bool]:
        return self._extract(Kind.BOOLEAN, False)

    def extract_float(self) -> Result[float]:
        return self._extract(Kind.FLOAT, 0.0)

    # -- conditional combinators -----------------------------------------

    def _map_scalar(
        self, extracted: Callable[[], Result[T]], fn: Callable[[T], Any]
    ) -> "Value":
        if self.has_error():
            return self
        result = extracted()
        if result.ok:
            fn(result.value)
        return self

    def map_string(self, fn: Callable[[str], Any]) -> "Value":
        return self._map_scalar(self.extract_string, fn)

    def map_int(self, fn: Callable[[int], Any]) -> "Value":
        return self._map_scalar(self.extract_int, fn)

    def map_bool(self, fn: Callable[[bool], Any]) -> "Value":
        return self._map_scalar(self.extract_bool, fn)

    def map_float(self, fn: Callable[[float], Any]) -> "Value":
        return self._map_scalar(self.extract_float, fn)

    def map_array(self, fn: Callable[["Value"], Any]) -> "Value":
        """
        Calls ``fn`` on each element in index order.

        Stops as soon as an error is recorded on the receiver, including one
        set by ``fn`` itself.
        """
        if self.has_error():
            return self
        if self._kind is not Kind.ARRAY:
            self._fail(JsonError.NOT_SUPPORTED)
            return self

        index = 0
        while index < len(self._payload):
            fn(self._payload[index])
            if self._kind is None or self._last_error is not JsonError.OK:
                break
            index += 1
        return self

    def map_object(self, fn: Callable[[str, "Value"], Any]) -> "Value":
        """Calls ``fn(key, member)`` for each member, in unspecified order."""
        if self.has_error():
            return self
        if self._kind is not Kind.OBJECT:
            self._fail(JsonError.NOT_SUPPORTED)
            return self

        for key, child in list(self._payload.items()):
            fn(key, child)
        return self

    def map(self, fn: Callable[[], Any]) -> "Value":
        """Calls ``fn`` when no error is pending."""
        if not self.has_error():
            fn()
        return self

    # -- conversion ------------------------------------------------------

    def dump(self) -> str:
        """Serializes the tree to compact JSON-like text."""
        self._check_live()
        return _encode_value(self)

    def to_python(self) -> Any:
        """Converts the tree to plain dicts, lists and scalars."""
        kind = self._check_live()
        if kind is Kind.OBJECT:
            return {key: child.to_python() for key, child in self._payload.items()}
        elif kind is Kind.ARRAY:
            return [child.to_python() for child in self._payload]
        return self._payload

    def __len__(self) -> int:
        return self.size()

    def __iter__(self) -> Iterator["Value"]:
        """Iterates over the direct children; scalars have none."""
        return iter(self.children())

    def __repr__(self) -> str:
        if self._kind is None:
            return "<Value moved>"
        return f"<Value {self._kind.value} size={self.size()}>"


def _encode_string(text: str) -> str:
    # Escapes are neither decoded on parse nor re-applied here.
    return f'"{text}"'


def _encode_float(number: float) -> str:
    return f"{number:f}"


def _encode_array(items: list[Value]) -> str:
    if not items:
        return "[]"
    return "[" + ",".join(_encode_value(item) for item in items) + "]"


def _encode_object(members: dict[str, Value]) -> str:
    if not members:
        return "{}"
    encoded = [
        f"{_encode_string(key)}:{_encode_value(child)}"
        for key, child in members.items()
    ]
    return "{" + ",".join(encoded) + "}"


def _encode_value(value: Value) -> str:  # noqa: PLR0911
    kind = value._check_live()
    payload = value._payload
    if kind is Kind.OBJECT:
        return _encode_object(payload)
    elif kind is Kind.ARRAY:
        return _encode_array(payload)
    elif kind is Kind.STRING:
        return _encode_string(payload)
    elif kind is Kind.INTEGER:
        return str(payload)
    elif kind is Kind.FLOAT:
        return _encode_float(payload)
    elif kind is Kind.BOOLEAN:
        return "true" if payload else "false"
    else:
        return "null"
