"""
Recursive descent parser producing ``Value`` trees.

The grammar is a relaxed JSON: no exponents, escape sequences are kept
verbatim, trailing commas are tolerated and unclosed containers at the end of
input are accepted. Errors never raise. The parser records the first failure
in its sticky ``error`` field, stops the container it is in and returns
whatever it has built so far.

Nesting is handled by recursion, one Python frame per level, so extremely
deep input ends in ``RecursionError``.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from typing import Any
from typing import TypeAlias

from ._profiling import hot_path
from ._utf8_mapper import Utf8Offsets
from .value import INT64_MAX
from .value import INT64_MIN
from .value import JsonError
from .value import Kind
from .value import Value
from .value import clamp_int64

logger = logging.getLogger(__name__)

WHITESPACE = " \t\n"
DIGITS = "0123456789"

# The number scanner consumes a maximal run of these; conversion uses the
# longest numeric prefix of the run.
NUMBER_CHARS = DIGITS + "-."
_INT_PREFIX = re.compile(r"-?[0-9]+")
_FLOAT_PREFIX = re.compile(r"-?(?:[0-9]+\.?[0-9]*|\.[0-9]+)")

# Longest magnitude, in digits, that can still fit into an int64.
_INT64_DIGITS = 19


class ParserError(Enum):
    """Parser level error kinds."""

    OK = "ok"
    EXPECTED_COMMA_BEFORE_NEXT_ATTRIBUTE = "expected_comma_before_next_attribute"
    EXPECTED_COMMA_BEFORE_NEXT_ARRAY_ITEM = "expected_comma_before_next_array_item"
    EXPECTED_ATTRIBUTE_BUT_GOT_COMMA = "expected_attribute_but_got_comma"
    EXPECTED_STRING_KEY = "expected_string_key"
    UNTERMINATED_STRING = "unterminated_string"
    UNEXPECTED_TOKEN = "unexpected_token"
    EXPECTED_COLON = "expected_colon"
    INVALID_NUMBER = "invalid_number"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    ParserError.OK: "No error.",
    ParserError.EXPECTED_COMMA_BEFORE_NEXT_ATTRIBUTE: (
        "Expected ',' before the next attribute in the object."
    ),
    ParserError.EXPECTED_COMMA_BEFORE_NEXT_ARRAY_ITEM: (
        "Expected ',' before the next item in the array."
    ),
    ParserError.EXPECTED_ATTRIBUTE_BUT_GOT_COMMA: (
        "Expected next attribute but got ',' instead."
    ),
    ParserError.EXPECTED_STRING_KEY: (
        "Expected string attribute key but could not find a string or the "
        "string was empty."
    ),
    ParserError.UNTERMINATED_STRING: (
        "Expected closing quote but reached the end of input."
    ),
    ParserError.UNEXPECTED_TOKEN: (
        "Expected the beginning of a string, number, boolean, null, array or "
        "object, but got something else."
    ),
    ParserError.EXPECTED_COLON: (
        "Expected ':' after the attribute key but got a different character."
    ),
    ParserError.INVALID_NUMBER: "Expected an integer or float.",
}


@dataclass(frozen=True)
class ParseConfig:
    """
    Immutable parser settings.

    ``snippet_radius`` is the number of characters shown on each side of the
    failure position in error contexts. ``trace`` logs every value dispatch at
    debug level.
    """

    snippet_radius: int = 20
    trace: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.snippet_radius, int) or isinstance(
            self.snippet_radius, bool
        ):
            raise TypeError("snippet_radius must be an integer")
        if self.snippet_radius < 0:
            raise ValueError("snippet_radius must be non-negative")
        if not isinstance(self.trace, bool):
            raise TypeError("trace must be a boolean")


@dataclass(frozen=True)
class ParserContext:
    """What the ``on_error`` callback of ``parse`` receives."""

    error: ParserError
    position: int
    byte_position: int
    snippet: str
    text: str = field(repr=False)

    @property
    def message(self) -> str:
        return self.error.message

    def surroundings(self, radius: int) -> str:
        """Text within ``radius`` characters of the failure, clamped to input."""
        return _window(self.text, self.position, radius)

    def __str__(self) -> str:
        return f"{self.message} (position {self.position}): {self.snippet!r}"


ErrorCallback: TypeAlias = Callable[[ParserContext], Any]


def _window(text: str, position: int, radius: int) -> str:
    start = max(0, position - radius)
    end = min(len(text), position + radius)
    return text[start:end]


class JsonParser:
    """
    Recursive descent parser over an immutable text.

    Each ``parse_*`` method starts at the cursor, leaves the cursor just past
    what it consumed, and always returns a ``Value``.
    """

    def __init__(
        self, text: str, config: ParseConfig | None = None, start: int = 0
    ) -> None:
        self.text = text
        self.length = len(text)
        self.pos = start
        self.error = ParserError.OK
        self.error_position = start
        self.config = config or ParseConfig()

    def has_error(self) -> bool:
        return self.error is not ParserError.OK

    def set_error(self, error: ParserError, position: int | None = None) -> None:
        """Records ``error`` at ``position``, the cursor by default."""
        self.error = error
        self.error_position = self.pos if position is None else position
        logger.debug("%s at position %d", error.value, self.error_position)

    def surroundings(self, radius: int | None = None) -> str:
        if radius is None:
            radius = self.config.snippet_radius
        return _window(self.text, self.error_position, radius)

    def context(self) -> ParserContext:
        """Snapshot of the error state for diagnostics."""
        position = self.error_position
        return ParserContext(
            error=self.error,
            position=position,
            byte_position=Utf8Offsets(self.text).byte_offset(position),
            snippet=self.surroundings(),
            text=self.text,
        )

    def skip_whitespace(self) -> None:
        while self.pos < self.length and self.text[self.pos] in WHITESPACE:
            self.pos += 1

    @hot_path("parse_value")
    def parse_value(self) -> Value:  # noqa: PLR0911
        """Parses whatever value starts at the next significant character."""
        self.skip_whitespace()

        if self.pos >= self.length:
            self.set_error(ParserError.UNEXPECTED_TOKEN)
            return Value()

        char = self.text[self.pos]
        if self.config.trace:
            logger.debug("dispatching on %r at position %d", char, self.pos)

        if char == "{":
            return self.parse_object()
        elif char == "[":
            return self.parse_array()
        elif char == '"':
            return self.parse_string()
        elif char in "tf":
            return self.parse_boolean()
        elif char == "n":
            return self.parse_null()
        elif char in DIGITS or char == "-":
            return self.parse_number()
        else:
            self.set_error(ParserError.UNEXPECTED_TOKEN)
            return Value()

    def _parse_key(self) -> str:
        start = self.pos
        key = self.parse_value().extract_string().value
        if not key:
            self.set_error(ParserError.EXPECTED_STRING_KEY, start)
        return key

    @hot_path("parse_object")
    def parse_object(self) -> Value:
        self.pos += 1  # "{"

        obj = Value(Kind.OBJECT)
        key = ""
        expect_comma = False

        while self.pos < self.length:
            char = self.text[self.pos]

            if char in WHITESPACE:
                self.pos += 1
                continue
            elif char == "}":
                self.pos += 1
                break
            elif char == ",":
                if not expect_comma:
                    self.set_error(ParserError.EXPECTED_ATTRIBUTE_BUT_GOT_COMMA)
                    break
                expect_comma = False
                self.pos += 1
            elif not key:
                if expect_comma:
                    self.set_error(
                        ParserError.EXPECTED_COMMA_BEFORE_NEXT_ATTRIBUTE
                    )
                    break
                key = self._parse_key()
            else:
                if char != ":":
                    self.set_error(ParserError.EXPECTED_COLON)
                    break
                self.pos += 1
                obj.insert(key, self.parse_value())
                key = ""
                expect_comma = True

            if self.has_error():
                break

        return obj

    @hot_path("parse_array")
    def parse_array(self) -> Value:
        self.pos += 1  # "["

        array = Value(Kind.ARRAY)
        expect_comma = False

        while True:
            self.skip_whitespace()
            if self.pos >= self.length:
                break

            char = self.text[self.pos]
            if char == "]":
                self.pos += 1
                break
            elif char == ",":
                if not expect_comma:
                    self.set_error(
                        ParserError.EXPECTED_COMMA_BEFORE_NEXT_ARRAY_ITEM
                    )
                    break
                expect_comma = False
                self.pos += 1
            else:
                if expect_comma:
                    self.set_error(
                        ParserError.EXPECTED_COMMA_BEFORE_NEXT_ARRAY_ITEM
                    )
                    break
                array.insert("", self.parse_value())
                expect_comma = True

            if self.has_error():
                break

        return array

    @hot_path("parse_string")
    def parse_string(self) -> Value:
        """
        Scans to the closing quote, keeping escape sequences verbatim.

        A quote counts as escaped when the single character before it is a
        backslash, so ``"a\\\\"`` does not terminate the string.
        """
        self.pos += 1  # opening quote
        start = self.pos

        end = self.text.find('"', start)
        while end != -1 and self.text[end - 1] == "\\":
            end = self.text.find('"', end + 1)

        if end == -1:
            self.pos = self.length
            self.set_error(ParserError.UNTERMINATED_STRING)
            return Value.of(self.text[start:])

        self.pos = end + 1
        return Value.of(self.text[start:end])

    @hot_path("parse_number")
    def parse_number(self) -> Value:
        start = self.pos
        while self.pos < self.length and self.text[self.pos] in NUMBER_CHARS:
            self.pos += 1
        digits = self.text[start : self.pos]

        if "." in digits:
            prefix = _FLOAT_PREFIX.match(digits)
            if prefix is None:
                self.set_error(ParserError.INVALID_NUMBER, start)
                return Value.of(0.0)
            return Value.of(float(prefix.group()))

        prefix = _INT_PREFIX.match(digits)
        if prefix is None:
            self.set_error(ParserError.INVALID_NUMBER, start)
            return Value.of(0)
        return Value.of(_to_int64(prefix.group()))

    def parse_boolean(self) -> Value:
        if self.text.startswith("true", self.pos):
            self.pos += 4
            return Value.of(True)

        # Anything else starting with "t" or "f" is read as false.
        self.pos = min(self.pos + 5, self.length)
        return Value.of(False)

    def parse_null(self) -> Value:
        if not self.text.startswith("null", self.pos):
            self.set_error(ParserError.UNEXPECTED_TOKEN)
        self.pos = min(self.pos + 4, self.length)
        return Value(Kind.NULL)


def _to_int64(digits: str) -> int:
    negative = digits.startswith("-")
    magnitude = digits.removeprefix("-").lstrip("0")
    if len(magnitude) > _INT64_DIGITS:
        return INT64_MIN if negative else INT64_MAX
    number = int(magnitude or "0")
    return clamp_int64(-number if negative else number)


def _decode(text: str | bytes | bytearray | memoryview) -> str:
    if isinstance(text, str):
        return text
    if isinstance(text, bytes | bytearray | memoryview):
        # Undecodable bytes become lone surrogates and encode back unchanged.
        return bytes(text).decode("utf-8", errors="surrogateescape")
    raise TypeError(
        f"the JSON text must be str or UTF-8 bytes, not {type(text).__name__}"
    )


def parse(
    text: str | bytes | bytearray | memoryview,
    on_error: ErrorCallback | None = None,
    *,
    config: ParseConfig | None = None,
    **kwargs: Any,
) -> Value:
    """
    Parses ``text`` into a document tree.

    Always returns a usable tree. If anything went wrong, ``on_error`` is
    called once with a ``ParserContext`` describing the failure and the root
    carries ``JsonError.PARSE_ERROR``; the tree then holds whatever was
    parsed before the failure. Keyword arguments build a ``ParseConfig``
    when ``config`` is not given.
    """
    if config is None:
        config = ParseConfig(**kwargs)
    elif kwargs:
        raise TypeError("pass either config or configuration keywords, not both")

    parser = JsonParser(_decode(text), config)
    root = parser.parse_value()

    if parser.has_error():
        context = parser.context()
        logger.debug("parse failed: %s", context)
        if on_error is not None:
            on_error(context)
        root.set_error(JsonError.PARSE_ERROR)

    return root
