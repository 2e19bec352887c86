"""
Pytest configuration and shared fixtures for jsontree tests.

Provides immutable test cases for the relaxed grammar: documents the parser
must accept, and malformed documents together with the error each one must
report.
"""

from dataclasses import dataclass
from typing import Any

import pytest

from jsontree import ParserError


@dataclass(frozen=True)
class JsonTestCase:
    """
    Immutable container for one parser test case.

    ``expected_error`` is ``ParserError.OK`` for documents that must parse
    cleanly; ``expected_output`` is the ``to_python()`` form of the tree.
    """

    description: str
    input_data: str
    expected_error: ParserError = ParserError.OK
    expected_output: Any = None
    expected_position: int | None = None


@pytest.fixture
def well_formed_cases() -> list[JsonTestCase]:
    """
    Provides documents the relaxed grammar accepts without error.

    Includes the tolerated deviations from strict JSON: trailing commas,
    unclosed containers at end of input, trailing text and verbatim escapes.
    """
    return [
        JsonTestCase(
            "string member", '{"key":"hallo"}', expected_output={"key": "hallo"}
        ),
        JsonTestCase(
            "integer member", '{"key":100}', expected_output={"key": 100}
        ),
        JsonTestCase(
            "nested object",
            '{"key": {"tor":"hallo"}}',
            expected_output={"key": {"tor": "hallo"}},
        ),
        JsonTestCase(
            "int and float mixing",
            '{"key": 10, "loko": 2.5}',
            expected_output={"key": 10, "loko": 2.5},
        ),
        JsonTestCase(
            "mixed array",
            '[10,21,{"nice":true}]',
            expected_output=[10, 21, {"nice": True}],
        ),
        JsonTestCase("empty array", "[]", expected_output=[]),
        JsonTestCase("empty object", "{}", expected_output={}),
        JsonTestCase("deep brackets", "[[[[]]]]", expected_output=[[[[]]]]),
        JsonTestCase(
            "scalars",
            "[-12, 0.5, -0.25, true, false, null]",
            expected_output=[-12, 0.5, -0.25, True, False, None],
        ),
        JsonTestCase(
            "whitespace everywhere",
            '\n\t{ "a" :\n[ 1 ,\t2 ] , "b" : "c" }\n',
            expected_output={"a": [1, 2], "b": "c"},
        ),
        JsonTestCase("scalar root", '"text"', expected_output="text"),
        JsonTestCase("integer root", " 42", expected_output=42),
        JsonTestCase("duplicate key", '{"a":1,"a":2}', expected_output={"a": 2}),
        JsonTestCase("array trailing comma", "[1,]", expected_output=[1]),
        JsonTestCase("object trailing comma", '{"a":1,}', expected_output={"a": 1}),
        JsonTestCase("unclosed array", "[1, 2", expected_output=[1, 2]),
        JsonTestCase("unclosed object", '{"a":1', expected_output={"a": 1}),
        JsonTestCase("trailing text", '{"a":1} trailing', expected_output={"a": 1}),
        JsonTestCase(
            "escaped quote kept verbatim",
            r'["a\"b"]',
            expected_output=['a\\"b'],
        ),
        JsonTestCase("second dot ends number", "[1.5.5]", expected_output=[1.5]),
        JsonTestCase("leading zeros", "[007]", expected_output=[7]),
        JsonTestCase("false prefix only", "[fxxxx]", expected_output=[False]),
        JsonTestCase(
            "non-ascii content",
            '{"grüße":"日本"}',
            expected_output={"grüße": "日本"},
        ),
    ]


@pytest.fixture
def malformed_cases() -> list[JsonTestCase]:
    """
    Provides malformed documents with the error kind and position expected.
    """
    return [
        JsonTestCase(
            "double comma in object",
            '{"key":100,,}',
            ParserError.EXPECTED_ATTRIBUTE_BUT_GOT_COMMA,
            expected_position=11,
        ),
        JsonTestCase(
            "leading comma in object",
            "{,}",
            ParserError.EXPECTED_ATTRIBUTE_BUT_GOT_COMMA,
            expected_position=1,
        ),
        JsonTestCase(
            "nested leading comma, missing bracket",
            "[ [ [ [ ,] ] ]",
            ParserError.EXPECTED_COMMA_BEFORE_NEXT_ARRAY_ITEM,
            expected_position=8,
        ),
        JsonTestCase(
            "missing comma between items",
            '[42 "spam"]',
            ParserError.EXPECTED_COMMA_BEFORE_NEXT_ARRAY_ITEM,
            expected_position=4,
        ),
        JsonTestCase(
            "missing comma between attributes",
            '{"spam":42 "x":1}',
            ParserError.EXPECTED_COMMA_BEFORE_NEXT_ATTRIBUTE,
            expected_position=11,
        ),
        JsonTestCase(
            "missing colon",
            '{"spam" 42}',
            ParserError.EXPECTED_COLON,
            expected_position=8,
        ),
        JsonTestCase(
            "unquoted key",
            "{a:1}",
            ParserError.EXPECTED_STRING_KEY,
            expected_position=1,
        ),
        JsonTestCase(
            "empty key",
            '{"":1}',
            ParserError.EXPECTED_STRING_KEY,
            expected_position=1,
        ),
        JsonTestCase(
            "numeric key",
            "{1:2}",
            ParserError.EXPECTED_STRING_KEY,
            expected_position=1,
        ),
        JsonTestCase(
            "unterminated string",
            '["spam',
            ParserError.UNTERMINATED_STRING,
            expected_position=6,
        ),
        JsonTestCase(
            "unknown token",
            "[1,@]",
            ParserError.UNEXPECTED_TOKEN,
            expected_position=3,
        ),
        JsonTestCase(
            "single quotes",
            "['single']",
            ParserError.UNEXPECTED_TOKEN,
            expected_position=1,
        ),
        JsonTestCase(
            "empty input", "", ParserError.UNEXPECTED_TOKEN, expected_position=0
        ),
        JsonTestCase(
            "carriage return is not whitespace",
            "\r42",
            ParserError.UNEXPECTED_TOKEN,
            expected_position=0,
        ),
        JsonTestCase(
            "missing value",
            '{"a":}',
            ParserError.UNEXPECTED_TOKEN,
            expected_position=5,
        ),
        JsonTestCase(
            "misspelled null",
            '{"a":nope}',
            ParserError.UNEXPECTED_TOKEN,
            expected_position=5,
        ),
        JsonTestCase(
            "lone minus",
            "[-]",
            ParserError.INVALID_NUMBER,
            expected_position=1,
        ),
        JsonTestCase(
            "minus dot",
            "[-.]",
            ParserError.INVALID_NUMBER,
            expected_position=1,
        ),
    ]
