"""
Serialization tests.

Validates the compact text form produced by ``Value.dump`` and the
``dumps``/``dump`` wrappers: no whitespace, fixed six-digit floats and
strings written back exactly as stored.
"""

from io import StringIO

import pytest

import jsontree
from jsontree import Kind
from jsontree import Value


@pytest.mark.parametrize(
    "text",
    ["[[[[]]]]", "[10,20]", "[]", "{}", '["a","b"]', "[true,false,null]", "-7"],
)
def test_compact_round_trip(text: str) -> None:
    """
    Validates documents already in compact form are reproduced exactly.
    """
    assert jsontree.parse(text).dump() == text


def test_whitespace_is_dropped() -> None:
    """
    Validates the output carries no insignificant whitespace.
    """
    value = jsontree.parse('[ 1 ,\n\t[ 2 , 3 ] ]')
    assert value.dump() == "[1,[2,3]]"


@pytest.mark.parametrize(
    "number,expected",
    [(2.5, "2.500000"), (1.0, "1.000000"), (-0.25, "-0.250000"), (0.0, "0.000000")],
)
def test_float_format(number: float, expected: str) -> None:
    """
    Validates floats are written with six fractional digits.
    """
    assert Value.of(number).dump() == expected


def test_parsed_float_format() -> None:
    """
    Validates parsed floats are written in the same fixed format.
    """
    assert jsontree.parse("[2.5]").dump() == "[2.500000]"


def test_strings_are_not_escaped() -> None:
    """
    Validates string contents are emitted as stored.
    """
    assert Value.of('say "hi"\n').dump() == '"say "hi"\n"'
    assert Value.of("日本").dump() == '"日本"'


def test_verbatim_escapes_survive_round_trip() -> None:
    """
    Validates escape sequences kept verbatim by the parser come back out
    unchanged.
    """
    text = r'["tab\there","quote\"d"]'
    assert jsontree.parse(text).dump() == text


def test_object_round_trip() -> None:
    """
    Validates objects survive a dump and reparse; member order is not
    relied upon.
    """
    value = jsontree.parse('{"a":1,"b":[true,null],"c":{"d":"e"}}')
    dumped = value.dump()

    assert dumped.startswith("{")
    assert dumped.endswith("}")
    assert jsontree.parse(dumped).to_python() == value.to_python()


def test_dump_is_idempotent() -> None:
    """
    Validates dumping does not change the tree.
    """
    value = jsontree.parse('{"a":[1,2.5,"x"]}')
    first = value.dump()

    assert value.dump() == first
    assert value.type() is Kind.OBJECT
    assert value.size() == 1
    assert not value.has_error()


def test_integers_clamped_on_input_are_written_clamped() -> None:
    """
    Validates saturated integers are written with their clamped value.
    """
    assert jsontree.parse("[99999999999999999999]").dump() == "[9223372036854775807]"


def test_dumps() -> None:
    """
    Validates dumps accepts plain data and values.
    """
    assert jsontree.dumps({}) == "{}"
    assert jsontree.dumps([1, "a", None]) == '[1,"a",null]'
    assert jsontree.dumps(Value.of([True])) == "[true]"


def test_dump() -> None:
    """
    Validates dump to a file-like object.
    """
    sio = StringIO()
    jsontree.dump([1, 2], sio)
    assert sio.getvalue() == "[1,2]"


def test_dump_requires_write() -> None:
    """
    Validates dump rejects objects without a write method.
    """
    with pytest.raises(TypeError, match="write"):
        jsontree.dump([], object())  # type: ignore[arg-type]


def test_dumps_rejects_unsupported_types() -> None:
    """
    Validates non-serializable data is refused before any output.
    """
    with pytest.raises(TypeError, match="not JSON serializable"):
        jsontree.dumps({"a": object()})
