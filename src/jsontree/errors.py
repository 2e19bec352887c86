"""
Exceptions raised at the Python boundary of jsontree.

Tree operations and the parser record their failures in sticky error
registers instead of raising. The exceptions here cover the cases that cannot
be expressed that way: the strict ``loads`` convenience API and use of a value
whose payload has been moved away.
"""

from typing import TypeAlias

Position: TypeAlias = int


class JSONDecodeError(ValueError):
    """
    Raised by ``loads``/``load`` when the parser recorded an error.

    Carries the parser error kind, the failure position and the line/column
    derived from it, so callers get the same information the ``on_error``
    callback of ``parse`` receives.
    """

    def __init__(
        self,
        msg: str,
        doc: str = "",
        pos: Position = 0,
        error: object = None,
    ) -> None:
        if not isinstance(msg, str):
            raise TypeError("msg must be a string")
        if not isinstance(pos, int) or pos < 0:
            raise ValueError("pos must be a non-negative integer")

        self.msg = msg
        self.doc = doc
        self.pos = pos
        self.error = error

        self.lineno = doc.count("\n", 0, pos) + 1 if doc else 1
        self.colno = pos - doc.rfind("\n", 0, pos) if doc else pos + 1

        super().__init__(f"{msg} at line {self.lineno}, column {self.colno}")


class OwnershipError(RuntimeError):
    """A value was moved out of the container that owns it."""


class MovedValueError(OwnershipError):
    """An operation was attempted on a value whose payload was moved away."""

    def __init__(self) -> None:
        super().__init__("value was moved from and can no longer be used")
