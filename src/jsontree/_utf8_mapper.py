"""Character to UTF-8 byte offset mapping for parser diagnostics."""

from __future__ import annotations

from typing import Final


class Utf8Offsets:
    """Maps character positions in a text to byte offsets in its UTF-8 form.

    Rather than storing an offset for every character, byte offsets are
    recorded at regular checkpoints and the remainder is walked from the
    nearest checkpoint below the requested position.
    """

    def __init__(self, text: str, checkpoint_interval: int = 256) -> None:
        """Build the checkpoint table.

        Args:
            text: The decoded text the parser walks over
            checkpoint_interval: Characters between checkpoints
        """
        if checkpoint_interval <= 0:
            raise ValueError("checkpoint_interval must be positive")

        self.text: Final = text
        self.checkpoint_interval: Final = checkpoint_interval
        self.is_ascii: Final = text.isascii()
        # checkpoints[i] is the byte offset of character i * interval
        self.checkpoints: list[int] = []

        if not self.is_ascii:
            self._build_checkpoints()

    def _build_checkpoints(self) -> None:
        byte_pos = 0
        for char_pos, char in enumerate(self.text):
            if char_pos % self.checkpoint_interval == 0:
                self.checkpoints.append(byte_pos)
            byte_pos += _utf8_width(char)

    def byte_offset(self, char_pos: int) -> int:
        """Return the UTF-8 byte offset of ``char_pos``.

        Positions past the end of the text map to the total encoded length.
        """
        char_pos = max(0, min(char_pos, len(self.text)))
        if self.is_ascii:
            return char_pos

        slot = min(char_pos // self.checkpoint_interval, len(self.checkpoints) - 1)
        if slot < 0:
            return 0

        byte_pos = self.checkpoints[slot]
        for char in self.text[slot * self.checkpoint_interval : char_pos]:
            byte_pos += _utf8_width(char)
        return byte_pos


def _utf8_width(char: str) -> int:
    code_point = ord(char)
    if code_point < 0x80:
        return 1
    if code_point < 0x800:
        return 2
    if 0xDC80 <= code_point <= 0xDCFF:
        # surrogateescape stand-in for one undecodable input byte
        return 1
    if code_point < 0x10000:
        return 3
    return 4
