"""Text utility helpers."""

from __future__ import annotations

import bisect
import re

from ..model import Position

_WHITESPACE_RE = re.compile(r"\s+")


def encode_source(text: str) -> bytes:
    """UTF-8 encode source text; lone surrogates are passed through, not rejected."""
    return text.encode("utf-8", errors="surrogatepass")


def normalize_whitespace(value: str) -> str:
    """Collapse repeated whitespace and trim ends."""
    return _WHITESPACE_RE.sub(" ", value).strip()


def ellipsize(value: str, width: int) -> str:
    """Shorten long strings while preserving prefix visibility."""
    if width <= 0:
        return ""
    if len(value) <= width:
        return value
    if width <= 1:
        return "…"
    return f"{value[: width - 1]}…"


class LineIndex:
    """Offset/position translation for one document.

    Built once per analysis pass and shared by both matchers.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self._starts = [0]
        for index, char in enumerate(text):
            if char == "\n":
                self._starts.append(index + 1)
        self._encoded: bytes | None = None
        self._byte_starts: list[int] | None = None

    @property
    def line_count(self) -> int:
        return len(self._starts)

    def position_at(self, offset: int) -> Position:
        offset = max(0, min(offset, len(self.text)))
        line = bisect.bisect_right(self._starts, offset) - 1
        return Position(line=line, column=offset - self._starts[line])

    def line_text(self, line: int) -> str:
        start = self._starts[line]
        if line + 1 < len(self._starts):
            end = self._starts[line + 1] - 1
        else:
            end = len(self.text)
        return self.text[start:end].rstrip("\r")

    def line_window(self, line: int, radius: int) -> str:
        """Return ``radius`` lines either side of ``line``, newline-terminated."""
        first_line = max(0, line - radius)
        last_line = min(self.line_count - 1, line + radius)
        return "".join(f"{self.line_text(i)}\n" for i in range(first_line, last_line + 1))

    def char_window(self, start: int, end: int, radius: int) -> str:
        return self.text[max(0, start - radius) : min(len(self.text), end + radius)]

    def _byte_index(self) -> tuple[bytes, list[int]]:
        if self._encoded is None or self._byte_starts is None:
            self._encoded = encode_source(self.text)
            byte_starts = [0]
            for start, end in zip(self._starts, self._starts[1:]):
                byte_starts.append(byte_starts[-1] + len(encode_source(self.text[start:end])))
            self._byte_starts = byte_starts
        return self._encoded, self._byte_starts

    def char_offset(self, byte_offset: int) -> int:
        """Translate a UTF-8 byte offset (as reported by tree-sitter) to a str index.

        Lines are located by bisecting per-line byte starts; only the bytes of
        the containing line are counted.
        """
        encoded, byte_starts = self._byte_index()
        if len(encoded) == len(self.text):
            return byte_offset
        byte_offset = max(0, min(byte_offset, len(encoded)))
        line = bisect.bisect_right(byte_starts, byte_offset) - 1
        prefix = encoded[byte_starts[line] : byte_offset]
        return self._starts[line] + sum(1 for byte in prefix if byte & 0xC0 != 0x80)
