import re
from typing import Iterator
from .types import Span


class PatternScanner:
    """
    Substring and pattern search over a byte buffer. Knows nothing about PDF.
    Every method returns offsets into the buffer, the buffer itself is never copied.
    """

    def __init__(self, buffer: bytes):
        self.buffer = buffer

    def find(self, needle: bytes, start: int = 0, end: int | None = None) -> int:
        if end is None:
            end = len(self.buffer)
        return self.buffer.find(needle, start, end)

    def find_all(self, needle: bytes, start: int = 0, end: int | None = None) -> list[int]:
        """Offsets of every non-overlapping occurrence of ``needle``."""
        if not needle:
            return []
        if end is None:
            end = len(self.buffer)
        offsets: list[int] = []
        pos = self.buffer.find(needle, start, end)
        while pos != -1:
            offsets.append(pos)
            pos = self.buffer.find(needle, pos + len(needle), end)
        return offsets

    def finditer(self, pattern: re.Pattern[bytes], start: int = 0) -> Iterator[re.Match[bytes]]:
        return pattern.finditer(self.buffer, start)

    def spans(self, pattern: re.Pattern[bytes], start: int = 0) -> list[Span]:
        return [m.span() for m in pattern.finditer(self.buffer, start)]

    def slice(self, span: Span) -> bytes:
        start, end = span
        return self.buffer[start:end]
