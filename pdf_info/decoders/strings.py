"""
Decoding of PDF string values into text.

PDF producers in the wild disagree about almost everything here: some write
UTF-16 with a byte-order mark and then emit the other byte order, some lose
the zero high bytes of a few characters, some write Latin-1 into strings that
should be PDFDocEncoding. The decoder recovers readable text from all of these
and raises ``ValueDecodeError`` only when nothing sensible can be produced.
"""
import binascii
import codecs
import logging
import re
from typing import Literal
from ..exc import ValueDecodeError

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

Endianness = Literal["big", "little"]

_WHITESPACE = re.compile(rb"[\x00\t\n\x0c\r ]+")
_NON_HEX = re.compile(rb"[^0-9A-Fa-f]+")
_HEX_ONLY = re.compile(rb"^[0-9a-f]*$")

_SIMPLE_ESCAPES = {
    ord("n"): b"\n",
    ord("r"): b"\r",
    ord("t"): b"\t",
    ord("b"): b"\b",
    ord("f"): b"\f",
}
_OCTAL_DIGITS = b"01234567"
_STRICT_ESCAPE = re.compile(rb"\\([0-3][0-7]{2}|[()])")


def determine_endianness(data: bytes, prefer: Endianness = "big") -> Endianness:
    """
    Guess the byte order of UTF-16 ``data`` without trusting its byte-order mark.

    Text that is mostly Latin has a zero high byte in most code units, so the
    alignment (even or odd offsets) holding more zero bytes is the high byte.
    Ties go to ``prefer``, which is big-endian unless a little-endian BOM was seen.
    """
    even_zeros = data[0::2].count(0)
    odd_zeros = data[1::2].count(0)
    if even_zeros > odd_zeros:
        return "big"
    if odd_zeros > even_zeros:
        return "little"
    return prefer


def read_literal(buffer: bytes, open_pos: int) -> tuple[bytes, int] | None:
    """
    Read the parenthesised literal whose ``(`` sits at ``open_pos``.

    Returns the raw content (escapes untouched) and the offset just past the
    closing ``)``, or None when the literal is never closed.
    """
    depth = 1
    i = open_pos + 1
    n = len(buffer)
    while i < n:
        c = buffer[i]
        if c == 0x5C:  # backslash: the next byte never changes nesting
            i += 2
            continue
        if c == 0x28:
            depth += 1
        elif c == 0x29:
            depth -= 1
            if depth == 0:
                return buffer[open_pos + 1:i], i + 1
        i += 1
    return None


class StringValueDecoder:
    """
    Turns the raw content of a ``(...)`` literal or a ``<...>`` hex string into text.
    """

    def decode_literal(self, raw: bytes) -> str:
        return self.decode_text(self.unescape(raw))

    def decode_hex(self, raw: bytes) -> str:
        """
        Decode the content of a hex string. ``<feff...>`` values are UTF-16 and may
        contain stray non-hex bytes, anything else must be clean hex (whitespace allowed).
        """
        stripped = _WHITESPACE.sub(b"", raw).lower()
        if stripped.startswith(b"feff"):
            digits = _NON_HEX.sub(b"", stripped)
            return self.decode_utf16(self._unhexlify(digits)[2:])
        if not _HEX_ONLY.match(stripped):
            raise ValueDecodeError(f"Invalid hex digit in {raw[:32]!r}")
        return self.decode_text(self._unhexlify(stripped))

    def unescape(self, raw: bytes) -> bytes:
        """
        Expand the backslash escapes of a PDF literal string.

        ``\\ddd`` is one byte given in octal (1 to 3 digits, overflow ignored),
        ``\\n \\r \\t \\b \\f`` are control characters, a backslash before an
        end-of-line joins the lines, and any other escaped byte stands for itself,
        which covers ``\\(``, ``\\)`` and ``\\\\``.
        """
        if b"\\" not in raw:
            return raw
        out = bytearray()
        i = 0
        n = len(raw)
        while i < n:
            c = raw[i]
            if c != 0x5C:
                out.append(c)
                i += 1
                continue
            if i + 1 >= n:
                # dangling backslash
                break
            nxt = raw[i + 1]
            if nxt in _OCTAL_DIGITS:
                j = i + 1
                while j < n and j < i + 4 and raw[j] in _OCTAL_DIGITS:
                    j += 1
                out.append(int(raw[i + 1:j], 8) & 0xFF)
                i = j
            elif nxt in _SIMPLE_ESCAPES:
                out += _SIMPLE_ESCAPES[nxt]
                i += 2
            elif nxt == 0x0D:
                i += 3 if raw[i + 2:i + 3] == b"\n" else 2
            elif nxt == 0x0A:
                i += 2
            else:
                out.append(nxt)
                i += 2
        return bytes(out)

    def expand_octal(self, raw: bytes) -> bytes:
        """
        Narrow form of ``unescape`` for text that is not a PDF literal: only
        ``\\ddd`` (first digit 0-3) and ``\\(``/``\\)`` are touched.
        """
        if b"\\" not in raw:
            return raw
        return _STRICT_ESCAPE.sub(_expand_strict, raw)

    def decode_text(self, data: bytes) -> str:
        """Decode unescaped string bytes, honouring any byte-order mark."""
        if data.startswith(codecs.BOM_UTF16_BE):
            return self.decode_utf16(data[2:], prefer="big")
        if data.startswith(codecs.BOM_UTF16_LE):
            return self.decode_utf16(data[2:], prefer="little")
        if data.startswith(codecs.BOM_UTF8):
            return self.decode_plain(data[3:])
        if self._looks_like_utf16(data):
            return self.decode_utf16(data)
        return self.decode_plain(data)

    def decode_plain(self, data: bytes) -> str:
        """UTF-8 when valid, otherwise every byte is promoted to the code point of the same value."""
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            return data.decode("latin-1")

    def decode_utf16(self, data: bytes, prefer: Endianness = "big") -> str:
        """
        Decode UTF-16 bytes whose byte order is guessed from the data itself.

        When most code units have a zero high byte, a printable ASCII byte in the
        high position is a character whose zero padding the producer dropped,
        provided the run of printable bytes it starts is closed by a zero byte.
        It is emitted on its own and the scan realigns by one byte. Runs that end
        in any other byte are real wide characters (CJK and the like).
        """
        if not data:
            return ""
        if len(data) % 2:
            data += b"\x00"
        big = determine_endianness(data, prefer) == "big"
        high_bytes = data[0::2] if big else data[1::2]
        repair = high_bytes.count(0) * 2 >= len(high_bytes)

        units = bytearray()
        i = 0
        n = len(data)
        while i < n:
            if i == n - 1:
                if data[i]:
                    units += bytes((0, data[i]))
                break
            first, second = data[i], data[i + 1]
            if big:
                drifted = repair and first != 0 and _printable(first)
            else:
                drifted = repair and second != 0 and _printable(first) and _printable(second)
            drifted = drifted and _closed_by_zero(data, i)
            if drifted:
                units += bytes((0, first))
                i += 1
                continue
            units += bytes((first, second)) if big else bytes((second, first))
            i += 2
        return units.decode("utf-16-be", errors="replace").replace("\x00", "")

    def _looks_like_utf16(self, data: bytes) -> bool:
        # BOM-less UTF-16 only when every code unit is Latin: one alignment all zeros, the other none
        if len(data) < 2 or len(data) % 2:
            return False
        even, odd = data[0::2], data[1::2]
        if not even.strip(b"\x00"):
            return 0 not in odd
        if not odd.strip(b"\x00"):
            return 0 not in even
        return False

    def _unhexlify(self, digits: bytes) -> bytes:
        try:
            return binascii.unhexlify(digits)
        except (binascii.Error, ValueError) as e:
            raise ValueDecodeError(f"Invalid hex string {digits[:32]!r}: {e}") from e


def _printable(byte: int) -> bool:
    return 0x20 <= byte < 0x7F


def _closed_by_zero(data: bytes, start: int) -> bool:
    end = start
    while end < len(data) and data[end] and _printable(data[end]):
        end += 1
    return end < len(data) and data[end] == 0


def _expand_strict(match: re.Match[bytes]) -> bytes:
    escaped = match.group(1)
    if len(escaped) == 3:
        return bytes((int(escaped, 8),))
    return escaped
