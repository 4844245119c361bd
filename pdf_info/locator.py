import logging
import re
from .dataclasses import IndirectRef
from .scanner import PatternScanner
from .types import RawObjectsByRef, RefKind

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

DEFAULT_MAX_OBJECT_ID_LENGTH = 15

XMP_START = b"<x:xmpmeta"
XMP_END = b"</x:xmpmeta"

_REF_PATTERNS: dict[str, re.Pattern[bytes]] = {
    kind: re.compile(rb"/" + kind.encode("ascii") + rb"\s*\d+(?:\s+\d+)?\s*R(?![A-Za-z0-9])")
    for kind in ("Info", "Metadata", "Encrypt")
}

# "<number> [<generation>] obj", never starting in the middle of a longer number
_OBJ_HEADER = re.compile(rb"(?<![0-9])(\d+)(?:\s+(\d+))?\s+obj(?![A-Za-z])")
_ENDOBJ = b"endobj"


class ObjectLocator:
    """
    Finds indirect references, object bodies and XMP packets in a raw PDF buffer.
    Nothing here raises on malformed input: no match means an empty result.
    """

    def __init__(self, max_object_id_length: int = DEFAULT_MAX_OBJECT_ID_LENGTH):
        self.max_object_id_length = max_object_id_length

    def find_refs(self, buffer: bytes, kind: RefKind) -> list[str]:
        """
        Literal ``/<kind> N G R`` strings in order of first appearance, without duplicates.
        """
        scanner = PatternScanner(buffer)
        found = (m.group(0).decode("latin-1") for m in scanner.finditer(_REF_PATTERNS[kind]))
        return list(dict.fromkeys(found))

    def extract_object(self, buffer: bytes, object_id: str) -> list[bytes]:
        """
        Raw ``N G obj ... endobj`` bodies for ``object_id`` ("N G"), in buffer order.
        Identical duplicates are collapsed; differing copies (incremental updates) are all kept.
        """
        parts = self._split_object_id(object_id)
        if parts is None:
            return []
        number, generation = parts

        scanner = PatternScanner(buffer)
        objects: list[bytes] = []
        for match in scanner.finditer(_OBJ_HEADER):
            if match.group(1) != number or match.group(2) != generation:
                continue
            end = scanner.find(_ENDOBJ, match.end())
            if end == -1:
                # no later header can have an endobj either
                break
            raw = scanner.slice((match.start(), end + len(_ENDOBJ)))
            if raw not in objects:
                objects.append(raw)
        return objects

    def extract_xmp_packets(self, buffer: bytes) -> list[bytes]:
        """
        Pairs the i-th ``<x:xmpmeta`` with the i-th ``</x:xmpmeta``; inverted pairs are dropped.
        """
        scanner = PatternScanner(buffer)
        starts = scanner.find_all(XMP_START)
        ends = scanner.find_all(XMP_END)
        if len(starts) != len(ends):
            logger.debug(f"Unbalanced XMP markers: {len(starts)} start(s), {len(ends)} end(s)")

        packets: list[bytes] = []
        for start, end in zip(starts, ends):
            if start >= end:
                logger.debug(f"Skipping inverted XMP markers at {start}/{end}")
                continue
            packets.append(scanner.slice((start, end)) + XMP_END + b">")
        return packets

    def objects_by_ref(self, buffer: bytes, kind: RefKind) -> RawObjectsByRef:
        """Maps every ``/<kind>`` ref to its raw objects; refs that resolve to nothing map to []."""
        result: RawObjectsByRef = {}
        for literal in self.find_refs(buffer, kind):
            ref = IndirectRef.parse(literal)
            result[literal] = self.extract_object(buffer, ref.object_id) if ref else []
        return result

    def _split_object_id(self, object_id: str) -> tuple[bytes, bytes | None] | None:
        if len(object_id) > self.max_object_id_length:
            logger.debug(f"Rejecting object id longer than {self.max_object_id_length} bytes: {object_id[:32]!r}")
            return None
        parts = object_id.split()
        if not 1 <= len(parts) <= 2 or not all(p.isascii() and p.isdigit() for p in parts):
            logger.debug(f"Rejecting malformed object id {object_id!r}")
            return None
        number = parts[0].encode("ascii")
        generation = parts[1].encode("ascii") if len(parts) == 2 else None
        return number, generation
