import logging
import re
from ._base import BaseExtractor
from ..decoders.strings import StringValueDecoder, read_literal
from ..exc import ValueDecodeError
from ..locator import ObjectLocator
from ..types import InfoDictionary, Span
from typing import Literal

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

FieldShape = Literal["literal", "hex", "ref"]

_NAME = rb"/((?:[^\s/()<>\[\]{}%#]|#[0-9A-Fa-f]{2})+)"
_LITERAL_FIELD = re.compile(_NAME + rb"\s*\(")
_HEX_FIELD = re.compile(_NAME + rb"\s*<([^<>]*)>")
# letters only, so structural keys such as /AAPL:Keywords or /K1 are left alone
_REF_FIELD = re.compile(rb"/([A-Za-z]+)\s+(\d+\s+\d+)\s+R(?![A-Za-z0-9])")
_NAME_ESCAPE = re.compile(rb"#([0-9A-Fa-f]{2})")
_OBJ_KEYWORD = re.compile(rb"\bobj\b")
_OPENING_HEX = re.compile(rb"[\x00\t\n\x0c\r ]*<(?!<)([^<>]*)>")


class InfoExtractor(BaseExtractor):
    """
    Turns one raw ``/Info`` object into a mapping of field name to decoded text.

    Fields are collected by shape (``(literal)``, ``<hex>``, ``N G R``) in that
    order and decoded afterwards. A field that fails to decode is dropped without
    affecting its siblings; when a name repeats, the last successful decode wins.
    """

    def __init__(
            self,
            locator: ObjectLocator | None = None,
            decoder: StringValueDecoder | None = None
    ):
        self.locator = locator or ObjectLocator()
        self.decoder = decoder or StringValueDecoder()

    def extract(self, raw: bytes, buffer: bytes | None = None) -> InfoDictionary:
        """
        ``buffer`` is searched when a field value is an indirect reference;
        it defaults to ``raw`` itself.
        """
        if buffer is None:
            buffer = raw

        info: InfoDictionary = {}
        for name, shape, payload in self._collect_fields(raw):
            try:
                info[name] = self._decode(shape, payload, buffer)
            except ValueDecodeError as e:
                logger.debug(f"Dropping /{name}: {e}")
        return info

    def _collect_fields(self, raw: bytes) -> list[tuple[str, FieldShape, bytes]]:
        fields: list[tuple[str, FieldShape, bytes]] = []
        literal_spans: list[Span] = []

        pos = 0
        for match in _LITERAL_FIELD.finditer(raw):
            if match.start() < pos:
                # inside the previous literal's text
                continue
            literal = read_literal(raw, match.end() - 1)
            if literal is None:
                logger.debug(f"Unterminated literal for /{self._name(match.group(1))}")
                break
            content, pos = literal
            literal_spans.append((match.start(), pos))
            fields.append((self._name(match.group(1)), "literal", content))

        def outside_literals(start: int) -> bool:
            return not any(s <= start < e for s, e in literal_spans)

        for match in _HEX_FIELD.finditer(raw):
            if outside_literals(match.start()):
                fields.append((self._name(match.group(1)), "hex", match.group(2)))

        for match in _REF_FIELD.finditer(raw):
            if outside_literals(match.start()):
                fields.append((match.group(1).decode("ascii"), "ref", match.group(2)))

        return fields

    def _decode(self, shape: FieldShape, payload: bytes, buffer: bytes) -> str:
        if shape == "literal":
            return self.decoder.decode_literal(payload)
        if shape == "hex":
            return self.decoder.decode_hex(payload)
        return self._resolve(payload.decode("ascii"), buffer)

    def _resolve(self, object_id: str, buffer: bytes) -> str:
        """
        Value of the first parenthesised string in the referenced object's body,
        or of a hex string opening the body when there is no literal at all.
        """
        objects = self.locator.extract_object(buffer, object_id)
        if not objects:
            raise ValueDecodeError(f"Referenced object {object_id} not found")

        body = objects[0]
        keyword = _OBJ_KEYWORD.search(body)
        start = keyword.end() if keyword else 0

        open_pos = body.find(b"(", start)
        if open_pos != -1:
            literal = read_literal(body, open_pos)
            if literal is not None:
                return self.decoder.decode_literal(literal[0])

        hex_string = _OPENING_HEX.match(body, start)
        if hex_string is not None:
            return self.decoder.decode_hex(hex_string.group(1))
        raise ValueDecodeError(f"Object {object_id} does not hold a string")

    def _name(self, raw_name: bytes) -> str:
        unescaped = _NAME_ESCAPE.sub(lambda m: bytes((int(m.group(1), 16),)), raw_name)
        return self.decoder.decode_plain(unescaped)
