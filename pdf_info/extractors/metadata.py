import html
import logging
import re
from ._base import BaseExtractor
from ..decoders.strings import StringValueDecoder
from ..types import MetadataKey, MetadataPacket

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

DEFAULT_XMP_PREFIXES = ("dc", "pdf", "pdfx", "xap", "xapMM", "xmp", "xmpMM")

_XMPMETA = re.compile(rb"<x:xmpmeta\b[^>]*>(.*?)</x:xmpmeta", re.S)
_DESCRIPTION = re.compile(rb"<rdf:Description\b([^>]*)>", re.S)
_LIST_ITEM = re.compile(rb"<rdf:li\b[^>]*?(?:/>|>(.*?)</rdf:li\s*>)", re.S)
# <ns:Tag ...>, <ns:Tag .../> and </ns:Tag>
_QUALIFIED_TAG = re.compile(rb"</?[A-Za-z_][\w.-]*:[\w.-]+(?:\s[^>]*)?/?>", re.S)


class XmpMetadataExtractor(BaseExtractor):
    """
    Flattens one XMP packet into ``{(prefix, LocalName): text}`` without an XML parser.

    Container markup (``rdf:Alt``, ``rdf:Seq``, ``rdf:li`` ...) is stripped. When a
    key ends up with several candidate values, the shortest non-empty one is kept,
    which in practice is the default-language entry of an ``rdf:Alt``.
    """

    def __init__(
            self,
            prefixes: tuple[str, ...] = DEFAULT_XMP_PREFIXES,
            decoder: StringValueDecoder | None = None
    ):
        self.prefixes = prefixes
        self.decoder = decoder or StringValueDecoder()
        self._elements = {p: self._element_pattern(p) for p in prefixes}
        self._attributes = {p: self._attribute_pattern(p) for p in prefixes}

    def extract(self, raw: bytes) -> MetadataPacket | None:
        """
        Returns None when ``raw`` holds no ``<x:xmpmeta>`` region,
        which callers must tell apart from a packet without recognised properties.
        """
        match = _XMPMETA.search(raw)
        if match is None:
            logger.debug("No <x:xmpmeta> region in packet")
            return None
        body = match.group(1)

        candidates: dict[MetadataKey, list[str]] = {}
        for prefix in self.prefixes:
            for element in self._elements[prefix].finditer(body):
                key = (prefix, element.group(1).decode("ascii"))
                candidates.setdefault(key, []).extend(self._element_values(element.group(2)))

            for description in _DESCRIPTION.finditer(body):
                for attribute in self._attributes[prefix].finditer(description.group(1)):
                    key = (prefix, attribute.group(1).decode("ascii"))
                    value = attribute.group(2) if attribute.group(2) is not None else attribute.group(3)
                    candidates.setdefault(key, []).append(self._decode(value))

        return {key: self._shortest(values) for key, values in candidates.items()}

    def _element_values(self, content: bytes) -> list[str]:
        items = _LIST_ITEM.findall(content)
        if items:
            return [self._decode(self._strip_tags(item)) for item in items]
        return [self._decode(self._strip_tags(content))]

    def _strip_tags(self, content: bytes) -> bytes:
        return _QUALIFIED_TAG.sub(b"", content)

    def _decode(self, text: bytes) -> str:
        decoded = self.decoder.decode_plain(self.decoder.expand_octal(text.strip()))
        return html.unescape(decoded).strip()

    def _shortest(self, values: list[str]) -> str:
        non_empty = [v for v in values if v]
        if not non_empty:
            return ""
        return min(non_empty, key=len)

    def _element_pattern(self, prefix: str) -> re.Pattern[bytes]:
        p = re.escape(prefix.encode("ascii"))
        # opening and closing local names must agree; self-closing tags carry no text
        return re.compile(
            rb"<" + p + rb":([A-Za-z_][\w.-]*)(?:\s[^>]*?)?(?<!/)>(.*?)</" + p + rb":\1\s*>",
            re.S,
        )

    def _attribute_pattern(self, prefix: str) -> re.Pattern[bytes]:
        p = re.escape(prefix.encode("ascii"))
        return re.compile(rb"(?<![\w:])" + p + rb":([\w.-]+)\s*=\s*(?:\"([^\"]*)\"|'([^']*)')")
