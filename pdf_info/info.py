import logging
import re
from pathlib import Path
from .builders.document_info import DocumentInfoBuilder
from .dataclasses import DocumentInfo
from .exc import PdfEncryptedError, PdfInfoReadError
from .extractors.info import InfoExtractor
from .extractors.metadata import DEFAULT_XMP_PREFIXES, XmpMetadataExtractor
from .locator import DEFAULT_MAX_OBJECT_ID_LENGTH, ObjectLocator
from .decoders.strings import StringValueDecoder
from .types import InfoDictionary, InfoObjectsByRef, MetadataPacket, RawObjectsByRef, ScanConfig

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

DEFAULT_HEADER_WINDOW = 1024
PDF_MARKER = b"%PDF-"
_VERSION = re.compile(rb"\d\.\d")


def is_pdf(data: bytes, header_window: int = DEFAULT_HEADER_WINDOW) -> bool:
    """True when ``%PDF-`` appears within the first ``header_window`` bytes."""
    return data.find(PDF_MARKER, 0, header_window) != -1


def pdf_version(data: bytes, header_window: int = DEFAULT_HEADER_WINDOW) -> str | None:
    """``"1.7"`` style version from the header, or None when there is no valid header."""
    marker = data.find(PDF_MARKER, 0, header_window)
    if marker == -1:
        return None
    match = _VERSION.match(data, marker + len(PDF_MARKER))
    if match is None:
        return None
    return match.group(0).decode("ascii")


class PdfInfo:
    """
    Best-effort extraction of /Info dictionaries and XMP metadata from a PDF buffer.

    The buffer is expected to be decrypted and to keep its /Info and XMP objects
    outside compressed object streams. Every method is a pure function of the
    buffer; results are recomputed on each call.
    """

    def __init__(self, data: bytes | bytearray | memoryview, config: ScanConfig | None = None):
        if not config:
            config = {}
        self.data = bytes(data)
        self.header_window = config.get("header_window", DEFAULT_HEADER_WINDOW)
        self.raise_on_encrypted = config.get("raise_on_encrypted", False)

        decoder = StringValueDecoder()
        self.locator = ObjectLocator(
            max_object_id_length=config.get("max_object_id_length", DEFAULT_MAX_OBJECT_ID_LENGTH)
        )
        self.info_extractor = InfoExtractor(locator=self.locator, decoder=decoder)
        self.metadata_extractor = XmpMetadataExtractor(
            prefixes=config.get("xmp_prefixes", DEFAULT_XMP_PREFIXES),
            decoder=decoder,
        )

    @classmethod
    def from_path(cls, path: Path | str, config: ScanConfig | None = None) -> "PdfInfo":
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise PdfInfoReadError(f"Cannot read file {path.name}: {e}") from e
        logger.debug(f"Read {len(data)} bytes from {path}")
        return cls(data, config=config)

    def is_pdf(self) -> bool:
        return is_pdf(self.data, self.header_window)

    def pdf_version(self) -> str | None:
        return pdf_version(self.data, self.header_window)

    def encrypt_refs(self) -> list[str]:
        return self.locator.find_refs(self.data, "Encrypt")

    def is_encrypted(self) -> bool:
        return bool(self.encrypt_refs())

    def info_refs(self) -> list[str]:
        return self.locator.find_refs(self.data, "Info")

    def metadata_refs(self) -> list[str]:
        return self.locator.find_refs(self.data, "Metadata")

    def raw_info_objects(self) -> RawObjectsByRef:
        return self.locator.objects_by_ref(self.data, "Info")

    def raw_metadata_ref_objects(self) -> RawObjectsByRef:
        """Raw /Metadata stream objects keyed by ref, XMP packet inside each one untouched."""
        return self.locator.objects_by_ref(self.data, "Metadata")

    def raw_metadata_objects(self) -> list[bytes]:
        """Every XMP packet in the buffer, whether or not a /Metadata ref points at it."""
        return self.locator.extract_xmp_packets(self.data)

    def info_objects(self) -> InfoObjectsByRef:
        self._check_encryption()
        result: InfoObjectsByRef = {}
        for ref, raw_objects in self.raw_info_objects().items():
            result[ref] = [self.parse_info_object(raw) for raw in raw_objects]
        logger.debug(f"Decoded {sum(len(v) for v in result.values())} /Info object(s) for {len(result)} ref(s)")
        return result

    def metadata_objects(self) -> list[MetadataPacket]:
        self._check_encryption()
        packets: list[MetadataPacket] = []
        for raw in self.raw_metadata_objects():
            packet = self.parse_metadata_object(raw)
            if packet is not None:
                packets.append(packet)
        logger.debug(f"Decoded {len(packets)} XMP packet(s)")
        return packets

    def parse_info_object(self, raw: bytes, buffer: bytes | None = None) -> InfoDictionary:
        """
        Decode one raw /Info object. Indirect field values are looked up in
        ``buffer``, which defaults to the whole document (or to ``raw``
        when this instance wraps an empty buffer).
        """
        if buffer is None:
            buffer = self.data or raw
        return self.info_extractor.extract(raw, buffer)

    def parse_metadata_object(self, raw: bytes) -> MetadataPacket | None:
        return self.metadata_extractor.extract(raw)

    def summary(self) -> DocumentInfo:
        return DocumentInfoBuilder(
            info_objects=self.info_objects(),
            metadata_objects=self.metadata_objects(),
            pdf_version=self.pdf_version(),
            encrypted=self.is_encrypted(),
        ).build_document_info()

    def _check_encryption(self) -> None:
        if not self.raise_on_encrypted:
            return
        refs = self.encrypt_refs()
        if refs:
            raise PdfEncryptedError(refs)
