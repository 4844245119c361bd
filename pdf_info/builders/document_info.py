import re
from datetime import datetime
from typing import Any
from ..dataclasses import DocumentInfo
from ..types import InfoDictionary, InfoObjectsByRef, MetadataPacket

_PDF_DATE = re.compile(
    r"^(?:D:)?(\d{4})(\d{2})?(\d{2})?(\d{2})?(\d{2})?(\d{2})?\s*(?:(Z)|([+-])(\d{2})'?(\d{2})?'?)?"
)
_ISO_DATE = re.compile(r"^\d{4}(?:-\d{2}(?:-\d{2}(?:T\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:Z|[+-]\d{2}:\d{2})?)?)?)?$")

# DocumentInfo field -> (/Info key, XMP fallbacks in order of preference)
_FIELDS: dict[str, tuple[str, tuple[tuple[str, str], ...]]] = {
    "title": ("Title", (("dc", "title"),)),
    "author": ("Author", (("dc", "creator"),)),
    "subject": ("Subject", (("dc", "description"),)),
    "keywords": ("Keywords", (("pdf", "Keywords"),)),
    "creator": ("Creator", (("xmp", "CreatorTool"), ("xap", "CreatorTool"))),
    "producer": ("Producer", (("pdf", "Producer"),)),
}
_DATE_FIELDS: dict[str, tuple[str, tuple[tuple[str, str], ...]]] = {
    "creation_date": ("CreationDate", (("xmp", "CreateDate"), ("xap", "CreateDate"))),
    "mod_date": ("ModDate", (("xmp", "ModifyDate"), ("xap", "ModifyDate"))),
}


class DocumentInfoBuilder:

    def __init__(
            self,
            info_objects: InfoObjectsByRef,
            metadata_objects: list[MetadataPacket],
            pdf_version: str | None = None,
            encrypted: bool = False,
    ):
        self.info_objects = info_objects
        self.metadata_objects = metadata_objects
        self.pdf_version = pdf_version
        self.encrypted = encrypted

    def build_document_info(self) -> DocumentInfo:
        """
        Assemble a DocumentInfo from the decoded /Info dictionaries and XMP packets.
        /Info wins over XMP, and among /Info objects the newest (last found) wins.
        """
        info = self._merge_info()
        xmp = self._merge_xmp()

        values: dict[str, Any] = {}
        for attr, (info_key, xmp_keys) in _FIELDS.items():
            values[attr] = self._pick(info.get(info_key), [xmp.get(k) for k in xmp_keys])
        for attr, (info_key, xmp_keys) in _DATE_FIELDS.items():
            values[attr] = self._pick(
                self._parse_pdf_date(info.get(info_key)),
                [self._parse_iso_date(xmp.get(k)) for k in xmp_keys],
            )

        return DocumentInfo(
            pdf_version=self.pdf_version,
            encrypted=self.encrypted,
            info=info,
            xmp=xmp,
            **values,
        )

    def _merge_info(self) -> InfoDictionary:
        # incremental updates append newer objects, so later dictionaries override earlier ones
        merged: InfoDictionary = {}
        for dictionaries in self.info_objects.values():
            for dictionary in dictionaries:
                merged.update(dictionary)
        return merged

    def _merge_xmp(self) -> MetadataPacket:
        merged: MetadataPacket = {}
        for packet in self.metadata_objects:
            for key, value in packet.items():
                merged.setdefault(key, value)
        return merged

    def _pick(self, primary: str | None, fallbacks: list[str | None]) -> str | None:
        for value in [primary, *fallbacks]:
            if value:
                return value
        return None

    def _parse_pdf_date(self, value: Any) -> str | None:
        """
        Converts PDF-style date strings like 'D:20230805123000Z' or
        "D:20191125152027+01'00'" to ISO 8601.
        """
        if not isinstance(value, str):
            return None
        match = _PDF_DATE.match(value.strip())
        if match is None:
            return None
        year, month, day, hour, minute, second, utc, sign, tz_hour, tz_minute = match.groups()
        month = month or "01"
        day = day or "01"
        hour = hour or "00"
        minute = minute or "00"
        second = second or "00"
        try:
            datetime(int(year), int(month), int(day), int(hour), int(minute), int(second))
        except ValueError:
            return None
        if sign and not utc:
            tz = f"{sign}{tz_hour}:{tz_minute or '00'}"
        else:
            tz = "Z"
        return f"{year}-{month}-{day}T{hour}:{minute}:{second}{tz}"

    def _parse_iso_date(self, value: str | None) -> str | None:
        if not value or not _ISO_DATE.match(value.strip()):
            return None
        return value.strip()
