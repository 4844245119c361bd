import re
from dataclasses import dataclass, field, asdict
from typing import Any, Optional
from .types import InfoDictionary, MetadataPacket, RefKind

_REF_PARTS = re.compile(r"^/(Info|Metadata|Encrypt)\s*(\d+)(?:\s+(\d+))?\s*R$")


@dataclass(frozen=True)
class IndirectRef:
    """
    An indirect reference as it was found in the buffer, e.g. ``/Info 1 0 R``.
    The literal text is kept untouched because callers key results by it.
    """
    kind: RefKind
    object_number: int
    generation: Optional[int]
    literal: str

    @classmethod
    def parse(cls, literal: str) -> Optional["IndirectRef"]:
        match = _REF_PARTS.match(literal)
        if match is None:
            return None
        kind, number, generation = match.groups()
        return cls(
            kind=kind,  # type: ignore[arg-type]
            object_number=int(number),
            generation=int(generation) if generation is not None else None,
            literal=literal,
        )

    @property
    def object_id(self) -> str:
        """The ``"<number> <generation>"`` part of the literal, whitespace as found."""
        return self.literal[len(self.kind) + 1:-1].strip()

    def __str__(self) -> str:
        return self.literal


@dataclass
class DocumentInfo:
    """
    Merged view of a document's /Info dictionaries and XMP packets.
    """
    title: Optional[str] = None
    author: Optional[str] = None
    subject: Optional[str] = None
    keywords: Optional[str] = None
    creator: Optional[str] = None
    producer: Optional[str] = None
    creation_date: Optional[str] = None     # ISO 8601
    mod_date: Optional[str] = None          # ISO 8601
    pdf_version: Optional[str] = None
    encrypted: bool = False
    info: InfoDictionary = field(default_factory=dict)
    xmp: MetadataPacket = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """
        Converts the DocumentInfo into a serializable dictionary.
        XMP keys are flattened to ``prefix:LocalName``.
        """
        data = asdict(self)
        data["xmp"] = {f"{prefix}:{name}": value for (prefix, name), value in self.xmp.items()}
        return data
