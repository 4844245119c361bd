from typing import Literal, TypeAlias, TypedDict
from typing_extensions import NotRequired

RefKind: TypeAlias = Literal["Info", "Metadata", "Encrypt"]

InfoDictionary: TypeAlias = dict[str, str]
MetadataKey: TypeAlias = tuple[str, str]
MetadataPacket: TypeAlias = dict[MetadataKey, str]

RawObjectsByRef: TypeAlias = dict[str, list[bytes]]
InfoObjectsByRef: TypeAlias = dict[str, list[InfoDictionary]]

Span: TypeAlias = tuple[int, int]


class ScanConfig(TypedDict, total=False):

    header_window: NotRequired[int]
    max_object_id_length: NotRequired[int]
    xmp_prefixes: NotRequired[tuple[str, ...]]
    raise_on_encrypted: NotRequired[bool]
