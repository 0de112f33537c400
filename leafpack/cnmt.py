"""Packaged content meta (CNMT) parsing and the install-time content meta layout."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import ClassVar, Union


class InvalidContentMetaError(ValueError):
    """Raised when content meta data cannot be read or laid out."""


class ContentMetaType(IntEnum):
    UNKNOWN = 0x00
    SYSTEM_PROGRAM = 0x01
    SYSTEM_DATA = 0x02
    SYSTEM_UPDATE = 0x03
    BOOT_IMAGE_PACKAGE = 0x04
    BOOT_IMAGE_PACKAGE_SAFE = 0x05
    APPLICATION = 0x80
    PATCH = 0x81
    ADD_ON_CONTENT = 0x82
    DELTA = 0x83


class ContentType(IntEnum):
    META = 0
    PROGRAM = 1
    DATA = 2
    CONTROL = 3
    HTML_DOCUMENT = 4
    LEGAL_INFORMATION = 5
    DELTA_FRAGMENT = 6


class _Packed:
    """Shared encode/decode for fixed-layout records built from plain fields."""

    STRUCT: ClassVar[struct.Struct]
    SIZE: ClassVar[int]

    @classmethod
    def unpack(cls, data: bytes):
        return cls(*cls.STRUCT.unpack_from(data))

    def pack(self) -> bytes:
        return self.STRUCT.pack(*self.__dict__.values())


@dataclass(frozen=True)
class ContentMetaHeader(_Packed):
    extended_header_size: int = 0
    content_count: int = 0
    content_meta_count: int = 0
    attributes: int = 0
    storage_id: int = 0

    STRUCT: ClassVar[struct.Struct] = struct.Struct("<HHHBB")
    SIZE: ClassVar[int] = 0x8


@dataclass(frozen=True)
class ContentInfo:
    """A content id with its 48-bit size and content type."""

    content_id: bytes = bytes(16)
    size: int = 0
    content_type: int = ContentType.META
    id_offset: int = 0

    STRUCT: ClassVar[struct.Struct] = struct.Struct("<16s6sBB")
    SIZE: ClassVar[int] = 0x18

    @classmethod
    def unpack(cls, data: bytes) -> ContentInfo:
        content_id, size, content_type, id_offset = cls.STRUCT.unpack_from(data)
        return cls(content_id, int.from_bytes(size, "little"), content_type, id_offset)

    def pack(self) -> bytes:
        return self.STRUCT.pack(
            self.content_id,
            (self.size & 0xFFFF_FFFF_FFFF).to_bytes(6, "little"),
            self.content_type,
            self.id_offset,
        )


@dataclass(frozen=True)
class PackagedContentInfo:
    """A content info preceded by the content's SHA-256 hash."""

    hash: bytes = bytes(32)
    info: ContentInfo = field(default_factory=ContentInfo)

    SIZE: ClassVar[int] = 0x38

    @classmethod
    def unpack(cls, data: bytes) -> PackagedContentInfo:
        if len(data) < cls.SIZE:
            raise struct.error(f"packaged content info needs {cls.SIZE} bytes")
        return cls(bytes(data[:32]), ContentInfo.unpack(data[32:cls.SIZE]))

    def pack(self) -> bytes:
        return self.hash + self.info.pack()


@dataclass(frozen=True)
class PackagedContentMetaHeader:
    app_id: int = 0
    title_version: int = 0
    type: int = ContentMetaType.UNKNOWN
    header: ContentMetaHeader = field(default_factory=ContentMetaHeader)
    required_download_system_version: int = 0

    STRUCT: ClassVar[struct.Struct] = struct.Struct("<QIBx8s2xI4x")
    SIZE: ClassVar[int] = 0x20

    @classmethod
    def unpack(cls, data: bytes) -> PackagedContentMetaHeader:
        app_id, version, meta_type, header, required = cls.STRUCT.unpack_from(data)
        return cls(app_id, version, meta_type, ContentMetaHeader.unpack(header), required)

    def pack(self) -> bytes:
        return self.STRUCT.pack(
            self.app_id,
            self.title_version,
            self.type,
            self.header.pack(),
            self.required_download_system_version,
        )


@dataclass(frozen=True)
class SystemUpdateExtendedHeader(_Packed):
    extended_data_size: int = 0

    STRUCT: ClassVar[struct.Struct] = struct.Struct("<I")
    SIZE: ClassVar[int] = 0x4


@dataclass(frozen=True)
class ApplicationExtendedHeader(_Packed):
    patch_id: int = 0
    required_system_version: int = 0
    required_application_version: int = 0

    STRUCT: ClassVar[struct.Struct] = struct.Struct("<QII")
    SIZE: ClassVar[int] = 0x10


@dataclass(frozen=True)
class PatchExtendedHeader(_Packed):
    application_id: int = 0
    required_system_version: int = 0
    extended_data_size: int = 0

    STRUCT: ClassVar[struct.Struct] = struct.Struct("<QII8x")
    SIZE: ClassVar[int] = 0x18


@dataclass(frozen=True)
class AddOnContentExtendedHeader(_Packed):
    application_id: int = 0
    required_application_version: int = 0
    content_accessibilities: int = 0

    STRUCT: ClassVar[struct.Struct] = struct.Struct("<QIB3x")
    SIZE: ClassVar[int] = 0x10


@dataclass(frozen=True)
class DeltaExtendedHeader(_Packed):
    application_id: int = 0
    extended_data_size: int = 0

    STRUCT: ClassVar[struct.Struct] = struct.Struct("<QI4x")
    SIZE: ClassVar[int] = 0x10


ExtendedHeader = Union[
    SystemUpdateExtendedHeader,
    ApplicationExtendedHeader,
    PatchExtendedHeader,
    AddOnContentExtendedHeader,
    DeltaExtendedHeader,
]

_EXTENDED_HEADERS: dict[int, type] = {
    ContentMetaType.SYSTEM_UPDATE: SystemUpdateExtendedHeader,
    ContentMetaType.APPLICATION: ApplicationExtendedHeader,
    ContentMetaType.PATCH: PatchExtendedHeader,
    ContentMetaType.ADD_ON_CONTENT: AddOnContentExtendedHeader,
    ContentMetaType.DELTA: DeltaExtendedHeader,
}

_WITH_EXTENDED_DATA = frozenset(
    {ContentMetaType.SYSTEM_UPDATE, ContentMetaType.PATCH, ContentMetaType.DELTA}
)
_WITH_REQUIRED_SYSTEM_VERSION = frozenset({ContentMetaType.APPLICATION, ContentMetaType.PATCH})


@dataclass
class PackagedContentMeta:
    """A parsed packaged content meta: header, extended header and content list."""

    header: PackagedContentMetaHeader
    contents: list[PackagedContentInfo] = field(default_factory=list)
    extended_header: ExtendedHeader | None = None

    def create_content_meta_for_install(
        self, self_content_info: ContentInfo, ignore_required_fw_ver: bool
    ) -> bytes:
        """Lay out the content meta as stored in the meta database.

        The meta's own content info comes first, followed by every packaged
        content. Any extended data region is left zeroed.
        """
        meta_type = self.header.type
        ext_size = self.header.header.extended_header_size
        ext = self.extended_header

        if meta_type in _EXTENDED_HEADERS:
            if not isinstance(ext, _EXTENDED_HEADERS[meta_type]):
                raise InvalidContentMetaError(
                    f"extended header does not match content meta type {meta_type:#x}"
                )
            if ignore_required_fw_ver and meta_type in _WITH_REQUIRED_SYSTEM_VERSION:
                ext = replace(ext, required_system_version=0)
            ext_bytes = ext.pack()
            if len(ext_bytes) != ext_size:
                raise InvalidContentMetaError(
                    f"extended header size {ext_size:#x} does not match its type"
                )
        else:
            ext_bytes = bytes(ext_size)

        extra_size = ext.extended_data_size if meta_type in _WITH_EXTENDED_DATA else 0
        header = replace(self.header.header, content_count=(len(self.contents) + 1) & 0xFFFF)
        infos = [self_content_info, *(content.info for content in self.contents)]
        return b"".join(
            [header.pack(), ext_bytes, *(info.pack() for info in infos), bytes(extra_size)]
        )


def read_content_meta(data: bytes) -> PackagedContentMeta:
    """Parse a packaged content meta (.cnmt) file."""
    data = bytes(data)
    if len(data) < PackagedContentMetaHeader.SIZE:
        raise InvalidContentMetaError("content meta is shorter than its header")
    header = PackagedContentMetaHeader.unpack(data)

    ext_cls = _EXTENDED_HEADERS.get(header.type)
    if ext_cls is None:
        raise InvalidContentMetaError(f"unsupported content meta type {header.type:#x}")
    ext_size = header.header.extended_header_size
    if ext_size != ext_cls.SIZE:
        raise InvalidContentMetaError(
            f"extended header size {ext_size:#x} is wrong for content meta type {header.type:#x}"
        )

    ext_start = PackagedContentMetaHeader.SIZE
    contents_start = ext_start + ext_size
    contents_end = contents_start + header.header.content_count * PackagedContentInfo.SIZE
    if len(data) < contents_end:
        raise InvalidContentMetaError("content meta is truncated")

    extended_header = ext_cls.unpack(data[ext_start:contents_start])
    contents = [
        PackagedContentInfo.unpack(data[offset:offset + PackagedContentInfo.SIZE])
        for offset in range(contents_start, contents_end, PackagedContentInfo.SIZE)
    ]
    return PackagedContentMeta(header, contents, extended_header)