"""Locating and ordering the parts of an NSP package that an install needs."""

from __future__ import annotations

import struct
from collections.abc import Iterable
from dataclasses import dataclass
from typing import ClassVar

from leafpack.cnmt import ContentInfo, ContentType, PackagedContentMeta
from leafpack.formatting import content_id_as_string
from leafpack.pfs0 import PFS0

TICKET_EXTENSION = "tik"
CNMT_NCA_SUFFIX = "cnmt.nca"
INSTALL_TYPE_FULL = 0


class InvalidPackageError(ValueError):
    """Raised when a package lacks something an install needs."""


@dataclass(frozen=True)
class InstallFiles:
    """Where the content meta NCA and the ticket sit inside a package."""

    cnmt_nca_name: str
    cnmt_nca_index: int
    cnmt_nca_size: int
    ticket_name: str = ""
    ticket_index: int | None = None
    ticket_size: int = 0

    @property
    def has_ticket(self) -> bool:
        return self.ticket_size > 0


@dataclass(frozen=True)
class ContentMetaKey:
    """The key under which a title's content meta is stored in the meta database."""

    id: int
    version: int
    type: int
    install_type: int = INSTALL_TYPE_FULL

    STRUCT: ClassVar[struct.Struct] = struct.Struct("<QIBB2x")
    SIZE: ClassVar[int] = 0x10

    def pack(self) -> bytes:
        """Encode the key to its 16-byte wire form."""
        return self.STRUCT.pack(self.id, self.version, self.type, self.install_type)

    @classmethod
    def unpack(cls, data: bytes) -> ContentMetaKey:
        """Decode a key from the first 16 bytes of ``data``."""
        return cls(*cls.STRUCT.unpack_from(data))


def _extension(name: str) -> str:
    return name.rpartition(".")[2] if "." in name else ""


def locate_install_files(pfs0: PFS0) -> InstallFiles:
    """Find the content meta NCA and the ticket in ``pfs0``.

    When several files match, the last one in table order is taken.
    """
    if not pfs0.ok:
        raise InvalidPackageError(f"{pfs0.path} is not a valid PFS0 archive")

    cnmt: tuple[str, int, int] | None = None
    ticket: tuple[str, int, int] = ("", None, 0)  # type: ignore[assignment]
    for idx, name in enumerate(pfs0.file_names()):
        if _extension(name) == TICKET_EXTENSION:
            ticket = (name, idx, pfs0.get_file_size(idx))
        elif name.endswith(CNMT_NCA_SUFFIX):
            cnmt = (name, idx, pfs0.get_file_size(idx))

    if cnmt is None:
        raise InvalidPackageError("package holds no content meta NCA")
    if cnmt[2] == 0:
        raise InvalidPackageError(f"content meta NCA {cnmt[0]!r} is empty")
    return InstallFiles(*cnmt, *ticket)


def content_file_name(info: ContentInfo) -> str:
    """The name a content carries inside a package: ``<id>.nca``, or ``<id>.cnmt.nca`` for meta."""
    name = content_id_as_string(info.content_id)
    if info.content_type == ContentType.META:
        name += ".cnmt"
    return name + ".nca"


def meta_key_for(meta: PackagedContentMeta) -> ContentMetaKey:
    """The meta database key for a packaged content meta, as a full install."""
    header = meta.header
    return ContentMetaKey(
        id=header.app_id,
        version=header.title_version,
        type=header.type,
        install_type=INSTALL_TYPE_FULL,
    )


def install_contents(
    meta: PackagedContentMeta,
    meta_content_info: ContentInfo,
    meta_already_installed: bool,
) -> list[ContentInfo]:
    """The contents to write, in order: the meta NCA unless already present, then the rest."""
    contents = [] if meta_already_installed else [meta_content_info]
    contents.extend(content.info for content in meta.contents)
    return contents


def content_file_indices(pfs0: PFS0, contents: Iterable[ContentInfo]) -> list[int]:
    """The archive index of each content's file, in the order given."""
    indices = []
    for info in contents:
        name = content_file_name(info)
        idx = pfs0.get_file_index_by_name(name)
        if idx is None:
            raise InvalidPackageError(f"package holds no file {name!r}")
        indices.append(idx)
    return indices