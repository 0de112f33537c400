"""Reading of PFS0 partition file systems, the container format of NSP packages."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, ClassVar

MAGIC = 0x30534650
"""The little-endian value of the ASCII bytes ``PFS0``."""

WORK_BUFFER_SIZE = 0x800000
"""Chunk size used when copying a contained file out of the archive."""


@dataclass(frozen=True)
class PFS0Header:
    """The fixed 16-byte header at the start of a PFS0 archive."""

    magic: int = MAGIC
    file_count: int = 0
    string_table_size: int = 0
    reserved: int = 0

    STRUCT: ClassVar[struct.Struct] = struct.Struct("<4I")
    SIZE: ClassVar[int] = 0x10

    @classmethod
    def unpack(cls, data: bytes) -> PFS0Header:
        """Decode a header from the first 16 bytes of ``data``."""
        return cls(*cls.STRUCT.unpack_from(data))

    def pack(self) -> bytes:
        """Encode the header to its 16-byte wire form."""
        return self.STRUCT.pack(self.magic, self.file_count, self.string_table_size, self.reserved)

    @property
    def is_valid(self) -> bool:
        return self.magic == MAGIC


@dataclass(frozen=True)
class PFS0FileEntry:
    """One 24-byte entry of the file table."""

    offset: int = 0
    size: int = 0
    string_table_offset: int = 0
    pad: int = 0

    STRUCT: ClassVar[struct.Struct] = struct.Struct("<QQII")
    SIZE: ClassVar[int] = 0x18

    @classmethod
    def unpack(cls, data: bytes) -> PFS0FileEntry:
        """Decode an entry from the first 24 bytes of ``data``."""
        return cls(*cls.STRUCT.unpack_from(data))

    def pack(self) -> bytes:
        """Encode the entry to its 24-byte wire form."""
        return self.STRUCT.pack(self.offset, self.size, self.string_table_offset, self.pad)


@dataclass(frozen=True)
class PFS0File:
    """A file entry together with its name from the string table."""

    entry: PFS0FileEntry
    name: str


def _read_exact_or_zero(handle: BinaryIO, offset: int, size: int) -> bytes:
    handle.seek(offset)
    return handle.read(size).ljust(size, b"\0")


def _name_at(table: bytes, start: int) -> str:
    if start >= len(table):
        return ""
    end = table.find(b"\0", start)
    raw = table[start:] if end < 0 else table[start:end]
    return raw.decode("utf-8", errors="replace")


class PFS0:
    """A PFS0 archive on disk.

    A file that does not carry the PFS0 magic is still opened, but ``ok`` is
    false and it lists no files.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        self.files: list[PFS0File] = []
        self.header_size = 0
        with self.path.open("rb") as handle:
            self.header = PFS0Header.unpack(_read_exact_or_zero(handle, 0, PFS0Header.SIZE))
            if not self.header.is_valid:
                return
            table_offset = PFS0Header.SIZE + PFS0FileEntry.SIZE * self.header.file_count
            table_size = self.header.string_table_size
            self.header_size = table_offset + table_size
            string_table = _read_exact_or_zero(handle, table_offset, table_size)
            raw_entries = _read_exact_or_zero(
                handle, PFS0Header.SIZE, PFS0FileEntry.SIZE * self.header.file_count
            )
        for entry_offset in range(0, len(raw_entries), PFS0FileEntry.SIZE):
            entry = PFS0FileEntry.unpack(raw_entries[entry_offset:entry_offset + PFS0FileEntry.SIZE])
            self.files.append(PFS0File(entry, _name_at(string_table, entry.string_table_offset)))

    @property
    def ok(self) -> bool:
        """Whether the archive carried a valid PFS0 header."""
        return self.header.is_valid

    @property
    def count(self) -> int:
        """The file count stated by the header."""
        return self.header.file_count

    def _is_valid_index(self, idx: int | None) -> bool:
        return idx is not None and 0 <= idx < len(self.files)

    def file_names(self) -> list[str]:
        """Names of all contained files, in table order."""
        return [file.name for file in self.files]

    def get_file_name(self, idx: int | None) -> str:
        """Name of the file at ``idx``, or an empty string for an invalid index."""
        return self.files[idx].name if self._is_valid_index(idx) else ""

    def get_file_size(self, idx: int | None) -> int:
        """Size of the file at ``idx``, or 0 for an invalid index."""
        return self.files[idx].entry.size if self._is_valid_index(idx) else 0

    def _data_offset(self, idx: int, offset: int) -> int:
        if not self._is_valid_index(idx):
            raise IndexError(f"no file at index {idx}")
        return self.header_size + self.files[idx].entry.offset + offset

    def read_from_file(self, idx: int, offset: int, size: int) -> bytes:
        """Read up to ``size`` bytes of the file at ``idx``, starting at ``offset`` within it."""
        position = self._data_offset(idx, offset)
        with self.path.open("rb") as handle:
            handle.seek(position)
            return handle.read(size)

    def save_file(self, idx: int | None, path: str | os.PathLike[str]) -> None:
        """Copy the file at ``idx`` out to ``path``, replacing what is there.

        An invalid index does nothing.
        """
        if not self._is_valid_index(idx):
            return
        remaining = self.get_file_size(idx)
        with self.path.open("rb") as source, open(path, "wb") as target:
            source.seek(self._data_offset(idx, 0))
            while remaining:
                chunk = source.read(min(WORK_BUFFER_SIZE, remaining))
                if not chunk:
                    raise EOFError(f"archive ends before the end of {self.files[idx].name!r}")
                target.write(chunk)
                remaining -= len(chunk)

    def get_file_index_by_name(self, name: str) -> int | None:
        """Index of the file named ``name``, compared without regard to case, or None."""
        wanted = name.lower()
        return next(
            (idx for idx, file in enumerate(self.files) if file.name.lower() == wanted),
            None,
        )