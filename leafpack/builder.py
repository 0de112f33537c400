"""Packing a directory of files into a PFS0 (NSP) archive."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

from leafpack.pfs0 import MAGIC, WORK_BUFFER_SIZE, PFS0FileEntry, PFS0Header

_STRING_TABLE_ALIGNMENT = 0x20


def generate_from(
    input_path: str | os.PathLike[str],
    output_nsp: str | os.PathLike[str],
    callback: Callable[[int, int], None] | None = None,
) -> bool:
    """Write every regular file directly inside ``input_path`` into a PFS0 archive.

    Files are stored in name order. After each chunk copied, ``callback`` is
    called with the bytes written so far of the current file and the total
    size of all files.
    """
    source_dir = Path(input_path)
    files = sorted((p for p in source_dir.iterdir() if p.is_file()), key=lambda p: p.name)

    entries: list[PFS0FileEntry] = []
    string_table = bytearray()
    total_size = 0
    for path in files:
        size = path.stat().st_size
        entries.append(
            PFS0FileEntry(offset=total_size, size=size, string_table_offset=len(string_table))
        )
        string_table += path.name.encode("utf-8") + b"\0"
        total_size += size

    padded_size = (len(string_table) + _STRING_TABLE_ALIGNMENT - 1) & ~(_STRING_TABLE_ALIGNMENT - 1)
    string_table += bytes(padded_size - len(string_table))
    header = PFS0Header(magic=MAGIC, file_count=len(files), string_table_size=padded_size)

    with open(output_nsp, "wb") as out:
        out.write(header.pack())
        for entry in entries:
            out.write(entry.pack())
        out.write(string_table)
        for path, entry in zip(files, entries):
            written = 0
            remaining = entry.size
            with path.open("rb") as source:
                while remaining:
                    chunk = source.read(min(remaining, WORK_BUFFER_SIZE))
                    if not chunk:
                        raise EOFError(f"{path} shrank while being packed")
                    out.write(chunk)
                    written += len(chunk)
                    remaining -= len(chunk)
                    if callback is not None:
                        callback(written, total_size)
    return True