"""Amiibo identity records and export to the emuiibo virtual amiibo layout."""

from __future__ import annotations

import json
import os
import shutil
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Any, ClassVar

MII_CHARINFO_FILE = "mii-charinfo.bin"
AMIIBO_JSON_FILE = "amiibo.json"
AMIIBO_FLAG_FILE = "amiibo.flag"


@dataclass(frozen=True)
class CharacterId:
    """The game character and its variant, the first three bytes of an amiibo id."""

    game_character_id: int
    character_variant: int


@dataclass(frozen=True)
class AmiiboId:
    """The seven-byte packed identity of an amiibo figure."""

    character_id: CharacterId
    series: int
    model_number: int
    figure_type: int

    STRUCT: ClassVar[struct.Struct] = struct.Struct("<HBBHB")
    SIZE: ClassVar[int] = 7

    @classmethod
    def unpack(cls, data: bytes) -> AmiiboId:
        """Decode an id from the first seven bytes of ``data``."""
        game_character_id, variant, series, model_number, figure_type = cls.STRUCT.unpack_from(
            bytes(data)
        )
        return cls(CharacterId(game_character_id, variant), series, model_number, figure_type)


def fix_model_amiibo_id(raw_id: bytes) -> bytes:
    """Rearrange the eight-byte id reported by the NFC service into the stored form."""
    fixed = bytearray(raw_id)
    if len(fixed) != 8:
        raise ValueError(f"a model amiibo id is 8 bytes, not {len(fixed)}")
    fixed[5] = fixed[4]
    fixed[4] = 0
    fixed[7] = 2
    return bytes(fixed)


@dataclass(frozen=True)
class AmiiboDate:
    day: int
    month: int
    year: int

    def to_json_dict(self) -> dict[str, int]:
        return {"d": self.day & 0xFF, "m": self.month & 0xFF, "y": self.year & 0xFFFF}


@dataclass(frozen=True)
class AmiiboDump:
    """Everything read from an amiibo tag that an emuiibo export needs.

    ``model_amiibo_id`` is the eight-byte id already passed through
    :func:`fix_model_amiibo_id`.
    """

    name: str
    uuid: bytes
    first_write_date: AmiiboDate
    last_write_date: AmiiboDate
    version: int
    write_counter: int
    model_amiibo_id: bytes
    mii_charinfo: bytes = b""

    @property
    def amiibo_id(self) -> AmiiboId:
        return AmiiboId.unpack(self.model_amiibo_id)

    def to_json_dict(self) -> dict[str, Any]:
        """The contents of the exported ``amiibo.json``."""
        amiibo_id = self.amiibo_id
        model_number = int.from_bytes(
            (amiibo_id.model_number & 0xFFFF).to_bytes(2, "little"), "big"
        )
        return {
            "first_write_date": self.first_write_date.to_json_dict(),
            "last_write_date": self.last_write_date.to_json_dict(),
            "mii_charinfo_file": MII_CHARINFO_FILE,
            "uuid": list(self.uuid),
            "name": self.name,
            "version": self.version & 0xFFFF,
            "write_counter": self.write_counter & 0xFFFF,
            "id": {
                "character_variant": amiibo_id.character_id.character_variant,
                "game_character_id": amiibo_id.character_id.game_character_id,
                "series": amiibo_id.series,
                "model_number": model_number,
                "figure_type": amiibo_id.figure_type,
            },
        }


def dump_to_emuiibo(dump: AmiiboDump, root: str | os.PathLike[str]) -> Path:
    """Export ``dump`` under ``root/emuiibo/amiibo/<name>`` and return that directory.

    Anything already in the amiibo's directory is removed first.
    """
    name = dump.name
    if not name or name in (".", "..") or "/" in name or "\\" in name:
        raise ValueError(f"amiibo name {name!r} cannot be used as a directory name")

    amiibo_root = Path(root) / "emuiibo" / "amiibo"
    amiibo_root.mkdir(parents=True, exist_ok=True)
    amiibo_dir = amiibo_root / name
    if amiibo_dir.exists():
        shutil.rmtree(amiibo_dir)
    amiibo_dir.mkdir()

    (amiibo_dir / AMIIBO_FLAG_FILE).touch()
    (amiibo_dir / MII_CHARINFO_FILE).write_bytes(dump.mii_charinfo)
    text = json.dumps(dump.to_json_dict(), indent=4, sort_keys=True, ensure_ascii=False)
    (amiibo_dir / AMIIBO_JSON_FILE).write_bytes(text.encode("utf-8"))
    return amiibo_dir