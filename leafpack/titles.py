"""Title and ticket identifiers: application ids, rights ids and title keys."""

from __future__ import annotations

from enum import Enum

_U64_MAX = 0xFFFF_FFFF_FFFF_FFFF
_RIGHTS_ID_SIZE = 0x10
_TITLE_KEY_SIZE = 0x10


class ApplicationIdMask(Enum):
    """The kind of title an application id belongs to, judged by its leading digits."""

    OFFICIAL = 0
    HOMEBREW = 1
    INVALID = 2


def format_application_id(app_id: int) -> str:
    """Format a 64-bit application id as 16 upper-case, zero-padded hex digits."""
    if not 0 <= app_id <= _U64_MAX:
        raise ValueError(f"application id {app_id} does not fit in 64 bits")
    return f"{app_id:016X}"


def get_application_id_mask(app_id: int) -> ApplicationIdMask:
    """Classify an application id: ``01…`` is official, ``05…`` is homebrew."""
    prefix = format_application_id(app_id)[:2]
    if prefix == "01":
        return ApplicationIdMask.OFFICIAL
    if prefix == "05":
        return ApplicationIdMask.HOMEBREW
    return ApplicationIdMask.INVALID


def title_key_string(key_block: bytes) -> str:
    """Format the title key (the first 16 bytes of a ticket's key block) as upper-case hex.

    Each byte is written without zero padding.
    """
    key_block = bytes(key_block)
    if len(key_block) < _TITLE_KEY_SIZE:
        raise ValueError(f"a title key block holds at least {_TITLE_KEY_SIZE} bytes")
    return "".join(f"{byte:X}" for byte in key_block[:_TITLE_KEY_SIZE])


def _check_rights_id(rights_id: bytes) -> bytes:
    rights_id = bytes(rights_id)
    if len(rights_id) != _RIGHTS_ID_SIZE:
        raise ValueError(f"a rights id is {_RIGHTS_ID_SIZE} bytes, not {len(rights_id)}")
    return rights_id


def rights_id_application_id(rights_id: bytes) -> int:
    """The application id stored big-endian in the first half of a rights id."""
    return int.from_bytes(_check_rights_id(rights_id)[:8], "big")


def rights_id_key_generation(rights_id: bytes) -> int:
    """The key generation field stored big-endian in the second half of a rights id."""
    return int.from_bytes(_check_rights_id(rights_id)[8:], "big")


def rights_id_string(rights_id: bytes) -> str:
    """Format a rights id as 32 upper-case hex digits, the form used in ticket file names."""
    return format_application_id(rights_id_application_id(rights_id)) + format_application_id(
        rights_id_key_generation(rights_id)
    )