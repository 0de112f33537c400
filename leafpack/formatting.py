"""Formatting helpers for identifiers, result codes, durations and versions."""

from __future__ import annotations

import string
import time
from dataclasses import dataclass

_CONTENT_ID_SIZE = 0x10
_UID_SIZE = 0x10
_HALF_LENGTH = 0x10
_U64_MASK = 0xFFFF_FFFF_FFFF_FFFF


@dataclass(frozen=True)
class PendingUpdateVersion:
    """A firmware version waiting to be installed by a pending system update."""

    major: int
    minor: int
    micro: int

    def display_version(self) -> str:
        """The version as shown to the user, ``major.minor.micro``."""
        return f"{self.major}.{self.minor}.{self.micro}"


def current_time_string() -> str:
    """The local wall-clock time as ``HH:MM:SS``."""
    now = time.localtime()
    return f"{now.tm_hour:02d}:{now.tm_min:02d}:{now.tm_sec:02d}"


def format_hex128(uid: bytes) -> str:
    """Format a 16-byte user id as upper-case hex, each byte without zero padding."""
    uid = bytes(uid)
    if len(uid) != _UID_SIZE:
        raise ValueError(f"a user id is {_UID_SIZE} bytes, not {len(uid)}")
    return "".join(f"{byte:X}" for byte in uid)


def format_result(rc: int) -> str:
    """Format a result code as ``2MMM-DDDD`` (module plus 2000, then description)."""
    module = rc & 0x1FF
    description = (rc >> 9) & 0x1FFF
    return f"{2000 + module:04d}-{description:04d}"


def format_time(sec: int) -> str:
    """Format a duration in seconds as hours, minutes and seconds."""
    if sec <= 60:
        return f"{sec} s"
    mins, secs_rem = divmod(sec, 60)
    secs_part = f" {secs_rem} s" if secs_rem > 0 else ""
    if mins > 60:
        hours, mins_rem = divmod(mins, 60)
        mins_part = f" {mins_rem} min" if mins_rem > 0 else ""
        return f"{hours} h{mins_part}{secs_part}"
    return f"{mins} min{secs_part}"


def content_id_as_string(content_id: bytes) -> str:
    """Format a 16-byte content id as the 32 lower-case hex digits of its NCA name."""
    content_id = bytes(content_id)
    if len(content_id) != _CONTENT_ID_SIZE:
        raise ValueError(f"a content id is {_CONTENT_ID_SIZE} bytes, not {len(content_id)}")
    return content_id.hex()


def _parse_hex_prefix(text: str) -> int:
    """Parse the leading hex number of ``text``; text that holds none gives 0."""
    text = text.lstrip()
    negative = False
    if text[:1] in ("+", "-"):
        negative = text[0] == "-"
        text = text[1:]
    if text[:2].lower() == "0x" and text[2:3] in string.hexdigits and text[2:3]:
        text = text[2:]
    digits = []
    for char in text:
        if char not in string.hexdigits:
            break
        digits.append(char)
    if not digits:
        return 0
    value = min(int("".join(digits), 16), _U64_MASK)
    return (-value) & _U64_MASK if negative else value


def string_as_content_id(text: str) -> bytes:
    """Parse a content id from the first 32 hex digits of ``text``.

    Each 16-character half is read as far as it holds hex digits; a half that
    holds none gives zero bytes.
    """
    upper_half = _parse_hex_prefix(text[:_HALF_LENGTH])
    lower_half = _parse_hex_prefix(text[_HALF_LENGTH:2 * _HALF_LENGTH])
    return upper_half.to_bytes(8, "big") + lower_half.to_bytes(8, "big")


def decode_pending_update_version(raw_version: int) -> PendingUpdateVersion:
    """Decode the packed version word found in a system update's content meta."""
    return PendingUpdateVersion(
        major=(raw_version >> 26) & 0x3F,
        minor=(raw_version >> 20) & 0x3F,
        micro=(raw_version >> 16) & 0x3F,
    )