import pytest

from leafpack.titles import (
    ApplicationIdMask,
    format_application_id,
    get_application_id_mask,
    rights_id_application_id,
    rights_id_key_generation,
    rights_id_string,
    title_key_string,
)


def test_format_application_id_pads_to_sixteen_digits():
    assert format_application_id(0x10000) == "0000000000010000"


def test_format_application_id_is_upper_case():
    text = format_application_id(0x0100ABCDEF000000)
    assert text == text.upper()
    assert int(text, 16) == 0x0100ABCDEF000000
    assert len(text) == 16


def test_format_application_id_maximum():
    assert format_application_id(0xFFFFFFFFFFFFFFFF) == "F" * 16


@pytest.mark.parametrize("bad", [-1, 1 << 64])
def test_format_application_id_rejects_out_of_range(bad):
    with pytest.raises(ValueError):
        format_application_id(bad)


@pytest.mark.parametrize(
    "app_id, expected",
    [
        (0x0100000000010000, ApplicationIdMask.OFFICIAL),
        (0x01FFFFFFFFFFFFFF, ApplicationIdMask.OFFICIAL),
        (0x0500000000000000, ApplicationIdMask.HOMEBREW),
        (0x0000000000000001, ApplicationIdMask.INVALID),
        (0x0400000000000000, ApplicationIdMask.INVALID),
        (0x1000000000000000, ApplicationIdMask.INVALID),
    ],
)
def test_get_application_id_mask(app_id, expected):
    assert get_application_id_mask(app_id) is expected


def test_title_key_string_has_no_zero_padding():
    assert title_key_string(bytes(range(16))) == "0123456789ABCDEF"


def test_title_key_string_uses_only_first_sixteen_bytes():
    block = bytes([0xAB] * 16) + bytes([0x11] * 240)
    assert title_key_string(block) == "AB" * 16


def test_title_key_string_rejects_short_block():
    with pytest.raises(ValueError):
        title_key_string(bytes(15))


def test_rights_id_fields_are_big_endian_halves():
    app_id = 0x0100000000010000
    key_gen = 0x0000000000000005
    rights_id = app_id.to_bytes(8, "big") + key_gen.to_bytes(8, "big")
    assert rights_id_application_id(rights_id) == app_id
    assert rights_id_key_generation(rights_id) == key_gen


def test_rights_id_string_matches_raw_hex():
    rights_id = bytes.fromhex("0100000000010000000000000000000a")
    assert rights_id_string(rights_id) == rights_id.hex().upper()


def test_rights_id_string_joins_formatted_halves():
    rights_id = bytes(range(16))
    assert rights_id_string(rights_id) == (
        format_application_id(rights_id_application_id(rights_id))
        + format_application_id(rights_id_key_generation(rights_id))
    )


@pytest.mark.parametrize("size", [0, 8, 15, 17])
def test_rights_id_rejects_wrong_size(size):
    with pytest.raises(ValueError):
        rights_id_application_id(bytes(size))
    with pytest.raises(ValueError):
        rights_id_string(bytes(size))