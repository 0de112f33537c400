import pytest

from leafpack.cnmt import (
    AddOnContentExtendedHeader,
    ApplicationExtendedHeader,
    ContentInfo,
    ContentMetaHeader,
    ContentMetaType,
    ContentType,
    DeltaExtendedHeader,
    InvalidContentMetaError,
    PackagedContentInfo,
    PackagedContentMeta,
    PackagedContentMetaHeader,
    PatchExtendedHeader,
    SystemUpdateExtendedHeader,
    read_content_meta,
)

APP_ID = 0x0100000000001000


def _content(seed: int, content_type: ContentType) -> PackagedContentInfo:
    return PackagedContentInfo(
        hash=bytes([seed]) * 32,
        info=ContentInfo(content_id=bytes([seed + 1]) * 16, size=1000 * seed, content_type=content_type),
    )


def _cnmt_bytes(meta_type, ext, contents, ext_size=None):
    ext_bytes = ext.pack() if ext is not None else b""
    header = PackagedContentMetaHeader(
        app_id=APP_ID,
        title_version=0x10000,
        type=int(meta_type),
        header=ContentMetaHeader(
            extended_header_size=len(ext_bytes) if ext_size is None else ext_size,
            content_count=len(contents),
        ),
    )
    return header.pack() + ext_bytes + b"".join(c.pack() for c in contents)


CONTENTS = [_content(1, ContentType.PROGRAM), _content(5, ContentType.CONTROL)]


def test_record_sizes_match_format():
    assert len(PackagedContentMetaHeader().pack()) == PackagedContentMetaHeader.SIZE
    assert len(ContentInfo().pack()) == ContentInfo.SIZE
    assert len(PackagedContentInfo().pack()) == PackagedContentInfo.SIZE
    assert len(ContentMetaHeader().pack()) == ContentMetaHeader.SIZE


def test_content_info_round_trip_with_48_bit_size():
    info = ContentInfo(content_id=bytes(range(16)), size=(1 << 48) - 1, content_type=ContentType.DATA, id_offset=2)
    assert ContentInfo.unpack(info.pack()) == info


def test_packaged_header_round_trip():
    header = PackagedContentMetaHeader(
        app_id=APP_ID,
        title_version=7,
        type=ContentMetaType.PATCH,
        header=ContentMetaHeader(extended_header_size=PatchExtendedHeader.SIZE, content_count=3, attributes=1),
        required_download_system_version=9,
    )
    assert PackagedContentMetaHeader.unpack(header.pack()) == header


def test_read_application_meta():
    ext = ApplicationExtendedHeader(patch_id=APP_ID + 0x800, required_system_version=5, required_application_version=0)
    meta = read_content_meta(_cnmt_bytes(ContentMetaType.APPLICATION, ext, CONTENTS))
    assert meta.header.app_id == APP_ID
    assert meta.header.type == ContentMetaType.APPLICATION
    assert meta.extended_header == ext
    assert meta.contents == CONTENTS


@pytest.mark.parametrize(
    "meta_type, ext",
    [
        (ContentMetaType.SYSTEM_UPDATE, SystemUpdateExtendedHeader(extended_data_size=16)),
        (ContentMetaType.PATCH, PatchExtendedHeader(application_id=APP_ID, required_system_version=3, extended_data_size=8)),
        (ContentMetaType.ADD_ON_CONTENT, AddOnContentExtendedHeader(application_id=APP_ID, required_application_version=1)),
        (ContentMetaType.DELTA, DeltaExtendedHeader(application_id=APP_ID, extended_data_size=4)),
    ],
)
def test_read_each_supported_type(meta_type, ext):
    meta = read_content_meta(_cnmt_bytes(meta_type, ext, CONTENTS[:1]))
    assert meta.extended_header == ext
    assert meta.contents == CONTENTS[:1]


def test_unsupported_type_is_rejected():
    with pytest.raises(InvalidContentMetaError):
        read_content_meta(_cnmt_bytes(ContentMetaType.SYSTEM_PROGRAM, None, []))


def test_wrong_extended_header_size_is_rejected():
    ext = ApplicationExtendedHeader()
    with pytest.raises(InvalidContentMetaError):
        read_content_meta(_cnmt_bytes(ContentMetaType.APPLICATION, ext, [], ext_size=ext.SIZE + 4))


def test_truncated_meta_is_rejected():
    data = _cnmt_bytes(ContentMetaType.APPLICATION, ApplicationExtendedHeader(), CONTENTS)
    with pytest.raises(InvalidContentMetaError):
        read_content_meta(data[:-1])
    with pytest.raises(InvalidContentMetaError):
        read_content_meta(data[:10])


def test_install_layout_for_application():
    ext = ApplicationExtendedHeader(patch_id=APP_ID + 0x800, required_system_version=5)
    meta = read_content_meta(_cnmt_bytes(ContentMetaType.APPLICATION, ext, CONTENTS))
    self_info = ContentInfo(content_id=b"\xaa" * 16, size=4096, content_type=ContentType.META)
    out = meta.create_content_meta_for_install(self_info, False)

    assert len(out) == ContentMetaHeader.SIZE + ext.SIZE + 3 * ContentInfo.SIZE
    header = ContentMetaHeader.unpack(out)
    assert header.content_count == len(CONTENTS) + 1
    assert header.extended_header_size == ext.SIZE
    assert ApplicationExtendedHeader.unpack(out[8:8 + ext.SIZE]) == ext
    infos_start = ContentMetaHeader.SIZE + ext.SIZE
    infos = [
        ContentInfo.unpack(out[off:off + ContentInfo.SIZE])
        for off in range(infos_start, len(out), ContentInfo.SIZE)
    ]
    assert infos == [self_info, *(c.info for c in CONTENTS)]


def test_ignore_required_firmware_zeroes_version():
    ext = ApplicationExtendedHeader(patch_id=1, required_system_version=5, required_application_version=2)
    meta = read_content_meta(_cnmt_bytes(ContentMetaType.APPLICATION, ext, []))
    out = meta.create_content_meta_for_install(ContentInfo(), True)
    written = ApplicationExtendedHeader.unpack(out[8:8 + ext.SIZE])
    assert written.required_system_version == 0
    assert written.patch_id == ext.patch_id
    assert written.required_application_version == ext.required_application_version


def test_patch_layout_appends_zeroed_extended_data():
    ext = PatchExtendedHeader(application_id=APP_ID, required_system_version=3, extended_data_size=40)
    meta = read_content_meta(_cnmt_bytes(ContentMetaType.PATCH, ext, CONTENTS[:1]))
    out = meta.create_content_meta_for_install(ContentInfo(), False)
    base = ContentMetaHeader.SIZE + ext.SIZE + 2 * ContentInfo.SIZE
    assert len(out) == base + ext.extended_data_size
    assert out[base:] == bytes(ext.extended_data_size)
    assert PatchExtendedHeader.unpack(out[8:8 + ext.SIZE]) == ext


def test_mismatched_extended_header_object_is_rejected():
    meta = PackagedContentMeta(
        header=PackagedContentMetaHeader(
            app_id=APP_ID,
            type=ContentMetaType.APPLICATION,
            header=ContentMetaHeader(extended_header_size=ApplicationExtendedHeader.SIZE),
        ),
        extended_header=DeltaExtendedHeader(),
    )
    with pytest.raises(InvalidContentMetaError):
        meta.create_content_meta_for_install(ContentInfo(), False)