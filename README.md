# leafpack

A small pure-Python library for working with PFS0 (NSP) packages, the content
meta (CNMT) records stored inside them, and a few related identifiers and
formats. It has no dependencies outside the standard library.

## Modules

### `leafpack.pfs0`

- `PFS0(path)` opens an archive on disk. A file without the PFS0 magic still
  opens, but `ok` is false and it lists no files. `count` is the file count
  stated by the header.
- `file_names()` lists the entries in table order.
- `get_file_name(idx)` and `get_file_size(idx)` return `""` and `0` for an
  invalid index.
- `get_file_index_by_name(name)` looks an entry up without regard to case and
  returns its index, or `None`.
- `read_from_file(idx, offset, size)` reads a byte range of an entry; an
  invalid index raises `IndexError`.
- `save_file(idx, path)` copies an entry out to `path`, replacing what is
  there; an invalid index does nothing.
- `PFS0Header` and `PFS0FileEntry` `pack()` and `unpack()` the on-disk
  structures; `PFS0File` pairs an entry with its name.

### `leafpack.builder`

`generate_from(input_path, output_nsp, callback=None)` packs every regular
file directly inside `input_path` into a new PFS0 archive, in name order, with
the string table padded to 0x20 bytes. After each chunk copied, `callback` is
called with the bytes written so far of the current file and the total size
of all files. It returns `True`.

### `leafpack.cnmt`

- `read_content_meta(data)` parses a packaged content meta record into a
  `PackagedContentMeta` (header, extended header, list of
  `PackagedContentInfo`). Unsupported meta types, a wrong extended header size
  and truncated data raise `InvalidContentMetaError`.
- `PackagedContentMeta.create_content_meta_for_install(self_content_info,
  ignore_required_fw_ver)` builds the meta blob as stored in a meta database:
  the meta's own `ContentInfo` first, then every packaged content, then a
  zeroed extended data region where the type has one. With
  `ignore_required_fw_ver`, the required system version of application and
  patch headers is set to 0.
- `ContentMetaType`, `ContentType`, `ContentInfo`, `ContentMetaHeader`,
  `PackagedContentMetaHeader` and the extended header classes
  (`SystemUpdateExtendedHeader`, `ApplicationExtendedHeader`,
  `PatchExtendedHeader`, `AddOnContentExtendedHeader`, `DeltaExtendedHeader`)
  describe the record layout.

### `leafpack.nspinfo`

- `locate_install_files(pfs0)` finds the content meta NCA and the ticket in a
  package and returns an `InstallFiles`; a missing or empty meta NCA, or an
  archive that is not PFS0, raises `InvalidPackageError`.
- `content_file_name(info)` gives `<id>.nca`, or `<id>.cnmt.nca` for meta.
- `meta_key_for(meta)` gives the `ContentMetaKey` for a full install.
- `install_contents(meta, meta_content_info, meta_already_installed)` lists
  the contents to write, in order.
- `content_file_indices(pfs0, contents)` maps each content to its archive
  index, raising `InvalidPackageError` when a file is missing.

### `leafpack.titles`

`format_application_id`, `get_application_id_mask` (returning an
`ApplicationIdMask`), `title_key_string`, `rights_id_application_id`,
`rights_id_key_generation` and `rights_id_string`.

### `leafpack.formatting`

`content_id_as_string`, `string_as_content_id`, `format_hex128`,
`format_result`, `format_time`, `current_time_string`, and
`decode_pending_update_version`, which returns a `PendingUpdateVersion` with a
`display_version()` method.

### `leafpack.amiibo`

`AmiiboDump` holds what an amiibo export needs; `to_json_dict()` gives the
contents of `amiibo.json`. `dump_to_emuiibo(dump, root)` writes
`root/emuiibo/amiibo/<name>/` with `amiibo.flag`, `mii-charinfo.bin` and
`amiibo.json`, removing what was in that directory first, and returns the
directory. `fix_model_amiibo_id` rearranges the eight-byte id reported by an
NFC reader; `AmiiboId.unpack` decodes the seven-byte identity.

## What it does not do

leafpack works on files and bytes only. It does not install packages into a
device's content storage, import tickets, read amiibo tags from an NFC reader
or download anything, and it has no command-line tool.

## Installation

```
pip install .
```

## Example

```python
from leafpack.builder import generate_from
from leafpack.pfs0 import PFS0

generate_from("my_dir", "out.nsp", lambda done, total: print(done, "/", total))

pkg = PFS0("out.nsp")
for name in pkg.file_names():
    idx = pkg.get_file_index_by_name(name)
    print(name, pkg.get_file_size(idx))
```

## Running the tests

```
pip install .[test]
pytest
```