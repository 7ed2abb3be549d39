"""Shared test fixtures -- synthetic TIFF, EXIF and maker note generators."""

import struct

import pytest

from exiftags.reader import BytesReader

# struct format of inline integer values, by TIFF type id
_INLINE_FORMATS = {1: 'B', 3: 'H', 4: 'I', 13: 'I'}

NIKON_LABEL = b'Nikon\x00\x02\x10\x00\x00'


class RecordingReader(BytesReader):
    """BytesReader that remembers every read_at call."""

    def __init__(self, data=b'', endian='I', base=0):
        super().__init__(data, endian, base)
        self.calls = []

    def read_at(self, offset, length):
        self.calls.append((offset, length))
        return super().read_at(offset, length)


class FailingReader(BytesReader):
    """Reader whose every read fails like a broken file would."""

    def read_at(self, offset, length):
        raise OSError('device not ready')


def _fmt(endian):
    return '<' if endian in ('<', 'I') else '>'


def _entry_value(type_id, value, endian):
    """Inline 4 byte field for an int or short bytes value."""
    if isinstance(value, bytes):
        return value.ljust(4, b'\x00')
    fmt = _INLINE_FORMATS[type_id]
    return struct.pack(_fmt(endian) + fmt, value).ljust(4, b'\x00')


def _is_out_of_line(value):
    return isinstance(value, bytes) and len(value) > 4


def ifd_size(entries):
    """Bytes taken by build_ifd() for these entries, data area included."""
    data = sum(len(v) for _, _, _, v in entries if _is_out_of_line(v))
    return 2 + 12 * len(entries) + 4 + data


def build_ifd(entries, offset, endian='<', next_ifd=0):
    """Build one IFD meant to sit at absolute ``offset``.

    Args:
        entries: List of (tag_id, type_id, count, value) tuples.
            Pass an int for inline BYTE/SHORT/LONG values, bytes for
            anything else; bytes longer than 4 go to the data area that
            follows the entry table.
        offset: Absolute offset the IFD will be placed at.
        endian: '<' / 'I' for little-endian, '>' / 'M' for big-endian.
        next_ifd: Value of the next IFD pointer.

    Returns:
        bytes: Entry count, entries, next pointer and data area.
    """
    fmt = _fmt(endian)
    data_offset = offset + 2 + 12 * len(entries) + 4
    entry_bytes = b''
    data_bytes = b''

    for tag_id, type_id, count, value in entries:
        entry_bytes += struct.pack(fmt + 'HHI', tag_id, type_id, count)
        if _is_out_of_line(value):
            entry_bytes += struct.pack(fmt + 'I', data_offset + len(data_bytes))
            data_bytes += value
        else:
            entry_bytes += _entry_value(type_id, value, endian)

    return (
        struct.pack(fmt + 'H', len(entries))
        + entry_bytes
        + struct.pack(fmt + 'I', next_ifd)
        + data_bytes
    )


def tiff_header(endian='<', first_ifd=8):
    bo = b'II' if _fmt(endian) == '<' else b'MM'
    return bo + struct.pack(_fmt(endian) + 'HI', 42, first_ifd)


def build_tiff(entries, endian='<', extra_data=b''):
    """Minimal TIFF: header plus a single IFD at offset 8."""
    return tiff_header(endian) + build_ifd(entries, 8, endian) + extra_data


def build_exif_tiff(ifd0_entries, exif_entries=None, gps_entries=None,
                    ifd1_entries=None, makernote=None, endian='<'):
    """Build a TIFF with IFD0 and optional Exif, GPS and thumbnail IFDs.

    Args:
        makernote: Optional callable taking the absolute offset the
            MakerNote value will be stored at and returning its bytes.
            The MakerNote entry is added to the Exif IFD.

    Returns:
        bytes: Complete TIFF file content.
    """
    ifd0_entries = list(ifd0_entries)
    if exif_entries is not None or makernote is not None:
        ifd0_entries.append((0x8769, 4, 1, 0))
    if gps_entries is not None:
        ifd0_entries.append((0x8825, 4, 1, 0))

    offset = 8 + ifd_size(ifd0_entries)

    exif_bytes = b''
    if exif_entries is not None or makernote is not None:
        exif_offset = offset
        exif_entries = list(exif_entries or [])
        if makernote is not None:
            # first entry, so its value starts the data area
            n = len(exif_entries) + 1
            note_offset = exif_offset + 2 + 12 * n + 4
            note = makernote(note_offset)
            exif_entries.insert(0, (0x927C, 7, len(note), note))
        exif_bytes = build_ifd(exif_entries, exif_offset, endian)
        ifd0_entries = [e if e[0] != 0x8769 else (0x8769, 4, 1, exif_offset) for e in ifd0_entries]
        offset += len(exif_bytes)

    gps_bytes = b''
    if gps_entries is not None:
        gps_bytes = build_ifd(gps_entries, offset, endian)
        ifd0_entries = [e if e[0] != 0x8825 else (0x8825, 4, 1, offset) for e in ifd0_entries]
        offset += len(gps_bytes)

    ifd1_bytes = b''
    next_ifd = 0
    if ifd1_entries is not None:
        next_ifd = offset
        ifd1_bytes = build_ifd(ifd1_entries, offset, endian)

    ifd0_bytes = build_ifd(ifd0_entries, 8, endian, next_ifd=next_ifd)
    return tiff_header(endian) + ifd0_bytes + exif_bytes + gps_bytes + ifd1_bytes


def build_canon_makernote(entries, endian='<'):
    """Canon style note: a bare IFD whose pointers are TIFF-absolute.

    Returns a callable suitable for build_exif_tiff(makernote=...).
    """
    def _build(offset):
        return build_ifd(entries, offset, endian)
    return _build


def build_nikon_makernote(entries, endian='>', preview_entries=None, label=NIKON_LABEL, pointer_type=4):
    """Nikon type 3 note: label, then a TIFF structure of its own.

    ``preview_entries`` adds a preview sub-IFD pointed at by tag 0x0011,
    stored with TIFF type ``pointer_type``.
    """
    entries = list(entries)
    preview_bytes = b''
    if preview_entries is not None:
        entries.append((0x0011, pointer_type, 1, 0))
        preview_offset = 8 + ifd_size(entries)
        entries[-1] = (0x0011, pointer_type, 1, preview_offset)
        preview_bytes = build_ifd(preview_entries, preview_offset, endian)
    return label + tiff_header(endian) + build_ifd(entries, 8, endian) + preview_bytes


def ascii(text):
    """ASCII tag value with its NUL terminator."""
    return text.encode('ascii') + b'\x00'


@pytest.fixture
def exif_file(tmp_path):
    """Write TIFF bytes to disk, return an opener."""
    def _write(content, name='test.tif'):
        path = tmp_path / name
        path.write_bytes(content)
        return path
    return _write
