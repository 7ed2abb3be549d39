"""Tests for maker note detection, decoding and dispatch."""

import io
import struct

import pytest

import exiftags
from exiftags.exceptions import InvalidExif, InvalidIfd, MakerNoteError
from exiftags.exif_header import ExifHeader
from exiftags.field_types import FieldType
from exiftags.makernote import Canon, MakerNoteParser, NikonV3, default_parsers, dispatch
from exiftags.reader import BytesReader
from exiftags.tag import Tag
from tests.conftest import (
    NIKON_LABEL,
    ascii,
    build_canon_makernote,
    build_exif_tiff,
    build_ifd,
    build_nikon_makernote,
    ifd_size,
)

NIKON_MAKE = (0x010F, 2, 18, ascii('NIKON CORPORATION'))
CANON_MAKE = (0x010F, 2, 6, ascii('Canon'))

CANON_ENTRIES = [
    (0x0006, 2, 16, ascii('IMG:EOS R5 JPEG')),
    (0x0010, 4, 1, 0x80000421),
]


class RecordingParser(MakerNoteParser):
    """Accepts every file and leaves a marker tag behind."""
    name = 'Recording'

    def __init__(self):
        super().__init__()
        self.parsed = False

    def detect(self, exif):
        return True

    def parse(self, exif):
        self.parsed = True
        exif.update('Recorded', Tag('Recorded', FieldType.SHORT, (), 0, 1, 0, b'\x01\x00'))


def nikon_note(offsets, preview_start=200, **kwargs):
    """Nikon note builder that records the offset it was placed at."""
    def _build(offset):
        offsets.append(offset)
        return build_nikon_makernote(
            [
                (0x0001, 7, 4, b'0210'),
                (0x0002, 3, 2, struct.pack('>HH', 0, 400)),
                (0x001D, 2, 8, ascii('3012345')),
            ],
            preview_entries=[
                (0x0201, 4, 1, preview_start),
                (0x0202, 4, 1, 5000),
            ],
            **kwargs
        )
    return _build


class TestCanon:
    @pytest.mark.parametrize('endian', ['<', '>'])
    def test_parse(self, endian):
        data = build_exif_tiff(
            [CANON_MAKE],
            exif_entries=[(0x8827, 3, 1, 200)],
            makernote=build_canon_makernote(CANON_ENTRIES, endian),
            endian=endian,
        )
        exif = exiftags.process_file(io.BytesIO(data))

        assert exif.makernote_errors == []
        assert exif.get_string('CanonImageType') == 'IMG:EOS R5 JPEG'
        assert exif.get_int('CanonModelID') == 0x80000421
        assert exif.get('CanonImageType').ifd_path == ('IFD', 'Exif', 'MakerNote')
        assert exif.get_int('ISOSpeedRatings') == 200

    def test_other_make_ignored(self):
        data = build_exif_tiff(
            [NIKON_MAKE],
            makernote=build_canon_makernote(CANON_ENTRIES),
        )
        exif = exiftags.process_file(io.BytesIO(data))
        assert exif.get('CanonImageType') is None
        assert exif.makernote_errors == []

    def test_without_makernote(self):
        exif = exiftags.process_file(io.BytesIO(build_exif_tiff([CANON_MAKE], exif_entries=[])))
        assert not Canon().detect(exif)

    def test_sub_directories(self):
        sensor_tags = {0x0001: ('CanonSensorWidth', ), 0x0002: ('CanonSensorHeight', )}

        def _build(offset):
            main = [(0x00E0, 4, 1, 0)]
            sub_offset = offset + ifd_size(main)
            main = [(0x00E0, 4, 1, sub_offset)]
            sub = build_ifd([(0x0001, 3, 1, 8256), (0x0002, 3, 1, 5504)], sub_offset)
            return build_ifd(main, offset) + sub

        data = build_exif_tiff([CANON_MAKE], makernote=_build)
        parser = Canon(sub_directories={0x00E0: ('SensorInfo', sensor_tags)})
        exif = exiftags.process_file(io.BytesIO(data), parsers=[parser])

        assert exif.get_int('CanonSensorWidth') == 8256
        assert exif.get_int('CanonSensorHeight') == 5504
        assert exif.get('CanonSensorWidth').ifd_path == ('IFD', 'Exif', 'MakerNote', 'SensorInfo')

    def test_no_sub_directories_by_default(self):
        assert Canon().sub_directories == {}

    def test_broken_note_reported(self):
        data = build_exif_tiff(
            [CANON_MAKE],
            makernote=lambda offset: struct.pack('<H', 5000) + b'\x00' * 10,
        )
        exif = exiftags.process_file(io.BytesIO(data))
        assert len(exif.makernote_errors) == 1
        error = exif.makernote_errors[0]
        assert error.parser_name == 'Canon'
        assert isinstance(error.cause, InvalidIfd)
        # the rest of the file is still there
        assert exif.get_string('Make') == 'Canon'


class TestNikonV3:
    def test_parse(self):
        offsets = []
        data = build_exif_tiff([NIKON_MAKE], makernote=nikon_note(offsets))
        exif = exiftags.process_file(io.BytesIO(data))

        assert exif.makernote_errors == []
        assert exif.get('NikonMakerNoteVersion').field_type == FieldType.ASCII_NO_NUL
        assert exif.get_string('NikonMakerNoteVersion') == '0210'
        assert exif.get_uint16s('NikonISOSetting') == [0, 400]
        assert exif.get_string('NikonSerialNumber') == '3012345'
        assert exif.get('NikonSerialNumber').ifd_path == ('IFD', 'Exif', 'MakerNote')

    def test_preview_rebased(self):
        offsets = []
        data = build_exif_tiff([NIKON_MAKE], makernote=nikon_note(offsets))
        exif = exiftags.process_file(io.BytesIO(data))

        preview = exif.get('NikonPreviewImageStart')
        assert preview.ifd_path == ('IFD', 'Exif', 'MakerNote', 'Preview')
        assert exif.get_int('NikonPreviewImageStart') == 200 + offsets[0] + 10
        assert exif.get_int('NikonPreviewImageLength') == 5000

    def test_rebase_arithmetic(self):
        payload = build_nikon_makernote([], endian='<', preview_entries=[(0x0201, 4, 1, 200)])
        note = Tag('MakerNote', FieldType.UNDEFINED, ('IFD', 'Exif'), 0x927C, len(payload), 1000,
                   struct.pack('<I', 1000))
        exif = ExifHeader(BytesReader(b'', 'I'))
        exif.update('MakerNote', note, BytesReader(payload, 'I', base=1000))

        parser = NikonV3()
        assert parser.detect(exif)
        parser.parse(exif)
        assert exif.get_int('NikonPreviewImageStart') == 1210

    def test_ifd_typed_preview_pointer(self):
        payload = build_nikon_makernote([], endian='<', preview_entries=[(0x0201, 4, 1, 200)],
                                        pointer_type=13)
        note = Tag('MakerNote', FieldType.UNDEFINED, ('IFD', 'Exif'), 0x927C, len(payload), 1000,
                   struct.pack('<I', 1000))
        exif = ExifHeader(BytesReader(b'', 'I'))
        exif.update('MakerNote', note, BytesReader(payload, 'I', base=1000))

        assert dispatch(exif, [NikonV3()]) == []
        assert exif.get('NikonPreviewIFD').field_type == FieldType.IFD
        assert exif.get_int('NikonPreviewImageStart') == 1210

    def test_own_byte_order(self):
        # big-endian note inside a little-endian file
        offsets = []
        data = build_exif_tiff([NIKON_MAKE], makernote=nikon_note(offsets), endian='<')
        exif = exiftags.process_file(io.BytesIO(data))
        assert exif.reader_for('NikonISOSetting').endian == 'M'
        assert exif.reader_for('Make').endian == 'I'

    def test_other_signature_ignored(self):
        data = build_exif_tiff(
            [(0x010F, 2, 8, ascii('OLYMPUS'))],
            makernote=lambda offset: b'OLYMPUS\x00II\x03\x00' + b'\x00' * 16,
        )
        exif = exiftags.process_file(io.BytesIO(data))
        assert exif.makernote_errors == []
        assert [name for name, _ in exif.items() if name.startswith('Nikon')] == []

    def test_bad_tiff_header(self):
        data = build_exif_tiff(
            [NIKON_MAKE],
            makernote=lambda offset: NIKON_LABEL + b'XX\x00\x2a\x00\x00\x00\x08' + b'\x00' * 8,
        )
        recorder = RecordingParser()
        exif = exiftags.process_file(io.BytesIO(data), parsers=[NikonV3(), recorder])

        assert len(exif.makernote_errors) == 1
        assert exif.makernote_errors[0].parser_name == 'Nikon'
        assert isinstance(exif.makernote_errors[0].cause, InvalidExif)
        assert recorder.parsed
        assert exif.get_int('Recorded') == 1

    def test_rebase_overflow_reported(self):
        offsets = []
        data = build_exif_tiff([NIKON_MAKE], makernote=nikon_note(offsets, preview_start=0xFFFFFFF0))
        exif = exiftags.process_file(io.BytesIO(data))
        assert len(exif.makernote_errors) == 1
        assert isinstance(exif.makernote_errors[0].cause, ValueError)

    def test_strict_raises(self):
        data = build_exif_tiff(
            [NIKON_MAKE],
            makernote=lambda offset: NIKON_LABEL + b'XX\x00\x2a\x00\x00\x00\x08' + b'\x00' * 8,
        )
        with pytest.raises(MakerNoteError):
            exiftags.process_file(io.BytesIO(data), strict=True)


class TestDispatch:
    def test_default_parsers(self):
        names = [parser.name for parser in default_parsers()]
        assert names == ['Canon', 'Nikon']

    def test_default_parsers_are_fresh(self):
        first, second = default_parsers(), default_parsers()
        assert first[1] is not second[1]
        first[1].sub_directories.clear()
        assert second[1].sub_directories

    def test_custom_registry(self):
        data = build_exif_tiff([CANON_MAKE], makernote=build_canon_makernote(CANON_ENTRIES))
        recorder = RecordingParser()
        exif = exiftags.process_file(io.BytesIO(data), parsers=[recorder])
        assert recorder.parsed
        # Canon is not in the registry
        assert exif.get('CanonImageType') is None

    def test_no_details(self):
        data = build_exif_tiff([CANON_MAKE], makernote=build_canon_makernote(CANON_ENTRIES))
        exif = exiftags.process_file(io.BytesIO(data), details=False)
        assert exif.get('CanonImageType') is None
        assert exif.get('MakerNote') is not None

    def test_undetected_parser_not_run(self):
        class Never(RecordingParser):
            def detect(self, exif):
                return False

        never = Never()
        assert dispatch(ExifHeader(BytesReader(b'', 'I')), [never]) == []
        assert not never.parsed
