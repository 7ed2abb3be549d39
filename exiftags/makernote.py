"""
Decode the camera-specific MakerNote formats.

A MakerNote is not an actual SubIFD but a tag in the EXIF SubIFD whose
value usually follows the EXIF format. Once they did, it became ambiguous
whether the offsets inside should be from the header at the start of all
the EXIF info, or from the header at the start of the makernote; each
maker picked one, so each parser sets up the reader its notes expect.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from .exceptions import ExifError, MakerNoteError
from .exif_header import ExifHeader
from .exif_log import get_logger
from .ifd import Ifd
from .reader import BytesReader, ExifReader
from .tag import Tag
from .tags import makernote
from .utils import read_tiff_header

logger = get_logger()

MAKERNOTE_TAG = 'MakerNote'
MAKE_TAG = 'Make'

# tag ID of the pointer -> (directory name, field table)
SubDirectories = Dict[int, Tuple[str, dict]]


class MakerNoteParser:
    """
    Recognises one maker's notes and loads their tags into an ExifHeader.

    ``sub_directories`` lists the pointer tags inside the note that lead
    to further directories; pointers are resolved against the same reader
    as the note itself.
    """
    name = ''
    tags = {}  # type: dict
    default_sub_directories = {}  # type: SubDirectories

    def __init__(self, sub_directories: Optional[SubDirectories]=None):
        if sub_directories is None:
            sub_directories = self.default_sub_directories
        self.sub_directories = dict(sub_directories)

    def __repr__(self) -> str:
        return '<{}.{} {} at {}>'.format(
            self.__class__.__module__,
            self.__class__.__name__,
            self.name,
            hex(id(self))
        )

    def detect(self, exif: ExifHeader) -> bool:
        raise NotImplementedError

    def parse(self, exif: ExifHeader) -> None:
        raise NotImplementedError

    @staticmethod
    def _payload(exif: ExifHeader) -> Optional[Tuple[Tag, bytes]]:
        """The MakerNote tag and its bytes, None if absent or unreadable."""
        note = exif.get(MAKERNOTE_TAG)
        if note is None:
            return None
        try:
            payload = note.get_bytes(exif.reader_for(MAKERNOTE_TAG))
        except ExifError as err:
            logger.debug('MakerNote not readable: %s', err)
            return None
        return note, payload

    def _load_ifd(self, exif: ExifHeader, reader: ExifReader, offset: int, path: Sequence[str]) -> Ifd:
        ifd = Ifd(reader, offset, path)
        exif.load_tags(ifd, self.tags, reader)
        self._load_sub_directories(exif, ifd, reader)
        return ifd

    def _load_sub_directories(self, exif: ExifHeader, ifd: Ifd, reader: ExifReader) -> None:
        for tag_id, (name, field_map) in self.sub_directories.items():
            pointer = ifd.tags.get(tag_id)
            if pointer is None:
                continue
            offset = pointer.get_int(reader)
            logger.debug('%s %s at offset %d:', self.name, name, offset)
            sub_ifd = Ifd(reader, offset, ifd.path + (name, ))
            exif.load_tags(sub_ifd, field_map, reader)


class Canon(MakerNoteParser):
    """
    Canon notes are a single IFD directory with no header. Offsets inside
    are relative to the enclosing TIFF structure, not to the note.
    """
    name = 'Canon'
    tags = makernote.canon.TAGS

    def detect(self, exif: ExifHeader) -> bool:
        if exif.get(MAKERNOTE_TAG) is None:
            return False
        try:
            make = exif.get_string(MAKE_TAG)
        except ExifError as err:
            logger.debug('Make not readable: %s', err)
            return False
        return make == 'Canon'

    def parse(self, exif: ExifHeader) -> None:
        found = self._payload(exif)
        if found is None:
            return
        note, payload = found
        container = exif.reader_for(MAKERNOTE_TAG)

        # Place the note at its own offset so its pointers resolve as is.
        reader = BytesReader(payload, container.endian, base=note.value_offset)
        self._load_ifd(exif, reader, note.value_offset, note.ifd_path + (MAKERNOTE_TAG, ))


class NikonV3(MakerNoteParser):
    """
    Nikon type 3 notes: "Nikon\\0", a version and padding, then a
    self-contained TIFF structure at byte 10 whose offsets are relative to
    its own header.
    """
    name = 'Nikon'
    tags = makernote.nikon.TAGS
    default_sub_directories = {
        0x0011: ('Preview', makernote.nikon.PREVIEW_TAGS),
    }

    SIGNATURE = b'Nikon\x00'
    HEADER_LENGTH = 10

    def detect(self, exif: ExifHeader) -> bool:
        found = self._payload(exif)
        if found is None:
            return False
        return found[1][:len(self.SIGNATURE)] == self.SIGNATURE

    def parse(self, exif: ExifHeader) -> None:
        found = self._payload(exif)
        if found is None:
            return
        note, payload = found

        tiff = payload[self.HEADER_LENGTH:]
        endian, first_ifd = read_tiff_header(tiff[:8])
        reader = BytesReader(tiff, endian)
        ifd = self._load_ifd(exif, reader, first_ifd, note.ifd_path + (MAKERNOTE_TAG, ))

        # The preview pointer is relative to the note's TIFF header.
        preview_name = makernote.nikon.PREVIEW_IMAGE_START
        preview = exif.get(preview_name)
        if preview is not None and preview.ifd_path[:len(ifd.path)] == ifd.path:
            preview_reader = exif.reader_for(preview_name)
            offset = preview.get_int(preview_reader)
            base = note.value_offset + self.HEADER_LENGTH
            logger.debug('Rebasing %s from %d by %d', preview_name, offset, base)
            exif.update(preview_name, preview.with_int_value(offset + base, preview_reader), preview_reader)


def default_parsers() -> List[MakerNoteParser]:
    """A fresh set of every known parser."""
    return [Canon(), NikonV3()]


def dispatch(exif: ExifHeader, parsers: Sequence[MakerNoteParser]) -> List[MakerNoteError]:
    """
    Run every parser that recognises the notes.

    Notes a parser does not recognise are not an error. A recognised note
    that fails to decode is logged and returned, the remaining parsers
    still run.
    """
    errors = []
    for parser in parsers:
        if not parser.detect(exif):
            logger.debug('Not a %s MakerNote', parser.name)
            continue
        logger.debug('Looks like a %s MakerNote', parser.name)
        try:
            parser.parse(exif)
        except (ExifError, ValueError) as err:
            error = MakerNoteError(parser.name, err)
            logger.warning('%s', error)
            errors.append(error)
    return errors
