"""
Read Exif tags and camera maker notes from tiff and jpeg files.
"""
from typing import BinaryIO, Optional, Sequence

from .exceptions import (
    DuplicateDirectoryMapping,
    ExifError,
    ExifNotFound,
    IfdMappingError,
    InsufficientInlineData,
    InvalidEmptyTag,
    InvalidExif,
    InvalidIfd,
    InvalidUnitCount,
    MakerNoteError,
    MalformedText,
    NotEnoughData,
    ShortRead,
    SourceReadFailed,
    UnsupportedConversion,
)
from .exif_header import ExifHeader
from .exif_log import get_logger, setup_logger
from .field_types import FieldType, is_valid, unit_size
from .ifd import Ifd
from .ifd_mapping import IfdMapping, MappedIfd, load_standard_ifds
from .makernote import Canon, MakerNoteParser, NikonV3, default_parsers, dispatch
from .reader import BytesReader, ExifReader, FileReader
from .tag import Tag
from .utils import Rational, find_exif, read_tiff_header

__version__ = '1.0.0'

logger = get_logger()


def process_file(
    fh: BinaryIO,
    parsers: Optional[Sequence[MakerNoteParser]]=None,
    mapping: Optional[IfdMapping]=None,
    strict: bool=False,
    details: bool=True,
) -> ExifHeader:
    """
    Process an image file (expects an open file object).

    ``details`` turns maker note decoding on; ``parsers`` defaults to
    every known maker. With ``strict`` the first broken sub-IFD or maker
    note raises instead of being logged and skipped.
    """
    file_type, offset, endian = find_exif(fh)
    reader = FileReader(fh, endian, base=offset)
    _, first_ifd = read_tiff_header(reader.read_at(0, 8))
    logger.debug('%s file, TIFF header at %d, IFD0 at %d', file_type, offset, first_ifd)

    exif = ExifHeader(reader, mapping)
    exif.decode(first_ifd, strict=strict)

    if details:
        if parsers is None:
            parsers = default_parsers()
        exif.makernote_errors = dispatch(exif, parsers)
        if strict and exif.makernote_errors:
            raise exif.makernote_errors[0]

    return exif
