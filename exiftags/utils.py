"""
Misc utilities.
"""

import struct
from typing import BinaryIO, NamedTuple, Tuple

from .exceptions import ExifNotFound, InvalidExif
from .exif_log import get_logger

logger = get_logger()

FILE_TYPE_TIFF = 'TIFF'
FILE_TYPE_JPEG = 'JPEG'

TIFF_MAGIC = 42


class Rational(NamedTuple):
    """
    Numerator/denominator pair, kept as stored (never reduced).
    """
    numerator: int
    denominator: int

    def __str__(self) -> str:
        if self.denominator == 1:
            return str(self.numerator)
        return '%d/%d' % (self.numerator, self.denominator)

    def __repr__(self) -> str:
        return str(self)

    @property
    def num(self) -> int:
        return self.numerator

    @property
    def den(self) -> int:
        return self.denominator

    def decimal(self) -> float:
        if self.denominator == 0:
            return float('nan')
        return self.numerator / self.denominator


def endian_fmt(endian: str) -> str:
    return '<' if endian == 'I' else '>'


def n2b(value: int, length: int, endian: str) -> bytes:
    """Convert an unsigned integer to bytes."""
    s = b''
    for _ in range(length):
        if endian == 'I':
            s += bytes([value & 0xFF])
        else:
            s = bytes([value & 0xFF]) + s
        value = value >> 8
    return s


def read_tiff_header(data: bytes) -> Tuple[str, int]:
    """
    Parse an 8 byte TIFF header, return the endian and first IFD offset.
    """
    if len(data) < 8:
        raise InvalidExif('TIFF header too short: %d bytes' % len(data))
    if data[0:2] == b'II':
        endian = 'I'
    elif data[0:2] == b'MM':
        endian = 'M'
    else:
        raise InvalidExif('Bad byte order marker: %r' % data[0:2])
    magic, first_ifd = struct.unpack(endian_fmt(endian) + 'HI', data[2:8])
    if magic != TIFF_MAGIC:
        raise InvalidExif('Bad TIFF magic: %d' % magic)
    return endian, first_ifd


def find_tiff_exif(fh: BinaryIO) -> Tuple[int, bytes]:
    logger.debug('TIFF format recognized in data[0:2]')
    fh.seek(0)
    endian = fh.read(1)
    return 0, endian


def find_jpeg_exif(fh: BinaryIO) -> Tuple[int, bytes]:
    """
    Walk the JPEG segments up to the APP1 Exif segment.
    """
    logger.debug('JPEG format recognized in data[0:2]')
    base = 2
    while True:
        fh.seek(base)
        if fh.read(1) != b'\xFF':
            raise InvalidExif('Unexpected segment at 0x%X' % base)
        code = fh.read(1)
        # any number of 0xFF fill bytes may precede the marker code
        while code == b'\xFF':
            base += 1
            code = fh.read(1)
        if not code:
            raise InvalidExif('Truncated marker at 0x%X' % base)
        marker = code[0]
        if marker in (0xD9, 0xDA):
            # end of image / start of scan: no more metadata segments
            break
        size = fh.read(2)
        if len(size) < 2:
            raise InvalidExif('Truncated segment at 0x%X' % base)
        length = struct.unpack('>H', size)[0]
        if marker == 0xE1:
            logger.debug('  APP1 at base 0x%X length %d', base, length)
            if fh.read(6) == b'Exif\x00\x00':
                offset = base + 10
                fh.seek(offset)
                return offset, fh.read(1)
        else:
            logger.debug('  Segment 0x%X at base 0x%X length %d', marker, base, length)
        base += 2 + length
    raise ExifNotFound('JPEG file does not have exif data.')


def find_exif(fh: BinaryIO) -> Tuple[str, int, str]:
    """
    Locate the TIFF structure, return the file type, its offset and endian.
    """
    fh.seek(0)
    data = fh.read(12)
    if data[0:2] in (b'II', b'MM'):
        file_type = FILE_TYPE_TIFF
        offset, endian = find_tiff_exif(fh)
    elif data[0:2] == b'\xFF\xD8':
        file_type = FILE_TYPE_JPEG
        offset, endian = find_jpeg_exif(fh)
    else:
        # file format not recognized
        raise ExifNotFound('File format not recognized.')

    endian_str = endian.decode('latin-1')
    if endian_str not in ('I', 'M'):
        raise InvalidExif('Bad byte order marker: %r' % endian)
    logger.debug('Endian format is %s (%s)', endian_str, {
        'I': 'Intel',
        'M': 'Motorola',
    }[endian_str])

    return file_type, offset, endian_str
