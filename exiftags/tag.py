import struct
from typing import List, Sequence, Tuple

from .exceptions import (
    InsufficientInlineData,
    InvalidEmptyTag,
    InvalidUnitCount,
    MalformedText,
    NotEnoughData,
    ShortRead,
    SourceReadFailed,
    UnsupportedConversion,
)
from .exif_log import get_logger
from .field_types import FieldType, is_valid, type_name, unit_size
from .reader import ExifReader
from .utils import Rational, n2b

logger = get_logger()

# Values up to this many bytes are stored in the entry's offset field.
INLINE_THRESHOLD = 4

MAX_BYTE_LENGTH = 0xFFFFFFFF


class Tag:
    """
    One tag occurrence: its type, count and either an inline value or an
    offset to it.

    Values are not cached, every accessor call resolves and decodes again.
    """

    def __init__(
        self,
        name: str,
        field_type: int,
        ifd_path: Sequence[str]=(),
        tag_id: int=0,
        unit_count: int=0,
        value_offset: int=0,
        raw_value_offset: bytes=b'',
    ):
        self.name = name
        self.field_type = field_type
        self.ifd_path: Tuple[str, ...] = tuple(ifd_path)
        self.tag_id = tag_id
        self.unit_count = unit_count
        self.value_offset = value_offset
        self.raw_value_offset = bytes(raw_value_offset)

    def __str__(self) -> str:
        return '({}) {} {}[{}] @ {}'.format(
            '0x%04X' % self.tag_id,
            self.name,
            type_name(self.field_type),
            self.unit_count,
            self.value_offset,
        )

    def __repr__(self) -> str:
        return '<{}.{} {} tag_id={}, type={}, count={}, path={} at {}>'.format(
            self.__class__.__module__,
            self.__class__.__name__,
            self.name,
            '0x%04X' % self.tag_id,
            type_name(self.field_type),
            self.unit_count,
            '/'.join(self.ifd_path),
            hex(id(self))
        )

    @property
    def byte_length(self) -> int:
        return unit_size(self.field_type) * self.unit_count

    @property
    def is_inline(self) -> bool:
        return self.byte_length <= INLINE_THRESHOLD

    def read_raw_encoded(self, reader: ExifReader) -> bytes:
        """
        Return the encoded bytes of the value, from the entry itself when
        they fit in its 4 byte offset field, from the reader otherwise.
        """
        if not is_valid(self.field_type):
            raise InvalidEmptyTag('Tag %s has no valid type' % self.name)

        byte_length = self.byte_length
        if self.unit_count <= 0 or byte_length > MAX_BYTE_LENGTH:
            raise InvalidUnitCount('Tag %s has unit count %d' % (self.name, self.unit_count))

        if byte_length <= INLINE_THRESHOLD:
            if len(self.raw_value_offset) < byte_length:
                raise InsufficientInlineData(
                    'Tag %s needs %d inline bytes, has %d'
                    % (self.name, byte_length, len(self.raw_value_offset))
                )
            return self.raw_value_offset[:byte_length]

        try:
            data = reader.read_at(self.value_offset, byte_length)
        except (OSError, ValueError) as err:
            raise SourceReadFailed(self.value_offset, byte_length) from err
        if len(data) < byte_length:
            raise ShortRead(self.value_offset, byte_length, len(data))
        return data

    def _read_checked(self, reader: ExifReader) -> bytes:
        if not is_valid(self.field_type):
            raise InvalidEmptyTag('Tag %s has no valid type' % self.name)
        raw = self.read_raw_encoded(reader)
        if len(raw) < self.byte_length:
            raise NotEnoughData(
                'Tag %s: %d bytes for %d units' % (self.name, len(raw), self.unit_count)
            )
        return raw

    def _unsupported(self, target: str) -> UnsupportedConversion:
        return UnsupportedConversion(
            'Tag %s of type %s cannot be read as %s' % (self.name, type_name(self.field_type), target)
        )

    def get_string(self, reader: ExifReader) -> str:
        raw = self._read_checked(reader)
        count = self.unit_count

        if self.field_type == FieldType.ASCII:
            end = raw.find(b'\x00', 0, count)
            if end < 0:
                raise MalformedText('Tag %s: no NUL terminator in %d bytes' % (self.name, count))
            text = raw[:end]
        elif self.field_type == FieldType.ASCII_NO_NUL:
            text = raw[:count]
        elif self.field_type == FieldType.BYTE:
            text = raw[:count].rstrip(b'\x00')
        else:
            raise self._unsupported('text')

        try:
            return text.decode('utf-8')
        except UnicodeDecodeError:
            logger.warning('Possibly corrupted text in tag %s', self.name)
            return text.decode('latin-1')

    def get_int(self, reader: ExifReader) -> int:
        raw = self._read_checked(reader)

        if self.field_type == FieldType.SHORT:
            return struct.unpack(reader.fmt + 'H', raw[:2])[0]
        if self.field_type in (FieldType.LONG, FieldType.IFD):
            return struct.unpack(reader.fmt + 'I', raw[:4])[0]
        if self.field_type == FieldType.BYTE:
            return raw[0]
        raise self._unsupported('integer')

    def get_rational(self, reader: ExifReader) -> Rational:
        raw = self._read_checked(reader)

        if self.field_type == FieldType.RATIONAL:
            return Rational(*struct.unpack(reader.fmt + 'II', raw[:8]))
        if self.field_type == FieldType.SRATIONAL:
            return Rational(*struct.unpack(reader.fmt + 'ii', raw[:8]))
        raise self._unsupported('rational')

    def get_rationals(self, reader: ExifReader) -> List[Rational]:
        raw = self._read_checked(reader)

        if self.field_type != FieldType.RATIONAL:
            raise self._unsupported('rationals')
        fmt = reader.fmt + 'II'
        return [Rational(*struct.unpack_from(fmt, raw, i * 8)) for i in range(self.unit_count)]

    def get_uint16s(self, reader: ExifReader) -> List[int]:
        raw = self._read_checked(reader)

        if self.field_type != FieldType.SHORT:
            raise self._unsupported('unsigned shorts')
        return list(struct.unpack(reader.fmt + 'H' * self.unit_count, raw[:2 * self.unit_count]))

    def get_bytes(self, reader: ExifReader) -> bytes:
        raw = self._read_checked(reader)

        if self.field_type not in (FieldType.BYTE, FieldType.UNDEFINED):
            raise self._unsupported('bytes')
        return raw[:self.unit_count]

    def with_int_value(self, value: int, reader: ExifReader) -> 'Tag':
        """
        Copy of this tag holding a single integer inline, encoded with the
        reader's byte order. A short is widened to a long when needed.
        """
        if self.field_type not in (FieldType.SHORT, FieldType.LONG):
            raise self._unsupported('integer')
        if not 0 <= value <= 0xFFFFFFFF:
            raise ValueError('Value %d does not fit an unsigned long' % value)

        field_type = self.field_type
        if field_type == FieldType.SHORT and value > 0xFFFF:
            field_type = FieldType.LONG
        raw = n2b(value, unit_size(field_type), reader.endian).ljust(INLINE_THRESHOLD, b'\x00')
        return Tag(
            self.name,
            field_type,
            self.ifd_path,
            self.tag_id,
            1,
            struct.unpack(reader.fmt + 'I', raw)[0],
            raw,
        )
