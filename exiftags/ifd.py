import struct
from typing import Dict, Sequence, Tuple

from .exceptions import InvalidIfd, ShortRead, SourceReadFailed
from .exif_log import get_logger
from .field_types import from_code
from .reader import ExifReader
from .tag import Tag

logger = get_logger()

ENTRY_SIZE = 12

# Real IFDs hold a few hundred entries at most; more means the pointer
# landed in image data.
MAX_IFD_ENTRIES = 1000


def _read(reader: ExifReader, offset: int, length: int) -> bytes:
    try:
        data = reader.read_at(offset, length)
    except (OSError, ValueError) as err:
        raise SourceReadFailed(offset, length) from err
    if len(data) < length:
        raise ShortRead(offset, length, len(data))
    return data


class Ifd:
    """
    One decoded image file directory.

    ``tags`` maps tag IDs to descriptors; values are left unresolved.
    """

    def __init__(self, reader: ExifReader, offset: int, ifd_path: Sequence[str]=('IFD',)):
        self._reader = reader
        self.offset = offset
        self.path: Tuple[str, ...] = tuple(ifd_path)
        self.tags = {}  # type: Dict[int, Tag]
        self.next_offset = 0

        self._dump_ifd()

    @property
    def name(self) -> str:
        return '/'.join(self.path)

    def __str__(self) -> str:
        return '{} @ {}'.format(self.name, self.offset)

    def __repr__(self) -> str:
        return '<{}.{} {} offset={}, endian={}, tags={} at {}>'.format(
            self.__class__.__module__,
            self.__class__.__name__,
            self.name,
            self.offset,
            self._reader.endian,
            len(self.tags),
            hex(id(self))
        )

    def _process_entry(self, entry: bytes) -> Tag:
        tag_id, type_code, count = struct.unpack(self._reader.fmt + 'HHI', entry[:8])
        field_type = from_code(type_code)
        if not field_type:
            logger.debug(' Unknown field type %d for tag 0x%04X in %s', type_code, tag_id, self.name)
        raw_value_offset = entry[8:12]
        value_offset = struct.unpack(self._reader.fmt + 'I', raw_value_offset)[0]
        return Tag(
            'Tag 0x%04X' % tag_id,
            field_type,
            self.path,
            tag_id,
            count,
            value_offset,
            raw_value_offset,
        )

    def _dump_ifd(self) -> None:
        """Read the entry table and the next IFD pointer."""
        fmt = self._reader.fmt
        entries = struct.unpack(fmt + 'H', _read(self._reader, self.offset, 2))[0]
        if entries > MAX_IFD_ENTRIES:
            raise InvalidIfd('%s at %d claims %d entries' % (self.name, self.offset, entries))

        logger.debug('%s at offset %d: %d entries', self.name, self.offset, entries)
        table = _read(self._reader, self.offset + 2, entries * ENTRY_SIZE)
        for i in range(entries):
            entry = table[i * ENTRY_SIZE:(i + 1) * ENTRY_SIZE]
            tag = self._process_entry(entry)
            # the first entry wins when a directory repeats a tag
            self.tags.setdefault(tag.tag_id, tag)
            logger.debug(' %s', tag)

        # some maker notes end right after the last entry
        pointer_offset = self.offset + 2 + entries * ENTRY_SIZE
        try:
            pointer = self._reader.read_at(pointer_offset, 4)
        except (OSError, ValueError) as err:
            raise SourceReadFailed(pointer_offset, 4) from err
        if len(pointer) == 4:
            self.next_offset = struct.unpack(fmt + 'I', pointer)[0]
        else:
            logger.debug('%s has no next IFD pointer', self.name)
