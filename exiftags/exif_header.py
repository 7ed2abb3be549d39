from typing import Callable, Dict, Iterator, List, Optional, Tuple, TypeVar

from .exceptions import ExifError, MakerNoteError
from .exif_log import get_logger
from .field_types import unit_size
from .ifd import Ifd
from .ifd_mapping import IFD_ROOT_ID, IfdMapping, MappedIfd, load_standard_ifds
from .reader import ExifReader
from .tag import Tag
from .tags import IFD_TAG_MAP, THUMBNAIL_TAGS
from .utils import Rational

logger = get_logger()

T = TypeVar('T')

# IFD0 -> IFD1 chains longer than this are treated as loops
MAX_CHAINED_IFDS = 8


class ExifHeader:
    """
    Named tags of one TIFF structure.

    Every tag is kept with the reader it has to be resolved against, maker
    notes may carry their own.
    """

    def __init__(self, reader: ExifReader, mapping: Optional[IfdMapping]=None):
        self.reader = reader
        if mapping is None:
            mapping = load_standard_ifds(IfdMapping())
        self.mapping = mapping
        self.ifds: List[Ifd] = []
        self.makernote_errors: List[MakerNoteError] = []

        self._tags = {}  # type: Dict[str, Tuple[Tag, ExifReader]]

    def __str__(self) -> str:
        return 'EXIF Header ({} tags)'.format(len(self._tags))

    def __repr__(self) -> str:
        return '<{}.{} tags={}, endian={} at {}>'.format(
            self.__class__.__module__,
            self.__class__.__name__,
            len(self._tags),
            self.reader.endian,
            hex(id(self))
        )

    def __contains__(self, name: str) -> bool:
        return name in self._tags

    def __len__(self) -> int:
        return len(self._tags)

    def items(self) -> Iterator[Tuple[str, Tag]]:
        for name, (tag, _) in self._tags.items():
            yield name, tag

    def get(self, name: str) -> Optional[Tag]:
        entry = self._tags.get(name)
        if entry is None:
            return None
        return entry[0]

    def reader_for(self, name: str) -> Optional[ExifReader]:
        entry = self._tags.get(name)
        if entry is None:
            return None
        return entry[1]

    def update(self, name: str, tag: Tag, reader: Optional[ExifReader]=None) -> None:
        if reader is None:
            reader = self.reader_for(name) or self.reader
        self._tags[name] = (tag, reader)

    def load_tags(
        self,
        ifd: Ifd,
        field_map: dict,
        reader: Optional[ExifReader]=None,
        show_missing: bool=False,
    ) -> None:
        """
        Name the tags of ``ifd`` from ``field_map`` and add them.

        Tags missing from the map are skipped unless ``show_missing``.
        """
        if reader is None:
            reader = self.reader
        for tag_id, tag in ifd.tags.items():
            tag_entry = field_map.get(tag_id)
            if tag_entry is None:
                if not show_missing:
                    continue
                tag_entry = (tag.name, )

            tag.name = tag_entry[0]
            if len(tag_entry) > 1:
                override = tag_entry[1]
                if unit_size(override) == unit_size(tag.field_type):
                    tag.field_type = override
                else:
                    logger.debug(' Not overriding type of %s', tag.name)
            self._tags[tag.name] = (tag, reader)

    def _value(self, name: str, getter: Callable[[Tag, ExifReader], T]) -> Optional[T]:
        entry = self._tags.get(name)
        if entry is None:
            return None
        tag, reader = entry
        return getter(tag, reader)

    def get_string(self, name: str) -> Optional[str]:
        return self._value(name, Tag.get_string)

    def get_int(self, name: str) -> Optional[int]:
        return self._value(name, Tag.get_int)

    def get_rational(self, name: str) -> Optional[Rational]:
        return self._value(name, Tag.get_rational)

    def get_rationals(self, name: str) -> Optional[List[Rational]]:
        return self._value(name, Tag.get_rationals)

    def get_uint16s(self, name: str) -> Optional[List[int]]:
        return self._value(name, Tag.get_uint16s)

    def get_bytes(self, name: str) -> Optional[bytes]:
        return self._value(name, Tag.get_bytes)

    def _list_ifds(self, first_ifd_offset: int, ifd0_path: Tuple[str, ...], strict: bool) -> List[Ifd]:
        """Follow the IFD chain from the header."""
        ifds = []
        seen = set()
        offset = first_ifd_offset
        while offset and offset not in seen and len(ifds) < MAX_CHAINED_IFDS:
            seen.add(offset)
            ifd_path = ifd0_path if not ifds else ('IFD%d' % len(ifds), )
            try:
                ifd = Ifd(self.reader, offset, ifd_path)
            except ExifError as err:
                if strict or not ifds:
                    raise
                logger.warning('Possibly corrupted IFD at %d: %s', offset, err)
                break
            ifds.append(ifd)
            offset = ifd.next_offset
        return ifds

    def _dump_sub_ifds(self, ifd: Ifd, node: MappedIfd, strict: bool) -> None:
        """Descend into every mapped child whose pointer tag is present."""
        for tag_id, child in node.children.items():
            pointer = ifd.tags.get(tag_id)
            if pointer is None:
                continue
            try:
                offset = pointer.get_int(self.reader)
                logger.debug('%s SubIFD at offset %d:', child, offset)
                sub_ifd = Ifd(self.reader, offset, child.path)
            except ExifError as err:
                if strict:
                    raise
                logger.warning('Possibly corrupted %s SubIFD: %s', child, err)
                continue
            self.ifds.append(sub_ifd)
            self.load_tags(sub_ifd, IFD_TAG_MAP.get(child.path, {}))
            self._dump_sub_ifds(sub_ifd, child, strict)

    def decode(self, first_ifd_offset: int, strict: bool=False) -> None:
        """
        Load IFD0, the sub-IFDs registered in the mapping and the
        thumbnail IFD.

        A broken sub-IFD is skipped with a warning unless ``strict``.
        """
        node = self.mapping.lookup(IFD_ROOT_ID)
        ifd0_path = node.path if node is not None else ('IFD', )

        chain = self._list_ifds(first_ifd_offset, ifd0_path, strict)
        if not chain:
            logger.warning('No IFD at offset %d', first_ifd_offset)
            return

        ifd0 = chain[0]
        self.ifds.append(ifd0)
        self.load_tags(ifd0, IFD_TAG_MAP.get(ifd0.path, {}))
        if node is not None:
            self._dump_sub_ifds(ifd0, node, strict)

        for thumbnail_ifd in chain[1:2]:
            self.ifds.append(thumbnail_ifd)
            self.load_tags(thumbnail_ifd, THUMBNAIL_TAGS)
