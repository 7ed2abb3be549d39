"""
Tree of named IFDs, keyed by the tag ID that points at each of them.

The tree is built once and only read afterwards; lookups need no locking.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from .exceptions import DuplicateDirectoryMapping, IfdMappingError

IFD_ROOT_ID = 0x0000
IFD_EXIF_ID = 0x8769
IFD_GPS_ID = 0x8825
IFD_IOP_ID = 0xA005


class MappedIfd:
    """
    One node: ``placement`` is the tag ID path from the root, ``path``
    the matching names.
    """

    def __init__(
        self,
        parent_tag_id: int,
        placement: Sequence[int],
        path: Sequence[str],
        name: str,
        tag_id: int,
    ):
        self.parent_tag_id = parent_tag_id
        self.placement: Tuple[int, ...] = tuple(placement)
        self.path: Tuple[str, ...] = tuple(path)
        self.name = name
        self.tag_id = tag_id
        self.children = {}  # type: Dict[int, MappedIfd]

    def __str__(self) -> str:
        return '/'.join(self.path) or '<root>'

    def __repr__(self) -> str:
        return '<{}.{} {} tag_id={} at {}>'.format(
            self.__class__.__module__,
            self.__class__.__name__,
            self,
            '0x%04X' % self.tag_id,
            hex(id(self))
        )


class IfdMapping:

    def __init__(self):
        self.root = MappedIfd(0, (), (), '', IFD_ROOT_ID)
        # tag ID -> node, to catch one tag mapped under two parents
        self._by_tag = {}  # type: Dict[int, MappedIfd]

    def get(self, placement: Sequence[int]) -> Optional[MappedIfd]:
        """Node at the given tag ID path, None if it is not mapped."""
        node = self.root
        for tag_id in placement:
            child = node.children.get(tag_id)
            if child is None:
                return None
            node = child
        return node

    def path_of(self, placement: Sequence[int]) -> Optional[Tuple[str, ...]]:
        node = self.get(placement)
        if node is None:
            return None
        return node.path

    def lookup(self, tag_id: int, from_node: Optional[MappedIfd]=None) -> Optional[MappedIfd]:
        """Child of ``from_node`` (the root by default) reached through ``tag_id``."""
        if from_node is None:
            from_node = self.root
        return from_node.children.get(tag_id)

    def insert(
        self,
        parent_tag_id: int,
        parent_placement: Sequence[int],
        tag_id: int,
        name: str,
    ) -> MappedIfd:
        parent = self.get(parent_placement)
        if parent is None:
            raise IfdMappingError('Parent IFD %r is not mapped' % (list(parent_placement),))
        if parent.tag_id != parent_tag_id:
            raise IfdMappingError(
                'Parent IFD %s has tag 0x%04X, not 0x%04X' % (parent, parent.tag_id, parent_tag_id)
            )

        existing = self._by_tag.get(tag_id)
        if existing is not None:
            if existing.placement[:-1] == parent.placement and existing.name == name:
                return existing
            raise DuplicateDirectoryMapping(
                'Tag 0x%04X is already mapped to %s' % (tag_id, existing)
            )

        node = MappedIfd(
            parent.tag_id,
            parent.placement + (tag_id,),
            parent.path + (name,),
            name,
            tag_id,
        )
        parent.children[tag_id] = node
        self._by_tag[tag_id] = node
        return node

    def walk(self) -> List[MappedIfd]:
        """All nodes below the root, parents before children."""
        nodes = []
        pending = list(self.root.children.values())
        while pending:
            node = pending.pop(0)
            nodes.append(node)
            pending.extend(node.children.values())
        return nodes


def load_standard_ifds(mapping: IfdMapping) -> IfdMapping:
    """Register IFD0 and the Exif, GPS and interoperability sub-IFDs."""
    mapping.insert(IFD_ROOT_ID, [], IFD_ROOT_ID, 'IFD')
    mapping.insert(IFD_ROOT_ID, [IFD_ROOT_ID], IFD_EXIF_ID, 'Exif')
    mapping.insert(IFD_EXIF_ID, [IFD_ROOT_ID, IFD_EXIF_ID], IFD_IOP_ID, 'Iop')
    mapping.insert(IFD_ROOT_ID, [IFD_ROOT_ID], IFD_GPS_ID, 'GPSInfo')
    return mapping
