"""
Random access sources tags are resolved against.

Offsets handed to a reader are absolute within the TIFF structure, i.e.
relative to the byte order marker of the TIFF header.
"""

import threading
from typing import BinaryIO, Union


class ExifReader:
    """
    Read N bytes at an absolute offset, with a fixed byte order.
    """

    def __init__(self, endian: str):
        if endian not in ('I', 'M'):
            raise ValueError('unexpected endian: %r' % endian)
        self.endian = endian

    @property
    def fmt(self) -> str:
        """struct byte order prefix."""
        # Little-endian if Intel, big-endian if Motorola
        return '<' if self.endian == 'I' else '>'

    def read_at(self, offset: int, length: int) -> bytes:
        raise NotImplementedError

    def __repr__(self) -> str:
        return '<{}.{} endian={} at {}>'.format(
            self.__class__.__module__,
            self.__class__.__name__,
            self.endian,
            hex(id(self))
        )


class FileReader(ExifReader):
    """
    Reader over a seekable binary file; ``base`` is where the TIFF header
    sits in the file.
    """

    def __init__(self, file_handle: BinaryIO, endian: str, base: int=0):
        super().__init__(endian)
        self._file_handle = file_handle
        self.base = base
        self._lock = threading.Lock()

    def read_at(self, offset: int, length: int) -> bytes:
        if offset < 0 or length < 0:
            raise ValueError('negative read: offset=%d length=%d' % (offset, length))
        with self._lock:
            self._file_handle.seek(self.base + offset)
            return self._file_handle.read(length)


class BytesReader(ExifReader):
    """
    Reader over an in-memory buffer whose first byte is at absolute
    offset ``base``.

    A non-zero base behaves as if the buffer were preceded by ``base``
    unused bytes, which lets directories whose pointers are relative to
    an enclosing structure be decoded from a detached copy.
    """

    def __init__(self, data: Union[bytes, bytearray, memoryview], endian: str, base: int=0):
        super().__init__(endian)
        self._data = bytes(data)
        self.base = base

    def __len__(self) -> int:
        return self.base + len(self._data)

    def read_at(self, offset: int, length: int) -> bytes:
        start = offset - self.base
        if start < 0 or length < 0:
            raise ValueError(
                'read outside buffer: offset=%d length=%d base=%d' % (offset, length, self.base)
            )
        return self._data[start:start + length]
