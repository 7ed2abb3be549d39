"""
Exceptions raised while locating, resolving and decoding tags.
"""


class ExifError(Exception):
    """Base class for every error raised by exiftags."""


class InvalidExif(ExifError):
    pass


class ExifNotFound(ExifError):
    pass


class InvalidIfd(ExifError):
    pass


class InvalidEmptyTag(ExifError):
    """The tag has no usable field type."""


class InvalidUnitCount(ExifError):
    """The unit count is zero or the encoded length overflows 32 bits."""


class InsufficientInlineData(ExifError):
    """Fewer inline bytes are stored than the encoded length needs."""


class _ReadError(ExifError):

    def __init__(self, offset: int, length: int, message: str):
        super().__init__('%s (offset=%d, length=%d)' % (message, offset, length))
        self.offset = offset
        self.length = length


class SourceReadFailed(_ReadError):

    def __init__(self, offset: int, length: int):
        super().__init__(offset, length, 'Read from source failed')


class ShortRead(_ReadError):

    def __init__(self, offset: int, length: int, got: int):
        super().__init__(offset, length, 'Short read, got %d bytes' % got)
        self.got = got


class NotEnoughData(ExifError):
    pass


class UnsupportedConversion(ExifError):
    pass


class MalformedText(ExifError):
    pass


class IfdMappingError(ExifError):
    pass


class DuplicateDirectoryMapping(IfdMappingError):
    pass


class MakerNoteError(ExifError):
    """A maker note was recognised but could not be decoded."""

    def __init__(self, parser_name: str, cause: Exception):
        super().__init__('%s MakerNote: %s' % (parser_name, cause))
        self.parser_name = parser_name
        self.cause = cause
