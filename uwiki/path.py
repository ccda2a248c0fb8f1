"""Byte-segment paths; the empty path is the root directory."""
from urllib.parse import quote, unquote_to_bytes

from typing_extensions import Self

from uwiki import errors
from uwiki import types

SEPARATOR = b'/'
# sub-delims plus ':' and '@' may appear unescaped inside a URL path segment
_SAFE = "!$&'()*+,;=:@"


def _check_segment(segment: types.Segment) -> types.Segment:
    if not isinstance(segment, bytes):
        raise TypeError(f'path segments are bytes, got {type(segment).__name__}')
    if not segment:
        raise errors.InvalidPath('empty path segment')
    if SEPARATOR in segment or b'\x00' in segment:
        raise errors.InvalidPath(f'illegal character in segment {segment!r}')
    if segment in (b'.', b'..'):
        raise errors.InvalidPath(f'illegal segment {segment!r}')
    return segment


def _split(raw: bytes) -> list[bytes]:
    if raw.startswith(SEPARATOR):
        raw = raw[1:]
    if raw.endswith(SEPARATOR):
        raw = raw[:-1]
    if not raw:
        return []
    return raw.split(SEPARATOR)


class Path:

    def __init__(self, segments=()):
        self._segments = [_check_segment(segment) for segment in segments]

    @classmethod
    def from_bytes(cls, raw: bytes) -> Self:
        """Split raw ``/``-separated bytes. A single leading and trailing slash is ignored."""
        return cls(_split(raw))

    @classmethod
    def from_str(cls, text: str) -> Self:
        return cls.from_bytes(text.encode())

    @classmethod
    def from_percent_encoded(cls, raw: bytes | str) -> Self:
        return cls.from_bytes(unquote_to_bytes(raw))

    def segments(self) -> tuple[types.Segment, ...]:
        return tuple(self._segments)

    def is_empty(self) -> bool:
        return not self._segments

    def parent(self) -> Self:
        if self.is_empty():
            raise errors.NoParent()
        return type(self)(self._segments[:-1])

    def filename(self) -> types.Segment:
        if self.is_empty():
            raise errors.NoParent('the root path has no filename')
        return self._segments[-1]

    def pop_first(self) -> types.Segment:
        if self.is_empty():
            raise IndexError('pop from the root path')
        return self._segments.pop(0)

    def push(self, segment: types.Segment):
        self._segments.append(_check_segment(segment))

    def copy(self) -> Self:
        return type(self)(self._segments)

    def child(self, segment: types.Segment) -> Self:
        path = self.copy()
        path.push(segment)
        return path

    def percent_encode(self) -> str:
        return '/'.join(quote(segment, safe=_SAFE) for segment in self._segments)

    def __len__(self):
        return len(self._segments)

    def __bytes__(self):
        return SEPARATOR.join(self._segments)

    def __str__(self):
        return bytes(self).decode('utf-8', 'replace')

    def __repr__(self):
        return f'Path({str(self)!r})'

    def __eq__(self, other):
        if not isinstance(other, Path):
            return NotImplemented
        return self._segments == other._segments

    def __hash__(self):
        return hash(tuple(self._segments))
