"""Bounded sequential reader over an immutable byte buffer."""

import struct

from exifstrip.errors import ShortReadError


class ByteCursor:
    """Explicit read position over ``data[start:end]``.

    Every read either returns exactly the requested number of bytes or
    raises ShortReadError. The buffer itself is never copied or mutated.
    """
    __slots__ = ('data', 'pos', 'end')

    def __init__(self, data: bytes, start: int = 0, end: int = None):
        self.data = data
        self.pos = start
        self.end = len(data) if end is None else min(end, len(data))

    @property
    def remaining(self) -> int:
        return max(self.end - self.pos, 0)

    def _require(self, n: int):
        if n > self.remaining:
            raise ShortReadError(self.pos, n, self.remaining)

    def read(self, n: int) -> bytes:
        self._require(n)
        chunk = self.data[self.pos:self.pos + n]
        self.pos += n
        return chunk

    def skip(self, n: int):
        self._require(n)
        self.pos += n

    def unpack(self, fmt: str):
        """Read and unpack a single struct value (fmt includes the endian prefix)."""
        size = struct.calcsize(fmt)
        self._require(size)
        value = struct.unpack_from(fmt, self.data, self.pos)[0]
        self.pos += size
        return value
