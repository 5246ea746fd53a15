# Copyright (c) 2026 Steinwurf ApS
# SPDX-License-Identifier: MIT
"""Read-only views over the bytes a buffer has just read."""

import operator
from typing import Any, Iterator, Union

from .errors import StaleViewError


class BufferView:
    """The bytes returned by one read call on a buffer.

    A view does not copy. It refers to a range of its owner's region and is
    valid until the owner's next ``read_*`` call, after which the region may
    have been compacted, grown or overwritten. Any access to a view after
    that raises :class:`StaleViewError`. Use :meth:`tobytes` (or
    ``bytes(view)``) to keep the data.
    """

    __slots__ = ("_owner", "_generation", "_start", "_stop")

    def __init__(self, owner: Any, start: int, stop: int) -> None:
        self._owner = owner
        self._generation = owner._generation
        self._start = start
        self._stop = stop

    def is_valid(self) -> bool:
        """Whether the owner has not been read into since this view was made."""
        return self._owner._generation == self._generation

    def _region(self) -> bytearray:
        if not self.is_valid():
            raise StaleViewError(
                "view used after its buffer was read into again; "
                "copy it with tobytes() to keep the data"
            )
        return self._owner._buffer

    def tobytes(self) -> bytes:
        """Copy the viewed bytes out of the buffer."""
        return bytes(self._region()[self._start : self._stop])

    __bytes__ = tobytes

    def __len__(self) -> int:
        self._region()
        return self._stop - self._start

    def __getitem__(self, index: Union[int, slice]) -> Union[int, bytes]:
        region = self._region()
        if isinstance(index, slice):
            return bytes(region[self._start : self._stop])[index]

        index = operator.index(index)
        length = self._stop - self._start
        if index < 0:
            index += length
        if not 0 <= index < length:
            raise IndexError("view index out of range")
        return region[self._start + index]

    def __iter__(self) -> Iterator[int]:
        return iter(self.tobytes())

    def __contains__(self, item: Any) -> bool:
        return item in self.tobytes()

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, BufferView):
            other = other.tobytes()
        elif isinstance(other, (bytes, bytearray, memoryview)):
            other = bytes(other)
        elif isinstance(other, (list, tuple)):
            try:
                other = bytes(other)
            except (TypeError, ValueError):
                return False
        else:
            return NotImplemented
        return self.tobytes() == other

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if not self.is_valid():
            return "<BufferView (stale)>"
        return f"BufferView({self.tobytes()!r})"
