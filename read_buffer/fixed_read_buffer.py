# Copyright (c) 2026 Steinwurf ApS
# SPDX-License-Identifier: MIT
"""Fixed-size read buffer."""

import logging
from typing import Any, Callable

from .source import as_source, read_into
from .view import BufferView

log = logging.getLogger(__name__)

DEFAULT_SIZE = 16


class ReadBuffer:
    """A buffer of fixed size to read into from a byte source.

    Every call starts writing at the beginning of the buffer, so nothing is
    carried over between calls. As with :class:`~read_buffer.DynReadBuffer`,
    the data is only reachable through the returned views.
    """

    __slots__ = ("_buffer", "_generation")

    def __init__(self, size: int = DEFAULT_SIZE):
        if size < 0:
            raise ValueError(f"size must not be negative: {size}")
        self._buffer = bytearray(size)
        self._generation = 0

    def read_from(self, source: Any) -> BufferView:
        """Perform one read from ``source`` into the buffer.

        Returns:
            View of the bytes read. An empty view means the source reached
            the end of the stream.
        """
        self._generation += 1
        count = read_into(as_source(source), self._buffer, 0, len(self._buffer))
        return BufferView(self, 0, count)

    def read_while(
        self, source: Any, predicate: Callable[[BufferView], bool]
    ) -> BufferView:
        """Read chunks into the buffer while ``predicate`` accepts them.

        ``predicate`` is called with a view of each chunk as it is read and
        reading continues while it returns true. Reading also stops when the
        buffer is full or the stream ends.

        Args:
            source: Byte source, see :func:`read_buffer.source.as_source`
            predicate: Called with each newly read chunk

        Returns:
            View of all bytes read by this call
        """
        self._generation += 1
        source = as_source(source)
        size = len(self._buffer)
        filled = 0

        while True:
            count = read_into(source, self._buffer, filled, size)
            if count == 0:
                log.debug("read_while: end of stream after %d bytes", filled)
                break

            chunk = BufferView(self, filled, filled + count)
            filled += count
            if not predicate(chunk) or filled == size:
                break

        return BufferView(self, 0, filled)

    @property
    def capacity(self) -> int:
        """Size of the buffer in bytes."""
        return len(self._buffer)

    def __repr__(self) -> str:
        return f"ReadBuffer(size={len(self._buffer)})"
