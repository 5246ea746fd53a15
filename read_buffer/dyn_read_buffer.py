# Copyright (c) 2026 Steinwurf ApS
# SPDX-License-Identifier: MIT
"""Growable read buffer with exact-length and delimited reads."""

import logging
import operator
from typing import Any, Union

from .errors import UnexpectedEndOfStreamError
from .source import as_source, read_into
from .view import BufferView

log = logging.getLogger(__name__)

# Minimum free space reserved past the filled window before each read_until read
MIN_READ_CHUNK = 32


def _delimiter_byte(delimiter: Union[int, bytes, bytearray, memoryview]) -> int:
    """Normalize a delimiter given as an int or a single byte."""
    if isinstance(delimiter, (bytes, bytearray, memoryview)):
        if len(delimiter) != 1:
            raise ValueError(
                f"delimiter must be a single byte, got {len(delimiter)} bytes"
            )
        return delimiter[0]
    if isinstance(delimiter, bool) or not isinstance(delimiter, int):
        raise ValueError(f"delimiter must be an int or a single byte: {delimiter!r}")
    if not 0 <= delimiter <= 255:
        raise ValueError(f"delimiter must be in range(0, 256): {delimiter}")
    return delimiter


class DynReadBuffer:
    """A heap buffer to read into from a byte source.

    Data read into the buffer is only reachable through the views returned by
    :meth:`read_bytes` and :meth:`read_until`, each covering exactly the bytes
    that call produced. Bytes read past what a call returns (the filled
    window) are kept for the following calls, including when a call fails.

    The source is passed to every call and never stored, so one buffer can
    serve several sources in turn.

    Not thread-safe: a buffer must be used by one caller at a time.
    """

    __slots__ = ("_buffer", "_chunk_size", "_start", "_length", "_generation")

    def __init__(self, capacity: int = 0, chunk_size: int = MIN_READ_CHUNK):
        """Create an empty buffer.

        Args:
            capacity: Initial size of the buffer region in bytes
            chunk_size: Minimum free space reserved before each read of
                :meth:`read_until`

        Raises:
            ValueError: If capacity is negative or chunk_size is below 1
        """
        if capacity < 0:
            raise ValueError(f"capacity must not be negative: {capacity}")
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be at least 1: {chunk_size}")

        self._buffer = bytearray(capacity)
        self._chunk_size = chunk_size
        self._start = 0
        self._length = 0
        self._generation = 0

    def read_bytes(self, source: Any, amount: int) -> BufferView:
        """Read exactly ``amount`` bytes and return a view of them.

        Buffered bytes left over from earlier calls are used first; the source
        is only read when they do not suffice. Short reads are retried until
        the amount is complete and ``InterruptedError`` is retried
        transparently.

        An ``amount`` of 0 reads nothing and returns an empty view. Like any
        other call it still makes the views of earlier calls stale.

        Args:
            source: Byte source, see :func:`read_buffer.source.as_source`
            amount: Number of bytes to return

        Returns:
            View of the ``amount`` bytes, valid until the next call

        Raises:
            UnexpectedEndOfStreamError: If the source ends first. Whatever was
                read stays buffered for later calls.
            TypeError: If amount is not an integer
            ValueError: If amount is negative
        """
        amount = operator.index(amount)
        if amount < 0:
            raise ValueError(f"amount must not be negative: {amount}")

        self._generation += 1
        if amount == 0:
            return BufferView(self, self._start, self._start)

        if amount > self._length:
            source = as_source(source)
            self._reserve(amount - self._length)

            stop = self._start + amount
            while self._length < amount:
                end = self._filled_end()
                count = read_into(source, self._buffer, end, stop)
                if count == 0:
                    log.debug(
                        "read_bytes: end of stream with %d of %d bytes buffered",
                        self._length,
                        amount,
                    )
                    raise UnexpectedEndOfStreamError(
                        f"stream ended after {self._length} of {amount} bytes"
                    )
                self._length += count

        return self._consume(amount)

    def read_until(self, source: Any, delimiter: Union[int, bytes]) -> BufferView:
        """Read up to and including the next ``delimiter`` byte.

        The buffered bytes are searched first and the source is only read
        when they hold no delimiter. Each newly read chunk is searched once;
        bytes already searched are not searched again when the scan resumes.

        There is no limit on how far the delimiter may be: the buffer grows
        until it arrives or the stream ends.

        Args:
            source: Byte source, see :func:`read_buffer.source.as_source`
            delimiter: Byte value as an int or a single byte

        Returns:
            View from the first unconsumed byte through the delimiter, valid
            until the next call

        Raises:
            UnexpectedEndOfStreamError: If the stream ends before a delimiter.
                The bytes read so far stay buffered.
            ValueError: If delimiter is not a single byte
        """
        delimiter = _delimiter_byte(delimiter)
        self._generation += 1

        if self._length > 0:
            position = self._buffer.find(delimiter, self._start, self._filled_end())
            if position != -1:
                return self._consume(position + 1 - self._start)

        source = as_source(source)
        while True:
            self._reserve(self._chunk_size)

            end = self._filled_end()
            count = read_into(source, self._buffer, end, len(self._buffer))
            if count == 0:
                log.debug(
                    "read_until: end of stream before delimiter 0x%02x, "
                    "%d bytes buffered",
                    delimiter,
                    self._length,
                )
                raise UnexpectedEndOfStreamError(
                    f"stream ended before delimiter 0x{delimiter:02x} "
                    f"({self._length} bytes buffered)"
                )
            self._length += count

            position = self._buffer.find(delimiter, end, end + count)
            if position != -1:
                return self._consume(position + 1 - self._start)

    @property
    def capacity(self) -> int:
        """Current size of the buffer region in bytes."""
        return len(self._buffer)

    @property
    def pending(self) -> int:
        """Number of bytes read from a source but not yet returned."""
        return self._length

    def _filled_end(self) -> int:
        return self._start + self._length

    def _consume(self, amount: int) -> BufferView:
        """Hand out the first ``amount`` bytes of the filled window."""
        view = BufferView(self, self._start, self._start + amount)
        self._start += amount
        self._length -= amount
        return view

    def _reserve(self, amount: int) -> None:
        """Make room for ``amount`` bytes past the filled window."""
        end = self._filled_end()
        if len(self._buffer) >= end + amount:
            return

        # Reuse the consumed prefix when it alone is large enough
        if self._start >= amount:
            log.debug(
                "Compacting %d buffered bytes from offset %d",
                self._length,
                self._start,
            )
            self._buffer[: self._length] = self._buffer[self._start : end]
            self._start = 0
            return

        grow_by = end + amount - len(self._buffer)
        log.debug(
            "Growing buffer from %d to %d bytes", len(self._buffer), end + amount
        )
        self._buffer.extend(bytes(grow_by))
