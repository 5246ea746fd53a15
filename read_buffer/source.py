# Copyright (c) 2026 Steinwurf ApS
# SPDX-License-Identifier: MIT
"""Byte sources the read buffers pull from.

A byte source is anything with the ``io.RawIOBase.readinto`` contract:
``readinto(buffer)`` fills a prefix of ``buffer`` and returns how many bytes
it wrote, ``0`` meaning end of stream. Short reads are always legal, and
``InterruptedError`` is a transient failure the caller retries.
"""

import logging
from typing import Any, Optional, Protocol, runtime_checkable

from .errors import SourceContractError

log = logging.getLogger(__name__)


@runtime_checkable
class ByteSource(Protocol):
    """Blocking byte source with ``readinto`` semantics."""

    def readinto(self, buffer: memoryview) -> Optional[int]:
        ...


class _Read1Source:
    """Adapts a buffered stream to ``readinto`` through ``readinto1``.

    ``BufferedReader.readinto`` keeps reading until the target is full, which
    blocks on pipes and sockets once the peer pauses. ``readinto1`` returns
    after at most one read of the underlying raw stream.
    """

    __slots__ = ("_stream",)

    def __init__(self, stream: Any) -> None:
        self._stream = stream

    def readinto(self, buffer: memoryview) -> Optional[int]:
        return self._stream.readinto1(buffer)


class _SocketSource:
    """Adapts a connected socket (``recv_into``) to ``readinto``."""

    __slots__ = ("_sock",)

    def __init__(self, sock: Any) -> None:
        self._sock = sock

    def readinto(self, buffer: memoryview) -> int:
        return self._sock.recv_into(buffer)


class _ReadSource:
    """Adapts an object that only offers ``read(size)`` to ``readinto``."""

    __slots__ = ("_reader",)

    def __init__(self, reader: Any) -> None:
        self._reader = reader

    def readinto(self, buffer: memoryview) -> Optional[int]:
        data = self._reader.read(len(buffer))
        if data is None:
            return None
        count = len(data)
        if count > len(buffer):
            raise SourceContractError(
                f"read({len(buffer)}) returned {count} bytes"
            )
        buffer[:count] = data
        return count


def as_source(obj: Any) -> ByteSource:
    """Return ``obj`` as a :class:`ByteSource`.

    Buffered streams (``readinto1``) are read one raw read at a time, so a
    short line on a pipe or socket comes back without waiting for more data.
    Other objects with ``readinto`` are returned unchanged. Sockets
    (``recv_into``) and plain readers (``read``) are wrapped.

    Raises:
        TypeError: If ``obj`` offers none of these methods
    """
    if hasattr(obj, "readinto1"):
        return _Read1Source(obj)
    if hasattr(obj, "readinto"):
        return obj
    if hasattr(obj, "recv_into"):
        return _SocketSource(obj)
    if hasattr(obj, "read"):
        return _ReadSource(obj)
    raise TypeError(
        f"{type(obj).__name__!r} object is not a byte source "
        "(expected readinto(), recv_into() or read())"
    )


def read_into(source: ByteSource, region: bytearray, start: int, stop: int) -> int:
    """Perform one read from ``source`` into ``region[start:stop]``.

    ``InterruptedError`` is retried until the source either returns a count or
    raises something else. The region is only exported to the source for the
    duration of the call, so it can be resized afterwards.

    Returns:
        Number of bytes written at ``region[start:]``, ``0`` at end of stream

    Raises:
        SourceContractError: If the source returns ``None`` or an out of range count
    """
    with memoryview(region) as view, view[start:stop] as target:
        while True:
            try:
                count = source.readinto(target)
            except InterruptedError:
                log.debug("readinto() interrupted, retrying")
                continue
            break

    if count is None:
        raise SourceContractError(
            "readinto() returned None; non-blocking sources are not supported"
        )
    if not 0 <= count <= stop - start:
        raise SourceContractError(
            f"readinto() returned {count} for a buffer of {stop - start} bytes"
        )
    return count
