# Copyright (c) 2026 Steinwurf ApS
# SPDX-License-Identifier: MIT
"""Exceptions raised by read_buffer."""


class ReadBufferError(Exception):
    """Base exception for read buffer errors."""

    pass


class UnexpectedEndOfStreamError(ReadBufferError, EOFError):
    """Raised when the source ends before a read request is satisfied.

    Bytes read before the end of the stream stay buffered and are returned by
    a later call that can be satisfied from them.
    """

    pass


class StaleViewError(ReadBufferError):
    """Raised when a view is used after its buffer was read into again."""

    pass


class SourceContractError(ReadBufferError):
    """Raised when a byte source returns something readinto() may not."""

    pass
