# Copyright (c) 2026 Steinwurf ApS
# SPDX-License-Identifier: MIT
"""Read buffers that only expose the bytes actually read."""

from .dyn_read_buffer import DynReadBuffer
from .errors import (
    ReadBufferError,
    SourceContractError,
    StaleViewError,
    UnexpectedEndOfStreamError,
)
from .fixed_read_buffer import ReadBuffer
from .source import ByteSource, as_source
from .view import BufferView

__all__ = [
    "BufferView",
    "ByteSource",
    "DynReadBuffer",
    "ReadBuffer",
    "ReadBufferError",
    "SourceContractError",
    "StaleViewError",
    "UnexpectedEndOfStreamError",
    "as_source",
]
__version__ = "0.1.0"
