"""Pytest configuration and fixtures for read_buffer tests."""

import collections
import logging
import sys
from typing import Deque, Union

import pytest

log = logging.getLogger(__name__)


# ---- Scripted byte sources ----


class ChunkedSource:
    """Byte source that replays queued chunks, end-of-stream markers and errors.

    Each readinto() call takes from the first queued item only, so every chunk
    arrives as its own short read (split further if the target is smaller).
    An empty queue reads as end of stream.
    """

    def __init__(self, *chunks: bytes) -> None:
        self._items: Deque[Union[bytes, BaseException]] = collections.deque()
        self.calls = 0
        for chunk in chunks:
            self.add_chunk(chunk)

    def add_chunk(self, chunk: bytes) -> None:
        self._items.append(bytes(chunk))

    def add_eof(self) -> None:
        self._items.append(b"")

    def add_error(self, error: BaseException) -> None:
        self._items.append(error)

    def readinto(self, buffer: memoryview) -> int:
        self.calls += 1
        if not self._items:
            return 0

        item = self._items.popleft()
        if isinstance(item, BaseException):
            raise item

        count = min(len(item), len(buffer))
        buffer[:count] = item[:count]
        if count < len(item):
            self._items.appendleft(item[count:])
        return count


class ErrorSource:
    """Byte source whose every read fails with FileNotFoundError."""

    def __init__(self) -> None:
        self.calls = 0

    def readinto(self, buffer: memoryview) -> int:
        self.calls += 1
        raise FileNotFoundError("no such source")


def split_chunks(data: bytes, sizes) -> ChunkedSource:
    """ChunkedSource yielding ``data`` in pieces cycling through ``sizes``."""
    source = ChunkedSource()
    offset = 0
    index = 0
    while offset < len(data):
        size = sizes[index % len(sizes)]
        source.add_chunk(data[offset : offset + size])
        offset += size
        index += 1
    return source


def generate_sequence(length: int, start: int = 0) -> bytes:
    """Bytes counting up from ``start`` through 1..255, never containing 0."""
    return bytes(i % 255 + 1 for i in range(start, start + length))


# ---- Fixtures ----


@pytest.fixture
def chunked_source():
    """Fresh empty ChunkedSource."""
    return ChunkedSource()


@pytest.fixture
def error_source():
    """Source that always fails."""
    return ErrorSource()


@pytest.fixture
def chunked():
    """Fixture that returns split_chunks."""
    return split_chunks


@pytest.fixture
def sequence():
    """Fixture that returns generate_sequence."""
    return generate_sequence


# ---- Debug log buffer (print on failure) ----

_DEBUG_LOG_NAMES = (
    "read_buffer",
    "tests",
)

# Buffer of recent log records for display on failure
_debug_log_buffer = []
_DEBUG_BUFFER_MAX = 500


class _DebugBufferHandler(logging.Handler):
    """Buffer log records so we can print them when a test fails."""

    def emit(self, record):
        try:
            msg = self.format(record)
            _debug_log_buffer.append(msg)
            while len(_debug_log_buffer) > _DEBUG_BUFFER_MAX:
                _debug_log_buffer.pop(0)
        except Exception:
            self.handleError(record)


def _install_debug_buffer():
    """Attach the debug buffer handler to the library loggers at DEBUG."""
    handler = _DebugBufferHandler()
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    )
    for name in _DEBUG_LOG_NAMES:
        logger = logging.getLogger(name)
        logger.setLevel(logging.DEBUG)
        logger.addHandler(handler)


def _print_debug_buffer():
    """Print buffered debug log lines to stderr."""
    if not _debug_log_buffer:
        return
    print("\n--- DEBUG LOG (recent) ---", file=sys.stderr)
    for line in _debug_log_buffer[-300:]:
        print(line, file=sys.stderr)
    print("--- END DEBUG LOG ---\n", file=sys.stderr)


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """When a test fails, print buffered debug log messages."""
    outcome = yield
    report = outcome.get_result()
    if call.when == "call" and report.failed:
        _print_debug_buffer()


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """Send DEBUG records of the library to the failure buffer."""
    _install_debug_buffer()


@pytest.fixture(autouse=True)
def clear_debug_buffer():
    """Clear the debug log buffer so failures show only that test's logs."""
    _debug_log_buffer.clear()
    yield
