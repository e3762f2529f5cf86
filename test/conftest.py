"""pytest configuration and fixtures for smp-testkit tests.

Provides:
- MockSerialPort: Single-buffer mock for frame encode/decode tests
- ConnectedMockPorts: Bidirectional mock pair for serial link tests
- FakeChannel: Records sent PDUs, can be told to fail
- CountingReporter: Records every verdict call, not just the first
- Markers for unit vs integration tests
"""

import io
import threading
from pathlib import Path

import pytest
import serial

from common.connection import ChannelError


class MockSerialPort:
    """Mock serial port for unit testing.

    Uses a single buffer shared between read and write operations.
    Data written to the port can be read back immediately.
    """

    def __init__(self) -> None:
        self._buffer = io.BytesIO()
        self._read_pos = 0
        self._lock = threading.Lock()

    def write(self, data: bytes) -> int:
        with self._lock:
            self._buffer.seek(0, 2)
            return self._buffer.write(data)

    def read(self, size: int = 1, /) -> bytes:
        with self._lock:
            self._buffer.seek(self._read_pos)
            data = self._buffer.read(size)
            self._read_pos = self._buffer.tell()
            return data

    def inject(self, data: bytes) -> None:
        """Inject data into the buffer as if received from peer."""
        self.write(data)


class ConnectedMockPorts:
    """Bidirectional mock port pair.

    Data written to port_a appears in port_b's read buffer and vice versa.
    """

    def __init__(self) -> None:
        self._buffers = {True: bytearray(), False: bytearray()}  # keyed by writer is_port_a
        self._lock = threading.Lock()
        self.port_a = _ConnectedPort(self, is_port_a=True)
        self.port_b = _ConnectedPort(self, is_port_a=False)


class _ConnectedPort:
    """One end of a ConnectedMockPorts pair."""

    def __init__(self, parent: ConnectedMockPorts, is_port_a: bool) -> None:
        self._parent = parent
        self._is_port_a = is_port_a
        self.fail_writes = False

    def write(self, data: bytes) -> int:
        if self.fail_writes:
            raise serial.SerialTimeoutException("Write timeout")
        with self._parent._lock:
            self._parent._buffers[self._is_port_a].extend(data)
            return len(data)

    def read(self, size: int = 1, /) -> bytes:
        with self._parent._lock:
            # Read from the buffer filled by the other port's writes
            buffer = self._parent._buffers[not self._is_port_a]
            data = bytes(buffer[:size])
            del buffer[:size]
            return data

    def inject(self, data: bytes) -> None:
        """Inject data as if it came from the peer."""
        with self._parent._lock:
            self._parent._buffers[not self._is_port_a].extend(data)


class FakeChannel:
    """Channel that records every send."""

    def __init__(self) -> None:
        self.sent: list[tuple[int, int, bytes]] = []
        self.fail = False

    def send(self, handle: int, cid: int, pdu: bytes) -> None:
        if self.fail:
            raise ChannelError(f"Connection {handle:#06x} is gone")
        self.sent.append((handle, cid, pdu))

    @property
    def pdus(self) -> list[bytes]:
        return [pdu for _, _, pdu in self.sent]


class CountingReporter:
    """Reporter that keeps every call so tests can check there was only one."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str | None]] = []

    def report_passed(self) -> None:
        self.calls.append(("passed", None))

    def report_failed(self, reason: str) -> None:
        self.calls.append(("failed", reason))

    @property
    def verdicts(self) -> list[str]:
        return [v for v, _ in self.calls]


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test (runs the CLI)")


@pytest.fixture
def mock_port() -> MockSerialPort:
    return MockSerialPort()


@pytest.fixture
def port_pair() -> ConnectedMockPorts:
    return ConnectedMockPorts()


@pytest.fixture
def channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture
def reporter() -> CountingReporter:
    return CountingReporter()


@pytest.fixture
def script_dir() -> Path:
    """Return path to the main script directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def smptest_path(script_dir: Path) -> Path:
    """Return path to smptest.py."""
    return script_dir / "smptest.py"
