"""Pytest configuration and fixtures for voicecmd tests."""

import asyncio
import heapq
import itertools
import logging
import tempfile
import threading
from typing import Any, Callable, List, Optional
from unittest.mock import Mock, patch

import numpy as np
import pytest
from pubsub import pub

from voicecmd.audio.capture import AudioInputDevice
from voicecmd.services.recording_service import RecordingService
from voicecmd.services.status_publisher import STATUS_TOPIC


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests with every edge faked")
    config.addinivalue_line("markers", "integration: recorder and pipeline wired together")
    config.addinivalue_line("markers", "hardware: needs a real microphone")


class ManualTimerHandle:
    """Handle returned by ManualScheduler.call_later."""

    def __init__(self, when: float, callback: Callable[..., Any], args: tuple):
        self.when = when
        self.callback = callback
        self.args = args
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler:
    """Deterministic stand-in for the event loop's ``call_later``.

    Time only moves when a test calls ``advance``. With
    ``honor_cancel=False`` canceled handles still fire, which simulates a
    scheduler delivering a callback that was already superseded.
    """

    def __init__(self, honor_cancel: bool = True):
        self.now = 0.0
        self.honor_cancel = honor_cancel
        self._queue = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> ManualTimerHandle:
        handle = ManualTimerHandle(self.now + delay, callback, args)
        heapq.heappush(self._queue, (handle.when, next(self._seq), handle))
        return handle

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target + 1e-9:
            when, _, handle = heapq.heappop(self._queue)
            self.now = max(self.now, when)
            if handle.cancelled() and self.honor_cancel:
                continue
            handle.callback(*handle.args)
        self.now = target

    def pending(self) -> int:
        return sum(1 for _, _, handle in self._queue if not handle.cancelled())


class DeviceLedger:
    """Counts acquisitions and releases across every fake device."""

    def __init__(self):
        self.acquisitions = 0
        self.releases = 0
        self.devices: List["FakeAudioDevice"] = []
        self.next_open_error: Optional[Exception] = None
        self.gate: Optional[threading.Event] = None
        self.error_during_open: Optional[Exception] = None
        self.entered = threading.Event()

    @property
    def last(self) -> "FakeAudioDevice":
        return self.devices[-1]


class FakeAudioDevice(AudioInputDevice):
    """In-memory input device; tests push chunks and errors into it."""

    def __init__(self, ledger: DeviceLedger):
        self.ledger = ledger
        self.is_open = False
        self.on_chunk = None
        self.on_error = None
        self.close_calls = 0

    def open(self, on_chunk, on_error) -> None:
        self.ledger.entered.set()
        if self.ledger.gate is not None:
            self.ledger.gate.wait(timeout=5.0)

        error, self.ledger.next_open_error = self.ledger.next_open_error, None
        if error is not None:
            raise error

        self.on_chunk = on_chunk
        self.on_error = on_error
        self.is_open = True
        self.ledger.acquisitions += 1

        if self.ledger.error_during_open is not None:
            on_error(self.ledger.error_during_open)

    def close(self) -> None:
        self.close_calls += 1
        if self.is_open:
            self.is_open = False
            self.ledger.releases += 1

    def emit(self, chunk: bytes) -> None:
        self.on_chunk(chunk)

    def fail(self, error: Exception) -> None:
        self.on_error(error)


class RecorderHarness:
    """RecordingService wired to fakes, collecting its callbacks."""

    def __init__(self, scheduler: ManualScheduler, ledger: DeviceLedger, **kwargs):
        self.scheduler = scheduler
        self.ledger = ledger
        self.completed = []
        self.completed_at = []
        self.errors = []
        self.service = RecordingService(
            scheduler=scheduler,
            device_factory=self._make_device,
            on_recording_complete=self._on_complete,
            on_recording_error=self.errors.append,
            **kwargs
        )

    def _make_device(self) -> FakeAudioDevice:
        device = FakeAudioDevice(self.ledger)
        self.ledger.devices.append(device)
        return device

    def _on_complete(self, recording) -> None:
        self.completed.append(recording)
        self.completed_at.append(self.scheduler.now)


class StatusRecorder:
    """Pub/sub listener that keeps every status event."""

    def __init__(self):
        self.events = []

    def on_status(self, event) -> None:
        self.events.append(event)

    @property
    def titles(self) -> List[str]:
        return [event.title for event in self.events]


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def sample_audio_chunk():
    """Generate a sample audio chunk for testing."""
    # 1024 samples of 16-bit audio (sine wave)
    sample_rate = 16000
    duration = 1024 / sample_rate
    freq = 440  # A4 note

    t = np.linspace(0, duration, 1024, False)
    wave_data = np.sin(2 * np.pi * freq * t)

    audio_data = (wave_data * 16383).astype(np.int16)
    return audio_data.tobytes()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def device_ledger():
    return DeviceLedger()


@pytest.fixture
def harness(scheduler, device_ledger):
    return RecorderHarness(scheduler, device_ledger)


@pytest.fixture
def drain():
    """Let callbacks posted with call_soon_threadsafe run."""
    async def _drain(iterations: int = 5) -> None:
        for _ in range(iterations):
            await asyncio.sleep(0)
    return _drain


@pytest.fixture
def status_events():
    """Capture status events published during the test."""
    recorder = StatusRecorder()
    pub.subscribe(recorder.on_status, STATUS_TOPIC)
    yield recorder
    pub.unsubscribe(recorder.on_status, STATUS_TOPIC)


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        # Configure mock stream
        mock_stream.read.return_value = b'\x00' * 2048  # Silent audio
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        # Configure mock PyAudio instance
        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_device_count.return_value = 1

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture
def lax_scheduler():
    """Scheduler that still delivers callbacks whose handles were canceled."""
    return ManualScheduler(honor_cancel=False)


@pytest.fixture
def make_device(device_ledger):
    """Factory for fake input devices that report to ``device_ledger``."""
    def _make() -> FakeAudioDevice:
        device = FakeAudioDevice(device_ledger)
        device_ledger.devices.append(device)
        return device
    return _make
