"""Single-use audio session: device acquisition, chunk buffering and encoding."""

import asyncio
import logging
from datetime import datetime
from typing import Callable, List, Optional

import numpy as np

from .capture import AudioInputDevice
from .timers import TimerCoordinator
from ..errors import DeviceRuntimeError, DeviceUnavailable, VoiceCommandError
from ..models.recording import EncodedRecording, RecordingStats, RecordingStatus, pcm_mime_type

logger = logging.getLogger(__name__)


class AudioSession:
    """Owns one recording attempt from device acquisition to encoded output.

    All state changes happen on the event loop thread. The device delivers
    chunks and errors from its own thread; they are marshalled onto the loop
    with ``call_soon_threadsafe`` so arrival order is preserved.

    Exactly one of ``on_complete`` / ``on_error`` is invoked for a session
    that reached RECORDING, unless the owner aborts it first.
    """

    def __init__(
        self,
        device: AudioInputDevice,
        timers: TimerCoordinator,
        on_complete: Callable[[EncodedRecording], None],
        on_error: Callable[[VoiceCommandError], None],
        on_activity: Optional[Callable[[], None]] = None,
        mime_type: str = pcm_mime_type(),
    ):
        """Initialize audio session.

        Args:
            device: Input device this session will own exclusively
            timers: Timer coordinator canceled on every terminal transition
            on_complete: Called with the finished recording
            on_error: Called with a DeviceRuntimeError if the device fails
            on_activity: Called in the same loop step as each accepted chunk
            mime_type: Declared type of the concatenated chunk bytes
        """
        self.device = device
        self.timers = timers
        self.on_complete = on_complete
        self.on_error = on_error
        self.on_activity = on_activity
        self.mime_type = mime_type

        self.status = RecordingStatus.IDLE
        self.chunks: List[bytes] = []
        self.started_at: Optional[datetime] = None
        self.stopped_at: Optional[datetime] = None
        self.peak_level = 0.0

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._device_acquired = False
        self._open_error: Optional[Exception] = None

    @property
    def is_active(self) -> bool:
        """True while waiting for the device or recording."""
        return self.status in (RecordingStatus.OPENING, RecordingStatus.RECORDING)

    async def open(self) -> bool:
        """Acquire the device and start recording.

        Returns:
            True once recording, False if the session was closed or aborted
            while waiting for the device (the device is released immediately)

        Raises:
            PermissionDenied: Access refused
            DeviceUnavailable: No usable capture device
            DeviceRuntimeError: The device reported an error before recording began

        If the calling task is cancelled mid-open, the device is released as
        soon as the pending open completes.
        """
        if self.status is not RecordingStatus.IDLE:
            raise RuntimeError(f"AudioSession is single-use (status={self.status.value})")

        self._loop = asyncio.get_running_loop()
        self.status = RecordingStatus.OPENING
        logger.info("Requesting audio device")

        pending = self._loop.run_in_executor(
            None, self.device.open, self._post_chunk, self._post_error
        )
        try:
            # Shielded so a cancelled caller still sees the open finish
            await asyncio.shield(pending)
        except asyncio.CancelledError:
            logger.info("open() cancelled while waiting for the device")
            self.timers.cancel_all()
            self.status = RecordingStatus.FAILED
            pending.add_done_callback(self._release_abandoned_open)
            raise
        except VoiceCommandError as e:
            canceled = self.status is not RecordingStatus.OPENING
            self.status = RecordingStatus.FAILED
            if canceled:
                logger.info(f"Device request failed after session was canceled: {e}")
                return False
            logger.warning(f"Could not open audio device: {e}")
            raise
        except Exception as e:
            canceled = self.status is not RecordingStatus.OPENING
            self.status = RecordingStatus.FAILED
            if canceled:
                logger.info(f"Device request failed after session was canceled: {e}")
                return False
            raise DeviceUnavailable(f"Error accessing microphone: {e}") from e

        self._device_acquired = True

        if self.status is not RecordingStatus.OPENING:
            logger.info("Session canceled while waiting for the device; releasing it")
            self._release_device()
            self.status = RecordingStatus.FAILED
            return False

        if self._open_error is not None:
            error, self._open_error = self._open_error, None
            logger.error(f"Audio device failed while opening: {error}")
            self._release_device()
            self.status = RecordingStatus.FAILED
            raise DeviceRuntimeError(f"Audio device failed while opening: {error}")

        self.status = RecordingStatus.RECORDING
        self.started_at = datetime.now()
        logger.info("Recording started")
        return True

    def on_chunk(self, buffer: bytes) -> None:
        """Append a chunk delivered by the device. Only valid while RECORDING."""
        if self.status is not RecordingStatus.RECORDING:
            logger.debug(f"Dropping {len(buffer)} byte chunk, session is {self.status.value}")
            return

        self.chunks.append(buffer)
        self.peak_level = self._peak_level(buffer)
        if self.on_activity:
            self.on_activity()

    def close(self) -> None:
        """Stop recording, encode and hand off the result. Idempotent."""
        if self.status is RecordingStatus.OPENING:
            self._cancel_pending_open()
            return
        if self.status is not RecordingStatus.RECORDING:
            return

        self.timers.cancel_all()
        self.status = RecordingStatus.STOPPING

        try:
            self._release_device()
        except Exception as e:
            logger.error(f"Audio device failed to stop: {e}", exc_info=True)
            self.status = RecordingStatus.FAILED
            self.stopped_at = datetime.now()
            self.on_error(DeviceRuntimeError(f"Audio device failed to stop: {e}"))
            return

        recording = EncodedRecording.from_chunks(self.chunks, self.mime_type)
        self.status = RecordingStatus.COMPLETED
        self.stopped_at = datetime.now()
        logger.info(f"Recording completed: {len(self.chunks)} chunks, {len(recording)} bytes")
        self.on_complete(recording)

    def fail(self, error: Exception) -> None:
        """Device failed mid-recording: release everything and report the error."""
        if self.status is RecordingStatus.OPENING:
            # Raised from open() once the device call returns
            logger.debug(f"Device error while opening: {error}")
            self._open_error = error
            return
        if self.status is not RecordingStatus.RECORDING:
            logger.debug(f"Ignoring device error in status {self.status.value}: {error}")
            return

        self.timers.cancel_all()
        self.status = RecordingStatus.FAILED
        self.stopped_at = datetime.now()
        try:
            self._release_device()
        except Exception as e:
            logger.warning(f"Error releasing failed audio device: {e}", exc_info=True)

        if not isinstance(error, DeviceRuntimeError):
            error = DeviceRuntimeError(f"Audio device error: {error}")
        logger.error(f"Recording failed: {error}")
        self.on_error(error)

    def abort(self) -> None:
        """Owner is going away: release the device without invoking callbacks."""
        if self.status is RecordingStatus.OPENING:
            self._cancel_pending_open()
            return

        self.timers.cancel_all()
        if self.status is RecordingStatus.RECORDING:
            self.status = RecordingStatus.FAILED
            self.stopped_at = datetime.now()
            logger.info("Recording aborted")
        self._release_device()

    def get_stats(self) -> RecordingStats:
        """Get current recording statistics."""
        duration = 0.0
        if self.started_at:
            end = self.stopped_at or datetime.now()
            duration = (end - self.started_at).total_seconds()

        return RecordingStats(
            is_recording=self.status is RecordingStatus.RECORDING,
            duration_seconds=duration,
            total_chunks=len(self.chunks),
            total_bytes=sum(len(chunk) for chunk in self.chunks),
            peak_level=self.peak_level,
        )

    def _cancel_pending_open(self) -> None:
        self.timers.cancel_all()
        self.status = RecordingStatus.STOPPING
        logger.info("Canceling pending device request")

    def _release_abandoned_open(self, future: asyncio.Future) -> None:
        if future.cancelled() or future.exception() is not None:
            return
        logger.info("Device granted after open() was cancelled; releasing it")
        self._device_acquired = True
        self._release_device()

    def _release_device(self) -> None:
        if not self._device_acquired:
            return
        self._device_acquired = False
        self.device.close()

    def _post_chunk(self, buffer: bytes) -> None:
        self._loop.call_soon_threadsafe(self.on_chunk, buffer)

    def _post_error(self, error: Exception) -> None:
        self._loop.call_soon_threadsafe(self.fail, error)

    @staticmethod
    def _peak_level(buffer: bytes) -> float:
        usable = len(buffer) - len(buffer) % 2
        if usable == 0:
            return 0.0
        samples = np.frombuffer(buffer[:usable], dtype=np.int16)
        return float(np.abs(samples.astype(np.int32)).max()) / 32768.0
