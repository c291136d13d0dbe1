"""Recording state machine: start/stop toggle, auto-stop timers and teardown."""

import logging
from typing import Callable, Optional

from ..audio.capture import AudioInputDevice, PyAudioCapture
from ..audio.session import AudioSession
from ..audio.timers import Scheduler, TimerCoordinator, TimerKind
from ..config import VoiceCommandConfig
from ..errors import DeviceRuntimeError, DeviceUnavailable, PermissionDenied, VoiceCommandError
from ..models.recording import EncodedRecording, RecordingStats, RecordingStatus, pcm_mime_type

logger = logging.getLogger(__name__)


DEFAULT_SILENCE_TIMEOUT_MS = 3000
DEFAULT_MAX_DURATION_MS = 15000


class RecordingService:
    """Public face of the recorder.

    ``start`` acts as a toggle: calling it while a session is active stops
    that session instead of opening a second device. Either timer expiring
    goes through the same ``stop`` path as an explicit call; whichever
    reaches the status check first wins and the other is a no-op.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        device_factory: Callable[[], AudioInputDevice],
        on_recording_complete: Callable[[EncodedRecording], None],
        on_recording_error: Optional[Callable[[VoiceCommandError], None]] = None,
        silence_timeout_ms: int = DEFAULT_SILENCE_TIMEOUT_MS,
        max_duration_ms: int = DEFAULT_MAX_DURATION_MS,
        mime_type: str = pcm_mime_type(),
    ):
        """Initialize recording service.

        Args:
            scheduler: Event loop (or test clock) used for the timers
            device_factory: Creates the input device for each new session
            on_recording_complete: Receives each finished recording
            on_recording_error: Receives device errors from an active session
            silence_timeout_ms: Idle window after the last chunk before auto-stop
            max_duration_ms: Hard ceiling on session length
            mime_type: Declared capture format of the device's chunks
        """
        self.device_factory = device_factory
        self.on_recording_complete = on_recording_complete
        self.on_recording_error = on_recording_error
        self.silence_timeout_ms = silence_timeout_ms
        self.max_duration_ms = max_duration_ms
        self.mime_type = mime_type

        self.timers = TimerCoordinator(scheduler)
        self.session: Optional[AudioSession] = None
        self.error: Optional[str] = None
        self.sessions_started = 0

    @classmethod
    def from_config(
        cls,
        config: VoiceCommandConfig,
        scheduler: Scheduler,
        on_recording_complete: Callable[[EncodedRecording], None],
        on_recording_error: Optional[Callable[[VoiceCommandError], None]] = None,
    ) -> "RecordingService":
        """Build a service that records from the configured PyAudio device."""
        sample_rate = config.get('audio.sample_rate', 16000)
        channels = config.get('audio.channels', 1)

        def device_factory() -> AudioInputDevice:
            return PyAudioCapture(
                sample_rate=sample_rate,
                chunk_size=config.get('audio.chunk_size', 1024),
                channels=channels,
                device_index=config.get('audio.device_index'),
            )

        return cls(
            scheduler=scheduler,
            device_factory=device_factory,
            on_recording_complete=on_recording_complete,
            on_recording_error=on_recording_error,
            silence_timeout_ms=config.get('recording.silence_timeout_ms', DEFAULT_SILENCE_TIMEOUT_MS),
            max_duration_ms=config.get('recording.max_duration_ms', DEFAULT_MAX_DURATION_MS),
            mime_type=pcm_mime_type(sample_rate, channels),
        )

    @property
    def is_recording(self) -> bool:
        return self.session is not None and self.session.is_active

    @property
    def status(self) -> RecordingStatus:
        if self.session is None:
            return RecordingStatus.IDLE
        return self.session.status

    async def start(self) -> bool:
        """Start a new recording, or stop the active one (toggle).

        Returns:
            True if a new session is now recording
        """
        if self.is_recording:
            logger.info("start() while recording: toggling to stop")
            self.stop()
            return False

        self.error = None
        session = AudioSession(
            device=self.device_factory(),
            timers=self.timers,
            on_complete=self._handle_complete,
            on_error=self._handle_error,
            on_activity=self._arm_silence_timer,
            mime_type=self.mime_type,
        )
        self.session = session
        self.sessions_started += 1

        try:
            started = await session.open()
        except (PermissionDenied, DeviceUnavailable, DeviceRuntimeError) as e:
            self.error = str(e)
            logger.error(f"Error accessing microphone: {e}")
            return False

        if not started:
            return False

        self.timers.arm(TimerKind.MAX_DURATION, self.max_duration_ms, self._on_max_duration)
        self._arm_silence_timer()
        logger.info(f"Listening (silence window {self.silence_timeout_ms}ms, "
                    f"ceiling {self.max_duration_ms}ms)")
        return True

    def stop(self) -> None:
        """Stop the active session. No-op unless recording."""
        if not self.is_recording:
            return

        self.timers.cancel_all()
        self.session.close()

    def teardown(self) -> None:
        """Release everything; no callback fires afterwards."""
        self.timers.cancel_all()
        if self.session is not None:
            self.session.abort()
        logger.info("RecordingService torn down")

    def get_recording_stats(self) -> Optional[RecordingStats]:
        """Get current recording statistics."""
        if self.session:
            return self.session.get_stats()
        return None

    def _arm_silence_timer(self) -> None:
        self.timers.arm(TimerKind.SILENCE, self.silence_timeout_ms, self._on_silence)

    def _on_silence(self) -> None:
        logger.info(f"No audio for {self.silence_timeout_ms}ms, stopping")
        self.stop()

    def _on_max_duration(self) -> None:
        logger.info(f"Maximum recording duration of {self.max_duration_ms}ms reached, stopping")
        self.stop()

    def _handle_complete(self, recording: EncodedRecording) -> None:
        self.on_recording_complete(recording)

    def _handle_error(self, error: VoiceCommandError) -> None:
        self.timers.cancel_all()
        self.error = str(error)
        if self.on_recording_error:
            self.on_recording_error(error)
