"""Microphone capture device backed by PyAudio."""

import errno
import logging
from abc import ABC, abstractmethod
from threading import Thread, Event
from typing import Callable, Optional

import pyaudio

from ..errors import DeviceUnavailable, PermissionDenied

logger = logging.getLogger(__name__)


ChunkCallback = Callable[[bytes], None]
ErrorCallback = Callable[[Exception], None]


class AudioInputDevice(ABC):
    """Exclusive handle on an audio input device.

    ``open`` blocks until the device is granted or refused; chunks and
    runtime errors are then delivered through the callbacks, possibly from
    another thread. ``close`` stops delivery and releases the device.
    """

    @abstractmethod
    def open(self, on_chunk: ChunkCallback, on_error: ErrorCallback) -> None:
        """Acquire the device and start delivering chunks.

        Raises:
            DeviceUnavailable: No capture capability
            PermissionDenied: Access refused by the user or the OS
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Stop delivering chunks and release the device. Idempotent."""
        pass


class PyAudioCapture(AudioInputDevice):
    """Reads fixed-size chunks from a PyAudio input stream in a background thread."""

    def __init__(
        self,
        sample_rate: int = 16000,
        chunk_size: int = 1024,
        channels: int = 1,
        format: int = pyaudio.paInt16,
        device_index: Optional[int] = None,
    ):
        """Initialize audio capture with specified parameters.

        Args:
            sample_rate: Audio sample rate (16kHz suits speech recognition)
            chunk_size: Size of each audio chunk in samples
            channels: Number of audio channels (1 for mono)
            format: Audio format (16-bit signed int)
            device_index: PyAudio input device index, None for the default
        """
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.format = format
        self.device_index = device_index

        # Recording thread management
        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.is_open = False
        self.total_chunks = 0

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None

    def open(self, on_chunk: ChunkCallback, on_error: ErrorCallback) -> None:
        if self.is_open:
            logger.warning("Audio device already open")
            return

        self.pyaudio_instance = pyaudio.PyAudio()
        try:
            if self.pyaudio_instance.get_device_count() == 0:
                raise DeviceUnavailable("No audio devices found")
            self.stream = self.__open_audio_stream()
        except OSError as e:
            self.__terminate()
            if e.errno in (errno.EACCES, errno.EPERM) or "permission" in str(e).lower():
                raise PermissionDenied("Microphone permission denied.") from e
            raise DeviceUnavailable(f"Error accessing microphone: {e}") from e
        except DeviceUnavailable:
            self.__terminate()
            raise

        self.stop_event.clear()
        self.total_chunks = 0
        self.is_open = True

        self.recording_thread = Thread(
            target=self._record_continuously, args=(on_chunk, on_error), daemon=True
        )
        self.recording_thread.name = "AudioCaptureThread"
        self.recording_thread.start()

    def close(self) -> None:
        if not self.is_open:
            return

        logger.info("Stopping audio capture")
        self.stop_event.set()

        if self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Recording thread did not stop cleanly")

        if self.stream:
            try:
                self.stream.stop_stream()
                self.stream.close()
            finally:
                self.stream = None
                self.__terminate()
        else:
            self.__terminate()

        self.is_open = False
        logger.info(f"Audio device released. Total chunks: {self.total_chunks}")

    def __open_audio_stream(self):
        stream = self.pyaudio_instance.open(
            format=self.format,
            channels=self.channels,
            rate=self.sample_rate,
            input=True,
            input_device_index=self.device_index,
            frames_per_buffer=self.chunk_size,
            stream_callback=None
        )
        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_size} samples/chunk")
        return stream

    def __terminate(self) -> None:
        if self.pyaudio_instance:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None

    def _record_continuously(self, on_chunk: ChunkCallback, on_error: ErrorCallback) -> None:
        """Internal method: continuous read loop in background thread."""
        stream = self.stream
        while not self.stop_event.is_set():
            try:
                audio_chunk = stream.read(self.chunk_size, exception_on_overflow=False)
            except OSError as e:
                if self.stop_event.is_set():
                    break
                logger.error(f"Audio device failed while recording: {e}")
                on_error(e)
                return

            self.total_chunks += 1
            on_chunk(audio_chunk)

    def __del__(self):
        """Ensure the device is released on deletion."""
        if self.is_open:
            self.close()
