"""Abstract base classes for transcription backends."""

from abc import ABC, abstractmethod
import logging

from ..models.command import TranscriptionResult

logger = logging.getLogger(__name__)


class AbstractTranscriptionBackend(ABC):
    """Abstract base class for transcription backends."""

    def __init__(self, language: str = "en-US"):
        """Initialize backend with language preference."""
        self.language = language

    @abstractmethod
    def transcribe(self, audio_data_uri: str) -> TranscriptionResult:
        """Transcribe a recorded utterance.

        Args:
            audio_data_uri: ``data:<mime>;base64,<payload>`` envelope

        Returns:
            TranscriptionResult with transcription and metadata

        Raises:
            TranscriptionServiceError: On timeout, malformed audio or an
                unavailable service
        """
        pass

    @abstractmethod
    def initialize(self) -> bool:
        """Initialize backend resources and verify configuration.

        Returns:
            True if initialization successful, False otherwise
        """
        pass

    def cleanup(self) -> None:
        """Clean up backend resources."""
        pass
