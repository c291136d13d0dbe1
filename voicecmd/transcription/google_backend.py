"""Google Speech-to-Text transcription backend."""

import time
import logging
from datetime import datetime
from typing import Optional

from .base import AbstractTranscriptionBackend
from ..errors import TranscriptionServiceError
from ..models.command import TranscriptionResult
from ..models.recording import EncodedRecording

from google.cloud import speech
from google.api_core import exceptions as gax_exceptions
from google.oauth2 import service_account

logger = logging.getLogger(__name__)


class GoogleSpeechBackend(AbstractTranscriptionBackend):
    """Google Speech-to-Text API backend for transcription."""

    def __init__(self,
                 credentials_path: Optional[str] = None,
                 language: str = "en-US",
                 use_enhanced: bool = True,
                 enable_automatic_punctuation: bool = True,
                 timeout_seconds: float = 10.0):
        """Initialize Google Speech backend.

        Args:
            credentials_path: Path to Google Cloud service account JSON file
            language: Language code (e.g., 'en-US', 'es-ES')
            use_enhanced: Whether to use enhanced model (costs more but better quality)
            enable_automatic_punctuation: Enable automatic punctuation
            timeout_seconds: Per-request deadline
        """
        super().__init__(language)
        self.credentials_path = credentials_path
        if not self.credentials_path:
            raise ValueError("Google credentials path is required - cannot initialize without credentials")
        self.use_enhanced = use_enhanced
        self.enable_automatic_punctuation = enable_automatic_punctuation
        self.timeout_seconds = timeout_seconds
        self.client = None
        self.project_id = None
        self.service_name = "Google Speech-to-Text"

    def initialize(self) -> bool:
        """Initialize Google Speech client and verify credentials."""
        logger.info(f"Loading Google credentials from: {self.credentials_path}")
        credentials = service_account.Credentials.from_service_account_file(self.credentials_path)

        self.client = speech.SpeechClient(credentials=credentials)
        self.project_id = credentials.project_id
        logger.info(f"Using Google Cloud project: {self.project_id}")

        logger.info("Google Speech-to-Text backend initialized successfully")
        return True

    def _recognition_config(self, recording: EncodedRecording) -> speech.RecognitionConfig:
        params = recording.mime_parameters
        try:
            sample_rate = int(params.get("rate", 16000))
            channels = int(params.get("channels", 1))
        except ValueError as e:
            raise TranscriptionServiceError(f"Malformed audio type '{recording.mime_type}': {e}") from e

        return speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
            sample_rate_hertz=sample_rate,
            audio_channel_count=channels,
            language_code=self.language,
            use_enhanced=self.use_enhanced,
            enable_automatic_punctuation=self.enable_automatic_punctuation,
            # Use model optimized for short audio
            model="latest_short",
        )

    def transcribe(self, audio_data_uri: str) -> TranscriptionResult:
        """Transcribe a recording envelope using Google Speech-to-Text."""
        if self.client is None:
            raise TranscriptionServiceError("Google Speech backend is not initialized")

        start_time = time.time()
        try:
            recording = EncodedRecording.from_data_uri(audio_data_uri)
        except ValueError as e:
            raise TranscriptionServiceError(f"Malformed audio: {e}") from e

        if recording.is_empty:
            raise TranscriptionServiceError("Malformed audio: recording is empty")

        config = self._recognition_config(recording)
        logger.debug(f"Audio size: {len(recording)} bytes; Type: {recording.mime_type}; "
                     f"Language: {self.language}; Enhanced model: {self.use_enhanced}")

        audio = speech.RecognitionAudio(content=recording.data)
        try:
            response = self.client.recognize(config=config, audio=audio, timeout=self.timeout_seconds)
        except gax_exceptions.DeadlineExceeded as e:
            logger.error("Google STT recognize deadline exceeded")
            raise TranscriptionServiceError(f"Google Speech recognize timeout: {e}") from e
        except gax_exceptions.InvalidArgument as e:
            logger.error("Google STT rejected the audio: %s", e)
            raise TranscriptionServiceError(f"Google Speech rejected malformed audio: {e}") from e
        except gax_exceptions.ServiceUnavailable as e:
            logger.error("Google STT service unavailable")
            raise TranscriptionServiceError(f"Google Speech service unavailable: {e}") from e
        except gax_exceptions.GoogleAPICallError as e:
            logger.error("Google STT API call error: %s", e)
            raise TranscriptionServiceError(f"Google Speech API error: {e}") from e
        processing_time = time.time() - start_time

        if not response.results:
            logger.debug("--- NO SPEECH DETECTED ---")
            return TranscriptionResult(
                text="",
                confidence=0.0,
                processing_time=processing_time,
                timestamp=datetime.now(),
                service=self.service_name,
                language=self.language,
            )

        return self.__extract_transcription_result(response, processing_time)

    def __extract_transcription_result(self, response: speech.RecognizeResponse,
                                       processing_time: float) -> TranscriptionResult:
        # Short commands may still be split into several results
        transcript = " ".join(
            result.alternatives[0].transcript.strip()
            for result in response.results if result.alternatives
        ).strip()
        first = response.results[0].alternatives[0]
        alternatives = [
            {"text": alt.transcript, "confidence": alt.confidence}
            for alt in response.results[0].alternatives[1:5]
        ]

        logger.debug(f"✅ TRANSCRIPTION SUCCESS: '{transcript}' "
                     f"(confidence: {first.confidence:.2f}, "
                     f"processing_time: {processing_time:.3f}s)")
        return TranscriptionResult(
            text=transcript,
            confidence=first.confidence,
            processing_time=processing_time,
            timestamp=datetime.now(),
            service=self.service_name,
            language=self.language,
            alternatives=alternatives or None,
        )

