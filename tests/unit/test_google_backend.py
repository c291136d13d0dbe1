"""Unit tests for the Google Speech-to-Text backend."""

from unittest.mock import Mock, patch

import pytest
from google.api_core import exceptions as gax_exceptions

from voicecmd.errors import TranscriptionServiceError
from voicecmd.models.recording import EncodedRecording, pcm_mime_type
from voicecmd.transcription.google_backend import GoogleSpeechBackend


def _response(*transcripts, confidence=0.91):
    results = [
        Mock(alternatives=[Mock(transcript=text, confidence=confidence)])
        for text in transcripts
    ]
    return Mock(results=results)


@pytest.mark.unit
class TestGoogleSpeechBackend:
    """Test cases for GoogleSpeechBackend."""

    def setup_method(self):
        self.backend = GoogleSpeechBackend(credentials_path="/tmp/creds.json")
        self.backend.client = Mock()
        self.recording = EncodedRecording(data=b"\x01\x00" * 1600, mime_type=pcm_mime_type())

    def test_credentials_required(self):
        with pytest.raises(ValueError):
            GoogleSpeechBackend(credentials_path=None)

    def test_initialize_creates_client(self):
        backend = GoogleSpeechBackend(credentials_path="/tmp/creds.json")

        with patch("voicecmd.transcription.google_backend.service_account") as mock_sa, \
                patch("voicecmd.transcription.google_backend.speech.SpeechClient") as mock_client:
            mock_sa.Credentials.from_service_account_file.return_value = Mock(project_id="demo-project")

            assert backend.initialize() is True

        mock_sa.Credentials.from_service_account_file.assert_called_once_with("/tmp/creds.json")
        assert backend.client is mock_client.return_value
        assert backend.project_id == "demo-project"

    def test_transcribe(self):
        self.backend.client.recognize.return_value = _response("Call mom")

        result = self.backend.transcribe(self.recording.data_uri)

        assert result.text == "Call mom"
        assert result.confidence == pytest.approx(0.91)
        assert result.service == "Google Speech-to-Text"
        assert result.language == "en-US"

        kwargs = self.backend.client.recognize.call_args.kwargs
        assert kwargs["audio"].content == self.recording.data
        assert kwargs["config"].sample_rate_hertz == 16000
        assert kwargs["config"].audio_channel_count == 1
        assert kwargs["config"].model == "latest_short"
        assert kwargs["timeout"] == 10.0

    def test_sample_rate_follows_mime_type(self):
        self.backend.client.recognize.return_value = _response("hello")
        recording = EncodedRecording(data=b"\x01\x00" * 100, mime_type=pcm_mime_type(8000, 2))

        self.backend.transcribe(recording.data_uri)

        config = self.backend.client.recognize.call_args.kwargs["config"]
        assert config.sample_rate_hertz == 8000
        assert config.audio_channel_count == 2

    def test_multiple_results_are_joined(self):
        self.backend.client.recognize.return_value = _response("send a message", " to Jane ")

        result = self.backend.transcribe(self.recording.data_uri)

        assert result.text == "send a message to Jane"

    def test_no_speech(self):
        self.backend.client.recognize.return_value = Mock(results=[])

        result = self.backend.transcribe(self.recording.data_uri)

        assert result.text == ""
        assert result.confidence == 0.0

    def test_not_initialized(self):
        self.backend.client = None

        with pytest.raises(TranscriptionServiceError, match="not initialized"):
            self.backend.transcribe(self.recording.data_uri)

    @pytest.mark.parametrize("envelope", ["not a data uri", f"data:{pcm_mime_type()};base64,"])
    def test_malformed_audio_is_not_sent(self, envelope):
        with pytest.raises(TranscriptionServiceError, match="Malformed audio"):
            self.backend.transcribe(envelope)

        self.backend.client.recognize.assert_not_called()

    @pytest.mark.parametrize("error, fragment", [
        (gax_exceptions.DeadlineExceeded("slow"), "timeout"),
        (gax_exceptions.InvalidArgument("bad encoding"), "malformed audio"),
        (gax_exceptions.ServiceUnavailable("down"), "unavailable"),
        (gax_exceptions.PermissionDenied("billing disabled"), "API error"),
    ])
    def test_service_errors(self, error, fragment):
        self.backend.client.recognize.side_effect = error

        with pytest.raises(TranscriptionServiceError, match=fragment):
            self.backend.transcribe(self.recording.data_uri)
