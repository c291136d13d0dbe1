"""Command pipeline: recording -> transcript -> intent -> local action."""

import asyncio
import json
import logging
from typing import Dict, Optional

from .status_publisher import StatusPublisher
from ..actions.executor import ActionExecutor
from ..errors import (
    IntentServiceError,
    ParameterParseError,
    TranscriptionServiceError,
)
from ..intent.chatgpt_intent_engine import IntentEngine
from ..models.command import PipelineResult
from ..models.recording import EncodedRecording
from ..storage.history_store import CommandHistoryStore
from ..transcription.base import AbstractTranscriptionBackend

logger = logging.getLogger(__name__)


def parse_parameters(raw: Optional[str]) -> Dict[str, str]:
    """Decode the intent service's JSON parameters string.

    Blank input yields ``{}``. Values are coerced to strings.

    Raises:
        ParameterParseError: If the payload is not a JSON object
    """
    if raw is None or not raw.strip():
        return {}

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ParameterParseError(f"Invalid parameters JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise ParameterParseError(f"Parameters must be a JSON object, got {type(parsed).__name__}")

    return {str(key): value if isinstance(value, str) else json.dumps(value)
            for key, value in parsed.items()}


class CommandPipeline:
    """Processes one finished recording end to end.

    Service failures abort the remaining steps and end in a single error
    status event; a malformed parameters payload only produces a warning.
    """

    def __init__(self,
                 transcription_backend: AbstractTranscriptionBackend,
                 intent_engine: IntentEngine,
                 executor: ActionExecutor,
                 publisher: Optional[StatusPublisher] = None,
                 history: Optional[CommandHistoryStore] = None):
        self.transcription_backend = transcription_backend
        self.intent_engine = intent_engine
        self.executor = executor
        self.publisher = publisher or StatusPublisher()
        self.history = history

    async def process(self, recording: EncodedRecording) -> PipelineResult:
        """Run transcription, intent extraction and execution for ``recording``."""
        result = PipelineResult(success=False)

        if recording.is_empty:
            result.error = "No audio was captured."
            logger.warning(result.error)
            self.publisher.error("Processing Error", result.error)
            return result

        try:
            self.publisher.info("Transcribing", "Transcribing audio...")
            result.transcription = await self._transcribe(recording)
            if self.history:
                self.history.save_transcription(result.transcription)
            self.publisher.success("Transcription Successful", "Audio transcribed.")

            self.publisher.info("Analyzing", "Analyzing command...")
            analysis = await self.intent_engine.analyze(result.transcription)
        except (TranscriptionServiceError, IntentServiceError) as e:
            logger.error(f"Error processing voice command: {e}")
            result.error = str(e)
            self.publisher.error("Processing Error", result.error)
            return result
        except Exception as e:
            logger.error(f"Unexpected error processing voice command: {e}", exc_info=True)
            result.error = str(e) or "An unexpected error occurred."
            self.publisher.error("Processing Error", result.error)
            return result

        result.action = analysis.action
        try:
            result.parameters = parse_parameters(analysis.parameters)
        except ParameterParseError as e:
            logger.warning(f"Failed to parse action parameters: {e}")
            warning = ("Could not understand the parameters for the command. "
                       "Proceeding without parameters.")
            result.warnings.append(warning)
            self.publisher.warning("Parameter Parsing Error", warning)

        if self.history:
            self.history.save_action(result.action, result.parameters)

        self.publisher.info("Executing", "Executing action...")
        result.action_result = self.executor.execute(result.action, result.parameters)
        if result.action_result.executed:
            self.publisher.success("Action Executed", result.action_result.message)
        else:
            self.publisher.error("Action Failed", result.action_result.message)

        result.success = True
        return result

    async def _transcribe(self, recording: EncodedRecording) -> str:
        loop = asyncio.get_running_loop()
        transcription = await loop.run_in_executor(
            None, self.transcription_backend.transcribe, recording.data_uri
        )
        text = (transcription.text or "").strip()
        if not text:
            raise TranscriptionServiceError("No speech detected.")

        logger.info(f"📝 Transcribed: '{text}' ({transcription.confidence:.1%}) via {transcription.service}")
        return text
