"""ChatGPT intent engine: infers an action and its parameters from a transcript."""

import asyncio
import json
import logging
import aiohttp
from typing import Protocol

from ..errors import IntentServiceError
from ..models.command import CommandAnalysis

logger = logging.getLogger(__name__)


INTENT_PROMPT = """You are a voice assistant that analyzes user speech to determine the desired action and parameters.

Analyze the following speech and extract the action and any parameters required to perform the action.
Respond with a JSON object with exactly two keys:
  "action": the action to be performed (e.g. "open WhatsApp", "call John")
  "parameters": a JSON string representing parameters for the action as key-value pairs,
                e.g. "{{\\"contact\\": \\"Jane Doe\\", \\"message\\": \\"Hi there!\\"}}",
                or "{{}}" if no parameters are found.

Speech: {speech}
"""


class IntentEngine(Protocol):
    """Protocol for engines that turn a transcript into a command."""

    async def analyze(self, transcript: str) -> CommandAnalysis:
        """Infer the action and JSON-encoded parameters for ``transcript``."""
        ...


class ChatGPTIntentEngine:
    """Sends the transcript to the OpenAI chat completions API."""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", timeout_seconds: float = 15.0):
        """Initialize ChatGPT intent engine.

        Args:
            api_key: OpenAI API key
            model: ChatGPT model to use for analysis
            timeout_seconds: Total request timeout
        """
        self.api_key = api_key
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.base_url = "https://api.openai.com/v1/chat/completions"

        logger.info(f"ChatGPTIntentEngine initialized with model: {model}")

    async def analyze(self, transcript: str) -> CommandAnalysis:
        """Infer the action for a transcript.

        Args:
            transcript: Recognized speech

        Returns:
            CommandAnalysis whose ``parameters`` is a JSON-encoded string

        Raises:
            IntentServiceError: If the API call fails or the reply has no action
        """
        content = await self.send_prompt(INTENT_PROMPT.format(speech=transcript))
        return self._parse_reply(content)

    async def send_prompt(self, prompt: str, temperature: float = 0.0, max_tokens: int = 300) -> str:
        """Send a prompt to ChatGPT and get the raw response content."""
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

        data = {
            "model": self.model,
            "messages": [
                {
                    "role": "user",
                    "content": prompt
                }
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
            "response_format": {"type": "json_object"},
        }

        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.base_url, headers=headers, json=data) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        raise IntentServiceError(f"ChatGPT API error: {response.status} - {error_text}")

                    result = await response.json()
        except aiohttp.ClientError as e:
            raise IntentServiceError(f"ChatGPT API request failed: {e}") from e
        except asyncio.TimeoutError as e:
            raise IntentServiceError("ChatGPT API request timed out") from e
        except json.JSONDecodeError as e:
            raise IntentServiceError(f"ChatGPT API returned a non-JSON body: {e}") from e

        try:
            return result["choices"][0]["message"]["content"].strip()
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise IntentServiceError(f"Unexpected ChatGPT response shape: {e}") from e

    @staticmethod
    def _parse_reply(content: str) -> CommandAnalysis:
        try:
            reply = json.loads(content)
        except json.JSONDecodeError as e:
            raise IntentServiceError(f"ChatGPT reply is not JSON: {e}") from e

        if not isinstance(reply, dict) or not reply.get("action"):
            raise IntentServiceError("ChatGPT reply has no action")

        parameters = reply.get("parameters", "{}")
        if parameters is None:
            parameters = "{}"
        elif not isinstance(parameters, str):
            # Models sometimes inline the object instead of encoding it
            parameters = json.dumps(parameters)

        logger.info(f"Inferred action '{reply['action']}' with parameters {parameters}")
        return CommandAnalysis(action=str(reply["action"]), parameters=parameters)
