"""
Completion clients for the flowchart pipeline.

Each client issues exactly one JSON-mode completion request per call and
returns the generated text. Provider errors become ``UpstreamError``; a
response without candidate text becomes ``UnexpectedUpstreamShape``.
"""

import abc
import asyncio
import logging
from typing import Any, Optional

import google.generativeai as genai
from google.ai import generativelanguage as glm
from google.api_core import exceptions as google_exceptions
from groq import APIError, APIStatusError, AsyncGroq
from fastapi import Depends

from flowchart_api.core.config import Settings, get_settings
from flowchart_api.core.exceptions import (
    ConfigurationError,
    UnexpectedUpstreamShape,
    UpstreamError,
)

logger = logging.getLogger(__name__)


class CompletionClient(abc.ABC):
    """Interface: ``await client.complete(prompt)`` returns the raw JSON text."""

    provider: str = "base"

    @abc.abstractmethod
    async def complete(self, prompt: str) -> str:
        ...


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# GEMINI
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def extract_candidate_text(response: Any) -> str:
    """Pull the text of the first part of the first candidate.

    Raises UnexpectedUpstreamShape when the response has no candidates,
    no parts, or a part without text (e.g. a blocked prompt).
    """
    candidates = getattr(response, "candidates", None)
    if not candidates:
        raise UnexpectedUpstreamShape()

    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None)
    if not parts:
        raise UnexpectedUpstreamShape()

    text = getattr(parts[0], "text", None)
    if not isinstance(text, str):
        raise UnexpectedUpstreamShape()
    return text


def _gemini_error_message(error: google_exceptions.GoogleAPIError) -> Optional[str]:
    """Read ``{"error": {"message": ...}}`` from the HTTP body.

    api-core prefixes ``e.message`` with ``"POST <url>: "`` for HTTP errors,
    so that text is only used when there is no response at all.
    """
    response = getattr(error, "response", None)
    if response is None:
        return getattr(error, "message", None) or None

    try:
        payload = response.json()
    except ValueError:
        return None
    detail = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(detail, dict) and detail.get("message"):
        return detail["message"]
    return None


class GeminiCompletionClient(CompletionClient):
    """Google Generative Language API (``generateContent``) in JSON mode.

    The service client is built per instance with its own API key, so no
    process-wide ``genai.configure`` state is touched.
    """

    provider = "gemini"

    def __init__(self, api_key: str, model_name: str):
        self.client = glm.GenerativeServiceClient(
            client_options={"api_key": api_key},
            transport="rest",
        )
        self.model_name = model_name

    def build_request(self, prompt: str) -> "genai.protos.GenerateContentRequest":
        return genai.protos.GenerateContentRequest(
            model=f"models/{self.model_name}",
            contents=[genai.protos.Content(parts=[genai.protos.Part(text=prompt)])],
            generation_config=genai.protos.GenerationConfig(
                response_mime_type="application/json",
            ),
        )

    async def complete(self, prompt: str) -> str:
        logger.info(f"[COMPLETION] Calling Gemini ({self.model_name})...")
        request = self.build_request(prompt)
        try:
            # retry=None: one HTTP request, no ServiceUnavailable backoff
            response = await asyncio.to_thread(
                self.client.generate_content, request=request, retry=None
            )
        except google_exceptions.GoogleAPIError as e:
            logger.warning(f"[COMPLETION] ✗ Gemini error: {str(e)[:200]}")
            raise UpstreamError(_gemini_error_message(e)) from e

        text = extract_candidate_text(response)
        logger.info("[COMPLETION] ✓ Gemini call succeeded")
        return text


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# GROQ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def _groq_error_message(error: APIError) -> Optional[str]:
    """Prefer ``{"error": {"message": ...}}`` from the body, else the SDK message."""
    if isinstance(error, APIStatusError) and isinstance(error.body, dict):
        detail = error.body.get("error", error.body)
        if isinstance(detail, dict) and detail.get("message"):
            return detail["message"]
    return error.message or None


class GroqCompletionClient(CompletionClient):
    """Groq chat completions with ``response_format=json_object``."""

    provider = "groq"

    def __init__(self, api_key: str, model_name: str):
        self.client = AsyncGroq(api_key=api_key, max_retries=0)
        self.model_name = model_name

    async def complete(self, prompt: str) -> str:
        logger.info(f"[COMPLETION] Calling Groq ({self.model_name})...")
        try:
            completion = await self.client.chat.completions.create(
                model=self.model_name,
                messages=[{"role": "user", "content": prompt}],
                response_format={"type": "json_object"},
            )
        except APIError as e:
            logger.warning(f"[COMPLETION] ✗ Groq error: {str(e)[:200]}")
            raise UpstreamError(_groq_error_message(e) or "Groq APIエラーが発生しました") from e

        if not completion.choices or completion.choices[0].message.content is None:
            raise UnexpectedUpstreamShape()
        logger.info("[COMPLETION] ✓ Groq call succeeded")
        return completion.choices[0].message.content


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# FACTORY
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def build_completion_client(settings: Settings) -> CompletionClient:
    """Create the client for the configured provider.

    Raises ConfigurationError before any network traffic when the provider's
    credential is missing.
    """
    if settings.AI_PROVIDER == "groq":
        if not settings.GROQ_API_KEY:
            logger.error("[COMPLETION] ✗ Groq API key missing")
            raise ConfigurationError()
        return GroqCompletionClient(settings.GROQ_API_KEY, settings.GROQ_MODEL)

    if not settings.GEMINI_API_KEY:
        logger.error("[COMPLETION] ✗ Gemini API key missing")
        raise ConfigurationError()
    return GeminiCompletionClient(settings.GEMINI_API_KEY, settings.GEMINI_MODEL)


def get_completion_client(settings: Settings = Depends(get_settings)) -> CompletionClient:
    return build_completion_client(settings)
