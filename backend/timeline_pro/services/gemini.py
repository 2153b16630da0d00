"""
Gemini integration service.

Handles the generateContent request/response cycle. Prompt construction and
event extraction live in GenerationService; this is the transport layer.
"""

from typing import Any

import httpx

from timeline_pro.config import settings
from timeline_pro.logging import get_logger
from timeline_pro.models import GenerateContentResult
from timeline_pro.services.retry import run_with_retry

logger = get_logger('services.gemini')


class GeminiService:
    """Service for interacting with the Gemini generative language API."""

    def __init__(
        self,
        api_key: str,
        client: httpx.AsyncClient | None = None,
        model_name: str | None = None,
        base_url: str | None = None,
    ):
        self.api_key = api_key
        self.model_name = model_name or settings.GEMINI_MODEL
        self.base_url = (base_url or settings.GEMINI_API_BASE_URL).rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)
        if not api_key:
            logger.warning("GEMINI_API_KEY not set - AI features will be disabled")

    @property
    def is_available(self) -> bool:
        return bool(self.api_key)

    async def aclose(self) -> None:
        await self.client.aclose()

    def _endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model_name}:generateContent"

    def _extract_text(self, data: dict[str, Any]) -> str:
        try:
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise ValueError(f"Gemini response has no candidate text: {e}") from e

    async def generate_json(self, prompt: str) -> GenerateContentResult:
        """
        Send a single-turn prompt asking for a JSON response.

        :param prompt: Prompt text
        :type prompt: str
        :return: Result carrying the raw candidate text on success
        :rtype: GenerateContentResult
        """
        if not self.is_available:
            return GenerateContentResult(success=False, error="Gemini service unavailable")

        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"responseMimeType": "application/json"},
        }
        attempts = 0

        async def _post() -> dict[str, Any]:
            nonlocal attempts
            attempts += 1
            response = await self.client.post(
                self._endpoint(),
                params={"key": self.api_key},
                json=body,
            )
            response.raise_for_status()
            return response.json()

        try:
            data = await run_with_retry("Gemini generateContent", _post, logger)
            text = self._extract_text(data)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Gemini generateContent failed after {attempts} attempt(s): {e}")
            return GenerateContentResult(success=False, error=str(e), attempts=attempts)

        usage = data.get("usageMetadata") or {}
        logger.info(
            "Gemini usage model=%s tokens=%s/%s/%s attempts=%d",
            data.get("modelVersion") or self.model_name,
            usage.get("promptTokenCount", "?"),
            usage.get("candidatesTokenCount", "?"),
            usage.get("totalTokenCount", "?"),
            attempts,
        )
        return GenerateContentResult(
            success=True,
            text=text,
            model_name=data.get("modelVersion") or self.model_name,
            input_tokens=usage.get("promptTokenCount"),
            output_tokens=usage.get("candidatesTokenCount"),
            total_tokens=usage.get("totalTokenCount"),
            attempts=attempts,
        )
