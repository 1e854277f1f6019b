"""
Infrastructure Gateway - Gemini Implementation

This module implements the text generation gateway on top of the Google
Generative Language REST API.
"""

from typing import Any, Dict

import httpx
import structlog

from src.domain.entities.errors import DomainError
from src.domain.gateways.text_generation_gateway import ITextGenerationGateway

logger = structlog.get_logger(__name__)


class ReasoningGatewayError(DomainError):
    """Exception raised when the text generation service fails."""

    pass


class GeminiTextGenerationGateway(ITextGenerationGateway):
    """Implementation of the text generation gateway using HTTP client."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-pro",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 30.0,
    ):
        """
        Initialize Gemini gateway.

        Args:
            api_key: Generative Language API key
            model: Model name (e.g., "gemini-2.5-pro")
            base_url: API root, without a trailing slash
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def model_url(self) -> str:
        return f"{self.base_url}/models/{self.model}"

    async def generate(self, prompt: str) -> str:
        """Send a single-turn prompt and return the first candidate's text."""

        if not self.api_key:
            raise ReasoningGatewayError("Reasoning API key is not configured")

        url = f"{self.model_url}:generateContent"
        payload = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}

        logger.debug(
            "reasoning.gateway.request",
            model=self.model,
            prompt_chars=len(prompt),
        )

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    url,
                    params={"key": self.api_key},
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
                data = response.json()

        except httpx.HTTPStatusError as e:
            logger.error(
                "reasoning.gateway.http_error",
                status_code=e.response.status_code,
                response_text=e.response.text,
                model=self.model,
            )
            raise ReasoningGatewayError(
                f"Reasoning service HTTP error {e.response.status_code}",
                details={"status_code": e.response.status_code},
            ) from e

        except httpx.RequestError as e:
            logger.error("reasoning.gateway.request_error", error=str(e), model=self.model)
            raise ReasoningGatewayError(
                f"Reasoning service request failed: {str(e)}"
            ) from e

        except ValueError as e:
            logger.error("reasoning.gateway.invalid_json", error=str(e), model=self.model)
            raise ReasoningGatewayError("Reasoning service returned invalid JSON") from e

        return self._extract_text(data)

    async def ping(self) -> bool:
        """Fetch the model metadata; True on any 2xx answer."""

        if not self.api_key:
            return False

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.model_url, params={"key": self.api_key})
            return response.is_success
        except httpx.RequestError as e:
            logger.warning("reasoning.gateway.ping_failed", error=str(e))
            return False

    def _extract_text(self, data: Dict[str, Any]) -> str:
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as e:
            raise ReasoningGatewayError(
                "Reasoning service response has no candidates",
                details={"response": data},
            ) from e

        text = "".join(
            part.get("text", "") for part in parts if isinstance(part, dict)
        ).strip()
        if not text:
            raise ReasoningGatewayError("Reasoning service returned empty text")
        return text
