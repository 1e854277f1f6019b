"""
Domain Gateway - Text Generation

Interface to a hosted language model used by the LLM reasoner.
"""

from abc import ABC, abstractmethod


class ITextGenerationGateway(ABC):
    """Interface for a prompt-in, text-out generation service."""

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """
        Generate a completion for the prompt.

        Args:
            prompt: Plain-text prompt containing numeric facts only

        Returns:
            Generated text, stripped of surrounding whitespace

        Raises:
            ReasoningGatewayError: When the request fails or the response is empty
        """
        pass

    @abstractmethod
    async def ping(self) -> bool:
        """Return True when the service answers a lightweight metadata request."""
        pass
