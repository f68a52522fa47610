"""Interface for the external text-generation service."""

from abc import ABC, abstractmethod


class TextGenerationService(ABC):
    """One operation: turn a prompt into text with a given model."""

    @abstractmethod
    def generate(self, model: str, prompt: str, *, json_output: bool = False) -> str:
        """
        Generate text for ``prompt`` with ``model``.

        Raises:
            GenerationError: classified failure (invalid credential, quota,
                rate limit, model unavailable, other).
        """
