from .base import TextGenerationService
from .gemini import GeminiClient

__all__ = ["TextGenerationService", "GeminiClient"]
