import logging
import os
from typing import Optional, Any

import httpx
from google import genai
from google.genai import types
from google.genai.errors import ServerError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception

from ..config import DEFAULT_SITE_NAME, DEFAULT_WEBSITE_URL
from ..errors import ErrorKind, GenerationError, classify_error
from .base import TextGenerationService

logger = logging.getLogger(__name__)


# Gemini model name -> OpenRouter model id
OPENROUTER_MODEL_MAP = {
    "gemini-2.5-flash": "google/gemini-2.5-flash",
    "gemini-2.5-flash-lite": "google/gemini-2.5-flash-lite",
    "gemini-2.0-flash": "google/gemini-2.0-flash-001",
    "gemini-2.0-flash-lite": "google/gemini-2.0-flash-lite-001",
    "gemini-1.5-flash": "google/gemini-flash-1.5",
    "gemini-1.5-flash-8b": "google/gemini-flash-1.5-8b",
    "gemini-1.5-pro": "google/gemini-pro-1.5",
}


def _is_transient(error: BaseException) -> bool:
    """Server-side (5xx) or transport failures are worth retrying on the same model."""
    if isinstance(error, ServerError):
        return True
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code >= 500
    return isinstance(error, httpx.TransportError)


class GeminiClient(TextGenerationService):
    """Text generation backed by Gemini models.

    Requests go straight to the Google AI API, or through OpenRouter when an
    OpenRouter key is configured. Every failure surfaces as a GenerationError.
    """

    OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

    def __init__(self, api_key: Optional[str] = None, openrouter_api_key: Optional[str] = None,
                 site_url: str = DEFAULT_WEBSITE_URL, site_name: str = DEFAULT_SITE_NAME):
        self.api_key = api_key or os.environ.get("GEMINI_API_KEY")
        self.openrouter_api_key = openrouter_api_key or os.environ.get("OPENROUTER_API_KEY")
        self.site_url = site_url
        self.site_name = site_name
        self._using_openrouter = False
        self.client = self._initialize_client()

    def _initialize_client(self) -> Optional[genai.Client]:
        """Pick a backend: OpenRouter when its key is set, else the Google AI API."""
        if self.openrouter_api_key:
            logger.info("Initializing Gemini with OpenRouter backend")
            self._using_openrouter = True
            return None  # No genai.Client needed for OpenRouter

        if self.api_key:
            logger.info("Initializing Gemini with API key")
            return genai.Client(api_key=self.api_key)

        logger.error("No valid Gemini credentials found")
        return None

    def is_using_openrouter(self) -> bool:
        return self._using_openrouter

    def _map_model_to_openrouter(self, model: str) -> str:
        return OPENROUTER_MODEL_MAP.get(model, f"google/{model}")

    def _generate_openrouter_content(self, model: str, prompt: str, json_output: bool = False) -> str:
        """POST a chat completion to OpenRouter and return the first choice."""
        openrouter_model = self._map_model_to_openrouter(model)
        logger.info(f"Calling OpenRouter API (Model: {openrouter_model})")

        payload = {
            "model": openrouter_model,
            "messages": [{"role": "user", "content": prompt}],
        }
        if json_output:
            payload["response_format"] = {"type": "json_object"}

        headers = {
            "Authorization": f"Bearer {self.openrouter_api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self.site_url,
            "X-Title": self.site_name,
        }

        with httpx.Client(timeout=120.0) as http_client:
            response = http_client.post(
                f"{self.OPENROUTER_BASE_URL}/chat/completions",
                headers=headers,
                json=payload
            )
            response.raise_for_status()
            data = response.json()

        choice = (data.get("choices") or [{}])[0]
        return choice.get("message", {}).get("content") or ""

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception(_is_transient),
        reraise=True
    )
    def generate_content(self, model: str, prompt: str, json_output: bool = False) -> str:
        """Generate content with retry logic for transient server errors."""
        if self._using_openrouter:
            return self._generate_openrouter_content(model, prompt, json_output)

        if not self.client:
            raise GenerationError("Gemini client not initialized", ErrorKind.INVALID_CREDENTIAL, model)

        config: Optional[Any] = None
        if json_output:
            config = types.GenerateContentConfig(response_mime_type="application/json")

        logger.info(f"Calling Gemini API (Model: {model})")
        response = self.client.models.generate_content(
            model=model,
            contents=prompt,
            config=config
        )
        return response.text or ""

    def generate(self, model: str, prompt: str, *, json_output: bool = False) -> str:
        """Generate text, converting every backend failure into a classified GenerationError."""
        try:
            text = self.generate_content(model, prompt, json_output)
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(str(e), classify_error(e), model) from e

        if not text or not text.strip():
            raise GenerationError("Empty response from API", ErrorKind.OTHER, model)
        return text
