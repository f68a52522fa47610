"""
Runtime configuration loaded from the environment (and a local .env file).
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

DEFAULT_WEBSITE_URL = "https://yoursite.com"
DEFAULT_OUTPUT_DIR = "./blog-posts"
DEFAULT_SITE_NAME = "IT Career Insights"
DEFAULT_AUTHOR_NAME = "AI Content Generator"


@dataclass
class Settings:
    gemini_api_key: Optional[str] = None
    openrouter_api_key: Optional[str] = None
    website_url: str = DEFAULT_WEBSITE_URL
    output_dir: str = DEFAULT_OUTPUT_DIR
    site_name: str = DEFAULT_SITE_NAME
    author_name: str = DEFAULT_AUTHOR_NAME
    log_level: str = "INFO"

    def require_api_key(self) -> str:
        """Return the Gemini API key or raise with setup guidance."""
        if self.gemini_api_key:
            return self.gemini_api_key
        if self.openrouter_api_key:
            return self.openrouter_api_key
        raise ConfigurationError(
            "No API key found in environment. "
            "Please set GEMINI_API_KEY in your .env file (example: GEMINI_API_KEY=your_actual_key)"
        )


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Load settings from the process environment after reading .env."""
    load_dotenv(env_file, override=False)
    return Settings(
        gemini_api_key=os.environ.get("GEMINI_API_KEY") or None,
        openrouter_api_key=os.environ.get("OPENROUTER_API_KEY") or None,
        website_url=os.environ.get("WEBSITE_URL", DEFAULT_WEBSITE_URL).rstrip('/'),
        output_dir=os.environ.get("DEFAULT_OUTPUT_DIR", DEFAULT_OUTPUT_DIR),
        site_name=os.environ.get("SITE_NAME", DEFAULT_SITE_NAME),
        author_name=os.environ.get("AUTHOR_NAME", DEFAULT_AUTHOR_NAME),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    )
