"""
Content Generation Orchestrator.

Sends a prompt down a fixed chain of Gemini Flash models, pausing between
attempts, and packages the first non-empty answer as a ContentDraft.
"""

import logging
import re
import time
from datetime import datetime
from typing import Callable, Dict, List, NoReturn, Optional, Tuple, Any

from .clients.base import TextGenerationService
from .config import DEFAULT_WEBSITE_URL
from .errors import ErrorKind, GenerationError
from .prompt_builder import ContentPromptBuilder
from .schemas import ContentDraft, Workflow
from .text_metrics import extract_title, internal_link_count, slugify, word_count

logger = logging.getLogger(__name__)

# Newest and best first
GENERATION_MODEL_CHAIN: List[str] = [
    "gemini-2.5-flash",
    "gemini-2.5-flash-lite",
    "gemini-2.0-flash",
    "gemini-2.0-flash-lite",
    "gemini-1.5-flash",
    "gemini-1.5-flash-8b",
]

SENTENCE_CUT_THRESHOLD = 0.8

_WORD = re.compile(r'\S+')


def trim_to_word_limit(text: str, limit: int) -> Tuple[str, bool]:
    """
    Cut text down to at most ``limit`` words.

    The text is truncated after its ``limit``-th word; if a period falls within the
    last 20% of the truncated text the cut moves back to that sentence end.
    Returns the text and whether anything was removed.
    """
    words = list(_WORD.finditer(text))
    if len(words) <= limit:
        return text, False

    truncated = text[:words[limit - 1].end()] if limit > 0 else ""
    last_period = truncated.rfind(".")
    if last_period > len(truncated) * SENTENCE_CUT_THRESHOLD:
        truncated = truncated[:last_period + 1]
    return truncated.rstrip(), True


class ContentGenerator:
    def __init__(self, service: TextGenerationService, site_url: str = DEFAULT_WEBSITE_URL,
                 model_chain: Optional[List[str]] = None, retry_delay: float = 1.0,
                 sleep: Optional[Callable[[float], None]] = None):
        self.service = service
        self.site_url = site_url
        self.model_chain = model_chain or GENERATION_MODEL_CHAIN
        self.retry_delay = retry_delay
        self.sleep = sleep or time.sleep
        self.prompt_builder = ContentPromptBuilder(site_url)

    def generate_content(self, topic: str, custom_prompt: Optional[str] = None) -> ContentDraft:
        """Generate a post for a topic, or from a custom prompt with the standard requirements appended."""
        if custom_prompt:
            prompt = self.prompt_builder.build_custom_prompt(custom_prompt)
        else:
            prompt = self.prompt_builder.build_topic_prompt(topic)

        content, model = self._generate_with_fallback(prompt)
        return self.process_content(content, topic, model)

    def generate_workflow_content(self, workflow: Workflow) -> ContentDraft:
        """Generate a post honouring a parsed workflow, trimming to a hard maximum."""
        prompt = self.prompt_builder.build_workflow_prompt(workflow)
        content, model = self._generate_with_fallback(prompt)

        length = workflow.length_constraints
        original_count = word_count(content)
        trimmed = False
        if (length.constraint_type == "maximum" and length.has_critical_limit
                and length.word_limit and original_count > length.word_limit):
            content, trimmed = trim_to_word_limit(content, length.word_limit)
            logger.warning(
                f"✂️ Trimmed content from {original_count} to {word_count(content)} words "
                f"(limit {length.word_limit})"
            )

        return self.process_content(
            content, workflow.topic, model,
            trimmed=trimmed,
            original_word_count=original_count if trimmed else None,
        )

    def _generate_with_fallback(self, prompt: str) -> Tuple[str, str]:
        """Try each model in order; return the text and the model that produced it."""
        last_error: Optional[GenerationError] = None

        for index, model in enumerate(self.model_chain):
            logger.info(f"🤖 Trying {model}...")
            try:
                content = self.service.generate(model, prompt)
                if not content or not content.strip():
                    raise GenerationError("Empty response from API", ErrorKind.OTHER, model)
                logger.info(f"✅ Success with {model}")
                return content, model
            except GenerationError as e:
                last_error = e
                logger.warning(f"⚠️ {model} failed: {e}")

            if index < len(self.model_chain) - 1:
                self.sleep(self.retry_delay)

        self._handle_all_models_failed(last_error)

    def _handle_all_models_failed(self, last_error: Optional[GenerationError]) -> NoReturn:
        logger.error("❌ All Gemini Flash models failed")
        if last_error is None:
            raise GenerationError("No generation models configured")

        logger.error(f"Final error ({last_error.kind.value}): {last_error}")
        logger.info(f"💡 {last_error.remedy}")
        raise last_error

    def process_content(self, content: str, topic: str, model_used: str, trimmed: bool = False,
                        original_word_count: Optional[int] = None) -> ContentDraft:
        """Package generated markdown with its metadata."""
        content = content.strip()
        return ContentDraft(
            content=content,
            topic=topic,
            title=extract_title(content) or topic,
            slug=slugify(topic),
            generated_at=datetime.now(),
            model_used=model_used,
            word_count=word_count(content),
            backlinks_included=self.count_backlinks(content),
            trimmed=trimmed,
            original_word_count=original_word_count,
        )

    def count_backlinks(self, content: str) -> int:
        return internal_link_count(content, self.site_url, ignore_case=True)

    def trim_to_word_limit(self, text: str, limit: int) -> Tuple[str, bool]:
        return trim_to_word_limit(text, limit)

    def get_model_status(self) -> Dict[str, Any]:
        return {
            "total_models": len(self.model_chain),
            "available_models": list(self.model_chain),
            "primary_model": self.model_chain[0],
            "fallback_models": list(self.model_chain[1:]),
        }
