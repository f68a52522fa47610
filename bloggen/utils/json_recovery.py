"""
Salvage a JSON object from a noisy model response.

Models asked for "ONLY valid JSON" still wrap it in code fences or add a preamble.
Recovery runs three stages and stops at the first that yields a JSON object:

1. parse the response as-is
2. parse the first ``{`` ... last ``}`` block found in the text
3. strip code-fence markers (```json / ```) and parse again
"""

import json
import logging
import re
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

_OBJECT_BLOCK = re.compile(r'\{[\s\S]*\}')
_FENCE = re.compile(r'```(?:json|JSON)?\s*')


def _loads_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    # Only an object can describe a workflow
    return value if isinstance(value, dict) else None


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence markers and surrounding whitespace."""
    return _FENCE.sub('', text).strip()


def extract_object_block(text: str) -> Optional[str]:
    """Return the span from the first '{' to the last '}' or None."""
    match = _OBJECT_BLOCK.search(text)
    return match.group(0) if match else None


def recover_json(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Parse a JSON object out of a model response.

    Returns:
        The decoded object, or None when no stage produced one.
    """
    if not text or not text.strip():
        return None

    result = _loads_object(text)
    if result is not None:
        return result

    block = extract_object_block(text)
    if block:
        result = _loads_object(block)
        if result is not None:
            return result
        logger.debug("Failed to parse extracted JSON block")

    cleaned = strip_code_fences(text)
    result = _loads_object(cleaned)
    if result is None:
        # Fences removed, a preamble or trailer may remain
        block = extract_object_block(cleaned)
        if block and block != cleaned:
            result = _loads_object(block)

    if result is None:
        logger.warning("⚠️ JSON parsing completely failed")
    return result
