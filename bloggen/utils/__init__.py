"""
Utility functions for bloggen.
"""

import re
from typing import Any

# ---------------------------------------------------------------------------
# Field alias mapping: common AI-generated key names → canonical snake_case
# field names expected by the Workflow schema.
#
# After converting raw AI keys to snake_case we apply these aliases so that,
# e.g., a model that returns "lengthConstraint" (→ "length_constraint") is
# mapped to the canonical "length_constraints" field name.
# ---------------------------------------------------------------------------
FIELD_ALIASES: dict = {
    # length_constraints
    "length_constraint": "length_constraints",
    "length": "length_constraints",
    # word_limit
    "word_count_limit": "word_limit",
    "max_words": "word_limit",
    "target_words": "word_limit",
    # style_constraints
    "style": "style_constraints",
    "style_constraint": "style_constraints",
    # content_constraints
    "content_constraint": "content_constraints",
    "content_requirements": "content_constraints",
    # seo_constraints
    "seo": "seo_constraints",
    "seo_constraint": "seo_constraints",
    "seo_requirements": "seo_constraints",
    # primary_keywords
    "keywords": "primary_keywords",
    "seo_keywords": "primary_keywords",
    # content_type
    "format_type": "content_type",
    # audience
    "target_audience": "audience",
}


def to_snake_case(key: str) -> str:
    """
    Convert a single key to snake_case.

    Examples:
        'wordLimit'          → 'word_limit'
        'SEO_CONSTRAINTS'    → 'seo_constraints'
        'hasCriticalLimit'   → 'has_critical_limit'
        'must-include'       → 'must_include'
    """
    # Step 1 – split "ABCDef" → "ABC_Def"
    s1 = re.sub(r'([A-Z]+)([A-Z][a-z])', r'\1_\2', str(key))
    # Step 2 – split "camelCase" → "camel_Case"
    s2 = re.sub(r'([a-z0-9])([A-Z])', r'\1_\2', s1)
    return re.sub(r'[\s\-]+', '_', s2).lower()


def normalize_dict_keys(data: Any) -> Any:
    """
    Recursively normalize dictionary keys to snake_case for Pydantic validation,
    then apply :data:`FIELD_ALIASES` to map common AI-generated key names to
    their canonical field names.

    Lists are walked so nested objects are normalized too; any other value is
    returned unchanged. When both an alias and its canonical key are present the
    canonical key wins.
    """
    if isinstance(data, list):
        return [normalize_dict_keys(item) for item in data]
    if not isinstance(data, dict):
        return data

    normalized = {}
    aliased = {}
    for key, value in data.items():
        snake_key = to_snake_case(key)
        canonical_key = FIELD_ALIASES.get(snake_key, snake_key)
        target = aliased if canonical_key != snake_key else normalized
        target[canonical_key] = normalize_dict_keys(value)

    for key, value in aliased.items():
        normalized.setdefault(key, value)

    return normalized
