"""
Text metrics for markdown blog content.

Every function here is pure and total: it never raises on odd input and returns
zeroed metrics for empty text. The measures are simple approximations
(whitespace tokenisation, word-length complexity), not NLP models.
"""

import math
import re
from typing import Dict, Optional

SENTENCE_SPLIT = re.compile(r'[.!?]+')
COMPLEX_WORD_LENGTH = 7
WORDS_PER_HEADING = 300

HEADING_PREFIXES = {
    "h1": "# ",
    "h2": "## ",
    "h3": "### ",
    "h4": "#### ",
}

READABILITY_GRADES = [
    (80, "Excellent"),
    (70, "Good"),
    (60, "Fair"),
    (50, "Difficult"),
]


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a spreadsheet does (0.5 always goes up), not banker's rounding."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def word_count(text: str) -> int:
    """Count whitespace-separated tokens."""
    return len(text.split())


def count_keyword_occurrences(text: str, keyword: str) -> int:
    """
    Count tokens that contain the keyword, case-insensitively.

    A token matches when it *contains* the keyword, so "developers" counts toward
    "developer" and compound words are over-counted. Multi-word keywords are
    matched against windows of the same number of consecutive tokens joined by a
    single space.
    """
    keyword = " ".join(keyword.lower().split())
    if not keyword:
        return 0

    tokens = text.lower().split()
    size = len(keyword.split(" "))
    if size == 1:
        return sum(1 for token in tokens if keyword in token)

    return sum(
        1 for i in range(len(tokens) - size + 1)
        if keyword in " ".join(tokens[i:i + size])
    )


def keyword_density(text: str, keyword: str) -> float:
    """Keyword occurrences as a percentage of all words (0 for empty text)."""
    total = word_count(text)
    if total == 0:
        return 0.0
    return count_keyword_occurrences(text, keyword) / total * 100


def heading_counts(text: str) -> Dict:
    """Count ATX headings (``#`` to ``####`` followed by a space)."""
    counts = {level: 0 for level in HEADING_PREFIXES}
    for line in text.split("\n"):
        stripped = line.lstrip()
        for level, prefix in HEADING_PREFIXES.items():
            if stripped.startswith(prefix):
                counts[level] += 1
                break

    total = sum(counts.values())
    counts["total"] = total
    counts["proper_structure"] = counts["h1"] == 1 and counts["h2"] >= 2
    counts["ratio"] = total / max(1, word_count(text) // WORDS_PER_HEADING)
    return counts


def readability_grade(score: float) -> str:
    for threshold, grade in READABILITY_GRADES:
        if score >= threshold:
            return grade
    return "Very Difficult"


def readability(text: str) -> Dict:
    """
    Simple readability: 100 minus average sentence length minus the share of
    long (7+ character) words, floored at 0.
    """
    sentences = [s for s in SENTENCE_SPLIT.split(text) if s.strip()]
    words = text.split()

    avg_words_per_sentence = len(words) / len(sentences) if sentences else 0.0
    complex_words = sum(1 for w in words if len(w) >= COMPLEX_WORD_LENGTH)
    complex_pct = complex_words / len(words) * 100 if words else 0.0
    score = max(0.0, 100 - avg_words_per_sentence - complex_pct)

    return {
        "sentences": len(sentences),
        "avg_words_per_sentence": round_half_up(avg_words_per_sentence, 1),
        "complex_words_percentage": round_half_up(complex_pct, 1),
        "readability_score": int(round_half_up(score)),
        "grade": readability_grade(score),
    }


def internal_link_count(text: str, site_url: str, ignore_case: bool = False) -> int:
    """Literal occurrences of the site URL in the text."""
    if not site_url:
        return 0
    flags = re.IGNORECASE if ignore_case else 0
    return len(re.findall(re.escape(site_url), text, flags))


def internal_links_optimal(count: int) -> bool:
    return 1 <= count <= 3


def content_structure(text: str) -> Dict:
    """Paragraph and list statistics."""
    paragraphs = [p for p in text.split("\n\n") if p.strip()]
    list_lines = sum(
        1 for line in text.split("\n")
        if line.strip().startswith("*") or line.strip().startswith("-")
    )
    avg_len = (
        sum(word_count(p) for p in paragraphs) / len(paragraphs)
        if paragraphs else 0.0
    )
    return {
        "paragraphs": len(paragraphs),
        "lists": list_lines,
        "avg_paragraph_length": avg_len,
    }


def extract_title(text: str) -> Optional[str]:
    """Return the text of the first ``# `` heading, if any."""
    match = re.search(r'^#[ \t]+(.+)$', text, re.MULTILINE)
    if match:
        return match.group(1).strip()
    return None


def slugify(text: str, max_length: Optional[int] = None) -> str:
    """URL-friendly slug: lowercase ASCII alphanumerics joined by hyphens."""
    slug = re.sub(r'[^a-z0-9]+', '-', text.lower()).strip('-')
    if max_length:
        slug = slug[:max_length]
    return slug
