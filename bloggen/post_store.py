"""
Post Store.

Saves generated posts as plain-text records (metadata block, content body,
generation info) and lists or prunes them. Filenames start with a timestamp so
lexical order is chronological order.
"""

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from . import __version__
from .config import DEFAULT_AUTHOR_NAME, DEFAULT_OUTPUT_DIR, DEFAULT_WEBSITE_URL
from .errors import PostStoreError
from .schemas import ContentDraft, PostRecord, SavedPost, SEOReport
from .seo_system import SEOOptimizer
from .text_metrics import slugify, word_count

logger = logging.getLogger(__name__)

POST_SUFFIX = ".txt"
MAX_SLUG_LENGTH = 50

METADATA_HEADER = "=== BLOG POST METADATA ==="
CONTENT_HEADER = "=== SEO CONTENT ==="
INFO_HEADER = "=== GENERATION INFO ==="

_CONTENT_SECTION = re.compile(
    re.escape(CONTENT_HEADER) + r'\n([\s\S]*?)\n' + re.escape(INFO_HEADER)
)
_TOPIC_LINE = re.compile(r'^Topic: (.+)$', re.MULTILINE)

# First match wins
CATEGORY_RULES = [
    (("salary", "compensation"), "Salary & Compensation"),
    (("remote", "work from home"), "Remote Work"),
    (("interview", "hiring"), "Job Interviews"),
    (("career", "path"), "Career Development"),
    (("skill", "learning"), "Skills & Learning"),
    (("trend", "market"), "Industry Trends"),
    (("javascript", "python", "react"), "Programming Languages"),
    (("devops", "cloud"), "DevOps & Cloud"),
    (("security", "cybersecurity"), "Cybersecurity"),
    (("data", "analytics"), "Data Science"),
    (("machine learning", " ai "), "AI & Machine Learning"),
]
DEFAULT_CATEGORY = "IT Job Market"


def determine_category(content: str, topic: str) -> str:
    """Pick a blog category from keywords found in the content and topic."""
    text = f" {content} {topic} ".lower()
    for terms, category in CATEGORY_RULES:
        if any(term in text for term in terms):
            return category
    return DEFAULT_CATEGORY


class PostStore:
    def __init__(self, output_dir: str = DEFAULT_OUTPUT_DIR, site_url: str = DEFAULT_WEBSITE_URL,
                 author_name: str = DEFAULT_AUTHOR_NAME):
        self.output_dir = Path(output_dir)
        self.site_url = site_url
        self.author_name = author_name

    def _resolve_dir(self, directory: Optional[str]) -> Path:
        return Path(directory) if directory else self.output_dir

    def generate_filename(self, topic: str, custom_name: Optional[str] = None) -> str:
        if custom_name:
            return custom_name if custom_name.endswith(POST_SUFFIX) else f"{custom_name}{POST_SUFFIX}"

        timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
        slug = slugify(topic, max_length=MAX_SLUG_LENGTH) or "post"
        return f"{timestamp}-{slug}{POST_SUFFIX}"

    def format_post(self, draft: ContentDraft, report: SEOReport) -> str:
        """Render a post record: metadata block, content body, generation info."""
        meta = report.optimized_meta
        score = report.seo_score
        lines = [
            METADATA_HEADER,
            f"Title: {draft.title}",
            f"Meta Description: {meta.meta_description}",
            f"Keywords: {meta.keywords}",
            f"Category: {determine_category(draft.content, draft.topic)}",
            f"Author: {self.author_name}",
            f"Generated: {draft.generated_at:%Y-%m-%d %H:%M:%S}",
            f"Model Used: {draft.model_used}",
            f"Word Count: {draft.word_count}",
            f"Backlinks: {draft.backlinks_included}",
            f"Topic: {draft.topic}",
            f"Slug: {draft.slug}",
            f"SEO Score: {score.grade} ({score.percentage}%)",
            "",
            CONTENT_HEADER,
            draft.content,
            "",
            INFO_HEADER,
            f"- Generated by Bloggen CLI v{__version__}",
            "- Optimized for IT job market",
            "- SEO-ready with integrated backlinks",
            f"- Website: {self.site_url}",
            f"- Canonical URL: {meta.canonical_url}",
            f"- Date: {draft.generated_at.isoformat()}",
        ]
        if draft.trimmed:
            lines.append(f"- Trimmed to word limit (originally {draft.original_word_count} words)")
        return "\n".join(lines) + "\n"

    def save_post(self, draft: ContentDraft, report: Optional[SEOReport] = None,
                  filename: Optional[str] = None, directory: Optional[str] = None) -> SavedPost:
        """Write one post record, creating the output directory if needed."""
        if report is None:
            report = SEOOptimizer(self.site_url).optimize_content(draft.content, draft.topic, draft.model_dump())

        output_dir = self._resolve_dir(directory)
        name = self.generate_filename(draft.topic, filename)
        filepath = output_dir / name
        formatted = self.format_post(draft, report)

        try:
            filepath.parent.mkdir(parents=True, exist_ok=True)
            filepath.write_text(formatted, encoding="utf-8")
        except OSError as e:
            raise PostStoreError(f"Failed to save blog post: {e}") from e

        logger.info(f"💾 Saved post to {filepath}")
        return SavedPost(
            filepath=str(filepath),
            filename=filepath.name,
            directory=str(filepath.parent),
            size=len(formatted.encode("utf-8")),
        )

    def read_post(self, path: str) -> Tuple[str, Optional[str]]:
        """
        Read a post record back.

        Returns the content body (the whole file when it is not a post record)
        and the recorded topic, if any.
        """
        try:
            raw = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PostStoreError(f"Failed to read {path}: {e}") from e

        match = _CONTENT_SECTION.search(raw)
        content = match.group(1).strip() if match else raw.strip()
        topic_match = _TOPIC_LINE.search(raw)
        topic = topic_match.group(1).strip() if topic_match else None
        return content, topic

    def get_file_stats(self, filepath: Path) -> Dict:
        stats = filepath.stat()
        # Stats only: undecodable bytes are replaced
        content = filepath.read_text(encoding="utf-8", errors="replace")
        return {
            "size": stats.st_size,
            "created": datetime.fromtimestamp(stats.st_ctime),
            "modified": datetime.fromtimestamp(stats.st_mtime),
            "word_count": word_count(content),
            "lines": len(content.split("\n")),
        }

    def list_posts(self, directory: Optional[str] = None) -> List[PostRecord]:
        """Post records in a directory, most recent (lexically greatest) first."""
        post_dir = self._resolve_dir(directory)
        if not post_dir.is_dir():
            return []

        try:
            files = sorted(
                (p for p in post_dir.iterdir() if p.is_file() and p.name.endswith(POST_SUFFIX)),
                key=lambda p: p.name,
                reverse=True,
            )
            return [
                PostRecord(filename=p.name, filepath=str(p), **self.get_file_stats(p))
                for p in files
            ]
        except OSError as e:
            raise PostStoreError(f"Failed to list blog posts: {e}") from e

    def cleanup_old_posts(self, keep: int = 10, directory: Optional[str] = None) -> Dict[str, int]:
        """Delete all but the newest ``keep`` records."""
        posts = self.list_posts(directory)
        if len(posts) <= keep:
            return {"deleted": 0, "kept": len(posts)}

        deleted = 0
        for post in posts[keep:]:
            try:
                Path(post.filepath).unlink()
                deleted += 1
            except OSError as e:
                logger.warning(f"⚠️ Failed to delete {post.filename}: {e}")

        return {"deleted": deleted, "kept": len(posts) - deleted}
