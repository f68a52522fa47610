"""
SEO Scoring Engine.

This module provides:
- Content analysis (word count, keyword density, headings, readability, links)
- A weighted 0-100 SEO score with letter grade
- Prioritized optimization suggestions
- Meta tag, Open Graph/Twitter card and Schema.org JSON-LD synthesis
"""

import json
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Any

from . import text_metrics
from .config import DEFAULT_SITE_NAME, DEFAULT_WEBSITE_URL
from .schemas import (
    ContentStructure,
    HeadingStructure,
    InternalLinks,
    KeywordAnalysis,
    KeywordStats,
    OptimizedMeta,
    PrimaryKeywordStats,
    Readability,
    SEOAnalysis,
    SEOReport,
    SEOScore,
    Suggestion,
)

logger = logging.getLogger(__name__)

FALLBACK_TITLE = "IT Job Market Insights"
FALLBACK_DESCRIPTION = (
    "Expert insights on the IT job market with actionable career advice for tech professionals."
)

# Vocabulary tracked as related keywords in every analysis
RELATED_KEYWORDS = [
    "developer", "programming", "software", "tech", "engineer",
    "javascript", "python", "java", "react", "node",
    "remote", "salary", "career", "job", "skills",
]

BASE_META_KEYWORDS = ["IT jobs", "tech careers", "developer", "programming"]

SEO_GRADES = [
    (90, "A+"),
    (80, "A"),
    (70, "B"),
    (60, "C"),
    (50, "D"),
]


def get_seo_grade(percentage: float) -> str:
    for threshold, grade in SEO_GRADES:
        if percentage >= threshold:
            return grade
    return "F"


class SchemaMarkupGenerator:
    """Generate Schema.org JSON-LD markup and social card tags for a post."""

    def __init__(self, site_url: str = DEFAULT_WEBSITE_URL, site_name: str = DEFAULT_SITE_NAME):
        self.site_url = site_url.rstrip('/')
        self.site_name = site_name

    def page_url(self, slug: str) -> str:
        return f"{self.site_url}/{slug}"

    def generate_article_schema(self, title: str, description: str, slug: str,
                                date_published: Optional[str] = None,
                                keywords: Optional[str] = None) -> Dict[str, Any]:
        """
        Generate Schema.org Article markup.

        Author and publisher are both the site's own Organization.
        """
        if not date_published:
            date_published = datetime.now(timezone.utc).isoformat()

        organization = {
            "@type": "Organization",
            "name": self.site_name,
            "url": self.site_url,
        }

        return {
            "@context": "https://schema.org",
            "@type": "Article",
            "headline": title,
            "description": description,
            "author": dict(organization),
            "publisher": dict(organization),
            "datePublished": date_published,
            "mainEntityOfPage": {
                "@type": "WebPage",
                "@id": self.page_url(slug),
            },
            "articleSection": "IT Jobs",
            "keywords": keywords or "IT jobs, tech careers, programming jobs",
        }

    def generate_open_graph_tags(self, title: str, description: str, slug: str) -> Dict[str, str]:
        return {
            "og:title": title,
            "og:description": description,
            "og:type": "article",
            "og:url": self.page_url(slug),
            "og:site_name": self.site_name,
        }

    def generate_twitter_tags(self, title: str, description: str) -> Dict[str, str]:
        return {
            "twitter:card": "summary_large_image",
            "twitter:title": title,
            "twitter:description": description,
        }

    def wrap_schema_in_script(self, schema: Dict) -> str:
        """Wrap schema in HTML script tag for injection."""
        return f'<script type="application/ld+json">{json.dumps(schema, indent=2)}</script>'


class SEOOptimizer:
    """Scores markdown content against a fixed SEO rubric."""

    TARGET_KEYWORD_DENSITY = (1.0, 3.0)
    OPTIMAL_WORD_COUNT = (1200, 1800)
    MAX_TITLE_LENGTH = 60
    MAX_META_LENGTH = 160
    MIN_READABILITY = 60

    def __init__(self, site_url: Optional[str] = None, site_name: str = DEFAULT_SITE_NAME):
        self.site_url = (site_url or DEFAULT_WEBSITE_URL).rstrip('/')
        self.schema = SchemaMarkupGenerator(self.site_url, site_name)

    def optimize_content(self, content: str, primary_keyword: str,
                         metadata: Optional[Dict[str, Any]] = None) -> SEOReport:
        """
        Analyze content, score it and synthesize meta tags.

        Args:
            content: Markdown body
            primary_keyword: Phrase keyword density is measured against
            metadata: Optional generation metadata (slug, topic, generated_at, keywords)

        Returns:
            SEOReport with analysis, score, suggestions, meta, schema and social tags
        """
        metadata = metadata or {}
        analysis = self.analyze_content(content, primary_keyword)
        optimized_meta = self.generate_optimized_meta(content, primary_keyword, metadata)
        suggestions = self.generate_optimization_suggestions(analysis)
        seo_score = self.calculate_seo_score(analysis)

        logger.debug(f"SEO score for '{primary_keyword}': {seo_score.score} ({seo_score.grade})")

        return SEOReport(
            analysis=analysis,
            optimized_meta=optimized_meta,
            suggestions=suggestions,
            seo_score=seo_score,
            schema_markup=self.generate_article_schema(content, metadata),
            social_meta=self.generate_social_meta_tags(content, metadata),
        )

    # --- Analysis -------------------------------------------------------------

    def analyze_content(self, content: str, primary_keyword: str) -> SEOAnalysis:
        link_count = text_metrics.internal_link_count(content, self.site_url)
        return SEOAnalysis(
            word_count=text_metrics.word_count(content),
            keyword_analysis=self.analyze_keywords(content, primary_keyword),
            heading_structure=HeadingStructure(**text_metrics.heading_counts(content)),
            readability=Readability(**text_metrics.readability(content)),
            internal_links=InternalLinks(
                count=link_count,
                optimal=text_metrics.internal_links_optimal(link_count),
                links=[self.site_url] if link_count > 0 else [],
            ),
            content_structure=ContentStructure(**text_metrics.content_structure(content)),
        )

    def analyze_keywords(self, content: str, primary_keyword: str) -> KeywordAnalysis:
        density = text_metrics.keyword_density(content, primary_keyword)
        low, high = self.TARGET_KEYWORD_DENSITY

        related = []
        for keyword in RELATED_KEYWORDS:
            count = text_metrics.count_keyword_occurrences(content, keyword)
            if count > 0:
                related.append(KeywordStats(
                    keyword=keyword,
                    count=count,
                    density=text_metrics.keyword_density(content, keyword),
                ))
        related.sort(key=lambda k: k.count, reverse=True)

        return KeywordAnalysis(
            primary=PrimaryKeywordStats(
                keyword=primary_keyword,
                count=text_metrics.count_keyword_occurrences(content, primary_keyword),
                density=density,
                optimal=low <= density <= high,
            ),
            related=related[:10],
            total_unique_keywords=len(related),
        )

    # --- Scoring --------------------------------------------------------------

    def calculate_seo_score(self, analysis: SEOAnalysis) -> SEOScore:
        """Four 25-point components: length, keyword density, headings, readability."""
        score = 0
        min_words, max_words = self.OPTIMAL_WORD_COUNT

        if min_words <= analysis.word_count <= max_words:
            score += 25
        elif analysis.word_count >= min_words * 0.8:
            score += 15
        else:
            score += 5

        score += 25 if analysis.keyword_analysis.primary.optimal else 10

        headings = analysis.heading_structure
        if headings.proper_structure:
            score += 25
        elif headings.h1 == 1:
            score += 15
        else:
            score += 5

        score += int(text_metrics.round_half_up(analysis.readability.readability_score / 100 * 25))

        percentage = int(text_metrics.round_half_up(score / 100 * 100))
        return SEOScore(score=score, max_score=100, percentage=percentage, grade=get_seo_grade(percentage))

    def generate_optimization_suggestions(self, analysis: SEOAnalysis) -> List[Suggestion]:
        suggestions = []
        min_words, max_words = self.OPTIMAL_WORD_COUNT

        if analysis.word_count < min_words:
            suggestions.append(Suggestion(
                type="content",
                priority="high",
                message=f"Content is too short ({analysis.word_count} words). Aim for {min_words}-{max_words} words.",
            ))

        primary = analysis.keyword_analysis.primary
        if not primary.optimal:
            if primary.density < self.TARGET_KEYWORD_DENSITY[0]:
                suggestions.append(Suggestion(
                    type="keywords",
                    priority="medium",
                    message=f"Primary keyword density is low ({primary.density:.1f}%). Add more variations naturally.",
                ))
            else:
                suggestions.append(Suggestion(
                    type="keywords",
                    priority="high",
                    message=f"Primary keyword density is too high ({primary.density:.1f}%). Reduce to avoid keyword stuffing.",
                ))

        if not analysis.heading_structure.proper_structure:
            suggestions.append(Suggestion(
                type="structure",
                priority="medium",
                message="Improve heading structure. Use one H1 and multiple H2s for better SEO.",
            ))

        if analysis.readability.readability_score < self.MIN_READABILITY:
            suggestions.append(Suggestion(
                type="readability",
                priority="medium",
                message="Content readability could be improved. Use shorter sentences and simpler words.",
            ))

        return suggestions

    # --- Meta synthesis -------------------------------------------------------

    def extract_title(self, content: str) -> str:
        for line in content.split("\n"):
            if line.startswith("# "):
                return line[2:].strip() or FALLBACK_TITLE
        return FALLBACK_TITLE

    def optimize_title(self, title: str, primary_keyword: str) -> str:
        if primary_keyword.lower() not in title.lower():
            title = f"{primary_keyword}: {title}"
        if len(title) > self.MAX_TITLE_LENGTH:
            title = title[:self.MAX_TITLE_LENGTH - 3] + "..."
        return title

    def generate_meta_description(self, content: str, primary_keyword: str) -> str:
        paragraphs = [
            p for p in content.split("\n\n")
            if p.strip() and not p.startswith(("#", "*", "-"))
        ]

        description = FALLBACK_DESCRIPTION
        if paragraphs:
            cleaned = paragraphs[0]
            for marker in ("**", "__", "##", "#"):
                cleaned = cleaned.replace(marker, "")
            description = cleaned.strip() or FALLBACK_DESCRIPTION

        if primary_keyword.lower() not in description.lower():
            description = f"{primary_keyword} insights: {description}"

        if len(description) > self.MAX_META_LENGTH:
            description = description[:self.MAX_META_LENGTH - 3] + "..."

        return description

    def generate_meta_keywords(self, primary_keyword: str) -> str:
        return ", ".join([primary_keyword] + BASE_META_KEYWORDS)

    def _slug_for(self, content: str, metadata: Dict[str, Any]) -> str:
        return metadata.get("slug") or text_metrics.slugify(self.extract_title(content))

    def generate_optimized_meta(self, content: str, primary_keyword: str,
                                metadata: Dict[str, Any]) -> OptimizedMeta:
        title = self.optimize_title(self.extract_title(content), primary_keyword)
        description = self.generate_meta_description(content, primary_keyword)
        slug = self._slug_for(content, metadata)

        return OptimizedMeta(
            title=title,
            meta_description=description,
            keywords=self.generate_meta_keywords(primary_keyword),
            canonical_url=self.schema.page_url(slug),
            og_tags=self.schema.generate_open_graph_tags(title, description, slug),
            twitter_tags=self.schema.generate_twitter_tags(title, description),
        )

    def generate_article_schema(self, content: str, metadata: Dict[str, Any]) -> Dict[str, Any]:
        generated_at = metadata.get("generated_at")
        if isinstance(generated_at, datetime):
            generated_at = generated_at.isoformat()

        return self.schema.generate_article_schema(
            title=self.extract_title(content),
            description=self.generate_meta_description(content, metadata.get("topic", "")),
            slug=self._slug_for(content, metadata),
            date_published=generated_at,
            keywords=metadata.get("keywords"),
        )

    def generate_social_meta_tags(self, content: str, metadata: Dict[str, Any]) -> Dict[str, Dict[str, str]]:
        title = self.extract_title(content)
        description = self.generate_meta_description(content, metadata.get("topic", ""))
        slug = self._slug_for(content, metadata)
        return {
            "open_graph": self.schema.generate_open_graph_tags(title, description, slug),
            "twitter": self.schema.generate_twitter_tags(title, description),
        }
