"""
SEO rewrite flow: score an existing post, ask the model to fix the reported issues,
then score the rewritten version.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .content_generator import ContentGenerator
from .schemas import ContentDraft, SEOReport
from .seo_system import SEOOptimizer

logger = logging.getLogger(__name__)

DEFAULT_TARGET_SCORE = 85


@dataclass
class RewriteResult:
    original_report: SEOReport
    target_score: int
    draft: Optional[ContentDraft] = None
    report: Optional[SEOReport] = None

    @property
    def already_optimized(self) -> bool:
        return self.draft is None

    @property
    def improvement(self) -> int:
        if self.report is None:
            return 0
        return self.report.seo_score.percentage - self.original_report.seo_score.percentage


class ContentRewriter:
    def __init__(self, generator: ContentGenerator, optimizer: SEOOptimizer):
        self.generator = generator
        self.optimizer = optimizer

    def rewrite(self, content: str, keyword: str, target_score: int = DEFAULT_TARGET_SCORE,
                topic: Optional[str] = None) -> RewriteResult:
        """
        Rewrite content until it is worth saving; a single generation attempt.

        Content that already reaches ``target_score`` is returned untouched
        (``draft`` is None). Generation failures propagate as GenerationError.
        """
        current = self.optimizer.optimize_content(content, keyword)
        logger.info(f"📊 Current SEO Score: {current.seo_score.grade} ({current.seo_score.percentage}%)")

        if current.seo_score.percentage >= target_score:
            logger.info(f"✅ Content already meets target score of {target_score}%")
            return RewriteResult(original_report=current, target_score=target_score)

        logger.info(f"🎯 Target Score: {target_score}% (needs {target_score - current.seo_score.percentage} points)")
        prompt = self.generator.prompt_builder.build_improvement_prompt(content, current, keyword, target_score)
        draft = self.generator.generate_content(topic or keyword, custom_prompt=prompt)

        report = self.optimizer.optimize_content(draft.content, keyword, draft.model_dump())
        logger.info(f"📈 New SEO Score: {report.seo_score.grade} ({report.seo_score.percentage}%)")
        return RewriteResult(original_report=current, target_score=target_score, draft=draft, report=report)
