"""
Prompt templates for blog generation.
"""

from datetime import datetime
from typing import List

from .config import DEFAULT_WEBSITE_URL
from .schemas import SEOReport, Workflow
from .workflow_parser import get_content_type_description


AUDIENCE_APPROACHES = {
    "beginners": "Define technical terms, use simple analogies, provide step-by-step explanations",
    "professionals": "Industry terminology is acceptable, focus on practical applications and ROI",
    "experts": "Technical depth expected, discuss advanced concepts, assume prior knowledge",
}


def length_strategy(word_limit: int) -> str:
    """Content strategy hint for a word budget."""
    if word_limit <= 300:
        return "Use bullet points, focus on key facts only, eliminate fluff"
    elif word_limit <= 500:
        return "3-4 main points, brief examples, concise explanations"
    elif word_limit <= 800:
        return "5-6 main points, 1-2 examples per point, moderate detail"
    return "Comprehensive coverage with detailed examples and explanations"


class ContentPromptBuilder:
    """Builds generation prompts focused on the IT job market."""

    def __init__(self, site_url: str = DEFAULT_WEBSITE_URL):
        self.site_url = site_url

    def _current_date(self) -> str:
        return datetime.now().strftime("%Y-%m-%d")

    def build_topic_prompt(self, topic: str) -> str:
        current_date = self._current_date()
        return f"""Write a comprehensive, SEO-optimized blog post about: "{topic}"

CONTENT REQUIREMENTS:
- Focus specifically on the IT job market and tech careers
- Current date context: {current_date}
- Target audience: IT professionals, job seekers, and career changers
- Length: 1200-1800 words
- Professional, informative tone with actionable insights

STRUCTURE REQUIREMENTS:
- Compelling SEO-optimized title
- Engaging introduction that hooks the reader
- Well-organized sections with H2 and H3 headings
- Bullet points and lists for readability
- Data-driven insights where applicable
- Practical tips and actionable advice
- Strong conclusion with key takeaways

SEO OPTIMIZATION:
- Include relevant IT job market keywords naturally
- Optimize for search intent around tech careers and job hunting
- Use long-tail keywords related to the topic
- Ensure proper heading hierarchy

BACKLINK INTEGRATION:
- Naturally reference {self.site_url} as a valuable resource for IT career insights
- Include 1-2 contextual mentions that add value to the content
- Make the references feel organic and helpful to readers

Generate the complete blog post in markdown format with proper formatting."""

    def build_custom_prompt(self, custom_prompt: str) -> str:
        current_date = self._current_date()
        return f"""{custom_prompt}

IMPORTANT REQUIREMENTS:
- Focus on the IT job market and tech career topics
- Write in a professional, informative tone
- Include current market insights and data where relevant
- Structure with proper headings (H1, H2, H3)
- Include actionable advice for IT professionals
- Make the content SEO-friendly with natural keyword integration
- Write approximately 1200-1800 words
- Include a compelling introduction and conclusion
- Reference current date context: {current_date}
- Naturally mention and link to {self.site_url} as a resource for additional career insights (1-2 times maximum)

Generate the complete blog post in markdown format."""

    def build_workflow_prompt(self, workflow: Workflow) -> str:
        """
        Build a constraint-driven prompt from a parsed workflow.

        The word-count section and the closing reminder are only emitted when the
        instruction carried an explicit limit.
        """
        length = workflow.length_constraints
        critical_limit = bool(length.word_limit and length.has_critical_limit)

        prompt = f'Create {get_content_type_description(workflow.content_type)} about "{workflow.topic}".'
        prompt += "\n\n🚨 CRITICAL CONSTRAINTS - MUST BE FOLLOWED:"

        if critical_limit:
            prompt += "\n━━━ WORD COUNT CONSTRAINT ━━━"
            prompt += f"\nTarget: {length.constraint_type.upper()} {length.word_limit} words"
            prompt += "\nPriority: MANDATORY - This constraint cannot be violated"
            if length.constraint_type == "exact":
                prompt += f"\nRequirement: Content must be precisely {length.word_limit} words (±5 words acceptable)"
            elif length.constraint_type == "maximum":
                prompt += f"\nRequirement: Content must NOT exceed {length.word_limit} words"
            elif length.constraint_type == "minimum":
                prompt += f"\nRequirement: Content must be at least {length.word_limit} words"
            prompt += f"\nStrategy for {length.word_limit} words: {length_strategy(length.word_limit)}"

        audience = workflow.audience
        prompt += "\n\n━━━ AUDIENCE CONSTRAINTS ━━━"
        prompt += f"\nTarget Audience: {audience.level} in {audience.industry} field"
        prompt += f"\nExpertise Level: {audience.expertise}"
        approach = AUDIENCE_APPROACHES.get(audience.level)
        if approach:
            prompt += f"\nApproach: {approach}"

        style = workflow.style_constraints
        prompt += "\n\n━━━ STYLE CONSTRAINTS ━━━"
        prompt += f"\nTone: {style.tone}"
        prompt += f"\nComplexity: {style.complexity}"
        prompt += f"\nFormat: {style.format}"
        prompt += f"\nPerspective: {style.perspective}"

        seo = workflow.seo_constraints
        if seo.primary_keywords:
            prompt += "\n\n━━━ SEO REQUIREMENTS ━━━"
            prompt += f"\nPrimary Keywords: {', '.join(seo.primary_keywords)}"
            prompt += f"\nKeyword Integration: {seo.keyword_density} density"
            prompt += f"\nSearch Intent: {seo.search_intent}"

        prompt += "\n\n━━━ EXECUTION INSTRUCTIONS ━━━"
        prompt += "\n1. Follow word count constraint EXACTLY - count words before finalizing"
        prompt += "\n2. Prioritize critical constraints over nice-to-have features"
        prompt += "\n3. Maintain quality while respecting all constraints"
        prompt += "\n4. Use proper heading structure (H1, H2, H3)"
        prompt += "\n5. Include internal linking opportunities"

        if critical_limit:
            prompt += (
                f"\n\n🎯 FINAL WORD COUNT REMINDER: This content MUST be "
                f"{length.constraint_type} {length.word_limit} words. Count carefully!"
            )

        return prompt

    def _improvement_instructions(self, report: SEOReport, keyword: str) -> List[str]:
        instructions = []
        for suggestion in report.suggestions:
            if suggestion.type == "content":
                instructions.append("- Expand the content with more detailed sections, examples, and actionable advice")
                instructions.append("- Add more comprehensive coverage of the topic with deeper insights")
            elif suggestion.type == "keywords":
                if suggestion.priority == "high":
                    instructions.append(f'- Reduce keyword stuffing and make "{keyword}" usage more natural')
                else:
                    instructions.append(f'- Naturally integrate more variations of "{keyword}" throughout the content')
                    instructions.append("- Include related keywords and synonyms in headings and paragraphs")
            elif suggestion.type == "structure":
                instructions.append("- Improve heading hierarchy with proper H1, H2, H3 structure")
                instructions.append("- Add more subheadings to break up content into digestible sections")
            elif suggestion.type == "readability":
                instructions.append("- Use shorter sentences and simpler language")
                instructions.append("- Add more bullet points, lists, and structured formatting")
        return instructions

    def build_improvement_prompt(self, content: str, report: SEOReport,
                                 keyword: str, target_score: int) -> str:
        """Prompt asking the model to rewrite a post so it fixes the reported SEO issues."""
        instructions = self._improvement_instructions(report, keyword)
        target_word_count = max(1400, report.analysis.word_count + 200)
        current_year = datetime.now().year

        return f"""Please rewrite and significantly improve the following blog post to achieve better SEO optimization.

ORIGINAL CONTENT TO IMPROVE:
{content}

SPECIFIC IMPROVEMENT REQUIREMENTS:
{chr(10).join(instructions)}

TARGET SEO GOALS:
- Primary keyword: "{keyword}" with 1.5-2.5% density (natural integration)
- Target word count: {target_word_count}+ words
- SEO score target: {target_score}%+
- Better heading structure with clear H1, H2, H3 hierarchy
- Improved readability with shorter paragraphs and clearer language
- More actionable insights and practical advice
- Enhanced user engagement and value

CONTENT REQUIREMENTS:
- Keep the IT job market focus and professional tone
- Expand with more detailed examples and case studies
- Add more structured lists and bullet points for readability
- Include more actionable career advice and specific tips
- Integrate backlinks to {self.site_url} naturally (1-2 times)
- Use current market data and trends ({current_year} context)
- Make the content more comprehensive and authoritative

STRUCTURE REQUIREMENTS:
- Clear H1 title with keyword integration
- Multiple H2 sections for main topics
- H3 subsections for detailed coverage
- Bullet points and lists for key information
- Strong introduction and conclusion
- Logical flow between sections

Generate a completely rewritten, expanded, and SEO-optimized version that addresses all the identified issues while maintaining high quality and value for IT professionals."""
