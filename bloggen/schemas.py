from datetime import datetime
from typing import Dict, List, Literal, Optional, Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

ConstraintType = Literal["exact", "maximum", "minimum", "flexible"]
ConstraintPriority = Literal["critical", "important", "suggestion"]


# --- Instruction workflow -----------------------------------------------------

class LengthConstraint(BaseModel):
    word_limit: Optional[int] = Field(default=None, description="Target word count, or null when unconstrained")
    constraint_type: ConstraintType = Field(default="flexible", description="exact|maximum|minimum|flexible")
    priority: ConstraintPriority = Field(default="suggestion", description="critical|important|suggestion")
    reasoning: str = Field(default="No specific length constraints detected", description="Why this length was chosen")
    has_critical_limit: bool = Field(default=False, description="True if a word count was explicitly specified")

    @model_validator(mode="after")
    def _unlimited_is_flexible(self):
        # A missing limit can only mean "no constraint"
        if self.word_limit is None or self.word_limit <= 0:
            self.word_limit = None
            self.constraint_type = "flexible"
            self.priority = "suggestion"
            self.has_critical_limit = False
        return self


class Audience(BaseModel):
    level: str = Field(default="general", description="beginners|professionals|general|experts|mixed")
    industry: str = Field(default="general", description="tech|business|general|specific-domain")
    expertise: str = Field(default="basic", description="none|basic|intermediate|advanced")


class StyleConstraints(BaseModel):
    tone: str = "professional"
    complexity: str = "moderate"
    format: str = "standard"
    voice: str = "active"
    perspective: str = "third-person"


class ContentConstraints(BaseModel):
    must_include: List[str] = Field(default_factory=list)
    should_include: List[str] = Field(default_factory=lambda: ["examples", "current trends"])
    must_exclude: List[str] = Field(default_factory=list)
    data_requirements: str = "examples"
    depth_level: str = "moderate"


class SEOConstraints(BaseModel):
    primary_keywords: List[str] = Field(default_factory=list)
    keyword_density: str = "natural"
    search_intent: str = "informational"


class ConflictResolution(BaseModel):
    has_conflicts: bool = False
    conflict_types: List[str] = Field(default_factory=list)
    recommended_priority: str = "word count > audience > style"


class Workflow(BaseModel):
    """Structured constraint bundle derived from a free-text instruction."""
    content_type: str = "blog-post"
    topic: str = "General topic"
    audience: Audience = Field(default_factory=Audience)
    length_constraints: LengthConstraint = Field(default_factory=LengthConstraint)
    style_constraints: StyleConstraints = Field(default_factory=StyleConstraints)
    content_constraints: ContentConstraints = Field(default_factory=ContentConstraints)
    seo_constraints: SEOConstraints = Field(default_factory=SEOConstraints)
    conflict_resolution: ConflictResolution = Field(default_factory=ConflictResolution)

    original_instruction: str = ""
    parsed_at: Optional[datetime] = None
    model_used: str = "unknown"
    fallback_used: bool = False
    estimated_length: str = "medium"
    is_complex: bool = False

    @property
    def seo_keywords(self) -> List[str]:
        return self.seo_constraints.primary_keywords


class ConstraintIssue(BaseModel):
    type: str
    message: str
    suggestion: str


class ConstraintValidation(BaseModel):
    is_valid: bool = True
    conflicts: List[ConstraintIssue] = Field(default_factory=list)
    warnings: List[ConstraintIssue] = Field(default_factory=list)
    critical_issues: List[str] = Field(default_factory=list)


# --- SEO analysis -------------------------------------------------------------

class KeywordStats(BaseModel):
    keyword: str
    count: int
    density: float


class PrimaryKeywordStats(KeywordStats):
    optimal: bool


class KeywordAnalysis(BaseModel):
    primary: PrimaryKeywordStats
    related: List[KeywordStats] = Field(default_factory=list)
    total_unique_keywords: int = 0


class HeadingStructure(BaseModel):
    h1: int = 0
    h2: int = 0
    h3: int = 0
    h4: int = 0
    total: int = 0
    proper_structure: bool = False
    ratio: float = 0.0


class Readability(BaseModel):
    sentences: int = 0
    avg_words_per_sentence: float = 0.0
    complex_words_percentage: float = 0.0
    readability_score: int = Field(default=0, ge=0, le=100)
    grade: str = "Very Difficult"


class InternalLinks(BaseModel):
    count: int = 0
    optimal: bool = False
    links: List[str] = Field(default_factory=list)


class ContentStructure(BaseModel):
    paragraphs: int = 0
    lists: int = 0
    avg_paragraph_length: float = 0.0


class SEOAnalysis(BaseModel):
    word_count: int
    keyword_analysis: KeywordAnalysis
    heading_structure: HeadingStructure
    readability: Readability
    internal_links: InternalLinks
    content_structure: ContentStructure


class SEOScore(BaseModel):
    score: int = Field(ge=0, le=100)
    max_score: int = 100
    percentage: int
    grade: Literal["A+", "A", "B", "C", "D", "F"]


class Suggestion(BaseModel):
    type: Literal["content", "keywords", "structure", "readability"]
    priority: Literal["high", "medium", "low"]
    message: str


class OptimizedMeta(BaseModel):
    title: str
    meta_description: str
    keywords: str
    canonical_url: str
    og_tags: Dict[str, str]
    twitter_tags: Dict[str, str]


class SEOReport(BaseModel):
    analysis: SEOAnalysis
    optimized_meta: OptimizedMeta
    suggestions: List[Suggestion]
    seo_score: SEOScore
    schema_markup: Dict[str, Any]
    social_meta: Dict[str, Dict[str, str]]


# --- Generated content --------------------------------------------------------

class ContentDraft(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: str = Field(description="The generated markdown body")
    topic: str
    title: str
    slug: str
    generated_at: datetime
    model_used: str
    word_count: int = Field(ge=0)
    backlinks_included: int = 0
    trimmed: bool = False
    original_word_count: Optional[int] = None


class SavedPost(BaseModel):
    filepath: str
    filename: str
    directory: str
    size: int


class PostRecord(BaseModel):
    filename: str
    filepath: str
    size: int
    created: datetime
    modified: datetime
    word_count: int
    lines: int
