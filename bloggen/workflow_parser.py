"""
Instruction Constraint Parser.

Turns a free-text instruction such as "write a brief guide for beginners under 400
words" into a structured :class:`~bloggen.schemas.Workflow`. The text-generation
service is asked for strict JSON first, walking a chain of models; local regex
heuristics backfill whatever the model missed and take over completely when every
model is blocked or failing.
"""

import logging
import re
import time
from collections import OrderedDict, deque
from datetime import datetime
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

from pydantic import ValidationError

from .clients.base import TextGenerationService
from .errors import GenerationError, classify_error
from .schemas import (
    ConstraintIssue,
    ConstraintValidation,
    LengthConstraint,
    Workflow,
)
from .utils import normalize_dict_keys
from .utils.json_recovery import recover_json

logger = logging.getLogger(__name__)

# Ordered by preference
PARSER_MODEL_CHAIN: List[Tuple[str, str]] = [
    ("gemini-2.5-flash", "Primary (fastest)"),
    ("gemini-1.5-flash", "Fallback 1 (reliable)"),
    ("gemini-1.5-pro", "Fallback 2 (comprehensive)"),
    ("gemini-1.0-pro", "Fallback 3 (stable)"),
]

FALLBACK_MODEL_NAME = "regex-fallback"
DEFAULT_TOPIC = "General topic"

EXACT_PATTERNS = [
    re.compile(r'(?:exactly|precisely|must be)\s*(\d+)\s*words?'),
    re.compile(r'\bin\s*(\d+)\s*words?\b'),
    re.compile(r'(?:write|create|generate).*?(\d+)\s*words?'),
]

MAXIMUM_PATTERNS = [
    re.compile(r'(?:under|below|less than|max|maximum|no more than)\s*(\d+)\s*words?'),
    re.compile(r'keep\s*it\s*(?:under|to|below)\s*(\d+)\s*words?'),
    re.compile(r'(?:limit|cap)\s*(?:to|at)\s*(\d+)\s*words?'),
]

MINIMUM_PATTERNS = [
    re.compile(r'(?:at least|minimum|min|no less than)\s*(\d+)\s*words?'),
    re.compile(r'(?:over|above|more than)\s*(\d+)\s*words?'),
]

FLEXIBLE_PATTERNS = [
    re.compile(r'(?:around|about|approximately|roughly)\s*(\d+)\s*words?'),
    re.compile(r'(?:~|±)\s*(\d+)\s*words?'),
]

# (patterns, constraint_type, priority, reasoning), checked in this order
NUMERIC_LENGTH_RULES = [
    (EXACT_PATTERNS, "exact", "critical", "Exact word count specified in instruction"),
    (MAXIMUM_PATTERNS, "maximum", "critical", "Maximum word limit specified"),
    (MINIMUM_PATTERNS, "minimum", "important", "Minimum word count specified"),
    (FLEXIBLE_PATTERNS, "flexible", "important", "Approximate word count specified"),
]

# First match wins, so order matters
LENGTH_DESCRIPTORS = {
    "brief": (300, "maximum", "important"),
    "short": (500, "maximum", "important"),
    "quick": (400, "maximum", "important"),
    "summary": (350, "maximum", "important"),
    "overview": (600, "flexible", "suggestion"),
    "comprehensive": (1500, "minimum", "suggestion"),
    "detailed": (1200, "minimum", "suggestion"),
    "in-depth": (2000, "minimum", "suggestion"),
}

TOPIC_STRIP_PATTERNS = [
    re.compile(r'\b(?:create|write|generate|make|build)\b', re.IGNORECASE),
    re.compile(r'\b(?:blog post|article|guide|tutorial|analysis)\b', re.IGNORECASE),
    re.compile(r'\b(?:about|on|regarding|concerning)\b', re.IGNORECASE),
    re.compile(r'\bunder \d+ words?\b', re.IGNORECASE),
    re.compile(r'\bin \d+ words?\b', re.IGNORECASE),
]

KEYWORD_STOPWORDS = {
    "create", "write", "generate", "blog", "post", "article", "about",
    "with", "including", "under", "words", "make", "build",
}
MAX_INSTRUCTION_KEYWORDS = 5

ADVANCED_CONTENT_TYPES = {"guide", "tutorial", "analysis", "comparison"}

CONTENT_TYPE_DESCRIPTIONS = {
    "blog-post": "a comprehensive blog post",
    "guide": "a detailed step-by-step guide",
    "tutorial": "an educational tutorial",
    "analysis": "an in-depth analysis",
    "comparison": "a detailed comparison",
    "listicle": "an engaging listicle",
    "news-article": "a news-style article",
    "summary": "a concise summary",
    "overview": "a comprehensive overview",
}


def get_content_type_description(content_type: str) -> str:
    """Human wording of a content type for use inside prompts."""
    return CONTENT_TYPE_DESCRIPTIONS.get(content_type, CONTENT_TYPE_DESCRIPTIONS["blog-post"])


class WorkflowCache:
    """Parsed workflows keyed by normalized instruction text.

    Bounded FIFO: once more than ``capacity`` entries are stored the oldest
    inserted key is evicted. Reads do not refresh an entry's position.
    """

    def __init__(self, capacity: int = 50):
        self.capacity = capacity
        self._entries: "OrderedDict[str, Workflow]" = OrderedDict()

    @staticmethod
    def make_key(instruction: str) -> str:
        return instruction.lower().strip()

    def get(self, instruction: str) -> Optional[Workflow]:
        return self._entries.get(self.make_key(instruction))

    def put(self, instruction: str, workflow: Workflow):
        self._entries[self.make_key(instruction)] = workflow
        if len(self._entries) > self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Workflow cache full, evicted: {evicted!r}")

    def __contains__(self, instruction: str) -> bool:
        return self.make_key(instruction) in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class ModelFailureTracker:
    """
    Rolling record of recent failures per model.

    A model is temporarily blocked once ``block_threshold`` failures fall inside
    the last ``block_window`` seconds. Records older than ``retention`` seconds are
    dropped whenever a new failure is recorded.
    """

    def __init__(self, block_threshold: int = 3, block_window: float = 900,
                 retention: float = 3600, clock: Callable[[], float] = time.time):
        self.block_threshold = block_threshold
        self.block_window = block_window
        self.retention = retention
        self._clock = clock
        self._failures: Dict[str, Deque[Dict[str, Any]]] = {}

    def _cleanup_old_failures(self, failures: Deque[Dict[str, Any]], window_seconds: float):
        cutoff_time = self._clock() - window_seconds
        while failures and failures[0]["timestamp"] <= cutoff_time:
            failures.popleft()

    def record_failure(self, model: str, error: Exception):
        failures = self._failures.setdefault(model, deque())
        failures.append({
            "timestamp": self._clock(),
            "error": str(error),
            "type": classify_error(error).value,
        })
        self._cleanup_old_failures(failures, self.retention)

    def clear(self, model: str):
        self._failures.pop(model, None)

    def failures_for(self, model: str) -> List[Dict[str, Any]]:
        return list(self._failures.get(model, ()))

    def is_model_temporarily_blocked(self, model: str) -> bool:
        cutoff_time = self._clock() - self.block_window
        recent = [f for f in self._failures.get(model, ()) if f["timestamp"] > cutoff_time]
        return len(recent) >= self.block_threshold

    def get_status(self, model_chain: List[Tuple[str, str]]) -> Dict[str, Dict[str, Any]]:
        """Per-model failure summary for diagnostics."""
        status = {}
        for name, description in model_chain:
            failures = self._failures.get(name, ())
            last_failure = None
            if failures:
                last_failure = datetime.fromtimestamp(failures[-1]["timestamp"])
            status[name] = {
                "description": description,
                "recent_failures": len(failures),
                "temporarily_blocked": self.is_model_temporarily_blocked(name),
                "last_failure": last_failure,
            }
        return status


class WorkflowParser:
    """Parse natural-language instructions into Workflows with multi-model fallback."""

    def __init__(self, service: TextGenerationService, cache: Optional[WorkflowCache] = None,
                 failure_tracker: Optional[ModelFailureTracker] = None,
                 model_chain: Optional[List[Tuple[str, str]]] = None):
        self.service = service
        self.cache = cache if cache is not None else WorkflowCache()
        self.failure_tracker = failure_tracker if failure_tracker is not None else ModelFailureTracker()
        self.model_chain = model_chain or PARSER_MODEL_CHAIN

    def parse_instruction(self, instruction: str) -> Workflow:
        """
        Parse an instruction into a Workflow.

        Never raises for service or parse failures: when no model produces a usable
        result the regex fallback is returned instead.
        """
        logger.info("🧠 Analyzing instruction with Gemini...")

        cached = self.cache.get(instruction)
        if cached is not None:
            logger.info("💾 Using cached parsing result")
            return cached

        prompt = self.build_parsing_prompt(instruction)
        for model, description in self.model_chain:
            if self.failure_tracker.is_model_temporarily_blocked(model):
                logger.warning(f"⏭️ Skipping {model} (temporarily blocked)")
                continue

            logger.info(f"🤖 Trying {model} ({description})...")
            try:
                response_text = self.service.generate(model, prompt, json_output=True)
            except GenerationError as e:
                logger.warning(f"⚠️ {model} failed ({e.kind.value}): {e}")
                self.failure_tracker.record_failure(model, e)
                continue

            workflow = self._workflow_from_response(response_text, instruction, model)
            if workflow is None:
                continue

            logger.info(f"✅ Successfully parsed with {model}")
            self.cache.put(instruction, workflow)
            self.failure_tracker.clear(model)
            return workflow

        logger.error("❌ All Gemini models failed, using regex fallback...")
        return self.create_fallback_workflow(instruction)

    def _workflow_from_response(self, response_text: str, instruction: str, model: str) -> Optional[Workflow]:
        data = recover_json(response_text)
        if data is None:
            logger.warning(f"⚠️ {model} returned no usable JSON, discarding response")
            return None
        try:
            return self.validate_and_enhance(data, instruction, model)
        except ValidationError as e:
            logger.warning(f"⚠️ {model} returned JSON that does not match the workflow schema: {e.error_count()} errors")
            return None

    def build_parsing_prompt(self, instruction: str) -> str:
        """Strict-JSON extraction prompt for a single instruction."""
        return f"""You are an expert content planning assistant. Analyze this user instruction and extract ALL constraints and requirements into structured JSON.

User Instruction: "{instruction}"

CONSTRAINT DETECTION PRIORITIES:
1. WORD COUNT/LENGTH constraints (highest priority)
2. TIME constraints (deadlines, publication timing)
3. FORMAT constraints (structure, style requirements)
4. CONTENT constraints (what to include/exclude)
5. AUDIENCE constraints (who this is for)
6. STYLE constraints (tone, complexity level)

WORD COUNT PARSING RULES:
- "in X words" = exact target
- "under/below X words" = maximum limit
- "at least X words" = minimum requirement
- "around/approximately X words" = flexible target (±10%)
- "brief/short" = 200-400 words
- "comprehensive/detailed" = 1200+ words
- "quick/summary" = 100-300 words

IMPORTANT: You MUST return ONLY a valid JSON object. No explanations, no markdown, no code blocks.

Extract into this EXACT JSON structure:

{{
  "contentType": "blog-post|guide|tutorial|analysis|comparison|listicle|news-article|summary|overview",
  "topic": "main subject matter",
  "audience": {{
    "level": "beginners|professionals|general|experts|mixed",
    "industry": "tech|business|general|specific-domain",
    "expertise": "none|basic|intermediate|advanced"
  }},
  "lengthConstraints": {{
    "wordLimit": null or number,
    "constraintType": "exact|maximum|minimum|flexible",
    "priority": "critical|important|suggestion",
    "reasoning": "why this length was chosen",
    "hasCriticalLimit": true/false
  }},
  "styleConstraints": {{
    "tone": "professional|casual|technical|friendly|formal|conversational",
    "complexity": "simple|moderate|advanced|expert-level",
    "format": "standard|structured|listicle|step-by-step|comparison",
    "voice": "active|passive|mixed",
    "perspective": "first-person|third-person|instructional"
  }},
  "contentConstraints": {{
    "mustInclude": ["required", "elements"],
    "shouldInclude": ["preferred", "elements"],
    "mustExclude": ["forbidden", "content"],
    "dataRequirements": "statistics|examples|case-studies|research|none",
    "depthLevel": "surface|moderate|deep|exhaustive"
  }},
  "seoConstraints": {{
    "primaryKeywords": ["main", "keywords"],
    "keywordDensity": "natural|light|moderate|heavy",
    "searchIntent": "informational|commercial|navigational|transactional"
  }},
  "conflictResolution": {{
    "hasConflicts": true/false,
    "conflictTypes": ["length vs depth", "time vs quality"],
    "recommendedPriority": "constraint priority order"
  }}
}}

CRITICAL REQUIREMENTS:
1. Extract EXACT word counts when mentioned
2. Set hasCriticalLimit to true if word count is explicitly specified
3. Identify constraint conflicts
4. Return ONLY valid JSON - no additional text, explanations, or formatting"""

    def validate_and_enhance(self, data: Dict[str, Any], instruction: str, model: str = "unknown") -> Workflow:
        """
        Backfill a model's raw JSON with local defaults and validate it.

        Raises:
            ValidationError: the data cannot be coerced into a Workflow.
        """
        # Null or empty sections fall back to schema defaults
        data = {k: v for k, v in normalize_dict_keys(data).items() if v not in (None, "", {}, [])}

        length = data.get("length_constraints")
        if not isinstance(length, dict) or not length.get("word_limit"):
            extracted = self.extract_length_constraints(instruction)
            if extracted.word_limit:
                data["length_constraints"] = extracted.model_dump()
                logger.info(f"🔍 Enhanced with regex-detected word limit: {extracted.word_limit}")

        if not data.get("topic"):
            data["topic"] = self.extract_simple_topic(instruction)

        seo = data.get("seo_constraints")
        if not isinstance(seo, dict):
            data["seo_constraints"] = {"primary_keywords": self.extract_keywords(instruction)}
        elif not seo.get("primary_keywords"):
            seo["primary_keywords"] = self.extract_keywords(instruction)

        data.update(
            original_instruction=instruction,
            parsed_at=datetime.now(),
            model_used=model,
            fallback_used=False,
        )
        workflow = Workflow.model_validate(data)
        workflow.estimated_length = self.get_estimated_length(workflow.length_constraints)
        workflow.is_complex = self.is_complex_workflow(workflow)
        return workflow

    def create_fallback_workflow(self, instruction: str) -> Workflow:
        """Build a Workflow from local heuristics only."""
        length_constraints = self.extract_length_constraints(instruction)
        workflow = Workflow(
            topic=self.extract_simple_topic(instruction),
            length_constraints=length_constraints,
            seo_constraints={"primary_keywords": self.extract_keywords(instruction)},
            original_instruction=instruction,
            parsed_at=datetime.now(),
            model_used=FALLBACK_MODEL_NAME,
            fallback_used=True,
            estimated_length=self.get_estimated_length(length_constraints),
        )
        return workflow

    def extract_length_constraints(self, instruction: str) -> LengthConstraint:
        """Detect a word-count constraint with regex patterns, then descriptive terms."""
        instruction_lower = instruction.lower()

        for patterns, constraint_type, priority, reasoning in NUMERIC_LENGTH_RULES:
            for pattern in patterns:
                match = pattern.search(instruction_lower)
                if match:
                    return LengthConstraint(
                        word_limit=int(match.group(1)),
                        constraint_type=constraint_type,
                        priority=priority,
                        reasoning=reasoning,
                        has_critical_limit=True,
                    )

        for descriptor, (word_limit, constraint_type, priority) in LENGTH_DESCRIPTORS.items():
            if descriptor in instruction_lower:
                return LengthConstraint(
                    word_limit=word_limit,
                    constraint_type=constraint_type,
                    priority=priority,
                    reasoning=f'Descriptive length term "{descriptor}" detected',
                    has_critical_limit=False,
                )

        return LengthConstraint()

    def extract_simple_topic(self, instruction: str) -> str:
        topic = instruction
        for pattern in TOPIC_STRIP_PATTERNS:
            topic = pattern.sub("", topic)
        topic = " ".join(topic.split())
        return topic or DEFAULT_TOPIC

    def extract_keywords(self, instruction: str) -> List[str]:
        keywords = [
            word for word in instruction.lower().split()
            if len(word) > 3 and word not in KEYWORD_STOPWORDS and not word.isdigit()
        ]
        return keywords[:MAX_INSTRUCTION_KEYWORDS]

    def get_estimated_length(self, length_constraints: Optional[LengthConstraint]) -> str:
        if not length_constraints or not length_constraints.word_limit:
            return "medium"
        limit = length_constraints.word_limit
        if limit <= 300:
            return "short"
        if limit <= 800:
            return "medium"
        if limit <= 1500:
            return "long"
        return "comprehensive"

    def is_complex_workflow(self, workflow: Workflow) -> bool:
        return (
            workflow.length_constraints.has_critical_limit
            or len(workflow.content_constraints.must_include) > 2
            or workflow.content_type in ADVANCED_CONTENT_TYPES
        )

    def validate_constraints(self, workflow: Workflow) -> ConstraintValidation:
        """Detect conflicting or unrealistic constraints in a parsed workflow."""
        validation = ConstraintValidation()
        word_limit = workflow.length_constraints.word_limit
        must_include_count = len(workflow.content_constraints.must_include)

        if word_limit and word_limit < 500 and must_include_count > 3:
            validation.conflicts.append(ConstraintIssue(
                type="length_vs_requirements",
                message=f"Word limit of {word_limit} is too restrictive for {must_include_count} required elements",
                suggestion="Consider increasing word limit or reducing requirements",
            ))

        if word_limit and word_limit < 400 and workflow.content_constraints.depth_level == "deep":
            validation.conflicts.append(ConstraintIssue(
                type="length_vs_depth",
                message="Brief word limit conflicts with deep analysis requirement",
                suggestion="Choose either brief summary OR deep analysis",
            ))

        if workflow.style_constraints.tone == "casual" and workflow.audience.level == "experts":
            validation.warnings.append(ConstraintIssue(
                type="style_vs_audience",
                message="Casual tone may not be appropriate for expert audience",
                suggestion="Consider professional or technical tone",
            ))

        if word_limit:
            if word_limit < 50:
                validation.critical_issues.append("Word limit too low for meaningful content")
            if word_limit > 5000:
                validation.warnings.append(ConstraintIssue(
                    type="length_vs_engagement",
                    message="Very long content may reduce reader engagement",
                    suggestion="Consider splitting the content into a series",
                ))

        validation.is_valid = not validation.conflicts and not validation.critical_issues
        return validation

    def get_content_type_description(self, content_type: str) -> str:
        return get_content_type_description(content_type)

    def get_model_status(self) -> Dict[str, Dict[str, Any]]:
        return self.failure_tracker.get_status(self.model_chain)
