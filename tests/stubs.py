"""
Deterministic stand-in for the text-generation service.
"""

import json

from bloggen.clients.base import TextGenerationService
from bloggen.errors import ErrorKind, GenerationError

SAMPLE_WORKFLOW = {
    "contentType": "guide",
    "topic": "Remote Python developer jobs",
    "audience": {"level": "beginners", "industry": "tech", "expertise": "basic"},
    "lengthConstraints": {
        "wordLimit": 500,
        "constraintType": "maximum",
        "priority": "critical",
        "reasoning": "Maximum word limit specified",
        "hasCriticalLimit": True,
    },
    "styleConstraints": {"tone": "friendly", "complexity": "simple"},
    "contentConstraints": {"mustInclude": ["salary ranges"], "depthLevel": "moderate"},
    "seoConstraints": {"primaryKeywords": ["python developer", "remote jobs"]},
}

SAMPLE_WORKFLOW_JSON = json.dumps(SAMPLE_WORKFLOW)


class StubGenerationService(TextGenerationService):
    """
    Returns canned text per model.

    ``responses`` maps a model name to a string, an exception to raise, or a list
    of those consumed one call at a time. Models without an entry fall back to
    ``json_default`` for JSON requests and ``default`` otherwise; with neither set
    the model is reported as unavailable.
    """

    def __init__(self, responses=None, default=None, json_default=None):
        self.responses = dict(responses or {})
        self.default = default
        self.json_default = json_default
        self.calls = []

    def generate(self, model, prompt, *, json_output=False):
        self.calls.append((model, prompt, json_output))

        if model in self.responses:
            outcome = self.responses[model]
            if isinstance(outcome, list):
                outcome = outcome.pop(0)
        elif json_output and self.json_default is not None:
            outcome = self.json_default
        else:
            outcome = self.default

        if isinstance(outcome, Exception):
            raise outcome
        if outcome is None:
            raise GenerationError(f"models/{model} is not found", ErrorKind.MODEL_UNAVAILABLE, model)
        return outcome

    @property
    def models_called(self):
        return [call[0] for call in self.calls]

    @property
    def prompts(self):
        return [call[1] for call in self.calls]
