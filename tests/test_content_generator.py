"""
Tests for the generation orchestrator: model fallback, trimming and prompts.
"""

import unittest
from unittest.mock import Mock

from bloggen.content_generator import GENERATION_MODEL_CHAIN, ContentGenerator, trim_to_word_limit
from bloggen.errors import ErrorKind, GenerationError
from bloggen.prompt_builder import ContentPromptBuilder, length_strategy
from bloggen.schemas import Workflow
from bloggen.seo_system import SEOOptimizer
from bloggen.text_metrics import word_count
from tests.stubs import StubGenerationService

SITE_URL = "https://careers.example.com"
POST = f"# Python Careers\n\nPython developers are in demand. See {SITE_URL} for more.\n"


def make_generator(service):
    sleep = Mock()
    return ContentGenerator(service, site_url=SITE_URL, sleep=sleep), sleep


def make_workflow(word_limit=500, constraint_type="maximum", has_critical_limit=True, **kwargs):
    return Workflow(
        topic="Remote Python jobs",
        length_constraints={
            "word_limit": word_limit,
            "constraint_type": constraint_type,
            "priority": "critical",
            "has_critical_limit": has_critical_limit,
        },
        **kwargs,
    )


class TestModelFallback(unittest.TestCase):

    def test_first_model_success(self):
        service = StubGenerationService(default=POST)
        generator, sleep = make_generator(service)

        draft = generator.generate_content("Python careers")

        self.assertEqual(service.models_called, [GENERATION_MODEL_CHAIN[0]])
        sleep.assert_not_called()
        self.assertEqual(draft.model_used, GENERATION_MODEL_CHAIN[0])
        self.assertEqual(draft.title, "Python Careers")
        self.assertEqual(draft.slug, "python-careers")
        self.assertEqual(draft.backlinks_included, 1)
        self.assertFalse(draft.trimmed)

    def test_falls_back_in_order_with_delay(self):
        service = StubGenerationService(
            responses={
                GENERATION_MODEL_CHAIN[0]: GenerationError("429 Too Many Requests", ErrorKind.RATE_LIMITED),
                GENERATION_MODEL_CHAIN[1]: GenerationError("404 NOT_FOUND", ErrorKind.MODEL_UNAVAILABLE),
            },
            default=POST,
        )
        generator, sleep = make_generator(service)

        draft = generator.generate_content("Python careers")

        self.assertEqual(service.models_called, GENERATION_MODEL_CHAIN[:3])
        self.assertEqual([c.args[0] for c in sleep.call_args_list], [1.0, 1.0])
        self.assertEqual(draft.model_used, GENERATION_MODEL_CHAIN[2])

    def test_empty_output_counts_as_failure(self):
        service = StubGenerationService(responses={GENERATION_MODEL_CHAIN[0]: "   "}, default=POST)
        generator, _ = make_generator(service)

        draft = generator.generate_content("Python careers")
        self.assertEqual(draft.model_used, GENERATION_MODEL_CHAIN[1])

    def test_all_models_fail_raises_last_error(self):
        service = StubGenerationService(default=GenerationError("429 RESOURCE_EXHAUSTED", ErrorKind.QUOTA_EXCEEDED))
        generator, sleep = make_generator(service)

        with self.assertRaises(GenerationError) as ctx:
            generator.generate_content("Python careers")

        self.assertEqual(ctx.exception.kind, ErrorKind.QUOTA_EXCEEDED)
        self.assertIn("GEMINI_API_KEY", ctx.exception.remedy)
        self.assertEqual(service.models_called, GENERATION_MODEL_CHAIN)
        self.assertEqual(sleep.call_count, len(GENERATION_MODEL_CHAIN) - 1)

    def test_custom_prompt_is_wrapped(self):
        service = StubGenerationService(default=POST)
        generator, _ = make_generator(service)

        generator.generate_content("Python careers", custom_prompt="Explain Python hiring trends")

        prompt = service.prompts[0]
        self.assertTrue(prompt.startswith("Explain Python hiring trends"))
        self.assertIn("IMPORTANT REQUIREMENTS:", prompt)
        self.assertIn(SITE_URL, prompt)

    def test_model_status(self):
        generator, _ = make_generator(StubGenerationService())
        status = generator.get_model_status()
        self.assertEqual(status["total_models"], 6)
        self.assertEqual(status["primary_model"], "gemini-2.5-flash")
        self.assertEqual(status["fallback_models"], GENERATION_MODEL_CHAIN[1:])


class TestTrimToWordLimit(unittest.TestCase):

    def test_under_limit_is_unchanged(self):
        text = "One two three.\n\nFour five."
        self.assertEqual(trim_to_word_limit(text, 10), (text, False))

    def test_cuts_on_sentence_boundary(self):
        sentence = "Python teams keep hiring remote engineers across many busy regions."
        text = " ".join([sentence] * 60)

        trimmed, changed = trim_to_word_limit(text, 500)

        self.assertTrue(changed)
        self.assertEqual(word_count(trimmed), 500)
        self.assertTrue(trimmed.endswith("."))

    def test_moves_back_to_late_period(self):
        text = "alpha " * 450 + "end. " + "beta " * 149

        trimmed, changed = trim_to_word_limit(text, 500)

        self.assertTrue(changed)
        self.assertEqual(word_count(trimmed), 451)
        self.assertTrue(trimmed.endswith("end."))

    def test_plain_cut_without_late_period(self):
        text = "Intro sentence. " + "word " * 600

        trimmed, changed = trim_to_word_limit(text, 100)

        self.assertTrue(changed)
        self.assertEqual(word_count(trimmed), 100)
        self.assertTrue(trimmed.endswith("word"))

    def test_keeps_markdown_formatting(self):
        text = "# Title\n\nFirst paragraph here.\n\n## Next\n\nSecond paragraph goes on and on"
        trimmed, _ = trim_to_word_limit(text, 7)
        self.assertEqual(trimmed, "# Title\n\nFirst paragraph here.\n\n## Next")


class TestWorkflowContent(unittest.TestCase):

    def test_trims_to_critical_maximum(self):
        long_post = "# Remote Python Jobs\n\n" + " ".join(["Remote Python teams hire all year."] * 120)
        service = StubGenerationService(default=long_post)
        generator, _ = make_generator(service)

        draft = generator.generate_workflow_content(make_workflow(word_limit=300))

        self.assertTrue(draft.trimmed)
        self.assertEqual(draft.original_word_count, word_count(long_post))
        self.assertLessEqual(draft.word_count, 300)
        self.assertEqual(draft.topic, "Remote Python jobs")

    def test_minimum_is_not_trimmed(self):
        long_post = " ".join(["Remote Python teams hire all year."] * 120)
        generator, _ = make_generator(StubGenerationService(default=long_post))

        draft = generator.generate_workflow_content(make_workflow(word_limit=300, constraint_type="minimum"))

        self.assertFalse(draft.trimmed)
        self.assertIsNone(draft.original_word_count)

    def test_descriptor_maximum_is_not_trimmed(self):
        long_post = " ".join(["Remote Python teams hire all year."] * 120)
        generator, _ = make_generator(StubGenerationService(default=long_post))

        draft = generator.generate_workflow_content(make_workflow(word_limit=300, has_critical_limit=False))

        self.assertFalse(draft.trimmed)


class TestPromptBuilder(unittest.TestCase):

    def setUp(self):
        self.builder = ContentPromptBuilder(SITE_URL)

    def test_length_strategy_buckets(self):
        self.assertIn("bullet points", length_strategy(300))
        self.assertIn("3-4 main points", length_strategy(500))
        self.assertIn("5-6 main points", length_strategy(800))
        self.assertIn("Comprehensive", length_strategy(801))

    def test_workflow_prompt_with_critical_limit(self):
        workflow = make_workflow(
            word_limit=400,
            content_type="guide",
            audience={"level": "beginners"},
            seo_constraints={"primary_keywords": ["python jobs"]},
        )
        prompt = self.builder.build_workflow_prompt(workflow)

        self.assertTrue(prompt.startswith('Create a detailed step-by-step guide about "Remote Python jobs".'))
        self.assertIn("Target: MAXIMUM 400 words", prompt)
        self.assertIn("must NOT exceed 400 words", prompt)
        self.assertIn("3-4 main points", prompt)
        self.assertIn("Define technical terms", prompt)
        self.assertIn("Primary Keywords: python jobs", prompt)
        self.assertIn("FINAL WORD COUNT REMINDER", prompt)

    def test_workflow_prompt_without_limit(self):
        prompt = self.builder.build_workflow_prompt(Workflow(topic="Cloud careers"))

        self.assertNotIn("WORD COUNT CONSTRAINT", prompt)
        self.assertNotIn("FINAL WORD COUNT REMINDER", prompt)
        self.assertNotIn("SEO REQUIREMENTS", prompt)
        self.assertNotIn("Approach:", prompt)
        self.assertIn("EXECUTION INSTRUCTIONS", prompt)

    def test_topic_prompt(self):
        prompt = self.builder.build_topic_prompt("Kubernetes salaries")
        self.assertIn('blog post about: "Kubernetes salaries"', prompt)
        self.assertIn(SITE_URL, prompt)

    def test_improvement_prompt_addresses_suggestions(self):
        report = SEOOptimizer(SITE_URL).optimize_content("Short post about python. python python python.", "python")
        prompt = self.builder.build_improvement_prompt("Short post", report, "python", 85)

        self.assertIn("Expand the content", prompt)
        self.assertIn('Reduce keyword stuffing and make "python" usage more natural', prompt)
        self.assertIn("Improve heading hierarchy", prompt)
        self.assertIn("Target word count: 1400+ words", prompt)
        self.assertIn("SEO score target: 85%+", prompt)


if __name__ == '__main__':
    unittest.main()
