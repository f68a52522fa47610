"""
Tests for the pure text metric functions.
"""

import unittest

from bloggen import text_metrics


class TestWordCount(unittest.TestCase):

    def test_empty_text(self):
        self.assertEqual(text_metrics.word_count(""), 0)
        self.assertEqual(text_metrics.word_count("   \n\t "), 0)

    def test_splits_on_any_whitespace(self):
        self.assertEqual(text_metrics.word_count("  one  two\nthree\tfour "), 4)


class TestKeywordOccurrences(unittest.TestCase):

    def test_substring_match_counts_compound_words(self):
        text = "Developers love developer tools. Nobody else does."
        self.assertEqual(text_metrics.count_keyword_occurrences(text, "developer"), 2)

    def test_case_insensitive(self):
        self.assertEqual(text_metrics.count_keyword_occurrences("PYTHON python Python", "Python"), 3)

    def test_multi_word_keyword_uses_token_windows(self):
        text = "Python developer jobs for python developers are everywhere"
        self.assertEqual(text_metrics.count_keyword_occurrences(text, "Python developer"), 2)

    def test_empty_keyword(self):
        self.assertEqual(text_metrics.count_keyword_occurrences("some text", ""), 0)
        self.assertEqual(text_metrics.count_keyword_occurrences("some text", "   "), 0)

    def test_density(self):
        self.assertEqual(text_metrics.keyword_density("a b c d", "a"), 25.0)
        self.assertEqual(text_metrics.keyword_density("", "a"), 0.0)


class TestHeadingCounts(unittest.TestCase):

    def test_requires_space_after_hashes(self):
        counts = text_metrics.heading_counts("#Title\n##Section")
        self.assertEqual(counts["total"], 0)
        self.assertFalse(counts["proper_structure"])

    def test_proper_structure(self):
        text = "# Title\n\n## One\ntext\n## Two\ntext\n## Three\n### Detail"
        counts = text_metrics.heading_counts(text)
        self.assertEqual(counts["h1"], 1)
        self.assertEqual(counts["h2"], 3)
        self.assertEqual(counts["h3"], 1)
        self.assertEqual(counts["total"], 5)
        self.assertTrue(counts["proper_structure"])

    def test_indented_headings_count(self):
        counts = text_metrics.heading_counts("   # Title\n  ## Section")
        self.assertEqual(counts["h1"], 1)
        self.assertEqual(counts["h2"], 1)

    def test_ratio_uses_at_least_one_block(self):
        counts = text_metrics.heading_counts("# Title\n## A\n## B\n### C")
        self.assertEqual(counts["ratio"], 4.0)

    def test_two_h1_is_not_proper(self):
        counts = text_metrics.heading_counts("# One\n# Two\n## A\n## B")
        self.assertFalse(counts["proper_structure"])


class TestReadability(unittest.TestCase):

    def test_short_simple_sentences(self):
        result = text_metrics.readability("Short words here. More words now.")
        self.assertEqual(result["sentences"], 2)
        self.assertEqual(result["avg_words_per_sentence"], 3.0)
        self.assertEqual(result["complex_words_percentage"], 0.0)
        self.assertEqual(result["readability_score"], 97)
        self.assertEqual(result["grade"], "Excellent")

    def test_score_never_negative(self):
        sentence = " ".join(["extraordinarily"] * 200) + "."
        result = text_metrics.readability(sentence)
        self.assertEqual(result["readability_score"], 0)
        self.assertEqual(result["grade"], "Very Difficult")

    def test_grade_thresholds(self):
        self.assertEqual(text_metrics.readability_grade(80), "Excellent")
        self.assertEqual(text_metrics.readability_grade(79.9), "Good")
        self.assertEqual(text_metrics.readability_grade(60), "Fair")
        self.assertEqual(text_metrics.readability_grade(50), "Difficult")
        self.assertEqual(text_metrics.readability_grade(49), "Very Difficult")


class TestHelpers(unittest.TestCase):

    def test_round_half_up(self):
        self.assertEqual(text_metrics.round_half_up(0.5), 1.0)
        self.assertEqual(text_metrics.round_half_up(2.5), 3.0)
        self.assertEqual(text_metrics.round_half_up(2.25, 1), 2.3)

    def test_internal_link_count(self):
        text = "See https://example.com and HTTPS://EXAMPLE.COM for more."
        self.assertEqual(text_metrics.internal_link_count(text, "https://example.com"), 1)
        self.assertEqual(text_metrics.internal_link_count(text, "https://example.com", ignore_case=True), 2)
        self.assertEqual(text_metrics.internal_link_count(text, ""), 0)

    def test_internal_links_optimal(self):
        self.assertFalse(text_metrics.internal_links_optimal(0))
        self.assertTrue(text_metrics.internal_links_optimal(1))
        self.assertTrue(text_metrics.internal_links_optimal(3))
        self.assertFalse(text_metrics.internal_links_optimal(4))

    def test_content_structure(self):
        text = "Para one.\n\n- item\n- item2\n\nPara two here."
        structure = text_metrics.content_structure(text)
        self.assertEqual(structure["paragraphs"], 3)
        self.assertEqual(structure["lists"], 2)
        self.assertEqual(structure["avg_paragraph_length"], 3.0)

    def test_extract_title(self):
        self.assertEqual(text_metrics.extract_title("intro\n# Hello World \n## Sub"), "Hello World")
        self.assertIsNone(text_metrics.extract_title("#NoSpace\n## Only H2"))

    def test_slugify(self):
        self.assertEqual(text_metrics.slugify("Remote Python Jobs: 2025!"), "remote-python-jobs-2025")
        self.assertEqual(text_metrics.slugify("Remote Python Jobs", max_length=6), "remote")


if __name__ == '__main__':
    unittest.main()
