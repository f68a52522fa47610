import unittest

import httpx

from bloggen.errors import ErrorKind, GenerationError, classify_error, extract_http_status_code


class TestClassifyError(unittest.TestCase):

    def test_message_patterns(self):
        self.assertEqual(classify_error(Exception("400 API_KEY_INVALID")), ErrorKind.INVALID_CREDENTIAL)
        self.assertEqual(classify_error(Exception("429 RESOURCE_EXHAUSTED")), ErrorKind.QUOTA_EXCEEDED)
        self.assertEqual(classify_error(Exception("Rate limit reached")), ErrorKind.RATE_LIMITED)
        self.assertEqual(classify_error(Exception("models/foo is not found")), ErrorKind.MODEL_UNAVAILABLE)
        self.assertEqual(classify_error(Exception("something odd")), ErrorKind.OTHER)

    def test_status_code_fallback(self):
        request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
        error = httpx.HTTPStatusError("boom", request=request, response=httpx.Response(401, request=request))
        self.assertEqual(classify_error(error), ErrorKind.INVALID_CREDENTIAL)
        self.assertEqual(classify_error(Exception("{'code': 429}")), ErrorKind.RATE_LIMITED)

    def test_generation_error_keeps_kind(self):
        error = GenerationError("boom", ErrorKind.QUOTA_EXCEEDED, "gemini-2.5-flash")
        self.assertEqual(classify_error(error), ErrorKind.QUOTA_EXCEEDED)
        self.assertIn("GEMINI_API_KEY", error.remedy)
        self.assertIn("quota-exceeded", repr(error))


class TestExtractStatusCode(unittest.TestCase):

    def test_sources(self):
        self.assertEqual(extract_http_status_code(Exception("503 UNAVAILABLE")), 503)
        self.assertEqual(extract_http_status_code(Exception("{'code': 404, 'message': 'x'}")), 404)
        self.assertIsNone(extract_http_status_code(Exception("no code here")))


if __name__ == '__main__':
    unittest.main()
