import os
import unittest
from unittest.mock import patch

from bloggen.config import DEFAULT_OUTPUT_DIR, DEFAULT_WEBSITE_URL, Settings, load_settings
from bloggen.errors import ConfigurationError


@patch('bloggen.config.load_dotenv')
class TestLoadSettings(unittest.TestCase):

    def test_defaults(self, mock_load_dotenv):
        with patch.dict(os.environ, {}, clear=True):
            settings = load_settings()

        mock_load_dotenv.assert_called_once()
        self.assertIsNone(settings.gemini_api_key)
        self.assertEqual(settings.website_url, DEFAULT_WEBSITE_URL)
        self.assertEqual(settings.output_dir, DEFAULT_OUTPUT_DIR)
        self.assertEqual(settings.log_level, "INFO")

    def test_environment_values(self, mock_load_dotenv):
        env = {
            "GEMINI_API_KEY": "key",
            "WEBSITE_URL": "https://careers.example.com/",
            "DEFAULT_OUTPUT_DIR": "/tmp/posts",
            "LOG_LEVEL": "debug",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = load_settings()

        self.assertEqual(settings.gemini_api_key, "key")
        self.assertEqual(settings.website_url, "https://careers.example.com")
        self.assertEqual(settings.output_dir, "/tmp/posts")
        self.assertEqual(settings.log_level, "DEBUG")

    def test_empty_key_is_missing(self, mock_load_dotenv):
        with patch.dict(os.environ, {"GEMINI_API_KEY": ""}, clear=True):
            self.assertIsNone(load_settings().gemini_api_key)


class TestRequireApiKey(unittest.TestCase):

    def test_missing_key(self):
        with self.assertRaises(ConfigurationError):
            Settings().require_api_key()

    def test_openrouter_key_is_enough(self):
        self.assertEqual(Settings(openrouter_api_key="or").require_api_key(), "or")
        self.assertEqual(Settings(gemini_api_key="g", openrouter_api_key="or").require_api_key(), "g")


if __name__ == '__main__':
    unittest.main()
