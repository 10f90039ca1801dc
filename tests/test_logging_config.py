"""Test the logging dictConfig."""

from unittest import TestCase

from relaycheck.logging_config import logging_config


class LoggingConfigTest(TestCase):
    def test_console_only(self):
        config = logging_config("DEBUG", None)
        self.assertEqual(config["loggers"]["relaycheck"]["level"], "DEBUG")
        self.assertEqual(config["loggers"]["relaycheck"]["handlers"], ["console"])
        self.assertNotIn("file", config["handlers"])
        self.assertFalse(config["loggers"]["relaycheck"]["propagate"])

    def test_file_handler(self):
        config = logging_config("INFO", "/tmp/relaycheck-test.log")
        self.assertEqual(config["handlers"]["file"]["filename"], "/tmp/relaycheck-test.log")
        self.assertIn("file", config["loggers"]["httpx"]["handlers"])
        self.assertEqual(config["loggers"]["solana"]["level"], "WARNING")
