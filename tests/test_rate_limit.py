"""Tests for rate-limit retries."""
import unittest
from unittest import mock

from statementflow.llm.providers import GroqBackend, LLMProvider
from statementflow.utils.exceptions import (
    InvalidCredentialsError,
    QuotaExceededError,
    RateLimitedError,
)
from statementflow.utils.retry import compute_wait_ms, parse_retry_after, retry_on_rate_limit

from helpers import chat_body, error_body, fake_response

RATE_LIMITED = error_body("Rate limit reached for model. Please try again in 2.5s.")


class TestRetryHint(unittest.TestCase):
    """Test parsing of backend retry hints."""

    def test_seconds(self):
        self.assertEqual(parse_retry_after("Please try again in 2.5s."), 2.5)

    def test_minutes_and_seconds(self):
        self.assertEqual(parse_retry_after("Please try again in 1m2.5s"), 62.5)

    def test_missing_hint(self):
        self.assertIsNone(parse_retry_after("Too many requests"))
        self.assertIsNone(parse_retry_after(""))

    def test_wait_adds_buffer(self):
        self.assertEqual(compute_wait_ms("try again in 2.5s"), 3500)
        self.assertEqual(compute_wait_ms("try again in 3s", buffer_ms=500), 3500)

    def test_wait_defaults_without_hint(self):
        self.assertEqual(compute_wait_ms("Too many requests"), 5000)
        self.assertEqual(compute_wait_ms("Too many requests", default_delay_ms=100), 100)


class TestRetryDecorator(unittest.TestCase):
    """Test the decorator in isolation."""

    @mock.patch("statementflow.utils.retry.time.sleep")
    def test_exhaustion(self, mock_sleep):
        calls = []

        @retry_on_rate_limit(max_attempts=3)
        def call():
            calls.append(1)
            raise RateLimitedError("Please try again in 1s", provider="Groq", status_code=429)

        with self.assertRaises(QuotaExceededError) as ctx:
            call()

        self.assertEqual(len(calls), 3)
        self.assertEqual(mock_sleep.call_count, 2)
        self.assertNotIsInstance(ctx.exception, RateLimitedError)
        self.assertIn("after 3 attempts", ctx.exception.message)
        self.assertEqual(ctx.exception.provider, "Groq")

    def test_rejects_zero_attempts(self):
        with self.assertRaises(ValueError):
            retry_on_rate_limit(max_attempts=0)
        with self.assertRaises(ValueError):
            GroqBackend("gsk-test", max_attempts=0, session=mock.Mock())

    @mock.patch("statementflow.utils.retry.time.sleep")
    def test_single_attempt_never_sleeps(self, mock_sleep):
        @retry_on_rate_limit(max_attempts=1)
        def call():
            raise RateLimitedError("Please try again in 1s", provider="Groq", status_code=429)

        with self.assertRaises(QuotaExceededError) as ctx:
            call()

        self.assertNotIsInstance(ctx.exception, RateLimitedError)
        mock_sleep.assert_not_called()

    def test_uses_injected_logger(self):
        logger = mock.Mock()

        @retry_on_rate_limit(max_attempts=2, logger=logger)
        def call():
            raise RateLimitedError("Too many requests", provider="Groq", status_code=429)

        with mock.patch("statementflow.utils.retry.time.sleep"), self.assertRaises(QuotaExceededError):
            call()

        logger.log.assert_called_once()
        logger.error.assert_called_once()

    @mock.patch("statementflow.utils.retry.time.sleep")
    def test_other_errors_not_retried(self, mock_sleep):
        calls = []

        @retry_on_rate_limit(max_attempts=3)
        def call():
            calls.append(1)
            raise ValueError("boom")

        with self.assertRaises(ValueError):
            call()

        self.assertEqual(len(calls), 1)
        mock_sleep.assert_not_called()


@mock.patch("statementflow.utils.retry.time.sleep")
class TestGroqBackend(unittest.TestCase):
    """Test Groq retries over HTTP."""

    def setUp(self):
        """Set up test fixtures."""
        self.session = mock.Mock()
        self.provider = LLMProvider(GroqBackend("gsk-test", session=self.session))

    def test_gives_up_after_three_attempts(self, mock_sleep):
        self.session.post.return_value = fake_response(429, RATE_LIMITED)

        with self.assertRaises(QuotaExceededError) as ctx:
            self.provider.extract_transactions("text", [])

        self.assertEqual(self.session.post.call_count, 3)
        self.assertEqual(mock_sleep.call_args_list, [mock.call(3.5), mock.call(3.5)])
        self.assertNotIsInstance(ctx.exception, RateLimitedError)
        self.assertTrue(ctx.exception.is_service_error)

    def test_default_wait_without_hint(self, mock_sleep):
        self.session.post.return_value = fake_response(429, error_body("Too many requests"))

        with self.assertRaises(QuotaExceededError):
            self.provider.extract_transactions("text", [])

        self.assertEqual(mock_sleep.call_args_list, [mock.call(5.0), mock.call(5.0)])

    def test_recovers_after_one_rate_limit(self, mock_sleep):
        self.session.post.side_effect = [
            fake_response(429, RATE_LIMITED),
            fake_response(200, chat_body('{"transactions": []}')),
        ]

        result = self.provider.extract_transactions("text", [])

        self.assertEqual(result.transactions, [])
        self.assertEqual(self.session.post.call_count, 2)
        mock_sleep.assert_called_once_with(3.5)

    def test_other_errors_fail_fast(self, mock_sleep):
        self.session.post.return_value = fake_response(401, error_body("Invalid API Key"))

        with self.assertRaises(InvalidCredentialsError):
            self.provider.extract_transactions("text", [])

        self.assertEqual(self.session.post.call_count, 1)
        mock_sleep.assert_not_called()

    def test_default_model_and_endpoint(self, mock_sleep):
        self.session.post.return_value = fake_response(200, chat_body("Hello"))

        self.assertTrue(self.provider.test_connection().success)

        args, kwargs = self.session.post.call_args
        self.assertEqual(args[0], "https://api.groq.com/openai/v1/chat/completions")
        self.assertEqual(kwargs["json"]["model"], "openai/gpt-oss-120b")
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer gsk-test")


if __name__ == "__main__":
    unittest.main()
