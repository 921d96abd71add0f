"""Groq backend: OpenAI-compatible chat completions with rate-limit retries."""
import logging
from typing import Any, Dict, Optional

import requests

from .base import Completion, ProviderType
from .rest import RestClient, chat_payload, parse_chat_completion
from ...utils.retry import retry_on_rate_limit

GROQ_DEFAULT_ENDPOINT = "https://api.groq.com/openai/v1"
GROQ_DEFAULT_MODEL = "openai/gpt-oss-120b"


class GroqBackend:
    """The only backend that retries, and only on HTTP 429."""

    provider_type = ProviderType.GROQ

    def __init__(self, api_key: str, model_name: Optional[str] = None, endpoint: Optional[str] = None,
                 temperature: float = 0.1, timeout: float = 60,
                 max_attempts: int = 3, default_delay_ms: int = 5000, buffer_ms: int = 1000,
                 session: Optional[requests.Session] = None, display_name: str = "Groq",
                 logger: Optional[logging.Logger] = None):
        self.model_name = model_name or GROQ_DEFAULT_MODEL
        self.temperature = temperature
        self.display_name = display_name
        self.max_attempts = max_attempts
        base_url = (endpoint or GROQ_DEFAULT_ENDPOINT).rstrip("/")
        self.client = RestClient(
            f"{base_url}/chat/completions",
            provider=display_name,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeout,
            session=session,
            logger=logger,
        )
        self._post = retry_on_rate_limit(
            max_attempts=max_attempts,
            default_delay_ms=default_delay_ms,
            buffer_ms=buffer_ms,
            logger=logger,
        )(self._post_once)

    def complete(self, prompt: str, max_tokens: int) -> Completion:
        data = self._post(chat_payload(prompt, max_tokens, self.temperature, self.model_name))
        return parse_chat_completion(data, self.display_name)

    def _post_once(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.post_json(payload)
