"""Development backend for a self-hosted prompt/response endpoint."""
import logging
from typing import Optional

import requests

from .base import Completion, ProviderType
from .rest import RestClient
from ..models import ExtractionUsage
from ...utils.exceptions import UnknownProviderError

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    return len(text) // CHARS_PER_TOKEN


class CustomEndpointBackend:
    """POSTs {"prompt": ...} and reads {"response": ...}; usage is estimated."""

    provider_type = ProviderType.CUSTOM

    def __init__(self, endpoint: str, api_key: Optional[str] = None, timeout: float = 60,
                 session: Optional[requests.Session] = None, display_name: str = "Custom Endpoint",
                 logger: Optional[logging.Logger] = None):
        self.display_name = display_name
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self.client = RestClient(endpoint, provider=display_name, headers=headers,
                                 timeout=timeout, session=session, logger=logger)

    def complete(self, prompt: str, max_tokens: int) -> Completion:
        # The endpoint takes no generation parameters
        data = self.client.post_json({"prompt": prompt})
        text = data.get("response")
        if not isinstance(text, str):
            raise UnknownProviderError(f"No response from {self.display_name}", provider=self.display_name)
        return Completion(
            text=text,
            usage=ExtractionUsage(prompt_tokens=estimate_tokens(prompt), completion_tokens=estimate_tokens(text)),
        )
