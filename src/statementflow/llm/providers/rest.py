"""HTTP plumbing for REST chat-completion backends."""
import logging
from typing import Any, Dict, Optional

import requests

from .base import Completion
from .errors import classify_provider_error
from ..models import ExtractionUsage
from ...utils.exceptions import NetworkUnreachableError, RateLimitedError, UnknownProviderError
from ...utils.logger import get_logger


def error_message(response: requests.Response) -> str:
    """Best-effort error text from a failed response."""
    try:
        data = response.json()
    except ValueError:
        return response.text or response.reason or f"HTTP {response.status_code}"

    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
        if data.get("message"):
            return str(data["message"])
    return response.reason or f"HTTP {response.status_code}"


class RestClient:
    """POSTs JSON to one URL and maps failures onto provider errors."""

    def __init__(
        self,
        url: str,
        provider: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 60,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.url = url
        self.provider = provider
        self.headers = {"Content-Type": "application/json", **(headers or {})}
        self.timeout = timeout
        self.session = session or requests.Session()
        self.logger = logger or get_logger("rest")

    def post_json(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Send one request.

        Raises:
            RateLimitedError: HTTP 429
            ProviderError: Any other failure, classified
        """
        try:
            response = self.session.post(self.url, json=payload, headers=self.headers, timeout=self.timeout)
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            raise NetworkUnreachableError(
                f"Network error. Unable to reach {self.provider}: {e}", provider=self.provider
            ) from e
        except requests.exceptions.RequestException as e:
            raise UnknownProviderError(f"{self.provider} request failed: {e}", provider=self.provider) from e

        if response.status_code == 429:
            raise RateLimitedError(error_message(response), provider=self.provider, status_code=429)
        if not response.ok:
            message = error_message(response)
            self.logger.error(f"{self.provider} returned HTTP {response.status_code}: {message}")
            raise classify_provider_error(self.provider, message, response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise UnknownProviderError(f"{self.provider} returned a non-JSON body", provider=self.provider) from e
        if not isinstance(data, dict):
            raise UnknownProviderError(f"{self.provider} returned an unexpected body", provider=self.provider)
        return data


def chat_payload(prompt: str, max_tokens: int, temperature: float, model: Optional[str] = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "messages": [{"role": "user", "content": prompt}],
        "max_tokens": max_tokens,
        "temperature": temperature,
    }
    if model:
        payload["model"] = model
    return payload


def parse_chat_completion(data: Dict[str, Any], provider: str) -> Completion:
    """Read choices[0].message.content and usage from a chat-completion body."""
    try:
        text = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        text = None
    if not isinstance(text, str):
        raise UnknownProviderError(f"No response from {provider} API", provider=provider)

    usage = data.get("usage") or {}
    return Completion(
        text=text,
        usage=ExtractionUsage(
            prompt_tokens=int(usage.get("prompt_tokens") or 0),
            completion_tokens=int(usage.get("completion_tokens") or 0),
        ),
    )
