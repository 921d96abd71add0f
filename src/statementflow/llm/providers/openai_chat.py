"""OpenAI and Azure OpenAI chat-completion backends."""
import logging
from typing import Optional

import requests

from .base import Completion, ProviderType
from .rest import RestClient, chat_payload, parse_chat_completion

OPENAI_DEFAULT_ENDPOINT = "https://api.openai.com/v1"
AZURE_DEFAULT_API_VERSION = "2024-02-15-preview"


class OpenAIBackend:
    """Chat completions with bearer authentication against a configurable base URL."""

    provider_type = ProviderType.OPENAI

    def __init__(self, api_key: str, model_name: str, endpoint: Optional[str] = None,
                 temperature: float = 0.1, timeout: float = 60,
                 session: Optional[requests.Session] = None, display_name: str = "OpenAI",
                 logger: Optional[logging.Logger] = None):
        self.model_name = model_name
        self.temperature = temperature
        self.display_name = display_name
        base_url = (endpoint or OPENAI_DEFAULT_ENDPOINT).rstrip("/")
        self.client = RestClient(
            f"{base_url}/chat/completions",
            provider=display_name,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeout,
            session=session,
            logger=logger,
        )

    def complete(self, prompt: str, max_tokens: int) -> Completion:
        data = self.client.post_json(chat_payload(prompt, max_tokens, self.temperature, self.model_name))
        return parse_chat_completion(data, self.display_name)


class AzureOpenAIBackend:
    """Chat completions against an Azure deployment, authenticated by api-key header."""

    provider_type = ProviderType.AZURE_OPENAI

    def __init__(self, api_key: str, resource_name: str, deployment_name: str,
                 api_version: str = AZURE_DEFAULT_API_VERSION, temperature: float = 0.1,
                 timeout: float = 60, session: Optional[requests.Session] = None,
                 display_name: str = "Azure OpenAI", logger: Optional[logging.Logger] = None):
        self.deployment_name = deployment_name
        self.temperature = temperature
        self.display_name = display_name
        self.client = RestClient(
            azure_chat_url(resource_name, deployment_name, api_version),
            provider=display_name,
            headers={"api-key": api_key},
            timeout=timeout,
            session=session,
            logger=logger,
        )

    def complete(self, prompt: str, max_tokens: int) -> Completion:
        # The deployment fixes the model
        data = self.client.post_json(chat_payload(prompt, max_tokens, self.temperature))
        return parse_chat_completion(data, self.display_name)


def azure_chat_url(resource_name: str, deployment_name: str, api_version: str) -> str:
    return (
        f"https://{resource_name}.openai.azure.com/openai/deployments/"
        f"{deployment_name}/chat/completions?api-version={api_version}"
    )
