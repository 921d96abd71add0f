"""Builds an LLMProvider for a configured backend."""
import logging
from typing import TYPE_CHECKING, Callable, Dict, Optional, Tuple

import requests

from .base import CompletionBackend, LLMProvider, ProviderConfig, ProviderType
from .custom import CustomEndpointBackend
from .gemini import GeminiBackend
from .groq import GroqBackend
from .openai_chat import AZURE_DEFAULT_API_VERSION, AzureOpenAIBackend, OpenAIBackend
from ..normalizer import ResponseNormalizer
from ...prompts.builder import TransactionPromptBuilder
from ...sanitizer import DataSanitizer
from ...utils.exceptions import ConfigError
from ...utils.logger import get_logger

if TYPE_CHECKING:
    from ...config.settings import AppSettings


def validate_provider_config(config: ProviderConfig) -> Tuple[bool, str]:
    """Check the fields each backend needs."""
    provider_type = config.provider_type
    if provider_type == ProviderType.GEMINI and not config.api_key:
        return False, "API key is required for Gemini provider"
    if provider_type == ProviderType.AZURE_OPENAI and not all(
        (config.api_key, config.resource_name, config.deployment_name)
    ):
        return False, "API key, resource name and deployment name are required for Azure OpenAI provider"
    if provider_type == ProviderType.OPENAI and not (config.api_key and config.model_name):
        return False, "API key and model name are required for OpenAI provider"
    if provider_type == ProviderType.GROQ and not config.api_key:
        return False, "API key is required for Groq provider"
    if provider_type == ProviderType.CUSTOM and not config.endpoint:
        return False, "API endpoint is required for custom provider"
    return True, "Configuration is valid"


def _gemini(config: ProviderConfig, settings: "AppSettings", session, logger) -> CompletionBackend:
    return GeminiBackend(
        api_key=config.api_key,
        model_name=config.model_name,
        temperature=settings.temperature,
        display_name=config.display_name or "Google Gemini",
        logger=logger,
    )


def _openai(config: ProviderConfig, settings: "AppSettings", session, logger) -> CompletionBackend:
    return OpenAIBackend(
        api_key=config.api_key,
        model_name=config.model_name,
        endpoint=config.endpoint,
        temperature=settings.temperature,
        timeout=settings.request_timeout_seconds,
        session=session,
        display_name=config.display_name or "OpenAI",
        logger=logger,
    )


def _azure(config: ProviderConfig, settings: "AppSettings", session, logger) -> CompletionBackend:
    return AzureOpenAIBackend(
        api_key=config.api_key,
        resource_name=config.resource_name,
        deployment_name=config.deployment_name,
        api_version=config.api_version or AZURE_DEFAULT_API_VERSION,
        temperature=settings.temperature,
        timeout=settings.request_timeout_seconds,
        session=session,
        display_name=config.display_name or "Azure OpenAI",
        logger=logger,
    )


def _groq(config: ProviderConfig, settings: "AppSettings", session, logger) -> CompletionBackend:
    return GroqBackend(
        api_key=config.api_key,
        model_name=config.model_name,
        endpoint=config.endpoint,
        temperature=settings.temperature,
        timeout=settings.request_timeout_seconds,
        max_attempts=settings.rate_limit_max_attempts,
        default_delay_ms=settings.rate_limit_default_delay_ms,
        buffer_ms=settings.rate_limit_buffer_ms,
        session=session,
        display_name=config.display_name or "Groq",
        logger=logger,
    )


def _custom(config: ProviderConfig, settings: "AppSettings", session, logger) -> CompletionBackend:
    return CustomEndpointBackend(
        endpoint=config.endpoint,
        api_key=config.api_key,
        timeout=settings.request_timeout_seconds,
        session=session,
        display_name=config.display_name or "Custom Endpoint",
        logger=logger,
    )


BACKEND_BUILDERS: Dict[ProviderType, Callable[..., CompletionBackend]] = {
    ProviderType.GEMINI: _gemini,
    ProviderType.OPENAI: _openai,
    ProviderType.AZURE_OPENAI: _azure,
    ProviderType.GROQ: _groq,
    ProviderType.CUSTOM: _custom,
}


def create_provider(
    config: ProviderConfig,
    settings: Optional["AppSettings"] = None,
    session: Optional[requests.Session] = None,
    logger: Optional[logging.Logger] = None,
) -> LLMProvider:
    """
    Create a provider for the configured backend.

    Args:
        config: Backend selection and credentials
        settings: Extraction and rate-limit settings; defaults when omitted
        session: Shared HTTP session for REST backends
        logger: Optional logger passed to every component

    Returns:
        LLMProvider

    Raises:
        ConfigError: Unsupported provider type or missing fields
    """
    if settings is None:
        from ...config.settings import AppSettings
        settings = AppSettings()

    try:
        provider_type = ProviderType(config.provider_type)
    except ValueError:
        raise ConfigError(f"Unsupported provider type: {config.provider_type}")

    valid, message = validate_provider_config(config)
    if not valid:
        raise ConfigError(message)

    logger = logger or get_logger("provider")
    backend = BACKEND_BUILDERS[provider_type](config, settings, session, logger)
    logger.info(f"Using {backend.display_name} provider")

    return LLMProvider(
        backend,
        sanitizer=DataSanitizer(settings.sanitization, logger=logger),
        prompt_builder=TransactionPromptBuilder(),
        normalizer=ResponseNormalizer(
            default_currency=settings.default_currency,
            min_balance_confidence=settings.min_balance_confidence,
            logger=logger,
        ),
        max_tokens=settings.max_tokens,
        test_max_tokens=settings.test_max_tokens,
        logger=logger,
    )
