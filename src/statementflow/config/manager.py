"""Resolves which LLM provider the pipeline talks to."""
import logging
from typing import Optional, Tuple

from .settings import AppSettings
from ..llm.providers import ProviderConfig, ProviderType, validate_provider_config
from ..utils.exceptions import ConfigError
from ..utils.logger import get_logger


class ConfigManager:
    """Picks the active provider from settings: custom endpoint first, then the configured provider."""

    def __init__(self, settings: Optional[AppSettings] = None, logger: Optional[logging.Logger] = None):
        self.settings = settings or AppSettings.load()
        self.logger = logger or get_logger("config")

    def load_provider_config(self) -> ProviderConfig:
        """
        Resolve the provider configuration.

        Returns:
            ProviderConfig for the custom endpoint when enabled, else the configured provider

        Raises:
            ConfigError: Nothing configured or an unsupported provider type
        """
        settings = self.settings

        if settings.use_custom_endpoint:
            if settings.custom_endpoint_url:
                self.logger.info("Using custom LLM endpoint")
                return ProviderConfig(
                    provider_type=ProviderType.CUSTOM,
                    api_key=settings.custom_endpoint_api_key,
                    endpoint=settings.custom_endpoint_url,
                    display_name="Custom Endpoint",
                )
            self.logger.warning("Custom LLM endpoint enabled but no URL configured, falling back to provider")

        if not settings.provider_type:
            raise ConfigError(
                "No LLM provider configured. Set provider.type in config.yaml "
                "or STATEMENTFLOW_LLM_PROVIDER"
            )

        try:
            provider_type = ProviderType(settings.provider_type.strip().lower())
        except ValueError:
            raise ConfigError(f"Unsupported provider type: {settings.provider_type}")

        return ProviderConfig(
            provider_type=provider_type,
            api_key=settings.provider_api_key,
            model_name=settings.provider_model_name,
            endpoint=settings.provider_endpoint,
            resource_name=settings.azure_resource_name,
            deployment_name=settings.azure_deployment_name,
            api_version=settings.azure_api_version,
        )

    def validate_config(self, config: ProviderConfig) -> Tuple[bool, str]:
        """Validate provider configuration values."""
        return validate_provider_config(config)
