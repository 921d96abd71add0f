"""Application settings loader from YAML configuration."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from ..sanitizer import SanitizationConfig
from ..utils.exceptions import ConfigError

CONFIG_ENV_VAR = "STATEMENTFLOW_CONFIG"
DEFAULT_CONFIG_FILE = "config.yaml"

_SANITIZATION_KEYS = {
    "account_numbers": "account_number",
    "card_numbers": "card_number",
    "mobile_numbers": "mobile_number",
    "emails": "email",
    "pan_ids": "pan_id",
    "customer_ids": "customer_id",
    "ifsc_codes": "ifsc_code",
    "addresses": "address",
    "names": "name",
}


def _env_flag(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class AppSettings:
    """Application-wide settings loaded from config.yaml."""

    # App info
    app_name: str = "StatementFlow"
    app_version: str = "1.0.0"

    # Logging
    log_enabled: bool = True
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_max_file_size_mb: int = 10
    log_backup_count: int = 5

    # Sanitization
    sanitization: SanitizationConfig = field(default_factory=SanitizationConfig)

    # Extraction
    default_currency: str = "INR"
    min_balance_confidence: int = 40
    max_tokens: int = 2000
    test_max_tokens: int = 50
    temperature: float = 0.1
    request_timeout_seconds: float = 60

    # Rate limit
    rate_limit_max_attempts: int = 3
    rate_limit_default_delay_ms: int = 5000
    rate_limit_buffer_ms: int = 1000

    # Provider
    provider_type: Optional[str] = None
    provider_api_key: Optional[str] = None
    provider_model_name: Optional[str] = None
    provider_endpoint: Optional[str] = None
    azure_resource_name: Optional[str] = None
    azure_deployment_name: Optional[str] = None
    azure_api_version: Optional[str] = None

    # Custom endpoint
    use_custom_endpoint: bool = False
    custom_endpoint_url: Optional[str] = None
    custom_endpoint_api_key: Optional[str] = None

    def __post_init__(self):
        if self.rate_limit_max_attempts < 1:
            raise ConfigError(
                f"rate_limit.max_attempts must be at least 1, got {self.rate_limit_max_attempts}"
            )
        if self.rate_limit_default_delay_ms < 0 or self.rate_limit_buffer_ms < 0:
            raise ConfigError("rate_limit delays must not be negative")

    @classmethod
    def load(cls, config_path: Optional[Path] = None,
             environ: Optional[Mapping[str, str]] = None) -> "AppSettings":
        """
        Load settings from YAML, then apply environment overrides.

        Args:
            config_path: Explicit file; falls back to $STATEMENTFLOW_CONFIG, then ./config.yaml
            environ: Environment mapping, defaults to os.environ

        Returns:
            AppSettings

        Raises:
            FileNotFoundError: An explicitly requested file does not exist
        """
        environ = os.environ if environ is None else environ
        if config_path is None and environ.get(CONFIG_ENV_VAR):
            config_path = Path(environ[CONFIG_ENV_VAR])

        if config_path is not None:
            config_path = Path(config_path)
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
        else:
            default_path = Path.cwd() / DEFAULT_CONFIG_FILE
            config_path = default_path if default_path.exists() else None

        config: Dict[str, Any] = {}
        if config_path is not None:
            with open(config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f) or {}

        settings = cls.from_dict(config)
        settings.apply_env(environ)
        return settings

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> "AppSettings":
        """Build settings from an already-parsed YAML mapping."""
        app = config.get("app") or {}
        logging_cfg = config.get("logging") or {}
        sanitization = config.get("sanitization") or {}
        extraction = config.get("extraction") or {}
        rate_limit = config.get("rate_limit") or {}
        provider = config.get("provider") or {}
        custom = config.get("custom_endpoint") or {}
        defaults = cls()

        sanitization_values = {
            attr: bool(sanitization[key]) for key, attr in _SANITIZATION_KEYS.items() if key in sanitization
        }
        if "masking_character" in sanitization:
            sanitization_values["masking_character"] = str(sanitization["masking_character"])
        if "preserve_format" in sanitization:
            sanitization_values["preserve_format"] = bool(sanitization["preserve_format"])
        if "logging" in sanitization:
            sanitization_values["enable_logging"] = bool(sanitization["logging"])

        return cls(
            app_name=app.get("name", defaults.app_name),
            app_version=str(app.get("version", defaults.app_version)),
            log_enabled=bool(logging_cfg.get("enabled", defaults.log_enabled)),
            log_level=logging_cfg.get("level", defaults.log_level),
            log_file=logging_cfg.get("file"),
            log_max_file_size_mb=int(logging_cfg.get("max_file_size_mb", defaults.log_max_file_size_mb)),
            log_backup_count=int(logging_cfg.get("backup_count", defaults.log_backup_count)),
            sanitization=SanitizationConfig(**sanitization_values),
            default_currency=extraction.get("default_currency", defaults.default_currency),
            min_balance_confidence=int(extraction.get("min_balance_confidence", defaults.min_balance_confidence)),
            max_tokens=int(extraction.get("max_tokens", defaults.max_tokens)),
            test_max_tokens=int(extraction.get("test_max_tokens", defaults.test_max_tokens)),
            temperature=float(extraction.get("temperature", defaults.temperature)),
            request_timeout_seconds=float(
                extraction.get("request_timeout_seconds", defaults.request_timeout_seconds)
            ),
            rate_limit_max_attempts=int(rate_limit.get("max_attempts", defaults.rate_limit_max_attempts)),
            rate_limit_default_delay_ms=int(rate_limit.get("default_delay_ms", defaults.rate_limit_default_delay_ms)),
            rate_limit_buffer_ms=int(rate_limit.get("buffer_ms", defaults.rate_limit_buffer_ms)),
            provider_type=provider.get("type"),
            provider_api_key=provider.get("api_key"),
            provider_model_name=provider.get("model_name"),
            provider_endpoint=provider.get("endpoint"),
            azure_resource_name=provider.get("resource_name"),
            azure_deployment_name=provider.get("deployment_name"),
            azure_api_version=provider.get("api_version"),
            use_custom_endpoint=bool(custom.get("enabled", defaults.use_custom_endpoint)),
            custom_endpoint_url=custom.get("url"),
            custom_endpoint_api_key=custom.get("api_key"),
        )

    def apply_env(self, environ: Mapping[str, str]) -> None:
        """Override settings from STATEMENTFLOW_* variables."""
        self.sanitization = SanitizationConfig.from_env(environ, base=self.sanitization)

        if environ.get("STATEMENTFLOW_LOGGING") is not None:
            self.log_enabled = _env_flag(environ["STATEMENTFLOW_LOGGING"], self.log_enabled)
        if environ.get("STATEMENTFLOW_LOG_LEVEL"):
            self.log_level = environ["STATEMENTFLOW_LOG_LEVEL"].upper()

        overrides = {
            "STATEMENTFLOW_LLM_PROVIDER": "provider_type",
            "STATEMENTFLOW_LLM_API_KEY": "provider_api_key",
            "STATEMENTFLOW_LLM_MODEL": "provider_model_name",
            "STATEMENTFLOW_LLM_ENDPOINT": "provider_endpoint",
            "STATEMENTFLOW_CUSTOM_LLM_ENDPOINT": "custom_endpoint_url",
            "STATEMENTFLOW_CUSTOM_LLM_API_KEY": "custom_endpoint_api_key",
        }
        for variable, attr in overrides.items():
            if environ.get(variable):
                setattr(self, attr, environ[variable])

        if environ.get("STATEMENTFLOW_USE_CUSTOM_LLM_ENDPOINT") is not None:
            self.use_custom_endpoint = _env_flag(
                environ["STATEMENTFLOW_USE_CUSTOM_LLM_ENDPOINT"], self.use_custom_endpoint
            )
