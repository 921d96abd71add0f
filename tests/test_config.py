"""Tests for settings and the configuration manager."""
import shutil
import tempfile
import unittest
from pathlib import Path

from statementflow.config import AppSettings, ConfigManager
from statementflow.llm.providers import ProviderConfig, ProviderType
from statementflow.sanitizer import PIIKind
from statementflow.utils.exceptions import ConfigError

CONFIG_YAML = """
logging:
  level: "DEBUG"
sanitization:
  emails: false
  names: true
  masking_character: "#"
extraction:
  default_currency: "usd"
  min_balance_confidence: 60
rate_limit:
  max_attempts: 4
provider:
  type: "groq"
  api_key: "gsk-file"
  model_name: "llama-3.3-70b-versatile"
"""


class TestAppSettings(unittest.TestCase):
    """Test YAML loading and environment overrides."""

    def setUp(self):
        """Set up test fixtures."""
        self.test_dir = Path(tempfile.mkdtemp())
        self.config_file = self.test_dir / "config.yaml"
        self.config_file.write_text(CONFIG_YAML, encoding="utf-8")

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_load_from_file(self):
        settings = AppSettings.load(self.config_file, environ={})

        self.assertEqual(settings.log_level, "DEBUG")
        self.assertEqual(settings.default_currency, "usd")
        self.assertEqual(settings.min_balance_confidence, 60)
        self.assertEqual(settings.rate_limit_max_attempts, 4)
        self.assertEqual(settings.rate_limit_buffer_ms, 1000)
        self.assertEqual(settings.provider_type, "groq")
        self.assertEqual(settings.provider_api_key, "gsk-file")

    def test_sanitization_section(self):
        settings = AppSettings.load(self.config_file, environ={})

        self.assertFalse(settings.sanitization.is_enabled(PIIKind.EMAIL))
        self.assertTrue(settings.sanitization.is_enabled(PIIKind.NAME))
        self.assertTrue(settings.sanitization.is_enabled(PIIKind.ACCOUNT_NUMBER))
        self.assertEqual(settings.sanitization.masking_character, "#")

    def test_config_path_from_environment(self):
        settings = AppSettings.load(environ={"STATEMENTFLOW_CONFIG": str(self.config_file)})

        self.assertEqual(settings.provider_type, "groq")

    def test_missing_explicit_file(self):
        with self.assertRaises(FileNotFoundError):
            AppSettings.load(self.test_dir / "missing.yaml", environ={})

    def test_environment_overrides(self):
        environ = {
            "STATEMENTFLOW_LLM_PROVIDER": "openai",
            "STATEMENTFLOW_LLM_API_KEY": "sk-env",
            "STATEMENTFLOW_LOG_LEVEL": "warning",
            "STATEMENTFLOW_SANITIZE_EMAILS": "true",
            "STATEMENTFLOW_SANITIZE_NAMES": "false",
            "STATEMENTFLOW_USE_CUSTOM_LLM_ENDPOINT": "true",
            "STATEMENTFLOW_CUSTOM_LLM_ENDPOINT": "http://localhost:9000",
        }

        settings = AppSettings.load(self.config_file, environ=environ)

        self.assertEqual(settings.provider_type, "openai")
        self.assertEqual(settings.provider_api_key, "sk-env")
        self.assertEqual(settings.provider_model_name, "llama-3.3-70b-versatile")
        self.assertEqual(settings.log_level, "WARNING")
        self.assertTrue(settings.sanitization.is_enabled(PIIKind.EMAIL))
        self.assertFalse(settings.sanitization.is_enabled(PIIKind.NAME))
        self.assertTrue(settings.use_custom_endpoint)
        self.assertEqual(settings.custom_endpoint_url, "http://localhost:9000")

    def test_rejects_non_positive_attempts(self):
        with self.assertRaises(ConfigError):
            AppSettings.from_dict({"rate_limit": {"max_attempts": 0}})
        with self.assertRaises(ConfigError):
            AppSettings(rate_limit_max_attempts=-1)
        with self.assertRaises(ConfigError):
            AppSettings(rate_limit_buffer_ms=-5)

    def test_zero_attempts_in_file(self):
        self.config_file.write_text("rate_limit:\n  max_attempts: 0\n", encoding="utf-8")

        with self.assertRaises(ConfigError):
            AppSettings.load(self.config_file, environ={})

    def test_defaults_from_empty_mapping(self):
        settings = AppSettings.from_dict({})

        self.assertEqual(settings.max_tokens, 2000)
        self.assertEqual(settings.test_max_tokens, 50)
        self.assertEqual(settings.rate_limit_max_attempts, 3)
        self.assertEqual(settings.rate_limit_default_delay_ms, 5000)
        self.assertFalse(settings.sanitization.is_enabled(PIIKind.NAME))


class TestConfigManager(unittest.TestCase):
    """Test provider resolution."""

    def test_configured_provider(self):
        settings = AppSettings(provider_type=" Azure_OpenAI ", provider_api_key="k",
                               azure_resource_name="res", azure_deployment_name="dep")

        config = ConfigManager(settings).load_provider_config()

        self.assertEqual(config.provider_type, ProviderType.AZURE_OPENAI)
        self.assertEqual(config.resource_name, "res")
        self.assertEqual(config.deployment_name, "dep")

    def test_custom_endpoint_takes_priority(self):
        settings = AppSettings(provider_type="gemini", provider_api_key="k", use_custom_endpoint=True,
                               custom_endpoint_url="http://localhost:9000", custom_endpoint_api_key="dev")

        config = ConfigManager(settings).load_provider_config()

        self.assertEqual(config.provider_type, ProviderType.CUSTOM)
        self.assertEqual(config.endpoint, "http://localhost:9000")
        self.assertEqual(config.api_key, "dev")

    def test_custom_endpoint_without_url_falls_back(self):
        settings = AppSettings(provider_type="groq", provider_api_key="k", use_custom_endpoint=True)

        config = ConfigManager(settings).load_provider_config()

        self.assertEqual(config.provider_type, ProviderType.GROQ)

    def test_nothing_configured(self):
        with self.assertRaises(ConfigError):
            ConfigManager(AppSettings()).load_provider_config()

    def test_unsupported_provider(self):
        with self.assertRaises(ConfigError):
            ConfigManager(AppSettings(provider_type="llama")).load_provider_config()

    def test_validate_config(self):
        manager = ConfigManager(AppSettings())

        valid, message = manager.validate_config(ProviderConfig(ProviderType.GEMINI, api_key="k"))
        self.assertTrue(valid)
        self.assertEqual(message, "Configuration is valid")

        valid, message = manager.validate_config(ProviderConfig(ProviderType.GEMINI))
        self.assertFalse(valid)
        self.assertIn("API key", message)

        valid, _ = manager.validate_config(ProviderConfig(ProviderType.AZURE_OPENAI, api_key="k"))
        self.assertFalse(valid)

        valid, _ = manager.validate_config(ProviderConfig(ProviderType.OPENAI, api_key="k", model_name="gpt-4o"))
        self.assertTrue(valid)


if __name__ == "__main__":
    unittest.main()
