"""Google Gemini backend using the native Google AI SDK."""
import logging
from typing import Any, Optional

from google import genai
from google.genai import errors, types

from .base import Completion, ProviderType
from .errors import classify_provider_error
from ..models import ExtractionUsage
from ...utils.logger import get_logger

GEMINI_DEFAULT_MODEL = "gemini-2.0-flash"


class GeminiBackend:
    """Generates content through google-genai; every failure is classified, none retried."""

    provider_type = ProviderType.GEMINI

    def __init__(self, api_key: str, model_name: Optional[str] = None, temperature: float = 0.1,
                 client: Optional[Any] = None, display_name: str = "Google Gemini",
                 logger: Optional[logging.Logger] = None):
        """
        Initialize Gemini backend.

        Args:
            api_key: Google AI API key
            model_name: Gemini model, defaults to gemini-2.0-flash
            temperature: Sampling temperature
            client: Preconstructed genai client
            display_name: Name used in error messages
            logger: Optional logger
        """
        self.logger = logger or get_logger("gemini")
        self.client = client or genai.Client(api_key=api_key)
        self.model_name = model_name or GEMINI_DEFAULT_MODEL
        self.temperature = temperature
        self.display_name = display_name

        self.logger.info(f"Gemini backend initialized with {self.model_name}")

    def complete(self, prompt: str, max_tokens: int) -> Completion:
        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=types.GenerateContentConfig(
                    temperature=self.temperature,
                    max_output_tokens=max_tokens,
                ),
            )
        except errors.APIError as e:
            self.logger.error(f"Gemini API error ({e.code}) with model {self.model_name}: {e.message}")
            raise classify_provider_error(self.display_name, e.message or str(e), e.code) from e
        except Exception as e:
            self.logger.error(f"Gemini request failed with model {self.model_name}: {e}")
            raise classify_provider_error(self.display_name, str(e)) from e

        metadata = response.usage_metadata
        usage = ExtractionUsage(
            prompt_tokens=(metadata.prompt_token_count or 0) if metadata else 0,
            completion_tokens=(metadata.candidates_token_count or 0) if metadata else 0,
        )
        return Completion(text=response.text or "", usage=usage)
