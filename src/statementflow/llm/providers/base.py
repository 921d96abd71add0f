"""Provider contract shared by every backend."""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Protocol

from ..categories import CategoryResolver
from ..models import ConnectionTestResult, ExtractionResult, ExtractionUsage, PageContext
from ..normalizer import ResponseNormalizer, extract_json_object
from ...prompts.builder import TransactionPromptBuilder
from ...sanitizer import DataSanitizer
from ...utils.exceptions import ProviderError
from ...utils.logger import get_logger


class ProviderType(str, Enum):
    GEMINI = "gemini"
    OPENAI = "openai"
    AZURE_OPENAI = "azure_openai"
    GROQ = "groq"
    CUSTOM = "custom"


@dataclass(frozen=True)
class Completion:
    """Raw text and usage returned by a backend."""
    text: str
    usage: ExtractionUsage


class CompletionBackend(Protocol):
    """One request in, one completion out."""

    provider_type: ProviderType
    display_name: str

    def complete(self, prompt: str, max_tokens: int) -> Completion:
        ...


class LLMProvider:
    """Runs the extraction flow over any backend."""

    def __init__(
        self,
        backend: CompletionBackend,
        sanitizer: Optional[DataSanitizer] = None,
        prompt_builder: Optional[TransactionPromptBuilder] = None,
        normalizer: Optional[ResponseNormalizer] = None,
        max_tokens: int = 2000,
        test_max_tokens: int = 50,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize provider.

        Args:
            backend: Backend variant that performs the network call
            sanitizer: PII masker applied before anything leaves the process
            prompt_builder: Renders prompts from the template registry
            normalizer: Parses backend text into an ExtractionResult
            max_tokens: Completion token limit for extraction calls
            test_max_tokens: Completion token limit for connection tests
            logger: Optional logger
        """
        self.backend = backend
        self.logger = logger or get_logger("provider")
        self.sanitizer = sanitizer or DataSanitizer(logger=self.logger)
        self.prompt_builder = prompt_builder or TransactionPromptBuilder()
        self.normalizer = normalizer or ResponseNormalizer(logger=self.logger)
        self.max_tokens = max_tokens
        self.test_max_tokens = test_max_tokens

    @property
    def provider_type(self) -> ProviderType:
        return self.backend.provider_type

    @property
    def display_name(self) -> str:
        return self.backend.display_name

    def extract_transactions(
        self,
        page_text: str,
        user_categories: Iterable = (),
        context: Optional[PageContext] = None,
    ) -> ExtractionResult:
        """
        Extract transactions from one page.

        Args:
            page_text: Raw page text
            user_categories: Caller's category labels
            context: Page position and previous balance

        Returns:
            ExtractionResult

        Raises:
            ProviderError: Backend failure
        """
        user_categories = list(user_categories or ())
        sanitization = self.sanitizer.sanitize(page_text)
        page_content = self.prompt_builder.build_page_content(sanitization.sanitized_text, context)
        prompt = self.prompt_builder.build_transaction_extraction_prompt(page_content, user_categories)

        self.logger.debug(
            f"Sending extraction prompt to {self.display_name} "
            f"({len(prompt)} chars, {len(user_categories)} user categories)"
        )
        completion = self.backend.complete(prompt, self.max_tokens)

        return self.normalizer.normalize(
            completion.text,
            usage=completion.usage,
            previous_balance=context.previous_balance if context else None,
            security_breakdown=sanitization.security_breakdown(),
            category_resolver=CategoryResolver(user_categories, logger=self.logger),
        )

    def validate_statement(self, document_text: str) -> Dict[str, Any]:
        """Ask the model for bank name and statement period; empty dict if unparseable."""
        sanitized = self.sanitizer.sanitize(document_text).sanitized_text
        prompt = self.prompt_builder.build_bank_validation_prompt(sanitized)
        completion = self.backend.complete(prompt, self.max_tokens)

        data = extract_json_object(completion.text)
        if data is None:
            self.logger.warning(f"{self.display_name} returned no JSON for statement validation")
            return {}
        return data

    def test_connection(self) -> ConnectionTestResult:
        """Health check; failures are reported, never raised."""
        prompt = self.prompt_builder.build_connection_test_prompt()
        try:
            completion = self.backend.complete(prompt, self.test_max_tokens)
        except ProviderError as e:
            self.logger.warning(f"Connection test failed for {self.display_name}: {e.message}")
            return ConnectionTestResult(success=False, error=e.message)
        except Exception as e:
            self.logger.warning(f"Connection test failed for {self.display_name}: {e}")
            return ConnectionTestResult(success=False, error=f"Connection error: {e}")

        if not completion.text.strip():
            return ConnectionTestResult(success=False, error=f"{self.display_name} returned an empty response")
        return ConnectionTestResult(success=True)


@dataclass
class ProviderConfig:
    """Credentials and addressing for one backend."""
    provider_type: ProviderType
    api_key: Optional[str] = None
    model_name: Optional[str] = None
    endpoint: Optional[str] = None
    resource_name: Optional[str] = None
    deployment_name: Optional[str] = None
    api_version: Optional[str] = None
    display_name: Optional[str] = None
