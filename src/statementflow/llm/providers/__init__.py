"""LLM backends behind one provider interface."""
from .base import Completion, CompletionBackend, LLMProvider, ProviderConfig, ProviderType
from .errors import classify_provider_error
from .factory import create_provider, validate_provider_config
from .custom import CustomEndpointBackend
from .gemini import GeminiBackend
from .groq import GroqBackend
from .openai_chat import AzureOpenAIBackend, OpenAIBackend

__all__ = [
    "Completion",
    "CompletionBackend",
    "LLMProvider",
    "ProviderConfig",
    "ProviderType",
    "classify_provider_error",
    "create_provider",
    "validate_provider_config",
    "CustomEndpointBackend",
    "GeminiBackend",
    "GroqBackend",
    "AzureOpenAIBackend",
    "OpenAIBackend",
]
