"""Prompt templates and builders."""
from .templates import (
    PromptTemplate,
    PromptTemplateRegistry,
    create_default_registry,
    format_variable_value,
)
from .guidance import CategoryGuidance, build_category_guidance
from .builder import TransactionPromptBuilder

__all__ = [
    "PromptTemplate",
    "PromptTemplateRegistry",
    "create_default_registry",
    "format_variable_value",
    "CategoryGuidance",
    "build_category_guidance",
    "TransactionPromptBuilder",
]
