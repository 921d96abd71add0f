"""Configuration management."""
from .settings import AppSettings
from .manager import ConfigManager

__all__ = ["AppSettings", "ConfigManager"]
