"""Configuration package for crypto payments."""
from .settings import get_settings, Settings

__all__ = ["Settings", "get_settings"]
