"""Configuration module for the consent service."""
from .settings import ConsentConfig, load_settings

__all__ = ["ConsentConfig", "load_settings"]
