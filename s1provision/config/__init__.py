"""Configuration module for s1provision."""
from .settings import AppConfig, load_settings

__all__ = ["AppConfig", "load_settings"]
