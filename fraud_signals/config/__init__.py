"""
Configuration for the fraud signal service.
"""

from .config_loader import ConfigLoader, load_config

__all__ = ["ConfigLoader", "load_config"]
