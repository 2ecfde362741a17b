"""
Server Module

Configuration, logging setup and the application factory.
"""

from .config import Config, ConfigError, load_config
from .main import create_app

__all__ = ["Config", "ConfigError", "load_config", "create_app"]
