"""Configuration utilities for Metaimage."""

from .loader import BuildSettings, Config, LoaderSettings, LoggingSettings, load_config

__all__ = ["Config", "LoaderSettings", "BuildSettings", "LoggingSettings", "load_config"]
