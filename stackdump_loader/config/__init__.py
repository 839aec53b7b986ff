"""Configuration management components."""

from .config_manager import ConfigManager, ConfigPaths, DatabaseConfig, ProcessingParameters
from .processing_defaults import ProcessingDefaults

__all__ = ['ConfigManager', 'ConfigPaths', 'DatabaseConfig', 'ProcessingParameters', 'ProcessingDefaults']
