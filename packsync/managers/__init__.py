"""
PackSync - Managers Package

Contains the configuration manager shared by client and server.

Author: PackSync Project
"""

from .config_manager import ConfigManager, DEFAULT_CLIENT_CONFIG, DEFAULT_SERVER_CONFIG, default_config_path

__all__ = [
    'ConfigManager',
    'DEFAULT_CLIENT_CONFIG',
    'DEFAULT_SERVER_CONFIG',
    'default_config_path'
]
