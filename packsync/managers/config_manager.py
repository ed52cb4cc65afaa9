"""
PackSync - Configuration Manager

Handles loading and saving client or server configuration from/to JSON.
Manages OS credential store integration for the shared password.

Author: PackSync Project
"""

import copy
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Dict, Any, Union

from ..exceptions import PackSyncConfigError

# Configure logging
logger = logging.getLogger(__name__)

# Service name used for OS credential store entries
KEYRING_SERVICE = "PackSync"
KEYRING_ACCOUNT = "modpack"


# Default configuration values
DEFAULT_CLIENT_CONFIG = {
    "remote_server": None,  # e.g. "http://pack.example.com:8080"
    "output_dir": "servermods",
    "excluded_mod_ids": [],
    "security": {"type": "none"},  # Password may live in OS credential store instead
    "log_level": "INFO",
    "log_retention_days": 30
}

DEFAULT_SERVER_CONFIG = {
    "served_dir": "servermods",
    "host": "0.0.0.0",
    "port": 8080,
    "forge_version": None,
    "security": {"type": "none"},
    "log_level": "INFO"
}


def default_config_path(file_name: str) -> Path:
    """
    Location of a config file next to the executable, or in the current
    directory when running from source.

    Args:
        file_name: Config file name (e.g., "packsync-client.json")

    Returns:
        Path to the config file
    """
    if getattr(sys, 'frozen', False):
        # Running as compiled executable
        base_dir = Path(sys.executable).parent
    else:
        # Running as script
        base_dir = Path.cwd()
    return base_dir / file_name


class ConfigManager:
    """
    Manages configuration and credentials.

    Responsibilities:
    - Load/save a JSON config file, creating it from defaults when missing
    - Store/retrieve the shared password from the OS credential store via keyring
    - Provide configuration values to other modules
    """

    def __init__(self, config_file: Union[str, Path], defaults: Dict[str, Any]):
        """
        Initialize configuration manager.

        Args:
            config_file: Path of the JSON config file
            defaults: Default values for missing keys
        """
        self.config_file = Path(config_file)
        self.defaults = defaults
        self.config: Dict[str, Any] = {}

    def load_config(self) -> Dict[str, Any]:
        """
        Load configuration from the config file.
        Creates default config if file doesn't exist.

        Returns:
            Configuration dictionary

        Raises:
            PackSyncConfigError: If the file is not valid JSON
        """
        if self.config_file.exists():
            logger.debug(f"Loading configuration from {self.config_file}")
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    self.config = json.load(f)
            except json.JSONDecodeError as e:
                raise PackSyncConfigError(f"Invalid configuration file {self.config_file}: {e}") from e
            if not isinstance(self.config, dict):
                raise PackSyncConfigError(f"Configuration file {self.config_file} must contain a JSON object")
            # Merge with defaults for any missing keys
            for key, value in self.defaults.items():
                if key not in self.config:
                    self.config[key] = copy.deepcopy(value)
            logger.info("Configuration loaded successfully")
        else:
            logger.info(f"Configuration file not found, creating default at {self.config_file}")
            self.config = copy.deepcopy(self.defaults)
            self.save_config()

        return self.config

    def save_config(self):
        """Save current configuration to the config file."""
        logger.debug(f"Saving configuration to {self.config_file}")
        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(self.config, f, indent=2)
        logger.debug("Configuration saved successfully")

    def get(self, key: str, default=None) -> Any:
        """
        Get configuration value.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value
        """
        return self.config.get(key, default)

    def set(self, key: str, value: Any):
        """
        Set configuration value and save to file.

        Args:
            key: Configuration key
            value: Configuration value
        """
        self.config[key] = value
        self.save_config()

    # ==================== Credentials ====================

    def store_password(self, password: str):
        """
        Store the shared password in the OS credential store.

        Args:
            password: Password to store
        """
        import keyring

        logger.info("Storing password in OS credential store")
        keyring.set_password(KEYRING_SERVICE, KEYRING_ACCOUNT, password)
        logger.debug("Password stored successfully")

    def get_password(self) -> Optional[str]:
        """
        Retrieve the shared password from the OS credential store.

        Returns:
            Password or None if not found or no credential store is available
        """
        import keyring
        from keyring.errors import KeyringError

        logger.debug("Retrieving password from OS credential store")
        try:
            password = keyring.get_password(KEYRING_SERVICE, KEYRING_ACCOUNT)
        except KeyringError as e:
            logger.warning(f"OS credential store unavailable: {e}")
            return None

        if not password:
            logger.warning("No password found in credential store")
            return None
        return password

    def resolve_security_settings(self) -> Dict[str, Any]:
        """
        Return the 'security' section, filling in the password from the OS
        credential store when password security is selected and the file
        does not contain one.

        Returns:
            Copy of the security settings
        """
        settings = dict(self.get("security") or {})
        if str(settings.get("type", "none")).lower() == "password" and not settings.get("password"):
            password = self.get_password()
            if password:
                settings["password"] = password
        return settings
