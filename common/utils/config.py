"""
Settings management for the network configuration manager.
Handles reading, writing, and validating settings from JSON files.
"""
import os
import json
import shutil
import logging
from typing import Dict, Any, Optional, List


class ConfigManager:
    """
    Settings manager for the router process
    """
    DEFAULT_CONFIG_PATH = "vpn-router.json"

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the settings manager

        Args:
            config_path: Path to the settings file (None for default)
        """
        self.config_path = config_path or self.DEFAULT_CONFIG_PATH
        self.config = {}
        self.logger = logging.getLogger("router.config")

        # Load existing settings or create default
        self.load()

    def load(self) -> bool:
        """
        Load settings from file

        Returns:
            True if successful, False if the defaults had to be used
        """
        if not os.path.exists(self.config_path):
            self.logger.warning(f"Settings file {self.config_path} not found, creating default")
            self.config = self._create_default_config()
            return self.save()

        try:
            with open(self.config_path, 'r') as f:
                loaded = json.load(f)
        except (OSError, ValueError) as e:
            self.logger.error(f"Failed to load settings: {e}")
            self.config = self._create_default_config()
            return False

        # Start from the defaults so that keys added later are always present
        self.config = self._create_default_config()
        self._recursive_update(self.config, loaded)
        self.logger.info(f"Settings loaded from {self.config_path}")
        return True

    def save(self) -> bool:
        """
        Save settings to file

        Returns:
            True if successful, False otherwise
        """
        try:
            # Create backup if file exists
            if os.path.exists(self.config_path):
                backup_path = f"{self.config_path}.bak"
                shutil.copy2(self.config_path, backup_path)
                self.logger.debug(f"Created backup of settings at {backup_path}")

            with open(self.config_path, 'w') as f:
                json.dump(self.config, f, indent=4)

        except OSError as e:
            self.logger.error(f"Failed to save settings: {e}")
            return False

        self.logger.info(f"Settings saved to {self.config_path}")
        return True

    def _create_default_config(self) -> Dict[str, Any]:
        """
        Create default settings

        Returns:
            Default settings dictionary
        """
        return {
            "version": "1.0.0",
            "router": {
                "interface": "vpn0"
            },
            "dns": {
                "resolv_conf": "/etc/resolv.conf",
                "backup_path": "/etc/resolv.pre-vpn-backup.conf",
                "reconfig_timeout": 1.0
            },
            "monitor": {
                "poll_interval": 1.0
            },
            "logging": {
                "level": "INFO",
                "file": None,
                "console": True
            }
        }

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a setting

        Args:
            key: Setting key (dot notation for nested keys)
            default: Default value if key not found

        Returns:
            Setting value or default
        """
        keys = key.split('.')
        value = self.config

        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """
        Set a setting

        Args:
            key: Setting key (dot notation for nested keys)
            value: Value to set
        """
        keys = key.split('.')
        config = self.config

        # Navigate to the nested dictionary
        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def _recursive_update(self, target: Dict[str, Any], source: Dict[str, Any]) -> None:
        """
        Recursively update nested dictionaries

        Args:
            target: Target dictionary to update
            source: Source dictionary with updates
        """
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._recursive_update(target[key], value)
            else:
                target[key] = value

    def validate(self) -> List[str]:
        """
        Validate the settings

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        interface = self.get('router.interface')
        if not interface or not isinstance(interface, str):
            errors.append("router.interface is required")

        if not self.get('dns.resolv_conf'):
            errors.append("dns.resolv_conf is required")

        timeout = self.get('dns.reconfig_timeout')
        if not isinstance(timeout, (int, float)) or isinstance(timeout, bool) or timeout <= 0:
            errors.append("dns.reconfig_timeout must be a positive number")

        interval = self.get('monitor.poll_interval')
        if not isinstance(interval, (int, float)) or isinstance(interval, bool) or interval <= 0:
            errors.append("monitor.poll_interval must be a positive number")

        level = self.get('logging.level', 'INFO')
        if not isinstance(level, str) or level.upper() not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            errors.append(f"logging.level {level!r} is not a valid level")

        return errors
