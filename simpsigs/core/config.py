"""Manages configuration for simpsigs.

This module is responsible for loading the application's configuration
settings. It aggregates settings from default values, TOML files, and
environment variables, providing a unified interface for accessing them.
"""

import copy
import os
import sys
from pathlib import Path
from typing import Dict, Any, List, Optional

try:
    import tomllib  # Available in Python 3.11+
except ImportError:
    import tomli as tomllib  # Fallback for Python versions < 3.11

# The default path for the user-specific global configuration file.
USER_CONFIG_PATH = Path.home() / ".config" / "simpsigs" / "config.toml"


class Config:
    """Handles the configuration for the simpsigs application.

    This class loads configuration from multiple sources with a defined
    precedence:
    1.  Default values (lowest precedence).
    2.  Project-specific `simpsigs.toml` file in the working directory.
    3.  User-level `~/.config/simpsigs/config.toml` file.
    4.  A custom configuration file specified at runtime (replaces 2 and 3).
    5.  Environment variables (highest precedence).

    Attributes:
        DEFAULT_CONFIG (Dict[str, Any]): A dictionary containing the default
            configuration values.
    """

    DEFAULT_CONFIG = {
        "trust_anchor_pattern": "simp-gpgkeys*.rpm",
        "key_file_pattern": "RPM-GPG-KEY*",
        "package_pattern": "*.rpm",
        "timeout": 300,  # Per external command, in seconds.
        "disable_validators": [],
        "enable_validators": [],  # If specified, only these validators run.
        "build_hosts": {
            "trusted_patterns": [
                # SIMP build hosts
                r".*\.simp\.dev$",
                r".*\.simp-project\.net$",
                r".*\.simp-project\.com$",
                # EPEL
                r".*\.fedoraproject\.org$",
                # Puppet
                r".*\.puppetlabs\.net$",
                r"\.puppetlabs\.lan$",
                r"^mesos-jenkins-",
                # CentOS
                r".*\.centos\.org$",
                # PostgreSQL
                r"^koji-centos",
            ],
        },
        "identities": {
            "simp_pattern": r".+@simp-project.org",
            "vendor_pattern": r".+@(fedora|centos)",
        },
        "tools": {
            "rpm": "rpm",
            "rpm2cpio": "rpm2cpio",
            "cpio": "cpio",
            "gpg": "gpg2",
        },
    }

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """Initializes the configuration manager.

        Args:
            config_path (Optional[Path]): An optional path to a specific
                configuration file to load. If provided, the default file
                locations are not read.
        """
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)
        self._load_config(config_path)

    def _load_config(self, config_path: Optional[Path] = None) -> None:
        if config_path:
            self._load_file_config(Path(config_path))
        else:
            self._load_default_configs()

        self._load_env_config()

    def _load_default_configs(self) -> None:
        """Loads configs from standard locations if they exist."""
        project_config = Path.cwd() / "simpsigs.toml"
        if project_config.exists():
            self._load_file_config(project_config)

        if USER_CONFIG_PATH.exists():
            self._load_file_config(USER_CONFIG_PATH)

    def _merge_configs(self, base: Dict[str, Any], new: Dict[str, Any]) -> None:
        """Recursively merges a new config dict into a base dict.

        Args:
            base (Dict[str, Any]): The base configuration dictionary.
            new (Dict[str, Any]): The new configuration to merge in.
        """
        for key, value in new.items():
            if isinstance(value, dict) and key in base and isinstance(base[key], dict):
                self._merge_configs(base[key], value)
            else:
                base[key] = value

    def _load_file_config(self, config_path: Path) -> None:
        """Loads and merges configuration from a TOML file.

        Args:
            config_path (Path): The path to the TOML configuration file.
        """
        try:
            with open(config_path, "rb") as f:
                file_config = tomllib.load(f)
                self._merge_configs(self.config, file_config)
        except (OSError, tomllib.TOMLDecodeError) as e:
            print(f"Warning: Could not load config from {config_path}: {e}", file=sys.stderr)

    def _load_env_config(self) -> None:
        """Loads and merges configuration from environment variables."""
        env_mapping = {
            "SIMPSIGS_TRUST_ANCHOR_PATTERN": "trust_anchor_pattern",
            "SIMPSIGS_KEY_FILE_PATTERN": "key_file_pattern",
            "SIMPSIGS_PACKAGE_PATTERN": "package_pattern",
            "SIMPSIGS_TIMEOUT": "timeout",
            "SIMPSIGS_DISABLE_VALIDATORS": "disable_validators",
            "SIMPSIGS_ENABLE_VALIDATORS": "enable_validators",
            "SIMPSIGS_TRUSTED_BUILD_HOSTS": "build_hosts.trusted_patterns",
            "SIMPSIGS_SIMP_IDENTITY_PATTERN": "identities.simp_pattern",
            "SIMPSIGS_VENDOR_IDENTITY_PATTERN": "identities.vendor_pattern",
            "SIMPSIGS_RPM": "tools.rpm",
            "SIMPSIGS_RPM2CPIO": "tools.rpm2cpio",
            "SIMPSIGS_CPIO": "tools.cpio",
            "SIMPSIGS_GPG": "tools.gpg",
        }

        for env_var, config_key in env_mapping.items():
            value = os.getenv(env_var)
            if value is not None:
                self._set_nested_key(config_key, value)

    def _set_nested_key(self, key_path: str, value: str) -> None:
        """Sets a value in the config dict using a dot-separated path.

        Environment variables are always strings, so list and integer
        settings are cast here.

        Args:
            key_path (str): The dot-separated key (e.g., "tools.gpg").
            value (str): The string value from the environment variable.
        """
        keys = key_path.split('.')
        target_config = self.config
        for key in keys[:-1]:
            if key not in target_config or not isinstance(target_config[key], dict):
                target_config[key] = {}
            target_config = target_config[key]

        leaf_key = keys[-1]

        if leaf_key == "timeout":
            try:
                target_config[leaf_key] = int(value)
            except ValueError:
                print(f"Warning: Invalid integer value for {leaf_key}: {value}", file=sys.stderr)
        elif leaf_key in ["disable_validators", "enable_validators", "trusted_patterns"]:
            target_config[leaf_key] = [v.strip() for v in value.split(",") if v.strip()]
        else:
            target_config[leaf_key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Retrieves a configuration value using a dot-separated key.

        Args:
            key (str): The dot-separated key (e.g., "identities.simp_pattern").
            default (Any): The default value to return if the key is not found.

        Returns:
            Any: The configuration value or the default.
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
        """Sets a configuration value in memory.

        Args:
            key (str): The dot-separated key (e.g., "tools.rpm").
            value (Any): The value to set.
        """
        keys = key.split('.')
        target_config = self.config
        for k in keys[:-1]:
            target_config = target_config.setdefault(k, {})
        target_config[keys[-1]] = value

    def is_validator_enabled(self, validator_name: str) -> bool:
        """Checks if a specific validator is enabled.

        - If `enable_validators` is set, the validator is enabled only if
          it's in that list.
        - Otherwise, the validator is enabled unless it's in the
          `disable_validators` list.

        Args:
            validator_name (str): The name of the validator to check.

        Returns:
            bool: True if the validator is enabled, False otherwise.
        """
        enabled_list = self.get("enable_validators", [])
        if enabled_list:
            return validator_name in enabled_list

        disabled_list = self.get("disable_validators", [])
        return validator_name not in disabled_list

    def trusted_build_hosts(self) -> List[str]:
        return list(self.get("build_hosts.trusted_patterns", []))
