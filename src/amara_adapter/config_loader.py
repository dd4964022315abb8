"""
ConfigLoader module for loading and validating TOML configuration files
"""

import os
import tomllib
from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

from amara_adapter.errors import ConfigurationError, EnvironmentVariableError


DEFAULT_LIMIT = 100
DEFAULT_MAX_RETRIES = 10
DEFAULT_BACKOFF_SECONDS = 30.0
DEFAULT_TIMEOUT_SECONDS = 60.0


@dataclass
class AdapterConfig:
    """Configuration data class for the Amara adapter from TOML file"""
    host: str
    user: str
    api_key_env: str
    api_version: str = ''
    limit: int = DEFAULT_LIMIT
    max_retries: int = DEFAULT_MAX_RETRIES
    backoff_seconds: float = DEFAULT_BACKOFF_SECONDS
    raise_on_exhausted: bool = False
    verify_tls: bool = True
    timeout_seconds: Optional[float] = DEFAULT_TIMEOUT_SECONDS
    deadline_seconds: Optional[float] = None
    cookies: List[str] = field(default_factory=list)
    logging: Dict[str, Any] = field(default_factory=dict)


class ConfigLoader:
    """Loads and validates TOML configuration files"""

    # Required configuration sections and their mandatory keys
    REQUIRED_SECTIONS = {
        'api': ['host', 'user'],
        'authentication': ['api_key_env'],
    }

    @staticmethod
    def load_toml_config(config_path: Path) -> AdapterConfig:
        """
        Load adapter configuration from TOML file

        Args:
            config_path: Path to the TOML configuration file

        Returns:
            AdapterConfig object with all configuration data

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigurationError: If required configuration is missing or TOML is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'rb') as f:
                config_data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML syntax in {config_path}: {e}") from e

        ConfigLoader._validate_required_sections(config_data)

        api = config_data['api']
        pagination = config_data.get('pagination', {})
        retries = config_data.get('retries', {})
        http = config_data.get('http', {})

        limit = pagination.get('limit', DEFAULT_LIMIT)
        if not isinstance(limit, int) or limit <= 0:
            raise ConfigurationError(f"[pagination] limit must be a positive integer, got {limit!r}")

        max_retries = retries.get('max_retries', DEFAULT_MAX_RETRIES)
        if not isinstance(max_retries, int) or max_retries < 0:
            raise ConfigurationError(f"[retries] max_retries must be a non-negative integer, got {max_retries!r}")

        return AdapterConfig(
            host=api['host'],
            user=api['user'],
            api_key_env=config_data['authentication']['api_key_env'],
            api_version=api.get('api_version', ''),
            limit=limit,
            max_retries=max_retries,
            backoff_seconds=float(retries.get('backoff_seconds', DEFAULT_BACKOFF_SECONDS)),
            raise_on_exhausted=bool(retries.get('raise_on_exhausted', False)),
            verify_tls=bool(http.get('verify_tls', True)),
            timeout_seconds=http.get('timeout_seconds', DEFAULT_TIMEOUT_SECONDS),
            deadline_seconds=http.get('deadline_seconds'),
            cookies=list(http.get('cookies', [])),
            logging=config_data.get('logging', {})
        )

    @staticmethod
    def _validate_required_sections(config_data: Dict[str, Any]) -> None:
        """
        Validate that all required configuration sections and keys are present

        Raises:
            ConfigurationError: If any required section or key is missing
        """
        missing_items = []

        for section_name, required_keys in ConfigLoader.REQUIRED_SECTIONS.items():
            if section_name not in config_data:
                missing_items.append(f"Section [{section_name}]")
            else:
                section_data = config_data[section_name]
                for key in required_keys:
                    if key not in section_data:
                        missing_items.append(f"Key '{key}' in section [{section_name}]")

        if missing_items:
            raise ConfigurationError(
                f"Missing required configuration items: {', '.join(missing_items)}"
            )

    @staticmethod
    def validate_environment_variables(config: AdapterConfig) -> bool:
        """
        Validate that the API key environment variable is set

        Raises:
            EnvironmentVariableError: If the variable is missing
        """
        if not os.getenv(config.api_key_env):
            raise EnvironmentVariableError(
                f"Missing required environment variables: {config.api_key_env}"
            )
        return True

    @staticmethod
    def get_environment_value(env_var_name: str) -> str:
        """
        Get environment variable value with proper error handling

        Raises:
            EnvironmentVariableError: If environment variable is not set
        """
        value = os.getenv(env_var_name)
        if value is None:
            raise EnvironmentVariableError(f"Environment variable '{env_var_name}' is not set")
        return value
