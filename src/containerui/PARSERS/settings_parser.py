"""
Loading of client settings from a YAML file, .env files and the environment.
"""
import os
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import dotenv_values
from pydantic import ValidationError

from ..exceptions import ConfigurationError
from ..MODELS.settings import ClientSettings

ENV_PREFIX = "CONTAINERUI_"
CONFIG_ENV_VAR = "CONTAINERUI_CONFIG"
ENV_FIELDS = {
    "BINARY": "binary",
    "POLL_INTERVAL": "poll_interval",
    "COMMAND_TIMEOUT": "command_timeout",
    "MAX_WORKERS": "max_workers",
    "LOG_LEVEL": "log_level",
}


class SettingsParser:
    """
    Builds ClientSettings from layered sources.
    Later sources override earlier ones: defaults, YAML file, .env file,
    process environment, explicit overrides.
    """
    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        """
        Initializes the parser.

        :param environ: Environment to read; defaults to the process environment.
        """
        self.environ = dict(os.environ) if environ is None else dict(environ)

    def load(self,
             config_path: Optional[str] = None,
             env_file: Optional[str] = ".env",
             overrides: Optional[Dict[str, Any]] = None) -> ClientSettings:
        """
        Loads settings from all sources.

        :param config_path: YAML file; falls back to $CONTAINERUI_CONFIG when unset.
        :param env_file: .env file consulted when it exists.
        :param overrides: Values that win over every other source; None entries are ignored.
        :return: Validated settings.
        """
        values: Dict[str, Any] = {}

        path = config_path or self.environ.get(CONFIG_ENV_VAR)
        if path:
            values.update(self.parse_file(path))

        if env_file and os.path.exists(env_file):
            values.update(self._from_env({k: v for k, v in dotenv_values(env_file).items() if v is not None}))
        values.update(self._from_env(self.environ))

        if overrides:
            values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return ClientSettings(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid settings: {e}") from e

    def parse_file(self, config_path: str) -> Dict[str, Any]:
        """
        Reads a YAML settings file.

        :param config_path: Path to the file.
        :return: Raw setting values.
        """
        try:
            with open(config_path, 'r') as f:
                content = f.read()
        except OSError as e:
            raise ConfigurationError(f"Cannot read {config_path}: {e}") from e
        return self.parse_from_string(content)

    def parse_from_string(self, content: str) -> Dict[str, Any]:
        """
        Parses YAML settings content. Accepts either a flat mapping or one
        nested under a top-level `containerui` key.

        :param content: YAML text.
        :return: Raw setting values.
        """
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML: {e}") from e
        if not data:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError("Settings file must contain a mapping")
        if isinstance(data.get("containerui"), dict):
            data = data["containerui"]
        return {k.replace("-", "_"): v for k, v in data.items() if isinstance(k, str)}

    def _from_env(self, env: Mapping[str, str]) -> Dict[str, Any]:
        values = {}
        for suffix, field_name in ENV_FIELDS.items():
            value = env.get(ENV_PREFIX + suffix)
            if value is not None and value != "":
                values[field_name] = value
        return values


def load_settings(config_path: Optional[str] = None, **overrides: Any) -> ClientSettings:
    """
    Convenience wrapper around SettingsParser for the process environment.
    """
    return SettingsParser().load(config_path=config_path, overrides=overrides)
