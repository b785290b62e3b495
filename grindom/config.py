"""Configuration loading: JSON file with environment variable overrides."""
import json
import logging
import os
from typing import Dict, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .repositories.payload_repository import DEFAULT_FILE_NAME
from .validation import normalize_currency_code

logger = logging.getLogger('grindom.config')

DEFAULT_DATA_DIR = os.path.join(os.path.expanduser('~'), '.grindom')
CONFIG_FILE_NAME = 'config.json'

# Environment variable -> config key.  Environment always wins.
ENV_OVERRIDES: Dict[str, str] = {
    'GRINDOM_DATA_DIR': 'data_dir',
    'GRINDOM_DATA_FILE': 'data_file',
    'GRINDOM_CURRENCY': 'currency_code',
    'GRINDOM_LOG_LEVEL': 'log_level',
}

_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


class Config(BaseModel):
    """Resolved application settings."""

    data_dir: str = DEFAULT_DATA_DIR
    data_file: str = DEFAULT_FILE_NAME
    currency_code: str = 'USD'
    log_level: str = 'WARNING'
    log_file: Optional[str] = None
    analytics_period_days: int = Field(default=30, ge=1)

    @field_validator('data_dir')
    @classmethod
    def _expand_dir(cls, value: str) -> str:
        return os.path.expanduser(value)

    @field_validator('currency_code')
    @classmethod
    def _currency(cls, value: str) -> str:
        return normalize_currency_code(value)

    @field_validator('log_level')
    @classmethod
    def _level(cls, value: str) -> str:
        value = value.upper()
        if value not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return value

    @property
    def data_path(self) -> str:
        return os.path.join(self.data_dir, self.data_file)


def _read_config_file(config_path: str) -> Dict:
    if not os.path.exists(config_path):
        logger.debug("No config file at %s; using defaults.", config_path)
        return {}
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            raw = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Could not read config %s: %s", config_path, e)
        return {}
    if not isinstance(raw, dict):
        logger.warning("Ignoring config %s: top level must be an object.", config_path)
        return {}
    return raw


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from a JSON file with environment variable support.

    Environment variables take precedence over config file values:
    - GRINDOM_DATA_DIR overrides data_dir
    - GRINDOM_DATA_FILE overrides data_file
    - GRINDOM_CURRENCY overrides currency_code
    - GRINDOM_LOG_LEVEL overrides log_level

    A missing or unreadable file means defaults.  Invalid values are dropped
    with a warning and replaced by their defaults.
    """
    if config_path is None:
        config_path = os.path.join(DEFAULT_DATA_DIR, CONFIG_FILE_NAME)
    values = {k: v for k, v in _read_config_file(config_path).items()
              if k in Config.model_fields}

    for env_name, key in ENV_OVERRIDES.items():
        if os.getenv(env_name):
            values[key] = os.getenv(env_name)

    try:
        return Config(**values)
    except ValidationError as e:
        for err in e.errors():
            key = err['loc'][0] if err['loc'] else None
            if key in values:
                logger.warning("Invalid config value for %s (%r): %s",
                               key, values[key], err['msg'])
                values.pop(key)
        return Config(**values)
