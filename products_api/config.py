"""Environment-driven settings for the products API.

A ``.env`` file in the working directory is loaded first when present.
Missing required values raise ConfigurationError at startup so the
process never starts serving without a store address.
"""

import os
from typing import Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict

from products_api.exceptions import ConfigurationError


class Settings(BaseModel):
    """
    Connection and runtime settings.
    """

    cosmosdb_endpoint: str
    cosmosdb_database: str = "inventory"
    cosmosdb_container_products: str = "products"
    cosmosdb_key: Optional[str] = None  # falls back to DefaultAzureCredential
    log_level: str = "INFO"

    model_config = ConfigDict(frozen=True, extra="forbid")


def _get_required_env(key: str) -> str:
    value = os.environ.get(key)
    if not value:
        raise ConfigurationError(
            f"Required environment variable '{key}' is not set."
        )
    return value


LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


def _get_log_level() -> str:
    level = os.environ.get("LOG_LEVEL", "INFO").strip().upper()
    if level not in LOG_LEVELS:
        raise ConfigurationError(
            f"Environment variable 'LOG_LEVEL' must be one of {', '.join(LOG_LEVELS)}, got '{level}'."
        )
    return level


def load_settings() -> Settings:
    """Build Settings from the process environment."""
    load_dotenv(find_dotenv(usecwd=True))

    return Settings(
        cosmosdb_endpoint=_get_required_env("COSMOSDB_ENDPOINT"),
        cosmosdb_database=os.environ.get("COSMOSDB_DATABASE", "inventory"),
        cosmosdb_container_products=os.environ.get(
            "COSMOSDB_CONTAINER_PRODUCTS", "products"
        ),
        cosmosdb_key=os.environ.get("COSMOSDB_KEY") or None,
        log_level=_get_log_level(),
    )
