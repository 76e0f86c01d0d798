"""
Environment hydration for the product variations Lambda.

Order of precedence (first wins):
1. Variables already set on the process (Lambda configuration)
2. A local .env file (development only)
3. Keys of the JSON secret named by CONFIG_SECRET_NAME

After hydration the required variables are checked; the request is
aborted with a ConfigurationError if any is missing.
"""

import json
import os
from typing import MutableMapping, Optional

import boto3
from aws_secretsmanager_caching import SecretCache, SecretCacheConfig
from botocore.exceptions import ClientError
from dotenv import load_dotenv

from .config import ProductVariationsConfig
from .errors import ConfigurationError
from .logger import logger, set_log_level

DOTENV_PATH = '.env'

# Secrets Manager cache (created once per container, reused across invocations)
_secret_cache: Optional[SecretCache] = None


def get_secret_cache(region_name: Optional[str] = None) -> SecretCache:
    global _secret_cache

    if _secret_cache is None:
        secretsmanager = boto3.client('secretsmanager', region_name=region_name)
        _secret_cache = SecretCache(config=SecretCacheConfig(), client=secretsmanager)

    return _secret_cache


def load_config_secret(
    secret_name: str,
    environ: MutableMapping[str, str],
    secret_cache: Optional[SecretCache] = None,
) -> int:
    """
    Copy the keys of a JSON secret into the environment.

    Keys that are already set are left untouched.

    Args:
        secret_name: Name or ARN of the secret
        environ: Mapping to hydrate (os.environ in production)
        secret_cache: Cache to read from, defaults to the module cache

    Returns:
        int: Number of variables added

    Raises:
        ConfigurationError: if the secret cannot be read or is not a JSON object
    """
    cache = secret_cache or get_secret_cache(environ.get('DEFAULT_REGION') or None)

    try:
        secret_string = cache.get_secret_string(secret_name)
    except ClientError as e:
        error_code = e.response.get('Error', {}).get('Code', 'Unknown')
        raise ConfigurationError(
            'Config secret unavailable',
            f"Could not read secret '{secret_name}' from Secrets Manager ({error_code})",
        ) from e

    try:
        secret = json.loads(secret_string) if secret_string else None
    except json.JSONDecodeError:
        secret = None

    if not isinstance(secret, dict):
        raise ConfigurationError(
            'Config secret unavailable',
            f"Secret '{secret_name}' must be a JSON object of environment variables",
        )

    added = 0
    for key, value in secret.items():
        if value is None or environ.get(key):
            continue
        environ[key] = str(value)
        added += 1

    logger.debug(f"Hydrated {added} variable(s) from secret '{secret_name}'")
    return added


def hydrate_env(
    environ: Optional[MutableMapping[str, str]] = None,
    secret_cache: Optional[SecretCache] = None,
    dotenv_path: str = DOTENV_PATH,
) -> ProductVariationsConfig:
    """
    Hydrate and validate the environment.

    Safe to call on every invocation.

    Returns:
        ProductVariationsConfig: validated configuration snapshot

    Raises:
        ConfigurationError: when a required variable is still missing
    """
    if environ is None:
        environ = os.environ
        if os.path.exists(dotenv_path):
            load_dotenv(dotenv_path, override=False)

    secret_name = environ.get('CONFIG_SECRET_NAME')
    if secret_name:
        load_config_secret(secret_name, environ, secret_cache)

    config = ProductVariationsConfig(environ)
    set_log_level(config.LOG_LEVEL)
    config.validate()
    config.log_config()
    return config
