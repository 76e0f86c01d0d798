"""
config.py - Configuration for the Product Variations Lambda
===========================================================

All settings come from environment variables. In AWS they are set on the
Lambda function; locally they can come from a .env file or from a JSON
secret in AWS Secrets Manager (see env.py).

Required:
  DEFAULT_REGION                           -> AWS region of the DynamoDB tables
  WORDPRESS_PRODUCTS_TABLE_NAME            -> Parent products table (kept for other consumers)
  WORDPRESS_PRODUCT_VARIATIONS_TABLE_NAME  -> Target table of every batch statement

Optional:
  LOG_LEVEL                                -> 'INFO', 'DEBUG', etc.
  DYNAMODB_ENDPOINT_URL                    -> Custom endpoint for local DynamoDB
  CONFIG_SECRET_NAME                       -> Secrets Manager secret holding any of the above

Example Usage:
```python
from product_variations.config import ProductVariationsConfig

config = ProductVariationsConfig()
config.validate()          # raises ConfigurationError
table = config.WORDPRESS_PRODUCT_VARIATIONS_TABLE_NAME
```
"""

import os
from typing import List, Mapping, Optional

from .errors import ConfigurationError
from .logger import logger


class ProductVariationsConfig:
    """
    Snapshot of the environment taken when the object is created.

    The snapshot is read-only after validate() succeeds; a new one is taken
    on every invocation so values hydrated from a secret are picked up.
    """

    # Checked in this order, the first missing one is reported
    REQUIRED_VARIABLES = (
        'DEFAULT_REGION',
        'WORDPRESS_PRODUCTS_TABLE_NAME',
        'WORDPRESS_PRODUCT_VARIATIONS_TABLE_NAME',
    )

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        environ = os.environ if environ is None else environ

        # AWS / DynamoDB
        self.DEFAULT_REGION: str = environ.get('DEFAULT_REGION', '')
        self.WORDPRESS_PRODUCTS_TABLE_NAME: str = environ.get('WORDPRESS_PRODUCTS_TABLE_NAME', '')
        self.WORDPRESS_PRODUCT_VARIATIONS_TABLE_NAME: str = environ.get(
            'WORDPRESS_PRODUCT_VARIATIONS_TABLE_NAME', ''
        )
        self.DYNAMODB_ENDPOINT_URL: Optional[str] = environ.get('DYNAMODB_ENDPOINT_URL') or None

        # Secrets Manager
        self.CONFIG_SECRET_NAME: Optional[str] = environ.get('CONFIG_SECRET_NAME') or None

        # Logging
        self.LOG_LEVEL: str = environ.get('LOG_LEVEL', 'INFO')

    def missing_variables(self) -> List[str]:
        """Names of required variables that are unset or empty, in check order."""
        return [name for name in self.REQUIRED_VARIABLES if not getattr(self, name)]

    def validate(self) -> 'ProductVariationsConfig':
        """
        Fail fast when a required variable is missing.

        Raises:
            ConfigurationError: naming the first missing variable

        Returns:
            self, so the call can be chained
        """
        missing = self.missing_variables()
        if missing:
            error = ConfigurationError(
                'Missing env variables',
                f'Please provide {missing[0]} in environment variables',
            )
            logger.error(f"{error.message} (missing: {', '.join(missing)})")
            raise error
        return self

    def log_config(self) -> None:
        """Log the configuration at DEBUG level."""
        logger.debug(f"Region:            {self.DEFAULT_REGION}")
        logger.debug(f"Products table:    {self.WORDPRESS_PRODUCTS_TABLE_NAME}")
        logger.debug(f"Variations table:  {self.WORDPRESS_PRODUCT_VARIATIONS_TABLE_NAME}")
        logger.debug(f"DynamoDB endpoint: {self.DYNAMODB_ENDPOINT_URL or 'AWS default'}")
        logger.debug(f"Config secret:     {self.CONFIG_SECRET_NAME or 'NOT SET'}")
        logger.debug(f"Log level:         {self.LOG_LEVEL}")
