"""
Logger configuration for the product variations Lambda
"""

import logging
import sys

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Lambda already attaches a handler to the root logger, basicConfig is a no-op there
logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT,
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger('product_variations')


def set_log_level(level_name: str) -> None:
    """Apply LOG_LEVEL to the package logger, ignoring unknown names."""
    level = logging.getLevelName(str(level_name).upper())
    if isinstance(level, int):
        logger.setLevel(level)
    else:
        logger.warning(f"Unknown LOG_LEVEL '{level_name}', keeping {logging.getLevelName(logger.level)}")
