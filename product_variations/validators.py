"""
Validation rules for product variations sent to the batch writer.

Fields are checked in a fixed order and the first failure is returned:

1. id, sku, permalink: must be non-empty strings
2. price: must be a non-zero number
3. quantity: must be a number, then must not be negative
4. size: must be a non-empty string

Truthiness means an empty string, 0, null and a missing key all count as
"not provided". A price of 0 is therefore rejected as missing, and so is a
value of the wrong type (a number for id, a string for price, ...).
NaN and infinities are not numbers here.
"""

import math
from decimal import Decimal
from typing import Any, Dict, NamedTuple, Optional

from .errors import FieldValidationError
from .logger import logger

NUMBER_TYPES = (int, float, Decimal)


def is_number(value: Any) -> bool:
    """Finite JSON number check; bool is an int subclass but not a JSON number."""
    if isinstance(value, bool) or not isinstance(value, NUMBER_TYPES):
        return False
    if isinstance(value, Decimal):
        return value.is_finite()
    if isinstance(value, float):
        return math.isfinite(value)
    return True


def is_string(value: Any) -> bool:
    return isinstance(value, str)


# (field, article used in the error message, type check)
TRUTHY_FIELDS_BEFORE_QUANTITY = (
    ('id', 'an', is_string),
    ('sku', 'an', is_string),
    ('permalink', 'a', is_string),
    ('price', 'a', is_number),
)
TRUTHY_FIELDS_AFTER_QUANTITY = (
    ('size', 'a', is_string),
)


class ValidationOutcome(NamedTuple):
    is_valid: bool
    error: Optional[FieldValidationError] = None


VALID = ValidationOutcome(True)


def _missing_field(field: str, article: str, index: int) -> ValidationOutcome:
    return ValidationOutcome(False, FieldValidationError(
        f'No {field} provided',
        f'Please provide {article} {field} for the variation at index {index}',
        index=index,
        field=field,
    ))


def _check_truthy(variation: Dict[str, Any], fields, index: int) -> ValidationOutcome:
    for field, article, has_type in fields:
        value = variation.get(field)
        if not value or not has_type(value):
            return _missing_field(field, article, index)
    return VALID


def validate_quantity(quantity: Any, index: int) -> ValidationOutcome:
    """
    Quantity has two independent checks with distinct errors.

    A non-number (including a numeric string) is reported as missing,
    a negative number as 'Quantity less than 0'. Zero is valid.
    """
    if not is_number(quantity):
        return _missing_field('quantity', 'a', index)

    if quantity < 0:
        return ValidationOutcome(False, FieldValidationError(
            'Quantity less than 0',
            f'Please provide a quantity of 0 or greater than 0 for the variation at index {index}',
            index=index,
            field='quantity',
        ))

    return VALID


def validate_product_variation(variation: Any, index: int) -> ValidationOutcome:
    """
    Validate a single product variation.

    Args:
        variation: One element of the request array
        index: Its 0-based position, used in error messages

    Returns:
        ValidationOutcome: (True, None) or (False, FieldValidationError)
    """
    if not isinstance(variation, dict):
        # Anything but an object has none of the required fields
        variation = {}

    outcome = _check_truthy(variation, TRUTHY_FIELDS_BEFORE_QUANTITY, index)
    if not outcome.is_valid:
        return outcome

    outcome = validate_quantity(variation.get('quantity'), index)
    if not outcome.is_valid:
        return outcome

    return _check_truthy(variation, TRUTHY_FIELDS_AFTER_QUANTITY, index)


def ensure_valid(variation: Any, index: int) -> Dict[str, Any]:
    """Raise the FieldValidationError of an invalid variation, return it otherwise."""
    is_valid, error = validate_product_variation(variation, index)
    if not is_valid:
        logger.warning(f"Variation at index {index} rejected: {error.name}")
        raise error
    return variation
