"""
PartiQL statement builder for product variations.

Every valid variation becomes one entry of a BatchExecuteStatement request:

    {
        'Statement': 'INSERT INTO "variations" VALUE {...}',
        'Parameters': [{'S': 'var-1'}, {'S': 'SKU-1'}, ..., {'N': '19.99'}, ...]
    }

Parameter order always matches the order of the ? placeholders.
price and quantity are sent as numbers ('N'), everything else as strings ('S').

POST  -> INSERT, sets date_created_gmt and date_modified_gmt to the same value
PATCH -> UPDATE keyed on (id, sku), sets date_modified_gmt only

id and sku are identity fields and are never updated.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Sequence

from .errors import RequestShapeError
from .logger import logger
from .validators import ensure_valid

CREATE_METHOD = 'POST'
UPDATE_METHOD = 'PATCH'
SUPPORTED_METHODS = (CREATE_METHOD, UPDATE_METHOD)

INSERT_STATEMENT = (
    'INSERT INTO "{table}" VALUE {{'
    "'id': ?, 'sku': ?, 'permalink': ?, 'price': ?, 'quantity': ?, 'size': ?, "
    "'date_created_gmt': ?, 'date_modified_gmt': ?"
    '}}'
)

UPDATE_STATEMENT = (
    'UPDATE "{table}" '
    'SET "permalink"=?, "size"=?, "price"=?, "quantity"=?, "date_modified_gmt"=? '
    'WHERE "id"=? AND "sku"=?'
)


def iso_timestamp(now: Optional[datetime] = None) -> str:
    """UTC timestamp like 2024-05-01T12:30:45.123Z"""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def format_number(value: Any) -> str:
    if isinstance(value, float):
        return repr(value)
    return str(value)


def string_param(value: Any) -> Dict[str, str]:
    return {'S': str(value)}


def number_param(value: Any) -> Dict[str, str]:
    return {'N': format_number(value)}


def build_insert_statement(variation: Dict[str, Any], table_name: str, now: str) -> Dict[str, Any]:
    return {
        'Statement': INSERT_STATEMENT.format(table=table_name),
        'Parameters': [
            string_param(variation['id']),
            string_param(variation['sku']),
            string_param(variation['permalink']),
            number_param(variation['price']),
            number_param(variation['quantity']),
            string_param(variation['size']),
            string_param(now),
            string_param(now),
        ],
    }


def build_update_statement(variation: Dict[str, Any], table_name: str, now: str) -> Dict[str, Any]:
    return {
        'Statement': UPDATE_STATEMENT.format(table=table_name),
        'Parameters': [
            string_param(variation['permalink']),
            string_param(variation['size']),
            number_param(variation['price']),
            number_param(variation['quantity']),
            string_param(now),
            string_param(variation['id']),
            string_param(variation['sku']),
        ],
    }


def build_statement(
    variation: Dict[str, Any],
    method: str,
    table_name: str,
    now: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build the statement for one already validated variation.

    Args:
        variation: Validated product variation
        method: 'POST' (insert) or 'PATCH' (update)
        table_name: Product variations table
        now: Timestamp to stamp, defaults to the current time

    Returns:
        dict: BatchStatementRequest

    Raises:
        RequestShapeError: for any other method
    """
    now = now or iso_timestamp()

    if method == CREATE_METHOD:
        return build_insert_statement(variation, table_name, now)
    if method == UPDATE_METHOD:
        return build_update_statement(variation, table_name, now)

    raise RequestShapeError(
        f'Only {CREATE_METHOD} and {UPDATE_METHOD} are supported',
        f'Cannot build a statement for http method {method}',
    )


def build_statements(
    variations: Sequence[Any],
    method: str,
    table_name: str,
    clock: Callable[[], str] = iso_timestamp,
) -> List[Dict[str, Any]]:
    """
    Validate and convert every variation, in order.

    Each variation gets its own timestamp taken when it is processed.
    The first invalid variation aborts the whole batch: no statements are
    returned and later variations are never looked at.

    Raises:
        FieldValidationError: for the first invalid variation
    """
    statements = []

    for index, variation in enumerate(variations):
        ensure_valid(variation, index)
        statements.append(build_statement(variation, method, table_name, clock()))

    logger.info(f"Built {len(statements)} {method} statement(s) for table {table_name}")
    return statements


def parameters_to_values(parameters: Sequence[Dict[str, Any]]) -> List[Any]:
    """
    Convert DynamoDB AttributeValues back to Python values.

    'S' -> str, 'N' -> int (or Decimal when it has a fraction/exponent), 'NULL' -> None
    """
    values = []

    for parameter in parameters:
        if 'S' in parameter:
            values.append(parameter['S'])
        elif 'N' in parameter:
            number = parameter['N']
            if any(marker in number for marker in ('.', 'e', 'E')):
                values.append(Decimal(number))
            else:
                values.append(int(number))
        elif 'NULL' in parameter:
            values.append(None)
        else:
            raise ValueError(f"Unsupported attribute value: {parameter}")

    return values
