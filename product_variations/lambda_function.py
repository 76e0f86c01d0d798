"""
Lambda Function: Product Variations Batch Writer
================================================

Trigger: API Gateway (HTTP API)
Process: Validate an array of product variations and write them to DynamoDB
Output:
  - POST  -> one PartiQL INSERT per variation
  - PATCH -> one PartiQL UPDATE per variation, keyed on (id, sku)
  - All statements sent in a single BatchExecuteStatement call

Request Body:
[
    {
        "id": "1042",
        "sku": "TSHIRT-RED-M",
        "permalink": "https://shop.example.com/product/t-shirt/?attribute_size=m",
        "price": 19.99,
        "quantity": 12,
        "size": "M"
    }
]

Failure Policies:
- Validation is all-or-nothing: the first invalid variation aborts the
  request before anything is written.
- Execution is not: DynamoDB runs each statement independently. Failed
  statements are collected and returned together, the successful ones stay
  written.

Environment Variables:
- DEFAULT_REGION
- WORDPRESS_PRODUCTS_TABLE_NAME
- WORDPRESS_PRODUCT_VARIATIONS_TABLE_NAME
- LOG_LEVEL, DYNAMODB_ENDPOINT_URL, CONFIG_SECRET_NAME (optional)

IAM Permissions Required:
- dynamodb:PartiQLInsert, dynamodb:PartiQLUpdate on the variations table
- secretsmanager:GetSecretValue (only with CONFIG_SECRET_NAME)
- logs:CreateLogGroup, logs:CreateLogStream, logs:PutLogEvents
"""

import base64
import binascii
import json
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

import boto3
from botocore.exceptions import ClientError

from .config import ProductVariationsConfig
from .env import hydrate_env
from .errors import ConfigurationError, FieldValidationError, RequestShapeError
from .logger import logger
from .responses import StatusCodes, error_response, log_and_return_error, reduce_batch_result
from .statements import SUPPORTED_METHODS, build_statements

# DynamoDB client (created once per container, reused across warm invocations)
_dynamodb_client = None

NO_PRODUCTS_MESSAGE = 'Please provide an array of products with all the required properties'


# =============================================================================
# AWS CLIENTS
# =============================================================================

def get_dynamodb_client(config: ProductVariationsConfig):
    global _dynamodb_client

    if _dynamodb_client is None:
        client_kwargs = {'region_name': config.DEFAULT_REGION}
        if config.DYNAMODB_ENDPOINT_URL:
            # For local DynamoDB
            client_kwargs['endpoint_url'] = config.DYNAMODB_ENDPOINT_URL
        _dynamodb_client = boto3.client('dynamodb', **client_kwargs)

    return _dynamodb_client


# =============================================================================
# REQUEST PARSING
# =============================================================================

def get_http_method(event: Dict[str, Any]) -> Optional[str]:
    """HTTP API (v2) keeps the method in requestContext, REST API (v1) in httpMethod."""
    method = event.get('httpMethod')
    if not method:
        http = (event.get('requestContext') or {}).get('http') or {}
        method = http.get('method')
    return method


def get_raw_body(event: Dict[str, Any]) -> Any:
    body = event.get('body')

    if body and isinstance(body, str) and event.get('isBase64Encoded'):
        try:
            body = base64.b64decode(body, validate=True).decode('utf-8')
        except (binascii.Error, UnicodeDecodeError) as e:
            raise RequestShapeError(
                'Invalid JSON body',
                'The request body is not valid base64-encoded UTF-8 text'
            ) from e

    return body


def _reject_constant(name: str) -> Any:
    raise RequestShapeError(
        'Invalid JSON body',
        f'The request body could not be parsed as JSON: {name} is not a valid JSON value'
    )


def load_variations(body: Any) -> List[Any]:
    """
    Parse a JSON body into the list of variations.

    Raises:
        RequestShapeError: 'Invalid JSON body' or 'Invalid products payload'
    """
    if isinstance(body, (str, bytes)):
        try:
            # Decimal keeps prices like 19.99 exact when they become 'N' parameters
            variations = json.loads(body, parse_float=Decimal, parse_constant=_reject_constant)
        except json.JSONDecodeError as e:
            raise RequestShapeError(
                'Invalid JSON body',
                f'The request body could not be parsed as JSON: {e.msg}'
            ) from e
    else:
        variations = body

    if not isinstance(variations, list):
        raise RequestShapeError(
            'Invalid products payload',
            'The request body must be a JSON array of product variations'
        )
    return variations


def parse_request(event: Dict[str, Any]) -> Tuple[str, List[Any]]:
    """
    Check the shape of the request before looking at any variation.

    Order of checks: body present, method supported, body is JSON,
    body is an array, array not empty.

    Returns:
        tuple: (http_method, variations)

    Raises:
        RequestShapeError
    """
    if not event.get('body'):
        raise RequestShapeError('No arguments provided', NO_PRODUCTS_MESSAGE)

    method = get_http_method(event)
    if method not in SUPPORTED_METHODS:
        raise RequestShapeError(
            'Only POST and PATCH are supported',
            'Please send a POST http request to add a new product and a PATCH '
            'http request to update existing products'
        )

    variations = load_variations(get_raw_body(event))

    if len(variations) == 0:
        raise RequestShapeError('No new products provided', NO_PRODUCTS_MESSAGE)

    return method, variations


# =============================================================================
# BATCH EXECUTION
# =============================================================================

def execute_statements(dynamodb_client, statements: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Send all statements in one BatchExecuteStatement call.

    DynamoDB executes them independently; the returned 'Responses' list is
    ordered like the statements.
    """
    logger.info(f"Executing batch of {len(statements)} statement(s)")
    return dynamodb_client.batch_execute_statement(Statements=statements)


# =============================================================================
# MAIN LAMBDA HANDLER
# =============================================================================

def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    AWS Lambda entry point.

    Every failure is turned into a response here; nothing escapes the
    handler, so one bad request never takes the container down.

    Args:
        event: API Gateway proxy event
        context: Lambda context (unused)

    Returns:
        dict: API Gateway proxy response
    """
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"Handler function called with event: {json.dumps(event, default=str)}")

    try:
        config = hydrate_env()

        method, variations = parse_request(event)

        statements = build_statements(
            variations,
            method,
            config.WORDPRESS_PRODUCT_VARIATIONS_TABLE_NAME
        )

        result = execute_statements(get_dynamodb_client(config), statements)
        return reduce_batch_result(result)

    except ConfigurationError as e:
        return log_and_return_error('Configuration error', e)

    except RequestShapeError as e:
        return log_and_return_error('Validation error in provided event', e)

    except FieldValidationError as e:
        return log_and_return_error('Validation error in provided products', e)

    except ClientError as e:
        error = e.response.get('Error', {})
        logger.exception(f"DynamoDB rejected the batch: {error.get('Code')}")
        return error_response(
            [{
                'name': error.get('Code') or 'DynamoDBError',
                'message': error.get('Message') or str(e)
            }],
            StatusCodes.INTERNAL_ERROR
        )

    except Exception as e:
        logger.exception("There was an unhandled error")
        return error_response(
            [{'name': 'Internal server error', 'message': str(e)}],
            StatusCodes.INTERNAL_ERROR
        )
