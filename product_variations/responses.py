"""
Response envelopes for the product variations Lambda.

Success:
    {"statusCode": 200, "body": "{\"data\": <BatchExecuteStatement result>}"}

Error (always an array, whatever the source of the error):
    {"statusCode": 400, "body": "{\"errors\": [{\"name\": ..., \"message\": ...}]}"}
"""

import json
from enum import IntEnum
from typing import Any, Dict, Iterable, List, Optional

from .errors import BatchExecutionError, ProductVariationError
from .logger import logger

RESPONSE_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, PATCH, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type"
}


class StatusCodes(IntEnum):
    SUCCESS = 200
    ERROR = 400
    INTERNAL_ERROR = 500


def build_response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "statusCode": int(status_code),
        "headers": dict(RESPONSE_HEADERS),
        # Decimals and datetimes in the boto3 result are stringified
        "body": json.dumps(body, default=str)
    }


def success_response(data: Any) -> Dict[str, Any]:
    return build_response(StatusCodes.SUCCESS, {"data": data})


def error_response(
    errors: Iterable[Dict[str, Any]],
    status_code: int = StatusCodes.ERROR
) -> Dict[str, Any]:
    return build_response(status_code, {"errors": list(errors)})


def log_and_return_error(
    log_message: str,
    error: ProductVariationError,
    status_code: int = StatusCodes.ERROR
) -> Dict[str, Any]:
    """Log a handled error and wrap it in the error envelope."""
    logger.warning(f"{log_message}: {error.name} - {error.message}")
    return error_response([error.to_dict()], status_code)


def extract_errors(responses: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """
    Collect the per-statement errors of a BatchExecuteStatement result.

    Responses are ordered like the submitted statements, so the position of
    an entry is also the index of the variation that produced it.

    Args:
        responses: result['Responses']

    Returns:
        list: one dict per failed statement, empty when everything succeeded
    """
    errors = []

    for index, response in enumerate(responses or []):
        error = response.get("Error")
        if not error:
            continue

        errors.append({
            "name": error.get("Code") or "BatchStatementError",
            "message": error.get("Message", ""),
            "index": index,
            "table_name": response.get("TableName")
        })

    return errors


def reduce_batch_result(result: Dict[str, Any]) -> Dict[str, Any]:
    """
    Turn a BatchExecuteStatement result into the HTTP response.

    Any failed statement downgrades the whole response to an error, even
    though the other statements of the batch were written. DynamoDB does
    not roll them back.
    """
    errors = extract_errors(result.get("Responses"))

    if errors:
        error = BatchExecutionError(errors)
        logger.warning(
            f"{error.message} (statement indexes: "
            f"{', '.join(str(entry['index']) for entry in error.errors)})"
        )
        return error_response(error.errors)

    return success_response(result)
