"""
Local runner for the product variations Lambda.

Examples:
  # Build and print the statements, nothing is sent to DynamoDB
  python -m product_variations validate --method POST --file variations.json

  # Run the full handler (needs the env variables and AWS credentials,
  # or DYNAMODB_ENDPOINT_URL pointing at DynamoDB Local)
  python -m product_variations invoke --method PATCH --file variations.json
"""

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import FieldValidationError, RequestShapeError
from .lambda_function import lambda_handler, load_variations
from .statements import SUPPORTED_METHODS, build_statements

DEFAULT_TABLE_NAME = 'product_variations'


def build_event(method: str, body: str) -> Dict[str, Any]:
    """Minimal API Gateway HTTP API (payload v2) event."""
    return {
        'version': '2.0',
        'routeKey': f'{method} /product-variations',
        'rawPath': '/product-variations',
        'headers': {'content-type': 'application/json'},
        'requestContext': {
            'http': {
                'method': method,
                'path': '/product-variations',
            }
        },
        'body': body,
        'isBase64Encoded': False,
    }


def run_validate(args: argparse.Namespace, body: str) -> int:
    table_name = args.table or os.environ.get('WORDPRESS_PRODUCT_VARIATIONS_TABLE_NAME') or DEFAULT_TABLE_NAME

    try:
        statements = build_statements(load_variations(body), args.method, table_name)
    except (FieldValidationError, RequestShapeError) as e:
        print(json.dumps({'errors': [e.to_dict()]}, indent=2))
        return 1

    print(json.dumps(statements, indent=2))
    return 0


def run_invoke(args: argparse.Namespace, body: str) -> int:
    response = lambda_handler(build_event(args.method, body), None)

    print(json.dumps({
        'statusCode': response['statusCode'],
        'body': json.loads(response['body'])
    }, indent=2, default=str))

    return 0 if response['statusCode'] == 200 else 1


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog='python -m product_variations',
        description='Validate product variations and write them to DynamoDB'
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    for name, help_text in (
        ('validate', 'Validate the file and print the PartiQL statements'),
        ('invoke', 'Run the Lambda handler against the file'),
    ):
        subparser = subparsers.add_parser(name, help=help_text)
        subparser.add_argument('--method', choices=SUPPORTED_METHODS, default='POST',
                               help='POST creates variations, PATCH updates them')
        subparser.add_argument('--file', type=Path, required=True,
                               help='JSON file with an array of product variations')
        if name == 'validate':
            subparser.add_argument('--table', default=None,
                                   help='Table name used in the statements')

    args = parser.parse_args(argv)
    body = args.file.read_text(encoding='utf-8')

    if args.command == 'validate':
        return run_validate(args, body)
    return run_invoke(args, body)


if __name__ == '__main__':
    sys.exit(main())
