"""
Shared fixtures for the product variations tests.

No AWS access: the DynamoDB client is a MagicMock and the environment is
set through monkeypatch.
"""

import json
from unittest.mock import MagicMock

import pytest

from product_variations import lambda_function

TEST_ENV = {
    'DEFAULT_REGION': 'us-east-1',
    'WORDPRESS_PRODUCTS_TABLE_NAME': 'wordpress_products',
    'WORDPRESS_PRODUCT_VARIATIONS_TABLE_NAME': 'wordpress_product_variations',
}

OPTIONAL_ENV = ('CONFIG_SECRET_NAME', 'DYNAMODB_ENDPOINT_URL', 'LOG_LEVEL')


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No product variations variables at all, and no .env file in the cwd."""
    monkeypatch.chdir(tmp_path)
    for name in tuple(TEST_ENV) + OPTIONAL_ENV:
        # setenv first so monkeypatch restores the original state afterwards
        monkeypatch.setenv(name, 'placeholder')
        monkeypatch.delenv(name)
    return monkeypatch


@pytest.fixture
def env(clean_env):
    for name, value in TEST_ENV.items():
        clean_env.setenv(name, value)
    return TEST_ENV


@pytest.fixture
def make_variation():
    def _make(**overrides):
        variation = {
            'id': '1042',
            'sku': 'TSHIRT-RED-M',
            'permalink': 'https://shop.example.com/product/t-shirt/?attribute_size=m',
            'price': 19.99,
            'quantity': 12,
            'size': 'M',
        }
        variation.update(overrides)
        return variation
    return _make


@pytest.fixture
def make_event():
    def _make(method='POST', body=None, **extra):
        if body is not None and not isinstance(body, str):
            body = json.dumps(body)
        event = {
            'version': '2.0',
            'requestContext': {'http': {'method': method}},
            'body': body,
            'isBase64Encoded': False,
        }
        event.update(extra)
        return event
    return _make


@pytest.fixture
def dynamodb_client(monkeypatch):
    client = MagicMock()
    client.batch_execute_statement.side_effect = lambda Statements: {
        'Responses': [{'TableName': TEST_ENV['WORDPRESS_PRODUCT_VARIATIONS_TABLE_NAME']} for _ in Statements],
        'ResponseMetadata': {'HTTPStatusCode': 200},
    }
    monkeypatch.setattr(lambda_function, '_dynamodb_client', client)
    return client


def response_body(response):
    return json.loads(response['body'])
