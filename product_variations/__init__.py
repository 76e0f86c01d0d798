"""
Product variations batch writer.

AWS Lambda handler that validates product variations and writes them to
DynamoDB with PartiQL batch statements.
"""

from .lambda_function import lambda_handler

__all__ = ['lambda_handler']
