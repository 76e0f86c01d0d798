"""
Error types raised while handling a product variations request.

Every error carries a short ``name`` and a human readable ``message``.
Both end up in the ``errors`` array of the HTTP response.
"""

from typing import Any, Dict, List, Optional


class ProductVariationError(Exception):
    """Base class for every error the handler turns into a 4xx response."""

    def __init__(self, name: str, message: str):
        super().__init__(message)
        self.name = name
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "message": self.message}

    def __repr__(self):
        return f"{type(self).__name__}(name={self.name!r}, message={self.message!r})"


class ConfigurationError(ProductVariationError):
    """A required environment value is missing or the config secret is unusable."""


class RequestShapeError(ProductVariationError):
    """The request body or HTTP method cannot be processed at all."""


class FieldValidationError(ProductVariationError):
    """
    A single product variation failed validation.

    Args:
        name: Short error title (e.g. 'No sku provided')
        message: Message naming the field and the index
        index: 0-based position of the variation in the request array
        field: Name of the offending field
    """

    def __init__(self, name: str, message: str, index: int, field: Optional[str] = None):
        super().__init__(name, message)
        self.index = index
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        error = super().to_dict()
        error["index"] = self.index
        error["field"] = self.field
        return error


class BatchExecutionError(ProductVariationError):
    """One or more statements of an executed batch came back with an error."""

    def __init__(self, errors: List[Dict[str, Any]]):
        super().__init__(
            "Batch statement errors",
            f"{len(errors)} statement(s) failed while writing product variations",
        )
        self.errors = errors
