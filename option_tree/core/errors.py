"""
Domain-specific exceptions for the option tree engine.

The pure engine (evaluator, resolver, validator) never raises; these
exceptions are raised by the document and service layers so host services
can map them to their own transport (HTTP status, job failure, CLI exit code).
"""

from typing import Any


class OptionTreeError(Exception):
    """Base exception for all option tree errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class DocumentSchemaError(OptionTreeError):
    """
    Raised when a JSON document does not match the v2 document shape.

    Examples:
    - Unknown condition operator
    - Node kind outside question/group/computed
    - schemaVersion other than 2
    - Condition nesting deeper than the configured limit

    The full list of pydantic errors is carried in ``details["errors"]``.
    """

    pass


class OptionTreeInvalidError(OptionTreeError):
    """
    Raised when a well-shaped tree fails structural validation.

    Examples:
    - Root id missing from nodes
    - Edge pointing at a node that does not exist
    - Cycle reachable from the roots

    The validator's error strings are carried in ``details["errors"]``.
    """

    pass
