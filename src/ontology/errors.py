"""
Exceptions raised while extracting a subset from an ontology.

Only configuration parsing and reasoner queries can fail; any failure aborts
the whole extraction and no partial subset is ever returned.
"""

from typing import Optional


class ExtractionError(Exception):
    """Base class for all errors that abort a subset extraction."""


class ConfigurationError(ExtractionError, ValueError):
    """Invalid extraction input, detected before any extraction work starts."""


class QueryParseError(ConfigurationError):
    """A class expression could not be parsed."""

    def __init__(self, message: str, expression: str, position: Optional[int] = None):
        self.expression = expression
        self.position = position
        if position is not None:
            message = f"{message} at position {position} in '{expression}'"
        else:
            message = f"{message} in '{expression}'"
        super().__init__(message)


class OracleUnavailableError(ExtractionError):
    """The reasoner cannot answer a query about the ontology."""
