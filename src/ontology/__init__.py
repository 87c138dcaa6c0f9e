"""
Ontology Store Module

This module provides an in-memory view of an OWL ontology and its imports
closure, as consumed by the subset extraction engine.

Public Interface:
- OntologyStore: rdflib-backed store scoped to local content or the imports closure
- OntologyNode: a class with its defining and annotation statements
- Errors: ExtractionError and its ConfigurationError / OracleUnavailableError subclasses
"""

from .domain import OntologyNode, OntologyStats
from .errors import ConfigurationError, ExtractionError, OracleUnavailableError, QueryParseError
from .store import OntologyStore, IN_SUBSET, OBO_IN_OWL

__all__ = [
    "OntologyStore", "OntologyNode", "OntologyStats", "IN_SUBSET", "OBO_IN_OWL",
    "ExtractionError", "ConfigurationError", "QueryParseError", "OracleUnavailableError",
]
