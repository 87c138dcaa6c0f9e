"""
Reasoning oracle interface.

The subset extraction engine only needs to ask a reasoner about related
classes of a node or class expression. Keeping the reasoner behind this
interface lets the engine run against any implementation, including small
fixed hierarchies in tests.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Set, Union

from rdflib import URIRef

from .expressions import ClassExpression, NamedClass


Queryable = Union[URIRef, ClassExpression]


def as_expression(query: Queryable) -> ClassExpression:
    """Wrap a bare IRI into a named class expression."""
    if isinstance(query, URIRef):
        return NamedClass(query)
    return query


class ReasoningOracle(ABC):
    """Abstract base class for subsumption reasoners."""

    @abstractmethod
    def super_classes(self, query: Queryable, direct: bool = False) -> Set[URIRef]:
        """
        Get the named super-classes of a class or class expression.

        Args:
            query: Class IRI or class expression
            direct: If True, only the most specific super-classes are returned

        Returns:
            Set of class IRIs; owl:Thing is included when it is an ancestor

        Raises:
            OracleUnavailableError: If the reasoner cannot answer
        """
        pass

    @abstractmethod
    def sub_classes(self, query: Queryable, direct: bool = False) -> Set[URIRef]:
        """
        Get the named sub-classes of a class or class expression.

        Args:
            query: Class IRI or class expression
            direct: If True, only the most general sub-classes are returned

        Returns:
            Set of class IRIs, not including equivalent classes

        Raises:
            OracleUnavailableError: If the reasoner cannot answer
        """
        pass

    @abstractmethod
    def equivalent_classes(self, query: Queryable) -> Set[URIRef]:
        """
        Get the named classes equivalent to a class or class expression.

        For a named class, the class itself is part of the result.

        Raises:
            OracleUnavailableError: If the reasoner cannot answer
        """
        pass

    @abstractmethod
    def ancestors(self, node: URIRef, properties: Iterable[URIRef] = ()) -> Set[URIRef]:
        """
        Get all ancestors of a class, following subsumption and the given properties.

        Subsumption is always followed. An existential restriction
        ``node SubClassOf (p some X)`` makes X an ancestor when p is one of the
        given properties or one of their sub-properties.

        Args:
            node: Class IRI
            properties: Object properties to follow in addition to subsumption

        Returns:
            Set of ancestor IRIs, not including the node itself

        Raises:
            OracleUnavailableError: If the reasoner cannot answer
        """
        pass
