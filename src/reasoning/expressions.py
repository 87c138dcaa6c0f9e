"""
Class expressions understood by the reasoning oracle.

Only the EL-like fragment used by subset queries and gap-filling is modelled:
named classes, conjunctions and existential restrictions. Expressions are
immutable and hashable so that structurally equal expressions compare equal.
"""

from dataclasses import dataclass
from typing import FrozenSet, Optional, Set, Union

from rdflib import BNode, Graph, URIRef, OWL
from rdflib.term import Node


@dataclass(frozen=True)
class NamedClass:
    """A class referred to by its IRI."""

    iri: URIRef

    def __str__(self) -> str:
        return f"<{self.iri}>"


@dataclass(frozen=True)
class SomeValuesFrom:
    """An existential restriction ``property some filler``."""

    property: URIRef
    filler: "ClassExpression"

    def __str__(self) -> str:
        return f"<{self.property}> some {self.filler}"


@dataclass(frozen=True)
class Intersection:
    """A conjunction of class expressions."""

    operands: FrozenSet["ClassExpression"]

    def __str__(self) -> str:
        return " and ".join(sorted(f"({operand})" for operand in self.operands))


ClassExpression = Union[NamedClass, SomeValuesFrom, Intersection]


def intersection_of(operands) -> ClassExpression:
    """Build a conjunction, collapsing nested and single-operand conjunctions."""
    flattened: Set[ClassExpression] = set()
    for operand in operands:
        flattened.update(conjuncts(operand))
    if len(flattened) == 1:
        return next(iter(flattened))
    return Intersection(frozenset(flattened))


def conjuncts(expression: ClassExpression) -> Set[ClassExpression]:
    """Get the top-level conjuncts of an expression (the expression itself if not a conjunction)."""
    if isinstance(expression, Intersection):
        result: Set[ClassExpression] = set()
        for operand in expression.operands:
            result.update(conjuncts(operand))
        return result
    return {expression}


def read_expression(graph: Graph, node: Node) -> Optional[ClassExpression]:
    """Read the class expression serialized at an RDF node.

    Returns:
        The expression, or None if it uses constructs outside the supported fragment
    """
    if isinstance(node, URIRef):
        return NamedClass(node)
    if not isinstance(node, BNode):
        return None

    members = graph.value(node, OWL.intersectionOf)
    if members is not None:
        operands = [read_expression(graph, item) for item in graph.items(members)]
        if not operands or any(operand is None for operand in operands):
            return None
        return intersection_of(operands)

    prop = graph.value(node, OWL.onProperty)
    filler = graph.value(node, OWL.someValuesFrom)
    if isinstance(prop, URIRef) and filler is not None:
        filler_expression = read_expression(graph, filler)
        if filler_expression is None:
            return None
        return SomeValuesFrom(prop, filler_expression)

    return None
