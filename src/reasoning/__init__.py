"""
Reasoning Module

This module answers subsumption queries (super-classes, sub-classes,
equivalent classes, ancestors along selected properties) about an ontology.

Public Interface:
- ReasoningOracle: abstract interface consumed by the subset extraction engine
- StructuralReasoner: told-axiom implementation over an OntologyStore
- ExpressionParser: parser for Manchester-like class expressions
"""

from .expressions import ClassExpression, Intersection, NamedClass, SomeValuesFrom
from .oracle import ReasoningOracle
from .parser import ExpressionParser
from .structural import StructuralReasoner

__all__ = [
    "ReasoningOracle",
    "StructuralReasoner",
    "ExpressionParser",
    "ClassExpression",
    "NamedClass",
    "SomeValuesFrom",
    "Intersection",
]
