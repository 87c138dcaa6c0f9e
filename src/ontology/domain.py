"""
Domain models for the ontology module.

These models represent the classes of a loaded ontology as seen by the
subset extraction engine: a class is identified by its IRI and carries the
statements that define and annotate it.
"""

from dataclasses import dataclass, field
from typing import List, Tuple
from rdflib import URIRef
from rdflib.term import Node


Triple = Tuple[Node, Node, Node]


@dataclass
class OntologyNode:
    """Represents a class of the ontology with the statements attached to it."""

    iri: URIRef
    defining_statements: List[Triple] = field(default_factory=list)    # logical axioms (subClassOf, equivalentClass, ...)
    annotation_statements: List[Triple] = field(default_factory=list)  # labels, definitions, xrefs, subset tags
    obsolete: bool = False                                              # owl:deprecated "true"^^xsd:boolean


@dataclass
class OntologyStats:
    """Statistics about the ontology content."""

    total_classes: int
    total_triples: int
    imported_graphs: int
    obsolete_classes: int
