"""
Materialization of a subset as a standalone ontology.
"""

import logging
from typing import Iterable, Optional, Set

from rdflib import BNode, Graph, URIRef, RDF, OWL

from ontology.store import OntologyStore

logger = logging.getLogger(__name__)


def subset_classes(graph: Graph) -> Set[URIRef]:
    """Get the classes declared in a materialized subset."""
    return {s for s in graph.subjects(RDF.type, OWL.Class) if isinstance(s, URIRef)}


class SubsetMaterializer:
    """Copies everything said about a set of classes into a new graph."""

    def __init__(self, store: OntologyStore, include_imports: bool = True):
        self.store = store
        self.include_imports = include_imports

    def materialize(self, nodes: Iterable[URIRef], ontology_iri: Optional[str] = None) -> Graph:
        """
        Build the subset ontology.

        For each class, the output contains its declaration, every triple where
        it is the subject together with the blank nodes those triples use
        (restrictions, lists), the owl:equivalentClass axioms where it is the
        object, and the annotations of its reified axioms.
        References to classes outside the subset are kept as they are.

        Args:
            nodes: The final set of classes
            ontology_iri: IRI of the new ontology; a fresh identity is used if None

        Returns:
            A new graph; the source store is left untouched
        """
        source = self.store.graph(self.include_imports)

        if ontology_iri:
            subset = Graph(identifier=URIRef(ontology_iri))
            subset.add((URIRef(ontology_iri), RDF.type, OWL.Ontology))
        else:
            subset = Graph()

        for prefix, namespace in self.store.namespaces():
            subset.namespace_manager.bind(prefix, namespace, override=True)

        count = 0
        for node in sorted(set(nodes)):
            subset.add((node, RDF.type, OWL.Class))
            subset += source.cbd(node)
            for axiom in source.subjects(OWL.annotatedSource, node):
                if isinstance(axiom, BNode):
                    subset += source.cbd(axiom)
            # Equivalence stated on the other side also defines the node
            for equivalent in source.subjects(OWL.equivalentClass, node):
                subset.add((equivalent, OWL.equivalentClass, node))
                if isinstance(equivalent, BNode):
                    subset += source.cbd(equivalent)
            count += 1

        logger.info("Materialized subset of %d classes (%d triples)", count, len(subset))
        return subset
