"""
Detection of dangling classes.

A class is dangling if it has no defining axioms (disjointness axioms and an
explicit "SubClassOf owl:Thing" do not count) and no annotations: it is
merely referenced by the ontology, never described.
"""

from typing import Dict

from rdflib import RDFS, OWL, URIRef

from ontology.store import OntologyStore


def is_dangling(store: OntologyStore, iri: URIRef) -> bool:
    """
    Check whether a class is dangling.

    Defining axioms are looked up in the whole imports closure, annotations only
    in the local ontology.
    """
    node = store.get_node(iri, include_imports=True)
    if node is not None:
        for _, predicate, obj in node.defining_statements:
            if predicate == OWL.disjointWith:
                continue
            if predicate == RDFS.subClassOf and obj == OWL.Thing:
                continue
            return False

    return not store.annotation_statements(iri, include_imports=False)


class DanglingFilter:
    """Memoizing dangling-class predicate, scoped to one extraction run."""

    def __init__(self, store: OntologyStore):
        self.store = store
        self._cache: Dict[URIRef, bool] = {}

    def __call__(self, iri: URIRef) -> bool:
        result = self._cache.get(iri)
        if result is None:
            result = is_dangling(self.store, iri)
            self._cache[iri] = result
        return result
