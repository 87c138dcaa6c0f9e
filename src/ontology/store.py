"""
In-memory RDF store for the ontology a subset is extracted from.

The store keeps the local ontology and its imported modules as separate rdflib
graphs, so that every lookup can be scoped either to the local content or to
the whole imports closure.
"""

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple, Union

from rdflib import Graph, Literal, Namespace, URIRef, RDF, RDFS, OWL, XSD
from rdflib.term import Node

from .domain import OntologyNode, OntologyStats, Triple

logger = logging.getLogger(__name__)

OBO = Namespace("http://purl.obolibrary.org/obo/")
OBO_IN_OWL = Namespace("http://www.geneontology.org/formats/oboInOwl#")
IN_SUBSET = OBO_IN_OWL.inSubset

# Predicates that make a triple a logical axiom about its subject
LOGICAL_PREDICATES = frozenset([
    RDFS.subClassOf,
    OWL.equivalentClass,
    OWL.disjointWith,
    OWL.disjointUnionOf,
    OWL.hasKey,
    OWL.intersectionOf,
    OWL.unionOf,
    OWL.complementOf,
    OWL.oneOf,
])

# Predicates whose subject and object are both in class position
CLASS_AXIOM_PREDICATES = (RDFS.subClassOf, OWL.equivalentClass, OWL.disjointWith)

# Predicates whose object is in class position
CLASS_FILLER_PREDICATES = (OWL.someValuesFrom, OWL.allValuesFrom, OWL.onClass, OWL.complementOf)

# Predicates whose object is an RDF list of class expressions
CLASS_LIST_PREDICATES = (OWL.intersectionOf, OWL.unionOf, OWL.disjointUnionOf, OWL.members)

DECLARATION_TYPES = frozenset([OWL.Class, RDFS.Class])

# Reserved classes never treated as ordinary subset members
TOP_AND_BOTTOM = frozenset([OWL.Thing, OWL.Nothing])

_OBO_CURIE = re.compile(r"^([A-Za-z][A-Za-z0-9_]*):([A-Za-z0-9_]+)$")


def local_name(iri: Node) -> str:
    """Return the fragment or last path segment of an IRI."""
    text = str(iri)
    for separator in ("#", "/"):
        if separator in text:
            text = text.rsplit(separator, 1)[1]
            break
    return text


class OntologyStore:
    """Local ontology graph plus its imports closure."""

    def __init__(self, graph: Optional[Graph] = None, imports: Optional[List[Graph]] = None):
        """Initialize the store.

        Args:
            graph: The local ontology. If None, an empty graph is created.
            imports: Graphs of the imported modules, in any order.
        """
        self.local_graph = graph if graph is not None else Graph()
        self.imported_graphs: List[Graph] = list(imports or [])

        # Derived views, computed lazily; the graphs are not expected to change
        self._closure_graph: Optional[Graph] = None
        self._classes: Dict[bool, Set[URIRef]] = {}
        self._labels: Dict[bool, Dict[str, Set[URIRef]]] = {}

    @classmethod
    def load(cls,
             source: Union[str, Path],
             resolve_imports: bool = True,
             catalog: Optional[Dict[str, str]] = None,
             format: Optional[str] = None) -> "OntologyStore":
        """Parse an ontology file and, optionally, the modules it imports.

        Args:
            source: Path or URL of the ontology document
            resolve_imports: Whether to follow owl:imports declarations
            catalog: Optional mapping from import IRIs to local locations
            format: rdflib parser name; guessed from the file extension if None

        Returns:
            A new OntologyStore
        """
        graph = Graph()
        graph.parse(str(source), format=format)
        logger.info("Loaded %d triples from %s", len(graph), source)

        imports: List[Graph] = []
        if resolve_imports:
            imports = cls._load_imports(graph, catalog or {})
        return cls(graph, imports)

    @staticmethod
    def _load_imports(graph: Graph, catalog: Dict[str, str]) -> List[Graph]:
        """Recursively load the imports closure of a graph."""
        loaded: List[Graph] = []
        seen: Set[str] = set()
        pending = [str(iri) for iri in graph.objects(None, OWL.imports)]

        while pending:
            iri = pending.pop()
            if iri in seen:
                continue
            seen.add(iri)

            location = catalog.get(iri, iri)
            imported = Graph()
            try:
                imported.parse(location)
            except Exception as e:
                logger.warning("Could not load imported ontology %s: %s", iri, e)
                continue

            logger.debug("Loaded import %s (%d triples)", iri, len(imported))
            loaded.append(imported)
            pending.extend(str(sub) for sub in imported.objects(None, OWL.imports))

        return loaded

    def graph(self, include_imports: bool = True) -> Graph:
        """Get the graph to query, either local-only or the whole imports closure."""
        if not include_imports or not self.imported_graphs:
            return self.local_graph

        if self._closure_graph is None:
            closure = Graph()
            for prefix, namespace in self.local_graph.namespaces():
                closure.bind(prefix, namespace)
            for part in [self.local_graph] + self.imported_graphs:
                closure += part
            self._closure_graph = closure
        return self._closure_graph

    def namespaces(self) -> List[Tuple[str, URIRef]]:
        """Get the prefix bindings of the local ontology."""
        return list(self.local_graph.namespaces())

    def classes(self, include_imports: bool = True) -> Set[URIRef]:
        """Get all named classes in the signature of the ontology.

        A class is in the signature if it is declared, or if it is used in a
        class position of some axiom or class expression.
        """
        cached = self._classes.get(include_imports)
        if cached is not None:
            return cached

        graph = self.graph(include_imports)
        classes: Set[URIRef] = set()

        for declaration_type in DECLARATION_TYPES:
            classes.update(graph.subjects(RDF.type, declaration_type))

        for predicate in CLASS_AXIOM_PREDICATES:
            for subject, obj in graph.subject_objects(predicate):
                classes.add(subject)
                classes.add(obj)

        for predicate in CLASS_FILLER_PREDICATES:
            classes.update(graph.objects(None, predicate))

        for predicate in CLASS_LIST_PREDICATES:
            for collection in graph.objects(None, predicate):
                classes.update(graph.items(collection))

        # Data ranges share filler positions with class expressions
        classes = {
            c for c in classes
            if isinstance(c, URIRef) and not c.startswith(str(XSD)) and c != RDFS.Literal
        }
        self._classes[include_imports] = classes
        return classes

    def object_properties(self, include_imports: bool = True) -> Set[URIRef]:
        """Get object properties, either declared or used in restrictions."""
        graph = self.graph(include_imports)
        properties = set(graph.subjects(RDF.type, OWL.ObjectProperty))
        properties.update(graph.objects(None, OWL.onProperty))
        return {p for p in properties if isinstance(p, URIRef)}

    def contains_class(self, iri: URIRef, include_imports: bool = True) -> bool:
        """Check whether a class is in the signature of the ontology."""
        return iri in self.classes(include_imports)

    def get_node(self, iri: URIRef, include_imports: bool = True) -> Optional[OntologyNode]:
        """Retrieve a class together with its defining and annotation statements.

        Returns:
            OntologyNode or None if the class is not in the signature
        """
        if not self.contains_class(iri, include_imports):
            return None

        graph = self.graph(include_imports)
        defining: List[Triple] = []
        annotations: List[Triple] = []

        for predicate, obj in graph.predicate_objects(iri):
            if predicate == RDF.type and obj in DECLARATION_TYPES:
                continue
            if predicate in LOGICAL_PREDICATES or predicate == RDF.type:
                defining.append((iri, predicate, obj))
            else:
                annotations.append((iri, predicate, obj))

        # Equivalence is symmetric, so it defines the object class as well
        for subject in graph.subjects(OWL.equivalentClass, iri):
            if subject != iri:
                defining.append((subject, OWL.equivalentClass, iri))

        return OntologyNode(
            iri=iri,
            defining_statements=defining,
            annotation_statements=annotations,
            obsolete=self.is_obsolete(iri, include_imports),
        )

    def annotation_statements(self, iri: URIRef, include_imports: bool = False) -> List[Triple]:
        """Get the annotation assertions about a class."""
        graph = self.graph(include_imports)
        return [
            (iri, predicate, obj)
            for predicate, obj in graph.predicate_objects(iri)
            if predicate not in LOGICAL_PREDICATES and predicate != RDF.type
        ]

    def is_obsolete(self, iri: URIRef, include_imports: bool = True) -> bool:
        """Check whether a class is marked as deprecated with a boolean literal 'true'."""
        for value in self.graph(include_imports).objects(iri, OWL.deprecated):
            if isinstance(value, Literal) and value.datatype == XSD.boolean and str(value) == "true":
                return True
        return False

    def tags(self, include_imports: bool = True) -> Set[URIRef]:
        """Get all subset IRIs used as oboInOwl:inSubset values."""
        return {
            tag for tag in self.graph(include_imports).objects(None, IN_SUBSET)
            if isinstance(tag, URIRef)
        }

    def tag_members(self, tag: URIRef, include_imports: bool = True) -> Set[URIRef]:
        """Get the classes tagged with the given subset IRI."""
        return {
            member for member in self.graph(include_imports).subjects(IN_SUBSET, tag)
            if isinstance(member, URIRef)
        }

    def find_tags(self, name: str, include_imports: bool = True) -> Set[URIRef]:
        """Find subset IRIs by their short name or their label."""
        graph = self.graph(include_imports)
        found = set()
        for tag in self.tags(include_imports):
            if local_name(tag) == name:
                found.add(tag)
            elif any(str(label) == name for label in graph.objects(tag, RDFS.label)):
                found.add(tag)
        return found

    def find_by_label(self, label: str, include_imports: bool = True) -> Set[URIRef]:
        """Find entities whose rdfs:label is exactly the given text."""
        index = self._labels.get(include_imports)
        if index is None:
            index = {}
            for subject, value in self.graph(include_imports).subject_objects(RDFS.label):
                if isinstance(subject, URIRef):
                    index.setdefault(str(value), set()).add(subject)
            self._labels[include_imports] = index
        return index.get(label, set())

    def expand_curie(self, text: str) -> Optional[URIRef]:
        """Convert a full IRI or a CURIE to a URIRef.

        CURIEs are expanded with the prefixes bound in the local ontology. An
        unbound prefix in an OBO-style identifier (e.g. ``GO:0008150``) is
        expanded to the OBO PURL namespace.

        Returns:
            The IRI, or None if the text is not an IRI nor a CURIE
        """
        text = text.strip()
        if not text:
            return None
        if text.startswith("<") and text.endswith(">"):
            return URIRef(text[1:-1])
        if re.match(r"^(https?|urn|file|ftp):", text):
            return URIRef(text)
        if ":" not in text or " " in text:
            return None

        prefix, local = text.split(":", 1)
        namespace = dict(self.local_graph.namespaces()).get(prefix)
        if namespace is not None:
            return URIRef(str(namespace) + local)

        match = _OBO_CURIE.match(text)
        if match:
            return OBO[f"{match.group(1)}_{match.group(2)}"]
        return None

    def get_stats(self) -> OntologyStats:
        """Get basic statistics about the ontology."""
        classes = self.classes(include_imports=True)
        return OntologyStats(
            total_classes=len(classes),
            total_triples=len(self.graph(include_imports=True)),
            imported_graphs=len(self.imported_graphs),
            obsolete_classes=sum(1 for c in classes if self.is_obsolete(c)),
        )
