"""
Structural reasoner answering subsumption queries from told axioms.

The reasoner indexes the rdfs:subClassOf, owl:equivalentClass and
rdfs:subPropertyOf axioms of an ontology once, and answers queries by walking
the told hierarchy transitively. Existential restrictions and conjunctions are
compared structurally, which is enough to answer queries about EL-style
ontologies without a full description logic reasoner.
"""

import logging
from collections import defaultdict
from typing import Dict, FrozenSet, Iterable, Optional, Set

from rdflib import RDF, RDFS, OWL, URIRef

from ontology.errors import OracleUnavailableError
from ontology.store import OntologyStore, TOP_AND_BOTTOM

from .expressions import ClassExpression, Intersection, NamedClass, SomeValuesFrom, conjuncts, read_expression
from .oracle import Queryable, ReasoningOracle, as_expression

logger = logging.getLogger(__name__)


class StructuralReasoner(ReasoningOracle):
    """Told-axiom reasoner over an OntologyStore."""

    def __init__(self, store: OntologyStore, include_imports: bool = True):
        """
        Initialize the reasoner. Indexing is deferred until the first query.

        Args:
            store: The ontology to reason over
            include_imports: Whether axioms from imported modules are taken into account
        """
        self.store = store
        self.include_imports = include_imports

        self._told: Optional[Dict[URIRef, Set[ClassExpression]]] = None
        self._definitions: Dict[URIRef, Set[ClassExpression]] = defaultdict(set)
        self._groups: Dict[URIRef, FrozenSet[URIRef]] = {}
        self._sub_properties: Dict[URIRef, Set[URIRef]] = defaultdict(set)
        self._ancestor_cache: Dict[URIRef, FrozenSet[URIRef]] = {}

    def _index(self) -> Dict[URIRef, Set[ClassExpression]]:
        """Build the told hierarchy, once."""
        if self._told is not None:
            return self._told

        graph = self.store.graph(self.include_imports)
        inconsistent = next(iter(graph.subjects(RDF.type, OWL.Nothing)), None)
        if inconsistent is not None:
            raise OracleUnavailableError(f"Ontology is inconsistent: {inconsistent} is an instance of owl:Nothing")

        told: Dict[URIRef, Set[ClassExpression]] = defaultdict(set)
        equivalences: Dict[URIRef, Set[URIRef]] = defaultdict(set)
        skipped = 0

        for sub, sup in graph.subject_objects(RDFS.subClassOf):
            if not isinstance(sub, URIRef):
                continue
            expression = read_expression(graph, sup)
            if expression is None:
                skipped += 1
                continue
            told[sub].update(conjuncts(expression))

        for left, right in graph.subject_objects(OWL.equivalentClass):
            if isinstance(left, URIRef) and isinstance(right, URIRef):
                equivalences[left].add(right)
                equivalences[right].add(left)
                continue
            for named, other in ((left, right), (right, left)):
                if not isinstance(named, URIRef):
                    continue
                definition = read_expression(graph, other)
                if definition is None:
                    skipped += 1
                    continue
                self._definitions[named].add(definition)
                told[named].update(conjuncts(definition))

        self._groups = self._equivalence_groups(equivalences)

        for sub, sup in graph.subject_objects(RDFS.subPropertyOf):
            if isinstance(sub, URIRef) and isinstance(sup, URIRef):
                self._sub_properties[sup].add(sub)

        if skipped:
            logger.debug("Ignored %d axioms outside the supported expression fragment", skipped)
        logger.debug("Indexed told hierarchy of %d classes", len(told))

        self._told = told
        return told

    @staticmethod
    def _equivalence_groups(equivalences: Dict[URIRef, Set[URIRef]]) -> Dict[URIRef, FrozenSet[URIRef]]:
        """Compute the connected components of named equivalence axioms."""
        groups: Dict[URIRef, FrozenSet[URIRef]] = {}
        for start in equivalences:
            if start in groups:
                continue
            component = {start}
            stack = [start]
            while stack:
                for other in equivalences[stack.pop()]:
                    if other not in component:
                        component.add(other)
                        stack.append(other)
            frozen = frozenset(component)
            for member in component:
                groups[member] = frozen
        return groups

    def _group(self, iri: URIRef) -> FrozenSet[URIRef]:
        return self._groups.get(iri, frozenset([iri]))

    def _expand_properties(self, properties: Iterable[URIRef]) -> Set[URIRef]:
        """Get the given properties together with all their sub-properties."""
        self._index()
        expanded = set(properties)
        stack = list(expanded)
        while stack:
            for sub in self._sub_properties.get(stack.pop(), ()):
                if sub not in expanded:
                    expanded.add(sub)
                    stack.append(sub)
        return expanded

    def _walk(self, node: URIRef, properties: Set[URIRef]) -> Set[URIRef]:
        """Walk told super-expressions from a node, following subsumption and the given properties."""
        told = self._index()
        group = self._group(node)
        seen = set(group)
        stack = list(group)

        while stack:
            current = stack.pop()
            for expression in told.get(current, ()):
                if isinstance(expression, NamedClass):
                    targets = [expression.iri]
                elif isinstance(expression, SomeValuesFrom) and expression.property in properties:
                    targets = [c.iri for c in conjuncts(expression.filler) if isinstance(c, NamedClass)]
                else:
                    continue
                for target in targets:
                    for member in self._group(target):
                        if member not in seen:
                            seen.add(member)
                            stack.append(member)

        return seen - group

    def _named_ancestors(self, node: URIRef) -> FrozenSet[URIRef]:
        """Subsumption-only ancestors of a named class, cached."""
        cached = self._ancestor_cache.get(node)
        if cached is None:
            cached = frozenset(self._walk(node, set()))
            self._ancestor_cache[node] = cached
        return cached

    def ancestors(self, node: URIRef, properties: Iterable[URIRef] = ()) -> Set[URIRef]:
        properties = self._expand_properties(properties)
        if not properties:
            return set(self._named_ancestors(node))
        return self._walk(node, properties)

    def _subsumed_by(self, sub: ClassExpression, sup: ClassExpression,
                     visiting: FrozenSet[URIRef] = frozenset()) -> bool:
        """Structural subsumption test between two class expressions."""
        if isinstance(sup, Intersection):
            return all(self._subsumed_by(sub, operand, visiting) for operand in sup.operands)

        sub_conjuncts = conjuncts(sub)

        if isinstance(sup, NamedClass):
            if sup.iri == OWL.Thing:
                return True
            for conjunct in sub_conjuncts:
                if isinstance(conjunct, NamedClass):
                    if conjunct.iri == OWL.Nothing:
                        return True
                    if sup.iri in self._group(conjunct.iri) or sup.iri in self._named_ancestors(conjunct.iri):
                        return True
            # A defined class subsumes everything that satisfies its definition
            if sup.iri not in visiting:
                for definition in self._definitions.get(sup.iri, ()):
                    if self._subsumed_by(sub, definition, visiting | {sup.iri}):
                        return True
            return False

        # Existential restriction: look for a told restriction on a sub-property with a subsumed filler
        properties = self._expand_properties([sup.property])
        candidates: Set[ClassExpression] = set()
        told = self._index()
        for conjunct in sub_conjuncts:
            if isinstance(conjunct, SomeValuesFrom):
                candidates.add(conjunct)
            elif isinstance(conjunct, NamedClass):
                for current in self._group(conjunct.iri) | self._named_ancestors(conjunct.iri):
                    candidates.update(e for e in told.get(current, ()) if isinstance(e, SomeValuesFrom))

        return any(
            candidate.property in properties and self._subsumed_by(candidate.filler, sup.filler, visiting)
            for candidate in candidates
        )

    def _candidate_classes(self) -> Set[URIRef]:
        self._index()
        return self.store.classes(self.include_imports) - TOP_AND_BOTTOM

    def super_classes(self, query: Queryable, direct: bool = False) -> Set[URIRef]:
        expression = as_expression(query)
        if isinstance(expression, NamedClass) and expression.iri == OWL.Nothing:
            return set(self._candidate_classes()) | {OWL.Thing}

        equivalents = self.equivalent_classes(expression)
        result = {
            candidate for candidate in self._candidate_classes()
            if candidate not in equivalents and self._subsumed_by(expression, NamedClass(candidate))
        }
        if direct:
            result = {c for c in result if not any(c in self._named_ancestors(o) for o in result if o != c)}
            return result or ({OWL.Thing} if OWL.Thing not in equivalents else set())

        if OWL.Thing not in equivalents:
            result.add(OWL.Thing)
        return result

    def sub_classes(self, query: Queryable, direct: bool = False) -> Set[URIRef]:
        expression = as_expression(query)
        equivalents = self.equivalent_classes(expression)
        result = {
            candidate for candidate in self._candidate_classes()
            if candidate not in equivalents and self._subsumed_by(NamedClass(candidate), expression)
        }
        if direct:
            result = {c for c in result if not any(o in self._named_ancestors(c) for o in result if o != c)}
        return result

    def equivalent_classes(self, query: Queryable) -> Set[URIRef]:
        expression = as_expression(query)
        if isinstance(expression, NamedClass):
            self._index()
            return set(self._group(expression.iri))

        return {
            candidate for candidate in self._candidate_classes()
            if self._subsumed_by(NamedClass(candidate), expression)
            and self._subsumed_by(expression, NamedClass(candidate))
        }
