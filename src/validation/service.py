"""
Alignment validation against an upper-level ontology.

An ontology is aligned with an upper ontology if every one of its classes is
a subclass of one of the upper ontology's classes. Only the top-level
misaligned classes (whose only ancestor is owl:Thing) are reported, since
all their descendants are misaligned too.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from rdflib import Graph, OWL

from ontology.store import OntologyStore, TOP_AND_BOTTOM
from reasoning.oracle import ReasoningOracle
from reasoning.structural import StructuralReasoner
from subset.dangling import is_dangling

logger = logging.getLogger(__name__)


@dataclass
class AlignmentReport:
    """Outcome of an alignment check."""

    unaligned: List[str] = field(default_factory=list)  # sorted IRIs of top-level misaligned classes
    checked: int = 0                                     # number of classes checked

    @property
    def aligned(self) -> bool:
        return not self.unaligned

    def write(self, path: Union[str, Path]) -> None:
        """Write the misaligned IRIs, one per line. The file is written even if empty."""
        with open(path, "w", encoding="utf-8") as f:
            for iri in self.unaligned:
                f.write(iri)
                f.write("\n")


class AlignmentValidator:
    """Checks an ontology against an upper-level ontology."""

    def __init__(self,
                 upper: OntologyStore,
                 base_prefixes: Optional[Sequence[str]] = None,
                 ignore_dangling: bool = False,
                 reasoner_factory: Callable[[OntologyStore], ReasoningOracle] = StructuralReasoner):
        """
        Initialize the validator.

        Args:
            upper: The upper ontology
            base_prefixes: Only classes in these namespaces are checked (all classes if empty)
            ignore_dangling: Skip dangling classes
            reasoner_factory: Builds the reasoner over the merged ontologies
        """
        self.upper = upper
        self.base_prefixes = list(base_prefixes or [])
        self.ignore_dangling = ignore_dangling
        self.reasoner_factory = reasoner_factory

    def _in_base(self, iri: str) -> bool:
        if not self.base_prefixes:
            return True
        return any(iri.startswith(prefix) for prefix in self.base_prefixes)

    def validate(self, store: OntologyStore) -> AlignmentReport:
        """
        Check the alignment of an ontology.

        The ontology is merged into a copy of the upper ontology; neither input is modified.

        Raises:
            OracleUnavailableError: If the reasoner cannot classify the merged ontology
        """
        merged_graph = Graph()
        merged_graph += self.upper.graph(include_imports=True)
        merged_graph += store.graph(include_imports=True)
        merged = OntologyStore(merged_graph)
        reasoner = self.reasoner_factory(merged)

        upper_classes = self.upper.classes(include_imports=True) - {OWL.Thing}
        report = AlignmentReport()
        unaligned = set()

        for klass in merged.classes():
            if klass in TOP_AND_BOTTOM or klass in upper_classes or not self._in_base(str(klass)):
                continue
            if self.ignore_dangling and is_dangling(merged, klass):
                continue
            if merged.is_obsolete(klass):
                continue

            report.checked += 1
            ancestors = reasoner.ancestors(klass)
            if ancestors & upper_classes:
                continue
            # Report only top-level classes (whose only ancestor is owl:Thing)
            if ancestors <= {OWL.Thing}:
                unaligned.add(str(klass))

        report.unaligned = sorted(unaligned)
        if report.unaligned:
            logger.error("Ontology contains %d top-level unaligned class(es)", len(report.unaligned))
        return report
