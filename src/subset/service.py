"""
High-level subset extraction service providing the public interface of the subset module.

This is the only public interface into the subset module. Seed collection,
gap-filling, dangling-class detection and materialization are private
implementation details.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence, Set, Union

from rdflib import Graph, URIRef

from ontology.store import OntologyStore, TOP_AND_BOTTOM
from reasoning.oracle import ReasoningOracle
from reasoning.structural import StructuralReasoner

from .closure import GapFiller
from .dangling import DanglingFilter
from .domain import SubsetConfig
from .materializer import SubsetMaterializer
from .seeds import QuerySeedSource, SeedCollector, SeedContext, TagSeedSource, TermSeedSource, resolve_tag

logger = logging.getLogger(__name__)


class SubsetService:
    """High-level interface for extracting ontology subsets."""

    def __init__(self,
                 store: OntologyStore,
                 oracle: Optional[ReasoningOracle] = None,
                 config: Optional[SubsetConfig] = None):
        """Initialize the subset service.

        Args:
            store: The ontology to extract subsets from
            oracle: Optional reasoner. If None, a StructuralReasoner is created on demand.
            config: Optional initial filter configuration
        """
        self.store = store
        self.config = config if config is not None else SubsetConfig()
        self._oracle = oracle
        self._structural: Dict[bool, StructuralReasoner] = {}

    # Configuration

    def configure(self,
                  fill_gaps: Optional[bool] = None,
                  exclude_dangling: Optional[bool] = None,
                  include_imports: Optional[bool] = None) -> "SubsetService":
        """Change the closure behaviour. Options left to None are unchanged."""
        update = {
            "fill_gaps": fill_gaps,
            "exclude_dangling": exclude_dangling,
            "include_imports": include_imports,
        }
        self.config = self.config.model_copy(update={k: v for k, v in update.items() if v is not None})
        return self

    def follow_property(self, property_iri: str) -> "SubsetService":
        """Follow the given object property, in addition to subsumption, when filling gaps."""
        self.config = self.config.model_copy(
            update={"follow_properties": self.config.follow_properties | {str(property_iri)}})
        return self

    def include_prefix(self, prefix: str) -> "SubsetService":
        """Only add classes in the given namespace when filling gaps."""
        self.config = self.config.model_copy(
            update={"include_prefixes": self.config.include_prefixes | {prefix}})
        return self

    def exclude_prefix(self, prefix: str) -> "SubsetService":
        """Never add classes in the given namespace when filling gaps."""
        self.config = self.config.model_copy(
            update={"exclude_prefixes": self.config.exclude_prefixes | {prefix}})
        return self

    def set_ontology_iri(self, ontology_iri: Optional[str]) -> "SubsetService":
        """Set the ontology IRI of extracted subsets."""
        self.config = self.config.model_copy(update={"ontology_iri": ontology_iri})
        return self

    def oracle(self, config: Optional[SubsetConfig] = None) -> ReasoningOracle:
        """Get the reasoner used for the given (or current) configuration."""
        if self._oracle is not None:
            return self._oracle
        include_imports = (config or self.config).include_imports
        if include_imports not in self._structural:
            self._structural[include_imports] = StructuralReasoner(self.store, include_imports)
        return self._structural[include_imports]

    # Seeds

    def resolve_tag(self, tag: str) -> Set[URIRef]:
        """Get the classes tagged with a subset, or an empty set if it is unknown."""
        return resolve_tag(self.store, tag, self.config.include_imports)

    def collect_seeds(self,
                      queries: Sequence[str] = (),
                      tags: Sequence[str] = (),
                      terms: Sequence[str] = (),
                      term_files: Sequence[Union[str, Path]] = (),
                      with_ancestors: bool = False) -> Set[URIRef]:
        """
        Build the initial subset from queries, subset tags and explicit terms.

        Raises:
            ConfigurationError: If an expression or identifier is malformed
            OracleUnavailableError: If a reasoner query fails
        """
        config = self.config
        collector = SeedCollector()
        if queries:
            collector.add_source(QuerySeedSource(queries, with_ancestors=with_ancestors))
        if tags:
            collector.add_source(TagSeedSource(tags))
        if terms or term_files:
            collector.add_source(TermSeedSource(terms, term_files))

        context = SeedContext(self.store, self.oracle(config), config.include_imports)
        return collector.collect(context)

    # Extraction

    def extract_nodes(self, seeds: Iterable[Union[str, URIRef]]) -> Set[URIRef]:
        """
        Compute the final class set of a subset, without materializing it.

        Seeds unknown to the ontology are silently dropped.
        """
        return self._extract_nodes(seeds, self.config)

    def _extract_nodes(self, seeds: Iterable[Union[str, URIRef]], config: SubsetConfig) -> Set[URIRef]:
        existing = set()
        for seed in seeds:
            iri = URIRef(seed)
            if iri in TOP_AND_BOTTOM:
                continue
            if self.store.contains_class(iri, config.include_imports):
                existing.add(iri)
            else:
                logger.debug("Ignoring unknown class %s", iri)

        logger.info("Creating ontology from initial subset of %d classes", len(existing))
        gap_filler = GapFiller(self.oracle(config), config, DanglingFilter(self.store))
        return gap_filler.fill(existing)

    def extract(self, seeds: Iterable[Union[str, URIRef]]) -> Graph:
        """
        Extract a subset as a standalone ontology.

        The configuration is read once, at the start of the extraction.

        Raises:
            OracleUnavailableError: If the reasoner fails; no partial subset is produced
        """
        config = self.config
        nodes = self._extract_nodes(seeds, config)
        materializer = SubsetMaterializer(self.store, config.include_imports)
        return materializer.materialize(nodes, config.ontology_iri)
