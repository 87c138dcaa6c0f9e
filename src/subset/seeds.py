"""
Collection of the initial subset from independent seed sources.

Three kinds of sources are supported, each optional:
- QuerySeedSource: results of class expression queries against the reasoner
- TagSeedSource: classes tagged with a named subset (oboInOwl:inSubset)
- TermSeedSource: classes listed explicitly, inline or in term files

Every source is prepared (expressions parsed, term files read) before any of
them is collected, so that configuration errors surface before extraction.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set, Union

from rdflib import URIRef

from ontology.errors import ConfigurationError
from ontology.store import OntologyStore, TOP_AND_BOTTOM
from reasoning.expressions import ClassExpression, NamedClass
from reasoning.oracle import ReasoningOracle
from reasoning.parser import ExpressionParser

logger = logging.getLogger(__name__)


@dataclass
class SeedContext:
    """What seed sources need to resolve their seeds."""

    store: OntologyStore
    oracle: ReasoningOracle
    include_imports: bool = True

    def parser(self) -> ExpressionParser:
        return ExpressionParser(self.store, self.include_imports)


def add_to_subset(subset: Set[URIRef], additions: Iterable[URIRef], message: str) -> None:
    """Add classes to a subset, never adding owl:Thing nor owl:Nothing."""
    for addition in additions:
        if addition not in TOP_AND_BOTTOM:
            subset.add(addition)
            logger.debug(message, addition)


def resolve_tag(store: OntologyStore, tag: str, include_imports: bool = True) -> Set[URIRef]:
    """
    Get the classes tagged with a subset, given its IRI, CURIE or name.

    Returns:
        The tagged classes; an empty set if the subset is unknown or empty
    """
    iri = store.expand_curie(tag)
    tag_iris = {iri} if iri is not None else store.find_tags(tag, include_imports)

    members: Set[URIRef] = set()
    for tag_iri in tag_iris:
        members.update(store.tag_members(tag_iri, include_imports))

    if not members:
        logger.debug("Subset %s has no members", tag)
    return members


def read_term_file(path: Union[str, Path]) -> List[str]:
    """
    Read identifiers from a term file, one per line.

    Blank lines and comments (starting with '#') are ignored, as is anything
    after the first whitespace on a line.

    Raises:
        ConfigurationError: If the file cannot be read
    """
    try:
        lines = Path(path).read_text(encoding="utf-8").splitlines()
    except OSError as e:
        raise ConfigurationError(f"Cannot read term file {path}: {e}") from e

    terms = []
    for line in lines:
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        terms.append(line.split()[0])
    return terms


class SeedSource(ABC):
    """A source of initial subset members."""

    def prepare(self, context: SeedContext) -> None:
        """
        Validate the source configuration.

        Raises:
            ConfigurationError: If the source configuration is invalid
        """
        pass

    @abstractmethod
    def collect(self, context: SeedContext) -> Set[URIRef]:
        """
        Get the classes this source contributes.

        Raises:
            OracleUnavailableError: If a reasoner query fails
        """
        pass


class QuerySeedSource(SeedSource):
    """Classes retrieved by class expression queries."""

    def __init__(self, expressions: Sequence[str], with_ancestors: bool = False, direct: bool = False):
        """
        Args:
            expressions: Class expressions in Manchester-like syntax
            with_ancestors: Also include the super-classes of each expression
            direct: Only include direct sub-classes instead of all descendants
        """
        self.expressions = list(expressions)
        self.with_ancestors = with_ancestors
        self.direct = direct
        self._parsed: Optional[List[ClassExpression]] = None

    def prepare(self, context: SeedContext) -> None:
        parser = context.parser()
        self._parsed = [parser.parse(expression) for expression in self.expressions]

    def collect(self, context: SeedContext) -> Set[URIRef]:
        if self._parsed is None:
            self.prepare(context)

        oracle = context.oracle
        subset: Set[URIRef] = set()
        for expression in self._parsed:
            if isinstance(expression, NamedClass):
                add_to_subset(subset, [expression.iri], "Adding queried class %s")
            add_to_subset(subset, oracle.sub_classes(expression, direct=self.direct), "Adding subclass %s")
            add_to_subset(subset, oracle.equivalent_classes(expression), "Adding equivalent class %s")
            if self.with_ancestors:
                add_to_subset(subset, oracle.super_classes(expression, direct=False), "Adding superclass %s")
        return subset


class TagSeedSource(SeedSource):
    """Classes tagged with one of the given subsets."""

    def __init__(self, tags: Sequence[str]):
        self.tags = list(tags)

    def collect(self, context: SeedContext) -> Set[URIRef]:
        subset: Set[URIRef] = set()
        for tag in self.tags:
            add_to_subset(subset, resolve_tag(context.store, tag, context.include_imports), "Adding tagged class %s")
        return subset


class TermSeedSource(SeedSource):
    """Classes listed explicitly, inline or in term files."""

    def __init__(self, terms: Sequence[str] = (), term_files: Sequence[Union[str, Path]] = ()):
        self.terms = list(terms)
        self.term_files = list(term_files)
        self._iris: Optional[Set[URIRef]] = None

    def prepare(self, context: SeedContext) -> None:
        identifiers = list(self.terms)
        for term_file in self.term_files:
            identifiers.extend(read_term_file(term_file))

        iris = set()
        for identifier in identifiers:
            iri = context.store.expand_curie(identifier)
            if iri is None:
                raise ConfigurationError(f"Invalid term identifier: {identifier}")
            iris.add(iri)
        self._iris = iris

    def collect(self, context: SeedContext) -> Set[URIRef]:
        if self._iris is None:
            self.prepare(context)

        subset: Set[URIRef] = set()
        for iri in self._iris:
            if context.store.contains_class(iri, context.include_imports):
                add_to_subset(subset, [iri], "Adding selected class %s")
            else:
                logger.debug("Ignoring unknown class %s", iri)
        return subset


class SeedCollector:
    """Merges the contributions of several seed sources."""

    def __init__(self, sources: Optional[List[SeedSource]] = None):
        self.sources: List[SeedSource] = list(sources or [])

    def add_source(self, source: SeedSource) -> "SeedCollector":
        self.sources.append(source)
        return self

    def collect(self, context: SeedContext) -> Set[URIRef]:
        """
        Prepare every source, then merge their contributions.

        Raises:
            ConfigurationError: If any source is misconfigured; nothing is collected then
            OracleUnavailableError: If a reasoner query fails
        """
        for source in self.sources:
            source.prepare(context)

        subset: Set[URIRef] = set()
        for source in self.sources:
            subset.update(source.collect(context))
        return subset
