"""
Gap-filling closure of a subset.

When a subset is materialized in isolation, two members related only through
classes outside the subset would appear unrelated. Gap-filling prevents that
by adding the ancestors of every member, as long as they pass the namespace
filters and, optionally, are not dangling.
"""

import logging
from typing import Callable, Iterable, Optional, Set

from rdflib import URIRef

from ontology.store import TOP_AND_BOTTOM
from reasoning.oracle import ReasoningOracle

from .domain import SubsetConfig

logger = logging.getLogger(__name__)


class GapFiller:
    """Expands a subset with the in-scope ancestors of its members."""

    def __init__(self,
                 oracle: ReasoningOracle,
                 config: SubsetConfig,
                 is_dangling: Optional[Callable[[URIRef], bool]] = None):
        """
        Initialize the gap filler.

        Args:
            oracle: Reasoner providing the ancestors of each member
            config: Filter configuration of the current run
            is_dangling: Dangling-class predicate; required when config.exclude_dangling is set
        """
        if config.fill_gaps and config.exclude_dangling and is_dangling is None:
            raise ValueError("A dangling-class predicate is required to exclude dangling classes")
        self.oracle = oracle
        self.config = config
        self.is_dangling = is_dangling

    def fill(self, seeds: Iterable[URIRef]) -> Set[URIRef]:
        """
        Compute the closure of a subset.

        Every seed is kept. Ancestors are queried once per seed; since ancestor
        sets are transitive, ancestors added along the way are not re-queried.
        Out-of-scope ancestors are skipped without blocking the classes above them.

        Returns:
            A new set, superset of the seeds

        Raises:
            OracleUnavailableError: If the reasoner fails; no partial closure is returned
        """
        seeds = set(seeds) - TOP_AND_BOTTOM
        subset = set(seeds)
        if not self.config.fill_gaps:
            return subset

        properties = self.config.followed_properties()
        skipped_dangling = 0
        skipped_out_of_scope = 0

        for seed in sorted(seeds):
            candidates = self.oracle.ancestors(seed, properties) - subset - TOP_AND_BOTTOM
            in_scope = self.config.filter_in_scope(candidates)
            skipped_out_of_scope += len(candidates) - len(in_scope)

            for ancestor in sorted(in_scope):
                if self.config.exclude_dangling and self.is_dangling(ancestor):
                    logger.debug("Skipping dangling class %s", ancestor)
                    skipped_dangling += 1
                    continue
                subset.add(ancestor)
                logger.debug("Adding ancestor %s of %s", ancestor, seed)

        logger.info("Filled gaps with %d classes (%d out of scope, %d dangling skipped)",
                    len(subset) - len(seeds), skipped_out_of_scope, skipped_dangling)
        return subset
