"""
Configuration models for subset extraction.

A SubsetConfig is immutable: every extraction run reads one snapshot of it,
and the service derives a new instance for each configuration change.
"""

from typing import FrozenSet, Iterable, Optional, Set

from pydantic import BaseModel, ConfigDict, Field
from rdflib import URIRef


class SubsetConfig(BaseModel):
    """Filter configuration for one extraction run."""

    model_config = ConfigDict(frozen=True)

    # Closure behaviour
    fill_gaps: bool = Field(default=False, description="Add intermediate ancestors to preserve the hierarchy")
    exclude_dangling: bool = Field(default=True, description="Do not add dangling classes when filling gaps")
    include_imports: bool = Field(default=True, description="Include content from imported modules")

    # Gap-filling filters
    follow_properties: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="Object properties followed in addition to subsumption (empty = subsumption only)"
    )
    include_prefixes: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="Only add ancestors whose IRI starts with one of these prefixes (empty = no restriction)"
    )
    exclude_prefixes: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="Never add ancestors whose IRI starts with one of these prefixes"
    )

    # Output
    ontology_iri: Optional[str] = Field(default=None, description="Ontology IRI of the extracted subset")

    def in_scope(self, iri: str) -> bool:
        """Check whether a class may be added by gap-filling according to the namespace filters."""
        iri = str(iri)
        if any(iri.startswith(prefix) for prefix in self.exclude_prefixes):
            return False
        if not self.include_prefixes:
            return True
        return any(iri.startswith(prefix) for prefix in self.include_prefixes)

    def filter_in_scope(self, iris: Iterable[URIRef]) -> Set[URIRef]:
        """Keep only the IRIs that pass the namespace filters."""
        return {iri for iri in iris if self.in_scope(iri)}

    def followed_properties(self) -> Set[URIRef]:
        """Get the followed properties as IRIs."""
        return {URIRef(prop) for prop in self.follow_properties}
