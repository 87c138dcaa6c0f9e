"""
Tests for seed collection.
"""

from typing import Set

import pytest
from rdflib import Graph, Namespace, OWL, URIRef

from ontology.errors import ConfigurationError, OracleUnavailableError
from ontology.store import OntologyStore
from reasoning.structural import StructuralReasoner
from subset.seeds import (
    QuerySeedSource,
    SeedCollector,
    SeedContext,
    SeedSource,
    TagSeedSource,
    TermSeedSource,
    read_term_file,
    resolve_tag,
)

EX = Namespace("http://example.org/")

ONTOLOGY_TTL = """
@prefix ex: <http://example.org/> .
@prefix owl: <http://www.w3.org/2002/07/owl#> .
@prefix rdfs: <http://www.w3.org/2000/01/rdf-schema#> .
@prefix oboInOwl: <http://www.geneontology.org/formats/oboInOwl#> .

ex:Root a owl:Class ; rdfs:subClassOf owl:Thing ; rdfs:label "root" .
ex:Mid a owl:Class ; rdfs:subClassOf ex:Root ; rdfs:label "mid" ; oboInOwl:inSubset ex:slim .
ex:Leaf a owl:Class ; rdfs:subClassOf ex:Mid ; rdfs:label "leaf" ; oboInOwl:inSubset ex:slim .
ex:Other a owl:Class ; rdfs:label "other" ; oboInOwl:inSubset ex:other_slim .
ex:MidAlias a owl:Class ; owl:equivalentClass ex:Mid .

ex:slim rdfs:label "generic slim" .
"""


@pytest.fixture
def store():
    graph = Graph()
    graph.parse(data=ONTOLOGY_TTL, format="turtle")
    return OntologyStore(graph)


@pytest.fixture
def context(store):
    return SeedContext(store, StructuralReasoner(store))


class RecordingSource(SeedSource):
    """Seed source remembering whether it was collected."""

    def __init__(self):
        self.collected = False

    def collect(self, context: SeedContext) -> Set[URIRef]:
        self.collected = True
        return {EX.Other}


class TestReadTermFile:
    """Test cases for term files."""

    def test_read_terms(self, tmp_path):
        path = tmp_path / "terms.txt"
        path.write_text("# selected terms\nex:Leaf\n\n  ex:Mid   middle class\nex:Leaf\n", encoding="utf-8")
        assert read_term_file(path) == ["ex:Leaf", "ex:Mid", "ex:Leaf"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read term file"):
            read_term_file(tmp_path / "missing.txt")


class TestResolveTag:
    """Test cases for subset tag resolution."""

    def test_by_name(self, store):
        assert resolve_tag(store, "slim") == {EX.Mid, EX.Leaf}

    def test_by_label(self, store):
        assert resolve_tag(store, "generic slim") == {EX.Mid, EX.Leaf}

    def test_by_curie_and_iri(self, store):
        assert resolve_tag(store, "ex:slim") == {EX.Mid, EX.Leaf}
        assert resolve_tag(store, "http://example.org/other_slim") == {EX.Other}

    def test_unknown_tag(self, store):
        assert resolve_tag(store, "unknown") == set()
        assert resolve_tag(store, "ex:unknown") == set()


class TestSeedSources:
    """Test cases for individual seed sources."""

    def test_term_source(self, context, tmp_path):
        path = tmp_path / "terms.txt"
        path.write_text("ex:Root\nex:Missing\n", encoding="utf-8")
        source = TermSeedSource(["ex:Leaf", "http://example.org/Leaf"], [path])
        # Absent terms are dropped without an error
        assert source.collect(context) == {EX.Leaf, EX.Root}

    def test_term_source_never_adds_top(self, context):
        assert TermSeedSource(["owl:Thing"]).collect(context) == set()

    def test_invalid_term(self, context):
        with pytest.raises(ConfigurationError, match="Invalid term identifier"):
            TermSeedSource(["not a term"]).prepare(context)

    def test_tag_source(self, context):
        assert TagSeedSource(["slim", "other_slim", "unknown"]).collect(context) == {EX.Mid, EX.Leaf, EX.Other}

    def test_query_source(self, context):
        source = QuerySeedSource(["ex:Mid"])
        assert source.collect(context) == {EX.Mid, EX.MidAlias, EX.Leaf}

    def test_query_source_with_ancestors(self, context):
        source = QuerySeedSource(["leaf"], with_ancestors=True)
        result = source.collect(context)
        assert result == {EX.Leaf, EX.Mid, EX.MidAlias, EX.Root}
        assert OWL.Thing not in result

    def test_query_source_direct(self, context):
        source = QuerySeedSource(["ex:Root"], direct=True)
        assert source.collect(context) == {EX.Root, EX.Mid, EX.MidAlias}

    def test_query_on_thing_excludes_top(self, context):
        result = QuerySeedSource(["owl:Thing"]).collect(context)
        assert OWL.Thing not in result
        assert OWL.Nothing not in result
        assert EX.Leaf in result

    def test_malformed_query(self, context):
        with pytest.raises(ConfigurationError):
            QuerySeedSource(["ex:Mid and"]).prepare(context)


class TestSeedCollector:
    """Test cases for merging seed sources."""

    def test_union_of_sources(self, context):
        collector = SeedCollector()
        collector.add_source(TagSeedSource(["other_slim"])).add_source(TermSeedSource(["ex:Leaf"]))
        assert collector.collect(context) == {EX.Other, EX.Leaf}

    def test_empty_collector(self, context):
        assert SeedCollector().collect(context) == set()

    def test_configuration_errors_surface_before_collection(self, context):
        recording = RecordingSource()
        collector = SeedCollector([recording, QuerySeedSource(["ex:Unknown"])])
        with pytest.raises(ConfigurationError):
            collector.collect(context)
        assert not recording.collected

    def test_oracle_failure_propagates(self, store):
        class FailingReasoner(StructuralReasoner):
            def sub_classes(self, query, direct=False):
                raise OracleUnavailableError("reasoner crashed")

        context = SeedContext(store, FailingReasoner(store))
        with pytest.raises(OracleUnavailableError, match="reasoner crashed"):
            SeedCollector([QuerySeedSource(["ex:Mid"])]).collect(context)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
