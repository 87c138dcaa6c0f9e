"""
Tests for the command-line interface.
"""

import argparse
import logging

import pytest
from rdflib import Graph, Namespace, OWL, RDF, URIRef

from ontology import OntologyStore
from ontology_subset_cli import (DEFAULT_BASE_PREFIXES, base_prefixes_from_env, describe, main, output_format,
                                 str_to_bool)

EX = Namespace("http://example.org/")

ONTOLOGY_TTL = """
@prefix ex: <http://example.org/> .
@prefix owl: <http://www.w3.org/2002/07/owl#> .
@prefix rdfs: <http://www.w3.org/2000/01/rdf-schema#> .
@prefix oboInOwl: <http://www.geneontology.org/formats/oboInOwl#> .

ex:Root a owl:Class ; rdfs:label "root" .
ex:Mid a owl:Class ; rdfs:label "mid" ; rdfs:subClassOf ex:Root .
ex:Leaf a owl:Class ; rdfs:label "leaf" ; rdfs:subClassOf ex:Mid ; oboInOwl:inSubset ex:slim .
ex:Orphan a owl:Class ; rdfs:label "orphan" .
"""

UPPER_TTL = """
@prefix owl: <http://www.w3.org/2002/07/owl#> .
<http://example.org/Root> a owl:Class .
"""


@pytest.fixture
def ontology_file(tmp_path):
    path = tmp_path / "ontology.ttl"
    path.write_text(ONTOLOGY_TTL, encoding="utf-8")
    return path


@pytest.fixture
def upper_file(tmp_path):
    path = tmp_path / "upper.ttl"
    path.write_text(UPPER_TTL, encoding="utf-8")
    return path


def read_classes(path):
    graph = Graph()
    graph.parse(str(path), format="turtle")
    return set(graph.subjects(RDF.type, OWL.Class))


class TestHelpers:
    """Test cases for option parsing helpers."""

    def test_str_to_bool(self):
        assert str_to_bool("true") is True
        assert str_to_bool("False") is False
        with pytest.raises(argparse.ArgumentTypeError):
            str_to_bool("maybe")

    def test_output_format(self):
        assert output_format("slim.ttl", None) == "turtle"
        assert output_format("slim.owl", None) == "xml"
        assert output_format("slim.owl", "nt") == "nt"
        assert output_format(None, None) == "turtle"

    def test_base_prefixes_from_env(self, monkeypatch):
        monkeypatch.delenv("ONTOLOGY_BASE_PREFIXES", raising=False)
        assert base_prefixes_from_env() == list(DEFAULT_BASE_PREFIXES)
        monkeypatch.setenv("ONTOLOGY_BASE_PREFIXES", "http://a.org/ http://b.org/")
        assert base_prefixes_from_env() == ["http://a.org/", "http://b.org/"]

    def test_describe(self, ontology_file):
        summary = describe(OntologyStore.load(str(ontology_file)), "ontology.ttl")
        assert summary == ("ontology.ttl: 4 classes, 11 triples, "
                           "0 imported module(s), 0 obsolete class(es)")


class TestSubsetCommand:
    """Test cases for the subset command."""

    def test_terms_with_gap_filling(self, ontology_file, tmp_path):
        output = tmp_path / "slim.ttl"
        status = main(["subset", "--input", str(ontology_file), "-t", "ex:Leaf",
                       "--fill-gaps", "true", "--output", str(output)])
        assert status == 0
        assert read_classes(output) == {EX.Leaf, EX.Mid, EX.Root}

    def test_subset_tag_without_gap_filling(self, ontology_file, tmp_path):
        output = tmp_path / "slim.ttl"
        status = main(["subset", "--input", str(ontology_file), "--subset", "slim",
                       "--ontology-iri", "http://example.org/slim", "--output", str(output)])
        assert status == 0

        graph = Graph()
        graph.parse(str(output), format="turtle")
        assert set(graph.subjects(RDF.type, OWL.Class)) == {EX.Leaf}
        assert (URIRef("http://example.org/slim"), RDF.type, OWL.Ontology) in graph

    def test_print_to_stdout(self, ontology_file, capsys):
        assert main(["subset", "--input", str(ontology_file), "-q", "ex:Mid"]) == 0
        assert "Leaf" in capsys.readouterr().out

    def test_term_file(self, ontology_file, tmp_path):
        terms = tmp_path / "terms.txt"
        terms.write_text("ex:Orphan\n# ex:Leaf\n", encoding="utf-8")
        output = tmp_path / "slim.ttl"
        assert main(["subset", "--input", str(ontology_file), "-T", str(terms), "--output", str(output)]) == 0
        assert read_classes(output) == {EX.Orphan}

    def test_malformed_query(self, ontology_file, capsys):
        status = main(["subset", "--input", str(ontology_file), "-q", "ex:Unknown"])
        assert status == 1
        assert "Error:" in capsys.readouterr().err

    def test_invalid_boolean(self, ontology_file):
        with pytest.raises(SystemExit):
            main(["subset", "--input", str(ontology_file), "--fill-gaps", "perhaps"])

    def test_format_has_no_short_option(self, ontology_file):
        with pytest.raises(SystemExit):
            main(["subset", "--input", str(ontology_file), "-t", "ex:Leaf", "-f", "nt"])

    def test_format_option(self, ontology_file, capsys):
        assert main(["subset", "--input", str(ontology_file), "-t", "ex:Leaf", "--format", "nt"]) == 0
        assert "<http://example.org/Leaf> <http://www.w3.org/1999/02/22-rdf-syntax-ns#type>" in capsys.readouterr().out

    def test_loaded_ontology_summarized(self, ontology_file, caplog):
        with caplog.at_level(logging.INFO):
            assert main(["subset", "--input", str(ontology_file), "-t", "ex:Leaf"]) == 0
        assert "4 classes" in caplog.text


class TestValidateCommand:
    """Test cases for the validate command."""

    def test_misaligned(self, ontology_file, upper_file, tmp_path):
        report = tmp_path / "report.txt"
        status = main(["validate", "--input", str(ontology_file), "--upper-ontology", str(upper_file),
                       "--base-iri", "http://example.org/", "--report-output", str(report)])
        assert status == 1
        assert report.read_text(encoding="utf-8") == "http://example.org/Orphan\n"

    def test_no_fail(self, ontology_file, upper_file):
        status = main(["validate", "--input", str(ontology_file), "--upper-ontology", str(upper_file),
                       "--base-iri", "http://example.org/", "--fail", "false"])
        assert status == 0

    def test_aligned(self, ontology_file, tmp_path):
        upper = tmp_path / "upper.ttl"
        upper.write_text(UPPER_TTL + "<http://example.org/Orphan> a owl:Class .\n", encoding="utf-8")
        status = main(["validate", "--input", str(ontology_file), "--upper-ontology", str(upper),
                       "--base-iri", "http://example.org/"])
        assert status == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
