"""
Tests for the structural reasoner.
"""

import pytest
from rdflib import Graph, Namespace, OWL

from ontology.errors import OracleUnavailableError
from ontology.store import OntologyStore
from reasoning.expressions import NamedClass, SomeValuesFrom
from reasoning.oracle import ReasoningOracle
from reasoning.structural import StructuralReasoner

EX = Namespace("http://example.org/")

ONTOLOGY_TTL = """
@prefix ex: <http://example.org/> .
@prefix owl: <http://www.w3.org/2002/07/owl#> .
@prefix rdfs: <http://www.w3.org/2000/01/rdf-schema#> .

ex:partOf a owl:ObjectProperty .
ex:directlyPartOf a owl:ObjectProperty ; rdfs:subPropertyOf ex:partOf .

ex:Root a owl:Class .
ex:Mid a owl:Class ; rdfs:subClassOf ex:Root .
ex:Leaf a owl:Class ; rdfs:subClassOf ex:Mid .
ex:LeafAlias a owl:Class ; rdfs:subClassOf ex:Mid .
ex:Leaf2 a owl:Class ; owl:equivalentClass ex:LeafAlias .

ex:Body a owl:Class ; rdfs:subClassOf ex:Root .
ex:Organ a owl:Class .
ex:Heart a owl:Class ;
    rdfs:subClassOf ex:Organ ,
        [ a owl:Restriction ; owl:onProperty ex:partOf ; owl:someValuesFrom ex:Body ] .
ex:Valve a owl:Class ;
    rdfs:subClassOf [ a owl:Restriction ; owl:onProperty ex:directlyPartOf ; owl:someValuesFrom ex:Heart ] .

ex:BodyOrgan a owl:Class ;
    owl:equivalentClass [
        a owl:Class ;
        owl:intersectionOf ( ex:Organ [ a owl:Restriction ; owl:onProperty ex:partOf ; owl:someValuesFrom ex:Body ] )
    ] .
"""


def create_reasoner(data: str = ONTOLOGY_TTL) -> StructuralReasoner:
    graph = Graph()
    graph.parse(data=data, format="turtle")
    return StructuralReasoner(OntologyStore(graph))


@pytest.fixture
def reasoner():
    return create_reasoner()


class TestAncestors:
    """Test cases for ancestor traversal used by gap-filling."""

    def test_subsumption_ancestors(self, reasoner):
        assert reasoner.ancestors(EX.Leaf) == {EX.Mid, EX.Root}
        assert reasoner.ancestors(EX.Root) == set()

    def test_restrictions_not_followed_by_default(self, reasoner):
        assert reasoner.ancestors(EX.Heart) == {EX.Organ}
        assert reasoner.ancestors(EX.Valve) == set()

    def test_followed_property(self, reasoner):
        # Subsumption stays traversable when a property is followed
        assert reasoner.ancestors(EX.Heart, [EX.partOf]) == {EX.Organ, EX.Body, EX.Root}

    def test_sub_properties_are_followed(self, reasoner):
        ancestors = reasoner.ancestors(EX.Valve, [EX.partOf])
        assert ancestors == {EX.Heart, EX.Organ, EX.Body, EX.Root}

    def test_sub_properties_followed_on_first_query(self):
        reasoner = create_reasoner()
        first = reasoner.ancestors(EX.Valve, [EX.partOf])
        second = reasoner.ancestors(EX.Valve, [EX.partOf])
        assert EX.Heart in first
        assert first == second

    def test_super_properties_are_not_followed(self, reasoner):
        assert reasoner.ancestors(EX.Heart, [EX.directlyPartOf]) == {EX.Organ}

    def test_equivalent_classes_share_ancestors(self, reasoner):
        assert reasoner.ancestors(EX.Leaf2) == {EX.Mid, EX.Root}
        assert EX.LeafAlias not in reasoner.ancestors(EX.Leaf2)


class TestSubsumptionQueries:
    """Test cases for the ReasoningOracle query interface."""

    def test_is_oracle(self, reasoner):
        assert isinstance(reasoner, ReasoningOracle)

    def test_sub_classes(self, reasoner):
        assert reasoner.sub_classes(EX.Root) == {EX.Mid, EX.Leaf, EX.LeafAlias, EX.Leaf2, EX.Body}

    def test_direct_sub_classes(self, reasoner):
        assert reasoner.sub_classes(EX.Root, direct=True) == {EX.Mid, EX.Body}

    def test_sub_classes_of_restriction(self, reasoner):
        expression = SomeValuesFrom(EX.partOf, NamedClass(EX.Body))
        assert reasoner.sub_classes(expression) == {EX.Heart, EX.BodyOrgan}

    def test_super_classes(self, reasoner):
        assert reasoner.super_classes(EX.Leaf) == {EX.Mid, EX.Root, OWL.Thing}
        assert reasoner.super_classes(EX.Leaf, direct=True) == {EX.Mid}
        assert reasoner.super_classes(EX.Root, direct=True) == {OWL.Thing}

    def test_defined_class_is_inferred_super_class(self, reasoner):
        assert EX.BodyOrgan in reasoner.super_classes(EX.Heart)
        assert EX.Heart in reasoner.sub_classes(EX.BodyOrgan)

    def test_equivalent_classes(self, reasoner):
        assert reasoner.equivalent_classes(EX.Leaf2) == {EX.Leaf2, EX.LeafAlias}
        assert reasoner.equivalent_classes(EX.Leaf) == {EX.Leaf}
        assert EX.LeafAlias not in reasoner.sub_classes(EX.Leaf2)

    def test_inconsistent_ontology(self):
        reasoner = create_reasoner(ONTOLOGY_TTL + """
ex:impossible a owl:Nothing .
""")
        with pytest.raises(OracleUnavailableError, match="inconsistent"):
            reasoner.ancestors(EX.Leaf)
        with pytest.raises(OracleUnavailableError):
            reasoner.sub_classes(EX.Root)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
