"""
Parser for class expressions written in a Manchester-like syntax.

Supported syntax:
    'quoted label'          a class or property referred to by its rdfs:label
    <http://full/iri>       a class or property referred to by its IRI
    GO:0008150, ex:Thing    CURIEs, expanded with the ontology's prefixes
    label_without_spaces    bare labels
    A and B                 conjunction
    part_of some B          existential restriction
    ( ... )                 grouping
"""

import re
from typing import List, Optional, Set, Tuple

from rdflib import URIRef, OWL

from ontology.errors import QueryParseError
from ontology.store import OntologyStore

from .expressions import ClassExpression, NamedClass, SomeValuesFrom, intersection_of


_TOKEN = re.compile(r"""
    (?P<lparen>\()
  | (?P<rparen>\))
  | (?P<quoted>'(?:[^'\\]|\\.)*')
  | (?P<iri><[^<>\s]*>)
  | (?P<word>[^\s()'<>]+)
""", re.VERBOSE)

_KEYWORDS = ("and", "some")

Token = Tuple[str, str, int]  # kind, text, position


def tokenize(text: str) -> List[Token]:
    """Split an expression into tokens, raising QueryParseError on stray characters."""
    tokens: List[Token] = []
    position = 0
    while position < len(text):
        if text[position].isspace():
            position += 1
            continue
        match = _TOKEN.match(text, position)
        if not match:
            raise QueryParseError(f"Unexpected character '{text[position]}'", text, position)
        tokens.append((match.lastgroup, match.group(), position))
        position = match.end()
    return tokens


class ExpressionParser:
    """Parses class expressions against the signature of an ontology."""

    def __init__(self, store: OntologyStore, include_imports: bool = True):
        self.store = store
        self.include_imports = include_imports

    def parse(self, text: str) -> ClassExpression:
        """Parse a class expression.

        Raises:
            QueryParseError: On syntax errors, unknown or ambiguous entities
        """
        if not text or not text.strip():
            raise QueryParseError("Empty class expression", text or "")

        self._text = text
        self._tokens = tokenize(text)
        self._index = 0

        expression = self._parse_conjunction()
        if self._peek() is not None:
            kind, token_text, position = self._peek()
            raise QueryParseError(f"Unexpected '{token_text}'", text, position)
        return expression

    def _peek(self, offset: int = 0) -> Optional[Token]:
        index = self._index + offset
        return self._tokens[index] if index < len(self._tokens) else None

    def _next(self) -> Token:
        token = self._peek()
        if token is None:
            raise QueryParseError("Unexpected end of expression", self._text, len(self._text))
        self._index += 1
        return token

    @staticmethod
    def _is_keyword(token: Optional[Token], keyword: str) -> bool:
        return token is not None and token[0] == "word" and token[1].lower() == keyword

    def _parse_conjunction(self) -> ClassExpression:
        operands = [self._parse_operand()]
        while self._is_keyword(self._peek(), "and"):
            self._next()
            operands.append(self._parse_operand())
        return intersection_of(operands)

    def _parse_operand(self) -> ClassExpression:
        kind, text, position = self._next()

        if kind == "lparen":
            expression = self._parse_conjunction()
            closing = self._next()
            if closing[0] != "rparen":
                raise QueryParseError("Expected ')'", self._text, closing[2])
            return expression

        if kind == "rparen" or (kind == "word" and text.lower() in _KEYWORDS):
            raise QueryParseError(f"Expected a class expression, got '{text}'", self._text, position)

        if self._is_keyword(self._peek(), "some"):
            self._next()
            prop = self._resolve((kind, text, position), self.store.object_properties(self.include_imports), "property")
            return SomeValuesFrom(prop, self._parse_operand())

        allowed = self.store.classes(self.include_imports) | {OWL.Thing, OWL.Nothing}
        return NamedClass(self._resolve((kind, text, position), allowed, "class"))

    def _resolve(self, token: Token, allowed: Set[URIRef], what: str) -> URIRef:
        """Resolve an entity token to a single IRI among the allowed ones."""
        kind, text, position = token

        candidates: Set[URIRef] = set()
        if kind == "quoted":
            label = re.sub(r"\\(.)", r"\1", text[1:-1])
            candidates = self.store.find_by_label(label, self.include_imports)
        elif kind == "iri":
            candidates = {URIRef(text[1:-1])}
        else:
            iri = self.store.expand_curie(text)
            candidates = {iri} if iri is not None else self.store.find_by_label(text, self.include_imports)

        matches = candidates & allowed
        if not matches:
            raise QueryParseError(f"Unknown {what} {text}", self._text, position)
        if len(matches) > 1:
            raise QueryParseError(f"Ambiguous {what} {text}", self._text, position)
        return next(iter(matches))
