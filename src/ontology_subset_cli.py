#!/usr/bin/env python3
"""
CLI tool for extracting ontology subsets and validating ontology alignment.

This script provides functionality to:
1. Extract a subset of an ontology from queries, subset tags and terms
2. Fill the gaps between the selected classes
3. Check that every class of an ontology is aligned with an upper ontology

Usage:
    python ontology_subset_cli.py subset --input go.owl --subset goslim_generic --fill-gaps true --output slim.ttl
    python ontology_subset_cli.py subset --input go.owl -q "GO:0005634" --ancestors true --output nucleus.owl
    python ontology_subset_cli.py validate --input my.owl --upper-ontology cob.owl --report-output report.txt
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv
from rdflib.util import guess_format

from ontology import OntologyStore
from ontology.errors import ConfigurationError, ExtractionError
from subset import SubsetService, subset_classes
from validation import AlignmentValidator

logger = logging.getLogger(__name__)

# Organizational namespaces checked by the validate command
DEFAULT_BASE_PREFIXES = (
    "http://purl.obolibrary.org/obo/",
    "http://www.ebi.ac.uk/efo/",
    "https://w3id.org/biolink/",
)

DEFAULT_UPPER_ONTOLOGY = "http://purl.obolibrary.org/obo/cob.owl"


def str_to_bool(value: str) -> bool:
    """Parse a true/false option value."""
    lowered = value.strip().lower()
    if lowered in ("true", "yes", "1"):
        return True
    if lowered in ("false", "no", "0"):
        return False
    raise argparse.ArgumentTypeError(f"Expected true or false, got '{value}'")


def base_prefixes_from_env() -> List[str]:
    """Get the base namespaces from ONTOLOGY_BASE_PREFIXES, or the defaults."""
    value = os.getenv("ONTOLOGY_BASE_PREFIXES")
    if value and value.strip():
        return value.split()
    return list(DEFAULT_BASE_PREFIXES)


def output_format(path: Optional[str], requested: Optional[str]) -> str:
    """Choose the rdflib serializer for an output file."""
    if requested:
        return requested
    if path:
        return guess_format(path) or "turtle"
    return "turtle"


def describe(store: OntologyStore, name: str) -> str:
    """Summarize a loaded ontology for the command output."""
    stats = store.get_stats()
    return (f"{name}: {stats.total_classes} classes, {stats.total_triples} triples, "
            f"{stats.imported_graphs} imported module(s), {stats.obsolete_classes} obsolete class(es)")


def run_subset(args: argparse.Namespace) -> int:
    """Run the subset command."""
    store = OntologyStore.load(args.input, resolve_imports=args.collapse_imports_closure)
    logger.info(describe(store, args.input))

    service = SubsetService(store)
    service.configure(fill_gaps=args.fill_gaps,
                      exclude_dangling=args.no_dangling,
                      include_imports=args.collapse_imports_closure)
    for name in args.follow_property:
        iri = store.expand_curie(name)
        if iri is None:
            raise ConfigurationError(f"Invalid property identifier: {name}")
        service.follow_property(iri)
    for prefix in args.follow_in:
        service.include_prefix(prefix)
    for prefix in args.not_follow_in:
        service.exclude_prefix(prefix)
    service.set_ontology_iri(args.ontology_iri)

    seeds = service.collect_seeds(queries=args.query,
                                  tags=args.subset,
                                  terms=args.term,
                                  term_files=args.term_file,
                                  with_ancestors=args.ancestors)
    graph = service.extract(seeds)

    fmt = output_format(args.output, args.format)
    if args.output:
        graph.serialize(destination=args.output, format=fmt)
        print(f"Wrote subset of {len(subset_classes(graph))} classes to {args.output}")
    else:
        print(graph.serialize(format=fmt))
    return 0


def run_validate(args: argparse.Namespace) -> int:
    """Run the validate command."""
    store = OntologyStore.load(args.input)
    logger.info(describe(store, args.input))

    upper_location = args.upper_ontology
    if not upper_location:
        logger.warning("No upper ontology given, using %s", DEFAULT_UPPER_ONTOLOGY)
        upper_location = DEFAULT_UPPER_ONTOLOGY
    upper = OntologyStore.load(upper_location)
    logger.info(describe(upper, upper_location))

    base_prefixes = args.base_iri or base_prefixes_from_env()
    validator = AlignmentValidator(upper, base_prefixes=base_prefixes, ignore_dangling=args.ignore_dangling)
    report = validator.validate(store)

    if args.report_output:
        report.write(args.report_output)

    if report.aligned:
        print(f"Ontology is aligned ({report.checked} classes checked)")
        return 0

    for iri in report.unaligned:
        print(iri)
    return 1 if args.fail else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract ontology subsets and validate ontology alignment",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Extract the classes tagged with a subset, filling the gaps between them
  python ontology_subset_cli.py subset --input go.owl --subset goslim_generic --fill-gaps true --output slim.ttl

  # Extract a class with its descendants and ancestors
  python ontology_subset_cli.py subset --input go.owl -q "GO:0005634" --ancestors true

  # Extract terms listed in a file, following part_of when filling gaps
  python ontology_subset_cli.py subset --input uberon.owl -T terms.txt --fill-gaps true --follow-property BFO:0000050

  # Check alignment with an upper ontology
  python ontology_subset_cli.py validate --input my.owl --upper-ontology cob.owl --report-output report.txt
        """
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # subset
    subset_parser = subparsers.add_parser("subset", help="Extract a subset of an ontology")
    subset_parser.add_argument("--input", "-i", required=True,
                               help="Path or URL of the source ontology")
    subset_parser.add_argument("--query", "-q", action="append", default=[],
                               help="Class expression; its descendants and equivalents are added")
    subset_parser.add_argument("--ancestors", type=str_to_bool, default=False, metavar="true|false",
                               help="Also add the ancestors of query results (default: false)")
    subset_parser.add_argument("--term", "-t", action="append", default=[],
                               help="Identifier (IRI or CURIE) of a class to add")
    subset_parser.add_argument("--term-file", "-T", action="append", default=[],
                               help="File with one class identifier per line")
    subset_parser.add_argument("--subset", "-s", action="append", default=[],
                               help="Name or IRI of a subset tag whose members are added")
    subset_parser.add_argument("--fill-gaps", type=str_to_bool, default=False, metavar="true|false",
                               help="Add the ancestors needed to connect the subset (default: false)")
    subset_parser.add_argument("--no-dangling", type=str_to_bool, default=True, metavar="true|false",
                               help="Do not add dangling classes when filling gaps (default: true)")
    subset_parser.add_argument("--collapse-imports-closure", type=str_to_bool, default=True,
                               metavar="true|false",
                               help="Use the imported ontologies too (default: true)")
    subset_parser.add_argument("--follow-property", action="append", default=[],
                               help="Object property to follow when filling gaps")
    subset_parser.add_argument("--follow-in", action="append", default=[],
                               help="Only add classes in this namespace when filling gaps")
    subset_parser.add_argument("--not-follow-in", action="append", default=[],
                               help="Never add classes in this namespace when filling gaps")
    subset_parser.add_argument("--ontology-iri",
                               help="IRI of the extracted ontology")
    subset_parser.add_argument("--output", "-o",
                               help="Output file; the subset is printed if omitted")
    subset_parser.add_argument("--format",
                               help="rdflib serialization format (guessed from --output if omitted)")
    subset_parser.set_defaults(func=run_subset)

    # validate
    validate_parser = subparsers.add_parser("validate", help="Check alignment with an upper ontology")
    validate_parser.add_argument("--input", "-i", required=True,
                                 help="Path or URL of the ontology to check")
    validate_parser.add_argument("--upper-ontology", "-u",
                                 help=f"Upper ontology (default: {DEFAULT_UPPER_ONTOLOGY})")
    validate_parser.add_argument("--base-iri", "-b", action="append", default=[],
                                 help="Only check classes in this namespace "
                                      "(default: ONTOLOGY_BASE_PREFIXES or OBO, EFO and Biolink)")
    validate_parser.add_argument("--ignore-dangling", type=str_to_bool, default=False, metavar="true|false",
                                 help="Skip dangling classes (default: false)")
    validate_parser.add_argument("--report-output", "-r",
                                 help="File to write the misaligned classes to")
    validate_parser.add_argument("--fail", type=str_to_bool, default=True, metavar="true|false",
                                 help="Exit with status 1 if the ontology is misaligned (default: true)")
    validate_parser.set_defaults(func=run_validate)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s: %(message)s'
    )

    try:
        return args.func(args)
    except ExtractionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
