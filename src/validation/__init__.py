"""
Validation module for checking the alignment of an ontology with an upper ontology.

Public Interface:
- AlignmentValidator: checks that all classes are subsumed by an upper-level class
- AlignmentReport: the misaligned top-level classes
"""

from .service import AlignmentReport, AlignmentValidator

__all__ = ["AlignmentValidator", "AlignmentReport"]
