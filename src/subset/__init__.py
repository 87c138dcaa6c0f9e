"""
Subset extraction module.

This module builds a self-contained subset of an ontology from a seed set of
classes, optionally filling the gaps between them so that the hierarchy is
preserved once the rest of the ontology is discarded.

Public Interface:
- SubsetService: High-level service for all subset operations
- SubsetConfig: Immutable filter configuration of an extraction run
- subset_classes: Classes of a materialized subset
- is_dangling: Dangling-class predicate, also used by validation
"""

from .dangling import is_dangling
from .domain import SubsetConfig
from .materializer import subset_classes
from .service import SubsetService

__all__ = ["SubsetService", "SubsetConfig", "subset_classes", "is_dangling"]
