"""PubGrub dependency resolution."""

from .incompatibility import Cause, Incompatibility
from .partial_solution import Assignment, IncompatibilityRelation, PartialSolution
from .resolver import Resolver
from .service import resolve
from .term import Relation, Term

__all__ = [
    "Assignment",
    "Cause",
    "Incompatibility",
    "IncompatibilityRelation",
    "PartialSolution",
    "Relation",
    "Resolver",
    "Term",
    "resolve",
]
