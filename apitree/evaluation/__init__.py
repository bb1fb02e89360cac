"""Body-assertion evaluation."""

from apitree.evaluation.predicate import (
    PredicateError,
    PredicateEvaluator,
    SimpleEvalEvaluator,
    is_truthy,
)

__all__ = [
    "PredicateError",
    "PredicateEvaluator",
    "SimpleEvalEvaluator",
    "is_truthy",
]
