"""Boolean predicate evaluation over parsed response bodies.

Body assertions are short expressions such as ``body.id == 1`` or
``len(body["items"]) > 0 and body.active == true``. They are evaluated with
``simpleeval``: Python expression syntax, with the parsed JSON document bound
to ``body`` and the JSON literals ``true``, ``false`` and ``null`` available
as names. On JSON objects attribute access is key lookup, so ``body.id`` and
``body["id"]`` are equivalent and ``body.items`` never names a ``dict`` method.
"""

from __future__ import annotations

import ast
import math
from typing import Any, Protocol

from simpleeval import (
    DEFAULT_FUNCTIONS,
    AttributeDoesNotExist,
    EvalWithCompoundTypes,
    InvalidExpression,
)

# Names available to every expression besides ``body``
JSON_LITERALS: dict[str, Any] = {
    "true": True,
    "false": False,
    "null": None,
}

# Errors raised while evaluating a well-formed expression
_RUNTIME_ERRORS = (
    InvalidExpression,
    ArithmeticError,
    LookupError,
    TypeError,
    ValueError,
    AttributeError,
)


class PredicateError(Exception):
    """Raised when an expression cannot be evaluated.

    Attributes:
        kind: ``"syntax"`` for malformed expressions, ``"runtime"`` for
            failures while evaluating a well-formed one.
    """

    def __init__(self, kind: str, message: str) -> None:
        super().__init__(message)
        self.kind = kind

    def __str__(self) -> str:
        return f"{self.kind} error: {self.args[0]}"


class PredicateEvaluator(Protocol):
    """Evaluates a boolean expression against a parsed JSON document."""

    def evaluate(self, document: Any, expression: str) -> bool:
        ...


def is_truthy(value: Any) -> bool:
    """Coerce an expression result to a boolean.

    ``False``, ``None``, numeric zero, the empty string and NaN are falsy.
    Everything else is truthy, including empty lists and objects.
    """
    if value is None or value is False:
        return False
    if isinstance(value, (int, float)):
        return not (value == 0 or (isinstance(value, float) and math.isnan(value)))
    if isinstance(value, str):
        return value != ""
    return True


class JsonEval(EvalWithCompoundTypes):
    """simpleeval evaluator where ``obj.name`` on a JSON object is a key lookup.

    A missing key is an error rather than falling through to the ``dict``
    methods, so ``body.items`` always means the ``items`` property.
    """

    def _eval_attribute(self, node):
        value = self._eval(node.value)
        if isinstance(value, dict):
            if node.attr in value:
                return value[node.attr]
            raise AttributeDoesNotExist(node.attr, self.expr)
        resolved = ast.Attribute(value=ast.Constant(value), attr=node.attr, ctx=node.ctx)
        return super()._eval_attribute(resolved)


class SimpleEvalEvaluator:
    """Default evaluator backed by ``simpleeval``."""

    def __init__(self, functions: dict[str, Any] | None = None) -> None:
        self.functions = {**DEFAULT_FUNCTIONS, "len": len}
        if functions:
            self.functions.update(functions)

    def evaluate(self, document: Any, expression: str) -> bool:
        """Evaluate ``expression`` with ``document`` bound as ``body``.

        Raises:
            PredicateError: If the expression is malformed or fails.
        """
        evaluator = JsonEval(
            names={**JSON_LITERALS, "body": document},
            functions=self.functions,
        )
        try:
            result = evaluator.eval(expression)
        except SyntaxError as e:
            raise PredicateError("syntax", e.msg or str(e)) from e
        except _RUNTIME_ERRORS as e:
            raise PredicateError("runtime", str(e) or type(e).__name__) from e
        except Exception as e:
            raise PredicateError("runtime", f"{type(e).__name__}: {e}") from e
        return is_truthy(result)
