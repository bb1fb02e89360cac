"""Suite declaration model: suites, test specs, and outcomes."""

from apitree.declaration.suite import (
    DeclarationError,
    RequestSpec,
    Suite,
    TestOutcome,
    TestSpec,
    ValidationSpec,
)

__all__ = [
    "DeclarationError",
    "RequestSpec",
    "Suite",
    "TestOutcome",
    "TestSpec",
    "ValidationSpec",
]
