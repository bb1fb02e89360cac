"""Test execution engine: dependency graphs, scheduling, HTTP runs and validation."""

from apitree.execution.executor import HttpExecutor, TransportError
from apitree.execution.graph import DependencyNode, GraphError, SuiteGraph
from apitree.execution.scheduler import Scheduler
from apitree.execution.tracker import SuiteResult, SuiteTracker

__all__ = [
    "DependencyNode",
    "GraphError",
    "HttpExecutor",
    "Scheduler",
    "SuiteGraph",
    "SuiteResult",
    "SuiteTracker",
    "TransportError",
]
