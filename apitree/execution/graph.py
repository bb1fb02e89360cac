"""Dependency graph construction for a suite's test declarations.

Provides DependencyNode (wraps one TestSpec) and SuiteGraph (the forest of
"runs-after" relations for one suite, with validation of dangling, self and
cyclic references).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from apitree.declaration.suite import Suite, TestSpec


class GraphError(ValueError):
    """Raised when a suite's ``after`` references do not form a valid graph."""


@dataclass(eq=False)
class DependencyNode:
    """Represents a single test of a suite in the dependency graph."""

    spec: TestSpec
    suite: Suite = field(repr=False)

    # Computed graph edges (populated during graph construction)
    parents: list[DependencyNode] = field(default_factory=list, repr=False)
    children: list[DependencyNode] = field(default_factory=list, repr=False)

    # Scheduling bookkeeping
    remaining_parents: int = 0
    state: str = "pending"  # pending, queued, done

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def is_root(self) -> bool:
        return not self.parents


class SuiteGraph:
    """Dependency forest of one suite.

    Roots are tests without an ``after`` reference; every other test is a
    child of each test it names. A test naming several predecessors only
    becomes ready once all of them have completed.
    """

    def __init__(self, suite: Suite) -> None:
        self.suite = suite
        self.nodes: dict[str, DependencyNode] = {}
        self.roots: list[DependencyNode] = []

    @classmethod
    def build(cls, suite: Suite) -> SuiteGraph:
        """Construct the dependency graph for a suite.

        Args:
            suite: Suite with its flat test mapping.

        Returns:
            A fully linked SuiteGraph.

        Raises:
            GraphError: If an ``after`` reference is dangling, points at the
                test itself, or the references contain a cycle.
        """
        graph = cls(suite)

        # Create nodes
        for name, spec in suite.tests.items():
            spec.name = name
            graph.nodes[name] = DependencyNode(spec=spec, suite=suite)

        # Link edges
        for name, node in graph.nodes.items():
            for parent_name in node.spec.after:
                if parent_name == name:
                    raise GraphError(
                        f"suite '{suite.name}': test '{name}' cannot run after itself"
                    )
                parent = graph.nodes.get(parent_name)
                if parent is None:
                    raise GraphError(
                        f"suite '{suite.name}': test '{name}' runs after unknown "
                        f"test '{parent_name}'"
                    )
                parent.children.append(node)
                node.parents.append(parent)
            node.remaining_parents = len(node.parents)
            if node.is_root:
                graph.roots.append(node)

        cycle = graph._detect_cycle()
        if cycle is not None:
            cycle_str = " -> ".join(cycle)
            raise GraphError(
                f"suite '{suite.name}': cycle in test dependencies: {cycle_str}"
            )

        return graph

    def _detect_cycle(self) -> list[str] | None:
        """Detect cycles using an iterative DFS along child edges.

        Returns:
            A list of test names forming the cycle, or None if acyclic.
        """
        WHITE, GRAY, BLACK = 0, 1, 2
        color: dict[str, int] = {name: WHITE for name in self.nodes}
        path: list[str] = []

        for start in self.nodes.values():
            if color[start.name] != WHITE:
                continue
            color[start.name] = GRAY
            path.append(start.name)
            stack = [iter(start.children)]
            while stack:
                child = next(stack[-1], None)
                if child is None:
                    stack.pop()
                    color[path.pop()] = BLACK
                elif color[child.name] == GRAY:
                    cycle_start = path.index(child.name)
                    return path[cycle_start:] + [child.name]
                elif color[child.name] == WHITE:
                    color[child.name] = GRAY
                    path.append(child.name)
                    stack.append(iter(child.children))

        return None

    def descendants(self, node: DependencyNode) -> list[DependencyNode]:
        """All nodes reachable from ``node`` through child edges, BFS order."""
        seen: set[str] = set()
        order: list[DependencyNode] = []
        frontier = list(node.children)
        while frontier:
            current = frontier.pop(0)
            if current.name in seen:
                continue
            seen.add(current.name)
            order.append(current)
            frontier.extend(current.children)
        return order

    def __len__(self) -> int:
        return len(self.nodes)
