"""Concurrent scheduling of suite dependency graphs.

The Scheduler owns a single ready queue shared by all suites. Root nodes are
seeded into it, a dispatcher loop turns every queued node into an asyncio
task, and each finished node makes its children ready. Blocking HTTP work
runs on a thread pool whose size bounds the number of tests in flight.
"""

from __future__ import annotations

import asyncio
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Callable

from apitree.declaration.suite import Suite, TestOutcome
from apitree.execution.executor import HttpExecutor
from apitree.execution.graph import DependencyNode, GraphError, SuiteGraph
from apitree.execution.tracker import SuiteResult, SuiteTracker

# Pause between a node's completion and the dispatch of its children
DEFAULT_CHILD_DELAY = 0.1


def default_max_parallel() -> int:
    """Worker pool size used when none is configured."""
    return min(32, (os.cpu_count() or 1) + 4)


class Scheduler:
    """Runs suites concurrently, honouring each suite's dependency graph.

    Guarantees:
    - a node is dispatched only after all of its predecessors completed;
    - a node whose request fails to execute never releases its children,
      which are completed as ``dependencies_failed`` instead;
    - every node reports exactly one completion to its suite's tracker, so
      every suite is finalized exactly once.

    Args:
        executor: Runs one node synchronously and returns its outcome.
        max_parallel: Maximum number of nodes executing at once.
        child_delay: Seconds to wait before releasing a node's children.
        on_suite_complete: Called with each SuiteResult as soon as its suite
            is finalized.
    """

    def __init__(
        self,
        executor: HttpExecutor,
        max_parallel: int | None = None,
        child_delay: float = DEFAULT_CHILD_DELAY,
        on_suite_complete: Callable[[SuiteResult], None] | None = None,
    ) -> None:
        self.executor = executor
        self.max_parallel = max_parallel or default_max_parallel()
        self.child_delay = child_delay
        self.on_suite_complete = on_suite_complete

    def execute(self, suites: list[Suite]) -> list[SuiteResult]:
        """Execute all suites.

        Returns:
            One SuiteResult per suite, in the order the suites were given.
        """
        return asyncio.run(self.execute_async(suites))

    async def execute_async(self, suites: list[Suite]) -> list[SuiteResult]:
        """Async implementation of suite execution."""
        queue: asyncio.Queue[DependencyNode | None] = asyncio.Queue()
        state_lock = asyncio.Lock()
        semaphore = asyncio.Semaphore(self.max_parallel)
        loop = asyncio.get_running_loop()
        pool = ThreadPoolExecutor(
            max_workers=self.max_parallel, thread_name_prefix="apitree"
        )

        trackers: dict[int, SuiteTracker] = {}
        graphs: dict[int, SuiteGraph] = {}
        results: dict[int, SuiteResult] = {}
        unfinished = len(suites)

        tasks: set[asyncio.Task[None]] = set()
        failures: list[BaseException] = []

        def finalize(tracker: SuiteTracker) -> None:
            nonlocal unfinished
            result = tracker.result()
            results[id(tracker.suite)] = result
            if self.on_suite_complete is not None:
                self.on_suite_complete(result)
            unfinished -= 1
            if unfinished == 0:
                queue.put_nowait(None)

        async def complete(node: DependencyNode, outcome: TestOutcome) -> None:
            tracker = trackers[id(node.suite)]
            if await tracker.complete(node.name, outcome):
                finalize(tracker)

        async def skip_descendants(node: DependencyNode) -> None:
            """Complete everything downstream of a node that failed to execute."""
            graph = graphs[id(node.suite)]
            skipped: list[DependencyNode] = []
            async with state_lock:
                for descendant in graph.descendants(node):
                    if descendant.state == "pending":
                        descendant.state = "done"
                        skipped.append(descendant)
            for descendant in skipped:
                await complete(
                    descendant,
                    TestOutcome(
                        status="dependencies_failed",
                        errors=[f"not run: test '{node.name}' failed to execute"],
                    ),
                )

        async def run_node(node: DependencyNode) -> None:
            """Run a single node, then release its ready children."""
            async with semaphore:
                outcome = await loop.run_in_executor(pool, self.executor.run, node)

            async with state_lock:
                node.state = "done"
            await complete(node, outcome)

            if outcome.status == "error":
                await skip_descendants(node)
                return

            ready: list[DependencyNode] = []
            async with state_lock:
                for child in node.children:
                    child.remaining_parents -= 1
                    if child.remaining_parents == 0 and child.state == "pending":
                        child.state = "queued"
                        ready.append(child)

            if ready:
                if self.child_delay > 0:
                    await asyncio.sleep(self.child_delay)
                for child in ready:
                    queue.put_nowait(child)

        def on_task_done(task: asyncio.Task[None]) -> None:
            tasks.discard(task)
            if task.cancelled():
                return
            exc = task.exception()
            if exc is not None and not failures:
                failures.append(exc)
                queue.put_nowait(None)

        try:
            # Seed the queue with every suite's roots
            for suite in suites:
                tracker = SuiteTracker(suite)
                trackers[id(suite)] = tracker
                try:
                    graph = SuiteGraph.build(suite)
                except GraphError as e:
                    await tracker.fail_all(str(e))
                    finalize(tracker)
                    continue

                graphs[id(suite)] = graph
                if tracker.finalized:
                    finalize(tracker)
                    continue
                for root in graph.roots:
                    root.state = "queued"
                    queue.put_nowait(root)

            if not suites:
                queue.put_nowait(None)

            # Dispatcher loop
            while True:
                node = await queue.get()
                if node is None:
                    break
                task = asyncio.create_task(run_node(node))
                tasks.add(task)
                task.add_done_callback(on_task_done)
        finally:
            if failures:
                for task in list(tasks):
                    task.cancel()
            if tasks:
                await asyncio.gather(*tasks, return_exceptions=True)
            pool.shutdown(wait=not failures, cancel_futures=bool(failures))

        if failures:
            raise failures[0]

        return [results[id(suite)] for suite in suites]
