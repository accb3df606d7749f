"""Fixed-size worker pool draining a shared FIFO of work items.

Each lane is a thread that pops items with ``Queue.get_nowait`` until
the queue is empty, so no two lanes ever receive the same item.
"""

import queue
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable


@dataclass(frozen=True)
class WorkItem:
    """A component paired with the fork point to test it at."""

    component: str
    fork_point: str

    def __str__(self) -> str:
        return f"{self.component}@{self.fork_point}"


@dataclass
class QueryOutcome:
    """Result of processing one work item.

    Attributes:
        item: The work item this outcome belongs to.
        vulns: Raw vulnerability candidates returned by the query.
        relevant: IDs of candidates that affect the fork point.
        error: Failure description; ``None`` on success.
    """

    item: WorkItem
    vulns: list[dict[str, Any]] = field(default_factory=list)
    relevant: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_queue(items: Iterable[WorkItem]) -> "queue.Queue[WorkItem]":
    q: queue.Queue[WorkItem] = queue.Queue()
    for item in items:
        q.put(item)
    return q


class WorkerPool:
    """Runs ``concurrency`` lanes over one shared queue.

    Attributes:
        concurrency: Number of lanes (threads).
    """

    def __init__(self, concurrency: int = 2):
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        self.concurrency = concurrency

    def _lane(self, work: "queue.Queue[WorkItem]", per_item: Callable[[WorkItem], Any]) -> int:
        processed = 0
        while True:
            try:
                item = work.get_nowait()
            except queue.Empty:
                return processed
            try:
                per_item(item)
            except Exception as e:
                print(f"  ❌ {item}: unhandled error: {e}")
            finally:
                processed += 1
                work.task_done()

    def run(self, work: "queue.Queue[WorkItem]", per_item: Callable[[WorkItem], Any]) -> int:
        """Drain ``work`` and return once every lane has exited.

        Args:
            work: Queue of work items; emptied by this call.
            per_item: Callable invoked once per item.

        Returns:
            Number of items processed.
        """
        with ThreadPoolExecutor(max_workers=self.concurrency, thread_name_prefix="forkscan-lane") as ex:
            lanes = [ex.submit(self._lane, work, per_item) for _ in range(self.concurrency)]
            return sum(f.result() for f in lanes)


def run_pool(items: Iterable[WorkItem], concurrency: int, per_item: Callable[[WorkItem], Any]) -> int:
    """Convenience wrapper: queue ``items`` and drain them with a new pool."""
    return WorkerPool(concurrency).run(build_queue(items), per_item)
