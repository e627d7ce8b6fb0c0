"""Bounded concurrent push execution.

Each job runs on a worker thread of a ``ThreadPoolExecutor`` driven from
asyncio. Jobs share nothing: every job owns its target, its session and its
result, and results are collected in job order at join time.
"""
import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..backends.base import ProtocolBackend
from ..errors import TSNConfigError
from ..plugins.base import DeviceModel, DeviceTarget
from .schema import TargetResult, TargetStatus

logger = logging.getLogger(__name__)


@dataclass
class PushJob:
    """One (node, port) push to run."""
    node_id: str
    target: DeviceTarget
    backend: ProtocolBackend
    model: Optional[DeviceModel] = None
    # Set when the node's device model could not be fetched
    model_error: Optional[TSNConfigError] = None


class PushExecutor:
    """Run push jobs on a bounded worker pool."""

    def __init__(self, max_workers: int = 8):
        """
        Initialize executor.

        Args:
            max_workers: Maximum concurrent pushes
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.max_workers = max_workers

    async def run(
        self,
        jobs: list[PushJob],
        work: Callable[[PushJob], TargetResult],
        cancel_event: Optional[Any] = None,
    ) -> list[TargetResult]:
        """
        Run every job and return results in job order.

        Args:
            jobs: Jobs to run
            work: Blocking function executed per job; must not raise
            cancel_event: asyncio.Event or threading.Event; once set, jobs
                that have not started are reported as cancelled

        Returns:
            One TargetResult per job
        """
        if not jobs:
            return []

        loop = asyncio.get_running_loop()
        semaphore = asyncio.Semaphore(self.max_workers)

        with ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(jobs)),
            thread_name_prefix="tsn-push",
        ) as pool:

            async def run_one(job: PushJob) -> TargetResult:
                async with semaphore:
                    if cancel_event is not None and cancel_event.is_set():
                        logger.info(f"Cancelled before start: {job.target.label}")
                        return TargetResult(
                            node_id=job.node_id,
                            interface=job.target.interface_name,
                            status=TargetStatus.CANCELLED,
                            error="orchestration cancelled",
                        )
                    return await loop.run_in_executor(pool, work, job)

            results = await asyncio.gather(*(run_one(job) for job in jobs))

        return list(results)
