"""Orchestration engine - fans one intent out across a topology.

For every node whose management protocol has a registered backend, and for
every port of that node, a DeviceTarget is built and handed to the backend.
A failure on one target is recorded in its TargetResult and never aborts the
others.
"""
import logging
import time
from functools import partial
from typing import Any, Optional

from ..backends.netconf import feature_of
from ..backends.registry import BackendRegistry
from ..config.settings import Settings
from ..errors import StoreError, TSNConfigError
from ..plugins.base import DeviceTarget
from ..utils.audit_log import record_push
from ..utils.logging_config import timed_section_sync
from .executor import PushExecutor, PushJob
from .schema import (
    ApplyOutcome,
    DeviceModelSource,
    TargetResult,
    TargetStatus,
    Topology,
)

logger = logging.getLogger(__name__)


class OrchestrationEngine:
    """
    Apply intent messages to every managed port of a topology.

    Usage:
        engine = OrchestrationEngine(registry, store)
        outcome = await engine.apply_topology_config(schedule, store.get_topology())
    """

    def __init__(
        self,
        registry: BackendRegistry,
        device_models: DeviceModelSource,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the engine.

        Args:
            registry: Protocol to backend registry
            device_models: Source of per-node installed schema modules
            settings: Runtime settings (worker count)
        """
        self.registry = registry
        self.device_models = device_models
        self.settings = settings or Settings()

    def build_jobs(self, topology: Topology) -> tuple[list[PushJob], list[str]]:
        """Enumerate push jobs in topology order.

        Returns:
            Tuple of (jobs, ids of nodes skipped for lack of a backend)
        """
        jobs: list[PushJob] = []
        skipped: list[str] = []

        for node in topology.nodes:
            backend = self.registry.get(node.management.protocol)
            if backend is None:
                logger.info(
                    f"Skipping node {node.id}: no backend for protocol "
                    f"'{node.management.protocol}'"
                )
                skipped.append(node.id)
                continue

            model = None
            model_error = None
            try:
                model = self.device_models.get_device_model(node.id)
            except StoreError as e:
                logger.error(f"Device model for node {node.id} unavailable: {e}")
                model_error = e

            secret = node.management.get_password()
            for port in node.ports:
                jobs.append(PushJob(
                    node_id=node.id,
                    target=DeviceTarget(
                        management=node.management,
                        secret=secret,
                        interface_name=port.name,
                        node_id=node.id,
                    ),
                    backend=backend,
                    model=model,
                    model_error=model_error,
                ))

        return jobs, skipped

    async def apply_topology_config(
        self,
        intent: Any,
        topology: Topology,
        cancel_event: Optional[Any] = None,
        dry_run: bool = False,
        intent_checksum: Optional[str] = None,
    ) -> ApplyOutcome:
        """
        Apply one intent message to every managed (node, port) target.

        Args:
            intent: Intent message, e.g. a GateControlSchedule
            topology: Nodes and ports to configure
            cancel_event: Once set, no new pushes start
            dry_run: Render payloads without opening sessions
            intent_checksum: Digest of the source document for audit records

        Returns:
            ApplyOutcome with one TargetResult per target
        """
        if intent is None:
            return ApplyOutcome.unresolved("no intent message")

        jobs, skipped = self.build_jobs(topology)
        logger.info(
            f"{'Rendering' if dry_run else 'Applying'} {feature_of(intent)} intent to "
            f"{len(jobs)} target(s) on {len(topology.nodes) - len(skipped)} node(s)"
        )

        executor = PushExecutor(self.settings.max_workers)
        results = await executor.run(jobs, partial(self._run_job, intent, dry_run), cancel_event)

        outcome = ApplyOutcome.from_results(results, skipped_nodes=skipped, dry_run=dry_run)
        self._audit(intent, results, dry_run, intent_checksum)

        for failure in outcome.failures:
            logger.warning(
                f"{failure.node_id}/{failure.interface}: {failure.status.value}"
                + (f" - {failure.error}" if failure.error else "")
            )
        logger.info(outcome.summary())
        return outcome

    def _run_job(self, intent: Any, dry_run: bool, job: PushJob) -> TargetResult:
        """Push (or render) one target. Never raises."""
        start = time.perf_counter()
        result = TargetResult(
            node_id=job.node_id,
            interface=job.target.interface_name,
            status=TargetStatus.FAILED,
        )

        if job.model_error is not None:
            result.error = f"device model unavailable: {job.model_error}"
            result.error_kind = job.model_error.kind
            return result

        try:
            with timed_section_sync(
                "render" if dry_run else "push",
                device_id=job.target.label,
                protocol=job.backend.protocol,
            ):
                if dry_run:
                    feature = feature_of(intent)
                    result.plugin = job.backend.select_plugin(feature, job.model).name
                    result.payload = job.backend.render(intent, job.model, job.target)
                else:
                    plugin = job.backend.map_and_push(intent, job.model, job.target)
                    result.plugin = plugin.name
            result.status = TargetStatus.SUCCESS

        except TSNConfigError as e:
            result.error = str(e)
            result.error_kind = e.kind
            result.plugin = result.plugin or e.plugin
            logger.error(f"{job.target.label}: {e}")
        except Exception as e:
            result.error = str(e) or type(e).__name__
            result.error_kind = type(e).__name__
            logger.exception(f"{job.target.label}: unexpected error")

        result.duration_ms = (time.perf_counter() - start) * 1000
        return result

    @staticmethod
    def _audit(
        intent: Any,
        results: list[TargetResult],
        dry_run: bool,
        intent_checksum: Optional[str],
    ) -> None:
        feature = feature_of(intent) or type(intent).__name__
        schedule_id = getattr(intent, "schedule_id", "")
        for r in results:
            record_push(
                node_id=r.node_id,
                interface=r.interface,
                feature=feature,
                plugin=r.plugin,
                schedule_id=schedule_id,
                status=r.status.value,
                dry_run=dry_run,
                intent_checksum=intent_checksum,
                error=r.error,
            )
