"""Step-by-step selection of clusters, services, tasks and containers.

Every stage lists candidates scoped to the previously selected entity,
optionally narrows them with a regular expression, lets the operator pick
one (no prompt when a single candidate remains), describes the pick and
confirms it on the operator console. Stages never run concurrently: each
one needs the entity the previous stage described.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Pattern, Sequence, Tuple

from rich.console import Console
from rich.markup import escape

from ..exceptions import NotFoundError, PreflightError
from ..gateway.base import Gateway
from ..shared.models import (
    Cluster,
    Container,
    ContainerDefinition,
    ExecSelection,
    LogsSelection,
    Service,
    Task,
    TaskDefinition,
    resource_name,
)
from .picker import Option, Picker

__all__ = [
    "Selectors",
    "compile_pattern",
    "select_exec_target",
    "select_log_targets",
]

logger = logging.getLogger(__name__)


def compile_pattern(pattern: Optional[str], flag: str) -> Optional[Pattern[str]]:
    """Compile a ``--cluster``/``--service`` filter, rejecting bad regexes early."""
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise PreflightError(
            f"invalid {flag} pattern '{pattern}': {exc}",
            hints=[f"{flag} 'prod' matches every name containing 'prod'"],
        ) from exc


def _same_ref(chosen: str, arn: str, name: str = "") -> bool:
    return chosen in (arn, name)


class Selectors:
    """Reusable selection stages bound to one gateway, picker and console."""

    def __init__(self, gateway: Gateway, picker: Picker, console: Console) -> None:
        self.gateway = gateway
        self.picker = picker
        self.console = console

    def _confirm(self, kind: str, ref: str) -> None:
        self.console.print(f"Selected {kind}: {escape(ref)}")

    @staticmethod
    def _filter(
        refs: Sequence[str], pattern: Optional[str], kind: str, scope: str
    ) -> List[str]:
        compiled = compile_pattern(pattern, f"--{kind}")
        if compiled is None:
            return list(refs)
        matched = [ref for ref in refs if compiled.search(resource_name(ref))]
        if not matched:
            raise NotFoundError(f"no {kind}s matching '{pattern}' found{scope}")
        return matched

    async def cluster(self, pattern: Optional[str] = None) -> Cluster:
        arns = await self.gateway.list_clusters()
        arns = self._filter(arns, pattern, "cluster", "")
        chosen = await self.picker.choose("Select cluster", [Option.of(a) for a in arns])
        cluster = await self.gateway.describe_cluster(chosen)
        if not _same_ref(chosen, cluster.arn, cluster.name):
            raise NotFoundError(f"no cluster '{chosen}' found")
        self._confirm("cluster", chosen)
        return cluster

    async def service(self, cluster: Cluster, pattern: Optional[str] = None) -> Service:
        arns = await self.gateway.list_services(cluster.arn)
        arns = self._filter(arns, pattern, "service", f" in cluster {cluster.arn}")
        chosen = await self.picker.choose("Select service", [Option.of(a) for a in arns])
        service = await self.gateway.describe_service(cluster.arn, chosen)
        if not _same_ref(chosen, service.arn, service.name):
            raise NotFoundError(
                f"no service '{chosen}' found in cluster {cluster.arn}"
            )
        self._confirm("service", chosen)
        return service

    async def task(self, service: Service) -> Task:
        cluster_ref = service.cluster_arn
        arns = await self.gateway.list_tasks(cluster_ref, service.arn)
        chosen = await self.picker.choose("Select task", [Option.of(a) for a in arns])
        task = await self.gateway.describe_task(cluster_ref, chosen)
        if not _same_ref(chosen, task.arn):
            raise NotFoundError(f"no task '{chosen}' found in cluster {cluster_ref}")
        self._confirm("task", chosen)
        return task

    async def tasks(self, service: Service) -> Tuple[Task, ...]:
        """Select one or more running tasks of ``service``."""
        cluster_ref = service.cluster_arn
        arns = await self.gateway.list_tasks(cluster_ref, service.arn)
        chosen = await self.picker.choose_many(
            "Select tasks", [Option.of(a) for a in arns]
        )
        described = await self.gateway.describe_tasks(cluster_ref, chosen)
        by_ref = {}
        for task in described:
            by_ref[task.arn] = task
            by_ref[task.task_id] = task
        tasks = []
        for ref in chosen:
            task = by_ref.get(ref) or by_ref.get(resource_name(ref))
            if task is None:
                raise NotFoundError(f"no task '{ref}' found in cluster {cluster_ref}")
            tasks.append(task)
            self._confirm("task", ref)
        return tuple(tasks)

    async def container(self, task: Task) -> Container:
        if not task.containers:
            raise NotFoundError(f"no containers found in task {task.arn}")
        chosen = await self.picker.choose(
            "Select container", [Option.of(c.name) for c in task.containers]
        )
        for container in task.containers:
            if container.name == chosen:
                self._confirm("container", chosen)
                return container
        raise NotFoundError(f"no container '{chosen}' found in task {task.arn}")

    async def container_definitions(
        self, service: Service
    ) -> Tuple[TaskDefinition, Tuple[ContainerDefinition, ...]]:
        """Select container definitions of the service's current task definition."""
        task_definition = await self.gateway.describe_task_definition(
            service.task_definition_arn
        )
        definitions = task_definition.container_definitions
        if not definitions:
            raise NotFoundError(
                f"no container definitions found in task definition {task_definition.arn}"
            )
        self._confirm("task definition", task_definition.arn)
        chosen = await self.picker.choose_many(
            "Select container definitions", [Option.of(d.name) for d in definitions]
        )
        selected = tuple(d for d in definitions if d.name in chosen)
        for definition in selected:
            self._confirm("container definition", definition.name)
        return task_definition, selected


async def select_exec_target(
    selectors: Selectors,
    cluster_pattern: Optional[str] = None,
    service_pattern: Optional[str] = None,
) -> ExecSelection:
    """Resolve cluster, service, task and container for ``exec``."""
    cluster = await selectors.cluster(cluster_pattern)
    service = await selectors.service(cluster, service_pattern)
    task = await selectors.task(service)
    container = await selectors.container(task)
    selection = ExecSelection(
        cluster=cluster, service=service, task=task, container=container
    )
    logger.info(
        "exec target selected",
        extra={
            "cluster": cluster.arn,
            "service": service.arn,
            "task": task.arn,
            "container": container.name,
        },
    )
    return selection


async def select_log_targets(
    selectors: Selectors,
    cluster_pattern: Optional[str] = None,
    service_pattern: Optional[str] = None,
) -> LogsSelection:
    """Resolve cluster, service, container definitions and tasks for ``logs``."""
    cluster = await selectors.cluster(cluster_pattern)
    service = await selectors.service(cluster, service_pattern)
    task_definition, definitions = await selectors.container_definitions(service)
    tasks = await selectors.tasks(service)
    logger.info(
        "log targets selected",
        extra={
            "cluster": cluster.arn,
            "service": service.arn,
            "containers": [d.name for d in definitions],
            "tasks": [t.arn for t in tasks],
        },
    )
    return LogsSelection(
        cluster=cluster,
        service=service,
        tasks=tasks,
        task_definition=task_definition,
        container_definitions=definitions,
    )
