"""Fixture gateway serving canned data; used when ``demo`` is enabled."""

from __future__ import annotations

import asyncio
import time
from typing import Dict, List, Sequence

from ..exceptions import NotFoundError
from ..shared.models import (
    Cluster,
    Container,
    ContainerDefinition,
    ExecSession,
    LiveTailHandlers,
    LogConfiguration,
    LogEvent,
    Service,
    Task,
    TaskDefinition,
    resource_name,
)
from .base import Gateway

__all__ = ["DemoGateway"]

_ACCOUNT_PREFIX = "arn:aws:ecs:us-east-1:123456789012"
_TASK_DEFINITION_ARN = f"{_ACCOUNT_PREFIX}:task-definition/task-def-1:1"
_LOG_MESSAGES = 5
_LOG_INTERVAL = 0.1


def _matches(ref: str, arn: str) -> bool:
    return ref == arn or ref == resource_name(arn)


class DemoGateway(Gateway):
    """Gateway with two clusters, two services, two tasks and two containers."""

    def __init__(self) -> None:
        self.clusters = [f"{_ACCOUNT_PREFIX}:cluster/cluster-{i}" for i in (1, 2)]

    @property
    def region(self) -> str:
        return "us-east-1"

    def _cluster_arn(self, cluster_ref: str) -> str:
        for arn in self.clusters:
            if _matches(cluster_ref, arn):
                return arn
        raise NotFoundError(f"no cluster '{cluster_ref}' found")

    def _service_arns(self, cluster_ref: str) -> List[str]:
        name = resource_name(self._cluster_arn(cluster_ref))
        return [f"{_ACCOUNT_PREFIX}:service/{name}/service-{i}" for i in (1, 2)]

    def _task_arns(self, cluster_ref: str) -> List[str]:
        name = resource_name(self._cluster_arn(cluster_ref))
        return [f"{_ACCOUNT_PREFIX}:task/{name}/task-{i}" for i in (1, 2)]

    async def list_clusters(self) -> List[str]:
        return list(self.clusters)

    async def describe_cluster(self, cluster_ref: str) -> Cluster:
        arn = self._cluster_arn(cluster_ref)
        return Cluster(arn=arn, name=resource_name(arn), status="ACTIVE")

    async def list_services(self, cluster_ref: str) -> List[str]:
        return self._service_arns(cluster_ref)

    async def describe_service(self, cluster_ref: str, service_ref: str) -> Service:
        cluster_arn = self._cluster_arn(cluster_ref)
        for arn in self._service_arns(cluster_ref):
            if _matches(service_ref, arn):
                return Service(
                    arn=arn,
                    name=resource_name(arn),
                    cluster_arn=cluster_arn,
                    task_definition_arn=_TASK_DEFINITION_ARN,
                    desired_count=2,
                    running_count=2,
                )
        raise NotFoundError(
            f"no service '{service_ref}' found in cluster {cluster_ref}"
        )

    async def list_tasks(self, cluster_ref: str, service_ref: str) -> List[str]:
        await self.describe_service(cluster_ref, service_ref)
        return self._task_arns(cluster_ref)

    async def describe_tasks(
        self, cluster_ref: str, task_refs: Sequence[str]
    ) -> List[Task]:
        cluster_arn = self._cluster_arn(cluster_ref)
        tasks = []
        for arn in self._task_arns(cluster_ref):
            if not any(_matches(ref, arn) for ref in task_refs):
                continue
            tasks.append(
                Task(
                    arn=arn,
                    cluster_arn=cluster_arn,
                    last_status="RUNNING",
                    task_definition_arn=_TASK_DEFINITION_ARN,
                    containers=(
                        Container(name="container-1", runtime_id="runtime-id-1"),
                        Container(name="container-2", runtime_id="runtime-id-2"),
                    ),
                )
            )
        return tasks

    async def describe_task_definition(self, task_definition_ref: str) -> TaskDefinition:
        if not _matches(task_definition_ref, _TASK_DEFINITION_ARN):
            raise NotFoundError(f"no task definition '{task_definition_ref}' found")
        return TaskDefinition(
            arn=_TASK_DEFINITION_ARN,
            family="task-def-1",
            revision=1,
            container_definitions=tuple(
                ContainerDefinition(
                    name=f"container-{i}",
                    log_configuration=LogConfiguration(
                        driver="awslogs",
                        options={
                            "awslogs-group": f"log-group-{i}",
                            "awslogs-region": "us-east-1",
                            "awslogs-stream-prefix": f"prefix-{i}",
                        },
                    ),
                )
                for i in (1, 2)
            ),
        )

    async def execute_command(
        self,
        cluster_ref: str,
        task_ref: str,
        container_name: str,
        command: str,
        interactive: bool,
    ) -> ExecSession:
        return ExecSession()

    async def start_live_tail(
        self,
        log_group_name: str,
        log_stream_names: Sequence[str],
        handlers: LiveTailHandlers,
    ) -> None:
        start: Dict[str, object] = {
            "sessionId": "demo",
            "logGroupIdentifiers": [log_group_name],
            "logStreamNames": list(log_stream_names),
        }
        handlers.on_start(start)
        stream_name = log_stream_names[0] if log_stream_names else ""
        for i in range(_LOG_MESSAGES):
            handlers.on_batch(
                LogEvent(
                    timestamp_ms=int(time.time() * 1000),
                    message=f"log message {i}",
                    log_stream_name=stream_name,
                    log_group_identifier=log_group_name,
                )
            )
            await asyncio.sleep(_LOG_INTERVAL)
