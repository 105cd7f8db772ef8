"""boto3-backed gateway for ECS and CloudWatch Logs."""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Callable, Dict, List, Sequence

from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import NotFoundError, RemoteError
from ..shared.models import (
    Cluster,
    ExecSession,
    LiveTailHandlers,
    Service,
    Task,
    TaskDefinition,
)
from .base import Gateway
from .live_tail import dispatch_live_tail_events

__all__ = ["AwsGateway"]

logger = logging.getLogger(__name__)

# DescribeTasks accepts at most this many task references per call.
DESCRIBE_TASKS_LIMIT = 100


class AwsGateway(Gateway):
    """Gateway that runs blocking boto3 calls in the default executor."""

    def __init__(self, session: Any) -> None:
        self._session = session
        self._ecs = session.client("ecs")
        self._logs = session.client("logs")

    @property
    def region(self) -> str:
        return str(self._session.region_name or self._ecs.meta.region_name)

    async def _call(self, operation: str, func: Callable[..., Any], **kwargs) -> Any:
        loop = asyncio.get_event_loop()
        logger.debug("aws call %s", operation, extra={"params": kwargs})
        try:
            return await loop.run_in_executor(None, functools.partial(func, **kwargs))
        except (ClientError, BotoCoreError) as exc:
            raise RemoteError(operation, str(exc)) from exc

    async def _paginate(self, operation: str, key: str, **kwargs) -> List[str]:
        def _collect() -> List[str]:
            items: List[str] = []
            paginator = self._ecs.get_paginator(operation)
            for page in paginator.paginate(**kwargs):
                items.extend(page.get(key, []))
            return items

        return await self._call(operation, _collect)

    async def _async_iter(self, blocking_iter):
        """Convert a blocking event stream iterator to an async iterator."""

        loop = asyncio.get_event_loop()
        sentinel = object()
        while True:
            try:
                item = await loop.run_in_executor(
                    None, lambda: next(blocking_iter, sentinel)
                )
            except (ClientError, BotoCoreError) as exc:
                raise RemoteError("StartLiveTail", str(exc)) from exc
            if item is sentinel:
                break
            yield item

    async def list_clusters(self) -> List[str]:
        arns = await self._paginate("list_clusters", "clusterArns")
        if not arns:
            raise NotFoundError("no clusters found")
        return arns

    async def describe_cluster(self, cluster_ref: str) -> Cluster:
        resp = await self._call(
            "DescribeClusters", self._ecs.describe_clusters, clusters=[cluster_ref]
        )
        clusters = resp.get("clusters") or []
        if not clusters:
            raise NotFoundError(f"no cluster '{cluster_ref}' found")
        return Cluster.from_api(clusters[0])

    async def list_services(self, cluster_ref: str) -> List[str]:
        arns = await self._paginate("list_services", "serviceArns", cluster=cluster_ref)
        if not arns:
            raise NotFoundError(f"no services found in cluster {cluster_ref}")
        return arns

    async def describe_service(self, cluster_ref: str, service_ref: str) -> Service:
        resp = await self._call(
            "DescribeServices",
            self._ecs.describe_services,
            cluster=cluster_ref,
            services=[service_ref],
        )
        services = resp.get("services") or []
        if not services:
            raise NotFoundError(
                f"no service '{service_ref}' found in cluster {cluster_ref}"
            )
        return Service.from_api(services[0])

    async def list_tasks(self, cluster_ref: str, service_ref: str) -> List[str]:
        # ListTasks filters by service *name*; ARNs are accepted by ECS too
        # but the short name is what the API documents.
        service_name = service_ref.rsplit("/", 1)[-1]
        arns = await self._paginate(
            "list_tasks",
            "taskArns",
            cluster=cluster_ref,
            serviceName=service_name,
            desiredStatus="RUNNING",
        )
        if not arns:
            raise NotFoundError(f"no tasks found in service {service_ref}")
        return arns

    async def describe_tasks(
        self, cluster_ref: str, task_refs: Sequence[str]
    ) -> List[Task]:
        refs = list(task_refs)
        tasks: List[Task] = []
        for start in range(0, len(refs), DESCRIBE_TASKS_LIMIT):
            resp = await self._call(
                "DescribeTasks",
                self._ecs.describe_tasks,
                cluster=cluster_ref,
                tasks=refs[start : start + DESCRIBE_TASKS_LIMIT],
            )
            tasks.extend(Task.from_api(task) for task in resp.get("tasks") or [])
        return tasks

    async def describe_task_definition(self, task_definition_ref: str) -> TaskDefinition:
        resp = await self._call(
            "DescribeTaskDefinition",
            self._ecs.describe_task_definition,
            taskDefinition=task_definition_ref,
        )
        task_definition = resp.get("taskDefinition")
        if not task_definition:
            raise NotFoundError(f"no task definition '{task_definition_ref}' found")
        return TaskDefinition.from_api(task_definition)

    async def execute_command(
        self,
        cluster_ref: str,
        task_ref: str,
        container_name: str,
        command: str,
        interactive: bool,
    ) -> ExecSession:
        resp = await self._call(
            "ExecuteCommand",
            self._ecs.execute_command,
            cluster=cluster_ref,
            task=task_ref,
            container=container_name,
            command=command,
            interactive=interactive,
        )
        return ExecSession.from_api(resp.get("session"))

    async def _resolve_log_group_arn(self, log_group_name: str) -> str:
        resp = await self._call(
            "DescribeLogGroups",
            self._logs.describe_log_groups,
            logGroupNamePrefix=log_group_name,
        )
        groups: List[Dict[str, Any]] = resp.get("logGroups") or []
        if not groups:
            raise NotFoundError(f"no log group '{log_group_name}' found")
        group = groups[0]
        arn = group.get("logGroupArn")
        if arn:
            return str(arn)
        # ``arn`` carries a trailing ":*" that StartLiveTail rejects.
        return str(group.get("arn", "")).removesuffix(":*")

    async def start_live_tail(
        self,
        log_group_name: str,
        log_stream_names: Sequence[str],
        handlers: LiveTailHandlers,
    ) -> None:
        group_arn = await self._resolve_log_group_arn(log_group_name)
        resp = await self._call(
            "StartLiveTail",
            self._logs.start_live_tail,
            logGroupIdentifiers=[group_arn],
            logStreamNames=list(log_stream_names),
        )
        stream = resp["responseStream"]
        try:
            await dispatch_live_tail_events(self._async_iter(iter(stream)), handlers)
        finally:
            try:
                stream.close()
            except (OSError, BotoCoreError) as exc:
                logger.warning("Unable to close live tail stream: %s", exc)
