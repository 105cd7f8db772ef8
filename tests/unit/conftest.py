from __future__ import annotations

import asyncio
from io import StringIO
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest
from rich.console import Console

from iecs.gateway.base import Gateway
from iecs.exceptions import NotFoundError
from iecs.selector.picker import Option, Picker
from iecs.shared.models import (
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
)

ACCOUNT = "arn:aws:ecs:us-east-1:123456789012"


def _console() -> Console:
    return Console(file=StringIO(), force_terminal=False, color_system=None, width=200)


def console_text(console: Console) -> str:
    return console.file.getvalue()  # type: ignore[attr-defined]


class FakeGateway(Gateway):
    """In-memory gateway recording every call as ``(operation, *args)``."""

    def __init__(self) -> None:
        self.calls: List[Tuple[Any, ...]] = []
        self.errors: Dict[str, Exception] = {}
        self.clusters: Dict[str, Cluster] = {}
        self.services: Dict[str, Dict[str, Service]] = {}
        self.tasks: Dict[Tuple[str, str], List[Task]] = {}
        self.task_definitions: Dict[str, TaskDefinition] = {}
        self.stale: Dict[str, Any] = {}
        self.session = ExecSession("sid-1", "wss://ssm/stream", "token-1")
        self.tail_events: List[Any] = []
        self.tail_forever = False

    # -- builders -------------------------------------------------------
    def add_cluster(self, name: str) -> Cluster:
        cluster = Cluster(arn=f"{ACCOUNT}:cluster/{name}", name=name, status="ACTIVE")
        self.clusters[cluster.arn] = cluster
        self.services.setdefault(cluster.arn, {})
        return cluster

    def add_service(
        self, cluster: Cluster, name: str, task_definition: Optional[TaskDefinition] = None
    ) -> Service:
        td = task_definition or TaskDefinition(
            arn=f"{ACCOUNT}:task-definition/{name}:1", family=name, revision=1
        )
        self.task_definitions[td.arn] = td
        service = Service(
            arn=f"{ACCOUNT}:service/{cluster.name}/{name}",
            name=name,
            cluster_arn=cluster.arn,
            task_definition_arn=td.arn,
            desired_count=1,
            running_count=1,
        )
        self.services[cluster.arn][service.arn] = service
        self.tasks.setdefault((cluster.arn, service.arn), [])
        return service

    def add_task(
        self,
        service: Service,
        task_id: str,
        containers: Sequence[Tuple[str, str]] = (("app", "runtime-app"),),
    ) -> Task:
        cluster_name = service.cluster_arn.rsplit("/", 1)[-1]
        task = Task(
            arn=f"{ACCOUNT}:task/{cluster_name}/{task_id}",
            cluster_arn=service.cluster_arn,
            last_status="RUNNING",
            task_definition_arn=service.task_definition_arn,
            containers=tuple(Container(name=n, runtime_id=r) for n, r in containers),
        )
        self.tasks[(service.cluster_arn, service.arn)].append(task)
        return task

    # -- gateway --------------------------------------------------------
    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name,) + args)
        if name in self.errors:
            raise self.errors[name]

    def called(self, name: str) -> List[Tuple[Any, ...]]:
        return [c for c in self.calls if c[0] == name]

    @property
    def region(self) -> str:
        return "eu-west-1"

    async def list_clusters(self) -> List[str]:
        self._record("list_clusters")
        if not self.clusters:
            raise NotFoundError("no clusters found")
        return list(self.clusters)

    async def describe_cluster(self, cluster_ref: str) -> Cluster:
        self._record("describe_cluster", cluster_ref)
        if cluster_ref in self.stale:
            return self.stale[cluster_ref]
        for cluster in self.clusters.values():
            if cluster_ref in (cluster.arn, cluster.name):
                return cluster
        raise NotFoundError(f"no cluster '{cluster_ref}' found")

    async def list_services(self, cluster_ref: str) -> List[str]:
        self._record("list_services", cluster_ref)
        arns = list(self.services.get(cluster_ref, {}))
        if not arns:
            raise NotFoundError(f"no services found in cluster {cluster_ref}")
        return arns

    async def describe_service(self, cluster_ref: str, service_ref: str) -> Service:
        self._record("describe_service", cluster_ref, service_ref)
        if service_ref in self.stale:
            return self.stale[service_ref]
        service = self.services.get(cluster_ref, {}).get(service_ref)
        if service is None:
            raise NotFoundError(f"no service '{service_ref}' found")
        return service

    async def list_tasks(self, cluster_ref: str, service_ref: str) -> List[str]:
        self._record("list_tasks", cluster_ref, service_ref)
        arns = [t.arn for t in self.tasks.get((cluster_ref, service_ref), [])]
        if not arns:
            raise NotFoundError(f"no tasks found in service {service_ref}")
        return arns

    async def describe_tasks(self, cluster_ref: str, task_refs: Sequence[str]) -> List[Task]:
        self._record("describe_tasks", cluster_ref, list(task_refs))
        found = []
        for ref in task_refs:
            if ref in self.stale:
                found.append(self.stale[ref])
                continue
            for tasks in self.tasks.values():
                found.extend(t for t in tasks if t.arn == ref)
        return found

    async def describe_task_definition(self, task_definition_ref: str) -> TaskDefinition:
        self._record("describe_task_definition", task_definition_ref)
        td = self.task_definitions.get(task_definition_ref)
        if td is None:
            raise NotFoundError(f"no task definition '{task_definition_ref}' found")
        return td

    async def execute_command(
        self,
        cluster_ref: str,
        task_ref: str,
        container_name: str,
        command: str,
        interactive: bool,
    ) -> ExecSession:
        self._record(
            "execute_command", cluster_ref, task_ref, container_name, command, interactive
        )
        return self.session

    async def start_live_tail(
        self,
        log_group_name: str,
        log_stream_names: Sequence[str],
        handlers: LiveTailHandlers,
    ) -> None:
        self._record("start_live_tail", log_group_name, list(log_stream_names))
        handlers.on_start(
            {"logGroupIdentifiers": [log_group_name], "logStreamNames": list(log_stream_names)}
        )
        for event in self.tail_events:
            handlers.on_batch(event)
        if self.tail_forever:
            await asyncio.Event().wait()


class ScriptedPicker(Picker):
    """Picker answering prompts from a script instead of the terminal.

    Each answer is either a label to pick, a list of labels (for
    ``choose_many``), or ``None`` to cancel.
    """

    def __init__(self, answers: Sequence[Any] = (), console: Optional[Console] = None):
        super().__init__(style=None, console=console or _console())
        self.answers = list(answers)
        self.prompts: List[Tuple[str, List[str]]] = []
        self.notices: List[str] = []

    def notice(self, message: str) -> None:
        self.notices.append(message)
        super().notice(message)

    def _next(self, title: str, options: Sequence[Option]) -> Any:
        self.prompts.append((title, [o.label for o in options]))
        if not self.answers:
            raise AssertionError(f"unexpected prompt: {title}")
        return self.answers.pop(0)

    async def _ask_one(self, title: str, options: Sequence[Option]) -> Any:
        answer = self._next(title, options)
        if answer is None:
            return None
        return next(o.value for o in options if o.label == answer)

    async def _ask_many(self, title: str, options: Sequence[Option]) -> Any:
        answer = self._next(title, options)
        if answer is None:
            return None
        return [o.value for o in options if o.label in answer]


def awslogs_definition(name: str, group: str, prefix: str) -> ContainerDefinition:
    return ContainerDefinition(
        name=name,
        log_configuration=LogConfiguration(
            driver="awslogs",
            options={"awslogs-group": group, "awslogs-stream-prefix": prefix},
        ),
    )


def log_event(ts: int, message: str) -> LogEvent:
    return LogEvent(timestamp_ms=ts, message=message)


@pytest.fixture
def console() -> Console:
    return _console()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()
