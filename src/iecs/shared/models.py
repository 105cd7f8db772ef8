"""Immutable snapshots of ECS and CloudWatch Logs entities.

Every entity is built from a boto3 response dictionary through its
``from_api`` constructor and is never mutated afterwards.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from ..exceptions import PreflightError

__all__ = [
    "Cluster",
    "Container",
    "ContainerDefinition",
    "ExecSelection",
    "ExecSession",
    "LiveTailHandlers",
    "LogConfiguration",
    "LogEvent",
    "LogsSelection",
    "Service",
    "Task",
    "TaskDefinition",
    "resource_name",
]


def resource_name(arn: str) -> str:
    """Return the last '/'-separated segment of an ARN (or the ref itself)."""
    return arn.rsplit("/", 1)[-1]


@dataclass(frozen=True)
class Cluster:
    arn: str
    name: str
    status: str = ""

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Cluster":
        arn = str(data.get("clusterArn", ""))
        return cls(
            arn=arn,
            name=str(data.get("clusterName") or resource_name(arn)),
            status=str(data.get("status", "")),
        )


@dataclass(frozen=True)
class Service:
    arn: str
    name: str
    cluster_arn: str
    task_definition_arn: str
    desired_count: int = 0
    running_count: int = 0

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Service":
        arn = str(data.get("serviceArn", ""))
        return cls(
            arn=arn,
            name=str(data.get("serviceName") or resource_name(arn)),
            cluster_arn=str(data.get("clusterArn", "")),
            task_definition_arn=str(data.get("taskDefinition", "")),
            desired_count=int(data.get("desiredCount", 0) or 0),
            running_count=int(data.get("runningCount", 0) or 0),
        )


@dataclass(frozen=True)
class Container:
    """A running container; ``runtime_id`` is what session targets use."""

    name: str
    runtime_id: str
    arn: str = ""
    last_status: str = ""

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Container":
        return cls(
            name=str(data.get("name", "")),
            runtime_id=str(data.get("runtimeId", "")),
            arn=str(data.get("containerArn", "")),
            last_status=str(data.get("lastStatus", "")),
        )


@dataclass(frozen=True)
class Task:
    arn: str
    cluster_arn: str
    last_status: str
    task_definition_arn: str
    containers: Tuple[Container, ...] = ()

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Task":
        return cls(
            arn=str(data.get("taskArn", "")),
            cluster_arn=str(data.get("clusterArn", "")),
            last_status=str(data.get("lastStatus", "")),
            task_definition_arn=str(data.get("taskDefinitionArn", "")),
            containers=tuple(
                Container.from_api(c) for c in data.get("containers", []) or []
            ),
        )

    @property
    def task_id(self) -> str:
        return resource_name(self.arn)

    @property
    def tail(self) -> str:
        """Everything after the first '/' of the ARN (``<cluster>/<id>``)."""
        _, sep, rest = self.arn.partition("/")
        if not sep or not rest:
            raise PreflightError(f"unable to extract task name from '{self.arn}'")
        return rest


@dataclass(frozen=True)
class LogConfiguration:
    driver: str
    options: Optional[Dict[str, str]] = None

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "LogConfiguration":
        options = data.get("options")
        return cls(
            driver=str(data.get("logDriver", "")),
            options=dict(options) if options is not None else None,
        )


@dataclass(frozen=True)
class ContainerDefinition:
    name: str
    log_configuration: Optional[LogConfiguration] = None

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "ContainerDefinition":
        log_cfg = data.get("logConfiguration")
        return cls(
            name=str(data.get("name", "")),
            log_configuration=(
                LogConfiguration.from_api(log_cfg) if log_cfg is not None else None
            ),
        )


@dataclass(frozen=True)
class TaskDefinition:
    arn: str
    family: str
    revision: int
    container_definitions: Tuple[ContainerDefinition, ...] = ()

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "TaskDefinition":
        return cls(
            arn=str(data.get("taskDefinitionArn", "")),
            family=str(data.get("family", "")),
            revision=int(data.get("revision", 0) or 0),
            container_definitions=tuple(
                ContainerDefinition.from_api(c)
                for c in data.get("containerDefinitions", []) or []
            ),
        )


@dataclass(frozen=True)
class ExecSession:
    """One-shot credentials returned by ExecuteCommand."""

    session_id: str = ""
    stream_url: str = ""
    token: str = ""

    @classmethod
    def from_api(cls, data: Optional[Mapping[str, Any]]) -> "ExecSession":
        data = data or {}
        return cls(
            session_id=str(data.get("sessionId", "")),
            stream_url=str(data.get("streamUrl", "")),
            token=str(data.get("tokenValue", "")),
        )

    def to_json(self) -> str:
        # Field names follow what session-manager-plugin expects.
        return json.dumps(
            {
                "SessionId": self.session_id,
                "StreamUrl": self.stream_url,
                "TokenValue": self.token,
            }
        )


@dataclass(frozen=True)
class LogEvent:
    timestamp_ms: int
    message: str
    log_stream_name: str = ""
    log_group_identifier: str = ""

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "LogEvent":
        return cls(
            timestamp_ms=int(data.get("timestamp", 0) or 0),
            message=str(data.get("message", "")),
            log_stream_name=str(data.get("logStreamName", "")),
            log_group_identifier=str(data.get("logGroupIdentifier", "")),
        )

    @property
    def timestamp(self) -> datetime:
        """Event time in the local timezone."""
        seconds, millis = divmod(self.timestamp_ms, 1000)
        utc = datetime.fromtimestamp(seconds, tz=timezone.utc) + timedelta(
            milliseconds=millis
        )
        return utc.astimezone()


@dataclass(frozen=True)
class LiveTailHandlers:
    """Callbacks invoked sequentially by ``start_live_tail``."""

    on_start: Callable[[Mapping[str, Any]], None]
    on_batch: Callable[[LogEvent], None]


@dataclass(frozen=True)
class ExecSelection:
    cluster: Cluster
    service: Service
    task: Task
    container: Container


@dataclass(frozen=True)
class LogsSelection:
    cluster: Cluster
    service: Service
    tasks: Tuple[Task, ...]
    task_definition: TaskDefinition
    container_definitions: Tuple[ContainerDefinition, ...] = field(default=())
