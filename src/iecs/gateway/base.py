"""Gateway interface: the narrow surface iecs needs from ECS and CloudWatch Logs."""

from abc import ABC, abstractmethod
from typing import List, Sequence

from ..exceptions import NotFoundError
from ..shared.models import (
    Cluster,
    ExecSession,
    LiveTailHandlers,
    Service,
    Task,
    TaskDefinition,
)

__all__ = ["Gateway"]


class Gateway(ABC):
    """
    Abstract interface over the orchestrator API.

    Every operation suspends until the API call returns. List operations
    never return an empty sequence and describe operations never return
    nothing: both raise ``NotFoundError`` naming the scope or reference
    instead. API failures surface as ``RemoteError``.
    """

    @property
    @abstractmethod
    def region(self) -> str:
        """Region the gateway talks to (used for the SSM endpoint)."""

    @abstractmethod
    async def list_clusters(self) -> List[str]:
        """Return cluster ARNs."""

    @abstractmethod
    async def describe_cluster(self, cluster_ref: str) -> Cluster:
        """Return the cluster identified by name or ARN."""

    @abstractmethod
    async def list_services(self, cluster_ref: str) -> List[str]:
        """Return service ARNs of a cluster."""

    @abstractmethod
    async def describe_service(self, cluster_ref: str, service_ref: str) -> Service:
        """Return one service of a cluster."""

    @abstractmethod
    async def list_tasks(self, cluster_ref: str, service_ref: str) -> List[str]:
        """Return the ARNs of the running tasks of a service."""

    @abstractmethod
    async def describe_tasks(
        self, cluster_ref: str, task_refs: Sequence[str]
    ) -> List[Task]:
        """Return the tasks found among ``task_refs`` (missing ones omitted)."""

    async def describe_task(self, cluster_ref: str, task_ref: str) -> Task:
        """Return one task of a cluster."""
        tasks = await self.describe_tasks(cluster_ref, [task_ref])
        if not tasks:
            raise NotFoundError(f"no task '{task_ref}' found in cluster {cluster_ref}")
        return tasks[0]

    @abstractmethod
    async def describe_task_definition(self, task_definition_ref: str) -> TaskDefinition:
        """Return a task definition by ``family:revision`` or ARN."""

    @abstractmethod
    async def execute_command(
        self,
        cluster_ref: str,
        task_ref: str,
        container_name: str,
        command: str,
        interactive: bool,
    ) -> ExecSession:
        """Request a remote command session for a container."""

    @abstractmethod
    async def start_live_tail(
        self,
        log_group_name: str,
        log_stream_names: Sequence[str],
        handlers: LiveTailHandlers,
    ) -> None:
        """
        Tail log streams of a log group until cancelled or the stream ends.

        ``handlers.on_start`` is called for the session start event and
        ``handlers.on_batch`` once per log event, in server order. The
        stream is closed on every exit path.

        Raises:
            NotFoundError: no log group matches ``log_group_name``.
            StreamClosedError: the server ended the stream.
            UnknownEventError: the stream delivered an unexpected event.
            RemoteError: the stream could not be opened or failed remotely.
        """
