"""
Shared types used across layers.

The gateway, the selection pipeline and the command runners all exchange
these snapshots, so they live outside any one of those packages.
"""

from iecs.shared.models import (
    Cluster,
    Container,
    ContainerDefinition,
    ExecSelection,
    ExecSession,
    LiveTailHandlers,
    LogConfiguration,
    LogEvent,
    LogsSelection,
    Service,
    Task,
    TaskDefinition,
    resource_name,
)

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
