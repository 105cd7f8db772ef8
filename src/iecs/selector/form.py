"""Cascading selection form.

A ``Form`` walks its fields in order. Later fields take their options from
a producer bound to an earlier field's ``Cell``; the producer runs again
whenever that cell changes and query failures degrade to an empty option
list. When a field ends up with nothing to offer the form steps back to the
field it depends on, without the choice that led nowhere. Choices are only
trusted after ``run_exec_form``/``run_logs_form`` describe every one of
them again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Set

from rich.console import Console
from rich.markup import escape

from ..exceptions import NotFoundError
from ..gateway.base import Gateway
from ..shared.models import ExecSelection, LogsSelection, resource_name
from .picker import Option, Picker
from .stages import compile_pattern

__all__ = [
    "Cell",
    "DeferredOptions",
    "Field",
    "Form",
    "StaticOptions",
    "run_exec_form",
    "run_logs_form",
]

logger = logging.getLogger(__name__)

Producer = Callable[[Any], Awaitable[Sequence[Option]]]

_UNSET = object()


class Cell:
    """Holds the value chosen for one field."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.value: Any = None

    @property
    def is_set(self) -> bool:
        return self.value is not None

    def set(self, value: Any) -> None:
        self.value = value

    def clear(self) -> None:
        self.value = None


class StaticOptions:
    def __init__(self, options: Sequence[Option]) -> None:
        self._options = list(options)
        self.depends_on: Optional[Cell] = None

    async def resolve(self) -> List[Option]:
        return list(self._options)

    def invalidate(self) -> None:
        pass


class DeferredOptions:
    """Options computed from the value of ``depends_on``.

    The producer runs again whenever the dependency holds a different value
    than on the previous call. Any exception it raises yields no options.
    """

    def __init__(self, producer: Producer, depends_on: Cell) -> None:
        self.producer = producer
        self.depends_on = depends_on
        self._last_key: Any = _UNSET
        self._last: List[Option] = []

    async def resolve(self) -> List[Option]:
        if not self.depends_on.is_set:
            return []
        key = self.depends_on.value
        if key != self._last_key:
            try:
                self._last = list(await self.producer(key))
            except Exception as exc:  # noqa: BLE001
                logger.debug(
                    "option producer for %s failed: %s", self.depends_on.name, exc
                )
                self._last = []
            self._last_key = key
        return list(self._last)

    def invalidate(self) -> None:
        self._last_key = _UNSET
        self._last = []


@dataclass
class Field:
    title: str
    options: Any
    cell: Cell
    excluded: Set[Any] = field(default_factory=set)

    async def available(self) -> List[Option]:
        return [o for o in await self.options.resolve() if o.value not in self.excluded]

    def reset(self) -> None:
        """Forget dead ends and cached options found under an earlier choice."""
        self.excluded.clear()
        self.options.invalidate()


class Form:
    def __init__(self, fields: Sequence[Field], picker: Picker) -> None:
        self.fields = list(fields)
        self.picker = picker
        self._index: Dict[int, int] = {id(f.cell): i for i, f in enumerate(self.fields)}

    def _dependency_index(self, current: Field) -> Optional[int]:
        depends_on = getattr(current.options, "depends_on", None)
        if depends_on is None:
            return None
        return self._index.get(id(depends_on))

    async def run(self) -> Dict[str, Any]:
        """Fill every field; return the chosen values by cell name."""
        i = 0
        while i < len(self.fields):
            current = self.fields[i]
            options = await current.available()
            if options:
                current.cell.set(await self.picker.choose(current.title, options))
                i += 1
                continue

            parent = self._dependency_index(current)
            if parent is None:
                raise NotFoundError(f"no options available for {current.title.lower()}")
            dead_end = self.fields[parent].cell.value
            self.picker.notice(
                f"No options for {current.title.lower()} with "
                f"{self.fields[parent].cell.name} {dead_end}; choose another"
            )
            self.fields[parent].excluded.add(dead_end)
            for later in self.fields[parent:]:
                later.cell.clear()
            for later in self.fields[parent + 1 :]:
                later.reset()
            i = parent
        return {f.cell.name: f.cell.value for f in self.fields}


def _confirm(console: Console, kind: str, ref: str) -> None:
    console.print(f"Selected {kind}: {escape(ref)}")


def _filtered(refs: Sequence[str], pattern: Optional[str], flag: str) -> List[Option]:
    compiled = compile_pattern(pattern, flag)
    return [
        Option.of(ref)
        for ref in refs
        if compiled is None or compiled.search(resource_name(ref))
    ]


async def _cluster_and_service_fields(
    gateway: Gateway,
    cluster_pattern: Optional[str],
    service_pattern: Optional[str],
):
    clusters = _filtered(await gateway.list_clusters(), cluster_pattern, "--cluster")
    if not clusters:
        raise NotFoundError(f"no clusters matching '{cluster_pattern}' found")
    cluster_cell = Cell("cluster")
    service_cell = Cell("service")

    async def services(cluster_ref: str) -> List[Option]:
        refs = await gateway.list_services(cluster_ref)
        return _filtered(refs, service_pattern, "--service")

    fields = [
        Field("Select cluster", StaticOptions(clusters), cluster_cell),
        Field("Select service", DeferredOptions(services, cluster_cell), service_cell),
    ]
    return fields, cluster_cell, service_cell


async def run_exec_form(
    gateway: Gateway,
    picker: Picker,
    console: Console,
    cluster_pattern: Optional[str] = None,
    service_pattern: Optional[str] = None,
) -> ExecSelection:
    """Select an exec target with one cascading form."""
    fields, cluster_cell, service_cell = await _cluster_and_service_fields(
        gateway, cluster_pattern, service_pattern
    )
    task_cell = Cell("task")
    container_cell = Cell("container")

    async def tasks(service_ref: str) -> List[Option]:
        return [Option.of(a) for a in await gateway.list_tasks(cluster_cell.value, service_ref)]

    async def containers(task_ref: str) -> List[Option]:
        task = await gateway.describe_task(cluster_cell.value, task_ref)
        return [Option.of(c.name) for c in task.containers]

    fields += [
        Field("Select task", DeferredOptions(tasks, service_cell), task_cell),
        Field("Select container", DeferredOptions(containers, task_cell), container_cell),
    ]
    chosen = await Form(fields, picker).run()

    cluster = await gateway.describe_cluster(chosen["cluster"])
    if chosen["cluster"] not in (cluster.arn, cluster.name):
        raise NotFoundError(f"no cluster '{chosen['cluster']}' found")
    _confirm(console, "cluster", chosen["cluster"])
    service = await gateway.describe_service(cluster.arn, chosen["service"])
    if chosen["service"] not in (service.arn, service.name):
        raise NotFoundError(
            f"no service '{chosen['service']}' found in cluster {cluster.arn}"
        )
    _confirm(console, "service", chosen["service"])
    task = await gateway.describe_task(cluster.arn, chosen["task"])
    if chosen["task"] != task.arn:
        raise NotFoundError(f"no task '{chosen['task']}' found in cluster {cluster.arn}")
    _confirm(console, "task", chosen["task"])
    for container in task.containers:
        if container.name == chosen["container"]:
            _confirm(console, "container", container.name)
            return ExecSelection(
                cluster=cluster, service=service, task=task, container=container
            )
    raise NotFoundError(
        f"no container '{chosen['container']}' found in task {task.arn}"
    )


async def run_logs_form(
    gateway: Gateway,
    picker: Picker,
    console: Console,
    cluster_pattern: Optional[str] = None,
    service_pattern: Optional[str] = None,
) -> LogsSelection:
    """Select a container definition with one cascading form.

    Logs are then followed for every running task of the chosen service.
    """
    fields, cluster_cell, service_cell = await _cluster_and_service_fields(
        gateway, cluster_pattern, service_pattern
    )
    definition_cell = Cell("container definition")

    async def definitions(service_ref: str) -> List[Option]:
        service = await gateway.describe_service(cluster_cell.value, service_ref)
        task_definition = await gateway.describe_task_definition(
            service.task_definition_arn
        )
        return [Option.of(d.name) for d in task_definition.container_definitions]

    fields.append(
        Field(
            "Select container definition",
            DeferredOptions(definitions, service_cell),
            definition_cell,
        )
    )
    chosen = await Form(fields, picker).run()

    cluster = await gateway.describe_cluster(chosen["cluster"])
    if chosen["cluster"] not in (cluster.arn, cluster.name):
        raise NotFoundError(f"no cluster '{chosen['cluster']}' found")
    _confirm(console, "cluster", chosen["cluster"])
    service = await gateway.describe_service(cluster.arn, chosen["service"])
    if chosen["service"] not in (service.arn, service.name):
        raise NotFoundError(
            f"no service '{chosen['service']}' found in cluster {cluster.arn}"
        )
    _confirm(console, "service", chosen["service"])
    task_definition = await gateway.describe_task_definition(service.task_definition_arn)
    selected = tuple(
        d
        for d in task_definition.container_definitions
        if d.name == chosen["container definition"]
    )
    if not selected:
        raise NotFoundError(
            f"no container definition '{chosen['container definition']}' "
            f"found in task definition {task_definition.arn}"
        )
    _confirm(console, "container definition", selected[0].name)
    task_arns = await gateway.list_tasks(cluster.arn, service.arn)
    tasks = await gateway.describe_tasks(cluster.arn, task_arns)
    if not tasks:
        raise NotFoundError(f"no tasks found in service {service.arn}")
    return LogsSelection(
        cluster=cluster,
        service=service,
        tasks=tuple(tasks),
        task_definition=task_definition,
        container_definitions=selected,
    )
