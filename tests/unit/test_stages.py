from __future__ import annotations

import pytest

from iecs.exceptions import NotFoundError, PreflightError, RemoteError, SelectionCancelled
from iecs.selector.stages import Selectors, select_exec_target, select_log_targets
from iecs.shared.models import Cluster, Service, Task, TaskDefinition

from conftest import ACCOUNT, FakeGateway, ScriptedPicker, awslogs_definition, console_text


def _selectors(gateway, console, answers=()):
    picker = ScriptedPicker(answers, console=console)
    return Selectors(gateway, picker, console), picker


@pytest.mark.asyncio
async def test_single_cluster_is_selected_without_prompt(gateway, console) -> None:
    gateway.add_cluster("c1")
    selectors, picker = _selectors(gateway, console)

    cluster = await selectors.cluster()

    assert picker.prompts == []
    assert gateway.called("describe_cluster") == [("describe_cluster", f"{ACCOUNT}:cluster/c1")]
    assert cluster.name == "c1"
    assert f"Selected cluster: {ACCOUNT}:cluster/c1" in console_text(console)


@pytest.mark.asyncio
async def test_list_failure_surfaces_without_describe(gateway, console) -> None:
    gateway.errors["list_clusters"] = RemoteError("ListClusters", "remote timeout")
    selectors, _ = _selectors(gateway, console)

    with pytest.raises(RemoteError) as info:
        await select_exec_target(selectors)

    assert str(info.value) == "remote timeout"
    assert gateway.called("describe_cluster") == []


@pytest.mark.asyncio
async def test_operator_picks_among_several_clusters(gateway, console) -> None:
    gateway.add_cluster("a")
    gateway.add_cluster("b")
    selectors, picker = _selectors(gateway, console, [f"{ACCOUNT}:cluster/b"])

    cluster = await selectors.cluster()

    assert cluster.name == "b"
    assert picker.prompts[0][0] == "Select cluster"


@pytest.mark.asyncio
async def test_pattern_narrows_clusters_to_fast_path(gateway, console) -> None:
    gateway.add_cluster("staging")
    gateway.add_cluster("production")
    selectors, picker = _selectors(gateway, console)

    cluster = await selectors.cluster("^prod")

    assert cluster.name == "production"
    assert picker.prompts == []


@pytest.mark.asyncio
async def test_pattern_without_match_is_not_found(gateway, console) -> None:
    gateway.add_cluster("staging")
    selectors, _ = _selectors(gateway, console)
    with pytest.raises(NotFoundError, match="no clusters matching 'prod'"):
        await selectors.cluster("prod")


@pytest.mark.asyncio
async def test_invalid_pattern_is_a_preflight_error(gateway, console) -> None:
    gateway.add_cluster("staging")
    selectors, _ = _selectors(gateway, console)
    with pytest.raises(PreflightError, match="--cluster"):
        await selectors.cluster("(")


@pytest.mark.asyncio
async def test_stale_describe_is_not_found(gateway, console) -> None:
    cluster = gateway.add_cluster("c1")
    service = gateway.add_service(cluster, "api")
    other = Service(
        arn=f"{ACCOUNT}:service/c1/other",
        name="other",
        cluster_arn=cluster.arn,
        task_definition_arn="td",
    )
    gateway.stale[service.arn] = other
    selectors, _ = _selectors(gateway, console)

    with pytest.raises(NotFoundError, match=service.arn):
        await selectors.service(cluster)


@pytest.mark.asyncio
async def test_describe_of_same_named_service_elsewhere_is_not_found(gateway, console) -> None:
    cluster = gateway.add_cluster("c1")
    service = gateway.add_service(cluster, "api")
    gateway.stale[service.arn] = Service(
        arn=f"{ACCOUNT}:service/c2/api",
        name="api",
        cluster_arn=f"{ACCOUNT}:cluster/c2",
        task_definition_arn="td",
    )
    selectors, _ = _selectors(gateway, console)

    with pytest.raises(NotFoundError, match=service.arn):
        await selectors.service(cluster)


@pytest.mark.asyncio
async def test_stale_task_describe_is_not_found(gateway, console) -> None:
    cluster = gateway.add_cluster("c1")
    service = gateway.add_service(cluster, "api")
    task = gateway.add_task(service, "t1")
    gateway.stale[task.arn] = Task(
        arn=f"{ACCOUNT}:task/c1/t2",
        cluster_arn=cluster.arn,
        last_status="STOPPED",
        task_definition_arn="td",
    )
    selectors, _ = _selectors(gateway, console)

    with pytest.raises(NotFoundError, match=task.arn):
        await selectors.task(service)


@pytest.mark.asyncio
async def test_task_without_containers_is_not_found(console) -> None:
    task = Task(arn=f"{ACCOUNT}:task/c1/t1", cluster_arn="", last_status="", task_definition_arn="")
    selectors, _ = _selectors(FakeGateway(), console)
    with pytest.raises(NotFoundError, match="no containers found"):
        await selectors.container(task)


@pytest.mark.asyncio
async def test_exec_pipeline_resolves_every_slot(gateway, console) -> None:
    cluster = gateway.add_cluster("my-cluster")
    service = gateway.add_service(cluster, "web")
    gateway.add_service(cluster, "worker")
    task = gateway.add_task(service, "12345678", [("my-container", "abc"), ("proxy", "def")])
    selectors, picker = _selectors(gateway, console, [service.arn, "my-container"])

    selection = await select_exec_target(selectors)

    assert selection.cluster == cluster
    assert selection.service == service
    assert selection.task == task
    assert selection.container.runtime_id == "abc"
    assert [p[0] for p in picker.prompts] == ["Select service", "Select container"]
    names = [c[0] for c in gateway.calls]
    assert names == [
        "list_clusters",
        "describe_cluster",
        "list_services",
        "describe_service",
        "list_tasks",
        "describe_tasks",
    ]
    output = console_text(console)
    for kind in ("cluster", "service", "task", "container"):
        assert f"Selected {kind}:" in output


@pytest.mark.asyncio
async def test_cancel_mid_pipeline_returns_nothing(gateway, console) -> None:
    cluster = gateway.add_cluster("c1")
    gateway.add_service(cluster, "a")
    gateway.add_service(cluster, "b")
    selectors, _ = _selectors(gateway, console, [None])

    with pytest.raises(SelectionCancelled):
        await select_exec_target(selectors)
    assert gateway.called("list_tasks") == []


@pytest.mark.asyncio
async def test_log_pipeline_selects_definitions_and_tasks(gateway, console) -> None:
    cluster = gateway.add_cluster("c1")
    td = TaskDefinition(
        arn=f"{ACCOUNT}:task-definition/api:4",
        family="api",
        revision=4,
        container_definitions=(
            awslogs_definition("web", "/ecs/api", "ecs"),
            awslogs_definition("proxy", "/ecs/api", "ecs"),
        ),
    )
    service = gateway.add_service(cluster, "api", td)
    t1 = gateway.add_task(service, "t1")
    t2 = gateway.add_task(service, "t2")
    selectors, picker = _selectors(gateway, console, [["web"], [t1.arn, t2.arn]])

    selection = await select_log_targets(selectors)

    assert selection.task_definition == td
    assert [d.name for d in selection.container_definitions] == ["web"]
    assert selection.tasks == (t1, t2)
    assert [p[0] for p in picker.prompts] == [
        "Select container definitions",
        "Select tasks",
    ]


@pytest.mark.asyncio
async def test_missing_task_in_describe_is_not_found(gateway, console) -> None:
    cluster = gateway.add_cluster("c1")
    service = gateway.add_service(cluster, "api")
    task = gateway.add_task(service, "t1")
    gateway.tasks[(cluster.arn, service.arn)] = []
    gateway.list_tasks = _listing([task.arn])  # type: ignore[method-assign]
    selectors, _ = _selectors(gateway, console)

    with pytest.raises(NotFoundError, match=task.arn):
        await selectors.tasks(service)


def _listing(arns):
    async def list_tasks(cluster_ref, service_ref):
        return list(arns)

    return list_tasks


def test_cluster_type_is_frozen() -> None:
    cluster = Cluster(arn="a", name="n")
    with pytest.raises(AttributeError):
        cluster.name = "m"  # type: ignore[misc]


@pytest.mark.asyncio
async def test_container_lookup_is_exact(gateway, console) -> None:
    cluster = gateway.add_cluster("c1")
    service = gateway.add_service(cluster, "api")
    task = gateway.add_task(service, "t1", [("web", "r1"), ("web-debug", "r2")])
    selectors, _ = _selectors(gateway, console, ["web-debug"])

    container = await selectors.container(task)

    assert (container.name, container.runtime_id) == ("web-debug", "r2")
