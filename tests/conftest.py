from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import pytest

from eksward.api.client import (
    ControlPlaneDescription,
    StackDescription,
    WorkerGroupDescription,
)
from eksward.config import ClusterConfig, PollPolicies, PollPolicy
from eksward.core.exceptions import NotFoundError

OUTPUTS = {
    "PublicSubnetIds": "subnet-pub-a,subnet-pub-b,subnet-pub-c",
    "PrivateSubnetIds": "subnet-priv-a,subnet-priv-b",
    "ClusterRoleARN": "arn:aws:iam::123456789012:role/test-cluster",
    "NodeRoleARN": "arn:aws:iam::123456789012:role/test-node",
    "VpcId": "vpc-0123",
}

TEMPLATE = b"AWSTemplateFormatVersion: '2010-09-09'\n"


class _Script:
    """Replays statuses in order, repeating the last one forever."""

    def __init__(self, statuses: Sequence[str]) -> None:
        self._statuses = list(statuses)
        self._i = 0

    def next(self) -> str:
        status = self._statuses[min(self._i, len(self._statuses) - 1)]
        self._i += 1
        return status


@dataclass
class FakeResourceClient:
    """In-memory ResourceClient that records every call.

    ``errors`` maps (operation, name) to the exception that call raises.
    """

    stack_statuses: Sequence[str] = ("CREATE_IN_PROGRESS", "CREATE_COMPLETE")
    cluster_statuses: Sequence[str] = ("CREATING", "ACTIVE")
    nodegroup_statuses: Sequence[str] = ("CREATING", "ACTIVE")
    outputs: dict[str, str] = field(default_factory=lambda: dict(OUTPUTS))
    errors: dict[tuple[str, str], Exception] = field(default_factory=dict)
    calls: list[tuple] = field(default_factory=list)
    _stacks: dict[str, _Script] = field(default_factory=dict)
    _clusters: dict[str, _Script] = field(default_factory=dict)
    _nodegroups: dict[tuple[str, str], _Script] = field(default_factory=dict)

    def _enter(self, operation: str, name: str, *args: object) -> None:
        self.calls.append((operation, name, *args))
        error = self.errors.get((operation, name))
        if error is not None:
            raise error

    def ops(self, *operations: str) -> list[tuple]:
        return [c for c in self.calls if not operations or c[0] in operations]

    def create_stack(self, name: str, template: bytes) -> None:
        self._enter("create_stack", name, template)
        self._stacks[name] = _Script(self.stack_statuses)

    def describe_stack(self, name: str) -> StackDescription:
        self._enter("describe_stack", name)
        if name not in self._stacks:
            raise NotFoundError(f"Stack {name} not found")
        return StackDescription(name=name, status=self._stacks[name].next(), outputs=self.outputs)

    def delete_stack(self, name: str) -> None:
        self._enter("delete_stack", name)
        self._stacks.pop(name, None)

    def create_control_plane(
        self, name: str, subnets: Sequence[str], role_arn: str, version: str,
    ) -> None:
        self._enter("create_control_plane", name, tuple(subnets), role_arn, version)
        self._clusters[name] = _Script(self.cluster_statuses)

    def describe_control_plane(self, name: str) -> ControlPlaneDescription:
        self._enter("describe_control_plane", name)
        if name not in self._clusters:
            raise NotFoundError(f"Cluster {name} not found")
        return ControlPlaneDescription(name=name, status=self._clusters[name].next())

    def create_worker_group(
        self, cluster_name: str, name: str, role_arn: str, subnets: Sequence[str], size: int,
    ) -> None:
        self._enter("create_worker_group", name, cluster_name, role_arn, tuple(subnets), size)
        self._nodegroups[(cluster_name, name)] = _Script(self.nodegroup_statuses)

    def describe_worker_group(self, cluster_name: str, name: str) -> WorkerGroupDescription:
        self._enter("describe_worker_group", name)
        script = self._nodegroups.get((cluster_name, name))
        if script is None:
            raise NotFoundError(f"Nodegroup {name} not found")
        return WorkerGroupDescription(cluster_name=cluster_name, name=name, status=script.next())


@pytest.fixture
def make_client() -> Callable[..., FakeResourceClient]:
    return FakeResourceClient


@pytest.fixture
def fake_client() -> FakeResourceClient:
    return FakeResourceClient()


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def fake_sleep(sleeps: list[float]) -> Callable[[float], None]:
    return sleeps.append


@pytest.fixture
def config() -> ClusterConfig:
    return ClusterConfig(name="test", region="us-west-2", version="1.21")


@pytest.fixture
def policies() -> PollPolicies:
    return PollPolicies(
        stack=PollPolicy(interval=15, timeout=600),
        control_plane=PollPolicy(interval=30, timeout=1800),
        worker_group=PollPolicy(interval=30, timeout=1800),
    )


@pytest.fixture
def template() -> bytes:
    return TEMPLATE


@pytest.fixture
def outputs() -> dict[str, str]:
    return dict(OUTPUTS)
