"""Client-side records of one provisioning session."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from eksward.constants import StackOutput
from eksward.core.exceptions import NotFoundError

if TYPE_CHECKING:
    from eksward.config import ClusterConfig


class ClusterState(StrEnum):
    """Lifecycle of a Cluster.

    OPERATIONAL is re-entered every time worker groups are added.
    """

    UNPROVISIONED = "unprovisioned"
    NETWORK_READY = "network-ready"
    CONTROL_PLANE_READY = "control-plane-ready"
    OPERATIONAL = "operational"
    DELETING = "deleting"
    DELETED = "deleted"


class ResourceKind(StrEnum):
    STACK = "stack"
    CONTROL_PLANE = "control-plane"
    WORKER_GROUP = "worker-group"


@dataclass(frozen=True, slots=True)
class CreatedResource:
    """A resource whose create request the provider accepted."""

    kind: ResourceKind
    name: str


@dataclass(frozen=True, slots=True)
class StackOutputs:
    """Identifiers exported by the network and role stack."""

    public_subnets: tuple[str, ...]
    private_subnets: tuple[str, ...]
    cluster_role_arn: str
    node_role_arn: str

    @property
    def subnets(self) -> tuple[str, ...]:
        """Public subnets first, then private."""
        return self.public_subnets + self.private_subnets

    @classmethod
    def from_outputs(cls, outputs: Mapping[str, str]) -> StackOutputs:
        """Build from raw stack outputs, ignoring keys that are not recognized.

        Raises:
            NotFoundError: One of the four expected keys is absent.
        """
        missing = [key.value for key in StackOutput if key not in outputs]
        if missing:
            raise NotFoundError(f"Stack outputs missing: {', '.join(missing)}")

        return cls(
            public_subnets=_split(outputs[StackOutput.PUBLIC_SUBNETS]),
            private_subnets=_split(outputs[StackOutput.PRIVATE_SUBNETS]),
            cluster_role_arn=outputs[StackOutput.CLUSTER_ROLE_ARN],
            node_role_arn=outputs[StackOutput.NODE_ROLE_ARN],
        )


def _split(value: str) -> tuple[str, ...]:
    return tuple(value.split(","))


@dataclass(slots=True)
class ClusterHandle:
    """Derived identifiers for one cluster, filled in as stages complete.

    Only references cloud resources by name and ARN; deleting the handle
    deletes nothing.
    """

    cluster_name: str
    stack_name: str
    region: str
    version: str
    public_subnets: tuple[str, ...] = ()
    private_subnets: tuple[str, ...] = ()
    cluster_role_arn: str | None = None
    node_role_arn: str | None = None
    state: ClusterState = ClusterState.UNPROVISIONED
    created: list[CreatedResource] = field(default_factory=list)
    worker_groups: list[str] = field(default_factory=list)

    @classmethod
    def from_config(cls, config: ClusterConfig) -> ClusterHandle:
        return cls(
            cluster_name=config.name,
            stack_name=config.stack_name,
            region=config.region,
            version=config.version,
        )

    def apply_outputs(self, outputs: StackOutputs) -> None:
        self.public_subnets = outputs.public_subnets
        self.private_subnets = outputs.private_subnets
        self.cluster_role_arn = outputs.cluster_role_arn
        self.node_role_arn = outputs.node_role_arn

    def record(self, kind: ResourceKind, name: str) -> None:
        self.created.append(CreatedResource(kind, name))
        if kind is ResourceKind.WORKER_GROUP:
            self.worker_groups.append(name)
