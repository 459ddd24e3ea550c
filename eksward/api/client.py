"""Resource client capability consumed by the stages.

Any object implementing ``ResourceClient`` can drive provisioning; the
stages only read ``status`` and, for stacks, ``outputs``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class StackDescription:
    name: str
    status: str
    outputs: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ControlPlaneDescription:
    name: str
    status: str


@dataclass(frozen=True, slots=True)
class WorkerGroupDescription:
    cluster_name: str
    name: str
    status: str


@runtime_checkable
class ResourceClient(Protocol):
    """Create/describe/delete operations over the three resource families.

    Implementations raise ``RequestError`` when the provider rejects a call
    and ``NotFoundError`` when a describe finds nothing.
    """

    def create_stack(self, name: str, template: bytes) -> None: ...

    def describe_stack(self, name: str) -> StackDescription: ...

    def delete_stack(self, name: str) -> None: ...

    def create_control_plane(
        self,
        name: str,
        subnets: Sequence[str],
        role_arn: str,
        version: str,
    ) -> None: ...

    def describe_control_plane(self, name: str) -> ControlPlaneDescription: ...

    def create_worker_group(
        self,
        cluster_name: str,
        name: str,
        role_arn: str,
        subnets: Sequence[str],
        size: int,
    ) -> None: ...

    def describe_worker_group(self, cluster_name: str, name: str) -> WorkerGroupDescription: ...
