"""Provisioning stages: network and roles, control plane, worker groups.

Each stage issues its create request(s), waits for the resource to become
ready, and returns what the next stage needs. Errors are never retried or
rolled back here.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from loguru import logger

from eksward.api.model import StackOutputs
from eksward.config import PollPolicies
from eksward.constants import (
    CLUSTER_FATAL_STATUSES,
    NODEGROUP_FATAL_STATUSES,
    STACK_FATAL_STATUSES,
    WORKER_GROUP_SIZE,
    ClusterStatus,
    NodegroupStatus,
    StackStatus,
)
from eksward.core.poller import wait_for_status

if TYPE_CHECKING:
    from eksward.api.client import ResourceClient
    from eksward.config import PollPolicy

_DEFAULTS = PollPolicies()


def parse_stack_outputs(outputs: dict[str, str]) -> StackOutputs:
    """Extract subnets and role ARNs from raw stack outputs."""
    return StackOutputs.from_outputs(outputs)


def create_foundation(
    client: ResourceClient,
    name: str,
    template: bytes,
    *,
    policy: PollPolicy = _DEFAULTS.stack,
    on_created: Callable[[str], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> StackOutputs:
    """Create the network and IAM role stack and return its outputs.

    Args:
        client: Resource client.
        name: Stack name.
        template: CloudFormation template body, passed through untouched.
        policy: Polling policy for stack creation.
        on_created: Called with the stack name once the create is accepted.
        sleep: Sleep function for polling, replaceable in tests.

    Raises:
        RequestError: The provider rejected the create or describe call.
        TimeoutError: The stack did not reach CREATE_COMPLETE in time.
        FatalStatusError: The stack failed or started rolling back.
        NotFoundError: The stack or one of its outputs is missing.
    """
    log = logger.bind(stage="network", resource=name)
    log.info("Creating network and role stack")
    client.create_stack(name, template)
    if on_created is not None:
        on_created(name)

    wait_for_status(
        lambda: client.describe_stack(name).status,
        StackStatus.CREATE_COMPLETE,
        interval=policy.interval,
        timeout=policy.timeout,
        fatal=STACK_FATAL_STATUSES,
        description=f"stack {name}",
        sleep=sleep,
    )

    outputs = parse_stack_outputs(dict(client.describe_stack(name).outputs))
    log.info(
        "Stack ready: {public} public / {private} private subnets",
        public=len(outputs.public_subnets), private=len(outputs.private_subnets),
    )
    return outputs


def create_control_plane(
    client: ResourceClient,
    name: str,
    subnets: Sequence[str],
    role_arn: str,
    version: str,
    *,
    policy: PollPolicy = _DEFAULTS.control_plane,
    on_created: Callable[[str], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Create the EKS control plane and wait until it is ACTIVE.

    ``subnets`` is forwarded as given, even when empty; the provider's
    validation error surfaces as a RequestError.
    """
    log = logger.bind(stage="control-plane", resource=name)
    log.info("Creating control plane (version {version})", version=version)
    client.create_control_plane(name, subnets, role_arn, version)
    if on_created is not None:
        on_created(name)

    wait_for_status(
        lambda: client.describe_control_plane(name).status,
        ClusterStatus.ACTIVE,
        interval=policy.interval,
        timeout=policy.timeout,
        fatal=CLUSTER_FATAL_STATUSES,
        description=f"control plane {name}",
        sleep=sleep,
    )
    log.info("Control plane active")


def create_worker_groups(
    client: ResourceClient,
    names: Sequence[str],
    cluster_name: str,
    role_arn: str,
    public_subnets: Sequence[str],
    *,
    policy: PollPolicy = _DEFAULTS.worker_group,
    on_created: Callable[[str], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Create worker groups one by one, then wait for each in turn.

    The first rejected create aborts the stage before any polling. Groups
    are polled sequentially, each with the full ``policy.timeout``.
    """
    log = logger.bind(stage="worker-groups", cluster=cluster_name)

    for name in names:
        log.info("Creating worker group {name}", name=name)
        client.create_worker_group(cluster_name, name, role_arn, public_subnets, WORKER_GROUP_SIZE)
        if on_created is not None:
            on_created(name)

    for name in names:
        wait_for_status(
            lambda name=name: client.describe_worker_group(cluster_name, name).status,
            NodegroupStatus.ACTIVE,
            interval=policy.interval,
            timeout=policy.timeout,
            fatal=NODEGROUP_FATAL_STATUSES,
            description=f"worker group {name}",
            sleep=sleep,
        )
        log.info("Worker group {name} active", name=name)
