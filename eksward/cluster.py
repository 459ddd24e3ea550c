"""Cluster lifecycle: provision, add worker groups, delete.

Example:
    from eksward import Cluster, ClusterConfig
    from eksward.config import read_template

    config = ClusterConfig(name="test", region="us-west-2", version="1.21")
    cluster = Cluster(config, template=read_template("cf-template.yaml"))
    cluster.provision()
    cluster.add_worker_groups("ng-a", "ng-b")
    cluster.delete()

Stages run strictly in order and failures propagate untouched. Nothing is
rolled back: ``handle.created`` lists what exists so the caller can clean
up.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from types import TracebackType
from typing import TYPE_CHECKING

from loguru import logger

from eksward import stages
from eksward.api.model import ClusterHandle, ClusterState, ResourceKind
from eksward.config import ClusterConfig, PollPolicies, read_template
from eksward.constants import StackStatus
from eksward.core.exceptions import (
    ConfigurationError,
    InvalidStateError,
    NotFoundError,
)
from eksward.core.poller import wait_for_status
from eksward.logging import LogConfig, setup_logging, teardown_logging

if TYPE_CHECKING:
    from eksward.api.client import ResourceClient

_DELETED = "DELETED"


class Cluster:
    """Provisions one EKS cluster on top of a network and IAM role stack.

    Args:
        config: Cluster name, region and version.
        client: Resource client. Defaults to an AWSResourceClient for
            ``config.region``.
        template: Network and role template. Defaults to reading
            ``config.template`` at provision time.
        policies: Polling policy per resource family.
        logging: Enable logging with defaults (True) or a LogConfig.
        sleep: Sleep function used between polls.
    """

    def __init__(
        self,
        config: ClusterConfig,
        client: ResourceClient | None = None,
        *,
        template: bytes | None = None,
        policies: PollPolicies | None = None,
        logging: LogConfig | bool = False,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if client is None:
            from eksward.providers.aws import AWSResourceClient

            client = AWSResourceClient(region=config.region)

        self.config = config
        self.client = client
        self.template = template
        self.policies = policies or PollPolicies()
        self.logging = logging
        self.handle = ClusterHandle.from_config(config)
        self._sleep = sleep
        self._log_handler_ids: list[int] = []
        self._log = logger.bind(cluster=config.name)

    @property
    def state(self) -> ClusterState:
        return self.handle.state

    def __repr__(self) -> str:
        return f"Cluster(name={self.handle.cluster_name!r}, state={self.state.value!r})"

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def provision(self, template: bytes | None = None) -> ClusterHandle:
        """Create the network stack, then the control plane.

        Returns:
            The handle, with subnets and role ARNs filled in.
        """
        self._require("provision", ClusterState.UNPROVISIONED)
        body = self._resolve_template(template)
        handle = self.handle

        with self._stage("network"):
            outputs = stages.create_foundation(
                self.client,
                handle.stack_name,
                body,
                policy=self.policies.stack,
                on_created=lambda name: handle.record(ResourceKind.STACK, name),
                sleep=self._sleep,
            )
            handle.apply_outputs(outputs)
            handle.state = ClusterState.NETWORK_READY

        with self._stage("control-plane"):
            assert handle.cluster_role_arn is not None
            stages.create_control_plane(
                self.client,
                handle.cluster_name,
                outputs.subnets,
                handle.cluster_role_arn,
                handle.version,
                policy=self.policies.control_plane,
                on_created=lambda name: handle.record(ResourceKind.CONTROL_PLANE, name),
                sleep=self._sleep,
            )
            handle.state = ClusterState.CONTROL_PLANE_READY

        self._log.info("Cluster provisioned")
        return handle

    def add_worker_groups(self, *names: str) -> None:
        """Create worker groups on the active control plane and wait for them."""
        self._require(
            "add worker groups",
            ClusterState.CONTROL_PLANE_READY,
            ClusterState.OPERATIONAL,
        )
        handle = self.handle
        assert handle.node_role_arn is not None

        with self._stage("worker-groups"):
            stages.create_worker_groups(
                self.client,
                names,
                handle.cluster_name,
                handle.node_role_arn,
                handle.public_subnets,
                policy=self.policies.worker_group,
                on_created=lambda name: handle.record(ResourceKind.WORKER_GROUP, name),
                sleep=self._sleep,
            )
            handle.state = ClusterState.OPERATIONAL

    def delete(self, *, wait: bool = False) -> None:
        """Delete the network and role stack.

        Only the stack is deleted. The control plane and worker groups are
        left to the provider's dependency handling, or to the caller.

        Args:
            wait: Block until the stack is gone.
        """
        if self.state is ClusterState.DELETED:
            raise InvalidStateError("delete", self.state.value)

        name = self.handle.stack_name
        with self._stage("delete"):
            self.client.delete_stack(name)
            self.handle.state = ClusterState.DELETING
            self._log.info("Stack {name} deletion requested", name=name)

            if wait:
                policy = self.policies.stack
                wait_for_status(
                    self._stack_deletion_status,
                    _DELETED,
                    interval=policy.interval,
                    timeout=policy.timeout,
                    fatal=(StackStatus.DELETE_FAILED,),
                    description=f"stack {name} deletion",
                    sleep=self._sleep,
                )
                self.handle.state = ClusterState.DELETED
                self._log.info("Stack {name} deleted", name=name)

    # -------------------------------------------------------------------------
    # Context manager
    # -------------------------------------------------------------------------

    def __enter__(self) -> Cluster:
        """Enable logging and provision the cluster."""
        if self.logging:
            match self.logging:
                case True:
                    log_config = LogConfig()
                case _:
                    log_config = self.logging
            self._log_handler_ids = setup_logging(log_config)

        try:
            self.provision()
        except BaseException:
            self._teardown_logging()
            raise
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Delete the stack, without waiting, and stop logging."""
        try:
            if self.state not in (ClusterState.DELETING, ClusterState.DELETED):
                self.delete()
        finally:
            self._teardown_logging()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _require(self, operation: str, *allowed: ClusterState) -> None:
        if self.state not in allowed:
            raise InvalidStateError(operation, self.state.value)

    def _resolve_template(self, template: bytes | None) -> bytes:
        if template is not None:
            return template
        if self.template is not None:
            return self.template
        if self.config.template is not None:
            return read_template(self.config.template)
        raise ConfigurationError(f"No template given for cluster '{self.config.name}'")

    def _stack_deletion_status(self) -> str:
        try:
            status = self.client.describe_stack(self.handle.stack_name).status
        except NotFoundError:
            return _DELETED
        return _DELETED if status == StackStatus.DELETE_COMPLETE else status

    @contextmanager
    def _stage(self, stage: str) -> Iterator[None]:
        try:
            yield
        except Exception as e:
            self._log.error(
                "Stage {stage} failed: {err}",
                stage=stage, err=e,
            )
            raise

    def _teardown_logging(self) -> None:
        if self._log_handler_ids:
            teardown_logging(self._log_handler_ids)
            self._log_handler_ids = []
