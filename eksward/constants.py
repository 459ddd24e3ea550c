"""Centralized constants and enums for eksward.

Status values, stack output keys and default polling policies live here
so stages and tests compare against the same strings.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Final

# =============================================================================
# Naming
# =============================================================================

STACK_NAME_PREFIX: Final = "eksctl-"


# =============================================================================
# CloudFormation
# =============================================================================


class StackStatus(StrEnum):
    """CloudFormation stack status values."""

    CREATE_IN_PROGRESS = "CREATE_IN_PROGRESS"
    CREATE_COMPLETE = "CREATE_COMPLETE"
    CREATE_FAILED = "CREATE_FAILED"
    ROLLBACK_IN_PROGRESS = "ROLLBACK_IN_PROGRESS"
    ROLLBACK_FAILED = "ROLLBACK_FAILED"
    ROLLBACK_COMPLETE = "ROLLBACK_COMPLETE"
    DELETE_IN_PROGRESS = "DELETE_IN_PROGRESS"
    DELETE_FAILED = "DELETE_FAILED"
    DELETE_COMPLETE = "DELETE_COMPLETE"


class StackOutput(StrEnum):
    """Output keys the network and role template declares."""

    PUBLIC_SUBNETS = "PublicSubnetIds"
    PRIVATE_SUBNETS = "PrivateSubnetIds"
    CLUSTER_ROLE_ARN = "ClusterRoleARN"
    NODE_ROLE_ARN = "NodeRoleARN"


class Capability(StrEnum):
    """IAM acknowledgements for templates that define named roles."""

    IAM = "CAPABILITY_IAM"
    NAMED_IAM = "CAPABILITY_NAMED_IAM"


STACK_CAPABILITIES: Final = (Capability.IAM, Capability.NAMED_IAM)

STACK_FATAL_STATUSES: Final = frozenset({
    StackStatus.CREATE_FAILED,
    StackStatus.ROLLBACK_IN_PROGRESS,
    StackStatus.ROLLBACK_FAILED,
    StackStatus.ROLLBACK_COMPLETE,
    StackStatus.DELETE_IN_PROGRESS,
    StackStatus.DELETE_FAILED,
    StackStatus.DELETE_COMPLETE,
})


# =============================================================================
# EKS
# =============================================================================


class ClusterStatus(StrEnum):
    """EKS control plane status values."""

    CREATING = "CREATING"
    ACTIVE = "ACTIVE"
    DELETING = "DELETING"
    FAILED = "FAILED"
    UPDATING = "UPDATING"
    PENDING = "PENDING"


class NodegroupStatus(StrEnum):
    """EKS managed node group status values."""

    CREATING = "CREATING"
    ACTIVE = "ACTIVE"
    UPDATING = "UPDATING"
    DELETING = "DELETING"
    CREATE_FAILED = "CREATE_FAILED"
    DELETE_FAILED = "DELETE_FAILED"
    DEGRADED = "DEGRADED"


CLUSTER_FATAL_STATUSES: Final = frozenset({ClusterStatus.FAILED, ClusterStatus.DELETING})

NODEGROUP_FATAL_STATUSES: Final = frozenset({
    NodegroupStatus.CREATE_FAILED,
    NodegroupStatus.DELETING,
    NodegroupStatus.DELETE_FAILED,
})

# min = desired = max
WORKER_GROUP_SIZE: Final = 1


# =============================================================================
# Polling (seconds)
# =============================================================================

STACK_POLL_INTERVAL: Final = 15.0
STACK_POLL_TIMEOUT: Final = 10 * 60.0
CLUSTER_POLL_INTERVAL: Final = 30.0
CLUSTER_POLL_TIMEOUT: Final = 30 * 60.0
NODEGROUP_POLL_INTERVAL: Final = 30.0
NODEGROUP_POLL_TIMEOUT: Final = 30 * 60.0


# =============================================================================
# Defaults
# =============================================================================

DEFAULT_REGION: Final = "us-west-2"
DEFAULT_VERSION: Final = "1.21"
