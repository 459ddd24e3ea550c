"""eksward - Provision EKS clusters on a caller-owned network stack.

Example:

    from eksward import Cluster, ClusterConfig
    from eksward.config import read_template

    config = ClusterConfig(name="test", region="us-west-2", version="1.21")

    with Cluster(config, template=read_template("cf-template.yaml")) as cluster:
        cluster.add_worker_groups("ng-a")
"""

# Data model
from eksward.api.client import (
    ControlPlaneDescription,
    ResourceClient,
    StackDescription,
    WorkerGroupDescription,
)
from eksward.api.model import (
    ClusterHandle,
    ClusterState,
    CreatedResource,
    ResourceKind,
    StackOutputs,
)

# Orchestration
from eksward.cluster import Cluster

# Configuration
from eksward.config import (
    ClusterConfig,
    PollPolicies,
    PollPolicy,
    load_config,
    read_template,
    resolve_cluster,
)

# Exceptions
from eksward.core.exceptions import (
    ConfigurationError,
    EkswardError,
    FatalStatusError,
    InvalidStateError,
    NotFoundError,
    RequestError,
    TimeoutError,
)
from eksward.core.poller import wait_for_status

# Logging
from eksward.logging import LogConfig

__all__ = [
    # Orchestration
    "Cluster",
    "wait_for_status",
    # Data model
    "ClusterHandle",
    "ClusterState",
    "CreatedResource",
    "ResourceKind",
    "StackOutputs",
    "ResourceClient",
    "StackDescription",
    "ControlPlaneDescription",
    "WorkerGroupDescription",
    # Configuration
    "ClusterConfig",
    "PollPolicies",
    "PollPolicy",
    "load_config",
    "read_template",
    "resolve_cluster",
    "LogConfig",
    # Exceptions
    "EkswardError",
    "ConfigurationError",
    "RequestError",
    "NotFoundError",
    "TimeoutError",
    "FatalStatusError",
    "InvalidStateError",
]
