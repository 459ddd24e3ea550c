"""Cluster configuration and TOML loading.

Loads ~/.eksward/defaults.toml (global) and eksward.toml (project),
merges them, and resolves named clusters into ClusterConfig instances.

Example eksward.toml:

    [clusters.test]
    region = "us-west-2"
    version = "1.21"
    template = "cf-template.yaml"

    [polling.control_plane]
    interval = 10
    timeout = 900
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from eksward.constants import (
    CLUSTER_POLL_INTERVAL,
    CLUSTER_POLL_TIMEOUT,
    DEFAULT_REGION,
    DEFAULT_VERSION,
    NODEGROUP_POLL_INTERVAL,
    NODEGROUP_POLL_TIMEOUT,
    STACK_NAME_PREFIX,
    STACK_POLL_INTERVAL,
    STACK_POLL_TIMEOUT,
)
from eksward.core.exceptions import ConfigurationError

type RawConfig = dict[str, Any]

GLOBAL_CONFIG_PATH = Path.home() / ".eksward" / "defaults.toml"
PROJECT_CONFIG_NAME = "eksward.toml"


@dataclass(frozen=True, slots=True)
class ClusterConfig:
    """User-supplied description of the cluster to provision.

    Args:
        name: Cluster name. The network stack is named ``eksctl-<name>``.
        region: AWS region. Default: us-west-2
        version: Kubernetes version of the control plane.
        template: Path to the network and role CloudFormation template.
    """

    name: str
    region: str = DEFAULT_REGION
    version: str = DEFAULT_VERSION
    template: Path | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ConfigurationError("Cluster name must not be empty")

    @property
    def stack_name(self) -> str:
        return f"{STACK_NAME_PREFIX}{self.name}"


@dataclass(frozen=True, slots=True)
class PollPolicy:
    """Fixed-interval polling policy, in seconds."""

    interval: float
    timeout: float

    def __post_init__(self) -> None:
        if self.interval < 0 or self.timeout < 0:
            raise ConfigurationError(
                f"Poll interval and timeout must be non-negative, got {self.interval}/{self.timeout}"
            )


@dataclass(frozen=True, slots=True)
class PollPolicies:
    """Polling policy per resource family."""

    stack: PollPolicy = field(
        default_factory=lambda: PollPolicy(STACK_POLL_INTERVAL, STACK_POLL_TIMEOUT)
    )
    control_plane: PollPolicy = field(
        default_factory=lambda: PollPolicy(CLUSTER_POLL_INTERVAL, CLUSTER_POLL_TIMEOUT)
    )
    worker_group: PollPolicy = field(
        default_factory=lambda: PollPolicy(NODEGROUP_POLL_INTERVAL, NODEGROUP_POLL_TIMEOUT)
    )


def read_template(path: str | Path) -> bytes:
    """Read a CloudFormation template. The contents are not validated."""
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(f"Template not found: {path}")
    return path.read_bytes()


def _deep_merge(base: RawConfig, override: RawConfig) -> RawConfig:
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_toml(path: Path) -> RawConfig:
    if not path.is_file():
        return {}
    with path.open("rb") as f:
        return tomllib.load(f)


def load_config(
    *,
    project_dir: Path | None = None,
    global_path: Path | None = None,
) -> RawConfig:
    global_cfg = _read_toml(global_path or GLOBAL_CONFIG_PATH)
    project_path = (project_dir or Path.cwd()) / PROJECT_CONFIG_NAME
    project_cfg = _read_toml(project_path)

    merged = _deep_merge(global_cfg, project_cfg)
    merged.setdefault("clusters", {})
    merged.setdefault("polling", {})
    return merged


def _build_policies(raw: RawConfig) -> PollPolicies:
    policies = PollPolicies()
    names = {f.name for f in fields(PollPolicies)}

    for family, overrides in raw.items():
        if family not in names:
            raise ConfigurationError(
                f"Unknown polling section '{family}'. Valid: {', '.join(sorted(names))}"
            )
        current: PollPolicy = getattr(policies, family)
        try:
            policies = replace(policies, **{family: replace(current, **overrides)})
        except TypeError as e:
            raise ConfigurationError(f"Invalid polling.{family}: {e}") from e

    return policies


def resolve_cluster(
    name: str,
    *,
    project_dir: Path | None = None,
    global_path: Path | None = None,
) -> tuple[ClusterConfig, PollPolicies]:
    config = load_config(project_dir=project_dir, global_path=global_path)

    clusters = config["clusters"]
    if name not in clusters:
        raise ConfigurationError(
            f"Cluster '{name}' not found. Available: {', '.join(clusters) or 'none'}"
        )

    raw_cluster = dict(clusters[name])
    template = raw_cluster.pop("template", None)
    if template is not None:
        base = project_dir or Path.cwd()
        raw_cluster["template"] = base / template

    try:
        cluster = ClusterConfig(name=name, **raw_cluster)
    except TypeError as e:
        raise ConfigurationError(f"Invalid cluster '{name}': {e}") from e

    return cluster, _build_policies(config["polling"])
