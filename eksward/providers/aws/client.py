"""boto3 implementation of the ResourceClient capability.

CloudFormation holds the network and IAM roles; EKS holds the control
plane and managed node groups. botocore ``ClientError`` never leaves this
module: it is translated to ``RequestError`` or ``NotFoundError``.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from functools import cached_property
from typing import TYPE_CHECKING

import boto3
from botocore.exceptions import ClientError
from loguru import logger

from eksward.api.client import (
    ControlPlaneDescription,
    StackDescription,
    WorkerGroupDescription,
)
from eksward.constants import STACK_CAPABILITIES
from eksward.core.exceptions import NotFoundError, RequestError

if TYPE_CHECKING:
    from mypy_boto3_cloudformation import CloudFormationClient
    from mypy_boto3_eks import EKSClient

_NOT_FOUND_CODES = frozenset({"ResourceNotFoundException", "NotFoundException"})


def _is_not_found(error: ClientError) -> bool:
    err = error.response.get("Error", {})
    code = err.get("Code", "")
    if code in _NOT_FOUND_CODES:
        return True
    # CloudFormation reports unknown stacks as a ValidationError
    return code == "ValidationError" and "does not exist" in err.get("Message", "")


def _call[T](operation: str, fn: Callable[[], T], *, not_found: bool = False) -> T:
    try:
        return fn()
    except ClientError as e:
        err = e.response.get("Error", {})
        if not_found and _is_not_found(e):
            raise NotFoundError(f"{operation}: {err.get('Message', 'resource not found')}") from e
        raise RequestError(operation, err.get("Message", str(e)), err.get("Code")) from e


class AWSResourceClient:
    """Issues CloudFormation and EKS requests for one region."""

    def __init__(self, region: str, session: boto3.Session | None = None) -> None:
        """Initialize the client.

        Args:
            region: AWS region for every request.
            session: boto3 session to build clients from. Defaults to a new
                session using the standard credential chain.
        """
        self.region = region
        self._session = session

    @cached_property
    def _boto(self) -> boto3.Session:
        return self._session or boto3.Session()

    @cached_property
    def _cloudformation(self) -> CloudFormationClient:
        return self._boto.client("cloudformation", region_name=self.region)

    @cached_property
    def _eks(self) -> EKSClient:
        return self._boto.client("eks", region_name=self.region)

    # -------------------------------------------------------------------------
    # CloudFormation
    # -------------------------------------------------------------------------

    def create_stack(self, name: str, template: bytes) -> None:
        logger.debug("CreateStack {name}", name=name)
        try:
            body = template.decode("utf-8")
        except UnicodeDecodeError as e:
            raise RequestError("CreateStack", f"Template is not valid UTF-8: {e}") from e

        _call(
            "CreateStack",
            lambda: self._cloudformation.create_stack(
                StackName=name,
                TemplateBody=body,
                Capabilities=[c.value for c in STACK_CAPABILITIES],
            ),
        )

    def describe_stack(self, name: str) -> StackDescription:
        response = _call(
            "DescribeStacks",
            lambda: self._cloudformation.describe_stacks(StackName=name),
            not_found=True,
        )
        stacks = response.get("Stacks", [])
        if not stacks:
            raise NotFoundError(f"Stack {name} not found")

        stack = stacks[0]
        outputs = {
            o["OutputKey"]: o["OutputValue"]
            for o in stack.get("Outputs", [])
            if "OutputKey" in o and "OutputValue" in o
        }
        return StackDescription(name=name, status=stack["StackStatus"], outputs=outputs)

    def delete_stack(self, name: str) -> None:
        logger.debug("DeleteStack {name}", name=name)
        _call("DeleteStack", lambda: self._cloudformation.delete_stack(StackName=name))

    # -------------------------------------------------------------------------
    # EKS
    # -------------------------------------------------------------------------

    def create_control_plane(
        self,
        name: str,
        subnets: Sequence[str],
        role_arn: str,
        version: str,
    ) -> None:
        logger.debug("CreateCluster {name} ({version})", name=name, version=version)
        _call(
            "CreateCluster",
            lambda: self._eks.create_cluster(
                name=name,
                version=version,
                roleArn=role_arn,
                resourcesVpcConfig={"subnetIds": list(subnets)},
            ),
        )

    def describe_control_plane(self, name: str) -> ControlPlaneDescription:
        response = _call(
            "DescribeCluster",
            lambda: self._eks.describe_cluster(name=name),
            not_found=True,
        )
        return ControlPlaneDescription(name=name, status=response["cluster"]["status"])

    def create_worker_group(
        self,
        cluster_name: str,
        name: str,
        role_arn: str,
        subnets: Sequence[str],
        size: int,
    ) -> None:
        logger.debug("CreateNodegroup {name} on {cluster}", name=name, cluster=cluster_name)
        _call(
            "CreateNodegroup",
            lambda: self._eks.create_nodegroup(
                clusterName=cluster_name,
                nodegroupName=name,
                nodeRole=role_arn,
                subnets=list(subnets),
                scalingConfig={"minSize": size, "desiredSize": size, "maxSize": size},
            ),
        )

    def describe_worker_group(self, cluster_name: str, name: str) -> WorkerGroupDescription:
        response = _call(
            "DescribeNodegroup",
            lambda: self._eks.describe_nodegroup(clusterName=cluster_name, nodegroupName=name),
            not_found=True,
        )
        return WorkerGroupDescription(
            cluster_name=cluster_name,
            name=name,
            status=response["nodegroup"]["status"],
        )
