from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import boto3
import pytest
from botocore.stub import Stubber

from eksward.api.client import ResourceClient
from eksward.core.exceptions import NotFoundError, RequestError
from eksward.providers.aws import AWSResourceClient

pytestmark = [pytest.mark.unit, pytest.mark.xdist_group("unit")]

CREATED = datetime(2021, 6, 1, tzinfo=timezone.utc)


@pytest.fixture
def client() -> AWSResourceClient:
    session = boto3.Session(
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
        region_name="us-west-2",
    )
    return AWSResourceClient(region="us-west-2", session=session)


@pytest.fixture
def cfn(client: AWSResourceClient):
    with Stubber(client._cloudformation) as stubber:
        yield stubber
        stubber.assert_no_pending_responses()


@pytest.fixture
def eks(client: AWSResourceClient):
    with Stubber(client._eks) as stubber:
        yield stubber
        stubber.assert_no_pending_responses()


def capture(boto_client: Any, operation: str) -> dict[str, Any]:
    """Record the parameters sent for ``operation``."""
    captured: dict[str, Any] = {}
    service = boto_client.meta.service_model.service_id.hyphenize()

    def handler(params: dict[str, Any], **kwargs: Any) -> None:
        captured.update(params)

    boto_client.meta.events.register(f"before-parameter-build.{service}.{operation}", handler)
    return captured


def stack(status: str, outputs: dict[str, str] | None = None) -> dict[str, Any]:
    return {
        "StackName": "eksctl-test",
        "CreationTime": CREATED,
        "StackStatus": status,
        "Outputs": [{"OutputKey": k, "OutputValue": v} for k, v in (outputs or {}).items()],
    }


class TestProtocol:
    def test_implements_resource_client(self, client):
        assert isinstance(client, ResourceClient)


class TestStacks:
    def test_create_stack_acknowledges_both_iam_capabilities(self, client, cfn):
        sent = capture(client._cloudformation, "CreateStack")
        cfn.add_response("create_stack", {"StackId": "arn:aws:cloudformation:stack/eksctl-test"})

        client.create_stack("eksctl-test", b"Resources: {}\n")

        assert sent["StackName"] == "eksctl-test"
        assert sent["TemplateBody"] == "Resources: {}\n"
        assert sent["Capabilities"] == ["CAPABILITY_IAM", "CAPABILITY_NAMED_IAM"]

    def test_create_stack_rejected(self, client, cfn):
        cfn.add_client_error(
            "create_stack",
            service_error_code="InsufficientCapabilitiesException",
            service_message="Requires capabilities : [CAPABILITY_NAMED_IAM]",
        )
        with pytest.raises(RequestError) as exc_info:
            client.create_stack("eksctl-test", b"")
        assert exc_info.value.code == "InsufficientCapabilitiesException"
        assert exc_info.value.operation == "CreateStack"

    def test_non_utf8_template_rejected_before_any_call(self, client, cfn):
        with pytest.raises(RequestError, match="not valid UTF-8") as exc_info:
            client.create_stack("eksctl-test", b"\xff\xfeResources")
        assert exc_info.value.operation == "CreateStack"

    def test_describe_stack_status_and_outputs(self, client, cfn):
        cfn.add_response(
            "describe_stacks",
            {"Stacks": [stack("CREATE_COMPLETE", {"PublicSubnetIds": "a,b", "NodeRoleARN": "r2"})]},
            expected_params={"StackName": "eksctl-test"},
        )
        result = client.describe_stack("eksctl-test")
        assert result.status == "CREATE_COMPLETE"
        assert result.outputs == {"PublicSubnetIds": "a,b", "NodeRoleARN": "r2"}

    def test_describe_stack_without_outputs(self, client, cfn):
        cfn.add_response(
            "describe_stacks",
            {"Stacks": [{"StackName": "eksctl-test", "CreationTime": CREATED, "StackStatus": "CREATE_IN_PROGRESS"}]},
        )
        assert client.describe_stack("eksctl-test").outputs == {}

    def test_empty_stack_list_is_not_found(self, client, cfn):
        cfn.add_response("describe_stacks", {"Stacks": []})
        with pytest.raises(NotFoundError, match="eksctl-test"):
            client.describe_stack("eksctl-test")

    def test_missing_stack_is_not_found(self, client, cfn):
        cfn.add_client_error(
            "describe_stacks",
            service_error_code="ValidationError",
            service_message="Stack with id eksctl-test does not exist",
        )
        with pytest.raises(NotFoundError):
            client.describe_stack("eksctl-test")

    def test_other_validation_error_is_request_error(self, client, cfn):
        cfn.add_client_error(
            "describe_stacks",
            service_error_code="ValidationError",
            service_message="1 validation error detected",
        )
        with pytest.raises(RequestError):
            client.describe_stack("eksctl-test")

    def test_delete_stack(self, client, cfn):
        cfn.add_response("delete_stack", {}, expected_params={"StackName": "eksctl-test"})
        client.delete_stack("eksctl-test")


class TestControlPlane:
    def test_create_cluster_request(self, client, eks):
        sent = capture(client._eks, "CreateCluster")
        eks.add_response("create_cluster", {"cluster": {"name": "test", "status": "CREATING"}})

        client.create_control_plane("test", ["pub-a", "priv-a"], "arn:role", "1.21")

        assert sent["name"] == "test"
        assert sent["version"] == "1.21"
        assert sent["roleArn"] == "arn:role"
        assert sent["resourcesVpcConfig"] == {"subnetIds": ["pub-a", "priv-a"]}

    def test_empty_subnets_forwarded(self, client, eks):
        sent = capture(client._eks, "CreateCluster")
        eks.add_client_error(
            "create_cluster",
            service_error_code="InvalidParameterException",
            service_message="Subnets specified must be in at least two different AZs",
        )
        with pytest.raises(RequestError, match="InvalidParameterException"):
            client.create_control_plane("test", [], "arn:role", "1.21")
        assert sent["resourcesVpcConfig"] == {"subnetIds": []}

    def test_describe_cluster_status(self, client, eks):
        eks.add_response(
            "describe_cluster",
            {"cluster": {"name": "test", "status": "ACTIVE"}},
            expected_params={"name": "test"},
        )
        assert client.describe_control_plane("test").status == "ACTIVE"

    def test_describe_missing_cluster(self, client, eks):
        eks.add_client_error(
            "describe_cluster",
            service_error_code="ResourceNotFoundException",
            service_message="No cluster found for name: test.",
            http_status_code=404,
        )
        with pytest.raises(NotFoundError):
            client.describe_control_plane("test")


class TestWorkerGroups:
    def test_create_nodegroup_request(self, client, eks):
        sent = capture(client._eks, "CreateNodegroup")
        eks.add_response("create_nodegroup", {"nodegroup": {"nodegroupName": "ng-a", "status": "CREATING"}})

        client.create_worker_group("test", "ng-a", "arn:node", ("pub-a", "pub-b"), 1)

        assert sent["clusterName"] == "test"
        assert sent["nodegroupName"] == "ng-a"
        assert sent["nodeRole"] == "arn:node"
        assert sent["subnets"] == ["pub-a", "pub-b"]
        assert sent["scalingConfig"] == {"minSize": 1, "desiredSize": 1, "maxSize": 1}

    def test_describe_nodegroup_status(self, client, eks):
        eks.add_response(
            "describe_nodegroup",
            {"nodegroup": {"nodegroupName": "ng-a", "clusterName": "test", "status": "ACTIVE"}},
            expected_params={"clusterName": "test", "nodegroupName": "ng-a"},
        )
        result = client.describe_worker_group("test", "ng-a")
        assert result.status == "ACTIVE"
        assert result.name == "ng-a"

    def test_create_nodegroup_rejected(self, client, eks):
        eks.add_client_error(
            "create_nodegroup",
            service_error_code="ResourceInUseException",
            service_message="NodeGroup already exists with name ng-a and cluster name test",
            http_status_code=409,
        )
        with pytest.raises(RequestError) as exc_info:
            client.create_worker_group("test", "ng-a", "arn:node", ("pub-a",), 1)
        assert exc_info.value.code == "ResourceInUseException"
