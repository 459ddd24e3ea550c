"""AWS CloudFormation + EKS resource client.

Example:
    from eksward.providers.aws import AWSResourceClient

    client = AWSResourceClient(region="us-west-2")
"""

from eksward.providers.aws.client import AWSResourceClient

__all__ = ["AWSResourceClient"]
