"""Cloud resource clients for eksward."""

from eksward.providers.aws import AWSResourceClient

__all__ = ["AWSResourceClient"]
