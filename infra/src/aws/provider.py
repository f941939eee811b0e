"""Explicit AWS provider built from stack config."""

import pulumi
import pulumi_aws as aws

from src.config import StackConfig


def create_provider(config: StackConfig) -> aws.Provider:
    """Create the AWS provider every resource in the stack is bound to.

    Region comes from the stack config rather than the ambient AWS
    environment, and default tags are applied to all taggable resources.

    Args:
        config: Stack configuration

    Returns:
        The AWS provider
    """
    return aws.Provider(
        config.resource_name("aws"),
        region=config.region,
        default_tags=aws.ProviderDefaultTagsArgs(tags=config.tags),
    )


def resource_options(provider: aws.Provider, **kwargs: object) -> pulumi.ResourceOptions:
    """Resource options bound to the stack's provider."""
    return pulumi.ResourceOptions(provider=provider, **kwargs)  # type: ignore[arg-type]
