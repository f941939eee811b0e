"""Stack outputs for consumption by other tools."""

import pulumi

from src.aws.compute import ComputeResources
from src.aws.identity import IdentityResources
from src.aws.website import WebsiteResources


def export_outputs(
    env: str,
    website: WebsiteResources,
    identity: IdentityResources,
    compute: ComputeResources,
) -> None:
    """Export stack outputs for use by deployment workflows and other tools."""
    # Environment
    pulumi.export("environment", env)

    # Static website
    pulumi.export("bucket_name", website.bucket.bucket)
    pulumi.export("website_endpoint", website.website.website_endpoint)
    pulumi.export("website_url", website.website_url)

    # ECS
    pulumi.export("cluster_name", compute.cluster.name)
    pulumi.export("service_name", compute.service.name)

    # OIDC role (for aws-actions/configure-aws-credentials)
    pulumi.export("oidc_role_arn", identity.role.arn)
