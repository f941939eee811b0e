"""IAM role assumable only through GitHub Actions OIDC federation."""

from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from src.aws.provider import resource_options
from src.config import StackConfig
from src.policy import github_oidc_trust_policy


@dataclass
class IdentityResources:
    """Container for the federated role and its policy attachment."""

    role: aws.iam.Role
    trust_policy: str
    policy_attachment: aws.iam.RolePolicyAttachment


def create_oidc_role(config: StackConfig, provider: aws.Provider) -> IdentityResources:
    """Create the federated role and attach its managed policy.

    The trust policy only admits tokens whose ``sub`` claim equals
    ``config.subject`` exactly. The attachment is a separate resource that
    depends on the role alone.

    Args:
        config: Stack configuration
        provider: AWS provider for the stack

    Returns:
        IdentityResources with the role, its trust document, and attachment
    """
    opts = resource_options(provider)

    trust_policy = github_oidc_trust_policy(config.federated_principal, config.subject).to_json()

    pulumi.log.info(f"Creating OIDC role trusted by {config.subject}")

    role = aws.iam.Role(
        config.resource_name("ecs-task-role"),
        assume_role_policy=trust_policy,
        description=f"Assumable by GitHub Actions on {config.subject}",
        opts=opts,
    )

    policy_attachment = aws.iam.RolePolicyAttachment(
        config.resource_name("ecs-policy-attachment"),
        role=role.name,
        policy_arn=config.managed_policy_arn,
        opts=opts,
    )

    return IdentityResources(
        role=role,
        trust_policy=trust_policy,
        policy_attachment=policy_attachment,
    )
