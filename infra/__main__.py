"""OIDC Lab Infrastructure - Pulumi Entry Point.

This module declares two independent AWS resource graphs:
- S3: public static website bucket
- ECS: Fargate service whose role is assumable via GitHub Actions OIDC
"""

from src import outputs
from src.aws import compute, identity, network, provider, website
from src.config import StackConfig

# All settings come from stack config; nothing is read from the ambient AWS env
config = StackConfig.from_pulumi_config()

aws_provider = provider.create_provider(config)

# =============================================================================
# Static Website
# =============================================================================

site = website.create_static_website(config, aws_provider)

# =============================================================================
# ECS with OIDC Authentication
# =============================================================================

# VPC, subnet, and security group
vpc = network.create_network(config, aws_provider)

# Federated role and managed policy attachment
oidc_role = identity.create_oidc_role(config, aws_provider)

# Cluster, task definition, and service
ecs = compute.create_compute(config, oidc_role, vpc, aws_provider)

# =============================================================================
# Outputs
# =============================================================================

outputs.export_outputs(
    env=config.environment,
    website=site,
    identity=oidc_role,
    compute=ecs,
)
