"""AWS network infrastructure: VPC, subnet, and security group."""

from dataclasses import dataclass

import pulumi_aws as aws

from src.aws.provider import resource_options
from src.config import StackConfig

ANYWHERE_IPV4 = "0.0.0.0/0"


@dataclass
class NetworkResources:
    """Container for network-related resources."""

    vpc: aws.ec2.Vpc
    subnet: aws.ec2.Subnet
    security_group: aws.ec2.SecurityGroup


def create_network(config: StackConfig, provider: aws.Provider) -> NetworkResources:
    """Create VPC with one subnet and a security group for the service.

    Args:
        config: Stack configuration
        provider: AWS provider for the stack

    Returns:
        NetworkResources containing VPC, subnet, and security group
    """
    opts = resource_options(provider)

    vpc = aws.ec2.Vpc(
        config.resource_name("vpc"),
        cidr_block=config.vpc_cidr,
        enable_dns_support=True,
        enable_dns_hostnames=True,
        opts=opts,
    )

    # Tasks get public IPs from the service, not the subnet
    subnet = aws.ec2.Subnet(
        config.resource_name("subnet"),
        vpc_id=vpc.id,
        cidr_block=config.subnet_cidr,
        availability_zone=config.zone,
        map_public_ip_on_launch=False,
        opts=opts,
    )

    security_group = aws.ec2.SecurityGroup(
        config.resource_name("sg"),
        vpc_id=vpc.id,
        description=f"Inbound TCP {config.ingress_port}, all outbound",
        egress=[
            aws.ec2.SecurityGroupEgressArgs(
                protocol="-1",
                from_port=0,
                to_port=0,
                cidr_blocks=[ANYWHERE_IPV4],
                description="All outbound",
            )
        ],
        ingress=[
            aws.ec2.SecurityGroupIngressArgs(
                protocol="tcp",
                from_port=config.ingress_port,
                to_port=config.ingress_port,
                cidr_blocks=[ANYWHERE_IPV4],
                description=f"TCP {config.ingress_port} from anywhere",
            )
        ],
        opts=opts,
    )

    return NetworkResources(vpc=vpc, subnet=subnet, security_group=security_group)
