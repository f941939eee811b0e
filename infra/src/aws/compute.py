"""ECS Fargate cluster, task definition, and service."""

import json
from collections.abc import Sequence
from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from src.aws.identity import IdentityResources
from src.aws.network import NetworkResources
from src.aws.provider import resource_options
from src.config import ContainerSpec, StackConfig

LAUNCH_TYPE = "FARGATE"


@dataclass
class ComputeResources:
    """Container for ECS resources."""

    cluster: aws.ecs.Cluster
    task_definition: aws.ecs.TaskDefinition
    service: aws.ecs.Service


def container_definitions_json(containers: Sequence[ContainerSpec]) -> str:
    """Serialize container specs to the JSON list ECS expects."""
    return json.dumps(
        [
            container.model_dump(mode="json", by_alias=True, exclude_none=True)
            for container in containers
        ],
        separators=(",", ":"),
    )


def create_cluster(config: StackConfig, provider: aws.Provider) -> aws.ecs.Cluster:
    """Create the ECS cluster."""
    return aws.ecs.Cluster(
        config.resource_name("cluster"),
        opts=resource_options(provider),
    )


def create_task_definition(
    config: StackConfig,
    role: aws.iam.Role,
    provider: aws.Provider,
) -> aws.ecs.TaskDefinition:
    """Create the task definition run by the service.

    Both the execution role and the task role are the federated role.

    Args:
        config: Stack configuration
        role: Federated IAM role
        provider: AWS provider for the stack

    Returns:
        The created task definition
    """
    task = config.task

    return aws.ecs.TaskDefinition(
        config.resource_name("task-definition"),
        family=task.family,
        network_mode=task.network_mode,
        requires_compatibilities=list(task.requires_compatibilities),
        execution_role_arn=role.arn,
        task_role_arn=role.arn,
        cpu=task.cpu,
        memory=task.memory,
        container_definitions=container_definitions_json(config.containers),
        opts=resource_options(provider),
    )


def create_service(
    config: StackConfig,
    cluster: aws.ecs.Cluster,
    task_definition: aws.ecs.TaskDefinition,
    network: NetworkResources,
    provider: aws.Provider,
) -> aws.ecs.Service:
    """Create the service keeping ``desired_count`` tasks running.

    Args:
        config: Stack configuration
        cluster: ECS cluster to run in
        task_definition: Task definition to run
        network: Subnet and security group for task ENIs
        provider: AWS provider for the stack

    Returns:
        The created ECS service
    """
    return aws.ecs.Service(
        config.resource_name("service"),
        cluster=cluster.id,
        task_definition=task_definition.arn,
        desired_count=config.desired_count,
        launch_type=LAUNCH_TYPE,
        network_configuration=aws.ecs.ServiceNetworkConfigurationArgs(
            assign_public_ip=config.assign_public_ip,
            subnets=[network.subnet.id],
            security_groups=[network.security_group.id],
        ),
        opts=resource_options(provider),
    )


def create_compute(
    config: StackConfig,
    identity: IdentityResources,
    network: NetworkResources,
    provider: aws.Provider,
) -> ComputeResources:
    """Create cluster, task definition, and service.

    Args:
        config: Stack configuration
        identity: Federated role used by the tasks
        network: Network the service runs in
        provider: AWS provider for the stack

    Returns:
        ComputeResources containing cluster, task definition, and service
    """
    pulumi.log.info(
        f"Creating ECS service: {config.desired_count} x {config.task.family} "
        f"({config.task.cpu} cpu / {config.task.memory} MiB)"
    )

    cluster = create_cluster(config, provider)
    task_definition = create_task_definition(config, identity.role, provider)
    service = create_service(config, cluster, task_definition, network, provider)

    return ComputeResources(cluster=cluster, task_definition=task_definition, service=service)
