"""Stack configuration.

All settings are read once from Pulumi config (``Pulumi.<stack>.yaml`` or
``pulumi config set``) into a frozen ``StackConfig`` that is passed
explicitly to every resource module. The container spec is read from a YAML
file next to the program.
"""

import ipaddress
from pathlib import Path
from typing import Any, Literal

import pulumi
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from src.errors import ConfigError
from src.policy import github_oidc_provider_arn, github_subject

# Pulumi runs from infra/
INFRA_DIR = Path(__file__).parent.parent

DEFAULT_REGION = "us-east-1"
DEFAULT_CONTAINER_SPEC_FILE = "containers.yaml"

# Valid Fargate task sizes: cpu units -> allowed memory (MiB)
FARGATE_TASK_SIZES: dict[int, range | tuple[int, ...]] = {
    256: (512, 1024, 2048),
    512: range(1024, 4096 + 1, 1024),
    1024: range(2048, 8192 + 1, 1024),
    2048: range(4096, 16384 + 1, 1024),
    4096: range(8192, 30720 + 1, 1024),
    8192: range(16384, 61440 + 1, 4096),
    16384: range(32768, 122880 + 1, 8192),
}

# =============================================================================
# Task and container specs
# =============================================================================


class PortMapping(BaseModel):
    """Container port mapping."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    container_port: int = Field(alias="containerPort", ge=1, le=65535)
    host_port: int | None = Field(default=None, alias="hostPort", ge=1, le=65535)
    protocol: Literal["tcp", "udp"] = "tcp"


class ContainerSpec(BaseModel):
    """One entry of an ECS container definition list.

    Field order is the serialized key order.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    image: str
    memory: int | None = Field(default=None, gt=0)
    cpu: int | None = Field(default=None, ge=0)
    essential: bool = True
    command: list[str] | None = None
    port_mappings: list[PortMapping] | None = Field(default=None, alias="portMappings")
    environment: list[dict[str, str]] | None = None


# Placeholder workload that just keeps a container alive
PLACEHOLDER_CONTAINER = ContainerSpec(
    name="placeholder-container",
    image="amazon/amazonlinux",
    memory=512,
    cpu=256,
    essential=True,
    command=["/bin/sh", "-c", "while true; do sleep 30; done"],
)


class TaskSpec(BaseModel):
    """Task-level launch requirements."""

    model_config = ConfigDict(frozen=True)

    family: str = "my-task"
    network_mode: Literal["awsvpc", "bridge", "host", "none"] = "awsvpc"
    requires_compatibilities: tuple[Literal["FARGATE", "EC2", "EXTERNAL"], ...] = ("FARGATE",)
    cpu: str = "256"
    memory: str = "512"

    @model_validator(mode="after")
    def _check_launch_shape(self) -> "TaskSpec":
        if self.network_mode == "awsvpc" and "FARGATE" not in self.requires_compatibilities:
            raise ValueError("awsvpc tasks must list FARGATE in requires_compatibilities")

        if "FARGATE" in self.requires_compatibilities:
            if self.network_mode != "awsvpc":
                raise ValueError("FARGATE tasks must use the awsvpc network mode")
            allowed = FARGATE_TASK_SIZES.get(int(self.cpu))
            if allowed is None or int(self.memory) not in allowed:
                raise ValueError(
                    f"cpu={self.cpu} memory={self.memory} is not a valid Fargate task size"
                )
        return self

    @field_validator("cpu", "memory")
    @classmethod
    def _numeric(cls, value: str) -> str:
        if not value.isdigit():
            raise ValueError(f"expected an integer string, got {value!r}")
        return value


def load_container_specs(path: Path) -> list[ContainerSpec]:
    """Load container definitions from a YAML file.

    The file holds a top-level ``containers`` list. When it does not exist the
    placeholder container is used.

    Args:
        path: YAML file path

    Returns:
        Container specs in file order
    """
    if not path.exists():
        pulumi.log.warn(f"Container spec not found at {path}, using placeholder container")
        return [PLACEHOLDER_CONTAINER]

    with open(path) as f:
        data = yaml.safe_load(f)

    entries = data.get("containers", []) if data else []
    if not entries:
        raise ConfigError(f"No containers defined in {path}")

    pulumi.log.info(f"Loaded {len(entries)} container definition(s) from {path.name}")
    return [ContainerSpec.model_validate(entry) for entry in entries]


# =============================================================================
# Stack config
# =============================================================================


class StackConfig(BaseModel):
    """Typed, immutable view of the stack settings."""

    model_config = ConfigDict(frozen=True)

    environment: str
    aws_account_id: str = Field(pattern=r"^\d{12}$")
    github_repository: str
    github_branch: str = "main"
    region: str = DEFAULT_REGION
    name_prefix: str = "oidc-lab"

    # Static website
    site_name: str = "my-static-site"
    site_dir: Path = INFRA_DIR / "site"

    # Network
    vpc_cidr: str = "10.0.0.0/16"
    subnet_cidr: str = "10.0.1.0/24"
    availability_zone: str | None = None
    ingress_port: int = Field(default=80, ge=1, le=65535)

    # Identity
    managed_policy_arn: str = "arn:aws:iam::aws:policy/AmazonECS_FullAccess"
    oidc_provider_arn: str | None = None

    # Compute
    task: TaskSpec = TaskSpec()
    containers: tuple[ContainerSpec, ...] = (PLACEHOLDER_CONTAINER,)
    desired_count: int = Field(default=1, ge=0)
    assign_public_ip: bool = True

    @field_validator("vpc_cidr", "subnet_cidr")
    @classmethod
    def _valid_cidr(cls, value: str) -> str:
        ipaddress.ip_network(value)
        return value

    @model_validator(mode="after")
    def _check_consistency(self) -> "StackConfig":
        vpc = ipaddress.ip_network(self.vpc_cidr)
        subnet = ipaddress.ip_network(self.subnet_cidr)
        if subnet.version != vpc.version or not subnet.subnet_of(vpc):  # type: ignore[arg-type]
            raise ValueError(f"subnet {self.subnet_cidr} is not inside VPC {self.vpc_cidr}")

        # Validates owner/repo and branch shape
        github_subject(self.github_repository, self.github_branch)

        if not self.containers:
            raise ValueError("at least one container is required")
        task_memory = int(self.task.memory)
        for container in self.containers:
            if container.memory is not None and container.memory > task_memory:
                raise ValueError(
                    f"container {container.name} memory {container.memory} "
                    f"exceeds task memory {task_memory}"
                )
        return self

    @property
    def zone(self) -> str:
        """Availability zone for the subnet."""
        return self.availability_zone or f"{self.region}a"

    @property
    def federated_principal(self) -> str:
        """ARN of the GitHub Actions OIDC provider trusted by the role."""
        return self.oidc_provider_arn or github_oidc_provider_arn(self.aws_account_id)

    @property
    def subject(self) -> str:
        """Exact token subject allowed to assume the role."""
        return github_subject(self.github_repository, self.github_branch)

    @property
    def tags(self) -> dict[str, str]:
        return {
            "environment": self.environment,
            "managed_by": "pulumi",
        }

    def resource_name(self, purpose: str) -> str:
        """Logical resource name, e.g. ``oidc-lab-dev-vpc``."""
        return f"{self.name_prefix}-{self.environment}-{purpose}"

    @classmethod
    def from_pulumi_config(cls, config: pulumi.Config | None = None) -> "StackConfig":
        """Build the stack config from ``pulumi.Config()``.

        Raises:
            ConfigError: If a required key is missing or a value is invalid
        """
        config = config or pulumi.Config()

        try:
            settings: dict[str, Any] = {
                "environment": config.require("environment"),
                "aws_account_id": config.require("aws_account_id"),
                "github_repository": config.require("github_repository"),
                "region": (
                    config.get("region") or pulumi.Config("aws").get("region") or DEFAULT_REGION
                ),
            }
        except pulumi.ConfigMissingError as e:
            raise ConfigError(str(e)) from e

        for key in (
            "github_branch",
            "name_prefix",
            "site_name",
            "vpc_cidr",
            "subnet_cidr",
            "availability_zone",
            "managed_policy_arn",
            "oidc_provider_arn",
        ):
            value = config.get(key)
            if value is not None:
                settings[key] = value

        site_dir = config.get("site_dir")
        if site_dir is not None:
            settings["site_dir"] = INFRA_DIR / site_dir

        for key in ("ingress_port", "desired_count"):
            number = config.get_int(key)
            if number is not None:
                settings[key] = number

        assign_public_ip = config.get_bool("assign_public_ip")
        if assign_public_ip is not None:
            settings["assign_public_ip"] = assign_public_ip

        container_spec_file = config.get("container_spec_file") or DEFAULT_CONTAINER_SPEC_FILE

        try:
            task = config.get_object("task")
            if task is not None:
                settings["task"] = TaskSpec.model_validate(task)
            settings["containers"] = tuple(load_container_specs(INFRA_DIR / container_spec_file))
            return cls.model_validate(settings)
        except ValidationError as e:
            raise ConfigError(f"Invalid stack configuration: {e}") from e
