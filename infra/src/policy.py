"""IAM policy documents as typed models, serialized to JSON at the boundary."""

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from src.errors import TrustPolicyError

POLICY_VERSION = "2012-10-17"

GITHUB_OIDC_HOST = "token.actions.githubusercontent.com"
GITHUB_SUBJECT_KEY = f"{GITHUB_OIDC_HOST}:sub"

# owner/repo as GitHub allows them
_REPOSITORY_RE = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")
_WILDCARDS = ("*", "?")

# =============================================================================
# Enums
# =============================================================================


class Effect(str, Enum):
    """Statement effect."""

    ALLOW = "Allow"
    DENY = "Deny"


class ConditionOperator(str, Enum):
    """Condition operators this stack emits."""

    STRING_EQUALS = "StringEquals"


# =============================================================================
# Documents
# =============================================================================


class Principal(BaseModel):
    """Non-wildcard principal block."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    federated: str | None = Field(default=None, alias="Federated")
    service: str | None = Field(default=None, alias="Service")
    aws: str | None = Field(default=None, alias="AWS")


class PolicyStatement(BaseModel):
    """A single policy statement.

    Field order is the serialized key order.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    effect: Effect = Field(default=Effect.ALLOW, alias="Effect")
    principal: Principal | str | None = Field(default=None, alias="Principal")
    action: str | list[str] = Field(alias="Action")
    resource: str | list[str] | None = Field(default=None, alias="Resource")
    condition: dict[str, dict[str, str]] | None = Field(default=None, alias="Condition")


class PolicyDocument(BaseModel):
    """An IAM or bucket policy document."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    version: str = Field(default=POLICY_VERSION, alias="Version")
    statement: list[PolicyStatement] = Field(alias="Statement")

    def to_json(self) -> str:
        """Serialize to compact JSON with AWS key names."""
        return self.model_dump_json(by_alias=True, exclude_none=True)


# =============================================================================
# Builders
# =============================================================================


def public_read_policy(bucket_id: str) -> PolicyDocument:
    """Allow anonymous s3:GetObject on every object in the bucket."""
    return PolicyDocument(
        statement=[
            PolicyStatement(
                principal="*",
                action="s3:GetObject",
                resource=f"arn:aws:s3:::{bucket_id}/*",
            )
        ]
    )


def github_subject(repository: str, branch: str) -> str:
    """Build the exact `sub` claim GitHub Actions presents for a branch.

    Args:
        repository: Repository as ``owner/repo``
        branch: Branch name (without ``refs/heads/``)

    Returns:
        Subject claim ``repo:<owner>/<repo>:ref:refs/heads/<branch>``

    Raises:
        TrustPolicyError: If either part is malformed or contains a wildcard
    """
    if not _REPOSITORY_RE.match(repository):
        raise TrustPolicyError(f"Repository must be 'owner/repo', got {repository!r}")
    if not branch or branch.startswith("refs/") or any(c.isspace() for c in branch):
        raise TrustPolicyError(f"Invalid branch name {branch!r}")

    subject = f"repo:{repository}:ref:refs/heads/{branch}"
    _require_exact(subject)
    return subject


def github_oidc_trust_policy(provider_arn: str, subject: str) -> PolicyDocument:
    """Trust policy letting exactly one GitHub Actions subject assume a role.

    The subject is matched with StringEquals; wildcard subjects are refused
    rather than downgraded to a StringLike condition.
    """
    _require_exact(subject)
    return PolicyDocument(
        statement=[
            PolicyStatement(
                principal=Principal(federated=provider_arn),
                action="sts:AssumeRoleWithWebIdentity",
                condition={
                    ConditionOperator.STRING_EQUALS.value: {GITHUB_SUBJECT_KEY: subject},
                },
            )
        ]
    )


def github_oidc_provider_arn(account_id: str) -> str:
    """ARN of the account's GitHub Actions OIDC identity provider."""
    return f"arn:aws:iam::{account_id}:oidc-provider/{GITHUB_OIDC_HOST}"


def _require_exact(subject: str) -> None:
    if any(wildcard in subject for wildcard in _WILDCARDS):
        raise TrustPolicyError(
            f"Subject {subject!r} contains a wildcard; only exact matches are allowed",
            subject=subject,
        )
