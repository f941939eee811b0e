"""Tests for typed policy documents."""

import json

import pytest

from src.errors import TrustPolicyError
from src.policy import (
    GITHUB_SUBJECT_KEY,
    PolicyDocument,
    PolicyStatement,
    Principal,
    github_oidc_provider_arn,
    github_oidc_trust_policy,
    github_subject,
    public_read_policy,
)

PROVIDER_ARN = "arn:aws:iam::123456789012:oidc-provider/token.actions.githubusercontent.com"
SUBJECT = "repo:octo-org/octo-repo:ref:refs/heads/main"


class TestPublicReadPolicy:
    """Tests for the bucket's public-read policy."""

    def test_exact_document(self):
        assert public_read_policy("B").to_json() == (
            '{"Version":"2012-10-17","Statement":[{"Effect":"Allow","Principal":"*",'
            '"Action":"s3:GetObject","Resource":"arn:aws:s3:::B/*"}]}'
        )

    def test_scoped_to_bucket_objects(self):
        document = json.loads(public_read_policy("my-static-site").to_json())

        assert document["Statement"][0]["Resource"] == "arn:aws:s3:::my-static-site/*"

    def test_same_input_same_json(self):
        assert public_read_policy("site").to_json() == public_read_policy("site").to_json()


class TestGithubSubject:
    """Tests for building the GitHub Actions subject claim."""

    def test_branch_subject(self):
        assert github_subject("octo-org/octo-repo", "main") == SUBJECT

    def test_nested_branch(self):
        assert (
            github_subject("octo-org/octo-repo", "release/v1")
            == "repo:octo-org/octo-repo:ref:refs/heads/release/v1"
        )

    @pytest.mark.parametrize("branch", ["*", "feature/*", "ma?n"])
    def test_rejects_wildcard_branch(self, branch):
        with pytest.raises(TrustPolicyError):
            github_subject("octo-org/octo-repo", branch)

    @pytest.mark.parametrize("repository", ["octo-repo", "octo-org/*", "octo-org/repo/extra", ""])
    def test_rejects_malformed_repository(self, repository):
        with pytest.raises(TrustPolicyError):
            github_subject(repository, "main")

    @pytest.mark.parametrize("branch", ["", "refs/heads/main", "has space"])
    def test_rejects_malformed_branch(self, branch):
        with pytest.raises(TrustPolicyError):
            github_subject("octo-org/octo-repo", branch)


class TestTrustPolicy:
    """Tests for the OIDC trust policy."""

    def test_exact_match_condition(self):
        document = json.loads(github_oidc_trust_policy(PROVIDER_ARN, SUBJECT).to_json())
        statement = document["Statement"][0]

        assert statement["Condition"] == {"StringEquals": {GITHUB_SUBJECT_KEY: SUBJECT}}
        assert "StringLike" not in statement["Condition"]

    def test_federated_principal(self):
        document = json.loads(github_oidc_trust_policy(PROVIDER_ARN, SUBJECT).to_json())
        statement = document["Statement"][0]

        assert statement["Principal"] == {"Federated": PROVIDER_ARN}
        assert statement["Action"] == "sts:AssumeRoleWithWebIdentity"
        assert statement["Effect"] == "Allow"
        assert "Resource" not in statement

    def test_rejects_wildcard_subject(self):
        with pytest.raises(TrustPolicyError) as exc_info:
            github_oidc_trust_policy(PROVIDER_ARN, "repo:octo-org/octo-repo:*")

        assert exc_info.value.subject == "repo:octo-org/octo-repo:*"

    def test_same_input_same_json(self):
        first = github_oidc_trust_policy(PROVIDER_ARN, SUBJECT).to_json()
        second = github_oidc_trust_policy(PROVIDER_ARN, SUBJECT).to_json()

        assert first == second

    def test_provider_arn(self):
        assert github_oidc_provider_arn("123456789012") == PROVIDER_ARN


class TestPolicyDocument:
    """Tests for document serialization."""

    def test_omits_unset_fields(self):
        document = PolicyDocument(
            statement=[
                PolicyStatement(
                    principal=Principal(service="ecs-tasks.amazonaws.com"),
                    action=["sts:AssumeRole"],
                )
            ]
        )

        assert json.loads(document.to_json()) == {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Effect": "Allow",
                    "Principal": {"Service": "ecs-tasks.amazonaws.com"},
                    "Action": ["sts:AssumeRole"],
                }
            ],
        }

    def test_accepts_aws_key_names(self):
        document = PolicyDocument.model_validate(
            {
                "Version": "2012-10-17",
                "Statement": [{"Effect": "Deny", "Action": "s3:*", "Resource": "*"}],
            }
        )

        assert document.statement[0].effect.value == "Deny"
