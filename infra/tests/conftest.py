"""
Pytest configuration for Pulumi program tests.

Resources register against in-memory mocks; nothing reaches AWS.
"""

from pathlib import Path
from typing import Any

import pulumi
import pytest

from src.config import StackConfig

PROJECT = "oidc-lab"
ACCOUNT_ID = "123456789012"
REPOSITORY = "octo-org/octo-repo"


class InfraMocks(pulumi.runtime.Mocks):
    """Echo inputs back as state and fill in provider-computed attributes."""

    def new_resource(self, args: pulumi.runtime.MockResourceArgs) -> tuple[str, dict[str, Any]]:
        state = dict(args.inputs)
        resource_id = f"{args.name}-id"

        if args.typ == "aws:s3/bucket:Bucket":
            # A bucket's id is its name
            state.setdefault("bucket", args.name)
            resource_id = state["bucket"]
        elif args.typ == "aws:s3/bucketWebsiteConfiguration:BucketWebsiteConfiguration":
            state["websiteEndpoint"] = f"{state['bucket']}.s3-website-us-east-1.amazonaws.com"

        state.setdefault("name", args.name)
        state.setdefault("arn", f"arn:aws:mock:us-east-1:{ACCOUNT_ID}:{args.name}")
        return resource_id, state

    def call(self, args: pulumi.runtime.MockCallArgs) -> dict[str, Any]:
        return {}


pulumi.runtime.set_mocks(InfraMocks(), project=PROJECT, stack="test", preview=False)


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    """Create a site directory containing index.html."""
    (tmp_path / "index.html").write_text("<h1>test</h1>")
    return tmp_path


@pytest.fixture
def stack_config(site_dir: Path) -> StackConfig:
    """Create a stack config for the test environment."""
    return StackConfig(
        environment="test",
        aws_account_id=ACCOUNT_ID,
        github_repository=REPOSITORY,
        site_dir=site_dir,
    )
