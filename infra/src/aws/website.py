"""S3 static website: public bucket serving index.html / error.html."""

from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from src.aws.provider import resource_options
from src.config import StackConfig
from src.errors import MissingAssetError
from src.policy import public_read_policy

INDEX_DOCUMENT = "index.html"
ERROR_DOCUMENT = "error.html"

# Regions whose website endpoint uses "s3-website-<region>" instead of
# "s3-website.<region>"
DASH_WEBSITE_REGIONS = frozenset(
    {
        "us-east-1",
        "us-west-1",
        "us-west-2",
        "ap-southeast-1",
        "ap-southeast-2",
        "ap-northeast-1",
        "eu-west-1",
        "sa-east-1",
        "us-gov-west-1",
    }
)


@dataclass
class WebsiteResources:
    """Container for static website resources."""

    bucket: aws.s3.Bucket
    website: aws.s3.BucketWebsiteConfiguration
    public_access_block: aws.s3.BucketPublicAccessBlock
    policy_document: pulumi.Output[str]
    bucket_policy: aws.s3.BucketPolicy
    index_object: aws.s3.BucketObject
    website_url: pulumi.Output[str]


def website_endpoint(bucket_name: str, region: str) -> str:
    """Standard S3 website endpoint host for a bucket."""
    separator = "-" if region in DASH_WEBSITE_REGIONS else "."
    return f"{bucket_name}.s3-website{separator}{region}.amazonaws.com"


def website_url(bucket_name: str, region: str) -> str:
    """HTTP URL of the bucket's website endpoint."""
    return f"http://{website_endpoint(bucket_name, region)}"


def create_static_website(config: StackConfig, provider: aws.Provider) -> WebsiteResources:
    """Create a publicly readable website bucket and upload the index page.

    Block Public Access is switched off on the bucket before the public-read
    policy is attached; AWS rejects the policy otherwise.

    Args:
        config: Stack configuration
        provider: AWS provider for the stack

    Returns:
        WebsiteResources for the bucket and its attachments

    Raises:
        MissingAssetError: If the index page does not exist locally
    """
    index_path = config.site_dir / INDEX_DOCUMENT
    if not index_path.is_file():
        raise MissingAssetError(index_path)

    opts = resource_options(provider)
    name = config.site_name

    pulumi.log.info(f"Creating static website bucket: {name}")

    bucket = aws.s3.Bucket(name, opts=opts)

    website = aws.s3.BucketWebsiteConfiguration(
        f"{name}-website",
        bucket=bucket.id,
        index_document=aws.s3.BucketWebsiteConfigurationIndexDocumentArgs(
            suffix=INDEX_DOCUMENT,
        ),
        error_document=aws.s3.BucketWebsiteConfigurationErrorDocumentArgs(
            key=ERROR_DOCUMENT,
        ),
        opts=opts,
    )

    # Allow a public bucket policy
    public_access_block = aws.s3.BucketPublicAccessBlock(
        f"{name}-public-access",
        bucket=bucket.id,
        block_public_acls=False,
        block_public_policy=False,
        ignore_public_acls=False,
        restrict_public_buckets=False,
        opts=opts,
    )

    index_object = aws.s3.BucketObject(
        f"{name}-index",
        bucket=bucket.id,
        key=INDEX_DOCUMENT,
        source=pulumi.FileAsset(str(index_path)),
        content_type="text/html",
        opts=opts,
    )

    # Resolved only once the access block exists
    policy_document = pulumi.Output.all(bucket.id, public_access_block.id).apply(
        lambda ids: public_read_policy(ids[0]).to_json()
    )

    bucket_policy = aws.s3.BucketPolicy(
        f"{name}-policy",
        bucket=bucket.id,
        policy=policy_document,
        opts=resource_options(provider, depends_on=[public_access_block]),
    )

    url = pulumi.Output.all(bucket.bucket, config.region).apply(
        lambda args: website_url(args[0], args[1])
    )

    return WebsiteResources(
        bucket=bucket,
        website=website,
        public_access_block=public_access_block,
        policy_document=policy_document,
        bucket_policy=bucket_policy,
        index_object=index_object,
        website_url=url,
    )
