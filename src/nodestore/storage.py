"""
S3-compatible object storage client.

Only client construction and object retrieval live here; the settings come
from Config.s3.
"""

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import ClientError

from nodestore.config import S3Settings, config
from nodestore.errors import DownloadFailedError


def create_s3_client(settings: S3Settings = None):
    """Build a boto3 S3 client for the configured endpoint, using path-style addressing."""
    settings = settings or config.s3
    session = boto3.Session(
        aws_access_key_id=settings.access_key,
        aws_secret_access_key=settings.secret_key,
        region_name=settings.region,
    )
    return session.client(
        "s3",
        region_name=settings.region,
        endpoint_url=settings.endpoint,
        config=BotoConfig(
            s3={"addressing_style": "path"},
            retries={"max_attempts": 5, "mode": "standard"},
        ),
    )


def fetch_object(client, key: str, bucket: str = None) -> bytes:
    """
    Download an object's content.

    Raises:
        DownloadFailedError: if S3 answers with an error status
    """
    bucket = bucket or config.s3.bucket_name
    try:
        response = client.get_object(Bucket=bucket, Key=key)
    except ClientError as e:
        raise DownloadFailedError.from_response(e.response) from e

    status = response.get("ResponseMetadata", {}).get("HTTPStatusCode", 200)
    if not 200 <= status < 300:
        raise DownloadFailedError.from_response(response)
    return response["Body"].read()
