"""S3 object retrieval for the books loader."""

import logging

from botocore.exceptions import BotoCoreError, ClientError

from .errors import FetchError
from .models import FetchedObject, ObjectMetadata, S3ObjectLocation

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "binary/octet-stream"


def _fetch_error(operation: str, bucket: str, key: str, error: Exception) -> FetchError:
    """Translate a botocore failure into a FetchError, logging the details."""
    if isinstance(error, ClientError):
        error_code = error.response.get('Error', {}).get('Code', 'Unknown')
        error_msg = error.response.get('Error', {}).get('Message', str(error))
    else:
        error_code = type(error).__name__
        error_msg = str(error)

    logger.error(
        f"Failed to {operation} from S3: bucket={bucket}, key={key}, "
        f"error_code={error_code}, error_msg={error_msg}"
    )

    if error_code in ('404', 'NoSuchKey'):
        message = f"Object was not found in S3: s3://{bucket}/{key}"
    elif error_code in ('403', 'AccessDenied'):
        message = (
            f"Access denied when reading from S3. IAM permissions may need to be "
            f"updated for bucket={bucket}, key={key}"
        )
    else:
        message = f"S3 {operation} failed for s3://{bucket}/{key} ({error_code}): {error_msg}"
    return FetchError(message, error_code=error_code)


def head_object(s3_client, bucket: str, key: str) -> ObjectMetadata:
    """
    Retrieve the metadata of an S3 object without its content.

    Raises:
        FetchError: If the object cannot be read
    """
    try:
        response = s3_client.head_object(Bucket=bucket, Key=key)
    except (ClientError, BotoCoreError) as e:
        raise _fetch_error("head object", bucket, key, e) from e

    return ObjectMetadata(
        content_type=response.get('ContentType') or DEFAULT_CONTENT_TYPE,
        content_length=response.get('ContentLength'),
        etag=response.get('ETag'),
        last_modified=response.get('LastModified'),
        version_id=response.get('VersionId'),
    )


def get_object_bytes(s3_client, bucket: str, key: str) -> bytes:
    """
    Retrieve the full content of an S3 object.

    Raises:
        FetchError: If the object cannot be read
    """
    try:
        response = s3_client.get_object(Bucket=bucket, Key=key)
        return response['Body'].read()
    except (ClientError, BotoCoreError) as e:
        raise _fetch_error("get object", bucket, key, e) from e


def fetch_object(s3_client, bucket: str, key: str, region: str = "") -> FetchedObject:
    """
    Fetch metadata and content of the object that triggered the invocation.

    Args:
        s3_client: boto3 S3 client
        bucket: S3 bucket name
        key: URL-decoded S3 object key
        region: Region of the bucket, carried into the result

    Returns:
        FetchedObject with metadata and raw bytes

    Raises:
        FetchError: If bucket or key is empty, or either S3 call fails
    """
    if not bucket or not key:
        raise FetchError(f"bucket and key are required, got bucket={bucket!r}, key={key!r}")

    metadata = head_object(s3_client, bucket, key)
    logger.info(f"SUCCESS: retrieved {bucket}/{key} of type {metadata.content_type}")

    content = get_object_bytes(s3_client, bucket, key)
    logger.info(f"Loaded object content: s3://{bucket}/{key}, size={len(content)} bytes")
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"Object content: {content!r}")

    return FetchedObject(
        location=S3ObjectLocation(region=region, bucket=bucket, key=key),
        metadata=metadata,
        content=content,
    )
