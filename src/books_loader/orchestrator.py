"""
Pipeline orchestrator for the books loader.

One invocation runs the stages in order: extract → fetch → parse → write.
A failure in any stage raises immediately and skips the remaining stages.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import unquote_plus

from .config import Config
from .errors import EventError, FetchError, NoRecordsError, ParseError, WriteError
from .fetcher import fetch_object
from .models import S3ObjectLocation, StageEnum, WriteConfirmation
from .parser import parse_books
from .writer import write_books

logger = logging.getLogger(__name__)

_ERROR_STAGES = (
    (EventError, StageEnum.EXTRACT),
    (FetchError, StageEnum.FETCH),
    (ParseError, StageEnum.PARSE),
    (WriteError, StageEnum.WRITE),
)


def stage_of(error: Exception) -> Optional[StageEnum]:
    """Return the pipeline stage a failure belongs to, if it is a pipeline error."""
    for error_type, stage in _ERROR_STAGES:
        if isinstance(error, error_type):
            return stage
    return None


def extract_location(event: Dict[str, Any]) -> S3ObjectLocation:
    """
    Extract the object location from the first notification record of an S3 event.

    Only ``Records[0]`` is used; additional records are logged and ignored.

    Args:
        event: S3 event notification payload

    Returns:
        S3ObjectLocation with the URL-decoded object key

    Raises:
        NoRecordsError: If the event carries no notification record
        EventError: If the record has no bucket name or object key
    """
    records = event.get("Records") if isinstance(event, dict) else None
    if not records:
        raise NoRecordsError("S3 event contains no notification records")

    if len(records) > 1:
        logger.warning(
            f"S3 event contains {len(records)} notification records; "
            f"only the first is processed"
        )

    record = records[0]
    if not isinstance(record, dict):
        raise EventError(f"Invalid S3 event record: expected an object, got {type(record).__name__}")

    s3_info = record.get("s3")
    bucket_info = s3_info.get("bucket") if isinstance(s3_info, dict) else None
    object_info = s3_info.get("object") if isinstance(s3_info, dict) else None
    if not isinstance(bucket_info, dict) or not isinstance(object_info, dict):
        raise EventError(f"Invalid S3 event record: missing s3 bucket or object in {record!r}")

    bucket = bucket_info.get("name")
    raw_key = object_info.get("key")

    if not bucket or not raw_key:
        raise EventError(f"Invalid S3 event record: bucket={bucket!r}, key={raw_key!r}")

    # Keys arrive form-encoded: %XX escapes and '+' for spaces
    key = unquote_plus(raw_key)

    return S3ObjectLocation(
        region=record.get("awsRegion") or Config.AWS_REGION,
        bucket=bucket,
        key=key,
        size=object_info.get("size"),
        event_name=record.get("eventName"),
    )


def run_pipeline(
    location: S3ObjectLocation,
    s3_client,
    dynamodb_client,
    table_name: str
) -> WriteConfirmation:
    """
    Fetch, parse and write the books in one S3 object.

    Args:
        location: Object that triggered the invocation
        s3_client: boto3 S3 client
        dynamodb_client: boto3 DynamoDB client
        table_name: Destination DynamoDB table

    Returns:
        WriteConfirmation of the batch write

    Raises:
        FetchError, ParseError, WriteError: From the failing stage
    """
    logger.info(
        f"Starting books load: source={location.uri}, region={location.region}, "
        f"table={table_name}"
    )

    fetched = fetch_object(s3_client, location.bucket, location.key, region=location.region)
    books = parse_books(fetched.content)
    confirmation = write_books(dynamodb_client, table_name, books)

    logger.info(
        f"Books load completed: source={location.uri}, table={table_name}, "
        f"items={confirmation.item_count}, request_id={confirmation.request_id}"
    )
    return confirmation
