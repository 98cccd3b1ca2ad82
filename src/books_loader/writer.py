"""DynamoDB batch writer for the books loader."""

import logging
from typing import Any, Dict, List, Sequence

from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from .errors import TableNotFoundError, WriteError
from .models import BookRecord, WriteConfirmation

logger = logging.getLogger(__name__)

_serializer = TypeSerializer()


def to_dynamodb_item(book: BookRecord) -> Dict[str, Dict[str, Any]]:
    """
    Convert a book record into DynamoDB's typed attribute map.

    Text fields become ``{"S": ...}`` and pages becomes ``{"N": "<digits>"}``.
    """
    return {name: _serializer.serialize(value) for name, value in book.model_dump().items()}


def build_write_requests(books: Sequence[BookRecord]) -> List[Dict[str, Any]]:
    """Build one PutRequest per book, in order."""
    return [{"PutRequest": {"Item": to_dynamodb_item(book)}} for book in books]


def write_books(dynamodb_client, table_name: str, books: Sequence[BookRecord]) -> WriteConfirmation:
    """
    Insert or overwrite all books in a single BatchWriteItem call.

    The request is sent as-is: it is never split, retried or skipped, so a
    batch over the service's per-request item limit is rejected by DynamoDB.

    Args:
        dynamodb_client: boto3 DynamoDB client
        table_name: Destination table
        books: Records to write

    Returns:
        WriteConfirmation with the request id assigned by DynamoDB

    Raises:
        TableNotFoundError: If the table does not exist
        WriteError: If DynamoDB rejects the request for any other reason
    """
    write_requests = build_write_requests(books)
    logger.info(f"Writing books to DynamoDB: table={table_name}, items={len(write_requests)}")

    try:
        response = dynamodb_client.batch_write_item(
            RequestItems={table_name: write_requests}
        )
    except ClientError as e:
        error_code = e.response.get('Error', {}).get('Code', 'Unknown')
        error_msg = e.response.get('Error', {}).get('Message', str(e))

        if error_code == 'ResourceNotFoundException':
            logger.error(
                f'Error: The Amazon DynamoDB table "{table_name}" can\'t be found. '
                f"Be sure that it exists and that you've typed its name correctly!"
            )
            raise TableNotFoundError(
                f'DynamoDB table "{table_name}" can\'t be found',
                table_name=table_name,
                error_code=error_code,
            ) from e

        logger.error(
            f"Failed to write books to DynamoDB: table={table_name}, "
            f"error_code={error_code}, error_msg={error_msg}"
        )
        raise WriteError(
            f"BatchWriteItem failed for table {table_name} ({error_code}): {error_msg}",
            table_name=table_name,
            error_code=error_code,
        ) from e
    except BotoCoreError as e:
        logger.error(f"Failed to write books to DynamoDB: table={table_name}, error={e}")
        raise WriteError(
            f"BatchWriteItem failed for table {table_name}: {e}",
            table_name=table_name,
            error_code=type(e).__name__,
        ) from e

    request_id = response.get('ResponseMetadata', {}).get('RequestId', '')
    unprocessed = response.get('UnprocessedItems', {}).get(table_name, [])

    logger.info(f"{table_name} was successfully updated. The request id is {request_id}")
    if unprocessed:
        logger.warning(
            f"DynamoDB left items unprocessed: table={table_name}, "
            f"unprocessed={len(unprocessed)} of {len(write_requests)}"
        )

    return WriteConfirmation(
        table_name=table_name,
        request_id=request_id,
        item_count=len(write_requests),
        unprocessed_count=len(unprocessed),
    )
