"""
Lambda handler entry point for the books loader.

Triggered by an S3 "object created" notification, the handler loads the
books listed in the new object into DynamoDB and returns "Ok". Every failure
is logged and reported to the Lambda runtime as a single HandlerError.
"""

import json
import logging
import traceback
from contextlib import ExitStack, closing
from typing import Any, Dict

import boto3

from .config import Config
from .errors import HandlerError, WriteError
from .orchestrator import extract_location, run_pipeline, stage_of

# Configure logging
logger = logging.getLogger()
logger.setLevel(Config.LOG_LEVEL)

SUCCESS_RESULT = "Ok"


def _handle_error(error: Exception, event: Dict[str, Any]) -> HandlerError:
    """
    Common error handler for the books loader.

    Args:
        error: The exception that occurred
        event: The Lambda event that triggered the error

    Returns:
        HandlerError carrying the original message, ready to be raised
    """
    stage = stage_of(error)
    stage_name = stage.value if stage else "unknown"
    error_message = str(error)
    error_trace = traceback.format_exc()

    logger.error(
        f"ERROR: {error_message}\n"
        f"Stage: {stage_name}, error_type={type(error).__name__}\n"
        f"Event: {json.dumps(event, default=str)}\n"
        f"Traceback: {error_trace}"
    )

    return HandlerError(error_message)


def lambda_handler(event: Dict[str, Any], context: Any) -> str:
    """
    Lambda handler for S3 object-created notifications.

    Expected event structure:
    {
        "Records": [
            {
                "awsRegion": str,
                "eventName": str,
                "s3": {
                    "bucket": {"name": str},
                    "object": {"key": str (URL-encoded), "size": int}
                }
            }
        ]
    }

    Returns:
        "Ok" once every book in the object has been written

    Raises:
        HandlerError: If any stage fails
        SystemExit: With status 1 when the batch write fails and
            BOOKS_EXIT_ON_WRITE_ERROR is enabled
    """
    try:
        location = extract_location(event)

        # Clients live for this invocation only and are closed on every path
        with ExitStack() as stack:
            s3_client = stack.enter_context(closing(boto3.client(
                "s3", region_name=location.region, config=Config.boto_config()
            )))
            dynamodb_client = stack.enter_context(closing(boto3.client(
                "dynamodb", region_name=Config.AWS_REGION, config=Config.boto_config()
            )))

            run_pipeline(location, s3_client, dynamodb_client, Config.TABLE_NAME)

        return SUCCESS_RESULT

    except Exception as e:
        failure = _handle_error(e, event)
        if Config.EXIT_ON_WRITE_ERROR and isinstance(e, WriteError):
            logger.error(f"Exiting with status 1 after write failure on table {e.table_name}")
            failure.__cause__ = e
            raise SystemExit(1) from failure
        raise failure from e
