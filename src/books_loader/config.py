"""Shared configuration for the books loader."""

import os

from botocore.config import Config as BotoConfig


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Shared configuration constants for the books loader."""

    # DynamoDB destination table
    TABLE_NAME = os.getenv("BOOKS_TABLE_NAME", "ajcs-learn-dynamodb-books")

    # AWS Region (the S3 client uses the region from the event record instead)
    AWS_REGION = os.getenv("AWS_REGION", "us-east-1")

    # Force a process exit with status 1 when the batch write fails
    EXIT_ON_WRITE_ERROR = _env_flag("BOOKS_EXIT_ON_WRITE_ERROR")

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # botocore transport retries
    MAX_ATTEMPTS = int(os.getenv("BOTO_MAX_ATTEMPTS", "3"))

    # botocore socket timeouts in seconds (botocore defaults)
    CONNECT_TIMEOUT = float(os.getenv("BOTO_CONNECT_TIMEOUT", "60"))
    READ_TIMEOUT = float(os.getenv("BOTO_READ_TIMEOUT", "60"))

    @classmethod
    def boto_config(cls) -> BotoConfig:
        """botocore client configuration shared by the S3 and DynamoDB clients."""
        return BotoConfig(
            connect_timeout=cls.CONNECT_TIMEOUT,
            read_timeout=cls.READ_TIMEOUT,
            retries={"max_attempts": cls.MAX_ATTEMPTS, "mode": "standard"},
        )
