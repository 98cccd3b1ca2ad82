"""Exception types raised by the books loader pipeline stages."""

from typing import Optional


class BooksLoaderError(Exception):
    """Base class for all pipeline failures."""


class EventError(BooksLoaderError):
    """The triggering event does not name an S3 object."""


class NoRecordsError(EventError, IndexError):
    """The triggering event carries no notification record."""


class FetchError(BooksLoaderError):
    """HeadObject or GetObject failed."""

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.error_code = error_code


class ParseError(BooksLoaderError):
    """The object content is not a valid books document."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class WriteError(BooksLoaderError):
    """BatchWriteItem was rejected by DynamoDB."""

    def __init__(self, message: str, table_name: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.table_name = table_name
        self.error_code = error_code


class TableNotFoundError(WriteError):
    """The destination table does not exist."""


class HandlerError(RuntimeError):
    """Generic failure reported back to the Lambda runtime."""
