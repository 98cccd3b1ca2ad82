"""Books document parsing for the books loader.

A books document is a UTF-8 encoded JSON object whose ``books`` key holds an
array of book objects:

    {"books": [{"isbn": "...", "title": "...", "subtitle": "...",
                "author": "...", "published": "...", "pages": 320,
                "description": "...", "website": "..."}]}
"""

import json
import logging
from typing import Any, List

from pydantic import ValidationError

from .errors import ParseError
from .models import BookRecord

logger = logging.getLogger(__name__)

BOOKS_KEY = "books"
BOOK_FIELDS = tuple(BookRecord.model_fields)


def decode_content(content: bytes) -> str:
    """
    Decode raw object bytes as UTF-8 text.

    A leading byte order mark is dropped; any invalid byte sequence is an error.

    Raises:
        ParseError: If the bytes are not valid UTF-8
    """
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParseError(
            f"Content is not valid UTF-8: invalid byte at position {e.start}"
        ) from e


def parse_book(data: Any, index: int) -> BookRecord:
    """
    Validate one element of the books array.

    Args:
        data: Decoded JSON value of the element
        index: Position of the element, used in error messages

    Returns:
        BookRecord with all eight fields populated

    Raises:
        ParseError: If the element is not an object or a field is missing or mistyped
    """
    if not isinstance(data, dict):
        raise ParseError(
            f"{BOOKS_KEY}[{index}]: expected an object, got {type(data).__name__}"
        )

    try:
        return BookRecord.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        raise ParseError(
            f"{BOOKS_KEY}[{index}].{field}: {first['msg']}", field=field
        ) from e


def parse_books(content: bytes) -> List[BookRecord]:
    """
    Parse a books document into book records.

    Args:
        content: Raw bytes of the S3 object

    Returns:
        Book records in array order; empty if the array is empty

    Raises:
        ParseError: If the content is not UTF-8, not JSON, not an object,
            has no ``books`` array, or any element is invalid
    """
    text = decode_content(content)

    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Content is not valid JSON: {e}") from e

    if not isinstance(document, dict):
        raise ParseError(
            f"Expected a JSON object at the top level, got {type(document).__name__}"
        )
    if BOOKS_KEY not in document:
        raise ParseError(f'JSON object has no "{BOOKS_KEY}" key', field=BOOKS_KEY)

    books = document[BOOKS_KEY]
    if not isinstance(books, list):
        raise ParseError(
            f'"{BOOKS_KEY}" must be an array, got {type(books).__name__}', field=BOOKS_KEY
        )

    records = [parse_book(item, index) for index, item in enumerate(books)]
    logger.info(f"Parsed books document: total_books={len(records)}")
    return records
