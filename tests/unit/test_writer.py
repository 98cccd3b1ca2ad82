"""Unit tests for the DynamoDB batch writer."""

import logging

import pytest
from unittest.mock import MagicMock
from botocore.exceptions import ClientError

from books_loader.errors import TableNotFoundError, WriteError
from books_loader.models import BookRecord
from books_loader.writer import build_write_requests, to_dynamodb_item, write_books


@pytest.fixture
def books():
    """Create two book records."""
    return [
        BookRecord(
            isbn="9781593279509",
            title="Eloquent JavaScript, Third Edition",
            subtitle="A Modern Introduction to Programming",
            author="Marijn Haverbeke",
            published="2018-12-04T00:00:00.000Z",
            pages=472,
            description="JavaScript lies at the heart of almost every modern web application.",
            website="http://eloquentjavascript.net/"
        ),
        BookRecord(
            isbn="9781491943533",
            title="Practical Modern JavaScript",
            subtitle="Dive into ES6 and the Future of JavaScript",
            author="Nicolás Bevacqua",
            published="2017-07-16T00:00:00.000Z",
            pages=334,
            description="To get the most out of modern JavaScript, you need to learn the latest features.",
            website="https://github.com/mjavascript/mastering-modular-javascript"
        ),
    ]


@pytest.fixture
def mock_dynamodb_client():
    """Create a mock DynamoDB client with a successful batch response."""
    client = MagicMock()
    client.batch_write_item.return_value = {
        'UnprocessedItems': {},
        'ResponseMetadata': {'RequestId': 'REQ-0001', 'HTTPStatusCode': 200},
    }
    return client


class TestToDynamodbItem:
    """Tests for to_dynamodb_item function."""

    def test_typed_attributes(self, books):
        """Test that text is tagged S and pages is tagged N."""
        item = to_dynamodb_item(books[0])

        assert item["isbn"] == {"S": "9781593279509"}
        assert item["author"] == {"S": "Marijn Haverbeke"}
        assert item["pages"] == {"N": "472"}
        assert set(item) == {
            "isbn", "title", "subtitle", "author", "published", "pages", "description", "website"
        }


class TestWriteBooks:
    """Tests for write_books function."""

    def test_single_batch_with_one_put_per_book(self, mock_dynamodb_client, books):
        """Test that two books produce exactly one call with two puts."""
        confirmation = write_books(mock_dynamodb_client, "books-table", books)

        mock_dynamodb_client.batch_write_item.assert_called_once()
        request_items = mock_dynamodb_client.batch_write_item.call_args[1]['RequestItems']

        assert list(request_items) == ["books-table"]
        puts = request_items["books-table"]
        assert len(puts) == 2
        assert puts[0]["PutRequest"]["Item"]["isbn"] == {"S": "9781593279509"}
        assert puts[1]["PutRequest"]["Item"]["isbn"] == {"S": "9781491943533"}
        assert puts[1]["PutRequest"]["Item"]["pages"] == {"N": "334"}

        assert confirmation.table_name == "books-table"
        assert confirmation.request_id == "REQ-0001"
        assert confirmation.item_count == 2
        assert confirmation.unprocessed_count == 0

    def test_logs_request_id(self, mock_dynamodb_client, books, caplog):
        """Test the success log names the table and request id."""
        caplog.set_level(logging.INFO)

        write_books(mock_dynamodb_client, "books-table", books)

        assert "books-table was successfully updated. The request id is REQ-0001" in caplog.text

    def test_empty_batch_is_sent_unchanged(self, mock_dynamodb_client):
        """Test that an empty list still issues the one batch request."""
        confirmation = write_books(mock_dynamodb_client, "books-table", [])

        mock_dynamodb_client.batch_write_item.assert_called_once_with(
            RequestItems={"books-table": []}
        )
        assert confirmation.item_count == 0

    def test_unprocessed_items_are_counted(self, mock_dynamodb_client, books, caplog):
        """Test that unprocessed items are logged but not retried."""
        mock_dynamodb_client.batch_write_item.return_value = {
            'UnprocessedItems': {"books-table": build_write_requests(books[1:])},
            'ResponseMetadata': {'RequestId': 'REQ-0002'},
        }

        confirmation = write_books(mock_dynamodb_client, "books-table", books)

        assert confirmation.unprocessed_count == 1
        assert mock_dynamodb_client.batch_write_item.call_count == 1
        assert "unprocessed=1 of 2" in caplog.text

    def test_table_not_found(self, mock_dynamodb_client, books, caplog):
        """Test that a missing table raises TableNotFoundError."""
        mock_dynamodb_client.batch_write_item.side_effect = ClientError(
            {'Error': {'Code': 'ResourceNotFoundException', 'Message': 'Requested resource not found'}},
            'BatchWriteItem'
        )

        with pytest.raises(TableNotFoundError) as exc_info:
            write_books(mock_dynamodb_client, "missing-table", books)

        assert exc_info.value.table_name == "missing-table"
        assert exc_info.value.error_code == 'ResourceNotFoundException'
        assert isinstance(exc_info.value, WriteError)
        assert 'The Amazon DynamoDB table "missing-table" can\'t be found' in caplog.text

    def test_other_backend_error(self, mock_dynamodb_client, books):
        """Test that other rejections raise WriteError."""
        mock_dynamodb_client.batch_write_item.side_effect = ClientError(
            {'Error': {'Code': 'ValidationException', 'Message': 'Too many items requested'}},
            'BatchWriteItem'
        )

        with pytest.raises(WriteError) as exc_info:
            write_books(mock_dynamodb_client, "books-table", books)

        assert not isinstance(exc_info.value, TableNotFoundError)
        assert exc_info.value.error_code == 'ValidationException'
        assert 'Too many items requested' in str(exc_info.value)
