"""Core data models for the books loader."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr


class StageEnum(str, Enum):
    """Pipeline stages, in execution order."""
    EXTRACT = "extract"
    FETCH = "fetch"
    PARSE = "parse"
    WRITE = "write"


# Trigger Models

class S3ObjectLocation(BaseModel):
    """The object named by the first notification record of an S3 event."""
    region: str
    bucket: str = Field(min_length=1)
    key: str = Field(min_length=1)
    size: Optional[int] = None
    event_name: Optional[str] = None

    @property
    def uri(self) -> str:
        return f"s3://{self.bucket}/{self.key}"


# Fetch Models

class ObjectMetadata(BaseModel):
    """Descriptive fields returned by a HeadObject call."""
    content_type: str
    content_length: Optional[int] = None
    etag: Optional[str] = None
    last_modified: Optional[datetime] = None
    version_id: Optional[str] = None


class FetchedObject(BaseModel):
    """Metadata and raw content of a fetched S3 object."""
    location: S3ObjectLocation
    metadata: ObjectMetadata
    content: bytes


# Book Models

class BookRecord(BaseModel):
    """One row of the books table, keyed by isbn.

    Every field is required and strictly typed: JSON strings for the text
    fields and a JSON integer for pages.
    """
    model_config = ConfigDict(extra="ignore", frozen=True)

    isbn: StrictStr
    title: StrictStr
    subtitle: StrictStr
    author: StrictStr
    published: StrictStr
    pages: StrictInt
    description: StrictStr
    website: StrictStr


# Write Models

class WriteConfirmation(BaseModel):
    """Outcome of a successful BatchWriteItem call."""
    table_name: str
    request_id: str
    item_count: int = Field(ge=0)
    unprocessed_count: int = Field(default=0, ge=0)
