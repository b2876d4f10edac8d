# In src/log_shipper/schemas.py

from typing import TypedDict
from urllib.parse import unquote_plus

from pydantic import BaseModel, ConfigDict, Field, model_validator

# --- Static Type Hinting (for mypy and IDEs) ---


class S3BucketDict(TypedDict):
    name: str


class S3ObjectDict(TypedDict, total=False):
    key: str
    urlDecodedKey: str
    size: int


class S3DataDict(TypedDict):
    bucket: S3BucketDict
    object: S3ObjectDict


class S3EventRecord(TypedDict):
    """
    A TypedDict representing the structure of a single S3 event record.
    Used for static type analysis throughout the application.
    """

    s3: S3DataDict


# --- Runtime Validation (using Pydantic) ---


class S3BucketModel(BaseModel):
    name: str = Field(..., min_length=1)


class S3ObjectModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # S3 delivers keys URL-encoded, with spaces as '+'.
    key: str | None = Field(None, min_length=1)
    url_decoded_key: str | None = Field(None, alias="urlDecodedKey", min_length=1)
    size: int | None = None

    @model_validator(mode="after")
    def require_a_key(self) -> "S3ObjectModel":
        if not self.key and not self.url_decoded_key:
            raise ValueError("s3.object needs either 'key' or 'urlDecodedKey'")
        return self

    @property
    def decoded_key(self) -> str:
        if self.url_decoded_key:
            return self.url_decoded_key
        return unquote_plus(self.key or "")


class S3DataModel(BaseModel):
    bucket: S3BucketModel
    object: S3ObjectModel


class S3EventNotificationRecord(BaseModel):
    """
    Pydantic model for runtime parsing and validation of an S3 event record.
    """

    s3: S3DataModel

    @property
    def bucket(self) -> str:
        return self.s3.bucket.name

    @property
    def key(self) -> str:
        return self.s3.object.decoded_key
