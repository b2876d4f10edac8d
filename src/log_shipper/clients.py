# src/log_shipper/clients.py

"""
Client wrappers for interacting with AWS services (S3 and Secrets Manager).

These classes provide a clean, abstracted interface over raw boto3 clients,
translating botocore failures into the service's own exception types so the
handler can log and classify them uniformly.
"""

import logging
from typing import BinaryIO, TYPE_CHECKING, cast

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from .exceptions import (
    ObjectReadError,
    S3AccessDeniedError,
    S3ObjectNotFoundError,
    S3ThrottlingError,
    S3TimeoutError,
    SecretFetchError,
)

if TYPE_CHECKING:
    from mypy_boto3_s3.client import S3Client as S3ClientType
    from mypy_boto3_secretsmanager.client import (
        SecretsManagerClient as SecretsManagerClientType,
    )

logger = logging.getLogger(__name__)

_THROTTLING_CODES = ("Throttling", "ThrottlingException", "RequestLimitExceeded", "SlowDown")
_TIMEOUT_CODES = ("RequestTimeout", "RequestTimeoutException")


class S3Client:
    """
    A wrapper for S3 client operations, focused on streaming object bodies.
    """

    def __init__(self, s3_client: "S3ClientType"):
        self._client = s3_client

    def get_file_content_stream(self, bucket: str, key: str) -> BinaryIO:
        """
        Retrieves an S3 object's body as a file-like streaming object.
        Raises specific S3 exceptions based on the error type.
        """
        try:
            response = self._client.get_object(Bucket=bucket, Key=key)
            return cast(BinaryIO, response["Body"])
        except ClientError as e:
            error_code = e.response["Error"]["Code"]
            error_message = e.response["Error"]["Message"]
            aws_context = {
                "aws_error_code": error_code,
                "aws_error_message": error_message,
            }

            # Map boto3 error codes to our specific exception types
            if error_code in ("NoSuchKey", "NoSuchBucket"):
                raise S3ObjectNotFoundError(bucket=bucket, key=key, context=aws_context) from e
            elif error_code == "AccessDenied":
                raise S3AccessDeniedError(bucket=bucket, key=key, context=aws_context) from e
            elif error_code in _THROTTLING_CODES:
                raise S3ThrottlingError(
                    "GetObject",
                    context={"bucket": bucket, "key": key, **aws_context},
                ) from e
            elif error_code in _TIMEOUT_CODES:
                raise S3TimeoutError(
                    "GetObject",
                    context={"bucket": bucket, "key": key, **aws_context},
                ) from e
            else:
                raise ObjectReadError(
                    bucket, key, f"S3 client error: {error_message}", context=aws_context
                ) from e
        except ReadTimeoutError as e:
            raise S3TimeoutError(
                "GetObject",
                error_code="S3_READ_TIMEOUT",
                context={"bucket": bucket, "key": key, "timeout_error": str(e)},
            ) from e
        except EndpointConnectionError as e:
            raise S3TimeoutError(
                "GetObject",
                error_code="S3_CONNECTION_ERROR",
                context={"bucket": bucket, "key": key, "connection_error": str(e)},
            ) from e
        except BotoCoreError as e:
            raise ObjectReadError(bucket, key, str(e)) from e


class SecretsClient:
    """A wrapper for Secrets Manager, resolving secret identifiers to strings."""

    def __init__(self, secrets_client: "SecretsManagerClientType"):
        self._client = secrets_client

    def get_secret_string(self, secret_id: str) -> str:
        """Returns the SecretString of *secret_id*; raises SecretFetchError otherwise."""
        try:
            response = self._client.get_secret_value(SecretId=secret_id)
        except ClientError as e:
            error_code = e.response["Error"]["Code"]
            logger.error(
                "Exception when calling SecretsManager GetSecretValue",
                extra={"secret_id": secret_id, "aws_error_code": error_code},
            )
            raise SecretFetchError(
                secret_id,
                e.response["Error"]["Message"],
                context={"aws_error_code": error_code},
            ) from e
        except BotoCoreError as e:
            logger.error(
                "Exception when calling SecretsManager GetSecretValue",
                extra={"secret_id": secret_id, "error": str(e)},
            )
            raise SecretFetchError(secret_id, str(e)) from e

        secret = response.get("SecretString")
        if secret is None:
            raise SecretFetchError(secret_id, "secret has no string value")
        return secret
