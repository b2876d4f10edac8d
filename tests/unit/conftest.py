"""
Shared fixtures for unit tests.
"""

from __future__ import annotations

import gzip
import io
import os
import types
import uuid

import pytest

from log_shipper.config import get_config


@pytest.fixture(scope="session", autouse=True)
def _env_vars():
    """
    Ensures a deterministic environment for every test run.
    Overwrite *only* the variables needed by the handler.
    """
    original = os.environ.copy()
    os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "log-shipper-test")
    os.environ.setdefault("POWERTOOLS_TRACE_DISABLED", "true")
    os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-1")
    yield
    os.environ.clear()
    os.environ.update(original)


@pytest.fixture(autouse=True)
def clear_config_cache():
    """Each test gets a configuration built from its own environment."""
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def shipper_env(monkeypatch):
    """A valid shipper environment without tags."""
    monkeypatch.setenv("GRAYLOG_URL", "http://x")
    monkeypatch.setenv("GRAYLOG_AUTH_TOKEN_SECRET_ARN", "arn:aws:secretsmanager:eu-west-1:000000000000:secret:token")
    monkeypatch.setenv("CUSTOMER_CODE", "acme")
    monkeypatch.delenv("GRAYLOG_TAGS", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("HTTP_TIMEOUT_SECONDS", raising=False)


def make_record(key: str, bucket: str = "source-bucket") -> dict:
    """One S3 ObjectCreated record as delivered to the function."""
    return {
        "eventVersion": "2.1",
        "eventSource": "aws:s3",
        "awsRegion": "eu-west-1",
        "eventName": "ObjectCreated:Put",
        "s3": {
            "bucket": {"name": bucket},
            "object": {"key": key, "size": 123},
        },
    }


def gzip_stream(text: str) -> io.BytesIO:
    return io.BytesIO(gzip.compress(text.encode("utf-8")))


@pytest.fixture
def lambda_context():
    """A *very* small stand-in for the LambdaContext object."""
    return types.SimpleNamespace(
        function_name="log-shipper",
        memory_limit_in_mb=256,
        aws_request_id="req-" + uuid.uuid4().hex,
        invoked_function_arn="arn:aws:lambda:eu-west-1:000000000000:function:log-shipper",
        get_remaining_time_in_millis=lambda: 30000,
    )
