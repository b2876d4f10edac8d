"""
The Lambda Adapter & Orchestrator for the CloudConnexa log shipper.

This module is the main entry point for the AWS Lambda function. It is
responsible for:
1.  Initializing AWS Lambda Powertools (Logger, Tracer, Metrics).
2.  Parsing and validating the S3 object-creation records of the event.
3.  Admitting only `CloudConnexa*.jsonl.gz` keys; the first rejected key
    ends the invocation with an empty result.
4.  Streaming every admitted object through the line splitter and batcher.
5.  Resolving the Graylog auth token and posting each sub-bundle in order.

Any failure past admission is fatal: it is logged with its structured
context and re-raised so the platform can retry the whole event.
"""

from typing import Any

import boto3
import pydantic
from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext

from .clients import S3Client, SecretsClient
from .config import AppConfig, get_config
from .core import PayloadBatcher, infer_object_type, iter_log_lines
from .exceptions import (
    InvalidS3EventError,
    LogShipperError,
    SubmissionError,
    UnsupportedObjectKeyError,
    get_error_context,
)
from .schemas import S3EventNotificationRecord
from .submitter import GraylogSubmitter

SERVICE_NAME = "cloudconnexa-log-shipper"
SUCCESS_RESULT = "Ok"
SKIPPED_RESULT = ""

logger = Logger(service=SERVICE_NAME)
tracer = Tracer(service=SERVICE_NAME)
metrics = Metrics(namespace="CloudConnexaLogShipper", service=SERVICE_NAME)


def parse_records(raw_records: list[dict[str, Any]]) -> list[S3EventNotificationRecord]:
    """Validates raw event records, failing the invocation on the first bad one."""
    parsed: list[S3EventNotificationRecord] = []
    for index, raw_record in enumerate(raw_records):
        try:
            parsed.append(S3EventNotificationRecord.model_validate(raw_record))
        except pydantic.ValidationError as e:
            raise InvalidS3EventError(
                "S3 event record failed validation",
                context={"record_index": index, "validation_errors": e.errors()},
            ) from e
    return parsed


def collect_bundles(
    records: list[S3EventNotificationRecord], s3_client: S3Client
) -> PayloadBatcher | None:
    """
    Runs key admission and the read pipeline over *records* in order.

    Returns the filled batcher, or None as soon as a record's key is
    rejected; later records are then left unread.
    """
    batcher = PayloadBatcher()
    for record in records:
        bucket, key = record.bucket, record.key
        try:
            infer_object_type(key)
        except UnsupportedObjectKeyError as e:
            logger.info(e.message, extra={"bucket": bucket, "key": key})
            metrics.add_metric(name="SkippedObjects", unit=MetricUnit.Count, value=1)
            return None

        lines_before = batcher.line_count
        stream = s3_client.get_file_content_stream(bucket, key)
        batcher.extend(iter_log_lines(stream, bucket=bucket, key=key))
        entries_read = batcher.line_count - lines_before

        metrics.add_metric(name="ObjectsRead", unit=MetricUnit.Count, value=1)
        metrics.add_metric(name="EntriesRead", unit=MetricUnit.Count, value=entries_read)
        logger.info(
            "Read object",
            extra={"bucket": bucket, "key": key, "entries": entries_read},
        )
    return batcher


def submit_bundles(
    batcher: PayloadBatcher, config: AppConfig, secrets_client: SecretsClient
) -> int:
    """Posts every sub-bundle in order and returns the number of entries sent."""
    auth_token = secrets_client.get_secret_string(config.auth_token_secret_id)
    if batcher.line_count == 0:
        logger.info("No log entries to send.")
        return 0

    sent = 0
    bundles = 0
    try:
        with GraylogSubmitter(config, auth_token) as submitter:
            for bundle in batcher.sub_bundles():
                submitter.submit(bundle)
                sent += len(bundle)
                bundles += 1
    finally:
        metrics.add_metric(name="BundlesSubmitted", unit=MetricUnit.Count, value=bundles)
        metrics.add_metric(name="EntriesSubmitted", unit=MetricUnit.Count, value=sent)
    return sent


@logger.inject_lambda_context()
@tracer.capture_lambda_handler
@metrics.log_metrics(capture_cold_start_metric=True)
def handler(event: dict, context: LambdaContext) -> str:
    """Main Lambda handler for S3 object-creation events."""
    raw_records: list[dict] = event.get("Records") or []
    if not raw_records:
        logger.warning("Event did not contain any S3 records. Exiting gracefully.")
        return SUCCESS_RESULT

    try:
        records = parse_records(raw_records)
        logger.info(
            "Starting S3 event processing",
            extra={
                "s3_records": len(records),
                "s3_keys": [f"{r.bucket}/{r.key}" for r in records],
            },
        )

        s3_client = S3Client(boto3.client("s3"))
        batcher = collect_bundles(records, s3_client)
        if batcher is None:
            return SKIPPED_RESULT

        # Graylog settings are only needed once there is something to submit.
        config = get_config()
        logger.setLevel(config.log_level)

        secrets_client = SecretsClient(boto3.client("secretsmanager"))
        sent = submit_bundles(batcher, config, secrets_client)

    except SubmissionError as e:
        metrics.add_metric(name="SubmissionFailures", unit=MetricUnit.Count, value=1)
        logger.exception("Error sending logs to Graylog", extra={"error": get_error_context(e)})
        raise
    except LogShipperError as e:
        logger.exception("Error processing logs", extra={"error": get_error_context(e)})
        raise

    logger.info("Finished processing S3 event", extra={"entries_sent": sent})
    return SUCCESS_RESULT
