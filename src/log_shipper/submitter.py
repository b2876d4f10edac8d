# src/log_shipper/submitter.py

"""
HTTP delivery of encoded bundles to the Graylog ingestion endpoint.
"""

import logging
from typing import Sequence

import requests

from .config import AppConfig
from .core import LogLine
from .envelope import encode_bundle
from .exceptions import SubmissionError

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


class GraylogSubmitter:
    """
    Posts bundles to Graylog over a single requests.Session.

    Use as a context manager so the session is closed when the invocation
    ends, whatever the outcome.
    """

    def __init__(
        self,
        config: AppConfig,
        auth_token: str,
        session: requests.Session | None = None,
    ):
        self._config = config
        self._session = session or requests.Session()
        self._headers = {
            "Content-Type": JSON_CONTENT_TYPE,
            "AUTH": auth_token,
            "customer_code": config.customer_code,
        }
        if config.customer_code_defaulted:
            logger.warning(
                "CUSTOMER_CODE environment variable not set, using default value: %s",
                config.customer_code,
            )

    def __enter__(self) -> "GraylogSubmitter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    def submit(self, bundle: Sequence[LogLine]) -> None:
        """Sends one bundle; raises SubmissionError unless Graylog answers 2xx."""
        try:
            body = encode_bundle(bundle, self._config.tags).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise SubmissionError(f"could not serialize bundle: {e}") from e

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Sending logs to Graylog", extra={"payload": body.decode("utf-8")})
        logger.info(
            "HEADER_CHECK: customer_code=%s is being sent to Graylog",
            self._config.customer_code,
        )

        try:
            response = self._session.post(
                self._config.graylog_url,
                data=body,
                headers=self._headers,
                timeout=self._config.http_timeout,
                allow_redirects=False,
            )
        except requests.exceptions.RequestException as e:
            logger.error("Error sending logs to Graylog: %s", e)
            raise SubmissionError(f"request failed: {e}") from e

        with response:
            if not 200 <= response.status_code < 300:
                response_body = response.text or None
                logger.error(
                    "Failed to send logs to Graylog. Status code: %s",
                    response.status_code,
                    extra={"response_body": response_body},
                )
                raise SubmissionError(
                    f"unexpected response code {response.status_code}",
                    status_code=response.status_code,
                    response_body=response_body,
                    context={"url": self._config.graylog_url},
                )

        logger.info(
            "Successfully sent %d logs to Graylog",
            len(bundle),
            extra={"payload_bytes": len(body)},
        )
