import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CUSTOMER_CODE = "default"


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration loaded from environment variables."""

    # --- Required Variables ---
    graylog_url: str
    auth_token_secret_id: str

    # --- Optional Variables with Defaults ---
    customer_code: str
    customer_code_defaulted: bool
    tags: str | None
    log_level: str
    http_timeout_seconds: float

    # --- Derived Properties ---
    @property
    def http_timeout(self) -> tuple[float, float]:
        """(connect, read) timeout pair in the shape requests expects."""
        return (self.http_timeout_seconds, self.http_timeout_seconds)

    @classmethod
    def load_from_env(cls) -> "AppConfig":
        """
        Loads configuration from environment variables, performing validation and type casting.
        Fails fast with a ConfigurationError if anything is invalid.
        """
        try:
            # --- Handle required string variables ---
            graylog_url = os.environ["GRAYLOG_URL"]
            if not graylog_url.strip():
                raise KeyError("GRAYLOG_URL")
            auth_token_secret_id = os.environ["GRAYLOG_AUTH_TOKEN_SECRET_ARN"]
            if not auth_token_secret_id.strip():
                raise KeyError("GRAYLOG_AUTH_TOKEN_SECRET_ARN")

            # --- Optional strings: an empty value counts as unset ---
            tags = os.getenv("GRAYLOG_TAGS") or None

            customer_code = os.getenv("CUSTOMER_CODE", "")
            customer_code_defaulted = not customer_code
            if customer_code_defaulted:
                customer_code = DEFAULT_CUSTOMER_CODE

            http_timeout_seconds = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))
            if http_timeout_seconds <= 0:
                raise ValueError("HTTP_TIMEOUT_SECONDS must be a positive number.")

            # --- Handle special-case variables like log level ---
            log_level = os.getenv("LOG_LEVEL", "INFO").upper()
            allowed_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
            if log_level not in allowed_log_levels:
                raise ValueError(
                    f"LOG_LEVEL must be one of {allowed_log_levels}, not '{log_level}'"
                )

        except KeyError as e:
            raise ConfigurationError(
                f"Missing required environment variable: {e.args[0]}",
                context={"variable": e.args[0]},
            ) from e
        except (ValueError, TypeError) as e:
            raise ConfigurationError(
                f"Invalid value for an environment variable: {e}"
            ) from e

        return cls(
            graylog_url=graylog_url,
            auth_token_secret_id=auth_token_secret_id,
            customer_code=customer_code,
            customer_code_defaulted=customer_code_defaulted,
            tags=tags,
            log_level=log_level,
            http_timeout_seconds=http_timeout_seconds,
        )


# --- Singleton Factory Function (Lazy-loaded and Cached) ---
@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """
    Loads the application configuration from environment variables.
    The result is cached using lru_cache, so the environment is only read once
    on the first call. This avoids import-time side effects.
    """
    logger.info("Loading application configuration from environment...")
    return AppConfig.load_from_env()
