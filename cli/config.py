"""Configuration management for the url-expander command line."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def _int_env(name: str, default: int, minimum: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


@dataclass
class Config:
    """Command-line configuration loaded from environment variables."""

    # Expansion
    concurrency: int = 5
    timeout_seconds: int = 30
    retries: int = 2
    extra_shorteners: list[str] = field(default_factory=list)

    # Output
    output_suffix: str = "_expanded"

    # Logging
    log_level: str = "INFO"

    @property
    def timeout_ms(self) -> int:
        return self.timeout_seconds * 1000

    @classmethod
    def load(cls, env_path: Optional[Path] = None) -> "Config":
        """Load configuration from environment variables.

        Args:
            env_path: Optional path to .env file. If not provided, looks for .env
                      in the working directory, then in the project root
                      directory. Values already set are never overridden.

        Returns:
            Config instance with all settings loaded.

        Raises:
            ValueError: If a numeric setting is malformed or out of range.
        """
        project_root = Path(__file__).parent.parent.resolve()

        if env_path:
            load_dotenv(env_path)
        else:
            # Installed copies live in site-packages, so check the cwd first
            load_dotenv(Path.cwd() / ".env")
            load_dotenv(project_root / ".env")

        concurrency = _int_env("URL_EXPANDER_CONCURRENCY", 5, minimum=1)
        timeout_seconds = _int_env("URL_EXPANDER_TIMEOUT", 30, minimum=1)
        retries = _int_env("URL_EXPANDER_RETRIES", 2, minimum=0)

        extra = os.getenv("URL_EXPANDER_EXTRA_SHORTENERS", "")
        extra_shorteners = [d.strip() for d in extra.split(",") if d.strip()]

        output_suffix = os.getenv("URL_EXPANDER_OUTPUT_SUFFIX", "_expanded")
        if not output_suffix:
            raise ValueError("URL_EXPANDER_OUTPUT_SUFFIX must not be empty")

        log_level = os.getenv("URL_EXPANDER_LOG_LEVEL", "INFO").upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"URL_EXPANDER_LOG_LEVEL is not a log level: {log_level}")

        return cls(
            concurrency=concurrency,
            timeout_seconds=timeout_seconds,
            retries=retries,
            extra_shorteners=extra_shorteners,
            output_suffix=output_suffix,
            log_level=log_level,
        )

    def validate(self) -> list[str]:
        """Validate the configuration and return any warnings.

        Returns:
            List of warning messages for optional but recommended settings.
        """
        warnings = []

        if self.timeout_seconds < 5:
            warnings.append(
                f"Browser timeout of {self.timeout_seconds}s is short - "
                "script-driven redirects may not finish"
            )

        if self.concurrency > 20:
            warnings.append(
                f"Concurrency {self.concurrency} starts up to "
                f"{self.concurrency} browser contexts at once"
            )

        return warnings
