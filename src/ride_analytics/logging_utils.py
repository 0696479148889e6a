"""Logging setup and credential redaction for the analytics engine.

The remote prediction client sends a bearer token on every request. This
module provides a logging filter that scrubs such credentials from log
records before they are emitted, so connection failures and debug output
never leak the configured API key.

Usage:
    from ride_analytics.logging_utils import configure_logging

    configure_logging("DEBUG")
"""

import logging
import re
from typing import Any, Optional


class RedactingFilter(logging.Filter):
    """Logging filter that redacts credentials from log messages."""

    # More specific patterns come before general ones
    PATTERNS: list[tuple[re.Pattern, str]] = [
        # JWT tokens (three base64 segments), before Bearer
        (re.compile(r'\beyJ[a-zA-Z0-9_-]+\.eyJ[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+'), '[REDACTED_JWT]'),

        # Bearer tokens in Authorization headers
        (re.compile(r'Bearer\s+[a-zA-Z0-9_\-\.]+', re.IGNORECASE), 'Bearer [REDACTED_TOKEN]'),

        # Authorization header values (generic)
        (re.compile(r'(Authorization["\']?\s*[:=]\s*["\']?)(?!Bearer )[^"\'&\s]+', re.IGNORECASE), r'\1[REDACTED]'),

        # Key and token fields
        (re.compile(r'(api_key["\']?\s*[:=]\s*["\']?)[^"\'&\s]+', re.IGNORECASE), r'\1[REDACTED]'),
        (re.compile(r'(apikey["\']?\s*[:=]\s*["\']?)[^"\'&\s]+', re.IGNORECASE), r'\1[REDACTED]'),
        (re.compile(r'(access_token["\']?\s*[:=]\s*["\']?)[^"\'&\s]+', re.IGNORECASE), r'\1[REDACTED]'),

        # Long hex strings that look like keys (32+ chars)
        (re.compile(r'\b[a-fA-F0-9]{32,}\b'), '[REDACTED_HEX_TOKEN]'),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        """Sanitize the record in place; always lets it through."""
        if record.msg:
            record.msg = self._sanitize(str(record.msg))

        if record.args:
            record.args = self._sanitize_args(record.args)

        return True

    def _sanitize(self, text: str) -> str:
        for pattern, replacement in self.PATTERNS:
            text = pattern.sub(replacement, text)
        return text

    def _sanitize_args(self, args: Any) -> Any:
        if isinstance(args, str):
            return self._sanitize(args)
        elif isinstance(args, tuple):
            return tuple(self._sanitize_args(arg) for arg in args)
        elif isinstance(args, list):
            return [self._sanitize_args(arg) for arg in args]
        elif isinstance(args, dict):
            return {k: self._sanitize_args(v) for k, v in args.items()}
        else:
            # Numbers and other primitives pass through unless they stringify to a secret
            str_val = str(args)
            sanitized = self._sanitize(str_val)
            return sanitized if sanitized != str_val else args


def redact(text: str) -> str:
    """Redact credentials from a string outside of the logging system.

    Args:
        text: The text to sanitize.

    Returns:
        The text with credentials replaced by placeholders.
    """
    return RedactingFilter()._sanitize(text)


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Configure the ``ride_analytics`` logger hierarchy.

    Installs a stream handler (once) carrying the redacting filter on the
    package logger. Module loggers created with
    ``logging.getLogger(__name__)`` propagate to it, so their records are
    sanitized on the way out.

    Args:
        level: Log level name. Defaults to ``Settings.log_level``.

    Returns:
        The package logger.
    """
    if level is None:
        from .config import get_settings

        level = get_settings().log_level

    package_logger = logging.getLogger("ride_analytics")
    package_logger.setLevel(level.upper())

    if not any(isinstance(f, RedactingFilter) for f in package_logger.filters):
        package_logger.addFilter(RedactingFilter())

    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        handler.addFilter(RedactingFilter())
        package_logger.addHandler(handler)

    return package_logger
