"""Shared utility functions for the PDF relay application."""
import logging
import os
from typing import Callable, Optional
from urllib.parse import urlsplit

from flask import Response

logger = logging.getLogger(__name__)

DEFAULT_PORT = '8080'


class FileURLError(ValueError):
    """Raised when the ``url`` query parameter cannot be used."""


class MissingFileURL(FileURLError):
    """The ``url`` query parameter is absent or empty."""


class InvalidFileURL(FileURLError):
    """The ``url`` query parameter is not an absolute URL."""


def resolve_port(flag_value: Optional[str],
                 getenv: Callable[[str], Optional[str]] = os.environ.get,
                 default: str = DEFAULT_PORT) -> str:
    """Pick the listening port from the command line, environment or default.

    Args:
        flag_value: Value given with ``-port`` on the command line, if any
        getenv: Environment lookup function
        default: Port used when neither the flag nor ``PORT`` is set

    Returns:
        Port as a string
    """
    if flag_value:
        return flag_value
    env_value = getenv('PORT')
    if env_value:
        return env_value
    return default


def parse_file_url(raw: Optional[str]) -> str:
    """Validate the target file URL taken from a query parameter.

    Any absolute URL is accepted, whatever its scheme.

    Args:
        raw: Raw ``url`` query parameter value

    Returns:
        The URL, unchanged

    Raises:
        MissingFileURL: If the value is absent or empty
        InvalidFileURL: If the value does not parse, is not absolute, or
            has a bad port or host name
    """
    if not raw:
        raise MissingFileURL("url is empty")
    # urlsplit silently drops tabs and newlines
    if _has_control_character(raw):
        raise InvalidFileURL("invalid control character in url")
    try:
        parts = urlsplit(raw)
        # Raises for a non-numeric or out-of-range port
        parts.port
    except ValueError as e:
        raise InvalidFileURL(str(e)) from e
    if not parts.scheme or not parts.netloc:
        raise InvalidFileURL("url is not absolute")
    if parts.hostname and any(ch.isspace() for ch in parts.hostname):
        raise InvalidFileURL(f"invalid character in host name: '{parts.hostname}'")
    return raw


def _has_control_character(value: str) -> bool:
    return any(ord(ch) < 0x20 or ord(ch) == 0x7f for ch in value)


def plain_text_error(message: str, status: int) -> Response:
    """Build a plain-text error response."""
    response = Response(message + '\n', status=status, mimetype='text/plain')
    response.headers['X-Content-Type-Options'] = 'nosniff'
    return response
