# Standard library imports
import logging
from enum import Enum
from typing import Iterator

# Third-party imports
import requests
from flask import Blueprint, Response, request

# Local imports
from utils import InvalidFileURL, MissingFileURL, parse_file_url, plain_text_error

# Blueprint for the file relay
proxy_bp = Blueprint('proxy', __name__)

logger = logging.getLogger(__name__)

# Bytes read from upstream per chunk while relaying
CHUNK_SIZE = 64 * 1024

DEFAULT_CONTENT_TYPE = 'application/octet-stream'


class StreamState(Enum):
    NOT_STARTED = 'not-started'
    HEADERS_SENT = 'headers-sent'
    STREAMING = 'body-streaming'
    DONE = 'done'


class RelayStream:
    """Response body that forwards an upstream body chunk by chunk.

    The body is pulled only after start_response, so the state moves to
    HEADERS_SENT on the first pull and to STREAMING with the first chunk.
    From then on a failure while copying can only be logged, and the
    client sees the body end early.
    The upstream response is closed when iteration ends or when the WSGI
    server closes this iterable, whichever comes first.
    """

    def __init__(self, upstream: requests.Response, file_url: str):
        self.upstream = upstream
        self.file_url = file_url
        self.state = StreamState.NOT_STARTED
        self.bytes_sent = 0

    def __iter__(self) -> Iterator[bytes]:
        # The WSGI server pulls the body only after start_response
        self.state = StreamState.HEADERS_SENT
        try:
            for chunk in self.upstream.iter_content(chunk_size=CHUNK_SIZE):
                if chunk:
                    self.state = StreamState.STREAMING
                    self.bytes_sent += len(chunk)
                    yield chunk
        except requests.RequestException as e:
            if self.state is StreamState.HEADERS_SENT:
                logger.error(f"Error streaming file '{self.file_url}' before any bytes were sent: {e}")
            else:
                logger.error(
                    f"Error streaming file '{self.file_url}' after {self.bytes_sent} bytes: {e}"
                )
        finally:
            self.close()

    def close(self) -> None:
        if self.state is not StreamState.DONE:
            self.state = StreamState.DONE
            self.upstream.close()


@proxy_bp.route('/proxy')
def proxy_file():
    """Stream the file given in ``?url=`` back to the caller."""
    file_url = request.args.get('url', '')
    try:
        file_url = parse_file_url(file_url)
    except MissingFileURL:
        logger.error("Failed to parse pdf url, url is empty")
        return plain_text_error("Missing 'url' query parameter", 400)
    except InvalidFileURL as e:
        logger.error(f"Failed to parse pdf url, url is invalid: '{file_url}', error: {e}")
        return plain_text_error("Invalid URL", 400)

    try:
        upstream = requests.get(file_url, stream=True)
    except requests.RequestException as e:
        logger.error(f"Failed to fetch the file for url '{file_url}': {e}")
        return plain_text_error(f"Failed to fetch the file: {e}", 502)

    if upstream.status_code != 200:
        status = f"{upstream.status_code} {upstream.reason}".strip()
        upstream.close()
        logger.error(f"Failed to fetch the file: {file_url}, status: {status}")
        return plain_text_error(f"Failed to fetch the file: {status}", 502)

    body = RelayStream(upstream, file_url)
    response = Response(
        body,
        status=200,
        content_type=upstream.headers.get('Content-Type') or DEFAULT_CONTENT_TYPE,
        direct_passthrough=True,
    )
    response.headers['Content-Disposition'] = 'inline'
    return response
