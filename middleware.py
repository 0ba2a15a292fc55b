"""WSGI middleware that logs the start and end of every request."""
import logging
import time

from werkzeug.datastructures import MultiDict
from werkzeug.wrappers import Request
from werkzeug.wsgi import ClosingIterator

logger = logging.getLogger(__name__)


def flatten_query(args: MultiDict) -> str:
    """Render query parameters as ``key [v1 v2]`` entries, sorted by key."""
    return ' '.join(
        f"{key} [{' '.join(args.getlist(key))}]" for key in sorted(args.keys())
    )


class RequestLogger:
    """Wrap a WSGI application with start/completion access log lines.

    The completion line is written when the response iterable is closed,
    so the elapsed time of a streamed response covers the whole body.
    Errors raised by the wrapped application are not caught.
    """

    def __init__(self, wsgi_app):
        self.wsgi_app = wsgi_app

    def __call__(self, environ, start_response):
        start_time = time.perf_counter()
        request = Request(environ, populate_request=False, shallow=True)
        method = request.method
        path = request.path
        query = flatten_query(request.args)

        logger.info(f"Started {method} {path} | query: {query}")

        def log_completed():
            elapsed = time.perf_counter() - start_time
            logger.info(f"Completed {method} {path} | query: {query} in {elapsed * 1000:.3f}ms")

        app_iter = self.wsgi_app(environ, start_response)
        return ClosingIterator(app_iter, log_completed)
