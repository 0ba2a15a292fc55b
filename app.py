# Standard library imports
import argparse
import logging
import os
import sys
from typing import Optional, Sequence

# Third-party imports
from flask import Flask

# Local imports
from blueprints.proxy import proxy_bp
from blueprints.viewer import viewer_bp
from middleware import RequestLogger
from utils import DEFAULT_PORT, resolve_port

# Configure the app
app = Flask(__name__)

# Configure logging
stream_handler = logging.StreamHandler(sys.stderr)
stream_handler.setLevel(logging.INFO)

formatter = logging.Formatter('[%(name)s - %(asctime)s] - [%(levelname)s] %(message)s', datefmt='%Y-%m-%d %H:%M:%S')
stream_handler.setFormatter(formatter)

# Get root logger and configure
root_logger = logging.getLogger()
root_logger.setLevel(logging.INFO)
root_logger.addHandler(stream_handler)

logger = logging.getLogger(__name__.capitalize())

# Register blueprints
app.register_blueprint(proxy_bp)
app.register_blueprint(viewer_bp)

# Access log around every request, including streamed bodies
app.wsgi_app = RequestLogger(app.wsgi_app)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Serve a PDF viewer that relays remote files.")
    parser.add_argument(
        '-port', '--port',
        dest='port',
        default='',
        help=f"The port which the server will listen to, e.g. {DEFAULT_PORT}",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Resolve the port and serve until interrupted."""
    args = parse_args(argv)
    port = resolve_port(args.port, os.environ.get)

    try:
        port_number = int(port)
    except ValueError:
        logger.critical(f"Invalid port: '{port}'")
        sys.exit(1)

    logger.info(f"Starting server on :{port}")
    try:
        app.run(host='0.0.0.0', port=port_number, threaded=True)
    except OSError as e:
        logger.critical(f"Failed to listen on :{port}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
