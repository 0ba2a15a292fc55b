# Standard library imports
import logging
from urllib.parse import quote

# Third-party imports
from flask import Blueprint, current_app, render_template, request, url_for
from jinja2 import TemplateError

# Local imports
from utils import InvalidFileURL, MissingFileURL, parse_file_url, plain_text_error

viewer_bp = Blueprint('viewer', __name__)

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong, try again."


def _html(body):
    return body, 200, {'Content-Type': 'text/html; charset=utf-8'}


@viewer_bp.route('/')
@viewer_bp.route('/<path:subpath>')
def view_pdf(subpath=None):
    """Render the PDF viewer page for the file given in ``?url=``."""
    try:
        error_template = current_app.jinja_env.get_template('error.html')
    except TemplateError as e:
        logger.error(f"Failed to load error template: {e}", exc_info=True)
        return plain_text_error(GENERIC_ERROR_MESSAGE, 500)

    file_url = request.args.get('url', '')
    try:
        file_url = parse_file_url(file_url)
    except MissingFileURL:
        logger.error("Failed to parse pdf url, url is empty")
        return _html(render_template(error_template, message="Missing 'url' query parameter"))
    except InvalidFileURL as e:
        logger.error(f"Failed to parse pdf url, url is invalid: '{file_url}', error: {e}")
        return _html(render_template(error_template, message="Invalid url"))

    try:
        viewer_template = current_app.jinja_env.get_template('viewer.html')
    except TemplateError as e:
        logger.error(f"Failed to load pdf viewer template for url '{file_url}': {e}", exc_info=True)
        return _html(render_template(error_template, message=GENERIC_ERROR_MESSAGE))

    # Keep the target's own query string inside the relay's url parameter
    return _html(render_template(
        viewer_template,
        proxy_path=url_for('proxy.proxy_file'),
        file_url=quote(file_url, safe=':/'),
    ))
