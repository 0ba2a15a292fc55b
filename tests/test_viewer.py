import pytest
from jinja2 import TemplateNotFound, TemplateSyntaxError


def test_missing_url_renders_error_page(client):
    response = client.get('/')

    assert response.status_code == 200
    assert response.mimetype == 'text/html'
    body = response.get_data(as_text=True)
    assert '<h1>Error</h1>' in body
    assert 'Missing &#39;url&#39; query parameter' in body


@pytest.mark.parametrize('bad_url', [
    'not a url',
    '/relative/path',
    'http://example.com:abc/file.pdf',
    'http://exa mple.com/file.pdf',
])
def test_invalid_url_renders_error_page(client, bad_url):
    response = client.get('/', query_string={'url': bad_url})

    assert response.status_code == 200
    assert response.mimetype == 'text/html'
    assert 'Invalid url' in response.get_data(as_text=True)


def test_renders_viewer_through_relay(client):
    response = client.get('/?url=https://example.com/file.pdf')

    assert response.status_code == 200
    assert response.mimetype == 'text/html'
    body = response.get_data(as_text=True)
    assert 'pdf-document="/proxy?url=https://example.com/file.pdf"' in body
    assert 'pdf.min.js' in body


def test_target_query_string_stays_in_relay_parameter(client):
    response = client.get('/', query_string={'url': 'https://example.com/get?id=7&name=a b'})

    body = response.get_data(as_text=True)
    assert '/proxy?url=https://example.com/get%3Fid%3D7%26name%3Da%20b' in body


def test_unmatched_path_renders_viewer(client):
    response = client.get('/any/other/path?url=https://example.com/file.pdf')

    assert response.status_code == 200
    assert '/proxy?url=https://example.com/file.pdf' in response.get_data(as_text=True)


def test_broken_error_template_falls_back_to_plain_text(app, client, monkeypatch):
    def get_template(name, *args, **kwargs):
        raise TemplateNotFound(name)

    monkeypatch.setattr(app.jinja_env, 'get_template', get_template)

    response = client.get('/?url=https://example.com/file.pdf')

    assert response.status_code == 500
    assert response.mimetype == 'text/plain'
    assert response.get_data(as_text=True) == 'Something went wrong, try again.\n'


def test_broken_viewer_template_renders_error_page(app, client, monkeypatch):
    original = app.jinja_env.get_template

    def get_template(name, *args, **kwargs):
        if name == 'viewer.html':
            raise TemplateSyntaxError('unexpected end of template', 1, name=name)
        return original(name, *args, **kwargs)

    monkeypatch.setattr(app.jinja_env, 'get_template', get_template)

    response = client.get('/?url=https://example.com/file.pdf')

    assert response.status_code == 200
    assert response.mimetype == 'text/html'
    body = response.get_data(as_text=True)
    assert 'Something went wrong, try again.' in body
    assert '/proxy?url=' not in body
