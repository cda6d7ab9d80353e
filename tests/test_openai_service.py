from types import SimpleNamespace

import httpx
import openai
import pytest

from brandplot.services import openai_service
from brandplot.services.openai_service import parse_response_json, generate_image, get_openai_client


def permission_denied(message):
    request = httpx.Request('POST', 'https://api.openai.com/v1/images/generations')
    response = httpx.Response(403, request=request)
    return openai.PermissionDeniedError(message, response=response, body=None)


class FakeImages:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def generate(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def fake_images(monkeypatch):
    def install(*outcomes):
        images = FakeImages(outcomes)
        monkeypatch.setattr(openai_service, 'get_openai_client', lambda: SimpleNamespace(images=images))
        return images
    return install


def test_parse_output_text():
    assert parse_response_json(SimpleNamespace(output_text='{"a": 1}')) == {'a': 1}


def test_parse_message_parts():
    response = {
        'output_text': '',
        'output': [
            {'type': 'reasoning', 'content': None},
            {'type': 'message', 'content': [{'type': 'output_text', 'text': '{"ideas": []}'}]},
        ],
    }
    assert parse_response_json(response) == {'ideas': []}


def test_parse_unexpected_format():
    with pytest.raises(ValueError, match="Formato inesperado"):
        parse_response_json(SimpleNamespace(output_text=None, output=[]))


def test_client_requires_api_key(make_app):
    app = make_app(OPENAI_API_KEY=None)
    with app.app_context():
        with pytest.raises(openai_service.OpenAIConfigError):
            get_openai_client()


def test_generate_image_returns_url(fake_images):
    images = fake_images(SimpleNamespace(data=[SimpleNamespace(url='https://img.test/a.png', b64_json=None)]))
    assert generate_image('um mockup') == 'https://img.test/a.png'
    assert images.calls[0]['model'] == 'gpt-image-1'


def test_generate_image_falls_back_for_unverified_organization(fake_images):
    images = fake_images(
        permission_denied("Your organization must be verified to use the model gpt-image-1"),
        SimpleNamespace(data=[SimpleNamespace(url=None, b64_json='aGVsbG8=')]),
    )
    assert generate_image('um mockup') == 'data:image/png;base64,aGVsbG8='
    assert images.calls[1]['model'] == 'dall-e-3'
    assert images.calls[1]['response_format'] == 'b64_json'


def test_generate_image_other_permission_errors_propagate(fake_images):
    fake_images(permission_denied("Project does not have access"))
    with pytest.raises(openai.PermissionDeniedError):
        generate_image('um mockup')


def test_generate_image_without_data(fake_images):
    fake_images(SimpleNamespace(data=[]))
    with pytest.raises(ValueError):
        generate_image('um mockup')
