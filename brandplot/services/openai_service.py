"""OpenAI client helpers shared by the mission generators."""
import json
import logging
import openai
from flask import current_app

logger = logging.getLogger(__name__)

DEFAULT_MODEL = 'gpt-5'


class OpenAIConfigError(Exception):
    pass


def get_openai_client():
    api_key = current_app.config.get('OPENAI_API_KEY')
    if not api_key:
        raise OpenAIConfigError("OpenAI API key nao configurada")
    return openai.OpenAI(api_key=api_key)


def _get(obj, name):
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def parse_response_json(response):
    """
    Extracts the JSON document from a Responses API reply.
    Looks at `output_text` first, then at the first output_text part of a
    message item.
    """
    output_text = _get(response, 'output_text')
    if isinstance(output_text, str) and output_text.strip():
        return json.loads(output_text)

    output = _get(response, 'output')
    if isinstance(output, list):
        for message in output:
            content = _get(message, 'content')
            if _get(message, 'type') != 'message' or not isinstance(content, list):
                continue
            for part in content:
                text = _get(part, 'text')
                if _get(part, 'type') == 'output_text' and isinstance(text, str):
                    return json.loads(text)

    raise ValueError("Formato inesperado recebido do OpenAI Responses API")


def generate_structured(system_prompt, prompt, format_name, schema):
    """Runs a Responses API call constrained to `schema` and returns the parsed dict."""
    client = get_openai_client()
    model = current_app.config.get('OPENAI_MODEL') or DEFAULT_MODEL

    logger.info(f"[OpenAI] Responses API call {format_name} (model={model}, prompt={len(prompt)} chars)")
    response = client.responses.create(
        model=model,
        input=[
            {"role": "system", "content": [{"type": "input_text", "text": system_prompt}]},
            {"role": "user", "content": [{"type": "input_text", "text": prompt}]},
        ],
        text={
            "format": {
                "type": "json_schema",
                "name": format_name,
                "schema": schema,
            },
        },
    )
    return parse_response_json(response)


def is_organization_verification_error(error):
    if getattr(error, 'status_code', None) != 403:
        return False
    message = str(getattr(error, 'message', '') or error)
    return 'organization must be verified' in message.lower()


def generate_image(prompt, size='1024x1024'):
    """
    Generates one image, falling back from gpt-image-1 to dall-e-3 when the
    organization is not verified for gpt-image-1. Returns a URL or data: URL.
    """
    client = get_openai_client()

    try:
        response = client.images.generate(model='gpt-image-1', prompt=prompt, size=size, quality='high')
    except openai.PermissionDeniedError as e:
        if not is_organization_verification_error(e):
            raise
        logger.warning("[MISSAO 3] gpt-image-1 indisponivel, usando fallback dall-e-3.")
        response = client.images.generate(model='dall-e-3', prompt=prompt, size=size, response_format='b64_json')

    data = _get(response, 'data') or []
    image = data[0] if data else None
    if not image:
        raise ValueError("Imagem nao retornada pelo modelo de geracao")

    b64 = _get(image, 'b64_json')
    image_url = f"data:image/png;base64,{b64}" if b64 else _get(image, 'url')
    if not image_url:
        raise ValueError("Imagem nao retornada pelo modelo de geracao")
    return image_url
