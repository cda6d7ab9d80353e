import json
from types import SimpleNamespace

import pytest

from brandplot.services import openai_service


class FakeResponses:
    def __init__(self, result):
        self.result = result
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if isinstance(self.result, Exception):
            raise self.result
        return SimpleNamespace(output_text=json.dumps(self.result), output=[])


@pytest.fixture
def fake_openai(monkeypatch):
    def install(result):
        responses = FakeResponses(result)
        client = SimpleNamespace(responses=responses)
        monkeypatch.setattr(openai_service, 'get_openai_client', lambda: client)
        return responses
    return install


MISSION2 = {'selectedPhrase': 'Menos ruido, mais clareza', 'subtitle': 'Sua marca em uma frase', 'bio': 'Clareza que vende'}

DIRECTION = {
    'id': 'aurora',
    'name': 'Aurora Serena',
    'summary': 'Luz suave e calma',
    'palette': [{'hex': '#F4EDE4', 'label': 'Areia', 'usage': 'fundo'}],
    'texture': 'papel',
    'lighting': 'difusa',
    'typography': 'serifada elegante',
}


def test_unknown_mission_is_404(client):
    assert client.post('/api/missao1/generate', json={'stage': 'x'}).status_code == 404
    res = client.post('/api/missao9/generate', json={'stage': 'x'})
    assert res.status_code == 404
    assert 'error' in res.get_json()


def test_missing_openai_key(make_app):
    app = make_app(OPENAI_API_KEY=None)
    res = app.test_client().post('/api/missao2/generate', json={'stage': 'variations', 'userPhrase': 'oi'})
    assert res.status_code == 500
    assert res.get_json()['error'] == "OpenAI API key nao configurada"


def test_payload_must_be_an_object(client):
    res = client.post('/api/missao2/generate', data='[1, 2]', content_type='application/json')
    assert res.status_code == 400
    assert res.get_json()['error'] == "Payload inválido"


def test_mission2_variations(client, fake_openai):
    result = {'options': ['a' * 10, 'b' * 10, 'c' * 10], 'insight': 'ok'}
    responses = fake_openai(result)

    res = client.post('/api/missao2/generate', json={'stage': 'variations', 'userPhrase': 'Eu ajudo empresas'})
    assert res.status_code == 200
    assert res.get_json() == {'success': True, 'stage': 'variations', 'data': result}

    call = responses.calls[0]
    assert call['model'] == 'gpt-5'
    assert call['text']['format']['type'] == 'json_schema'
    assert call['text']['format']['name'] == 'Mission2Variations'
    assert 'Eu ajudo empresas' in call['input'][1]['content'][0]['text']


def test_mission2_validation(client, fake_openai):
    fake_openai({})
    res = client.post('/api/missao2/generate', json={'stage': 'variations'})
    assert res.status_code == 400
    assert res.get_json()['error'] == "Frase do usuario e obrigatoria"

    res = client.post('/api/missao2/generate', json={'stage': 'content', 'selectedPhrase': 'x'})
    assert res.status_code == 400

    res = client.post('/api/missao2/generate', json={'stage': 'nope'})
    assert res.get_json()['error'] == "Etapa invalida solicitada"


def test_configured_model_is_used(make_app, fake_openai):
    responses = fake_openai({'subtitle': 's', 'instagramBio': 'b', 'positioningNote': 'n'})
    app = make_app(OPENAI_MODEL='gpt-4.1-mini')
    res = app.test_client().post('/api/missao2/generate', json={'stage': 'assets', 'selectedPhrase': 'Frase'})
    assert res.status_code == 200
    assert responses.calls[0]['model'] == 'gpt-4.1-mini'
    assert responses.calls[0]['text']['format']['name'] == 'Mission2Assets'


def test_mission3_directions(client, fake_openai):
    responses = fake_openai({'directions': [DIRECTION]})
    res = client.post('/api/missao3/generate', json={'stage': 'directions', 'energy': 'calma', 'mission2': MISSION2})
    assert res.status_code == 200
    prompt = responses.calls[0]['input'][1]['content'][0]['text']
    assert 'Calma e autenticidade' in prompt
    assert 'Menos ruido, mais clareza' in prompt


def test_mission3_image(client, monkeypatch):
    prompts = []

    def fake_image(prompt, size='1024x1024'):
        prompts.append(prompt)
        return 'https://images.test/mockup.png'

    monkeypatch.setattr(openai_service, 'generate_image', fake_image)
    res = client.post('/api/missao3/generate', json={
        'stage': 'image', 'direction': DIRECTION, 'mission2': MISSION2, 'energy': 'energia', 'layout': 'lines',
    })
    assert res.status_code == 200
    data = res.get_json()['data']
    assert data['imageUrl'] == 'https://images.test/mockup.png'
    assert data['altText'] == "Mockup Aurora Serena com energia Energia e movimento"
    assert data['prompt'] == prompts[0]
    assert '#F4EDE4 (fundo)' in prompts[0]


def test_mission3_guide_drops_empty_typography(client, fake_openai):
    fake_openai({
        'palette': [],
        'typography': {'primary': {'name': 'Inter', 'usage': 'titulos'}, 'secondary': None, 'accent': None},
        'visualNotes': ['a', 'b', 'c'],
        'logoSuggestion': 'monograma',
        'applicationExample': 'post',
        'toneReminder': 'calma',
    })
    res = client.post('/api/missao3/generate', json={
        'stage': 'guide', 'direction': DIRECTION, 'mission2': MISSION2,
        'energy': 'calma', 'layout': 'curves', 'palette': DIRECTION['palette'],
    })
    assert res.status_code == 200
    assert res.get_json()['data']['typography'] == {'primary': {'name': 'Inter', 'usage': 'titulos'}}


def test_mission3_unknown_stage(client):
    res = client.post('/api/missao3/generate', json={'stage': 'video'})
    assert res.status_code == 400
    assert res.get_json()['error'] == "Etapa solicitada não suportada"


def test_mission4_requires_context(client):
    res = client.post('/api/missao4/generate', json={'stage': 'ideas'})
    assert res.status_code == 400
    assert res.get_json()['error'] == "Contexto da marca é obrigatório"

    res = client.post('/api/missao4/generate', json={'stage': 'roteiro', 'context': {'brandName': 'Acme'}})
    assert res.get_json()['error'] == "Selecione uma ideia antes de gerar o roteiro"


def test_mission4_ideas(client, fake_openai):
    responses = fake_openai({'ideas': []})
    res = client.post('/api/missao4/generate', json={'stage': 'ideas', 'context': {'brandName': 'Acme'}})
    assert res.status_code == 200
    assert res.get_json()['stage'] == 'ideas'
    assert 'Contexto da marca: Nome da marca: Acme.' in responses.calls[0]['input'][1]['content'][0]['text']


def test_mission5_validation_order(client):
    res = client.post('/api/missao5/generate', json={'context': {}})
    assert res.get_json()['error'] == "Etapa nao informada"

    res = client.post('/api/missao5/generate', json={'stage': 'report'})
    assert res.get_json()['error'] == "Contexto ausente"

    res = client.post('/api/missao5/generate', json={'stage': 'forecast', 'context': {}})
    assert res.get_json()['error'] == "Etapa invalida"

    res = client.post('/api/missao5/generate', json={'stage': 'maturity', 'context': {}, 'report': {}})
    assert res.get_json()['error'] == "Relatorio e plano obrigatorios para maturidade"


def test_mission5_report(client, fake_openai):
    responses = fake_openai({'reachDelta': '+10%'})
    res = client.post('/api/missao5/generate', json={'stage': 'report', 'context': {'xpAtual': 140}})
    assert res.status_code == 200
    assert res.get_json() == {'success': True, 'stage': 'report', 'data': {'reachDelta': '+10%'}}
    assert responses.calls[0]['text']['format']['name'] == 'Mission5Report'


def test_generation_failure_is_500(client, fake_openai):
    fake_openai(RuntimeError("rate limited"))
    res = client.post('/api/missao4/generate', json={'stage': 'ideas', 'context': {'brandName': 'Acme'}})
    assert res.status_code == 500
    assert res.get_json()['error'] == "rate limited"
