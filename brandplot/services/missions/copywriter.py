"""Missao 2 - Copywriter: main message, supporting assets and a content idea."""
from brandplot.services import openai_service

STAGES = ('variations', 'assets', 'content')

SYSTEM_PROMPT = " ".join([
    "Voce e o Copywriter da Menos Mais, especialista em transformar mensagens confusas em copy irresistivel.",
    "Seu tom e charmoso, brincalhao e direto, como quem diz: \"Deixa comigo - eu falo bonito por voce\".",
    "Voce cria frases curtas, memoraveis e com foco em beneficio. As respostas devem estar sempre em portugues brasileiro.",
])

STAGE_FORMATS = {
    'variations': {
        'name': 'Mission2Variations',
        'schema': {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "options": {
                    "type": "array",
                    "minItems": 3,
                    "maxItems": 4,
                    "items": {"type": "string", "minLength": 8, "maxLength": 140},
                },
                "insight": {
                    "type": "string",
                    "description": "Comentario breve sobre como as versoes destacam o valor da solucao.",
                },
            },
            "required": ["options", "insight"],
        },
    },
    'assets': {
        'name': 'Mission2Assets',
        'schema': {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "subtitle": {
                    "type": "string",
                    "description": "Subtitulo que reforca o beneficio final ao cliente.",
                    "minLength": 12,
                    "maxLength": 140,
                },
                "instagramBio": {
                    "type": "string",
                    "description": "Bio de Instagram com ate 120 caracteres.",
                    "minLength": 12,
                    "maxLength": 120,
                },
                "positioningNote": {
                    "type": "string",
                    "description": "Nota sobre o foco estrategico adotado.",
                },
            },
            "required": ["subtitle", "instagramBio", "positioningNote"],
        },
    },
    'content': {
        'name': 'Mission2ContentIdea',
        'schema': {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "title": {
                    "type": "string",
                    "description": "Titulo chamativo para um post carrossel ou video curto.",
                    "minLength": 8,
                    "maxLength": 120,
                },
                "bullets": {
                    "type": "array",
                    "minItems": 3,
                    "maxItems": 4,
                    "items": {"type": "string", "minLength": 12, "maxLength": 160},
                },
                "callToAction": {
                    "type": "string",
                    "description": "Sugestao opcional de CTA para fechar o conteudo.",
                },
            },
            "required": ["title", "bullets", "callToAction"],
        },
    },
}


def validate(payload):
    stage = payload.get('stage')
    if stage not in STAGES:
        return "Etapa invalida solicitada"
    if stage == 'variations' and not payload.get('userPhrase'):
        return "Frase do usuario e obrigatoria"
    if stage == 'assets' and not payload.get('selectedPhrase'):
        return "Selecione uma frase principal antes de gerar ativos"
    if stage == 'content' and not (payload.get('selectedPhrase') and payload.get('subtitle') and payload.get('bio')):
        return "Mensagem principal, subtitulo e bio sao necessarios para gerar o conteudo"
    return None


def _join(lines):
    return " ".join(line for line in lines if line)


def build_prompt(payload):
    stage = payload['stage']

    if stage == 'variations':
        context_details = payload.get('contextDetails')
        return _join([
            "Reescreva a frase a seguir em tres versoes curtas e impactantes, priorizando beneficio, clareza e desejo.",
            "Cada frase deve soar como uma promessa real de valor, com linguagem simples, confiante e convidativa.",
            f"Contexto adicional fornecido: {context_details}." if context_details else None,
            f"Frase original do usuario: \"{payload['userPhrase']}\".",
            "Retorne apenas o JSON no formato combinado.",
        ])

    if stage == 'assets':
        brand_tone = payload.get('brandTone')
        user_phrase = payload.get('userPhrase')
        return _join([
            "A frase principal escolhida pelo usuario sera a base da mensagem central.",
            "Crie um subtitulo de apoio que deixe explicito o beneficio final para o cliente, em no maximo 20 palavras.",
            "Gere tambem uma bio de Instagram com ate 120 caracteres, combinando clareza e autoridade.",
            f"Tom desejado informado: {brand_tone}." if brand_tone else "Use o tom charmoso, brincalhao e direto da Menos Mais.",
            f"Frase original do usuario para referencia: \"{user_phrase}\"." if user_phrase else None,
            f"Frase principal escolhida: \"{payload['selectedPhrase']}\".",
            "Explique rapidamente (positioningNote) qual foco estrategico guiou suas escolhas.",
            "Responda apenas no formato JSON solicitado.",
        ])

    return _join([
        "Com base na mensagem principal, subtitulo e bio, proponha uma ideia de post carrossel ou video curto para Instagram.",
        "Crie um titulo chamativo (maximo 12 palavras) e tres bullets que resumam o conteudo de forma sequencial.",
        "Cada bullet deve empurrar o leitor para a acao, misturando insight pratico e provocacao.",
        "Sugira ainda um CTA curto (callToAction) alinhado ao novo posicionamento.",
        f"Mensagem principal: \"{payload['selectedPhrase']}\".",
        f"Subtitulo de apoio: \"{payload['subtitle']}\".",
        f"Bio atualizada: \"{payload['bio']}\".",
        "Retorne apenas o JSON conforme o schema definido.",
    ])


def generate(payload):
    stage_format = STAGE_FORMATS[payload['stage']]
    return openai_service.generate_structured(
        SYSTEM_PROMPT, build_prompt(payload), stage_format['name'], stage_format['schema']
    )
