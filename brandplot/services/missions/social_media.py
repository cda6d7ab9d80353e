"""Missao 4 - Social Media IA: post ideas, script, caption and a five-day calendar."""
from brandplot.services import openai_service

STAGES = ('ideas', 'roteiro', 'legenda', 'calendar')

SYSTEM_PROMPT = " ".join([
    "Você é o Social Media IA da Menos Mais.",
    "Seu papel é transformar a estratégia, a mensagem e a identidade da marca em presença consistente.",
    "Fale com confiança, clareza e foco em ação. Seja direto, sem enrolação, e sempre em português brasileiro.",
])

IDEAS_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "ideas": {
            "type": "array",
            "minItems": 5,
            "maxItems": 5,
            "items": {
                "type": "object",
                "additionalProperties": False,
                "properties": {
                    "id": {"type": "string", "description": "Identificador curto tipo idea-1, idea-2..."},
                    "title": {"type": "string", "minLength": 6, "maxLength": 120, "description": "Título chamativo da ideia."},
                    "format": {
                        "type": "string",
                        "minLength": 3,
                        "maxLength": 50,
                        "description": "Formato recomendado (ex: Carrossel, Reel, Live curta...).",
                    },
                    "caption": {
                        "type": "string",
                        "minLength": 24,
                        "maxLength": 160,
                        "description": "Legenda curta (1 frase) alinhada ao tom da marca.",
                    },
                    "angle": {"type": "string", "description": "Ângulo estratégico ou insight chave da ideia."},
                },
                "required": ["id", "title", "format", "caption"],
            },
        },
        "alignmentNote": {
            "type": "string",
            "description": "Resumo opcional indicando como as ideias se conectam à estratégia.",
        },
    },
    "required": ["ideas"],
}

ROTEIRO_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "gancho": {"type": "string", "minLength": 12, "maxLength": 200},
        "desenvolvimento": {
            "type": "array",
            "minItems": 2,
            "maxItems": 3,
            "items": {"type": "string", "minLength": 12, "maxLength": 220},
        },
        "insight": {"type": "string", "minLength": 12, "maxLength": 200},
        "callToAction": {"type": "string", "minLength": 8, "maxLength": 160},
    },
    "required": ["gancho", "desenvolvimento", "insight", "callToAction"],
}

LEGENDA_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "text": {"type": "string", "minLength": 120, "maxLength": 280},
        "characterCount": {"type": "number", "minimum": 150, "maximum": 260},
        "toneReminder": {"type": "string"},
    },
    "required": ["text", "characterCount"],
}

CALENDAR_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "entries": {
            "type": "array",
            "minItems": 5,
            "maxItems": 5,
            "items": {
                "type": "object",
                "additionalProperties": False,
                "properties": {
                    "day": {"type": "string", "description": "Abreviação do dia: Seg, Ter, Qua, Qui, Sex."},
                    "theme": {"type": "string", "minLength": 8, "maxLength": 160, "description": "Tema ou foco do conteúdo."},
                    "format": {"type": "string", "minLength": 3, "maxLength": 60},
                    "callToAction": {"type": "string", "minLength": 8, "maxLength": 160},
                },
                "required": ["day", "theme", "format", "callToAction"],
            },
        },
        "rationale": {"type": "string", "description": "Explicação opcional sobre a lógica do calendário."},
    },
    "required": ["entries"],
}


def validate(payload):
    stage = payload.get('stage')
    if stage not in STAGES:
        return "Etapa inválida solicitada"
    if not payload.get('context'):
        return "Contexto da marca é obrigatório"
    if stage == 'roteiro' and 'idea' not in payload:
        return "Selecione uma ideia antes de gerar o roteiro"
    if stage == 'legenda' and ('roteiro' not in payload or 'idea' not in payload):
        return "Roteiro e ideia selecionada são obrigatórios para gerar a legenda"
    if stage == 'calendar' and any(k not in payload for k in ('legenda', 'roteiro', 'idea')):
        return "Legenda, roteiro e ideia são obrigatórios para gerar o calendário"
    return None


def _sentence(parts):
    return " ".join(p for p in parts if p)


def _mission1_block(mission1):
    resumo = (mission1 or {}).get('resumo')
    if not resumo:
        return None
    q2 = resumo.get('q2') or []
    q4 = resumo.get('q4') or []
    return _sentence([
        f"Direção estratégica (Missão 1): {resumo.get('q1')}.",
        f"Pilares estratégicos: {', '.join(q2)}." if q2 else None,
        f"Posicionamento desejado: {resumo['q3']}." if resumo.get('q3') else None,
        f"Provas/ativos principais: {', '.join(q4)}." if q4 else None,
        f"Plano imediato: {resumo['q5']}." if resumo.get('q5') else None,
    ])


def _mission2_block(mission2):
    if not mission2:
        return None
    return _sentence([
        f"Mensagem principal (Missão 2): {mission2.get('selectedPhrase')}.",
        f"Subtítulo: {mission2['subtitle']}." if mission2.get('subtitle') else None,
        f"Bio: {mission2['bio']}." if mission2.get('bio') else None,
        f"Insight da copy: {mission2['insight']}." if mission2.get('insight') else None,
    ])


def _mission3_block(mission3):
    if not mission3:
        return None
    direction = mission3.get('direction') or {}
    palette = ", ".join(f"{s.get('label')} ({s.get('hex')})" for s in mission3.get('palette') or [])
    fonts = mission3.get('typography') or {}
    typography = " | ".join(
        f"{label}: {fonts[key]['name']}"
        for key, label in (('primary', 'Primária'), ('secondary', 'Secundária'), ('accent', 'Acento'))
        if fonts.get(key)
    )
    notes = mission3.get('visualNotes') or []
    return _sentence([
        f"Identidade (Missão 3): direção \"{direction.get('name')}\"",
        f"- {direction['summary']}" if direction.get('summary') else None,
        f"Paleta: {palette}." if palette else None,
        f"Tipografia: {typography}." if typography else None,
        f"Notas: {' | '.join(notes)}." if notes else None,
        f"Tom visual/verbal: {mission3['toneReminder']}." if mission3.get('toneReminder') else None,
    ])


def build_context_block(context):
    fragments = []
    if context.get('brandName'):
        fragments.append(f"Nome da marca: {context['brandName']}.")
    for block in (
        _mission1_block(context.get('mission1')),
        _mission2_block(context.get('mission2')),
        _mission3_block(context.get('mission3')),
    ):
        if block:
            fragments.append(block)
    if context.get('identitySummary'):
        fragments.append(f"Resumo adicional: {context['identitySummary']}.")

    body = " ".join(fragments) or "Sem dados adicionais. Use apenas o que foi informado."
    return f"Contexto da marca: {body}"


def _lines(lines):
    return "\n".join(line for line in lines if line)


def build_ideas_prompt(context):
    return _lines([
        "Com base no contexto abaixo, gere exatamente 5 ideias de post alinhadas à estratégia, mensagem e identidade.",
        "Cada ideia deve ter: título forte, formato (Carrossel, Reel, Stories, Live, Newsletter...), legenda curta (1 frase com até 140 caracteres) e um ângulo/insight opcional.",
        "A voz é confiante e criativa. Nenhuma pergunta sobre tom deve ser feita, apenas execute.",
        "Use identificadores incrementais: idea-1 até idea-5.",
        build_context_block(context),
    ])


def build_roteiro_prompt(context, idea):
    return _lines([
        "Gere um roteiro de 4 partes para a ideia selecionada.",
        "Estrutura obrigatória: Gancho (1 linha), Desenvolvimento (2 a 3 linhas, formato array), Insight (1 linha forte), Chamada para ação (1 frase que convida com leveza).",
        "Escreva em primeira pessoa, mantendo o tom confiante e criativo.",
        f"Ideia escolhida: {idea.get('title')} ({idea.get('format')}). Legenda curta original: {idea.get('caption')}.",
        f"Ângulo sugerido: {idea['angle']}." if idea.get('angle') else None,
        build_context_block(context),
    ])


def build_legenda_prompt(context, idea, roteiro):
    return _lines([
        "Escreva uma legenda final entre 150 e 250 caracteres.",
        "Use tom confiante, humano e direto, fechando com CTA leve.",
        "Seja fluido, sem hashtags nem listas. Inclua apenas o texto final.",
        f"Gancho: {roteiro.get('gancho')}",
        f"Desenvolvimento: {' | '.join(roteiro.get('desenvolvimento') or [])}",
        f"Insight: {roteiro.get('insight')}",
        f"Chamada: {roteiro.get('callToAction')}",
        f"Formato: {idea.get('format')}. Legenda curta inicial: {idea.get('caption')}.",
        build_context_block(context),
    ])


def build_calendar_prompt(context, idea, roteiro, legenda):
    return _lines([
        "Monte um calendário de 5 dias (Seg a Sex).",
        "Para cada dia, traga tema, formato e CTA específico. Conecte com a ideia escolhida e mantenha variedade de formatos.",
        "Garanta que o CTA mantenha o tom confiante e convide para ação leve.",
        f"Ideia base: {idea.get('title')} ({idea.get('format')}).",
        f"Resumo do roteiro: Gancho \"{roteiro.get('gancho')}\", Insight \"{roteiro.get('insight')}\".",
        f"Legenda final (para referência de tom): {legenda.get('text')}",
        build_context_block(context),
    ])


def generate(payload):
    stage = payload['stage']
    context = payload['context']

    if stage == 'ideas':
        prompt, name, schema = build_ideas_prompt(context), 'Mission4Ideas', IDEAS_SCHEMA
    elif stage == 'roteiro':
        prompt, name, schema = build_roteiro_prompt(context, payload['idea']), 'Mission4Roteiro', ROTEIRO_SCHEMA
    elif stage == 'legenda':
        prompt = build_legenda_prompt(context, payload['idea'], payload['roteiro'])
        name, schema = 'Mission4Legenda', LEGENDA_SCHEMA
    else:
        prompt = build_calendar_prompt(context, payload['idea'], payload['roteiro'], payload['legenda'])
        name, schema = 'Mission4Calendar', CALENDAR_SCHEMA

    return openai_service.generate_structured(SYSTEM_PROMPT, prompt, name, schema)
