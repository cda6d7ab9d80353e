"""Missao 3 - Designer IA: visual directions, a mockup image and the visual guide."""
from brandplot.services import openai_service

STAGES = ('directions', 'image', 'guide')

ENERGY_LABELS = {
    'profissionalismo': "Profissionalismo e confiança",
    'professionalismo': "Profissionalismo e confiança",
    'inspiracao': "Inspiração e propósito",
    'criatividade': "Criatividade e ousadia",
    'calma': "Calma e autenticidade",
    'energia': "Energia e movimento",
}

SYSTEM_PROMPT = " ".join([
    "Você é o Designer IA da Menos Mais.",
    "Seu papel é traduzir a mensagem da marca em direção visual, mantendo o tom calmo, confiante e inspirador.",
    "Pense como um diretor de arte que explica suas decisões de forma simples e acessível.",
])

SWATCH_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "hex": {"type": "string", "pattern": "^#([A-Fa-f0-9]{6})$", "description": "Código hexadecimal da cor."},
        "label": {"type": "string", "description": "Nome amigável da cor."},
        "usage": {"type": "string", "description": "Como essa cor entra no sistema visual."},
    },
    "required": ["hex", "label", "usage"],
}

DIRECTIONS_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "directions": {
            "type": "array",
            "minItems": 2,
            "maxItems": 2,
            "items": {
                "type": "object",
                "additionalProperties": False,
                "properties": {
                    "id": {"type": "string", "description": "Identificador em kebab-case para uso interno."},
                    "name": {"type": "string", "description": "Nome curto e memorável da direção visual."},
                    "summary": {"type": "string", "description": "Resumo em uma frase descrevendo o ambiente geral."},
                    "palette": {"type": "array", "minItems": 3, "maxItems": 5, "items": SWATCH_SCHEMA},
                    "texture": {"type": "string", "description": "Texturas e materiais predominantes."},
                    "lighting": {"type": "string", "description": "Sensação de luz, contraste e atmosfera."},
                    "typography": {"type": "string", "description": "Estilo tipográfico recomendado."},
                    "shapes": {"type": "string", "description": "Formas predominantes quando relevante."},
                    "keywords": {"type": "array", "minItems": 3, "maxItems": 5, "items": {"type": "string"}},
                },
                "required": ["id", "name", "summary", "palette", "texture", "lighting", "typography", "shapes", "keywords"],
            },
        },
        "creativeNote": {"type": "string", "description": "Nota inspiradora resumindo o raciocínio."},
    },
    "required": ["directions", "creativeNote"],
}


def _font_schema(nullable=False):
    return {
        "type": ["object", "null"] if nullable else "object",
        "additionalProperties": False,
        "properties": {
            "name": {"type": "string"},
            "style": {"type": "string"},
            "usage": {"type": "string"},
        },
        "required": ["name", "style", "usage"],
    }


GUIDE_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "palette": {"type": "array", "minItems": 3, "maxItems": 5, "items": SWATCH_SCHEMA},
        "typography": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "primary": _font_schema(),
                "secondary": _font_schema(nullable=True),
                "accent": _font_schema(nullable=True),
            },
            "required": ["primary", "secondary", "accent"],
        },
        "visualNotes": {"type": "array", "minItems": 2, "maxItems": 4, "items": {"type": "string"}},
        "signatureIdea": {"type": "string", "description": "Sugestão para assinatura visual ou logotipo simplificado."},
        "socialPreviewIdea": {"type": "string", "description": "Descrição curta de um post ou mockup gerado."},
        "toneReminder": {"type": "string", "description": "Frase que amarra tom, energia e mensagem."},
    },
    "required": ["palette", "typography", "visualNotes", "signatureIdea", "socialPreviewIdea", "toneReminder"],
}

LAYOUT_LINES = {
    'curves': "Use curvas suaves, composição fluida e sobreposições orgânicas.",
    'lines': "Use linhas retas, grid geométrico e cortes precisos.",
}
DEFAULT_LAYOUT_LINE = "Misture curvas delicadas e linhas sutis, mantendo equilíbrio minimalista."

LAYOUT_DESCRIPTIONS = {
    'curves': "curvas suaves",
    'lines': "linhas retas",
}
DEFAULT_LAYOUT_DESCRIPTION = "combinação de curvas sutis e linhas leves"


def validate(payload):
    stage = payload.get('stage')
    if stage == 'directions':
        if not payload.get('energy') or not payload.get('mission2'):
            return "Energia e contexto da Missão 2 são obrigatórios"
    elif stage == 'image':
        if not all(payload.get(k) for k in ('direction', 'mission2', 'energy', 'layout')):
            return "Direção, energia, layout e contexto são obrigatórios"
    elif stage == 'guide':
        if not all(payload.get(k) for k in ('direction', 'mission2', 'energy', 'layout', 'palette')):
            return "Dados completos da direção e paleta são obrigatórios"
    else:
        return "Etapa solicitada não suportada"
    return None


def energy_label(energy):
    return ENERGY_LABELS.get(energy, energy)


def build_mission_context(snapshot):
    parts = []
    if snapshot.get('selectedPhrase'):
        parts.append(f"Mensagem principal definida pelo Copywriter: \"{snapshot['selectedPhrase']}\".")
    if snapshot.get('subtitle'):
        parts.append(f"Subtítulo de apoio: \"{snapshot['subtitle']}\".")
    if snapshot.get('bio'):
        parts.append(f"Bio sugerida: \"{snapshot['bio']}\".")
    if snapshot.get('insight'):
        parts.append(f"Insight estratégico: {snapshot['insight']}.")
    if snapshot.get('tone'):
        parts.append(f"Tom desejado: {snapshot['tone']}.")
    return " ".join(parts)


def build_directions_prompt(payload):
    lines = [
        f"O cliente escolheu a energia \"{energy_label(payload['energy'])}\".",
        build_mission_context(payload['mission2']),
        "Crie duas direções visuais complementares que traduzam essa energia de forma distinta.",
        "Cada direção precisa ter nome curto (2 a 3 palavras), resumo em uma frase, paleta com 3 a 5 cores em hexadecimal, textura, sensação de luz, estilo tipográfico sugerido e palavras-chave.",
        "Use o formato JSON especificado. Evite repetir as mesmas cores nas duas propostas.",
    ]
    return " ".join(line for line in lines if line)


def build_image_prompt(payload):
    direction = payload['direction']
    mission2 = payload['mission2']
    palette = ", ".join(f"{s.get('hex')} ({s.get('usage')})" for s in direction.get('palette') or [])

    lines = [
        f"Design a square 1024x1024 brand identity mockup for a digital card showcasing the direction \"{direction.get('name')}\".",
        f"The brand message is \"{mission2.get('selectedPhrase')}\".",
        f"Include a subtle subtitle: \"{mission2['subtitle']}\"." if mission2.get('subtitle') else None,
        f"Reflect the energy \"{energy_label(payload['energy'])}\".",
        f"Color palette: {palette}.",
        f"Surface textures: {direction.get('texture')}.",
        f"Lighting mood: {direction.get('lighting')}.",
        f"Typography vibe: {direction.get('typography')}.",
        LAYOUT_LINES.get(payload['layout'], DEFAULT_LAYOUT_LINE),
        "Include a minimal logomark or monogram placeholder inspired by the description.",
        "Keep text limited to headline and short supporting line, clean layout, no extra paragraphs.",
        "Style: high-end brand design, 3D lighting with soft gradients, vector-inspired composition.",
        "Render an alternative angle or variation within the same direction." if payload.get('variant') == 'alternative' else None,
    ]
    return " ".join(line for line in lines if line)


def build_guide_prompt(payload):
    palette = " | ".join(f"{s.get('hex')}: {s.get('usage')}" for s in payload['palette'])
    lines = [
        f"Resumo da direção escolhida: {payload['direction'].get('summary')}.",
        f"Paleta base aprovada: {palette}.",
        f"Energia desejada: {energy_label(payload['energy'])}.",
        f"Preferência estrutural: {LAYOUT_DESCRIPTIONS.get(payload['layout'], DEFAULT_LAYOUT_DESCRIPTION)}.",
        build_mission_context(payload['mission2']),
        "Monte um kit visual objetivo: paleta com descrições, tipografias com função, três notas de uso visual, uma sugestão de assinatura visual (logo ou assinatura) e como aplicar em um post/preview.",
        "Feche com lembrete de tom alinhado à mensagem principal.",
        "Responda apenas no JSON indicado.",
    ]
    return " ".join(line for line in lines if line)


def generate_image(payload):
    prompt = build_image_prompt(payload)
    image_url = openai_service.generate_image(prompt)
    return {
        'imageUrl': image_url,
        'prompt': prompt,
        'altText': f"Mockup {payload['direction'].get('name')} com energia {energy_label(payload['energy'])}",
    }


def generate_guide(payload):
    parsed = openai_service.generate_structured(
        SYSTEM_PROMPT, build_guide_prompt(payload), 'Mission3Guide', GUIDE_SCHEMA
    )
    typography = {k: v for k, v in (parsed.get('typography') or {}).items() if v is not None}
    return {**parsed, 'typography': typography}


def generate(payload):
    stage = payload['stage']
    if stage == 'directions':
        return openai_service.generate_structured(
            SYSTEM_PROMPT, build_directions_prompt(payload), 'Mission3Directions', DIRECTIONS_SCHEMA
        )
    if stage == 'image':
        return generate_image(payload)
    return generate_guide(payload)
