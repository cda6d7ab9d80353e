"""Missao 5 - Analista IA: results report, insights, adjustment plan and maturity score."""
from brandplot.services import openai_service

STAGES = ('report', 'insights', 'plan', 'maturity')

SYSTEM_PROMPT = " ".join([
    "Voce e o Analista IA da Menos Mais.",
    "Sua missao e interpretar os dados estrategicos das missoes e gerar analises acionaveis.",
    "Fale em portugues brasileiro, com tom analitico, humano e direto.",
    "Prefira frases curtas, clareza total e percentuais formatados (ex: +42 %).",
])

REPORT_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "reachDelta": {
            "type": "string",
            "description": "Variacao estimada de alcance, exemplo +42 %",
            "pattern": "^[+-]?\\d{1,3}\\s?%$",
        },
        "engagementDelta": {
            "type": "string",
            "description": "Variacao estimada de engajamento, exemplo +31 %",
            "pattern": "^[+-]?\\d{1,3}\\s?%$",
        },
        "clarityScore": {
            "type": "string",
            "description": "Pontuacao de clareza percebida, exemplo 92 %",
            "pattern": "^\\d{1,3}\\s?%$",
        },
        "consistencyLevel": {
            "type": "string",
            "description": "Nivel qualitativo (Alta, Media, Em construcao)",
            "minLength": 3,
            "maxLength": 40,
        },
        "frequency": {
            "type": "string",
            "description": "Resumo da frequencia de presenca (ex: 5 dias / semana)",
            "minLength": 3,
            "maxLength": 60,
        },
        "commentary": {"type": "string", "description": "Comentario curto sobre o panorama atual"},
    },
    "required": ["reachDelta", "engagementDelta", "clarityScore", "consistencyLevel", "frequency", "commentary"],
}

INSIGHTS_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "insights": {
            "type": "array",
            "minItems": 3,
            "maxItems": 3,
            "items": {
                "type": "object",
                "additionalProperties": False,
                "properties": {
                    "id": {"type": "string", "description": "Identificador incremental como insight-1"},
                    "title": {"type": "string", "description": "Resumo do insight", "minLength": 6, "maxLength": 120},
                    "detail": {
                        "type": "string",
                        "description": "Explicacao pratica com dado ou contexto",
                        "minLength": 20,
                        "maxLength": 200,
                    },
                    "rationale": {"type": "string", "description": "Opcional: justificativa ou dado usado"},
                },
                "required": ["id", "title", "detail", "rationale"],
            },
        },
        "framingNote": {"type": "string", "description": "Nota curta de enquadramento dos insights"},
    },
    "required": ["insights", "framingNote"],
}

PLAN_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "heading": {"type": "string", "description": "Frase de abertura do plano"},
        "steps": {
            "type": "array",
            "minItems": 3,
            "maxItems": 3,
            "items": {
                "type": "object",
                "additionalProperties": False,
                "properties": {
                    "objective": {"type": "string", "description": "Objetivo principal", "minLength": 6, "maxLength": 120},
                    "action": {"type": "string", "description": "Acao concreta", "minLength": 12, "maxLength": 200},
                    "expectedImpact": {
                        "type": "string",
                        "description": "Impacto esperado, exemplo +20 %",
                        "minLength": 6,
                        "maxLength": 120,
                    },
                },
                "required": ["objective", "action", "expectedImpact"],
            },
        },
        "reminder": {"type": "string", "description": "Frase de reforco do plano"},
    },
    "required": ["heading", "steps", "reminder"],
}

MATURITY_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "score": {"type": "number", "minimum": 0, "maximum": 100},
        "stage": {"type": "string", "minLength": 4, "maxLength": 80, "description": "Nome do estagio da marca"},
        "narrative": {"type": "string", "description": "Narrativa curta sobre proximos passos"},
    },
    "required": ["score", "stage", "narrative"],
}


def validate(payload):
    stage = payload.get('stage')
    if not stage:
        return "Etapa nao informada"
    if 'context' not in payload:
        return "Contexto ausente"
    if stage not in STAGES:
        return "Etapa invalida"
    if stage == 'insights' and 'report' not in payload:
        return "Relatorio obrigatorio para gerar insights"
    if stage == 'plan' and 'insights' not in payload:
        return "Insights obrigatorios para gerar plano"
    if stage == 'maturity' and ('report' not in payload or 'plan' not in payload):
        return "Relatorio e plano obrigatorios para maturidade"
    return None


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def build_context_block(context):
    context = context or {}
    fragments = []

    if context.get('brandName'):
        fragments.append(f"Nome da marca: {context['brandName']}.")
    if context.get('creatorName'):
        fragments.append(f"Responsavel: {context['creatorName']}.")
    if context.get('mission1Summary'):
        fragments.append(f"Missao 1 - estrategia: {context['mission1Summary']}.")
    if context.get('mission2Message'):
        fragments.append(f"Missao 2 - mensagem: {context['mission2Message']}.")
    if context.get('mission3Identity'):
        fragments.append(f"Missao 3 - identidade: {context['mission3Identity']}.")

    presence = context.get('mission4Presence')
    if presence:
        parts = [
            "Missao 4 - presenca alinhada:",
            f"ideia principal \"{presence['selectedIdeaTitle']}\"." if presence.get('selectedIdeaTitle') else None,
            f"Legenda final: {presence['legenda']}." if presence.get('legenda') else None,
            f"Calendario: {presence['calendarSummary']}." if presence.get('calendarSummary') else None,
            f"Frequencia atual: {presence['presenceFrequency']}." if presence.get('presenceFrequency') else None,
        ]
        fragments.append(" ".join(p for p in parts if p))

    if _is_number(context.get('xpAtual')):
        fragments.append(f"XP atual acumulado: {context['xpAtual']}.")
    if _is_number(context.get('comparativoPercentual')):
        fragments.append(f"Clareza percebida anterior: {context['comparativoPercentual']} %.")

    context_line = " ".join(fragments) or "Sem dados adicionais. Use apenas o que foi informado."
    return f"Contexto da marca: {context_line}"


def _report_line(report):
    return (
        f"Relatorio: Alcance {report.get('reachDelta')}, Engajamento {report.get('engagementDelta')}, "
        f"Clareza {report.get('clarityScore')}, Consistencia {report.get('consistencyLevel')}, "
        f"Frequencia {report.get('frequency')}."
    )


def _lines(lines):
    return "\n".join(line for line in lines if line)


def build_report_prompt(context):
    return _lines([
        "Gere um relatorio resumido com variacoes de alcance, engajamento e clareza percebida.",
        "Inclua nivel de consistencia e frequencia de presenca.",
        "Finalize com um comentario humano e direto sobre o panorama.",
        "Use sinais positivos quando fizer sentido para evolucao.",
        build_context_block(context),
    ])


def build_insights_prompt(context, report):
    return _lines([
        "Com base no relatorio, gere exatamente 3 insights curtos e praticos.",
        "Cada insight deve indicar um ajuste concreto, um motivo quantificavel e uma justificativa resumida.",
        "Inclua uma nota final de enquadramento para situar os insights.",
        _report_line(report),
        f"Comentario adicional: {report['commentary']}." if report.get('commentary') else None,
        build_context_block(context),
    ])


def build_plan_prompt(context, insights):
    summary = " | ".join(f"{item.get('title')} -> {item.get('detail')}" for item in insights or [])
    return _lines([
        "Use os insights abaixo para montar um plano de ajuste com 3 objetivos.",
        "Comece o plano com um heading curto que resuma o foco geral.",
        "Cada objetivo deve ter acao concreta e impacto esperado em percentual.",
        "Finalize com um lembrete ou reforco motivador.",
        f"Insights: {summary}",
        build_context_block(context),
    ])


def build_maturity_prompt(context, report, plan):
    steps = " | ".join(
        f"{step.get('objective')}: {step.get('action')} (Impacto {step.get('expectedImpact')})"
        for step in plan.get('steps') or []
    )
    return _lines([
        "Com base no contexto, no relatorio e no plano, calcule uma nota de maturidade (0 a 100).",
        "Informe tambem um estagio nominal para a marca e uma narrativa curta sobre proximos passos.",
        _report_line(report),
        f"Plano: {steps}",
        build_context_block(context),
    ])


def generate(payload):
    stage = payload['stage']
    context = payload.get('context')

    if stage == 'report':
        prompt, name, schema = build_report_prompt(context), 'Mission5Report', REPORT_SCHEMA
    elif stage == 'insights':
        prompt, name, schema = build_insights_prompt(context, payload['report']), 'Mission5Insights', INSIGHTS_SCHEMA
    elif stage == 'plan':
        prompt, name, schema = build_plan_prompt(context, payload['insights']), 'Mission5Plan', PLAN_SCHEMA
    else:
        prompt = build_maturity_prompt(context, payload['report'], payload['plan'])
        name, schema = 'Mission5Maturity', MATURITY_SCHEMA

    return openai_service.generate_structured(SYSTEM_PROMPT, prompt, name, schema)
