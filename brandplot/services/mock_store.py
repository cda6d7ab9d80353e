"""
In-process stand-in for the `brandplot` table.

Used when no Supabase credentials are configured (or DASHBOARD_MOCK=true).
The mapping lives for the life of the process and is not thread-safe; it is a
development fallback only.
"""
import copy
import json

DEMO_ID_UNICO = 'demo-brandplot'

FALLBACK_STRATEGY = {
    "marcaDesejada": {
        "percepcaoDesejada": "Ser reconhecida como a marca que simplifica escolhas e entrega clareza.",
        "direcaoComunicacao": "Mensagens objetivas, com linguagem humana e visual minimalista.",
        "proximoPassoSugerido": "Transformar a Missao 1 em um plano trimestral com metas claras.",
    },
    "reposicionamentoCriativo": {
        "ideiasPraticas": [
            "Lancar uma serie de conteudos 'Menos e Mais' mostrando antes e depois de clientes.",
            "Criar um e-book enxuto com os pilares da filosofia Menos Mais.",
            "Convidar clientes para lives quinzenais compartilhando resultados reais.",
        ],
        "novasFormasDeComunicar": {
            "voz": "Mentora direta que aponta caminhos com carinho e firmeza.",
            "estilo": "Visual limpo com toques de cor vibrante para destacar chamadas importantes.",
            "canais": ["Instagram Reels", "Newsletter quinzenal", "Workshops ao vivo"],
        },
        "briefingVisual": {
            "paleta": "Roxo profundo, azul claro e off-white para contraste suave.",
            "simbolos": "Linhas diagonais que representam movimento e focos de luz.",
            "estilo": "Layouts com muito respiro, tipografia sem serifa e icones finos.",
        },
    },
    "conexaoComNovosClientes": {
        "acoesParaAtrair": [
            "Sequencia de emails com historias reais de transformacao.",
            "Checklist gratuito sobre como diagnosticar a marca em 15 minutos.",
            "Campanha de indicacao com bonus de sessao 1:1 com o mentor.",
        ],
        "rituaisEComunidade": "Reunioes mensais 'Clube da Marca Clara' para celebrar avanços.",
    },
    "planoDeAcaoEstrategico": {
        "pilaresConteudo": [
            "Educacao: descomplicar conceitos de branding.",
            "Prova: bastidores e antes/depois de clientes.",
            "Oferta: convites diretos para as missoes pagas.",
        ],
        "campanhas": [
            "Campanha de reabertura da Missao 1 com vagas limitadas.",
            "Serie 'Pergunte ao Mentor' focada em duvidas enviadas pelo publico.",
        ],
        "acoesInternas": [
            "Mapear depoimentos recentes e atualizar o site em ate 30 dias.",
            "Criar um painel simples com os KPI das missoes no Notion.",
        ],
        "acoesExternas": [
            "Parceria com duas influenciadoras de negocios minimalistas.",
            "Pitch semanal em comunidades de empreendedoras criativas.",
        ],
    },
    "calendarioEditorial": [
        {
            "semana": "Semana 1",
            "ideiasDeConteudo": [
                "Post carrossel: 3 sinais de que sua marca esta confusa.",
                "Reel: bastidores do metodo Menos Mais em 30 segundos.",
                "Live curta apresentando a Sala da Marca.",
            ],
        },
        {
            "semana": "Semana 2",
            "ideiasDeConteudo": [
                "Email: historia de cliente com antes e depois.",
                "Post lista: checklist rapido de clareza de marca.",
                "Story com enquete para mapear dores do publico.",
            ],
        },
    ],
    "novaBioInstagram": "Somos o Mentor Menos Mais. Estrategia clara, comunicacao simples e resultados reais.",
}

FALLBACK_RECORD = {
    "idUnico": DEMO_ID_UNICO,
    "nome_empresa": "Marca Demo",
    "scoreDiagnostico": "68",
    "missaoLiberada": "missao_1",
    "missoesConcluidas": ["missao_1"],
    "xpAtual": 140,
    "xpProximoNivel": 200,
    "nivelAtual": "Aprendiz",
    "comparativoPercentual": 68,
    "diagnosticoAnterior": json.dumps([
        {"dimension": "Clareza", "value": 48},
        {"dimension": "Consistencia", "value": 36},
        {"dimension": "Visual", "value": 28},
        {"dimension": "Execucao", "value": 32},
        {"dimension": "Estrategia", "value": 44},
    ]),
    "onboardingMetadata": json.dumps({
        "missaoAtual": "missao_1",
        "xpAtual": 140,
        "xpProximoNivel": 200,
        "nivelAtual": "Aprendiz",
        "comparativoPercentual": 68,
        "missoesConcluidas": ["missao_1"],
    }),
    "estrategia": json.dumps(FALLBACK_STRATEGY, ensure_ascii=False),
}


def mock_key(id_unico):
    """Blank or missing ids resolve to the demo record."""
    if isinstance(id_unico, str) and id_unico.strip():
        return id_unico.strip()
    return DEMO_ID_UNICO


class MockBrandStore:
    """Same interface as SupabaseBrandStore, backed by a dict."""

    def __init__(self, records=None, seed=True):
        self.records = {}
        self.seed = seed
        for record in records or []:
            self.records[record['idUnico']] = dict(record)

    def _seeded(self, id_unico):
        record = copy.deepcopy(FALLBACK_RECORD)
        record['idUnico'] = id_unico
        if id_unico != DEMO_ID_UNICO:
            record['nome_empresa'] = f"Marca {id_unico}"
        return record

    def get(self, id_unico, columns='*'):
        existing = self.records.get(id_unico)
        if existing is not None:
            if self.seed:
                merged = {**copy.deepcopy(FALLBACK_RECORD), **existing, 'idUnico': id_unico}
            else:
                merged = dict(existing)
            self.records[id_unico] = merged
            return dict(merged)

        if not self.seed:
            return None

        seeded = self._seeded(id_unico)
        self.records[id_unico] = seeded
        return dict(seeded)

    def find_by_email(self, email, columns='*'):
        return [dict(r) for r in self.records.values() if r.get('email') == email]

    def update(self, id_unico, updates):
        existing = self.get(id_unico)
        if existing is None:
            return []
        merged = {**existing, **updates}
        self.records[id_unico] = merged
        return [dict(merged)]

    def insert(self, record):
        stored = dict(record)
        self.records[stored['idUnico']] = stored
        return [dict(stored)]
