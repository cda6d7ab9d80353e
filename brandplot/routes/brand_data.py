from flask import Blueprint, request, jsonify, current_app
from brandplot.services.mock_store import mock_key
from brandplot.utils import error_response, serialize_json_blob

brand_data_bp = Blueprint('brand_data', __name__, url_prefix='/api')

# Fields the dashboard may PATCH
UPDATABLE_FIELDS = (
    'estrategia',
    'enviadoDesigner',
    'planoSelecionado',
    'missaoLiberada',
    'onboardingMetadata',
    'xpAtual',
    'xpProximoNivel',
    'nivelAtual',
    'comparativoPercentual',
    'scoreDiagnostico',
    'diagnosticoAnterior',
    'missoesConcluidas',
)

# Stored as serialized JSON strings
JSON_BLOB_FIELDS = ('estrategia', 'onboardingMetadata', 'diagnosticoAnterior')


def build_updates(body):
    updates = {}
    for field in UPDATABLE_FIELDS:
        if field not in body:
            continue
        value = body[field]
        if field in JSON_BLOB_FIELDS and value is not None:
            value = serialize_json_blob(value)
        updates[field] = value
    return updates


@brand_data_bp.route('/brand-data', methods=['GET'])
def get_brand_data():
    id_param = request.args.get('idUnico')
    enable_mock = current_app.config['ENABLE_MOCK']

    if not id_param and not enable_mock:
        return error_response("idUnico e obrigatorio", 400)

    id_unico = mock_key(id_param)

    try:
        data = current_app.brand_store.get(id_unico)
    except Exception as e:
        current_app.logger.error(f"Erro ao buscar dados da marca: {e}")
        return error_response("Erro ao buscar dados da marca", 500)

    if not data:
        return error_response("Marca nao encontrada", 404)

    return jsonify({'success': True, 'data': data})


@brand_data_bp.route('/brand-data', methods=['PATCH'])
def patch_brand_data():
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return error_response("Corpo inválido", 400)

    id_unico = mock_key(body.get('idUnico'))
    updates = build_updates(body)

    if not updates:
        return error_response("Nada para atualizar", 400)

    try:
        current_app.brand_store.update(id_unico, updates)
    except Exception as e:
        current_app.logger.error(f"Erro ao atualizar dados: {e}")
        return error_response("Erro ao atualizar dados", 500)

    return jsonify({'success': True})
