from flask import Blueprint, request, jsonify, current_app, abort
from brandplot.services.missions import MISSIONS, LOG_TAGS
from brandplot.utils import error_response

missions_bp = Blueprint('missions', __name__, url_prefix='/api')


@missions_bp.route('/missao<int:mission>/generate', methods=['POST'])
def generate(mission):
    """
    Stage-based content generation for missions 2 to 5.
    Expects: stage + the stage payload. Returns {success, stage, data}.
    """
    module = MISSIONS.get(mission)
    if module is None:
        abort(404)

    if not current_app.config.get('OPENAI_API_KEY'):
        return error_response("OpenAI API key nao configurada", 500)

    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return error_response("Payload inválido", 400)

    error = module.validate(payload)
    if error:
        return error_response(error, 400)

    stage = payload['stage']
    try:
        data = module.generate(payload)
    except Exception as e:
        current_app.logger.exception(f"{LOG_TAGS[mission]}: {e}")
        return error_response(str(e) or "Erro desconhecido", 500)

    return jsonify({'success': True, 'stage': stage, 'data': data})
