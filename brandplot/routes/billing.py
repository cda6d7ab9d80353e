from flask import Blueprint, request, jsonify, current_app
import json
from brandplot.services.mercadopago_service import (
    MercadoPagoService, MercadoPagoError, SIGNATURE_HEADERS, validate_signature
)
from brandplot.services.unlock_service import reconcile_payment
from brandplot.utils import error_response, parse_json_blob, serialize_json_blob, utc_now_iso

billing_bp = Blueprint('billing', __name__, url_prefix='/api/mercadopago')

PRODUCT_CATALOG = {
    'missao_1': {
        'title': "Missão 1 - Estratégia da Marca",
        'description': "Desbloqueio individual da Missão 1",
        'unit_price': 97,
        'unlocks': 'missao_1',
    },
    'missao_3': {
        'title': "Missão 3 - Identidade Visual",
        'description': "Desbloqueio da Missão 3 com o Designer IA",
        'unit_price': 197,
        'unlocks': 'missao_3',
    },
    'jornada_completa': {
        'title': "Jornada Completa (Missões 1 a 5)",
        'description': "Pacote completo das cinco missões da Menos Mais",
        'unit_price': 297,
        'unlocks': 'todas',
    },
}

SANDBOX_SIMULATION_ID = '123456'


def resolve_origin():
    explicit = current_app.config.get('APP_URL')
    if explicit:
        return explicit if explicit.startswith('http') else f"https://{explicit}"
    return request.host_url.rstrip('/')


def get_gateway():
    return MercadoPagoService(current_app.config.get('MP_ACCESS_TOKEN'), current_app.config.get('MP_API_URL'))


def build_preference(origin, id_unico, product_code, product, return_path):
    return_path = return_path or '/dashboard'
    reference = {'idUnico': id_unico, 'product': product_code, 'unlocks': product['unlocks']}
    return {
        'items': [{
            'title': product['title'],
            'description': product['description'],
            'unit_price': product['unit_price'],
            'quantity': 1,
            'currency_id': 'BRL',
        }],
        'external_reference': json.dumps(reference, ensure_ascii=False),
        'notification_url': f"{origin}/api/mercadopago/webhook",
        'back_urls': {
            'success': f"{origin}{return_path}",
            'pending': f"{origin}{return_path}",
            'failure': f"{origin}/checkout/error",
        },
        'auto_return': 'approved',
        'metadata': reference,
    }


def persist_pending_checkout(id_unico, plan_id, product_code, unlocks, preference_id):
    """Best effort: a failure here never fails the checkout."""
    store = current_app.brand_store
    try:
        record = store.get(id_unico) or {}
        metadata = parse_json_blob(record.get('onboardingMetadata'))
        metadata['pendingUnlock'] = unlocks
        metadata['lastCheckout'] = {
            'product': product_code,
            'unlocks': unlocks,
            'preferenceId': preference_id,
            'createdAt': utc_now_iso(),
            'status': 'pending',
        }

        updates = {'onboardingMetadata': serialize_json_blob(metadata)}
        if plan_id:
            updates['planoSelecionado'] = plan_id
        store.update(id_unico, updates)
    except Exception as e:
        current_app.logger.warning(f"MercadoPago checkout: não foi possível persistir estado pendente: {e}")


@billing_bp.route('/checkout', methods=['POST'])
def checkout():
    """
    Creates a Checkout Pro preference.
    Expects: idUnico, product (missao_1 | missao_3 | jornada_completa), planId?, returnPath?
    """
    body = request.get_json(silent=True) or {}
    id_unico = (body.get('idUnico') or '').strip() if isinstance(body.get('idUnico'), str) else ''
    product_code = body.get('product')

    if not id_unico:
        return error_response("idUnico é obrigatório", 400)

    if not isinstance(product_code, str) or product_code not in PRODUCT_CATALOG:
        return error_response("Produto inválido para checkout", 400)

    if not current_app.config.get('MP_ACCESS_TOKEN'):
        current_app.logger.error("MercadoPago checkout: MP_ACCESS_TOKEN não configurado")
        return error_response("Configuração do Mercado Pago ausente", 500)

    product = PRODUCT_CATALOG[product_code]
    origin = resolve_origin()

    try:
        preference = get_gateway().create_preference(
            build_preference(origin, id_unico, product_code, product, body.get('returnPath'))
        )
    except Exception as e:
        current_app.logger.error(f"MercadoPago checkout: erro ao criar preferência: {e}")
        return error_response("Não foi possível iniciar o checkout", 500)

    current_app.logger.info(
        f"MercadoPago checkout preference: id={preference.get('id')} init_point={preference.get('init_point')}"
    )

    persist_pending_checkout(id_unico, body.get('planId'), product_code, product['unlocks'], preference.get('id'))

    return jsonify({
        'init_point': preference.get('init_point') or preference.get('sandbox_init_point'),
        'sandbox_init_point': preference.get('sandbox_init_point'),
        'preference_id': preference.get('id'),
    }), 201


def is_sandbox_simulation(body):
    data = body.get('data') if isinstance(body.get('data'), dict) else {}
    return (
        str(data.get('id')) == SANDBOX_SIMULATION_ID
        and body.get('live_mode') is False
        and body.get('action') == 'payment.updated'
    )


def parse_external_reference(raw):
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except ValueError:
            return {}
        return parsed if isinstance(parsed, dict) else {}
    return {}


@billing_bp.route('/webhook', methods=['GET'])
def webhook_ping():
    return jsonify({'success': True})


@billing_bp.route('/webhook', methods=['POST'])
def webhook():
    """
    Receives payment notifications from Mercado Pago and reconciles the
    unlocked mission of the paying brand.
    """
    raw_body = request.get_data(as_text=True)

    try:
        body = json.loads(raw_body)
    except ValueError as e:
        current_app.logger.error(f"MercadoPago webhook: corpo inválido recebido: {e}")
        return error_response("Corpo inválido", 400)

    if not isinstance(body, dict):
        return error_response("Corpo inválido", 400)

    data = body.get('data') if isinstance(body.get('data'), dict) else {}
    payment_id = data.get('id')

    # 1. Security Check
    signature = next((request.headers.get(h) for h in SIGNATURE_HEADERS if request.headers.get(h)), None)
    is_valid = validate_signature(
        current_app.config.get('MP_WEBHOOK_SECRET'),
        raw_body,
        signature,
        data_id=request.args.get('data.id') or payment_id,
        request_id=request.headers.get('x-request-id'),
    )
    if not is_valid:
        current_app.logger.warning(f"MercadoPago webhook: assinatura inválida header={signature}")
        if is_sandbox_simulation(body):
            current_app.logger.warning("MercadoPago webhook: aceitando simulação sem assinatura válida.")
            return jsonify({'ignored': True})
        return error_response("Assinatura inválida", 401)

    if not payment_id:
        return jsonify({'ignored': True})

    if not current_app.config.get('MP_ACCESS_TOKEN'):
        current_app.logger.error("MercadoPago webhook: MP_ACCESS_TOKEN não configurado")
        return error_response("Configuração ausente", 500)

    # 2. Fetch payment and reconcile
    try:
        payment = get_gateway().get_payment(payment_id)
        if not payment:
            return error_response("Pagamento não encontrado", 404)

        reference = parse_external_reference(payment.get('external_reference'))
        id_unico = reference.get('idUnico')
        unlocks = reference.get('unlocks')

        if not id_unico or not unlocks:
            current_app.logger.warning(
                f"MercadoPago webhook: referência externa inválida {payment.get('external_reference')}"
            )
            return error_response("Referência externa ausente", 400)

        reconcile_payment(
            current_app.brand_store,
            id_unico,
            unlocks,
            payment.get('id', payment_id),
            payment.get('status') or 'unknown',
        )
        return jsonify({'success': True})

    except MercadoPagoError as e:
        if e.is_not_found:
            current_app.logger.warning(f"MercadoPago webhook: pagamento informado não encontrado, ignorando. {e}")
            return jsonify({'ignored': True})
        current_app.logger.error(f"MercadoPago webhook: erro ao processar pagamento: {e}")
        return error_response("Erro ao processar pagamento", 500)
    except Exception as e:
        current_app.logger.exception(f"MercadoPago webhook: erro ao processar pagamento: {e}")
        return error_response("Erro ao processar pagamento", 500)
