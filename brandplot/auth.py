from flask import Blueprint, request, jsonify, current_app
from werkzeug.security import generate_password_hash, check_password_hash
from functools import wraps
import bcrypt
import datetime
import json
import jwt
import re
import time
import unicodedata
from brandplot.utils import error_response

auth = Blueprint('auth', __name__, url_prefix='/api')

LOGIN_COLUMNS = 'id, nome_cliente, email, senha, nome_empresa, idUnico, missaoLiberada'
TOKEN_TTL_DAYS = 7
LEGACY_BCRYPT_PREFIXES = ('$2a$', '$2b$', '$2y$')

PAYMENT_PENDING_MESSAGE = (
    "Seu pagamento ainda está em processamento. "
    "Assim que o Mercado Pago confirmar, enviaremos o acesso por e-mail."
)

MOCK_USER = {
    'id': 'mock-user',
    'name': 'Mentorado Demo',
    'company': 'Marca Demo',
    'idUnico': 'demo-brandplot',
    'missaoLiberada': 'missao_3',
}


def generate_id_unico(company_name):
    """'Café Açúcar Ltda.' -> 'cafeacucarltda-brandplot'"""
    clean = unicodedata.normalize('NFD', (company_name or '').lower())
    clean = ''.join(c for c in clean if not unicodedata.combining(c))
    clean = re.sub(r'[^a-z0-9]', '', clean)
    if not clean:
        return f"empresa-{int(time.time() * 1000)}-brandplot"
    return f"{clean}-brandplot"


def verify_password(stored_hash, password):
    # Hashes written by the previous Next.js front end are bcrypt
    if stored_hash.startswith(LEGACY_BCRYPT_PREFIXES):
        try:
            return bcrypt.checkpw(password.encode('utf-8'), stored_hash.encode('utf-8'))
        except ValueError:
            return False
    return check_password_hash(stored_hash, password)


def issue_token(user):
    return jwt.encode({
        'idUnico': user.get('idUnico'),
        'email': user.get('email'),
        'exp': datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(days=TOKEN_TTL_DAYS),
    }, current_app.config['SECRET_KEY'], algorithm="HS256")


def token_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        token = None
        auth_header = request.headers.get('Authorization', '')
        if auth_header.startswith('Bearer '):
            token = auth_header.split(" ", 1)[1]

        if not token:
            return error_response("Token ausente", 401)

        try:
            claims = jwt.decode(token, current_app.config['SECRET_KEY'], algorithms=["HS256"])
        except jwt.InvalidTokenError as e:
            current_app.logger.info(f"Token inválido: {e}")
            return error_response("Token inválido", 401)

        return f(claims, *args, **kwargs)

    return decorated


@auth.route('/login', methods=['POST'])
def login():
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        body = {}
    email = body.get('email')
    password = body.get('password')

    if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
        return error_response("Email e senha são obrigatórios", 400)

    if current_app.config['ENABLE_MOCK']:
        user = {**MOCK_USER, 'email': email}
        return jsonify({
            'success': True,
            'user': user,
            'token': issue_token(user),
            'message': "Login de protótipo efetuado",
        })

    try:
        users = current_app.brand_store.find_by_email(email.lower().strip(), columns=LOGIN_COLUMNS)
    except Exception as e:
        current_app.logger.error(f"Erro ao buscar usuário: {e}")
        return error_response("Erro interno do servidor", 500)

    if not users:
        return error_response("Email não encontrado", 401)

    record = users[0]

    if not record.get('senha'):
        return error_response("Usuário ainda não completou o cadastro", 401)

    if not verify_password(record['senha'], password):
        return error_response("Senha incorreta", 401)

    if not record.get('missaoLiberada'):
        return error_response(PAYMENT_PENDING_MESSAGE, 403)

    user = {
        'id': record.get('id'),
        'name': record.get('nome_cliente'),
        'email': record.get('email'),
        'company': record.get('nome_empresa'),
        'idUnico': record.get('idUnico'),
        'missaoLiberada': record.get('missaoLiberada'),
    }
    current_app.logger.info(f"Login realizado: {user['idUnico']}")

    return jsonify({
        'success': True,
        'user': user,
        'token': issue_token(user),
        'message': "Login realizado com sucesso",
    })


@auth.route('/session', methods=['GET'])
@token_required
def session(claims):
    return jsonify({
        'valid': True,
        'user': {
            'idUnico': claims.get('idUnico'),
            'email': claims.get('email'),
        },
    })


def build_registration(form_data, cached_data, id_unico):
    """Maps the onboarding form + cached diagnostic answers onto brandplot columns."""
    update_data = {
        'nome_cliente': form_data.get('name') or None,
        'email': form_data.get('email') or None,
        'telefone': form_data.get('phone') or None,
        'idUnico': id_unico,
    }

    if form_data.get('password'):
        update_data['senha'] = generate_password_hash(form_data['password'])

    answers = cached_data.get('answers')
    if not isinstance(answers, list):
        answers = None

    if (not update_data['email'] or not update_data['telefone']) and answers:
        # Question 10 holds the contact info as JSON
        try:
            contact = json.loads(answers[9] if len(answers) > 9 and answers[9] else '{}')
        except (TypeError, ValueError):
            contact = {}
        if isinstance(contact, dict):
            if not update_data['email']:
                update_data['email'] = contact.get('email') or None
            if not update_data['telefone']:
                update_data['telefone'] = contact.get('phone') or None

    if cached_data.get('analysis'):
        update_data['diagnostico'] = cached_data['analysis']

    for idx, answer in enumerate(answers or []):
        if idx == 0:
            update_data['nome_empresa'] = answer or None
        elif 1 <= idx <= 8:
            update_data[f'resposta_{idx}'] = answer or None

    return update_data


@auth.route('/register', methods=['POST'])
def register():
    body = request.get_json(silent=True) or {}
    form_data = body.get('formData') if isinstance(body.get('formData'), dict) else {}
    cached_data = body.get('cachedData') if isinstance(body.get('cachedData'), dict) else {}

    company_name = form_data.get('companyName') or cached_data.get('companyName') or "Marca Demo"
    if not str(company_name).strip():
        return error_response("Nome da empresa e obrigatorio", 400)

    id_unico = generate_id_unico(str(company_name))

    if current_app.config['ENABLE_MOCK']:
        return jsonify({
            'success': True,
            'mock': {
                'idUnico': id_unico,
                'email': form_data.get('email') or "demo@menosmais.app",
            },
        })

    update_data = build_registration(form_data, cached_data, id_unico)
    store = current_app.brand_store

    try:
        existing = store.get(id_unico, columns='id, idUnico, nome_empresa')
    except Exception as e:
        current_app.logger.error(f"Erro ao buscar registro: {e}")
        return error_response("Erro ao verificar registro", 500)

    try:
        if existing:
            store.update(id_unico, update_data)
        else:
            store.insert({'nome_empresa': company_name, **update_data})
    except Exception as e:
        current_app.logger.error(f"Erro ao salvar registro: {e}")
        return error_response(str(e), 500)

    current_app.logger.info(f"Registro salvo: {id_unico} ({'update' if existing else 'insert'})")
    return jsonify({'success': True})
