import os
from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix
from brandplot.logging_conf import configure_logging
from brandplot.services.supabase_service import init_supabase, SupabaseBrandStore
from brandplot.services.mock_store import MockBrandStore

load_dotenv()  # Load env vars before anything else

DEFAULT_SECRET_KEY = 'brandplot-dev-key'


def _flag(name):
    return os.environ.get(name, '').strip().lower() == 'true'


def load_config(app):
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', DEFAULT_SECRET_KEY)

    # Supabase
    app.config['SUPABASE_URL'] = os.environ.get('SUPABASE_URL')
    app.config['SUPABASE_KEY'] = os.environ.get('SUPABASE_KEY') or os.environ.get('SUPABASE_ANON_KEY')
    app.config['SUPABASE_SERVICE_ROLE_KEY'] = os.environ.get('SUPABASE_SERVICE_ROLE_KEY')
    app.config['DASHBOARD_MOCK'] = _flag('DASHBOARD_MOCK')

    # Mercado Pago
    app.config['MP_ACCESS_TOKEN'] = os.environ.get('MP_ACCESS_TOKEN')
    app.config['MP_WEBHOOK_SECRET'] = os.environ.get('MP_WEBHOOK_SECRET')
    app.config['MP_API_URL'] = os.environ.get('MP_API_URL')

    # OpenAI
    app.config['OPENAI_API_KEY'] = os.environ.get('OPENAI_API_KEY')
    app.config['OPENAI_MODEL'] = os.environ.get('OPENAI_MODEL')

    app.config['APP_URL'] = (
        os.environ.get('APP_URL')
        or os.environ.get('NEXT_PUBLIC_APP_URL')
        or os.environ.get('VERCEL_URL')
    )
    app.config['LOG_LEVEL'] = os.environ.get('LOG_LEVEL', 'INFO')


def create_app(test_config=None):
    """
    Application factory.
    `test_config` overrides env config; it may also carry a ready
    `BRAND_STORE` to use instead of Supabase / the mock store.
    """
    app = Flask(__name__, instance_path='/tmp')
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    # --- CONFIGURATION ---
    load_config(app)
    if test_config:
        app.config.update(test_config)

    configure_logging(app.config['LOG_LEVEL'])

    if app.config['SECRET_KEY'] == DEFAULT_SECRET_KEY:
        app.logger.warning("SECRET_KEY não configurada: tokens de login assinados com a chave padrão de desenvolvimento.")

    # --- STORAGE ---
    app.supabase = None
    store = app.config.get('BRAND_STORE')
    if store is None:
        app.supabase = init_supabase(app)

    if 'ENABLE_MOCK' not in app.config:
        app.config['ENABLE_MOCK'] = (app.supabase is None and store is None) or app.config['DASHBOARD_MOCK']

    if store is None:
        if app.config['ENABLE_MOCK'] or app.supabase is None:
            store = MockBrandStore()
        else:
            store = SupabaseBrandStore(app.supabase)
    app.brand_store = store

    if app.config['ENABLE_MOCK']:
        app.logger.warning("Supabase indisponível ou DASHBOARD_MOCK ativo: usando dados mock.")

    # --- ERROR HANDLERS ---
    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({'error': "Recurso não encontrado"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'error': "Método não permitido"}), 405

    @app.errorhandler(Exception)
    def internal_error(error):
        if isinstance(error, HTTPException):
            return jsonify({'error': error.description}), error.code
        app.logger.exception(f"Erro não tratado: {error}")
        return jsonify({'error': "Erro interno do servidor"}), 500

    # --- BLUEPRINTS ---
    from brandplot.auth import auth as auth_blueprint
    from brandplot.routes.brand_data import brand_data_bp
    from brandplot.routes.billing import billing_bp
    from brandplot.routes.missions import missions_bp

    app.register_blueprint(auth_blueprint)
    app.register_blueprint(brand_data_bp)
    app.register_blueprint(billing_bp)
    app.register_blueprint(missions_bp)

    @app.route('/ping')
    def ping():
        return jsonify({'status': 'ok', 'mock': app.config['ENABLE_MOCK']})

    return app
