import logging
import os
import requests
from flask import Flask, jsonify
from flask_jwt_extended import JWTManager
from dotenv import load_dotenv

from .database import get_store, close_connection
from .errors import ComercialError

load_dotenv()

def create_app(test_config=None):
    # Initialize Flask app
    app = Flask(__name__, instance_relative_config=True)

    data_dir = os.environ.get('DATA_DIR', os.path.join(os.path.expanduser('~'), 'Documents', 'Sistema-Comercial'))

    # Configuration
    app.config.from_mapping(
        SECRET_KEY=os.environ.get('SECRET_KEY', 'dev-secret-key'),
        JWT_SECRET_KEY=os.environ.get('JWT_SECRET_KEY', 'dev-jwt-secret'),
        JWT_TOKEN_LOCATION=['cookies', 'headers'],
        JWT_COOKIE_CSRF_PROTECT=False, # MVP shortcut
        STORAGE_BACKEND=os.environ.get('STORAGE_BACKEND', 'sqlite'),
        DATA_DIR=data_dir,
        DATABASE=os.environ.get('DATABASE', os.path.join(data_dir, 'sistema-comercial.db')),
        JSON_STORE_FILE=os.environ.get('JSON_STORE_FILE', os.path.join(data_dir, 'sistema-comercial.json')),
        WORKBOOK_FILE=os.environ.get('WORKBOOK_FILE', os.path.join(data_dir, 'sistema-comercial.xlsx')),
        BACKUP_DIR=os.environ.get('BACKUP_DIR', os.path.join(data_dir, 'Backups')),
        REMOTE_STORE_URL=os.environ.get('REMOTE_STORE_URL'),
        REMOTE_STORE_USERNAME=os.environ.get('REMOTE_STORE_USERNAME'),
        REMOTE_STORE_PASSWORD=os.environ.get('REMOTE_STORE_PASSWORD'),
        REMOTE_STORE_TOKEN=os.environ.get('REMOTE_STORE_TOKEN'),
        AUTO_SEED=os.environ.get('AUTO_SEED', 'false').lower() in ('1', 'true', 'yes'),
        ADMIN_USERNAME=os.environ.get('ADMIN_USERNAME', 'admin'),
        ADMIN_PASSWORD=os.environ.get('ADMIN_PASSWORD', 'admin'),
        LOG_LEVEL=os.environ.get('LOG_LEVEL', 'INFO'),
        AUDIT_RETENTION_DAYS=int(os.environ.get('AUDIT_RETENTION_DAYS', 365)),
    )

    if test_config:
        app.config.update(test_config)

    os.makedirs(app.config['DATA_DIR'], exist_ok=True)
    os.makedirs(app.config['BACKUP_DIR'], exist_ok=True)

    # One HTTP session per app so the remote login survives between requests
    if app.config['STORAGE_BACKEND'] == 'remote':
        app.config.setdefault('REMOTE_STORE_SESSION', requests.Session())

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )
    app.logger.setLevel(app.config['LOG_LEVEL'])

    # Register Extensions
    jwt = JWTManager(app)

    # Register Database Teardown
    app.teardown_appcontext(close_connection)

    # Error Handlers
    @app.errorhandler(ComercialError)
    def handle_comercial_error(e):
        if e.status_code >= 500:
            app.logger.error("Erro interno: %s", e.message)
        return jsonify({'success': False, 'error': e.message}), e.status_code

    # JWT Callbacks
    @jwt.unauthorized_loader
    def custom_unauthorized_response(_err):
        return jsonify({"msg": "Missing Authorization Header"}), 401

    @jwt.expired_token_loader
    def custom_expired_token_response(_hdr, _payload):
        return jsonify({"msg": "Token has expired", "error": "token_expired"}), 401

    @jwt.invalid_token_loader
    def custom_invalid_token_response(_err):
        return jsonify({"msg": "Invalid Token"}), 401

    @jwt.user_lookup_loader
    def user_lookup_callback(_jwt_header, jwt_data):
        identity = jwt_data["sub"]
        return get_store().get('users', int(identity))

    # Register Blueprints (Import here to avoid circular dependencies)
    from .routes import auth, clientes, produtos, pedidos, fiados, financeiro, comodatos, agenda, dashboard, settings, data

    app.register_blueprint(auth.bp)
    app.register_blueprint(clientes.bp)
    app.register_blueprint(produtos.bp)
    app.register_blueprint(pedidos.bp)
    app.register_blueprint(fiados.bp)
    app.register_blueprint(financeiro.bp)
    app.register_blueprint(comodatos.bp)
    app.register_blueprint(agenda.bp)
    app.register_blueprint(dashboard.bp)
    app.register_blueprint(settings.bp)
    app.register_blueprint(data.bp)

    return app
