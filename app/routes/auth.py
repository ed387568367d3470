from flask import Blueprint, request, jsonify
from flask_jwt_extended import create_access_token, set_access_cookies, unset_jwt_cookies, jwt_required, current_user
from werkzeug.security import check_password_hash
from app.database import get_store, log_audit

bp = Blueprint('auth', __name__)

@bp.route('/api/auth/login', methods=['POST'])
def api_auth_login():
    data = request.get_json(silent=True) or request.form
    username = data.get('username')
    password = data.get('password') or ''

    store = get_store()
    users = store.find('users', username=username) if username else []
    user = users[0] if users else None

    if user and check_password_hash(user['password_hash'], password):
        # Check active status
        if user['is_active'] == 0:
            log_audit(user['id'], 'LOGIN_FAILED', 'Inactive user tried to login')
            return jsonify({'success': False, 'error': 'Usuário desativado pelo administrador.'}), 403

        access_token = create_access_token(identity=str(user['id']))
        resp = jsonify({'success': True, 'access_token': access_token})
        set_access_cookies(resp, access_token)

        log_audit(user['id'], 'LOGIN_SUCCESS', 'User logged in')
        return resp

    return jsonify({'success': False, 'error': 'Usuário ou senha inválidos'}), 401

@bp.route('/api/auth/logout', methods=['POST'])
def api_auth_logout():
    resp = jsonify({'success': True})
    unset_jwt_cookies(resp)
    return resp

@bp.route('/api/auth/me', methods=['GET'])
@jwt_required()
def api_auth_me():
    return jsonify({'id': current_user['id'], 'username': current_user['username'], 'role': current_user['role']})

def is_admin():
    return current_user['role'] == 'admin'
