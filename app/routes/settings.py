import json

from flask import Blueprint, Response, current_app, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from werkzeug.security import generate_password_hash
from app.database import get_store, log_audit
from app.routes.auth import is_admin
from app.services import backup
from app.utils import to_int, to_text

bp = Blueprint('settings', __name__)

@bp.route('/api/settings', methods=['GET'])
@jwt_required()
def api_settings_list():
    return jsonify(get_store().get_settings())

@bp.route('/api/settings', methods=['POST'])
@jwt_required()
def api_settings_update():
    if not is_admin():
        return jsonify({'success': False, 'error': 'Unauthorized'}), 403
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'success': False, 'error': 'Dados inválidos'}), 400

    store = get_store()
    for key, value in data.items():
        store.set_setting(key, str(value))
    log_audit(get_jwt_identity(), 'SETTINGS_UPDATE', ', '.join(sorted(data)))
    return jsonify({'success': True})

# --- DATA MANAGEMENT ---

@bp.route('/api/config/export', methods=['GET'])
@jwt_required()
def api_config_export():
    payload = json.dumps(backup.exportar_dados(get_store()), ensure_ascii=False, indent=2)
    filename = backup.nome_arquivo_exportacao()
    log_audit(get_jwt_identity(), 'DATA_EXPORT', filename)
    return Response(
        payload,
        mimetype='application/json',
        headers={'Content-Disposition': f'attachment; filename={filename}'}
    )

@bp.route('/api/config/import', methods=['POST'])
@jwt_required()
def api_config_import():
    if not is_admin():
        return jsonify({'success': False, 'error': 'Unauthorized'}), 403
    upload = request.files.get('file')
    if upload:
        try:
            data = json.load(upload.stream)
        except (ValueError, UnicodeDecodeError):
            return jsonify({'success': False, 'error': 'Erro ao ler arquivo. Verifique se é um arquivo JSON válido.'}), 400
    else:
        data = request.get_json(silent=True)

    imported = backup.importar_dados(get_store(), data)
    log_audit(get_jwt_identity(), 'DATA_IMPORT', json.dumps(imported))
    return jsonify({'success': True, 'importados': imported})

@bp.route('/api/config/clear', methods=['POST'])
@jwt_required()
def api_config_clear():
    if not is_admin():
        return jsonify({'success': False, 'error': 'Unauthorized'}), 403
    backup.limpar_dados(get_store())
    log_audit(get_jwt_identity(), 'DATA_CLEAR', 'Todos os dados comerciais apagados')
    return jsonify({'success': True})

@bp.route('/api/config/backups', methods=['GET'])
@jwt_required()
def api_config_backups():
    return jsonify(backup.listar_backups(current_app.config['BACKUP_DIR']))

@bp.route('/api/config/backups/<arquivo>/restore', methods=['POST'])
@jwt_required()
def api_config_backup_restore(arquivo):
    if not is_admin():
        return jsonify({'success': False, 'error': 'Unauthorized'}), 403
    imported = backup.restaurar_backup(get_store(), current_app.config['BACKUP_DIR'], arquivo)
    log_audit(get_jwt_identity(), 'DATA_RESTORE', arquivo)
    return jsonify({'success': True, 'importados': imported})

# --- USERS ---

@bp.route('/api/users', methods=['GET'])
@jwt_required()
def api_users_list():
    if not is_admin():
        return jsonify({'error': 'Unauthorized'}), 403
    users = get_store().all('users')
    return jsonify([{k: u[k] for k in ('id', 'username', 'role', 'is_active')} for u in users])

@bp.route('/api/users', methods=['POST'])
@jwt_required()
def api_users_create():
    if not is_admin():
        return jsonify({'error': 'Unauthorized'}), 403

    data = request.get_json(silent=True) or {}
    username = to_text(data.get('username'))
    if not username or not data.get('password'):
        return jsonify({'error': 'Usuário e senha são obrigatórios'}), 400

    store = get_store()
    if store.find('users', username=username):
        return jsonify({'error': 'Usuário já existe'}), 400

    user = store.insert('users', {
        'username': username,
        'password_hash': generate_password_hash(data['password']),
        'role': data.get('role', 'user'),
        'is_active': 1
    })
    log_audit(get_jwt_identity(), 'USER_CREATE', f"Created user {username}")
    return jsonify({'success': True, 'id': user['id']}), 201

@bp.route('/api/users/<int:id>', methods=['PUT'])
@jwt_required()
def api_users_update(id):
    if not is_admin():
        return jsonify({'error': 'Unauthorized'}), 403

    data = request.get_json(silent=True) or {}
    updates = {}
    if 'role' in data:
        updates['role'] = data['role']
    if data.get('password'):
        updates['password_hash'] = generate_password_hash(data['password'])
    if 'is_active' in data:
        updates['is_active'] = 1 if to_int(data['is_active']) else 0

    if not updates:
        return jsonify({'success': True}) # Nothing to update

    if not get_store().update('users', id, updates):
        return jsonify({'error': 'Not found'}), 404
    log_audit(get_jwt_identity(), 'USER_UPDATE', f"Updated user #{id}")
    return jsonify({'success': True})

@bp.route('/api/users/<int:id>', methods=['DELETE'])
@jwt_required()
def api_users_delete(id):
    if not is_admin():
        return jsonify({'error': 'Unauthorized'}), 403

    # Soft delete
    if not get_store().update('users', id, {'is_active': 0}):
        return jsonify({'error': 'Not found'}), 404
    log_audit(get_jwt_identity(), 'USER_DELETE', f"Deactivated user #{id}")
    return jsonify({'success': True})
