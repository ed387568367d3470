import os

from flask import Blueprint, current_app, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from app.database import get_store, log_audit
from app.routes.auth import is_admin
from app.services import backup
from app.storage import SHEETS

bp = Blueprint('data', __name__)

# Spreadsheet-server surface: whole sheets in and out, used by RemoteStore.

@bp.route('/api/data/<sheet>', methods=['GET'])
@jwt_required()
def api_sheet_read(sheet):
    if sheet not in SHEETS:
        return jsonify({'success': False, 'error': f"Planilha desconhecida: {sheet}"}), 404
    return jsonify(get_store().read_sheet(sheet))

@bp.route('/api/data/<sheet>', methods=['POST'])
@jwt_required()
def api_sheet_write(sheet):
    if not is_admin():
        return jsonify({'success': False, 'error': 'Unauthorized'}), 403
    if sheet not in SHEETS:
        return jsonify({'success': False, 'error': f"Planilha desconhecida: {sheet}"}), 404
    rows = request.get_json(silent=True)
    if not isinstance(rows, list):
        return jsonify({'success': False, 'error': 'Dados devem ser um array'}), 400

    get_store().write_sheet(sheet, rows)
    return jsonify({'success': True, 'registros': len(rows)})

@bp.route('/api/initialize', methods=['POST'])
@jwt_required()
def api_initialize():
    get_store().initialize()
    return jsonify({'success': True})

@bp.route('/api/seed', methods=['POST'])
@jwt_required()
def api_seed():
    if not is_admin():
        return jsonify({'success': False, 'error': 'Unauthorized'}), 403
    backup.apply_seed(get_store())
    log_audit(get_jwt_identity(), 'DATA_SEED', 'Seed aplicado')
    return jsonify({'success': True})

@bp.route('/api/export', methods=['POST'])
@jwt_required()
def api_export():
    path = backup.criar_backup(get_store(), current_app.config['BACKUP_DIR'])
    log_audit(get_jwt_identity(), 'DATA_BACKUP', os.path.basename(path))
    return jsonify({'success': True, 'arquivo': os.path.basename(path), 'path': path})

@bp.route('/api/verify', methods=['GET'])
@jwt_required()
def api_verify():
    return jsonify(backup.verificar(get_store()))
