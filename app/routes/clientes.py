from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from app.database import get_store, log_audit
from app.utils import to_text, today_iso

bp = Blueprint('clientes', __name__)

CAMPOS = ['nome', 'telefone', 'cpf_cnpj', 'email', 'endereco', 'cidade', 'estado', 'nome_fantasia',
          'observacao', 'data_cadastro']

@bp.route('/api/clientes', methods=['GET'])
@jwt_required()
def api_clientes_list():
    store = get_store()
    clientes = store.all('clientes')

    # Check for query params (search)
    search_term = (request.args.get('q') or '').strip().lower()
    if search_term:
        clientes = [c for c in clientes
                    if any(search_term in (c.get(f) or '').lower() for f in ('nome', 'telefone', 'cpf_cnpj', 'email'))]

    clientes.sort(key=lambda c: (c.get('nome') or '').lower())
    return jsonify(clientes)

@bp.route('/api/clientes', methods=['POST'])
@jwt_required()
def api_clientes_create():
    user_id = get_jwt_identity()
    data = request.get_json(silent=True) or {}

    if not to_text(data.get('nome')):
        return jsonify({'success': False, 'error': 'Nome é obrigatório'}), 400

    cliente = {field: data.get(field) for field in CAMPOS}
    cliente['nome'] = to_text(cliente['nome'])
    cliente['data_cadastro'] = data.get('data_cadastro') or today_iso()

    cliente = get_store().insert('clientes', cliente)
    log_audit(user_id, 'CLIENTE_CREATE', f"Created client: {cliente['nome']}")
    return jsonify({'success': True, 'id': cliente['id'], 'cliente': cliente}), 201

@bp.route('/api/clientes/<int:id>', methods=['GET'])
@jwt_required()
def api_clientes_get(id):
    cliente = get_store().get('clientes', id)
    if not cliente:
        return jsonify({'success': False, 'error': 'Not found'}), 404
    return jsonify(cliente)

@bp.route('/api/clientes/<int:id>', methods=['PUT'])
@jwt_required()
def api_clientes_update(id):
    user_id = get_jwt_identity()
    data = request.get_json(silent=True) or {}

    updates = {field: data[field] for field in CAMPOS if field in data}
    if 'nome' in updates and not to_text(updates['nome']):
        return jsonify({'success': False, 'error': 'Nome é obrigatório'}), 400
    if 'nome' in updates:
        updates['nome'] = to_text(updates['nome'])

    cliente = get_store().update('clientes', id, updates)
    if not cliente:
        return jsonify({'success': False, 'error': 'Not found'}), 404
    log_audit(user_id, 'CLIENTE_UPDATE', f"Updated client #{id}")
    return jsonify({'success': True, 'cliente': cliente})

@bp.route('/api/clientes/<int:id>', methods=['DELETE'])
@jwt_required()
def api_clientes_delete(id):
    user_id = get_jwt_identity()
    if not get_store().delete('clientes', id):
        return jsonify({'success': False, 'error': 'Not found'}), 404
    log_audit(user_id, 'CLIENTE_DELETE', f"Deleted client #{id}")
    return jsonify({'success': True})
