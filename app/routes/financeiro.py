from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from app.database import get_store, log_audit
from app.services import calculos
from app.utils import TIPOS_LANCAMENTO, format_currency, to_float, today_iso

bp = Blueprint('financeiro', __name__)

CAMPOS = ['tipo', 'categoria', 'descricao', 'valor', 'data']

# --- API DESPESAS / ENTRADAS ---

@bp.route('/api/despesas-entradas', methods=['GET'])
@jwt_required()
def api_lancamentos_list():
    tipo = request.args.get('tipo')
    items = get_store().all('despesas_entradas')
    if tipo:
        items = [i for i in items if i['tipo'] == tipo]
    items.sort(key=lambda i: (i.get('data') or '', i['id']), reverse=True)
    return jsonify(items)

@bp.route('/api/despesas-entradas/totais', methods=['GET'])
@jwt_required()
def api_lancamentos_totais():
    store = get_store()
    totais = calculos.totais_lancamentos(store.all('despesas_entradas'))
    totais['lucro_total'] = calculos.lucro_total(store.all('pedidos'))
    return jsonify(totais)

@bp.route('/api/despesas-entradas', methods=['POST'])
@jwt_required()
def api_lancamentos_create():
    user_id = get_jwt_identity()
    data = request.get_json(silent=True) or {}

    tipo = data.get('tipo')
    if tipo not in TIPOS_LANCAMENTO:
        return jsonify({'success': False, 'error': f"Tipo inválido: {tipo}"}), 400

    item = {field: data.get(field) for field in CAMPOS}
    item['valor'] = to_float(item['valor'])
    item['data'] = item['data'] or today_iso()

    item = get_store().insert('despesas_entradas', item)
    log_audit(user_id, f"LANCAMENTO_CREATE_{tipo.upper()}", f"{item['descricao']} {format_currency(item['valor'])}")
    return jsonify({'success': True, 'id': item['id'], 'item': item}), 201

@bp.route('/api/despesas-entradas/<int:id>', methods=['PUT'])
@jwt_required()
def api_lancamentos_update(id):
    user_id = get_jwt_identity()
    data = request.get_json(silent=True) or {}

    if 'tipo' in data and data['tipo'] not in TIPOS_LANCAMENTO:
        return jsonify({'success': False, 'error': f"Tipo inválido: {data['tipo']}"}), 400

    updates = {field: data[field] for field in CAMPOS if field in data}
    if 'valor' in updates:
        updates['valor'] = to_float(updates['valor'])

    item = get_store().update('despesas_entradas', id, updates)
    if not item:
        return jsonify({'success': False, 'error': 'Not found'}), 404
    log_audit(user_id, 'LANCAMENTO_UPDATE', f"Updated lancamento #{id}")
    return jsonify({'success': True, 'item': item})

@bp.route('/api/despesas-entradas/<int:id>', methods=['DELETE'])
@jwt_required()
def api_lancamentos_delete(id):
    user_id = get_jwt_identity()
    if not get_store().delete('despesas_entradas', id):
        return jsonify({'success': False, 'error': 'Not found'}), 404
    log_audit(user_id, 'LANCAMENTO_DELETE', f"Deleted lancamento #{id}")
    return jsonify({'success': True})
