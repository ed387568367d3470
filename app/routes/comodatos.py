from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from app.database import get_store, log_audit
from app.services import calculos, comercial
from app.utils import to_int, to_text, today_iso

bp = Blueprint('comodatos', __name__)

CAMPOS = ['cliente_id', 'produto', 'quantidade', 'quantidade_vendida', 'quantidade_paga', 'valor_unitario',
          'valor_garantia', 'data_comodato', 'observacoes']

def _detalhar(comodato, nomes):
    out = calculos.detalhar_comodato(comodato)
    out['cliente_nome'] = nomes.get(comodato['cliente_id'], comercial.CLIENTE_DESCONHECIDO)
    return out

@bp.route('/api/comodatos', methods=['GET'])
@jwt_required()
def api_comodatos_list():
    store = get_store()
    comodatos = store.all('comodatos')
    comodatos.sort(key=lambda c: (c.get('data_comodato') or '', c['id']), reverse=True)
    nomes = comercial.nomes_clientes(store)
    return jsonify([_detalhar(c, nomes) for c in comodatos])

@bp.route('/api/comodatos', methods=['POST'])
@jwt_required()
def api_comodatos_create():
    user_id = get_jwt_identity()
    data = request.get_json(silent=True) or {}

    if not data.get('cliente_id'):
        return jsonify({'success': False, 'error': 'Cliente é obrigatório'}), 400
    if not to_text(data.get('produto')):
        return jsonify({'success': False, 'error': 'Produto é obrigatório'}), 400

    comodato = calculos.normalizar_comodato({field: data.get(field) for field in CAMPOS})
    comodato['cliente_id'] = to_int(comodato['cliente_id'])
    comodato['data_comodato'] = comodato['data_comodato'] or today_iso()

    store = get_store()
    comodato = store.insert('comodatos', comodato)
    log_audit(user_id, 'COMODATO_CREATE', f"Comodato #{comodato['id']}: {comodato['quantidade']}x {comodato['produto']}")
    return jsonify({'success': True, 'id': comodato['id'],
                    'comodato': _detalhar(comodato, comercial.nomes_clientes(store))}), 201

@bp.route('/api/comodatos/<int:id>', methods=['GET'])
@jwt_required()
def api_comodatos_get(id):
    store = get_store()
    comodato = store.get('comodatos', id)
    if not comodato:
        return jsonify({'success': False, 'error': 'Not found'}), 404
    return jsonify(_detalhar(comodato, comercial.nomes_clientes(store)))

@bp.route('/api/comodatos/<int:id>', methods=['PUT'])
@jwt_required()
def api_comodatos_update(id):
    user_id = get_jwt_identity()
    data = request.get_json(silent=True) or {}
    store = get_store()

    atual = store.get('comodatos', id)
    if not atual:
        return jsonify({'success': False, 'error': 'Not found'}), 404

    merged = calculos.normalizar_comodato({**atual, **{f: data[f] for f in CAMPOS if f in data}})
    updates = {f: merged[f] for f in CAMPOS + ['valor_total', 'quantidade_pendente']}
    comodato = store.update('comodatos', id, updates)
    log_audit(user_id, 'COMODATO_UPDATE', f"Updated comodato #{id}")
    return jsonify({'success': True, 'comodato': _detalhar(comodato, comercial.nomes_clientes(store))})

@bp.route('/api/comodatos/<int:id>', methods=['DELETE'])
@jwt_required()
def api_comodatos_delete(id):
    user_id = get_jwt_identity()
    if not get_store().delete('comodatos', id):
        return jsonify({'success': False, 'error': 'Not found'}), 404
    log_audit(user_id, 'COMODATO_DELETE', f"Deleted comodato #{id}")
    return jsonify({'success': True})
