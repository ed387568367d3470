from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from app.database import get_store, log_audit
from app.services import calculos
from app.utils import to_text

bp = Blueprint('produtos', __name__)

CAMPOS = ['nome', 'custo_producao', 'preco_sugerido', 'estoque_atual', 'estoque_minimo']

@bp.route('/api/produtos', methods=['GET'])
@jwt_required()
def api_produtos_list():
    produtos = get_store().all('produtos')
    produtos.sort(key=lambda p: (p.get('nome') or '').lower())
    return jsonify(produtos)

@bp.route('/api/produtos/estoque-baixo', methods=['GET'])
@jwt_required()
def api_produtos_estoque_baixo():
    produtos = [p for p in get_store().all('produtos') if calculos.estoque_baixo(p)]
    return jsonify(produtos)

@bp.route('/api/produtos', methods=['POST'])
@jwt_required()
def api_produtos_create():
    user_id = get_jwt_identity()
    data = request.get_json(silent=True) or {}

    if not to_text(data.get('nome')):
        return jsonify({'success': False, 'error': 'Nome é obrigatório'}), 400

    produto = calculos.normalizar_produto({field: data.get(field) for field in CAMPOS})
    produto['nome'] = to_text(produto['nome'])
    produto['total_vendido'] = 0
    produto['total_faturado'] = 0

    produto = get_store().insert('produtos', produto)
    log_audit(user_id, 'PRODUTO_CREATE', f"Created item: {produto['nome']}")
    return jsonify({'success': True, 'id': produto['id'], 'produto': produto}), 201

@bp.route('/api/produtos/<int:id>', methods=['GET'])
@jwt_required()
def api_produtos_get(id):
    produto = get_store().get('produtos', id)
    if not produto:
        return jsonify({'success': False, 'error': 'Not found'}), 404
    return jsonify(produto)

@bp.route('/api/produtos/<int:id>', methods=['PUT'])
@jwt_required()
def api_produtos_update(id):
    user_id = get_jwt_identity()
    data = request.get_json(silent=True) or {}
    store = get_store()

    atual = store.get('produtos', id)
    if not atual:
        return jsonify({'success': False, 'error': 'Not found'}), 404
    if 'nome' in data and not to_text(data['nome']):
        return jsonify({'success': False, 'error': 'Nome é obrigatório'}), 400

    # Margins are always recomputed from the merged cost and price
    merged = calculos.normalizar_produto({**atual, **{f: data[f] for f in CAMPOS if f in data}})
    updates = {f: merged[f] for f in CAMPOS + ['margem_lucro', 'percentual_lucro']}
    updates['nome'] = to_text(updates['nome'])

    produto = store.update('produtos', id, updates)
    log_audit(user_id, 'PRODUTO_UPDATE', f"Updated item {id}")
    return jsonify({'success': True, 'produto': produto})

@bp.route('/api/produtos/<int:id>', methods=['DELETE'])
@jwt_required()
def api_produtos_delete(id):
    user_id = get_jwt_identity()
    if not get_store().delete('produtos', id):
        return jsonify({'success': False, 'error': 'Not found'}), 404
    log_audit(user_id, 'PRODUTO_DELETE', f"Deleted item {id}")
    return jsonify({'success': True})
