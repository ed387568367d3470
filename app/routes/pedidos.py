from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from app.database import get_store, log_audit
from app.services import calculos, comercial
from app.utils import STATUS_PEDIDO, format_currency, status_color_filter

bp = Blueprint('pedidos', __name__)

def _com_detalhes(store, pedido, nomes=None, itens=None, produtos=None):
    nomes = nomes if nomes is not None else comercial.nomes_clientes(store)
    if produtos is None:
        produtos = {p['id']: p['nome'] for p in store.all('produtos')}
    if itens is None:
        itens = store.find('itens_pedido', pedido_id=pedido['id'])
    out = dict(pedido)
    out['cliente_nome'] = nomes.get(pedido['cliente_id'], comercial.CLIENTE_DESCONHECIDO)
    out['itens'] = [
        {**item, 'produto_nome': produtos.get(item['produto_id'], 'Produto não encontrado')}
        for item in itens
    ]
    return out

@bp.route('/api/pedidos', methods=['GET'])
@jwt_required()
def api_pedidos_list():
    store = get_store()
    pedidos = store.all('pedidos')
    status = request.args.get('status')
    if status:
        pedidos = [p for p in pedidos if p['status'] == status]

    nomes = comercial.nomes_clientes(store)
    produtos = {p['id']: p['nome'] for p in store.all('produtos')}
    todos_itens = store.all('itens_pedido')
    pedidos.sort(key=lambda p: (p.get('data_pedido') or '', p['id']), reverse=True)
    return jsonify([
        _com_detalhes(store, p, nomes, [i for i in todos_itens if i['pedido_id'] == p['id']], produtos)
        for p in pedidos
    ])

@bp.route('/api/pedidos/kanban', methods=['GET'])
@jwt_required()
def api_pedidos_kanban():
    store = get_store()
    nomes = comercial.nomes_clientes(store)
    board = calculos.pedidos_por_status(store.all('pedidos'))
    return jsonify([
        {
            'status': status,
            'label': STATUS_PEDIDO.get(status, status),
            'cor': status_color_filter(status),
            'pedidos': [
                {**p, 'cliente_nome': nomes.get(p['cliente_id'], comercial.CLIENTE_DESCONHECIDO)}
                for p in pedidos
            ]
        }
        for status, pedidos in board.items()
    ])

@bp.route('/api/pedidos', methods=['POST'])
@jwt_required()
def api_pedidos_create():
    user_id = get_jwt_identity()
    data = request.get_json(silent=True) or {}
    store = get_store()

    pedido = comercial.criar_pedido(store, data.get('cliente_id'), data.get('itens'))
    log_audit(user_id, 'PEDIDO_CREATE',
              f"Pedido #{pedido['id']} {format_currency(pedido['valor_total'])} (lucro {format_currency(pedido['valor_lucro'])})")
    return jsonify({'success': True, 'id': pedido['id'], 'pedido': _com_detalhes(store, pedido, itens=pedido['itens'])}), 201

@bp.route('/api/pedidos/<int:id>', methods=['GET'])
@jwt_required()
def api_pedidos_get(id):
    store = get_store()
    pedido = store.get('pedidos', id)
    if not pedido:
        return jsonify({'success': False, 'error': 'Not found'}), 404
    return jsonify(_com_detalhes(store, pedido))

@bp.route('/api/pedidos/<int:id>/status', methods=['PUT', 'POST'])
@jwt_required()
def api_pedidos_status(id):
    user_id = get_jwt_identity()
    data = request.get_json(silent=True) or {}
    status = data.get('status')

    pedido = comercial.atualizar_status_pedido(get_store(), id, status)
    log_audit(user_id, 'PEDIDO_STATUS', f"Pedido #{id} -> {status}")
    return jsonify({'success': True, 'pedido': pedido})

@bp.route('/api/pedidos/<int:id>', methods=['DELETE'])
@jwt_required()
def api_pedidos_delete(id):
    user_id = get_jwt_identity()
    comercial.excluir_pedido(get_store(), id)
    log_audit(user_id, 'PEDIDO_DELETE', f"Deleted pedido #{id}")
    return jsonify({'success': True})
