from datetime import date

from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from app.database import get_store, log_audit
from app.services import calculos, comercial
from app.utils import format_currency, to_int, today_iso

bp = Blueprint('fiados', __name__)

CAMPOS = ['cliente_id', 'pedido_id', 'descricao', 'data_fiado', 'data_vencimento', 'valor_total', 'valor_pago']

def _detalhar(fiado, nomes, hoje, pagamentos=None):
    out = dict(fiado)
    out['cliente_nome'] = nomes.get(fiado['cliente_id'], comercial.CLIENTE_DESCONHECIDO)
    out['situacao'] = calculos.situacao_fiado(fiado, hoje)
    if pagamentos is not None:
        out['pagamentos'] = pagamentos
    return out

@bp.route('/api/fiados', methods=['GET'])
@jwt_required()
def api_fiados_list():
    store = get_store()
    fiados = store.all('fiados')
    if request.args.get('pendentes') in ('1', 'true'):
        fiados = [f for f in fiados if (f['valor_pendente'] or 0) > 0]

    # Newest first
    fiados.sort(key=lambda f: (f.get('data_fiado') or '', f['id']), reverse=True)
    nomes = comercial.nomes_clientes(store)
    hoje = date.today()
    return jsonify([_detalhar(f, nomes, hoje) for f in fiados])

@bp.route('/api/fiados/resumo', methods=['GET'])
@jwt_required()
def api_fiados_resumo():
    return jsonify(calculos.resumo_fiados(get_store().all('fiados'), date.today()))

@bp.route('/api/fiados', methods=['POST'])
@jwt_required()
def api_fiados_create():
    user_id = get_jwt_identity()
    data = request.get_json(silent=True) or {}

    if not data.get('cliente_id'):
        return jsonify({'success': False, 'error': 'Cliente é obrigatório'}), 400

    fiado = calculos.normalizar_fiado({field: data.get(field) for field in CAMPOS})
    fiado['cliente_id'] = to_int(fiado['cliente_id'])
    fiado['data_fiado'] = fiado['data_fiado'] or today_iso()

    fiado = get_store().insert('fiados', fiado)
    log_audit(user_id, 'FIADO_CREATE', f"Fiado #{fiado['id']} {format_currency(fiado['valor_total'])}")
    return jsonify({'success': True, 'id': fiado['id'], 'fiado': fiado}), 201

@bp.route('/api/fiados/<int:id>', methods=['GET'])
@jwt_required()
def api_fiados_get(id):
    store = get_store()
    fiado = store.get('fiados', id)
    if not fiado:
        return jsonify({'success': False, 'error': 'Not found'}), 404
    pagamentos = store.find('pagamentos_fiado', fiado_id=id)
    pagamentos.sort(key=lambda p: (p.get('data_pagamento') or '', p['id']), reverse=True)
    return jsonify(_detalhar(fiado, comercial.nomes_clientes(store), date.today(), pagamentos))

@bp.route('/api/fiados/<int:id>', methods=['PUT'])
@jwt_required()
def api_fiados_update(id):
    user_id = get_jwt_identity()
    data = request.get_json(silent=True) or {}
    store = get_store()

    atual = store.get('fiados', id)
    if not atual:
        return jsonify({'success': False, 'error': 'Not found'}), 404

    merged = calculos.normalizar_fiado({**atual, **{f: data[f] for f in CAMPOS if f in data}})
    updates = {f: merged[f] for f in CAMPOS + ['valor_pendente']}
    fiado = store.update('fiados', id, updates)
    log_audit(user_id, 'FIADO_UPDATE', f"Updated fiado #{id}")
    return jsonify({'success': True, 'fiado': fiado})

@bp.route('/api/fiados/<int:id>', methods=['DELETE'])
@jwt_required()
def api_fiados_delete(id):
    user_id = get_jwt_identity()
    comercial.excluir_fiado(get_store(), id)
    log_audit(user_id, 'FIADO_DELETE', f"Deleted fiado #{id}")
    return jsonify({'success': True})

# --- PAGAMENTOS ---

@bp.route('/api/fiados/<int:id>/pagamentos', methods=['POST'])
@jwt_required()
def api_fiados_pagamento_create(id):
    user_id = get_jwt_identity()
    data = request.get_json(silent=True) or {}

    pagamento, fiado = comercial.registrar_pagamento(get_store(), id, data.get('valor_pagamento'),
                                                     data.get('data_pagamento'))
    log_audit(user_id, 'FIADO_PAGAMENTO',
              f"Fiado #{id} recebeu {format_currency(pagamento['valor_pagamento'])}. Pendente: {format_currency(fiado['valor_pendente'])}")
    return jsonify({'success': True, 'pagamento': pagamento, 'fiado': fiado}), 201

@bp.route('/api/pagamentos-fiado', methods=['GET'])
@jwt_required()
def api_pagamentos_list():
    pagamentos = get_store().all('pagamentos_fiado')
    pagamentos.sort(key=lambda p: (p.get('data_pagamento') or '', p['id']), reverse=True)
    return jsonify(pagamentos)

@bp.route('/api/pagamentos-fiado/<int:id>', methods=['DELETE'])
@jwt_required()
def api_pagamentos_delete(id):
    user_id = get_jwt_identity()
    fiado = comercial.excluir_pagamento(get_store(), id)
    log_audit(user_id, 'FIADO_PAGAMENTO_DELETE', f"Deleted pagamento #{id}")
    return jsonify({'success': True, 'fiado': fiado})
