from datetime import date

from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from app.database import get_store, log_audit
from app.services import calculos
from app.utils import STATUS_EVENTO, TIPOS_EVENTO, parse_date, to_float, to_int, to_text, today_iso

bp = Blueprint('agenda', __name__)

CAMPOS = ['titulo', 'descricao', 'data_evento', 'hora_evento', 'tipo', 'status', 'cliente_id', 'valor', 'observacoes']

def _ordenar(eventos):
    eventos.sort(key=lambda e: (e.get('data_evento') or '', e.get('hora_evento') or '', e['id']))
    return eventos

def _validar(data):
    if 'status' in data and data['status'] not in STATUS_EVENTO:
        return f"Status inválido: {data['status']}"
    if 'tipo' in data and data['tipo'] not in TIPOS_EVENTO:
        return f"Tipo inválido: {data['tipo']}"
    return None

def _coerce(evento):
    if 'titulo' in evento:
        evento['titulo'] = to_text(evento['titulo'])
    if 'valor' in evento:
        evento['valor'] = to_float(evento['valor'])
    if 'cliente_id' in evento:
        evento['cliente_id'] = to_int(evento['cliente_id']) if evento['cliente_id'] not in ('', None) else None
    return evento

@bp.route('/api/eventos', methods=['GET'])
@jwt_required()
def api_eventos_list():
    eventos = get_store().all('eventos')
    inicio = parse_date(request.args.get('inicio'))
    fim = parse_date(request.args.get('fim'))
    if inicio or fim:
        filtrados = []
        for e in eventos:
            data = parse_date(e.get('data_evento'))
            if not data:
                continue
            if inicio and data < inicio:
                continue
            if fim and data > fim:
                continue
            filtrados.append(e)
        eventos = filtrados
    return jsonify(_ordenar(eventos))

@bp.route('/api/eventos/hoje', methods=['GET'])
@jwt_required()
def api_eventos_hoje():
    return jsonify(_ordenar(calculos.eventos_hoje(get_store().all('eventos'), date.today())))

@bp.route('/api/eventos/proximos', methods=['GET'])
@jwt_required()
def api_eventos_proximos():
    return jsonify(_ordenar(calculos.eventos_proximos(get_store().all('eventos'), date.today())))

@bp.route('/api/eventos', methods=['POST'])
@jwt_required()
def api_eventos_create():
    user_id = get_jwt_identity()
    data = request.get_json(silent=True) or {}

    if not to_text(data.get('titulo')):
        return jsonify({'success': False, 'error': 'Título é obrigatório'}), 400
    if not parse_date(data.get('data_evento')):
        return jsonify({'success': False, 'error': 'Data do evento é obrigatória'}), 400
    erro = _validar(data)
    if erro:
        return jsonify({'success': False, 'error': erro}), 400

    evento = _coerce({field: data.get(field) for field in CAMPOS})
    evento['status'] = evento['status'] or 'Pendente'
    evento['tipo'] = evento['tipo'] or 'Outro'
    evento['data_criacao'] = today_iso()

    evento = get_store().insert('eventos', evento)
    log_audit(user_id, 'EVENTO_CREATE', f"Evento #{evento['id']}: {evento['titulo']} em {evento['data_evento']}")
    return jsonify({'success': True, 'id': evento['id'], 'evento': evento}), 201

@bp.route('/api/eventos/<int:id>', methods=['GET'])
@jwt_required()
def api_eventos_get(id):
    evento = get_store().get('eventos', id)
    if not evento:
        return jsonify({'success': False, 'error': 'Not found'}), 404
    return jsonify(evento)

@bp.route('/api/eventos/<int:id>', methods=['PUT'])
@jwt_required()
def api_eventos_update(id):
    user_id = get_jwt_identity()
    data = request.get_json(silent=True) or {}

    erro = _validar(data)
    if erro:
        return jsonify({'success': False, 'error': erro}), 400

    evento = get_store().update('eventos', id, _coerce({f: data[f] for f in CAMPOS if f in data}))
    if not evento:
        return jsonify({'success': False, 'error': 'Not found'}), 404
    log_audit(user_id, 'EVENTO_UPDATE', f"Updated evento #{id}")
    return jsonify({'success': True, 'evento': evento})

@bp.route('/api/eventos/<int:id>', methods=['DELETE'])
@jwt_required()
def api_eventos_delete(id):
    user_id = get_jwt_identity()
    if not get_store().delete('eventos', id):
        return jsonify({'success': False, 'error': 'Not found'}), 404
    log_audit(user_id, 'EVENTO_DELETE', f"Deleted evento #{id}")
    return jsonify({'success': True})
