from datetime import date

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required
from app.database import get_store, purge_audits
from app.services import calculos
from app.utils import to_int

bp = Blueprint('dashboard', __name__)

@bp.route('/api/dashboard')
@jwt_required()
def api_dashboard():
    store = get_store()
    produtos = store.all('produtos')

    resumo = calculos.dashboard(
        pedidos=store.all('pedidos'),
        lancamentos=store.all('despesas_entradas'),
        produtos=produtos,
        eventos=store.all('eventos'),
        fiados=store.all('fiados'),
        hoje=date.today()
    )
    resumo['produtos_baixo_estoque'] = [p for p in produtos if calculos.estoque_baixo(p)]
    return jsonify(resumo)

@bp.route('/api/logs', methods=['GET'])
@jwt_required()
def api_logs_list():
    start_date = request.args.get('start_date')
    end_date = request.args.get('end_date')
    action = request.args.get('action')
    user = request.args.get('user')
    limit = to_int(request.args.get('limit', 50)) or 50

    # Auto-cleanup older than the retention window
    store = get_store()
    purge_audits(store, current_app.config['AUDIT_RETENTION_DAYS'])

    logs = store.all('audits')
    if start_date:
        logs = [a for a in logs if (a['ts'] or '') >= start_date + ' 00:00:00']
    if end_date:
        logs = [a for a in logs if (a['ts'] or '') <= end_date + ' 23:59:59']
    if action:
        logs = [a for a in logs if action.upper() in (a['action'] or '').upper()]
    if user:
        logs = [a for a in logs if user in str(a['user_id'] or '')]

    logs.sort(key=lambda a: (a['ts'] or '', a['id']), reverse=True)
    return jsonify([{**a, 'created_at': a['ts']} for a in logs[:limit]])
