import logging

from flask import current_app, g
from werkzeug.security import generate_password_hash

from app.storage import create_store
from app.utils import now_iso

logger = logging.getLogger(__name__)

def get_store():
    store = getattr(g, '_store', None)
    if store is None:
        store = g._store = create_store(current_app.config)
    return store

def close_connection(exception):
    store = g.pop('_store', None)
    if store is not None:
        store.close()

def init_db(app):
    with app.app_context():
        store = get_store()
        store.initialize()

        # Ensure Admin User
        username = app.config['ADMIN_USERNAME']
        if not store.find('users', username=username):
            store.insert('users', {
                'username': username,
                'password_hash': generate_password_hash(app.config['ADMIN_PASSWORD']),
                'role': 'admin',
                'is_active': 1
            })
            logger.info("Usuário admin '%s' criado.", username)

        if app.config.get('AUTO_SEED'):
            from app.services.backup import apply_seed_if_empty
            apply_seed_if_empty(store)

        purge_audits(store, app.config['AUDIT_RETENTION_DAYS'])

def log_audit(user_id, action, details=''):
    store = get_store()
    store.insert('audits', {
        'ts': now_iso(),
        'user_id': user_id,
        'action': action,
        'details': details
    })

def purge_audits(store, retention_days):
    """Drops audit entries older than ``retention_days``; returns how many went."""
    cutoff = now_iso(-retention_days)
    logs = store.all('audits')
    kept = [a for a in logs if (a['ts'] or '') >= cutoff]
    removed = len(logs) - len(kept)
    if removed:
        store.write_sheet('audits', kept)
        logger.info("%d registros de auditoria anteriores a %s removidos", removed, cutoff)
    return removed
