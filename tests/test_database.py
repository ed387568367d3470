import pytest

from app.database import close_connection, get_store, init_db, purge_audits
from app.utils import now_iso
from conftest import login


def test_store_reopens_after_teardown(app):
    with app.app_context():
        primeiro = get_store()
        close_connection(None)
        segundo = get_store()
        assert segundo is not primeiro
        assert segundo.all('clientes') == []


def test_requests_share_one_client_context(client):
    login(client)
    for _ in range(3):
        assert client.get('/api/clientes').status_code == 200
    assert client.post('/api/clientes', json={'nome': 'Ana'}).status_code == 201


@pytest.mark.parametrize('backend', ['sqlite', 'json'])
def test_purge_audits(app, backend):
    with app.app_context():
        store = get_store()
        store.insert('audits', {'ts': '2000-01-01 00:00:00', 'user_id': 1, 'action': 'ANTIGO'})
        store.insert('audits', {'ts': now_iso(-400), 'user_id': 1, 'action': 'ANTIGO'})
        store.insert('audits', {'ts': now_iso(-10), 'user_id': 1, 'action': 'RECENTE'})
        assert purge_audits(store, 365) == 2
        assert [a['action'] for a in store.all('audits')] == ['RECENTE']
        assert purge_audits(store, 365) == 0


def test_logs_listing_drops_old_entries(auth_client, app):
    with app.app_context():
        get_store().insert('audits', {'ts': '2000-01-01 00:00:00', 'user_id': 1, 'action': 'ANTIGO'})

    logs = auth_client.get('/api/logs?limit=100').get_json()
    assert 'ANTIGO' not in [a['action'] for a in logs]
    with app.app_context():
        assert all(a['action'] != 'ANTIGO' for a in get_store().all('audits'))


def test_init_db_drops_old_entries(app):
    with app.app_context():
        get_store().insert('audits', {'ts': '2000-01-01 00:00:00', 'user_id': 1, 'action': 'ANTIGO'})
    init_db(app)
    with app.app_context():
        assert get_store().find('audits', action='ANTIGO') == []
