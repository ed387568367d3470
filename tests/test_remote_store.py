from datetime import timedelta

import pytest
from flask_jwt_extended import create_access_token

from app import create_app
from app.database import init_db
from app.storage import RemoteStore, SQLiteStore, StoreError
from conftest import criar_cliente, criar_produto, login, make_config


class FakeResponse:
    def __init__(self, response):
        self.status_code = response.status_code
        self.reason = response.status
        self._json = response.get_json()

    def json(self):
        return self._json


class FakeSession:
    """Routes requests' Session calls to a Flask test client."""

    def __init__(self, client, base_url):
        self.client = client
        self.base_url = base_url
        self.headers = {}

    def request(self, method, url, timeout=None, json=None):
        path = url[len(self.base_url):]
        return FakeResponse(self.client.open(path, method=method, json=json, headers=dict(self.headers)))

    def close(self):
        pass


@pytest.fixture
def servidor(tmp_path):
    app = create_app(make_config(tmp_path / 'servidor'))
    init_db(app)
    return app


@pytest.fixture
def remoto(tmp_path, servidor):
    server_app = servidor
    session = FakeSession(server_app.test_client(), 'http://servidor')
    app = create_app(make_config(tmp_path / 'local', 'remote', REMOTE_STORE_URL='http://servidor/',
                                 REMOTE_STORE_USERNAME='admin', REMOTE_STORE_PASSWORD='admin123',
                                 REMOTE_STORE_SESSION=session))
    init_db(app)
    return app, session


def test_business_sheets_live_on_the_server(remoto):
    app, session = remoto
    with app.test_client() as c:
        login(c)
        cliente_id = criar_cliente(c)
        produto_id = criar_produto(c, estoque=4)
        r = c.post('/api/pedidos', json={
            'cliente_id': cliente_id,
            'itens': [{'produto_id': produto_id, 'quantidade': 1, 'preco_unitario': 25}]
        })
        assert r.status_code == 201

        info = c.get('/api/verify').get_json()
        assert info == {'valid': True, 'backend': 'remote', 'path': 'http://servidor/api'}

    clientes = session.client.get('/api/data/clientes', headers=session.headers).get_json()
    assert [x['nome'] for x in clientes] == ['Maria Souza']
    produtos = session.client.get('/api/data/produtos', headers=session.headers).get_json()
    assert produtos[0]['estoque_atual'] == 3


def test_users_stay_local(remoto):
    app, session = remoto
    local = SQLiteStore(app.config['DATABASE'])
    try:
        assert [u['username'] for u in local.all('users')] == ['admin']
    finally:
        local.close()
    assert session.client.get('/api/data/users', headers=session.headers).status_code == 404


def test_server_errors_become_store_errors(tmp_path, servidor):
    server_app = servidor
    # No token: the server answers 401
    session = FakeSession(server_app.test_client(), 'http://servidor')
    store = RemoteStore('http://servidor', local=SQLiteStore(str(tmp_path / 'l.db')), session=session)
    with pytest.raises(StoreError) as exc:
        store.read_sheet('clientes')
    assert exc.value.status_code == 502
    assert not store.verify()
    store.close()


def test_expired_token_logs_in_again(tmp_path, servidor):
    server_app = servidor
    with server_app.app_context():
        expirado = create_access_token(identity='1', expires_delta=timedelta(seconds=-60))

    session = FakeSession(server_app.test_client(), 'http://servidor')
    store = RemoteStore('http://servidor', local=SQLiteStore(str(tmp_path / 'l.db')),
                        username='admin', password='admin123', token=expirado, session=session)
    assert store.read_sheet('clientes') == []
    assert session.headers['Authorization'] != f'Bearer {expirado}'

    store.write_sheet('clientes', [{'nome': 'Ana'}])
    assert [c['nome'] for c in store.read_sheet('clientes')] == ['Ana']
    store.close()


def test_wrong_credentials(tmp_path, servidor):
    server_app = servidor
    session = FakeSession(server_app.test_client(), 'http://servidor')
    store = RemoteStore('http://servidor', local=SQLiteStore(str(tmp_path / 'l.db')),
                        username='admin', password='errada', session=session)
    with pytest.raises(StoreError) as exc:
        store.read_sheet('clientes')
    assert exc.value.status_code == 502
    store.close()
