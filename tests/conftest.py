import os
import sys
import pytest

# ensure project root is on sys.path when running from tests/ folder
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from app import create_app
from app.database import init_db


def make_config(tmp_path, backend='sqlite', **extra):
    config = {
        'TESTING': True,
        'STORAGE_BACKEND': backend,
        'DATA_DIR': str(tmp_path),
        'DATABASE': str(tmp_path / 'comercial.db'),
        'JSON_STORE_FILE': str(tmp_path / 'comercial.json'),
        'WORKBOOK_FILE': str(tmp_path / 'comercial.xlsx'),
        'BACKUP_DIR': str(tmp_path / 'Backups'),
        'ADMIN_USERNAME': 'admin',
        'ADMIN_PASSWORD': 'admin123',
        'AUTO_SEED': False,
    }
    config.update(extra)
    return config


@pytest.fixture(params=['sqlite'])
def backend(request):
    return request.param


@pytest.fixture
def app(tmp_path, backend):
    app = create_app(make_config(tmp_path, backend))
    init_db(app)
    yield app


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


def login(client, username='admin', password='admin123'):
    r = client.post('/api/auth/login', json={'username': username, 'password': password})
    assert r.status_code == 200, r.get_data(as_text=True)
    return r.get_json()['access_token']


@pytest.fixture
def auth_client(client):
    login(client)
    return client


def criar_cliente(client, nome='Maria Souza', **extra):
    r = client.post('/api/clientes', json={'nome': nome, **extra})
    assert r.status_code == 201
    return r.get_json()['id']


def criar_produto(client, nome='Bolo de Pote', custo=10, preco=25, estoque=10, minimo=2):
    r = client.post('/api/produtos', json={
        'nome': nome,
        'custo_producao': custo,
        'preco_sugerido': preco,
        'estoque_atual': estoque,
        'estoque_minimo': minimo,
    })
    assert r.status_code == 201
    return r.get_json()['id']
