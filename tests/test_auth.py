from conftest import login


def test_requires_login(client):
    r = client.get('/api/clientes')
    assert r.status_code == 401
    assert r.get_json()['msg'] == 'Missing Authorization Header'


def test_login_sets_cookie_and_token(client):
    token = login(client)
    assert token

    r = client.get('/api/auth/me')
    assert r.status_code == 200
    assert r.get_json()['username'] == 'admin'
    assert r.get_json()['role'] == 'admin'


def test_bearer_header(app):
    with app.test_client() as c:
        token = login(c)
    with app.test_client() as other:
        r = other.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})
        assert r.status_code == 200


def test_wrong_password(client):
    r = client.post('/api/auth/login', json={'username': 'admin', 'password': 'errada'})
    assert r.status_code == 401
    assert r.get_json()['success'] is False


def test_logout(auth_client):
    assert auth_client.post('/api/auth/logout').status_code == 200
    assert auth_client.get('/api/auth/me').status_code == 401


def test_user_management_and_inactive_login(auth_client, app):
    r = auth_client.post('/api/users', json={'username': 'vendedor', 'password': 'segredo'})
    assert r.status_code == 201
    user_id = r.get_json()['id']

    r = auth_client.post('/api/users', json={'username': 'vendedor', 'password': 'outra'})
    assert r.status_code == 400

    users = auth_client.get('/api/users').get_json()
    assert {u['username'] for u in users} == {'admin', 'vendedor'}
    assert all('password_hash' not in u for u in users)

    with app.test_client() as c:
        login(c, 'vendedor', 'segredo')
        # Regular users cannot manage users or settings
        assert c.get('/api/users').status_code == 403
        assert c.post('/api/settings', json={'empresa': 'X'}).status_code == 403

    assert auth_client.delete(f'/api/users/{user_id}').status_code == 200
    with app.test_client() as c:
        r = c.post('/api/auth/login', json={'username': 'vendedor', 'password': 'segredo'})
        assert r.status_code == 403


def test_login_is_audited(auth_client):
    logs = auth_client.get('/api/logs?action=login').get_json()
    assert logs[0]['action'] == 'LOGIN_SUCCESS'
    assert logs[0]['created_at'] == logs[0]['ts']


def test_user_update_coerces_is_active(auth_client):
    user_id = auth_client.post('/api/users', json={'username': 'caixa', 'password': 'segredo'}).get_json()['id']

    assert auth_client.put(f'/api/users/{user_id}', json={'is_active': 'sim'}).status_code == 200
    users = {u['username']: u for u in auth_client.get('/api/users').get_json()}
    assert users['caixa']['is_active'] == 0

    assert auth_client.put(f'/api/users/{user_id}', json={'is_active': '1'}).status_code == 200
    users = {u['username']: u for u in auth_client.get('/api/users').get_json()}
    assert users['caixa']['is_active'] == 1
