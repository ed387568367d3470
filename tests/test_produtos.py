from conftest import criar_produto


def test_create_computes_margins(auth_client):
    produto_id = criar_produto(auth_client, custo=10, preco=25)
    produto = auth_client.get(f'/api/produtos/{produto_id}').get_json()
    assert produto['margem_lucro'] == 15.0
    assert produto['percentual_lucro'] == 150.0
    assert produto['total_vendido'] == 0
    assert produto['total_faturado'] == 0


def test_zero_cost_has_no_percentage(auth_client):
    produto_id = criar_produto(auth_client, custo=0, preco=8)
    produto = auth_client.get(f'/api/produtos/{produto_id}').get_json()
    assert produto['margem_lucro'] == 8.0
    assert produto['percentual_lucro'] == 0


def test_update_recomputes_margins(auth_client):
    produto_id = criar_produto(auth_client, custo=10, preco=25)
    r = auth_client.put(f'/api/produtos/{produto_id}', json={'preco_sugerido': 12})
    produto = r.get_json()['produto']
    assert produto['custo_producao'] == 10.0
    assert produto['margem_lucro'] == 2.0
    assert produto['percentual_lucro'] == 20.0


def test_invalid_numbers_become_zero(auth_client):
    r = auth_client.post('/api/produtos', json={'nome': 'Trufa', 'custo_producao': 'abc', 'estoque_atual': ''})
    produto = r.get_json()['produto']
    assert produto['custo_producao'] == 0
    assert produto['estoque_atual'] == 0


def test_estoque_baixo(auth_client):
    criar_produto(auth_client, 'Brigadeiro', estoque=1, minimo=2)
    criar_produto(auth_client, 'Beijinho', estoque=2, minimo=2)
    nomes = [p['nome'] for p in auth_client.get('/api/produtos/estoque-baixo').get_json()]
    assert nomes == ['Brigadeiro']


def test_delete(auth_client):
    produto_id = criar_produto(auth_client)
    assert auth_client.delete(f'/api/produtos/{produto_id}').status_code == 200
    assert auth_client.get(f'/api/produtos/{produto_id}').status_code == 404
    assert auth_client.put(f'/api/produtos/{produto_id}', json={'nome': 'x'}).status_code == 404


def test_non_text_nome_is_coerced(auth_client):
    r = auth_client.post('/api/produtos', json={'nome': 42, 'custo_producao': 1})
    assert r.status_code == 201
    assert r.get_json()['produto']['nome'] == '42'
    assert auth_client.post('/api/produtos', json={'nome': None}).status_code == 400
