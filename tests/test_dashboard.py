from datetime import date

from conftest import criar_cliente, criar_produto


def test_dashboard_saldo(auth_client):
    produto_id = criar_produto(auth_client, custo=10, preco=25, estoque=3, minimo=2)
    auth_client.post('/api/pedidos', json={
        'cliente_id': criar_cliente(auth_client),
        'itens': [{'produto_id': produto_id, 'quantidade': 2, 'preco_unitario': 25}]
    })
    for tipo, valor in [('Entradas', 200), ('Bônus', 50), ('Despesas', 80)]:
        r = auth_client.post('/api/despesas-entradas', json={'tipo': tipo, 'descricao': tipo, 'valor': valor})
        assert r.status_code == 201
    auth_client.post('/api/eventos', json={'titulo': 'Entrega', 'data_evento': date.today().isoformat()})

    resumo = auth_client.get('/api/dashboard').get_json()
    assert resumo['lucro_total'] == 30.0
    assert resumo['saldo_total'] == 200 + 50 - 80 + 30
    assert resumo['produtos_estoque_baixo'] == 1
    assert [p['id'] for p in resumo['produtos_baixo_estoque']] == [produto_id]
    assert resumo['eventos_hoje'] == 1
    assert resumo['pedidos_por_status']['pendente'] == 1


def test_lancamentos(auth_client):
    assert auth_client.post('/api/despesas-entradas', json={'tipo': 'Outro', 'valor': 1}).status_code == 400

    r = auth_client.post('/api/despesas-entradas', json={'tipo': 'Despesas', 'categoria': 'Insumos', 'valor': '12,30'})
    item = r.get_json()['item']
    assert item['valor'] == 12.3
    assert item['data'] == date.today().isoformat()
    auth_client.post('/api/despesas-entradas', json={'tipo': 'Entradas', 'valor': 100, 'data': '2020-01-01'})

    assert [i['tipo'] for i in auth_client.get('/api/despesas-entradas').get_json()] == ['Despesas', 'Entradas']
    assert len(auth_client.get('/api/despesas-entradas?tipo=Entradas').get_json()) == 1

    totais = auth_client.get('/api/despesas-entradas/totais').get_json()
    assert totais == {'total_entradas': 100.0, 'total_bonus': 0.0, 'total_despesas': 12.3, 'lucro_total': 0}

    r = auth_client.put(f"/api/despesas-entradas/{item['id']}", json={'valor': 20})
    assert r.get_json()['item']['valor'] == 20.0
    assert auth_client.delete(f"/api/despesas-entradas/{item['id']}").status_code == 200
    assert auth_client.delete(f"/api/despesas-entradas/{item['id']}").status_code == 404


def test_logs_filters(auth_client):
    criar_cliente(auth_client)
    logs = auth_client.get('/api/logs?action=CLIENTE').get_json()
    assert [l['action'] for l in logs] == ['CLIENTE_CREATE']

    hoje = date.today().isoformat()
    assert len(auth_client.get(f'/api/logs?start_date={hoje}&end_date={hoje}').get_json()) == 2
    assert auth_client.get('/api/logs?end_date=2000-01-01').get_json() == []
    assert len(auth_client.get('/api/logs?limit=1').get_json()) == 1
