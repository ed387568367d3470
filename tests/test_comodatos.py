from conftest import criar_cliente


def test_create_and_status(auth_client):
    cliente_id = criar_cliente(auth_client)
    r = auth_client.post('/api/comodatos', json={
        'cliente_id': cliente_id,
        'produto': 'Caixa térmica',
        'quantidade': 10,
        'quantidade_vendida': 3,
        'quantidade_paga': 2,
        'valor_unitario': 4,
        'valor_garantia': 50,
    })
    assert r.status_code == 201
    comodato = r.get_json()['comodato']
    assert comodato['valor_total'] == 40.0
    assert comodato['quantidade_pendente'] == 5
    assert comodato['valor_vendido'] == 12.0
    assert comodato['valor_pendente'] == 20.0
    assert comodato['status'] == 'Parcialmente Vendido'
    assert comodato['cliente_nome'] == 'Maria Souza'

    r = auth_client.put(f"/api/comodatos/{comodato['id']}", json={'quantidade_vendida': 10})
    atualizado = r.get_json()['comodato']
    assert atualizado['status'] == 'Totalmente Vendido'
    assert atualizado['quantidade_pendente'] == 0


def test_validation_and_delete(auth_client):
    assert auth_client.post('/api/comodatos', json={'produto': 'Mesa'}).status_code == 400
    assert auth_client.post('/api/comodatos', json={'cliente_id': 1}).status_code == 400

    r = auth_client.post('/api/comodatos', json={'cliente_id': 1, 'produto': 'Mesa', 'quantidade': 2})
    comodato_id = r.get_json()['id']
    assert auth_client.get(f'/api/comodatos/{comodato_id}').get_json()['status'] == 'Emprestado'

    assert auth_client.delete(f'/api/comodatos/{comodato_id}').status_code == 200
    assert auth_client.get(f'/api/comodatos/{comodato_id}').status_code == 404
    assert auth_client.get('/api/comodatos').get_json() == []
