"""Operations that change more than one table at once."""
import logging

from app.errors import NotFoundError, ValidationError
from app.services import calculos
from app.utils import STATUS_PEDIDO, to_float, to_int, today_iso

logger = logging.getLogger(__name__)

CLIENTE_DESCONHECIDO = 'Cliente não encontrado'


def nomes_clientes(store):
    return {c['id']: c['nome'] for c in store.all('clientes')}


def criar_pedido(store, cliente_id, itens):
    """
    Creates an order from ``[{produto_id, quantidade, preco_unitario}]``.

    Lines that point at unknown products are skipped. Each accepted line is
    priced at the product's current cost and moves its stock.
    """
    if not isinstance(itens, list) or not itens:
        raise ValidationError('O pedido precisa de pelo menos um item')

    produtos = {p['id']: p for p in store.all('produtos')}
    alterados = {}
    linhas = []
    valor_total = 0.0
    valor_lucro = 0.0

    for item in itens:
        produto_id = to_int(item.get('produto_id'))
        produto = alterados.get(produto_id) or produtos.get(produto_id)
        if not produto:
            logger.warning("Produto %s não encontrado, item ignorado", item.get('produto_id'))
            continue
        linha, valor_item = calculos.calcular_item_pedido(produto, item.get('quantidade'), item.get('preco_unitario'))
        valor_total += valor_item
        valor_lucro += linha['lucro_item']
        alterados[produto_id] = calculos.baixar_estoque(produto, linha['quantidade'], valor_item)
        linhas.append(linha)

    if not linhas:
        raise ValidationError('Nenhum item do pedido corresponde a um produto cadastrado')

    pedido = store.insert('pedidos', {
        'cliente_id': to_int(cliente_id) if cliente_id not in (None, '') else None,
        'data_pedido': today_iso(),
        'valor_total': valor_total,
        'valor_lucro': valor_lucro,
        'status': 'pendente',
    })
    pedido['itens'] = [store.insert('itens_pedido', {**linha, 'pedido_id': pedido['id']}) for linha in linhas]

    for produto_id, produto in alterados.items():
        store.update('produtos', produto_id, {
            'estoque_atual': produto['estoque_atual'],
            'total_vendido': produto['total_vendido'],
            'total_faturado': produto['total_faturado'],
        })

    logger.info("Pedido %s criado. Valor total: %.2f Lucro: %.2f", pedido['id'], valor_total, valor_lucro)
    return pedido


def atualizar_status_pedido(store, pedido_id, status):
    if status not in STATUS_PEDIDO:
        raise ValidationError(f"Status inválido: {status}")
    pedido = store.update('pedidos', pedido_id, {'status': status})
    if pedido is None:
        raise NotFoundError('pedidos', pedido_id)
    return pedido


def excluir_pedido(store, pedido_id):
    """Removes the order and its lines. Stock already moved stays moved."""
    if not store.delete('pedidos', pedido_id):
        raise NotFoundError('pedidos', pedido_id)
    removed = store.delete_where('itens_pedido', 'pedido_id', pedido_id)
    logger.info("Pedido %s excluído com %d itens", pedido_id, removed)


def registrar_pagamento(store, fiado_id, valor_pagamento, data_pagamento=None):
    fiado = store.get('fiados', fiado_id)
    if fiado is None:
        raise NotFoundError('fiados', fiado_id)
    valor = to_float(valor_pagamento)
    if valor <= 0:
        raise ValidationError('O valor do pagamento deve ser maior que zero')

    pagamento = store.insert('pagamentos_fiado', {
        'fiado_id': fiado_id,
        'data_pagamento': data_pagamento or today_iso(),
        'valor_pagamento': valor,
    })
    atualizado = store.update('fiados', fiado_id, calculos.aplicar_pagamento(fiado, valor))
    return pagamento, atualizado


def excluir_pagamento(store, pagamento_id):
    """Removes a payment and takes its amount back out of the fiado."""
    pagamento = store.get('pagamentos_fiado', pagamento_id)
    if pagamento is None:
        raise NotFoundError('pagamentos_fiado', pagamento_id)
    store.delete('pagamentos_fiado', pagamento_id)
    fiado = store.get('fiados', pagamento['fiado_id'])
    if fiado is None:
        return None
    return store.update('fiados', fiado['id'],
                        calculos.aplicar_pagamento(fiado, -to_float(pagamento['valor_pagamento'])))


def excluir_fiado(store, fiado_id):
    if not store.delete('fiados', fiado_id):
        raise NotFoundError('fiados', fiado_id)
    store.delete_where('pagamentos_fiado', 'fiado_id', fiado_id)
