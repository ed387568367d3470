"""
Derived figures for the commercial records.

Every function here is pure: it takes plain row dicts and returns numbers or
new dicts, so the same rules apply whichever store the rows came from.
"""
from app.utils import STATUS_PEDIDO, TIPOS_LANCAMENTO, add_days, parse_date, to_float, to_int


def margem_produto(custo_producao, preco_sugerido):
    """
    Returns (margem_lucro, percentual_lucro).
    The percentage is over cost, and zero when the product has no cost.
    """
    custo = to_float(custo_producao)
    preco = to_float(preco_sugerido)
    margem = preco - custo
    percentual = (margem / custo) * 100 if custo > 0 else 0.0
    return margem, percentual


def normalizar_produto(produto):
    out = dict(produto)
    out['custo_producao'] = to_float(produto.get('custo_producao'))
    out['preco_sugerido'] = to_float(produto.get('preco_sugerido'))
    out['margem_lucro'], out['percentual_lucro'] = margem_produto(out['custo_producao'], out['preco_sugerido'])
    out['estoque_atual'] = to_int(produto.get('estoque_atual'))
    out['estoque_minimo'] = to_int(produto.get('estoque_minimo'))
    return out


def estoque_baixo(produto):
    return to_int(produto.get('estoque_atual')) < to_int(produto.get('estoque_minimo'))


def calcular_item_pedido(produto, quantidade, preco_unitario):
    """
    Prices one order line against the product's current cost.
    Returns the line (without ids) and its gross value.
    """
    quantidade = to_int(quantidade)
    preco = to_float(preco_unitario)
    custo = to_float(produto.get('custo_producao'))
    lucro_item = (preco - custo) * quantidade
    valor_item = preco * quantidade
    item = {
        'produto_id': produto['id'],
        'quantidade': quantidade,
        'preco_unitario': preco,
        'custo_unitario': custo,
        'lucro_item': lucro_item,
    }
    return item, valor_item


def baixar_estoque(produto, quantidade, valor_item):
    """Stock never goes negative; sales totals always grow."""
    out = dict(produto)
    out['estoque_atual'] = max(0, to_int(produto.get('estoque_atual')) - to_int(quantidade))
    out['total_vendido'] = to_int(produto.get('total_vendido')) + to_int(quantidade)
    out['total_faturado'] = to_float(produto.get('total_faturado')) + to_float(valor_item)
    return out


def valor_pendente_fiado(valor_total, valor_pago):
    return max(0.0, to_float(valor_total) - to_float(valor_pago))


def normalizar_fiado(fiado):
    out = dict(fiado)
    out['valor_total'] = to_float(fiado.get('valor_total'))
    out['valor_pago'] = to_float(fiado.get('valor_pago'))
    out['valor_pendente'] = valor_pendente_fiado(out['valor_total'], out['valor_pago'])
    return out


def aplicar_pagamento(fiado, valor_pagamento):
    """Returns the fiado fields after receiving (or, if negative, reverting) a payment."""
    valor_pago = max(0.0, to_float(fiado.get('valor_pago')) + to_float(valor_pagamento))
    return {
        'valor_pago': valor_pago,
        'valor_pendente': valor_pendente_fiado(fiado.get('valor_total'), valor_pago),
    }


def situacao_fiado(fiado, hoje):
    if to_float(fiado.get('valor_pendente')) <= 0:
        return 'Quitado'
    vencimento = parse_date(fiado.get('data_vencimento'))
    if vencimento and vencimento < hoje:
        return 'Vencido'
    return 'Em aberto'


def resumo_fiados(fiados, hoje):
    return {
        'total_fiado': sum(to_float(f.get('valor_total')) for f in fiados),
        'total_recebido': sum(to_float(f.get('valor_pago')) for f in fiados),
        'total_pendente': sum(to_float(f.get('valor_pendente')) for f in fiados),
        'vencidos': sum(1 for f in fiados if situacao_fiado(f, hoje) == 'Vencido'),
    }


def normalizar_comodato(comodato):
    out = dict(comodato)
    quantidade = to_int(comodato.get('quantidade'))
    vendida = to_int(comodato.get('quantidade_vendida'))
    paga = to_int(comodato.get('quantidade_paga'))
    valor_unitario = to_float(comodato.get('valor_unitario'))
    out.update({
        'quantidade': quantidade,
        'quantidade_vendida': vendida,
        'quantidade_paga': paga,
        'valor_unitario': valor_unitario,
        'valor_total': quantidade * valor_unitario,
        'quantidade_pendente': max(0, quantidade - vendida - paga),
        'valor_garantia': to_float(comodato.get('valor_garantia')),
    })
    return out


def status_comodato(comodato):
    quantidade = to_int(comodato.get('quantidade'))
    vendida = to_int(comodato.get('quantidade_vendida'))
    if vendida == quantidade:
        return 'Totalmente Vendido'
    if vendida > 0:
        return 'Parcialmente Vendido'
    return 'Emprestado'


def detalhar_comodato(comodato):
    """Adds the read-only figures shown next to a comodato."""
    out = dict(comodato)
    valor_unitario = to_float(comodato.get('valor_unitario'))
    out['valor_vendido'] = to_int(comodato.get('quantidade_vendida')) * valor_unitario
    out['valor_pendente'] = to_int(comodato.get('quantidade_pendente')) * valor_unitario
    out['status'] = status_comodato(comodato)
    return out


def totais_lancamentos(lancamentos):
    totais = {tipo: 0.0 for tipo in TIPOS_LANCAMENTO}
    for item in lancamentos:
        if item.get('tipo') in totais:
            totais[item['tipo']] += to_float(item.get('valor'))
    return {
        'total_entradas': totais['Entradas'],
        'total_bonus': totais['Bônus'],
        'total_despesas': totais['Despesas'],
    }


def lucro_total(pedidos):
    return sum(to_float(p.get('valor_lucro')) for p in pedidos)


def calcular_saldo(pedidos, lancamentos):
    """Entradas + Bônus - Despesas + lucro dos pedidos."""
    totais = totais_lancamentos(lancamentos)
    return totais['total_entradas'] + totais['total_bonus'] - totais['total_despesas'] + lucro_total(pedidos)


def eventos_hoje(eventos, hoje):
    return [e for e in eventos
            if parse_date(e.get('data_evento')) == hoje and e.get('status') == 'Pendente']


def eventos_proximos(eventos, hoje, dias=7):
    limite = add_days(hoje, dias)
    proximos = []
    for e in eventos:
        data = parse_date(e.get('data_evento'))
        if data and hoje < data <= limite and e.get('status') == 'Pendente':
            proximos.append(e)
    return proximos


def pedidos_por_status(pedidos):
    board = {status: [] for status in STATUS_PEDIDO}
    for p in pedidos:
        board.setdefault(p.get('status') or 'pendente', []).append(p)
    return board


def dashboard(pedidos, lancamentos, produtos, eventos, fiados, hoje):
    totais = totais_lancamentos(lancamentos)
    return {
        'saldo_total': calcular_saldo(pedidos, lancamentos),
        'lucro_total': lucro_total(pedidos),
        'total_entradas': totais['total_entradas'],
        'total_bonus': totais['total_bonus'],
        'total_despesas': totais['total_despesas'],
        'produtos_estoque_baixo': sum(1 for p in produtos if estoque_baixo(p)),
        'eventos_hoje': len(eventos_hoje(eventos, hoje)),
        'eventos_proximos': len(eventos_proximos(eventos, hoje)),
        'total_fiado_pendente': sum(to_float(f.get('valor_pendente')) for f in fiados),
        'pedidos_por_status': {s: len(rows) for s, rows in pedidos_por_status(pedidos).items()},
    }
