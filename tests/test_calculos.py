from datetime import date

import pytest

from app.services import calculos
from app.utils import format_currency, to_float, to_int


def test_to_float_coerces_form_values():
    assert to_float(None) == 0.0
    assert to_float('') == 0.0
    assert to_float('abc') == 0.0
    assert to_float('12,5') == 12.5
    assert to_float(float('nan')) == 0.0
    assert to_int('3.9') == 3


def test_format_currency():
    assert format_currency(1234.56) == 'R$ 1.234,56'
    assert format_currency(-5) == '-R$ 5,00'
    assert format_currency(None) == 'R$ 0,00'


def test_margem_produto():
    assert calculos.margem_produto(10, 25) == (15.0, 150.0)
    # No cost means no percentage
    assert calculos.margem_produto(0, 25) == (25.0, 0.0)


def test_estoque_baixo_is_strict():
    assert calculos.estoque_baixo({'estoque_atual': 1, 'estoque_minimo': 2})
    assert not calculos.estoque_baixo({'estoque_atual': 2, 'estoque_minimo': 2})


def test_item_pedido_and_stock_floor():
    produto = {'id': 7, 'custo_producao': 10, 'estoque_atual': 1, 'total_vendido': 4, 'total_faturado': 100}
    item, valor = calculos.calcular_item_pedido(produto, 3, 25)
    assert item == {'produto_id': 7, 'quantidade': 3, 'preco_unitario': 25.0,
                    'custo_unitario': 10.0, 'lucro_item': 45.0}
    assert valor == 75.0

    baixado = calculos.baixar_estoque(produto, 3, valor)
    assert baixado['estoque_atual'] == 0
    assert baixado['total_vendido'] == 7
    assert baixado['total_faturado'] == 175.0


def test_fiado_pendente_never_negative():
    fiado = calculos.normalizar_fiado({'valor_total': 100, 'valor_pago': 150})
    assert fiado['valor_pendente'] == 0.0

    assert calculos.aplicar_pagamento({'valor_total': 100, 'valor_pago': 30}, 20) == \
        {'valor_pago': 50.0, 'valor_pendente': 50.0}
    # Reverting more than was paid floors at zero
    assert calculos.aplicar_pagamento({'valor_total': 100, 'valor_pago': 30}, -50)['valor_pago'] == 0.0


def test_situacao_fiado():
    hoje = date(2024, 5, 10)
    assert calculos.situacao_fiado({'valor_pendente': 0}, hoje) == 'Quitado'
    assert calculos.situacao_fiado({'valor_pendente': 5, 'data_vencimento': '2024-05-09'}, hoje) == 'Vencido'
    assert calculos.situacao_fiado({'valor_pendente': 5, 'data_vencimento': '2024-05-10'}, hoje) == 'Em aberto'
    assert calculos.situacao_fiado({'valor_pendente': 5}, hoje) == 'Em aberto'


@pytest.mark.parametrize('vendida,status', [
    (10, 'Totalmente Vendido'),
    (4, 'Parcialmente Vendido'),
    (0, 'Emprestado'),
])
def test_comodato_status(vendida, status):
    comodato = calculos.normalizar_comodato({
        'quantidade': 10, 'quantidade_vendida': vendida, 'quantidade_paga': 1, 'valor_unitario': 2.5
    })
    assert comodato['valor_total'] == 25.0
    assert comodato['quantidade_pendente'] == max(0, 10 - vendida - 1)
    assert calculos.status_comodato(comodato) == status


def test_detalhar_comodato():
    comodato = calculos.normalizar_comodato({
        'quantidade': 10, 'quantidade_vendida': 4, 'quantidade_paga': 2, 'valor_unitario': 3
    })
    detalhe = calculos.detalhar_comodato(comodato)
    assert detalhe['valor_vendido'] == 12.0
    assert detalhe['valor_pendente'] == 12.0


def test_saldo():
    lancamentos = [
        {'tipo': 'Entradas', 'valor': 200},
        {'tipo': 'Bônus', 'valor': 50},
        {'tipo': 'Despesas', 'valor': 80},
        {'tipo': 'Outro', 'valor': 999},
    ]
    pedidos = [{'valor_lucro': 30}, {'valor_lucro': 15.5}]
    assert calculos.calcular_saldo(pedidos, lancamentos) == 200 + 50 - 80 + 45.5


def test_eventos_hoje_e_proximos():
    hoje = date(2024, 5, 10)
    eventos = [
        {'id': 1, 'data_evento': '2024-05-10', 'status': 'Pendente'},
        {'id': 2, 'data_evento': '2024-05-10', 'status': 'Concluído'},
        {'id': 3, 'data_evento': '2024-05-11', 'status': 'Pendente'},
        {'id': 4, 'data_evento': '2024-05-17', 'status': 'Pendente'},
        {'id': 5, 'data_evento': '2024-05-18', 'status': 'Pendente'},
        {'id': 6, 'data_evento': '2024-05-09', 'status': 'Pendente'},
    ]
    assert [e['id'] for e in calculos.eventos_hoje(eventos, hoje)] == [1]
    assert [e['id'] for e in calculos.eventos_proximos(eventos, hoje)] == [3, 4]


def test_dashboard_counts():
    hoje = date(2024, 5, 10)
    resumo = calculos.dashboard(
        pedidos=[{'valor_lucro': 10, 'status': 'pendente'}, {'valor_lucro': 5, 'status': 'entregue'}],
        lancamentos=[{'tipo': 'Entradas', 'valor': 100}, {'tipo': 'Despesas', 'valor': 40}],
        produtos=[{'estoque_atual': 0, 'estoque_minimo': 1}, {'estoque_atual': 5, 'estoque_minimo': 1}],
        eventos=[{'data_evento': '2024-05-10', 'status': 'Pendente'}],
        fiados=[{'valor_pendente': 12.5}],
        hoje=hoje,
    )
    assert resumo['saldo_total'] == 75.0
    assert resumo['lucro_total'] == 15.0
    assert resumo['produtos_estoque_baixo'] == 1
    assert resumo['eventos_hoje'] == 1
    assert resumo['eventos_proximos'] == 0
    assert resumo['total_fiado_pendente'] == 12.5
    assert resumo['pedidos_por_status'] == {'pendente': 1, 'producao': 0, 'pronto': 0, 'entregue': 1}
