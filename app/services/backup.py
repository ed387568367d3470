import logging
import os
from datetime import datetime

from app.errors import NotFoundError, ValidationError
from app.services import calculos
from app.storage import SHEETS
from app.storage.workbook_store import read_workbook, write_workbook
from app.utils import today_iso

logger = logging.getLogger(__name__)

# eventos is optional so exports from before the calendar existed still import
IMPORT_REQUIRED = ['clientes', 'produtos', 'pedidos', 'itens_pedido', 'fiados', 'pagamentos_fiado',
                   'despesas_entradas', 'comodatos']

def exportar_dados(store):
    return {sheet: store.read_sheet(sheet) for sheet in SHEETS}

def nome_arquivo_exportacao():
    return f"dados_comerciais_{today_iso()}.json"

def importar_dados(store, data):
    if not isinstance(data, dict) or not all(isinstance(data.get(s), list) for s in IMPORT_REQUIRED):
        raise ValidationError('Arquivo com formato inválido!')
    if 'eventos' in data and not isinstance(data['eventos'], list):
        raise ValidationError('Arquivo com formato inválido!')

    imported = {}
    for sheet in SHEETS:
        if sheet in data:
            store.write_sheet(sheet, data[sheet])
            imported[sheet] = len(data[sheet])
    logger.info("Dados importados: %s", imported)
    return imported

def limpar_dados(store):
    for sheet in SHEETS:
        store.write_sheet(sheet, [])
    logger.warning("Todos os dados comerciais foram apagados")

def criar_backup(store, backup_dir):
    os.makedirs(backup_dir, exist_ok=True)
    timestamp = datetime.now().strftime('%Y-%m-%dT%H-%M-%S')
    path = os.path.join(backup_dir, f"backup-{timestamp}.xlsx")
    write_workbook(path, exportar_dados(store))
    logger.info("Backup criado: %s", path)
    return path

def listar_backups(backup_dir):
    if not os.path.isdir(backup_dir):
        return []
    backups = []
    for name in sorted(os.listdir(backup_dir), reverse=True):
        if name.startswith('backup-') and name.endswith('.xlsx'):
            path = os.path.join(backup_dir, name)
            backups.append({'arquivo': name, 'tamanho': os.path.getsize(path)})
    return backups

def restaurar_backup(store, backup_dir, arquivo):
    """Replace the business sheets with the contents of a workbook backup."""
    nome = os.path.basename(arquivo)
    path = os.path.join(backup_dir, nome)
    if nome != arquivo or not nome.startswith('backup-') or not nome.endswith('.xlsx'):
        raise ValidationError(f"Arquivo de backup inválido: {arquivo}")
    if not os.path.isfile(path):
        raise NotFoundError('Backup', nome)
    return importar_dados(store, read_workbook(path, SHEETS))

def verificar(store):
    return {'valid': store.verify(), 'backend': store.backend, 'path': store.location}

def apply_seed(store):
    hoje = today_iso()
    store.write_sheet('clientes', [{
        'id': 1,
        'nome': 'Empresa Exemplo',
        'telefone': '(11) 99999-9999',
        'cpf_cnpj': '00.000.000/0001-00',
        'email': 'exemplo@email.com',
        'endereco': 'Rua Exemplo, 123',
        'cidade': 'São Paulo',
        'estado': 'SP',
        'nome_fantasia': 'Exemplo Ltda',
        'observacao': 'Cliente exemplo do sistema',
        'data_cadastro': hoje
    }])
    produto = calculos.normalizar_produto({
        'id': 1,
        'nome': 'Produto Demo',
        'custo_producao': 10.00,
        'preco_sugerido': 25.00,
        'estoque_atual': 10,
        'estoque_minimo': 2,
    })
    produto.update({'total_vendido': 0, 'total_faturado': 0})
    store.write_sheet('produtos', [produto])
    # Valor zero para não afetar o saldo
    store.write_sheet('despesas_entradas', [{
        'id': 1,
        'tipo': 'Bônus',
        'categoria': 'Sistema',
        'descricao': 'Seed inicial do sistema',
        'valor': 0,
        'data': hoje
    }])
    logger.info("Seed aplicado com sucesso")

def apply_seed_if_empty(store):
    if any(store.read_sheet(s) for s in ('clientes', 'produtos', 'despesas_entradas')):
        return False
    apply_seed(store)
    return True
